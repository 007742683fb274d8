# client/intake.py
"""
Image intake.

Turns a user-selected file into a data URL ready for the analysis
endpoint. Nothing here touches the network.
"""
from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .errors import ErrorInfo, ErrorKind

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MiB

UNSUPPORTED_FORMAT = ErrorInfo(
    kind=ErrorKind.VALIDATION,
    message="Unsupported file format",
    suggestion="Please upload JPG, PNG or WEBP format images",
)
FILE_TOO_LARGE = ErrorInfo(
    kind=ErrorKind.UPLOAD,
    message="Image file too large",
    suggestion="Please upload an image smaller than 10MB",
)
READ_FAILED = ErrorInfo(
    kind=ErrorKind.UPLOAD,
    message="Image read failed",
    suggestion="Please try selecting a different image",
)


class IntakeError(Exception):
    """Selected file was rejected."""

    def __init__(self, info: ErrorInfo):
        super().__init__(info.message)
        self.info = info


@dataclass(frozen=True)
class EncodedImage:
    """An image held in memory as a data URL."""
    data_url: str
    file_name: str
    mime_type: str
    size: int


def check_image(mime_type: Optional[str], size: int) -> None:
    """
    Raises:
        IntakeError: validation for non-image types, upload for files over
            10 MiB. Type is checked before size.
    """
    if not mime_type or not mime_type.startswith("image/"):
        raise IntakeError(UNSUPPORTED_FORMAT)
    if size > MAX_IMAGE_SIZE:
        raise IntakeError(FILE_TOO_LARGE)


def encode_image(data: bytes, mime_type: str, file_name: str) -> EncodedImage:
    """Validate raw bytes and encode them as a data URL."""
    check_image(mime_type, len(data))
    payload = base64.b64encode(data).decode("ascii")
    return EncodedImage(
        data_url=f"data:{mime_type};base64,{payload}",
        file_name=file_name,
        mime_type=mime_type,
        size=len(data),
    )


def guess_mime_type(path: Union[str, Path]) -> Optional[str]:
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type


async def load_image(path: Union[str, Path], mime_type: Optional[str] = None) -> EncodedImage:
    """
    Read and encode an image file.

    The size check uses the file's stat so oversized files are rejected
    without being read.
    """
    path = Path(path)
    mime_type = mime_type or guess_mime_type(path)
    check_image(mime_type, 0)

    try:
        size = path.stat().st_size
    except OSError as e:
        logger.warning(f"Cannot stat {path}: {e}")
        raise IntakeError(READ_FAILED)

    check_image(mime_type, size)

    try:
        data = await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        raise IntakeError(READ_FAILED)

    return encode_image(data, mime_type, path.name)
