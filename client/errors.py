# client/errors.py
"""
Client-visible error taxonomy.

Failures are mapped to an ErrorInfo either from a structured ``kind``
returned by the analysis endpoint or, failing that, by matching the
message against an ordered list of substring rules (first match wins).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UPLOAD = "upload"
    NETWORK = "network"
    SERVER = "server"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorInfo:
    """What the UI shows for a failure."""
    kind: ErrorKind
    message: str
    suggestion: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }


# Canonical message/suggestion per kind. UNKNOWN keeps the raw message.
_CANNED = {
    ErrorKind.NETWORK: (
        "Network connection failed",
        "Please check your network connection and try again",
    ),
    ErrorKind.TIMEOUT: (
        "Request timeout",
        "Server response is slow, please try again later",
    ),
    ErrorKind.SERVER: (
        "Server temporarily unavailable",
        "Server is under maintenance, please try again later",
    ),
    ErrorKind.UPLOAD: (
        "Image upload failed",
        "Please ensure image is under 10MB, JPG or PNG format",
    ),
    ErrorKind.VALIDATION: (
        "Data validation failed",
        "Please check if the uploaded image format is correct",
    ),
}

UNKNOWN_SUGGESTION = "Please try again. If the issue persists, contact customer service"

# Ordered; first match wins
CLASSIFICATION_RULES: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.NETWORK, ("fetch", "network", "Failed to fetch")),
    (ErrorKind.TIMEOUT, ("timeout", "Timeout")),
    (ErrorKind.SERVER, ("500", "502", "503", "server")),
    (ErrorKind.UPLOAD, ("upload", "storage", "size")),
    (ErrorKind.VALIDATION, ("invalid", "required")),
)

TIMEOUT_ERROR = ErrorInfo(
    kind=ErrorKind.TIMEOUT,
    message="Analysis request timeout",
    suggestion="Server processing time is long, please try again",
)


def error_for_kind(kind: ErrorKind, message: Optional[str] = None) -> ErrorInfo:
    """Canned ErrorInfo for a known kind."""
    if kind == ErrorKind.UNKNOWN:
        return ErrorInfo(kind, message or "Unknown error", UNKNOWN_SUGGESTION)
    canned_message, suggestion = _CANNED[kind]
    return ErrorInfo(kind, canned_message, suggestion)


def classify_message(message: Optional[str]) -> ErrorInfo:
    """Classify a free-text failure message."""
    message = message or "Unknown error"
    for kind, needles in CLASSIFICATION_RULES:
        if any(needle in message for needle in needles):
            return error_for_kind(kind)
    return error_for_kind(ErrorKind.UNKNOWN, message)


def classify_error(message: Optional[str], kind: Optional[str] = None) -> ErrorInfo:
    """
    Classify a failure, preferring a structured kind when the server sent one.

    Unrecognised kinds fall back to message matching.
    """
    if kind:
        try:
            structured = ErrorKind(kind)
        except ValueError:
            structured = None
        if structured is not None and structured != ErrorKind.UNKNOWN:
            return error_for_kind(structured)
    return classify_message(message)
