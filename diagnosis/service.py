# diagnosis/service.py
"""
Analysis request handling.

Validates the request, asks the vision model for a report, substitutes
the fallback report when the reply cannot be parsed, and records the
result in the history table. Recording is best-effort and never changes
the response.

There is no retry here; retrying is up to the caller.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from persistence.diagnoses import save_diagnosis

from .analyzer import extract_report, request_completion
from .config import IMAGE_DATA_URL_PREFIX, PLACEHOLDER_IMAGE_URL
from .errors import DiagnosisValidationError
from .models import DiagnosisReport
from .prompt import FALLBACK_REPORT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosisOutcome:
    """Result of one analysis request."""

    public_url: str
    report: DiagnosisReport
    timestamp: str
    is_fallback: bool
    record_id: Optional[str] = None

    def to_response(self) -> dict:
        return {
            "data": {
                "publicUrl": self.public_url,
                "diagnosis": self.report.to_dict(),
                "timestamp": self.timestamp,
            }
        }


def validate_request(image_data: Optional[str], file_name: Optional[str]) -> None:
    """
    Raises:
        DiagnosisValidationError: If image or filename is missing, or the
            image is not an image data URL
    """
    if not image_data or not file_name:
        raise DiagnosisValidationError("Image data and filename are required")

    if not image_data.startswith(IMAGE_DATA_URL_PREFIX):
        raise DiagnosisValidationError(
            f"Invalid image data format. Must start with {IMAGE_DATA_URL_PREFIX}"
        )


def placeholder_image_url(timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return PLACEHOLDER_IMAGE_URL.format(timestamp=timestamp_ms)


def record_history(
    public_url: str,
    report: DiagnosisReport,
    user_id: Optional[str],
    symptoms: Optional[str],
    is_fallback: bool,
) -> Optional[str]:
    """Insert a history row. Failures are logged and swallowed."""
    try:
        return save_diagnosis(
            image_url=public_url,
            result=report.to_dict(),
            user_id=user_id,
            symptoms=symptoms,
            is_fallback=is_fallback,
        )
    except Exception:
        logger.exception("Database save error")
        return None


async def diagnose_pet(
    image_data: Optional[str],
    file_name: Optional[str],
    symptoms: Optional[str] = None,
    user_id: Optional[str] = None,
) -> DiagnosisOutcome:
    """
    Run one analysis request end to end.

    Args:
        image_data: Image as a data URL (data:image/...;base64,...)
        file_name: Original file name
        symptoms: Optional free-text symptoms from the owner
        user_id: Optional user ID the history row is recorded under

    Returns:
        DiagnosisOutcome with the real or fallback report

    Raises:
        DiagnosisError: On validation, configuration or upstream failures
    """
    validate_request(image_data, file_name)

    public_url = placeholder_image_url()

    content = await request_completion(image_data, symptoms)

    report = extract_report(content)
    is_fallback = report is None
    if is_fallback:
        logger.warning(f"Using fallback report for {file_name}")
        report = FALLBACK_REPORT

    record_id = record_history(public_url, report, user_id, symptoms, is_fallback)

    logger.info(
        f"Diagnosis complete: score={report.health_score} "
        f"risk={report.risk_level.value} fallback={is_fallback}"
    )

    return DiagnosisOutcome(
        public_url=public_url,
        report=report,
        timestamp=datetime.now(timezone.utc).isoformat(),
        is_fallback=is_fallback,
        record_id=record_id,
    )
