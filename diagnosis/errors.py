# diagnosis/errors.py
"""
Diagnosis failures.

Each error carries a ``kind`` from the client error taxonomy so the HTTP
layer can return it alongside the message.
"""
from __future__ import annotations

from typing import Optional


class DiagnosisError(Exception):
    """Base diagnosis error."""

    kind = "unknown"


class DiagnosisValidationError(DiagnosisError):
    """Request is missing fields or carries a malformed image."""

    kind = "validation"


class DiagnosisConfigurationError(DiagnosisError):
    """Required environment variables are missing."""

    kind = "server"


class UpstreamModelError(DiagnosisError):
    """Vision model endpoint answered with a non-success status."""

    kind = "server"

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Vision model error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class UpstreamTimeoutError(DiagnosisError):
    """Vision model did not answer in time."""

    kind = "timeout"


class UpstreamConnectionError(DiagnosisError):
    """Vision model endpoint could not be reached."""

    kind = "network"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
