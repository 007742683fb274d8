# diagnosis/__init__.py
"""
Pet photo diagnosis.

Sends a pet photo to a hosted vision-language model and turns its reply
into a structured health report, falling back to a fixed report when the
reply cannot be parsed.
"""

from .errors import DiagnosisError, DiagnosisValidationError, UpstreamModelError
from .models import DiagnosisReport, Disease, Level, Medication, Recommendation
from .prompt import FALLBACK_REPORT
from .service import DiagnosisOutcome, diagnose_pet

__all__ = [
    "DiagnosisError",
    "DiagnosisValidationError",
    "UpstreamModelError",
    "DiagnosisReport",
    "Disease",
    "Level",
    "Medication",
    "Recommendation",
    "FALLBACK_REPORT",
    "DiagnosisOutcome",
    "diagnose_pet",
]
