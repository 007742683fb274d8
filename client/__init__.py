# client/__init__.py
"""
HealPet client library.

Provides:
- Image intake (validation and data URL encoding)
- The analysis session state machine with timeout and retry
- Error classification into user-facing messages
- Local free-trial and subscription tracking
- The checkout flow
"""

from .api import AnalysisRequestError, ApiRequestError, CheckoutRequestError, HealPetClient
from .checkout import CheckoutFlow
from .entitlements import EntitlementState, EntitlementStore, LocalStorage
from .errors import ErrorInfo, ErrorKind, classify_error
from .intake import EncodedImage, IntakeError, encode_image, load_image
from .session import (
    AnalysisSession,
    Analyzing,
    Complete,
    Idle,
    InvalidTransitionError,
    Preview,
    UpgradeRequiredError,
)

__all__ = [
    "AnalysisRequestError",
    "ApiRequestError",
    "CheckoutRequestError",
    "HealPetClient",
    "CheckoutFlow",
    "EntitlementState",
    "EntitlementStore",
    "LocalStorage",
    "ErrorInfo",
    "ErrorKind",
    "classify_error",
    "EncodedImage",
    "IntakeError",
    "encode_image",
    "load_image",
    "AnalysisSession",
    "Analyzing",
    "Complete",
    "Idle",
    "InvalidTransitionError",
    "Preview",
    "UpgradeRequiredError",
]
