# diagnosis/config.py
"""
Configuration for the pet diagnosis feature.

Environment variables:
- GROQ_API_KEY: Required for diagnosis to work
- HEALPET_VISION_MODEL: Vision model to use (default: llama-4-scout on Groq)
- HEALPET_VISION_ENDPOINT: OpenAI-compatible chat completions URL
- HEALPET_VISION_TIMEOUT: Upstream request timeout in seconds (default: 55)
"""

import os

DEFAULT_VISION_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"
DEFAULT_VISION_ENDPOINT = "https://api.groq.com/openai/v1/chat/completions"

# Kept under the client's 60s abort so upstream timeouts surface as errors
DEFAULT_TIMEOUT_SECONDS = 55.0

# Low temperature keeps the JSON shape stable
TEMPERATURE = 0.2
MAX_TOKENS = 2000

# Accepted image payload prefix
IMAGE_DATA_URL_PREFIX = "data:image/"

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400x300?text=Pet+Photo+{timestamp}"


def get_model_api_key() -> str | None:
    """Get the vision model API key."""
    return os.environ.get("GROQ_API_KEY")


def is_model_configured() -> bool:
    """Check if the vision model API key is configured."""
    key = get_model_api_key()
    return key is not None and len(key) > 0


def get_vision_model() -> str:
    return os.environ.get("HEALPET_VISION_MODEL", DEFAULT_VISION_MODEL)


def get_vision_endpoint() -> str:
    return os.environ.get("HEALPET_VISION_ENDPOINT", DEFAULT_VISION_ENDPOINT)


def get_request_timeout() -> float:
    """Upstream timeout in seconds; invalid values fall back to the default."""
    raw = os.environ.get("HEALPET_VISION_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS
