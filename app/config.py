# app/config.py
"""
Centralized configuration management with startup validation.

Secrets (model key, admin password) are only recorded as presence flags;
their values are read where they are used.
"""
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "healpet"
SERVICE_VERSION = "0.1.0"

# Base64 photos up to 10 MiB grow by a third on the wire
DEFAULT_MAX_REQUEST_SIZE_BYTES = 16 * 1024 * 1024
MIN_REQUEST_SIZE_BYTES = 1024

# Sensitive substrings that should never appear in logs
SENSITIVE_SUBSTRINGS = ("key", "token", "secret", "password", "credential", "auth")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES
    db_path: str = "data/healpet.db"
    vision_model: str = ""

    # Presence only
    model_api_key_present: bool = False
    admin_password_present: bool = False

    warnings: list = field(default_factory=list)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def load_config(fail_fast: bool = False) -> AppConfig:
    """
    Load and validate application configuration from environment.

    Args:
        fail_fast: If True, raise ConfigurationError when the model API key
                   is missing. Otherwise only warn; the diagnosis endpoint
                   then fails per request.

    Raises:
        ConfigurationError: If fail_fast is True and required config is missing.
    """
    from diagnosis.config import get_vision_model, is_model_configured
    from persistence.db import get_db_path

    warnings = []

    environment = os.environ.get("RAILWAY_ENVIRONMENT", "development")

    max_request_size, size_warning = _parse_int_env(
        "MAX_REQUEST_SIZE_BYTES",
        DEFAULT_MAX_REQUEST_SIZE_BYTES,
        min_value=MIN_REQUEST_SIZE_BYTES,
    )
    if size_warning:
        warnings.append(size_warning)

    model_api_key_present = is_model_configured()
    if not model_api_key_present:
        if fail_fast:
            raise ConfigurationError("GROQ_API_KEY is not set")
        warnings.append("GROQ_API_KEY is not set; diagnosis requests will fail")

    admin_password_present = bool(os.environ.get("HEALPET_ADMIN_PASSWORD"))
    if not admin_password_present:
        warnings.append("HEALPET_ADMIN_PASSWORD is not set; admin endpoints are disabled")

    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        environment=environment,
        max_request_size_bytes=max_request_size,
        db_path=str(get_db_path()),
        vision_model=get_vision_model(),
        model_api_key_present=model_api_key_present,
        admin_password_present=admin_password_present,
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a safe configuration snapshot.

    Returns the snapshot string for testing purposes.
    Never logs actual secret values - only boolean presence flags.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"max_request_size_bytes={config.max_request_size_bytes} "
        f"db_path={config.db_path} "
        f"vision_model={config.vision_model} "
        f"model_api_key_present={config.model_api_key_present} "
        f"admin_password_present={config.admin_password_present}"
    )
    logger.info(snapshot)
    return snapshot


def validate_config_snapshot_safety(snapshot: str) -> bool:
    """
    Validate that a config snapshot doesn't contain sensitive values.

    Returns True if safe, False if potentially unsafe.
    """
    snapshot_lower = snapshot.lower()

    # "key_present=true" is fine, "key=sk-..." is not
    for sensitive in SENSITIVE_SUBSTRINGS:
        pattern = rf"{sensitive}=(?!true|false)"
        if re.search(pattern, snapshot_lower):
            return False

    return True
