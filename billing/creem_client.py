# billing/creem_client.py
"""
Creem checkout API access.

The API key is not read from the environment: it lives in the secrets
vault under CREEM_API_KEY and is fetched on every request.

Environment variables:
- CREEM_API_BASE: API base URL (default: https://api.creem.io)
- CREEM_TIMEOUT: Request timeout in seconds (default: 30)
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import httpx

from persistence.vault import get_secret

_logger = logging.getLogger(__name__)

CREEM_API_KEY_SECRET = "CREEM_API_KEY"
DEFAULT_API_BASE = "https://api.creem.io"
DEFAULT_TIMEOUT_SECONDS = 30.0
CHECKOUTS_PATH = "/v1/checkouts"


class CreemError(Exception):
    """Base Creem error."""
    pass


class CreemConfigurationError(CreemError):
    """API key not found in the vault."""
    pass


class CreemAPIError(CreemError):
    """Creem API returned a non-success status."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def get_api_base() -> str:
    return os.environ.get("CREEM_API_BASE", DEFAULT_API_BASE).rstrip("/")


def get_timeout() -> float:
    try:
        return float(os.environ.get("CREEM_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


def get_api_key() -> str:
    """
    Fetch the Creem API key from the vault.

    Raises:
        CreemConfigurationError: If the secret is absent
    """
    key = get_secret(CREEM_API_KEY_SECRET)
    if not key:
        raise CreemConfigurationError(f"{CREEM_API_KEY_SECRET} not found in vault")
    return key


async def post_checkout(payload: dict, api_key: Optional[str] = None) -> dict:
    """
    Create a checkout session.

    Args:
        payload: Request body for POST /v1/checkouts
        api_key: Override the vault lookup (tests)

    Returns:
        Parsed JSON response

    Raises:
        CreemConfigurationError: If no API key is available
        CreemAPIError: If the API returns a non-success status
        CreemError: If the API cannot be reached or its reply is not a JSON object
    """
    api_key = api_key or get_api_key()

    headers = {
        "x-api-key": api_key,
        "Content-Type": "application/json",
    }

    try:
        async with httpx.AsyncClient(timeout=get_timeout()) as client:
            response = await client.post(
                f"{get_api_base()}{CHECKOUTS_PATH}",
                headers=headers,
                json=payload,
            )
    except httpx.HTTPError as e:
        _logger.error(f"Creem request failed: {e}")
        raise CreemError(f"Creem request failed: {e}")

    if response.status_code < 200 or response.status_code >= 300:
        body = response.text
        raise CreemAPIError(
            f"Creem API error: {body}",
            status_code=response.status_code,
            body=body,
        )

    try:
        data = response.json()
    except ValueError as e:
        _logger.error(f"Creem returned a non-JSON body: {e}")
        raise CreemError("Creem API returned an invalid response")

    if not isinstance(data, dict):
        raise CreemError("Creem API returned an invalid response")
    return data
