# billing/service.py
"""
Checkout session creation.

Each call creates a new provider checkout session; there is no
idempotency check, so two calls for the same plan give two sessions.
"""

from __future__ import annotations

import logging
from typing import Optional

from billing.creem_client import CreemError, post_checkout
from persistence.checkouts import record_checkout

_logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_URL = "https://healpet.app/success"


class CheckoutError(Exception):
    """Checkout session creation failed."""
    pass


def build_checkout_payload(
    product_id: str,
    success_url: Optional[str] = None,
    customer_email: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> dict:
    """Request body for the provider's checkout endpoint."""
    payload = {
        "product_id": product_id,
        "success_url": success_url or DEFAULT_SUCCESS_URL,
        "metadata": metadata or {},
    }
    if customer_email:
        payload["customer"] = {"email": customer_email}
    return payload


async def create_checkout_session(
    product_id: Optional[str],
    success_url: Optional[str] = None,
    customer_email: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> dict:
    """
    Create a hosted checkout session.

    Args:
        product_id: Provider product ID of the plan
        success_url: URL to redirect to after payment
        customer_email: Prefills the checkout form
        metadata: Passed through to the provider

    Returns:
        Dict with checkout_url and checkout_id

    Raises:
        CheckoutError: If the product is missing, the key is missing from
            the vault, or the provider call fails
    """
    if not product_id:
        raise CheckoutError("product_id is required")

    payload = build_checkout_payload(product_id, success_url, customer_email, metadata)

    try:
        data = await post_checkout(payload)
    except CreemError as e:
        _logger.error(f"Checkout error: {e}")
        raise CheckoutError(str(e))

    checkout_id = data.get("id")
    checkout_url = data.get("checkout_url")

    _logger.info(
        f"Created checkout session for product {product_id}",
        extra={"checkout_id": checkout_id},
    )

    if checkout_id:
        _record_checkout(checkout_id, product_id, customer_email)

    return {
        "checkout_url": checkout_url,
        "checkout_id": checkout_id,
    }


def _record_checkout(checkout_id: str, product_id: str, customer_email: Optional[str]) -> None:
    # Audit row only; the session already exists at the provider
    try:
        record_checkout(checkout_id, product_id, customer_email)
    except Exception:
        _logger.exception(f"Failed to record checkout {checkout_id}")
