# client/api.py
"""
HTTP client for the HealPet API.

Used by the analysis session and the checkout flow. Every failure is
raised as a request error whose message the session classifies.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from diagnosis.models import DiagnosisReport

from .intake import EncodedImage

logger = logging.getLogger(__name__)

DIAGNOSIS_PATH = "/api/diagnosis"
CHECKOUT_PATH = "/api/checkout"
PLANS_PATH = "/api/plans"

DEFAULT_TIMEOUT_SECONDS = 60.0


class ApiRequestError(Exception):
    """Base client request error."""

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code


class AnalysisRequestError(ApiRequestError):
    """Analysis call failed or returned no report."""
    pass


class CheckoutRequestError(ApiRequestError):
    """Checkout call failed or returned no redirect URL."""
    pass


class HealPetClient:
    """
    Thin async client for the analysis and checkout endpoints.

    Args:
        base_url: API root, e.g. https://api.healpet.app
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def analyze(
        self,
        image: EncodedImage,
        symptoms: str = "",
        user_id: Optional[str] = None,
    ) -> DiagnosisReport:
        """
        Request a diagnosis for an encoded image.

        Raises:
            AnalysisRequestError: On network failure, non-2xx status, an
                error body or a response without a valid report
        """
        body = {
            "imageData": image.data_url,
            "fileName": image.file_name,
            "symptoms": symptoms,
            "userId": user_id,
        }

        try:
            async with self._client() as client:
                response = await client.post(DIAGNOSIS_PATH, json=body)
        except httpx.TimeoutException as e:
            raise AnalysisRequestError(f"Request timeout: {e}", kind="timeout")
        except httpx.TransportError as e:
            raise AnalysisRequestError(f"Failed to fetch: {e}")

        payload = _json_or_none(response)

        if response.status_code < 200 or response.status_code >= 300:
            message, kind = _error_details(payload)
            raise AnalysisRequestError(
                f"Analysis failed with status {response.status_code}: {message or response.text}",
                kind=kind,
                status_code=response.status_code,
            )

        if not isinstance(payload, dict):
            raise AnalysisRequestError("Invalid analysis result")

        diagnosis = (payload.get("data") or {}).get("diagnosis")
        if diagnosis:
            try:
                return DiagnosisReport.model_validate(diagnosis)
            except ValidationError:
                raise AnalysisRequestError("Invalid analysis result")

        if payload.get("error"):
            message, kind = _error_details(payload)
            raise AnalysisRequestError(message or "Analysis failed", kind=kind)

        raise AnalysisRequestError("Invalid analysis result")

    async def create_checkout(
        self,
        product_id: str,
        success_url: Optional[str] = None,
        customer_email: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> dict:
        """
        Create a checkout session.

        Returns:
            Dict with checkout_url and checkout_id

        Raises:
            CheckoutRequestError: If the call fails or no URL is returned
        """
        body = {
            "product_id": product_id,
            "success_url": success_url,
            "customer_email": customer_email,
            "metadata": metadata or {},
        }

        try:
            async with self._client() as client:
                response = await client.post(CHECKOUT_PATH, json=body)
        except httpx.HTTPError as e:
            raise CheckoutRequestError(f"Payment service error: {e}")

        payload = _json_or_none(response) or {}
        if not payload.get("success") or not payload.get("checkout_url"):
            raise CheckoutRequestError(
                payload.get("error") or "Failed to create checkout session",
                status_code=response.status_code,
            )

        return {
            "checkout_url": payload["checkout_url"],
            "checkout_id": payload.get("checkout_id"),
        }

    async def list_plans(self) -> list[dict]:
        async with self._client() as client:
            response = await client.get(PLANS_PATH)
        response.raise_for_status()
        return response.json()["plans"]


def _json_or_none(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return None


def _error_details(payload) -> tuple[Optional[str], Optional[str]]:
    """Pull (message, kind) out of an {error: {...}} body."""
    if not isinstance(payload, dict):
        return None, None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("message"), error.get("kind")
    if isinstance(error, str):
        return error, None
    return None, None
