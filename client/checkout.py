# client/checkout.py
"""
Client side of the subscription purchase.

start() asks the API for a hosted checkout URL for a plan; the caller
redirects the user there. complete() is called when the provider sends
the user back to the success URL and flips the local subscribed flag.
"""
from __future__ import annotations

import logging
from typing import Optional

from billing.products import get_plan

from .api import CheckoutRequestError, HealPetClient
from .entitlements import EntitlementState, EntitlementStore

logger = logging.getLogger(__name__)


class CheckoutFlow:
    def __init__(
        self,
        client: HealPetClient,
        entitlements: EntitlementStore,
        user_id: Optional[str] = None,
        customer_email: Optional[str] = None,
    ):
        self._client = client
        self._entitlements = entitlements
        self.user_id = user_id
        self.customer_email = customer_email
        self.checkout_id: Optional[str] = None

    async def start(self, plan_type: str, success_url: Optional[str] = None) -> str:
        """
        Create a checkout session for a plan.

        Returns:
            The hosted checkout URL

        Raises:
            CheckoutRequestError: Unknown plan or failed checkout call
        """
        plan = get_plan(plan_type)
        if plan is None:
            raise CheckoutRequestError(f"Unknown plan: {plan_type}")

        metadata = {"plan_type": plan.plan_type}
        if self.user_id:
            metadata["user_id"] = self.user_id

        result = await self._client.create_checkout(
            plan.product_id,
            success_url=success_url,
            customer_email=self.customer_email,
            metadata=metadata,
        )
        self.checkout_id = result.get("checkout_id")
        logger.info(f"Checkout started for {plan.plan_type} plan")
        return result["checkout_url"]

    def complete(self) -> EntitlementState:
        """Mark the user subscribed after returning from a successful checkout."""
        return self._entitlements.mark_subscribed(self.user_id)
