# billing/__init__.py
"""
Billing module for Pro subscriptions.

Provides:
- Plan configuration for the pricing screen
- Creem checkout session creation (API key fetched from the vault)
"""

from billing.products import Plan, get_plan, list_plans
from billing.service import CheckoutError, create_checkout_session

__all__ = [
    "Plan",
    "get_plan",
    "list_plans",
    "CheckoutError",
    "create_checkout_session",
]
