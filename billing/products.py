# billing/products.py
"""
Subscription plan configuration.

Plans:
- Pro monthly
- Pro yearly

Product IDs can be overridden via environment variables so test and live
Creem stores can use different products.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_MONTHLY_PRODUCT_ID = "healpet_pro_monthly"
DEFAULT_YEARLY_PRODUCT_ID = "healpet_pro_yearly"


@dataclass(frozen=True)
class Plan:
    """Subscription plan shown on the pricing screen."""
    plan_type: str
    product_id: str
    name: str
    price: float
    period: str
    features: tuple = field(default_factory=tuple)
    savings: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "plan_type": self.plan_type,
            "product_id": self.product_id,
            "name": self.name,
            "price": self.price,
            "period": self.period,
            "features": list(self.features),
            "savings": self.savings,
        }


def get_monthly_plan() -> Plan:
    return Plan(
        plan_type="monthly",
        product_id=os.environ.get("CREEM_MONTHLY_PRODUCT_ID", DEFAULT_MONTHLY_PRODUCT_ID),
        name="Monthly",
        price=9.99,
        period="/month",
        features=(
            "Unlimited AI Diagnoses",
            "Priority Support",
            "Health History",
            "Medication Tracking",
        ),
    )


def get_yearly_plan() -> Plan:
    return Plan(
        plan_type="yearly",
        product_id=os.environ.get("CREEM_YEARLY_PRODUCT_ID", DEFAULT_YEARLY_PRODUCT_ID),
        name="Yearly",
        price=79.99,
        period="/year",
        features=(
            "Unlimited AI Diagnoses",
            "Priority Support",
            "Health History",
            "Medication Tracking",
            "Family Pet Profiles",
        ),
        savings="Save 33%",
    )


PLAN_FACTORIES = {
    "monthly": get_monthly_plan,
    "yearly": get_yearly_plan,
}


def get_plan(plan_type: str) -> Optional[Plan]:
    """Get plan configuration by type (monthly/yearly)."""
    factory = PLAN_FACTORIES.get(plan_type.lower())
    return factory() if factory else None


def list_plans() -> list[Plan]:
    return [factory() for factory in PLAN_FACTORIES.values()]
