"""
Subscription plan configuration.
Single source of truth for word limits and prices used by checkout,
webhooks, admin plan changes and subscription expiry.
"""
from typing import Dict, Any, List, Optional

FREE_PLAN = "free"
SUBSCRIPTION_PERIOD_DAYS = 30

# Used when a profile row has no words_limit yet
DEFAULT_WORDS_LIMIT = 5000

PLANS: Dict[str, Dict[str, Any]] = {
    "free": {
        "name": "Free",
        "words_limit": 500,
        "price": 0.0,
        "description": "Try every template with a small monthly quota",
    },
    "basic": {
        "name": "Basic",
        "words_limit": 50000,
        "price": 9.99,
        "description": "50,000 words per month",
    },
    "pro": {
        "name": "Pro",
        "words_limit": 100000,
        "price": 19.99,
        "description": "100,000 words per month",
    },
    "enterprise": {
        "name": "Enterprise",
        "words_limit": 200000,
        "price": 49.99,
        "description": "200,000 words per month",
    },
}

PAID_PLANS = [plan_id for plan_id in PLANS if plan_id != FREE_PLAN]


def get_plan(plan_id: Optional[str]) -> Dict[str, Any]:
    """Return plan config. Raises ValueError for unknown plan ids."""
    if not plan_id or plan_id not in PLANS:
        raise ValueError(f"Unknown plan ID: {plan_id}")
    return PLANS[plan_id]


def get_words_limit(plan_id: str) -> int:
    return get_plan(plan_id)["words_limit"]


def discounted_price(price: float, discount_percent: float) -> float:
    return round(price * (100 - discount_percent) / 100, 2)


def list_plans(discount_percent: float = 0) -> List[Dict[str, Any]]:
    """Plan catalogue for the pricing page, with prices after discount."""
    plans = []
    for plan_id, plan in PLANS.items():
        plans.append({
            "id": plan_id,
            "name": plan["name"],
            "words_limit": plan["words_limit"],
            "price": plan["price"],
            "discounted_price": discounted_price(plan["price"], discount_percent),
            "description": plan["description"],
        })
    return plans
