from supabase import Client
from app.config.plans import FREE_PLAN, PAID_PLANS, SUBSCRIPTION_PERIOD_DAYS, get_plan, get_words_limit
from app.core.timeutils import utcnow, parse_datetime
from app.modules.payments.schemas import SubscriptionResult, SubscriptionInfo, ExpiryResult, DowngradedUser
from typing import Optional
from datetime import timedelta
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

# A verify call for the same plan within this window is treated as a duplicate
DUPLICATE_WINDOW = timedelta(minutes=5)


def require_paid_plan(plan_id: Optional[str]) -> dict:
    """Plan config for a purchasable plan, 400 otherwise"""
    if not plan_id:
        raise HTTPException(status_code=400, detail="Plan ID is required")
    if plan_id not in PAID_PLANS:
        raise HTTPException(status_code=400, detail=f"Invalid plan ID: {plan_id}")
    return get_plan(plan_id)


class SubscriptionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def activate_plan(self, user_id: str, plan_id: str) -> SubscriptionResult:
        """Start a fresh 30 day period: new limit, usage reset to zero"""
        plan = get_plan(plan_id)
        start = utcnow()
        end = start + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)
        result = self.supabase.table("profiles")\
            .update({
                "subscription_plan": plan_id,
                "words_limit": plan["words_limit"],
                "words_used": 0,
                "subscription_start_date": start.isoformat(),
                "subscription_end_date": end.isoformat(),
                "updated_at": start.isoformat(),
            })\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        logger.info(f"Subscription activated for user {user_id}: {plan_id}")
        return SubscriptionResult(
            message="Subscription updated successfully",
            plan=plan_id,
            words_limit=plan["words_limit"],
            subscription=SubscriptionInfo(
                plan=plan_id,
                words_limit=plan["words_limit"],
                start_date=start,
                end_date=end,
            ),
        )

    def downgrade_to_free(self, user_id: str, reason: str = "cancellation") -> None:
        now = utcnow().isoformat()
        self.supabase.table("profiles")\
            .update({
                "subscription_plan": FREE_PLAN,
                "words_limit": get_words_limit(FREE_PLAN),
                "subscription_start_date": None,
                "subscription_end_date": None,
                "updated_at": now,
            })\
            .eq("user_id", user_id)\
            .execute()
        logger.info(f"User {user_id} downgraded to free plan ({reason})")

    def verify_payment(self, user_id: str, plan_id: Optional[str]) -> SubscriptionResult:
        """Activate after a client-side success redirect, unless it was just activated"""
        require_paid_plan(plan_id)
        result = self.supabase.table("profiles")\
            .select("subscription_plan, subscription_start_date")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        current = result.data[0]

        if current.get("subscription_plan") == plan_id:
            started = parse_datetime(current.get("subscription_start_date"))
            if started and started > utcnow() - DUPLICATE_WINDOW:
                logger.info(f"Subscription for user {user_id} already updated recently, skipping")
                return SubscriptionResult(message="Subscription already active", plan=plan_id)

        return self.activate_plan(user_id, plan_id)

    def capture_payment(self, user_id: str, plan_id: Optional[str], payment_details: Optional[dict], provider: str) -> SubscriptionResult:
        """Client-side captured payment (PayPal buttons)"""
        if not payment_details or not payment_details.get("id"):
            raise HTTPException(status_code=400, detail="Invalid payment details")
        require_paid_plan(plan_id)
        result = self.activate_plan(user_id, plan_id)
        logger.info(f"Payment processed: user={user_id} plan={plan_id} payment_id={payment_details['id']} provider={provider}")
        result.message = "Payment processed successfully"
        return result

    def expire_subscriptions(self) -> ExpiryResult:
        """Downgrade every paid profile whose subscription end date has passed"""
        now = utcnow().isoformat()
        result = self.supabase.table("profiles")\
            .select("*")\
            .not_.is_("subscription_end_date", "null")\
            .lt("subscription_end_date", now)\
            .neq("subscription_plan", FREE_PLAN)\
            .execute()
        expired = result.data or []
        logger.info(f"Found {len(expired)} expired subscriptions")
        if not expired:
            return ExpiryResult(message="No expired subscriptions found", processed=0)

        updated = self.supabase.table("profiles")\
            .update({
                "subscription_plan": FREE_PLAN,
                "subscription_start_date": None,
                "subscription_end_date": None,
                "words_limit": get_words_limit(FREE_PLAN),
                "updated_at": now,
            })\
            .in_("id", [p["id"] for p in expired])\
            .execute()
        updated_ids = {row["id"] for row in updated.data or []}

        downgraded = []
        for profile in expired:
            if profile["id"] not in updated_ids:
                continue
            logger.info(
                f"Downgraded user {profile['user_id']} from {profile['subscription_plan']} to free plan. "
                f"Expired on: {profile['subscription_end_date']}"
            )
            downgraded.append(DowngradedUser(
                user_id=profile["user_id"],
                previous_plan=profile.get("subscription_plan"),
                expired_date=profile.get("subscription_end_date"),
            ))
        return ExpiryResult(
            message=f"Successfully processed {len(downgraded)} expired subscriptions",
            processed=len(downgraded),
            downgraded_users=downgraded,
        )
