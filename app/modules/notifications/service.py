from supabase import Client
from app.config.plans import FREE_PLAN, DEFAULT_WORDS_LIMIT
from app.core.timeutils import utcnow
from app.modules.notifications.schemas import NotificationResponse, PromotionResponse
from app.modules.profiles.schemas import ProfileResponse
from typing import List, Optional, Set
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

PLACEMENTS = ("dashboard", "landing")


def dynamic_notifications(profile: ProfileResponse) -> List[NotificationResponse]:
    """Notices derived from the profile: welcome for new users, usage warnings"""
    notices = []
    words_used = profile.words_used or 0
    words_limit = profile.words_limit if profile.words_limit is not None else DEFAULT_WORDS_LIMIT

    if words_used == 0:
        notices.append(NotificationResponse(
            id="welcome",
            type="info",
            title="Welcome to PeakDraft!",
            message="Start creating amazing content with our AI-powered templates.",
            action_label="Get Started",
            action_url="/app/templates",
            dynamic=True,
        ))

    if words_used:
        percentage = words_used / words_limit * 100 if words_limit > 0 else 100.0
        if percentage >= 90:
            notices.append(NotificationResponse(
                id="usage-critical",
                type="warning",
                title="Word Limit Almost Reached",
                message=f"You've used {round(percentage)}% of your monthly word limit. Consider upgrading your plan.",
                action_label="Upgrade Plan",
                action_url="/app/pricing",
                dynamic=True,
            ))
        elif percentage >= 75:
            notices.append(NotificationResponse(
                id="usage-warning",
                type="info",
                title="Word Usage Update",
                message=f"You've used {round(percentage)}% of your monthly word limit.",
                dynamic=True,
            ))
    return notices


def targets_plan(target_users: Optional[str], plan: str) -> bool:
    if not target_users or target_users == "all":
        return True
    if target_users == "premium":
        return plan != FREE_PLAN
    return target_users == plan


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _dismissed_ids(self, user_id: str) -> Set[str]:
        result = self.supabase.table("dismissed_notifications")\
            .select("notification_id")\
            .eq("user_id", user_id)\
            .execute()
        return {row["notification_id"] for row in result.data or []}

    def list_for_user(self, user_id: str, profile: ProfileResponse) -> List[NotificationResponse]:
        """Dynamic notices first, then active broadcasts newest first, minus dismissed ones"""
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .eq("is_active", True)\
                .order("created_at", desc=True)\
                .execute()
            dismissed = self._dismissed_ids(user_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        plan = profile.subscription_plan or FREE_PLAN
        broadcasts = [
            NotificationResponse(**row) for row in result.data or []
            if targets_plan(row.get("target_users"), plan)
        ]
        notices = dynamic_notifications(profile) + broadcasts
        return [n for n in notices if n.id not in dismissed]

    def dismiss(self, user_id: str, notification_id: str) -> bool:
        if notification_id in self._dismissed_ids(user_id):
            return True
        try:
            self.supabase.table("dismissed_notifications").insert({
                "user_id": user_id,
                "notification_id": notification_id,
            }).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class PromotionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_active(
        self,
        placement: str,
        user_id: Optional[str] = None,
        plan: Optional[str] = None
    ) -> Optional[PromotionResponse]:
        """Active promotion for a placement within its start/end window"""
        if placement not in PLACEMENTS:
            raise HTTPException(status_code=400, detail="Placement must be dashboard or landing")
        if placement == "dashboard" and (plan or FREE_PLAN) != FREE_PLAN:
            return None

        now = utcnow().isoformat()
        try:
            query = self.supabase.table("promotions")\
                .select("*")\
                .eq("is_active", True)\
                .eq(f"show_on_{placement}", True)\
                .or_(f"start_date.is.null,start_date.lte.{now}")\
                .or_(f"end_date.is.null,end_date.gte.{now}")\
                .order("created_at", desc=True)
            result = query.execute()
            promotions = result.data or []
            dismissed = set()
            if user_id and promotions:
                dismissed_result = self.supabase.table("dismissed_promotions")\
                    .select("promotion_id")\
                    .eq("user_id", user_id)\
                    .execute()
                dismissed = {row["promotion_id"] for row in dismissed_result.data or []}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        for row in promotions:
            if row["id"] not in dismissed:
                return PromotionResponse(**row)
        return None

    def dismiss(self, user_id: str, promotion_id: str) -> bool:
        try:
            existing = self.supabase.table("dismissed_promotions")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("promotion_id", promotion_id)\
                .limit(1)\
                .execute()
            if not existing.data:
                self.supabase.table("dismissed_promotions").insert({
                    "user_id": user_id,
                    "promotion_id": promotion_id,
                }).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
