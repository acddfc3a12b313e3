from supabase import Client
from app.config.plans import FREE_PLAN, PLANS, SUBSCRIPTION_PERIOD_DAYS
from app.core.timeutils import utcnow
from app.modules.admin.schemas import AdminUserResponse, UserStats
from app.modules.notifications.schemas import (
    NotificationCreate, NotificationResponse, PromotionCreate, PromotionUpdate, PromotionResponse
)
from typing import List, Optional
from datetime import timedelta
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Notifications

    def create_notification(self, data: NotificationCreate) -> NotificationResponse:
        if not data.title or not data.message:
            raise HTTPException(status_code=400, detail="Title and message are required")
        try:
            result = self.supabase.table("notifications").insert({
                "title": data.title,
                "message": data.message,
                "type": data.type or "info",
                "target_users": data.target_users or "all",
                "is_active": True,
            }).execute()
        except Exception as e:
            logger.error(f"Error creating notification: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to create notification")
        notification = NotificationResponse(**result.data[0])
        logger.info(f"Notification created: {notification.id}")
        return notification

    def list_notifications(self) -> List[NotificationResponse]:
        try:
            result = self.supabase.table("notifications")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [NotificationResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching notifications: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to fetch notifications")

    def toggle_notification(self, notification_id: str, is_active: bool) -> bool:
        try:
            result = self.supabase.table("notifications")\
                .update({"is_active": not is_active, "updated_at": utcnow().isoformat()})\
                .eq("id", notification_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error toggling notification: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to toggle notification")
        if not result.data:
            raise HTTPException(status_code=404, detail="Notification not found")
        logger.info(f"Notification toggled: {notification_id}")
        return True

    def delete_notification(self, notification_id: str) -> bool:
        try:
            self.supabase.table("notifications").delete().eq("id", notification_id).execute()
        except Exception as e:
            logger.error(f"Error deleting notification: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to delete notification")
        logger.info(f"Notification deleted: {notification_id}")
        return True

    # Users

    def list_users(self) -> List[AdminUserResponse]:
        """All profiles, newest first, with their role"""
        try:
            profiles = self.supabase.table("profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profiles: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to fetch users")

        roles = {}
        try:
            roles_result = self.supabase.table("user_roles").select("user_id, role").execute()
            for row in roles_result.data or []:
                if row["role"] == "admin" or row["user_id"] not in roles:
                    roles[row["user_id"]] = row["role"]
        except Exception as e:
            logger.error(f"Error fetching roles: {str(e)}")

        return [
            AdminUserResponse(**profile, role=roles.get(profile["user_id"], "user"))
            for profile in profiles.data or []
        ]

    def user_stats(self) -> UserStats:
        try:
            result = self.supabase.table("profiles")\
                .select("subscription_plan, words_used, words_limit")\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching user stats: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to fetch user stats")
        profiles = result.data or []
        counts = {plan: 0 for plan in PLANS}
        for profile in profiles:
            plan = profile.get("subscription_plan") or FREE_PLAN
            counts[plan] = counts.get(plan, 0) + 1
        return UserStats(
            total_users=len(profiles),
            free_users=counts["free"],
            basic_users=counts["basic"],
            pro_users=counts["pro"],
            enterprise_users=counts["enterprise"],
            premium_users=counts["basic"] + counts["pro"] + counts["enterprise"],
            total_words_used=sum(p.get("words_used") or 0 for p in profiles),
        )

    def update_user_plan(self, target_user_id: str, plan: str, words_limit: Optional[int] = None) -> bool:
        """Set a plan directly; paid plans get a fresh 30 day period"""
        if plan not in PLANS:
            raise HTTPException(status_code=400, detail=f"Unknown plan ID: {plan}")
        now = utcnow()
        paid = plan != FREE_PLAN
        try:
            result = self.supabase.table("profiles")\
                .update({
                    "subscription_plan": plan,
                    "words_limit": words_limit if words_limit is not None else PLANS[plan]["words_limit"],
                    "subscription_start_date": now.isoformat() if paid else None,
                    "subscription_end_date": (now + timedelta(days=SUBSCRIPTION_PERIOD_DAYS)).isoformat() if paid else None,
                    "updated_at": now.isoformat(),
                })\
                .eq("user_id", target_user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating user plan: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to update user plan")
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"User plan updated: {target_user_id} -> {plan}")
        return True

    def reset_user_words(self, target_user_id: str) -> bool:
        try:
            result = self.supabase.table("profiles")\
                .update({"words_used": 0, "updated_at": utcnow().isoformat()})\
                .eq("user_id", target_user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error resetting user words: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to reset user words")
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        logger.info(f"User words reset: {target_user_id}")
        return True

    def set_user_role(self, target_user_id: str, make_admin: bool) -> bool:
        try:
            if make_admin:
                self.supabase.table("user_roles")\
                    .upsert({"user_id": target_user_id, "role": "admin"}, on_conflict="user_id,role")\
                    .execute()
            else:
                self.supabase.table("user_roles")\
                    .delete()\
                    .eq("user_id", target_user_id)\
                    .eq("role", "admin")\
                    .execute()
        except Exception as e:
            logger.error(f"Error updating user role: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to update user role")
        logger.info(f"User role updated: {target_user_id} -> {'admin' if make_admin else 'user'}")
        return True

    # Promotions

    def list_promotions(self) -> List[PromotionResponse]:
        try:
            result = self.supabase.table("promotions")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [PromotionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_promotion(self, data: PromotionCreate) -> PromotionResponse:
        if not data.title.strip() or not data.message.strip():
            raise HTTPException(status_code=400, detail="Title and message are required")
        insert_data = data.model_dump(mode="json")
        insert_data["is_active"] = True
        try:
            result = self.supabase.table("promotions").insert(insert_data).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        promotion = PromotionResponse(**result.data[0])
        logger.info(f"Promotion created: {promotion.id}")
        return promotion

    def update_promotion(self, promotion_id: str, data: PromotionUpdate) -> PromotionResponse:
        update_data = data.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="Nothing to update")
        try:
            result = self.supabase.table("promotions")\
                .update(update_data)\
                .eq("id", promotion_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Promotion not found")
        return PromotionResponse(**result.data[0])

    def toggle_promotion(self, promotion_id: str) -> PromotionResponse:
        current = self.supabase.table("promotions").select("*").eq("id", promotion_id).limit(1).execute()
        if not current.data:
            raise HTTPException(status_code=404, detail="Promotion not found")
        try:
            result = self.supabase.table("promotions")\
                .update({"is_active": not current.data[0].get("is_active")})\
                .eq("id", promotion_id)\
                .execute()
            return PromotionResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_promotion(self, promotion_id: str) -> bool:
        try:
            self.supabase.table("promotions").delete().eq("id", promotion_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
