from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.notifications.hub import NotificationHub, get_notification_hub
from app.modules.notifications.realtime import TaskChangeNotifier, get_task_notifier
from app.modules.notifications.schemas import (
    FeedResponse, SubscriptionStatus, NotificationResponse, PromotionResponse
)
from app.modules.notifications.service import NotificationService, PromotionService
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_current_user, get_optional_user
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_supabase)) -> NotificationService:
    return NotificationService(supabase)


def get_promotion_service(supabase: Client = Depends(get_supabase)) -> PromotionService:
    return PromotionService(supabase)


@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
    supabase: Client = Depends(get_supabase)
):
    """Dynamic notices plus active broadcasts the user has not dismissed"""
    profile = ProfileService(supabase).ensure_profile(user_data)
    return service.list_for_user(user_data["id"], profile)


@router.post("/notifications/{notification_id}/dismiss", status_code=204)
async def dismiss_notification(
    notification_id: str,
    user_data: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.dismiss(user_data["id"], notification_id)
    return None


@router.get("/notifications/feed", response_model=FeedResponse)
async def read_feed(
    user_data: Dict = Depends(get_current_user),
    hub: NotificationHub = Depends(get_notification_hub)
):
    """Pending toasts (reminders, task changes); reading empties the feed"""
    return FeedResponse(toasts=hub.drain(user_data["id"]))


@router.post("/notifications/feed/subscribe", response_model=SubscriptionStatus)
async def subscribe_task_notifications(
    user_data: Dict = Depends(get_current_user),
    notifier: TaskChangeNotifier = Depends(get_task_notifier)
):
    notifier.subscribe(user_data["id"])
    return SubscriptionStatus(subscribed=True)


@router.delete("/notifications/feed/subscribe", response_model=SubscriptionStatus)
async def unsubscribe_task_notifications(
    user_data: Dict = Depends(get_current_user),
    notifier: TaskChangeNotifier = Depends(get_task_notifier)
):
    notifier.unsubscribe(user_data["id"])
    return SubscriptionStatus(subscribed=False)


@router.get("/promotions/active", response_model=Optional[PromotionResponse])
async def get_active_promotion(
    placement: str = Query("landing"),
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: PromotionService = Depends(get_promotion_service),
    supabase: Client = Depends(get_supabase)
):
    """Promotion to show on the landing page or dashboard, if any"""
    if user_data is None:
        if placement == "dashboard":
            return None
        return service.get_active(placement)
    profile = ProfileService(supabase).ensure_profile(user_data)
    return service.get_active(placement, user_id=user_data["id"], plan=profile.subscription_plan)


@router.post("/promotions/{promotion_id}/dismiss", status_code=204)
async def dismiss_promotion(
    promotion_id: str,
    user_data: Dict = Depends(get_current_user),
    service: PromotionService = Depends(get_promotion_service)
):
    service.dismiss(user_data["id"], promotion_id)
    return None
