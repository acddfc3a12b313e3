from fastapi import APIRouter, Depends, status
from app.database.supabase_client import get_service_supabase
from app.modules.admin.schemas import (
    AdminCheckResponse, NotificationToggle, AdminUserResponse, UserStats,
    UpdateUserPlan, UpdateUserRole, SuccessResponse
)
from app.modules.admin.service import AdminService
from app.modules.notifications.schemas import (
    NotificationCreate, NotificationResponse, PromotionCreate, PromotionUpdate, PromotionResponse
)
from app.modules.payments.discounts import DiscountService
from app.modules.payments.schemas import DiscountCodeCreate, DiscountCodeResponse
from app.core.dependencies import get_current_user, is_admin, require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


def get_admin_discount_service(supabase: Client = Depends(get_service_supabase)) -> DiscountService:
    return DiscountService(supabase)


@router.get("/check", response_model=AdminCheckResponse)
async def check_admin(
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
):
    """Whether the caller may open the admin panel"""
    return AdminCheckResponse(is_admin=is_admin(user_data, supabase))


# Notifications

@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.list_notifications()


@router.post("/notifications", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    notification: NotificationCreate,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.create_notification(notification)


@router.post("/notifications/{notification_id}/toggle", response_model=SuccessResponse)
async def toggle_notification(
    notification_id: str,
    toggle: NotificationToggle,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.toggle_notification(notification_id, toggle.is_active)
    return SuccessResponse()


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: str,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.delete_notification(notification_id)


# Users

@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.list_users()


@router.get("/stats", response_model=UserStats)
async def user_stats(
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.user_stats()


@router.put("/users/{target_user_id}/plan", response_model=SuccessResponse)
async def update_user_plan(
    target_user_id: str,
    update: UpdateUserPlan,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.update_user_plan(target_user_id, update.plan, update.words_limit)
    return SuccessResponse()


@router.post("/users/{target_user_id}/reset-words", response_model=SuccessResponse)
async def reset_user_words(
    target_user_id: str,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.reset_user_words(target_user_id)
    return SuccessResponse()


@router.put("/users/{target_user_id}/role", response_model=SuccessResponse)
async def update_user_role(
    target_user_id: str,
    update: UpdateUserRole,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.set_user_role(target_user_id, update.make_admin)
    return SuccessResponse()


# Promotions

@router.get("/promotions", response_model=List[PromotionResponse])
async def list_promotions(
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.list_promotions()


@router.post("/promotions", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED)
async def create_promotion(
    promotion: PromotionCreate,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.create_promotion(promotion)


@router.put("/promotions/{promotion_id}", response_model=PromotionResponse)
async def update_promotion(
    promotion_id: str,
    promotion: PromotionUpdate,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.update_promotion(promotion_id, promotion)


@router.post("/promotions/{promotion_id}/toggle", response_model=PromotionResponse)
async def toggle_promotion(
    promotion_id: str,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.toggle_promotion(promotion_id)


@router.delete("/promotions/{promotion_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promotion(
    promotion_id: str,
    _: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    service.delete_promotion(promotion_id)


# Discount codes

@router.get("/discount-codes", response_model=List[DiscountCodeResponse])
async def list_discount_codes(
    _: Dict = Depends(require_admin),
    service: DiscountService = Depends(get_admin_discount_service)
):
    return service.list_codes()


@router.post("/discount-codes", response_model=DiscountCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_discount_code(
    code: DiscountCodeCreate,
    _: Dict = Depends(require_admin),
    service: DiscountService = Depends(get_admin_discount_service)
):
    return service.create_code(code)


@router.post("/discount-codes/{code_id}/toggle", response_model=DiscountCodeResponse)
async def toggle_discount_code(
    code_id: str,
    _: Dict = Depends(require_admin),
    service: DiscountService = Depends(get_admin_discount_service)
):
    return service.toggle_code(code_id)
