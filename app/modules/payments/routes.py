import hmac
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from app.config import settings
from app.config.plans import list_plans
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.payments.discounts import DiscountService
from app.modules.payments.gateways import DodoPaymentsClient, FastSpringClient, get_dodo_client, get_fastspring_client
from app.modules.payments.schemas import (
    PlanResponse, CheckoutRequest, DodoCheckoutResponse, PaddleCheckoutResponse,
    FastSpringSessionResponse, PaymentCaptureRequest, VerifyPaymentRequest, SubscriptionResult,
    DiscountValidateRequest, DiscountValidateResponse, ExpiryResult
)
from app.modules.payments.service import CheckoutService
from app.modules.payments.subscription import SubscriptionService
from app.modules.payments.webhooks import WebhookService, WebhookError
from app.core.dependencies import get_current_user, get_optional_user, get_request_origin, is_admin
from supabase import Client
from typing import List, Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


def get_checkout_service(supabase: Client = Depends(get_service_supabase)) -> CheckoutService:
    return CheckoutService(supabase)


def get_subscription_service(supabase: Client = Depends(get_service_supabase)) -> SubscriptionService:
    return SubscriptionService(supabase)


def get_webhook_service(supabase: Client = Depends(get_service_supabase)) -> WebhookService:
    return WebhookService(supabase)


def get_discount_service(supabase: Client = Depends(get_service_supabase)) -> DiscountService:
    return DiscountService(supabase)


@router.get("/plans", response_model=List[PlanResponse])
async def get_plans():
    """Plan catalogue for the pricing page"""
    return list_plans()


@router.post("/checkout/dodo", response_model=DodoCheckoutResponse)
async def create_dodo_checkout(
    checkout: CheckoutRequest,
    origin: str = Depends(get_request_origin),
    user_data: Dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
    client: DodoPaymentsClient = Depends(get_dodo_client)
):
    return service.create_dodo_checkout(user_data, checkout.plan_id, origin, client)


@router.post("/checkout/paddle", response_model=PaddleCheckoutResponse)
async def create_paddle_checkout(
    checkout: CheckoutRequest,
    user_data: Dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service)
):
    return service.create_paddle_checkout(user_data, checkout.plan_id)


@router.post("/checkout/fastspring", response_model=FastSpringSessionResponse)
async def create_fastspring_session(
    checkout: CheckoutRequest,
    user_data: Dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
    client: FastSpringClient = Depends(get_fastspring_client)
):
    return service.create_fastspring_session(user_data, checkout.plan_id, client)


@router.post("/handle-payment", response_model=SubscriptionResult)
async def handle_payment(
    payment: PaymentCaptureRequest,
    user_data: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Activate a plan after a client-side PayPal capture"""
    return service.capture_payment(user_data["id"], payment.plan_id, payment.payment_details, payment.provider)


@router.post("/verify", response_model=SubscriptionResult)
async def verify_payment(
    request: VerifyPaymentRequest,
    user_data: Dict = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
):
    return service.verify_payment(user_data["id"], request.plan_id)


@router.post("/discount-codes/validate", response_model=DiscountValidateResponse)
async def validate_discount_code(
    request: DiscountValidateRequest,
    user_data: Dict = Depends(get_current_user),
    service: DiscountService = Depends(get_discount_service)
):
    return service.redeem(user_data["id"], request.code)


@router.post("/webhooks/dodo")
async def dodo_webhook(
    request: Request,
    service: WebhookService = Depends(get_webhook_service)
):
    body = await request.body()
    try:
        payload = body.decode("utf-8")
        return service.handle_dodo(
            payload,
            request.headers.get("webhook-id", ""),
            request.headers.get("webhook-timestamp", ""),
            request.headers.get("webhook-signature", ""),
        )
    except UnicodeDecodeError:
        return JSONResponse(status_code=400, content={"error": "Invalid payload encoding"})
    except WebhookError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error(f"Dodo webhook processing error: {str(e)}")
        return JSONResponse(status_code=500, content={"error": str(e) or "Webhook processing failed"})


@router.post("/webhooks/paddle")
async def paddle_webhook(
    request: Request,
    service: WebhookService = Depends(get_webhook_service)
):
    body = await request.body()
    try:
        payload = body.decode("utf-8")
        return service.handle_paddle(payload, request.headers.get("paddle-signature", ""))
    except UnicodeDecodeError:
        return JSONResponse(status_code=400, content={"error": "Invalid payload encoding"})
    except WebhookError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error(f"Paddle webhook processing error: {str(e)}")
        return JSONResponse(status_code=500, content={"error": str(e) or "Webhook processing failed"})


@router.post("/expire-subscriptions", response_model=ExpiryResult)
async def expire_subscriptions(
    x_cron_secret: Optional[str] = Header(None),
    user_data: Optional[Dict] = Depends(get_optional_user),
    supabase: Client = Depends(get_service_supabase),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Downgrade expired subscriptions; callable by a scheduler (cron secret) or an admin"""
    cron_ok = bool(settings.cron_secret and x_cron_secret and hmac.compare_digest(x_cron_secret, settings.cron_secret))
    if not cron_ok and not (user_data and is_admin(user_data, supabase)):
        raise HTTPException(status_code=403, detail="Unauthorized: Admin access required")
    return service.expire_subscriptions()
