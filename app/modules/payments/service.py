from supabase import Client
from app.config import settings
from app.modules.payments.gateways import DodoPaymentsClient, FastSpringClient, paddle_price_id
from app.modules.payments.schemas import (
    DodoCheckoutResponse, PaddleCheckoutResponse, FastSpringSessionResponse
)
from app.modules.payments.subscription import require_paid_plan
from app.modules.profiles.service import ProfileService
from typing import Dict, Any, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class CheckoutService:
    """Creates hosted checkout sessions; plans are activated later by webhooks or verify"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _customer_email(self, user_data: Dict[str, Any]) -> str:
        email = user_data.get("email")
        if not email:
            raise HTTPException(status_code=400, detail="User email is required for checkout")
        return email

    def create_dodo_checkout(
        self,
        user_data: Dict[str, Any],
        plan_id: Optional[str],
        origin: str,
        client: DodoPaymentsClient
    ) -> DodoCheckoutResponse:
        require_paid_plan(plan_id)
        email = self._customer_email(user_data)
        profile = ProfileService(self.supabase).get_profile(user_data["id"])
        name = (profile.display_name if profile else None) or "Customer"
        logger.info(f"Creating Dodo Payments checkout for user {user_data['id']} plan {plan_id}")

        data = client.create_checkout(
            plan_id=plan_id,
            user_id=user_data["id"],
            email=email,
            name=name,
            return_url=f"{origin}/app?payment=success",
        )
        return DodoCheckoutResponse(checkout_url=data.get("checkout_url"), session_id=data.get("id"))

    def create_paddle_checkout(self, user_data: Dict[str, Any], plan_id: Optional[str]) -> PaddleCheckoutResponse:
        """Data Paddle.js needs to open its overlay checkout"""
        require_paid_plan(plan_id)
        if not settings.paddle_api_key:
            raise HTTPException(status_code=400, detail="Paddle API key not configured")
        price_id = paddle_price_id(plan_id)
        if not price_id:
            raise HTTPException(status_code=400, detail=f"Invalid plan ID: {plan_id}")
        return PaddleCheckoutResponse(
            client_token=settings.paddle_client_token,
            price_id=price_id,
            custom_data={"user_id": user_data["id"], "plan_id": plan_id},
            customer_email=self._customer_email(user_data),
        )

    def create_fastspring_session(
        self,
        user_data: Dict[str, Any],
        plan_id: Optional[str],
        client: FastSpringClient
    ) -> FastSpringSessionResponse:
        require_paid_plan(plan_id)
        email = self._customer_email(user_data)
        logger.info(f"Creating FastSpring session for user {user_data['id']} plan {plan_id}")
        data = client.create_session(plan_id=plan_id, user_id=user_data["id"], email=email)
        return FastSpringSessionResponse(session_id=data.get("id"), product_path=plan_id)
