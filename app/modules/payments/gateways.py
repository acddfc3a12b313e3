import httpx
from fastapi import HTTPException
from app.config import settings
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

GATEWAY_TIMEOUT_SEC = 30.0


class DodoPaymentsClient:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.dodo_payments_api_key
        self.base_url = (base_url or settings.dodo_payments_base_url).rstrip("/")

    def product_id(self, plan_id: str) -> Optional[str]:
        return {
            "basic": settings.dodo_basic_product_id,
            "pro": settings.dodo_pro_product_id,
            "enterprise": settings.dodo_enterprise_product_id,
        }.get(plan_id)

    def create_checkout(self, plan_id: str, user_id: str, email: str, name: str, return_url: str) -> Dict[str, Any]:
        if not self.api_key:
            raise HTTPException(status_code=400, detail="Dodo Payments API key not configured")
        product_id = self.product_id(plan_id)
        if not product_id:
            raise HTTPException(status_code=400, detail=f"Invalid plan ID: {plan_id}")

        try:
            response = httpx.post(
                f"{self.base_url}/checkouts",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "product_cart": [{"product_id": product_id, "quantity": 1}],
                    "customer": {"email": email, "name": name},
                    "return_url": return_url,
                    "metadata": {"user_id": user_id, "plan_id": plan_id},
                },
                timeout=GATEWAY_TIMEOUT_SEC,
            )
        except httpx.HTTPError as e:
            logger.error(f"Dodo Payments request failed: {str(e)}")
            raise HTTPException(status_code=400, detail="Failed to create checkout session")

        if response.status_code >= 400:
            logger.error(f"Dodo Payments API error: {response.text}")
            raise HTTPException(status_code=400, detail=f"Failed to create checkout session: {response.text}")
        return response.json()


class FastSpringClient:
    def __init__(self, username: Optional[str] = None, password: Optional[str] = None, base_url: Optional[str] = None):
        self.username = username if username is not None else settings.fastspring_api_username
        self.password = password if password is not None else settings.fastspring_api_password
        self.base_url = (base_url or settings.fastspring_base_url).rstrip("/")

    def create_session(self, plan_id: str, user_id: str, email: str) -> Dict[str, Any]:
        """Sessions API call; the product path equals the plan id"""
        if not self.username or not self.password:
            raise HTTPException(status_code=400, detail="FastSpring API credentials not configured")
        try:
            response = httpx.post(
                f"{self.base_url}/sessions",
                auth=(self.username, self.password),
                json={
                    "items": [{"product": plan_id, "quantity": 1}],
                    "contact": {"email": email},
                    "tags": {"user_id": user_id, "plan_id": plan_id},
                },
                timeout=GATEWAY_TIMEOUT_SEC,
            )
        except httpx.HTTPError as e:
            logger.error(f"FastSpring request failed: {str(e)}")
            raise HTTPException(status_code=400, detail="Failed to create session")

        if response.status_code >= 400:
            logger.error(f"FastSpring API error: {response.text}")
            raise HTTPException(status_code=400, detail=f"FastSpring Error: {response.text}")
        return response.json()


def paddle_price_id(plan_id: str) -> Optional[str]:
    return {
        "basic": settings.paddle_basic_price_id,
        "pro": settings.paddle_pro_price_id,
        "enterprise": settings.paddle_enterprise_price_id,
    }.get(plan_id)


def get_dodo_client() -> DodoPaymentsClient:
    return DodoPaymentsClient()


def get_fastspring_client() -> FastSpringClient:
    return FastSpringClient()
