import json
from supabase import Client
from app.config import settings
from app.config.plans import PLANS
from app.modules.payments.signatures import verify_standard_webhook, verify_paddle_signature
from app.modules.payments.subscription import SubscriptionService
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DODO_ACTIVATION_EVENTS = ("payment.succeeded", "subscription.created", "subscription.active")
DODO_CANCELLATION_EVENTS = ("subscription.cancelled", "subscription.canceled", "refund.succeeded")
PADDLE_ACTIVATION_EVENTS = ("subscription.created", "subscription.activated", "transaction.completed")
PADDLE_CANCELLATION_EVENTS = ("subscription.canceled",)


class WebhookError(Exception):
    """Rejected webhook; rendered as a JSON error body with status_code"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _parse(payload: str) -> Dict[str, Any]:
    try:
        event = json.loads(payload)
    except ValueError:
        raise WebhookError(400, "Invalid JSON payload")
    if not isinstance(event, dict):
        raise WebhookError(400, "Invalid JSON payload")
    return event


def dodo_amount(event_type: str, data: Dict[str, Any]) -> float:
    if event_type == "payment.succeeded":
        return data.get("total_amount") or data.get("amount") or 0
    return data.get("recurring_pre_tax_amount") or data.get("amount") or 0


class WebhookService:
    def __init__(self, supabase: Client):
        self.subscriptions = SubscriptionService(supabase)

    def _activate(self, user_id: Optional[str], plan_id: Optional[str]) -> None:
        if not user_id or not plan_id:
            logger.error("Missing user_id or plan_id in webhook metadata")
            raise WebhookError(400, "Missing required metadata")
        if plan_id not in PLANS:
            raise WebhookError(500, f"Unknown plan ID: {plan_id}")
        self.subscriptions.activate_plan(user_id, plan_id)

    def handle_dodo(
        self,
        payload: str,
        webhook_id: str,
        webhook_timestamp: str,
        webhook_signature: str,
        secret: Optional[str] = None
    ) -> Dict[str, Any]:
        secret = secret if secret is not None else settings.dodo_payments_webhook_key
        if secret and not verify_standard_webhook(payload, webhook_id, webhook_timestamp, webhook_signature, secret):
            logger.warning(f"Invalid Dodo webhook signature for {webhook_id}")
            raise WebhookError(401, "Invalid webhook signature")

        event = _parse(payload)
        event_type = event.get("type")
        data = event.get("data") or {}
        metadata = data.get("metadata") or {}
        logger.info(f"Processing Dodo event {event_type} ({webhook_id})")

        if event_type in DODO_ACTIVATION_EVENTS:
            amount = dodo_amount(event_type, data)
            if amount <= 0:
                logger.warning(f"Rejecting zero amount {event_type}; subscription not activated")
                return {"received": True, "skipped": True, "reason": "Zero amount payment"}
            self._activate(metadata.get("user_id"), metadata.get("plan_id"))
        elif event_type in DODO_CANCELLATION_EVENTS:
            user_id = metadata.get("user_id")
            if user_id:
                self.subscriptions.downgrade_to_free(user_id, reason=event_type)
        return {"received": True}

    def handle_paddle(self, payload: str, signature: str, secret: Optional[str] = None) -> Dict[str, Any]:
        secret = secret if secret is not None else settings.paddle_webhook_secret
        if secret and not verify_paddle_signature(payload, signature, secret):
            logger.warning("Invalid Paddle webhook signature")
            raise WebhookError(401, "Invalid webhook signature")

        event = _parse(payload)
        event_type = event.get("event_type")
        data = event.get("data") or {}
        custom_data = data.get("custom_data") or {}
        logger.info(f"Processing Paddle event {event_type}")

        if event_type in PADDLE_ACTIVATION_EVENTS:
            self._activate(custom_data.get("user_id"), custom_data.get("plan_id"))
        elif event_type in PADDLE_CANCELLATION_EVENTS:
            user_id = custom_data.get("user_id")
            if user_id:
                self.subscriptions.downgrade_to_free(user_id, reason=event_type)
        return {"success": True}
