import httpx
from fastapi import HTTPException
from app.config import settings
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class EmailSender:
    """Thin client over the Resend REST API."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.base_url = (base_url or settings.resend_base_url).rstrip("/")
        if not self.api_key:
            raise ValueError("Resend API key must be configured")

    def send(
        self,
        to: List[str],
        subject: str,
        html: str,
        sender: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Send one email and return Resend's response body ({"id": ...})."""
        payload: Dict[str, Any] = {
            "from": sender or settings.email_from,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if reply_to:
            payload["reply_to"] = reply_to
        try:
            response = httpx.post(
                f"{self.base_url}/emails",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=30.0,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {str(e)}")
            raise


def get_email_sender() -> EmailSender:
    try:
        return EmailSender()
    except ValueError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Email service not configured")
