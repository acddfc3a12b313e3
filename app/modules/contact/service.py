import re
from html import escape
from fastapi import HTTPException
from app.config import settings
from app.modules.contact.email_sender import EmailSender
from app.modules.contact.schemas import ContactRequest, ContactResponse
import logging

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


class ContactService:
    def __init__(self, email_sender: EmailSender):
        self.email_sender = email_sender

    def send_contact_email(self, request: ContactRequest) -> ContactResponse:
        """Send a confirmation to the visitor and forward the message to support"""
        if not all([request.name, request.email, request.subject, request.message]):
            raise HTTPException(status_code=400, detail="Missing required fields")
        if not is_valid_email(request.email):
            raise HTTPException(status_code=400, detail="Invalid email address")

        name = escape(request.name)
        subject = escape(request.subject)
        message = escape(request.message)
        try:
            self.email_sender.send(
                to=[request.email],
                subject="We received your message!",
                html=(
                    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
                    f'<h1 style="color: #333;">Thank you for contacting us, {name}!</h1>'
                    '<p style="color: #666;">We have received your message and will get back to you as soon as possible.</p>'
                    '<div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">'
                    '<h2 style="color: #333; font-size: 16px;">Your message:</h2>'
                    f'<p style="color: #666;"><strong>Subject:</strong> {subject}</p>'
                    f'<p style="color: #666;">{message}</p>'
                    '</div>'
                    f'<p style="color: #666;">Best regards,<br>The {settings.app_name} Team</p>'
                    '</div>'
                ),
            )
            self.email_sender.send(
                to=[settings.support_email],
                subject=f"New Contact Form Submission: {request.subject}",
                html=(
                    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
                    '<h1 style="color: #333;">New Contact Form Submission</h1>'
                    f'<p><strong>Name:</strong> {name}</p>'
                    f'<p><strong>Email:</strong> {escape(request.email)}</p>'
                    f'<p><strong>Subject:</strong> {subject}</p>'
                    f'<p><strong>Message:</strong></p><p>{message}</p>'
                    '</div>'
                ),
                reply_to=request.email,
            )
        except Exception as e:
            logger.error(f"Error sending contact email from {request.email}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to send email")

        logger.info(f"Contact emails sent for {request.email}")
        return ContactResponse(message="Email sent successfully")
