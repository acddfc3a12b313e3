from fastapi import APIRouter, Depends
from app.modules.contact.email_sender import EmailSender, get_email_sender
from app.modules.contact.schemas import ContactRequest, ContactResponse
from app.modules.contact.service import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])


def get_contact_service(email_sender: EmailSender = Depends(get_email_sender)) -> ContactService:
    return ContactService(email_sender)


@router.post("", response_model=ContactResponse)
async def send_contact_email(
    request: ContactRequest,
    service: ContactService = Depends(get_contact_service)
):
    """Public contact form"""
    return service.send_contact_email(request)
