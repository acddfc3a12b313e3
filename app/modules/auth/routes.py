from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.schemas import (
    LoginRequest, TokenResponse, SignupOtpRequest, SignupOtpResponse,
    SignupVerifyRequest, SignupVerifyResponse, MeResponse
)
from app.modules.auth.service import AuthService
from app.modules.contact.email_sender import EmailSender, get_email_sender
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_auth_service, get_current_user, is_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_admin_auth_service(supabase: Client = Depends(get_service_supabase)) -> AuthService:
    return AuthService(supabase)


@router.post("/signup/otp", response_model=SignupOtpResponse)
async def send_signup_otp(
    request: SignupOtpRequest,
    service: AuthService = Depends(get_admin_auth_service),
    email_sender: EmailSender = Depends(get_email_sender)
):
    """Send a six-digit verification code to a new email address"""
    return service.send_signup_otp(request, email_sender)


@router.post("/signup/verify", response_model=SignupVerifyResponse)
async def verify_signup_otp(
    request: SignupVerifyRequest,
    service: AuthService = Depends(get_admin_auth_service)
):
    """Verify the code and create the account"""
    return service.verify_signup_otp(request)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Current user with profile and admin flag (the frontend auth context)"""
    profile = ProfileService(supabase).ensure_profile(current_user)
    return MeResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        user_metadata=current_user.get("user_metadata") or {},
        profile=profile,
        is_admin=is_admin(current_user, supabase),
    )
