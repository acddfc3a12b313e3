import hashlib
import secrets
import time
from html import escape
from supabase import Client
from app.config import settings
from app.modules.auth.schemas import (
    LoginRequest, TokenResponse, SignupOtpRequest, SignupOtpResponse,
    SignupVerifyRequest, SignupVerifyResponse
)
from app.modules.contact.email_sender import EmailSender
from app.modules.profiles.service import ProfileService
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

OTP_TTL_MINUTES = 10
LIST_USERS_PAGE_SIZE = 1000

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def generate_otp() -> str:
    """Six-digit code in [100000, 999999]"""
    return str(100000 + secrets.randbelow(900000))


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _email_registered(self, email: str) -> bool:
        """Scan every page of auth users for the address"""
        email = email.lower()
        page = 1
        while True:
            users = self.supabase.auth.admin.list_users(page=page, per_page=LIST_USERS_PAGE_SIZE) or []
            if any((u.email or "").lower() == email for u in users):
                return True
            if len(users) < LIST_USERS_PAGE_SIZE:
                return False
            page += 1

    def send_signup_otp(self, request: SignupOtpRequest, email_sender: EmailSender) -> SignupOtpResponse:
        """Email a verification code that must be confirmed before the account exists"""
        if not request.email:
            raise HTTPException(status_code=400, detail="Email is required")
        email = request.email.strip()
        logger.info(f"Processing OTP request for email: {email}")

        try:
            if self._email_registered(email):
                logger.info(f"Email already registered: {email}")
                raise HTTPException(
                    status_code=400,
                    detail="This email is already registered. Please sign in instead."
                )

            otp_code = generate_otp()
            # Only the latest code is valid
            self.supabase.table("signup_otps").delete().eq("email", email).execute()
            result = self.supabase.table("signup_otps").insert({
                "email": email,
                "otp_code": otp_code,
                "display_name": request.display_name,
                "verified": False,
                "expires_at": (datetime.now(timezone.utc) + timedelta(minutes=OTP_TTL_MINUTES)).isoformat(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to generate verification code")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error storing OTP for {email}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to generate verification code")

        try:
            email_sender.send(
                to=[email],
                subject=f"Your Verification Code - {settings.app_name}",
                html=(
                    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
                    f'<h1>Welcome to {settings.app_name}!</h1>'
                    f'<p>Hi {escape(request.display_name or "there")},</p>'
                    '<p>Please use the following verification code to complete your registration:</p>'
                    '<div style="font-size: 32px; font-weight: bold; text-align: center; letter-spacing: 8px;">'
                    f'{otp_code}</div>'
                    f'<p>This code will expire in <strong>{OTP_TTL_MINUTES} minutes</strong>.</p>'
                    "<p>If you didn't request this code, please ignore this email.</p>"
                    '</div>'
                ),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to send verification email: {str(e)}")

        return SignupOtpResponse(message="Verification code sent")

    def verify_signup_otp(self, request: SignupVerifyRequest) -> SignupVerifyResponse:
        """Check the emailed code and create a confirmed account with a free profile"""
        if not request.email or not request.otp or not request.password:
            raise HTTPException(status_code=400, detail="Email, OTP, and password are required")
        email = request.email.strip()

        now = datetime.now(timezone.utc).isoformat()
        result = self.supabase.table("signup_otps")\
            .select("*")\
            .eq("email", email)\
            .eq("otp_code", request.otp)\
            .eq("verified", False)\
            .gt("expires_at", now)\
            .limit(1)\
            .execute()
        if not result.data:
            logger.info(f"Invalid or expired OTP for email: {email}")
            raise HTTPException(status_code=400, detail="Invalid or expired verification code")
        otp_record = result.data[0]

        self.supabase.table("signup_otps").update({"verified": True}).eq("id", otp_record["id"]).execute()

        try:
            user_response = self.supabase.auth.admin.create_user({
                "email": email,
                "password": request.password,
                "email_confirm": True,
                "user_metadata": {"display_name": otp_record.get("display_name")},
            })
        except Exception as e:
            logger.error(f"Error creating user {email}: {str(e)}")
            raise HTTPException(status_code=400, detail=str(e))
        if not user_response or not user_response.user:
            raise HTTPException(status_code=400, detail="Failed to create user")

        user_id = user_response.user.id
        self.supabase.table("signup_otps").delete().eq("id", otp_record["id"]).execute()
        ProfileService(self.supabase).create_profile(
            user_id, otp_record.get("display_name") or email
        )
        logger.info(f"User created successfully: {user_id}")
        return SignupVerifyResponse(message="Account created successfully", user_id=user_id)

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def get_user_email(self, user_id: str) -> Optional[str]:
        """Look up an auth user's email with the admin API"""
        try:
            response = self.supabase.auth.admin.get_user_by_id(user_id)
        except Exception as e:
            logger.error(f"Failed to get user {user_id}: {str(e)}")
            return None
        if not response or not response.user:
            return None
        return response.user.email
