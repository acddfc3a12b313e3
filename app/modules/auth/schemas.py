from pydantic import BaseModel, EmailStr
from typing import Optional, Dict, Any
from app.modules.profiles.schemas import ProfileResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class SignupOtpRequest(BaseModel):
    email: Optional[str] = None
    display_name: Optional[str] = None


class SignupVerifyRequest(BaseModel):
    email: Optional[str] = None
    otp: Optional[str] = None
    password: Optional[str] = None


class SignupOtpResponse(BaseModel):
    success: bool = True
    message: str


class SignupVerifyResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    profile: ProfileResponse
    is_admin: bool = False
