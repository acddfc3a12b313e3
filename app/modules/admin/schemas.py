from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AdminCheckResponse(BaseModel):
    is_admin: bool


class NotificationToggle(BaseModel):
    is_active: bool  # current state; the toggle flips it


class AdminUserResponse(BaseModel):
    id: str
    user_id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    subscription_plan: Optional[str] = "free"
    words_used: Optional[int] = 0
    words_limit: Optional[int] = None
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    role: str = "user"


class UserStats(BaseModel):
    total_users: int
    free_users: int
    basic_users: int
    pro_users: int
    enterprise_users: int
    premium_users: int
    total_words_used: int


class UpdateUserPlan(BaseModel):
    plan: str
    words_limit: Optional[int] = None


class UpdateUserRole(BaseModel):
    make_admin: bool


class SuccessResponse(BaseModel):
    success: bool = True
