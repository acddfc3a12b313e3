from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileResponse(BaseModel):
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
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class UsageResponse(BaseModel):
    subscription_plan: str
    words_used: int
    words_limit: int
    words_remaining: int
    usage_percentage: float
    level: str  # ok | warning | critical
    limit_reached: bool
