from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime, timezone

NotificationType = Literal["info", "success", "warning", "error"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Toast(BaseModel):
    """Short user-facing message delivered through the notification feed"""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"
    sound: Optional[str] = None
    task_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)


class FeedResponse(BaseModel):
    toasts: List[Toast]


class SubscriptionStatus(BaseModel):
    subscribed: bool


class NotificationResponse(BaseModel):
    id: str
    type: str = "info"
    title: str
    message: str
    target_users: Optional[str] = "all"
    is_active: Optional[bool] = True
    created_at: Optional[datetime] = None
    action_label: Optional[str] = None
    action_url: Optional[str] = None
    dynamic: bool = False


class NotificationCreate(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: NotificationType = "info"
    target_users: str = "all"


class PromotionCreate(BaseModel):
    title: str
    message: str
    button_text: str = "Learn More"
    button_link: Optional[str] = None
    image_url: Optional[str] = None
    show_on_landing: bool = True
    show_on_dashboard: bool = True
    target_users: str = "free"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class PromotionUpdate(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    image_url: Optional[str] = None
    show_on_landing: Optional[bool] = None
    show_on_dashboard: Optional[bool] = None
    target_users: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class PromotionResponse(BaseModel):
    id: str
    title: str
    message: str
    button_text: Optional[str] = "Learn More"
    button_link: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    show_on_landing: bool = True
    show_on_dashboard: bool = True
    target_users: Optional[str] = "free"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
