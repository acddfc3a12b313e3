from pydantic import BaseModel, EmailStr
from typing import Optional, Literal
from datetime import datetime


class PublicShareCreate(BaseModel):
    expires_at: Optional[datetime] = None


class EmailShareCreate(BaseModel):
    email: EmailStr
    permission: Literal["view", "edit"] = "view"


class ShareResponse(BaseModel):
    id: str
    task_id: str
    shared_by: str
    shared_with_email: Optional[str] = None
    share_token: Optional[str] = None
    is_public: bool = False
    permission: str = "view"
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    share_url: Optional[str] = None

    class Config:
        from_attributes = True


class SharedTaskResponse(BaseModel):
    """Task fields visible through a public link"""
    id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
