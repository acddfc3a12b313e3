from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from app.modules.tasks.schemas import TaskPriority


class TaskTemplateCreate(BaseModel):
    name: str
    description: Optional[str] = None
    title_template: str
    description_template: Optional[str] = None
    priority: TaskPriority = "medium"
    label_ids: List[str] = []
    is_shared: bool = False


class TaskTemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    title_template: Optional[str] = None
    description_template: Optional[str] = None
    priority: Optional[TaskPriority] = None
    label_ids: Optional[List[str]] = None
    is_shared: Optional[bool] = None


class TaskTemplateResponse(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    title_template: str
    description_template: Optional[str] = None
    priority: str = "medium"
    label_ids: Optional[List[str]] = None
    is_shared: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InstantiateRequest(BaseModel):
    due_date: Optional[datetime] = None
