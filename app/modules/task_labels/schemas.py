from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

DEFAULT_LABEL_COLOR = "#6366f1"


class LabelCreate(BaseModel):
    name: str
    color: str = DEFAULT_LABEL_COLOR


class LabelUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


class LabelResponse(BaseModel):
    id: str
    user_id: str
    name: str
    color: str = DEFAULT_LABEL_COLOR
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskLabelsResponse(BaseModel):
    task_id: str
    label_ids: List[str]


class LabelToggleResponse(BaseModel):
    task_id: str
    label_id: str
    assigned: bool
