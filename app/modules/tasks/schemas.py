from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskStatus = Literal["todo", "in_progress", "review", "completed"]
RecurrencePattern = Literal["daily", "weekly", "monthly", "yearly"]


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "todo"
    due_date: Optional[datetime] = None
    reminder_time: Optional[datetime] = None
    template_type: Optional[str] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[datetime] = None
    label_ids: Optional[List[str]] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    reminder_time: Optional[datetime] = None
    template_type: Optional[str] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[datetime] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    priority: str = "medium"
    status: str = "todo"
    due_date: Optional[datetime] = None
    reminder_time: Optional[datetime] = None
    template_type: Optional[str] = None
    recurrence_pattern: Optional[str] = None
    recurrence_end_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubtaskCreate(BaseModel):
    title: str


class SubtaskUpdate(BaseModel):
    title: Optional[str] = None
    completed: Optional[bool] = None


class SubtaskReorder(BaseModel):
    subtask_ids: List[str]


class SubtaskResponse(BaseModel):
    id: str
    task_id: str
    title: str
    completed: bool = False
    position: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActivityResponse(BaseModel):
    id: str
    task_id: str
    user_id: str
    action: str
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


class AttachmentResponse(BaseModel):
    id: str
    task_id: str
    uploaded_by: str
    file_name: str
    file_url: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    created_at: Optional[datetime] = None


class AttachmentDownload(BaseModel):
    url: str
    expires_in: int


class TaskAnalytics(BaseModel):
    total: int
    completed: int
    in_progress: int
    overdue: int
    completion_rate: int  # whole percent
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
