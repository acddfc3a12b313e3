from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class TimerStop(BaseModel):
    description: Optional[str] = None


class TimeEntryResponse(BaseModel):
    id: str
    task_id: str
    user_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TimeTrackingResponse(BaseModel):
    entries: List[TimeEntryResponse]
    active_entry: Optional[TimeEntryResponse] = None
    elapsed_seconds: int = 0  # of the running entry
    total_seconds: int = 0  # finished entries
    total_formatted: str = "0s"
