from supabase import Client
from app.core.timeutils import utcnow, parse_datetime
from app.modules.task_time.schemas import TimeEntryResponse, TimeTrackingResponse
from typing import Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def format_duration(seconds: int) -> str:
    """3725 -> '1h 2m 5s', 125 -> '2m 5s', 5 -> '5s'"""
    seconds = int(seconds or 0)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def elapsed_seconds(started_at, now=None) -> int:
    started = parse_datetime(started_at)
    if started is None:
        return 0
    return max(0, int(((now or utcnow()) - started).total_seconds()))


class TimeTrackingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _active_entry(self, task_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("task_time_entries")\
            .select("*")\
            .eq("task_id", task_id)\
            .eq("user_id", user_id)\
            .is_("ended_at", "null")\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def start_timer(self, user_id: str, task_id: str) -> TimeEntryResponse:
        """Start tracking; a task has at most one running entry"""
        if self._active_entry(task_id, user_id):
            raise HTTPException(status_code=409, detail="A timer is already running for this task")
        try:
            result = self.supabase.table("task_time_entries").insert({
                "task_id": task_id,
                "user_id": user_id,
                "started_at": utcnow().isoformat(),
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Timer started for task {task_id}")
        return TimeEntryResponse(**result.data[0])

    def stop_timer(self, user_id: str, task_id: str, description: Optional[str] = None) -> TimeEntryResponse:
        entry = self._active_entry(task_id, user_id)
        if not entry:
            raise HTTPException(status_code=404, detail="No running timer for this task")
        now = utcnow()
        duration = elapsed_seconds(entry["started_at"], now)
        try:
            result = self.supabase.table("task_time_entries")\
                .update({
                    "ended_at": now.isoformat(),
                    "duration_seconds": duration,
                    "description": description or None,
                })\
                .eq("id", entry["id"])\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Logged {format_duration(duration)} on task {task_id}")
        return TimeEntryResponse(**result.data[0])

    def delete_entry(self, user_id: str, task_id: str, entry_id: str) -> bool:
        result = self.supabase.table("task_time_entries")\
            .delete()\
            .eq("id", entry_id)\
            .eq("task_id", task_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Time entry not found")
        return True

    def get_tracking(self, user_id: str, task_id: str) -> TimeTrackingResponse:
        """Entries newest first, with the running entry and totals"""
        try:
            result = self.supabase.table("task_time_entries")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("started_at", desc=True)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        entries = [TimeEntryResponse(**row) for row in result.data or []]
        active = next((e for e in entries if e.ended_at is None and e.user_id == user_id), None)
        total = sum(e.duration_seconds or 0 for e in entries)
        return TimeTrackingResponse(
            entries=entries,
            active_entry=active,
            elapsed_seconds=elapsed_seconds(active.started_at) if active else 0,
            total_seconds=total,
            total_formatted=format_duration(total),
        )
