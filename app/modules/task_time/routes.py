from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.task_time.schemas import TimerStop, TimeEntryResponse, TimeTrackingResponse
from app.modules.task_time.service import TimeTrackingService
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/tasks/{task_id}/time", tags=["task-time"])


def get_time_service(supabase: Client = Depends(get_supabase)) -> TimeTrackingService:
    return TimeTrackingService(supabase)


@router.get("", response_model=TimeTrackingResponse)
async def get_time_tracking(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: TimeTrackingService = Depends(get_time_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.get_tracking(user_data["id"], task_id)


@router.post("/start", response_model=TimeEntryResponse, status_code=201)
async def start_timer(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: TimeTrackingService = Depends(get_time_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.start_timer(user_data["id"], task_id)


@router.post("/stop", response_model=TimeEntryResponse)
async def stop_timer(
    task_id: str,
    stop_data: Optional[TimerStop] = None,
    user_data: Dict = Depends(get_current_user),
    service: TimeTrackingService = Depends(get_time_service)
):
    return service.stop_timer(user_data["id"], task_id, stop_data.description if stop_data else None)


@router.delete("/{entry_id}", status_code=204)
async def delete_time_entry(
    task_id: str,
    entry_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TimeTrackingService = Depends(get_time_service)
):
    service.delete_entry(user_data["id"], task_id, entry_id)
    return None
