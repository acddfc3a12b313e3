from fastapi import APIRouter, Depends, File, UploadFile
from app.database.supabase_client import get_supabase
from app.modules.tasks.attachments import AttachmentService
from app.modules.tasks.events import TaskEventBus, get_task_event_bus
from app.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskStatusUpdate, TaskResponse, TaskAnalytics,
    SubtaskCreate, SubtaskUpdate, SubtaskReorder, SubtaskResponse,
    ActivityResponse, AttachmentResponse, AttachmentDownload
)
from app.modules.tasks.service import TaskService, SubtaskService
from app.modules.tasks.storage import S3Storage, get_storage
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_service(
    supabase: Client = Depends(get_supabase),
    events: TaskEventBus = Depends(get_task_event_bus)
) -> TaskService:
    return TaskService(supabase, events)


def get_subtask_service(supabase: Client = Depends(get_supabase)) -> SubtaskService:
    return SubtaskService(supabase)


def get_attachment_service(
    supabase: Client = Depends(get_supabase),
    storage: S3Storage = Depends(get_storage)
) -> AttachmentService:
    return AttachmentService(supabase, storage)


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return service.list_tasks(user_data["id"], status=status, priority=priority)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    task_data: TaskCreate,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return service.create_task(user_data["id"], task_data)


@router.get("/analytics", response_model=TaskAnalytics)
async def get_task_analytics(
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Counts by status and priority, completion rate and overdue tasks"""
    return service.get_analytics(user_data["id"])


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return service.get_task(user_data["id"], task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return service.update_task(user_data["id"], task_id, task_data)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def change_task_status(
    task_id: str,
    status_data: TaskStatusUpdate,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    """Move a task between board columns"""
    return service.change_status(user_data["id"], task_id, status_data.status)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    service.delete_task(user_data["id"], task_id)
    return None


@router.get("/{task_id}/activity", response_model=List[ActivityResponse])
async def list_task_activity(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service)
):
    return service.list_activity(user_data["id"], task_id)


# Subtasks

@router.get("/{task_id}/subtasks", response_model=List[SubtaskResponse])
async def list_subtasks(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: SubtaskService = Depends(get_subtask_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.list_subtasks(task_id)


@router.post("/{task_id}/subtasks", response_model=SubtaskResponse, status_code=201)
async def add_subtask(
    task_id: str,
    subtask_data: SubtaskCreate,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: SubtaskService = Depends(get_subtask_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.add_subtask(task_id, subtask_data.title)


@router.put("/{task_id}/subtasks/reorder", response_model=List[SubtaskResponse])
async def reorder_subtasks(
    task_id: str,
    reorder: SubtaskReorder,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: SubtaskService = Depends(get_subtask_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.reorder_subtasks(task_id, reorder.subtask_ids)


@router.put("/{task_id}/subtasks/{subtask_id}", response_model=SubtaskResponse)
async def update_subtask(
    task_id: str,
    subtask_id: str,
    subtask_data: SubtaskUpdate,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: SubtaskService = Depends(get_subtask_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.update_subtask(task_id, subtask_id, subtask_data.model_dump(exclude_unset=True))


@router.post("/{task_id}/subtasks/{subtask_id}/toggle", response_model=SubtaskResponse)
async def toggle_subtask(
    task_id: str,
    subtask_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: SubtaskService = Depends(get_subtask_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.toggle_subtask(task_id, subtask_id)


@router.delete("/{task_id}/subtasks/{subtask_id}", status_code=204)
async def delete_subtask(
    task_id: str,
    subtask_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: SubtaskService = Depends(get_subtask_service)
):
    task_service.get_task(user_data["id"], task_id)
    service.delete_subtask(task_id, subtask_id)
    return None


# Attachments

@router.get("/{task_id}/attachments", response_model=List[AttachmentResponse])
async def list_attachments(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: AttachmentService = Depends(get_attachment_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.list_attachments(task_id)


@router.post("/{task_id}/attachments", response_model=AttachmentResponse, status_code=201)
async def upload_attachment(
    task_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: AttachmentService = Depends(get_attachment_service)
):
    task_service.get_task(user_data["id"], task_id)
    content = await file.read()
    return service.upload(user_data["id"], task_id, file.filename, content, file.content_type)


@router.get("/{task_id}/attachments/{attachment_id}/download", response_model=AttachmentDownload)
async def get_attachment_download(
    task_id: str,
    attachment_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: AttachmentService = Depends(get_attachment_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.download_url(task_id, attachment_id)


@router.delete("/{task_id}/attachments/{attachment_id}", status_code=204)
async def delete_attachment(
    task_id: str,
    attachment_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: AttachmentService = Depends(get_attachment_service)
):
    task_service.get_task(user_data["id"], task_id)
    service.delete(task_id, attachment_id)
    return None
