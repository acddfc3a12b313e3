from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.task_labels.schemas import (
    LabelCreate, LabelUpdate, LabelResponse, TaskLabelsResponse, LabelToggleResponse
)
from app.modules.task_labels.service import LabelService
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["task-labels"])


def get_label_service(supabase: Client = Depends(get_supabase)) -> LabelService:
    return LabelService(supabase)


@router.get("/labels", response_model=List[LabelResponse])
async def list_labels(
    user_data: Dict = Depends(get_current_user),
    service: LabelService = Depends(get_label_service)
):
    return service.list_labels(user_data["id"])


@router.post("/labels", response_model=LabelResponse, status_code=201)
async def create_label(
    label_data: LabelCreate,
    user_data: Dict = Depends(get_current_user),
    service: LabelService = Depends(get_label_service)
):
    return service.create_label(user_data["id"], label_data)


@router.put("/labels/{label_id}", response_model=LabelResponse)
async def update_label(
    label_id: str,
    label_data: LabelUpdate,
    user_data: Dict = Depends(get_current_user),
    service: LabelService = Depends(get_label_service)
):
    return service.update_label(user_data["id"], label_id, label_data)


@router.delete("/labels/{label_id}", status_code=204)
async def delete_label(
    label_id: str,
    user_data: Dict = Depends(get_current_user),
    service: LabelService = Depends(get_label_service)
):
    service.delete_label(user_data["id"], label_id)
    return None


@router.get("/tasks/{task_id}/labels", response_model=TaskLabelsResponse)
async def get_task_labels(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: LabelService = Depends(get_label_service)
):
    task_service.get_task(user_data["id"], task_id)
    return TaskLabelsResponse(task_id=task_id, label_ids=service.get_task_label_ids(task_id))


@router.post("/tasks/{task_id}/labels/{label_id}", response_model=TaskLabelsResponse)
async def assign_task_label(
    task_id: str,
    label_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: LabelService = Depends(get_label_service)
):
    task_service.get_task(user_data["id"], task_id)
    service.assign_label(user_data["id"], task_id, label_id)
    return TaskLabelsResponse(task_id=task_id, label_ids=service.get_task_label_ids(task_id))


@router.delete("/tasks/{task_id}/labels/{label_id}", response_model=TaskLabelsResponse)
async def unassign_task_label(
    task_id: str,
    label_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: LabelService = Depends(get_label_service)
):
    task_service.get_task(user_data["id"], task_id)
    service.unassign_label(task_id, label_id)
    return TaskLabelsResponse(task_id=task_id, label_ids=service.get_task_label_ids(task_id))


@router.post("/tasks/{task_id}/labels/{label_id}/toggle", response_model=LabelToggleResponse)
async def toggle_task_label(
    task_id: str,
    label_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: LabelService = Depends(get_label_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.toggle_label(user_data["id"], task_id, label_id)
