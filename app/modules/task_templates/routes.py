from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.task_templates.schemas import (
    TaskTemplateCreate, TaskTemplateUpdate, TaskTemplateResponse, InstantiateRequest
)
from app.modules.task_templates.service import TaskTemplateService
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.schemas import TaskResponse
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/task-templates", tags=["task-templates"])


def get_task_template_service(supabase: Client = Depends(get_supabase)) -> TaskTemplateService:
    return TaskTemplateService(supabase)


@router.get("", response_model=List[TaskTemplateResponse])
async def list_task_templates(
    user_data: Dict = Depends(get_current_user),
    service: TaskTemplateService = Depends(get_task_template_service)
):
    return service.list_templates(user_data["id"])


@router.post("", response_model=TaskTemplateResponse, status_code=201)
async def create_task_template(
    template_data: TaskTemplateCreate,
    user_data: Dict = Depends(get_current_user),
    service: TaskTemplateService = Depends(get_task_template_service)
):
    return service.create_template(user_data["id"], template_data)


@router.put("/{template_id}", response_model=TaskTemplateResponse)
async def update_task_template(
    template_id: str,
    template_data: TaskTemplateUpdate,
    user_data: Dict = Depends(get_current_user),
    service: TaskTemplateService = Depends(get_task_template_service)
):
    return service.update_template(user_data["id"], template_id, template_data)


@router.delete("/{template_id}", status_code=204)
async def delete_task_template(
    template_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TaskTemplateService = Depends(get_task_template_service)
):
    service.delete_template(user_data["id"], template_id)
    return None


@router.post("/{template_id}/instantiate", response_model=TaskResponse, status_code=201)
async def instantiate_task_template(
    template_id: str,
    request: Optional[InstantiateRequest] = None,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: TaskTemplateService = Depends(get_task_template_service)
):
    """Create a new task from a template"""
    return service.instantiate(
        user_data["id"], template_id, task_service,
        due_date=request.due_date if request else None
    )
