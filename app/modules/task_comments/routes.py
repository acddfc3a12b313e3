from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.task_comments.schemas import CommentCreate, CommentUpdate, CommentResponse
from app.modules.task_comments.service import CommentService
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/tasks/{task_id}/comments", tags=["task-comments"])


def get_comment_service(supabase: Client = Depends(get_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("", response_model=List[CommentResponse])
async def list_comments(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: CommentService = Depends(get_comment_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.list_comments(task_id)


@router.post("", response_model=CommentResponse, status_code=201)
async def add_comment(
    task_id: str,
    comment_data: CommentCreate,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: CommentService = Depends(get_comment_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.add_comment(user_data["id"], task_id, comment_data.content)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    task_id: str,
    comment_id: str,
    comment_data: CommentUpdate,
    user_data: Dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """Only the author can edit a comment"""
    return service.update_comment(user_data["id"], task_id, comment_id, comment_data.content)


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    task_id: str,
    comment_id: str,
    user_data: Dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    service.delete_comment(user_data["id"], task_id, comment_id)
    return None
