from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.task_sharing.schemas import (
    PublicShareCreate, EmailShareCreate, ShareResponse, SharedTaskResponse
)
from app.modules.task_sharing.service import ShareService
from app.modules.tasks.routes import get_task_service
from app.modules.tasks.service import TaskService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(tags=["task-sharing"])


def get_share_service(supabase: Client = Depends(get_supabase)) -> ShareService:
    return ShareService(supabase)


def get_public_share_service(supabase: Client = Depends(get_service_supabase)) -> ShareService:
    return ShareService(supabase)


@router.get("/tasks/{task_id}/shares", response_model=List[ShareResponse])
async def list_task_shares(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: ShareService = Depends(get_share_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.list_shares(task_id)


@router.post("/tasks/{task_id}/shares/public", response_model=ShareResponse, status_code=201)
async def create_public_share(
    task_id: str,
    share_data: Optional[PublicShareCreate] = None,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: ShareService = Depends(get_share_service)
):
    """Create a public view-only link"""
    task_service.get_task(user_data["id"], task_id)
    expires_at = share_data.expires_at if share_data else None
    return service.create_public_link(user_data["id"], task_id, expires_at)


@router.post("/tasks/{task_id}/shares/email", response_model=ShareResponse, status_code=201)
async def share_task_with_email(
    task_id: str,
    share_data: EmailShareCreate,
    user_data: Dict = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
    service: ShareService = Depends(get_share_service)
):
    task_service.get_task(user_data["id"], task_id)
    return service.share_with_email(user_data["id"], task_id, share_data.email, share_data.permission)


@router.delete("/tasks/{task_id}/shares/{share_id}", status_code=204)
async def revoke_task_share(
    task_id: str,
    share_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ShareService = Depends(get_share_service)
):
    service.revoke_share(user_data["id"], task_id, share_id)
    return None


@router.get("/shared/task/{token}", response_model=SharedTaskResponse)
async def get_shared_task(
    token: str,
    service: ShareService = Depends(get_public_share_service)
):
    """Resolve a public share link (no authentication)"""
    return service.resolve_token(token)
