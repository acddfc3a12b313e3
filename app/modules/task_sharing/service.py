import secrets
from supabase import Client
from app.config import settings
from app.core.timeutils import utcnow, parse_datetime
from app.modules.task_sharing.schemas import ShareResponse, SharedTaskResponse
from typing import List, Optional, Dict, Any
from datetime import datetime
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

PUBLIC_TASK_FIELDS = "id, title, description, status, priority, due_date, created_at"


def generate_share_token() -> str:
    """32 lowercase hex characters (16 random bytes)"""
    return secrets.token_hex(16)


def share_url(token: str, base_url: Optional[str] = None) -> str:
    return f"{(base_url or settings.app_url).rstrip('/')}/shared/task/{token}"


def _to_response(row: Dict[str, Any]) -> ShareResponse:
    share = ShareResponse(**row)
    if share.share_token:
        share.share_url = share_url(share.share_token)
    return share


class ShareService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_shares(self, task_id: str) -> List[ShareResponse]:
        try:
            result = self.supabase.table("task_shares")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("created_at", desc=True)\
                .execute()
            return [_to_response(row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_public_link(self, user_id: str, task_id: str, expires_at: Optional[datetime] = None) -> ShareResponse:
        """Public read-only link identified by a random token"""
        try:
            result = self.supabase.table("task_shares").insert({
                "task_id": task_id,
                "shared_by": user_id,
                "share_token": generate_share_token(),
                "is_public": True,
                "permission": "view",
                "expires_at": expires_at.isoformat() if expires_at else None,
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Public share link created for task {task_id}")
        return _to_response(result.data[0])

    def share_with_email(self, user_id: str, task_id: str, email: str, permission: str = "view") -> ShareResponse:
        if permission not in ("view", "edit"):
            raise HTTPException(status_code=400, detail="Permission must be view or edit")
        try:
            result = self.supabase.table("task_shares").insert({
                "task_id": task_id,
                "shared_by": user_id,
                "shared_with_email": email.strip().lower(),
                "is_public": False,
                "permission": permission,
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return _to_response(result.data[0])

    def revoke_share(self, user_id: str, task_id: str, share_id: str) -> bool:
        """Only the user who created the share can revoke it"""
        result = self.supabase.table("task_shares")\
            .select("id, shared_by")\
            .eq("id", share_id)\
            .eq("task_id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Share not found")
        if result.data[0]["shared_by"] != user_id:
            raise HTTPException(status_code=403, detail="Only the owner can revoke this share")
        try:
            self.supabase.table("task_shares").delete().eq("id", share_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def resolve_token(self, token: str) -> SharedTaskResponse:
        """Task behind a public share token"""
        result = self.supabase.table("task_shares")\
            .select("task_id, is_public, expires_at")\
            .eq("share_token", token)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="This share link is invalid or has been revoked")
        share = result.data[0]

        expires_at = parse_datetime(share.get("expires_at"))
        if expires_at and expires_at < utcnow():
            raise HTTPException(status_code=410, detail="This share link has expired")

        task_result = self.supabase.table("tasks")\
            .select(PUBLIC_TASK_FIELDS)\
            .eq("id", share["task_id"])\
            .limit(1)\
            .execute()
        if not task_result.data:
            raise HTTPException(status_code=404, detail="Task not found")
        return SharedTaskResponse(**task_result.data[0])
