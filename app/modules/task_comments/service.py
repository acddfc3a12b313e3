import re
from supabase import Client
from app.core.timeutils import utcnow
from app.modules.task_comments.schemas import CommentResponse
from typing import List, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

MENTION_RE = re.compile(r"(?<![\w@])@([A-Za-z0-9_][A-Za-z0-9_.\-]*)")


def extract_mentions(content: str) -> List[str]:
    """Unique @names in order of first appearance"""
    mentions = []
    for name in MENTION_RE.findall(content or ""):
        name = name.rstrip(".-")
        if name and name not in mentions:
            mentions.append(name)
    return mentions


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_comments(self, task_id: str) -> List[CommentResponse]:
        """Comments on a task, oldest first"""
        try:
            result = self.supabase.table("task_comments")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("created_at")\
                .execute()
            return [CommentResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_comment(self, user_id: str, task_id: str, content: str) -> CommentResponse:
        if not content or not content.strip():
            raise HTTPException(status_code=400, detail="Comment cannot be empty")
        content = content.strip()
        try:
            result = self.supabase.table("task_comments").insert({
                "task_id": task_id,
                "user_id": user_id,
                "content": content,
                "mentions": extract_mentions(content),
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to add comment")
        return CommentResponse(**result.data[0])

    def _get_own_comment(self, user_id: str, task_id: str, comment_id: str) -> Dict[str, Any]:
        result = self.supabase.table("task_comments")\
            .select("*")\
            .eq("id", comment_id)\
            .eq("task_id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        comment = result.data[0]
        if comment["user_id"] != user_id:
            raise HTTPException(status_code=403, detail="You can only modify your own comments")
        return comment

    def update_comment(self, user_id: str, task_id: str, comment_id: str, content: str) -> CommentResponse:
        if not content or not content.strip():
            raise HTTPException(status_code=400, detail="Comment cannot be empty")
        self._get_own_comment(user_id, task_id, comment_id)
        content = content.strip()
        try:
            result = self.supabase.table("task_comments")\
                .update({
                    "content": content,
                    "mentions": extract_mentions(content),
                    "updated_at": utcnow().isoformat(),
                })\
                .eq("id", comment_id)\
                .execute()
            return CommentResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_comment(self, user_id: str, task_id: str, comment_id: str) -> bool:
        self._get_own_comment(user_id, task_id, comment_id)
        try:
            self.supabase.table("task_comments").delete().eq("id", comment_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
