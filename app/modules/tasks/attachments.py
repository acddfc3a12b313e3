import uuid
from botocore.exceptions import ClientError
from supabase import Client
from app.modules.tasks.schemas import AttachmentResponse, AttachmentDownload
from app.modules.tasks.storage import S3Storage, attachment_key, DOWNLOAD_URL_EXPIRES_SEC
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024


class AttachmentService:
    def __init__(self, supabase: Client, storage: S3Storage):
        self.supabase = supabase
        self.storage = storage

    def upload(
        self,
        user_id: str,
        task_id: str,
        file_name: str,
        content: bytes,
        content_type: Optional[str] = None
    ) -> AttachmentResponse:
        """Store the object under tasks/<task_id>/ and record the attachment row"""
        if not file_name:
            raise HTTPException(status_code=400, detail="File name is required")
        if len(content) > MAX_ATTACHMENT_BYTES:
            raise HTTPException(status_code=413, detail="File too large (max 10 MB)")

        key = attachment_key(task_id, uuid.uuid4().hex, file_name)
        try:
            file_url = self.storage.upload_file(content, key, content_type or "application/octet-stream")
        except ClientError:
            raise HTTPException(status_code=502, detail="Failed to upload file")

        try:
            result = self.supabase.table("task_attachments").insert({
                "task_id": task_id,
                "uploaded_by": user_id,
                "file_name": file_name,
                "file_url": file_url,
                "file_size": len(content),
                "file_type": content_type,
            }).execute()
        except Exception as e:
            self.storage.delete_file(key)
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Attachment uploaded for task {task_id}: {key}")
        return AttachmentResponse(**result.data[0])

    def list_attachments(self, task_id: str) -> List[AttachmentResponse]:
        try:
            result = self.supabase.table("task_attachments")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("created_at", desc=True)\
                .execute()
            return [AttachmentResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_attachment(self, task_id: str, attachment_id: str) -> AttachmentResponse:
        result = self.supabase.table("task_attachments")\
            .select("*")\
            .eq("id", attachment_id)\
            .eq("task_id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Attachment not found")
        return AttachmentResponse(**result.data[0])

    def download_url(self, task_id: str, attachment_id: str) -> AttachmentDownload:
        attachment = self._get_attachment(task_id, attachment_id)
        key = self.storage.key_from_url(attachment.file_url)
        return AttachmentDownload(
            url=self.storage.get_download_url(key),
            expires_in=DOWNLOAD_URL_EXPIRES_SEC,
        )

    def delete(self, task_id: str, attachment_id: str) -> bool:
        """Delete the stored object, then the row"""
        attachment = self._get_attachment(task_id, attachment_id)
        self.storage.delete_file(self.storage.key_from_url(attachment.file_url))
        try:
            self.supabase.table("task_attachments").delete().eq("id", attachment_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
