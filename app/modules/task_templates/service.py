from supabase import Client
from app.core.timeutils import utcnow
from app.modules.task_templates.schemas import TaskTemplateCreate, TaskTemplateUpdate, TaskTemplateResponse
from app.modules.tasks.schemas import TaskCreate, TaskResponse
from app.modules.tasks.service import TaskService
from typing import List, Optional
from datetime import datetime
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class TaskTemplateService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_templates(self, user_id: str) -> List[TaskTemplateResponse]:
        """Own templates plus shared ones, sorted by name"""
        try:
            result = self.supabase.table("task_templates")\
                .select("*")\
                .or_(f"user_id.eq.{user_id},is_shared.eq.true")\
                .order("name")\
                .execute()
            return [TaskTemplateResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_template(self, user_id: str, template_id: str) -> TaskTemplateResponse:
        result = self.supabase.table("task_templates")\
            .select("*")\
            .eq("id", template_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Template not found")
        template = TaskTemplateResponse(**result.data[0])
        if template.user_id != user_id and not template.is_shared:
            raise HTTPException(status_code=404, detail="Template not found")
        return template

    def _require_owner(self, user_id: str, template_id: str) -> TaskTemplateResponse:
        template = self.get_template(user_id, template_id)
        if template.user_id != user_id:
            raise HTTPException(status_code=403, detail="Only the owner can modify this template")
        return template

    def create_template(self, user_id: str, template_data: TaskTemplateCreate) -> TaskTemplateResponse:
        if not template_data.name.strip() or not template_data.title_template.strip():
            raise HTTPException(status_code=400, detail="Template name and task title are required")
        insert_data = template_data.model_dump()
        insert_data["user_id"] = user_id
        try:
            result = self.supabase.table("task_templates").insert(insert_data).execute()
            return TaskTemplateResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_template(self, user_id: str, template_id: str, template_data: TaskTemplateUpdate) -> TaskTemplateResponse:
        self._require_owner(user_id, template_id)
        update_data = template_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = utcnow().isoformat()
        try:
            result = self.supabase.table("task_templates")\
                .update(update_data)\
                .eq("id", template_id)\
                .execute()
            return TaskTemplateResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_template(self, user_id: str, template_id: str) -> bool:
        self._require_owner(user_id, template_id)
        try:
            self.supabase.table("task_templates").delete().eq("id", template_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def instantiate(
        self,
        user_id: str,
        template_id: str,
        task_service: TaskService,
        due_date: Optional[datetime] = None
    ) -> TaskResponse:
        """Create a task from the template's title, description, priority and labels"""
        template = self.get_template(user_id, template_id)
        # Labels of a shared template belong to its author
        label_ids = task_service.owned_label_ids(user_id, template.label_ids or [])
        task = task_service.create_task(user_id, TaskCreate(
            title=template.title_template,
            description=template.description_template,
            priority=template.priority,
            due_date=due_date,
            label_ids=label_ids or None,
        ))
        logger.info(f"Task {task.id} created from template {template_id}")
        return task
