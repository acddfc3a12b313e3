from supabase import Client
from app.modules.task_labels.schemas import LabelCreate, LabelUpdate, LabelResponse, LabelToggleResponse
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class LabelService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_labels(self, user_id: str) -> List[LabelResponse]:
        try:
            result = self.supabase.table("task_labels")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("name")\
                .execute()
            return [LabelResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_label(self, user_id: str, label_id: str) -> LabelResponse:
        try:
            result = self.supabase.table("task_labels")\
                .select("*")\
                .eq("id", label_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Label not found")
        return LabelResponse(**result.data[0])

    def create_label(self, user_id: str, label_data: LabelCreate) -> LabelResponse:
        if not label_data.name or not label_data.name.strip():
            raise HTTPException(status_code=400, detail="Label name is required")
        try:
            result = self.supabase.table("task_labels").insert({
                "user_id": user_id,
                "name": label_data.name.strip(),
                "color": label_data.color,
            }).execute()
            return LabelResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_label(self, user_id: str, label_id: str, label_data: LabelUpdate) -> LabelResponse:
        self.get_label(user_id, label_id)
        update_data = label_data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            if not update_data["name"].strip():
                raise HTTPException(status_code=400, detail="Label name is required")
            update_data["name"] = update_data["name"].strip()
        if not update_data:
            raise HTTPException(status_code=400, detail="Nothing to update")
        try:
            result = self.supabase.table("task_labels")\
                .update(update_data)\
                .eq("id", label_id)\
                .eq("user_id", user_id)\
                .execute()
            return LabelResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_label(self, user_id: str, label_id: str) -> bool:
        self.get_label(user_id, label_id)
        try:
            self.supabase.table("task_labels").delete().eq("id", label_id).eq("user_id", user_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Assignments

    def get_task_label_ids(self, task_id: str) -> List[str]:
        try:
            result = self.supabase.table("task_label_assignments")\
                .select("label_id")\
                .eq("task_id", task_id)\
                .execute()
            return [row["label_id"] for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def assign_label(self, user_id: str, task_id: str, label_id: str) -> bool:
        self.get_label(user_id, label_id)
        if label_id in self.get_task_label_ids(task_id):
            return True
        try:
            self.supabase.table("task_label_assignments").insert({
                "task_id": task_id,
                "label_id": label_id,
            }).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unassign_label(self, task_id: str, label_id: str) -> bool:
        try:
            self.supabase.table("task_label_assignments")\
                .delete()\
                .eq("task_id", task_id)\
                .eq("label_id", label_id)\
                .execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_label(self, user_id: str, task_id: str, label_id: str) -> LabelToggleResponse:
        """Assign the label when missing, remove it when present"""
        if label_id in self.get_task_label_ids(task_id):
            self.unassign_label(task_id, label_id)
            assigned = False
        else:
            self.assign_label(user_id, task_id, label_id)
            assigned = True
        return LabelToggleResponse(task_id=task_id, label_id=label_id, assigned=assigned)
