from supabase import Client
from app.core.timeutils import utcnow, parse_datetime
from app.modules.tasks.events import TaskEvent, TaskEventBus, INSERT, UPDATE, DELETE
from app.modules.tasks.recurrence import next_due_date
from app.modules.tasks.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, SubtaskResponse, ActivityResponse, TaskAnalytics
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

ACTIVITY_LIMIT = 50
STATUSES = ["todo", "in_progress", "review", "completed"]
PRIORITIES = ["low", "medium", "high", "urgent"]

# Fields copied from a completed recurring task into its next occurrence
RECURRING_FIELDS = ["title", "description", "priority", "template_type", "recurrence_pattern", "recurrence_end_date"]


def completion_fields(new_status: str, old_status: Optional[str]) -> Dict[str, Any]:
    """completed_at is set when a task moves to completed and cleared when it leaves it"""
    if new_status == "completed":
        if old_status == "completed":
            return {}
        return {"completed_at": utcnow().isoformat()}
    return {"completed_at": None}


def compute_analytics(tasks: List[Dict[str, Any]], now=None) -> TaskAnalytics:
    now = now or utcnow()
    by_status = {s: 0 for s in STATUSES}
    by_priority = {p: 0 for p in PRIORITIES}
    overdue = 0
    for task in tasks:
        status = task.get("status") or "todo"
        priority = task.get("priority") or "medium"
        by_status[status] = by_status.get(status, 0) + 1
        by_priority[priority] = by_priority.get(priority, 0) + 1
        due = parse_datetime(task.get("due_date"))
        if due and due < now and status != "completed":
            overdue += 1
    total = len(tasks)
    completed = by_status.get("completed", 0)
    return TaskAnalytics(
        total=total,
        completed=completed,
        in_progress=by_status.get("in_progress", 0),
        overdue=overdue,
        completion_rate=round(completed / total * 100) if total else 0,
        by_status=by_status,
        by_priority=by_priority,
    )


class TaskService:
    def __init__(self, supabase: Client, events: Optional[TaskEventBus] = None):
        self.supabase = supabase
        self.events = events

    def _publish(self, event_type: str, user_id: str, new: Dict[str, Any] = None, old: Dict[str, Any] = None):
        if self.events is not None:
            self.events.publish(TaskEvent(event_type=event_type, user_id=user_id, new=new or {}, old=old or {}))

    def _get_task_row(self, user_id: str, task_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("tasks")\
                .select("*")\
                .eq("id", task_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Task not found")
        return result.data[0]

    def owned_label_ids(self, user_id: str, label_ids: List[str]) -> List[str]:
        """The subset of label_ids that belong to the user, in the given order"""
        if not label_ids:
            return []
        try:
            result = self.supabase.table("task_labels")\
                .select("id")\
                .eq("user_id", user_id)\
                .in_("id", list(label_ids))\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        owned = {row["id"] for row in result.data or []}
        return [label_id for label_id in label_ids if label_id in owned]

    def get_task(self, user_id: str, task_id: str) -> TaskResponse:
        """Get a task owned by the user"""
        return TaskResponse(**self._get_task_row(user_id, task_id))

    def list_tasks(self, user_id: str, status: Optional[str] = None, priority: Optional[str] = None) -> List[TaskResponse]:
        try:
            query = self.supabase.table("tasks").select("*").eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            if priority:
                query = query.eq("priority", priority)
            result = query.order("created_at", desc=True).execute()
            return [TaskResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_task(self, user_id: str, task_data: TaskCreate) -> TaskResponse:
        """Create a task, assign its labels and record the activity"""
        if not task_data.title or not task_data.title.strip():
            raise HTTPException(status_code=400, detail="Task title is required")
        if task_data.label_ids:
            owned = self.owned_label_ids(user_id, task_data.label_ids)
            unknown = [label_id for label_id in task_data.label_ids if label_id not in owned]
            if unknown:
                raise HTTPException(status_code=400, detail=f"Unknown label ids: {', '.join(unknown)}")

        insert_data = task_data.model_dump(mode="json", exclude={"label_ids"})
        insert_data["title"] = task_data.title.strip()
        insert_data["user_id"] = user_id
        if task_data.status == "completed":
            insert_data["completed_at"] = utcnow().isoformat()

        try:
            result = self.supabase.table("tasks").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create task")
            row = result.data[0]

            if task_data.label_ids:
                self.supabase.table("task_label_assignments").insert([
                    {"task_id": row["id"], "label_id": label_id} for label_id in task_data.label_ids
                ]).execute()
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        self.log_activity(row["id"], user_id, "created", None, {"title": row["title"]})
        self._publish(INSERT, user_id, new=row)
        logger.info(f"Task created: {row['id']} for user {user_id}")
        return TaskResponse(**row)

    def update_task(self, user_id: str, task_id: str, task_data: TaskUpdate) -> TaskResponse:
        """Apply a partial update; completing a recurring task schedules its next occurrence"""
        old = self._get_task_row(user_id, task_id)
        update_data = task_data.model_dump(mode="json", exclude_unset=True)
        if "title" in update_data:
            if not update_data["title"] or not update_data["title"].strip():
                raise HTTPException(status_code=400, detail="Task title is required")
            update_data["title"] = update_data["title"].strip()
        if not update_data:
            return TaskResponse(**old)

        old_status = old.get("status")
        if update_data.get("status"):
            update_data.update(completion_fields(update_data["status"], old_status))
        update_data["updated_at"] = utcnow().isoformat()

        try:
            result = self.supabase.table("tasks")\
                .update(update_data)\
                .eq("id", task_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Task not found")
        row = result.data[0]

        changed_old = {}
        changed_new = {}
        for key, value in update_data.items():
            if key in ("updated_at", "completed_at"):
                continue
            if old.get(key) != value:
                changed_old[key] = old.get(key)
                changed_new[key] = value
        new_status = row.get("status")
        if "status" in changed_new:
            self.log_activity(task_id, user_id, "status_changed", {"status": old_status}, {"status": new_status})
            changed_old.pop("status")
            changed_new.pop("status")
        if changed_new:
            self.log_activity(task_id, user_id, "updated", changed_old, changed_new)

        self._publish(UPDATE, user_id, new=row, old=old)

        if new_status == "completed" and old_status != "completed" and row.get("recurrence_pattern"):
            self.create_next_occurrence(user_id, row)
        return TaskResponse(**row)

    def change_status(self, user_id: str, task_id: str, status: str) -> TaskResponse:
        return self.update_task(user_id, task_id, TaskUpdate(status=status))

    def create_next_occurrence(self, user_id: str, task: Dict[str, Any]) -> Optional[TaskResponse]:
        """Create the next occurrence of a completed recurring task, unless it passes the recurrence end"""
        pattern = task.get("recurrence_pattern")
        due = parse_datetime(task.get("due_date"))
        base = due or utcnow()
        try:
            next_due = next_due_date(base, pattern, parse_datetime(task.get("recurrence_end_date")))
        except ValueError as e:
            logger.warning(f"Skipping recurrence for task {task.get('id')}: {str(e)}")
            return None
        if next_due is None:
            logger.info(f"Recurrence ended for task {task.get('id')}")
            return None

        insert_data = {key: task.get(key) for key in RECURRING_FIELDS}
        insert_data.update({
            "user_id": user_id,
            "status": "todo",
            "due_date": next_due.isoformat(),
        })
        reminder = parse_datetime(task.get("reminder_time"))
        if reminder:
            insert_data["reminder_time"] = (reminder + (next_due - base)).isoformat()

        try:
            result = self.supabase.table("tasks").insert(insert_data).execute()
        except Exception as e:
            logger.error(f"Failed to create next occurrence of task {task.get('id')}: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            return None
        row = result.data[0]
        self.log_activity(row["id"], user_id, "recurred", {"task_id": task.get("id")}, {"due_date": row.get("due_date")})
        self._publish(INSERT, user_id, new=row)
        logger.info(f"Next occurrence {row['id']} created for recurring task {task.get('id')}")
        return TaskResponse(**row)

    def delete_task(self, user_id: str, task_id: str) -> bool:
        old = self._get_task_row(user_id, task_id)
        try:
            self.supabase.table("tasks")\
                .delete()\
                .eq("id", task_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        self._publish(DELETE, user_id, old=old)
        return True

    def log_activity(
        self,
        task_id: str,
        user_id: str,
        action: str,
        old_value: Optional[Dict[str, Any]] = None,
        new_value: Optional[Dict[str, Any]] = None
    ) -> None:
        try:
            self.supabase.table("task_activity_log").insert({
                "task_id": task_id,
                "user_id": user_id,
                "action": action,
                "old_value": old_value,
                "new_value": new_value,
            }).execute()
        except Exception as e:
            logger.error(f"Error logging activity {action} for task {task_id}: {str(e)}")

    def list_activity(self, user_id: str, task_id: str) -> List[ActivityResponse]:
        """Latest 50 activity entries, newest first"""
        self._get_task_row(user_id, task_id)
        try:
            result = self.supabase.table("task_activity_log")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("created_at", desc=True)\
                .limit(ACTIVITY_LIMIT)\
                .execute()
            return [ActivityResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_analytics(self, user_id: str) -> TaskAnalytics:
        try:
            result = self.supabase.table("tasks")\
                .select("id, status, priority, due_date")\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return compute_analytics(result.data or [])


class SubtaskService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_subtasks(self, task_id: str) -> List[SubtaskResponse]:
        try:
            result = self.supabase.table("subtasks")\
                .select("*")\
                .eq("task_id", task_id)\
                .order("position")\
                .execute()
            return [SubtaskResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_subtask(self, task_id: str, title: str) -> SubtaskResponse:
        """Append a subtask after the current last position"""
        if not title or not title.strip():
            raise HTTPException(status_code=400, detail="Subtask title is required")
        existing = self.list_subtasks(task_id)
        position = max((s.position for s in existing), default=-1) + 1
        try:
            result = self.supabase.table("subtasks").insert({
                "task_id": task_id,
                "title": title.strip(),
                "completed": False,
                "position": position,
            }).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create subtask")
        return SubtaskResponse(**result.data[0])

    def _get_subtask(self, task_id: str, subtask_id: str) -> Dict[str, Any]:
        result = self.supabase.table("subtasks")\
            .select("*")\
            .eq("id", subtask_id)\
            .eq("task_id", task_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Subtask not found")
        return result.data[0]

    def update_subtask(self, task_id: str, subtask_id: str, update_data: Dict[str, Any]) -> SubtaskResponse:
        self._get_subtask(task_id, subtask_id)
        if "title" in update_data:
            if not update_data["title"] or not update_data["title"].strip():
                raise HTTPException(status_code=400, detail="Subtask title is required")
            update_data["title"] = update_data["title"].strip()
        if not update_data:
            raise HTTPException(status_code=400, detail="Nothing to update")
        try:
            result = self.supabase.table("subtasks")\
                .update(update_data)\
                .eq("id", subtask_id)\
                .eq("task_id", task_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return SubtaskResponse(**result.data[0])

    def toggle_subtask(self, task_id: str, subtask_id: str) -> SubtaskResponse:
        subtask = self._get_subtask(task_id, subtask_id)
        return self.update_subtask(task_id, subtask_id, {"completed": not subtask.get("completed")})

    def delete_subtask(self, task_id: str, subtask_id: str) -> bool:
        self._get_subtask(task_id, subtask_id)
        try:
            self.supabase.table("subtasks").delete().eq("id", subtask_id).eq("task_id", task_id).execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reorder_subtasks(self, task_id: str, subtask_ids: List[str]) -> List[SubtaskResponse]:
        """Positions follow the order of subtask_ids"""
        known = {s.id for s in self.list_subtasks(task_id)}
        unknown = [sid for sid in subtask_ids if sid not in known]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown subtask ids: {', '.join(unknown)}")
        try:
            for position, subtask_id in enumerate(subtask_ids):
                self.supabase.table("subtasks")\
                    .update({"position": position})\
                    .eq("id", subtask_id)\
                    .eq("task_id", task_id)\
                    .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return self.list_subtasks(task_id)
