# Supabase tables: tasks, subtasks, task_activity_log, task_attachments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (tasks):
- id: uuid (primary key)
- user_id: uuid (not null)
- title: text (not null)
- description: text (nullable)
- priority: text (not null, default: 'medium') - values: low, medium, high, urgent
- status: text (not null, default: 'todo') - values: todo, in_progress, review, completed
- due_date: timestamp (nullable)
- reminder_time: timestamp (nullable)
- template_type: text (nullable) - generation template the task relates to
- recurrence_pattern: text (nullable) - values: daily, weekly, monthly, yearly
- recurrence_end_date: timestamp (nullable)
- completed_at: timestamp (nullable) - set when status becomes completed
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Expected Supabase table structure (subtasks):
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- title: text (not null)
- completed: boolean (default: false)
- position: integer (default: 0)
- created_at: timestamp (default: now())

Expected Supabase table structure (task_activity_log):
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- user_id: uuid (not null)
- action: text (not null) - created, updated, status_changed, recurred, ...
- old_value: jsonb (nullable)
- new_value: jsonb (nullable)
- created_at: timestamp (default: now())

Expected Supabase table structure (task_attachments):
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- uploaded_by: uuid (not null)
- file_name: text (not null)
- file_url: text (not null) - s3://<bucket>/tasks/<task_id>/<uuid>-<file_name>
- file_size: integer (nullable)
- file_type: text (nullable)
- created_at: timestamp (default: now())
"""
