# Supabase table: task_time_entries
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- user_id: uuid (not null)
- started_at: timestamp (not null, default: now())
- ended_at: timestamp (nullable) - null while the timer is running
- duration_seconds: integer (nullable) - whole seconds, set on stop
- description: text (nullable)
- created_at: timestamp (default: now())
"""
