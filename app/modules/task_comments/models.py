# Supabase table: task_comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- user_id: uuid (not null) - author
- content: text (not null)
- mentions: text[] (nullable) - names mentioned with @name
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
