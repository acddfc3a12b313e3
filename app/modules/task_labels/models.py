# Supabase tables: task_labels, task_label_assignments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (task_labels):
- id: uuid (primary key)
- user_id: uuid (not null)
- name: text (not null)
- color: text (not null, default: '#6366f1')
- created_at: timestamp (default: now())

Expected Supabase table structure (task_label_assignments):
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- label_id: uuid (foreign key to task_labels.id, on delete cascade)
- unique (task_id, label_id)
"""
