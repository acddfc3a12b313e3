# Supabase table: task_templates
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (not null)
- name: text (not null)
- description: text (nullable) - what the template is for
- title_template: text (not null) - title of tasks created from it
- description_template: text (nullable)
- priority: text (not null, default: 'medium')
- label_ids: uuid[] (default: '{}')
- is_shared: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
