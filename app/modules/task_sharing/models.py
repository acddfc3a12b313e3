# Supabase table: task_shares
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- shared_by: uuid (not null)
- shared_with_email: text (nullable) - set for email shares
- share_token: text (nullable, unique) - 32 hex chars, set for public links
- is_public: boolean (default: false)
- permission: text (not null, default: 'view') - values: view, edit
- expires_at: timestamp (nullable)
- created_at: timestamp (default: now())
"""
