# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (auth.users.id, unique, not null)
- display_name: text (nullable)
- avatar_url: text (nullable)
- subscription_plan: text (default: 'free') - values: free, basic, pro, enterprise
- words_used: integer (default: 0)
- words_limit: integer (default: 500)
- subscription_start_date: timestamp (nullable)
- subscription_end_date: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

RPC:
- update_word_usage(user_uuid uuid, words_to_add integer) - atomically adds to words_used
"""
