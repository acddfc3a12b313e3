# Supabase tables: discount_codes, discount_code_usage
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
#
# Subscriptions are not stored separately: activation, cancellation and expiry
# update subscription_plan, words_limit, words_used and the subscription dates
# on the profiles row (see app/modules/profiles/models.py).

"""
Expected Supabase table structure (discount_codes):
- id: uuid (primary key)
- code: text (not null, unique) - stored upper case
- discount_percent: integer (not null) - 1..100
- max_uses: integer (nullable) - null means unlimited
- used_count: integer (default: 0)
- is_active: boolean (default: true)
- expires_at: timestamp (nullable)
- created_at: timestamp (default: now())

Expected Supabase table structure (discount_code_usage):
- id: uuid (primary key)
- discount_code_id: uuid (foreign key to discount_codes.id, on delete cascade)
- user_id: uuid (not null)
- used_at: timestamp (default: now())
"""
