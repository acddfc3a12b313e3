# Supabase Auth
# Users live in Supabase's auth.users table. Signup goes through an emailed
# one-time code before the account is created with the admin API.

"""
Expected Supabase table structure (signup_otps):
- id: uuid (primary key)
- email: text (not null)
- otp_code: text (not null) - six digits
- display_name: text (nullable)
- verified: boolean (default: false)
- expires_at: timestamp (not null) - created_at + 10 minutes
- created_at: timestamp (default: now())

Expected Supabase table structure (user_roles):
- id: uuid (primary key)
- user_id: uuid (not null)
- role: text (not null) - values: admin, user; unique (user_id, role)
- created_at: timestamp (default: now())
"""
