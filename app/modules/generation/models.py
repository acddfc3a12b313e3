# Supabase table: content_generations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (not null)
- template_type: text (not null) - e.g. letter, blog, social, business_plan, court_report, image-prompt
- prompt: text (not null) - the user's own prompt, before template enhancement
- generated_content: text (not null)
- word_count: integer (not null)
- language: text (nullable, default 'en')
- keywords: text[] (nullable)
- created_at: timestamp (default: now())
"""
