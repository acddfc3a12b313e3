# Supabase tables: notifications, dismissed_notifications, promotions, dismissed_promotions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
#
# Toasts (task reminders, task change notices) are not persisted; they live in
# the in-memory NotificationHub until the client drains its feed.

"""
Expected Supabase table structure (notifications):
- id: uuid (primary key)
- title: text (not null)
- message: text (not null)
- type: text (not null, default: 'info') - values: info, success, warning, error
- target_users: text (default: 'all') - values: all, free, premium, basic, pro, enterprise
- is_active: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Expected Supabase table structure (dismissed_notifications):
- id: uuid (primary key)
- user_id: uuid (not null)
- notification_id: text (not null) - notification uuid or a dynamic id such as 'welcome'
- created_at: timestamp (default: now())

Expected Supabase table structure (promotions):
- id: uuid (primary key)
- title: text (not null)
- message: text (not null)
- button_text: text (default: 'Learn More')
- button_link: text (nullable)
- image_url: text (nullable)
- is_active: boolean (default: true)
- show_on_landing: boolean (default: true)
- show_on_dashboard: boolean (default: true)
- target_users: text (default: 'free')
- start_date: timestamp (nullable)
- end_date: timestamp (nullable)
- created_at: timestamp (default: now())

Expected Supabase table structure (dismissed_promotions):
- id: uuid (primary key)
- user_id: uuid (not null)
- promotion_id: uuid (foreign key to promotions.id, on delete cascade)
- created_at: timestamp (default: now())
"""
