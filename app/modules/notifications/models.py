# Supabase table: notification_queue
# Rows are picked up by the SMS/e-mail/push delivery job; this service only enqueues.

"""
notification_queue:
- id: uuid (primary key)
- channel: text (not null) - "sms" | "email" | "push"
- recipient: text (not null) - phone number, e-mail address or member id (push)
- subject: text (nullable)
- body: text (not null)
- entity_type: text (nullable) - e.g. "announcement", "member"
- entity_id: uuid (nullable)
- status: text (default: "pending")
- created_by: uuid (nullable, admin_users.id)
- created_at: timestamp (default: now())
"""
