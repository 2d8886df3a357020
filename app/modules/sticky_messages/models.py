# Sticky message model
# sticky_messages:
# - id: UUID (primary key)
# - message: TEXT
# - created_by: UUID (admin_users.id)
# - created_at: TIMESTAMPTZ
#
# The newest row is the message currently shown on the site.
