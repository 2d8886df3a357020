# Audit log model
# audit_logs:
# - id: UUID (primary key)
# - user_id: UUID (admin_users.id of the acting admin)
# - action: 'LOGIN' | 'LOGOUT' | 'CREATE' | 'UPDATE' | 'DELETE' | 'VIEW' | 'EXPORT' | 'IMPORT'
# - entity_type: see app.core.audit.AUDIT_ENTITIES
# - entity_id: TEXT (nullable)
# - details: JSONB (includes user_email / user_name)
# - ip_address: TEXT
# - created_at: TIMESTAMPTZ
