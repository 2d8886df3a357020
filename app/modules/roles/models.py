# Supabase tables: permissions, roles, role_permissions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

permissions:
- id: uuid (primary key)
- key: text (not null, unique) - e.g., "members.view", "finance.manage"
- name: text (not null) - display name
- group_name: text (not null) - e.g., "members", "finance", "users"
- description: text (nullable)
- created_at: timestamp (default: now())

roles:
- id: uuid (primary key)
- name: text (not null, unique) - e.g., "general_admin", "branch_admin"
- description: text (nullable)
- role_type: text (not null) - "general_manager" | "regional_manager" | "branch_manager"
- is_system_role: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to roles.id, not null)
- permission_id: uuid (foreign key to permissions.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)
"""
