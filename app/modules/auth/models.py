# Supabase Auth + admin_users
# Authentication itself is handled by Supabase Auth (auth.users).
# Admin identity, role and data scope live in the admin_users table.

"""
Expected Supabase table structure:

admin_users:
- id: uuid (primary key, same id as auth.users)
- email: text (not null, unique)
- full_name: text (not null)
- role: text (not null) - "admin" | "super_admin" | "branch_manager"
- role_type: text (nullable) - "general_manager" | "regional_manager" | "branch_manager"
- role_id: uuid (nullable, foreign key to roles.id)
- city: text (nullable) - required when role_type = branch_manager
- region: integer (nullable) - required when role_type = regional_manager
- phone: text (nullable)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
