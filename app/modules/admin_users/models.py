# Supabase table: admin_users (see app/modules/auth/models.py)
# Auth accounts are created through the Supabase Admin API with the
# service role key; the admin_users row shares the auth user's id.
