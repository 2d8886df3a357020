# Supabase tables: members, member_documents
# Rows of both tables are only reached through the admin's row scope
# (members.city / members.region).

"""
members:
- id: uuid (primary key)
- first_name, last_name: text (not null)
- tc_identity: text (nullable, unique) - national identity number
- membership_number: text (nullable, unique)
- email, phone: text (nullable)
- city: text (nullable) - branch scope column
- region: integer (nullable) - regional scope column
- district, workplace, position, address: text (nullable)
- membership_status: text (default: "pending") - "pending" | "active" | "inactive" | "resigned"
- is_active: boolean (default: false)
- resignation_reason_id: uuid (nullable, general_definitions.id)
- resignation_date: date (nullable)
- created_at, updated_at: timestamp

member_documents:
- id: uuid (primary key)
- member_id: uuid (foreign key to members.id)
- document_type: text - "resignation_petition" | "personnel_file" | "other"
- file_name, file_path, file_url, mime_type: text
- file_size: integer
- uploaded_by: uuid (admin_users.id)
- created_at: timestamp (default: now())
"""
