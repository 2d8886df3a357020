# Official document models (Supabase tables)
#
# dm_decisions: board decisions
# - id, decision_number (YYYY/NNN once finalised), decision_date, meeting_number
# - board_type: 'management' | 'audit' | 'discipline'
# - title, content, tags TEXT[]
# - status: 'draft' | 'final' | 'cancelled' | 'revised'
# - created_by, created_at, updated_at
#
# dm_documents: incoming / outgoing / internal correspondence
# - id, type, document_number, reference_date, sender, receiver, subject,
#   description, category_code, related_document_id, assigned_to
# - status: 'registered' | 'draft' | 'pending_approval' | 'sent' | 'archived' | 'cancelled'
# - presentation columns (header_title, sender_unit, text_align, signers JSONB, ...)
#
# dm_attachments: files in the official-documents bucket
# - id, parent_id, parent_type ('decision' | 'document'), file_path, file_name,
#   file_type, file_size, uploaded_by, created_at
#
# dm_templates: reusable document layouts
# - id, name, description, category_code, subject, receiver, content,
#   sender_unit, text_align, signers JSONB, is_public, created_by
#
# get_next_dm_sequence(p_year INT, p_type TEXT) RETURNS INT atomically
# increments the per-year, per-type counter.
