# Definition models
# general_definitions:
# - id: UUID (primary key)
# - definition_type: 'workplace' | 'position' | 'title' | 'resignation_reason'
# - name: TEXT
# - sort_order: INT
# - is_active: BOOLEAN
# - created_at / updated_at
