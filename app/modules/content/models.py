# Content models
# Tables are managed in Supabase (PostgreSQL); these docs describe the columns
# the content service relies on.
#
# news:
# - id: UUID (primary key)
# - title, content, excerpt, image_url
# - category_id: UUID (nullable)
# - is_published: BOOLEAN, published_at: TIMESTAMPTZ
#
# announcements:
# - id, title, content
# - type: 'general' | 'urgent'
# - is_active: BOOLEAN
#
# sliders:
# - id, title, description, image_url, link_url, button_text
# - sort_order: INT, is_active: BOOLEAN
#
# discounts:
# - id, title, description, discount_amount, category
# - city, district, address, phone, website_url, image_url
# - is_active: BOOLEAN
#
# All tables carry created_at / updated_at.
