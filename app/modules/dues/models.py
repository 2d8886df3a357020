# Dues models
# member_due_periods:
# - id, name, period_start, period_end, due_date (DATE)
# - due_amount NUMERIC, penalty_rate NUMERIC, description
# - status: 'draft' | 'collecting' | 'closed'
# - published_at, closed_at
#
# member_due_period_summary (view): one row per period_id with member counts
# and collected / outstanding totals.
#
# member_dues: one row per member and period
# - id, member_id, period_id, due_date, amount_due, discount_amount,
#   penalty_amount, paid_amount, status, notes
#
# member_due_payments: payments against a member_dues row
# - id, member_due_id, amount, payment_date, payment_method, reference_number,
#   recorded_by, notes
#
# generate_member_dues_for_period(p_period_id UUID, p_include_inactive BOOL)
# RETURNS INT creates the member_dues rows and returns how many were created.
