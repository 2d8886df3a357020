# Finance models
# finance_accounts:
# - id, name, account_type ('cash' | 'bank' | 'other'), currency (ISO 4217)
# - opening_balance, current_balance NUMERIC, description, is_active
#
# finance_account_summary (view): account_id, current_balance, totals
#
# finance_categories:
# - id, name, category_type ('income' | 'expense'), is_active
#
# finance_transactions:
# - id, account_id, category_id, transaction_type ('income' | 'expense' | 'transfer')
# - amount NUMERIC (> 0), transaction_date DATE
# - transfer_account_id (target account of a transfer)
# - member_id, member_due_id, reference_code, description, notes, created_by
