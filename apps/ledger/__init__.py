"""
Ledger App - Shared Expense Tracking

One member records an expense and picks who owes for it; each debtor owes
the full amount and settles by bank transfer through a VietQR code.

Key Features:
- Expense creation with one obligation per debtor
- Debtor-side paid/unpaid toggle with an optional note
- Owner-side payment review (confirmed / disputed), advisory only
- VietQR payment payloads with bank-safe account name and memo
- Bank directory lookup and cached per-user dashboards

Architecture:
- Models: Expense, ExpenseDebtor, DebtReview
- Services: expense_management, debt_status, payment_instructions,
  settlement_review, bank_payload, bank_directory, qr_generation, dashboard
- Views: RESTful API with ViewSets
- Exceptions: Domain exception hierarchy in services/exceptions.py
"""

__version__ = '1.0.0'
