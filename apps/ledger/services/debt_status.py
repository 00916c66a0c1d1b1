"""
Debtor-side settlement.

A debtor confirms (or retracts) their own payment. The owner never flips
``is_paid``; see settlement_review for the owner's side.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.ledger.models import ExpenseDebtor, PAYMENT_NOTE_MAX_LENGTH

from .dashboard import invalidate_dashboards
from .exceptions import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)


def clean_note(note: Optional[str]) -> Optional[str]:
    """Trim, cap at 280 characters and map empty to None."""
    return (note or '').strip()[:PAYMENT_NOTE_MAX_LENGTH] or None


@transaction.atomic
def set_debt_paid_status(
    *,
    debt_id: UUID,
    acting_user_id: UUID,
    is_paid: bool,
    note: Optional[str] = None
) -> ExpenseDebtor:
    """
    Mark the caller's own debt as paid or unpaid.

    The row is locked for the duration of the transaction. Marking a debt
    unpaid always clears the payment note, whatever ``note`` holds.

    Args:
        debt_id: The ExpenseDebtor to change
        acting_user_id: Must be the debtor
        is_paid: Target state
        note: Optional payment note, kept only when marking paid

    Returns:
        The updated ExpenseDebtor

    Raises:
        NotFoundError: If the debt does not exist
        AuthorizationError: If the caller is not the debtor
    """
    try:
        debt = (
            ExpenseDebtor.objects
            .select_for_update()
            .select_related('expense')
            .get(id=debt_id)
        )
    except ExpenseDebtor.DoesNotExist:
        raise NotFoundError("Debt not found.")

    if str(debt.debtor_id) != str(acting_user_id):
        raise AuthorizationError("Only the debtor can change the payment status of this debt.")

    if is_paid:
        debt.mark_paid(note=clean_note(note))
    else:
        debt.mark_unpaid()

    affected = [debt.debtor_id, debt.expense.created_by_id]
    transaction.on_commit(lambda: invalidate_dashboards(affected))

    logger.info(
        "Debt %s marked %s by debtor",
        debt.id, 'paid' if is_paid else 'unpaid'
    )
    return debt
