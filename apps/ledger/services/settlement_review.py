"""
Owner-side settlement review.

Once the debtor marks a debt paid, the expense owner can confirm that the
payment arrived or dispute it, and reset either back to pending. The review is advisory metadata only: it is
stored apart from the debt and never touches ``is_paid``.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.ledger.models import DebtReview, ExpenseDebtor, ReviewStatus

from .dashboard import invalidate_dashboards
from .debt_status import clean_note
from .exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    InvalidReviewTransitionError,
)

logger = logging.getLogger(__name__)

# Re-disputing updates the note; confirming twice is a no-op and rejected.
ALLOWED_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.CONFIRMED, ReviewStatus.DISPUTED},
    ReviewStatus.CONFIRMED: {ReviewStatus.PENDING, ReviewStatus.DISPUTED},
    ReviewStatus.DISPUTED: {ReviewStatus.PENDING, ReviewStatus.CONFIRMED, ReviewStatus.DISPUTED},
}

OUTCOMES = {ReviewStatus.CONFIRMED, ReviewStatus.DISPUTED}


def get_review_state(debt: ExpenseDebtor) -> dict:
    """``{status, note, updated_at}``; pending with no note when never reviewed."""
    return debt.get_review_state()


@transaction.atomic
def review_debt_payment(
    *,
    debt_id: UUID,
    owner_user_id: UUID,
    status: str,
    note: Optional[str] = None
) -> DebtReview:
    """
    Record the owner's review of a debtor's payment.

    Args:
        debt_id: The ExpenseDebtor under review
        owner_user_id: Must be the creator of the parent expense
        status: One of ``pending``, ``confirmed``, ``disputed``
        note: Optional note, trimmed and capped at 280 characters

    Returns:
        The saved DebtReview

    Raises:
        NotFoundError: If the debt does not exist
        AuthorizationError: If the caller did not create the expense
        ValidationError: If the status is unknown, or the debt is not yet
            marked paid when confirming or disputing
        InvalidReviewTransitionError: If the status change is not allowed
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

    if str(debt.expense.created_by_id) != str(owner_user_id):
        raise AuthorizationError("Only the expense owner can review this payment.")

    if status not in ReviewStatus.values:
        raise ValidationError(f"\"{status}\" is not a valid review status.")
    target = ReviewStatus(status)

    # Resetting to pending stays open after the debtor unmarks the debt.
    if target in OUTCOMES and not debt.is_paid:
        raise ValidationError("The debtor has not marked this debt as paid yet.")

    review, _ = DebtReview.objects.get_or_create(debt=debt)
    current = ReviewStatus(review.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidReviewTransitionError(
            f"Cannot change review status from {current.value} to {target.value}."
        )

    # Advisory only: the debtor's is_paid flag is left untouched.
    review.status = target
    review.note = clean_note(note)
    review.reviewed_by_id = owner_user_id
    review.updated_at = timezone.now()
    review.save()

    affected = [debt.debtor_id, debt.expense.created_by_id]
    transaction.on_commit(lambda: invalidate_dashboards(affected))

    logger.info("Debt %s reviewed as %s", debt.id, target.value)
    return review
