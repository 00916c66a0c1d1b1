"""
Expense management service.

Creating an expense records one obligation per selected debtor. Every
debtor owes the *full* expense amount; the ledger does not split it.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction, DatabaseError
from django.db.models import QuerySet

from apps.accounts.models import Profile
from apps.ledger.models import Expense, ExpenseDebtor

from .dashboard import invalidate_dashboards
from .exceptions import (
    ValidationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
CENT = Decimal('0.01')
# Expense.amount is DecimalField(max_digits=14, decimal_places=2)
AMOUNT_MAX_INTEGER_DIGITS = 12
AMOUNT_LIMIT = Decimal(10) ** AMOUNT_MAX_INTEGER_DIGITS


def _clean_amount(amount) -> Decimal:
    if isinstance(amount, bool) or amount is None:
        raise ValidationError("Amount is required.")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number.")

    if not value.is_finite():
        raise ValidationError("Amount must be a finite number.")
    if value.adjusted() >= AMOUNT_MAX_INTEGER_DIGITS:
        raise ValidationError("Amount is too large.")

    try:
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("Amount is too large.")
    if value >= AMOUNT_LIMIT:
        raise ValidationError("Amount is too large.")
    if value <= 0:
        raise ValidationError("Amount must be greater than zero.")
    return value


def _unique_debtor_ids(debtor_ids: Iterable, creator_id: UUID) -> List[UUID]:
    """Deduplicate (keeping order) and drop the creator."""
    creator = UUID(str(creator_id))
    seen = []
    for raw in debtor_ids or []:
        try:
            value = UUID(str(raw).strip())
        except ValueError:
            raise ValidationError(f"\"{raw}\" is not a valid member id.")
        if value == creator or value in seen:
            continue
        seen.append(value)
    return seen


def create_expense(
    *,
    creator_id: UUID,
    title: str,
    amount,
    debtor_ids: Iterable,
    note: Optional[str] = None,
    paid_at: Optional[date] = None
) -> Expense:
    """
    Record an expense and one ExpenseDebtor per selected member.

    All validation runs before anything is written; the expense and its
    debtor rows are inserted in a single transaction.

    Args:
        creator_id: The paying user (payee)
        title: Expense title, trimmed
        amount: Positive amount; quantised to 2 decimal places
        debtor_ids: User ids who owe the amount; deduplicated, creator removed
        note: Optional free-text note
        paid_at: Optional date the payee paid

    Returns:
        The created Expense

    Raises:
        ValidationError: Bad title/amount, empty debtor set, unknown debtor,
            or a debtor profile without email
        PersistenceError: If the database write fails (nothing is kept)
    """
    title = (title or '').strip()
    if not title:
        raise ValidationError("Enter a title for the expense.")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters.")

    amount = _clean_amount(amount)

    unique_ids = _unique_debtor_ids(debtor_ids, creator_id)
    if not unique_ids:
        raise ValidationError("Select at least one member who owes for this expense.")

    profiles = {
        profile.pk: profile
        for profile in Profile.objects.filter(user_id__in=unique_ids)
    }

    missing = [debtor_id for debtor_id in unique_ids if debtor_id not in profiles]
    if missing:
        raise ValidationError(
            "Some selected members no longer exist or have not completed their profile."
        )

    debtor_profiles = [profiles[debtor_id] for debtor_id in unique_ids]
    if any(not profile.email for profile in debtor_profiles):
        raise ValidationError(
            "Some selected members have no email on their profile. "
            "Ask them to update it before splitting a debt."
        )

    note = (note or '').strip() or None

    try:
        with transaction.atomic():
            expense = Expense.objects.create(
                title=title,
                amount=amount,
                note=note,
                paid_at=paid_at,
                created_by_id=creator_id,
            )
            ExpenseDebtor.objects.bulk_create([
                ExpenseDebtor(
                    expense=expense,
                    debtor_id=profile.pk,
                    debtor_email=profile.email,
                    debtor_name=profile.display_name or profile.email,
                    owed_amount=amount,
                )
                for profile in debtor_profiles
            ])
    except DatabaseError as e:
        logger.error("Failed to create expense for %s: %s", creator_id, e)
        raise PersistenceError("Could not save the expense. Nothing was recorded.") from e

    affected = [creator_id] + [profile.pk for profile in debtor_profiles]
    transaction.on_commit(lambda: invalidate_dashboards(affected))

    logger.info(
        "Expense %s created by %s with %d debtor(s)",
        expense.id, creator_id, len(debtor_profiles)
    )
    return expense


def get_owned_expenses(*, owner_id: UUID) -> QuerySet[Expense]:
    """Expenses the user paid for, newest first, with their debtors."""
    return (
        Expense.objects
        .filter(created_by_id=owner_id)
        .prefetch_related('debtors', 'debtors__review')
        .order_by('-created_at')
    )


def get_debts_for_debtor(*, debtor_id: UUID) -> QuerySet[ExpenseDebtor]:
    """Obligations of the user, newest first, with expense and payee."""
    return (
        ExpenseDebtor.objects
        .filter(debtor_id=debtor_id)
        .select_related('expense', 'expense__created_by', 'expense__created_by__profile', 'review')
        .order_by('-created_at')
    )


def get_expense_for_user(*, expense_id: UUID, user_id: UUID) -> Expense:
    """
    Fetch one expense visible to the user (its creator or one of its debtors).

    Raises:
        NotFoundError: If the expense does not exist
        AuthorizationError: If the user is neither creator nor debtor
    """
    try:
        expense = (
            Expense.objects
            .prefetch_related('debtors', 'debtors__review')
            .get(id=expense_id)
        )
    except Expense.DoesNotExist:
        raise NotFoundError("Expense not found.")

    if str(expense.created_by_id) == str(user_id):
        return expense
    if expense.debtors.filter(debtor_id=user_id).exists():
        return expense
    raise AuthorizationError("You do not have access to this expense.")


def get_debt_for_user(*, debt_id: UUID, user_id: UUID) -> ExpenseDebtor:
    """
    Fetch one debt visible to the user (the debtor or the expense owner).

    Raises:
        NotFoundError: If the debt does not exist
        AuthorizationError: If the user is neither debtor nor payee
    """
    try:
        debt = (
            ExpenseDebtor.objects
            .select_related('expense')
            .get(id=debt_id)
        )
    except ExpenseDebtor.DoesNotExist:
        raise NotFoundError("Debt not found.")

    if str(user_id) in (str(debt.debtor_id), str(debt.expense.created_by_id)):
        return debt
    raise AuthorizationError("You do not have access to this debt.")

