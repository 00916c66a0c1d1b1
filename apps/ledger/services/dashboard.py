"""
Per-user dashboard snapshot.

The dashboard combines what the user paid for (with each debtor's status)
and what the user owes (with the payee's bank details and a suggested
transfer memo). Snapshots are cached per user and dropped whenever a
ledger write touches that user.
"""

import logging
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from django.conf import settings
from django.core.cache import cache

from apps.accounts.models import Profile
from apps.ledger.models import Expense, ExpenseDebtor

from .bank_directory import get_bank_directory, find_bank_by_code
from .payment_instructions import memo_label

logger = logging.getLogger(__name__)


def dashboard_cache_key(user_id) -> str:
    return f'ledger:dashboard:{user_id}'


def invalidate_dashboard(user_id) -> None:
    cache.delete(dashboard_cache_key(user_id))


def invalidate_dashboards(user_ids: Iterable) -> None:
    cache.delete_many([dashboard_cache_key(user_id) for user_id in set(user_ids)])


def invalidate_dashboards_for_payee(payee_id) -> None:
    """Drop the payee's dashboard and those of everyone who owes them."""
    debtor_ids = (
        ExpenseDebtor.objects
        .filter(expense__created_by_id=payee_id)
        .values_list('debtor_id', flat=True)
        .distinct()
    )
    invalidate_dashboards([payee_id, *debtor_ids])


def _build_expenses(user_id):
    expenses = (
        Expense.objects
        .filter(created_by_id=user_id)
        .prefetch_related('debtors', 'debtors__review')
        .order_by('-created_at')
    )
    outstanding = Decimal('0.00')
    rows = []
    for expense in expenses:
        debtors = []
        for debt in expense.debtors.all():
            if not debt.is_paid:
                outstanding += debt.owed_amount
            debtors.append({
                'id': debt.id,
                'debtor_id': debt.debtor_id,
                'debtor_name': debt.debtor_name,
                'debtor_email': debt.debtor_email,
                'owed_amount': debt.owed_amount,
                'is_paid': debt.is_paid,
                'paid_at': debt.paid_at,
                'payment_note': debt.payment_note,
                'review': debt.get_review_state(),
            })
        rows.append({
            'id': expense.id,
            'title': expense.title,
            'amount': expense.amount,
            'note': expense.note,
            'paid_at': expense.paid_at,
            'created_at': expense.created_at,
            'debtors': debtors,
        })
    return rows, outstanding


def _build_debts(user, profile):
    debts = (
        ExpenseDebtor.objects
        .filter(debtor_id=user.pk)
        .select_related('expense', 'expense__created_by', 'expense__created_by__profile', 'review')
        .order_by('-created_at')
    )
    banks = get_bank_directory()
    outstanding = Decimal('0.00')
    rows = []
    for debt in debts:
        owner = debt.expense.created_by
        owner_profile = getattr(owner, 'profile', None)
        bank_code = owner_profile.bank_code if owner_profile else None
        bank = find_bank_by_code(banks, bank_code)
        if not debt.is_paid:
            outstanding += debt.owed_amount
        rows.append({
            'id': debt.id,
            'expense_id': debt.expense_id,
            'title': debt.expense.title,
            'amount': debt.owed_amount,
            'created_at': debt.created_at,
            'owner_name': (
                (owner_profile and owner_profile.display_name) or owner.email
            ),
            'owner_bank_account': owner_profile.bank_account_number if owner_profile else None,
            'owner_bank_code': bank_code,
            'owner_bank_name': (bank.get('shortName') or bank.get('name')) if bank else None,
            'owner_bank_logo': bank.get('logo') if bank else None,
            'memo': memo_label(debt, debtor=user, profile=profile),
            'is_paid': debt.is_paid,
            'paid_at': debt.paid_at,
            'payment_note': debt.payment_note,
            'review': debt.get_review_state(),
        })
    return rows, outstanding


def build_dashboard(*, user) -> dict:
    """
    Return the user's dashboard, from cache when possible.

    Args:
        user: The authenticated user the dashboard belongs to

    Returns:
        dict with ``profile``, ``payment_ready``, ``expenses``, ``debts``,
        ``owed_to_me`` and ``i_owe``
    """
    key = dashboard_cache_key(user.pk)
    snapshot = cache.get(key)
    if snapshot is not None:
        return snapshot

    profile = Profile.objects.filter(user_id=user.pk).first()
    expenses, owed_to_me = _build_expenses(user.pk)
    debts, i_owe = _build_debts(user, profile)

    snapshot = {
        'profile': {
            'display_name': profile.display_name,
            'bank_code': profile.bank_code,
            'bank_account_number': profile.bank_account_number,
            'bank_owner_name': profile.bank_owner_name,
        } if profile else None,
        'payment_ready': bool(profile and profile.is_payment_ready),
        'expenses': expenses,
        'debts': debts,
        'owed_to_me': owed_to_me,
        'i_owe': i_owe,
    }
    cache.set(key, snapshot, timeout=settings.DASHBOARD_CACHE_SECONDS)
    logger.debug("Built dashboard for %s", user.pk)
    return snapshot


def get_cached_dashboard(user_id: UUID):
    """The cached snapshot, or None if it was never built or was invalidated."""
    return cache.get(dashboard_cache_key(user_id))
