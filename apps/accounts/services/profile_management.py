"""
Profile management service.

A Profile carries the bank details a payee is paid on. It is upserted on
every bank-info submission, keyed by the user id.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import Profile, User

from .exceptions import IncompleteBankInfoError, MissingEmailError

logger = logging.getLogger(__name__)


@transaction.atomic
def update_bank_info(
    *,
    user: User,
    bank_code: str,
    bank_account_number: str,
    bank_owner_name: str
) -> Profile:
    """
    Create or update the caller's profile with bank details.

    The display name and email are refreshed from the user record on
    every submission.

    Args:
        user: The authenticated user submitting their own bank info
        bank_code: VietQR acquirer BIN of the receiving bank
        bank_account_number: Receiving account number
        bank_owner_name: Account holder name as registered at the bank

    Returns:
        The stored Profile

    Raises:
        IncompleteBankInfoError: If any bank field is blank
        MissingEmailError: If the user has no email
    """
    bank_code = (bank_code or '').strip()
    bank_account_number = (bank_account_number or '').strip()
    bank_owner_name = (bank_owner_name or '').strip()

    if not bank_code or not bank_account_number or not bank_owner_name:
        raise IncompleteBankInfoError(
            "Bank code, account number and account holder are all required."
        )

    if not user.email:
        raise MissingEmailError("Your account has no valid email address.")

    profile, created = Profile.objects.update_or_create(
        user=user,
        defaults={
            'bank_code': bank_code,
            'bank_account_number': bank_account_number,
            'bank_owner_name': bank_owner_name,
            'display_name': user.display_name or user.email,
            'email': user.email,
        }
    )

    # Debtors' dashboards show this payee's bank details
    from apps.ledger.services.dashboard import invalidate_dashboards_for_payee
    transaction.on_commit(lambda: invalidate_dashboards_for_payee(user.id))

    logger.info(
        "%s bank profile for user %s",
        'Created' if created else 'Updated',
        user.id
    )
    return profile


def get_profile(*, user_id: UUID) -> Optional[Profile]:
    """Return the user's profile, or None before the first bank-info submission."""
    return Profile.objects.filter(user_id=user_id).first()


def get_member_options(*, user_id: UUID) -> QuerySet[Profile]:
    """
    Profiles the user can pick as debtors.

    Everyone except the caller who has an email on file, ordered by
    display name then email.
    """
    return (
        Profile.objects
        .exclude(user_id=user_id)
        .exclude(email__isnull=True)
        .exclude(email='')
        .order_by('display_name', 'email')
    )
