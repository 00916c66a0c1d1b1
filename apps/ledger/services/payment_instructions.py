"""
Payment instruction builder.

Derives the bank-transfer payload for one debt from ledger state: the
payee's bank profile, the owed amount and a memo naming the debtor, the
expense and its date. The payload is what the QR generation service
receives; nothing here renders or fetches images.
"""

import base64
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.utils import timezone

from apps.accounts.models import Profile
from apps.ledger.models import ExpenseDebtor

from .bank_payload import normalize_account_name, normalize_memo, MEMO_MAX_LENGTH
from .exceptions import (
    AuthorizationError,
    NotFoundError,
    IncompletePayeeProfileError,
    InvalidAmountError,
    InvalidBankAccountError,
    InvalidBankCodeError,
)

logger = logging.getLogger(__name__)

DEFAULT_MEMO = 'Thanh toan'

ACCOUNT_NUMBER_PATTERN = re.compile(r'^\d{6,19}$')
BANK_CODE_PATTERN = re.compile(r'^\d{6}$')
_WHITESPACE = re.compile(r'\s+')


def _default_template():
    return settings.VIETQR_TEMPLATE


@dataclass(frozen=True)
class PaymentPayload:
    """Normalised transfer instruction handed to the QR generation service."""

    account_number: str
    account_name: str
    bank_code: str
    amount: int
    memo: str
    template: str = field(default_factory=_default_template)

    def as_vietqr_request(self) -> dict:
        return {
            'accountNo': self.account_number,
            'accountName': self.account_name,
            'acqId': self.bank_code,
            'amount': self.amount,
            'addInfo': self.memo,
            'template': self.template,
        }


def format_memo_date(value) -> str:
    """Day/month/year without zero padding, in the server time zone."""
    local = timezone.localtime(value) if timezone.is_aware(value) else value
    return f"{local.day}/{local.month}/{local.year}"


def debtor_display_name(debtor, profile=None) -> str:
    """Profile display name, else account display name, else email."""
    if profile is None:
        profile = Profile.objects.filter(user_id=debtor.pk).first()
    if profile and profile.display_name:
        return profile.display_name.strip()
    return (debtor.display_name or debtor.email or 'User').strip()


def memo_label(debt: ExpenseDebtor, *, debtor=None, profile=None) -> str:
    """Human-readable memo before normalisation."""
    debtor = debtor or debt.debtor
    title = debt.expense.title or DEFAULT_MEMO
    return f"{debtor_display_name(debtor, profile)} {title} {format_memo_date(debt.expense.created_at)}"


def _round_amount(owed_amount) -> int:
    try:
        value = Decimal(owed_amount)
    except (TypeError, ValueError, ArithmeticError):
        raise InvalidAmountError("The amount to pay is not valid. Contact the expense owner.")

    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("The amount to pay is not valid. Contact the expense owner.")

    rounded = int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    if rounded <= 0:
        raise InvalidAmountError("The amount to pay rounds to zero and cannot be transferred.")
    return rounded


def build_payment_instruction(
    *,
    debt_id: UUID,
    requesting_user_id: UUID,
    template: Optional[str] = None
) -> PaymentPayload:
    """
    Build the VietQR payload for the debtor's own debt.

    Checks run in this order and all precede normalisation:
    debt exists, requester is the debtor, payee profile is complete,
    amount is payable, account number is 6-19 digits, bank code is a
    6-digit BIN.

    Args:
        debt_id: The ExpenseDebtor to pay
        requesting_user_id: Must be the debtor
        template: VietQR image template; defaults to settings.VIETQR_TEMPLATE

    Returns:
        PaymentPayload with integer amount and normalised name and memo

    Raises:
        NotFoundError, AuthorizationError, IncompletePayeeProfileError,
        InvalidAmountError, InvalidBankAccountError, InvalidBankCodeError
    """
    try:
        debt = (
            ExpenseDebtor.objects
            .select_related('expense', 'debtor')
            .get(id=debt_id)
        )
    except ExpenseDebtor.DoesNotExist:
        raise NotFoundError("Debt not found.")

    if str(debt.debtor_id) != str(requesting_user_id):
        raise AuthorizationError("You can only request payment details for your own debts.")

    payee = Profile.objects.filter(user_id=debt.expense.created_by_id).first()
    if payee is None or not payee.is_payment_ready:
        raise IncompletePayeeProfileError(
            "The expense owner has not completed their bank details yet."
        )

    amount = _round_amount(debt.owed_amount)

    account_number = _WHITESPACE.sub('', payee.bank_account_number)
    if not ACCOUNT_NUMBER_PATTERN.match(account_number):
        raise InvalidBankAccountError(
            "The receiving account number is invalid. The owner must update their bank details."
        )

    bank_code = payee.bank_code.strip()
    if not BANK_CODE_PATTERN.match(bank_code):
        raise InvalidBankCodeError(
            "The receiving bank code (BIN) is invalid. The owner must pick their bank again."
        )

    memo = normalize_memo(memo_label(debt))[:MEMO_MAX_LENGTH] or DEFAULT_MEMO

    return PaymentPayload(
        account_number=account_number,
        account_name=normalize_account_name(payee.bank_owner_name),
        bank_code=bank_code,
        amount=amount,
        memo=memo,
        template=template or settings.VIETQR_TEMPLATE,
    )


def request_payment_qr(
    *,
    debt_id: UUID,
    requesting_user_id: UUID,
    client=None
) -> dict:
    """
    Build the payload for a debt and have the QR service render it.

    Args:
        debt_id: The ExpenseDebtor to pay
        requesting_user_id: Must be the debtor
        client: QR generation client; defaults to VietQRClient.from_settings()

    Returns:
        dict with ``qr_data_url``, ``qr_code`` and the payload fields

    Raises:
        Everything build_payment_instruction raises, plus
        UpstreamServiceError / QRServiceNotConfiguredError from the client
    """
    from .qr_generation import VietQRClient, render_qr_png

    payload = build_payment_instruction(
        debt_id=debt_id,
        requesting_user_id=requesting_user_id,
    )
    client = client or VietQRClient.from_settings()
    result = client.generate(payload)

    qr_data_url = result.qr_data_url
    # Some templates return only the raw code string
    if not qr_data_url and result.qr_code:
        encoded = base64.b64encode(render_qr_png(result.qr_code)).decode('ascii')
        qr_data_url = f"data:image/png;base64,{encoded}"

    logger.info("Generated payment QR for debt %s", debt_id)
    return {
        'qr_data_url': qr_data_url,
        'qr_code': result.qr_code,
        'account_name': payload.account_name,
        'account_number': payload.account_number,
        'bank_code': payload.bank_code,
        'amount': payload.amount,
        'memo': payload.memo,
    }
