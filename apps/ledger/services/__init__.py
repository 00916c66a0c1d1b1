"""
Ledger app services layer.

Services contain business logic and orchestrate operations across models.
State-changing operations run in transactions; per-debt changes lock the
row. The acting user is always passed in explicitly.
"""

from .exceptions import (
    LedgerServiceError,
    ValidationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    InvalidReviewTransitionError,
    PaymentInstructionError,
    IncompletePayeeProfileError,
    InvalidBankAccountError,
    InvalidBankCodeError,
    InvalidAmountError,
    UpstreamServiceError,
    QRServiceNotConfiguredError,
)

from .bank_payload import (
    normalize_account_name,
    normalize_memo,
)

from .bank_directory import (
    BankInfo,
    get_bank_directory,
    lookup_bank,
)

from .expense_management import (
    create_expense,
    get_owned_expenses,
    get_debts_for_debtor,
    get_expense_for_user,
    get_debt_for_user,
)

from .debt_status import (
    set_debt_paid_status,
)

from .payment_instructions import (
    PaymentPayload,
    build_payment_instruction,
    request_payment_qr,
)

from .qr_generation import (
    VietQRClient,
    QRCodeResult,
    render_qr_png,
)

from .settlement_review import (
    review_debt_payment,
    get_review_state,
)

from .dashboard import (
    build_dashboard,
    get_cached_dashboard,
    invalidate_dashboard,
)


__all__ = [
    # Exceptions
    'LedgerServiceError',
    'ValidationError',
    'AuthorizationError',
    'NotFoundError',
    'PersistenceError',
    'InvalidReviewTransitionError',
    'PaymentInstructionError',
    'IncompletePayeeProfileError',
    'InvalidBankAccountError',
    'InvalidBankCodeError',
    'InvalidAmountError',
    'UpstreamServiceError',
    'QRServiceNotConfiguredError',

    # Normaliser
    'normalize_account_name',
    'normalize_memo',

    # Bank directory
    'BankInfo',
    'get_bank_directory',
    'lookup_bank',

    # Debt ledger
    'create_expense',
    'get_owned_expenses',
    'get_debts_for_debtor',
    'get_expense_for_user',
    'get_debt_for_user',
    'set_debt_paid_status',

    # Payment instructions
    'PaymentPayload',
    'build_payment_instruction',
    'request_payment_qr',
    'VietQRClient',
    'QRCodeResult',
    'render_qr_png',

    # Settlement review
    'review_debt_payment',
    'get_review_state',

    # Dashboard
    'build_dashboard',
    'get_cached_dashboard',
    'invalidate_dashboard',
]
