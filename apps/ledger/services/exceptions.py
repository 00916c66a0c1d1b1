"""
Domain-specific exceptions for the ledger app.

These exceptions represent business rule violations and upstream failures.
Views catch them and convert them to HTTP responses; every one carries a
human-readable message.
"""


class LedgerServiceError(Exception):
    """Base exception for all ledger service errors."""
    pass


class ValidationError(LedgerServiceError):
    """Raised when input is malformed or missing (user-correctable)."""
    pass


class AuthorizationError(LedgerServiceError):
    """Raised when the caller does not hold rights on the target entity."""
    pass


class NotFoundError(LedgerServiceError):
    """Raised when a referenced expense or debt does not exist."""
    pass


class PersistenceError(LedgerServiceError):
    """Raised when the database rejects a write."""
    pass


class InvalidReviewTransitionError(ValidationError):
    """Raised when an owner review status change is not allowed."""
    pass


# Payment payload preconditions

class PaymentInstructionError(LedgerServiceError):
    """Base for errors that prevent building a payment payload."""
    pass


class IncompletePayeeProfileError(PaymentInstructionError):
    """Raised when the payee has not filled in all bank details."""
    pass


class InvalidBankAccountError(PaymentInstructionError):
    """Raised when the payee account number is not 6-19 digits."""
    pass


class InvalidBankCodeError(PaymentInstructionError):
    """Raised when the payee bank code is not a 6-digit BIN."""
    pass


class InvalidAmountError(PaymentInstructionError):
    """Raised when the owed amount cannot be paid by transfer."""
    pass


# Upstream services

class UpstreamServiceError(LedgerServiceError):
    """Raised when the bank directory or QR service fails or refuses a request."""

    def __init__(self, message, *, code=None, details=None):
        super().__init__(message)
        self.code = code
        self.details = details


class QRServiceNotConfiguredError(UpstreamServiceError):
    """Raised when VietQR credentials are missing."""
    pass
