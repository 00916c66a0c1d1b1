"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class IncompleteBankInfoError(AccountsServiceError):
    """Raised when a bank-info submission leaves a field empty."""
    pass


class MissingEmailError(AccountsServiceError):
    """Raised when a profile would be stored without an email."""
    pass
