"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    IncompleteBankInfoError,
    MissingEmailError,
)
from .user_registration import register_user
from .user_authentication import authenticate_user
from .profile_management import (
    update_bank_info,
    get_profile,
    get_member_options,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'IncompleteBankInfoError',
    'MissingEmailError',
    # Services
    'register_user',
    'authenticate_user',
    'update_bank_info',
    'get_profile',
    'get_member_options',
]
