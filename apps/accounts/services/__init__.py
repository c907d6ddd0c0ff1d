"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    NotStaffError,
)
from .user_authentication import authenticate_staff

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'NotStaffError',
    # Services
    'authenticate_staff',
]
