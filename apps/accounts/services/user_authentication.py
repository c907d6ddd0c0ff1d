"""Staff authentication service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError, NotStaffError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def authenticate_staff(*, email: str, password: str) -> User:
    """
    Authenticate a back-office user with email and password.

    Uses select_for_update() to prevent race conditions when updating last_login.

    Args:
        email: User's email
        password: User's password

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
        NotStaffError: If the user is not staff
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email__iexact=email)
        )
    except User.DoesNotExist:
        raise InvalidCredentialsError("Invalid email or password")

    if not user.check_password(password):
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    if not user.is_staff:
        logger.warning('Non-staff user %s tried to sign in to the back-office', user.id)
        raise NotStaffError("Staff access required")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return user
