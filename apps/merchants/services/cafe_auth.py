"""Café portal sign-in and password changes."""

from django.db import transaction

from ..exceptions import InvalidCredentials, PasswordChangeRequired, MerchantNotFound
from ..models import Merchant, MerchantStatus


def _approved_merchant(email: str):
    return (
        Merchant.objects
        .filter(contact_email__iexact=email.strip(), status=MerchantStatus.APPROVED)
        .first()
    )


def authenticate_merchant(*, email: str, password: str) -> Merchant:
    """
    Check café portal credentials.

    Only approved merchants can sign in. A merchant who has never set a
    password signs in with the temporary one from the approval email and
    must change it before a session is issued.

    Args:
        email: Merchant contact email (case-insensitive).
        password: Password or temporary password.

    Returns:
        Merchant: The authenticated merchant.

    Raises:
        InvalidCredentials: Unknown email, unapproved merchant or wrong password.
        PasswordChangeRequired: Temporary password matched; no session yet.
    """
    merchant = _approved_merchant(email)
    if merchant is None:
        raise InvalidCredentials()

    if not merchant.has_usable_password():
        if merchant.check_temp_password(password):
            raise PasswordChangeRequired()
        raise InvalidCredentials('Invalid credentials.')

    if not merchant.check_password(password):
        raise InvalidCredentials('Invalid credentials.')

    return merchant


@transaction.atomic
def change_merchant_password(*, email: str, current_password: str, new_password: str) -> Merchant:
    """
    Replace a merchant's password, accepting the temporary one as current.

    The temporary password is cleared once a real one is set.

    Raises:
        MerchantNotFound: No approved merchant with that email.
        InvalidCredentials: Current password does not match.
    """
    merchant = _approved_merchant(email)
    if merchant is None:
        raise MerchantNotFound('Merchant not found or not approved.')

    valid = (
        merchant.check_temp_password(current_password)
        or merchant.check_password(current_password)
    )
    if not valid:
        raise InvalidCredentials('Current password is incorrect.')

    merchant.set_password(new_password)
    merchant.temp_password = ''
    merchant.save(update_fields=['password', 'temp_password', 'updated_at'])
    return merchant
