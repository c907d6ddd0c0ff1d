"""Café portal password reset."""

import hashlib
import logging
import secrets
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from ..exceptions import MerchantNotFound, InvalidResetToken
from ..models import Merchant, MerchantStatus

logger = logging.getLogger(__name__)

RESET_TOKEN_LIFETIME = timedelta(hours=1)


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _valid_reset_tokens(token: str):
    return Merchant.objects.filter(
        reset_token_hash=_hash_token(token),
        reset_token_expires_at__gt=timezone.now(),
    )


@transaction.atomic
def request_password_reset(*, email: str) -> tuple:
    """
    Generate a password reset token for an approved merchant.

    Only the token's hash is stored. A new request replaces any earlier
    token.

    Args:
        email: Merchant contact email (case-insensitive).

    Returns:
        tuple: (Merchant, token) with the raw token for the reset link.

    Raises:
        MerchantNotFound: No approved merchant with that email.
    """
    merchant = (
        Merchant.objects
        .select_for_update()
        .filter(contact_email__iexact=email.strip(), status=MerchantStatus.APPROVED)
        .first()
    )
    if merchant is None:
        raise MerchantNotFound('Merchant not found or not approved.')

    token = secrets.token_urlsafe(32)
    merchant.reset_token_hash = _hash_token(token)
    merchant.reset_token_expires_at = timezone.now() + RESET_TOKEN_LIFETIME
    merchant.save(update_fields=['reset_token_hash', 'reset_token_expires_at', 'updated_at'])

    logger.info('Password reset requested for merchant %s', merchant.id)
    return merchant, token


def verify_reset_token(*, token: str) -> Merchant:
    """
    Return the merchant a reset token belongs to.

    Raises:
        InvalidResetToken: Token unknown or expired.
    """
    merchant = _valid_reset_tokens(token).first() if token else None
    if merchant is None:
        raise InvalidResetToken()
    return merchant


@transaction.atomic
def confirm_password_reset(*, token: str, new_password: str) -> Merchant:
    """
    Set a new password with a reset token.

    The token is single-use, and any temporary password from approval
    is cleared.

    Raises:
        InvalidResetToken: Token unknown or expired.
    """
    merchant = _valid_reset_tokens(token).select_for_update().first() if token else None
    if merchant is None:
        raise InvalidResetToken()

    merchant.set_password(new_password)
    merchant.temp_password = ''
    merchant.reset_token_hash = ''
    merchant.reset_token_expires_at = None
    merchant.save(update_fields=[
        'password', 'temp_password', 'reset_token_hash', 'reset_token_expires_at', 'updated_at'
    ])

    logger.info('Password reset completed for merchant %s', merchant.id)
    return merchant
