"""Merchant approval, fee settings and Stripe Connect sync."""

import logging
import secrets
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from ..emails import send_merchant_approved_email, send_merchant_denied_email
from ..exceptions import MerchantNotFound, InvalidMerchantTransition
from ..models import Merchant, MerchantStatus

logger = logging.getLogger(__name__)


def _get_merchant(merchant_id, *, lock=False):
    queryset = Merchant.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(id=merchant_id)
    except Merchant.DoesNotExist:
        raise MerchantNotFound()


def generate_temp_password() -> str:
    return secrets.token_urlsafe(9)


@transaction.atomic
def approve_merchant(*, merchant_id):
    """
    Approve a merchant application and issue a temporary password.

    The temporary password is only stored hashed; the plain value goes
    out in the approval email. Email failure does not undo approval.

    Args:
        merchant_id: UUID of the merchant.

    Returns:
        tuple: (Merchant, bool) where the flag says whether the email went out.

    Raises:
        MerchantNotFound: Unknown merchant.
        InvalidMerchantTransition: Merchant is already approved.
    """
    merchant = _get_merchant(merchant_id, lock=True)
    if merchant.status == MerchantStatus.APPROVED:
        raise InvalidMerchantTransition('Merchant is already approved.')

    temp_password = generate_temp_password()
    merchant.status = MerchantStatus.APPROVED
    merchant.is_active = True
    merchant.set_temp_password(temp_password)
    merchant.save(update_fields=['status', 'is_active', 'temp_password', 'updated_at'])
    logger.info('Merchant %s (%s) approved', merchant.id, merchant.name)

    email_sent = send_merchant_approved_email(merchant, temp_password)
    return merchant, email_sent


@transaction.atomic
def deny_merchant(*, merchant_id, reason: str = ''):
    """
    Deny a merchant application.

    Returns:
        tuple: (Merchant, bool) where the flag says whether the email went out.

    Raises:
        MerchantNotFound: Unknown merchant.
        InvalidMerchantTransition: Merchant is already denied.
    """
    merchant = _get_merchant(merchant_id, lock=True)
    if merchant.status == MerchantStatus.DENIED:
        raise InvalidMerchantTransition('Merchant is already denied.')

    merchant.status = MerchantStatus.DENIED
    merchant.is_active = False
    merchant.save(update_fields=['status', 'is_active', 'updated_at'])
    logger.info('Merchant %s (%s) denied', merchant.id, merchant.name)

    email_sent = send_merchant_denied_email(merchant, reason)
    return merchant, email_sent


@transaction.atomic
def set_brontie_fee(*, merchant_id, is_active: bool, commission_rate=None, reason: str = '') -> Merchant:
    """
    Switch the Brontie commission on or off for a merchant.

    Args:
        merchant_id: UUID of the merchant.
        is_active: New fee state.
        commission_rate: Optional new rate (0..1); kept when None.
        reason: Why the fee was switched off; stored on deactivation.

    Returns:
        Merchant: The updated merchant.
    """
    merchant = _get_merchant(merchant_id, lock=True)
    now = timezone.now()

    if commission_rate is not None:
        merchant.commission_rate = Decimal(str(commission_rate))

    if is_active and not merchant.brontie_fee_active:
        merchant.brontie_fee_activated_at = now
        merchant.brontie_fee_deactivation_reason = ''
    elif not is_active and merchant.brontie_fee_active:
        merchant.brontie_fee_deactivated_at = now
        merchant.brontie_fee_deactivation_reason = reason
    merchant.brontie_fee_active = is_active

    merchant.save(update_fields=[
        'brontie_fee_active',
        'commission_rate',
        'brontie_fee_activated_at',
        'brontie_fee_deactivated_at',
        'brontie_fee_deactivation_reason',
        'updated_at',
    ])
    logger.info(
        'Brontie fee for merchant %s set to %s (rate %s)',
        merchant.id, 'active' if is_active else 'inactive', merchant.commission_rate,
    )
    return merchant


@transaction.atomic
def sync_stripe_account(*, account_id: str, details_submitted: bool, charges_enabled: bool,
                        payouts_enabled: bool):
    """
    Copy Stripe Connect account flags onto the merchant that owns it.

    Returns:
        Merchant | None: The updated merchant, or None if no merchant has
        this Stripe account.
    """
    merchant = Merchant.objects.select_for_update().filter(stripe_account_id=account_id).first()
    if merchant is None:
        return None

    merchant.stripe_details_submitted = bool(details_submitted)
    merchant.stripe_charges_enabled = bool(charges_enabled)
    merchant.stripe_payouts_enabled = bool(payouts_enabled)
    merchant.stripe_onboarding_completed = bool(details_submitted)
    merchant.stripe_is_connected = bool(details_submitted and charges_enabled)
    merchant.save(update_fields=[
        'stripe_details_submitted',
        'stripe_charges_enabled',
        'stripe_payouts_enabled',
        'stripe_onboarding_completed',
        'stripe_is_connected',
        'updated_at',
    ])
    return merchant
