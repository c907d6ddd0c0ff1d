"""
Voucher lifecycle transitions driven by payments.

Vouchers only move forward: issued/pending -> unredeemed -> redeemed,
with refund and dispute as the two side branches. Redemption lives in
``redemption.py``; everything else that changes a voucher's status is
here so the transition rules are enforced in one place.
"""

import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import VoucherNotFound, InvalidVoucherTransition
from ..models import Voucher, VoucherStatus, ACTIVE_STATUSES
from . import ledger

logger = logging.getLogger(__name__)


def find_by_payment_intent(payment_intent_id, *, lock=False):
    """Return the voucher for a Stripe payment intent, or None."""
    if not payment_intent_id:
        return None
    queryset = Voucher.objects.select_related('gift_item__merchant')
    if lock:
        queryset = queryset.select_for_update()
    return queryset.filter(payment_intent_id=payment_intent_id).first()


@transaction.atomic
def issue_voucher(
    *,
    gift_item,
    amount,
    payment_intent_id=None,
    stripe_fee=None,
    status=VoucherStatus.ISSUED,
    email='',
    sender_name='',
    recipient_name='',
    recipient_email='',
    product_sku='',
    recipient_token=None,
) -> Voucher:
    """
    Create a voucher for a paid (or paying) checkout.

    The valid locations are copied from the gift item's active
    locations at this moment; later changes to the item do not reach
    vouchers already sold.

    Args:
        gift_item: The GiftItem bought.
        amount: Gross amount paid, in euro.
        payment_intent_id: Stripe payment intent id, unique per voucher.
        stripe_fee: Stripe's fee for the charge, if known.
        status: ``issued`` from the webhook, ``pending`` for a
            placeholder created before the webhook arrived.
        email, sender_name, recipient_name, recipient_email: Customer data.
        product_sku: SKU copied from checkout metadata.
        recipient_token: Referral token handed to the recipient.

    Returns:
        Voucher: The new voucher with code and expiry filled in.
    """
    voucher = Voucher.objects.create(
        gift_item=gift_item,
        status=status,
        amount=amount,
        amount_gross=amount,
        stripe_fee=stripe_fee,
        payment_intent_id=payment_intent_id,
        email=email or '',
        sender_name=sender_name or '',
        recipient_name=recipient_name or '',
        recipient_email=recipient_email or '',
        product_sku=product_sku or '',
        recipient_token=recipient_token or None,
    )
    voucher.valid_locations.set(gift_item.locations.filter(is_active=True))

    logger.info(
        'Voucher %s issued (%s) for gift item %s, payment intent %s',
        voucher.redemption_code, status, gift_item.id, payment_intent_id,
    )
    return voucher


@transaction.atomic
def confirm_voucher(*, voucher: Voucher, email: str = '') -> Voucher:
    """
    Confirm payment for a voucher: issued/pending become unredeemed.

    Safe to call again for the same voucher; a voucher already past
    confirmation keeps its status and only gets a missing email filled.
    """
    now = timezone.now()
    fields = []
    if voucher.status in (VoucherStatus.ISSUED, VoucherStatus.PENDING):
        voucher.status = VoucherStatus.UNREDEEMED
        voucher.confirmed_at = now
        fields += ['status', 'confirmed_at']
    else:
        logger.info(
            'Voucher %s already %s, confirmation leaves status unchanged',
            voucher.redemption_code, voucher.status,
        )
    if email and not voucher.email:
        voucher.email = email
        fields.append('email')
    if fields:
        voucher.save(update_fields=fields + ['updated_at'])
    return voucher


@transaction.atomic
def link_referral(*, ref_token: str, sender_email: str = ''):
    """
    Mark the voucher whose recipient went on to buy a gift themselves.

    Returns:
        Voucher | None: The referring voucher, or None if the token is unknown.
    """
    referring = Voucher.objects.filter(recipient_token=ref_token).first()
    if referring is None:
        logger.warning('Referral token %s does not match any voucher', ref_token)
        return None
    referring.recipient_became_sender = True
    referring.recipient_linked_sender_email = sender_email or ''
    referring.save(update_fields=[
        'recipient_became_sender', 'recipient_linked_sender_email', 'updated_at'
    ])
    return referring


@transaction.atomic
def refund_voucher(*, payment_intent_id: str, amount_refunded) -> tuple:
    """
    Move a voucher to ``refunded`` and write the refund ledger entry.

    A redeemed voucher is never refunded: the goods were handed over and
    the merchant is owed the payout. A voucher already refunded is left
    alone so a replayed event does not write a second entry.

    Args:
        payment_intent_id: Stripe payment intent of the refunded charge.
        amount_refunded: Refunded amount in euro.

    Returns:
        tuple: (Voucher, bool) where the flag says whether anything changed.

    Raises:
        VoucherNotFound: No voucher for the payment intent.
        InvalidVoucherTransition: The voucher is redeemed.
    """
    voucher = find_by_payment_intent(payment_intent_id, lock=True)
    if voucher is None:
        raise VoucherNotFound()

    if voucher.status == VoucherStatus.REFUNDED:
        return voucher, False
    if not voucher.can_transition_to(VoucherStatus.REFUNDED):
        raise InvalidVoucherTransition(
            f'Voucher {voucher.redemption_code} is {voucher.status} and cannot be refunded'
        )

    now = timezone.now()
    updated = (
        Voucher.objects
        .filter(id=voucher.id)
        .exclude(status__in=[VoucherStatus.REDEEMED, VoucherStatus.REFUNDED])
        .update(status=VoucherStatus.REFUNDED, refunded_at=now, updated_at=now)
    )
    if not updated:
        voucher.refresh_from_db(fields=['status'])
        if voucher.status == VoucherStatus.REFUNDED:
            return voucher, False
        raise InvalidVoucherTransition(
            f'Voucher {voucher.redemption_code} is {voucher.status} and cannot be refunded'
        )

    voucher.status = VoucherStatus.REFUNDED
    voucher.refunded_at = now
    ledger.record_refund(voucher, amount_refunded)
    return voucher, True


@transaction.atomic
def dispute_voucher(*, payment_intent_id: str, amount) -> tuple:
    """
    Move a voucher to ``disputed`` and write a failed purchase entry.

    Follow-up events for the same dispute (``updated``, ``closed``) find
    the voucher already disputed and write nothing.

    Returns:
        tuple: (Voucher, bool) where the flag says whether anything changed.

    Raises:
        VoucherNotFound: No voucher for the payment intent.
    """
    voucher = find_by_payment_intent(payment_intent_id, lock=True)
    if voucher is None:
        raise VoucherNotFound()

    if voucher.status == VoucherStatus.DISPUTED:
        return voucher, False

    voucher.status = VoucherStatus.DISPUTED
    voucher.disputed_at = timezone.now()
    voucher.save(update_fields=['status', 'disputed_at', 'updated_at'])
    ledger.record_dispute(voucher, amount)
    return voucher, True


@transaction.atomic
def expire_vouchers(*, now=None, dry_run=False) -> int:
    """
    Move unused vouchers past their expiry date to ``expired``.

    Only issued, pending and unredeemed vouchers expire. Redeemed,
    refunded and disputed ones keep their status whatever the date.

    Args:
        now: Reference time, defaults to the current time.
        dry_run: Count the vouchers that would expire without changing them.

    Returns:
        int: Number of vouchers expired (or that would be).
    """
    now = now or timezone.now()
    queryset = Voucher.objects.filter(status__in=ACTIVE_STATUSES, expires_at__lte=now)
    if dry_run:
        return queryset.count()

    expired = queryset.update(status=VoucherStatus.EXPIRED, updated_at=now)
    if expired:
        logger.info('Expired %s voucher(s) past their expiry date', expired)
    return expired
