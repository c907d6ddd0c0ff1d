"""Voucher redemption at a merchant location."""

import logging

from django.db import transaction
from django.utils import timezone

from apps.merchants.models import MerchantLocation

from ..exceptions import (
    VoucherNotFound,
    LocationNotFound,
    AlreadyRedeemed,
    PaymentProcessing,
    VoucherRefunded,
    VoucherNotRedeemable,
    LocationNotValid,
)
from ..models import Voucher, VoucherStatus, RedemptionLog
from . import ledger

logger = logging.getLogger(__name__)


def ensure_redeemable(voucher: Voucher) -> None:
    """
    Raise the error matching the first status that blocks redemption.

    Checks run in a fixed order so a client always sees the same error
    for the same voucher state.

    Raises:
        AlreadyRedeemed: Status is ``redeemed``.
        PaymentProcessing: Status is ``pending`` or ``issued``.
        VoucherRefunded: Status is ``refunded``.
        VoucherNotRedeemable: Status is ``disputed`` or ``expired``, or
            the voucher is past its expiry date.
    """
    status = voucher.status
    if status == VoucherStatus.REDEEMED:
        raise AlreadyRedeemed()
    if status in (VoucherStatus.PENDING, VoucherStatus.ISSUED):
        raise PaymentProcessing()
    if status == VoucherStatus.REFUNDED:
        raise VoucherRefunded()
    if status in (VoucherStatus.DISPUTED, VoucherStatus.EXPIRED):
        raise VoucherNotRedeemable()
    if voucher.expires_at and voucher.expires_at <= timezone.now():
        raise VoucherNotRedeemable('This voucher has expired.')


@transaction.atomic
def redeem_voucher(*, code: str, merchant_location_id) -> tuple:
    """
    Redeem a voucher at the scanned merchant location.

    The status change is a single conditional UPDATE (``status =
    unredeemed`` in the WHERE clause), so of two concurrent scans only
    one can win. The loser re-reads the voucher and gets the matching
    precondition error. Everything written here shares one database
    transaction: the status change, the redemption log, the
    ``redemption`` and ``purchase`` ledger entries and the pending
    payout item.

    Args:
        code: The voucher's redemption code.
        merchant_location_id: UUID of the location whose QR code was scanned.

    Returns:
        tuple: (Voucher, MerchantLocation) after redemption.

    Raises:
        VoucherNotFound: No voucher with that code.
        AlreadyRedeemed, PaymentProcessing, VoucherRefunded,
        VoucherNotRedeemable: See ``ensure_redeemable``.
        LocationNotFound: No location with that id.
        LocationNotValid: Location is not in the voucher's valid locations.

    Example:
        voucher, location = redeem_voucher(
            code='aB3dE5fG7h',
            merchant_location_id=location.id,
        )
    """
    voucher = (
        Voucher.objects
        .select_related('gift_item__merchant')
        .filter(redemption_code=code)
        .first()
    )
    if voucher is None:
        raise VoucherNotFound()

    ensure_redeemable(voucher)

    location = MerchantLocation.objects.filter(id=merchant_location_id).first()
    if location is None:
        raise LocationNotFound()

    if not voucher.valid_locations.filter(id=location.id).exists():
        logger.warning(
            'Voucher %s scanned at location %s outside its valid locations',
            voucher.redemption_code, location.id,
        )
        raise LocationNotValid()

    now = timezone.now()
    updated = (
        Voucher.objects
        .filter(id=voucher.id, status=VoucherStatus.UNREDEEMED)
        .update(status=VoucherStatus.REDEEMED, redeemed_at=now, updated_at=now)
    )
    if not updated:
        # Lost the race: another request changed the status first
        voucher.refresh_from_db(fields=['status'])
        ensure_redeemable(voucher)
        raise AlreadyRedeemed()

    voucher.status = VoucherStatus.REDEEMED
    voucher.redeemed_at = now

    RedemptionLog.objects.create(voucher=voucher, merchant_location=location, timestamp=now)
    ledger.record_redemption(voucher)
    ledger.record_settlement(voucher)

    logger.info(
        'Voucher %s redeemed at %s (%s)',
        voucher.redemption_code, location.name, location.id,
    )
    return voucher, location
