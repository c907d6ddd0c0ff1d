"""Payout bookkeeping for merchant settlements."""

import logging

from django.db import transaction
from django.utils import timezone

from ..exceptions import PayoutItemNotFound
from ..models import PayoutItem, PayoutStatus

logger = logging.getLogger(__name__)


@transaction.atomic
def mark_payouts_paid(*, payout_item_ids, transfer_id: str = '') -> int:
    """
    Mark pending payout items as paid after a manual bank transfer.

    Items that are already paid or reversed are skipped, so the same
    request can be retried safely.

    Args:
        payout_item_ids: Iterable of PayoutItem UUIDs.
        transfer_id: Bank or Stripe transfer reference.

    Returns:
        int: Number of items that changed to ``paid``.

    Raises:
        PayoutItemNotFound: None of the ids exist.
    """
    ids = list(payout_item_ids)
    if not PayoutItem.objects.filter(id__in=ids).exists():
        raise PayoutItemNotFound()

    now = timezone.now()
    updated = (
        PayoutItem.objects
        .filter(id__in=ids, status=PayoutStatus.PENDING)
        .update(
            status=PayoutStatus.PAID,
            paid_out_at=now,
            transfer_id=transfer_id,
            updated_at=now,
        )
    )
    logger.info('Marked %s payout item(s) paid (transfer %s)', updated, transfer_id or '-')
    return updated
