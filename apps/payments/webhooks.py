"""
Stripe webhook processing.

Events are dispatched through a registry of event type (or ``prefix.``)
to handler. Each handler runs inside one database transaction and either
returns a short result string, raises ``WebhookIgnored`` for events that
can never succeed, or lets any other exception escape so Stripe retries.
"""

import logging
import uuid
from collections.abc import Callable
from typing import Any

from django.db import transaction

from apps.merchants.models import GiftItem
from apps.merchants.services import sync_stripe_account
from apps.vouchers.exceptions import VoucherNotFound, InvalidVoucherTransition
from apps.vouchers.fees import from_cents
from apps.vouchers.models import VoucherStatus
from apps.vouchers.services import (
    find_by_payment_intent,
    issue_voucher,
    confirm_voucher,
    link_referral,
    refund_voucher,
    dispute_voucher,
)

from .emails import send_payment_success_email
from .exceptions import WebhookIgnored
from .gateway import StripeGateway

logger = logging.getLogger(__name__)


StripeEventHandler = Callable[[str, dict[str, Any]], str]


def _object_id(value):
    """Stripe fields may hold an id or an expanded object."""
    if isinstance(value, dict):
        return value.get('id')
    return value


class StripeWebhookProcessor:
    """
    Translate Stripe events into voucher, ledger and merchant changes.

    Handles:
    - checkout.session.completed -> create or confirm the voucher
    - charge.refunded -> refund the voucher (full refunds only)
    - charge.dispute.* -> mark the voucher disputed
    - account.updated -> sync Stripe Connect flags onto the merchant
    """

    def __init__(self, gateway: StripeGateway):
        self.gateway = gateway
        # Exact event types, or prefixes ending with '.'
        self._event_handlers: dict[str, StripeEventHandler] = {
            'checkout.session.completed': self.handle_checkout_completed,
            'charge.refunded': self.handle_charge_refunded,
            'charge.dispute.': self.handle_charge_dispute,
            'account.updated': self.handle_account_updated,
        }

    def process(self, payload: bytes, signature: str) -> str:
        """Verify and dispatch a raw webhook request."""
        event = self.gateway.construct_event(payload, signature)
        return self.dispatch(event)

    def dispatch(self, event: dict[str, Any]) -> str:
        event_type = str(event.get('type', ''))
        obj = (event.get('data') or {}).get('object') or {}

        handler = self._find_event_handler(event_type)
        if handler is None:
            logger.info('Skipping unhandled Stripe event %s (%s)', event_type, event.get('id'))
            return 'skipped'

        with transaction.atomic():
            result = handler(event_type, obj)
        logger.info('Stripe event %s (%s): %s', event_type, event.get('id'), result)
        return result

    def _find_event_handler(self, event_type: str) -> StripeEventHandler | None:
        handler = self._event_handlers.get(event_type)
        if handler:
            return handler
        for prefix, prefix_handler in self._event_handlers.items():
            if prefix.endswith('.') and event_type.startswith(prefix):
                return prefix_handler
        return None

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def handle_checkout_completed(self, event_type: str, session: dict[str, Any]) -> str:
        """
        Create the voucher for a completed checkout, or confirm it on replay.

        A voucher that already exists for the payment intent (a pending
        placeholder from the success page, or this same event delivered
        again) is confirmed instead of duplicated.
        """
        metadata = session.get('metadata') or {}
        gift_item_id = metadata.get('giftItemId')
        if not gift_item_id:
            raise WebhookIgnored(f"Checkout session {session.get('id')} has no giftItemId")

        try:
            gift_item_uuid = uuid.UUID(str(gift_item_id))
        except ValueError:
            raise WebhookIgnored(f'Invalid giftItemId {gift_item_id!r}')
        gift_item = GiftItem.objects.select_related('merchant').filter(id=gift_item_uuid).first()
        if gift_item is None:
            raise WebhookIgnored(f'Gift item {gift_item_id} not found')

        payment_intent_id = _object_id(session.get('payment_intent'))
        if not payment_intent_id:
            raise WebhookIgnored(f"Checkout session {session.get('id')} has no payment intent")

        customer_email = (
            (session.get('customer_details') or {}).get('email')
            or metadata.get('customerEmail')
            or ''
        )

        voucher = find_by_payment_intent(payment_intent_id, lock=True)
        if voucher is not None:
            # A pending placeholder was written by the success page, which
            # never sends the receipt. Anything else is a replay of this event.
            send_receipt = voucher.status == VoucherStatus.PENDING
            if voucher.stripe_fee is None:
                voucher.stripe_fee = self.gateway.get_stripe_fee(payment_intent_id, voucher.amount)
                voucher.save(update_fields=['stripe_fee', 'updated_at'])
            confirm_voucher(voucher=voucher, email=customer_email)
            result = f'confirmed voucher {voucher.redemption_code}'
        else:
            amount = from_cents(session.get('amount_total'))
            voucher = issue_voucher(
                gift_item=gift_item,
                amount=amount,
                payment_intent_id=payment_intent_id,
                stripe_fee=self.gateway.get_stripe_fee(payment_intent_id, amount),
                status=VoucherStatus.ISSUED,
                email=customer_email,
                sender_name=metadata.get('senderName', ''),
                recipient_name=metadata.get('recipientName', ''),
                recipient_email=metadata.get('recipientEmail', ''),
                product_sku=metadata.get('productSku', ''),
                recipient_token=metadata.get('recipientToken') or None,
            )
            send_receipt = True
            result = f'issued voucher {voucher.redemption_code}'

        ref_token = metadata.get('refToken')
        if ref_token and metadata.get('recipientToken'):
            link_referral(ref_token=ref_token, sender_email=customer_email)

        if not send_receipt:
            return result
        if customer_email:
            send_payment_success_email(voucher, customer_email)
        else:
            logger.info('No customer email for voucher %s, skipping receipt', voucher.redemption_code)

        return result

    def handle_charge_refunded(self, event_type: str, charge: dict[str, Any]) -> str:
        """Refund the voucher when the whole charge was refunded."""
        amount = charge.get('amount') or 0
        amount_refunded = charge.get('amount_refunded') or 0
        if not amount_refunded or amount_refunded < amount:
            raise WebhookIgnored(
                f"Partial refund on charge {charge.get('id')} ({amount_refunded}/{amount}), voucher unchanged"
            )

        payment_intent_id = _object_id(charge.get('payment_intent'))
        if not payment_intent_id:
            raise WebhookIgnored(f"Charge {charge.get('id')} has no payment intent")

        try:
            voucher, changed = refund_voucher(
                payment_intent_id=payment_intent_id,
                amount_refunded=from_cents(amount_refunded),
            )
        except VoucherNotFound:
            raise WebhookIgnored(f'No voucher for payment intent {payment_intent_id}')
        except InvalidVoucherTransition as e:
            raise WebhookIgnored(str(e)) from e

        if not changed:
            return f'voucher {voucher.redemption_code} already refunded'
        return f'refunded voucher {voucher.redemption_code}'

    def handle_charge_dispute(self, event_type: str, dispute: dict[str, Any]) -> str:
        """Mark the voucher behind a disputed charge as disputed."""
        payment_intent_id = _object_id(dispute.get('payment_intent'))
        if not payment_intent_id:
            charge_id = _object_id(dispute.get('charge'))
            if not charge_id:
                raise WebhookIgnored(f"Dispute {dispute.get('id')} has no charge")
            charge = self.gateway.retrieve_charge(charge_id)
            payment_intent_id = _object_id(charge.get('payment_intent'))
        if not payment_intent_id:
            raise WebhookIgnored(f"Dispute {dispute.get('id')} has no payment intent")

        try:
            voucher, changed = dispute_voucher(
                payment_intent_id=payment_intent_id,
                amount=from_cents(dispute.get('amount')),
            )
        except VoucherNotFound:
            raise WebhookIgnored(f'No voucher for payment intent {payment_intent_id}')

        if not changed:
            return f'voucher {voucher.redemption_code} already disputed'
        logger.warning(
            'Voucher %s disputed (%s, reason %s)',
            voucher.redemption_code, event_type, dispute.get('reason', '-'),
        )
        return f'disputed voucher {voucher.redemption_code}'

    def handle_account_updated(self, event_type: str, account: dict[str, Any]) -> str:
        """Copy Connect onboarding flags onto the merchant."""
        account_id = account.get('id')
        merchant = sync_stripe_account(
            account_id=account_id,
            details_submitted=account.get('details_submitted', False),
            charges_enabled=account.get('charges_enabled', False),
            payouts_enabled=account.get('payouts_enabled', False),
        ) if account_id else None
        if merchant is None:
            raise WebhookIgnored(f'No merchant for Stripe account {account_id}')
        return f'synced merchant {merchant.id}'
