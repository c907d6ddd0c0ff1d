"""Stripe hosted checkout for gift items."""

import logging
import secrets
import uuid

from django.db import transaction

from apps.merchants.exceptions import GiftItemNotFound
from apps.merchants.models import GiftItem
from apps.merchants.services import get_purchasable_gift_item
from apps.vouchers.fees import from_cents, to_cents
from apps.vouchers.models import VoucherStatus
from apps.vouchers.services import find_by_payment_intent, issue_voucher, confirm_voucher

from .exceptions import CheckoutNotPaid, CheckoutUnavailable, PaymentGatewayError
from .gateway import StripeGateway, get_gateway

logger = logging.getLogger(__name__)


def product_sku(gift_item) -> str:
    return f"GIFT-{gift_item.id.hex[:8].upper()}"


def create_checkout(
    *,
    gift_item_id,
    sender_name: str = '',
    recipient_name: str = '',
    sender_email: str = '',
    recipient_email: str = '',
    ref_token: str = '',
    gateway: StripeGateway | None = None,
) -> dict:
    """
    Start a Stripe Checkout Session for one gift item.

    Everything the webhook needs to build the voucher travels in the
    session metadata, including a fresh ``recipientToken`` that lets the
    recipient's own future purchase be linked back to this gift.

    Args:
        gift_item_id: UUID of the gift item.
        sender_name, recipient_name: Shown on the voucher.
        sender_email: Prefilled as the Stripe customer email.
        recipient_email: Stored on the voucher.
        ref_token: ``recipientToken`` of the voucher that led to this
            purchase, if any.
        gateway: Stripe gateway; built from settings when omitted.

    Returns:
        dict: ``{"sessionId": ..., "checkoutUrl": ...}``

    Raises:
        GiftItemNotFound: Unknown gift item.
        GiftItemUnavailable: Gift item is deactivated.
        CheckoutUnavailable: Stripe rejected or could not be reached.
    """
    gift_item = get_purchasable_gift_item(gift_item_id)
    gateway = gateway or get_gateway()
    site_url = gateway.config.site_url

    metadata = {
        'giftItemId': str(gift_item.id),
        'merchantId': str(gift_item.merchant_id),
        'senderName': sender_name,
        'recipientName': recipient_name,
        'customerEmail': sender_email,
        'recipientEmail': recipient_email,
        'productSku': product_sku(gift_item),
        'recipientToken': secrets.token_urlsafe(16),
        'refToken': ref_token,
    }
    product_data = {'name': gift_item.name}
    if gift_item.description:
        product_data['description'] = gift_item.description

    params = {
        'mode': 'payment',
        'line_items': [{
            'price_data': {
                'currency': gateway.config.currency,
                'product_data': product_data,
                'unit_amount': to_cents(gift_item.price),
            },
            'quantity': 1,
        }],
        'success_url': f'{site_url}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}',
        'cancel_url': f'{site_url}/product/{gift_item.id}',
        'metadata': {key: value for key, value in metadata.items() if value},
    }
    if sender_email:
        params['customer_email'] = sender_email

    try:
        session = gateway.create_checkout_session(**params)
    except PaymentGatewayError as e:
        raise CheckoutUnavailable() from e

    logger.info('Checkout session %s created for gift item %s', session.get('id'), gift_item.id)
    return {'sessionId': session.get('id'), 'checkoutUrl': session.get('url')}


@transaction.atomic
def confirm_checkout_success(*, session_id: str, gateway: StripeGateway | None = None):
    """
    Confirm the voucher when the buyer lands on the success page.

    The webhook usually arrives first and has created an ``issued``
    voucher, which is confirmed here. When the buyer is faster than the
    webhook, a ``pending`` placeholder is created from the session; the
    webhook then confirms it instead of creating a second voucher.

    Returns:
        Voucher: The confirmed or placeholder voucher.

    Raises:
        CheckoutUnavailable: Session could not be retrieved.
        CheckoutNotPaid: Session is not paid.
        GiftItemNotFound: Session metadata points at an unknown item.
    """
    gateway = gateway or get_gateway()
    try:
        session = gateway.retrieve_checkout_session(session_id)
    except PaymentGatewayError as e:
        raise CheckoutUnavailable() from e

    if session.get('payment_status') != 'paid':
        raise CheckoutNotPaid()

    payment_intent_id = session.get('payment_intent')
    if isinstance(payment_intent_id, dict):
        payment_intent_id = payment_intent_id.get('id')
    metadata = session.get('metadata') or {}
    customer_email = (
        (session.get('customer_details') or {}).get('email')
        or metadata.get('customerEmail')
        or ''
    )

    voucher = find_by_payment_intent(payment_intent_id, lock=True)
    if voucher is not None:
        if voucher.status == VoucherStatus.ISSUED:
            confirm_voucher(voucher=voucher, email=customer_email)
        return voucher

    try:
        gift_item_uuid = uuid.UUID(str(metadata.get('giftItemId')))
    except ValueError:
        raise GiftItemNotFound()
    gift_item = GiftItem.objects.select_related('merchant').filter(id=gift_item_uuid).first()
    if gift_item is None:
        raise GiftItemNotFound()
    amount = from_cents(session.get('amount_total'))
    voucher = issue_voucher(
        gift_item=gift_item,
        amount=amount,
        payment_intent_id=payment_intent_id,
        status=VoucherStatus.PENDING,
        email=customer_email,
        sender_name=metadata.get('senderName', ''),
        recipient_name=metadata.get('recipientName', ''),
        recipient_email=metadata.get('recipientEmail', ''),
        product_sku=metadata.get('productSku', ''),
        recipient_token=metadata.get('recipientToken') or None,
    )
    logger.info('Placeholder voucher %s created before webhook for %s', voucher.redemption_code, payment_intent_id)
    return voucher
