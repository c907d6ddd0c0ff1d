"""Customer emails sent after payment. Sending is best-effort."""

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def voucher_url(voucher) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/voucher/{voucher.redemption_code}"


def send_payment_success_email(voucher, email: str) -> bool:
    """Send the buyer a receipt with the voucher link to pass on."""
    gift_item = voucher.gift_item
    recipient = voucher.recipient_name or 'your friend'
    message = (
        f"Hi {voucher.sender_name or 'there'},\n\n"
        f"Thanks for your purchase! Your gift of {gift_item.name} "
        f"({gift_item.price} EUR) at {gift_item.merchant.name} is ready.\n\n"
        f"Share this link with {recipient}:\n"
        f"{voucher_url(voucher)}\n\n"
        "The voucher is redeemed by scanning the QR code in store.\n\n"
        "The Brontie team"
    )
    try:
        send_mail(
            subject=f'Your Brontie gift: {gift_item.name}',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error('Failed to send payment success email for voucher %s: %s', voucher.id, e)
        return False
    logger.info('Payment success email sent for voucher %s', voucher.id)
    return True
