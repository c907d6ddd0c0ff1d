"""Merchant notification emails. Sending is best-effort."""

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def send_merchant_approved_email(merchant, temp_password: str) -> bool:
    """Send login details to a newly approved merchant."""
    message = (
        f"Hi {merchant.name},\n\n"
        "Great news! Your business has been approved on Brontie.\n\n"
        f"Log in at {settings.SITE_URL}/cafes/login with:\n"
        f"  Email: {merchant.contact_email}\n"
        f"  Temporary password: {temp_password}\n\n"
        "You will be asked to choose a new password on first login.\n\n"
        "The Brontie team"
    )
    try:
        send_mail(
            subject='Your Brontie account has been approved',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[merchant.contact_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error('Failed to send approval email to merchant %s: %s', merchant.id, e)
        return False
    logger.info('Approval email sent to merchant %s', merchant.id)
    return True


def send_merchant_denied_email(merchant, reason: str = '') -> bool:
    """Tell an applicant their application was not accepted."""
    message = (
        f"Hi {merchant.name},\n\n"
        "Thank you for applying to Brontie. Unfortunately we cannot approve "
        "your application at this time.\n"
    )
    if reason:
        message += f"\nReason: {reason}\n"
    message += "\nReply to this email if you have any questions.\n\nThe Brontie team"
    try:
        send_mail(
            subject='Your Brontie application',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[merchant.contact_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error('Failed to send denial email to merchant %s: %s', merchant.id, e)
        return False
    logger.info('Denial email sent to merchant %s', merchant.id)
    return True


def send_merchant_signup_email(merchant) -> bool:
    """Confirm to an applicant that their application was received."""
    message = (
        f"Hi {merchant.name},\n\n"
        "Thanks for applying to sell on Brontie. We will review your "
        "application and email you once it has been approved.\n\n"
        "The Brontie team"
    )
    try:
        send_mail(
            subject='We received your Brontie application',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[merchant.contact_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error('Failed to send signup email to merchant %s: %s', merchant.id, e)
        return False
    logger.info('Signup email sent to merchant %s', merchant.id)
    return True


def send_admin_signup_notification(merchant) -> bool:
    """Tell the Brontie team a new café is waiting for review."""
    lines = [
        f"New café application: {merchant.name}",
        "",
        f"Email: {merchant.contact_email}",
        f"Address: {merchant.address}, {merchant.county}",
        f"Category: {merchant.business_category}",
        f"Phone: {merchant.contact_phone or '-'}",
        f"Website: {merchant.website or '-'}",
        "",
        "Gift items:",
    ]
    for item in merchant.gift_items.select_related('category'):
        lines.append(f"  - {item.name} ({item.category.name}): {item.price} EUR")
    lines += ["", f"Merchant ID: {merchant.id}"]
    try:
        send_mail(
            subject=f'New café application: {merchant.name}',
            message='\n'.join(lines),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[settings.ADMIN_NOTIFICATION_EMAIL],
            fail_silently=False,
        )
    except Exception as e:
        logger.error('Failed to send signup notification for merchant %s: %s', merchant.id, e)
        return False
    return True


def send_password_reset_email(merchant, token: str) -> bool:
    """Send the password reset link. It expires after one hour."""
    reset_url = f"{settings.SITE_URL}/cafes/reset-password?token={token}"
    message = (
        f"Hello {merchant.name},\n\n"
        "We received a request to reset the password for your Brontie café "
        "account. Use the link below to choose a new one:\n\n"
        f"{reset_url}\n\n"
        "This link will expire in 1 hour.\n\n"
        "If you didn't request a password reset, you can ignore this email. "
        "Your password will remain unchanged.\n\n"
        "The Brontie team"
    )
    try:
        send_mail(
            subject='Reset your Brontie café password',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[merchant.contact_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error('Failed to send password reset email to merchant %s: %s', merchant.id, e)
        return False
    logger.info('Password reset email sent to merchant %s', merchant.id)
    return True
