"""
Domain exceptions for payments app.

Webhook errors are plain service exceptions; the webhook view decides
the HTTP answer Stripe sees. Checkout errors are ``APIException``
subclasses rendered by the project exception handler.
"""
from rest_framework.exceptions import APIException


class PaymentsServiceError(Exception):
    """Base exception for payments services."""
    pass


class WebhookError(PaymentsServiceError):
    """Base exception for Stripe webhook processing."""
    pass


class InvalidSignature(WebhookError):
    """Raised when the stripe-signature header is missing or does not verify."""
    pass


class WebhookIgnored(WebhookError):
    """
    Raised for events that can never succeed on retry.

    Examples: missing metadata, unknown gift item or voucher, a partial
    refund, a refund of a redeemed voucher. Stripe gets a 200 so it stops
    retrying.
    """
    pass


class PaymentGatewayError(PaymentsServiceError):
    """Raised when a Stripe API call fails."""
    pass


class CheckoutNotPaid(APIException):
    """Checkout session exists but payment has not completed."""
    status_code = 400
    default_detail = 'Payment has not been completed.'
    default_code = 'payment_not_completed'


class CheckoutUnavailable(APIException):
    """Stripe could not be reached."""
    status_code = 502
    default_detail = 'Payment provider is unavailable. Please try again.'
    default_code = 'payment_gateway_error'
