"""
Thin wrapper over the Stripe API.

Every call passes the API key explicitly instead of setting
``stripe.api_key`` globally, so tests and management commands can run
gateways with different configs side by side.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal

import stripe
from django.conf import settings

from apps.vouchers.fees import estimate_stripe_fee, from_cents

from .exceptions import InvalidSignature, PaymentGatewayError

logger = logging.getLogger(__name__)


def _as_dict(obj) -> dict:
    """Turn a StripeObject (or plain dict) into a plain dict."""
    if obj is None:
        return {}
    to_dict = getattr(obj, 'to_dict', None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


@dataclass(frozen=True)
class StripeConfig:
    secret_key: str
    webhook_secret: str
    api_version: str
    currency: str = 'eur'
    site_url: str = 'http://localhost:8000'
    signature_tolerance: int = 300

    @classmethod
    def from_settings(cls):
        return cls(
            secret_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            api_version=settings.STRIPE_API_VERSION,
            currency=getattr(settings, 'STRIPE_CURRENCY', 'eur'),
            site_url=settings.SITE_URL.rstrip('/'),
        )


class StripeGateway:
    """Stripe calls used by checkout and webhooks."""

    def __init__(self, config: StripeConfig):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return bool(self.config.secret_key)

    def _request_options(self) -> dict:
        if not self.is_configured:
            raise PaymentGatewayError('STRIPE_SECRET_KEY is not configured')
        return {
            'api_key': self.config.secret_key,
            'stripe_version': self.config.api_version,
        }

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    def construct_event(self, payload: bytes, sig_header: str) -> dict:
        """
        Verify the ``stripe-signature`` header and parse the event.

        Args:
            payload: Raw request body, exactly as received.
            sig_header: Value of the ``stripe-signature`` header.

        Returns:
            dict: The parsed event.

        Raises:
            InvalidSignature: Header missing, secret not configured,
                signature mismatch, stale timestamp or unparsable body.
        """
        if not sig_header:
            raise InvalidSignature('Missing stripe-signature header')
        if not self.config.webhook_secret:
            logger.error('STRIPE_WEBHOOK_SECRET is not configured, rejecting webhook')
            raise InvalidSignature('Webhook secret not configured')

        body = payload.decode('utf-8') if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(
                body,
                sig_header,
                self.config.webhook_secret,
                self.config.signature_tolerance,
            )
        except stripe.SignatureVerificationError as e:
            raise InvalidSignature(str(e)) from e

        try:
            event = json.loads(body)
        except ValueError as e:
            raise InvalidSignature('Invalid JSON payload') from e
        if not isinstance(event, dict):
            raise InvalidSignature('Invalid event payload')
        return event

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    def create_checkout_session(self, **params) -> dict:
        """Create a hosted Checkout Session and return it as a dict."""
        try:
            session = stripe.checkout.Session.create(**params, **self._request_options())
        except stripe.StripeError as e:
            logger.error('Stripe checkout session creation failed: %s', e)
            raise PaymentGatewayError(str(e)) from e
        return _as_dict(session)

    def retrieve_checkout_session(self, session_id: str) -> dict:
        try:
            session = stripe.checkout.Session.retrieve(session_id, **self._request_options())
        except stripe.InvalidRequestError as e:
            logger.warning('Checkout session %s not found: %s', session_id, e)
            raise PaymentGatewayError(str(e)) from e
        except stripe.StripeError as e:
            logger.error('Stripe checkout session retrieval failed: %s', e)
            raise PaymentGatewayError(str(e)) from e
        return _as_dict(session)

    # -------------------------------------------------------------------------
    # Charges & fees
    # -------------------------------------------------------------------------

    def retrieve_charge(self, charge_id: str) -> dict:
        try:
            charge = stripe.Charge.retrieve(charge_id, **self._request_options())
        except stripe.StripeError as e:
            logger.error('Stripe charge %s retrieval failed: %s', charge_id, e)
            raise PaymentGatewayError(str(e)) from e
        return _as_dict(charge)

    def get_stripe_fee(self, payment_intent_id: str, amount) -> Decimal:
        """
        Stripe's fee for a payment, read from its balance transaction.

        Falls back to the 1.4% + 0.25 EUR estimate when Stripe is not
        configured or the lookup fails; the fee is informational and must
        never block voucher creation.
        """
        if not self.is_configured or not payment_intent_id:
            return estimate_stripe_fee(amount)

        try:
            intent = stripe.PaymentIntent.retrieve(
                payment_intent_id,
                expand=['latest_charge.balance_transaction'],
                **self._request_options()
            )
            intent = _as_dict(intent)
            charge = intent.get('latest_charge') or {}
            balance_transaction = charge.get('balance_transaction') or {}
            fee = balance_transaction.get('fee') if isinstance(balance_transaction, dict) else None
        except stripe.StripeError as e:
            logger.warning('Could not read Stripe fee for %s, using estimate: %s', payment_intent_id, e)
            return estimate_stripe_fee(amount)

        if fee is None:
            return estimate_stripe_fee(amount)
        return from_cents(fee)


def get_gateway() -> StripeGateway:
    return StripeGateway(StripeConfig.from_settings())
