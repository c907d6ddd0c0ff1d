import logging

from drf_spectacular.utils import extend_schema, inline_serializer, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from rest_framework import serializers, status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .checkout import create_checkout, confirm_checkout_success
from .exceptions import InvalidSignature, WebhookIgnored
from .gateway import get_gateway
from .serializers import (
    CheckoutInputSerializer,
    CheckoutSuccessInputSerializer,
    CheckoutVoucherSerializer,
)
from .webhooks import StripeWebhookProcessor

logger = logging.getLogger(__name__)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField(required=False)


class WebhookResponseSerializer(serializers.Serializer):
    received = serializers.BooleanField()


# =============================================================================
# Stripe webhook
# =============================================================================

@extend_schema(
    request=OpenApiTypes.OBJECT,
    responses={
        200: WebhookResponseSerializer,
        400: ErrorResponseSerializer,
        500: ErrorResponseSerializer,
    },
    description=(
        "Stripe webhook endpoint. The raw body is verified against the "
        "stripe-signature header. Events that can never succeed are "
        "acknowledged with 200; processing failures return 500 so Stripe retries."
    ),
    tags=['payments'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def stripe_webhook(request):
    payload = request.body
    signature = request.META.get('HTTP_STRIPE_SIGNATURE', '')
    processor = StripeWebhookProcessor(get_gateway())

    try:
        result = processor.process(payload, signature)
    except InvalidSignature as e:
        logger.warning('Rejected Stripe webhook: %s', e)
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except WebhookIgnored as e:
        logger.warning('Ignored Stripe webhook: %s', e)
        return Response({'received': True})
    except Exception:
        logger.exception('Stripe webhook processing failed')
        return Response(
            {'error': 'Webhook processing failed'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.debug('Stripe webhook handled: %s', result)
    return Response({'received': True})


# =============================================================================
# Checkout
# =============================================================================

@extend_schema(
    request=CheckoutInputSerializer,
    responses={
        200: inline_serializer('CheckoutResponse', {
            'sessionId': serializers.CharField(),
            'checkoutUrl': serializers.URLField(),
        }),
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        502: ErrorResponseSerializer,
    },
    description="Start a Stripe Checkout Session for a gift item.",
    tags=['payments'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def checkout_create(request):
    serializer = CheckoutInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = create_checkout(
        gift_item_id=data['giftItemId'],
        sender_name=data['senderName'],
        recipient_name=data['recipientName'],
        sender_email=data['senderEmail'],
        recipient_email=data['recipientEmail'],
        ref_token=data['ref'],
    )
    return Response(result)


@extend_schema(
    parameters=[OpenApiParameter('session_id', OpenApiTypes.STR, required=True)],
    responses={
        200: CheckoutVoucherSerializer,
        400: ErrorResponseSerializer,
        502: ErrorResponseSerializer,
    },
    description="Confirm the voucher after Stripe redirects the buyer back.",
    tags=['payments'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def checkout_success(request):
    serializer = CheckoutSuccessInputSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    voucher = confirm_checkout_success(session_id=serializer.validated_data['session_id'])
    return Response(CheckoutVoucherSerializer(voucher).data)
