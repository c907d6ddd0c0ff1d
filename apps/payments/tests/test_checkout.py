import pytest
from decimal import Decimal
from unittest.mock import patch
from django.urls import reverse
from rest_framework import status
from apps.payments.exceptions import PaymentGatewayError
from apps.payments.gateway import StripeGateway
from apps.vouchers.models import Voucher, VoucherStatus, Transaction, TransactionType, PayoutItem


# =============================================================================
# Checkout Session Creation
# =============================================================================

@pytest.mark.django_db
class TestCheckoutCreate:
    """Tests for POST /api/checkout/"""

    def test_creates_session(self, api_client, gift_item):
        fake_session = {'id': 'cs_test_new', 'url': 'https://checkout.stripe.com/c/pay/cs_test_new'}

        with patch.object(StripeGateway, 'create_checkout_session', return_value=fake_session) as create:
            response = api_client.post(reverse('payments:checkout-create'), {
                'giftItemId': str(gift_item.id),
                'senderName': 'Aoife',
                'recipientName': 'Cian',
                'senderEmail': 'aoife@example.com',
            }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'sessionId': 'cs_test_new',
            'checkoutUrl': 'https://checkout.stripe.com/c/pay/cs_test_new',
        }

        params = create.call_args.kwargs
        assert params['mode'] == 'payment'
        assert params['customer_email'] == 'aoife@example.com'
        line_item = params['line_items'][0]
        assert line_item['price_data']['unit_amount'] == 1000
        assert line_item['price_data']['currency'] == 'eur'
        assert line_item['price_data']['product_data']['name'] == 'Coffee for two'
        assert '{CHECKOUT_SESSION_ID}' in params['success_url']

        metadata = params['metadata']
        assert metadata['giftItemId'] == str(gift_item.id)
        assert metadata['senderName'] == 'Aoife'
        assert metadata['recipientName'] == 'Cian'
        assert metadata['productSku'].startswith('GIFT-')
        assert metadata['recipientToken']
        assert 'refToken' not in metadata

    def test_ref_token_passed_through(self, api_client, gift_item):
        fake_session = {'id': 'cs_test_ref', 'url': 'https://checkout.stripe.com/c/pay/cs_test_ref'}

        with patch.object(StripeGateway, 'create_checkout_session', return_value=fake_session) as create:
            api_client.post(reverse('payments:checkout-create'), {
                'giftItemId': str(gift_item.id),
                'ref': 'rt_friend',
            }, format='json')

        assert create.call_args.kwargs['metadata']['refToken'] == 'rt_friend'

    def test_inactive_item_rejected(self, api_client, gift_item):
        gift_item.is_active = False
        gift_item.save()

        with patch.object(StripeGateway, 'create_checkout_session') as create:
            response = api_client.post(reverse('payments:checkout-create'), {
                'giftItemId': str(gift_item.id),
            }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        create.assert_not_called()

    def test_unknown_item_returns_404(self, api_client, db):
        response = api_client.post(reverse('payments:checkout-create'), {
            'giftItemId': '00000000-0000-0000-0000-000000000000',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_missing_item_id_fails_validation(self, api_client, db):
        response = api_client.post(reverse('payments:checkout-create'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'giftItemId' in response.data

    def test_stripe_not_configured_returns_502(self, api_client, gift_item):
        response = api_client.post(reverse('payments:checkout-create'), {
            'giftItemId': str(gift_item.id),
        }, format='json')

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.data['code'] == 'payment_gateway_error'


# =============================================================================
# Checkout Success Page
# =============================================================================

@pytest.mark.django_db
class TestCheckoutSuccess:
    """Tests for GET /api/checkout/success/"""

    def test_confirms_issued_voucher(self, api_client, checkout_session, make_voucher):
        voucher = make_voucher(status=VoucherStatus.ISSUED, payment_intent_id='pi_checkout_1')

        with patch.object(StripeGateway, 'retrieve_checkout_session', return_value=checkout_session()):
            response = api_client.get(reverse('payments:checkout-success'), {'session_id': 'cs_test_1'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['redemptionCode'] == voucher.redemption_code
        assert response.data['status'] == VoucherStatus.UNREDEEMED
        assert response.data['itemName'] == 'Coffee for two'
        assert response.data['voucherUrl'].endswith(f'/voucher/{voucher.redemption_code}')

    def test_creates_pending_placeholder_before_webhook(self, api_client, checkout_session, gift_item):
        with patch.object(StripeGateway, 'retrieve_checkout_session', return_value=checkout_session()):
            response = api_client.get(reverse('payments:checkout-success'), {'session_id': 'cs_test_1'})

        assert response.status_code == status.HTTP_200_OK
        voucher = Voucher.objects.get(payment_intent_id='pi_checkout_1')
        assert voucher.status == VoucherStatus.PENDING
        assert voucher.amount == Decimal('10.00')
        assert response.data['status'] == VoucherStatus.PENDING

    def test_unpaid_session_rejected(self, api_client, checkout_session, db):
        session = checkout_session()
        session['payment_status'] = 'unpaid'

        with patch.object(StripeGateway, 'retrieve_checkout_session', return_value=session):
            response = api_client.get(reverse('payments:checkout-success'), {'session_id': 'cs_test_1'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'payment_not_completed'
        assert Voucher.objects.count() == 0

    def test_gateway_error_returns_502(self, api_client, db):
        with patch.object(StripeGateway, 'retrieve_checkout_session', side_effect=PaymentGatewayError('down')):
            response = api_client.get(reverse('payments:checkout-success'), {'session_id': 'cs_missing'})

        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_session_id_required(self, api_client, db):
        response = api_client.get(reverse('payments:checkout-success'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_malformed_gift_item_returns_404(self, api_client, checkout_session):
        session = checkout_session(giftItemId='not-a-uuid')

        with patch.object(StripeGateway, 'retrieve_checkout_session', return_value=session):
            response = api_client.get(reverse('payments:checkout-success'), {'session_id': 'cs_test_1'})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'gift_item_not_found'
        assert Voucher.objects.count() == 0


# =============================================================================
# Purchase to Redemption
# =============================================================================

@pytest.mark.django_db
class TestPurchaseFlow:
    """Checkout, webhook, success page, redemption, then a late refund."""

    def test_full_flow(self, api_client, post_event, checkout_session, location):
        session = checkout_session()

        # Buyer returns before the webhook arrives
        with patch.object(StripeGateway, 'retrieve_checkout_session', return_value=session):
            response = api_client.get(reverse('payments:checkout-success'), {'session_id': 'cs_test_1'})
        assert response.data['status'] == VoucherStatus.PENDING
        code = response.data['redemptionCode']

        response = post_event('checkout.session.completed', session)
        assert response.status_code == status.HTTP_200_OK
        voucher = Voucher.objects.get(redemption_code=code)
        assert voucher.status == VoucherStatus.UNREDEEMED

        response = api_client.post(
            reverse('vouchers:voucher-redeem', args=[code]),
            {'merchantLocationId': str(location.id)},
        )
        assert response.status_code == status.HTTP_200_OK
        payout = PayoutItem.objects.get(voucher=voucher)
        assert payout.amount_payable == Decimal('9.61')

        response = post_event('charge.refunded', {
            'id': 'ch_1',
            'payment_intent': 'pi_checkout_1',
            'amount': 1000,
            'amount_refunded': 1000,
        })
        assert response.status_code == status.HTTP_200_OK
        voucher.refresh_from_db()
        assert voucher.status == VoucherStatus.REDEEMED
        assert not Transaction.objects.filter(voucher=voucher, type=TransactionType.REFUND).exists()
