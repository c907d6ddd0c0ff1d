from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    # POST /api/webhook/stripe/      - Stripe events (signature verified)
    # POST /api/checkout/            - Start a Checkout Session
    # GET  /api/checkout/success/    - Confirm voucher after redirect
    path('webhook/stripe/', views.stripe_webhook, name='stripe-webhook'),
    path('checkout/', views.checkout_create, name='checkout-create'),
    path('checkout/success/', views.checkout_success, name='checkout-success'),
]
