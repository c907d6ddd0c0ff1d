"""Services for merchants business logic."""

from .cafe_auth import authenticate_merchant, change_merchant_password
from .merchant_registration import register_merchant
from .password_reset import request_password_reset, verify_reset_token, confirm_password_reset
from .catalog import (
    get_purchasable_gift_item,
    create_gift_item,
    update_gift_item,
    deactivate_gift_item,
)
from .merchant_management import (
    approve_merchant,
    deny_merchant,
    set_brontie_fee,
    sync_stripe_account,
)
from .qr_codes import generate_location_qr, validate_qr_code, render_qr_png, qr_code_url

__all__ = [
    # Café portal
    'authenticate_merchant',
    'change_merchant_password',
    'register_merchant',
    'request_password_reset',
    'verify_reset_token',
    'confirm_password_reset',
    # Catalog
    'get_purchasable_gift_item',
    'create_gift_item',
    'update_gift_item',
    'deactivate_gift_item',
    # Merchant management
    'approve_merchant',
    'deny_merchant',
    'set_brontie_fee',
    'sync_stripe_account',
    # QR codes
    'generate_location_qr',
    'validate_qr_code',
    'render_qr_png',
    'qr_code_url',
]
