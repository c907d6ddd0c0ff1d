"""
Domain exceptions for vouchers app.

API-facing errors are ``APIException`` subclasses so views can let them
propagate; the project exception handler renders them as
``{"error": ..., "code": ...}``. ``ImmutableRecordError`` is a plain
service error raised by the ledger models.
"""
from rest_framework.exceptions import APIException


class VoucherServiceError(Exception):
    """Base exception for voucher service errors."""
    pass


class ImmutableRecordError(VoucherServiceError):
    """Raised when code tries to change or delete a ledger entry."""
    pass


class InvalidVoucherTransition(VoucherServiceError):
    """Raised when a status change would move a voucher backwards."""
    pass


class VoucherNotFound(APIException):
    """Voucher not found."""
    status_code = 404
    default_detail = 'Voucher not found.'
    default_code = 'voucher_not_found'


class LocationNotFound(APIException):
    """Merchant location not found."""
    status_code = 404
    default_detail = 'Merchant location not found.'
    default_code = 'location_not_found'


class AlreadyRedeemed(APIException):
    """Voucher was redeemed before."""
    status_code = 400
    default_detail = 'Voucher has already been redeemed.'
    default_code = 'already_redeemed'


class PaymentProcessing(APIException):
    """Payment for the voucher has not been confirmed yet."""
    status_code = 400
    default_detail = 'Voucher payment is still being processed. Please try again later.'
    default_code = 'payment_processing'


class VoucherRefunded(APIException):
    """Voucher was refunded."""
    status_code = 400
    default_detail = 'This voucher has been refunded and is no longer valid.'
    default_code = 'voucher_refunded'


class VoucherNotRedeemable(APIException):
    """Voucher is disputed or expired."""
    status_code = 400
    default_detail = 'This voucher can no longer be redeemed.'
    default_code = 'voucher_not_redeemable'


class LocationNotValid(APIException):
    """Scanned location is not one of the voucher's valid locations."""
    status_code = 400
    default_detail = 'This voucher cannot be redeemed at this location.'
    default_code = 'location_not_valid'


class PayoutItemNotFound(APIException):
    """Payout item not found."""
    status_code = 404
    default_detail = 'Payout item not found.'
    default_code = 'payout_item_not_found'
