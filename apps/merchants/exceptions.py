"""
Domain exceptions for merchants app.

This module defines the errors raised by merchant, catalog and café
portal services. All of them are ``APIException`` subclasses carrying a
stable ``default_code`` that clients can match on.
"""
from rest_framework.exceptions import APIException


class MerchantServiceError(Exception):
    """Base exception for merchant service errors."""
    pass


class InvalidCafeToken(MerchantServiceError):
    """Raised when a café session token cannot be decoded or has expired."""
    pass


class MerchantNotFound(APIException):
    """Merchant not found."""
    status_code = 404
    default_detail = 'Merchant not found.'
    default_code = 'merchant_not_found'


class InvalidCredentials(APIException):
    """Email or password is wrong, or the merchant is not approved."""
    status_code = 401
    default_detail = 'Invalid credentials or account not approved.'
    default_code = 'invalid_credentials'


class PasswordChangeRequired(APIException):
    """Merchant signed in with a temporary password."""
    status_code = 403
    default_detail = 'Please change your temporary password.'
    default_code = 'password_change_required'


class InvalidMerchantTransition(APIException):
    """Approval status change not allowed."""
    status_code = 400
    default_detail = 'Merchant cannot move to the requested status.'
    default_code = 'invalid_merchant_transition'


class GiftItemNotFound(APIException):
    """Gift item not found."""
    status_code = 404
    default_detail = 'Gift item not found.'
    default_code = 'gift_item_not_found'


class GiftItemUnavailable(APIException):
    """Gift item is deactivated or its merchant is not live."""
    status_code = 400
    default_detail = 'Gift item is not available.'
    default_code = 'gift_item_unavailable'


class LocationNotOwned(APIException):
    """Location belongs to another merchant."""
    status_code = 400
    default_detail = 'Locations must belong to your business.'
    default_code = 'location_not_owned'


class QRCodeNotFound(APIException):
    """QR code unknown, inactive or expired."""
    status_code = 404
    default_detail = 'QR code not found or expired.'
    default_code = 'qr_code_not_found'


class MerchantAlreadyExists(APIException):
    """A merchant with this contact email is already registered."""
    status_code = 409
    default_detail = 'A merchant with this email already exists.'
    default_code = 'merchant_exists'


class InvalidResetToken(APIException):
    """Password reset token unknown, already used or expired."""
    status_code = 400
    default_detail = 'Invalid or expired reset token.'
    default_code = 'invalid_reset_token'
