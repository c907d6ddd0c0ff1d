"""
Custom permission classes for merchants app.

Permission Classes:
    IsMerchant - Request is authenticated by a café token
    IsApprovedMerchant - Café token belongs to an approved merchant

Usage:
    from apps.merchants.authentication import CafeTokenAuthentication
    from apps.merchants.permissions import IsMerchant

    @api_view(['GET'])
    @authentication_classes([CafeTokenAuthentication])
    @permission_classes([IsMerchant])
    def profile(request):
        merchant = request.user
        ...
"""

from rest_framework.permissions import BasePermission

from .models import Merchant


class IsMerchant(BasePermission):
    """
    Allow access only to requests authenticated as a Merchant.

    Staff users carrying a JWT are rejected here; they use the admin
    endpoints instead.
    """

    message = 'Café authentication required.'

    def has_permission(self, request, view):
        return isinstance(request.user, Merchant)


class IsApprovedMerchant(IsMerchant):
    """Merchant must also still be approved."""

    message = 'Your account is not approved.'

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.is_approved
