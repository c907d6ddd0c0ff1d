"""
Café portal session tokens.

Merchants are not Django users. After login they carry an HS256 JWT in
the HTTP-only ``cafe-token`` cookie; ``CafeTokenAuthentication`` turns
that cookie back into a ``Merchant`` for ``request.user``.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError

from .exceptions import InvalidCafeToken, MerchantNotFound
from .models import Merchant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CafeTokenConfig:
    signing_key: str
    algorithm: str = 'HS256'
    lifetime: timedelta = timedelta(days=7)
    cookie_name: str = 'cafe-token'

    @classmethod
    def from_settings(cls):
        conf = settings.CAFE_TOKEN
        return cls(
            signing_key=conf['SIGNING_KEY'],
            algorithm=conf.get('ALGORITHM', 'HS256'),
            lifetime=conf.get('LIFETIME', timedelta(days=7)),
            cookie_name=conf.get('COOKIE_NAME', 'cafe-token'),
        )


class CafeTokenService:
    """Issue and verify café session tokens."""

    def __init__(self, config: CafeTokenConfig):
        self.config = config
        self.backend = TokenBackend(config.algorithm, signing_key=config.signing_key)

    def issue(self, merchant: Merchant) -> str:
        now = timezone.now()
        payload = {
            'merchant_id': str(merchant.id),
            'email': merchant.contact_email,
            'name': merchant.name,
            'iat': int(now.timestamp()),
            'exp': int((now + self.config.lifetime).timestamp()),
        }
        return self.backend.encode(payload)

    def decode(self, token: str) -> dict:
        try:
            return self.backend.decode(token, verify=True)
        except TokenBackendError as e:
            raise InvalidCafeToken(str(e)) from e

    def set_cookie(self, response, token: str):
        response.set_cookie(
            self.config.cookie_name,
            token,
            max_age=int(self.config.lifetime.total_seconds()),
            httponly=True,
            secure=not settings.DEBUG,
            samesite='Lax',
        )
        return response

    def delete_cookie(self, response):
        response.delete_cookie(self.config.cookie_name, samesite='Lax')
        return response


def get_cafe_token_service() -> CafeTokenService:
    return CafeTokenService(CafeTokenConfig.from_settings())


class CafeTokenAuthentication(BaseAuthentication):
    """Authenticate a merchant from the ``cafe-token`` cookie."""

    def authenticate(self, request):
        service = get_cafe_token_service()
        token = request.COOKIES.get(service.config.cookie_name)
        if not token:
            return None

        try:
            claims = service.decode(token)
        except InvalidCafeToken:
            raise AuthenticationFailed('Invalid or expired session.', code='invalid_token')

        try:
            merchant_id = uuid.UUID(str(claims.get('merchant_id')))
        except ValueError:
            raise AuthenticationFailed('Invalid token.', code='invalid_token')

        merchant = Merchant.objects.filter(id=merchant_id).first()
        if merchant is None:
            logger.warning('Café token for unknown merchant %s', merchant_id)
            raise MerchantNotFound()

        return (merchant, claims)

    def authenticate_header(self, request):
        return 'Cookie realm="cafe"'
