"""In-store QR codes for merchant locations."""

import logging
from io import BytesIO

import qrcode
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..exceptions import QRCodeNotFound
from ..models import LocationQRCode, MerchantLocation

logger = logging.getLogger(__name__)


def qr_code_url(qr: LocationQRCode) -> str:
    """Public URL encoded into the printed QR code."""
    return f"{settings.SITE_URL.rstrip('/')}/qr/{qr.short_id}"


@transaction.atomic
def generate_location_qr(*, location: MerchantLocation, regenerate: bool = False) -> tuple:
    """
    Return the active QR code for a location, creating one if needed.

    Args:
        location: The merchant location.
        regenerate: Deactivate any existing code and issue a new one,
            e.g. after a printed code leaked.

    Returns:
        tuple: (LocationQRCode, bool) where the flag says whether a new
        code was created.
    """
    existing = (
        LocationQRCode.objects
        .select_for_update()
        .filter(location=location, is_active=True, expires_at__gt=timezone.now())
        .first()
    )
    if existing and not regenerate:
        return existing, False

    if regenerate:
        LocationQRCode.objects.filter(location=location, is_active=True).update(is_active=False)

    qr = LocationQRCode.objects.create(location=location, merchant=location.merchant)
    logger.info('QR code %s created for location %s', qr.short_id, location.id)
    return qr, True


def validate_qr_code(short_id: str) -> LocationQRCode:
    """
    Resolve a scanned short id to its location.

    Raises:
        QRCodeNotFound: Unknown, inactive or expired code, or the
            location itself is inactive.
    """
    qr = (
        LocationQRCode.objects
        .select_related('location', 'merchant')
        .filter(short_id=short_id)
        .first()
    )
    if qr is None or not qr.is_valid() or not qr.location.is_active:
        raise QRCodeNotFound()
    return qr


def render_qr_png(data: str) -> bytes:
    """
    Render ``data`` as a PNG QR code.

    Uses error correction level M (15% recovery), which survives the
    wear a code taped to a counter gets.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    image = qr.make_image(fill_color='black', back_color='white')
    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()
