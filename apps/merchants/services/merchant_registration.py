"""Café self-service signup."""

import logging

from django.db import transaction
from django.utils.html import strip_tags

from ..exceptions import MerchantAlreadyExists
from ..models import Merchant, MerchantStatus, GiftItem

logger = logging.getLogger(__name__)

DEFAULT_BUSINESS_CATEGORY = 'Café & Treats'


def _clean(value) -> str:
    return strip_tags(value or '').strip()


@transaction.atomic
def register_merchant(
    *,
    name: str,
    address: str,
    county: str,
    business_email: str,
    business_category: str = '',
    description: str = '',
    contact_phone: str = '',
    website: str = '',
    logo_url: str = '',
    gift_items=(),
) -> Merchant:
    """
    Register a café applying to sell on Brontie.

    The merchant starts ``pending`` and inactive, with the Brontie fee
    switched off. Its gift items are created inactive and without
    locations; both are set up by staff on approval.

    Args:
        name, address, county: Business details, HTML stripped.
        business_email: Contact email, stored lowercased.
        business_category: Storefront grouping of the business.
        description, contact_phone, website, logo_url: Optional details.
        gift_items: Dicts with ``name``, ``category``, ``price`` and
            optional ``description`` and ``image_url``.

    Returns:
        Merchant: The new pending merchant.

    Raises:
        MerchantAlreadyExists: The email is already registered.
    """
    email = business_email.strip().lower()
    if Merchant.objects.filter(contact_email__iexact=email).exists():
        raise MerchantAlreadyExists()

    merchant = Merchant.objects.create(
        name=_clean(name),
        address=_clean(address),
        county=county,
        contact_email=email,
        business_category=business_category or DEFAULT_BUSINESS_CATEGORY,
        description=_clean(description),
        contact_phone=_clean(contact_phone),
        website=website or '',
        logo_url=logo_url or '',
        status=MerchantStatus.PENDING,
        is_active=False,
        brontie_fee_active=False,
    )

    for item in gift_items:
        GiftItem.objects.create(
            merchant=merchant,
            category=item['category'],
            name=_clean(item['name']),
            description=_clean(item.get('description')),
            price=item['price'],
            image_url=item.get('image_url') or '',
            is_active=False,
        )

    logger.info('Merchant %s applied with %s gift item(s)', merchant.id, len(gift_items))
    return merchant
