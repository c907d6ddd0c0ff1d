"""Gift item management for the café portal and checkout."""

from django.db import transaction

from ..exceptions import GiftItemNotFound, GiftItemUnavailable, LocationNotOwned
from ..models import GiftItem, MerchantStatus


def get_purchasable_gift_item(gift_item_id) -> GiftItem:
    """
    Return a gift item that can be sold right now.

    Raises:
        GiftItemNotFound: Unknown item.
        GiftItemUnavailable: Item is deactivated or its merchant is not live.
    """
    gift_item = (
        GiftItem.objects
        .select_related('merchant', 'category')
        .filter(id=gift_item_id)
        .first()
    )
    if gift_item is None:
        raise GiftItemNotFound()
    if not gift_item.is_active:
        raise GiftItemUnavailable()
    merchant = gift_item.merchant
    if merchant.status != MerchantStatus.APPROVED or not merchant.is_active:
        raise GiftItemUnavailable()
    return gift_item


def _check_locations(merchant, locations):
    foreign = [location for location in locations if location.merchant_id != merchant.id]
    if foreign:
        raise LocationNotOwned()


@transaction.atomic
def create_gift_item(*, merchant, locations=None, **fields) -> GiftItem:
    """
    Create a gift item for a merchant.

    When no locations are given the item is redeemable at every active
    location of the merchant.

    Raises:
        GiftItemUnavailable: Merchant is not approved.
        LocationNotOwned: A location belongs to another merchant.
    """
    if merchant.status != MerchantStatus.APPROVED:
        raise GiftItemUnavailable('Only approved merchants can sell gift items.')

    if locations:
        _check_locations(merchant, locations)
    else:
        locations = list(merchant.locations.filter(is_active=True))

    gift_item = GiftItem.objects.create(merchant=merchant, **fields)
    gift_item.locations.set(locations)
    return gift_item


@transaction.atomic
def update_gift_item(*, gift_item, locations=None, **fields) -> GiftItem:
    """
    Update a merchant's gift item.

    Vouchers already sold keep the locations copied at purchase time.
    """
    if locations is not None:
        _check_locations(gift_item.merchant, locations)

    for name, value in fields.items():
        setattr(gift_item, name, value)
    gift_item.save()

    if locations is not None:
        gift_item.locations.set(locations)
    return gift_item


@transaction.atomic
def deactivate_gift_item(*, gift_item) -> GiftItem:
    """Hide a gift item from the storefront; sold vouchers stay valid."""
    gift_item.is_active = False
    gift_item.save(update_fields=['is_active', 'updated_at'])
    return gift_item
