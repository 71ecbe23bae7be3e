"""
Marketplace listings and offers.

Listings are created ``pending`` and become discoverable once an admin
approves them. Image upload is two-phase: the row is written first so its id
names the storage folder, then the files are stored and their URLs patched in.
Orders snapshot their items and always start ``pending``.
"""
import logging
import time
from decimal import Decimal

from django.conf import settings
from django.db.models import F
from django.utils import timezone
from django.utils.crypto import get_random_string

from accounts.models import Favorite, FavoriteTarget
from common.exceptions import NotFound, ValidationError
from common.images import check_image_count
from common.queries import fetch_ordered
from common.services import clean_text, coerce_amount, require_fields, service_call
from notifications import dispatch
from notifications.models import NotificationType

from . import images as image_store
from .models import ItemCondition, ListingStatus, MarketplaceListing, Offer, OfferStatus, Order, OrderStatus, PaymentStatus

logger = logging.getLogger(__name__)

LISTING_SORT_FIELDS = ("created_at", "price")
EDITABLE_FIELDS = ("title", "description", "price", "currency", "category", "location", "city", "condition")
OFFER_TARGET_STATUSES = (OfferStatus.ACCEPTED, OfferStatus.REJECTED, OfferStatus.WITHDRAWN)


def _get_listing(listing_id):
    try:
        return MarketplaceListing.objects.get(pk=listing_id)
    except (MarketplaceListing.DoesNotExist, ValueError, TypeError):
        raise NotFound("Listing not found")


def _clean_listing_fields(data):
    values = {}
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == "price":
            value = coerce_amount(value, "price")
        elif field == "condition":
            value = str(value or "").lower()
            if value not in ItemCondition.values:
                raise ValidationError(f"Invalid condition. Must be one of: {', '.join(ItemCondition.values)}")
        else:
            value = clean_text(value, 4000 if field == "description" else 200)
        values[field] = value
    return values


@service_call("Failed to create listing")
def create_listing(data, images=None):
    require_fields(data, ["title", "description", "price", "category", "seller_id", "location"])
    values = _clean_listing_fields(data)
    check_image_count(len(images or []))
    values.setdefault("currency", settings.DEFAULT_CURRENCY)
    listing = MarketplaceListing.objects.create(
        seller_id=data["seller_id"], status=ListingStatus.PENDING, **values
    )
    if images:
        urls = image_store.upload_images(listing.pk, images)
        listing.images = urls
        listing.cover_image = urls[0] if urls else ""
        listing.save(update_fields=["images", "cover_image", "updated_at"])
    logger.info("listing %s created by %s", listing.pk, listing.seller_id)
    return listing


@service_call("Failed to fetch listing")
def get_listing(listing_id, increment_views=True):
    listing = _get_listing(listing_id)
    if increment_views:
        MarketplaceListing.objects.filter(pk=listing.pk).update(views=F("views") + 1)
        listing.views += 1
    return listing


@service_call("Failed to fetch listings")
def get_all(filters=None, options=None):
    """Listings matching every supplied filter; status defaults to ``active``."""
    filters = filters or {}
    options = options or {}
    qs = MarketplaceListing.objects.all()
    status = filters.get("status", ListingStatus.ACTIVE)
    if status:
        qs = qs.filter(status=status)
    if filters.get("category"):
        qs = qs.filter(category=filters["category"])
    if filters.get("city"):
        qs = qs.filter(city__iexact=str(filters["city"]).strip())
    if filters.get("seller_id"):
        qs = qs.filter(seller_id=filters["seller_id"])
    if filters.get("min_price") not in (None, ""):
        qs = qs.filter(price__gte=coerce_amount(filters["min_price"], "min_price", positive=False))
    if filters.get("max_price") not in (None, ""):
        qs = qs.filter(price__lte=coerce_amount(filters["max_price"], "max_price", positive=False))
    sort_by = options.get("sort_by") or "created_at"
    if sort_by not in LISTING_SORT_FIELDS:
        raise ValidationError(f"Cannot sort by {sort_by}")
    prefix = "" if options.get("sort_order") == "asc" else "-"
    return fetch_ordered(qs, f"{prefix}{sort_by}", limit=options.get("limit"))


@service_call("Failed to update listing")
def update_listing(listing_id, updates, new_images=None):
    listing = _get_listing(listing_id)
    values = _clean_listing_fields(updates or {})
    if new_images:
        urls = image_store.upload_images(listing.pk, new_images, existing=len(listing.images))
        values["images"] = [*listing.images, *urls]
        if not listing.cover_image and values["images"]:
            values["cover_image"] = values["images"][0]
    if not values:
        return listing
    for field, value in values.items():
        setattr(listing, field, value)
    listing.save(update_fields=[*values, "updated_at"])
    return listing


@service_call("Failed to delete listing")
def delete_listing(listing_id):
    listing = _get_listing(listing_id)
    image_store.delete_images(listing.pk)
    Favorite.objects.filter(target_type=FavoriteTarget.LISTING, target_id=listing.pk).delete()
    listing.delete()
    logger.info("listing %s deleted", listing_id)


# Moderation


@service_call("Failed to approve listing")
def approve_listing(listing_id):
    listing = _get_listing(listing_id)
    listing.status = ListingStatus.ACTIVE
    listing.approved_at = timezone.now()
    listing.rejected_reason = ""
    listing.save(update_fields=["status", "approved_at", "rejected_reason", "updated_at"])
    dispatch.notify(
        listing.seller_id,
        "Listing Approved",
        f'Your listing "{listing.title}" is now live on the marketplace.',
        NotificationType.SUCCESS,
        f"/marketplace/{listing.pk}",
    )
    return listing


@service_call("Failed to reject listing")
def reject_listing(listing_id, reason=""):
    listing = _get_listing(listing_id)
    listing.status = ListingStatus.REMOVED
    listing.rejected_reason = clean_text(reason, 240)
    listing.save(update_fields=["status", "rejected_reason", "updated_at"])
    message = f'Your listing "{listing.title}" was not approved.'
    if listing.rejected_reason:
        message = f"{message} Reason: {listing.rejected_reason}"
    dispatch.notify(listing.seller_id, "Listing Rejected", message, NotificationType.WARNING, "/marketplace/mine")
    return listing


@service_call("Failed to mark listing as sold")
def mark_sold(listing_id):
    listing = _get_listing(listing_id)
    listing.status = ListingStatus.SOLD
    listing.save(update_fields=["status", "updated_at"])
    return listing


# Offers


def _get_offer(offer_id):
    try:
        return Offer.objects.select_related("listing").get(pk=offer_id)
    except (Offer.DoesNotExist, ValueError, TypeError):
        raise NotFound("Offer not found")


@service_call("Failed to create offer")
def create_offer(data):
    require_fields(data, ["listing_id", "buyer_id", "offer_amount"])
    amount = coerce_amount(data["offer_amount"], "offer_amount")
    listing = _get_listing(data["listing_id"])
    if listing.status in (ListingStatus.SOLD, ListingStatus.REMOVED):
        raise ValidationError("This listing is no longer available")
    if listing.seller_id == int(data["buyer_id"]):
        raise ValidationError("You cannot make an offer on your own listing")
    offer = Offer.objects.create(
        listing=listing,
        buyer_id=data["buyer_id"],
        offer_amount=amount,
        message=clean_text(data.get("message"), 2000),
        status=OfferStatus.PENDING,
    )
    logger.info("offer %s on listing %s by %s", offer.pk, listing.pk, offer.buyer_id)
    dispatch.notify(
        listing.seller_id,
        "New Offer",
        f'You received an offer of {listing.currency} {amount:,.0f} on "{listing.title}".',
        NotificationType.INFO,
        f"/marketplace/{listing.pk}/offers",
    )
    return offer


@service_call("Failed to fetch offers")
def get_offers_by_listing(listing_id):
    return fetch_ordered(Offer.objects.filter(listing_id=listing_id), "-created_at")


@service_call("Failed to fetch offers")
def get_offers_by_buyer(buyer_id):
    return fetch_ordered(Offer.objects.select_related("listing").filter(buyer_id=buyer_id), "-created_at")


@service_call("Failed to fetch offers")
def get_offers_by_seller(seller_id):
    """Offers received on any of the seller's listings, each with its listing attached."""
    return fetch_ordered(Offer.objects.select_related("listing").filter(listing__seller_id=seller_id), "-created_at")


OFFER_NOTICES = {
    OfferStatus.ACCEPTED: ("Offer Accepted", 'Your offer on "{title}" was accepted.', NotificationType.SUCCESS),
    OfferStatus.REJECTED: ("Offer Rejected", 'Your offer on "{title}" was rejected.', NotificationType.WARNING),
    OfferStatus.WITHDRAWN: ("Offer Withdrawn", 'An offer on "{title}" was withdrawn.', NotificationType.INFO),
}


@service_call("Failed to update offer")
def update_offer_status(offer_id, status):
    if status not in OFFER_TARGET_STATUSES:
        raise ValidationError("Invalid offer status")
    offer = _get_offer(offer_id)
    if offer.status != OfferStatus.PENDING:
        raise ValidationError(f"Offer is already {offer.status}")
    offer.status = status
    offer.save(update_fields=["status", "updated_at"])
    title, message, tone = OFFER_NOTICES[status]
    # Withdrawals are announced to the seller, decisions to the buyer
    recipient = offer.listing.seller_id if status == OfferStatus.WITHDRAWN else offer.buyer_id
    dispatch.notify(recipient, title, message.format(title=offer.listing.title), tone, f"/marketplace/{offer.listing_id}")
    return offer


# Orders


ORDER_ITEM_TYPES = ("marketplace", "property")
ORDER_ITEM_FIELDS = ("item_id", "item_type", "quantity", "price")
ORDER_NUMBER_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


def _order_number():
    return f"ORD-{int(time.time() * 1000)}-{get_random_string(9, ORDER_NUMBER_CHARS)}"


def _clean_order_items(items):
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError("Items array is required and must not be empty")
    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or any(item.get(key) in (None, "") for key in ORDER_ITEM_FIELDS):
            raise ValidationError(f"Invalid item at index {index}: missing required fields")
        if item["item_type"] not in ORDER_ITEM_TYPES:
            raise ValidationError(f"Invalid item at index {index}: item_type must be one of {', '.join(ORDER_ITEM_TYPES)}")
        quantity = coerce_amount(item["quantity"], f"items[{index}].quantity", positive=False)
        if quantity != quantity.to_integral_value():
            raise ValidationError(f"Invalid item at index {index}: quantity must be a whole number")
        if quantity <= 0:
            raise ValidationError(f"Invalid item at index {index}: quantity must be greater than 0")
        price = coerce_amount(item["price"], f"items[{index}].price", positive=False)
        if price < 0:
            raise ValidationError(f"Invalid item at index {index}: price cannot be negative")
        cleaned.append({
            "item_id": str(item["item_id"]),
            "item_type": item["item_type"],
            "name": clean_text(item.get("name"), 200),
            "price": str(price),
            "quantity": int(quantity),
            "image": item.get("image") or None,
            "seller_id": item.get("seller_id") or None,
        })
    return cleaned


def _get_order(order_id):
    try:
        return Order.objects.get(pk=order_id)
    except (Order.DoesNotExist, ValueError, TypeError):
        raise NotFound("Order not found")


@service_call("Failed to create order")
def create_order(data):
    """Place an order; the total is the sum of the item lines.

    A client-supplied ``total`` must agree with the item lines. Status and
    payment status always start ``pending``.
    """
    require_fields(data, ["user_id", "items"])
    items = _clean_order_items(data["items"])
    total = sum((Decimal(item["price"]) * item["quantity"] for item in items), Decimal("0"))
    if data.get("total") not in (None, "") and coerce_amount(data["total"], "total", positive=False) != total:
        raise ValidationError("total does not match the order items")
    order = Order.objects.create(
        order_number=_order_number(),
        user_id=data["user_id"],
        items=items,
        total=total,
        currency=clean_text(data.get("currency"), 8) or settings.DEFAULT_CURRENCY,
        status=OrderStatus.PENDING,
        shipping_address=clean_text(data.get("shipping_address"), 1000),
        payment_method=clean_text(data.get("payment_method"), 40),
        payment_status=PaymentStatus.PENDING,
    )
    logger.info("order %s placed by %s (%s items)", order.order_number, order.user_id, len(items))
    dispatch.notify(
        order.user_id,
        "Order Placed",
        f"Your order #{order.order_number} has been placed successfully. Total: {order.currency} {total:,.0f}",
        NotificationType.SUCCESS,
        f"/orders/{order.pk}",
    )
    return order


@service_call("Failed to get order")
def get_order(order_id):
    return _get_order(order_id)


@service_call("Failed to get user orders")
def get_orders_by_user(user_id):
    return fetch_ordered(Order.objects.filter(user_id=user_id), "-created_at")


@service_call("Failed to get orders")
def get_all_orders():
    return fetch_ordered(Order.objects.all(), "-created_at")
