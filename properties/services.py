"""
Property listings plus the rental and buy/sell request services.
"""
import logging
from datetime import date

from django.conf import settings
from django.db.models import F, Q

from accounts.display_names import resolve_display_name
from accounts.models import Favorite, FavoriteTarget
from common import images as image_store
from common.exceptions import NotFound, ValidationError
from common.queries import fetch_ordered
from common.request_service import RequestService, StatusNotice
from common.services import clean_text, coerce_amount, require_fields, service_call
from notifications import dispatch
from notifications.models import NotificationType

from .models import (
    BUY_SELL_WORKFLOW,
    RENTAL_WORKFLOW,
    BuySellRequest,
    BuySellStatus,
    ListingType,
    Property,
    PropertyStatus,
    RentalRequest,
    RentalStatus,
)

logger = logging.getLogger(__name__)

PROPERTY_SORT_FIELDS = ("created_at", "price", "views")
EDITABLE_FIELDS = (
    "title", "description", "listing_type", "price", "currency", "address", "city",
    "bedrooms", "bathrooms", "area_sqft", "furnished", "parking",
)


def property_folder(property_id) -> str:
    root = getattr(settings, "PROPERTY_IMAGE_ROOT", "properties")
    return f"{root}/{property_id}"


def _get_property(property_id):
    try:
        return Property.objects.get(pk=property_id)
    except (Property.DoesNotExist, ValueError, TypeError):
        raise NotFound("Property not found")


def _clean_property_fields(data, partial=False):
    values = {}
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == "price":
            value = coerce_amount(value, "price")
        elif field == "listing_type":
            value = str(value or "").lower()
            if value not in ListingType.values:
                raise ValidationError(f"Invalid listing type. Must be one of: {', '.join(ListingType.values)}")
        elif field in ("title", "description", "address", "city"):
            value = clean_text(value, 4000 if field == "description" else 300)
        elif field in ("bedrooms", "bathrooms", "area_sqft"):
            value = int(value) if value not in (None, "") else (None if field == "area_sqft" else 0)
        elif field in ("furnished", "parking"):
            value = value in (True, 1, "1", "true", "True", "yes", "on")
        values[field] = value
    if not partial:
        values.setdefault("currency", settings.DEFAULT_CURRENCY)
    return values


def _attach_images(prop, images):
    urls = image_store.upload_images(property_folder(prop.pk), images, existing=len(prop.photos))
    prop.photos = [*prop.photos, *urls]
    if not prop.cover_image and prop.photos:
        prop.cover_image = prop.photos[0]
    prop.save(update_fields=["photos", "cover_image", "updated_at"])
    return urls


@service_call("Failed to create property")
def create_property(owner, data, images=None):
    require_fields(data, ["title", "description", "price", "listing_type", "address"])
    values = _clean_property_fields(data)
    image_store.check_image_count(len(images or []))
    prop = Property.objects.create(owner=owner, **values)
    if images:
        _attach_images(prop, images)
    logger.info("property %s created by %s", prop.pk, owner.pk)
    return prop


@service_call("Failed to fetch property")
def get_property(property_id, increment_views=True):
    prop = _get_property(property_id)
    if increment_views:
        Property.objects.filter(pk=prop.pk).update(views=F("views") + 1)
        prop.views += 1
    return prop


@service_call("Failed to fetch properties")
def list_properties(filters=None, options=None):
    """Published properties (by default) matching every supplied filter."""
    filters = filters or {}
    options = options or {}
    qs = Property.objects.all()
    status = filters.get("status", PropertyStatus.PUBLISHED)
    if status:
        qs = qs.filter(status=status)
    if filters.get("listing_type"):
        qs = qs.filter(listing_type=str(filters["listing_type"]).lower())
    if filters.get("city"):
        qs = qs.filter(city__iexact=str(filters["city"]).strip())
    if filters.get("owner"):
        qs = qs.filter(owner_id=filters["owner"])
    if filters.get("min_price") not in (None, ""):
        qs = qs.filter(price__gte=coerce_amount(filters["min_price"], "min_price", positive=False))
    if filters.get("max_price") not in (None, ""):
        qs = qs.filter(price__lte=coerce_amount(filters["max_price"], "max_price", positive=False))
    if filters.get("min_bedrooms"):
        qs = qs.filter(bedrooms__gte=int(filters["min_bedrooms"]))
    for flag in ("furnished", "parking"):
        if filters.get(flag) is not None:
            qs = qs.filter(**{flag: bool(filters[flag])})
    term = clean_text(filters.get("search"), 100)
    if term:
        qs = qs.filter(
            Q(title__icontains=term) | Q(description__icontains=term) | Q(city__icontains=term) | Q(address__icontains=term)
        )
    sort_by = options.get("sort_by") or "created_at"
    if sort_by not in PROPERTY_SORT_FIELDS:
        raise ValidationError(f"Cannot sort by {sort_by}")
    prefix = "" if options.get("sort_order") == "asc" else "-"
    return fetch_ordered(qs, f"{prefix}{sort_by}", limit=options.get("limit") or 100)


@service_call("Failed to fetch properties")
def get_by_owner(owner_id):
    return fetch_ordered(Property.objects.filter(owner_id=owner_id), "-created_at")


@service_call("Failed to update property")
def update_property(property_id, updates, new_images=None):
    prop = _get_property(property_id)
    values = _clean_property_fields(updates or {}, partial=True)
    if new_images:
        _attach_images(prop, new_images)
    if not values:
        return prop
    for field, value in values.items():
        setattr(prop, field, value)
    prop.save(update_fields=[*values, "updated_at"])
    return prop


PROPERTY_STATUS_NOTICES = {
    PropertyStatus.PUBLISHED: StatusNotice(
        "Property Published", 'Your property "{title}" is now live.', NotificationType.SUCCESS
    ),
    PropertyStatus.SUSPENDED: StatusNotice(
        "Property Suspended", 'Your property "{title}" has been suspended by an administrator.', NotificationType.WARNING
    ),
}


@service_call("Failed to update property status")
def update_property_status(property_id, status):
    if status not in PropertyStatus.values:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(PropertyStatus.values)}")
    prop = _get_property(property_id)
    if prop.status == status:
        return prop
    prop.status = status
    prop.save(update_fields=["status", "updated_at"])
    logger.info("property %s status -> %s", prop.pk, status)
    notice = PROPERTY_STATUS_NOTICES.get(status)
    if notice:
        dispatch.notify(prop.owner_id, notice.title, notice.message.format(title=prop.title), notice.tone, f"/properties/{prop.pk}")
    return prop


@service_call("Failed to upload images")
def upload_images(property_id, images):
    """Append ``images`` to the property's photos; returns the new URLs."""
    if not images:
        raise ValidationError("No images provided")
    return _attach_images(_get_property(property_id), images)


@service_call("Failed to delete images")
def delete_images(property_id):
    prop = _get_property(property_id)
    deleted = image_store.delete_images(property_folder(prop.pk))
    prop.photos = []
    prop.cover_image = ""
    prop.save(update_fields=["photos", "cover_image", "updated_at"])
    return deleted


@service_call("Failed to delete property")
def delete_property(property_id):
    prop = _get_property(property_id)
    image_store.delete_images(property_folder(prop.pk))
    Favorite.objects.filter(target_type=FavoriteTarget.PROPERTY, target_id=prop.pk).delete()
    prop.delete()
    logger.info("property %s deleted", property_id)


# Requests against a property


class PropertyRequestService(RequestService):
    owner_field = "owner"
    created_title = ""
    created_message = ""
    received_title = ""
    received_message = ""

    def get_queryset(self):
        return self.model.objects.select_related("property")

    @service_call("Failed to fetch {label}s")
    def get_by_property(self, property_id):
        return fetch_ordered(self.get_queryset().filter(property_id=property_id), "-created_at")

    @service_call("Failed to fetch {label}s")
    def get_by_owner(self, owner_id):
        return fetch_ordered(self.get_queryset().filter(**{f"{self.owner_field}_id": owner_id}), "-created_at")

    def counterpart_id(self, obj):
        return getattr(obj, f"{self.owner_field}_id")

    def message_context(self, obj):
        return {
            "label": self.label,
            "property": obj.property.title,
            "requester": resolve_display_name(obj.user_id),
        }

    def build(self, prop, data):
        raise NotImplementedError

    @service_call("Failed to create {label}")
    def create(self, data):
        require_fields(data, ["user_id", "property_id", *self.required_fields])
        prop = _get_property(data["property_id"])
        if prop.owner_id == int(data["user_id"]):
            raise ValidationError("You cannot send a request for your own property")
        obj = self.build(prop, data)
        obj.user_id = data["user_id"]
        obj.property = prop
        obj.message = clean_text(data.get("message"), 2000)
        obj.status = self.workflow.normalize("Pending")
        obj.save()
        self.record_update(obj, obj.status, obj.user_id)
        logger.info("%s %s created by %s", self.label, obj.pk, obj.user_id)
        ctx = self.message_context(obj)
        dispatch.notify(
            obj.user_id,
            self.created_title,
            self.created_message.format(**ctx),
            NotificationType.INFO,
            self.requester_link,
        )
        dispatch.notify(
            self.counterpart_id(obj),
            self.received_title,
            self.received_message.format(**ctx),
            NotificationType.SERVICE_REQUEST,
            self.counterpart_link,
        )
        return obj


class RentalRequestService(PropertyRequestService):
    model = RentalRequest
    workflow = RENTAL_WORKFLOW
    label = "rental request"
    owner_field = "landlord"
    required_fields = ()
    requester_link = "/account/rentals"
    counterpart_link = "/dashboard/rental-requests"
    created_title = "Rental Request Sent"
    created_message = 'Your rental request for "{property}" has been sent to the owner.'
    received_title = "New Rental Request"
    received_message = '{requester} wants to rent "{property}".'
    status_notices = {
        RentalStatus.CONFIRMED: StatusNotice(
            "Rental Request Confirmed", 'Your rental request for "{property}" has been confirmed.', NotificationType.INFO
        ),
        RentalStatus.ACCEPTED: StatusNotice(
            "Rental Request Accepted", 'Your rental request for "{property}" has been accepted!', NotificationType.SUCCESS
        ),
        RentalStatus.REJECTED: StatusNotice(
            "Rental Request Rejected", 'Your rental request for "{property}" has been rejected.', NotificationType.ERROR
        ),
        RentalStatus.PAID: StatusNotice(
            "Payment Received", 'Your payment for "{property}" has been received.', NotificationType.SUCCESS
        ),
        RentalStatus.COMPLETED: StatusNotice(
            "Rental Completed", 'Your rental of "{property}" is complete.', NotificationType.SUCCESS
        ),
    }
    counterpart_notices = {
        RentalStatus.CONFIRMED: StatusNotice(
            "Rental Request Confirmed", '{requester} confirmed the rental request for "{property}".', NotificationType.INFO
        ),
        RentalStatus.PAID: StatusNotice(
            "Rent Payment Received", '{requester} has paid for "{property}".', NotificationType.SUCCESS
        ),
    }

    def build(self, prop, data):
        if prop.listing_type != ListingType.RENT:
            raise ValidationError("This property is not listed for rent")
        budget = data.get("budget")
        move_in = data.get("move_in_date")
        if isinstance(move_in, str) and move_in:
            try:
                move_in = date.fromisoformat(move_in)
            except ValueError:
                raise ValidationError("move_in_date must be a date (YYYY-MM-DD)")
        return RentalRequest(
            landlord_id=prop.owner_id,
            duration_months=int(data.get("duration_months") or 12),
            budget=coerce_amount(budget, "budget") if budget not in (None, "") else None,
            move_in_date=move_in or None,
        )


class BuySellRequestService(PropertyRequestService):
    model = BuySellRequest
    workflow = BUY_SELL_WORKFLOW
    label = "purchase offer"
    required_fields = ("offer_amount",)
    requester_link = "/account"
    counterpart_link = "/dashboard/offers"
    created_title = "Purchase Offer Sent"
    created_message = 'Your purchase offer for "{property}" has been sent to the owner.'
    received_title = "New Purchase Offer"
    received_message = '{requester} made an offer of {amount} on "{property}".'
    status_notices = {
        BuySellStatus.CONFIRMED: StatusNotice(
            "Purchase Offer Confirmed", 'Your purchase offer for "{property}" has been confirmed.', NotificationType.INFO
        ),
        BuySellStatus.ACCEPTED: StatusNotice(
            "Purchase Offer Accepted", 'Your purchase offer for "{property}" has been accepted!', NotificationType.SUCCESS
        ),
        BuySellStatus.REJECTED: StatusNotice(
            "Purchase Offer Rejected", 'Your purchase offer for "{property}" has been rejected.', NotificationType.ERROR
        ),
        BuySellStatus.PAID: StatusNotice(
            "Payment Received", 'Your payment for "{property}" has been received.', NotificationType.SUCCESS
        ),
        BuySellStatus.CANCELLED: StatusNotice(
            "Purchase Cancelled", 'The purchase of "{property}" has been cancelled.', NotificationType.INFO
        ),
        BuySellStatus.COMPLETED: StatusNotice(
            "Purchase Completed", 'The purchase of "{property}" is complete.', NotificationType.SUCCESS
        ),
    }
    counterpart_notices = {
        BuySellStatus.PAID: StatusNotice(
            "Payment Received", '{requester} has paid for "{property}".', NotificationType.SUCCESS
        ),
        BuySellStatus.CANCELLED: StatusNotice(
            "Purchase Cancelled", 'The purchase of "{property}" by {requester} has been cancelled.', NotificationType.INFO
        ),
    }

    def message_context(self, obj):
        ctx = super().message_context(obj)
        ctx["amount"] = f"{obj.property.currency} {obj.offer_amount:,.0f}"
        return ctx

    def build(self, prop, data):
        return BuySellRequest(owner_id=prop.owner_id, offer_amount=coerce_amount(data.get("offer_amount"), "offer_amount"))


rental_requests = RentalRequestService()
buy_sell_requests = BuySellRequestService()
