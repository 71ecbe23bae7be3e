"""
Back-office reads: dashboard counters and the searchable listings behind
the moderation tables. Moderation writes stay in the owning apps.
"""
import logging
from functools import reduce
from operator import or_

from django.contrib.auth import get_user_model
from django.db.models import Q

from accounts.models import ServiceProvider
from common.exceptions import ValidationError
from common.queries import fetch_ordered
from common.services import clean_text, service_call
from contracting.models import ConstructionRequest, RenovationRequest
from marketplace.models import ListingStatus, MarketplaceListing
from payments.models import Transaction
from properties.models import BuySellRequest, Property, PropertyStatus, RentalRequest
from reviews.models import Review
from support.models import SupportTicket, TicketStatus

logger = logging.getLogger(__name__)

REQUEST_MODELS = {
    "rental": RentalRequest,
    "buySell": BuySellRequest,
    "construction": ConstructionRequest,
    "renovation": RenovationRequest,
}

# Fields searched by the free-text box of each table
SEARCH_FIELDS = {
    "users": ("username", "email", "first_name", "last_name", "profile__display_name"),
    "providers": ("business_name", "city", "user__username", "user__email"),
    "properties": ("title", "city", "address", "owner__username"),
    "listings": ("title", "category", "city", "seller__username"),
    "requests": ("user__username", "user__email"),
}


def pending_providers():
    """Providers with neither approval flag set and no rejection recorded."""
    return ServiceProvider.objects.filter(is_approved=False, approved=False, rejected_reason="")


@service_call("Failed to load dashboard")
def dashboard_stats():
    User = get_user_model()
    return {
        "users": User.objects.count(),
        "providers": ServiceProvider.objects.count(),
        "properties": Property.objects.count(),
        "listings": MarketplaceListing.objects.count(),
        "requests": {name: model.objects.count() for name, model in REQUEST_MODELS.items()},
        "transactions": Transaction.objects.count(),
        "reviews": Review.objects.count(),
        "pending_providers": pending_providers().count(),
        "pending_properties": Property.objects.filter(status=PropertyStatus.PENDING).count(),
        "pending_listings": MarketplaceListing.objects.filter(status=ListingStatus.PENDING).count(),
        "open_tickets": SupportTicket.objects.filter(status__in=[TicketStatus.OPEN, TicketStatus.IN_PROGRESS]).count(),
    }


def search(queryset, table, term):
    term = clean_text(term, 100)
    if not term:
        return queryset
    clauses = [Q(**{f"{field}__icontains": term}) for field in SEARCH_FIELDS[table]]
    return queryset.filter(reduce(or_, clauses))


@service_call("Failed to fetch users")
def list_users(term="", status=None):
    qs = get_user_model().objects.select_related("profile")
    if status == "suspended":
        qs = qs.filter(is_suspended=True)
    elif status == "active":
        qs = qs.filter(is_suspended=False)
    elif status:
        qs = qs.filter(role=status)
    return fetch_ordered(search(qs, "users", term), "-date_joined")


@service_call("Failed to fetch providers")
def list_providers(term="", status=None):
    qs = ServiceProvider.objects.select_related("user")
    if status == "pending":
        qs = pending_providers().select_related("user")
    elif status == "approved":
        qs = qs.filter(is_approved=True)
    elif status == "rejected":
        qs = qs.filter(is_approved=False).exclude(rejected_reason="")
    return fetch_ordered(search(qs, "providers", term), "-created_at")


@service_call("Failed to fetch properties")
def list_properties(term="", status=None):
    qs = Property.objects.all()
    if status:
        qs = qs.filter(status=status)
    return fetch_ordered(search(qs, "properties", term), "-created_at")


@service_call("Failed to fetch listings")
def list_listings(term="", status=None):
    qs = MarketplaceListing.objects.all()
    if status:
        qs = qs.filter(status=status)
    return fetch_ordered(search(qs, "listings", term), "-created_at")


@service_call("Failed to fetch requests")
def list_requests(kind, term="", status=None):
    model = REQUEST_MODELS.get(kind)
    if model is None:
        raise ValidationError(f"Unknown request kind. Must be one of: {', '.join(REQUEST_MODELS)}")
    qs = model.objects.select_related("user")
    if status:
        qs = qs.filter(status=status)
    return fetch_ordered(search(qs, "requests", term), "-created_at")
