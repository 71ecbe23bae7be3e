"""
Marketplace endpoints.

Anyone may browse active listings; sellers manage their own listings and
answer offers on them; buyers create and withdraw their own offers and
place orders. Approval and rejection live in the admin panel.
"""
from django.core.exceptions import PermissionDenied
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import SAFE_METHODS, AllowAny
from rest_framework.response import Response

from common.exceptions import NotFound
from common.permissions import IsActiveMember, IsPlatformAdmin, is_platform_admin
from common.views import request_payload

from . import services
from .models import ListingStatus, OfferStatus
from .serializers import ListingSerializer, ListingWriteSerializer, OfferSerializer, OfferStatusSerializer, OrderSerializer

LIST_FILTERS = ("category", "city", "min_price", "max_price", "seller_id")


class ListingViewSet(viewsets.ViewSet):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.request.method in SAFE_METHODS and self.action in ("list", "retrieve"):
            return [AllowAny()]
        return [IsActiveMember()]

    def _owned(self, pk):
        listing = services.get_listing(pk, increment_views=False)
        if listing.seller_id != self.request.user.id and not is_platform_admin(self.request.user):
            raise PermissionDenied("You do not own this listing")
        return listing

    def _validated(self, request):
        serializer = ListingWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        images = data.pop("images", None) or request.FILES.getlist("images")
        return data, images

    def list(self, request):
        params = request.query_params
        filters = {key: params.get(key) for key in LIST_FILTERS if params.get(key)}
        options = {
            "sort_by": params.get("sort_by"),
            "sort_order": params.get("sort_order"),
            "limit": int(params["limit"]) if params.get("limit", "").isdigit() else 100,
        }
        rows = services.get_all(filters, options)
        return Response(ListingSerializer(rows, many=True).data)

    def retrieve(self, request, pk=None):
        listing = services.get_listing(pk, increment_views=True)
        if listing.status != ListingStatus.ACTIVE and listing.seller_id != request.user.id and not is_platform_admin(request.user):
            raise NotFound("Listing not found")
        return Response(ListingSerializer(listing).data)

    def create(self, request):
        data, images = self._validated(request)
        data["seller_id"] = request.user.id
        listing = services.create_listing(data, images)
        return Response(ListingSerializer(listing).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        self._owned(pk)
        data, images = self._validated(request)
        listing = services.update_listing(pk, data, images)
        return Response(ListingSerializer(listing).data)

    def destroy(self, request, pk=None):
        self._owned(pk)
        services.delete_listing(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def mine(self, request):
        rows = services.get_all({"status": None, "seller_id": request.user.id})
        return Response(ListingSerializer(rows, many=True).data)

    @action(detail=True, methods=["post"], url_path="mark-sold")
    def mark_sold(self, request, pk=None):
        self._owned(pk)
        return Response(ListingSerializer(services.mark_sold(pk)).data)

    @action(detail=True, methods=["get"])
    def offers(self, request, pk=None):
        self._owned(pk)
        return Response(OfferSerializer(services.get_offers_by_listing(pk), many=True).data)


class OfferViewSet(viewsets.ViewSet):
    permission_classes = [IsActiveMember]

    def list(self, request):
        return Response(OfferSerializer(services.get_offers_by_buyer(request.user.id), many=True).data)

    @action(detail=False, methods=["get"])
    def received(self, request):
        return Response(OfferSerializer(services.get_offers_by_seller(request.user.id), many=True).data)

    def create(self, request):
        offer = services.create_offer(request_payload(request, buyer_id=request.user.id))
        return Response(OfferSerializer(offer).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = OfferStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["status"]
        offer = services._get_offer(pk)
        if target == OfferStatus.WITHDRAWN:
            allowed = offer.buyer_id == request.user.id
        else:
            allowed = offer.listing.seller_id == request.user.id
        if not (allowed or is_platform_admin(request.user)):
            raise PermissionDenied("You cannot change the status of this offer")
        offer = services.update_offer_status(pk, target)
        return Response(OfferSerializer(offer).data)


class OrderViewSet(viewsets.ViewSet):
    """The caller's orders; ``all`` is the admin view of every order."""

    def get_permissions(self):
        if self.action == "all":
            return [IsPlatformAdmin()]
        return [IsActiveMember()]

    def list(self, request):
        return Response(OrderSerializer(services.get_orders_by_user(request.user.id), many=True).data)

    def retrieve(self, request, pk=None):
        order = services.get_order(pk)
        if order.user_id != request.user.id and not is_platform_admin(request.user):
            raise NotFound("Order not found")
        return Response(OrderSerializer(order).data)

    def create(self, request):
        order = services.create_order(request_payload(request, user_id=request.user.id))
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def all(self, request):
        return Response(OrderSerializer(services.get_all_orders(), many=True).data)
