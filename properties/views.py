"""
Property and request endpoints.

Services do not check ownership; these viewsets do: only the owner (or a
platform admin) edits a property, only the owner moves a request forward,
and requesters may only cancel their own offers.
"""
from django.core.exceptions import PermissionDenied
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import SAFE_METHODS, AllowAny
from rest_framework.response import Response

from common.exceptions import NotFound
from common.permissions import IsActiveMember, is_platform_admin
from common.serializers import RequestUpdateSerializer
from common.views import request_payload

from . import services
from .models import BuySellStatus, PropertyStatus
from .serializers import BuySellRequestSerializer, PropertySerializer, RentalRequestSerializer, StatusSerializer


class PropertyViewSet(viewsets.ViewSet):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.request.method in SAFE_METHODS and self.action in ("list", "retrieve"):
            return [AllowAny()]
        return [IsActiveMember()]

    def _owned(self, pk):
        prop = services.get_property(pk, increment_views=False)
        if prop.owner_id != self.request.user.id and not is_platform_admin(self.request.user):
            raise PermissionDenied("You do not own this property")
        return prop

    def list(self, request):
        params = request.query_params
        filters = {
            key: params.get(key)
            for key in ("listing_type", "city", "min_price", "max_price", "min_bedrooms", "search")
            if params.get(key)
        }
        for flag in ("furnished", "parking"):
            if params.get(flag) is not None:
                filters[flag] = params.get(flag) in ("1", "true", "yes")
        options = {
            "sort_by": params.get("sort_by"),
            "sort_order": params.get("sort_order"),
            "limit": int(params["limit"]) if params.get("limit", "").isdigit() else None,
        }
        rows = services.list_properties(filters, options)
        return Response(PropertySerializer(rows, many=True).data)

    def retrieve(self, request, pk=None):
        prop = services.get_property(pk, increment_views=True)
        if prop.status != PropertyStatus.PUBLISHED and prop.owner_id != request.user.id and not is_platform_admin(request.user):
            raise NotFound("Property not found")
        return Response(PropertySerializer(prop).data)

    def create(self, request):
        prop = services.create_property(request.user, request.data, request.FILES.getlist("images"))
        return Response(PropertySerializer(prop).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        self._owned(pk)
        prop = services.update_property(pk, request.data, request.FILES.getlist("images"))
        return Response(PropertySerializer(prop).data)

    def destroy(self, request, pk=None):
        self._owned(pk)
        services.delete_property(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post", "delete"])
    def images(self, request, pk=None):
        self._owned(pk)
        if request.method == "DELETE":
            services.delete_images(pk)
        else:
            services.upload_images(pk, request.FILES.getlist("images"))
        return Response(PropertySerializer(services.get_property(pk, increment_views=False)).data)

    @action(detail=False, methods=["get"])
    def mine(self, request):
        return Response(PropertySerializer(services.get_by_owner(request.user.id), many=True).data)


class PropertyRequestViewSet(viewsets.ViewSet):
    """Shared create/list/status endpoints for rental and buy/sell requests."""
    permission_classes = [IsActiveMember]
    service = None
    serializer_class = None
    owner_field = "owner_id"
    # Statuses the requester may set on their own request
    requester_statuses = ()

    def _serialize(self, obj, many=False):
        return self.serializer_class(obj, many=many).data

    def list(self, request):
        return Response(self._serialize(self.service.get_by_user(request.user.id), many=True))

    @action(detail=False, methods=["get"])
    def received(self, request):
        return Response(self._serialize(self.service.get_by_owner(request.user.id), many=True))

    def _visible(self, pk):
        obj = self.service.get_by_id(pk)
        if self.request.user.id not in (obj.user_id, getattr(obj, self.owner_field)) and not is_platform_admin(self.request.user):
            raise PermissionDenied("You cannot view this request")
        return obj

    def retrieve(self, request, pk=None):
        return Response(self._serialize(self._visible(pk)))

    @action(detail=True, methods=["get"])
    def updates(self, request, pk=None):
        self._visible(pk)
        return Response(RequestUpdateSerializer(self.service.get_updates(pk), many=True).data)

    def create(self, request):
        obj = self.service.create(request_payload(request, user_id=request.user.id))
        return Response(self._serialize(obj), status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        obj = self.service.get_by_id(pk)
        if obj.user_id != request.user.id and not is_platform_admin(request.user):
            raise PermissionDenied("You cannot delete this request")
        self.service.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data["status"]
        obj = self.service.get_by_id(pk)
        is_owner = getattr(obj, self.owner_field) == request.user.id
        is_requester = obj.user_id == request.user.id and target in self.requester_statuses
        if not (is_owner or is_requester or is_platform_admin(request.user)):
            raise PermissionDenied("You cannot change the status of this request")
        obj = self.service.update_status(
            pk, target, updated_by=request.user.id, note=serializer.validated_data.get("note", "")
        )
        return Response(self._serialize(obj))


class RentalRequestViewSet(PropertyRequestViewSet):
    service = services.rental_requests
    serializer_class = RentalRequestSerializer
    owner_field = "landlord_id"


class BuySellRequestViewSet(PropertyRequestViewSet):
    service = services.buy_sell_requests
    serializer_class = BuySellRequestSerializer
    requester_statuses = (BuySellStatus.CANCELLED,)
