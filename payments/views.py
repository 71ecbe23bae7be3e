"""
Payment endpoints.

Members record payments for their own requests; settling a transaction is
reserved for platform admins, who reconcile against the payment provider.
"""
from django.core.exceptions import PermissionDenied
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.permissions import IsActiveMember, IsPlatformAdmin, is_platform_admin

from . import services
from .serializers import TransactionCreateSerializer, TransactionSerializer, TransactionStatusSerializer


class TransactionViewSet(viewsets.ViewSet):
    permission_classes = [IsActiveMember]

    def list(self, request):
        return Response(TransactionSerializer(services.get_by_user(request.user.id), many=True).data)

    def retrieve(self, request, pk=None):
        txn = services.get_by_id(pk)
        if txn.user_id != request.user.id and not is_platform_admin(request.user):
            raise PermissionDenied("You cannot view this transaction")
        return Response(TransactionSerializer(txn).data)

    def create(self, request):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        txn = services.create(
            request.user.id,
            data["target_type"],
            data["target_id"],
            data["amount"],
            currency=data.get("currency"),
            reference=data.get("reference", ""),
        )
        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], permission_classes=[IsPlatformAdmin])
    def all(self, request):
        return Response(TransactionSerializer(services.get_all(), many=True).data)

    @action(detail=True, methods=["post"], url_path="status", permission_classes=[IsPlatformAdmin])
    def set_status(self, request, pk=None):
        serializer = TransactionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = services.update_status(pk, serializer.validated_data["status"])
        return Response(TransactionSerializer(txn).data)
