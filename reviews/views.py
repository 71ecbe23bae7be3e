from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import SAFE_METHODS, AllowAny
from rest_framework.response import Response

from common.exceptions import ValidationError
from common.permissions import IsActiveMember, IsPlatformAdmin
from common.views import request_payload

from . import services
from .serializers import ReviewSerializer


def _target(params):
    target_type, target_id = params.get("target_type"), params.get("target_id")
    if not target_type or not str(target_id or "").isdigit():
        raise ValidationError("target_type and target_id are required")
    return target_type, int(target_id)


class ReviewViewSet(viewsets.ViewSet):
    """Reviews by target. Deleting is an admin moderation action."""

    def get_permissions(self):
        if self.action == "destroy":
            return [IsPlatformAdmin()]
        if self.request.method in SAFE_METHODS and self.action in ("list", "rating"):
            return [AllowAny()]
        return [IsActiveMember()]

    def list(self, request):
        rows = services.get_by_target(*_target(request.query_params))
        return Response(ReviewSerializer(rows, many=True).data)

    def create(self, request):
        review = services.create(request_payload(request, author_id=request.user.id))
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        services.delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def rating(self, request):
        return Response(services.get_average_rating(*_target(request.query_params)))

    @action(detail=False, methods=["get"])
    def mine(self, request):
        review = services.get_user_review(request.user.id, *_target(request.query_params))
        return Response(ReviewSerializer(review).data if review else None)
