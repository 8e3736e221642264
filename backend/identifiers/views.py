import logging

from drf_spectacular.utils import extend_schema
from rest_framework import permissions, response, views
from rest_framework.throttling import ScopedRateThrottle

from .serializers import (
    IdentifierFormatResponseSerializer,
    IdentifierInputSerializer,
    IdentifierValidateResponseSerializer,
    IdentifierValidateSerializer,
)
from .swiss import format_identifier, validate_identifier

logger = logging.getLogger(__name__)


class IdentifierThrottleMixin:
    # The form validates on every keystroke.
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "identifiers"


@extend_schema(
    request=IdentifierInputSerializer,
    responses=IdentifierFormatResponseSerializer,
)
class IdentifierFormatView(IdentifierThrottleMixin, views.APIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = IdentifierInputSerializer

    def post(self, request):
        serializer = IdentifierInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        kind = serializer.validated_data["kind"]
        value = serializer.validated_data["value"]
        return response.Response(
            {
                "kind": kind,
                "value": value,
                "formatted": format_identifier(kind, value),
            }
        )


@extend_schema(
    request=IdentifierValidateSerializer,
    responses=IdentifierValidateResponseSerializer,
)
class IdentifierValidateView(IdentifierThrottleMixin, views.APIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = IdentifierValidateSerializer

    def post(self, request):
        serializer = IdentifierValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        kind = serializer.validated_data["kind"]
        value = serializer.validated_data["value"]
        formatted = (
            format_identifier(kind, value)
            if serializer.validated_data["auto_format"]
            else value
        )
        result = validate_identifier(kind, formatted)
        logger.debug("Identifier validated kind=%s state=%s", kind, result.state.value)
        return response.Response(
            {
                "kind": kind,
                "value": value,
                "formatted": formatted,
                **result.as_dict(),
            }
        )
