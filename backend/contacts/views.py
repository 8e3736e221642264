import logging

from drf_spectacular.utils import extend_schema
from rest_framework import permissions, response, status, views

from .serializers import (
    ContactPayloadSerializer,
    ContactPersonSerializer,
    CustomerCompanySerializer,
)

logger = logging.getLogger(__name__)


class PayloadValidationView(views.APIView):
    """Validate and normalize a form payload without persisting it."""

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = None

    def post(self, request):
        serializer = self.serializer_class(data=request.data)
        if not serializer.is_valid():
            logger.info(
                "%s rejected fields: %s",
                self.serializer_class.__name__,
                ", ".join(sorted(serializer.errors)),
            )
            return response.Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        return response.Response(serializer.data)


@extend_schema(request=CustomerCompanySerializer, responses=CustomerCompanySerializer)
class CustomerCompanyValidateView(PayloadValidationView):
    serializer_class = CustomerCompanySerializer


@extend_schema(request=ContactPersonSerializer, responses=ContactPersonSerializer)
class ContactPersonValidateView(PayloadValidationView):
    serializer_class = ContactPersonSerializer


@extend_schema(request=ContactPayloadSerializer, responses=ContactPayloadSerializer)
class ContactPayloadValidateView(PayloadValidationView):
    serializer_class = ContactPayloadSerializer
