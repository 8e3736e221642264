from django.conf import settings
from django.http import JsonResponse
from django.urls import path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from contacts.views import (
    ContactPayloadValidateView,
    ContactPersonValidateView,
    CustomerCompanyValidateView,
)
from identifiers.views import IdentifierFormatView, IdentifierValidateView


def health_check(request):
    return JsonResponse({"status": "ok"})


schema_view = (
    SpectacularAPIView.as_view(throttle_classes=[])
    if settings.DEBUG
    else SpectacularAPIView.as_view()
)

urlpatterns = [
    path("api/identifiers/format/", IdentifierFormatView.as_view(), name="identifier-format"),
    path("api/identifiers/validate/", IdentifierValidateView.as_view(), name="identifier-validate"),
    path(
        "api/contacts/companies/validate/",
        CustomerCompanyValidateView.as_view(),
        name="contact-company-validate",
    ),
    path(
        "api/contacts/persons/validate/",
        ContactPersonValidateView.as_view(),
        name="contact-person-validate",
    ),
    path("api/contacts/validate/", ContactPayloadValidateView.as_view(), name="contact-validate"),
    path("api/health/", health_check, name="health-check"),
    path("api/schema/", schema_view, name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
]
