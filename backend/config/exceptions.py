import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from contacts.errors import parse_database_error

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "DUPLICATE_ENTRY": status.HTTP_409_CONFLICT,
    "FOREIGN_KEY_VIOLATION": status.HTTP_409_CONFLICT,
    "INVALID_IBAN": status.HTTP_400_BAD_REQUEST,
    "INVALID_AHV": status.HTTP_400_BAD_REQUEST,
    "INVALID_EMPLOYMENT_RATE": status.HTTP_400_BAD_REQUEST,
    "INVALID_HOURLY_WAGE": status.HTTP_400_BAD_REQUEST,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
}


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None or not isinstance(exc, DatabaseError):
        return response

    error = parse_database_error(exc)
    view = context.get("view")
    logger.warning(
        "Database error mapped to %s in %s",
        error.code,
        view.__class__.__name__ if view is not None else "unknown view",
        exc_info=error.code == "UNKNOWN_ERROR",
    )
    return Response(
        error.as_dict(),
        status=_STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )
