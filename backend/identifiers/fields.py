from __future__ import annotations

from typing import Any

from rest_framework import serializers

from .swiss import BAD_CHECKSUM, format_ahv, format_iban, validate_ahv, validate_iban
from .validators import AHV_FORMAT_MESSAGE, IBAN_CHECKSUM_MESSAGE, IBAN_FORMAT_MESSAGE


class SwissIBANField(serializers.CharField):
    """Accepts a Swiss IBAN in any spacing and stores it grouped by four."""

    default_error_messages = {
        "invalid_iban_format": IBAN_FORMAT_MESSAGE,
        "invalid_iban_checksum": IBAN_CHECKSUM_MESSAGE,
    }

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("max_length", 34)
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_blank", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not value:
            return value
        result = validate_iban(value)
        if result.reason == BAD_CHECKSUM:
            self.fail("invalid_iban_checksum")
        if result.is_invalid:
            self.fail("invalid_iban_format")
        return format_iban(value)


class AHVNumberField(serializers.CharField):
    """AHV number; bare 13-digit input starting with 756 is dotted first."""

    default_error_messages = {
        "invalid_ahv": AHV_FORMAT_MESSAGE,
    }

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("max_length", 16)
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_blank", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        if not value:
            return value
        value = format_ahv(value)
        if validate_ahv(value).is_invalid:
            self.fail("invalid_ahv")
        return value
