from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from .swiss import BAD_CHECKSUM, validate_ahv, validate_iban

IBAN_FORMAT_MESSAGE = _("Enter a Swiss IBAN in the format CH93 0076 2011 6238 5295 7.")
IBAN_CHECKSUM_MESSAGE = _("The IBAN checksum is not valid.")
AHV_FORMAT_MESSAGE = _("Enter an AHV number in the format 756.XXXX.XXXX.XX.")


def validate_swiss_iban(value):
    result = validate_iban(value)
    if not result.is_invalid:
        return
    if result.reason == BAD_CHECKSUM:
        raise ValidationError(IBAN_CHECKSUM_MESSAGE, code="invalid_iban_checksum")
    raise ValidationError(IBAN_FORMAT_MESSAGE, code="invalid_iban_format")


def validate_ahv_number(value):
    if validate_ahv(value).is_invalid:
        raise ValidationError(AHV_FORMAT_MESSAGE, code="invalid_ahv")
