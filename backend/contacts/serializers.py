import re

from rest_framework import serializers

from identifiers.fields import AHVNumberField, SwissIBANField

from .formatting import (
    company_type_abbreviation,
    contact_display_name,
    format_address,
    format_email,
    format_phone_number,
)

SWISS_POSTAL_CODE_RE = re.compile(r"[0-9]{4}")
SWISS_PHONE_RE = re.compile(r"(\+41|0)[0-9\s\-/()]{8,}")
OPTIONAL_PHONE_RE = re.compile(r"(\+41|0)?[0-9\s\-/()]*")

COMPANY_STATUS_CHOICES = ["aktiv", "inaktiv", "potentiell"]
PERSON_STATUS_CHOICES = ["aktiv", "inaktiv"]
COMPANY_CONTACT_TYPE_CHOICES = ["Unternehmen", "Geschäftskunde"]
MARITAL_STATUS_CHOICES = [
    "ledig",
    "verheiratet",
    "geschieden",
    "verwitwet",
    "eingetragene_partnerschaft",
]
ROLE_CHOICES = [
    "masteradministrator",
    "administrator",
    "objektleiter",
    "reinigungsmitarbeiter",
]


def _clean_postal_code(value):
    normalized = str(value or "").strip()
    if normalized and not SWISS_POSTAL_CODE_RE.fullmatch(normalized):
        raise serializers.ValidationError("Postal code must be 4 digits.")
    return normalized


def _clean_optional_phone(value, message):
    normalized = format_phone_number(value)
    if normalized and not OPTIONAL_PHONE_RE.fullmatch(normalized):
        raise serializers.ValidationError(message)
    return normalized


def _formatted_address(data):
    return format_address(
        data.get("address"),
        data.get("postal_code"),
        data.get("city"),
        data.get("country"),
    )


class CustomerCompanySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=4)
    country = serializers.CharField(max_length=100, required=False, default="Schweiz")
    phone = serializers.CharField(max_length=50)
    email = serializers.EmailField(max_length=255)
    website = serializers.URLField(required=False, allow_blank=True)
    vat_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    status = serializers.ChoiceField(
        choices=COMPANY_STATUS_CHOICES, required=False, default="aktiv"
    )
    company_type = serializers.CharField(max_length=100)
    industry_category = serializers.CharField(max_length=100)
    contact_type = serializers.ChoiceField(
        choices=COMPANY_CONTACT_TYPE_CHOICES, required=False, default="Unternehmen"
    )
    display_name = serializers.SerializerMethodField()
    formatted_address = serializers.SerializerMethodField()
    company_type_short = serializers.SerializerMethodField()

    def get_display_name(self, obj) -> str:
        return contact_display_name(obj)

    def get_formatted_address(self, obj) -> str:
        return _formatted_address(obj)

    def get_company_type_short(self, obj) -> str:
        return company_type_abbreviation(obj.get("company_type"))

    def validate_postal_code(self, value):
        return _clean_postal_code(value)

    def validate_phone(self, value):
        normalized = format_phone_number(value)
        if not SWISS_PHONE_RE.fullmatch(normalized):
            raise serializers.ValidationError(
                "Enter a valid Swiss phone number (e.g. +41 79 123 45 67 or 079 123 45 67)."
            )
        return normalized

    def validate_email(self, value):
        return format_email(value)


class ContactPersonSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    position = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    mobile = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=4, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    is_primary_contact = serializers.BooleanField(required=False, default=False)
    is_employee = serializers.BooleanField(required=False, default=False)
    is_private_customer = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    customer_company_id = serializers.UUIDField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=PERSON_STATUS_CHOICES, required=False, default="aktiv"
    )
    contact_type = serializers.CharField(max_length=100, required=False, allow_blank=True)
    display_name = serializers.SerializerMethodField()
    formatted_address = serializers.SerializerMethodField()

    def get_display_name(self, obj) -> str:
        return contact_display_name(obj)

    def get_formatted_address(self, obj) -> str:
        return _formatted_address(obj)

    def validate_email(self, value):
        return format_email(value)

    def validate_phone(self, value):
        return _clean_optional_phone(value, "Invalid phone number.")

    def validate_mobile(self, value):
        return _clean_optional_phone(value, "Invalid mobile number.")

    def validate_postal_code(self, value):
        return _clean_postal_code(value)


class EmployeeDetailsSerializer(serializers.Serializer):
    birth_date = serializers.DateField(required=False, allow_null=True)
    birth_place = serializers.CharField(max_length=255, required=False, allow_blank=True)
    nationality = serializers.CharField(max_length=100, required=False, allow_blank=True)
    current_address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    address_since = serializers.DateField(required=False, allow_null=True)
    origin_country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    permit_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    ahv_number = AHVNumberField()
    marital_status = serializers.ChoiceField(
        choices=MARITAL_STATUS_CHOICES, required=False, allow_blank=True
    )
    tax_residence = serializers.BooleanField(required=False, allow_null=True)
    emergency_contact_name = serializers.CharField(
        max_length=200, required=False, allow_blank=True
    )
    emergency_contact_phone = serializers.CharField(
        max_length=50, required=False, allow_blank=True
    )
    employment_start_date = serializers.DateField(required=False, allow_null=True)
    hourly_wage = serializers.DecimalField(
        max_digits=8, decimal_places=2, required=False, allow_null=True
    )
    iban = SwissIBANField()
    employment_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=1,
        max_value=100,
        required=False,
        allow_null=True,
    )

    def validate_emergency_contact_phone(self, value):
        return _clean_optional_phone(value, "Invalid phone number.")

    def validate_hourly_wage(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("Hourly wage must be positive.")
        return value


class EmployeeChildSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    birth_date = serializers.DateField()


class ContactPayloadSerializer(serializers.Serializer):
    """Everything the contact form submits in one save."""

    contact = ContactPersonSerializer()
    employee_details = EmployeeDetailsSerializer(required=False, allow_null=True)
    children = EmployeeChildSerializer(many=True, required=False)
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False, allow_blank=True)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs["contact"].get("is_employee"):
            return attrs

        errors = {}
        if attrs.get("employee_details"):
            errors["employee_details"] = "Employee details require an employee contact."
        if attrs.get("children"):
            errors["children"] = "Children can only be recorded for employees."
        if errors:
            raise serializers.ValidationError(errors)
        return attrs
