from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APIClient

from config.exceptions import api_exception_handler

from .errors import parse_database_error
from .formatting import (
    company_type_abbreviation,
    contact_display_name,
    contact_person_full_name,
    format_address,
    format_email,
    format_phone_number,
)
from .serializers import (
    ContactPayloadSerializer,
    ContactPersonSerializer,
    CustomerCompanySerializer,
    EmployeeDetailsSerializer,
)


def company_payload(**overrides):
    payload = {
        "name": "Blitzblank GmbH",
        "address": "Bahnhofstrasse 1",
        "city": "Zürich",
        "postal_code": "8001",
        "phone": "+41 44 123 45 67",
        "email": "Info@Blitzblank.CH",
        "company_type": "GmbH",
        "industry_category": "Gebäudereinigung",
    }
    payload.update(overrides)
    return payload


def contact_payload(**overrides):
    payload = {
        "first_name": "Anna",
        "last_name": "Meier",
        "email": "anna.meier@example.ch",
        "phone": "079 123 45 67",
        "is_employee": True,
    }
    payload.update(overrides)
    return payload


class FakeDriverError(Exception):
    def __init__(self, message, pgcode):
        super().__init__(message)
        self.pgcode = pgcode


def integrity_error(message, pgcode):
    error = IntegrityError(message)
    error.__cause__ = FakeDriverError(message, pgcode)
    return error


class FormattingTests(SimpleTestCase):
    def test_format_address(self):
        self.assertEqual(
            format_address("Bahnhofstrasse 1", "8001", "Zürich", "Schweiz"),
            "Bahnhofstrasse 1, 8001 Zürich, Schweiz",
        )
        self.assertEqual(format_address(None, "8001", None, None), "8001")
        self.assertEqual(format_address("Hauptgasse 3", None, "Bern"), "Hauptgasse 3, Bern")
        self.assertEqual(format_address(), "")

    def test_company_type_abbreviation(self):
        self.assertEqual(company_type_abbreviation("Genossenschaft"), "eG")
        self.assertEqual(company_type_abbreviation("Limited"), "Ltd.")
        self.assertEqual(company_type_abbreviation("Schweizer Stiftung"), "Stift.")
        self.assertEqual(company_type_abbreviation("Kollektiv"), "Kol.")
        self.assertEqual(company_type_abbreviation("SA"), "SA")
        self.assertEqual(company_type_abbreviation(None), "")

    def test_names(self):
        person = {"first_name": "Anna", "last_name": "Meier"}
        self.assertEqual(contact_person_full_name(person), "Anna Meier")
        self.assertEqual(contact_person_full_name({"first_name": "Anna"}), "Anna")
        self.assertEqual(contact_display_name(person), "Anna Meier")
        self.assertEqual(contact_display_name({"name": "Blitzblank GmbH"}), "Blitzblank GmbH")

    def test_phone_and_email(self):
        self.assertEqual(format_phone_number("  079 123 45 67 "), "079 123 45 67")
        self.assertEqual(format_phone_number(None), "")
        self.assertEqual(format_email(" Anna.Meier@Example.CH "), "anna.meier@example.ch")


class CustomerCompanySerializerTests(SimpleTestCase):
    def test_valid_company_is_normalized(self):
        serializer = CustomerCompanySerializer(data=company_payload())
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["email"], "info@blitzblank.ch")
        self.assertEqual(serializer.validated_data["country"], "Schweiz")
        self.assertEqual(serializer.validated_data["status"], "aktiv")
        self.assertEqual(serializer.validated_data["contact_type"], "Unternehmen")

    def test_postal_code_must_have_four_digits(self):
        for postal_code in ["800", "80O1", "80011"]:
            with self.subTest(postal_code=postal_code):
                serializer = CustomerCompanySerializer(
                    data=company_payload(postal_code=postal_code)
                )
                self.assertFalse(serializer.is_valid())
                self.assertIn("postal_code", serializer.errors)

    def test_phone_must_be_swiss(self):
        serializer = CustomerCompanySerializer(data=company_payload(phone="+49 30 123456"))
        self.assertFalse(serializer.is_valid())
        self.assertIn("phone", serializer.errors)

    def test_required_fields(self):
        serializer = CustomerCompanySerializer(data={})
        self.assertFalse(serializer.is_valid())
        for field in ["name", "address", "city", "postal_code", "phone", "email"]:
            self.assertIn(field, serializer.errors)

    def test_status_choices(self):
        serializer = CustomerCompanySerializer(data=company_payload(status="geschlossen"))
        self.assertFalse(serializer.is_valid())
        self.assertIn("status", serializer.errors)


class ContactPersonSerializerTests(SimpleTestCase):
    def test_optional_fields_may_be_blank(self):
        serializer = ContactPersonSerializer(
            data={"first_name": "Anna", "last_name": "Meier", "email": "", "phone": "", "postal_code": ""}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertFalse(serializer.validated_data["is_employee"])

    def test_invalid_mobile(self):
        serializer = ContactPersonSerializer(data=contact_payload(mobile="call me"))
        self.assertFalse(serializer.is_valid())
        self.assertIn("mobile", serializer.errors)

    def test_invalid_company_reference(self):
        serializer = ContactPersonSerializer(data=contact_payload(customer_company_id="abc"))
        self.assertFalse(serializer.is_valid())
        self.assertIn("customer_company_id", serializer.errors)


class EmployeeDetailsSerializerTests(SimpleTestCase):
    def test_identifiers_are_normalized(self):
        serializer = EmployeeDetailsSerializer(
            data={"iban": "CH9300762011623852957", "ahv_number": "756 1234 1234 01"}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["iban"], "CH93 0076 2011 6238 5295 7")
        self.assertEqual(serializer.validated_data["ahv_number"], "756.1234.1234.01")

    def test_invalid_identifiers(self):
        serializer = EmployeeDetailsSerializer(
            data={"iban": "CH00 0000 0000 0000 0000 0", "ahv_number": "756.123.1234.01"}
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("iban", serializer.errors)
        self.assertIn("ahv_number", serializer.errors)

    def test_employment_rate_bounds(self):
        for rate in ["0", "100.5", "-10"]:
            with self.subTest(rate=rate):
                serializer = EmployeeDetailsSerializer(data={"employment_rate": rate})
                self.assertFalse(serializer.is_valid())
                self.assertIn("employment_rate", serializer.errors)
        serializer = EmployeeDetailsSerializer(data={"employment_rate": "80"})
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_hourly_wage_must_be_positive(self):
        serializer = EmployeeDetailsSerializer(data={"hourly_wage": "0"})
        self.assertFalse(serializer.is_valid())
        self.assertIn("hourly_wage", serializer.errors)
        serializer = EmployeeDetailsSerializer(data={"hourly_wage": "32.50"})
        self.assertTrue(serializer.is_valid(), serializer.errors)


class ContactPayloadSerializerTests(SimpleTestCase):
    def test_employee_payload(self):
        serializer = ContactPayloadSerializer(
            data={
                "contact": contact_payload(),
                "employee_details": {"iban": "CH93 0076 2011 6238 5295 7", "employment_rate": 60},
                "children": [
                    {"first_name": "Lina", "last_name": "Meier", "birth_date": "2015-04-02"}
                ],
                "role": "reinigungsmitarbeiter",
            }
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(len(serializer.validated_data["children"]), 1)

    def test_employee_sections_require_employee_contact(self):
        serializer = ContactPayloadSerializer(
            data={
                "contact": contact_payload(is_employee=False),
                "employee_details": {"ahv_number": "756.1234.1234.01"},
                "children": [
                    {"first_name": "Lina", "last_name": "Meier", "birth_date": "2015-04-02"}
                ],
            }
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("employee_details", serializer.errors)
        self.assertIn("children", serializer.errors)

    def test_null_employee_details_for_non_employee(self):
        serializer = ContactPayloadSerializer(
            data={"contact": contact_payload(is_employee=False), "employee_details": None}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertIsNone(serializer.validated_data["employee_details"])

    def test_child_requires_birth_date(self):
        serializer = ContactPayloadSerializer(
            data={
                "contact": contact_payload(),
                "children": [{"first_name": "Lina", "last_name": "Meier"}],
            }
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("children", serializer.errors)

    def test_unknown_role(self):
        serializer = ContactPayloadSerializer(
            data={"contact": contact_payload(), "role": "superuser"}
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("role", serializer.errors)


class DatabaseErrorTests(SimpleTestCase):
    def test_check_constraints_map_to_codes(self):
        cases = {
            "valid_swiss_iban": "INVALID_IBAN",
            "valid_swiss_ahv": "INVALID_AHV",
            "valid_employment_rate": "INVALID_EMPLOYMENT_RATE",
            "valid_hourly_wage": "INVALID_HOURLY_WAGE",
            "some_other_check": "VALIDATION_ERROR",
        }
        for constraint, code in cases.items():
            with self.subTest(constraint=constraint):
                error = integrity_error(
                    f'new row violates check constraint "{constraint}"', "23514"
                )
                self.assertEqual(parse_database_error(error).code, code)

    def test_duplicate_and_foreign_key(self):
        self.assertEqual(
            parse_database_error(integrity_error("duplicate key", "23505")).code,
            "DUPLICATE_ENTRY",
        )
        self.assertEqual(
            parse_database_error(integrity_error("still referenced", "23503")).code,
            "FOREIGN_KEY_VIOLATION",
        )

    def test_row_level_security(self):
        error = Exception('new row violates row-level security policy for table "contact_persons"')
        self.assertEqual(parse_database_error(error).code, "PERMISSION_DENIED")

    def test_unknown_error_hides_driver_message(self):
        error = parse_database_error(Exception("password=secret"))
        self.assertEqual(error.code, "UNKNOWN_ERROR")
        self.assertNotIn("secret", error.message)


class ExceptionHandlerTests(SimpleTestCase):
    def test_check_violation_is_bad_request(self):
        error = integrity_error('violates check constraint "valid_swiss_ahv"', "23514")
        response = api_exception_handler(error, {"view": None})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_AHV")

    def test_duplicate_is_conflict(self):
        response = api_exception_handler(integrity_error("duplicate key", "23505"), {})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_row_level_security_is_forbidden(self):
        error = DatabaseError(
            'new row violates row-level security policy for table "contact_persons"'
        )
        response = api_exception_handler(error, {})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "PERMISSION_DENIED")

    def test_other_exceptions_are_left_alone(self):
        self.assertIsNone(api_exception_handler(RuntimeError("boom"), {}))


class ContactValidationApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = get_user_model().objects.create_user(
            username="admin",
            password="pass12345",
        )

    def test_requires_auth(self):
        response = self.client.post("/api/contacts/validate/", {}, format="json")
        self.assertIn(
            response.status_code,
            [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN],
        )

    def test_company_validation(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/contacts/companies/validate/",
            company_payload(),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "info@blitzblank.ch")
        self.assertEqual(response.data["display_name"], "Blitzblank GmbH")
        self.assertEqual(
            response.data["formatted_address"], "Bahnhofstrasse 1, 8001 Zürich, Schweiz"
        )
        self.assertEqual(response.data["company_type_short"], "GmbH")

    def test_company_validation_errors(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/contacts/companies/validate/",
            company_payload(postal_code="123"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("postal_code", response.data)

    def test_person_validation(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/contacts/persons/validate/",
            contact_payload(email="Anna.Meier@Example.CH"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "anna.meier@example.ch")
        self.assertEqual(response.data["display_name"], "Anna Meier")
        self.assertEqual(response.data["formatted_address"], "")

    def test_full_payload_returns_normalized_identifiers(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/contacts/validate/",
            {
                "contact": contact_payload(),
                "employee_details": {
                    "iban": "CH9300762011623852957",
                    "ahv_number": "7561234123401",
                    "hourly_wage": "32.50",
                },
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        details = response.data["employee_details"]
        self.assertEqual(details["iban"], "CH93 0076 2011 6238 5295 7")
        self.assertEqual(details["ahv_number"], "756.1234.1234.01")
        self.assertEqual(details["hourly_wage"], "32.50")

    def test_full_payload_rejects_bad_iban(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/contacts/validate/",
            {
                "contact": contact_payload(),
                "employee_details": {"iban": "CH00 0000 0000 0000 0000 0"},
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("iban", response.data["employee_details"])
