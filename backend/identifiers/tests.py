from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from rest_framework import serializers, status
from rest_framework.test import APIClient

from .fields import AHVNumberField, SwissIBANField
from .swiss import (
    BAD_CHECKSUM,
    BAD_FORMAT,
    IdentifierKind,
    ValidationState,
    format_ahv,
    format_iban,
    format_identifier,
    iban_checksum_remainder,
    mod97,
    validate_ahv,
    validate_iban,
    validate_identifier,
)
from .validators import validate_ahv_number, validate_swiss_iban

VALID_IBAN = "CH93 0076 2011 6238 5295 7"


class IbanTests(SimpleTestCase):
    def test_format_groups_by_four(self):
        self.assertEqual(format_iban("CH9300762011623852957"), VALID_IBAN)

    def test_format_collapses_any_whitespace(self):
        self.assertEqual(format_iban("  CH93\t0076 20116238\n52957 "), VALID_IBAN)

    def test_format_does_not_validate(self):
        self.assertEqual(format_iban("hello world"), "hell owor ld")
        self.assertEqual(format_iban(""), "")

    def test_format_is_idempotent(self):
        samples = ["", "a", "CH9300762011623852957", " x y z 1 2 3 4 5 ", "DE89 3704 0044 0532 0130 00"]
        for sample in samples:
            with self.subTest(sample=sample):
                self.assertEqual(format_iban(format_iban(sample)), format_iban(sample))

    def test_valid_swiss_iban(self):
        result = validate_iban(VALID_IBAN)
        self.assertEqual(result.state, ValidationState.VALID)
        self.assertIsNone(result.reason)
        self.assertTrue(validate_iban("CH5604835012345678009").is_valid)

    def test_valid_iban_without_spaces(self):
        self.assertTrue(validate_iban("CH9300762011623852957").is_valid)

    def test_bad_checksum(self):
        result = validate_iban("CH00 0000 0000 0000 0000 0")
        self.assertEqual(result.state, ValidationState.INVALID)
        self.assertEqual(result.reason, BAD_CHECKSUM)
        self.assertEqual(validate_iban("CH93 0076 2011 6238 5295 8").reason, BAD_CHECKSUM)

    def test_wrong_country_is_bad_format(self):
        result = validate_iban("DE93 0076 2011 6238 5295 7")
        self.assertEqual(result.state, ValidationState.INVALID)
        self.assertEqual(result.reason, BAD_FORMAT)

    def test_wrong_length_is_bad_format(self):
        self.assertEqual(validate_iban("CH93 0076 2011 6238 5295").reason, BAD_FORMAT)
        self.assertEqual(validate_iban("CH93 0076 2011 6238 5295 71").reason, BAD_FORMAT)

    def test_lowercase_country_code_is_bad_format(self):
        self.assertEqual(validate_iban("ch93 0076 2011 6238 5295 7").reason, BAD_FORMAT)

    def test_non_ascii_digits_are_bad_format(self):
        self.assertEqual(validate_iban("CH٩٣0076201162385295 7").reason, BAD_FORMAT)

    def test_empty_is_idle(self):
        self.assertEqual(validate_iban("").state, ValidationState.IDLE)
        self.assertEqual(validate_iban(None).state, ValidationState.IDLE)

    def test_whitespace_only_is_invalid(self):
        self.assertEqual(validate_iban("   ").reason, BAD_FORMAT)

    def test_mod97_chunked_reduction(self):
        self.assertEqual(mod97("3214282912345698765432161182"), 1)
        self.assertEqual(mod97("121700"), 121700 % 97)
        self.assertEqual(mod97("96"), 96)
        self.assertEqual(mod97(""), 0)

    def test_checksum_remainder_for_foreign_iban(self):
        self.assertEqual(iban_checksum_remainder("GB82WEST12345698765432"), 1)


class AhvTests(SimpleTestCase):
    def test_format_bare_digits(self):
        self.assertEqual(format_ahv("7561234123401"), "756.1234.1234.01")

    def test_format_strips_separators(self):
        self.assertEqual(format_ahv("756 1234-1234 01"), "756.1234.1234.01")
        self.assertEqual(format_ahv("756.1234.1234.01"), "756.1234.1234.01")

    def test_format_leaves_partial_input_untouched(self):
        self.assertEqual(format_ahv("756123"), "756123")
        self.assertEqual(format_ahv("1231234123401"), "1231234123401")
        self.assertEqual(format_ahv("75612341234012"), "75612341234012")

    def test_valid(self):
        result = validate_ahv("756.1234.1234.01")
        self.assertEqual(result.state, ValidationState.VALID)

    def test_wrong_group_length(self):
        result = validate_ahv("756.123.1234.01")
        self.assertEqual(result.state, ValidationState.INVALID)
        self.assertEqual(result.reason, BAD_FORMAT)

    def test_requires_dotted_form(self):
        self.assertTrue(validate_ahv("7561234123401").is_invalid)
        self.assertTrue(validate_ahv("756-1234-1234-01").is_invalid)
        self.assertTrue(validate_ahv("757.1234.1234.01").is_invalid)
        self.assertTrue(validate_ahv("756.1234.1234.01\n").is_invalid)

    def test_empty_is_idle(self):
        self.assertEqual(validate_ahv("").state, ValidationState.IDLE)


class IdentifierDispatchTests(SimpleTestCase):
    def test_dispatch_by_kind(self):
        self.assertEqual(format_identifier("iban", "CH9300762011623852957"), VALID_IBAN)
        self.assertEqual(format_identifier(IdentifierKind.AHV, "7561234123401"), "756.1234.1234.01")
        self.assertTrue(validate_identifier("iban", VALID_IBAN).is_valid)
        self.assertTrue(validate_identifier("ahv", "756.1234.1234.01").is_valid)

    def test_text_kind_is_passthrough(self):
        self.assertEqual(format_identifier("text", " anything "), " anything ")
        self.assertEqual(validate_identifier("text", "anything").state, ValidationState.IDLE)

    def test_unknown_kind_raises(self):
        with self.assertRaises(ValueError):
            validate_identifier("bic", "POFICHBEXXX")
        with self.assertRaises(ValueError):
            format_identifier("bic", "POFICHBEXXX")

    def test_never_raises_for_hostile_input(self):
        samples = [
            "",
            "x" * 100_000,
            "CH" + "9" * 10_000,
            "756." * 5000,
            "äöü \U0001F600 \x00",
            "CH93 0076 2011 6238 5295 ٩",
        ]
        for kind in ("iban", "ahv", "text"):
            for sample in samples:
                with self.subTest(kind=kind, sample=sample[:20]):
                    result = validate_identifier(kind, sample)
                    self.assertIn(result.state, list(ValidationState))
                    format_identifier(kind, sample)

    def test_empty_input_is_idle_for_every_kind(self):
        for kind in IdentifierKind:
            with self.subTest(kind=kind):
                self.assertEqual(validate_identifier(kind, "").state, ValidationState.IDLE)

    def test_result_as_dict(self):
        self.assertEqual(
            validate_identifier("ahv", "756.123").as_dict(),
            {
                "state": "invalid",
                "reason": "bad format",
                "message": "Invalid format (756.XXXX.XXXX.XX).",
            },
        )
        self.assertEqual(
            validate_identifier("ahv", "").as_dict(),
            {"state": "idle", "reason": None, "message": ""},
        )


class IdentifierValidatorTests(SimpleTestCase):
    def test_swiss_iban_validator_codes(self):
        validate_swiss_iban(VALID_IBAN)
        validate_swiss_iban("")
        with self.assertRaises(ValidationError) as ctx:
            validate_swiss_iban("CH00 0000 0000 0000 0000 0")
        self.assertEqual(ctx.exception.code, "invalid_iban_checksum")
        with self.assertRaises(ValidationError) as ctx:
            validate_swiss_iban("DE89 3704 0044 0532 0130 00")
        self.assertEqual(ctx.exception.code, "invalid_iban_format")

    def test_ahv_validator_code(self):
        validate_ahv_number("756.1234.1234.01")
        with self.assertRaises(ValidationError) as ctx:
            validate_ahv_number("7561234123401")
        self.assertEqual(ctx.exception.code, "invalid_ahv")


class _IdentifierFieldsSerializer(serializers.Serializer):
    iban = SwissIBANField()
    ahv_number = AHVNumberField()


class IdentifierFieldTests(SimpleTestCase):
    def test_fields_normalize_valid_values(self):
        serializer = _IdentifierFieldsSerializer(
            data={"iban": "CH9300762011623852957", "ahv_number": "7561234123401"}
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["iban"], VALID_IBAN)
        self.assertEqual(serializer.validated_data["ahv_number"], "756.1234.1234.01")

    def test_fields_allow_blank(self):
        serializer = _IdentifierFieldsSerializer(data={"iban": "", "ahv_number": ""})
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_fields_report_error_codes(self):
        serializer = _IdentifierFieldsSerializer(
            data={"iban": "CH00 0000 0000 0000 0000 0", "ahv_number": "756.123.1234.01"}
        )
        self.assertFalse(serializer.is_valid())
        self.assertEqual(serializer.errors["iban"][0].code, "invalid_iban_checksum")
        self.assertEqual(serializer.errors["ahv_number"][0].code, "invalid_ahv")

    def test_iban_field_rejects_foreign_iban(self):
        serializer = _IdentifierFieldsSerializer(data={"iban": "DE89 3704 0044 0532 0130 00"})
        self.assertFalse(serializer.is_valid())
        self.assertEqual(serializer.errors["iban"][0].code, "invalid_iban_format")


class IdentifierApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = get_user_model().objects.create_user(
            username="admin",
            password="pass12345",
        )

    def test_requires_auth(self):
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban", "value": VALID_IBAN},
            format="json",
        )
        self.assertIn(
            response.status_code,
            [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN],
        )

    def test_format_endpoint(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/format/",
            {"kind": "iban", "value": "CH9300762011623852957"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["formatted"], VALID_IBAN)
        self.assertEqual(response.data["value"], "CH9300762011623852957")

    def test_validate_endpoint_formats_before_validating(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "ahv", "value": "7561234123401"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["formatted"], "756.1234.1234.01")
        self.assertEqual(response.data["state"], "valid")
        self.assertIsNone(response.data["reason"])

    def test_validate_endpoint_without_auto_format(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "ahv", "value": "7561234123401", "auto_format": False},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["formatted"], "7561234123401")
        self.assertEqual(response.data["state"], "invalid")
        self.assertEqual(response.data["reason"], "bad format")

    def test_invalid_identifier_is_a_result_not_an_error(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban", "value": "CH00 0000 0000 0000 0000 0"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["state"], "invalid")
        self.assertEqual(response.data["reason"], "bad checksum")
        self.assertEqual(response.data["message"], "Invalid IBAN checksum.")

    def test_empty_value_is_idle(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban", "value": ""},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["state"], "idle")

    def test_unknown_kind_is_rejected(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "bic", "value": "POFICHBEXXX"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("kind", response.data)

    def test_overlong_value_is_rejected(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban", "value": "1" * 257},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("value", response.data)

    def test_missing_value_is_rejected(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("value", response.data)

    def test_null_value_is_rejected(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban", "value": None},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("value", response.data)

    def test_blank_value_formats_to_idle(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/identifiers/validate/",
            {"kind": "iban", "value": "   "},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["formatted"], "")
        self.assertEqual(response.data["state"], "idle")
