"""Formatting and validation of Swiss IBAN and AHV numbers.

Everything here is a pure function of its input: callers own the
idle/valid/invalid transition and simply re-run ``validate_identifier`` on
every change of the field value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class IdentifierKind(str, Enum):
    IBAN = "iban"
    AHV = "ahv"
    TEXT = "text"


class ValidationState(str, Enum):
    IDLE = "idle"
    VALID = "valid"
    INVALID = "invalid"


BAD_FORMAT = "bad format"
BAD_CHECKSUM = "bad checksum"

_WHITESPACE_RE = re.compile(r"\s+")
_NON_DIGIT_RE = re.compile(r"[^0-9]")
_SWISS_IBAN_RE = re.compile(r"CH[0-9]{19}")
_AHV_RE = re.compile(r"756\.[0-9]{4}\.[0-9]{4}\.[0-9]{2}")

_MOD97_BLOCK_SIZE = 9


@dataclass(frozen=True)
class ValidationResult:
    state: ValidationState
    reason: str | None = None
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return self.state is ValidationState.VALID

    @property
    def is_invalid(self) -> bool:
        return self.state is ValidationState.INVALID

    def as_dict(self) -> dict[str, str | None]:
        return {"state": self.state.value, "reason": self.reason, "message": self.message}


IDLE = ValidationResult(ValidationState.IDLE)
IBAN_VALID = ValidationResult(ValidationState.VALID, message="Valid IBAN.")
IBAN_BAD_FORMAT = ValidationResult(
    ValidationState.INVALID,
    reason=BAD_FORMAT,
    message="Invalid format (CH + 19 digits).",
)
IBAN_BAD_CHECKSUM = ValidationResult(
    ValidationState.INVALID,
    reason=BAD_CHECKSUM,
    message="Invalid IBAN checksum.",
)
AHV_VALID = ValidationResult(ValidationState.VALID, message="Valid AHV number.")
AHV_BAD_FORMAT = ValidationResult(
    ValidationState.INVALID,
    reason=BAD_FORMAT,
    message="Invalid format (756.XXXX.XXXX.XX).",
)


def _as_text(raw_value: str | None) -> str:
    return "" if raw_value is None else str(raw_value)


def compact_iban(raw_value: str | None) -> str:
    return _WHITESPACE_RE.sub("", _as_text(raw_value))


def format_iban(raw_value: str | None) -> str:
    compact = compact_iban(raw_value)
    return " ".join(compact[index : index + 4] for index in range(0, len(compact), 4))


def mod97(numeric: str) -> int:
    """Reduce a decimal digit string modulo 97 in 9-digit blocks."""
    remainder = numeric
    while len(remainder) > 2:
        block = remainder[:_MOD97_BLOCK_SIZE]
        remainder = str(int(block) % 97) + remainder[len(block) :]
    return int(remainder or "0") % 97


def iban_checksum_remainder(iban: str) -> int:
    """Mod-97 remainder of an IBAN, 1 for a correct check digit pair.

    Expects an uppercase alphanumeric IBAN without separators.
    """
    rearranged = f"{iban[4:]}{iban[:4]}"
    numeric = "".join(
        char if char.isdigit() else str(ord(char) - 55) for char in rearranged
    )
    return mod97(numeric)


def validate_iban(raw_value: str | None) -> ValidationResult:
    text = _as_text(raw_value)
    if not text:
        return IDLE
    compact = compact_iban(text)
    if not _SWISS_IBAN_RE.fullmatch(compact):
        return IBAN_BAD_FORMAT
    if iban_checksum_remainder(compact) != 1:
        return IBAN_BAD_CHECKSUM
    return IBAN_VALID


def format_ahv(raw_value: str | None) -> str:
    text = _as_text(raw_value)
    digits = _NON_DIGIT_RE.sub("", text)
    if len(digits) == 13 and digits.startswith("756"):
        return f"{digits[:3]}.{digits[3:7]}.{digits[7:11]}.{digits[11:13]}"
    return text


def validate_ahv(raw_value: str | None) -> ValidationResult:
    text = _as_text(raw_value)
    if not text:
        return IDLE
    if not _AHV_RE.fullmatch(text):
        return AHV_BAD_FORMAT
    return AHV_VALID


def _resolve_kind(kind: IdentifierKind | str) -> IdentifierKind:
    try:
        return IdentifierKind(kind)
    except ValueError as exc:
        raise ValueError(f"Unknown identifier kind: {kind!r}") from exc


def format_identifier(kind: IdentifierKind | str, raw_value: str | None) -> str:
    kind = _resolve_kind(kind)
    if kind is IdentifierKind.IBAN:
        return format_iban(raw_value)
    if kind is IdentifierKind.AHV:
        return format_ahv(raw_value)
    return _as_text(raw_value)


def validate_identifier(kind: IdentifierKind | str, raw_value: str | None) -> ValidationResult:
    kind = _resolve_kind(kind)
    if kind is IdentifierKind.IBAN:
        return validate_iban(raw_value)
    if kind is IdentifierKind.AHV:
        return validate_ahv(raw_value)
    return IDLE
