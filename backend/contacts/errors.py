"""Translate persistence-layer failures into user-facing error codes.

The database re-validates contact and employee rows with check constraints
(``valid_swiss_iban``, ``valid_swiss_ahv``, ``valid_employment_rate``,
``valid_hourly_wage``). When a save is rejected, the raw driver error is mapped
to a stable ``code`` the front end can switch on and a message it can show.
"""

from __future__ import annotations

from dataclasses import dataclass

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"

_CHECK_CONSTRAINT_ERRORS = (
    (
        "valid_swiss_iban",
        "INVALID_IBAN",
        "Invalid Swiss IBAN (format: CH93 0076 2011 6238 5295 7).",
    ),
    (
        "valid_swiss_ahv",
        "INVALID_AHV",
        "Invalid AHV number (format: 756.XXXX.XXXX.XX).",
    ),
    (
        "valid_employment_rate",
        "INVALID_EMPLOYMENT_RATE",
        "Employment rate must be between 1% and 100%.",
    ),
    (
        "valid_hourly_wage",
        "INVALID_HOURLY_WAGE",
        "Hourly wage must be positive.",
    ),
)


@dataclass(frozen=True)
class AppError:
    code: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "detail": self.message}


def database_error_code(error: BaseException) -> str:
    """SQLSTATE of a driver error, looking through Django's wrapper."""
    for candidate in (error, error.__cause__):
        if candidate is None:
            continue
        for attribute in ("sqlstate", "pgcode"):
            code = getattr(candidate, attribute, None)
            if code:
                return str(code)
    return ""


def parse_database_error(error: BaseException) -> AppError:
    message = str(error)
    code = database_error_code(error)

    if "row-level security" in message:
        return AppError("PERMISSION_DENIED", "You are not allowed to perform this action.")
    if code == UNIQUE_VIOLATION:
        return AppError("DUPLICATE_ENTRY", "This entry already exists.")
    if code == FOREIGN_KEY_VIOLATION:
        return AppError(
            "FOREIGN_KEY_VIOLATION",
            "This entry is still in use and cannot be deleted.",
        )
    if code == CHECK_VIOLATION:
        for constraint, error_code, error_message in _CHECK_CONSTRAINT_ERRORS:
            if constraint in message:
                return AppError(error_code, error_message)
        return AppError("VALIDATION_ERROR", "The submitted data is invalid.")
    # Driver messages may quote row data, so they never reach the client.
    return AppError("UNKNOWN_ERROR", "An unexpected error occurred.")
