from __future__ import annotations

from collections.abc import Mapping

_COMPANY_TYPE_ABBREVIATIONS = {
    "GmbH": "GmbH",
    "AG": "AG",
    "Einzelunternehmen": "EU",
    "Personengesellschaft": "PG",
    "Kapitalgesellschaft": "KG",
    "Genossenschaft": "eG",
    "Stiftung": "Stift.",
    "Verein": "e.V.",
    "Kommanditgesellschaft": "KG",
    "Offene Handelsgesellschaft": "OHG",
    "Gesellschaft bürgerlichen Rechts": "GbR",
    "Limited": "Ltd.",
    "Unternehmergesellschaft": "UG",
}


def format_address(
    address: str | None = None,
    postal_code: str | None = None,
    city: str | None = None,
    country: str | None = None,
) -> str:
    if postal_code and city:
        locality = f"{postal_code} {city}"
    else:
        locality = postal_code or city
    return ", ".join(part for part in [address, locality, country] if part)


def company_type_abbreviation(company_type: str | None) -> str:
    if not company_type:
        return ""
    if company_type in _COMPANY_TYPE_ABBREVIATIONS:
        return _COMPANY_TYPE_ABBREVIATIONS[company_type]
    lowered = company_type.lower()
    for full_name, abbreviation in _COMPANY_TYPE_ABBREVIATIONS.items():
        if full_name.lower() in lowered:
            return abbreviation
    return f"{company_type[:3]}." if len(company_type) > 3 else company_type


def contact_person_full_name(person: Mapping[str, str | None]) -> str:
    return f"{person.get('first_name') or ''} {person.get('last_name') or ''}".strip()


def contact_display_name(contact: Mapping[str, str | None]) -> str:
    # Companies carry a name, persons carry first/last names.
    if "name" in contact:
        return contact["name"] or ""
    return contact_person_full_name(contact)


def format_phone_number(phone: str | None) -> str:
    return (phone or "").strip()


def format_email(email: str | None) -> str:
    return (email or "").lower().strip()
