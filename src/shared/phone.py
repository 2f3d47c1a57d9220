"""Bangladeshi mobile number validation."""

import re

# Optional country code (88 / +88), then 01[3-9] and eight more digits.
BD_MOBILE_PATTERN = re.compile(r"^(?:\+?88)?01[3-9]\d{8}$")


def normalize_phone(number: str) -> str:
    """Strip spaces and hyphens a customer may type between digit groups."""
    return re.sub(r"[\s\-]", "", number or "")


def is_valid_bd_mobile(number: str) -> bool:
    return bool(BD_MOBILE_PATTERN.match(normalize_phone(number)))
