"""Identification number checks for participants.

A participant identifies with either an Ecuadorian cedula (10 digits with a
province code and a modulo-10 check digit) or a passport number.
"""

from __future__ import annotations

import re

from coursereg.errors import ValidationError

CEDULA_LENGTH = 10
MAX_PROVINCE_CODE = 24
_CEDULA_PATTERN = re.compile(r"^\d{10}$")
_PASSPORT_PATTERN = re.compile(r"^[A-Z0-9]{6,15}$")


def is_valid_cedula(value: str) -> bool:
    """Check an Ecuadorian cedula number.

    The first two digits are the province (01-24), the third digit is below 6
    for natural persons, and the tenth digit is the check digit: digits at
    even positions are doubled (minus 9 when above 9), all nine are summed and
    the check digit is ``(10 - sum % 10) % 10``.

    Args:
        value: Candidate cedula, non-digits are ignored.

    Returns:
        True if the number passes every check.
    """
    digits = re.sub(r"\D", "", value)
    if len(digits) != CEDULA_LENGTH:
        return False

    numbers = [int(d) for d in digits]
    province = numbers[0] * 10 + numbers[1]
    if not 1 <= province <= MAX_PROVINCE_CODE:
        return False
    if numbers[2] >= 6:
        return False

    total = 0
    for position, digit in enumerate(numbers[:9]):
        if position % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit

    return numbers[9] == (10 - total % 10) % 10


def normalize_identification(value: str) -> str:
    """Validate and normalize a cedula or passport number.

    Returns:
        The trimmed identification number.

    Raises:
        ValidationError: If it is neither a valid cedula nor a passport number.
    """
    cleaned = value.strip()
    if _CEDULA_PATTERN.match(cleaned):
        if not is_valid_cedula(cleaned):
            raise ValidationError(f"Invalid cedula number: check digit mismatch for {cleaned}")
        return cleaned
    if _PASSPORT_PATTERN.match(cleaned):
        return cleaned
    raise ValidationError(
        "Identification must be a valid cedula (10 digits) "
        "or a passport number (6-15 uppercase letters or digits)"
    )
