"""Checksum validation for Romanian fiscal (CUI/CIF) and personal (CNP) codes."""

from __future__ import annotations

import calendar
import re

RO_PREFIX = "RO"

_CUI_CONTROL_KEY = (7, 5, 3, 2, 1, 7, 5, 3, 2)
_CNP_CONTROL_KEY = (2, 7, 9, 1, 4, 6, 3, 5, 8, 2, 7, 9)

# ANAF accepts thirteen zeros for anonymous buyers.
ANONYMOUS_CNP = "0" * 13

_CNP_FORMAT = re.compile(r"[0-9]{13}")
_VAT_FORMAT = re.compile(r"(RO)?([0-9]{2,10})", re.IGNORECASE)

_CENTURY_BY_CATEGORY = {
    1: 1900,
    2: 1900,
    3: 1800,
    4: 1800,
    5: 2000,
    6: 2000,
    # Residents and foreign citizens carry no century information.
    7: 1900,
    8: 1900,
    9: 1900,
}


def is_valid_cnp_format(cnp: str) -> bool:
    """Return ``True`` when ``cnp`` is thirteen digits. No checksum."""

    return bool(_CNP_FORMAT.fullmatch(cnp))


def is_valid_cnp(cnp: str) -> bool:
    """Validate format, category digit, embedded birth date and checksum."""

    if not is_valid_cnp_format(cnp):
        return False
    if cnp == ANONYMOUS_CNP:
        return True

    category = int(cnp[0])
    century = _CENTURY_BY_CATEGORY.get(category)
    if century is None:
        return False
    if not _is_valid_birth_date(cnp, century):
        return False

    total = sum(int(digit) * weight for digit, weight in zip(cnp[:12], _CNP_CONTROL_KEY))
    remainder = total % 11
    expected = 1 if remainder == 10 else remainder
    return int(cnp[12]) == expected


def _is_valid_birth_date(cnp: str, century: int) -> bool:
    year = century + int(cnp[1:3])
    month = int(cnp[3:5])
    day = int(cnp[5:7])
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def is_valid_vat_format(vat_code: str) -> bool:
    """Lenient check: optional ``RO`` prefix and 2-10 digits, or a CNP shape."""

    vat_code = vat_code.strip()
    if not vat_code:
        return False
    if is_valid_cnp_format(vat_code):
        return True
    return bool(_VAT_FORMAT.fullmatch(vat_code))


def is_valid_vat(vat_code: str) -> bool:
    """Strict check: format plus the CUI control-key checksum.

    A valid CNP is accepted too, individuals invoice under their CNP.
    """

    vat_code = vat_code.strip()
    if not vat_code:
        return False
    if is_valid_cnp(vat_code):
        return True

    match = _VAT_FORMAT.fullmatch(vat_code)
    if match is None:
        return False
    return _validate_cui_checksum(match.group(2))


def _validate_cui_checksum(digits: str) -> bool:
    if not 2 <= len(digits) <= 10:
        return False

    check_digit = int(digits[-1])
    padded = digits[:-1].rjust(len(_CUI_CONTROL_KEY), "0")
    total = sum(int(digit) * weight for digit, weight in zip(padded, _CUI_CONTROL_KEY))
    remainder = (total * 10) % 11
    expected = 0 if remainder == 10 else remainder
    return check_digit == expected


def normalize_vat_number(vat_code: str, country_code: str = RO_PREFIX) -> str:
    """Return ``vat_code`` with the country prefix used in ``PartyTaxScheme``."""

    vat_code = vat_code.strip()
    if not vat_code:
        raise ValueError("Company VAT number is missing.")
    if is_valid_cnp(vat_code):
        return vat_code

    prefix = (country_code or RO_PREFIX).strip().upper()
    if vat_code.upper().startswith(prefix):
        return vat_code.upper()
    return f"{prefix}{vat_code}"


def strip_vat_prefix(vat_code: str, country_code: str = RO_PREFIX) -> str:
    """Remove the country prefix from ``vat_code`` (case-insensitive)."""

    vat_code = vat_code.strip()
    if not vat_code:
        raise ValueError("Company VAT number is missing.")

    prefix = (country_code or RO_PREFIX).strip().upper()
    if vat_code.upper().startswith(prefix):
        return vat_code[len(prefix):].strip()
    return vat_code


__all__ = [
    "ANONYMOUS_CNP",
    "RO_PREFIX",
    "is_valid_cnp",
    "is_valid_cnp_format",
    "is_valid_vat",
    "is_valid_vat_format",
    "normalize_vat_number",
    "strip_vat_prefix",
]
