"""Romanian county and Bucharest sector normalisation.

ANAF rejects ``CountrySubentity`` values that are not ISO 3166-2:RO codes
(BR-RO-111). Free text such as ``"Județul Cluj"`` or ``"Sectorul 3"`` is
mapped to the matching code here. Bucharest sectors have no code of their
own, every sector resolves to ``RO-B``.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

CAPITAL_CODE = "RO-B"

_COUNTY_ALIASES: dict[str, tuple[str, ...]] = {
    "RO-B": ("BUCURESTI", "BUC", "B", "MUNICIPIUL BUCURESTI"),
    "RO-AB": ("ALBA", "ALBA IULIA", "JUDETUL ALBA"),
    "RO-AR": ("ARAD", "JUDETUL ARAD"),
    "RO-AG": ("ARGES", "JUDETUL ARGES"),
    "RO-BC": ("BACAU", "JUDETUL BACAU"),
    "RO-BH": ("BIHOR", "JUDETUL BIHOR"),
    "RO-BN": (
        "BISTRITA NASAUD",
        "BISTRITA-NASAUD",
        "BISTRITANASAUD",
        "JUDETUL BISTRITA NASAUD",
    ),
    "RO-BT": ("BOTOSANI", "JUDETUL BOTOSANI"),
    "RO-BR": ("BRAILA", "JUDETUL BRAILA"),
    "RO-BV": ("BRASOV", "JUDETUL BRASOV"),
    "RO-BZ": ("BUZAU", "JUDETUL BUZAU"),
    "RO-CL": ("CALARASI", "JUDETUL CALARASI"),
    "RO-CS": (
        "CARAS SEVERIN",
        "CARAS-SEVERIN",
        "CARASSEVERIN",
        "JUDETUL CARAS SEVERIN",
    ),
    "RO-CJ": ("CLUJ", "CLUJ NAPOCA", "JUDETUL CLUJ"),
    "RO-CT": ("CONSTANTA", "JUDETUL CONSTANTA"),
    "RO-CV": ("COVASNA", "JUDETUL COVASNA"),
    "RO-DB": ("DAMBOVITA", "JUDETUL DAMBOVITA"),
    "RO-DJ": ("DOLJ", "JUDETUL DOLJ"),
    "RO-GL": ("GALATI", "JUDETUL GALATI"),
    "RO-GR": ("GIURGIU", "JUDETUL GIURGIU"),
    "RO-GJ": ("GORJ", "JUDETUL GORJ"),
    "RO-HR": ("HARGHITA", "JUDETUL HARGHITA"),
    "RO-HD": ("HUNEDOARA", "JUDETUL HUNEDOARA"),
    "RO-IL": ("IALOMITA", "JUDETUL IALOMITA"),
    "RO-IS": ("IASI", "JUDETUL IASI"),
    "RO-IF": ("ILFOV", "JUDETUL ILFOV"),
    "RO-MM": ("MARAMURES", "JUDETUL MARAMURES"),
    "RO-MH": ("MEHEDINTI", "JUDETUL MEHEDINTI"),
    "RO-MS": ("MURES", "JUDETUL MURES"),
    "RO-NT": ("NEAMT", "JUDETUL NEAMT"),
    "RO-OT": ("OLT", "JUDETUL OLT"),
    "RO-PH": ("PRAHOVA", "JUDETUL PRAHOVA"),
    "RO-SJ": ("SALAJ", "JUDETUL SALAJ"),
    "RO-SM": ("SATU MARE", "SATU-MARE", "SATUMARE", "JUDETUL SATU MARE"),
    "RO-SB": ("SIBIU", "JUDETUL SIBIU"),
    "RO-SV": ("SUCEAVA", "JUDETUL SUCEAVA"),
    "RO-TR": ("TELEORMAN", "JUDETUL TELEORMAN"),
    "RO-TM": ("TIMIS", "JUDETUL TIMIS"),
    "RO-TL": ("TULCEA", "JUDETUL TULCEA"),
    # VILCEA is the pre-1993 spelling, still common in ERP exports.
    "RO-VL": ("VALCEA", "VILCEA", "JUDETUL VALCEA"),
    "RO-VS": ("VASLUI", "JUDETUL VASLUI"),
    "RO-VN": ("VRANCEA", "JUDETUL VRANCEA"),
}

REGION_ALIASES: Mapping[str, str] = MappingProxyType(
    {alias: code for code, aliases in _COUNTY_ALIASES.items() for alias in aliases}
)
VALID_REGION_CODES: frozenset[str] = frozenset(_COUNTY_ALIASES)

_CAPITAL_INDICATORS: frozenset[str] = frozenset(
    {"BUCURESTI", "BUC", "MUNICIPIUL BUCURESTI", CAPITAL_CODE, "B"}
)

_ADMINISTRATIVE_PREFIXES: tuple[str, ...] = (
    "JUDETUL ",
    "JUD. ",
    "JUD ",
    "MUNICIPIUL ",
    "MUN. ",
    "MUN ",
    "ORAS ",
    "OR. ",
    "COMUNA ",
    "COM. ",
)

_SECTOR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bSECTOR\s*(\d)\b"),
    re.compile(r"\bSECTORUL\s*(\d)\b"),
    re.compile(r"\bSECT\.?\s*(\d)\b"),
    re.compile(r"\bS\.?\s*(\d)\b"),
)

# Comma-below forms are the official ones, cedilla forms appear in legacy
# encodings.
_DIACRITICS = str.maketrans(
    {
        "ă": "a",
        "â": "a",
        "î": "i",
        "ș": "s",
        "ş": "s",
        "ț": "t",
        "ţ": "t",
        "Ă": "A",
        "Â": "A",
        "Î": "I",
        "Ș": "S",
        "Ş": "S",
        "Ț": "T",
        "Ţ": "T",
    }
)

_WHITESPACE = re.compile(r"\s+")


def normalize_diacritics(text: str) -> str:
    """Replace Romanian diacritics with their ASCII letters."""

    return text.translate(_DIACRITICS)


def _normalize_input(text: str) -> str:
    normalized = normalize_diacritics(text.strip().upper())
    return _WHITESPACE.sub(" ", normalized)


def _strip_administrative_prefix(normalized: str) -> str:
    for prefix in _ADMINISTRATIVE_PREFIXES:
        if normalized.startswith(prefix):
            return normalized[len(prefix):]
    return normalized


def normalize_region(text: str) -> str | None:
    """Return the ISO 3166-2:RO code for a county name, or ``None``."""

    normalized = _normalize_input(text)
    if normalized in VALID_REGION_CODES:
        return normalized

    code = REGION_ALIASES.get(normalized)
    if code is not None:
        return code

    stripped = _strip_administrative_prefix(normalized)
    if stripped != normalized:
        return REGION_ALIASES.get(stripped)
    return None


def extract_sector_number(text: str) -> int | None:
    """Return the Bucharest sector (1-6) mentioned in ``text``."""

    normalized = _normalize_input(text)
    for pattern in _SECTOR_PATTERNS:
        match = pattern.search(normalized)
        if match is None:
            continue
        number = int(match.group(1))
        if 1 <= number <= 6:
            return number
    return None


def extract_capital_district(text: str) -> str | None:
    """Return ``RO-B`` when ``text`` is a Bucharest sector or Bucharest itself."""

    if extract_sector_number(text) is not None:
        return CAPITAL_CODE
    if is_capital(text):
        return CAPITAL_CODE
    return None


def is_capital(text: str) -> bool:
    """Tell whether ``text`` designates Bucharest.

    Only exact indicators count, so ``"BUCEGI"`` is not Bucharest.
    """

    normalized = _normalize_input(text)
    if normalized in _CAPITAL_INDICATORS:
        return True
    if extract_sector_number(normalized) is not None:
        return True
    return normalize_region(normalized) == CAPITAL_CODE


def resolve_region(text: str) -> str | None:
    """Return the ``CountrySubentity`` code for a domestic region field."""

    if is_capital(text):
        return CAPITAL_CODE
    return normalize_region(text)


def valid_region_codes() -> frozenset[str]:
    """Return every ISO 3166-2:RO code known to the normaliser."""

    return VALID_REGION_CODES


def is_valid_region_code(code: str) -> bool:
    return code in VALID_REGION_CODES


__all__ = [
    "CAPITAL_CODE",
    "REGION_ALIASES",
    "VALID_REGION_CODES",
    "extract_capital_district",
    "extract_sector_number",
    "is_capital",
    "is_valid_region_code",
    "normalize_diacritics",
    "normalize_region",
    "resolve_region",
    "valid_region_codes",
]
