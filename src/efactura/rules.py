"""Catalogue of the business rules checked before a document is built.

Each rule has a stable ``code`` that callers match on, the CIUS-RO tag it
implements (when there is one) and an English message template.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Rule:
    """A named business rule."""

    code: str
    template: str
    tag: str | None = None

    def render(self, **params: object) -> str:
        return self.template.format(**params)


_RULES: tuple[Rule, ...] = (
    # Structure
    Rule("INVOICE_NUMBER_REQUIRED", "Invoice number is required"),
    Rule("ISSUE_DATE_REQUIRED", "Issue date is required"),
    Rule("ISSUE_DATE_INVALID", 'Issue date "{value}" is not a valid YYYY-MM-DD date'),
    Rule("DUE_DATE_INVALID", 'Due date "{value}" is not a valid YYYY-MM-DD date'),
    Rule(
        "TAX_EXCHANGE_RATE_INVALID",
        'Tax exchange rate "{value}" must be a positive number',
    ),
    Rule("PARTY_NAME_REQUIRED", "{role} registration name is required"),
    Rule("PARTY_COMPANY_ID_REQUIRED", "{role} company ID (CIF/CUI) is required"),
    Rule("PARTY_STREET_REQUIRED", "{role} street address is required"),
    Rule("PARTY_CITY_REQUIRED", "{role} city is required"),
    # Lines
    Rule("LINES_REQUIRED", "At least one invoice line is required"),
    Rule("LINE_NAME_REQUIRED", "Line {line}: Item name is required"),
    Rule("LINE_NUMBER_INVALID", 'Line {line}: {field} "{value}" is not a valid number'),
    Rule("LINE_QUANTITY_ZERO", "Line {line}: Quantity cannot be zero"),
    Rule("LINE_QUANTITY_NEGATIVE", "Line {line}: Quantity must be positive for a {kind}"),
    Rule("LINE_UNIT_PRICE_NEGATIVE", "Line {line}: Unit price cannot be negative"),
    Rule("LINE_TAX_PERCENT_RANGE", "Line {line}: Tax percent must be between 0 and 100"),
    # Length ceilings
    Rule(
        "INVOICE_NUMBER_TOO_LONG",
        "Invoice number must not exceed {limit} characters (BR-RO-L200)",
        "BR-RO-L200",
    ),
    Rule(
        "PARTY_NAME_TOO_LONG",
        "{role} registration name must not exceed {limit} characters (BR-RO-L200)",
        "BR-RO-L200",
    ),
    Rule(
        "PARTY_COMPANY_ID_TOO_LONG",
        "{role} company ID must not exceed {limit} characters (BR-RO-L030)",
        "BR-RO-L030",
    ),
    Rule(
        "PARTY_STREET_TOO_LONG",
        "{role} street address must not exceed {limit} characters (BR-RO-L150)",
        "BR-RO-L150",
    ),
    Rule(
        "PARTY_CITY_TOO_LONG",
        "{role} city must not exceed {limit} characters (BR-RO-L050)",
        "BR-RO-L050",
    ),
    Rule(
        "PARTY_POSTAL_CODE_TOO_LONG",
        "{role} postal code must not exceed {limit} characters (BR-RO-L020)",
        "BR-RO-L020",
    ),
    Rule(
        "LINE_NAME_TOO_LONG",
        "Line {line}: Item name must not exceed {limit} characters (BR-RO-L100)",
        "BR-RO-L100",
    ),
    Rule(
        "LINE_DESCRIPTION_TOO_LONG",
        "Line {line}: Item description must not exceed {limit} characters (BR-RO-L200)",
        "BR-RO-L200",
    ),
    Rule(
        "PRECEDING_INVOICE_NUMBER_TOO_LONG",
        "The preceding invoice number must not exceed {limit} characters (BR-RO-L200)",
        "BR-RO-L200",
    ),
    # Content
    Rule(
        "INVOICE_NUMBER_NO_DIGIT",
        "Invoice number must contain at least one numeric character (BR-RO-010)",
        "BR-RO-010",
    ),
    # Domestic addresses
    Rule(
        "PARTY_REGION_REQUIRED",
        "{role} county is required for Romanian addresses (BR-RO-110)",
        "BR-RO-110",
    ),
    Rule(
        "PARTY_REGION_UNMAPPED",
        'County "{region}" could not be mapped to a valid ISO 3166-2:RO code. '
        'Romanian addresses require valid county codes (e.g., "RO-AB" for Alba, '
        '"RO-B" for Bucharest).',
        "BR-RO-111",
    ),
)

RULES: Mapping[str, Rule] = MappingProxyType({rule.code: rule for rule in _RULES})


def get_rule(code: str) -> Rule:
    """Return the rule registered under ``code``."""

    try:
        return RULES[code]
    except KeyError:
        raise KeyError(f"Unknown rule code: {code}") from None


def iter_rules() -> tuple[Rule, ...]:
    """Return every rule in evaluation order."""

    return _RULES


__all__ = ["RULES", "Rule", "get_rule", "iter_rules"]
