"""Utility helpers shared across e-Factura modules."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from lxml import etree

NS_INVOICE = "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2"
NS_CREDIT_NOTE = "urn:oasis:names:specification:ubl:schema:xsd:CreditNote-2"
NS_CAC = "urn:oasis:names:specification:ubl:schema:xsd:CommonAggregateComponents-2"
NS_CBC = "urn:oasis:names:specification:ubl:schema:xsd:CommonBasicComponents-2"
NS_DEFAULT = NS_INVOICE

DEFAULT_COUNTRY_CODE = "RO"
DEFAULT_CURRENCY = "RON"

AMT2 = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert ``value`` to :class:`~decimal.Decimal`.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` and not
    the binary expansion.
    """

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric amount")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc


def q2(value: Number) -> Decimal:
    """Round half away from zero to two decimal places."""

    return to_decimal(value).quantize(AMT2, rounding=ROUND_HALF_UP)


def fmt2(value: Number) -> str:
    """Fixed two decimal representation used for every monetary amount."""

    return f"{q2(value):.2f}"


def fmt_number(value: Number) -> str:
    """Format quantities and unit prices with at least two decimals.

    Extra significant decimals are kept (``0.125`` stays ``0.125``) so the
    printed price multiplied by the quantity still gives the line amount.
    """

    number = to_decimal(value)
    exponent = number.normalize().as_tuple().exponent
    places = max(2, -exponent) if isinstance(exponent, int) else 2
    return f"{number:.{places}f}"


def as_date(value: date | datetime | str) -> date:
    """Return ``value`` as a :class:`~datetime.date`.

    Strings must use the ISO ``YYYY-MM-DD`` form, optionally followed by a
    time component.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r}") from exc


def format_date(value: date | datetime | str) -> str:
    """Format ``value`` as ``YYYY-MM-DD``."""

    return as_date(value).isoformat()


def detect_namespace(root: etree._Element) -> str:
    """Return the XML namespace detected for the document root."""

    tag = getattr(root, "tag", "")
    if isinstance(tag, str) and tag.startswith("{") and "}" in tag:
        return tag.split("}", 1)[0][1:]
    return NS_DEFAULT


__all__ = [
    "AMT2",
    "DEFAULT_COUNTRY_CODE",
    "DEFAULT_CURRENCY",
    "HUNDRED",
    "NS_CAC",
    "NS_CBC",
    "NS_CREDIT_NOTE",
    "NS_DEFAULT",
    "NS_INVOICE",
    "Number",
    "ZERO",
    "as_date",
    "detect_namespace",
    "fmt2",
    "fmt_number",
    "format_date",
    "q2",
    "to_decimal",
]
