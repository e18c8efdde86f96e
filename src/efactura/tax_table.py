"""Tax grouping and document totals.

Lines are bucketed by their VAT rate rounded to two decimals. Raw line
amounts are accumulated without rounding, each bucket's taxable amount is
rounded once and its tax is computed from that rounded base. The sum of the
group taxes is therefore exactly the disclosed tax total.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from .invoices import InvoiceLine, TaxCategory
from .utils import HUNDRED, ZERO, Number, q2, to_decimal

_ZERO_RATE_EPSILON = Decimal("0.01")


@dataclass(frozen=True)
class TaxGroup:
    """Tax subtotal for one VAT rate."""

    rate: Decimal
    category: TaxCategory
    raw_taxable: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal


@dataclass(frozen=True)
class Totals:
    """Totals disclosed in ``TaxTotal`` and ``LegalMonetaryTotal``."""

    tax_groups: tuple[TaxGroup, ...]
    line_extension: Decimal
    tax_total: Decimal
    gross_total: Decimal

    @property
    def tax_exclusive(self) -> Decimal:
        return self.line_extension

    @property
    def tax_inclusive(self) -> Decimal:
        return self.gross_total

    @property
    def payable(self) -> Decimal:
        return self.gross_total


def tax_category(rate: Number, is_vat_payer: bool) -> TaxCategory:
    """Classify ``rate`` for a supplier with the given VAT status."""

    if not is_vat_payer:
        return TaxCategory.NOT_SUBJECT
    if abs(to_decimal(rate)) < _ZERO_RATE_EPSILON:
        return TaxCategory.ZERO_RATED
    return TaxCategory.STANDARD


def group_key(rate: Number) -> Decimal:
    """Bucket key: ``19.0``, ``19.00`` and ``19.004`` all give ``19.00``."""

    return q2(rate)


def group_lines_by_tax(
    lines: Iterable[InvoiceLine], is_vat_payer: bool
) -> list[TaxGroup]:
    """Return the tax groups for ``lines`` in first-seen order."""

    buckets: dict[Decimal, Decimal] = {}
    for line in lines:
        key = group_key(line.tax_percent_value)
        buckets[key] = buckets.get(key, ZERO) + line.raw_extension

    if not buckets:
        # A TaxTotal block is mandatory even without lines.
        return [
            TaxGroup(
                rate=q2(ZERO),
                category=tax_category(ZERO, is_vat_payer),
                raw_taxable=ZERO,
                taxable_amount=q2(ZERO),
                tax_amount=q2(ZERO),
            )
        ]

    groups: list[TaxGroup] = []
    for rate, raw_taxable in buckets.items():
        taxable = q2(raw_taxable)
        groups.append(
            TaxGroup(
                rate=rate,
                category=tax_category(rate, is_vat_payer),
                raw_taxable=raw_taxable,
                taxable_amount=taxable,
                tax_amount=q2(taxable * rate / HUNDRED),
            )
        )
    return groups


def compute_totals(lines: Sequence[InvoiceLine], is_vat_payer: bool) -> Totals:
    """Compute tax groups and grand totals for ``lines``."""

    groups = tuple(group_lines_by_tax(lines, is_vat_payer))
    line_extension = q2(sum((line.extension for line in lines), ZERO))
    tax_total = sum((group.tax_amount for group in groups), ZERO)
    return Totals(
        tax_groups=groups,
        line_extension=line_extension,
        tax_total=q2(tax_total),
        gross_total=q2(line_extension + tax_total),
    )


__all__ = [
    "TaxGroup",
    "Totals",
    "compute_totals",
    "group_key",
    "group_lines_by_tax",
    "tax_category",
]
