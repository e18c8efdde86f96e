"""Invoice data structures consumed by the validator and the UBL builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Sequence

from .utils import (
    DEFAULT_COUNTRY_CODE,
    DEFAULT_CURRENCY,
    HUNDRED,
    Number,
    q2,
    to_decimal,
)

DEFAULT_UNIT_CODE = "EA"


class DocumentKind(Enum):
    """Structural variant of the generated UBL document."""

    INVOICE = "invoice"
    CREDIT_NOTE = "credit-note"


class InvoiceTypeCode(str, Enum):
    """UBL type codes accepted by e-Factura (BR-RO-020)."""

    COMMERCIAL_INVOICE = "380"
    CREDIT_NOTE = "381"
    CORRECTED_INVOICE = "384"
    SELF_BILLED_INVOICE = "389"
    ACCOUNTING_INVOICE = "751"

    @property
    def kind(self) -> DocumentKind:
        if self is InvoiceTypeCode.CREDIT_NOTE:
            return DocumentKind.CREDIT_NOTE
        return DocumentKind.INVOICE

    def is_credit_note(self) -> bool:
        return self.kind is DocumentKind.CREDIT_NOTE


class TaxCategory(str, Enum):
    """VAT classification attached to tax subtotals and lines."""

    STANDARD = "S"
    ZERO_RATED = "Z"
    NOT_SUBJECT = "O"


@dataclass(frozen=True)
class Address:
    """Postal address of a party."""

    street: str
    city: str
    postal_code: str | None = None
    region: str | None = None
    country_code: str = DEFAULT_COUNTRY_CODE

    @property
    def country(self) -> str:
        return (self.country_code or DEFAULT_COUNTRY_CODE).strip().upper()

    @property
    def is_domestic(self) -> bool:
        return self.country == DEFAULT_COUNTRY_CODE


@dataclass(frozen=True)
class Party:
    """Supplier or customer of an invoice."""

    registration_name: str
    company_id: str
    address: Address
    registration_number: str | None = None
    is_vat_payer: bool = False


@dataclass(frozen=True)
class InvoiceLine:
    """A single invoiced item.

    Quantities are signed: negative values describe returned or credited
    goods. Amounts are derived on access and never stored.
    """

    name: str
    quantity: Number
    unit_price: Number
    tax_percent: Number = 0
    line_id: str | int | None = None
    description: str | None = None
    unit_code: str = DEFAULT_UNIT_CODE

    @property
    def quantity_value(self) -> Decimal:
        return to_decimal(self.quantity)

    @property
    def unit_price_value(self) -> Decimal:
        return to_decimal(self.unit_price)

    @property
    def tax_percent_value(self) -> Decimal:
        return to_decimal(self.tax_percent)

    @property
    def raw_extension(self) -> Decimal:
        """Unrounded ``quantity * unit_price``."""

        return self.quantity_value * self.unit_price_value

    @property
    def extension(self) -> Decimal:
        return q2(self.raw_extension)

    @property
    def tax_amount(self) -> Decimal:
        """Per line tax, for display only.

        Invoice totals are computed per tax group, see
        :func:`efactura.tax_table.group_lines_by_tax`.
        """

        return q2(self.extension * self.tax_percent_value / HUNDRED)

    @property
    def gross_amount(self) -> Decimal:
        return q2(self.extension + self.tax_amount)


@dataclass(frozen=True)
class Invoice:
    """Complete invoice handed to :func:`efactura.builder.build_document`."""

    invoice_number: str
    issue_date: date | datetime | str | None
    supplier: Party
    customer: Party
    lines: Sequence[InvoiceLine] = field(default_factory=tuple)
    due_date: date | datetime | str | None = None
    currency: str = DEFAULT_CURRENCY
    payment_iban: str | None = None
    type_code: InvoiceTypeCode | None = None
    preceding_invoice_number: str | None = None
    tax_exchange_rate: Number | None = None

    @property
    def effective_type_code(self) -> InvoiceTypeCode:
        return self.type_code or InvoiceTypeCode.COMMERCIAL_INVOICE

    @property
    def kind(self) -> DocumentKind:
        return self.effective_type_code.kind

    @property
    def currency_code(self) -> str:
        return (self.currency or DEFAULT_CURRENCY).strip().upper()

    @property
    def total_excluding_vat(self) -> Decimal:
        return self._totals().line_extension

    @property
    def total_vat(self) -> Decimal:
        return self._totals().tax_total

    @property
    def total_including_vat(self) -> Decimal:
        return self._totals().gross_total

    def _totals(self):
        from .tax_table import compute_totals

        return compute_totals(self.lines, self.supplier.is_vat_payer)


__all__ = [
    "Address",
    "DEFAULT_UNIT_CODE",
    "DocumentKind",
    "Invoice",
    "InvoiceLine",
    "InvoiceTypeCode",
    "Party",
    "TaxCategory",
]
