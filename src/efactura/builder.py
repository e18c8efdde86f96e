"""UBL 2.1 invoice and credit note builder for ANAF e-Factura (CIUS-RO).

:func:`build_document` validates the invoice, groups its lines by VAT rate
and writes the document tree. It never raises for bad input: the result
carries either a :class:`Document` or the first :class:`ValidationIssue`.
:func:`generate_invoice_xml` is the raising variant returning UTF-8 bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Callable, Mapping

from lxml import etree

from .address import CAPITAL_CODE, extract_sector_number, resolve_region
from .identifiers import normalize_vat_number, strip_vat_prefix
from .invoices import (
    DEFAULT_UNIT_CODE,
    Address,
    DocumentKind,
    Invoice,
    InvoiceLine,
    Party,
    TaxCategory,
)
from .rules_loader import RulesConfig
from .tax_table import TaxGroup, Totals, compute_totals, group_key, tax_category
from .utils import (
    DEFAULT_CURRENCY,
    NS_CAC,
    NS_CBC,
    NS_CREDIT_NOTE,
    NS_INVOICE,
    Number,
    fmt2,
    fmt_number,
    format_date,
    q2,
    to_decimal,
)
from .validator import ValidationError, ValidationIssue, validate_invoice

LOGGER = logging.getLogger("efactura.builder")

UBL_CUSTOMIZATION_ID = (
    "urn:cen.eu:en16931:2017#compliant#urn:efactura.mfinante.ro:CIUS-RO:1.0.1"
)
UBL_PROFILE_ID = "urn:fdc:peppol.eu:2017:poacc:billing:01:1.0"
VAT_SCHEME_ID = "VAT"
CREDIT_TRANSFER_CODE = "30"
NOT_SUBJECT_EXEMPTION_CODE = "VATEX-EU-O"
CONTENT_TYPE = "application/xml"


@dataclass(frozen=True)
class _KindLayout:
    """Element names and placement rules of one document kind."""

    root_tag: str
    namespace: str
    type_code_tag: str
    line_tag: str
    quantity_tag: str
    # CreditNote has no header DueDate, it goes to PaymentMeans/PaymentDueDate.
    due_date_in_header: bool


_LAYOUTS: Mapping[DocumentKind, _KindLayout] = MappingProxyType(
    {
        DocumentKind.INVOICE: _KindLayout(
            root_tag="Invoice",
            namespace=NS_INVOICE,
            type_code_tag="InvoiceTypeCode",
            line_tag="InvoiceLine",
            quantity_tag="InvoicedQuantity",
            due_date_in_header=True,
        ),
        DocumentKind.CREDIT_NOTE: _KindLayout(
            root_tag="CreditNote",
            namespace=NS_CREDIT_NOTE,
            type_code_tag="CreditNoteTypeCode",
            line_tag="CreditNoteLine",
            quantity_tag="CreditedQuantity",
            due_date_in_header=False,
        ),
    }
)


@dataclass(frozen=True)
class Document:
    """A built UBL document together with the totals it discloses."""

    tree: etree._ElementTree
    kind: DocumentKind
    totals: Totals
    content_type: str = CONTENT_TYPE

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def to_bytes(self) -> bytes:
        """Serialise as indented UTF-8 with an XML declaration."""

        return etree.tostring(
            self.tree,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
        )


@dataclass(frozen=True)
class BuildResult:
    """Outcome of :func:`build_document`: a document or one issue."""

    document: Document | None = None
    issue: ValidationIssue | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None

    def unwrap(self) -> Document:
        """Return the document or raise :class:`ValidationError`."""

        if self.document is None:
            assert self.issue is not None
            raise ValidationError(self.issue)
        return self.document


# --- element helpers ----------------------------------------------------


def _cac(parent: etree._Element, name: str) -> etree._Element:
    return etree.SubElement(parent, f"{{{NS_CAC}}}{name}")


def _cbc(parent: etree._Element, name: str, text: str) -> etree._Element:
    element = etree.SubElement(parent, f"{{{NS_CBC}}}{name}")
    element.text = text
    return element


def _amount(
    parent: etree._Element,
    name: str,
    value: Number,
    currency: str,
    formatter: Callable[[Number], str] = fmt2,
) -> etree._Element:
    element = _cbc(parent, name, formatter(value))
    element.set("currencyID", currency)
    return element


def _quantity(
    parent: etree._Element, name: str, value: Decimal, unit_code: str
) -> etree._Element:
    element = _cbc(parent, name, fmt_number(value))
    element.set("unitCode", unit_code)
    return element


def _tax_scheme(parent: etree._Element) -> None:
    scheme = _cac(parent, "TaxScheme")
    _cbc(scheme, "ID", VAT_SCHEME_ID)


# --- parties ------------------------------------------------------------


def _region_code(address: Address) -> str | None:
    region = address.region
    if region is None or not region.strip():
        return None
    if address.is_domestic:
        return resolve_region(region)
    return region


def _city_name(address: Address, region_code: str | None) -> str:
    """BR-RO-100: Bucharest addresses use ``SECTOR1`` .. ``SECTOR6`` as city."""

    city = address.city.strip()
    if region_code != CAPITAL_CODE:
        return city

    sector = extract_sector_number(city)
    if sector is None and address.region:
        sector = extract_sector_number(address.region)
    if sector is None:
        LOGGER.debug("No sector found for Bucharest address %r", city)
        return city
    return f"SECTOR{sector}"


def _build_postal_address(parent: etree._Element, address: Address) -> None:
    postal = _cac(parent, "PostalAddress")
    region_code = _region_code(address)

    _cbc(postal, "StreetName", address.street.strip())
    _cbc(postal, "CityName", _city_name(address, region_code))
    if address.postal_code and address.postal_code.strip():
        _cbc(postal, "PostalZone", address.postal_code.strip())
    if region_code is not None:
        _cbc(postal, "CountrySubentity", region_code)

    country = _cac(postal, "Country")
    _cbc(country, "IdentificationCode", address.country)


def _build_party(root: etree._Element, tag: str, party: Party) -> None:
    wrapper = _cac(root, tag)
    element = _cac(wrapper, "Party")

    if party.registration_number and party.registration_number.strip():
        identification = _cac(element, "PartyIdentification")
        _cbc(identification, "ID", party.registration_number.strip())

    _build_postal_address(element, party.address)

    # Only VAT payers carry a VAT identifier.
    if party.is_vat_payer:
        tax_scheme = _cac(element, "PartyTaxScheme")
        _cbc(
            tax_scheme,
            "CompanyID",
            normalize_vat_number(party.company_id, party.address.country),
        )
        _tax_scheme(tax_scheme)

    legal_entity = _cac(element, "PartyLegalEntity")
    _cbc(legal_entity, "RegistrationName", party.registration_name.strip())
    _cbc(
        legal_entity,
        "CompanyID",
        strip_vat_prefix(party.company_id, party.address.country),
    )


# --- document sections --------------------------------------------------


def _build_header(
    root: etree._Element, invoice: Invoice, layout: _KindLayout, currency: str
) -> None:
    _cbc(root, "CustomizationID", UBL_CUSTOMIZATION_ID)
    _cbc(root, "ProfileID", UBL_PROFILE_ID)
    _cbc(root, "ID", invoice.invoice_number.strip())
    _cbc(root, "IssueDate", format_date(invoice.issue_date))  # type: ignore[arg-type]

    if invoice.due_date and layout.due_date_in_header:
        _cbc(root, "DueDate", format_date(invoice.due_date))

    _cbc(root, layout.type_code_tag, invoice.effective_type_code.value)
    _cbc(root, "DocumentCurrencyCode", currency)

    # BR-RO-030: documents not in RON disclose VAT in RON as well.
    if currency != DEFAULT_CURRENCY:
        _cbc(root, "TaxCurrencyCode", DEFAULT_CURRENCY)

    preceding = (invoice.preceding_invoice_number or "").strip()
    if preceding:
        reference = _cac(root, "BillingReference")
        document_reference = _cac(reference, "InvoiceDocumentReference")
        _cbc(document_reference, "ID", preceding)


def _build_payment_means(
    root: etree._Element, invoice: Invoice, layout: _KindLayout
) -> None:
    iban = (invoice.payment_iban or "").strip()
    if not iban:
        if invoice.due_date and not layout.due_date_in_header:
            LOGGER.debug(
                "Due date of %s dropped: no payment account to attach it to",
                invoice.invoice_number,
            )
        return

    means = _cac(root, "PaymentMeans")
    _cbc(means, "PaymentMeansCode", CREDIT_TRANSFER_CODE)
    if invoice.due_date and not layout.due_date_in_header:
        _cbc(means, "PaymentDueDate", format_date(invoice.due_date))
    account = _cac(means, "PayeeFinancialAccount")
    _cbc(account, "ID", iban)


def _build_tax_subtotal(parent: etree._Element, group: TaxGroup, currency: str) -> None:
    subtotal = _cac(parent, "TaxSubtotal")
    _amount(subtotal, "TaxableAmount", group.taxable_amount, currency)
    _amount(subtotal, "TaxAmount", group.tax_amount, currency)

    category = _cac(subtotal, "TaxCategory")
    _cbc(category, "ID", group.category.value)
    _cbc(category, "Percent", fmt2(group.rate))
    if group.category is TaxCategory.NOT_SUBJECT:
        _cbc(category, "TaxExemptionReasonCode", NOT_SUBJECT_EXEMPTION_CODE)
    _tax_scheme(category)


def _build_tax_total(root: etree._Element, totals: Totals, currency: str) -> None:
    tax_total = _cac(root, "TaxTotal")
    _amount(tax_total, "TaxAmount", totals.tax_total, currency)
    for group in totals.tax_groups:
        _build_tax_subtotal(tax_total, group, currency)


def _build_domestic_tax_total(
    root: etree._Element, totals: Totals, exchange_rate: Number | None
) -> None:
    """Second ``TaxTotal`` in RON, without subtotals.

    Without an exchange rate the document currency amount is repeated and
    the caller is responsible for it being the RON amount.
    """

    amount = totals.tax_total
    if exchange_rate is not None:
        amount = q2(amount * to_decimal(exchange_rate))

    tax_total = _cac(root, "TaxTotal")
    _amount(tax_total, "TaxAmount", amount, DEFAULT_CURRENCY)


def _build_monetary_total(root: etree._Element, totals: Totals, currency: str) -> None:
    monetary = _cac(root, "LegalMonetaryTotal")
    _amount(monetary, "LineExtensionAmount", totals.line_extension, currency)
    _amount(monetary, "TaxExclusiveAmount", totals.tax_exclusive, currency)
    _amount(monetary, "TaxInclusiveAmount", totals.tax_inclusive, currency)
    _amount(monetary, "PayableAmount", totals.payable, currency)


def _build_line(
    root: etree._Element,
    layout: _KindLayout,
    line: InvoiceLine,
    position: int,
    is_vat_payer: bool,
    currency: str,
) -> None:
    element = _cac(root, layout.line_tag)
    line_id = line.line_id if line.line_id is not None else position
    _cbc(element, "ID", str(line_id))
    _quantity(
        element,
        layout.quantity_tag,
        line.quantity_value,
        (line.unit_code or DEFAULT_UNIT_CODE).strip(),
    )
    _amount(element, "LineExtensionAmount", line.extension, currency)

    item = _cac(element, "Item")
    if line.description and line.description.strip():
        _cbc(item, "Description", line.description.strip())
    _cbc(item, "Name", line.name.strip())

    category = _cac(item, "ClassifiedTaxCategory")
    rate = line.tax_percent_value
    # Classified on the bucket key, like its TaxSubtotal.
    _cbc(category, "ID", tax_category(group_key(rate), is_vat_payer).value)
    _cbc(category, "Percent", fmt2(rate))
    _tax_scheme(category)

    price = _cac(element, "Price")
    _amount(price, "PriceAmount", line.unit_price_value, currency, formatter=fmt_number)


def _assemble(invoice: Invoice) -> Document:
    kind = invoice.kind
    layout = _LAYOUTS[kind]
    currency = invoice.currency_code
    is_vat_payer = invoice.supplier.is_vat_payer
    totals = compute_totals(invoice.lines, is_vat_payer)

    root = etree.Element(
        f"{{{layout.namespace}}}{layout.root_tag}",
        nsmap={None: layout.namespace, "cac": NS_CAC, "cbc": NS_CBC},
    )

    _build_header(root, invoice, layout, currency)
    _build_party(root, "AccountingSupplierParty", invoice.supplier)
    _build_party(root, "AccountingCustomerParty", invoice.customer)
    _build_payment_means(root, invoice, layout)
    _build_tax_total(root, totals, currency)
    if currency != DEFAULT_CURRENCY:
        _build_domestic_tax_total(root, totals, invoice.tax_exchange_rate)
    _build_monetary_total(root, totals, currency)

    for position, line in enumerate(invoice.lines, start=1):
        _build_line(root, layout, line, position, is_vat_payer, currency)

    LOGGER.debug(
        "Built %s %s: %d line(s), %d tax group(s), payable %s %s",
        layout.root_tag,
        invoice.invoice_number,
        len(invoice.lines),
        len(totals.tax_groups),
        fmt2(totals.payable),
        currency,
    )
    return Document(tree=etree.ElementTree(root), kind=kind, totals=totals)


def build_document(invoice: Invoice, config: RulesConfig | None = None) -> BuildResult:
    """Validate ``invoice`` and build its UBL document."""

    issue = validate_invoice(invoice, config)
    if issue is not None:
        LOGGER.info(
            "Invoice %r rejected: [%s] %s", invoice.invoice_number, issue.code, issue.message
        )
        return BuildResult(issue=issue)
    return BuildResult(document=_assemble(invoice))


def generate_invoice_xml(invoice: Invoice, config: RulesConfig | None = None) -> bytes:
    """Return the UBL XML of ``invoice``; raise :class:`ValidationError` if invalid."""

    return build_document(invoice, config).unwrap().to_bytes()


__all__ = [
    "BuildResult",
    "CONTENT_TYPE",
    "Document",
    "NOT_SUBJECT_EXEMPTION_CODE",
    "UBL_CUSTOMIZATION_ID",
    "UBL_PROFILE_ID",
    "build_document",
    "generate_invoice_xml",
]
