"""Business-rule validation for invoices before UBL serialisation.

Checks run in a fixed order and the first failure wins, so the same input
always reports the same problem:

1. required header, party and address fields;
2. invoice lines;
3. length ceilings;
4. invoice number content (BR-RO-010);
5. county of Romanian addresses (BR-RO-110, BR-RO-111).

Addresses outside Romania keep whatever region text they carry.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .address import resolve_region
from .invoices import Invoice, InvoiceLine, Party
from .rules import get_rule
from .rules_loader import DEFAULT_RULES, QuantityPolicy, RulesConfig
from .utils import HUNDRED, ZERO, as_date, to_decimal


class ValidationIssue:
    """Representation of a problem detected during validation."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, str] | None = None,
    ) -> None:
        self.message = message
        self.code = code or "GENERIC"
        self.details = details or {}

    def as_cells(self) -> list[str]:
        """Serialise the issue for tabular export."""

        return [self.code, self.details.get("rule", ""), self.message]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationIssue):
            return NotImplemented
        return (self.code, self.message, self.details) == (
            other.code,
            other.message,
            other.details,
        )

    def __repr__(self) -> str:
        return f"ValidationIssue(code={self.code!r}, message={self.message!r})"


class ValidationError(ValueError):
    """Raised by the convenience APIs when an invoice fails validation."""

    def __init__(self, issue: ValidationIssue) -> None:
        super().__init__(issue.message)
        self.issue = issue

    @property
    def code(self) -> str:
        return self.issue.code


_Check = Callable[[Invoice, RulesConfig], Iterator[ValidationIssue]]

_ROLES: tuple[tuple[str, str], ...] = (("supplier", "Supplier"), ("customer", "Customer"))


def _issue(code: str, **params: object) -> ValidationIssue:
    rule = get_rule(code)
    details = {key: str(value) for key, value in params.items()}
    if rule.tag:
        details["rule"] = rule.tag
    return ValidationIssue(rule.render(**params), code=code, details=details)


def _is_blank(value: object) -> bool:
    return value is None or not str(value).strip()


def _parties(invoice: Invoice) -> Iterator[tuple[str, str, Party]]:
    for attribute, role in _ROLES:
        yield attribute, role, getattr(invoice, attribute)


def _number(value: object) -> Decimal | None:
    try:
        number = to_decimal(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _check_structure(invoice: Invoice, config: RulesConfig) -> Iterator[ValidationIssue]:
    if _is_blank(invoice.invoice_number):
        yield _issue("INVOICE_NUMBER_REQUIRED")

    if _is_blank(invoice.issue_date):
        yield _issue("ISSUE_DATE_REQUIRED")
    else:
        try:
            as_date(invoice.issue_date)  # type: ignore[arg-type]
        except ValueError:
            yield _issue("ISSUE_DATE_INVALID", value=invoice.issue_date)

    if not _is_blank(invoice.due_date):
        try:
            as_date(invoice.due_date)  # type: ignore[arg-type]
        except ValueError:
            yield _issue("DUE_DATE_INVALID", value=invoice.due_date)

    if invoice.tax_exchange_rate is not None:
        rate = _number(invoice.tax_exchange_rate)
        if rate is None or rate <= ZERO:
            yield _issue("TAX_EXCHANGE_RATE_INVALID", value=invoice.tax_exchange_rate)

    for attribute, role, party in _parties(invoice):
        if _is_blank(party.registration_name):
            yield _issue("PARTY_NAME_REQUIRED", role=role, party=attribute)
        if _is_blank(party.company_id):
            yield _issue("PARTY_COMPANY_ID_REQUIRED", role=role, party=attribute)
        if _is_blank(party.address.street):
            yield _issue("PARTY_STREET_REQUIRED", role=role, party=attribute)
        if _is_blank(party.address.city):
            yield _issue("PARTY_CITY_REQUIRED", role=role, party=attribute)


def _check_quantity(
    line_no: int, quantity: Decimal, policy: QuantityPolicy, kind_label: str
) -> Iterator[ValidationIssue]:
    if policy is QuantityPolicy.ANY:
        return
    if quantity == ZERO:
        yield _issue("LINE_QUANTITY_ZERO", line=line_no)
    elif policy is QuantityPolicy.POSITIVE and quantity < ZERO:
        yield _issue("LINE_QUANTITY_NEGATIVE", line=line_no, kind=kind_label)


def _check_line(
    line_no: int, line: InvoiceLine, policy: QuantityPolicy, kind_label: str
) -> Iterator[ValidationIssue]:
    if _is_blank(line.name):
        yield _issue("LINE_NAME_REQUIRED", line=line_no)

    values: dict[str, Decimal] = {}
    for field, label in (
        ("quantity", "Quantity"),
        ("unit_price", "Unit price"),
        ("tax_percent", "Tax percent"),
    ):
        raw = getattr(line, field)
        number = _number(raw)
        if number is None:
            yield _issue("LINE_NUMBER_INVALID", line=line_no, field=label, value=raw)
            return
        values[field] = number

    yield from _check_quantity(line_no, values["quantity"], policy, kind_label)

    if values["unit_price"] < ZERO:
        yield _issue("LINE_UNIT_PRICE_NEGATIVE", line=line_no)

    if not ZERO <= values["tax_percent"] <= HUNDRED:
        yield _issue("LINE_TAX_PERCENT_RANGE", line=line_no)


def _check_lines(invoice: Invoice, config: RulesConfig) -> Iterator[ValidationIssue]:
    if not invoice.lines:
        yield _issue("LINES_REQUIRED")
        return

    policy = config.policy_for(invoice.kind)
    kind_label = invoice.kind.value.replace("-", " ")
    for index, line in enumerate(invoice.lines, start=1):
        yield from _check_line(index, line, policy, kind_label)


def _too_long(value: str | None, limit: int) -> bool:
    return value is not None and len(value) > limit


def _check_lengths(invoice: Invoice, config: RulesConfig) -> Iterator[ValidationIssue]:
    limits = config.limits

    if _too_long(invoice.invoice_number, limits.invoice_number):
        yield _issue("INVOICE_NUMBER_TOO_LONG", limit=limits.invoice_number)

    for attribute, role, party in _parties(invoice):
        address = party.address
        for code, value, limit in (
            ("PARTY_NAME_TOO_LONG", party.registration_name, limits.registration_name),
            ("PARTY_COMPANY_ID_TOO_LONG", party.company_id, limits.company_id),
            ("PARTY_STREET_TOO_LONG", address.street, limits.street),
            ("PARTY_CITY_TOO_LONG", address.city, limits.city),
            ("PARTY_POSTAL_CODE_TOO_LONG", address.postal_code, limits.postal_code),
        ):
            if _too_long(value, limit):
                yield _issue(code, role=role, party=attribute, limit=limit)

    for index, line in enumerate(invoice.lines, start=1):
        if _too_long(line.name, limits.line_name):
            yield _issue("LINE_NAME_TOO_LONG", line=index, limit=limits.line_name)
        if _too_long(line.description, limits.line_description):
            yield _issue(
                "LINE_DESCRIPTION_TOO_LONG", line=index, limit=limits.line_description
            )

    if _too_long(invoice.preceding_invoice_number, limits.preceding_invoice_number):
        yield _issue(
            "PRECEDING_INVOICE_NUMBER_TOO_LONG", limit=limits.preceding_invoice_number
        )


def _check_invoice_number(invoice: Invoice, config: RulesConfig) -> Iterator[ValidationIssue]:
    if not any(ch in "0123456789" for ch in invoice.invoice_number or ""):
        yield _issue("INVOICE_NUMBER_NO_DIGIT")


def _check_regions(invoice: Invoice, config: RulesConfig) -> Iterator[ValidationIssue]:
    for attribute, role, party in _parties(invoice):
        address = party.address
        if not address.is_domestic:
            continue
        if _is_blank(address.region):
            yield _issue("PARTY_REGION_REQUIRED", role=role, party=attribute)
        elif resolve_region(address.region) is None:  # type: ignore[arg-type]
            yield _issue(
                "PARTY_REGION_UNMAPPED", role=role, party=attribute, region=address.region
            )


_CHECKS: tuple[_Check, ...] = (
    _check_structure,
    _check_lines,
    _check_lengths,
    _check_invoice_number,
    _check_regions,
)


def iter_invoice_issues(
    invoice: Invoice, config: RulesConfig | None = None
) -> Iterator[ValidationIssue]:
    """Yield every rule violation of ``invoice`` in evaluation order.

    The generator is lazy. Each stage assumes the previous ones passed, so
    only the first issue is guaranteed to be meaningful; later ones are
    useful for batch reports.
    """

    config = config or DEFAULT_RULES
    for check in _CHECKS:
        yield from check(invoice, config)


def validate_invoice(
    invoice: Invoice, config: RulesConfig | None = None
) -> ValidationIssue | None:
    """Return the first rule violation of ``invoice`` or ``None``."""

    return next(iter_invoice_issues(invoice, config), None)


def export_report(issues: Iterable[ValidationIssue], *, destination: Path) -> Path:
    """Export validation issues to an Excel report."""

    from .logging import ExcelLogger, ExcelLoggerConfig

    logger = ExcelLogger(
        ExcelLoggerConfig(columns=("code", "rule", "message"), filename=str(destination))
    )
    return logger.write_rows(issues)


__all__ = [
    "ValidationError",
    "ValidationIssue",
    "export_report",
    "iter_invoice_issues",
    "validate_invoice",
]
