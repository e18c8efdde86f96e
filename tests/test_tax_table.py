from __future__ import annotations

from decimal import Decimal

import pytest

from efactura.invoices import InvoiceLine, TaxCategory
from efactura.tax_table import compute_totals, group_key, group_lines_by_tax, tax_category


def _line(quantity, unit_price, tax_percent, name: str = "Item") -> InvoiceLine:
    return InvoiceLine(name=name, quantity=quantity, unit_price=unit_price, tax_percent=tax_percent)


def test_two_rates_give_two_groups() -> None:
    lines = [_line(1, 100, 19), _line(1, 100, 19), _line(1, 100, 9)]

    totals = compute_totals(lines, is_vat_payer=True)

    assert [group.rate for group in totals.tax_groups] == [Decimal("19.00"), Decimal("9.00")]
    first, second = totals.tax_groups
    assert (first.taxable_amount, first.tax_amount) == (Decimal("200.00"), Decimal("38.00"))
    assert (second.taxable_amount, second.tax_amount) == (Decimal("100.00"), Decimal("9.00"))
    assert totals.line_extension == Decimal("300.00")
    assert totals.tax_total == Decimal("47.00")
    assert totals.gross_total == Decimal("347.00")
    assert totals.payable == totals.tax_inclusive == Decimal("347.00")
    assert totals.tax_exclusive == Decimal("300.00")


@pytest.mark.parametrize(
    ("rates", "expected_groups"),
    [
        ((19.0, "19.00"), 1),
        ((19.001, 19.004), 1),
        ((19, Decimal("19.00000001")), 1),
        ((19.004, 19.006), 2),
        ((9, 19), 2),
    ],
)
def test_rates_are_grouped_on_two_decimals(rates, expected_groups: int) -> None:
    lines = [_line(1, 10, rate) for rate in rates]
    assert len(group_lines_by_tax(lines, is_vat_payer=True)) == expected_groups


def test_groups_keep_first_seen_order() -> None:
    lines = [_line(1, 1, 5), _line(1, 1, 19), _line(1, 1, 9), _line(1, 1, 5)]
    rates = [group.rate for group in group_lines_by_tax(lines, is_vat_payer=True)]
    assert rates == [Decimal("5.00"), Decimal("19.00"), Decimal("9.00")]


def test_group_taxable_is_rounded_once() -> None:
    lines = [_line(1, "0.335", 19) for _ in range(3)]

    (group,) = group_lines_by_tax(lines, is_vat_payer=True)

    assert group.raw_taxable == Decimal("1.005")
    assert group.taxable_amount == Decimal("1.01")
    assert group.tax_amount == Decimal("0.19")


def test_float_inputs_do_not_leak_binary_noise() -> None:
    (group,) = group_lines_by_tax([_line(3, 0.1, 19)], is_vat_payer=True)
    assert group.raw_taxable == Decimal("0.3")
    assert group.tax_amount == Decimal("0.06")


@pytest.mark.parametrize(
    "lines",
    [
        [_line(1, "0.335", 19), _line(2, "10.555", 19), _line(7, "3.3333", 9)],
        [_line(-2, 100, 19), _line(5, "0.99", 5), _line(1, "1234.567", 0)],
        [_line("0.5", "19.99", 19)],
    ],
)
def test_totals_are_consistent(lines: list[InvoiceLine]) -> None:
    totals = compute_totals(lines, is_vat_payer=True)

    assert totals.tax_total == sum(group.tax_amount for group in totals.tax_groups)
    assert totals.gross_total == totals.line_extension + totals.tax_total
    for value in (totals.line_extension, totals.tax_total, totals.gross_total):
        assert value == value.quantize(Decimal("0.01"))


def test_negative_line_reduces_totals() -> None:
    line = _line(-2, 100, 19)

    assert line.extension == Decimal("-200.00")
    assert line.tax_amount == Decimal("-38.00")
    assert line.gross_amount == Decimal("-238.00")

    (group,) = group_lines_by_tax([line], is_vat_payer=True)
    assert group.tax_amount == Decimal("-38.00")


@pytest.mark.parametrize(
    ("is_vat_payer", "category"),
    [(True, TaxCategory.ZERO_RATED), (False, TaxCategory.NOT_SUBJECT)],
)
def test_no_lines_gives_a_zero_group(is_vat_payer: bool, category: TaxCategory) -> None:
    (group,) = group_lines_by_tax([], is_vat_payer)

    assert group.rate == Decimal("0.00")
    assert group.category is category
    assert group.taxable_amount == Decimal("0.00")
    assert group.tax_amount == Decimal("0.00")

    totals = compute_totals([], is_vat_payer)
    assert totals.gross_total == Decimal("0.00")


@pytest.mark.parametrize(
    ("rate", "is_vat_payer", "expected"),
    [
        (19, True, TaxCategory.STANDARD),
        (5, True, TaxCategory.STANDARD),
        (0, True, TaxCategory.ZERO_RATED),
        ("0.005", True, TaxCategory.ZERO_RATED),
        (19, False, TaxCategory.NOT_SUBJECT),
        (0, False, TaxCategory.NOT_SUBJECT),
    ],
)
def test_tax_category(rate, is_vat_payer: bool, expected: TaxCategory) -> None:
    assert tax_category(rate, is_vat_payer) is expected


def test_group_key() -> None:
    assert group_key(19.004) == group_key("19") == Decimal("19.00")
    assert group_key(19.006) == Decimal("19.01")


def test_non_payer_groups_are_not_subject() -> None:
    groups = group_lines_by_tax([_line(1, 100, 19), _line(1, 50, 0)], is_vat_payer=False)
    assert {group.category for group in groups} == {TaxCategory.NOT_SUBJECT}
