from __future__ import annotations

import pytest

from efactura.identifiers import (
    ANONYMOUS_CNP,
    is_valid_cnp,
    is_valid_cnp_format,
    is_valid_vat,
    is_valid_vat_format,
    normalize_vat_number,
    strip_vat_prefix,
)


@pytest.mark.parametrize("code", ["18547290", "RO18547290", "ro18547290", " 18547290 "])
def test_valid_cui(code: str) -> None:
    assert is_valid_vat(code)


@pytest.mark.parametrize(
    "code",
    ["18547291", "1", "12345678901", "", "RO", "RO-18547290", "ABC18547290"],
)
def test_invalid_cui(code: str) -> None:
    assert not is_valid_vat(code)


def test_vat_format_ignores_the_checksum() -> None:
    assert is_valid_vat_format("18547291")
    assert is_valid_vat_format("RO12")
    assert is_valid_vat_format("1800101220012")
    assert not is_valid_vat_format("ABC")
    assert not is_valid_vat_format("   ")


def test_vat_accepts_a_valid_cnp() -> None:
    assert is_valid_vat("1800101220011")
    assert not is_valid_vat("1800101220012")


@pytest.mark.parametrize(
    "cnp",
    [
        "1800101220011",
        ANONYMOUS_CNP,
        # 29 February 2000, category 5 (born after 1999)
        "5000229401231",
    ],
)
def test_valid_cnp(cnp: str) -> None:
    assert is_valid_cnp(cnp)


@pytest.mark.parametrize(
    "cnp",
    [
        "1800101220012",
        # 29 February 1900 does not exist; the checksum itself is right
        "1000229401232",
        "1801301220011",
        "0000000000001",
        "180010122001",
        "18001012200111",
        "18001012200a1",
    ],
)
def test_invalid_cnp(cnp: str) -> None:
    assert not is_valid_cnp(cnp)


def test_cnp_format_only() -> None:
    assert is_valid_cnp_format("1800101220012")
    assert not is_valid_cnp_format("123")


def test_normalize_vat_number() -> None:
    assert normalize_vat_number("18547290") == "RO18547290"
    assert normalize_vat_number("ro18547290") == "RO18547290"
    assert normalize_vat_number(" RO18547290 ") == "RO18547290"
    assert normalize_vat_number("1800101220011") == "1800101220011"
    assert normalize_vat_number("123456789", "de") == "DE123456789"

    with pytest.raises(ValueError):
        normalize_vat_number("  ")


def test_strip_vat_prefix() -> None:
    assert strip_vat_prefix("RO18547290") == "18547290"
    assert strip_vat_prefix("ro 18547290") == "18547290"
    assert strip_vat_prefix("18547290") == "18547290"
    assert strip_vat_prefix("DE123456789", "DE") == "123456789"

    with pytest.raises(ValueError):
        strip_vat_prefix("")
