from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from efactura.invoices import Address, Invoice, InvoiceLine, Party  # noqa: E402


@pytest.fixture
def supplier() -> Party:
    return Party(
        registration_name="Furnizor Exemplu SRL",
        company_id="18547290",
        address=Address(
            street="Str. Memorandumului 28",
            city="Cluj-Napoca",
            postal_code="400114",
            region="Cluj",
        ),
        registration_number="J12/1234/2010",
        is_vat_payer=True,
    )


@pytest.fixture
def customer() -> Party:
    return Party(
        registration_name="Client Exemplu SA",
        company_id="RO123456",
        address=Address(
            street="Bd. Unirii 10",
            city="Sector 3",
            postal_code="030167",
            region="Bucuresti",
        ),
        is_vat_payer=True,
    )


@pytest.fixture
def make_invoice(supplier: Party, customer: Party) -> Callable[..., Invoice]:
    base = Invoice(
        invoice_number="FCT-2024-0001",
        issue_date="2024-03-15",
        supplier=supplier,
        customer=customer,
        lines=(InvoiceLine(name="Servicii consultanta", quantity=1, unit_price=100, tax_percent=19),),
    )

    def _make(**overrides) -> Invoice:
        return replace(base, **overrides)

    return _make


def with_address(party: Party, **overrides) -> Party:
    """Return ``party`` with some address fields replaced."""

    return replace(party, address=replace(party.address, **overrides))
