"""Top level package for the e-Factura UBL tools.

The public entry point is :func:`efactura.builder.build_document`; the
remaining modules expose the validators and normalisers it is built from.
"""

__version__ = "0.3.0"

__all__ = [
    "address",
    "builder",
    "identifiers",
    "invoices",
    "logging",
    "rules",
    "rules_loader",
    "schema",
    "tax_table",
    "utils",
    "validator",
]
