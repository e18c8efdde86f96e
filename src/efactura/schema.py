"""Schema helpers for generated UBL documents."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple, Union

from lxml import etree

from .utils import detect_namespace

_PACKAGE_ROOT = Path(__file__).resolve().parent
_SCHEMA_ENV_VAR = "EFACTURA_SCHEMA_DIR"
_SCHEMA_ROOT = (_PACKAGE_ROOT / ".." / ".." / "schemas").resolve()


def _schema_root() -> Path:
    candidate = os.getenv(_SCHEMA_ENV_VAR)
    if candidate:
        return Path(candidate)
    return _SCHEMA_ROOT


def load_schema(name: str) -> Path:
    """Return the path to the requested schema resource."""

    path = _schema_root() / name
    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {name}")
    return path


def validate_xsd(
    tree: Union[etree._ElementTree, etree._Element], xsd_path: Path
) -> tuple[bool, list[str]]:
    """Validate ``tree`` against ``xsd_path`` and return ``(ok, errors)``."""

    try:
        schema = etree.XMLSchema(etree.parse(str(xsd_path)))
    except (OSError, etree.XMLSchemaParseError, etree.XMLSyntaxError) as exc:
        return False, [f"XSD validation exception: {exc}"]

    if schema.validate(tree):
        return True, []
    return False, [f"line {error.line}: {error.message}" for error in schema.error_log]


def load_document(
    source: Union[bytes, str, Path],
) -> Tuple[etree._ElementTree, etree._Element, str]:
    """Parse ``source`` and return the tree, root element and namespace.

    ``bytes`` are parsed as XML content, ``str`` and :class:`Path` as file
    paths.
    """

    if isinstance(source, bytes):
        root = etree.fromstring(source)
        tree = etree.ElementTree(root)
    else:
        tree = etree.parse(str(source))
        root = tree.getroot()
    return tree, root, detect_namespace(root)


__all__ = [
    "load_document",
    "load_schema",
    "validate_xsd",
]
