"""Runtime loader for the CIUS-RO business-rule limits.

Defaults match the CIUS-RO 1.0.1 length rules. A JSON file named by
``EFACTURA_RULES_PATH`` (or passed explicitly) can override any limit and
the quantity policy of each document kind::

    {
      "schema_version": "1.0.0",
      "limits": {"city": 50, "street": 150},
      "quantity_policy": {"invoice": "non-zero", "credit-note": "any"}
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from .invoices import DocumentKind

_RULES_ENV_VAR = "EFACTURA_RULES_PATH"


class RulesLoaderError(RuntimeError):
    """Raised when the rules file cannot be parsed."""


class QuantityPolicy(str, Enum):
    """Which line quantities a document kind accepts."""

    ANY = "any"
    NON_ZERO = "non-zero"
    POSITIVE = "positive"


@dataclass(frozen=True)
class LengthLimits:
    """Maximum character counts per field class."""

    invoice_number: int = 200
    registration_name: int = 200
    company_id: int = 30
    street: int = 150
    city: int = 50
    postal_code: int = 20
    line_name: int = 100
    line_description: int = 200
    preceding_invoice_number: int = 200


def _default_policies() -> Mapping[DocumentKind, QuantityPolicy]:
    return MappingProxyType(
        {
            DocumentKind.INVOICE: QuantityPolicy.NON_ZERO,
            DocumentKind.CREDIT_NOTE: QuantityPolicy.NON_ZERO,
        }
    )


@dataclass(frozen=True)
class RulesConfig:
    """Machine-usable business-rule configuration."""

    schema_version: str = "1.0.0"
    limits: LengthLimits = field(default_factory=LengthLimits)
    quantity_policy: Mapping[DocumentKind, QuantityPolicy] = field(
        default_factory=_default_policies
    )

    def policy_for(self, kind: DocumentKind) -> QuantityPolicy:
        return self.quantity_policy.get(kind, QuantityPolicy.NON_ZERO)


DEFAULT_RULES = RulesConfig()


def _resolve_rules_path(path: Path | str | None) -> Path | None:
    if path is not None:
        return Path(path)
    candidate = os.getenv(_RULES_ENV_VAR)
    if candidate:
        return Path(candidate)
    return None


def _parse_limits(raw: Any) -> LengthLimits:
    if not isinstance(raw, dict):
        raise RulesLoaderError("'limits' must be an object")

    known = {item.name for item in fields(LengthLimits)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise RulesLoaderError(f"Unknown length limits: {', '.join(unknown)}")

    overrides: dict[str, int] = {}
    for name, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise RulesLoaderError(f"Limit '{name}' must be a positive integer")
        overrides[name] = value
    return replace(LengthLimits(), **overrides)


def _parse_policies(raw: Any) -> Mapping[DocumentKind, QuantityPolicy]:
    if not isinstance(raw, dict):
        raise RulesLoaderError("'quantity_policy' must be an object")

    policies = dict(_default_policies())
    for kind_name, policy_name in raw.items():
        try:
            kind = DocumentKind(kind_name)
            policy = QuantityPolicy(policy_name)
        except ValueError as exc:
            msg = f"Invalid quantity policy entry: {kind_name!r} -> {policy_name!r}"
            raise RulesLoaderError(msg) from exc
        policies[kind] = policy
    return MappingProxyType(policies)


def parse_rules_config(payload: Mapping[str, Any]) -> RulesConfig:
    """Build a :class:`RulesConfig` from an already decoded mapping."""

    config = RulesConfig(schema_version=str(payload.get("schema_version", "1.0.0")))
    if "limits" in payload:
        config = replace(config, limits=_parse_limits(payload["limits"]))
    if "quantity_policy" in payload:
        config = replace(config, quantity_policy=_parse_policies(payload["quantity_policy"]))
    return config


def load_rules_config(path: Path | str | None = None) -> RulesConfig:
    """Load the rules file, falling back to :data:`DEFAULT_RULES`."""

    rules_path = _resolve_rules_path(path)
    if rules_path is None:
        return DEFAULT_RULES

    if not rules_path.exists():
        msg = f"Rules file '{rules_path}' not found"
        raise RulesLoaderError(msg)

    with rules_path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            msg = f"Rules file '{rules_path}' is not valid JSON"
            raise RulesLoaderError(msg) from exc

    if not isinstance(payload, dict):
        raise RulesLoaderError(f"Rules file '{rules_path}' must contain an object")
    return parse_rules_config(payload)


__all__ = [
    "DEFAULT_RULES",
    "LengthLimits",
    "QuantityPolicy",
    "RulesConfig",
    "RulesLoaderError",
    "load_rules_config",
    "parse_rules_config",
]
