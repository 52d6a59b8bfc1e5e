"""
Configuration Loader (``tax_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed determination objects:
the module settings (``DeterminationConfig``) and, optionally, a catalog of
classification codes, business types, and tax configurations for the
in-memory stores.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel domain
types and on the determination module's config schema and stores.  Nothing
in the kernel, engines, or modules imports this package.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Rates and amounts are parsed from their string form into ``Decimal``;
  YAML floats are rejected.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from uuid import UUID

import yaml

from tax_kernel.domain.rate_table import TaxConfiguration, parse_conditions
from tax_kernel.domain.types import BusinessType
from tax_kernel.logging_config import get_logger
from tax_modules.determination.config import DeterminationConfig
from tax_modules.determination.models import BusinessTypeProfile, ClassificationCode
from tax_modules.determination.stores import (
    InMemoryBusinessTypeStore,
    InMemoryClassificationCodeStore,
    InMemoryTaxConfigurationStore,
)

logger = get_logger("config.loader")

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {type(value).__name__}: {value!r}")


def parse_decimal(value: Any) -> Decimal:
    """
    Parse a rate or amount.  Strings and integers only: a YAML float has
    already lost its exact decimal value.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"Quote decimal values in YAML, got {value!r}")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Not a decimal: {value!r}") from None
        if not parsed.is_finite():
            raise ValueError(f"Not a finite decimal: {value!r}")
        return parsed
    raise ValueError(f"Cannot parse decimal from {type(value).__name__}: {value!r}")


def _optional_decimal(data: dict[str, Any], key: str) -> Decimal | None:
    value = data.get(key)
    return parse_decimal(value) if value is not None else None


def _optional_date(data: dict[str, Any], key: str) -> date | None:
    value = data.get(key)
    return parse_date(value) if value is not None else None


def parse_classification_code(data: dict[str, Any]) -> ClassificationCode:
    return ClassificationCode(
        code=str(data["code"]),
        description=data["description"],
        level=int(data.get("level", 1)),
        parent_code=str(data["parent_code"]) if data.get("parent_code") is not None else None,
        unit_of_measure=data.get("unit_of_measure"),
        is_exemption_eligible=bool(data.get("is_exemption_eligible", False)),
        effective_from=_optional_date(data, "effective_from"),
        effective_to=_optional_date(data, "effective_to"),
        is_active=bool(data.get("is_active", True)),
    )


def parse_business_type(data: dict[str, Any]) -> BusinessTypeProfile:
    business_type = BusinessType(str(data["business_type"]).upper())
    return BusinessTypeProfile(
        business_type=business_type,
        display_name=data.get("display_name", business_type.value),
        is_active=bool(data.get("is_active", True)),
        description=data.get("description"),
    )


def parse_tax_configuration(data: dict[str, Any]) -> TaxConfiguration:
    """Parse one rate-table entry."""
    return TaxConfiguration(
        classification_code=str(data["classification_code"]),
        business_type=BusinessType(str(data["business_type"]).upper()),
        total_rate=parse_decimal(data["total_rate"]),
        effective_from=parse_date(data["effective_from"]),
        jurisdiction_scope=data.get("jurisdiction_scope"),
        central_rate=_optional_decimal(data, "central_rate"),
        state_rate=_optional_decimal(data, "state_rate"),
        integrated_rate=_optional_decimal(data, "integrated_rate"),
        territory_rate=_optional_decimal(data, "territory_rate"),
        cess_rate=_optional_decimal(data, "cess_rate"),
        cess_amount_per_unit=_optional_decimal(data, "cess_amount_per_unit"),
        effective_to=_optional_date(data, "effective_to"),
        is_reverse_charge=bool(data.get("is_reverse_charge", False)),
        is_composition_eligible=bool(data.get("is_composition_eligible", False)),
        composition_rate=_optional_decimal(data, "composition_rate"),
        special_conditions=parse_conditions(data.get("special_conditions")),
        exemption_criteria=parse_conditions(data.get("exemption_criteria")),
        threshold_limits=parse_conditions(data.get("threshold_limits")),
        description=data.get("description"),
        notification_reference=data.get("notification_reference"),
        is_active=bool(data.get("is_active", True)),
    )


def load_config(path: Path | str | None = None) -> DeterminationConfig:
    """
    Load the determination settings from YAML.

    Without ``path`` the packaged ``defaults.yaml`` is used.
    """
    source = Path(path) if path is not None else DEFAULTS_PATH
    data = load_yaml_file(source)
    settings = data.get("determination", data)
    logger.info("determination_config_loaded", extra={
        "path": str(source),
        "checksum": compute_checksum(data),
    })
    return DeterminationConfig.from_dict(settings)


@dataclass(frozen=True)
class Catalog:
    """In-memory stores populated from a catalog file."""
    classification_codes: InMemoryClassificationCodeStore
    business_types: InMemoryBusinessTypeStore
    configurations: InMemoryTaxConfigurationStore
    checksum: str


def load_catalog(path: Path | str, tenant_id: UUID) -> Catalog:
    """
    Load classification codes, business types, and tax configurations for
    one tenant into in-memory stores.

    Expected top-level keys: ``classification_codes``, ``business_types``,
    ``tax_configurations`` (each a list of mappings; all optional).
    """
    source = Path(path)
    data = load_yaml_file(source)

    codes = InMemoryClassificationCodeStore()
    for entry in data.get("classification_codes") or []:
        codes.add(tenant_id, parse_classification_code(entry))

    business_types = InMemoryBusinessTypeStore()
    for entry in data.get("business_types") or []:
        business_types.add(tenant_id, parse_business_type(entry))

    configurations = InMemoryTaxConfigurationStore()
    entries = data.get("tax_configurations") or []
    for entry in entries:
        configurations.add(tenant_id, parse_tax_configuration(entry))

    checksum = compute_checksum(data)
    logger.info("tax_catalog_loaded", extra={
        "path": str(source),
        "classification_codes_count": len(data.get("classification_codes") or []),
        "business_types_count": len(data.get("business_types") or []),
        "tax_configurations_count": len(entries),
        "checksum": checksum,
    })
    return Catalog(
        classification_codes=codes,
        business_types=business_types,
        configurations=configurations,
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
