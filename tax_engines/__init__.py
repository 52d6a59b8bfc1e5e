"""
Module: tax_engines
Responsibility:
    Package entrypoint that re-exports the pure calculation engines.  This is
    the canonical import surface for the determination module.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import tax_kernel (and sibling engine modules).
    MUST NOT import tax_modules or tax_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
    - Decimal-only arithmetic: all rates and amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from tax_engines import ComponentCalculator, TransactionClassifier
"""

from tax_engines.classifier import TerritoryLookup, TransactionClassifier
from tax_engines.components import (
    DEFAULT_COMPONENT_LABELS,
    ComponentCalculator,
    TaxComponent,
)
from tax_engines.exemptions import (
    ESSENTIAL_GOODS,
    EXEMPTION_THRESHOLD,
    QUANTITY_THRESHOLD,
    SMALL_BUSINESS,
    evaluate_exemption,
)
from tax_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "ComponentCalculator",
    "DEFAULT_COMPONENT_LABELS",
    "ESSENTIAL_GOODS",
    "EXEMPTION_THRESHOLD",
    "QUANTITY_THRESHOLD",
    "SMALL_BUSINESS",
    "TaxComponent",
    "TerritoryLookup",
    "TransactionClassifier",
    "compute_input_fingerprint",
    "evaluate_exemption",
    "traced_engine",
]
