"""
Tax Determination Module.

Responsibility:
    Resolve the single tax configuration governing a line and produce its
    itemized breakdown, for one line or for a batch with per-item failure
    isolation.

Architecture:
    tax_modules -- glue layer.
    The module owns DTOs, ORM models, stores, configuration, and the
    resolver/service/bulk orchestration.  Classification and component
    arithmetic live in ``tax_engines``; errors, logging, clock, and the rate
    table value live in ``tax_kernel``.

Invariants:
    - All monetary amounts use ``Decimal`` -- NEVER ``float``.
    - Every store read is scoped by an explicit ``tenant_id``.
    - A missing rule is an error, never a default rate.

Failure modes:
    - ``TaxCalculationService.calculate`` surfaces every ``TaxEngineError``.
    - ``BulkCalculationCoordinator.calculate_bulk`` turns per-item
      ``TaxEngineError`` into placeholders; other exceptions propagate.
    - ``DeterminationConfig.__post_init__`` raises ``ValueError`` for invalid
      configuration values.
"""

from tax_modules.determination.bulk import BulkCalculationCoordinator
from tax_modules.determination.config import DeterminationConfig
from tax_modules.determination.jurisdictions import (
    JurisdictionDirectory,
    SqlJurisdictionDirectory,
    StaticJurisdictionDirectory,
)
from tax_modules.determination.models import (
    BulkTaxCalculationResult,
    BusinessTypeProfile,
    ClassificationCode,
    TaxCalculationItem,
    TaxCalculationResult,
    TaxSummary,
    summarize,
    validate_hierarchy,
)
from tax_modules.determination.resolver import (
    ConfigurationResolver,
    ResolvedConfiguration,
)
from tax_modules.determination.service import TaxCalculationService
from tax_modules.determination.stores import (
    BusinessTypeStore,
    ClassificationCodeStore,
    InMemoryBusinessTypeStore,
    InMemoryClassificationCodeStore,
    InMemoryTaxConfigurationStore,
    SqlBusinessTypeStore,
    SqlClassificationCodeStore,
    SqlTaxConfigurationStore,
    TaxConfigurationStore,
    pick_effective,
)

__all__ = [
    "BulkCalculationCoordinator",
    "BulkTaxCalculationResult",
    "BusinessTypeProfile",
    "BusinessTypeStore",
    "ClassificationCode",
    "ClassificationCodeStore",
    "ConfigurationResolver",
    "DeterminationConfig",
    "InMemoryBusinessTypeStore",
    "InMemoryClassificationCodeStore",
    "InMemoryTaxConfigurationStore",
    "JurisdictionDirectory",
    "ResolvedConfiguration",
    "SqlBusinessTypeStore",
    "SqlClassificationCodeStore",
    "SqlJurisdictionDirectory",
    "SqlTaxConfigurationStore",
    "StaticJurisdictionDirectory",
    "TaxCalculationItem",
    "TaxCalculationResult",
    "TaxCalculationService",
    "TaxConfigurationStore",
    "TaxSummary",
    "pick_effective",
    "summarize",
    "validate_hierarchy",
]
