"""
Tax Determination Domain Models.

Responsibility:
    Frozen dataclass DTOs for the nouns of tax determination: classification
    codes, business-type profiles, calculation requests, and calculation
    results (single and bulk).

Architecture:
    tax_modules -- glue layer.  These models are pure data containers with no
    I/O and no ORM coupling.  The rate table itself (``TaxConfiguration``) and
    the engine output (``TaxComponent``) live in the kernel and engines.

Invariants:
    - All models are ``frozen=True`` (immutable after construction).
    - All monetary fields use ``Decimal`` -- NEVER ``float``.
    - ``TaxCalculationResult.total_tax_amount`` is the exact sum of its
      component amounts and ``total_amount == base_amount + total_tax_amount``.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from tax_engines.components import TaxComponent
from tax_kernel.domain.rounding import add_amounts, percentage_of
from tax_kernel.domain.types import (
    BusinessType,
    ComponentKind,
    TransactionClassification,
)


MIN_CLASSIFICATION_LEVEL = 1
MAX_CLASSIFICATION_LEVEL = 3


@dataclass(frozen=True)
class ClassificationCode:
    """A hierarchical product/service tax-classification code."""
    code: str
    description: str
    level: int = 1
    parent_code: str | None = None
    unit_of_measure: str | None = None
    is_exemption_eligible: bool = False
    effective_from: date | None = None
    effective_to: date | None = None
    is_active: bool = True
    id: UUID | None = None

    def __post_init__(self):
        if not self.code or not self.code.strip():
            raise ValueError("code cannot be empty")
        if not MIN_CLASSIFICATION_LEVEL <= self.level <= MAX_CLASSIFICATION_LEVEL:
            raise ValueError(
                f"level must be between {MIN_CLASSIFICATION_LEVEL} and "
                f"{MAX_CLASSIFICATION_LEVEL}, got {self.level}"
            )
        if self.level == MIN_CLASSIFICATION_LEVEL and self.parent_code is not None:
            raise ValueError("top-level codes cannot have a parent")
        if self.level > MIN_CLASSIFICATION_LEVEL and self.parent_code is None:
            raise ValueError(f"level {self.level} codes require a parent_code")

    def is_valid_for(self, on_date: date) -> bool:
        """Active and inside the inclusive validity window."""
        if not self.is_active:
            return False
        if self.effective_from is not None and on_date < self.effective_from:
            return False
        if self.effective_to is not None and on_date > self.effective_to:
            return False
        return True


def validate_hierarchy(child: ClassificationCode, parent: ClassificationCode) -> None:
    """
    Check that ``child`` sits directly below ``parent``.

    Raises:
        ValueError: if the parent reference or the levels are inconsistent.
    """
    if child.parent_code != parent.code:
        raise ValueError(
            f"{child.code} references parent {child.parent_code}, not {parent.code}"
        )
    if child.level != parent.level + 1:
        raise ValueError(
            f"{child.code} has level {child.level}; expected {parent.level + 1} "
            f"below {parent.code}"
        )


@dataclass(frozen=True)
class BusinessTypeProfile:
    """A named transaction-party category."""
    business_type: BusinessType
    display_name: str
    is_active: bool = True
    description: str | None = None
    id: UUID | None = None


@dataclass(frozen=True)
class TaxCalculationItem:
    """One line item of a bulk calculation request."""
    classification_code: str
    base_amount: Decimal
    quantity: int = 1
    description: str | None = None


@dataclass(frozen=True)
class TaxCalculationResult:
    """
    Complete tax calculation result for one line.

    ``error`` is set only on bulk placeholders standing in for a failed line;
    it holds the machine-readable error code.
    """
    base_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal
    classification_code: str
    classification: TransactionClassification
    components: tuple[TaxComponent, ...]
    calculation_date: datetime
    is_reverse_charge: bool = False
    exemption_reason: str | None = None
    notes: tuple[str, ...] = ()
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def effective_rate(self) -> Decimal:
        """Total tax as a percentage of the base amount."""
        return percentage_of(self.total_tax_amount, self.base_amount)

    def components_of(self, kind: ComponentKind) -> tuple[TaxComponent, ...]:
        return tuple(c for c in self.components if c.kind is kind)

    def amount_for(self, kind: ComponentKind) -> Decimal:
        """Sum of the component amounts of one kind."""
        return add_amounts(*(c.amount for c in self.components_of(kind)))


@dataclass(frozen=True)
class TaxSummary:
    """Per-kind totals across the items of a bulk calculation."""
    central: Decimal
    state: Decimal
    integrated: Decimal
    territory: Decimal
    cess: Decimal
    total_tax: Decimal
    average_effective_rate: Decimal
    items_count: int
    error_count: int
    unique_codes: frozenset[str] = field(default_factory=frozenset)
    classifications: frozenset[TransactionClassification] = field(default_factory=frozenset)


@dataclass(frozen=True)
class BulkTaxCalculationResult:
    """Per-item results (or placeholders) plus aggregate totals."""
    items: tuple[TaxCalculationResult, ...]
    total_base_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal
    calculation_date: datetime

    @property
    def error_count(self) -> int:
        return sum(1 for item in self.items if item.is_error)

    def summary(self) -> TaxSummary:
        return summarize(self.items)


def _total(results: Iterable[TaxCalculationResult], kind: ComponentKind) -> Decimal:
    return add_amounts(*(r.amount_for(kind) for r in results))


def summarize(results: Iterable[TaxCalculationResult]) -> TaxSummary:
    """Aggregate per-kind totals and the average effective rate."""
    results = tuple(results)
    total_base = add_amounts(*(r.base_amount for r in results))
    total_tax = add_amounts(*(r.total_tax_amount for r in results))
    return TaxSummary(
        central=_total(results, ComponentKind.CENTRAL),
        state=_total(results, ComponentKind.STATE),
        integrated=_total(results, ComponentKind.INTEGRATED),
        territory=_total(results, ComponentKind.TERRITORY),
        cess=_total(results, ComponentKind.CESS),
        total_tax=total_tax,
        average_effective_rate=percentage_of(total_tax, total_base),
        items_count=len(results),
        error_count=sum(1 for r in results if r.is_error),
        unique_codes=frozenset(r.classification_code for r in results),
        classifications=frozenset(r.classification for r in results),
    )
