"""
Rate Table -- the versioned, rate-bearing tax configuration record.

Responsibility:
    Immutable value objects describing the component rates that apply to one
    classification code for one business type, jurisdiction scope, and
    effective-date window.  Supplied by the configuration store; never
    mutated during calculation.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  Consumed by the pure engines
    (``tax_engines``) and produced by the stores in ``tax_modules``.

Invariants:
    - All rates and amounts are ``Decimal`` -- NEVER ``float``.
    - Rates are percentages (``Decimal("2.5")`` means 2.5%).
    - The effective window is inclusive on both ends; a missing
      ``effective_to`` means open-ended.
    - Split-component rates should sum to ``total_rate``.  This is checked at
      write time via ``split_rates_consistent()``; it is not re-validated per
      calculation.
    - The free-form condition maps hold ``ConditionValue`` instances, a closed
      set of value kinds, so exemption evaluation is exhaustive.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from tax_kernel.domain.rounding import ZERO
from tax_kernel.domain.types import (
    BusinessType,
    Comparison,
    ConditionKind,
    TransactionClassification,
)


def _to_decimal(raw: Any) -> Decimal | None:
    """Parse a numeric raw value; None when it is not a finite number."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    if isinstance(raw, (int, float, str)):
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            return None
        return value if value.is_finite() else None
    return None


@dataclass(frozen=True)
class ConditionValue:
    """
    Typed value of one entry in a configuration condition map.

    Exactly one payload field is set, matching ``kind``:
    NUMERIC -> ``number`` (optionally with a ``comparison``),
    FLAG -> ``flag``, TAG -> ``tag``.
    """

    kind: ConditionKind
    number: Decimal | None = None
    comparison: Comparison | None = None
    flag: bool | None = None
    tag: str | None = None

    def __post_init__(self) -> None:
        if self.kind is ConditionKind.NUMERIC and self.number is None:
            raise ValueError("NUMERIC condition requires a number")
        if self.kind is ConditionKind.FLAG and self.flag is None:
            raise ValueError("FLAG condition requires a flag")
        if self.kind is ConditionKind.TAG and self.tag is None:
            raise ValueError("TAG condition requires a tag")
        if self.comparison is not None and self.kind is not ConditionKind.NUMERIC:
            raise ValueError("Only NUMERIC conditions carry a comparison")

    @classmethod
    def numeric(
        cls, number: Decimal | int | str, comparison: Comparison | None = None
    ) -> "ConditionValue":
        value = _to_decimal(number)
        if value is None:
            raise ValueError(f"Not a finite number: {number!r}")
        return cls(kind=ConditionKind.NUMERIC, number=value, comparison=comparison)

    @classmethod
    def of_flag(cls, flag: bool) -> "ConditionValue":
        return cls(kind=ConditionKind.FLAG, flag=bool(flag))

    @classmethod
    def of_tag(cls, tag: str) -> "ConditionValue":
        return cls(kind=ConditionKind.TAG, tag=tag)

    @classmethod
    def from_raw(cls, raw: Any) -> "ConditionValue":
        """
        Parse a stored (JSON) value.

        Accepted shapes:
            true / false                          -> FLAG
            12, "12.5"                            -> NUMERIC
            {"condition": "LESS_THAN",
             "threshold": 500000}                 -> NUMERIC with comparison
            {"condition": "EQUALS",
             "threshold": "FOOD"}                 -> TAG
            "FOOD"                                -> TAG

        Raises:
            ValueError: for any other shape or an unknown condition name.
        """
        if isinstance(raw, ConditionValue):
            return raw
        if isinstance(raw, bool):
            return cls.of_flag(raw)
        if isinstance(raw, Mapping):
            if "condition" not in raw or "threshold" not in raw:
                raise ValueError(
                    f"Condition mapping needs 'condition' and 'threshold': {dict(raw)!r}"
                )
            try:
                comparison = Comparison(str(raw["condition"]).upper())
            except ValueError:
                raise ValueError(f"Unknown condition: {raw['condition']!r}") from None
            threshold = raw["threshold"]
            number = _to_decimal(threshold)
            if number is not None:
                return cls(
                    kind=ConditionKind.NUMERIC, number=number, comparison=comparison,
                )
            if comparison is Comparison.EQUALS and isinstance(threshold, str):
                return cls.of_tag(threshold)
            raise ValueError(f"Invalid threshold for {comparison.value}: {threshold!r}")
        number = _to_decimal(raw)
        if number is not None:
            return cls(kind=ConditionKind.NUMERIC, number=number)
        if isinstance(raw, str):
            return cls.of_tag(raw)
        raise ValueError(f"Unsupported condition value: {raw!r}")

    def to_raw(self) -> Any:
        """Inverse of ``from_raw`` -- a JSON-safe representation."""
        if self.kind is ConditionKind.FLAG:
            return self.flag
        if self.kind is ConditionKind.TAG:
            return self.tag
        if self.comparison is None:
            return str(self.number)
        return {"condition": self.comparison.value, "threshold": str(self.number)}

    def matches(self, value: Any = None) -> bool:
        """Evaluate this value as an exemption criterion against ``value``."""
        if self.kind is ConditionKind.FLAG:
            return bool(self.flag)
        if self.kind is ConditionKind.TAG:
            return value is not None and str(value) == self.tag
        if self.comparison is None or value is None:
            return False
        candidate = _to_decimal(value)
        if candidate is None:
            return False
        if self.comparison is Comparison.GREATER_THAN:
            return candidate > self.number
        if self.comparison is Comparison.LESS_THAN:
            return candidate < self.number
        return candidate == self.number


def parse_conditions(raw: Mapping[str, Any] | None) -> dict[str, ConditionValue]:
    """Parse a raw JSON condition map into typed values."""
    if not raw:
        return {}
    return {str(key): ConditionValue.from_raw(val) for key, val in raw.items()}


def dump_conditions(conditions: Mapping[str, ConditionValue]) -> dict[str, Any]:
    """Serialize typed condition values for JSON storage."""
    return {key: val.to_raw() for key, val in conditions.items()}


_RATE_FIELDS = (
    "total_rate",
    "central_rate",
    "state_rate",
    "integrated_rate",
    "territory_rate",
    "cess_rate",
    "cess_amount_per_unit",
    "composition_rate",
)


@dataclass(frozen=True)
class TaxConfiguration:
    """
    Tax configuration (rate table) for one classification code.

    Immutable value object.  ``central_rate`` and ``state_rate`` are the two
    split components used when both parties share a jurisdiction;
    ``integrated_rate`` is the unified cross-jurisdiction component;
    ``territory_rate`` replaces ``state_rate`` in special territories.
    """

    classification_code: str
    business_type: BusinessType
    total_rate: Decimal
    effective_from: date

    jurisdiction_scope: str | None = None  # None = applies everywhere

    central_rate: Decimal | None = None
    state_rate: Decimal | None = None
    integrated_rate: Decimal | None = None
    territory_rate: Decimal | None = None

    # Surcharge: ad-valorem rate and/or fixed amount per unit
    cess_rate: Decimal | None = None
    cess_amount_per_unit: Decimal | None = None

    effective_to: date | None = None

    is_reverse_charge: bool = False
    is_composition_eligible: bool = False
    composition_rate: Decimal | None = None

    special_conditions: Mapping[str, ConditionValue] = field(default_factory=dict)
    exemption_criteria: Mapping[str, ConditionValue] = field(default_factory=dict)
    threshold_limits: Mapping[str, ConditionValue] = field(default_factory=dict)

    description: str | None = None
    notification_reference: str | None = None
    is_active: bool = True
    id: UUID | None = None

    def __post_init__(self) -> None:
        for name in _RATE_FIELDS:
            value = getattr(self, name)
            if value is not None and value < ZERO:
                raise ValueError(f"{name} cannot be negative")
        if self.effective_to is not None and self.effective_to < self.effective_from:
            raise ValueError("effective_to cannot precede effective_from")
        if self.jurisdiction_scope is not None:
            object.__setattr__(
                self, "jurisdiction_scope", self.jurisdiction_scope.strip().upper() or None,
            )

    def is_effective(self, on_date: date) -> bool:
        """Check if the configuration is effective on ``on_date`` (inclusive)."""
        if on_date < self.effective_from:
            return False
        if self.effective_to is not None and on_date > self.effective_to:
            return False
        return True

    def applies_to_scope(self, scope: str | None) -> bool:
        """Unscoped configurations apply everywhere; scoped ones only to their scope."""
        if self.jurisdiction_scope is None or scope is None:
            return True
        return self.jurisdiction_scope == scope.strip().upper()

    @property
    def effective_cess_rate(self) -> Decimal:
        """Ad-valorem surcharge rate; zero when none is configured."""
        return self.cess_rate if self.cess_rate is not None else ZERO

    @property
    def effective_cess_amount_per_unit(self) -> Decimal:
        """Fixed surcharge per unit; zero when none is configured."""
        return self.cess_amount_per_unit if self.cess_amount_per_unit is not None else ZERO

    def rate_for(self, classification: TransactionClassification) -> Decimal:
        """Nominal combined rate of the standard components for a classification."""
        if classification is TransactionClassification.SAME_JURISDICTION:
            return (self.central_rate or ZERO) + (self.state_rate or ZERO)
        if classification is TransactionClassification.SPECIAL_TERRITORY:
            return (self.central_rate or ZERO) + (self.territory_rate or ZERO)
        if classification is TransactionClassification.CROSS_JURISDICTION:
            return self.integrated_rate if self.integrated_rate is not None else self.total_rate
        return ZERO

    def split_rates_consistent(self) -> bool:
        """True unless both split rates are set and do not sum to ``total_rate``."""
        if self.central_rate is None or self.state_rate is None:
            return True
        return self.central_rate + self.state_rate == self.total_rate

    def threshold_limit(self, key: str) -> Decimal | None:
        """Numeric threshold registered under ``key``, if any."""
        value = self.threshold_limits.get(key)
        if value is None or value.kind is not ConditionKind.NUMERIC:
            return None
        return value.number

    def is_exemption_applicable(self, key: str, value: Any = None) -> bool:
        """Evaluate the named exemption criterion; False when it is absent."""
        criterion = self.exemption_criteria.get(key)
        if criterion is None:
            return False
        return criterion.matches(value)
