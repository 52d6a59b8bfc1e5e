"""
Component Calculator - Itemized tax breakdown for one line.

Pure functions with no I/O - the resolved tax configuration is provided as a
parameter.  Never raises for valid inputs: the result is a (possibly empty)
ordered list of ``TaxComponent``.

Algorithm:
    1. Composition overlay: a COMPOSITION business type with a configured
       composition rate yields a single flat-rate component and nothing else.
    2. Standard components by classification:
         SAME_JURISDICTION  -> CENTRAL + STATE
         SPECIAL_TERRITORY  -> CENTRAL + TERRITORY
         CROSS_JURISDICTION -> INTEGRATED (falls back to the total rate)
         EXPORT             -> none (zero-rated)
       A split component is emitted only when its rate is configured.
    3. Ad-valorem cess when the effective cess rate is positive.
    4. Fixed cess per unit when the effective per-unit amount is positive,
       computed as ``per_unit * quantity`` and flagged ``is_fixed``.

Every percentage amount goes through ``percentage_amount`` (four fractional
digits, half-up).  Fixed per-unit amounts are exact products.

Usage:
    from tax_engines.components import ComponentCalculator

    components = ComponentCalculator().compute(
        config=configuration,
        classification=TransactionClassification.SAME_JURISDICTION,
        base_amount=Decimal("1000.00"),
        quantity=1,
        business_type=BusinessType.B2B,
    )
    [c.amount for c in components]  # [Decimal("25.0000"), Decimal("25.0000")]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from tax_engines.tracer import traced_engine
from tax_kernel.domain.rate_table import TaxConfiguration
from tax_kernel.domain.rounding import ZERO, multiply_exact, percentage_amount, percentage_of
from tax_kernel.domain.types import (
    BusinessType,
    ComponentKind,
    TransactionClassification,
)
from tax_kernel.logging_config import get_logger

logger = get_logger("engines.components")

# Label keys -> (default display name, description)
DEFAULT_COMPONENT_LABELS: dict[str, tuple[str, str]] = {
    "CENTRAL": ("CGST", "Central Goods and Services Tax"),
    "STATE": ("SGST", "State Goods and Services Tax"),
    "INTEGRATED": ("IGST", "Integrated Goods and Services Tax"),
    "TERRITORY": ("UTGST", "Union Territory Goods and Services Tax"),
    "CESS": ("Cess", "Additional cess"),
    "CESS_PER_UNIT": ("Cess (Per Unit)", "Fixed cess per unit"),
    "COMPOSITION": ("GST (Composition)", "Composition scheme rate"),
}


@dataclass(frozen=True)
class TaxComponent:
    """
    One named line in a tax breakdown.

    Immutable value object.  ``rate`` is a percentage; it is zero for fixed
    per-unit components.
    """

    kind: ComponentKind
    name: str
    rate: Decimal
    amount: Decimal
    base_amount: Decimal
    is_fixed: bool = False
    description: str | None = None

    @property
    def effective_rate(self) -> Decimal:
        """Amount as a percentage of the base amount."""
        return percentage_of(self.amount, self.base_amount)


class ComponentCalculator:
    """
    Compute the tax components for a resolved configuration.

    Pure - no I/O, no database access, no clock.  Display names come from
    ``labels`` (label key -> name), falling back to the GST defaults.
    """

    def __init__(self, labels: Mapping[str, str] | None = None):
        self._labels = dict(labels or {})

    def _label(self, key: str) -> tuple[str, str]:
        default_name, description = DEFAULT_COMPONENT_LABELS[key]
        return self._labels.get(key, default_name), description

    def _percentage(
        self,
        kind: ComponentKind,
        label_key: str,
        rate: Decimal,
        base_amount: Decimal,
    ) -> TaxComponent:
        name, description = self._label(label_key)
        return TaxComponent(
            kind=kind,
            name=name,
            rate=rate,
            amount=percentage_amount(base_amount, rate),
            base_amount=base_amount,
            description=description,
        )

    @traced_engine(
        "tax_components", "1.0",
        fingerprint_fields=("config", "classification", "base_amount", "quantity", "business_type"),
    )
    def compute(
        self,
        *,
        config: TaxConfiguration,
        classification: TransactionClassification,
        base_amount: Decimal,
        quantity: int,
        business_type: BusinessType,
    ) -> list[TaxComponent]:
        """
        Compute the ordered components for one line.

        Args:
            config: Resolved tax configuration
            classification: Transaction classification
            base_amount: Taxable base amount
            quantity: Number of units (used only by fixed per-unit cess)
            business_type: Business type of the transaction

        Returns:
            Ordered list of TaxComponent (empty for zero-rated exports
            without cess)
        """
        if business_type.is_composition and config.composition_rate is not None:
            logger.debug("composition_overlay_applied", extra={
                "classification_code": config.classification_code,
                "composition_rate": str(config.composition_rate),
            })
            return [
                self._percentage(
                    ComponentKind.INTEGRATED, "COMPOSITION",
                    config.composition_rate, base_amount,
                )
            ]

        components = self._standard_components(config, classification, base_amount)

        cess_rate = config.effective_cess_rate
        if cess_rate > ZERO:
            components.append(
                self._percentage(ComponentKind.CESS, "CESS", cess_rate, base_amount)
            )

        per_unit = config.effective_cess_amount_per_unit
        if per_unit > ZERO:
            name, description = self._label("CESS_PER_UNIT")
            components.append(
                TaxComponent(
                    kind=ComponentKind.CESS,
                    name=name,
                    rate=ZERO,
                    amount=multiply_exact(per_unit, quantity),
                    base_amount=base_amount,
                    is_fixed=True,
                    description=description,
                )
            )

        return components

    def _standard_components(
        self,
        config: TaxConfiguration,
        classification: TransactionClassification,
        base_amount: Decimal,
    ) -> list[TaxComponent]:
        """Classification-dependent components, before any cess."""
        if classification is TransactionClassification.EXPORT:
            return []

        if classification is TransactionClassification.CROSS_JURISDICTION:
            rate = (
                config.integrated_rate
                if config.integrated_rate is not None
                else config.total_rate
            )
            return [
                self._percentage(ComponentKind.INTEGRATED, "INTEGRATED", rate, base_amount)
            ]

        if classification is TransactionClassification.SAME_JURISDICTION:
            second = (ComponentKind.STATE, "STATE", config.state_rate)
        else:
            second = (ComponentKind.TERRITORY, "TERRITORY", config.territory_rate)

        splits = [(ComponentKind.CENTRAL, "CENTRAL", config.central_rate), second]
        return [
            self._percentage(kind, label_key, rate, base_amount)
            for kind, label_key, rate in splits
            if rate is not None
        ]
