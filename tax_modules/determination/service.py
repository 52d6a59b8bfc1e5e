"""
Tax Calculation Service -- the public entry point for one line.

Responsibility:
    Thin orchestration layer: validates inputs, resolves the governing
    configuration, classifies the transaction, delegates component
    arithmetic to the pure engines, and assembles the result with its notes.

Architecture:
    tax_modules -- glue layer.
    1. ``ConfigurationResolver`` for the classification code, business type,
       and effective configuration (store reads).
    2. ``TransactionClassifier`` for the jurisdictional treatment (pure).
    3. ``ComponentCalculator`` for the itemized breakdown (pure).
    4. ``evaluate_exemption`` for the informational exemption reason (pure).

Invariants:
    - Amounts are ``Decimal`` throughout -- NEVER ``float``.
    - ``total_tax_amount == sum(component.amount)`` and
      ``total_amount == base_amount + total_tax_amount`` exactly.
    - No default rate is ever substituted: every failure propagates to the
      caller unmodified.
    - Time comes from the injected ``Clock`` only.

Failure modes:
    - ``InvalidAmountError`` / ``InvalidQuantityError`` before any store read.
    - ``ClassificationCodeNotFoundError``, ``BusinessTypeNotFoundError``,
      ``ConfigurationNotFoundError`` from resolution.

Usage:
    service = TaxCalculationService(resolver, jurisdictions, clock=clock)
    result = service.calculate(
        "1001",
        Decimal("1000.00"),
        tenant_id=tenant_id,
        source_jurisdiction="MH",
        destination_jurisdiction="KA",
    )
    result.total_amount  # Decimal("1050.0000")
"""

from __future__ import annotations

import time
from datetime import date
from decimal import Decimal, InvalidOperation
from uuid import UUID

from tax_engines.classifier import TransactionClassifier
from tax_engines.components import ComponentCalculator
from tax_engines.exemptions import evaluate_exemption
from tax_kernel.domain.clock import Clock, SystemClock
from tax_kernel.domain.rounding import (
    MAX_AMOUNT_DIGITS,
    ZERO,
    add_amounts,
    within_amount_range,
)
from tax_kernel.domain.types import BusinessType
from tax_kernel.exceptions import (
    BusinessTypeNotFoundError,
    InvalidAmountError,
    InvalidQuantityError,
)
from tax_kernel.logging_config import LogContext, get_logger
from tax_modules.determination.config import DeterminationConfig
from tax_modules.determination.jurisdictions import JurisdictionDirectory
from tax_modules.determination.models import TaxCalculationResult
from tax_modules.determination.resolver import ConfigurationResolver

logger = get_logger("modules.determination.service")

REVERSE_CHARGE_NOTE = "Reverse charge applicable - Tax to be paid by recipient"
COMPOSITION_NOTE = "Eligible for composition scheme"


def parse_amount(amount: object) -> Decimal:
    """
    Convert a caller-supplied amount to a finite ``Decimal`` without
    checking its sign or range.

    Accepts ``Decimal``, ``int``, and numeric ``str``.  Floats and booleans
    are rejected outright.
    """
    if amount is None:
        raise InvalidAmountError(amount, "is required")
    if isinstance(amount, (bool, float)):
        raise InvalidAmountError(amount, "must be a Decimal, int, or numeric string")
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, int):
        value = Decimal(amount)
    elif isinstance(amount, str):
        try:
            value = Decimal(amount.strip())
        except InvalidOperation:
            raise InvalidAmountError(amount, "is not numeric") from None
    else:
        raise InvalidAmountError(amount, "must be a Decimal, int, or numeric string")
    if not value.is_finite():
        raise InvalidAmountError(amount, "must be finite")
    return value


def coerce_amount(amount: object) -> Decimal:
    """Convert a base amount to a positive ``Decimal`` below ``MAX_AMOUNT``."""
    value = parse_amount(amount)
    if value <= ZERO:
        raise InvalidAmountError(amount)
    if not within_amount_range(value):
        raise InvalidAmountError(
            amount, f"must have at most {MAX_AMOUNT_DIGITS} integer digits",
        )
    return value


def coerce_quantity(quantity: object) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity, "must be an integer")
    if quantity <= 0:
        raise InvalidQuantityError(quantity)
    return quantity


def coerce_business_type(business_type: BusinessType | str) -> BusinessType:
    if isinstance(business_type, BusinessType):
        return business_type
    try:
        return BusinessType(str(business_type).strip().upper())
    except ValueError:
        raise BusinessTypeNotFoundError(str(business_type)) from None


class TaxCalculationService:
    """
    Orchestrates a single-line tax calculation through the engines.

    Contract:
        Callers supply a ``ConfigurationResolver``, a jurisdiction directory,
        and optionally a ``DeterminationConfig`` and ``Clock``.  ``calculate``
        is reentrant; the service holds no per-call state.

    Non-goals:
        - Exemption is informational: the computed components are never
          zeroed here.
        - No caching of resolved configurations.
    """

    def __init__(
        self,
        resolver: ConfigurationResolver,
        jurisdictions: JurisdictionDirectory,
        config: DeterminationConfig | None = None,
        clock: Clock | None = None,
    ):
        self._resolver = resolver
        self._jurisdictions = jurisdictions
        self._config = config or DeterminationConfig.with_defaults()
        self._clock = clock or SystemClock()

        # Stateless engines
        self._classifier = TransactionClassifier(jurisdictions)
        self._calculator = ComponentCalculator(self._config.component_labels)

    @property
    def config(self) -> DeterminationConfig:
        return self._config

    @property
    def clock(self) -> Clock:
        return self._clock

    def scope_hint(
        self,
        source_jurisdiction: str | None,
        destination_jurisdiction: str | None,
    ) -> str | None:
        """Configuration scope for the line: destination first, else source."""
        for code in (destination_jurisdiction, source_jurisdiction):
            if code is not None and code.strip():
                return self._jurisdictions.scope_for(code)
        return None

    def calculate(
        self,
        classification_code: str,
        base_amount: Decimal | int | str,
        *,
        tenant_id: UUID,
        quantity: int = 1,
        business_type: BusinessType | str | None = None,
        source_jurisdiction: str | None = None,
        destination_jurisdiction: str | None = None,
        effective_date: date | None = None,
    ) -> TaxCalculationResult:
        """
        Calculate the itemized tax for one line.

        Args:
            classification_code: Product/service classification code.
            base_amount: Taxable base amount (> 0).
            tenant_id: Owning tenant of the catalog to resolve against.
            quantity: Number of units (> 0); drives fixed per-unit cess.
            business_type: Defaults to the configured default business type.
            source_jurisdiction: Supplier's jurisdiction code, if known.
            destination_jurisdiction: Recipient's jurisdiction code, if known.
            effective_date: Defaults to the clock's current date.

        Returns:
            TaxCalculationResult with components, totals, and notes.
        """
        amount = coerce_amount(base_amount)
        units = coerce_quantity(quantity)
        btype = coerce_business_type(
            business_type if business_type is not None
            else self._config.default_business_type
        )
        on_date = effective_date or self._clock.today()
        scope = self.scope_hint(source_jurisdiction, destination_jurisdiction)

        with LogContext.bind(tenant_id=tenant_id):
            t0 = time.monotonic()
            logger.info("tax_calculation_started", extra={
                "classification_code": classification_code,
                "base_amount": str(amount),
                "quantity": units,
                "business_type": btype.value,
                "source_jurisdiction": source_jurisdiction,
                "destination_jurisdiction": destination_jurisdiction,
                "jurisdiction_scope": scope,
                "effective_date": on_date.isoformat(),
            })

            resolved = self._resolver.resolve(
                tenant_id=tenant_id,
                classification_code=classification_code,
                business_type=btype,
                jurisdiction_scope=scope,
                effective_date=on_date,
            )
            configuration = resolved.configuration

            classification = self._classifier.classify(
                source_jurisdiction, destination_jurisdiction, btype,
            )
            components = self._calculator.compute(
                config=configuration,
                classification=classification,
                base_amount=amount,
                quantity=units,
                business_type=btype,
            )

            total_tax = add_amounts(*(c.amount for c in components))
            exemption_reason = evaluate_exemption(configuration, amount, units)

            notes = [f"Transaction type: {classification.display_name}"]
            if configuration.is_reverse_charge:
                notes.append(REVERSE_CHARGE_NOTE)
            if configuration.is_composition_eligible:
                notes.append(COMPOSITION_NOTE)
            if exemption_reason:
                notes.append(f"Exemption applied: {exemption_reason}")
            if configuration.description:
                notes.append(f"Note: {configuration.description}")

            result = TaxCalculationResult(
                base_amount=amount,
                total_tax_amount=total_tax,
                total_amount=add_amounts(amount, total_tax),
                classification_code=classification_code,
                classification=classification,
                components=tuple(components),
                calculation_date=self._clock.now(),
                is_reverse_charge=configuration.is_reverse_charge,
                exemption_reason=exemption_reason,
                notes=tuple(notes),
            )

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info("tax_calculation_completed", extra={
                "classification_code": classification_code,
                "classification": classification.value,
                "components_count": len(components),
                "total_tax_amount": str(total_tax),
                "total_amount": str(result.total_amount),
                "exemption_reason": exemption_reason,
                "duration_ms": duration_ms,
            })
            return result
