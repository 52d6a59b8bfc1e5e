"""
Bulk Calculation Coordinator -- many lines, per-item failure isolation.

Each item is calculated independently through ``TaxCalculationService``.  An
engine error on one item (``TaxEngineError``: bad input or a missing rule)
downgrades that item to a zero-tax placeholder annotated with the error; the
batch itself never fails because of one line.  Anything else (a store outage,
a programming error) is not a per-item problem and propagates.

Results keep the order of the input items.  With ``max_workers > 1`` items
are fanned out to a thread pool and reassembled by original index.
"""

from __future__ import annotations

import contextvars
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from tax_kernel.domain.rounding import ZERO, add_amounts
from tax_kernel.domain.types import BusinessType, TransactionClassification
from tax_kernel.exceptions import TaxEngineError
from tax_kernel.logging_config import LogContext, get_logger
from tax_modules.determination.models import (
    BulkTaxCalculationResult,
    TaxCalculationItem,
    TaxCalculationResult,
)
from tax_modules.determination.service import TaxCalculationService, parse_amount

logger = get_logger("modules.determination.bulk")


def _placeholder_base(raw: object) -> Decimal:
    """
    Base amount carried by a failed item's placeholder.

    Any amount that parses to a finite ``Decimal`` is kept as given, even
    when it was rejected as non-positive or out of range; only unparseable
    values (``None``, floats, non-numeric strings) fall back to zero.
    """
    try:
        return parse_amount(raw)
    except TaxEngineError:
        return ZERO



class BulkCalculationCoordinator:
    """Run the single-line service over a list of items."""

    def __init__(self, service: TaxCalculationService, max_workers: int | None = None):
        workers = max_workers if max_workers is not None else service.config.bulk_max_workers
        if workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._service = service
        self._max_workers = workers

    def _placeholder(
        self, item: TaxCalculationItem, error: TaxEngineError,
    ) -> TaxCalculationResult:
        base = _placeholder_base(item.base_amount)
        return TaxCalculationResult(
            base_amount=base,
            total_tax_amount=ZERO,
            total_amount=base,
            classification_code=item.classification_code,
            classification=TransactionClassification.CROSS_JURISDICTION,
            components=(),
            calculation_date=self._service.clock.now(),
            notes=(f"Error: {error}",),
            error=error.code,
        )

    def _calculate_item(
        self,
        index: int,
        item: TaxCalculationItem,
        *,
        tenant_id: UUID,
        business_type: BusinessType | str | None,
        source_jurisdiction: str | None,
        destination_jurisdiction: str | None,
        effective_date: date | None,
    ) -> TaxCalculationResult:
        try:
            return self._service.calculate(
                item.classification_code,
                item.base_amount,
                tenant_id=tenant_id,
                quantity=item.quantity,
                business_type=business_type,
                source_jurisdiction=source_jurisdiction,
                destination_jurisdiction=destination_jurisdiction,
                effective_date=effective_date,
            )
        except TaxEngineError as e:
            logger.warning("bulk_item_failed", extra={
                "item_index": index,
                "classification_code": item.classification_code,
                "error_code": e.code,
                "error": str(e),
            })
            return self._placeholder(item, e)

    def calculate_bulk(
        self,
        items: Sequence[TaxCalculationItem],
        *,
        tenant_id: UUID,
        business_type: BusinessType | str | None = None,
        source_jurisdiction: str | None = None,
        destination_jurisdiction: str | None = None,
        effective_date: date | None = None,
    ) -> BulkTaxCalculationResult:
        """
        Calculate every item and aggregate the totals.

        All items share the business type, jurisdictions, and effective date.
        Returns exactly one result per item, in input order.
        """
        kwargs = dict(
            tenant_id=tenant_id,
            business_type=business_type,
            source_jurisdiction=source_jurisdiction,
            destination_jurisdiction=destination_jurisdiction,
            effective_date=effective_date,
        )

        with LogContext.bind(batch_id=uuid4(), tenant_id=tenant_id):
            t0 = time.monotonic()
            if self._max_workers == 1 or len(items) <= 1:
                results = [
                    self._calculate_item(i, item, **kwargs)
                    for i, item in enumerate(items)
                ]
            else:
                with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                    # Each task runs in a copy of the caller's context so the
                    # batch and tenant log fields reach the workers.
                    futures = [
                        pool.submit(
                            contextvars.copy_context().run,
                            self._calculate_item, i, item, **kwargs,
                        )
                        for i, item in enumerate(items)
                    ]
                    results = [future.result() for future in futures]

            total_base = add_amounts(*(r.base_amount for r in results))
            total_tax = add_amounts(*(r.total_tax_amount for r in results))
            bulk = BulkTaxCalculationResult(
                items=tuple(results),
                total_base_amount=total_base,
                total_tax_amount=total_tax,
                total_amount=add_amounts(*(r.total_amount for r in results)),
                calculation_date=self._service.clock.now(),
            )

            logger.info("bulk_tax_calculation_completed", extra={
                "items_count": len(results),
                "error_count": bulk.error_count,
                "total_base_amount": str(total_base),
                "total_tax_amount": str(total_tax),
                "max_workers": self._max_workers,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            })
            return bulk
