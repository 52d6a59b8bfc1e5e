"""
Transaction Classifier -- which jurisdictional treatment applies.

Pure function over (source jurisdiction, destination jurisdiction, business
type).  No side effects, no failure modes: it always returns a
``TransactionClassification``.

Rules, first match wins:
    1. Export business type                    -> EXPORT
    2. Either jurisdiction unknown             -> CROSS_JURISDICTION
       (conservative: full unified-rate treatment)
    3. Same jurisdiction, special territory    -> SPECIAL_TERRITORY
    4. Same jurisdiction                       -> SAME_JURISDICTION
    5. Otherwise                               -> CROSS_JURISDICTION

Jurisdiction codes compare case-insensitively; blank codes count as unknown.
"""

from __future__ import annotations

from typing import Protocol

from tax_kernel.domain.types import BusinessType, TransactionClassification


class TerritoryLookup(Protocol):
    """Jurisdiction metadata needed by the classifier."""

    def is_special_territory(self, jurisdiction_code: str) -> bool: ...


def _normalize(code: str | None) -> str | None:
    if code is None:
        return None
    code = code.strip().upper()
    return code or None


class TransactionClassifier:
    """Classify a transaction from the jurisdictions of its two parties."""

    def __init__(self, territories: TerritoryLookup):
        self._territories = territories

    def classify(
        self,
        source_jurisdiction: str | None,
        destination_jurisdiction: str | None,
        business_type: BusinessType,
    ) -> TransactionClassification:
        if business_type.is_export:
            return TransactionClassification.EXPORT

        source = _normalize(source_jurisdiction)
        destination = _normalize(destination_jurisdiction)
        if source is None or destination is None:
            return TransactionClassification.CROSS_JURISDICTION

        if source == destination:
            if self._territories.is_special_territory(destination):
                return TransactionClassification.SPECIAL_TERRITORY
            return TransactionClassification.SAME_JURISDICTION

        return TransactionClassification.CROSS_JURISDICTION
