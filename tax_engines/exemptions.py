"""
Exemption Evaluator -- informational exemption predicates.

Checks the resolved configuration's threshold limits and exemption criteria
against the line's base amount and quantity.  The first matching predicate
yields a human-readable reason.  Exemption is informational only: the
computed components are never zeroed here; callers decide how to apply it.

Predicates, in order:
    EXEMPTION_THRESHOLD  (threshold limit)  base_amount <= limit
    QUANTITY_THRESHOLD   (threshold limit)  quantity <= limit
    SMALL_BUSINESS       (criterion)        evaluated against base_amount
    ESSENTIAL_GOODS      (criterion)        flag
"""

from __future__ import annotations

from decimal import Decimal

from tax_kernel.domain.rate_table import TaxConfiguration

EXEMPTION_THRESHOLD = "EXEMPTION_THRESHOLD"
QUANTITY_THRESHOLD = "QUANTITY_THRESHOLD"
SMALL_BUSINESS = "SMALL_BUSINESS"
ESSENTIAL_GOODS = "ESSENTIAL_GOODS"


def evaluate_exemption(
    config: TaxConfiguration,
    base_amount: Decimal,
    quantity: int,
) -> str | None:
    """Return the reason of the first matching exemption predicate, or None."""
    amount_limit = config.threshold_limit(EXEMPTION_THRESHOLD)
    if amount_limit is not None and base_amount <= amount_limit:
        return "Amount below exemption threshold"

    quantity_limit = config.threshold_limit(QUANTITY_THRESHOLD)
    if quantity_limit is not None and Decimal(quantity) <= quantity_limit:
        return "Quantity below exemption threshold"

    if config.is_exemption_applicable(SMALL_BUSINESS, base_amount):
        return "Small business exemption"

    if config.is_exemption_applicable(ESSENTIAL_GOODS):
        return "Essential goods exemption"

    return None
