"""
Pure domain layer.

Data objects and domain rules with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (other than SystemClock)

All domain objects are immutable and deterministic.
"""

from tax_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from tax_kernel.domain.rate_table import (
    ConditionValue,
    TaxConfiguration,
    dump_conditions,
    parse_conditions,
)
from tax_kernel.domain.rounding import (
    AMOUNT_QUANTUM,
    percentage_amount,
    percentage_of,
    quantize_amount,
)
from tax_kernel.domain.types import (
    BusinessType,
    Comparison,
    ComponentKind,
    ConditionKind,
    TransactionClassification,
)

__all__ = [
    "AMOUNT_QUANTUM",
    "BusinessType",
    "Clock",
    "Comparison",
    "ComponentKind",
    "ConditionKind",
    "ConditionValue",
    "DeterministicClock",
    "SystemClock",
    "TaxConfiguration",
    "TransactionClassification",
    "dump_conditions",
    "parse_conditions",
    "percentage_amount",
    "percentage_of",
    "quantize_amount",
]
