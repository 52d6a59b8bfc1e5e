"""
Domain enums shared by the engines and the determination module.

Enums are ``str`` subclasses so their values serialize cleanly into log
payloads, JSON columns, and API responses.
"""

from enum import Enum


class BusinessType(str, Enum):
    """Transaction-party category used to select a tax configuration."""

    B2B = "B2B"  # Registered business to registered business
    B2C = "B2C"  # Business to consumer
    EXPORT = "EXPORT"  # Export of goods or services
    COMPOSITION = "COMPOSITION"  # Small-business flat-rate scheme
    SEZ = "SEZ"  # Supply to a special economic zone (zero-rated)

    @property
    def is_export(self) -> bool:
        """Zero-rated export supply."""
        return self in (BusinessType.EXPORT, BusinessType.SEZ)

    @property
    def is_composition(self) -> bool:
        return self is BusinessType.COMPOSITION


class TransactionClassification(str, Enum):
    """How a transaction relates to the jurisdictions of its two parties."""

    SAME_JURISDICTION = "SAME_JURISDICTION"
    SPECIAL_TERRITORY = "SPECIAL_TERRITORY"
    CROSS_JURISDICTION = "CROSS_JURISDICTION"
    EXPORT = "EXPORT"

    @property
    def display_name(self) -> str:
        return _CLASSIFICATION_LABELS[self]


_CLASSIFICATION_LABELS = {
    TransactionClassification.SAME_JURISDICTION: "Intra-jurisdiction",
    TransactionClassification.SPECIAL_TERRITORY: "Special territory",
    TransactionClassification.CROSS_JURISDICTION: "Inter-jurisdiction",
    TransactionClassification.EXPORT: "Export",
}


class ComponentKind(str, Enum):
    """Kind of one line in a tax breakdown."""

    CENTRAL = "CENTRAL"  # First split component (e.g. CGST)
    STATE = "STATE"  # Second split component (e.g. SGST)
    INTEGRATED = "INTEGRATED"  # Unified cross-jurisdiction component (e.g. IGST)
    TERRITORY = "TERRITORY"  # Union-territory component (e.g. UTGST)
    CESS = "CESS"  # Surcharge, ad-valorem or fixed per unit


class ConditionKind(str, Enum):
    """Closed set of value kinds allowed in configuration condition maps."""

    NUMERIC = "numeric"
    FLAG = "flag"
    TAG = "tag"


class Comparison(str, Enum):
    """Comparison applied by a numeric exemption criterion."""

    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    EQUALS = "EQUALS"
