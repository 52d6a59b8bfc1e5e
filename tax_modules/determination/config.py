"""
Tax Determination Configuration Schema.

Defines the structure and sensible defaults for tax determination settings.
Actual values are loaded from YAML (see ``tax_config``) at runtime.
"""

from dataclasses import dataclass, field
from typing import Self

from tax_engines.components import DEFAULT_COMPONENT_LABELS
from tax_kernel.domain.types import BusinessType
from tax_kernel.logging_config import get_logger

logger = get_logger("modules.determination.config")


def _codes(values) -> frozenset[str]:
    return frozenset(str(v).strip().upper() for v in values if str(v).strip())


@dataclass
class DeterminationConfig:
    """
    Configuration schema for the tax determination module.

    Override at instantiation with deployment-specific values:

        config = DeterminationConfig(
            special_territories=frozenset({"LA", "LD"}),
            zones={"NORTH": frozenset({"DL", "HR"})},
        )
    """

    default_business_type: BusinessType = BusinessType.B2B

    # Jurisdictions whose local component is the territory tax
    special_territories: frozenset[str] = field(default_factory=frozenset)

    # Zone name -> member jurisdiction codes (used as configuration scope)
    zones: dict[str, frozenset[str]] = field(default_factory=dict)

    # Label key -> display name, e.g. {"STATE": "VAT"}
    component_labels: dict[str, str] = field(default_factory=dict)

    # Bulk
    bulk_max_workers: int = 1

    def __post_init__(self):
        if not isinstance(self.default_business_type, BusinessType):
            try:
                self.default_business_type = BusinessType(
                    str(self.default_business_type).upper()
                )
            except ValueError:
                raise ValueError(
                    f"default_business_type must be one of "
                    f"{[b.value for b in BusinessType]}, got '{self.default_business_type}'"
                ) from None

        self.special_territories = _codes(self.special_territories)

        zones: dict[str, frozenset[str]] = {}
        seen: dict[str, str] = {}
        for zone, members in self.zones.items():
            zone_name = str(zone).strip().upper()
            if not zone_name:
                raise ValueError("zone names cannot be empty")
            codes = _codes(members)
            for code in codes:
                if code in seen:
                    raise ValueError(
                        f"jurisdiction {code} belongs to both {seen[code]} and {zone_name}"
                    )
                seen[code] = zone_name
            zones[zone_name] = codes
        self.zones = zones

        unknown = set(self.component_labels) - set(DEFAULT_COMPONENT_LABELS)
        if unknown:
            raise ValueError(
                f"component_labels has unknown keys {sorted(unknown)}; "
                f"expected a subset of {sorted(DEFAULT_COMPONENT_LABELS)}"
            )
        for key, label in self.component_labels.items():
            if not label or not str(label).strip():
                raise ValueError(f"component label for {key} cannot be empty")

        if isinstance(self.bulk_max_workers, bool) or self.bulk_max_workers < 1:
            raise ValueError("bulk_max_workers must be at least 1")

        logger.info(
            "determination_config_initialized",
            extra={
                "default_business_type": self.default_business_type.value,
                "special_territories_count": len(self.special_territories),
                "zones_count": len(self.zones),
                "component_labels": sorted(self.component_labels),
                "bulk_max_workers": self.bulk_max_workers,
            },
        )

    def zone_for(self, jurisdiction_code: str) -> str | None:
        """Zone containing ``jurisdiction_code``, if any."""
        code = jurisdiction_code.strip().upper()
        for zone, members in self.zones.items():
            if code in members:
                return zone
        return None

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with no special territories, zones, or label overrides."""
        logger.info("determination_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "determination_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        data = dict(data)
        if "special_territories" in data:
            data["special_territories"] = frozenset(data["special_territories"] or ())
        if "zones" in data:
            data["zones"] = {
                zone: frozenset(members or ())
                for zone, members in (data["zones"] or {}).items()
            }
        if "component_labels" in data:
            data["component_labels"] = {
                str(key).upper(): label
                for key, label in (data["component_labels"] or {}).items()
            }
        return cls(**data)
