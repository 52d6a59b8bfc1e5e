"""
Tax Determination ORM Persistence Models (``tax_modules.determination.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the catalog the determination engine
    reads: classification codes, business-type profiles, tax configurations
    (the rate table), and jurisdictions.  Each ORM class mirrors a DTO and
    provides ``to_dto()`` / ``from_dto()`` round-trip conversion.

Architecture position:
    **Modules layer** -- persistence companions to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base) which provides:
    id (UUID PK, auto-generated), created_at, updated_at,
    created_by_id (NOT NULL UUID), updated_by_id (nullable UUID).

Invariants enforced:
    - All rates and amounts use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - Classification codes, business types, and configurations are
      tenant-owned (``tenant_id``); jurisdictions are global reference data.
    - Condition maps are stored as JSON in their ``ConditionValue.to_raw()``
      form and parsed back with ``parse_conditions``.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tax_kernel.db.base import TenantOwnedMixin, TrackedBase
from tax_kernel.domain.rate_table import TaxConfiguration, dump_conditions, parse_conditions
from tax_kernel.domain.types import BusinessType


# ---------------------------------------------------------------------------
# ClassificationCodeModel
# ---------------------------------------------------------------------------

class ClassificationCodeModel(TenantOwnedMixin, TrackedBase):
    """
    ORM model for ``ClassificationCode`` -- one node of the product/service
    classification hierarchy.

    Contract:
        A code is unique per tenant and validity start.  ``parent_code`` refers
        to another code of the same tenant by value, not by FK, so historical
        versions of a parent can coexist.
    """

    __tablename__ = "tax_classification_codes"

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    parent_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_of_measure: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_exemption_eligible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    effective_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "code", "effective_from",
            name="uq_tax_classification_code_tenant_code_from",
        ),
        Index("idx_tax_classification_code_lookup", "tenant_id", "code", "is_active"),
    )

    def to_dto(self):
        from tax_modules.determination.models import ClassificationCode
        return ClassificationCode(
            id=self.id,
            code=self.code,
            description=self.description,
            parent_code=self.parent_code,
            level=self.level,
            unit_of_measure=self.unit_of_measure,
            is_exemption_eligible=self.is_exemption_eligible,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, tenant_id: UUID, created_by_id: UUID) -> "ClassificationCodeModel":
        return cls(
            id=dto.id,
            tenant_id=tenant_id,
            code=dto.code,
            description=dto.description,
            parent_code=dto.parent_code,
            level=dto.level,
            unit_of_measure=dto.unit_of_measure,
            is_exemption_eligible=dto.is_exemption_eligible,
            effective_from=dto.effective_from,
            effective_to=dto.effective_to,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ClassificationCodeModel {self.code} (level {self.level})>"


# ---------------------------------------------------------------------------
# BusinessTypeModel
# ---------------------------------------------------------------------------

class BusinessTypeModel(TenantOwnedMixin, TrackedBase):
    """ORM model for ``BusinessTypeProfile``."""

    __tablename__ = "tax_business_types"

    business_type: Mapped[str] = mapped_column(String(50), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "business_type", name="uq_tax_business_type_tenant"),
    )

    def to_dto(self):
        from tax_modules.determination.models import BusinessTypeProfile
        return BusinessTypeProfile(
            id=self.id,
            business_type=BusinessType(self.business_type),
            display_name=self.display_name,
            description=self.description,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(cls, dto, tenant_id: UUID, created_by_id: UUID) -> "BusinessTypeModel":
        return cls(
            id=dto.id,
            tenant_id=tenant_id,
            business_type=dto.business_type.value,
            display_name=dto.display_name,
            description=dto.description,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<BusinessTypeModel {self.business_type}>"


# ---------------------------------------------------------------------------
# TaxConfigurationModel
# ---------------------------------------------------------------------------

class TaxConfigurationModel(TenantOwnedMixin, TrackedBase):
    """
    ORM model for ``TaxConfiguration`` -- the versioned rate table.

    Contract:
        Rows are keyed by (tenant, classification code, business type,
        jurisdiction scope, effective_from).  ``effective_to`` is nullable
        (open-ended).  A NULL ``jurisdiction_scope`` applies everywhere.
    """

    __tablename__ = "tax_configurations"

    classification_code: Mapped[str] = mapped_column(String(50), nullable=False)
    business_type: Mapped[str] = mapped_column(String(50), nullable=False)
    jurisdiction_scope: Mapped[str | None] = mapped_column(String(50), nullable=True)

    total_rate: Mapped[Decimal] = mapped_column(nullable=False)
    central_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    state_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    integrated_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    territory_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    cess_rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    cess_amount_per_unit: Mapped[Decimal | None] = mapped_column(nullable=True)

    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    is_reverse_charge: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_composition_eligible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    composition_rate: Mapped[Decimal | None] = mapped_column(nullable=True)

    special_conditions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    exemption_criteria: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    threshold_limits: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "classification_code", "business_type",
            "jurisdiction_scope", "effective_from",
            name="uq_tax_configuration_version",
        ),
        Index(
            "idx_tax_configuration_lookup",
            "tenant_id", "classification_code", "business_type", "is_active",
        ),
    )

    def to_dto(self) -> TaxConfiguration:
        return TaxConfiguration(
            id=self.id,
            classification_code=self.classification_code,
            business_type=BusinessType(self.business_type),
            jurisdiction_scope=self.jurisdiction_scope,
            total_rate=self.total_rate,
            central_rate=self.central_rate,
            state_rate=self.state_rate,
            integrated_rate=self.integrated_rate,
            territory_rate=self.territory_rate,
            cess_rate=self.cess_rate,
            cess_amount_per_unit=self.cess_amount_per_unit,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
            is_reverse_charge=self.is_reverse_charge,
            is_composition_eligible=self.is_composition_eligible,
            composition_rate=self.composition_rate,
            special_conditions=parse_conditions(self.special_conditions),
            exemption_criteria=parse_conditions(self.exemption_criteria),
            threshold_limits=parse_conditions(self.threshold_limits),
            description=self.description,
            notification_reference=self.notification_reference,
            is_active=self.is_active,
        )

    @classmethod
    def from_dto(
        cls, dto: TaxConfiguration, tenant_id: UUID, created_by_id: UUID,
    ) -> "TaxConfigurationModel":
        return cls(
            id=dto.id,
            tenant_id=tenant_id,
            classification_code=dto.classification_code,
            business_type=dto.business_type.value,
            jurisdiction_scope=dto.jurisdiction_scope,
            total_rate=dto.total_rate,
            central_rate=dto.central_rate,
            state_rate=dto.state_rate,
            integrated_rate=dto.integrated_rate,
            territory_rate=dto.territory_rate,
            cess_rate=dto.cess_rate,
            cess_amount_per_unit=dto.cess_amount_per_unit,
            effective_from=dto.effective_from,
            effective_to=dto.effective_to,
            is_reverse_charge=dto.is_reverse_charge,
            is_composition_eligible=dto.is_composition_eligible,
            composition_rate=dto.composition_rate,
            special_conditions=dump_conditions(dto.special_conditions),
            exemption_criteria=dump_conditions(dto.exemption_criteria),
            threshold_limits=dump_conditions(dto.threshold_limits),
            description=dto.description,
            notification_reference=dto.notification_reference,
            is_active=dto.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        scope = self.jurisdiction_scope or "*"
        return (
            f"<TaxConfigurationModel {self.classification_code}/{self.business_type}"
            f"@{scope} from {self.effective_from}>"
        )


# ---------------------------------------------------------------------------
# JurisdictionModel
# ---------------------------------------------------------------------------

class JurisdictionModel(TrackedBase):
    """
    ORM model for a jurisdiction (state or territory) -- global reference data.

    Guarantees:
        - ``code`` is unique (uq_tax_jurisdiction_code).
        - ``zone`` names the configuration scope the jurisdiction belongs to.
    """

    __tablename__ = "tax_jurisdictions"

    code: Mapped[str] = mapped_column(String(10), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_special_territory: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    zone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("code", name="uq_tax_jurisdiction_code"),
    )

    def __repr__(self) -> str:
        return f"<JurisdictionModel {self.code}: {self.name}>"
