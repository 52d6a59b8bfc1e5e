"""
Tax Determination Stores -- read access to the configuration catalog.

Responsibility:
    Define the store contracts the resolver depends on and provide two
    implementations of each: SQL-backed selectors over the ORM models and
    in-memory stores for tests and file-loaded catalogs.

Architecture position:
    Modules layer.  The SQL stores are kernel selectors: they take a
    caller-owned ``Session`` and never add, flush, or commit.

Invariants enforced:
    - Every lookup is tenant-scoped by an explicit ``tenant_id`` argument.
    - Effective windows are inclusive on both ends.
    - When several configurations qualify, both implementations pick the same
      winner through ``pick_effective``.

Failure modes:
    - Returns None when nothing matches (never raises on absence of data).
      Deciding what a miss means is the resolver's job.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from typing import Protocol
from uuid import UUID

from sqlalchemy import or_, select

from tax_kernel.domain.rate_table import TaxConfiguration
from tax_kernel.domain.types import BusinessType
from tax_kernel.logging_config import get_logger
from tax_kernel.selectors.base import BaseSelector
from tax_modules.determination.models import BusinessTypeProfile, ClassificationCode
from tax_modules.determination.orm import (
    BusinessTypeModel,
    ClassificationCodeModel,
    TaxConfigurationModel,
)

logger = get_logger("modules.determination.stores")


class ClassificationCodeStore(Protocol):
    def find_by_code_valid_for_date(
        self, tenant_id: UUID, code: str, on_date: date,
    ) -> ClassificationCode | None: ...


class BusinessTypeStore(Protocol):
    def find_active_by_type(
        self, tenant_id: UUID, business_type: BusinessType,
    ) -> BusinessTypeProfile | None: ...


class TaxConfigurationStore(Protocol):
    def find_effective(
        self,
        tenant_id: UUID,
        classification_code: str,
        business_type: BusinessType,
        jurisdiction_scope: str | None,
        on_date: date,
    ) -> TaxConfiguration | None: ...


def _normalize_scope(scope: str | None) -> str | None:
    if scope is None:
        return None
    return scope.strip().upper() or None


def pick_effective(
    candidates: Iterable[TaxConfiguration],
    on_date: date,
    jurisdiction_scope: str | None = None,
) -> TaxConfiguration | None:
    """
    Choose the configuration that governs ``on_date``.

    Candidates must be active, effective on the date, and unscoped or scoped
    to ``jurisdiction_scope``.  Among those: an exact scope match wins, then
    the most recent ``effective_from``, then unscoped before scoped, then the
    scope text.
    """
    scope = _normalize_scope(jurisdiction_scope)
    eligible = [
        c for c in candidates
        if c.is_active and c.is_effective(on_date) and c.applies_to_scope(scope)
    ]
    if not eligible:
        return None

    def rank(config: TaxConfiguration):
        exact = scope is not None and config.jurisdiction_scope == scope
        return (
            0 if exact else 1,
            -config.effective_from.toordinal(),
            0 if config.jurisdiction_scope is None else 1,
            config.jurisdiction_scope or "",
        )

    return min(eligible, key=rank)


def _latest_valid(
    codes: Iterable[ClassificationCode], on_date: date,
) -> ClassificationCode | None:
    valid = [c for c in codes if c.is_valid_for(on_date)]
    if not valid:
        return None
    return max(valid, key=lambda c: c.effective_from or date.min)


# ---------------------------------------------------------------------------
# SQL stores
# ---------------------------------------------------------------------------

class SqlClassificationCodeStore(BaseSelector):
    """Classification codes from ``tax_classification_codes``."""

    def find_by_code_valid_for_date(
        self, tenant_id: UUID, code: str, on_date: date,
    ) -> ClassificationCode | None:
        rows = self.session.execute(
            select(ClassificationCodeModel)
            .where(ClassificationCodeModel.tenant_id == tenant_id)
            .where(ClassificationCodeModel.code == code)
            .where(ClassificationCodeModel.is_active.is_(True))
            .where(or_(
                ClassificationCodeModel.effective_from.is_(None),
                ClassificationCodeModel.effective_from <= on_date,
            ))
            .where(or_(
                ClassificationCodeModel.effective_to.is_(None),
                ClassificationCodeModel.effective_to >= on_date,
            ))
        ).scalars().all()
        return _latest_valid((row.to_dto() for row in rows), on_date)


class SqlBusinessTypeStore(BaseSelector):
    """Business-type profiles from ``tax_business_types``."""

    def find_active_by_type(
        self, tenant_id: UUID, business_type: BusinessType,
    ) -> BusinessTypeProfile | None:
        row = self.session.execute(
            select(BusinessTypeModel)
            .where(BusinessTypeModel.tenant_id == tenant_id)
            .where(BusinessTypeModel.business_type == business_type.value)
            .where(BusinessTypeModel.is_active.is_(True))
        ).scalars().first()
        return row.to_dto() if row is not None else None


class SqlTaxConfigurationStore(BaseSelector):
    """
    Tax configurations from ``tax_configurations``.

    The query narrows by tenant, code, business type, activity, window, and
    scope; ``pick_effective`` breaks any remaining tie.
    """

    def find_effective(
        self,
        tenant_id: UUID,
        classification_code: str,
        business_type: BusinessType,
        jurisdiction_scope: str | None,
        on_date: date,
    ) -> TaxConfiguration | None:
        scope = _normalize_scope(jurisdiction_scope)
        query = (
            select(TaxConfigurationModel)
            .where(TaxConfigurationModel.tenant_id == tenant_id)
            .where(TaxConfigurationModel.classification_code == classification_code)
            .where(TaxConfigurationModel.business_type == business_type.value)
            .where(TaxConfigurationModel.is_active.is_(True))
            .where(TaxConfigurationModel.effective_from <= on_date)
            .where(or_(
                TaxConfigurationModel.effective_to.is_(None),
                TaxConfigurationModel.effective_to >= on_date,
            ))
            .order_by(TaxConfigurationModel.effective_from.desc())
        )
        if scope is not None:
            query = query.where(or_(
                TaxConfigurationModel.jurisdiction_scope.is_(None),
                TaxConfigurationModel.jurisdiction_scope == scope,
            ))
        rows = self.session.execute(query).scalars().all()
        return pick_effective((row.to_dto() for row in rows), on_date, scope)


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------

class InMemoryClassificationCodeStore:
    """Classification codes held in process, keyed by tenant and code."""

    def __init__(self):
        self._codes: dict[tuple[UUID, str], list[ClassificationCode]] = defaultdict(list)

    def add(self, tenant_id: UUID, code: ClassificationCode) -> None:
        self._codes[(tenant_id, code.code)].append(code)

    def find_by_code_valid_for_date(
        self, tenant_id: UUID, code: str, on_date: date,
    ) -> ClassificationCode | None:
        return _latest_valid(self._codes.get((tenant_id, code), ()), on_date)


class InMemoryBusinessTypeStore:
    """Business-type profiles held in process."""

    def __init__(self):
        self._profiles: dict[tuple[UUID, BusinessType], BusinessTypeProfile] = {}

    def add(self, tenant_id: UUID, profile: BusinessTypeProfile) -> None:
        self._profiles[(tenant_id, profile.business_type)] = profile

    def find_active_by_type(
        self, tenant_id: UUID, business_type: BusinessType,
    ) -> BusinessTypeProfile | None:
        profile = self._profiles.get((tenant_id, business_type))
        if profile is None or not profile.is_active:
            return None
        return profile


class InMemoryTaxConfigurationStore:
    """Tax configurations held in process, keyed by tenant, code, and business type."""

    def __init__(self):
        self._configs: dict[
            tuple[UUID, str, BusinessType], list[TaxConfiguration]
        ] = defaultdict(list)

    def add(self, tenant_id: UUID, config: TaxConfiguration) -> None:
        if not config.split_rates_consistent():
            logger.warning(
                "tax_configuration_split_rates_inconsistent",
                extra={
                    "classification_code": config.classification_code,
                    "business_type": config.business_type.value,
                    "total_rate": str(config.total_rate),
                },
            )
        key = (tenant_id, config.classification_code, config.business_type)
        self._configs[key].append(config)

    def find_effective(
        self,
        tenant_id: UUID,
        classification_code: str,
        business_type: BusinessType,
        jurisdiction_scope: str | None,
        on_date: date,
    ) -> TaxConfiguration | None:
        candidates = self._configs.get((tenant_id, classification_code, business_type), ())
        return pick_effective(candidates, on_date, jurisdiction_scope)
