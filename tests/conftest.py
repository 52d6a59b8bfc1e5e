"""
Pytest fixtures for the tax determination test suite.

Provides:
- Deterministic tenant IDs and clock
- In-memory catalog (classification codes, business types, configurations)
- A wired TaxCalculationService over the in-memory catalog
- SQLite in-memory SQLAlchemy sessions for the SQL stores

Every test runs with a clean logging state and an empty LogContext.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Generator
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from tax_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from tax_kernel.domain.clock import DeterministicClock
from tax_kernel.domain.rate_table import TaxConfiguration
from tax_kernel.domain.types import BusinessType
from tax_kernel.logging_config import LogContext, reset_logging
from tax_modules.determination import (
    BusinessTypeProfile,
    ClassificationCode,
    ConfigurationResolver,
    DeterminationConfig,
    InMemoryBusinessTypeStore,
    InMemoryClassificationCodeStore,
    InMemoryTaxConfigurationStore,
    StaticJurisdictionDirectory,
    TaxCalculationService,
)

TEST_TENANT_ID = UUID("00000000-0000-4000-a000-000000000001")
OTHER_TENANT_ID = UUID("00000000-0000-4000-a000-000000000002")
TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-0000000000f0")

GST_START = date(2017, 7, 1)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def tenant_id() -> UUID:
    return TEST_TENANT_ID


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 6, 15, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def gst_configuration() -> TaxConfiguration:
    """Classification 1001, B2B: 2.5 + 2.5 split, 5.0 unified, 2.5 territory."""
    return TaxConfiguration(
        classification_code="1001",
        business_type=BusinessType.B2B,
        total_rate=Decimal("5.0"),
        central_rate=Decimal("2.5"),
        state_rate=Decimal("2.5"),
        integrated_rate=Decimal("5.0"),
        territory_rate=Decimal("2.5"),
        effective_from=GST_START,
    )


@pytest.fixture
def determination_config() -> DeterminationConfig:
    return DeterminationConfig(
        special_territories=frozenset({"LA", "CH", "LD"}),
        zones={"WEST": frozenset({"GJ", "GOA"})},
    )


@pytest.fixture
def jurisdictions(determination_config) -> StaticJurisdictionDirectory:
    return StaticJurisdictionDirectory(determination_config)


@pytest.fixture
def classification_codes(tenant_id) -> InMemoryClassificationCodeStore:
    store = InMemoryClassificationCodeStore()
    store.add(tenant_id, ClassificationCode(
        code="1001", description="Live animals", effective_from=GST_START,
    ))
    store.add(tenant_id, ClassificationCode(
        code="2202", description="Aerated waters", effective_from=GST_START,
    ))
    store.add(tenant_id, ClassificationCode(
        code="9999", description="Retired code",
        effective_from=GST_START, effective_to=date(2019, 3, 31),
    ))
    return store


@pytest.fixture
def business_types(tenant_id) -> InMemoryBusinessTypeStore:
    store = InMemoryBusinessTypeStore()
    for business_type in BusinessType:
        store.add(tenant_id, BusinessTypeProfile(
            business_type=business_type,
            display_name=business_type.value.title(),
        ))
    return store


@pytest.fixture
def configurations(tenant_id, gst_configuration) -> InMemoryTaxConfigurationStore:
    store = InMemoryTaxConfigurationStore()
    store.add(tenant_id, gst_configuration)
    for business_type in (BusinessType.B2C, BusinessType.EXPORT, BusinessType.SEZ):
        store.add(tenant_id, TaxConfiguration(
            classification_code="1001",
            business_type=business_type,
            total_rate=Decimal("5.0"),
            central_rate=Decimal("2.5"),
            state_rate=Decimal("2.5"),
            integrated_rate=Decimal("5.0"),
            effective_from=GST_START,
        ))
    store.add(tenant_id, TaxConfiguration(
        classification_code="1001",
        business_type=BusinessType.COMPOSITION,
        total_rate=Decimal("5.0"),
        central_rate=Decimal("2.5"),
        state_rate=Decimal("2.5"),
        is_composition_eligible=True,
        composition_rate=Decimal("1.0"),
        effective_from=GST_START,
    ))
    store.add(tenant_id, TaxConfiguration(
        classification_code="2202",
        business_type=BusinessType.B2B,
        total_rate=Decimal("28"),
        central_rate=Decimal("14"),
        state_rate=Decimal("14"),
        integrated_rate=Decimal("28"),
        cess_rate=Decimal("12"),
        effective_from=GST_START,
        description="Aerated waters attract compensation cess",
    ))
    return store


@pytest.fixture
def resolver(classification_codes, business_types, configurations) -> ConfigurationResolver:
    return ConfigurationResolver(classification_codes, business_types, configurations)


@pytest.fixture
def service(resolver, jurisdictions, determination_config, clock) -> TaxCalculationService:
    return TaxCalculationService(resolver, jurisdictions, determination_config, clock)


# ---------------------------------------------------------------------------
# SQL fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sql_session() -> Generator[Session, None, None]:
    """SQLite in-memory database with all determination tables."""
    init_engine_from_url("sqlite://")
    create_tables()
    # Engine initialization configures logging; tests start from a clean state.
    reset_logging()
    session = get_session()
    try:
        yield session
    finally:
        session.close()
        drop_tables()
        reset_engine()
