"""
Tests for the in-memory stores and the shared tie-break.

Covers:
- pick_effective: window, activity, scope filtering, and ordering
- Tenant scoping of every in-memory store
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from tax_kernel.domain.rate_table import TaxConfiguration
from tax_kernel.domain.types import BusinessType
from tax_modules.determination.models import BusinessTypeProfile, ClassificationCode
from tax_modules.determination.stores import (
    InMemoryBusinessTypeStore,
    InMemoryClassificationCodeStore,
    InMemoryTaxConfigurationStore,
    pick_effective,
)

TEST_TENANT_ID = UUID("00000000-0000-4000-a000-000000000001")
OTHER_TENANT_ID = UUID("00000000-0000-4000-a000-000000000002")


def _config(effective_from, scope=None, rate="5", **overrides) -> TaxConfiguration:
    return TaxConfiguration(
        classification_code="1001",
        business_type=BusinessType.B2B,
        total_rate=Decimal(rate),
        effective_from=effective_from,
        jurisdiction_scope=scope,
        **overrides,
    )


class TestPickEffective:

    def test_none_when_empty(self):
        assert pick_effective([], date(2024, 1, 1)) is None

    def test_most_recent_effective_from(self):
        old = _config(date(2017, 7, 1), rate="5")
        new = _config(date(2022, 1, 1), rate="12")
        assert pick_effective([old, new], date(2024, 1, 1)) is new
        assert pick_effective([old, new], date(2021, 12, 31)) is old

    def test_window_end_inclusive(self):
        closed = _config(date(2017, 7, 1), effective_to=date(2021, 12, 31))
        assert pick_effective([closed], date(2021, 12, 31)) is closed
        assert pick_effective([closed], date(2022, 1, 1)) is None

    def test_inactive_skipped(self):
        inactive = _config(date(2022, 1, 1), is_active=False)
        active = _config(date(2017, 7, 1))
        assert pick_effective([inactive, active], date(2024, 1, 1)) is active

    def test_exact_scope_beats_recency(self):
        scoped = _config(date(2017, 7, 1), scope="MH")
        unscoped = _config(date(2022, 1, 1))
        assert pick_effective([unscoped, scoped], date(2024, 1, 1), "mh") is scoped

    def test_other_scope_excluded(self):
        scoped = _config(date(2017, 7, 1), scope="KA")
        unscoped = _config(date(2017, 7, 1))
        assert pick_effective([scoped, unscoped], date(2024, 1, 1), "MH") is unscoped
        assert pick_effective([scoped], date(2024, 1, 1), "MH") is None

    def test_no_hint_prefers_unscoped_on_same_date(self):
        scoped = _config(date(2017, 7, 1), scope="KA")
        unscoped = _config(date(2017, 7, 1))
        assert pick_effective([scoped, unscoped], date(2024, 1, 1)) is unscoped

    def test_no_hint_recency_first(self):
        scoped = _config(date(2022, 1, 1), scope="KA")
        unscoped = _config(date(2017, 7, 1))
        assert pick_effective([unscoped, scoped], date(2024, 1, 1)) is scoped

    def test_scope_text_breaks_final_tie(self):
        ka = _config(date(2017, 7, 1), scope="KA")
        mh = _config(date(2017, 7, 1), scope="MH")
        assert pick_effective([mh, ka], date(2024, 1, 1)) is ka
        assert pick_effective([ka, mh], date(2024, 1, 1)) is ka


class TestInMemoryClassificationCodeStore:

    def setup_method(self):
        self.store = InMemoryClassificationCodeStore()
        self.store.add(TEST_TENANT_ID, ClassificationCode(
            code="1001", description="Old", effective_from=date(2017, 7, 1),
            effective_to=date(2021, 12, 31),
        ))
        self.store.add(TEST_TENANT_ID, ClassificationCode(
            code="1001", description="New", effective_from=date(2022, 1, 1),
        ))

    def test_version_for_date(self):
        assert self.store.find_by_code_valid_for_date(
            TEST_TENANT_ID, "1001", date(2020, 1, 1)).description == "Old"
        assert self.store.find_by_code_valid_for_date(
            TEST_TENANT_ID, "1001", date(2023, 1, 1)).description == "New"

    def test_before_first_version(self):
        assert self.store.find_by_code_valid_for_date(TEST_TENANT_ID, "1001", date(2017, 6, 30)) is None

    def test_other_tenant(self):
        assert self.store.find_by_code_valid_for_date(OTHER_TENANT_ID, "1001", date(2023, 1, 1)) is None


class TestInMemoryBusinessTypeStore:

    def test_active_only(self):
        store = InMemoryBusinessTypeStore()
        store.add(TEST_TENANT_ID, BusinessTypeProfile(BusinessType.B2B, "Business"))
        store.add(TEST_TENANT_ID, BusinessTypeProfile(BusinessType.SEZ, "SEZ", is_active=False))

        assert store.find_active_by_type(TEST_TENANT_ID, BusinessType.B2B).display_name == "Business"
        assert store.find_active_by_type(TEST_TENANT_ID, BusinessType.SEZ) is None
        assert store.find_active_by_type(TEST_TENANT_ID, BusinessType.B2C) is None
        assert store.find_active_by_type(OTHER_TENANT_ID, BusinessType.B2B) is None


class TestInMemoryTaxConfigurationStore:

    def test_find_effective(self):
        store = InMemoryTaxConfigurationStore()
        config = _config(date(2017, 7, 1))
        store.add(TEST_TENANT_ID, config)

        assert store.find_effective(
            TEST_TENANT_ID, "1001", BusinessType.B2B, None, date(2024, 1, 1)) is config
        assert store.find_effective(
            TEST_TENANT_ID, "1001", BusinessType.B2C, None, date(2024, 1, 1)) is None
        assert store.find_effective(
            OTHER_TENANT_ID, "1001", BusinessType.B2B, None, date(2024, 1, 1)) is None

    def test_inconsistent_split_logged(self, caplog):
        caplog.set_level(logging.WARNING, logger="tax_kernel")
        store = InMemoryTaxConfigurationStore()
        store.add(TEST_TENANT_ID, _config(
            date(2017, 7, 1), central_rate=Decimal("2.5"), state_rate=Decimal("2"),
        ))
        assert any(
            r.getMessage() == "tax_configuration_split_rates_inconsistent"
            for r in caplog.records
        )
