"""
Property-based tests for the calculation pipeline.

Properties checked over generated amounts, rates, and jurisdictions:
- Percentage amounts are deterministic and carry four fractional digits
- Totals reconcile exactly with the itemized components, at any supported size
- Split components sum to the unified component within rounding
- Export lines carry no standard components
- A failing line never changes the result of the other lines in a batch
"""

from datetime import date, datetime, timezone
from decimal import Decimal, localcontext
from uuid import UUID

from hypothesis import given, settings
from hypothesis import strategies as st

from tax_kernel.domain.clock import DeterministicClock
from tax_kernel.domain.rate_table import TaxConfiguration
from tax_kernel.domain.rounding import AMOUNT_QUANTUM, add_amounts, percentage_amount
from tax_kernel.domain.types import BusinessType, ComponentKind, TransactionClassification
from tax_modules.determination import (
    BulkCalculationCoordinator,
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
from tax_modules.determination.models import TaxCalculationItem

TENANT_ID = UUID("00000000-0000-4000-a000-000000000001")

amounts = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("999999999.99"),
    places=2, allow_nan=False, allow_infinity=False,
)
half_rates = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("50"),
    places=2, allow_nan=False, allow_infinity=False,
)
jurisdictions = st.sampled_from(["MH", "KA", "GJ", "LA", "CH", None])
business_types = st.sampled_from(list(BusinessType))


def _service(half_rate: Decimal, cess_rate: Decimal | None = None) -> TaxCalculationService:
    codes = InMemoryClassificationCodeStore()
    codes.add(TENANT_ID, ClassificationCode(
        code="1001", description="Live animals", effective_from=date(2017, 7, 1),
    ))
    profiles = InMemoryBusinessTypeStore()
    configurations = InMemoryTaxConfigurationStore()
    for business_type in BusinessType:
        profiles.add(TENANT_ID, BusinessTypeProfile(business_type, business_type.value))
        configurations.add(TENANT_ID, TaxConfiguration(
            classification_code="1001",
            business_type=business_type,
            total_rate=half_rate * 2,
            central_rate=half_rate,
            state_rate=half_rate,
            integrated_rate=half_rate * 2,
            territory_rate=half_rate,
            cess_rate=cess_rate,
            effective_from=date(2017, 7, 1),
        ))
    config = DeterminationConfig(special_territories=frozenset({"LA", "CH"}))
    return TaxCalculationService(
        ConfigurationResolver(codes, profiles, configurations),
        StaticJurisdictionDirectory(config),
        config,
        DeterministicClock(datetime(2024, 6, 15, tzinfo=timezone.utc)),
    )


class TestRoundingProperties:

    @given(amount=amounts, rate=half_rates)
    def test_deterministic_and_quantized(self, amount, rate):
        first = percentage_amount(amount, rate)
        assert first == percentage_amount(amount, rate)
        assert first.as_tuple().exponent == AMOUNT_QUANTUM.as_tuple().exponent
        assert abs(first - amount * rate / 100) <= AMOUNT_QUANTUM / 2


class TestTotalsProperties:

    @given(
        amount=amounts,
        half_rate=half_rates,
        cess=st.one_of(st.none(), half_rates),
        source=jurisdictions,
        destination=jurisdictions,
        business_type=business_types,
    )
    @settings(max_examples=75, deadline=None)
    def test_totals_reconcile(self, amount, half_rate, cess, source, destination, business_type):
        result = _service(half_rate, cess).calculate(
            "1001", amount, tenant_id=TENANT_ID, business_type=business_type,
            source_jurisdiction=source, destination_jurisdiction=destination,
        )

        assert result.total_tax_amount == sum((c.amount for c in result.components), Decimal("0"))
        assert result.total_amount == result.base_amount + result.total_tax_amount
        assert all(c.amount >= 0 for c in result.components)

    @given(
        amount=st.decimals(
            min_value=Decimal("1"), max_value=Decimal("9" * 29 + ".99"),
            places=2, allow_nan=False, allow_infinity=False,
        ),
        half_rate=half_rates,
        destination=jurisdictions,
    )
    @settings(max_examples=50, deadline=None)
    def test_large_amounts_reconcile(self, amount, half_rate, destination):
        result = _service(half_rate, half_rate).calculate(
            "1001", amount, tenant_id=TENANT_ID,
            source_jurisdiction="MH", destination_jurisdiction=destination,
        )

        assert result.total_tax_amount == add_amounts(*(c.amount for c in result.components))
        with localcontext() as ctx:
            ctx.prec = 80
            assert result.total_amount - result.base_amount == result.total_tax_amount


    @given(amount=amounts, half_rate=half_rates, destination=st.sampled_from(["MH", "KA"]))
    @settings(max_examples=50, deadline=None)
    def test_split_matches_unified(self, amount, half_rate, destination):
        service = _service(half_rate)
        same = service.calculate(
            "1001", amount, tenant_id=TENANT_ID,
            source_jurisdiction=destination, destination_jurisdiction=destination,
        )
        cross = service.calculate(
            "1001", amount, tenant_id=TENANT_ID,
            source_jurisdiction="GJ", destination_jurisdiction=destination,
        )

        assert same.classification is TransactionClassification.SAME_JURISDICTION
        assert cross.classification is TransactionClassification.CROSS_JURISDICTION
        split = same.amount_for(ComponentKind.CENTRAL) + same.amount_for(ComponentKind.STATE)
        # Two halves are each rounded once: they differ from the whole by at most one unit
        assert abs(split - cross.amount_for(ComponentKind.INTEGRATED)) <= AMOUNT_QUANTUM

    @given(
        amount=amounts,
        half_rate=half_rates,
        business_type=st.sampled_from([BusinessType.EXPORT, BusinessType.SEZ]),
        source=jurisdictions,
        destination=jurisdictions,
    )
    @settings(max_examples=50, deadline=None)
    def test_export_has_no_standard_components(
        self, amount, half_rate, business_type, source, destination,
    ):
        result = _service(half_rate).calculate(
            "1001", amount, tenant_id=TENANT_ID, business_type=business_type,
            source_jurisdiction=source, destination_jurisdiction=destination,
        )

        assert result.classification is TransactionClassification.EXPORT
        assert result.components == ()
        assert result.total_amount == result.base_amount


class TestBatchProperties:

    @given(
        lines=st.lists(
            st.tuples(st.sampled_from(["1001", "0000"]), amounts),
            min_size=1, max_size=12,
        ),
        half_rate=half_rates,
    )
    @settings(max_examples=40, deadline=None)
    def test_failures_isolated(self, lines, half_rate):
        service = _service(half_rate)
        items = [TaxCalculationItem(code, amount) for code, amount in lines]

        bulk = BulkCalculationCoordinator(service).calculate_bulk(
            items, tenant_id=TENANT_ID,
            source_jurisdiction="MH", destination_jurisdiction="KA",
        )

        assert len(bulk.items) == len(items)
        for item, result in zip(items, bulk.items):
            if item.classification_code == "0000":
                assert result.error == "CLASSIFICATION_CODE_NOT_FOUND"
                assert result.total_tax_amount == 0
            else:
                single = service.calculate(
                    "1001", item.base_amount, tenant_id=TENANT_ID,
                    source_jurisdiction="MH", destination_jurisdiction="KA",
                )
                assert result == single
        assert bulk.total_tax_amount == sum(r.total_tax_amount for r in bulk.items)
        assert bulk.total_amount == bulk.total_base_amount + bulk.total_tax_amount
