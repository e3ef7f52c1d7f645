"""
Hypothesis property tests for the cost engines.

Properties checked:
- Allocation conservation (by hours, equal) when anyone participates
- Inactive members always receive zero
- Percentage allocation equals amount x share / 100 per member
- Monthly depreciation x 12 recovers the annual figure
- Book value stays within [salvage, purchase price]
- Forecast cumulative totals are non-decreasing and end at 12 x monthly
- Unit scenario multipliers reproduce the base case
- Health score always within [0, 100] and equal to the factor sum
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from equipcost_engines.allocation import AllocationEngine
from equipcost_engines.depreciation import annual_depreciation, book_value, monthly_depreciation
from equipcost_engines.forecast import ForecastEngine
from equipcost_engines.health import HealthScorer
from equipcost_engines.scenario import ScenarioEngine
from equipcost_kernel.domain.dtos import (
    AllocationPolicy,
    Asset,
    Member,
    MemberStatus,
    OperatingParameters,
    Scenario,
)

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("999999999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
hours = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("744"),
    places=1,
    allow_nan=False,
    allow_infinity=False,
)
shares = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("100"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


@st.composite
def member_lists(draw):
    count = draw(st.integers(min_value=0, max_value=8))
    return [
        Member(
            member_id=f"m-{i}",
            operating_hours_per_month=draw(hours),
            ownership_share_percent=draw(shares),
            status=draw(st.sampled_from([MemberStatus.ACTIVE, MemberStatus.INACTIVE])),
        )
        for i in range(count)
    ]


@st.composite
def parameter_sets(draw):
    return OperatingParameters(
        operating_hours_per_month=draw(hours),
        fuel_cost_per_hour=draw(amounts),
        maintenance_cost_per_hour=draw(amounts),
        insurance_monthly=draw(amounts),
        staff_salaries_monthly=draw(amounts),
        facility_rent_monthly=draw(amounts),
    )


class TestAllocationProperties:

    @given(
        total=amounts,
        members=member_lists(),
        policy=st.sampled_from([AllocationPolicy.BY_HOURS, AllocationPolicy.EQUAL]),
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])
    def test_conservation(self, total, members, policy):
        result = AllocationEngine().allocate(
            total_cost=total, policy=policy, members=members, places=2
        )

        participants = [m for m in members if m.is_active]
        if policy is AllocationPolicy.BY_HOURS:
            participates = sum(m.operating_hours_per_month for m in participants) > 0
        else:
            participates = bool(participants)

        if participates:
            assert result.total_allocated == total
            assert result.unallocated == 0
        else:
            assert result.total_allocated == 0
        assert result.total_allocated + result.unallocated == total

    @given(total=amounts, members=member_lists(), policy=st.sampled_from(list(AllocationPolicy)))
    @settings(max_examples=200)
    def test_inactive_members_get_zero_and_keep_position(self, total, members, policy):
        result = AllocationEngine().allocate(total_cost=total, policy=policy, members=members)

        assert [line.member_id for line in result.lines] == [m.member_id for m in members]
        for member, line in zip(members, result.lines):
            if not member.is_active:
                assert line.allocated == 0

    @given(total=amounts, members=member_lists())
    @settings(max_examples=200)
    def test_percentage_is_share_of_total(self, total, members):
        result = AllocationEngine().allocate(
            total_cost=total, policy=AllocationPolicy.BY_PERCENTAGE, members=members
        )

        for member in members:
            if member.is_active:
                expected = total * member.ownership_share_percent / 100
                assert result.allocation_for(member.member_id) == expected


class TestDepreciationProperties:

    @given(annual=amounts)
    def test_monthly_times_twelve(self, annual):
        assert abs(monthly_depreciation(annual) * 12 - annual) <= Decimal("1E-15")

    @given(
        price=amounts,
        salvage_rate=st.decimals(
            min_value=Decimal("0"), max_value=Decimal("1"), places=2, allow_nan=False
        ),
        life=st.integers(min_value=1, max_value=40),
    )
    def test_annual_formula(self, price, salvage_rate, life):
        salvage = price * salvage_rate
        assert abs(annual_depreciation(price, salvage, life) * life - (price - salvage)) <= Decimal("1E-15")

    @given(
        price=amounts,
        life=st.integers(min_value=-2, max_value=40),
        acquired_offset=st.integers(min_value=0, max_value=20000),
        valued_offset=st.integers(min_value=0, max_value=20000),
        explicit_salvage=st.booleans(),
    )
    def test_book_value_bounds(self, price, life, acquired_offset, valued_offset, explicit_salvage):
        salvage = price / 4 if explicit_salvage else None
        asset = Asset(
            asset_id="a",
            name="A",
            purchase_price=price,
            service_life_years=life,
            acquisition_date=date(1990, 1, 1) + timedelta(days=acquired_offset),
            salvage_value=salvage,
        )
        bv = book_value(asset, date(1990, 1, 1) + timedelta(days=valued_offset))

        effective_salvage = salvage if salvage is not None else price * Decimal("0.10")
        assert effective_salvage <= bv.book_value <= price
        assert bv.years_remaining >= 0


class TestForecastProperties:

    @given(
        params=parameter_sets(),
        depreciation=amounts,
        start_month=st.integers(min_value=1, max_value=12),
        start_year=st.integers(min_value=1990, max_value=2100),
    )
    @settings(max_examples=100)
    def test_cumulative_totals(self, params, depreciation, start_month, start_year):
        forecast = ForecastEngine().project(
            params=params,
            monthly_depreciation=depreciation,
            start_month=start_month,
            start_year=start_year,
        )

        cumulative = [m.cumulative_cost for m in forecast]
        assert all(a <= b for a, b in zip(cumulative, cumulative[1:]))
        assert forecast.total_cost == forecast.months[0].projected_cost * 12
        years = {m.year for m in forecast}
        assert years == ({start_year} if start_month == 1 else {start_year, start_year + 1})


class TestScenarioProperties:

    @given(params=parameter_sets(), depreciation=amounts)
    @settings(max_examples=100)
    def test_unit_multipliers_reproduce_base(self, params, depreciation):
        comparison = ScenarioEngine().compare(
            params=params,
            monthly_depreciation=depreciation,
            scenarios=[Scenario("Same", operating_hours_multiplier="1", cost_multiplier="1")],
        )

        (same,) = comparison.results
        assert same.total_monthly_cost == comparison.base.total_monthly_cost
        assert same.difference == 0
        assert same.difference_percent == 0


class TestHealthProperties:

    @given(
        operating_hours=hours,
        cost_per_hour=amounts,
        fixed=amounts,
        variable=amounts,
        depreciation=amounts,
        asset_count=st.integers(min_value=0, max_value=10),
        member_count=st.integers(min_value=0, max_value=10),
    )
    @settings(max_examples=200)
    def test_score_bounded_and_summed(
        self, operating_hours, cost_per_hour, fixed, variable, depreciation, asset_count, member_count
    ):
        total = fixed + variable + depreciation
        result = HealthScorer().score(
            operating_hours=operating_hours,
            cost_per_hour=cost_per_hour,
            fixed_costs=fixed,
            variable_costs=variable,
            total_cost=total,
            active_asset_count=asset_count,
            active_member_count=member_count,
        )

        assert 0 <= result.score <= 100
        assert result.score == sum(f.score for f in result.factors)
        for factor in result.factors:
            assert 0 <= factor.score <= factor.weight
        if asset_count == 0:
            assert result.factor("Equipment Utilization").score == 0
