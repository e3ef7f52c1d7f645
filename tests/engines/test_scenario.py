"""
Tests for scenario comparison.

Covers:
- Unit multipliers reproduce the base case
- Hours and cost multipliers applied independently
- Depreciation never scaled
- Signed differences and zero-base percentage
"""

from decimal import Decimal

from equipcost_engines.scenario import BASE_CASE_NAME, ScenarioEngine
from equipcost_kernel.domain.dtos import OperatingParameters, Scenario


class TestScenarioEngine:

    def setup_method(self):
        self.engine = ScenarioEngine()

    def test_base_case(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[],
        )

        base = comparison.base
        assert base.scenario_name == BASE_CASE_NAME
        assert base.total_monthly_cost == Decimal("212000")
        assert base.cost_per_hour == Decimal("1325")
        assert base.annual_cost == Decimal("2544000")
        assert base.difference == Decimal("0")
        assert comparison.results == ()

    def test_unit_multipliers_reproduce_base(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[
                Scenario("Unchanged"),
                Scenario("Explicit ones", operating_hours_multiplier="1", cost_multiplier="1"),
            ],
        )

        for result in comparison.results:
            assert result.total_monthly_cost == comparison.base.total_monthly_cost
            assert result.cost_per_hour == comparison.base.cost_per_hour
            assert result.break_even_hours == comparison.base.break_even_hours
            assert result.difference == Decimal("0")
            assert result.difference_percent == Decimal("0")

    def test_hours_multiplier(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[Scenario("Busy season", operating_hours_multiplier="1.5")],
        )

        busy = comparison.result_for("Busy season")
        # 62000 fixed + 750 x 240 + 30000 depreciation
        assert busy.operating_hours == Decimal("240")
        assert busy.total_monthly_cost == Decimal("272000")
        assert busy.difference == Decimal("60000")
        assert busy.is_more_expensive
        # Break-even ignores hours
        assert busy.break_even_hours == comparison.base.break_even_hours

    def test_cost_multiplier_scales_fixed_and_rate_not_depreciation(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[Scenario("Inflation", cost_multiplier="1.1")],
        )

        inflation = comparison.result_for("Inflation")
        assert inflation.fixed_costs == Decimal("68200")
        assert inflation.variable_costs == Decimal("132000")
        assert inflation.depreciation == Decimal("30000")
        assert inflation.total_monthly_cost == Decimal("230200")
        assert inflation.difference == Decimal("18200")
        # 18200 / 212000 x 100
        assert inflation.difference_percent.quantize(Decimal("0.0001")) == Decimal("8.5849")

    def test_cheaper_scenario_has_negative_difference(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[Scenario("Quiet", operating_hours_multiplier="0.5")],
        )

        quiet = comparison.result_for("Quiet")
        assert quiet.difference == Decimal("-60000")
        assert not quiet.is_more_expensive

    def test_zero_multiplier_is_honoured(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[Scenario("Idle", operating_hours_multiplier="0")],
        )

        idle = comparison.result_for("Idle")
        assert idle.operating_hours == Decimal("0")
        assert idle.cost_per_hour == Decimal("0")
        assert idle.total_monthly_cost == Decimal("92000")

    def test_zero_base_total_gives_zero_percent(self):
        comparison = self.engine.compare(
            params=OperatingParameters(),
            monthly_depreciation="0",
            scenarios=[Scenario("Anything", cost_multiplier="2")],
        )

        result = comparison.results[0]
        assert result.difference == Decimal("0")
        assert result.difference_percent == Decimal("0")

    def test_scenarios_do_not_compound(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[
                Scenario("Double", operating_hours_multiplier="2"),
                Scenario("Double again", operating_hours_multiplier="2"),
            ],
        )

        first, second = comparison.results
        assert first.total_monthly_cost == second.total_monthly_cost

    def test_results_in_input_order(self, current_params):
        names = ["C", "A", "B"]
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation="0",
            scenarios=[Scenario(n) for n in names],
        )

        assert [r.scenario_name for r in comparison.results] == names

    def test_to_dict(self, current_params):
        comparison = self.engine.compare(
            params=current_params,
            monthly_depreciation=Decimal("30000"),
            scenarios=[Scenario("Busy season", operating_hours_multiplier="1.5")],
        )

        data = comparison.results[0].to_dict()
        assert data["scenario_name"] == "Busy season"
        assert data["operating_hours"] == "240"
        assert data["total_monthly_cost"] == "272000"
        assert data["annual_cost"] == "3264000"
        assert data["difference"] == "60000"
