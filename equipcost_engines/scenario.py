"""
equipcost_engines.scenario -- What-if comparison against the current baseline.

Responsibility:
    Apply each scenario's multipliers to the current parameters and report
    how the monthly cost, cost per hour, break-even hours and annual cost
    move relative to the base case.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel and sibling engine modules.

Invariants enforced:
    - Hours are scaled by ``operating_hours_multiplier`` (default 1).
    - Fixed costs AND variable cost per hour are scaled by
      ``cost_multiplier`` (default 1).
    - Depreciation is asset-driven and never scaled.
    - Differences are signed: positive means the scenario costs more than
      the base case. The percentage is zero when the base total is zero.
    - A scenario with both multipliers at 1 reproduces the base exactly.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from equipcost_engines.breakeven import break_even_hours
from equipcost_engines.costs import (
    annual_cost,
    cost_per_hour,
    parameters_fixed_costs,
    total_monthly_cost,
    variable_cost_per_hour,
)
from equipcost_engines.tracer import traced_engine
from equipcost_kernel.domain.dtos import OperatingParameters, Scenario
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    HUNDRED,
    ZERO,
    DecimalArithmetic,
    decimal_text,
    to_decimal,
)
from equipcost_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.scenario")

BASE_CASE_NAME = "Base case"


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of one scenario (or of the base case)."""

    scenario_name: str
    operating_hours: Decimal
    fixed_costs: Decimal
    variable_costs: Decimal
    depreciation: Decimal
    total_monthly_cost: Decimal
    cost_per_hour: Decimal
    break_even_hours: Decimal
    annual_cost: Decimal
    difference: Decimal
    difference_percent: Decimal

    @property
    def is_more_expensive(self) -> bool:
        return self.difference > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenario_name": self.scenario_name,
            "operating_hours": decimal_text(self.operating_hours),
            "total_monthly_cost": decimal_text(self.total_monthly_cost),
            "cost_per_hour": decimal_text(self.cost_per_hour),
            "break_even_hours": decimal_text(self.break_even_hours),
            "annual_cost": decimal_text(self.annual_cost),
            "difference": decimal_text(self.difference),
            "difference_percent": decimal_text(self.difference_percent),
        }


@dataclass(frozen=True)
class ScenarioComparison:
    """The base case and every scenario, in input order."""

    base: ScenarioResult
    results: tuple[ScenarioResult, ...]

    def result_for(self, name: str) -> ScenarioResult:
        for result in self.results:
            if result.scenario_name == name:
                return result
        raise KeyError(name)


class ScenarioEngine:
    """
    Compare named scenarios against the current parameters.

    Contract:
        Each scenario is evaluated independently from the same base
        parameters; scenarios never compound.
    """

    def __init__(self, arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC):
        self._arith = arithmetic

    @traced_engine("scenario", "1.0", fingerprint_fields=("params", "monthly_depreciation", "scenarios"))
    def compare(
        self,
        params: OperatingParameters,
        monthly_depreciation: Decimal | int | str,
        scenarios: Sequence[Scenario],
    ) -> ScenarioComparison:
        """
        Evaluate every scenario against the base case.

        Args:
            params: Current operating parameters.
            monthly_depreciation: Total monthly depreciation (unscaled).
            scenarios: Named scenarios.

        Returns:
            ScenarioComparison with the base case and one result per scenario.
        """
        t0 = time.monotonic()
        depreciation = to_decimal(monthly_depreciation, "monthly_depreciation")
        base_hours = params.operating_hours_per_month
        base_fixed = parameters_fixed_costs(params, arithmetic=self._arith)
        base_rate = variable_cost_per_hour(params, arithmetic=self._arith)

        logger.info("scenario_comparison_started", extra={
            "scenario_count": len(scenarios),
            "base_hours": decimal_text(base_hours),
            "base_fixed_costs": decimal_text(base_fixed),
            "base_variable_cost_per_hour": decimal_text(base_rate),
        })

        base = self._evaluate(
            BASE_CASE_NAME, base_hours, base_fixed, base_rate, depreciation, base_total=None
        )
        results = tuple(
            self._evaluate(
                scenario.name,
                self._arith.multiply(base_hours, scenario.hours_factor),
                self._arith.multiply(base_fixed, scenario.cost_factor),
                self._arith.multiply(base_rate, scenario.cost_factor),
                depreciation,
                base_total=base.total_monthly_cost,
            )
            for scenario in scenarios
        )

        logger.info("scenario_comparison_completed", extra={
            "base_total": decimal_text(base.total_monthly_cost),
            "scenario_count": len(results),
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return ScenarioComparison(base=base, results=results)

    def _evaluate(
        self,
        name: str,
        hours: Decimal,
        fixed: Decimal,
        rate: Decimal,
        depreciation: Decimal,
        base_total: Decimal | None,
    ) -> ScenarioResult:
        arith = self._arith
        variable = arith.multiply(rate, hours)
        total = total_monthly_cost(fixed, variable, depreciation, arithmetic=arith)

        if base_total is None:
            difference = percent = ZERO
        else:
            difference = arith.subtract(total, base_total)
            percent = arith.multiply(arith.ratio(difference, base_total), HUNDRED)

        with LogContext.bind(scenario_name=name):
            logger.debug("scenario_evaluated", extra={
                "total_monthly_cost": decimal_text(total),
                "difference": decimal_text(difference),
            })
        return ScenarioResult(
            scenario_name=name,
            operating_hours=hours,
            fixed_costs=fixed,
            variable_costs=variable,
            depreciation=depreciation,
            total_monthly_cost=total,
            cost_per_hour=cost_per_hour(total, hours, arithmetic=arith),
            break_even_hours=break_even_hours(fixed, depreciation, rate, arithmetic=arith),
            annual_cost=annual_cost(total, arithmetic=arith),
            difference=difference,
            difference_percent=percent,
        )
