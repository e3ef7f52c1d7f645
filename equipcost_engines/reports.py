"""
equipcost_engines.reports -- Report data assembled from the pure engines.

Responsibility:
    Compose depreciation, cost aggregation, allocation, forecast, scenario
    and health engines into the result structures that report renderers
    (PDF, spreadsheet, CSV, e-mail) consume for one project snapshot.

Architecture position:
    Engines -- composition over the pure calculation layer, zero I/O.
    Renderers are out of scope; they receive these dataclasses (or their
    ``to_dict`` output) and format them.

Invariants enforced:
    - The valuation date / start month is always passed in; no clock access.
    - Parameters: the set tagged for the reported month, else the current
      (untagged) set, else an all-zero set.
    - Monthly depreciation sums non-archived assets only.
    - ``member_allocations`` lists active members only; the full
      ``AllocationResult`` (inactive members at zero) is kept alongside.
    - Currency code and member display names pass through untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from equipcost_engines.allocation import AllocationEngine, AllocationResult, MemberAllocation
from equipcost_engines.costs import (
    DEFAULT_RESERVE_PERCENTAGE,
    MonthlyCostBreakdown,
    cost_per_hour,
    monthly_cost_breakdown,
    monthly_reserve,
    select_current_parameters,
    select_parameters_for_month,
)
from equipcost_engines.depreciation import (
    DepreciationScheduleItem,
    depreciation_schedule,
    total_monthly_depreciation,
)
from equipcost_engines.forecast import (
    FORECAST_MONTHS,
    Forecast,
    ForecastEngine,
    month_name,
    shift_month,
)
from equipcost_engines.health import HealthScore, HealthScorer
from equipcost_engines.scenario import ScenarioComparison, ScenarioEngine
from equipcost_kernel.domain.dtos import ProjectSnapshot, Scenario
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    DecimalArithmetic,
    decimal_text,
    to_non_negative,
)
from equipcost_kernel.exceptions import OutOfRangeError
from equipcost_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.reports")

TREND_MONTHS = 3


@dataclass(frozen=True)
class MonthlyReport:
    """Monthly summary for one project."""

    project_id: str
    currency: str
    month_label: str
    year: int
    breakdown: MonthlyCostBreakdown
    operating_hours: Decimal
    cost_per_hour: Decimal
    reserve: Decimal
    member_allocations: tuple[MemberAllocation, ...]
    allocation: AllocationResult

    @property
    def total_cost(self) -> Decimal:
        return self.breakdown.total_cost

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "currency": self.currency,
            "month": self.month_label,
            "year": self.year,
            **self.breakdown.to_dict(),
            "operating_hours": decimal_text(self.operating_hours),
            "cost_per_hour": decimal_text(self.cost_per_hour),
            "reserve": decimal_text(self.reserve),
            "member_allocations": [a.to_dict() for a in self.member_allocations],
            "share_imbalance": self.allocation.share_imbalance,
        }


@dataclass(frozen=True)
class TrendPoint:
    month_label: str
    year: int
    total_cost: Decimal
    operating_hours: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month_label,
            "year": self.year,
            "total_cost": decimal_text(self.total_cost),
            "operating_hours": decimal_text(self.operating_hours),
        }


class ReportBuilder:
    """
    Build report data for a ``ProjectSnapshot``.

    Contract:
        Stateless apart from the bound arithmetic and reserve percentage;
        one builder may serve any number of projects.
    """

    def __init__(
        self,
        arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
        reserve_percentage: Decimal | int | str = DEFAULT_RESERVE_PERCENTAGE,
    ):
        self._arith = arithmetic
        self._reserve_percentage = to_non_negative(reserve_percentage, "reserve_percentage")
        self._allocation = AllocationEngine(arithmetic)
        self._forecast = ForecastEngine(arithmetic)
        self._scenario = ScenarioEngine(arithmetic)
        self._health = HealthScorer(arithmetic)

    def _monthly_depreciation(self, project: ProjectSnapshot) -> Decimal:
        return total_monthly_depreciation(project.assets, arithmetic=self._arith)

    def monthly_report(self, project: ProjectSnapshot, as_of: date) -> MonthlyReport:
        """Monthly summary for the calendar month containing ``as_of``."""
        with LogContext.bind(project_id=project.project_id):
            params = select_parameters_for_month(project.parameter_sets, as_of.year, as_of.month)
            breakdown = monthly_cost_breakdown(
                params, self._monthly_depreciation(project), arithmetic=self._arith
            )
            hours = params.operating_hours_per_month
            allocation = self._allocation.allocate(
                total_cost=breakdown.total_cost,
                policy=project.allocation_policy,
                members=project.members,
            )
            report = MonthlyReport(
                project_id=project.project_id,
                currency=project.currency,
                month_label=month_name(as_of.month),
                year=as_of.year,
                breakdown=breakdown,
                operating_hours=hours,
                cost_per_hour=cost_per_hour(breakdown.total_cost, hours, arithmetic=self._arith),
                reserve=monthly_reserve(
                    breakdown.total_cost, self._reserve_percentage, arithmetic=self._arith
                ),
                member_allocations=tuple(line for line in allocation.lines if line.is_active),
                allocation=allocation,
            )
            logger.info("monthly_report_built", extra={
                "month": report.month_label,
                "year": report.year,
                "total_cost": decimal_text(report.total_cost),
                "member_count": len(report.member_allocations),
            })
            return report

    def annual_forecast(
        self,
        project: ProjectSnapshot,
        start_month: int,
        start_year: int,
        months: int = FORECAST_MONTHS,
    ) -> Forecast:
        with LogContext.bind(project_id=project.project_id):
            return self._forecast.project(
                params=select_current_parameters(project.parameter_sets),
                monthly_depreciation=self._monthly_depreciation(project),
                start_month=start_month,
                start_year=start_year,
                months=months,
            )

    def depreciation_schedule(
        self, project: ProjectSnapshot, as_of: date
    ) -> tuple[DepreciationScheduleItem, ...]:
        with LogContext.bind(project_id=project.project_id):
            return depreciation_schedule(assets=project.assets, as_of=as_of, arithmetic=self._arith)

    def scenario_analysis(
        self, project: ProjectSnapshot, scenarios: Sequence[Scenario]
    ) -> ScenarioComparison:
        with LogContext.bind(project_id=project.project_id):
            return self._scenario.compare(
                params=select_current_parameters(project.parameter_sets),
                monthly_depreciation=self._monthly_depreciation(project),
                scenarios=scenarios,
            )

    def health_score(self, project: ProjectSnapshot, as_of: date) -> HealthScore:
        """Health score of the month containing ``as_of``."""
        report = self.monthly_report(project, as_of)
        with LogContext.bind(project_id=project.project_id):
            return self._health.score(
                operating_hours=report.operating_hours,
                cost_per_hour=report.cost_per_hour,
                fixed_costs=report.breakdown.fixed_costs,
                variable_costs=report.breakdown.variable_costs,
                total_cost=report.total_cost,
                active_asset_count=len(project.active_assets),
                active_member_count=len(report.member_allocations),
            )

    def trend(
        self, project: ProjectSnapshot, as_of: date, months: int = TREND_MONTHS
    ) -> tuple[TrendPoint, ...]:
        """
        Monthly totals for the ``months`` months ending with the month of
        ``as_of``, oldest first.
        """
        if isinstance(months, bool) or not isinstance(months, int) or months < 1:
            raise OutOfRangeError("months", months, 1, "unbounded")
        points: list[TrendPoint] = []
        for offset in range(months - 1, -1, -1):
            month, year = shift_month(as_of.month, as_of.year, -offset)
            report = self.monthly_report(project, date(year, month, 1))
            points.append(
                TrendPoint(
                    month_label=report.month_label,
                    year=report.year,
                    total_cost=report.total_cost,
                    operating_hours=report.operating_hours,
                )
            )
        return tuple(points)
