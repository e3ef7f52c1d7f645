"""
Module: equipcost_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for report
    renderers and any service layer built on top of the engine.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel (and sibling engine modules).

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Valuation dates and forecast start months are passed in explicitly.
    - Decimal-only arithmetic: all monetary amounts and quantities use
      ``Decimal`` through a bound ``DecimalArithmetic``; floats are refused
      at the boundary.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - ValidationError subclasses propagated from boundary parsing.
    - Degenerate divisions (no hours, no members, no variable rate, zero
      base total) yield zero instead of raising.

Audit relevance:
    Engine entry points are traced via ``@traced_engine`` (see
    ``equipcost_engines.tracer``), emitting EQUIPCOST_ENGINE_TRACE records
    with engine name, version, input fingerprint and duration.

Usage:
    from equipcost_engines.allocation import AllocationEngine
    from equipcost_engines.forecast import ForecastEngine
    from equipcost_engines.scenario import ScenarioEngine
    from equipcost_engines.health import HealthScorer
    from equipcost_engines.reports import ReportBuilder
"""

from equipcost_engines.allocation import (
    AllocationEngine,
    AllocationResult,
    MemberAllocation,
)
from equipcost_engines.breakeven import break_even_hours
from equipcost_engines.costs import (
    MonthlyCostBreakdown,
    annual_cost,
    cost_per_hour,
    monthly_cost_breakdown,
    monthly_reserve,
    monthly_variable_costs,
    select_current_parameters,
    select_parameters_for_month,
    total_fixed_costs,
    total_monthly_cost,
)
from equipcost_engines.depreciation import (
    BookValue,
    DepreciationScheduleItem,
    annual_depreciation,
    auto_salvage_value,
    book_value,
    depreciation_schedule,
    monthly_depreciation,
    total_monthly_depreciation,
)
from equipcost_engines.forecast import (
    Forecast,
    ForecastEngine,
    ForecastMonth,
)
from equipcost_engines.health import (
    HealthFactor,
    HealthScore,
    HealthScorer,
)
from equipcost_engines.reports import (
    MonthlyReport,
    ReportBuilder,
    TrendPoint,
)
from equipcost_engines.scenario import (
    ScenarioComparison,
    ScenarioEngine,
    ScenarioResult,
)
from equipcost_engines.tracer import traced_engine

__all__ = [
    # Allocation
    "AllocationEngine",
    "AllocationResult",
    "MemberAllocation",
    # Break-even
    "break_even_hours",
    # Costs
    "MonthlyCostBreakdown",
    "annual_cost",
    "cost_per_hour",
    "monthly_cost_breakdown",
    "monthly_reserve",
    "monthly_variable_costs",
    "select_current_parameters",
    "select_parameters_for_month",
    "total_fixed_costs",
    "total_monthly_cost",
    # Depreciation
    "BookValue",
    "DepreciationScheduleItem",
    "annual_depreciation",
    "auto_salvage_value",
    "book_value",
    "depreciation_schedule",
    "monthly_depreciation",
    "total_monthly_depreciation",
    # Forecast
    "Forecast",
    "ForecastEngine",
    "ForecastMonth",
    # Health
    "HealthFactor",
    "HealthScore",
    "HealthScorer",
    # Reports
    "MonthlyReport",
    "ReportBuilder",
    "TrendPoint",
    # Scenario
    "ScenarioComparison",
    "ScenarioEngine",
    "ScenarioResult",
    # Tracing
    "traced_engine",
]
