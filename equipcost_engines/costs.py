"""
equipcost_engines.costs -- Fixed, variable and total monthly cost aggregation.

Responsibility:
    Sum fixed monthly costs (including the variable-length list of ad hoc
    expense lines), compute variable costs from hourly rates and operating
    hours, combine them with depreciation into the monthly total, and derive
    cost per hour, annual cost and the monthly reserve.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel.

Invariants enforced:
    - An empty expense list contributes zero to fixed costs.
    - ``cost_per_hour`` is zero when hours are zero (a project with no
      logged hours is a valid state, not an error).
    - Inputs are never mutated; every result is a new value.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from equipcost_kernel.domain.dtos import OperatingParameters, OtherExpense
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    DecimalArithmetic,
    decimal_text,
    to_decimal,
)
from equipcost_kernel.logging_config import get_logger

logger = get_logger("engines.costs")

MONTHS_PER_YEAR = Decimal("12")
DEFAULT_RESERVE_PERCENTAGE = Decimal("15")


@dataclass(frozen=True)
class MonthlyCostBreakdown:
    """
    Derived monthly cost components.

    Guarantees:
        - total_cost == fixed_costs + variable_costs + depreciation
    """

    fixed_costs: Decimal
    variable_costs: Decimal
    depreciation: Decimal
    total_cost: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "fixed_costs": decimal_text(self.fixed_costs),
            "variable_costs": decimal_text(self.variable_costs),
            "depreciation": decimal_text(self.depreciation),
            "total_cost": decimal_text(self.total_cost),
        }


def total_fixed_costs(
    insurance: Decimal | int | str,
    staff: Decimal | int | str,
    rent: Decimal | int | str,
    other_expenses: Iterable[OtherExpense | Decimal] = (),
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """
    insurance + staff + rent + sum of the other expense amounts.

    ``other_expenses`` may hold ``OtherExpense`` lines or bare amounts.
    """
    base = arithmetic.total((
        to_decimal(insurance, "insurance_monthly"),
        to_decimal(staff, "staff_salaries_monthly"),
        to_decimal(rent, "facility_rent_monthly"),
    ))
    extras = arithmetic.total(
        e.amount if isinstance(e, OtherExpense) else to_decimal(e, "other_expenses.amount")
        for e in other_expenses
    )
    return arithmetic.add(base, extras)


def monthly_variable_costs(
    fuel_per_hour: Decimal | int | str,
    maintenance_per_hour: Decimal | int | str,
    hours: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """(fuel + maintenance) x hours."""
    rate = arithmetic.add(
        to_decimal(fuel_per_hour, "fuel_cost_per_hour"),
        to_decimal(maintenance_per_hour, "maintenance_cost_per_hour"),
    )
    return arithmetic.multiply(rate, to_decimal(hours, "operating_hours"))


def total_monthly_cost(
    fixed: Decimal | int | str,
    variable: Decimal | int | str,
    depreciation: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    return arithmetic.total((
        to_decimal(fixed, "fixed_costs"),
        to_decimal(variable, "variable_costs"),
        to_decimal(depreciation, "depreciation"),
    ))


def cost_per_hour(
    total_cost: Decimal | int | str,
    hours: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """total / hours, or 0 when hours <= 0."""
    return arithmetic.ratio(
        to_decimal(total_cost, "total_cost"), to_decimal(hours, "operating_hours")
    )


def annual_cost(
    monthly: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    return arithmetic.multiply(to_decimal(monthly, "monthly_cost"), MONTHS_PER_YEAR)


def monthly_reserve(
    monthly: Decimal | int | str,
    reserve_percentage: Decimal | int | str = DEFAULT_RESERVE_PERCENTAGE,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """Amount to set aside each month: monthly cost x percentage / 100."""
    return arithmetic.percent_of(
        to_decimal(monthly, "monthly_cost"),
        to_decimal(reserve_percentage, "reserve_percentage"),
    )


# ---------------------------------------------------------------------------
# Parameter-set helpers
# ---------------------------------------------------------------------------


def variable_cost_per_hour(
    params: OperatingParameters,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    return arithmetic.add(params.fuel_cost_per_hour, params.maintenance_cost_per_hour)


def parameters_fixed_costs(
    params: OperatingParameters,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    return total_fixed_costs(
        params.insurance_monthly,
        params.staff_salaries_monthly,
        params.facility_rent_monthly,
        params.other_expenses,
        arithmetic=arithmetic,
    )


def monthly_cost_breakdown(
    params: OperatingParameters,
    depreciation: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> MonthlyCostBreakdown:
    """Fixed, variable, depreciation and total for one parameter set."""
    dep = to_decimal(depreciation, "depreciation")
    fixed = parameters_fixed_costs(params, arithmetic=arithmetic)
    variable = monthly_variable_costs(
        params.fuel_cost_per_hour,
        params.maintenance_cost_per_hour,
        params.operating_hours_per_month,
        arithmetic=arithmetic,
    )
    breakdown = MonthlyCostBreakdown(
        fixed_costs=fixed,
        variable_costs=variable,
        depreciation=dep,
        total_cost=total_monthly_cost(fixed, variable, dep, arithmetic=arithmetic),
    )
    logger.debug("monthly_cost_breakdown_computed", extra=breakdown.to_dict())
    return breakdown


def select_current_parameters(
    parameter_sets: Sequence[OperatingParameters],
) -> OperatingParameters:
    """
    The parameter set the engines operate on.

    Prefers the untagged "current" set, then the first set, then an
    all-zero set for a project that has none yet.
    """
    for params in parameter_sets:
        if params.is_current:
            return params
    if parameter_sets:
        logger.warning("current_parameters_missing", extra={
            "parameter_set_count": len(parameter_sets),
            "fallback_month": (
                parameter_sets[0].month.isoformat() if parameter_sets[0].month else None
            ),
        })
        return parameter_sets[0]
    return OperatingParameters()


def select_parameters_for_month(
    parameter_sets: Sequence[OperatingParameters],
    year: int,
    month: int,
) -> OperatingParameters:
    """The set tagged for (year, month) if one exists, else the current set."""
    for params in parameter_sets:
        if params.month is not None and (params.month.year, params.month.month) == (year, month):
            return params
    return select_current_parameters(parameter_sets)
