"""
equipcost_engines.breakeven -- Break-even operating hours.

Break-even hours are the minimum monthly operating hours needed to cover
all non-variable costs (fixed costs plus depreciation) at the given
variable cost per hour:

    break_even_hours = (fixed_costs + depreciation) / variable_cost_per_hour

A non-positive variable cost per hour yields zero rather than an error.
"""

from __future__ import annotations

from decimal import Decimal

from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    DecimalArithmetic,
    to_decimal,
)


def break_even_hours(
    fixed_costs: Decimal | int | str,
    depreciation: Decimal | int | str,
    variable_cost_per_hour: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """(fixed + depreciation) / variable cost per hour, or 0 if the rate is <= 0."""
    covered = arithmetic.add(
        to_decimal(fixed_costs, "fixed_costs"),
        to_decimal(depreciation, "depreciation"),
    )
    return arithmetic.ratio(covered, to_decimal(variable_cost_per_hour, "variable_cost_per_hour"))
