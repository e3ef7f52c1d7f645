"""
equipcost_engines.health -- Composite financial health score (0-100).

Responsibility:
    Score a project's month from five independent factors and report both
    the total and the per-factor breakdown for renderers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel.

Invariants enforced:
    - Weights and benchmarks are fixed constants, not configuration.
    - Each factor score lies in [0, weight].
    - Total score is the plain sum of the factor scores, clamped to [0, 100].
    - A project with no non-archived assets scores 0 on equipment utilization.
    - Cost-structure ratios are zero when the total cost is not positive.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from equipcost_engines.tracer import traced_engine
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    HUNDRED,
    ZERO,
    DecimalArithmetic,
    decimal_text,
    to_decimal,
)
from equipcost_kernel.logging_config import get_logger

logger = get_logger("engines.health")

HOURS_WEIGHT = Decimal("30")
COST_EFFICIENCY_WEIGHT = Decimal("25")
EQUIPMENT_WEIGHT = Decimal("20")
TEAM_BALANCE_WEIGHT = Decimal("15")
TEAM_SINGLE_MEMBER_SCORE = Decimal("10")
COST_STRUCTURE_WEIGHT = Decimal("10")
COST_STRUCTURE_FALLBACK_SCORE = Decimal("5")

HOURS_BENCHMARK = Decimal("200")
COST_PER_HOUR_BENCHMARK = Decimal("50000")
COST_PER_HOUR_PENALTY_STEP = Decimal("10000")
FIXED_RATIO_LOWER = Decimal("0.2")
FIXED_RATIO_UPPER = Decimal("0.6")
VARIABLE_RATIO_MIN = Decimal("0.2")


@dataclass(frozen=True)
class HealthFactor:
    name: str
    score: Decimal
    weight: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "score": decimal_text(self.score), "weight": decimal_text(self.weight)}


@dataclass(frozen=True)
class HealthScore:
    """Total score plus the factors it was summed from, in fixed order."""

    score: Decimal
    factors: tuple[HealthFactor, ...]

    def factor(self, name: str) -> HealthFactor:
        for f in self.factors:
            if f.name == name:
                return f
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": decimal_text(self.score),
            "factors": [f.to_dict() for f in self.factors],
        }


class HealthScorer:
    """
    Weighted five-factor health score.

    Contract:
        Pure and deterministic. Degenerate inputs (zero hours, zero total
        cost, no members) produce a score, never an exception.
    """

    def __init__(self, arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC):
        self._arith = arithmetic

    @traced_engine(
        "health", "1.0",
        fingerprint_fields=(
            "operating_hours", "cost_per_hour", "fixed_costs", "variable_costs",
            "total_cost", "active_asset_count", "active_member_count",
        ),
    )
    def score(
        self,
        operating_hours: Decimal | int | str,
        cost_per_hour: Decimal | int | str,
        fixed_costs: Decimal | int | str,
        variable_costs: Decimal | int | str,
        total_cost: Decimal | int | str,
        active_asset_count: int,
        active_member_count: int,
    ) -> HealthScore:
        t0 = time.monotonic()
        hours = to_decimal(operating_hours, "operating_hours")
        per_hour = to_decimal(cost_per_hour, "cost_per_hour")
        fixed = to_decimal(fixed_costs, "fixed_costs")
        variable = to_decimal(variable_costs, "variable_costs")
        total = to_decimal(total_cost, "total_cost")

        factors = (
            HealthFactor("Operating Hours Utilization", self._hours_score(hours), HOURS_WEIGHT),
            HealthFactor("Cost Efficiency", self._efficiency_score(per_hour), COST_EFFICIENCY_WEIGHT),
            HealthFactor(
                "Equipment Utilization",
                EQUIPMENT_WEIGHT if active_asset_count > 0 else ZERO,
                EQUIPMENT_WEIGHT,
            ),
            HealthFactor(
                "Team Allocation Balance",
                TEAM_BALANCE_WEIGHT if active_member_count > 1 else TEAM_SINGLE_MEMBER_SCORE,
                TEAM_BALANCE_WEIGHT,
            ),
            HealthFactor(
                "Cost Structure",
                self._structure_score(fixed, variable, total),
                COST_STRUCTURE_WEIGHT,
            ),
        )
        total_score = self._arith.clamp(
            self._arith.total(f.score for f in factors), ZERO, HUNDRED
        )

        logger.info("health_score_computed", extra={
            "score": decimal_text(total_score),
            "factors": {f.name: decimal_text(f.score) for f in factors},
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return HealthScore(score=total_score, factors=factors)

    def _hours_score(self, hours: Decimal) -> Decimal:
        """Linear ramp to full weight at the hours benchmark."""
        if hours >= HOURS_BENCHMARK:
            return HOURS_WEIGHT
        ramp = self._arith.multiply(self._arith.ratio(hours, HOURS_BENCHMARK), HOURS_WEIGHT)
        return self._arith.clamp(ramp, ZERO, HOURS_WEIGHT)

    def _efficiency_score(self, per_hour: Decimal) -> Decimal:
        """Full weight up to the benchmark, then 1 point off per penalty step."""
        if per_hour <= COST_PER_HOUR_BENCHMARK:
            return COST_EFFICIENCY_WEIGHT
        penalty = self._arith.divide(
            self._arith.subtract(per_hour, COST_PER_HOUR_BENCHMARK),
            COST_PER_HOUR_PENALTY_STEP,
        )
        return self._arith.clamp(
            self._arith.subtract(COST_EFFICIENCY_WEIGHT, penalty), ZERO, COST_EFFICIENCY_WEIGHT
        )

    def _structure_score(self, fixed: Decimal, variable: Decimal, total: Decimal) -> Decimal:
        fixed_ratio = self._arith.ratio(fixed, total)
        variable_ratio = self._arith.ratio(variable, total)
        if (
            FIXED_RATIO_LOWER < fixed_ratio < FIXED_RATIO_UPPER
            and variable_ratio > VARIABLE_RATIO_MIN
        ):
            return COST_STRUCTURE_WEIGHT
        return COST_STRUCTURE_FALLBACK_SCORE
