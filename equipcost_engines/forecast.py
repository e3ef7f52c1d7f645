"""
equipcost_engines.forecast -- Rolling multi-month cost projection.

Responsibility:
    Project monthly cost for consecutive calendar months starting at a
    caller-supplied month/year, with a running cumulative total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel and sibling engine modules.

Invariants enforced:
    - Parameters and depreciation are constant across the window, so every
      month's projected cost is identical.
    - Cumulative cost is a running sum; it is non-decreasing because costs
      are never negative.
    - Month index wraps modulo 12; the year increments on each wrap.
    - Purity: the start month/year is always passed in; no clock access.

Failure modes:
    - OutOfRangeError if start_month is not 1..12 or months < 1.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from equipcost_engines.costs import (
    cost_per_hour,
    monthly_cost_breakdown,
)
from equipcost_engines.tracer import traced_engine
from equipcost_kernel.domain.dtos import OperatingParameters
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    ZERO,
    DecimalArithmetic,
    decimal_text,
    to_decimal,
)
from equipcost_kernel.exceptions import InvalidNumberError, OutOfRangeError
from equipcost_kernel.logging_config import get_logger

logger = get_logger("engines.forecast")

FORECAST_MONTHS = 12

_MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_label(month: int) -> str:
    """Short English label, e.g. ``"Jan"``."""
    return _MONTH_LABELS[month - 1]


def month_name(month: int) -> str:
    """Full English name, e.g. ``"January"``."""
    return _MONTH_NAMES[month - 1]


def shift_month(month: int, year: int, offset: int) -> tuple[int, int]:
    """Move ``offset`` months from (month, year); negative offsets go back."""
    absolute = year * 12 + (month - 1) + offset
    return absolute % 12 + 1, absolute // 12


def _check_month(month: Any) -> int:
    if isinstance(month, bool) or not isinstance(month, int):
        raise InvalidNumberError("start_month", month)
    if not 1 <= month <= 12:
        raise OutOfRangeError("start_month", month, 1, 12)
    return month


@dataclass(frozen=True)
class ForecastMonth:
    """One projected month."""

    index: int
    month: int
    month_label: str
    year: int
    projected_cost: Decimal
    cumulative_cost: Decimal
    operating_hours: Decimal
    cost_per_hour: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "month_name": self.month_label,
            "year": self.year,
            "projected_cost": decimal_text(self.projected_cost),
            "cumulative_cost": decimal_text(self.cumulative_cost),
            "operating_hours": decimal_text(self.operating_hours),
            "cost_per_hour": decimal_text(self.cost_per_hour),
        }


@dataclass(frozen=True)
class Forecast:
    """A projection window."""

    months: tuple[ForecastMonth, ...]

    @property
    def total_cost(self) -> Decimal:
        return self.months[-1].cumulative_cost if self.months else ZERO

    def __iter__(self):
        return iter(self.months)

    def __len__(self) -> int:
        return len(self.months)


class ForecastEngine:
    """
    Rolling projection of monthly cost.

    Contract:
        Pure, deterministic. Each step is a pure increment of the month
        index with modulo-12 wraparound and a year increment on wrap.
    Non-goals:
        - No seasonal variation or mid-window parameter changes.
    """

    def __init__(self, arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC):
        self._arith = arithmetic

    @traced_engine(
        "forecast", "1.0",
        fingerprint_fields=("params", "monthly_depreciation", "start_month", "start_year"),
    )
    def project(
        self,
        params: OperatingParameters,
        monthly_depreciation: Decimal | int | str,
        start_month: int,
        start_year: int,
        months: int = FORECAST_MONTHS,
    ) -> Forecast:
        """
        Project ``months`` consecutive months starting at start_month/start_year.

        Args:
            params: Operating parameter snapshot (constant over the window).
            monthly_depreciation: Total monthly depreciation (constant).
            start_month: Calendar month 1..12 of the first projected month.
            start_year: Year of the first projected month.
            months: Window length (default 12).

        Returns:
            Forecast with one ForecastMonth per projected month.
        """
        t0 = time.monotonic()
        start_month = _check_month(start_month)
        if isinstance(months, bool) or not isinstance(months, int):
            raise InvalidNumberError("months", months)
        if months < 1:
            raise OutOfRangeError("months", months, 1, "unbounded")
        depreciation = to_decimal(monthly_depreciation, "monthly_depreciation")

        logger.info("forecast_started", extra={
            "start_month": start_month,
            "start_year": start_year,
            "months": months,
        })

        breakdown = monthly_cost_breakdown(params, depreciation, arithmetic=self._arith)
        hours = params.operating_hours_per_month
        per_hour = cost_per_hour(breakdown.total_cost, hours, arithmetic=self._arith)

        cumulative = ZERO
        rows: list[ForecastMonth] = []
        for i in range(months):
            month, year = shift_month(start_month, start_year, i)
            cumulative = self._arith.add(cumulative, breakdown.total_cost)
            rows.append(
                ForecastMonth(
                    index=i,
                    month=month,
                    month_label=month_label(month),
                    year=year,
                    projected_cost=breakdown.total_cost,
                    cumulative_cost=cumulative,
                    operating_hours=hours,
                    cost_per_hour=per_hour,
                )
            )

        forecast = Forecast(months=tuple(rows))
        logger.info("forecast_completed", extra={
            "monthly_cost": decimal_text(breakdown.total_cost),
            "total_cost": decimal_text(forecast.total_cost),
            "end_month": rows[-1].month,
            "end_year": rows[-1].year,
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return forecast
