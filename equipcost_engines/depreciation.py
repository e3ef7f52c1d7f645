"""
equipcost_engines.depreciation -- Straight-line depreciation and book value.

Responsibility:
    Per-asset straight-line depreciation, the auto-derived salvage value,
    annual to monthly conversion, time-based book value and the per-project
    depreciation schedule.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel.

Invariants enforced:
    - Annual depreciation is zero when the service life is zero or negative.
    - Book value never drops below the salvage value.
    - Years elapsed are whole anniversary years, never negative, and the
      depreciated years are capped at the service life.
    - Purity: the valuation date is always passed in; no clock access.

Failure modes:
    - ValidationError subclasses from ``to_decimal`` on malformed input.

Usage:
    from equipcost_engines.depreciation import annual_depreciation, book_value

    annual = annual_depreciation(Decimal("1000000"), Decimal("100000"), 5)
    bv = book_value(asset, as_of=date(2026, 6, 30))
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from equipcost_engines.tracer import traced_engine
from equipcost_kernel.domain.dtos import Asset
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    ZERO,
    DecimalArithmetic,
    decimal_text,
    to_decimal,
)
from equipcost_kernel.logging_config import get_logger

logger = get_logger("engines.depreciation")

MONTHS_PER_YEAR = Decimal("12")
AUTO_SALVAGE_RATE = Decimal("0.10")


@dataclass(frozen=True)
class BookValue:
    """Book value of one asset at a valuation date."""

    asset_id: str
    as_of: date
    years_elapsed: int
    years_remaining: int
    accumulated_depreciation: Decimal
    book_value: Decimal


@dataclass(frozen=True)
class DepreciationScheduleItem:
    """
    One row of a depreciation schedule, as consumed by report renderers.

    ``salvage_value`` is the effective salvage (explicit or auto-derived).
    """

    asset_id: str
    asset_name: str
    purchase_price: Decimal
    salvage_value: Decimal
    service_life_years: int
    annual_depreciation: Decimal
    monthly_depreciation: Decimal
    years_remaining: int
    current_book_value: Decimal
    archived: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "asset_name": self.asset_name,
            "purchase_price": decimal_text(self.purchase_price),
            "salvage_value": decimal_text(self.salvage_value),
            "service_life_years": self.service_life_years,
            "annual_depreciation": decimal_text(self.annual_depreciation),
            "monthly_depreciation": decimal_text(self.monthly_depreciation),
            "years_remaining": self.years_remaining,
            "current_book_value": decimal_text(self.current_book_value),
            "archived": self.archived,
        }


def annual_depreciation(
    purchase_price: Decimal | int | str,
    salvage_value: Decimal | int | str,
    life_years: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """
    Straight-line annual depreciation.

    Formula: (purchase_price - salvage_value) / life_years, or 0 when
    life_years <= 0.
    """
    price = to_decimal(purchase_price, "purchase_price")
    salvage = to_decimal(salvage_value, "salvage_value")
    years = to_decimal(life_years, "life_years")
    if years <= ZERO:
        return ZERO
    return arithmetic.divide(arithmetic.subtract(price, salvage), years)


def monthly_depreciation(
    annual: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """Annual depreciation spread over twelve months."""
    return arithmetic.divide(to_decimal(annual, "annual_depreciation"), MONTHS_PER_YEAR)


def auto_salvage_value(
    purchase_price: Decimal | int | str,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """Default salvage value: 10% of the purchase price."""
    return arithmetic.multiply(to_decimal(purchase_price, "purchase_price"), AUTO_SALVAGE_RATE)


def resolve_salvage_value(
    asset: Asset,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """Explicit salvage value if the asset has one, else the auto-derived value."""
    if asset.salvage_value is not None:
        return asset.salvage_value
    return auto_salvage_value(asset.purchase_price, arithmetic=arithmetic)


def asset_annual_depreciation(
    asset: Asset,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    return annual_depreciation(
        asset.purchase_price,
        resolve_salvage_value(asset, arithmetic=arithmetic),
        asset.service_life_years,
        arithmetic=arithmetic,
    )


def whole_years_elapsed(acquired: date, as_of: date) -> int:
    """Completed anniversary years between two dates; zero if as_of is earlier."""
    years = as_of.year - acquired.year
    if (as_of.month, as_of.day) < (acquired.month, acquired.day):
        years -= 1
    return max(0, years)


def book_value(
    asset: Asset,
    as_of: date,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> BookValue:
    """
    Book value of an asset at ``as_of``.

    Preconditions:
        as_of is supplied by the caller (engines never read the clock).

    Postconditions:
        - accumulated = annual depreciation x min(years elapsed, service life)
        - book_value = max(purchase_price - accumulated, salvage_value)
        - years_remaining = max(0, service life - years elapsed)
    """
    salvage = resolve_salvage_value(asset, arithmetic=arithmetic)
    annual = annual_depreciation(
        asset.purchase_price, salvage, asset.service_life_years, arithmetic=arithmetic
    )
    elapsed = whole_years_elapsed(asset.acquisition_date, as_of)
    life = max(asset.service_life_years, 0)

    accumulated = arithmetic.multiply(annual, Decimal(min(elapsed, life)))
    value = arithmetic.subtract(asset.purchase_price, accumulated)
    if value < salvage:
        value = salvage

    return BookValue(
        asset_id=asset.asset_id,
        as_of=as_of,
        years_elapsed=elapsed,
        years_remaining=max(0, asset.service_life_years - elapsed),
        accumulated_depreciation=accumulated,
        book_value=value,
    )


def total_monthly_depreciation(
    assets: Iterable[Asset],
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> Decimal:
    """Sum of monthly depreciation over all non-archived assets."""
    return arithmetic.total(
        monthly_depreciation(
            asset_annual_depreciation(asset, arithmetic=arithmetic),
            arithmetic=arithmetic,
        )
        for asset in assets
        if not asset.archived
    )


@traced_engine("depreciation", "1.0", fingerprint_fields=("assets", "as_of"))
def depreciation_schedule(
    assets: Iterable[Asset],
    as_of: date,
    *,
    arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC,
) -> tuple[DepreciationScheduleItem, ...]:
    """
    Depreciation schedule for every asset, in input order.

    Archived assets are listed (flagged) so a renderer can show history;
    they are excluded only from ``total_monthly_depreciation``.
    """
    t0 = time.monotonic()
    items: list[DepreciationScheduleItem] = []
    for asset in assets:
        salvage = resolve_salvage_value(asset, arithmetic=arithmetic)
        annual = annual_depreciation(
            asset.purchase_price, salvage, asset.service_life_years, arithmetic=arithmetic
        )
        bv = book_value(asset, as_of, arithmetic=arithmetic)
        items.append(
            DepreciationScheduleItem(
                asset_id=asset.asset_id,
                asset_name=asset.name,
                purchase_price=asset.purchase_price,
                salvage_value=salvage,
                service_life_years=asset.service_life_years,
                annual_depreciation=annual,
                monthly_depreciation=monthly_depreciation(annual, arithmetic=arithmetic),
                years_remaining=bv.years_remaining,
                current_book_value=bv.book_value,
                archived=asset.archived,
            )
        )

    logger.info("depreciation_schedule_completed", extra={
        "as_of": as_of.isoformat(),
        "asset_count": len(items),
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return tuple(items)
