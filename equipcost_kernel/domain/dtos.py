"""
Domain value objects for equipment cost sharing.

All entities are frozen dataclasses read from an external store and never
mutated during a computation. Numeric fields are coerced through the
boundary parsers in ``equipcost_kernel.domain.values`` on construction, so
``Asset(purchase_price="1500000", ...)`` and ``Asset(purchase_price=Decimal(
"1500000"), ...)`` are equivalent while ``purchase_price=1500000.0`` is
rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from equipcost_kernel.domain.values import (
    ONE,
    ZERO,
    to_non_negative,
    to_optional_non_negative,
    to_percentage,
)
from equipcost_kernel.exceptions import (
    InvalidNumberError,
    UnknownAllocationPolicyError,
    ValidationError,
)


class AllocationPolicy(str, Enum):
    """How a total cost is divided between members."""

    BY_HOURS = "by_hours"  # Proportional to logged operating hours
    EQUAL = "equal"  # Same amount for every active member
    BY_PERCENTAGE = "percentage"  # Proportional to ownership share

    @classmethod
    def parse(cls, value: AllocationPolicy | str) -> AllocationPolicy:
        """Accept an enum member or its stored tag."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnknownAllocationPolicyError(value)


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _coerce_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidNumberError(field_name, value)
    return value


def _coerce_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise ValidationError(field_name, value, "not an ISO date") from None
    raise ValidationError(field_name, value, "not a date")


@dataclass(frozen=True)
class Asset:
    """
    A piece of owned equipment.

    Contract:
        ``salvage_value`` is optional; depreciation engines derive 10% of the
        purchase price when it is absent. ``salvage_value <= purchase_price``
        is expected but not enforced.
    Guarantees:
        - purchase_price and salvage_value are non-negative Decimals.
        - service_life_years is an int (zero or negative means no
          depreciation).
    """

    asset_id: str
    name: str
    purchase_price: Decimal
    service_life_years: int
    acquisition_date: date
    salvage_value: Decimal | None = None
    archived: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "purchase_price", to_non_negative(self.purchase_price, "purchase_price")
        )
        object.__setattr__(
            self,
            "salvage_value",
            to_optional_non_negative(self.salvage_value, "salvage_value"),
        )
        _coerce_int(self.service_life_years, "service_life_years")
        object.__setattr__(
            self,
            "acquisition_date",
            _coerce_date(self.acquisition_date, "acquisition_date"),
        )


@dataclass(frozen=True)
class OtherExpense:
    """An ad hoc fixed monthly expense line."""

    description: str
    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_non_negative(self.amount, "other_expenses.amount"))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OtherExpense:
        return cls(description=data.get("description", ""), amount=data.get("amount", ZERO))


@dataclass(frozen=True)
class OperatingParameters:
    """
    One month's (or the current) operating parameter set.

    ``month`` is ``None`` for the single "current" set; historical sets are
    tagged with the first day of their month.
    """

    operating_hours_per_month: Decimal = ZERO
    fuel_cost_per_hour: Decimal = ZERO
    maintenance_cost_per_hour: Decimal = ZERO
    insurance_monthly: Decimal = ZERO
    staff_salaries_monthly: Decimal = ZERO
    facility_rent_monthly: Decimal = ZERO
    other_expenses: tuple[OtherExpense, ...] = ()
    month: date | None = None

    _DECIMAL_FIELDS = (
        "operating_hours_per_month",
        "fuel_cost_per_hour",
        "maintenance_cost_per_hour",
        "insurance_monthly",
        "staff_salaries_monthly",
        "facility_rent_monthly",
    )

    def __post_init__(self) -> None:
        for name in self._DECIMAL_FIELDS:
            object.__setattr__(self, name, to_non_negative(getattr(self, name), name))
        expenses = tuple(
            e if isinstance(e, OtherExpense) else OtherExpense.from_mapping(e)
            for e in self.other_expenses
        )
        object.__setattr__(self, "other_expenses", expenses)
        if self.month is not None:
            object.__setattr__(self, "month", _coerce_date(self.month, "month"))

    @property
    def is_current(self) -> bool:
        return self.month is None


@dataclass(frozen=True)
class Member:
    """
    A co-owner / team member sharing the equipment cost.

    Ownership shares are not required to sum to 100 across members; the
    allocation result reports the total so callers can warn.
    """

    member_id: str
    display_name: str = ""
    operating_hours_per_month: Decimal = ZERO
    ownership_share_percent: Decimal = ZERO
    status: MemberStatus = MemberStatus.ACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "operating_hours_per_month",
            to_non_negative(self.operating_hours_per_month, "operating_hours_per_month"),
        )
        object.__setattr__(
            self,
            "ownership_share_percent",
            to_percentage(self.ownership_share_percent, "ownership_share_percent"),
        )
        try:
            object.__setattr__(self, "status", MemberStatus(self.status))
        except ValueError:
            raise ValidationError("status", self.status, "unknown member status") from None

    @property
    def is_active(self) -> bool:
        return self.status is MemberStatus.ACTIVE


@dataclass(frozen=True)
class Scenario:
    """
    A what-if variant of the current parameters.

    Absent multipliers mean "unchanged" (factor 1). A multiplier of zero is
    honoured as zero.
    """

    name: str
    operating_hours_multiplier: Decimal | None = None
    cost_multiplier: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "operating_hours_multiplier",
            to_optional_non_negative(
                self.operating_hours_multiplier, "operating_hours_multiplier"
            ),
        )
        object.__setattr__(
            self,
            "cost_multiplier",
            to_optional_non_negative(self.cost_multiplier, "cost_multiplier"),
        )

    @property
    def hours_factor(self) -> Decimal:
        if self.operating_hours_multiplier is None:
            return ONE
        return self.operating_hours_multiplier

    @property
    def cost_factor(self) -> Decimal:
        if self.cost_multiplier is None:
            return ONE
        return self.cost_multiplier


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    Everything the report builders need about one project.

    ``currency`` is a display label forwarded untouched to renderers.
    """

    project_id: str
    name: str
    currency: str = "USD"
    allocation_policy: AllocationPolicy = AllocationPolicy.BY_HOURS
    assets: tuple[Asset, ...] = ()
    parameter_sets: tuple[OperatingParameters, ...] = ()
    members: tuple[Member, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "allocation_policy", AllocationPolicy.parse(self.allocation_policy)
        )
        object.__setattr__(self, "assets", tuple(self.assets))
        object.__setattr__(self, "parameter_sets", tuple(self.parameter_sets))
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def active_assets(self) -> tuple[Asset, ...]:
        return tuple(a for a in self.assets if not a.archived)

    @property
    def active_members(self) -> tuple[Member, ...]:
        return tuple(m for m in self.members if m.is_active)
