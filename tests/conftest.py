"""
Pytest fixtures for the equipment cost engine test suite.

Provides:
- A default DecimalArithmetic
- A sample project snapshot (assets, parameters, members)
- Structured log capture for asserting on emitted events
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from equipcost_kernel.domain.dtos import (
    AllocationPolicy,
    Asset,
    Member,
    MemberStatus,
    OperatingParameters,
    OtherExpense,
    ProjectSnapshot,
)
from equipcost_kernel.domain.values import DEFAULT_ARITHMETIC
from equipcost_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


@pytest.fixture
def arithmetic():
    return DEFAULT_ARITHMETIC


@pytest.fixture
def excavator() -> Asset:
    """1,000,000 purchase, explicit 100,000 salvage, 5-year life."""
    return Asset(
        asset_id="eq-1",
        name="Excavator",
        purchase_price=Decimal("1000000"),
        salvage_value=Decimal("100000"),
        service_life_years=5,
        acquisition_date=date(2024, 3, 15),
    )


@pytest.fixture
def loader() -> Asset:
    """600,000 purchase, auto salvage (60,000), 3-year life."""
    return Asset(
        asset_id="eq-2",
        name="Wheel loader",
        purchase_price=Decimal("600000"),
        service_life_years=3,
        acquisition_date=date(2025, 1, 10),
    )


@pytest.fixture
def current_params() -> OperatingParameters:
    """
    160 h/month at 500 + 250 per hour; fixed 20,000 + 30,000 + 10,000
    plus two other expense lines (1,500 and 500).
    """
    return OperatingParameters(
        operating_hours_per_month=Decimal("160"),
        fuel_cost_per_hour=Decimal("500"),
        maintenance_cost_per_hour=Decimal("250"),
        insurance_monthly=Decimal("20000"),
        staff_salaries_monthly=Decimal("30000"),
        facility_rent_monthly=Decimal("10000"),
        other_expenses=(
            OtherExpense("Permits", Decimal("1500")),
            OtherExpense("Telematics", Decimal("500")),
        ),
    )


@pytest.fixture
def members() -> tuple[Member, ...]:
    return (
        Member(
            member_id="m-1",
            display_name="Anna",
            operating_hours_per_month=Decimal("100"),
            ownership_share_percent=Decimal("60"),
        ),
        Member(
            member_id="m-2",
            display_name="Boris",
            operating_hours_per_month=Decimal("60"),
            ownership_share_percent=Decimal("40"),
        ),
        Member(
            member_id="m-3",
            display_name="Chen",
            operating_hours_per_month=Decimal("40"),
            ownership_share_percent=Decimal("0"),
            status=MemberStatus.INACTIVE,
        ),
    )


@pytest.fixture
def project(excavator, loader, current_params, members) -> ProjectSnapshot:
    return ProjectSnapshot(
        project_id="prj-1",
        name="North quarry",
        currency="RUB",
        allocation_policy=AllocationPolicy.BY_HOURS,
        assets=(excavator, loader),
        parameter_sets=(current_params,),
        members=members,
    )


@pytest.fixture
def log_records():
    """
    Capture structured log output from the equipcost logger hierarchy.

    Yields a callable returning the parsed JSON records emitted so far.
    """
    reset_logging()
    LogContext.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(handler=handler, level=logging.DEBUG)

    def _records() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield _records
    LogContext.clear()
    reset_logging()
