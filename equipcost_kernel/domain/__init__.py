"""
Pure domain layer.

This module contains the decimal arithmetic core and the immutable value
objects with NO dependencies on:
- ORM / database
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from equipcost_kernel.domain.currency import (
    CurrencyInfo,
    CurrencyRegistry,
    format_compact_number,
    format_currency,
    format_number,
    format_percentage,
)
from equipcost_kernel.domain.dtos import (
    AllocationPolicy,
    Asset,
    Member,
    MemberStatus,
    OperatingParameters,
    OtherExpense,
    ProjectSnapshot,
    Scenario,
)
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    DEFAULT_POLICY,
    DecimalArithmetic,
    DecimalPolicy,
    to_decimal,
    to_non_negative,
    to_percentage,
)

__all__ = [
    # Decimal core
    "DEFAULT_ARITHMETIC",
    "DEFAULT_POLICY",
    "DecimalArithmetic",
    "DecimalPolicy",
    "to_decimal",
    "to_non_negative",
    "to_percentage",
    # Value objects
    "AllocationPolicy",
    "Asset",
    "Member",
    "MemberStatus",
    "OperatingParameters",
    "OtherExpense",
    "ProjectSnapshot",
    "Scenario",
    # Display
    "CurrencyInfo",
    "CurrencyRegistry",
    "format_compact_number",
    "format_currency",
    "format_number",
    "format_percentage",
]
