"""
Module: equipcost_engines.allocation
Responsibility:
    Partition a total monthly cost across an ordered set of members under
    one of three interchangeable policies: proportional to operating hours,
    equal split, or proportional to ownership share.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import equipcost_kernel.

Invariants enforced:
    - Only active members participate; inactive members stay in the result
      with a zero allocation, in their original position.
    - Conservation (BY_HOURS, EQUAL): when anyone participates, the sum of
      allocations equals the total exactly. The residual left by division
      (or by ``places`` rounding) goes to the last participating member.
    - Degenerate inputs yield zero, never an exception: zero total hours
      or zero active members leave the whole amount unallocated.
    - BY_PERCENTAGE computes shares as given. Shares are neither normalised
      nor validated to sum to 100; the result reports the share total so
      callers can surface an imbalance.

Failure modes:
    - UnknownAllocationPolicyError for an unrecognised policy tag.
    - ValidationError subclasses for a malformed total.

Usage:
    from equipcost_engines.allocation import AllocationEngine
    from equipcost_kernel.domain.dtos import AllocationPolicy, Member

    engine = AllocationEngine()
    result = engine.allocate(
        total_cost=Decimal("1000000"),
        policy=AllocationPolicy.BY_HOURS,
        members=[
            Member(member_id="m-1", operating_hours_per_month=Decimal("100")),
            Member(member_id="m-2", operating_hours_per_month=Decimal("100")),
        ],
    )
    result.by_member  # {"m-1": Decimal("500000"), "m-2": Decimal("500000")}
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, assert_never

from equipcost_engines.tracer import traced_engine
from equipcost_kernel.domain.dtos import AllocationPolicy, Member
from equipcost_kernel.domain.values import (
    DEFAULT_ARITHMETIC,
    HUNDRED,
    ZERO,
    DecimalArithmetic,
    decimal_text,
    to_decimal,
)
from equipcost_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


@dataclass(frozen=True)
class MemberAllocation:
    """
    Allocation outcome for a single member.

    ``display_name`` is passed through untouched for renderers.
    """

    member_id: str
    display_name: str
    allocated: Decimal
    is_active: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "member_name": self.display_name,
            "allocated_cost": decimal_text(self.allocated),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class AllocationResult:
    """
    Complete allocation result.

    Contract:
        Frozen dataclass summarising an allocation run.
    Guarantees:
        - ``lines`` has one entry per input member, in input order.
        - ``total_allocated + unallocated == source_amount``.
        - ``unallocated`` is negative when percentage shares exceed 100.
    """

    source_amount: Decimal
    policy: AllocationPolicy
    lines: tuple[MemberAllocation, ...]
    total_allocated: Decimal
    unallocated: Decimal
    rounding_adjustment: Decimal
    share_total_percent: Decimal

    @property
    def by_member(self) -> dict[str, Decimal]:
        """``{member_id: allocated}`` including inactive members at zero."""
        return {line.member_id: line.allocated for line in self.lines}

    @property
    def is_fully_allocated(self) -> bool:
        return self.unallocated == ZERO

    @property
    def participant_count(self) -> int:
        return sum(1 for line in self.lines if line.is_active)

    @property
    def share_imbalance(self) -> bool:
        """True when percentage allocation was computed from shares not summing to 100."""
        return (
            self.policy is AllocationPolicy.BY_PERCENTAGE
            and self.share_total_percent != HUNDRED
        )

    def allocation_for(self, member_id: str) -> Decimal:
        for line in self.lines:
            if line.member_id == member_id:
                return line.allocated
        raise KeyError(member_id)


class AllocationEngine:
    """
    Allocate a total cost across members.

    Contract:
        Pure functions over immutable inputs. No I/O, no database access.
    Guarantees:
        - Rounding strategy:
            * Intermediate calculations use the bound DecimalArithmetic.
            * With ``places`` set, shares are rounded with the policy
              rounding mode (ROUND_HALF_UP by default).
            * For BY_HOURS and EQUAL the last participant absorbs the
              residual, so the total is preserved.
    Non-goals:
        - Does not decide which policy applies; the project snapshot does.
        - Does not clamp or normalise ownership shares.
    """

    def __init__(self, arithmetic: DecimalArithmetic = DEFAULT_ARITHMETIC):
        self._arith = arithmetic

    @traced_engine("allocation", "1.0", fingerprint_fields=("total_cost", "policy", "members"))
    def allocate(
        self,
        total_cost: Decimal | int | str,
        policy: AllocationPolicy | str,
        members: Sequence[Member],
        places: int | None = None,
    ) -> AllocationResult:
        """
        Allocate ``total_cost`` to ``members`` under ``policy``.

        Args:
            total_cost: Amount to allocate.
            policy: Allocation policy (enum member or stored tag).
            members: Ordered members; inactive members receive zero.
            places: Round each share to this many decimal places
                (default: keep full precision).

        Returns:
            AllocationResult with one line per member.
        """
        t0 = time.monotonic()
        amount = to_decimal(total_cost, "total_cost")
        policy = AllocationPolicy.parse(policy)
        active = [m for m in members if m.is_active]

        logger.info("allocation_started", extra={
            "total_cost": decimal_text(amount),
            "policy": policy.value,
            "member_count": len(members),
            "active_member_count": len(active),
        })

        match policy:
            case AllocationPolicy.BY_HOURS:
                shares = self._shares_by_hours(amount, active)
                conserving = True
            case AllocationPolicy.EQUAL:
                shares = self._shares_equal(amount, active)
                conserving = True
            case AllocationPolicy.BY_PERCENTAGE:
                shares = self._shares_by_percentage(amount, active)
                conserving = False
            case _:
                assert_never(policy)

        result = self._build_result(
            amount=amount,
            policy=policy,
            members=members,
            shares=shares,
            conserving=conserving,
            places=places,
        )

        if result.share_imbalance:
            logger.warning("allocation_share_imbalance", extra={
                "share_total_percent": decimal_text(result.share_total_percent),
                "unallocated": decimal_text(result.unallocated),
            })

        logger.info("allocation_completed", extra={
            "policy": policy.value,
            "total_cost": decimal_text(amount),
            "total_allocated": decimal_text(result.total_allocated),
            "unallocated": decimal_text(result.unallocated),
            "rounding_adjustment": decimal_text(result.rounding_adjustment),
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return result

    # -----------------------------------------------------------------
    # Policy handlers: each returns {member_id: raw share} for participants
    # -----------------------------------------------------------------

    def _shares_by_hours(
        self, amount: Decimal, active: Sequence[Member]
    ) -> dict[str, Decimal]:
        """amount x member hours / total active hours; all zero if no hours."""
        total_hours = self._arith.total(m.operating_hours_per_month for m in active)
        if total_hours <= ZERO:
            if active:
                logger.warning("allocation_zero_hours", extra={
                    "active_member_count": len(active),
                })
            return {}
        return {
            m.member_id: self._arith.divide(
                self._arith.multiply(amount, m.operating_hours_per_month), total_hours
            )
            for m in active
            if m.operating_hours_per_month > ZERO
        }

    def _shares_equal(
        self, amount: Decimal, active: Sequence[Member]
    ) -> dict[str, Decimal]:
        """amount / active member count; nothing if there are no active members."""
        each = self._arith.ratio(amount, Decimal(len(active)))
        if not active:
            return {}
        return {m.member_id: each for m in active}

    def _shares_by_percentage(
        self, amount: Decimal, active: Sequence[Member]
    ) -> dict[str, Decimal]:
        """amount x share / 100, as given."""
        return {
            m.member_id: self._arith.percent_of(amount, m.ownership_share_percent)
            for m in active
        }

    # -----------------------------------------------------------------

    def _build_result(
        self,
        amount: Decimal,
        policy: AllocationPolicy,
        members: Sequence[Member],
        shares: dict[str, Decimal],
        conserving: bool,
        places: int | None,
    ) -> AllocationResult:
        """
        Assemble lines in member order, apply rounding and assign the residual.

        Preconditions:
            - ``shares`` only contains active member ids.
        Postconditions:
            - For conserving policies with at least one share, the sum of
              allocations equals ``amount``.
        """
        round_share: Callable[[Decimal], Decimal] = (
            (lambda v: self._arith.quantize(v, places)) if places is not None else (lambda v: v)
        )
        rounded = {mid: round_share(v) for mid, v in shares.items()}

        rounding_adjustment = ZERO
        if conserving and rounded:
            residual_id = next(
                m.member_id for m in reversed(members) if m.member_id in rounded
            )
            others = self._arith.total(v for mid, v in rounded.items() if mid != residual_id)
            absorbed = self._arith.subtract(amount, others)
            rounding_adjustment = self._arith.subtract(absorbed, rounded[residual_id])
            rounded[residual_id] = absorbed

        lines = tuple(
            MemberAllocation(
                member_id=m.member_id,
                display_name=m.display_name,
                allocated=rounded.get(m.member_id, ZERO) if m.is_active else ZERO,
                is_active=m.is_active,
            )
            for m in members
        )
        total_allocated = self._arith.total(line.allocated for line in lines)
        share_total = self._arith.total(
            m.ownership_share_percent for m in members if m.is_active
        )

        return AllocationResult(
            source_amount=amount,
            policy=policy,
            lines=lines,
            total_allocated=total_allocated,
            unallocated=self._arith.subtract(amount, total_allocated),
            rounding_adjustment=rounding_adjustment,
            share_total_percent=share_total,
        )
