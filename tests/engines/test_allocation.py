"""
Tests for Allocation Engine.

Covers:
- By-hours allocation
- Equal allocation
- Percentage (ownership share) allocation
- Inactive members kept at zero in their position
- Degenerate inputs: zero hours, no active members
- Rounding handling and residual assignment
"""

from decimal import Decimal

import pytest

from equipcost_engines.allocation import AllocationEngine
from equipcost_kernel.domain.dtos import AllocationPolicy, Member, MemberStatus
from equipcost_kernel.exceptions import UnknownAllocationPolicyError


def _member(member_id, hours="0", share="0", active=True, name=""):
    return Member(
        member_id=member_id,
        display_name=name or member_id,
        operating_hours_per_month=Decimal(hours),
        ownership_share_percent=Decimal(share),
        status=MemberStatus.ACTIVE if active else MemberStatus.INACTIVE,
    )


class TestByHoursAllocation:
    """Tests for allocation proportional to operating hours."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_equal_hours_split_evenly(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000000"),
            policy=AllocationPolicy.BY_HOURS,
            members=[_member("a", hours="100"), _member("b", hours="100")],
        )

        assert result.by_member == {"a": Decimal("500000"), "b": Decimal("500000")}
        assert result.total_allocated == Decimal("1000000")
        assert result.is_fully_allocated

    def test_proportional_hours(self, members):
        result = self.engine.allocate(
            total_cost=Decimal("212000"),
            policy=AllocationPolicy.BY_HOURS,
            members=members,
        )

        # Active hours 100 + 60; m-3 is inactive
        assert result.allocation_for("m-1") == Decimal("132500")
        assert result.allocation_for("m-2") == Decimal("79500")
        assert result.allocation_for("m-3") == Decimal("0")

    def test_zero_total_hours_allocates_nothing(self, log_records):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.BY_HOURS,
            members=[_member("a"), _member("b")],
        )

        assert result.by_member == {"a": Decimal("0"), "b": Decimal("0")}
        assert result.unallocated == Decimal("1000")
        assert not result.is_fully_allocated
        assert "allocation_zero_hours" in [r["message"] for r in log_records()]

    def test_member_without_hours_gets_zero(self):
        result = self.engine.allocate(
            total_cost=Decimal("900"),
            policy=AllocationPolicy.BY_HOURS,
            members=[_member("a", hours="30"), _member("b", hours="0")],
        )

        assert result.allocation_for("a") == Decimal("900")
        assert result.allocation_for("b") == Decimal("0")

    def test_residual_goes_to_last_participant(self):
        """Thirds do not divide exactly; the last participant absorbs the residual."""
        result = self.engine.allocate(
            total_cost=Decimal("100"),
            policy=AllocationPolicy.BY_HOURS,
            members=[_member("a", hours="1"), _member("b", hours="1"), _member("c", hours="1")],
        )

        assert result.total_allocated == Decimal("100")
        assert result.allocation_for("a") == result.allocation_for("b")
        assert result.allocation_for("c") > result.allocation_for("a")

    def test_rounding_to_cents(self):
        result = self.engine.allocate(
            total_cost=Decimal("100.00"),
            policy=AllocationPolicy.BY_HOURS,
            members=[_member("a", hours="1"), _member("b", hours="1"), _member("c", hours="1")],
            places=2,
        )

        assert [line.allocated for line in result.lines] == [
            Decimal("33.33"), Decimal("33.33"), Decimal("33.34"),
        ]
        assert result.rounding_adjustment == Decimal("0.01")
        assert result.total_allocated == Decimal("100.00")


class TestEqualAllocation:
    """Tests for equal split across active members."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_four_members(self):
        members = [_member(str(i)) for i in range(4)]
        result = self.engine.allocate(
            total_cost=Decimal("1000000"),
            policy=AllocationPolicy.EQUAL,
            members=members,
        )

        assert all(line.allocated == Decimal("250000") for line in result.lines)
        assert result.participant_count == 4

    def test_inactive_members_excluded_from_count(self):
        members = [_member("a"), _member("b", active=False), _member("c")]
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.EQUAL,
            members=members,
        )

        assert result.by_member == {
            "a": Decimal("500"),
            "b": Decimal("0"),
            "c": Decimal("500"),
        }

    def test_no_active_members(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.EQUAL,
            members=[_member("a", active=False)],
        )

        assert result.allocation_for("a") == Decimal("0")
        assert result.unallocated == Decimal("1000")

    def test_empty_member_list(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.EQUAL,
            members=[],
        )

        assert result.lines == ()
        assert result.total_allocated == Decimal("0")


class TestPercentageAllocation:
    """Tests for allocation by ownership share."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_share_of_total(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000000"),
            policy=AllocationPolicy.BY_PERCENTAGE,
            members=[_member("a", share="60"), _member("b", share="40")],
        )

        assert result.allocation_for("a") == Decimal("600000")
        assert result.allocation_for("b") == Decimal("400000")
        assert not result.share_imbalance

    def test_full_share_gets_full_total(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000000"),
            policy=AllocationPolicy.BY_PERCENTAGE,
            members=[_member("a", share="100")],
        )

        assert result.allocation_for("a") == Decimal("1000000")

    def test_shares_over_hundred_are_not_normalised(self, log_records):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.BY_PERCENTAGE,
            members=[_member("a", share="70"), _member("b", share="50")],
        )

        assert result.allocation_for("a") == Decimal("700")
        assert result.allocation_for("b") == Decimal("500")
        assert result.share_total_percent == Decimal("120")
        assert result.share_imbalance
        assert result.unallocated == Decimal("-200")
        warnings = [r for r in log_records() if r["message"] == "allocation_share_imbalance"]
        assert warnings[0]["share_total_percent"] == "120"

    def test_shares_under_hundred_leave_remainder(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.BY_PERCENTAGE,
            members=[_member("a", share="30")],
        )

        assert result.total_allocated == Decimal("300")
        assert result.unallocated == Decimal("700")

    def test_inactive_share_ignored(self):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.BY_PERCENTAGE,
            members=[_member("a", share="60"), _member("b", share="40", active=False)],
        )

        assert result.allocation_for("b") == Decimal("0")
        assert result.share_total_percent == Decimal("60")


class TestAllocationResult:
    """Tests for result shape and pass-through fields."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_inactive_members_keep_position(self, members):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.EQUAL,
            members=members,
        )

        assert [line.member_id for line in result.lines] == ["m-1", "m-2", "m-3"]
        assert [line.is_active for line in result.lines] == [True, True, False]

    def test_display_name_passed_through(self, members):
        result = self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.EQUAL,
            members=members,
        )

        assert result.lines[0].to_dict() == {
            "member_id": "m-1",
            "member_name": "Anna",
            "allocated_cost": "500",
            "is_active": True,
        }

    def test_policy_tag_accepted(self):
        result = self.engine.allocate(
            total_cost="10",
            policy="equal",
            members=[_member("a")],
        )

        assert result.policy is AllocationPolicy.EQUAL

    def test_unknown_policy_rejected(self):
        with pytest.raises(UnknownAllocationPolicyError):
            self.engine.allocate(total_cost="10", policy="weighted", members=[])

    def test_unknown_member_lookup(self):
        result = self.engine.allocate(
            total_cost="10", policy=AllocationPolicy.EQUAL, members=[_member("a")]
        )
        with pytest.raises(KeyError):
            result.allocation_for("zzz")

    def test_completion_logged(self, log_records):
        self.engine.allocate(
            total_cost=Decimal("1000"),
            policy=AllocationPolicy.EQUAL,
            members=[_member("a"), _member("b")],
        )

        completed = [r for r in log_records() if r["message"] == "allocation_completed"]
        assert completed[0]["policy"] == "equal"
        assert completed[0]["total_allocated"] == "1000"
        assert "duration_ms" in completed[0]
