"""
Tests for the fund distribution planner.

Tests cover:
- Case selection
- Instruction amounts, parties, pools and order per case
- Pool conservation
- Zero-amount omission and missing wallets
"""
import pytest
from decimal import Decimal

from disputepilot.engine import DistributionPlanner, PenaltyCalculator, select_case
from disputepilot.matrix import DEFAULT_PENALTY_MATRIX
from disputepilot.models import (
    ComplainantRole,
    DistributionCase,
    Party,
    PartyWallets,
    PoolSource,
    ReclamationType,
    Severity,
)

from tests.helpers import (
    GUEST_WALLET,
    HOST_WALLET,
    PLATFORM_WALLET,
    make_booking,
)


G = ComplainantRole.GUEST
H = ComplainantRole.HOST
T = ReclamationType
WALLETS = PartyWallets(guest=GUEST_WALLET, host=HOST_WALLET)


def planner(fee_rate: str = "0.10") -> DistributionPlanner:
    return DistributionPlanner(platform_wallet=PLATFORM_WALLET, fee_rate=Decimal(fee_rate))


def summary(plan):
    """(party, amount, pool) triples in plan order."""
    return [(i.party, str(i.amount), i.pool) for i in plan.instructions]


# =============================================================================
# Case Selection
# =============================================================================

class TestSelectCase:

    @pytest.mark.parametrize("role,rtype,expected", [
        (G, T.ACCESS_ISSUE, DistributionCase.FULL_REFUND),
        (G, T.NOT_AS_DESCRIBED, DistributionCase.FULL_REFUND),
        (G, T.CLEANLINESS, DistributionCase.GUEST_REFUND_WITH_DEPOSIT),
        (G, T.SAFETY_HEALTH, DistributionCase.GUEST_REFUND_WITH_DEPOSIT),
        (G, T.PROPERTY_DAMAGE, DistributionCase.FALLBACK_GUEST_REFUND),
        (H, T.PROPERTY_DAMAGE, DistributionCase.HOST_RECLAMATION),
        (H, T.HOUSE_RULE_VIOLATION, DistributionCase.HOST_RECLAMATION),
        (H, T.CLEANLINESS, DistributionCase.HOST_RECLAMATION),
    ])
    def test_case_selected_by_role_and_type(self, role, rtype, expected):
        assert select_case(role, rtype) is expected


# =============================================================================
# Full Refund
# =============================================================================

class TestFullRefund:

    def test_guest_receives_both_pools(self):
        plan = planner().plan(make_booking(), G, T.ACCESS_ISSUE, "1500.00", WALLETS)

        assert summary(plan) == [
            (Party.GUEST, "1000.00", PoolSource.RENT),
            (Party.GUEST, "500.00", PoolSource.DEPOSIT),
        ]
        assert plan.total_to(Party.PLATFORM) == Decimal("0.00")
        assert plan.conserves_pools

    def test_zero_deposit_omits_deposit_instruction(self):
        plan = planner().plan(make_booking(deposit="0"), G, T.NOT_AS_DESCRIBED, "1000.00", WALLETS)

        assert summary(plan) == [(Party.GUEST, "1000.00", PoolSource.RENT)]
        assert plan.conserves_pools


# =============================================================================
# Guest Refund With Deposit
# =============================================================================

class TestGuestRefundWithDeposit:

    def test_cleanliness_high_example(self):
        """Refund 825.00 on rent 1000.00 / deposit 500.00."""
        plan = planner().plan(make_booking(), G, T.CLEANLINESS, "825.00", WALLETS)

        assert summary(plan) == [
            (Party.GUEST, "500.00", PoolSource.DEPOSIT),
            (Party.GUEST, "325.00", PoolSource.RENT),
            (Party.PLATFORM, "32.50", PoolSource.RENT),
            (Party.HOST, "642.50", PoolSource.RENT),
        ]
        assert plan.total_for(PoolSource.RENT) == Decimal("1000.00")
        assert plan.total_for(PoolSource.DEPOSIT) == Decimal("500.00")
        assert plan.total_to(Party.GUEST) == Decimal("825.00")

    def test_platform_wallet_is_injected(self):
        plan = planner().plan(make_booking(), G, T.CLEANLINESS, "825.00", WALLETS)
        platform = [i for i in plan.instructions if i.party is Party.PLATFORM]
        assert platform[0].recipient_address == PLATFORM_WALLET

    def test_rent_portion_capped_at_rent(self):
        """SAFETY_HEALTH/CRITICAL refunds all rent; nothing is left for fee or host."""
        plan = planner().plan(make_booking(), G, T.SAFETY_HEALTH, "1500.00", WALLETS)

        assert summary(plan) == [
            (Party.GUEST, "500.00", PoolSource.DEPOSIT),
            (Party.GUEST, "1000.00", PoolSource.RENT),
        ]
        assert plan.conserves_pools

    def test_refund_below_deposit(self):
        """No rent portion: the host keeps all rent."""
        plan = planner().plan(make_booking(), G, T.CLEANLINESS, "300.00", WALLETS)

        assert summary(plan) == [
            (Party.GUEST, "500.00", PoolSource.DEPOSIT),
            (Party.HOST, "1000.00", PoolSource.RENT),
        ]
        assert plan.conserves_pools

    def test_fee_never_exceeds_remaining_rent(self):
        """Rent portion 990.00 leaves 10.00; the 99.00 fee is cut to 10.00."""
        plan = planner().plan(make_booking(), G, T.SAFETY_HEALTH, "1490.00", WALLETS)

        assert summary(plan) == [
            (Party.GUEST, "500.00", PoolSource.DEPOSIT),
            (Party.GUEST, "990.00", PoolSource.RENT),
            (Party.PLATFORM, "10.00", PoolSource.RENT),
        ]
        assert plan.conserves_pools

    def test_odd_amounts_conserve_to_the_cent(self):
        booking = make_booking(rent="333.33", deposit="111.11")
        refund = PenaltyCalculator().calculate(
            T.CLEANLINESS, Severity.HIGH, G, booking.rent_total, booking.deposit_total,
        ).refund_amount

        plan = planner().plan(booking, G, T.CLEANLINESS, refund, WALLETS)

        assert refund == Decimal("219.44")
        assert summary(plan) == [
            (Party.GUEST, "111.11", PoolSource.DEPOSIT),
            (Party.GUEST, "108.33", PoolSource.RENT),
            (Party.PLATFORM, "10.83", PoolSource.RENT),
            (Party.HOST, "214.17", PoolSource.RENT),
        ]
        assert plan.conserves_pools


# =============================================================================
# Host Reclamation
# =============================================================================

class TestHostReclamation:

    def test_property_damage_critical(self):
        """Whole deposit to host; zero remainder to guest is omitted."""
        plan = planner().plan(make_booking(), H, T.PROPERTY_DAMAGE, "500.00", WALLETS)

        assert summary(plan) == [
            (Party.HOST, "900.00", PoolSource.RENT),
            (Party.PLATFORM, "100.00", PoolSource.RENT),
            (Party.HOST, "500.00", PoolSource.DEPOSIT),
        ]
        assert plan.conserves_pools

    def test_partial_deposit_penalty(self):
        plan = planner().plan(make_booking(), H, T.EXTRA_CLEANING, "37.50", WALLETS)

        assert summary(plan) == [
            (Party.HOST, "900.00", PoolSource.RENT),
            (Party.PLATFORM, "100.00", PoolSource.RENT),
            (Party.HOST, "37.50", PoolSource.DEPOSIT),
            (Party.GUEST, "462.50", PoolSource.DEPOSIT),
        ]

    def test_rent_split_planned_for_zero_refund(self):
        """A warning-only approval still pays out rent and returns the deposit."""
        plan = planner().plan(make_booking(), H, T.HOUSE_RULE_VIOLATION, "0.00", WALLETS)

        assert summary(plan) == [
            (Party.HOST, "900.00", PoolSource.RENT),
            (Party.PLATFORM, "100.00", PoolSource.RENT),
            (Party.GUEST, "500.00", PoolSource.DEPOSIT),
        ]
        assert plan.conserves_pools

    def test_zero_fee_rate(self):
        plan = planner("0").plan(make_booking(), H, T.PROPERTY_DAMAGE, "150.00", WALLETS)

        assert plan.total_to(Party.PLATFORM) == Decimal("0.00")
        assert summary(plan)[0] == (Party.HOST, "1000.00", PoolSource.RENT)


# =============================================================================
# Fallback Guest Refund
# =============================================================================

class TestFallbackGuestRefund:

    def test_refund_with_embedded_fee(self):
        """90.00 net of a 10% fee is 100.00 gross; 10.00 goes to the platform."""
        plan = planner().plan(make_booking(), G, T.PROPERTY_DAMAGE, "90.00", WALLETS)

        assert plan.case is DistributionCase.FALLBACK_GUEST_REFUND
        assert summary(plan) == [
            (Party.GUEST, "90.00", PoolSource.RENT),
            (Party.PLATFORM, "10.00", PoolSource.RENT),
        ]

    def test_zero_refund_is_empty_plan(self):
        plan = planner().plan(make_booking(), G, T.HOUSE_RULE_VIOLATION, "0", WALLETS)
        assert plan.is_empty


# =============================================================================
# Plan Properties
# =============================================================================

class TestPlanProperties:

    @pytest.mark.parametrize(
        "key",
        [key for key, _ in DEFAULT_PENALTY_MATRIX],
        ids=lambda k: f"{k[0].value}-{k[1].value}-{k[2].value}",
    )
    def test_every_matrix_cell_conserves_pools(self, key):
        role, rtype, severity = key
        booking = make_booking(rent="1234.56", deposit="789.01")
        refund = PenaltyCalculator().calculate(
            rtype, severity, role, booking.rent_total, booking.deposit_total,
        ).refund_amount

        plan = planner().plan(booking, role, rtype, refund, WALLETS)

        assert plan.conserves_pools
        assert all(i.amount > 0 for i in plan.instructions)

    def test_sequence_numbers_are_contiguous(self):
        plan = planner().plan(make_booking(), G, T.CLEANLINESS, "825.00", WALLETS)
        assert [i.sequence for i in plan.instructions] == [1, 2, 3, 4]
        assert all(i.booking_id == 7 for i in plan.instructions)

    def test_missing_wallet_kept_without_address(self):
        wallets = PartyWallets(guest=None, host=HOST_WALLET)
        plan = planner().plan(make_booking(), G, T.ACCESS_ISSUE, "1500.00", wallets)

        assert len(plan.instructions) == 2
        assert all(i.recipient_address is None for i in plan.instructions)

    def test_plan_hash_is_deterministic(self):
        a = planner().plan(make_booking(), G, T.CLEANLINESS, "825.00", WALLETS)
        b = planner().plan(make_booking(), G, T.CLEANLINESS, "825.00", WALLETS)
        assert a.plan_hash == b.plan_hash

    def test_negative_refund_rejected(self):
        with pytest.raises(ValueError):
            planner().plan(make_booking(), G, T.CLEANLINESS, "-1", WALLETS)

    @pytest.mark.parametrize("rate", ["1", "-0.1", "1.5"])
    def test_invalid_fee_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            planner(rate)
