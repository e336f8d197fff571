"""
DisputePilot Fund Distribution Planner

Splits an approved reclamation's refund across guest, host and platform,
as an ordered list of settlement instructions drawing on the booking's
rent and deposit pools.

Cases, selected by (role, type):
1. FULL_REFUND (guest; ACCESS_ISSUE, NOT_AS_DESCRIBED)
   Guest receives all rent and all deposit. No platform fee.
2. GUEST_REFUND_WITH_DEPOSIT (guest; CLEANLINESS, SAFETY_HEALTH)
   Guest receives the deposit and the rent portion of the refund. The
   platform fee is levied on that rent portion; the host keeps the rest.
3. HOST_RECLAMATION (host; any type)
   Rent splits host / platform fee. Deposit splits refund to host,
   remainder to guest.
4. FALLBACK_GUEST_REFUND (any other guest case)
   Refund from rent to guest, plus the embedded platform fee.

Every amount is rounded half-up to cents before it enters the plan, and
zero-valued instructions are omitted. In cases 1-3 the rent instructions
sum to the rent pool and the deposit instructions to the deposit pool.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..canon import ZERO, MoneyInput, to_money
from ..models import (
    DEPOSIT_PLUS_RENT_TYPES,
    FULL_REFUND_TYPES,
    BookingFacts,
    ComplainantRole,
    DistributionCase,
    DistributionPlan,
    Party,
    PartyWallets,
    PoolSource,
    ReclamationType,
    SettlementInstruction,
)

logger = logging.getLogger(__name__)

DEFAULT_FEE_RATE = Decimal("0.10")


def select_case(role: ComplainantRole, type: ReclamationType) -> DistributionCase:
    if role is ComplainantRole.HOST:
        return DistributionCase.HOST_RECLAMATION
    if type in FULL_REFUND_TYPES:
        return DistributionCase.FULL_REFUND
    if type in DEPOSIT_PLUS_RENT_TYPES:
        return DistributionCase.GUEST_REFUND_WITH_DEPOSIT
    return DistributionCase.FALLBACK_GUEST_REFUND


class _PlanBuilder:
    """Accumulates instructions, skipping zero amounts and numbering the rest."""

    def __init__(self, booking_id: int) -> None:
        self.booking_id = booking_id
        self.instructions: list[SettlementInstruction] = []

    def add(
        self,
        party: Party,
        address: Optional[str],
        amount: Decimal,
        pool: PoolSource,
        memo: str,
    ) -> None:
        if amount <= 0:
            return
        self.instructions.append(SettlementInstruction(
            sequence=len(self.instructions) + 1,
            booking_id=self.booking_id,
            party=party,
            recipient_address=address,
            amount=amount,
            pool=pool,
            memo=memo,
        ))


@dataclass
class DistributionPlanner:
    """
    Builds DistributionPlans.

    The platform wallet and fee rate are injected, never inlined.

    Usage:
        planner = DistributionPlanner(platform_wallet="0xPLATFORM")
        plan = planner.plan(
            booking=booking,
            role=ComplainantRole.GUEST,
            type=ReclamationType.CLEANLINESS,
            refund_amount=Decimal("825.00"),
            wallets=PartyWallets(guest="0xGUEST", host="0xHOST"),
        )
    """
    platform_wallet: str
    fee_rate: Decimal = DEFAULT_FEE_RATE

    def __post_init__(self) -> None:
        self.fee_rate = Decimal(self.fee_rate)
        if not (ZERO <= self.fee_rate < 1):
            raise ValueError(f"fee_rate must be in [0, 1), got {self.fee_rate}")
        if not self.platform_wallet:
            raise ValueError("platform_wallet is required")

    def fee_on(self, amount: Decimal) -> Decimal:
        return to_money(amount * self.fee_rate)

    def plan(
        self,
        booking: BookingFacts,
        role: ComplainantRole,
        type: ReclamationType,
        refund_amount: MoneyInput,
        wallets: PartyWallets,
    ) -> DistributionPlan:
        """
        Plan the transfers for one approved reclamation.

        Raises:
            ValueError: Negative refund
        """
        refund = to_money(refund_amount)
        if refund < 0:
            raise ValueError(f"refund_amount must be non-negative, got {refund}")

        case = select_case(role, type)
        builder = _PlanBuilder(booking.booking_id)

        if case is DistributionCase.FULL_REFUND:
            self._full_refund(builder, booking, wallets)
        elif case is DistributionCase.GUEST_REFUND_WITH_DEPOSIT:
            self._guest_refund_with_deposit(builder, booking, refund, wallets)
        elif case is DistributionCase.HOST_RECLAMATION:
            self._host_reclamation(builder, booking, refund, wallets)
        else:
            self._fallback_guest_refund(builder, booking, refund, wallets)

        plan = DistributionPlan(
            booking_id=booking.booking_id,
            case=case,
            refund_amount=refund,
            rent_total=booking.rent_total,
            deposit_total=booking.deposit_total,
            instructions=builder.instructions,
        )
        logger.debug(
            "Planned %d instructions for booking %s (%s)",
            len(plan.instructions), booking.booking_id, case.value,
            extra={"booking_id": booking.booking_id},
        )
        return plan

    # =========================================================================
    # Cases
    # =========================================================================

    def _full_refund(
        self,
        builder: _PlanBuilder,
        booking: BookingFacts,
        wallets: PartyWallets,
    ) -> None:
        builder.add(Party.GUEST, wallets.guest, booking.rent_total, PoolSource.RENT,
                    "full refund (rent)")
        builder.add(Party.GUEST, wallets.guest, booking.deposit_total, PoolSource.DEPOSIT,
                    "full refund (deposit)")

    def _guest_refund_with_deposit(
        self,
        builder: _PlanBuilder,
        booking: BookingFacts,
        refund: Decimal,
        wallets: PartyWallets,
    ) -> None:
        rent = booking.rent_total
        # Capped so the rent instructions never exceed the rent pool
        rent_portion = min(max(refund - booking.deposit_total, ZERO), rent)
        fee = min(self.fee_on(rent_portion), rent - rent_portion)
        host_share = rent - rent_portion - fee

        builder.add(Party.GUEST, wallets.guest, booking.deposit_total, PoolSource.DEPOSIT,
                    "deposit returned")
        builder.add(Party.GUEST, wallets.guest, rent_portion, PoolSource.RENT,
                    "rent refund")
        builder.add(Party.PLATFORM, self.platform_wallet, fee, PoolSource.RENT,
                    "platform fee")
        builder.add(Party.HOST, wallets.host, host_share, PoolSource.RENT,
                    "rent remainder")

    def _host_reclamation(
        self,
        builder: _PlanBuilder,
        booking: BookingFacts,
        refund: Decimal,
        wallets: PartyWallets,
    ) -> None:
        rent = booking.rent_total
        fee = self.fee_on(rent)
        penalty = min(refund, booking.deposit_total)

        builder.add(Party.HOST, wallets.host, rent - fee, PoolSource.RENT,
                    "rent payout")
        builder.add(Party.PLATFORM, self.platform_wallet, fee, PoolSource.RENT,
                    "platform fee")
        builder.add(Party.HOST, wallets.host, penalty, PoolSource.DEPOSIT,
                    "deposit penalty")
        builder.add(Party.GUEST, wallets.guest, booking.deposit_total - penalty,
                    PoolSource.DEPOSIT, "deposit remainder")

    def _fallback_guest_refund(
        self,
        builder: _PlanBuilder,
        booking: BookingFacts,
        refund: Decimal,
        wallets: PartyWallets,
    ) -> None:
        rent = booking.rent_total
        guest_amount = min(refund, rent)
        # The refund is net of the fee; recover the gross and route the difference
        gross = to_money(guest_amount / (1 - self.fee_rate))
        fee = min(gross - guest_amount, rent - guest_amount)

        builder.add(Party.GUEST, wallets.guest, guest_amount, PoolSource.RENT,
                    "refund")
        builder.add(Party.PLATFORM, self.platform_wallet, fee, PoolSource.RENT,
                    "platform fee")
