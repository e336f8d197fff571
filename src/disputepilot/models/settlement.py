"""
DisputePilot Settlement Models

Models for the fund distribution plan and its execution.

Key components:
- PartyWallets: Resolved wallet addresses of guest and host
- SettlementInstruction: One planned transfer (recipient, amount, pool)
- DistributionPlan: Ordered instructions for one approved reclamation
- SettlementOutcome / SettlementReport: What the executor did with them
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from ..canon import content_hash, money_sum
from .enums import DistributionCase, Party, PoolSource, SettlementStatus


# =============================================================================
# Plan
# =============================================================================

@dataclass(frozen=True)
class PartyWallets:
    """Wallet addresses of the booking parties. None when unknown."""
    guest: Optional[str] = None
    host: Optional[str] = None


@dataclass(frozen=True)
class SettlementInstruction:
    """
    A single planned transfer.

    Attributes:
        sequence: Position in the plan (1-based); execution order
        party: Who receives the funds
        recipient_address: Wallet; None means the transfer cannot be sent
        amount: Positive, 2-decimal
        pool: Money pool the transfer draws from
        memo: Short description for logs and reconciliation
    """
    sequence: int
    booking_id: int
    party: Party
    recipient_address: Optional[str]
    amount: Decimal
    pool: PoolSource
    memo: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "booking_id": self.booking_id,
            "party": self.party.value,
            "recipient_address": self.recipient_address,
            "amount": str(self.amount),
            "pool": self.pool.value,
            "memo": self.memo,
        }


@dataclass
class DistributionPlan:
    """
    Ordered settlement instructions for one reclamation.

    For the full-refund, guest-refund-with-deposit and host cases the
    rent-sourced amounts sum to rent_total and the deposit-sourced amounts
    sum to deposit_total. The fallback case moves only the refund.
    """
    booking_id: int
    case: Optional[DistributionCase]
    refund_amount: Decimal
    rent_total: Decimal
    deposit_total: Decimal
    instructions: list[SettlementInstruction] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.instructions

    def total_for(self, pool: PoolSource) -> Decimal:
        return money_sum(i.amount for i in self.instructions if i.pool is pool)

    def total_to(self, party: Party) -> Decimal:
        return money_sum(i.amount for i in self.instructions if i.party is party)

    def is_balanced(self, pool: PoolSource) -> bool:
        """Check that the instructions drawing on a pool exhaust it exactly."""
        expected = self.rent_total if pool is PoolSource.RENT else self.deposit_total
        return self.total_for(pool) == expected

    @property
    def conserves_pools(self) -> bool:
        return self.is_balanced(PoolSource.RENT) and self.is_balanced(PoolSource.DEPOSIT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "case": self.case.value if self.case else None,
            "refund_amount": str(self.refund_amount),
            "rent_total": str(self.rent_total),
            "deposit_total": str(self.deposit_total),
            "instructions": [i.to_dict() for i in self.instructions],
        }

    @property
    def plan_hash(self) -> str:
        return content_hash(self.to_dict())


# =============================================================================
# Execution
# =============================================================================

@dataclass(frozen=True)
class SettlementOutcome:
    """Result of submitting one instruction."""
    reclamation_id: Optional[int]
    instruction: SettlementInstruction
    status: SettlementStatus
    tx_id: Optional[str] = None
    error: Optional[str] = None
    attempted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def needs_reconciliation(self) -> bool:
        return self.status is not SettlementStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "reclamation_id": self.reclamation_id,
            "instruction": self.instruction.to_dict(),
            "status": self.status.value,
            "attempted_at": self.attempted_at.isoformat(),
        }
        if self.tx_id:
            result["tx_id"] = self.tx_id
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class SettlementReport:
    """Outcomes of executing a whole plan, in plan order."""
    reclamation_id: Optional[int]
    outcomes: list[SettlementOutcome] = field(default_factory=list)

    def _with_status(self, status: SettlementStatus) -> list[SettlementOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def succeeded(self) -> list[SettlementOutcome]:
        return self._with_status(SettlementStatus.SUCCEEDED)

    @property
    def failed(self) -> list[SettlementOutcome]:
        return self._with_status(SettlementStatus.FAILED)

    @property
    def skipped(self) -> list[SettlementOutcome]:
        return self._with_status(SettlementStatus.SKIPPED)

    @property
    def fully_settled(self) -> bool:
        return all(not o.needs_reconciliation for o in self.outcomes)

    @property
    def settled_amount(self) -> Decimal:
        return money_sum(o.instruction.amount for o in self.succeeded)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reclamation_id": self.reclamation_id,
            "fully_settled": self.fully_settled,
            "settled_amount": str(self.settled_amount),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
