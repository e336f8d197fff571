"""
DisputePilot Settlement Runner

Submits a DistributionPlan to the SettlementExecutor, one instruction at
a time, in plan order. A failed or skipped instruction never stops the
rest, and never reopens the reclamation: every outcome goes to the
ReconciliationLedger so unsettled transfers can be followed up
out-of-band.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..directories import SettlementExecutor
from ..models import (
    DistributionPlan,
    SettlementInstruction,
    SettlementOutcome,
    SettlementReport,
    SettlementStatus,
    utc_now,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Reconciliation Ledger
# =============================================================================

class ReconciliationLedger:
    """
    Append-only record of every settlement attempt.

    Thread-safe; resolutions of different reclamations may record
    concurrently.
    """

    def __init__(self) -> None:
        self._entries: list[SettlementOutcome] = []
        self._lock = threading.Lock()

    def record(self, outcome: SettlementOutcome) -> None:
        with self._lock:
            self._entries.append(outcome)

    def entries(self, reclamation_id: Optional[int] = None) -> list[SettlementOutcome]:
        with self._lock:
            entries = list(self._entries)
        if reclamation_id is None:
            return entries
        return [e for e in entries if e.reclamation_id == reclamation_id]

    def unsettled(self, reclamation_id: Optional[int] = None) -> list[SettlementOutcome]:
        """Failed and skipped transfers awaiting reconciliation."""
        return [e for e in self.entries(reclamation_id) if e.needs_reconciliation]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# =============================================================================
# Runner
# =============================================================================

class SettlementRunner:
    """
    Executes plans against a SettlementExecutor.

    Usage:
        runner = SettlementRunner(executor, ledger)
        report = runner.execute(plan, reclamation_id=12)
        if not report.fully_settled:
            ledger.unsettled(12)
    """

    def __init__(
        self,
        executor: SettlementExecutor,
        ledger: Optional[ReconciliationLedger] = None,
        clock: Callable = utc_now,
    ) -> None:
        self.executor = executor
        self.ledger = ledger if ledger is not None else ReconciliationLedger()
        self._clock = clock

    def execute(self, plan: DistributionPlan, reclamation_id: Optional[int] = None) -> SettlementReport:
        report = SettlementReport(reclamation_id=reclamation_id)
        for instruction in plan.instructions:
            outcome = self._submit(instruction, reclamation_id)
            self.ledger.record(outcome)
            report.outcomes.append(outcome)

        if report.fully_settled:
            logger.info(
                "Settled %d instructions for reclamation %s (plan %s)",
                len(report.outcomes), reclamation_id, plan.plan_hash[:12],
                extra={"reclamation_id": reclamation_id, "booking_id": plan.booking_id},
            )
        else:
            logger.error(
                "Reclamation %s partially settled: %d failed, %d skipped",
                reclamation_id, len(report.failed), len(report.skipped),
                extra={"reclamation_id": reclamation_id, "booking_id": plan.booking_id},
            )
        return report

    def _submit(
        self,
        instruction: SettlementInstruction,
        reclamation_id: Optional[int],
    ) -> SettlementOutcome:
        log_extra = {
            "reclamation_id": reclamation_id,
            "booking_id": instruction.booking_id,
            "party": instruction.party.value,
            "pool": instruction.pool.value,
            "amount": str(instruction.amount),
        }

        if not instruction.recipient_address:
            logger.error(
                "No wallet for %s; %s %s not sent",
                instruction.party.value, instruction.amount, instruction.pool.value,
                extra=log_extra,
            )
            return SettlementOutcome(
                reclamation_id=reclamation_id,
                instruction=instruction,
                status=SettlementStatus.SKIPPED,
                error=f"No wallet address for {instruction.party.value}",
                attempted_at=self._clock(),
            )

        try:
            tx_id = self.executor.transfer(
                instruction.booking_id,
                instruction.recipient_address,
                instruction.amount,
                instruction.pool,
            )
        except Exception as e:  # the decision stands; failures go to reconciliation
            logger.error(
                "Transfer %d to %s failed: %s",
                instruction.sequence, instruction.party.value, e,
                extra=log_extra,
            )
            return SettlementOutcome(
                reclamation_id=reclamation_id,
                instruction=instruction,
                status=SettlementStatus.FAILED,
                error=str(e),
                attempted_at=self._clock(),
            )

        logger.info(
            "Transfer %d: %s %s to %s (%s)",
            instruction.sequence, instruction.amount, instruction.pool.value,
            instruction.party.value, tx_id,
            extra=log_extra,
        )
        return SettlementOutcome(
            reclamation_id=reclamation_id,
            instruction=instruction,
            status=SettlementStatus.SUCCEEDED,
            tx_id=tx_id,
            attempted_at=self._clock(),
        )
