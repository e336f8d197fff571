"""
DisputePilot Reclamation State Machine

Governs the reclamation lifecycle:

    OPEN -> IN_REVIEW -> {RESOLVED, REJECTED}

Key features:
- Transition table; RESOLVED and REJECTED are terminal
- Idempotent review marker
- resolved_at set exactly once, on the first terminal transition
- Filer and status checks for edits and withdrawals
- Per-reclamation critical sections plus an in-flight registry, so a
  resolution can run its external calls without holding the lock while
  still excluding a second resolve of the same reclamation
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterator, Optional

from ..canon import to_money
from ..exceptions import ConflictError
from ..models import Reclamation, ReclamationStatus, utc_now
from .locks import KeyedLock

logger = logging.getLogger(__name__)


# =============================================================================
# Transition Table
# =============================================================================

TRANSITIONS: dict[ReclamationStatus, frozenset[ReclamationStatus]] = {
    ReclamationStatus.OPEN: frozenset({
        ReclamationStatus.IN_REVIEW,
        ReclamationStatus.RESOLVED,
        ReclamationStatus.REJECTED,
    }),
    ReclamationStatus.IN_REVIEW: frozenset({
        ReclamationStatus.IN_REVIEW,
        ReclamationStatus.RESOLVED,
        ReclamationStatus.REJECTED,
    }),
    ReclamationStatus.RESOLVED: frozenset(),
    ReclamationStatus.REJECTED: frozenset(),
}

EDITABLE_STATUSES = frozenset({ReclamationStatus.OPEN, ReclamationStatus.IN_REVIEW})


def can_transition(current: ReclamationStatus, target: ReclamationStatus) -> bool:
    return target in TRANSITIONS[current]


# =============================================================================
# State Machine
# =============================================================================

class ReclamationStateMachine:
    """
    Applies lifecycle transitions to Reclamation records.

    The machine mutates the record it is given; persisting it is the
    caller's job. Locking is keyed on reclamation id: operations on
    different reclamations never contend.

    Usage:
        machine = ReclamationStateMachine()

        with machine.locked(rec.id):
            machine.claim(rec)          # ConflictError if terminal or in flight
        try:
            ...                         # external lookups, no lock held
            with machine.locked(rec.id):
                machine.terminate(rec, approved=True, notes="ok",
                                  refund_amount=refund, penalty_points=points)
        finally:
            machine.release(rec.id)
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._registry_lock = threading.Lock()
        self._locks = KeyedLock()
        self._in_flight: set[int] = set()

    # -------------------------------------------------------------------------
    # Locking
    # -------------------------------------------------------------------------

    @contextmanager
    def locked(self, reclamation_id: int) -> Iterator[None]:
        """Critical section for one reclamation's state."""
        with self._locks.locked(reclamation_id):
            yield

    @property
    def active_locks(self) -> int:
        """Reclamations with a critical section currently held or awaited."""
        return len(self._locks)

    def is_in_flight(self, reclamation_id: int) -> bool:
        with self._registry_lock:
            return reclamation_id in self._in_flight

    def claim(self, reclamation: Reclamation) -> None:
        """
        Reserve a reclamation for resolution. Call while holding locked().

        Raises:
            ConflictError: Already terminal, or another resolution is running
        """
        self.ensure_not_terminal(reclamation, "resolve")
        with self._registry_lock:
            if reclamation.id in self._in_flight:
                raise ConflictError(
                    message="Reclamation is already being resolved",
                    reclamation_id=reclamation.id,
                )
            self._in_flight.add(reclamation.id)

    def release(self, reclamation_id: int) -> None:
        with self._registry_lock:
            self._in_flight.discard(reclamation_id)

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def ensure_not_terminal(self, reclamation: Reclamation, action: str) -> None:
        if reclamation.is_terminal:
            raise ConflictError(
                message=f"Cannot {action} a reclamation with status {reclamation.status.value}",
                details={"status": reclamation.status.value, "action": action},
                reclamation_id=reclamation.id,
            )

    def ensure_idle(self, reclamation: Reclamation, action: str) -> None:
        """Reject any change while a resolution of this reclamation is running."""
        if reclamation.id is not None and self.is_in_flight(reclamation.id):
            raise ConflictError(
                message=f"Cannot {action} a reclamation while it is being resolved",
                details={"action": action},
                reclamation_id=reclamation.id,
            )

    def ensure_editable_by(self, reclamation: Reclamation, user_id: int, action: str) -> None:
        """
        Only the filer may edit or withdraw, and only before resolution.

        Raises:
            ConflictError: Wrong user, terminal status, or resolution in flight
        """
        if reclamation.complainant_id != user_id:
            raise ConflictError(
                message=f"You can only {action} your own reclamations",
                details={"user_id": user_id, "action": action},
                reclamation_id=reclamation.id,
            )
        if reclamation.status not in EDITABLE_STATUSES:
            raise ConflictError(
                message=(
                    f"Cannot {action} reclamation with status "
                    f"{reclamation.status.value}. Only OPEN or IN_REVIEW "
                    f"reclamations can be changed."
                ),
                details={"status": reclamation.status.value, "action": action},
                reclamation_id=reclamation.id,
            )
        self.ensure_idle(reclamation, action)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def review(self, reclamation: Reclamation) -> bool:
        """
        Mark adjudication as started.

        Returns:
            True if the status changed, False if already IN_REVIEW

        Raises:
            ConflictError: Terminal reclamation
        """
        self.ensure_not_terminal(reclamation, "review")
        self.ensure_idle(reclamation, "review")
        if reclamation.status is ReclamationStatus.IN_REVIEW:
            return False
        reclamation.status = ReclamationStatus.IN_REVIEW
        reclamation.touch(self._clock())
        logger.info(
            "Reclamation %s moved to IN_REVIEW", reclamation.id,
            extra={"reclamation_id": reclamation.id},
        )
        return True

    def terminate(
        self,
        reclamation: Reclamation,
        approved: bool,
        notes: Optional[str] = None,
        refund_amount: Decimal = Decimal("0"),
        penalty_points: int = 0,
    ) -> None:
        """
        Move to RESOLVED (approved) or REJECTED and record the decision.

        Raises:
            ConflictError: The transition is not allowed from the current status
        """
        target = ReclamationStatus.RESOLVED if approved else ReclamationStatus.REJECTED
        if not can_transition(reclamation.status, target):
            raise ConflictError(
                message=(
                    f"Cannot move reclamation from {reclamation.status.value} "
                    f"to {target.value}"
                ),
                reclamation_id=reclamation.id,
            )
        if penalty_points < 0:
            raise ValueError(f"penalty_points must be non-negative, got {penalty_points}")

        now = self._clock()
        reclamation.status = target
        reclamation.resolution_notes = notes
        reclamation.refund_amount = to_money(refund_amount) if approved else to_money(0)
        reclamation.penalty_points = penalty_points if approved else 0
        if reclamation.resolved_at is None:
            reclamation.resolved_at = now
        reclamation.touch(now)
        logger.info(
            "Reclamation %s %s", reclamation.id, target.value,
            extra={"reclamation_id": reclamation.id, "booking_id": reclamation.booking_id},
        )
