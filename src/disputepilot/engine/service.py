"""
DisputePilot Reclamation Service

Orchestrates the reclamation lifecycle over the engine components and
the external collaborators.

Key components:
- Filing, editing and withdrawing reclamations (filer-owned fields)
- Adjudication: review, severity, approve/reject
- Approval pipeline: penalty -> distribution plan -> durable decision ->
  settlement -> reputation -> booking updates
- Queries and per-user statistics

Ordering guarantees for resolve():
- Everything that can fail the decision (booking pools, state checks)
  happens before the terminal state is persisted
- Nothing that happens after (settlement, penalty points, booking
  updates) can roll the decision back
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Sequence

from ..config import EngineSettings
from ..exceptions import (
    AccountNotFoundError,
    ReclamationNotFoundError,
    ReclamationValidationError,
)
from ..models import (
    Attachment,
    AttachmentUpload,
    BookingFacts,
    ComplainantRole,
    DistributionPlan,
    PartyWallets,
    PenaltyResult,
    Reclamation,
    ReclamationStats,
    ReclamationStatus,
    ReclamationType,
    ResolutionOutcome,
    Severity,
)
from ..directories import (
    AccountDirectory,
    AttachmentStore,
    BookingDirectory,
    PropertyOwnerSource,
    ReclamationRepository,
    SettlementExecutor,
)
from ..matrix import resolve_matrix
from .counterparty_resolver import CounterpartyResolver
from .distribution_planner import DistributionPlanner
from .penalty_calculator import PenaltyCalculator
from .reputation import ReputationEngine
from .settlement_runner import ReconciliationLedger, SettlementRunner
from .state_machine import EDITABLE_STATUSES, ReclamationStateMachine

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTACHMENTS = 3
DEFAULT_PROPERTY_SUSPENSION_POINTS = 15


class ReclamationService:
    """
    Entry point for every reclamation operation.

    Usage:
        service = ReclamationService(
            repository=InMemoryReclamationRepository(),
            bookings=bookings,
            accounts=accounts,
            attachments=InMemoryAttachmentStore(),
            calculator=PenaltyCalculator(),
            planner=DistributionPlanner(platform_wallet=settings.platform_wallet),
            settlement=SettlementRunner(executor),
        )

        rec = service.create_reclamation(
            booking_id=7, complainant_id=3, role=ComplainantRole.GUEST,
            type=ReclamationType.CLEANLINESS, title="Dirty", description="...",
        )
        service.review(rec.id)
        service.update_severity(rec.id, Severity.HIGH)
        outcome = service.resolve(rec.id, approved=True, notes="Photos confirm")
    """

    def __init__(
        self,
        repository: ReclamationRepository,
        bookings: BookingDirectory,
        accounts: AccountDirectory,
        attachments: AttachmentStore,
        calculator: PenaltyCalculator,
        planner: DistributionPlanner,
        settlement: SettlementRunner,
        resolver: Optional[CounterpartyResolver] = None,
        reputation: Optional[ReputationEngine] = None,
        state_machine: Optional[ReclamationStateMachine] = None,
        max_attachments: int = DEFAULT_MAX_ATTACHMENTS,
        property_suspension_points: int = DEFAULT_PROPERTY_SUSPENSION_POINTS,
    ) -> None:
        self.repository = repository
        self.bookings = bookings
        self.accounts = accounts
        self.attachments = attachments
        self.calculator = calculator
        self.planner = planner
        self.settlement = settlement
        self.resolver = resolver or CounterpartyResolver(bookings)
        self.reputation = reputation or ReputationEngine(accounts)
        self.state_machine = state_machine or ReclamationStateMachine()
        self.max_attachments = max_attachments
        self.property_suspension_points = property_suspension_points

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        repository: ReclamationRepository,
        bookings: BookingDirectory,
        accounts: AccountDirectory,
        attachments: AttachmentStore,
        executor: SettlementExecutor,
        ledger: Optional[ReconciliationLedger] = None,
        owner_sources: Optional[Sequence[PropertyOwnerSource]] = None,
    ) -> ReclamationService:
        """Wire a service from EngineSettings, loading the configured matrix pack."""
        return cls(
            repository=repository,
            bookings=bookings,
            accounts=accounts,
            attachments=attachments,
            calculator=PenaltyCalculator(resolve_matrix(settings.penalty_matrix_path)),
            planner=DistributionPlanner(
                platform_wallet=settings.platform_wallet,
                fee_rate=settings.platform_fee_rate,
            ),
            settlement=SettlementRunner(executor, ledger),
            resolver=CounterpartyResolver(bookings, owner_sources),
            max_attachments=settings.max_attachments,
            property_suspension_points=settings.property_suspension_points,
        )

    # =========================================================================
    # Filing
    # =========================================================================

    def create_reclamation(
        self,
        booking_id: int,
        complainant_id: int,
        role: ComplainantRole,
        type: ReclamationType,
        title: str,
        description: str,
    ) -> Reclamation:
        """
        File a new reclamation in OPEN.

        Counterparty resolution is best-effort: an unresolved target is
        logged and the reclamation is still persisted.

        Raises:
            ReclamationValidationError: Blank title or description
        """
        self._require_text("title", title)
        self._require_text("description", description)

        resolution = self.resolver.resolve(booking_id, role)
        if not resolution.resolved:
            logger.error(
                "Filing reclamation on booking %s without a counterparty",
                booking_id, extra={"booking_id": booking_id},
            )

        reclamation = self.repository.add(Reclamation.create(
            booking_id=booking_id,
            complainant_id=complainant_id,
            complainant_role=role,
            type=type,
            title=title,
            description=description,
            target_user_id=resolution.target_user_id,
        ))
        logger.info(
            "Reclamation %s filed by %s user %s against %s",
            reclamation.id, role.value, complainant_id, reclamation.target_user_id,
            extra={"reclamation_id": reclamation.id, "booking_id": booking_id},
        )

        self._best_effort(
            "set active dispute", reclamation,
            lambda: self.bookings.set_active_dispute(booking_id, True),
        )
        return reclamation

    def save_attachments(
        self,
        reclamation_id: int,
        files: Sequence[AttachmentUpload],
    ) -> list[Attachment]:
        """
        Store evidence files for a reclamation.

        Raises:
            ReclamationValidationError: Existing plus new files exceed the cap
        """
        reclamation = self._load(reclamation_id)
        if not files:
            return []
        existing = self.attachments.list_for(reclamation_id)
        self._check_attachment_count(reclamation, len(existing) + len(files))
        next_order = max((a.display_order for a in existing), default=-1) + 1
        return self.attachments.save(reclamation_id, list(files), start_order=next_order)

    def update_reclamation(
        self,
        reclamation_id: int,
        user_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        attachments: Optional[Sequence[AttachmentUpload]] = None,
    ) -> Reclamation:
        """
        Edit the filer-owned fields.

        Blank title or description values are ignored. A provided
        attachment list replaces the stored attachments.

        Raises:
            ConflictError: Not the filer, or reclamation no longer editable
            ReclamationValidationError: Too many attachments
        """
        with self.state_machine.locked(reclamation_id):
            reclamation = self._load(reclamation_id)
            self.state_machine.ensure_editable_by(reclamation, user_id, "update")
            if attachments is not None:
                self._check_attachment_count(reclamation, len(attachments))

            if title and title.strip():
                reclamation.title = title.strip()
            if description and description.strip():
                reclamation.description = description.strip()
            reclamation.touch()
            self.repository.save(reclamation)

            if attachments is not None:
                self.attachments.delete_all(reclamation_id)
                if attachments:
                    self.attachments.save(reclamation_id, list(attachments), start_order=0)

        logger.info(
            "Reclamation %s updated by user %s", reclamation_id, user_id,
            extra={"reclamation_id": reclamation_id},
        )
        return reclamation

    def delete_reclamation(self, reclamation_id: int, user_id: int) -> None:
        """
        Withdraw a reclamation and its attachments.

        Raises:
            ConflictError: Not the filer, or reclamation already decided
        """
        with self.state_machine.locked(reclamation_id):
            reclamation = self._load(reclamation_id)
            self.state_machine.ensure_editable_by(reclamation, user_id, "delete")
            self.attachments.delete_all(reclamation_id)
            self.repository.delete(reclamation_id)

        logger.info(
            "Reclamation %s deleted by user %s", reclamation_id, user_id,
            extra={"reclamation_id": reclamation_id},
        )
        self._best_effort(
            "clear active dispute", reclamation,
            lambda: self.bookings.set_active_dispute(reclamation.booking_id, False),
        )

    # =========================================================================
    # Adjudication
    # =========================================================================

    def review(self, reclamation_id: int) -> Reclamation:
        """Mark adjudication as started. Idempotent on IN_REVIEW."""
        with self.state_machine.locked(reclamation_id):
            reclamation = self._load(reclamation_id)
            if self.state_machine.review(reclamation):
                self.repository.save(reclamation)
        return reclamation

    def update_severity(self, reclamation_id: int, severity: Severity) -> Reclamation:
        """
        Raises:
            ConflictError: Reclamation already decided or being resolved
        """
        with self.state_machine.locked(reclamation_id):
            reclamation = self._load(reclamation_id)
            self.state_machine.ensure_not_terminal(reclamation, "change severity of")
            self.state_machine.ensure_idle(reclamation, "change severity of")
            reclamation.severity = severity
            reclamation.touch()
            self.repository.save(reclamation)
        return reclamation

    def reject(self, reclamation_id: int, notes: Optional[str] = None) -> ResolutionOutcome:
        return self.resolve(reclamation_id, approved=False, notes=notes)

    def resolve(
        self,
        reclamation_id: int,
        approved: bool,
        notes: Optional[str] = None,
    ) -> ResolutionOutcome:
        """
        Decide a reclamation.

        On approval the penalty and distribution plan are computed before the
        RESOLVED state is persisted; settlement and reputation effects follow.
        A second resolve of the same reclamation fails, whether the first is
        still running or finished.

        Raises:
            ReclamationNotFoundError: Unknown id
            ConflictError: Already decided or being decided
            NotFoundError / ResolutionDependencyError: Booking pools unavailable
                (approval only; nothing has changed)
        """
        with self.state_machine.locked(reclamation_id):
            reclamation = self._load(reclamation_id)
            self.state_machine.claim(reclamation)

        try:
            outcome = self._decide(reclamation, approved, notes)
        finally:
            self.state_machine.release(reclamation_id)

        if approved:
            self._apply_effects(outcome)
        self._close_booking(outcome.reclamation)
        return outcome

    def _decide(
        self,
        reclamation: Reclamation,
        approved: bool,
        notes: Optional[str],
    ) -> ResolutionOutcome:
        """Compute and persist the decision. Runs while the reclamation is claimed."""
        outcome = ResolutionOutcome(reclamation=reclamation)
        self._link_counterparty(reclamation, outcome)

        penalty: Optional[PenaltyResult] = None
        plan: Optional[DistributionPlan] = None
        if approved:
            booking = self.bookings.get(reclamation.booking_id)
            if booking.deposit_total == 0:
                logger.error(
                    "Booking %s has no deposit; deposit-based refunds will be zero",
                    booking.booking_id,
                    extra={"reclamation_id": reclamation.id, "booking_id": booking.booking_id},
                )
            penalty = self.calculator.calculate_for(reclamation, booking)
            plan = self.planner.plan(
                booking=booking,
                role=reclamation.complainant_role,
                type=reclamation.type,
                refund_amount=penalty.refund_amount,
                wallets=self._wallets_for(reclamation, booking, outcome),
            )

        with self.state_machine.locked(reclamation.id):
            self.state_machine.terminate(
                reclamation,
                approved=approved,
                notes=notes,
                refund_amount=penalty.refund_amount if penalty else 0,
                penalty_points=penalty.penalty_points if penalty else 0,
            )
            self.repository.save(reclamation)

        outcome.penalty = penalty
        outcome.plan = plan
        return outcome

    def _apply_effects(self, outcome: ResolutionOutcome) -> None:
        """Money and reputation effects of an approval. Never reverts the decision."""
        reclamation = outcome.reclamation
        if outcome.plan is None or outcome.penalty is None:
            return

        outcome.settlement = self.settlement.execute(outcome.plan, reclamation_id=reclamation.id)
        if not outcome.settlement.fully_settled:
            outcome.warnings.append(
                f"{len(outcome.settlement.failed) + len(outcome.settlement.skipped)} "
                f"settlement instructions need reconciliation"
            )

        points = outcome.penalty.penalty_points
        if points <= 0:
            return

        if reclamation.target_user_id is None:
            logger.error(
                "Cannot apply %d penalty points to reclamation %s: no counterparty",
                points, reclamation.id,
                extra={"reclamation_id": reclamation.id},
            )
            outcome.warnings.append("penalty points not applied: counterparty unresolved")
            return

        try:
            self.reputation.deduct_penalty_points(reclamation.target_user_id, points)
        except AccountNotFoundError as e:
            logger.error(
                "Penalty points for reclamation %s not applied: %s", reclamation.id, e,
                extra={"reclamation_id": reclamation.id},
            )
            outcome.warnings.append(f"penalty points not applied: {e.message}")
            return
        outcome.penalty_applied = True

        if (
            reclamation.complainant_role is ComplainantRole.GUEST
            and points >= self.property_suspension_points
        ):
            outcome.property_suspension_recommended = True
            logger.warning(
                "Property of booking %s should be suspended due to host penalty points: %d",
                reclamation.booking_id, points,
                extra={"reclamation_id": reclamation.id, "booking_id": reclamation.booking_id},
            )

    def _close_booking(self, reclamation: Reclamation) -> None:
        self._best_effort(
            "clear active dispute", reclamation,
            lambda: self.bookings.set_active_dispute(reclamation.booking_id, False),
        )
        self._best_effort(
            "mark booking completed", reclamation,
            lambda: self.bookings.mark_completed(reclamation.booking_id),
        )

    def _link_counterparty(self, reclamation: Reclamation, outcome: ResolutionOutcome) -> None:
        """Retry counterparty resolution for reclamations filed without one."""
        if reclamation.is_linked:
            return
        logger.warning(
            "Reclamation %s has no counterparty, attempting to fix", reclamation.id,
            extra={"reclamation_id": reclamation.id},
        )
        resolution = self.resolver.resolve(reclamation.booking_id, reclamation.complainant_role)
        if resolution.resolved:
            reclamation.target_user_id = resolution.target_user_id
            logger.info(
                "Fixed counterparty %s for reclamation %s",
                resolution.target_user_id, reclamation.id,
                extra={"reclamation_id": reclamation.id},
            )
        else:
            outcome.warnings.extend(resolution.warnings)
            outcome.warnings.append("counterparty unresolved")

    def _wallets_for(
        self,
        reclamation: Reclamation,
        booking: BookingFacts,
        outcome: ResolutionOutcome,
    ) -> PartyWallets:
        guest_id = reclamation.guest_id or booking.renter_id
        return PartyWallets(
            guest=self._wallet_of(guest_id, "guest", outcome),
            host=self._wallet_of(reclamation.host_id, "host", outcome),
        )

    def _wallet_of(
        self,
        user_id: Optional[int],
        label: str,
        outcome: ResolutionOutcome,
    ) -> Optional[str]:
        if user_id is None:
            outcome.warnings.append(f"{label} wallet unknown: no user id")
            return None
        try:
            wallet = self.accounts.get(user_id).wallet_address
        except AccountNotFoundError:
            wallet = None
        if not wallet:
            outcome.warnings.append(f"{label} wallet unknown for user {user_id}")
            return None
        return wallet

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, reclamation_id: int) -> Reclamation:
        return self._load(reclamation_id)

    def list_all(self) -> list[Reclamation]:
        return self.repository.all()

    def list_by_status(self, status: ReclamationStatus) -> list[Reclamation]:
        return [r for r in self.repository.all() if r.status is status]

    def list_filed_by(self, user_id: int) -> list[Reclamation]:
        return [r for r in self.repository.all() if r.complainant_id == user_id]

    def list_filed_against(self, user_id: int) -> list[Reclamation]:
        return [r for r in self.repository.all() if r.target_user_id == user_id]

    def find_for_booking(self, booking_id: int, complainant_id: int) -> Optional[Reclamation]:
        for r in self.repository.all():
            if r.booking_id == booking_id and r.complainant_id == complainant_id:
                return r
        return None

    def list_attachments(self, reclamation_id: int) -> list[Attachment]:
        return self.attachments.list_for(reclamation_id)

    def stats_for_user(self, user_id: int) -> ReclamationStats:
        filed = self.list_filed_by(user_id)
        return ReclamationStats(
            user_id=user_id,
            total_filed=len(filed),
            total_received=len(self.list_filed_against(user_id)),
            pending_filed=sum(1 for r in filed if r.status in EDITABLE_STATUSES),
            resolved_filed=sum(1 for r in filed if r.status is ReclamationStatus.RESOLVED),
        )

    def status_counts(self) -> dict[ReclamationStatus, int]:
        counts = Counter(r.status for r in self.repository.all())
        return {status: counts.get(status, 0) for status in ReclamationStatus}

    # =========================================================================
    # Helpers
    # =========================================================================

    def _load(self, reclamation_id: int) -> Reclamation:
        reclamation = self.repository.get(reclamation_id)
        if reclamation is None:
            raise ReclamationNotFoundError(
                message=f"Reclamation not found: {reclamation_id}",
                reclamation_id=reclamation_id,
            )
        return reclamation

    @staticmethod
    def _require_text(field_name: str, value: Optional[str]) -> None:
        if value is None or not value.strip():
            raise ReclamationValidationError(
                message=f"{field_name.capitalize()} is required",
                details={"field": field_name},
            )

    def _check_attachment_count(self, reclamation: Reclamation, total: int) -> None:
        if total > self.max_attachments:
            raise ReclamationValidationError(
                message=f"Maximum {self.max_attachments} images allowed per reclamation",
                details={"count": total, "max": self.max_attachments},
                reclamation_id=reclamation.id,
            )

    @staticmethod
    def _best_effort(action: str, reclamation: Reclamation, call) -> None:
        """Run a booking-side update whose failure must not fail the operation."""
        try:
            call()
        except Exception as e:  # booking updates are advisory
            logger.warning(
                "Could not %s for booking %s: %s", action, reclamation.booking_id, e,
                extra={"reclamation_id": reclamation.id, "booking_id": reclamation.booking_id},
            )
