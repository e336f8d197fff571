"""
DisputePilot: Reclamation Resolution & Allocation Engine

Adjudicates disputes between the guest and host of a rental booking and
turns an approve/reject decision into a deterministic settlement plan and
a reputation penalty.

Quick start:

    from disputepilot import (
        ReclamationService, EngineSettings,
        ComplainantRole, ReclamationType, Severity,
    )
    from disputepilot.directories import (
        InMemoryReclamationRepository, InMemoryBookingDirectory,
        InMemoryAccountDirectory, InMemoryAttachmentStore,
        RecordingSettlementExecutor,
    )

    service = ReclamationService.from_settings(
        EngineSettings.from_env(),
        repository=InMemoryReclamationRepository(),
        bookings=bookings,
        accounts=accounts,
        attachments=InMemoryAttachmentStore(),
        executor=RecordingSettlementExecutor(),
    )
    rec = service.create_reclamation(
        booking_id=7, complainant_id=3, role=ComplainantRole.GUEST,
        type=ReclamationType.CLEANLINESS, title="Dirty", description="Kitchen",
    )
    service.update_severity(rec.id, Severity.HIGH)
    outcome = service.resolve(rec.id, approved=True, notes="Photos confirm")
"""
from __future__ import annotations

__version__ = "1.0.0"

from .config import EngineSettings
from .engine import (
    CounterpartyResolver,
    DistributionPlanner,
    PenaltyCalculator,
    ReclamationService,
    ReclamationStateMachine,
    ReconciliationLedger,
    ReputationEngine,
    SettlementRunner,
)
from .exceptions import (
    AccountNotFoundError,
    BookingNotFoundError,
    ConfigurationError,
    ConflictError,
    DisputePilotError,
    MatrixLoadError,
    MatrixValidationError,
    NotFoundError,
    ReclamationNotFoundError,
    ReclamationValidationError,
    ResolutionDependencyError,
    SettlementError,
)
from .matrix import DEFAULT_PENALTY_MATRIX, load_matrix_pack
from .models import (
    ComplainantRole,
    DistributionPlan,
    PenaltyResult,
    Reclamation,
    ReclamationStatus,
    ReclamationType,
    ResolutionOutcome,
    SettlementInstruction,
    Severity,
)

__all__ = [
    "__version__",
    # Configuration
    "EngineSettings",
    # Engine
    "CounterpartyResolver",
    "DistributionPlanner",
    "PenaltyCalculator",
    "ReclamationService",
    "ReclamationStateMachine",
    "ReconciliationLedger",
    "ReputationEngine",
    "SettlementRunner",
    # Exceptions
    "AccountNotFoundError",
    "BookingNotFoundError",
    "ConfigurationError",
    "ConflictError",
    "DisputePilotError",
    "MatrixLoadError",
    "MatrixValidationError",
    "NotFoundError",
    "ReclamationNotFoundError",
    "ReclamationValidationError",
    "ResolutionDependencyError",
    "SettlementError",
    # Matrix
    "DEFAULT_PENALTY_MATRIX",
    "load_matrix_pack",
    # Models
    "ComplainantRole",
    "DistributionPlan",
    "PenaltyResult",
    "Reclamation",
    "ReclamationStatus",
    "ReclamationType",
    "ResolutionOutcome",
    "SettlementInstruction",
    "Severity",
]
