"""
DisputePilot Models

All domain models for the DisputePilot reclamation engine.

    from disputepilot.models import (
        # Enums
        ComplainantRole, ReclamationType, Severity, ReclamationStatus,
        # Records
        Reclamation, UserAccount, BookingFacts,
        # Penalty
        PenaltyMatrix, PenaltyRule, PenaltyResult,
        # Settlement
        DistributionPlan, SettlementInstruction, SettlementReport,
    )
"""
from __future__ import annotations

# =============================================================================
# Enums
# =============================================================================
from .enums import (
    DEPOSIT_PLUS_RENT_TYPES,
    FULL_REFUND_TYPES,
    ComplainantRole,
    DistributionCase,
    Party,
    PoolSource,
    ReclamationStatus,
    ReclamationType,
    SettlementStatus,
    Severity,
)

# =============================================================================
# Records
# =============================================================================
from .account import (
    MAX_SCORE,
    BookingFacts,
    UserAccount,
)
from .reclamation import (
    Attachment,
    AttachmentUpload,
    Reclamation,
    ReclamationStats,
    utc_now,
)

# =============================================================================
# Penalty
# =============================================================================
from .penalty import (
    NO_PENALTY,
    MatrixKey,
    PenaltyMatrix,
    PenaltyResult,
    PenaltyRule,
)

# =============================================================================
# Settlement
# =============================================================================
from .settlement import (
    DistributionPlan,
    PartyWallets,
    SettlementInstruction,
    SettlementOutcome,
    SettlementReport,
)

# =============================================================================
# Resolution
# =============================================================================
from .resolution import (
    CounterpartyResolution,
    ResolutionOutcome,
)

__all__ = [
    # Enums
    "DEPOSIT_PLUS_RENT_TYPES",
    "FULL_REFUND_TYPES",
    "ComplainantRole",
    "DistributionCase",
    "Party",
    "PoolSource",
    "ReclamationStatus",
    "ReclamationType",
    "SettlementStatus",
    "Severity",
    # Records
    "MAX_SCORE",
    "Attachment",
    "AttachmentUpload",
    "BookingFacts",
    "Reclamation",
    "ReclamationStats",
    "UserAccount",
    "utc_now",
    # Penalty
    "NO_PENALTY",
    "MatrixKey",
    "PenaltyMatrix",
    "PenaltyResult",
    "PenaltyRule",
    # Settlement
    "DistributionPlan",
    "PartyWallets",
    "SettlementInstruction",
    "SettlementOutcome",
    "SettlementReport",
    # Resolution
    "CounterpartyResolution",
    "ResolutionOutcome",
]
