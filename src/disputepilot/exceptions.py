"""
DisputePilot Exception Hierarchy

Domain-specific exceptions for reclamation adjudication and settlement.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: DP_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class DisputePilotError(Exception):
    """
    Base exception for all DisputePilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (DP_*)
        details: Additional context about the error
        reclamation_id: Associated reclamation ID if applicable
    """
    message: str
    code: str = "DP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    reclamation_id: Optional[int] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.reclamation_id is not None:
            parts.append(f"(reclamation: {self.reclamation_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.reclamation_id is not None:
            result["reclamation_id"] = self.reclamation_id
        return result


# =============================================================================
# Caller Errors
# =============================================================================

@dataclass
class ReclamationValidationError(DisputePilotError):
    """Input rejected before any state change (missing text, bad enum, too many files)."""
    code: str = "DP_VALIDATION_ERROR"


@dataclass
class ConflictError(DisputePilotError):
    """Operation not allowed for this caller or in the current status."""
    code: str = "DP_CONFLICT"


@dataclass
class NotFoundError(DisputePilotError):
    """Referenced record does not exist."""
    code: str = "DP_NOT_FOUND"


@dataclass
class ReclamationNotFoundError(NotFoundError):
    """Unknown reclamation id."""
    code: str = "DP_RECLAMATION_NOT_FOUND"


@dataclass
class AccountNotFoundError(NotFoundError):
    """Unknown account id. Fatal for penalty deduction."""
    code: str = "DP_ACCOUNT_NOT_FOUND"


@dataclass
class BookingNotFoundError(NotFoundError):
    """Unknown booking id."""
    code: str = "DP_BOOKING_NOT_FOUND"


# =============================================================================
# Collaborator Errors
# =============================================================================

@dataclass
class ResolutionDependencyError(DisputePilotError):
    """Booking or property lookup failed (service down, missing field, bad id)."""
    code: str = "DP_RESOLUTION_DEPENDENCY"


@dataclass
class SettlementError(DisputePilotError):
    """The settlement executor rejected or timed out on a transfer."""
    code: str = "DP_SETTLEMENT_ERROR"


# =============================================================================
# Matrix / Configuration Errors
# =============================================================================

@dataclass
class MatrixLoadError(DisputePilotError):
    """Failed to load a penalty matrix pack from file."""
    code: str = "DP_MATRIX_LOAD_ERROR"


@dataclass
class MatrixValidationError(DisputePilotError):
    """Penalty matrix pack failed schema or integrity validation."""
    code: str = "DP_MATRIX_VALIDATION_ERROR"


@dataclass
class ConfigurationError(DisputePilotError):
    """Engine settings are invalid."""
    code: str = "DP_CONFIGURATION_ERROR"
