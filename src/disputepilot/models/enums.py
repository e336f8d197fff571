"""
DisputePilot Enumerations

All enumeration types used throughout the DisputePilot system.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
Values match the wire format used by the booking platform (upper case).
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Parties
# =============================================================================

class ComplainantRole(str, Enum):
    """Which side of the booking filed the reclamation."""
    GUEST = "GUEST"
    HOST = "HOST"

    @property
    def counterparty(self) -> ComplainantRole:
        """The role the complaint runs against."""
        return ComplainantRole.HOST if self is ComplainantRole.GUEST else ComplainantRole.GUEST


class Party(str, Enum):
    """Recipient of a settlement instruction."""
    GUEST = "GUEST"
    HOST = "HOST"
    PLATFORM = "PLATFORM"


# =============================================================================
# Dispute Taxonomy
# =============================================================================

class ReclamationType(str, Enum):
    """
    Fixed dispute taxonomy.

    The first four are filed by guests, the last four by hosts.
    """
    ACCESS_ISSUE = "ACCESS_ISSUE"
    NOT_AS_DESCRIBED = "NOT_AS_DESCRIBED"
    CLEANLINESS = "CLEANLINESS"
    SAFETY_HEALTH = "SAFETY_HEALTH"
    PROPERTY_DAMAGE = "PROPERTY_DAMAGE"
    EXTRA_CLEANING = "EXTRA_CLEANING"
    HOUSE_RULE_VIOLATION = "HOUSE_RULE_VIOLATION"
    UNAUTHORIZED_GUESTS_OR_STAY = "UNAUTHORIZED_GUESTS_OR_STAY"

    @property
    def filed_by(self) -> ComplainantRole:
        """The role this type of dispute is normally filed by."""
        if self in _GUEST_TYPES:
            return ComplainantRole.GUEST
        return ComplainantRole.HOST


_GUEST_TYPES = frozenset({
    ReclamationType.ACCESS_ISSUE,
    ReclamationType.NOT_AS_DESCRIBED,
    ReclamationType.CLEANLINESS,
    ReclamationType.SAFETY_HEALTH,
})


class Severity(str, Enum):
    """Adjudicator-assigned severity. Mutable only before resolution."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# =============================================================================
# Lifecycle
# =============================================================================

class ReclamationStatus(str, Enum):
    """
    Reclamation lifecycle states.

    OPEN -> IN_REVIEW -> {RESOLVED, REJECTED}. The last two are terminal.
    """
    OPEN = "OPEN"
    IN_REVIEW = "IN_REVIEW"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in {ReclamationStatus.RESOLVED, ReclamationStatus.REJECTED}


# =============================================================================
# Settlement
# =============================================================================

class PoolSource(str, Enum):
    """The booking money pool a transfer draws from."""
    RENT = "RENT"
    DEPOSIT = "DEPOSIT"


class DistributionCase(str, Enum):
    """Mutually exclusive fund distribution cases, selected by (role, type)."""
    FULL_REFUND = "full_refund"
    GUEST_REFUND_WITH_DEPOSIT = "guest_refund_with_deposit"
    HOST_RECLAMATION = "host_reclamation"
    FALLBACK_GUEST_REFUND = "fallback_guest_refund"


class SettlementStatus(str, Enum):
    """Outcome of submitting one instruction to the settlement executor."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"      # Executor rejected or timed out
    SKIPPED = "skipped"    # Recipient has no wallet address

# Guest types refunded as whole pools: rent and deposit in full
FULL_REFUND_TYPES = frozenset({
    ReclamationType.ACCESS_ISSUE,
    ReclamationType.NOT_AS_DESCRIBED,
})

# Guest types refunded as the whole deposit plus a share of rent
DEPOSIT_PLUS_RENT_TYPES = frozenset({
    ReclamationType.CLEANLINESS,
    ReclamationType.SAFETY_HEALTH,
})
