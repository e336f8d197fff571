"""
DisputePilot Reclamation Models

The dispute record and the records that hang off it.

Key components:
- Reclamation: A filed dispute between guest and host of one booking
- AttachmentUpload / Attachment: Evidence images supplied by the filer
- ReclamationStats: Per-user counters shown on the dashboard

Ownership: the engine owns status, refund_amount, penalty_points and
resolved_at. The filer owns title, description and attachments while the
reclamation is still open.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from ..canon import ZERO
from .enums import ComplainantRole, ReclamationStatus, ReclamationType, Severity


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Reclamation
# =============================================================================

@dataclass
class Reclamation:
    """
    A dispute filed by one party of a booking against the other.

    Attributes:
        id: Assigned by the repository on first save
        booking_id: The transaction under dispute
        complainant_id: User who filed it
        complainant_role: GUEST or HOST
        type: Dispute taxonomy entry
        title: Short summary (filer-owned)
        description: Full text (filer-owned)
        target_user_id: Counterparty; None until resolved from the booking
        severity: Adjudicator-assigned, defaults to LOW
        status: Lifecycle state
        refund_amount: Computed on approval, 2-decimal
        penalty_points: Computed on approval
        resolution_notes: Adjudicator notes, set on the terminal transition
        resolved_at: Set once, on the first terminal transition
    """
    booking_id: int
    complainant_id: int
    complainant_role: ComplainantRole
    type: ReclamationType
    title: str
    description: str

    id: Optional[int] = None
    target_user_id: Optional[int] = None

    severity: Severity = Severity.LOW
    status: ReclamationStatus = ReclamationStatus.OPEN

    refund_amount: Decimal = ZERO
    penalty_points: int = 0
    resolution_notes: Optional[str] = None

    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    resolved_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        booking_id: int,
        complainant_id: int,
        complainant_role: ComplainantRole,
        type: ReclamationType,
        title: str,
        description: str,
        target_user_id: Optional[int] = None,
    ) -> Reclamation:
        """Factory method for a freshly filed reclamation."""
        return cls(
            booking_id=booking_id,
            complainant_id=complainant_id,
            complainant_role=complainant_role,
            type=type,
            title=title.strip(),
            description=description.strip(),
            target_user_id=target_user_id,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_linked(self) -> bool:
        """True once the counterparty has been established."""
        return self.target_user_id is not None

    @property
    def guest_id(self) -> Optional[int]:
        if self.complainant_role is ComplainantRole.GUEST:
            return self.complainant_id
        return self.target_user_id

    @property
    def host_id(self) -> Optional[int]:
        if self.complainant_role is ComplainantRole.HOST:
            return self.complainant_id
        return self.target_user_id

    def touch(self, now: Optional[datetime] = None) -> None:
        self.updated_at = now or utc_now()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        result: dict[str, Any] = {
            "id": self.id,
            "booking_id": self.booking_id,
            "complainant_id": self.complainant_id,
            "complainant_role": self.complainant_role.value,
            "target_user_id": self.target_user_id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "status": self.status.value,
            "refund_amount": str(self.refund_amount),
            "penalty_points": self.penalty_points,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if self.resolution_notes:
            result["resolution_notes"] = self.resolution_notes
        if self.resolved_at:
            result["resolved_at"] = self.resolved_at.isoformat()
        return result


# =============================================================================
# Attachments
# =============================================================================

@dataclass(frozen=True)
class AttachmentUpload:
    """A file supplied by the filer, before storage."""
    file_name: str
    content: bytes
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Attachment:
    """A stored attachment, as reported by the attachment store."""
    reclamation_id: int
    path: str
    file_name: str
    display_order: int
    size: int = 0
    mime_type: Optional[str] = None


# =============================================================================
# Statistics
# =============================================================================

@dataclass(frozen=True)
class ReclamationStats:
    """Counters for one user's dashboard."""
    user_id: int
    total_filed: int = 0
    total_received: int = 0
    pending_filed: int = 0   # Filed by user, OPEN or IN_REVIEW
    resolved_filed: int = 0  # Filed by user, RESOLVED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "total_filed": self.total_filed,
            "total_received": self.total_received,
            "pending_filed": self.pending_filed,
            "resolved_filed": self.resolved_filed,
        }
