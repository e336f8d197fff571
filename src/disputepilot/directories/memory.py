"""
In-Memory Collaborators

Dictionary-backed implementations of the collaborator protocols. Used by
the test suite, the CLI and embedders that have no backing services.
"""
from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional, Sequence

from ..exceptions import (
    AccountNotFoundError,
    BookingNotFoundError,
    ResolutionDependencyError,
    SettlementError,
)
from ..models import (
    Attachment,
    AttachmentUpload,
    BookingFacts,
    PoolSource,
    Reclamation,
    UserAccount,
)


# =============================================================================
# Bookings
# =============================================================================

@dataclass
class InMemoryOwnerSource:
    """Property-owner lookup backed by a dict. Unknown properties fail."""
    owners: dict[str, object] = field(default_factory=dict)
    name: str = "memory"

    def get_owner(self, property_id: str) -> object:
        if property_id not in self.owners:
            raise ResolutionDependencyError(
                message=f"Owner of property {property_id} not available from {self.name}",
                details={"property_id": property_id, "source": self.name},
            )
        return self.owners[property_id]


@dataclass
class InMemoryBookingDirectory:
    """
    Booking directory backed by dicts.

    Records the booking-side effects of disputes so tests can assert on
    them: active_disputes maps booking id to flag, completed holds ids
    marked COMPLETED.
    """
    bookings: dict[int, BookingFacts] = field(default_factory=dict)
    owners: dict[str, object] = field(default_factory=dict)
    active_disputes: dict[int, bool] = field(default_factory=dict)
    completed: set[int] = field(default_factory=set)
    available: bool = True
    name: str = "booking-directory"

    def add(self, booking: BookingFacts, owner_id: Optional[object] = None) -> BookingFacts:
        self.bookings[booking.booking_id] = booking
        if owner_id is not None and booking.property_id is not None:
            self.owners[booking.property_id] = owner_id
        return booking

    def _check_available(self) -> None:
        if not self.available:
            raise ResolutionDependencyError(message="Booking service unavailable")

    def get(self, booking_id: int) -> BookingFacts:
        self._check_available()
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(
                message=f"Booking {booking_id} not found",
                details={"booking_id": booking_id},
            )
        return booking

    def get_owner(self, property_id: str) -> object:
        self._check_available()
        if property_id not in self.owners:
            raise ResolutionDependencyError(
                message=f"Owner of property {property_id} not available",
                details={"property_id": property_id, "source": self.name},
            )
        return self.owners[property_id]

    def set_active_dispute(self, booking_id: int, active: bool) -> None:
        self._check_available()
        self.active_disputes[booking_id] = active

    def mark_completed(self, booking_id: int) -> None:
        self._check_available()
        self.completed.add(booking_id)


# =============================================================================
# Accounts
# =============================================================================

@dataclass
class InMemoryAccountDirectory:
    accounts: dict[int, UserAccount] = field(default_factory=dict)

    def add(self, account: UserAccount) -> UserAccount:
        self.accounts[account.id] = account
        return account

    def get(self, user_id: int) -> UserAccount:
        account = self.accounts.get(user_id)
        if account is None:
            raise AccountNotFoundError(
                message=f"User not found. User ID: {user_id}",
                details={"user_id": user_id},
            )
        return account

    def save(self, account: UserAccount) -> None:
        self.accounts[account.id] = account


# =============================================================================
# Settlement
# =============================================================================

@dataclass(frozen=True)
class RecordedTransfer:
    tx_id: str
    booking_id: int
    recipient_address: str
    amount: Decimal
    pool: PoolSource


@dataclass
class RecordingSettlementExecutor:
    """
    Executor that records transfers instead of sending them.

    Transfers to any address in failing_addresses raise SettlementError,
    which lets tests exercise partial settlement.
    """
    transfers: list[RecordedTransfer] = field(default_factory=list)
    failing_addresses: set[str] = field(default_factory=set)
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def transfer(
        self,
        booking_id: int,
        recipient_address: str,
        amount: Decimal,
        pool: PoolSource,
    ) -> str:
        if recipient_address in self.failing_addresses:
            raise SettlementError(
                message=f"Transfer to {recipient_address} rejected",
                details={"booking_id": booking_id, "amount": str(amount), "pool": pool.value},
            )
        tx_id = f"0x{next(self._counter):064x}"
        self.transfers.append(RecordedTransfer(
            tx_id=tx_id,
            booking_id=booking_id,
            recipient_address=recipient_address,
            amount=amount,
            pool=pool,
        ))
        return tx_id


# =============================================================================
# Reclamation Storage
# =============================================================================

@dataclass
class InMemoryAttachmentStore:
    """Keeps attachment metadata only; content is counted, not stored."""
    attachments: dict[int, list[Attachment]] = field(default_factory=dict)
    root: str = "uploads/reclamations"

    def save(
        self,
        reclamation_id: int,
        uploads: Sequence[AttachmentUpload],
        start_order: int = 0,
    ) -> list[Attachment]:
        stored = [
            Attachment(
                reclamation_id=reclamation_id,
                path=f"{self.root}/{reclamation_id}/{start_order + i}_{upload.file_name}",
                file_name=upload.file_name,
                display_order=start_order + i,
                size=len(upload.content),
                mime_type=upload.mime_type,
            )
            for i, upload in enumerate(uploads)
        ]
        self.attachments.setdefault(reclamation_id, []).extend(stored)
        return stored

    def list_for(self, reclamation_id: int) -> list[Attachment]:
        return sorted(
            self.attachments.get(reclamation_id, []),
            key=lambda a: a.display_order,
        )

    def delete_all(self, reclamation_id: int) -> None:
        self.attachments.pop(reclamation_id, None)


class InMemoryReclamationRepository:
    """
    Reclamation storage with auto-incrementing ids.

    Records are copied in and out, so a caller's changes are only visible
    to others after save().
    """

    def __init__(self) -> None:
        self._records: dict[int, Reclamation] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, reclamation: Reclamation) -> Reclamation:
        with self._lock:
            stored = replace(reclamation, id=next(self._ids))
            self._records[stored.id] = stored
        return replace(stored)

    def get(self, reclamation_id: int) -> Optional[Reclamation]:
        with self._lock:
            record = self._records.get(reclamation_id)
        return replace(record) if record is not None else None

    def save(self, reclamation: Reclamation) -> None:
        if reclamation.id is None:
            raise ValueError("Cannot save a reclamation without an id; use add()")
        with self._lock:
            self._records[reclamation.id] = replace(reclamation)

    def delete(self, reclamation_id: int) -> None:
        with self._lock:
            self._records.pop(reclamation_id, None)

    def all(self) -> list[Reclamation]:
        with self._lock:
            records = sorted(self._records.values(), key=lambda r: r.id)
        return [replace(r) for r in records]
