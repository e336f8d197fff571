"""
DisputePilot Collaborator Contracts

Protocols for every external system the engine talks to. The engine only
depends on these call contracts; transports (HTTP, JPA, a payment
contract) live behind them.

Error conventions:
- Lookups of unknown records raise the matching NotFoundError subclass
- A collaborator that is unavailable or returns malformed data raises
  ResolutionDependencyError
- SettlementExecutor.transfer raises SettlementError on rejection or timeout
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence, runtime_checkable

from ..models import (
    Attachment,
    AttachmentUpload,
    BookingFacts,
    PoolSource,
    Reclamation,
    UserAccount,
)


# =============================================================================
# Bookings and Properties
# =============================================================================

@runtime_checkable
class PropertyOwnerSource(Protocol):
    """
    Something that can tell who owns a property.

    The returned id is raw (int or numeric string, as the remote service
    sends it); callers normalize it.
    """

    def get_owner(self, property_id: str) -> object:
        ...


@runtime_checkable
class BookingDirectory(PropertyOwnerSource, Protocol):
    """
    Booking facts and booking-side effects of a dispute.

    get_owner is the primary property-ownership lookup; further
    PropertyOwnerSource fallbacks may be configured on the resolver.
    """

    def get(self, booking_id: int) -> BookingFacts:
        """
        Fetch a booking's parties and money pools.

        Raises:
            BookingNotFoundError: Unknown booking
            ResolutionDependencyError: Booking service unavailable
        """
        ...

    def set_active_dispute(self, booking_id: int, active: bool) -> None:
        ...

    def mark_completed(self, booking_id: int) -> None:
        ...


# =============================================================================
# Accounts
# =============================================================================

@runtime_checkable
class AccountDirectory(Protocol):
    """Wallet and reputation records. The engine never creates accounts."""

    def get(self, user_id: int) -> UserAccount:
        """
        Raises:
            AccountNotFoundError: Unknown user
        """
        ...

    def save(self, account: UserAccount) -> None:
        ...


# =============================================================================
# Settlement
# =============================================================================

@runtime_checkable
class SettlementExecutor(Protocol):
    """Moves funds out of a booking's escrowed pools."""

    def transfer(
        self,
        booking_id: int,
        recipient_address: str,
        amount: Decimal,
        pool: PoolSource,
    ) -> str:
        """
        Submit one transfer.

        Returns:
            Transaction id

        Raises:
            SettlementError: Transfer rejected or timed out
        """
        ...


# =============================================================================
# Reclamation Storage
# =============================================================================

@runtime_checkable
class AttachmentStore(Protocol):
    """Opaque binary storage for reclamation evidence."""

    def save(
        self,
        reclamation_id: int,
        uploads: Sequence[AttachmentUpload],
        start_order: int = 0,
    ) -> list[Attachment]:
        ...

    def list_for(self, reclamation_id: int) -> list[Attachment]:
        ...

    def delete_all(self, reclamation_id: int) -> None:
        ...


@runtime_checkable
class ReclamationRepository(Protocol):
    """Persistence for reclamation records."""

    def add(self, reclamation: Reclamation) -> Reclamation:
        """Persist a new reclamation and return it with its id assigned."""
        ...

    def get(self, reclamation_id: int) -> Optional[Reclamation]:
        ...

    def save(self, reclamation: Reclamation) -> None:
        ...

    def delete(self, reclamation_id: int) -> None:
        ...

    def all(self) -> list[Reclamation]:
        ...
