"""
DisputePilot Directories

Collaborator protocols and their in-memory implementations.
"""
from __future__ import annotations

from .base import (
    AccountDirectory,
    AttachmentStore,
    BookingDirectory,
    PropertyOwnerSource,
    ReclamationRepository,
    SettlementExecutor,
)
from .memory import (
    InMemoryAccountDirectory,
    InMemoryAttachmentStore,
    InMemoryBookingDirectory,
    InMemoryOwnerSource,
    InMemoryReclamationRepository,
    RecordedTransfer,
    RecordingSettlementExecutor,
)

__all__ = [
    # Protocols
    "AccountDirectory",
    "AttachmentStore",
    "BookingDirectory",
    "PropertyOwnerSource",
    "ReclamationRepository",
    "SettlementExecutor",
    # In-memory
    "InMemoryAccountDirectory",
    "InMemoryAttachmentStore",
    "InMemoryBookingDirectory",
    "InMemoryOwnerSource",
    "InMemoryReclamationRepository",
    "RecordedTransfer",
    "RecordingSettlementExecutor",
]
