"""
Test helpers for DisputePilot.

Modules:
- factories: Booking, account and reclamation builders, plus a wired
  in-memory service (World)
"""
from .factories import (
    BOOKING_ID,
    GUEST_ID,
    GUEST_WALLET,
    HOST_ID,
    HOST_WALLET,
    PLATFORM_WALLET,
    PROPERTY_ID,
    FIXED_NOW,
    World,
    fixed_clock,
    make_account,
    make_booking,
    make_reclamation,
    make_upload,
    make_world,
)

__all__ = [
    "BOOKING_ID",
    "GUEST_ID",
    "GUEST_WALLET",
    "HOST_ID",
    "HOST_WALLET",
    "PLATFORM_WALLET",
    "PROPERTY_ID",
    "FIXED_NOW",
    "World",
    "fixed_clock",
    "make_account",
    "make_booking",
    "make_reclamation",
    "make_upload",
    "make_world",
]
