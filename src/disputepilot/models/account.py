"""
DisputePilot Account and Booking Models

Records owned by external directories. The engine consults them and
mutates only an account's score and suspension fields.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..canon import to_money

MAX_SCORE = 100


@dataclass
class UserAccount:
    """
    A platform user as seen by the reputation engine.

    Attributes:
        id: User id
        wallet_address: Settlement address, None if never registered
        score: Reputation score, 0..100
        is_suspended: Whether the account is currently suspended
        suspension_reason: Human-readable reason, records points lost
        suspension_until: End of a timed suspension; None means indefinite
    """
    id: int
    wallet_address: Optional[str] = None
    score: int = MAX_SCORE
    is_suspended: bool = False
    suspension_reason: Optional[str] = None
    suspension_until: Optional[datetime] = None

    @property
    def points_lost(self) -> int:
        return MAX_SCORE - self.score

    def lift_suspension(self) -> None:
        self.is_suspended = False
        self.suspension_reason = None
        self.suspension_until = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "wallet_address": self.wallet_address,
            "score": self.score,
            "is_suspended": self.is_suspended,
            "suspension_reason": self.suspension_reason,
            "suspension_until": (
                self.suspension_until.isoformat() if self.suspension_until else None
            ),
        }


@dataclass(frozen=True)
class BookingFacts:
    """
    Financial and ownership facts about a booking.

    Both pools are quantized to cents on construction.

    Attributes:
        booking_id: Booking id
        renter_id: The guest's user id
        property_id: Property reference, None if the booking lacks one
        rent_total: Rent pool
        deposit_total: Deposit pool
        status: Booking status as reported by the booking service
    """
    booking_id: int
    renter_id: int
    property_id: Optional[str]
    rent_total: Decimal
    deposit_total: Decimal
    status: Optional[str] = None

    def __post_init__(self) -> None:
        rent = to_money(self.rent_total)
        deposit = to_money(self.deposit_total)
        if rent < 0 or deposit < 0:
            raise ValueError(
                f"Booking {self.booking_id} pools must be non-negative "
                f"(rent={rent}, deposit={deposit})"
            )
        object.__setattr__(self, "rent_total", rent)
        object.__setattr__(self, "deposit_total", deposit)
