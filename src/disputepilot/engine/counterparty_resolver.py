"""
DisputePilot Counterparty Resolver

Best-effort lookup of the user a reclamation runs against:

1. Fetch the booking (gives the guest's user id and a property reference)
2. If the filer is the guest, ask each owner source in turn for the
   property's owner; the first usable answer wins
3. If the filer is the host, the target is the booking's guest

Any failure yields an explicit unresolved result with one warning per
failed stage. Nothing here raises; a reclamation without a target is
recoverable, a lost reclamation is not.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..directories import BookingDirectory, PropertyOwnerSource
from ..models import BookingFacts, ComplainantRole, CounterpartyResolution

logger = logging.getLogger(__name__)


def normalize_user_id(raw: object) -> Optional[int]:
    """
    Convert a remote id (int or numeric string) to a positive int.

    Returns None for anything else, including zero and negatives.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        try:
            value = int(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if value > 0 else None


def source_name(source: object) -> str:
    return getattr(source, "name", None) or type(source).__name__


class CounterpartyResolver:
    """
    Resolves reclamation targets from booking and property data.

    Usage:
        resolver = CounterpartyResolver(bookings, owner_sources=[bookings, property_service])
        result = resolver.resolve(booking_id=7, role=ComplainantRole.GUEST)
        if result.resolved:
            reclamation.target_user_id = result.target_user_id
    """

    def __init__(
        self,
        bookings: BookingDirectory,
        owner_sources: Optional[Sequence[PropertyOwnerSource]] = None,
    ) -> None:
        self.bookings = bookings
        self.owner_sources: list[PropertyOwnerSource] = (
            list(owner_sources) if owner_sources is not None else [bookings]
        )

    def resolve(self, booking_id: int, role: ComplainantRole) -> CounterpartyResolution:
        warnings: list[str] = []

        try:
            booking = self.bookings.get(booking_id)
        except Exception as e:  # any transport failure leaves the target unresolved
            warnings.append(f"booking {booking_id}: {e}")
            return self._unresolved(booking_id, warnings)

        if role is ComplainantRole.HOST:
            renter_id = normalize_user_id(booking.renter_id)
            if renter_id is None:
                warnings.append(f"booking {booking_id}: invalid renter id {booking.renter_id!r}")
                return self._unresolved(booking_id, warnings)
            return CounterpartyResolution(target_user_id=renter_id, source="booking")

        return self._resolve_owner(booking, warnings)

    def _resolve_owner(
        self,
        booking: BookingFacts,
        warnings: list[str],
    ) -> CounterpartyResolution:
        if booking.property_id is None:
            warnings.append(f"booking {booking.booking_id}: no property reference")
            return self._unresolved(booking.booking_id, warnings)

        for source in self.owner_sources:
            name = source_name(source)
            try:
                raw = source.get_owner(booking.property_id)
            except Exception as e:
                warnings.append(f"{name}: {e}")
                continue

            owner_id = normalize_user_id(raw)
            if owner_id is None:
                warnings.append(f"{name}: invalid owner id {raw!r}")
                continue

            if warnings:
                logger.info(
                    "Owner of property %s resolved by fallback %s",
                    booking.property_id, name,
                    extra={"booking_id": booking.booking_id},
                )
            return CounterpartyResolution(
                target_user_id=owner_id,
                source=name,
                warnings=tuple(warnings),
            )

        return self._unresolved(booking.booking_id, warnings)

    def _unresolved(self, booking_id: int, warnings: list[str]) -> CounterpartyResolution:
        logger.error(
            "Could not resolve counterparty for booking %s: %s",
            booking_id, "; ".join(warnings),
            extra={"booking_id": booking_id},
        )
        return CounterpartyResolution.unresolved(warnings)
