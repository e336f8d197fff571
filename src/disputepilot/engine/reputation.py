"""
DisputePilot Reputation Engine

Deducts penalty points from an account's score and re-evaluates its
suspension. Tiers are data, evaluated from the lowest threshold up:

    score <= 74   suspended indefinitely
    75 - 79       suspended 60 days
    80 - 84       suspended 30 days
    85 - 89       suspended 7 days
    >= 90         an expired suspension is lifted; otherwise unchanged
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..directories import AccountDirectory
from ..models import UserAccount, utc_now
from .locks import KeyedLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuspensionTier:
    """Accounts scoring at or below max_score are suspended for days (None = indefinitely)."""
    max_score: int
    days: Optional[int]
    label: str

    def reason(self, points_lost: int) -> str:
        return f"{self.label} - {points_lost} penalty points deducted"


SUSPENSION_TIERS: tuple[SuspensionTier, ...] = (
    SuspensionTier(max_score=74, days=None, label="Score too low (≤74)"),
    SuspensionTier(max_score=79, days=60, label="Low score (75-79)"),
    SuspensionTier(max_score=84, days=30, label="Low score (80-84)"),
    SuspensionTier(max_score=89, days=7, label="Moderate score (85-89)"),
)


def tier_for(score: int) -> Optional[SuspensionTier]:
    for tier in SUSPENSION_TIERS:
        if score <= tier.max_score:
            return tier
    return None


class ReputationEngine:
    """
    Applies penalty points to accounts held in an AccountDirectory.

    Usage:
        engine = ReputationEngine(accounts)
        account = engine.deduct_penalty_points(user_id=42, points=12)
        account.score         # 88
        account.is_suspended  # True, for 7 days
    """

    def __init__(
        self,
        accounts: AccountDirectory,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.accounts = accounts
        self._clock = clock
        self._locks = KeyedLock()

    def deduct_penalty_points(self, user_id: int, points: int) -> Optional[UserAccount]:
        """
        Lower a user's score and re-evaluate suspension.

        Returns:
            The updated account, or None when points <= 0 (no-op)

        Raises:
            AccountNotFoundError: Unknown user
        """
        if points <= 0:
            return None

        # get-modify-save on one account must not interleave
        with self._locks.locked(user_id):
            account = self.accounts.get(user_id)
            old_score = account.score
            account.score = max(0, account.score - points)
            self.apply_suspension(account)
            self.accounts.save(account)

        logger.info(
            "Deducted %d points from user %s: %d -> %d",
            points, user_id, old_score, account.score,
            extra={"user_id": user_id, "points": points},
        )
        return account

    def apply_suspension(self, account: UserAccount) -> None:
        """Set or lift suspension according to the account's current score."""
        now = self._clock()
        tier = tier_for(account.score)

        if tier is not None:
            account.is_suspended = True
            account.suspension_reason = tier.reason(account.points_lost)
            account.suspension_until = (
                now + timedelta(days=tier.days) if tier.days is not None else None
            )
            logger.warning(
                "User %s suspended: %s", account.id, account.suspension_reason,
                extra={"user_id": account.id},
            )
            return

        if (
            account.is_suspended
            and account.suspension_until is not None
            and now > account.suspension_until
        ):
            account.lift_suspension()
            logger.info("Suspension of user %s lifted", account.id, extra={"user_id": account.id})
