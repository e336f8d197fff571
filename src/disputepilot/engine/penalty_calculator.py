"""
DisputePilot Penalty Calculator

Turns (type, severity, role) plus a booking's two money pools into a
refund amount and a penalty-point count by looking the combination up in
a PenaltyMatrix. Untabulated combinations yield no refund and no points.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..canon import MoneyInput, to_money
from ..matrix import DEFAULT_PENALTY_MATRIX
from ..models import (
    NO_PENALTY,
    BookingFacts,
    ComplainantRole,
    PenaltyMatrix,
    PenaltyResult,
    Reclamation,
    ReclamationType,
    Severity,
)

logger = logging.getLogger(__name__)


@dataclass
class PenaltyCalculator:
    """
    Pure lookup over a penalty matrix.

    Usage:
        calculator = PenaltyCalculator()
        result = calculator.calculate(
            ReclamationType.CLEANLINESS, Severity.HIGH, ComplainantRole.GUEST,
            rent_total="1000.00", deposit_total="500.00",
        )
        result.refund_amount   # Decimal("825.00")
        result.penalty_points  # 5
    """
    matrix: PenaltyMatrix = field(default_factory=lambda: DEFAULT_PENALTY_MATRIX)

    def calculate(
        self,
        type: ReclamationType,
        severity: Severity,
        role: ComplainantRole,
        rent_total: MoneyInput,
        deposit_total: MoneyInput,
    ) -> PenaltyResult:
        rent = to_money(rent_total)
        deposit = to_money(deposit_total)
        if rent < 0 or deposit < 0:
            raise ValueError(f"Pools must be non-negative (rent={rent}, deposit={deposit})")

        rule = self.matrix.lookup(role, type, severity)
        if rule is None:
            logger.debug(
                "No penalty rule for %s/%s/%s in matrix %s",
                role.value, type.value, severity.value, self.matrix.matrix_id,
            )
            return NO_PENALTY

        return PenaltyResult(
            refund_amount=rule.refund_for(rent, deposit),
            penalty_points=rule.points,
            rule=rule,
        )

    def calculate_for(self, reclamation: Reclamation, booking: BookingFacts) -> PenaltyResult:
        """Calculate using a reclamation's classification and a booking's pools."""
        return self.calculate(
            reclamation.type,
            reclamation.severity,
            reclamation.complainant_role,
            booking.rent_total,
            booking.deposit_total,
        )
