"""
Built-in Penalty Matrix

The platform's published penalty table. Each row is one (role, type)
variant; each column a severity. A cell is (rent fraction, deposit
fraction, points).

GUEST rows refund money to the guest; HOST rows award part of the
deposit to the host. Points are always deducted from the counterparty.
"""
from __future__ import annotations

from decimal import Decimal

from ..models import (
    ComplainantRole,
    PenaltyMatrix,
    PenaltyRule,
    ReclamationType,
    Severity,
)

DEFAULT_MATRIX_ID = "default"

_LOW, _MEDIUM, _HIGH, _CRITICAL = (
    Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL,
)

# (rent_fraction, deposit_fraction, points) per severity
_Cell = tuple[str, str, int]

_TABLE: dict[tuple[ComplainantRole, ReclamationType], dict[Severity, _Cell]] = {
    # Guest: the stay was unusable; everything comes back, severity ignored
    (ComplainantRole.GUEST, ReclamationType.ACCESS_ISSUE): {
        s: ("1", "1", 10) for s in Severity
    },
    (ComplainantRole.GUEST, ReclamationType.NOT_AS_DESCRIBED): {
        s: ("1", "1", 10) for s in Severity
    },
    # Guest: full deposit plus a share of rent
    (ComplainantRole.GUEST, ReclamationType.CLEANLINESS): {
        _LOW: ("0.05", "1", 0),
        _MEDIUM: ("0.125", "1", 2),
        _HIGH: ("0.325", "1", 5),
        _CRITICAL: ("0.50", "1", 10),
    },
    (ComplainantRole.GUEST, ReclamationType.SAFETY_HEALTH): {
        _LOW: ("0.10", "1", 3),
        _MEDIUM: ("0.30", "1", 7),
        _HIGH: ("0.70", "1", 15),
        _CRITICAL: ("1", "1", 25),
    },
    # Host: a share of the deposit
    (ComplainantRole.HOST, ReclamationType.PROPERTY_DAMAGE): {
        _LOW: ("0", "0.075", 2),
        _MEDIUM: ("0", "0.30", 5),
        _HIGH: ("0", "0.70", 10),
        _CRITICAL: ("0", "1", 15),
    },
    (ComplainantRole.HOST, ReclamationType.EXTRA_CLEANING): {
        _LOW: ("0", "0.075", 1),
        _MEDIUM: ("0", "0.20", 3),
        _HIGH: ("0", "0.40", 5),
        _CRITICAL: ("0", "0.70", 8),
    },
    (ComplainantRole.HOST, ReclamationType.HOUSE_RULE_VIOLATION): {
        _LOW: ("0", "0", 2),  # warning only
        _MEDIUM: ("0", "0.15", 5),
        _HIGH: ("0", "0.50", 10),
        _CRITICAL: ("0", "1", 15),
    },
    (ComplainantRole.HOST, ReclamationType.UNAUTHORIZED_GUESTS_OR_STAY): {
        _LOW: ("0", "0.10", 3),
        _MEDIUM: ("0", "0.325", 7),
        _HIGH: ("0", "0.70", 12),
        _CRITICAL: ("0", "1", 20),
    },
}


def build_default_matrix() -> PenaltyMatrix:
    """Build a fresh copy of the built-in penalty matrix."""
    rules = {}
    for (role, rtype), cells in _TABLE.items():
        for severity, (rent_fraction, deposit_fraction, points) in cells.items():
            rules[(role, rtype, severity)] = PenaltyRule(
                rent_fraction=Decimal(rent_fraction),
                deposit_fraction=Decimal(deposit_fraction),
                points=points,
                note="warning only" if (deposit_fraction == "0" and rent_fraction == "0") else "",
            )
    return PenaltyMatrix(matrix_id=DEFAULT_MATRIX_ID, rules=rules)


DEFAULT_PENALTY_MATRIX = build_default_matrix()
