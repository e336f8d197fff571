"""
DisputePilot Penalty Models

A penalty matrix maps (role, type) variants and a severity to a rule:
the fraction of each money pool refunded and the reputation points
deducted from the counterparty.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterator, Optional

from ..canon import ZERO, content_hash, to_money
from .enums import ComplainantRole, ReclamationType, Severity

MatrixKey = tuple[ComplainantRole, ReclamationType, Severity]


@dataclass(frozen=True)
class PenaltyRule:
    """
    One cell of the penalty matrix.

    refund = rent_fraction * rent + deposit_fraction * deposit
    """
    rent_fraction: Decimal = ZERO
    deposit_fraction: Decimal = ZERO
    points: int = 0
    note: str = ""

    def refund_for(self, rent_total: Decimal, deposit_total: Decimal) -> Decimal:
        return to_money(
            self.rent_fraction * rent_total + self.deposit_fraction * deposit_total
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "rent_fraction": str(self.rent_fraction),
            "deposit_fraction": str(self.deposit_fraction),
            "points": self.points,
        }
        if self.note:
            result["note"] = self.note
        return result


@dataclass(frozen=True)
class PenaltyResult:
    """Refund amount and penalty points computed for one reclamation."""
    refund_amount: Decimal
    penalty_points: int
    rule: Optional[PenaltyRule] = None

    @property
    def matched(self) -> bool:
        """False when the combination is not tabulated."""
        return self.rule is not None


NO_PENALTY = PenaltyResult(refund_amount=ZERO, penalty_points=0)


@dataclass
class PenaltyMatrix:
    """
    Lookup table keyed on (role, type, severity).

    Attributes:
        matrix_id: Identifier of the table (pack id or "default")
        rules: Tabulated cells; anything missing yields no refund and no points
    """
    matrix_id: str
    rules: dict[MatrixKey, PenaltyRule] = field(default_factory=dict)

    def lookup(
        self,
        role: ComplainantRole,
        type: ReclamationType,
        severity: Severity,
    ) -> Optional[PenaltyRule]:
        return self.rules.get((role, type, severity))

    def variants(self) -> list[tuple[ComplainantRole, ReclamationType]]:
        """Distinct (role, type) variants present in the table."""
        seen: dict[tuple[ComplainantRole, ReclamationType], None] = {}
        for role, rtype, _ in self.rules:
            seen[(role, rtype)] = None
        return list(seen)

    def __iter__(self) -> Iterator[tuple[MatrixKey, PenaltyRule]]:
        return iter(sorted(
            self.rules.items(),
            key=lambda kv: (kv[0][0].value, kv[0][1].value, list(Severity).index(kv[0][2])),
        ))

    def __len__(self) -> int:
        return len(self.rules)

    def to_dict(self) -> dict[str, Any]:
        return {
            "matrix_id": self.matrix_id,
            "rules": [
                {
                    "role": role.value,
                    "type": rtype.value,
                    "severity": severity.value,
                    **rule.to_dict(),
                }
                for (role, rtype, severity), rule in self
            ],
        }

    @property
    def matrix_hash(self) -> str:
        """Content hash of the table, excluding notes."""
        payload = self.to_dict()
        for row in payload["rules"]:
            row.pop("note", None)
        return content_hash(payload["rules"])
