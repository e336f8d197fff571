"""
DisputePilot Resolution Models

Results returned by counterparty resolution and by the terminal
transition of a reclamation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .penalty import PenaltyResult
from .reclamation import Reclamation
from .settlement import DistributionPlan, SettlementReport


@dataclass(frozen=True)
class CounterpartyResolution:
    """
    Outcome of looking up the party a reclamation runs against.

    An unresolved result carries target_user_id=None, never a zero sentinel.

    Attributes:
        target_user_id: Resolved counterparty, or None
        source: Name of the lookup that produced the id
        warnings: One entry per failed stage, in the order they were tried
    """
    target_user_id: Optional[int] = None
    source: Optional[str] = None
    warnings: tuple[str, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.target_user_id is not None

    @classmethod
    def unresolved(cls, warnings: list[str]) -> CounterpartyResolution:
        return cls(target_user_id=None, source=None, warnings=tuple(warnings))


@dataclass
class ResolutionOutcome:
    """
    Everything that happened when a reclamation reached a terminal state.

    The reclamation's decision is durable regardless of what the settlement
    report says; failed instructions are left to reconciliation.

    Attributes:
        reclamation: The reclamation in its terminal state
        penalty: Calculator output (approvals only)
        plan: Distribution plan (approvals only)
        settlement: Executor outcomes for the plan
        penalty_applied: Whether points reached the counterparty's score
        property_suspension_recommended: Points crossed the property threshold
        warnings: Recoverable problems encountered along the way
    """
    reclamation: Reclamation
    penalty: Optional[PenaltyResult] = None
    plan: Optional[DistributionPlan] = None
    settlement: Optional[SettlementReport] = None
    penalty_applied: bool = False
    property_suspension_recommended: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def approved(self) -> bool:
        return self.penalty is not None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "reclamation": self.reclamation.to_dict(),
            "penalty_applied": self.penalty_applied,
            "property_suspension_recommended": self.property_suspension_recommended,
        }
        if self.plan is not None:
            result["plan"] = self.plan.to_dict()
        if self.settlement is not None:
            result["settlement"] = self.settlement.to_dict()
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result
