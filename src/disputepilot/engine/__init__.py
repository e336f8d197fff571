"""
DisputePilot Engine

Resolution and allocation engine components.

Key components:
- ReclamationStateMachine: Lifecycle transitions and per-id serialization
- KeyedLock: Per-key mutex table shared by the state machine and reputation
- PenaltyCalculator: Matrix lookup of refund and penalty points
- DistributionPlanner: Splits a refund across guest, host and platform
- ReputationEngine: Score deduction and suspension tiers
- CounterpartyResolver: Best-effort lookup of the disputed party
- SettlementRunner / ReconciliationLedger: Executes plans, records outcomes
- ReclamationService: Orchestrates all of the above
"""
from __future__ import annotations

from .counterparty_resolver import CounterpartyResolver, normalize_user_id
from .distribution_planner import DEFAULT_FEE_RATE, DistributionPlanner, select_case
from .locks import KeyedLock
from .penalty_calculator import PenaltyCalculator
from .reputation import SUSPENSION_TIERS, ReputationEngine, SuspensionTier, tier_for
from .service import ReclamationService
from .settlement_runner import ReconciliationLedger, SettlementRunner
from .state_machine import (
    EDITABLE_STATUSES,
    TRANSITIONS,
    ReclamationStateMachine,
    can_transition,
)

__all__ = [
    # State machine
    "EDITABLE_STATUSES",
    "TRANSITIONS",
    "ReclamationStateMachine",
    "can_transition",
    "KeyedLock",
    # Penalty
    "PenaltyCalculator",
    # Distribution
    "DEFAULT_FEE_RATE",
    "DistributionPlanner",
    "select_case",
    # Reputation
    "SUSPENSION_TIERS",
    "ReputationEngine",
    "SuspensionTier",
    "tier_for",
    # Counterparty
    "CounterpartyResolver",
    "normalize_user_id",
    # Settlement
    "ReconciliationLedger",
    "SettlementRunner",
    # Orchestration
    "ReclamationService",
]
