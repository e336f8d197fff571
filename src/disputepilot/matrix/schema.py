"""
DisputePilot Penalty Matrix Pack Schemas

Pydantic models for validating penalty matrix YAML/JSON files.

A pack replaces the built-in table wholesale; cells it omits yield no
refund and no points.

Example pack:

    schema_version: "1.0.0"
    matrix_id: "derent-2025-q1"
    rules:
      - {role: GUEST, type: ACCESS_ISSUE, severity: "*", rent_fraction: 1, deposit_fraction: 1, points: 10}
      - {role: HOST, type: PROPERTY_DAMAGE, severity: LOW, deposit_fraction: 0.075, points: 2}
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import DEPOSIT_PLUS_RENT_TYPES, FULL_REFUND_TYPES, ReclamationType


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

RoleValue = Literal["GUEST", "HOST"]

ReclamationTypeValue = Literal[
    "ACCESS_ISSUE", "NOT_AS_DESCRIBED", "CLEANLINESS", "SAFETY_HEALTH",
    "PROPERTY_DAMAGE", "EXTRA_CLEANING", "HOUSE_RULE_VIOLATION",
    "UNAUTHORIZED_GUESTS_OR_STAY",
]

SeverityValue = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL", "*"]


# =============================================================================
# Rule Schema
# =============================================================================

class PenaltyRuleSchema(BaseModel):
    """
    One row of a matrix pack.

    severity "*" expands to all four severities.
    """
    role: RoleValue = Field(..., description="Filer role")
    type: ReclamationTypeValue = Field(..., description="Dispute type")
    severity: SeverityValue = Field(..., description="Severity or '*' for all")
    rent_fraction: Decimal = Field(Decimal("0"), description="Fraction of rent refunded")
    deposit_fraction: Decimal = Field(Decimal("0"), description="Fraction of deposit refunded")
    points: int = Field(0, description="Penalty points deducted from the counterparty")
    note: Optional[str] = Field(None, description="Human-readable remark")

    @field_validator("role", "type", "severity", mode="before")
    @classmethod
    def upper_case(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("rent_fraction", "deposit_fraction")
    @classmethod
    def validate_fraction(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError(f"fraction must be between 0 and 1, got {v}")
        return v

    @field_validator("points")
    @classmethod
    def validate_points(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"points must be non-negative, got {v}")
        return v

    @model_validator(mode="after")
    def validate_pool_for_role(self) -> "PenaltyRuleSchema":
        """
        Fractions must match how the refund is paid out, so the money a
        plan moves to the filer equals the refund the rule computes.

        - HOST: deposit only
        - GUEST full-refund types: both pools in full
        - GUEST deposit-plus-rent types: the whole deposit
        - other GUEST types: rent only
        """
        if self.role == "HOST":
            if self.rent_fraction != 0:
                raise ValueError("HOST rules cannot refund from rent")
            return self

        rtype = ReclamationType(self.type)
        if rtype in FULL_REFUND_TYPES:
            if self.rent_fraction != 1 or self.deposit_fraction != 1:
                raise ValueError(
                    f"GUEST {self.type} rules refund both pools in full: "
                    f"rent_fraction and deposit_fraction must be 1"
                )
        elif rtype in DEPOSIT_PLUS_RENT_TYPES:
            if self.deposit_fraction != 1:
                raise ValueError(
                    f"GUEST {self.type} rules return the whole deposit: "
                    f"deposit_fraction must be 1"
                )
        elif self.deposit_fraction != 0:
            raise ValueError(
                f"GUEST {self.type} rules refund from rent only: deposit_fraction must be 0"
            )
        return self

    model_config = {
        "extra": "forbid",
    }


# =============================================================================
# Pack Schema
# =============================================================================

class PenaltyMatrixPackSchema(BaseModel):
    """Schema for a complete penalty matrix pack."""
    schema_version: str = Field(SCHEMA_VERSION, description="Pack schema version")
    matrix_id: str = Field(..., min_length=1, description="Identifier recorded with decisions")
    description: Optional[str] = Field(None, description="What this matrix is for")
    rules: list[PenaltyRuleSchema] = Field(..., min_length=1, description="Matrix rows")

    model_config = {
        "extra": "forbid",
    }


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_matrix_pack(data: dict[str, Any]) -> PenaltyMatrixPackSchema:
    """
    Validate a matrix pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return PenaltyMatrixPackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """Check that the pack's major schema version matches ours."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
