"""
DisputePilot Penalty Matrices

The built-in penalty table and loaders for operator-supplied YAML/JSON packs.
"""
from __future__ import annotations

from .default import DEFAULT_MATRIX_ID, DEFAULT_PENALTY_MATRIX, build_default_matrix
from .loader import (
    convert_matrix_pack,
    load_matrix_from_data,
    load_matrix_pack,
    load_matrix_pack_from_string,
    resolve_matrix,
)
from .schema import (
    SCHEMA_VERSION,
    PenaltyMatrixPackSchema,
    PenaltyRuleSchema,
    check_schema_version,
    validate_matrix_pack,
)

__all__ = [
    "DEFAULT_MATRIX_ID",
    "DEFAULT_PENALTY_MATRIX",
    "build_default_matrix",
    "convert_matrix_pack",
    "load_matrix_from_data",
    "load_matrix_pack",
    "load_matrix_pack_from_string",
    "resolve_matrix",
    "SCHEMA_VERSION",
    "PenaltyMatrixPackSchema",
    "PenaltyRuleSchema",
    "check_schema_version",
    "validate_matrix_pack",
]
