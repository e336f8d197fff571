"""
DisputePilot Penalty Matrix Loader

Loads and validates penalty matrix packs from YAML or JSON files.

Converts Pydantic schema models to the PenaltyMatrix domain model.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import MatrixLoadError, MatrixValidationError
from ..models import (
    ComplainantRole,
    MatrixKey,
    PenaltyMatrix,
    PenaltyRule,
    ReclamationType,
    Severity,
)
from .default import DEFAULT_PENALTY_MATRIX
from .schema import (
    SCHEMA_VERSION,
    PenaltyMatrixPackSchema,
    check_schema_version,
    validate_matrix_pack,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Schema to Model Conversion
# =============================================================================

def _expand_severity(value: str) -> list[Severity]:
    if value == "*":
        return list(Severity)
    return [Severity(value)]


def convert_matrix_pack(schema: PenaltyMatrixPackSchema) -> PenaltyMatrix:
    """
    Convert a validated pack to a PenaltyMatrix.

    Raises:
        MatrixValidationError: If two rows address the same cell
    """
    rules: dict[MatrixKey, PenaltyRule] = {}
    duplicates: list[str] = []

    for row in schema.rules:
        role = ComplainantRole(row.role)
        rtype = ReclamationType(row.type)
        for severity in _expand_severity(row.severity):
            key = (role, rtype, severity)
            if key in rules:
                duplicates.append(f"{role.value}/{rtype.value}/{severity.value}")
                continue
            rules[key] = PenaltyRule(
                rent_fraction=row.rent_fraction,
                deposit_fraction=row.deposit_fraction,
                points=row.points,
                note=row.note or "",
            )

    if duplicates:
        raise MatrixValidationError(
            message=f"Duplicate matrix cells in pack '{schema.matrix_id}'",
            details={"duplicates": duplicates},
        )

    return PenaltyMatrix(matrix_id=schema.matrix_id, rules=rules)


# =============================================================================
# Loader
# =============================================================================

def _parse(content: str, suffix: str) -> Any:
    if suffix == ".json":
        return json.loads(content)
    return yaml.safe_load(content)


def load_matrix_from_data(data: Any, source: str = "<data>") -> PenaltyMatrix:
    """
    Validate already-parsed pack data and convert it.

    Raises:
        MatrixValidationError: On version mismatch, schema errors or duplicate cells
    """
    if not isinstance(data, dict):
        raise MatrixValidationError(
            message="Matrix pack must be a mapping",
            details={"source": source, "type": type(data).__name__},
        )

    if not check_schema_version(data):
        raise MatrixValidationError(
            message=(
                f"Schema version mismatch: pack has {data.get('schema_version')}, "
                f"expected {SCHEMA_VERSION}"
            ),
            details={"source": source},
        )

    try:
        schema = validate_matrix_pack(data)
    except ValidationError as e:
        raise MatrixValidationError(
            message=f"Matrix pack validation failed: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False), "source": source},
        ) from e

    matrix = convert_matrix_pack(schema)
    logger.info(
        "Loaded penalty matrix %s (%d cells, hash %s)",
        matrix.matrix_id, len(matrix), matrix.matrix_hash[:12],
    )
    return matrix


def load_matrix_pack(path: Union[str, Path]) -> PenaltyMatrix:
    """
    Load a penalty matrix pack from a YAML or JSON file.

    Raises:
        MatrixLoadError: If the file cannot be read or parsed
        MatrixValidationError: If the content is invalid
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        data = _parse(content, path.suffix.lower())
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise MatrixLoadError(
            message=f"Failed to load penalty matrix pack: {e}",
            details={"path": str(path)},
        ) from e

    return load_matrix_from_data(data, source=str(path))


def load_matrix_pack_from_string(content: str, format: str = "yaml") -> PenaltyMatrix:
    """Load a penalty matrix pack from a YAML or JSON string."""
    try:
        data = _parse(content, ".json" if format.lower() == "json" else ".yaml")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise MatrixLoadError(message=f"Failed to parse penalty matrix pack: {e}") from e
    return load_matrix_from_data(data)


def resolve_matrix(path: Optional[Union[str, Path]] = None) -> PenaltyMatrix:
    """Return the pack at path, or the built-in matrix when no path is configured."""
    if path is None:
        return DEFAULT_PENALTY_MATRIX
    return load_matrix_pack(path)
