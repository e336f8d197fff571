"""
Tests for penalty matrix packs.

Validates:
- YAML and JSON packs load from strings and files
- "*" severity expands to every severity
- Malformed packs fail with MatrixValidationError
- Guest fractions agree with how the plan pays the refund
- Unreadable files fail with MatrixLoadError
- Hash is stable and ignores notes
"""
import json
import pytest
from decimal import Decimal

import yaml

from disputepilot.exceptions import MatrixLoadError, MatrixValidationError
from disputepilot.matrix import (
    DEFAULT_PENALTY_MATRIX,
    load_matrix_from_data,
    load_matrix_pack,
    load_matrix_pack_from_string,
    resolve_matrix,
)
from disputepilot.engine import DistributionPlanner, PenaltyCalculator
from disputepilot.models import ComplainantRole, Party, PartyWallets, ReclamationType, Severity

from tests.helpers import GUEST_WALLET, HOST_WALLET, PLATFORM_WALLET, make_booking


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def minimal_pack():
    """Two variants, one expanded with '*'."""
    return {
        "schema_version": "1.0.0",
        "matrix_id": "test-pack",
        "rules": [
            {
                "role": "GUEST",
                "type": "ACCESS_ISSUE",
                "severity": "*",
                "rent_fraction": "1",
                "deposit_fraction": "1",
                "points": 10,
            },
            {
                "role": "HOST",
                "type": "PROPERTY_DAMAGE",
                "severity": "HIGH",
                "deposit_fraction": "0.70",
                "points": 10,
                "note": "broken furniture",
            },
        ],
    }


YAML_PACK = """
schema_version: "1.0.0"
matrix_id: yaml-pack
rules:
  - {role: GUEST, type: CLEANLINESS, severity: HIGH, rent_fraction: "0.325", deposit_fraction: "1", points: 5}
  - {role: HOST, type: EXTRA_CLEANING, severity: LOW, deposit_fraction: "0.075", points: 1}
"""


# ============================================================================
# LOADING
# ============================================================================

class TestLoadFromData:

    def test_star_expands_to_all_severities(self, minimal_pack):
        matrix = load_matrix_from_data(minimal_pack)

        assert matrix.matrix_id == "test-pack"
        assert len(matrix) == 5
        for severity in Severity:
            rule = matrix.lookup(ComplainantRole.GUEST, ReclamationType.ACCESS_ISSUE, severity)
            assert rule.points == 10

    def test_omitted_cells_are_absent(self, minimal_pack):
        matrix = load_matrix_from_data(minimal_pack)
        assert matrix.lookup(
            ComplainantRole.HOST, ReclamationType.PROPERTY_DAMAGE, Severity.LOW,
        ) is None

    def test_lowercase_values_accepted(self, minimal_pack):
        minimal_pack["rules"][1]["role"] = "host"
        minimal_pack["rules"][1]["severity"] = "high"

        matrix = load_matrix_from_data(minimal_pack)

        rule = matrix.lookup(ComplainantRole.HOST, ReclamationType.PROPERTY_DAMAGE, Severity.HIGH)
        assert rule.deposit_fraction == Decimal("0.70")

    def test_missing_schema_version_defaults(self, minimal_pack):
        del minimal_pack["schema_version"]
        assert len(load_matrix_from_data(minimal_pack)) == 5


class TestLoadFromString:

    def test_yaml(self):
        matrix = load_matrix_pack_from_string(YAML_PACK)

        rule = matrix.lookup(ComplainantRole.GUEST, ReclamationType.CLEANLINESS, Severity.HIGH)
        assert rule.rent_fraction == Decimal("0.325")
        assert len(matrix) == 2

    def test_json(self, minimal_pack):
        matrix = load_matrix_pack_from_string(json.dumps(minimal_pack), format="json")
        assert matrix.matrix_id == "test-pack"

    def test_malformed_yaml(self):
        with pytest.raises(MatrixLoadError):
            load_matrix_pack_from_string("rules: [unclosed")


class TestLoadFromFile:

    def test_yaml_file(self, tmp_path, minimal_pack):
        path = tmp_path / "pack.yaml"
        path.write_text(yaml.safe_dump(minimal_pack))

        assert load_matrix_pack(path).matrix_id == "test-pack"

    def test_json_file(self, tmp_path, minimal_pack):
        path = tmp_path / "pack.json"
        path.write_text(json.dumps(minimal_pack))

        assert len(load_matrix_pack(str(path))) == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(MatrixLoadError) as exc_info:
            load_matrix_pack(tmp_path / "absent.yaml")
        assert exc_info.value.details["path"].endswith("absent.yaml")

    def test_malformed_json_file(self, tmp_path):
        path = tmp_path / "pack.json"
        path.write_text("{not json")
        with pytest.raises(MatrixLoadError):
            load_matrix_pack(path)


# ============================================================================
# VALIDATION
# ============================================================================

class TestValidation:

    def test_not_a_mapping(self):
        with pytest.raises(MatrixValidationError):
            load_matrix_from_data(["rules"])

    def test_major_version_mismatch(self, minimal_pack):
        minimal_pack["schema_version"] = "2.0.0"
        with pytest.raises(MatrixValidationError) as exc_info:
            load_matrix_from_data(minimal_pack)
        assert "2.0.0" in exc_info.value.message

    def test_minor_version_accepted(self, minimal_pack):
        minimal_pack["schema_version"] = "1.4.0"
        load_matrix_from_data(minimal_pack)

    def test_duplicate_cells(self, minimal_pack):
        minimal_pack["rules"].append({
            "role": "GUEST", "type": "ACCESS_ISSUE", "severity": "LOW",
            "rent_fraction": "1", "deposit_fraction": "1", "points": 1,
        })

        with pytest.raises(MatrixValidationError) as exc_info:
            load_matrix_from_data(minimal_pack)

        assert exc_info.value.details["duplicates"] == ["GUEST/ACCESS_ISSUE/LOW"]

    def test_host_rent_fraction_rejected(self, minimal_pack):
        minimal_pack["rules"][1]["rent_fraction"] = "0.10"
        with pytest.raises(MatrixValidationError) as exc_info:
            load_matrix_from_data(minimal_pack)
        assert exc_info.value.details["errors"]

    @pytest.mark.parametrize("field,value", [
        ("deposit_fraction", "1.5"),
        ("rent_fraction", "-0.1"),
        ("points", -1),
        ("type", "NOISE"),
        ("severity", "EXTREME"),
        ("role", "PLATFORM"),
    ])
    def test_bad_rule_values(self, minimal_pack, field, value):
        minimal_pack["rules"][0][field] = value
        with pytest.raises(MatrixValidationError):
            load_matrix_from_data(minimal_pack)

    def test_unknown_field_rejected(self, minimal_pack):
        minimal_pack["rules"][0]["refund_everything"] = True
        with pytest.raises(MatrixValidationError):
            load_matrix_from_data(minimal_pack)

    def test_empty_rules_rejected(self, minimal_pack):
        minimal_pack["rules"] = []
        with pytest.raises(MatrixValidationError):
            load_matrix_from_data(minimal_pack)


class TestFractionsMatchPayout:
    """Guest rows must use fractions the distribution plan actually pays out."""

    @pytest.mark.parametrize("rtype,rent_fraction,deposit_fraction", [
        ("ACCESS_ISSUE", "0.5", "0.5"),
        ("ACCESS_ISSUE", "1", "0.5"),
        ("NOT_AS_DESCRIBED", "0.5", "1"),
        ("CLEANLINESS", "0.10", "0.5"),
        ("SAFETY_HEALTH", "0.70", "0"),
        ("PROPERTY_DAMAGE", "0.2", "0.5"),
    ])
    def test_guest_fraction_mismatch_rejected(self, rtype, rent_fraction, deposit_fraction):
        pack = {
            "matrix_id": "mismatch",
            "rules": [{
                "role": "GUEST", "type": rtype, "severity": "LOW",
                "rent_fraction": rent_fraction, "deposit_fraction": deposit_fraction,
                "points": 1,
            }],
        }
        with pytest.raises(MatrixValidationError) as exc_info:
            load_matrix_from_data(pack)
        assert exc_info.value.details["errors"]

    def test_guest_payout_equals_refund(self):
        matrix = load_matrix_from_data({
            "matrix_id": "consistent",
            "rules": [
                {"role": "GUEST", "type": "ACCESS_ISSUE", "severity": "*",
                 "rent_fraction": "1", "deposit_fraction": "1", "points": 10},
                {"role": "GUEST", "type": "CLEANLINESS", "severity": "*",
                 "rent_fraction": "0.10", "deposit_fraction": "1", "points": 2},
                {"role": "GUEST", "type": "PROPERTY_DAMAGE", "severity": "*",
                 "rent_fraction": "0.2", "points": 1},
            ],
        })
        calculator = PenaltyCalculator(matrix)
        planner = DistributionPlanner(platform_wallet=PLATFORM_WALLET)
        booking = make_booking()

        for rtype in (
            ReclamationType.ACCESS_ISSUE,
            ReclamationType.CLEANLINESS,
            ReclamationType.PROPERTY_DAMAGE,
        ):
            result = calculator.calculate(
                rtype, Severity.LOW, ComplainantRole.GUEST,
                booking.rent_total, booking.deposit_total,
            )
            plan = planner.plan(
                booking, ComplainantRole.GUEST, rtype, result.refund_amount,
                PartyWallets(guest=GUEST_WALLET, host=HOST_WALLET),
            )
            assert plan.total_to(Party.GUEST) == result.refund_amount, rtype


# ============================================================================
# DETERMINISM
# ============================================================================

class TestHash:

    def test_same_content_same_hash(self, minimal_pack):
        first = load_matrix_from_data(minimal_pack)
        second = load_matrix_pack_from_string(json.dumps(minimal_pack), format="json")
        assert first.matrix_hash == second.matrix_hash

    def test_notes_do_not_change_hash(self, minimal_pack):
        before = load_matrix_from_data(minimal_pack).matrix_hash
        minimal_pack["rules"][1]["note"] = "reworded"
        assert load_matrix_from_data(minimal_pack).matrix_hash == before

    def test_points_change_hash(self, minimal_pack):
        before = load_matrix_from_data(minimal_pack).matrix_hash
        minimal_pack["rules"][1]["points"] = 11
        assert load_matrix_from_data(minimal_pack).matrix_hash != before


class TestResolveMatrix:

    def test_none_gives_builtin(self):
        assert resolve_matrix(None) is DEFAULT_PENALTY_MATRIX
        assert len(DEFAULT_PENALTY_MATRIX) == 32

    def test_path_loads_pack(self, tmp_path, minimal_pack):
        path = tmp_path / "pack.yml"
        path.write_text(yaml.safe_dump(minimal_pack))
        assert resolve_matrix(path).matrix_id == "test-pack"
