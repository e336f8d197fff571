"""
Tests for the penalty calculator and the built-in matrix.

Tests cover:
- Every tabulated (role, type, severity) cell
- Untabulated combinations
- Half-up rounding to cents
- Custom matrices
"""
import pytest
from decimal import Decimal

from disputepilot.engine import PenaltyCalculator
from disputepilot.matrix import DEFAULT_PENALTY_MATRIX
from disputepilot.models import (
    ComplainantRole,
    PenaltyMatrix,
    PenaltyRule,
    ReclamationType,
    Severity,
)

from tests.helpers import make_booking, make_reclamation


G = ComplainantRole.GUEST
H = ComplainantRole.HOST
T = ReclamationType
S = Severity


# (role, type, severity, refund for rent=1000.00 deposit=500.00, points)
MATRIX_CELLS = [
    (G, T.ACCESS_ISSUE, S.LOW, "1500.00", 10),
    (G, T.ACCESS_ISSUE, S.MEDIUM, "1500.00", 10),
    (G, T.ACCESS_ISSUE, S.HIGH, "1500.00", 10),
    (G, T.ACCESS_ISSUE, S.CRITICAL, "1500.00", 10),
    (G, T.NOT_AS_DESCRIBED, S.LOW, "1500.00", 10),
    (G, T.NOT_AS_DESCRIBED, S.MEDIUM, "1500.00", 10),
    (G, T.NOT_AS_DESCRIBED, S.HIGH, "1500.00", 10),
    (G, T.NOT_AS_DESCRIBED, S.CRITICAL, "1500.00", 10),
    (G, T.CLEANLINESS, S.LOW, "550.00", 0),
    (G, T.CLEANLINESS, S.MEDIUM, "625.00", 2),
    (G, T.CLEANLINESS, S.HIGH, "825.00", 5),
    (G, T.CLEANLINESS, S.CRITICAL, "1000.00", 10),
    (G, T.SAFETY_HEALTH, S.LOW, "600.00", 3),
    (G, T.SAFETY_HEALTH, S.MEDIUM, "800.00", 7),
    (G, T.SAFETY_HEALTH, S.HIGH, "1200.00", 15),
    (G, T.SAFETY_HEALTH, S.CRITICAL, "1500.00", 25),
    (H, T.PROPERTY_DAMAGE, S.LOW, "37.50", 2),
    (H, T.PROPERTY_DAMAGE, S.MEDIUM, "150.00", 5),
    (H, T.PROPERTY_DAMAGE, S.HIGH, "350.00", 10),
    (H, T.PROPERTY_DAMAGE, S.CRITICAL, "500.00", 15),
    (H, T.EXTRA_CLEANING, S.LOW, "37.50", 1),
    (H, T.EXTRA_CLEANING, S.MEDIUM, "100.00", 3),
    (H, T.EXTRA_CLEANING, S.HIGH, "200.00", 5),
    (H, T.EXTRA_CLEANING, S.CRITICAL, "350.00", 8),
    (H, T.HOUSE_RULE_VIOLATION, S.LOW, "0.00", 2),
    (H, T.HOUSE_RULE_VIOLATION, S.MEDIUM, "75.00", 5),
    (H, T.HOUSE_RULE_VIOLATION, S.HIGH, "250.00", 10),
    (H, T.HOUSE_RULE_VIOLATION, S.CRITICAL, "500.00", 15),
    (H, T.UNAUTHORIZED_GUESTS_OR_STAY, S.LOW, "50.00", 3),
    (H, T.UNAUTHORIZED_GUESTS_OR_STAY, S.MEDIUM, "162.50", 7),
    (H, T.UNAUTHORIZED_GUESTS_OR_STAY, S.HIGH, "350.00", 12),
    (H, T.UNAUTHORIZED_GUESTS_OR_STAY, S.CRITICAL, "500.00", 20),
]


# =============================================================================
# Matrix Cells
# =============================================================================

class TestMatrixCells:
    """Every cell of the built-in table."""

    @pytest.mark.parametrize("role,rtype,severity,refund,points", MATRIX_CELLS)
    def test_tabulated_cell(self, role, rtype, severity, refund, points):
        """Calculator returns the tabulated refund and points."""
        result = PenaltyCalculator().calculate(rtype, severity, role, "1000.00", "500.00")

        assert result.refund_amount == Decimal(refund)
        assert result.penalty_points == points
        assert result.matched

    def test_table_is_complete(self):
        """The default matrix holds exactly the tabulated cells."""
        assert len(DEFAULT_PENALTY_MATRIX) == len(MATRIX_CELLS)
        assert len(DEFAULT_PENALTY_MATRIX.variants()) == 8

    def test_warning_only_cell_is_annotated(self):
        """HOUSE_RULE_VIOLATION/LOW carries points but no money."""
        rule = DEFAULT_PENALTY_MATRIX.lookup(H, T.HOUSE_RULE_VIOLATION, S.LOW)
        assert rule.note == "warning only"
        assert rule.points == 2


# =============================================================================
# Untabulated Combinations
# =============================================================================

class TestUntabulated:
    """Combinations outside the table yield nothing."""

    @pytest.mark.parametrize("role,rtype", [
        (G, T.PROPERTY_DAMAGE),
        (G, T.EXTRA_CLEANING),
        (G, T.HOUSE_RULE_VIOLATION),
        (G, T.UNAUTHORIZED_GUESTS_OR_STAY),
        (H, T.ACCESS_ISSUE),
        (H, T.NOT_AS_DESCRIBED),
        (H, T.CLEANLINESS),
        (H, T.SAFETY_HEALTH),
    ])
    @pytest.mark.parametrize("severity", list(Severity))
    def test_untabulated_returns_zero(self, role, rtype, severity):
        result = PenaltyCalculator().calculate(rtype, severity, role, "1000.00", "500.00")

        assert result.refund_amount == Decimal("0.00")
        assert result.penalty_points == 0
        assert not result.matched


# =============================================================================
# Rounding and Inputs
# =============================================================================

class TestRounding:
    """Amounts are quantized to cents, half-up."""

    def test_half_cent_rounds_up(self):
        """12.5% of 100.20 is 12.525, which rounds to 12.53."""
        result = PenaltyCalculator().calculate(T.CLEANLINESS, S.MEDIUM, G, "100.20", "0")
        assert result.refund_amount == Decimal("12.53")

    def test_deposit_fraction_rounding(self):
        """7.5% of 333.33 is 24.99975, which rounds to 25.00."""
        result = PenaltyCalculator().calculate(T.PROPERTY_DAMAGE, S.LOW, H, "0", "333.33")
        assert result.refund_amount == Decimal("25.00")

    def test_float_pools_accepted(self):
        result = PenaltyCalculator().calculate(T.CLEANLINESS, S.HIGH, G, 1000.0, 500.0)
        assert result.refund_amount == Decimal("825.00")

    def test_zero_pools(self):
        result = PenaltyCalculator().calculate(T.SAFETY_HEALTH, S.CRITICAL, G, "0", "0")
        assert result.refund_amount == Decimal("0.00")
        assert result.penalty_points == 25

    def test_negative_pool_rejected(self):
        with pytest.raises(ValueError):
            PenaltyCalculator().calculate(T.CLEANLINESS, S.HIGH, G, "-1", "500")


class TestCalculatorInputs:
    """Calculator wiring."""

    def test_calculate_for_reclamation(self):
        """Classification comes from the reclamation, pools from the booking."""
        reclamation = make_reclamation(severity=S.HIGH)
        result = PenaltyCalculator().calculate_for(reclamation, make_booking())

        assert result.refund_amount == Decimal("825.00")
        assert result.penalty_points == 5

    def test_custom_matrix(self):
        """A supplied matrix replaces the default table entirely."""
        matrix = PenaltyMatrix(
            matrix_id="custom",
            rules={
                (G, T.CLEANLINESS, S.LOW): PenaltyRule(
                    rent_fraction=Decimal("0.2"),
                    deposit_fraction=Decimal("0"),
                    points=4,
                ),
            },
        )
        calculator = PenaltyCalculator(matrix)

        low = calculator.calculate(T.CLEANLINESS, S.LOW, G, "1000.00", "500.00")
        high = calculator.calculate(T.CLEANLINESS, S.HIGH, G, "1000.00", "500.00")

        assert low.refund_amount == Decimal("200.00")
        assert low.penalty_points == 4
        assert high.refund_amount == Decimal("0.00")
        assert not high.matched
