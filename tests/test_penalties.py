"""
Unit tests for the global penalty layer.
"""

import numpy as np
import pytest

from dyno_simulator.penalties import (
    GlobalPenalties,
    apply_penalties,
    knock_factor,
    piston_speed_factor,
    size_factor,
    ve_scale,
)


class TestPistonSpeedFactor:
    def test_no_penalty_at_or_below_limit(self):
        factor = piston_speed_factor(np.array([10.0, 20.0, 25.0]), 25.0)
        assert np.all(factor == 1.0)

    def test_linear_degradation(self):
        # 50 % over the limit costs 25 %
        assert piston_speed_factor(30.0, 20.0) == pytest.approx(0.75)

    def test_floor(self):
        assert piston_speed_factor(100.0, 20.0) == pytest.approx(0.6)

    def test_disabled_by_non_positive_limit(self):
        factor = piston_speed_factor(np.array([10.0, 40.0]), 0.0)
        assert np.all(factor == 1.0)


class TestSizeFactor:
    def test_below_threshold(self):
        assert size_factor(1.8, 2.0, 2.0, 0.65) == 1.0

    def test_linear_above_threshold(self):
        # 3 L over × 2 %/L
        assert size_factor(5.0, 2.0, 2.0, 0.65) == pytest.approx(0.94)

    def test_floor(self):
        assert size_factor(40.0, 5.0, 2.0, 0.65) == pytest.approx(0.65)

    def test_no_penalty_when_disabled(self):
        assert size_factor(8.0, 0.0, 2.0, 0.65) == 1.0


def test_ve_scale():
    assert ve_scale(95.0, 0.95) == pytest.approx(1.0)
    assert ve_scale(105.0, 0.95) == pytest.approx(1.05 / 0.95)
    assert ve_scale(90.0, 0.0) == 1.0


class TestKnockFactor:
    def test_at_ceiling_is_exactly_one(self):
        assert knock_factor(9.0, 2.0, 18.0) == 1.0

    def test_below_ceiling(self):
        assert knock_factor(10.0, 1.0, 18.0) == 1.0

    def test_softened_above_ceiling(self):
        factor = knock_factor(10.0, 2.0, 18.0)
        assert factor == pytest.approx(0.9**0.9)
        # Softer than a linear penalty
        assert factor > 18.0 / 20.0

    def test_floor(self):
        assert knock_factor(12.0, 5.0, 18.0) == pytest.approx(0.6)


class TestApplyPenalties:
    def test_flat_factor(self):
        penalties = GlobalPenalties(compression=0.9, ve=1.1, size=0.95, knock=0.8)
        assert penalties.flat_factor == pytest.approx(0.9 * 1.1 * 0.95 * 0.8)

    def test_default_penalties_are_identity(self):
        rpm = np.array([1000, 2000, 3000])
        raw = np.array([100.0, 150.0, 120.0])
        out = apply_penalties(rpm, raw, GlobalPenalties(), 80.0, 25.0)
        assert np.allclose(out, raw)

    def test_only_overspeed_points_lose_extra_torque(self):
        rpm = np.array([5000, 10000])  # 15 m/s and 30 m/s with 90 mm stroke
        raw = np.array([200.0, 200.0])
        penalties = GlobalPenalties(compression=0.9)
        out = apply_penalties(rpm, raw, penalties, 90.0, 20.0)
        assert out[0] == pytest.approx(180.0)
        assert out[1] == pytest.approx(180.0 * 0.75)
