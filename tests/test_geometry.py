"""
Unit tests for geometry and unit-conversion helpers.
"""

import math

import numpy as np
import pytest

from dyno_simulator.geometry import (
    CUBIC_INCHES_PER_LITER,
    airflow_cfm,
    bmep_from_torque,
    displacement_liters,
    estimate_ve,
    horsepower_from_torque,
    liters_to_cubic_inches,
    mean_piston_speed_mps,
    pressure_ratio,
    torque_from_bmep,
)


class TestDisplacement:
    def test_inline_four(self):
        expected = math.pi / 4.0 * 8.7**2 * 9.9 * 4 / 1000.0
        assert displacement_liters(4, 87.0, 99.0) == pytest.approx(expected)
        assert displacement_liters(4, 87.0, 99.0) == pytest.approx(2.354, abs=1e-3)

    def test_scales_with_cylinders(self):
        one = displacement_liters(1, 100.0, 100.0)
        assert displacement_liters(8, 100.0, 100.0) == pytest.approx(8 * one)

    @pytest.mark.parametrize(
        "cylinders, bore, stroke",
        [(0, 87.0, 99.0), (None, 87.0, 99.0), (4, 0.0, 99.0), (4, 87.0, -1.0), (4, None, 99.0)],
    )
    def test_degenerate_inputs_give_zero(self, cylinders, bore, stroke):
        assert displacement_liters(cylinders, bore, stroke) == 0.0

    def test_cubic_inches(self):
        assert liters_to_cubic_inches(1.0) == pytest.approx(CUBIC_INCHES_PER_LITER)
        assert liters_to_cubic_inches(5.7) == pytest.approx(347.8, abs=0.1)


class TestPistonSpeed:
    def test_known_value(self):
        # 2 × 0.099 m × 7500 / 60
        assert mean_piston_speed_mps(99.0, 7500.0) == pytest.approx(24.75)

    def test_vectorised(self):
        rpm = np.array([1000.0, 2000.0, 4000.0])
        speed = mean_piston_speed_mps(90.0, rpm)
        assert speed.shape == rpm.shape
        assert np.allclose(speed / rpm, speed[0] / rpm[0])

    def test_non_positive_stroke(self):
        assert mean_piston_speed_mps(0.0, 6000.0) == 0.0
        assert np.all(mean_piston_speed_mps(-5.0, np.array([1000.0, 2000.0])) == 0.0)


class TestBmepAndTorque:
    def test_torque_from_bmep(self):
        torque_nm = 10.0e5 * 0.002 / (4.0 * math.pi)
        assert torque_from_bmep(10.0, 2.0) == pytest.approx(torque_nm / 1.35581795)

    def test_torque_from_bmep_zero_displacement(self):
        assert torque_from_bmep(10.0, 0.0) == 0.0

    def test_bmep_from_torque(self):
        assert bmep_from_torque(100.0, 2.0) == pytest.approx(7540.0)

    def test_bmep_zero_displacement(self):
        assert bmep_from_torque(100.0, 0.0) == 0.0

    def test_horsepower_crosses_torque_at_5252(self):
        assert horsepower_from_torque(300.0, 5252.0) == pytest.approx(300.0)
        assert horsepower_from_torque(300.0, 2626.0) == pytest.approx(150.0)


class TestAirflow:
    def test_known_value(self):
        expected = 5.7 * CUBIC_INCHES_PER_LITER * 6000.0 / 3456.0
        assert airflow_cfm(5.7, 6000.0, 1.0) == pytest.approx(expected)

    def test_scales_with_ve(self):
        assert airflow_cfm(2.0, 5000.0, 0.5) == pytest.approx(0.5 * airflow_cfm(2.0, 5000.0, 1.0))

    def test_zero_displacement(self):
        assert airflow_cfm(0.0, 5000.0, 0.9) == 0.0


class TestVolumetricEfficiencyEstimate:
    def test_unity_at_reference_specific_torque(self):
        cid = liters_to_cubic_inches(2.0)
        assert estimate_ve(1.1 * cid, 2.0) == pytest.approx(1.0)

    def test_clamped(self):
        assert estimate_ve(0.0, 2.0) == pytest.approx(0.6)
        assert estimate_ve(1.0e6, 2.0) == pytest.approx(1.3)

    def test_default_without_displacement(self):
        assert estimate_ve(200.0, 0.0) == pytest.approx(0.85)


def test_pressure_ratio():
    assert pressure_ratio(0.0) == 1.0
    assert pressure_ratio(14.7) == pytest.approx(2.0)
