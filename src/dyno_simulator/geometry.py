"""
Geometry Module
Engine geometry and dyno unit conversions.

Author: Mohith Sai Gorla
Date:   16-10-2026

Mathematical Basis
------------------
Swept volume of a cylinder bank (bore D, stroke S, n cylinders):
    Vd = (π/4) · D² · S · n                                      [cm³]

Mean piston speed (two strokes per revolution):
    Up = 2 · S · N / 60                                          [m/s]

Brake mean effective pressure, 4-stroke (two revolutions per power stroke):
    T = BMEP · Vd / (4π)                                          [N·m]
    BMEP[psi] ≈ 150.8 · T[lb·ft] / Vd[L]      (pre-combined constant)

Theoretical 4-stroke pumping volume:
    Q = Vd[in³] · N / 3456                                        [ft³/min]
    (1728 in³/ft³ × 2 revolutions per intake event)

Power from torque:
    P[hp] = T[lb·ft] · N / 5252

All functions are total over their stated domain.  Degenerate inputs
(zero or negative displacement, stroke, denominators) return 0 rather than
propagating NaN/Inf.
"""

import math
from typing import Optional, Union

import numpy as np
import numpy.typing as npt

# ── Conversion constants ─────────────────────────────────────────────────────
CUBIC_INCHES_PER_LITER: float = 61.023744
NM_PER_LB_FT: float = 1.35581795
HP_TORQUE_CONSTANT: float = 5252.0  # lb·ft · rpm / hp
BMEP_PSI_CONSTANT: float = 150.8  # psi · L / (lb·ft), 4-stroke
CFM_DIVISOR: float = 3456.0  # in³/ft³ × 2 rev per intake
ATMOSPHERIC_PSI: float = 14.7
BAR_TO_PA: float = 1.0e5

# Specific torque of a gasoline engine at 100 % VE, used to back out VE
_TORQUE_PER_CID_AT_FULL_VE: float = 1.1  # lb·ft / in³
_VE_ESTIMATE_MIN: float = 0.6
_VE_ESTIMATE_MAX: float = 1.3
_VE_ESTIMATE_DEFAULT: float = 0.85

ArrayOrFloat = Union[float, npt.NDArray[np.float64]]


def displacement_liters(
    cylinders: Optional[int], bore_mm: Optional[float], stroke_mm: Optional[float]
) -> float:
    """Total swept volume  [L].

    Returns 0 when any input is missing, zero or negative; callers treat
    0 as "cannot simulate".
    """
    if not cylinders or not bore_mm or not stroke_mm:
        return 0.0
    if cylinders <= 0 or bore_mm <= 0.0 or stroke_mm <= 0.0:
        return 0.0
    bore_cm = bore_mm / 10.0
    stroke_cm = stroke_mm / 10.0
    cylinder_cc = (math.pi / 4.0) * bore_cm**2 * stroke_cm
    return cylinder_cc * cylinders / 1000.0


def liters_to_cubic_inches(liters: float) -> float:
    """Litres → cubic inches (CID)."""
    return liters * CUBIC_INCHES_PER_LITER


def mean_piston_speed_mps(stroke_mm: float, rpm: ArrayOrFloat) -> ArrayOrFloat:
    """Mean piston speed  Up = 2·S·N/60  [m/s].  0 for a non-positive stroke."""
    if not stroke_mm or stroke_mm <= 0.0:
        return 0.0 * rpm
    return 2.0 * (stroke_mm / 1000.0) * rpm / 60.0


def torque_from_bmep(bmep_bar: float, displacement_l: float) -> float:
    """Brake torque for a given BMEP on a 4-stroke engine  [lb·ft].

    T[N·m] = BMEP[Pa] · Vd[m³] / (4π), then converted to lb·ft.
    """
    if displacement_l <= 0.0:
        return 0.0
    torque_nm = bmep_bar * BAR_TO_PA * (displacement_l / 1000.0) / (4.0 * math.pi)
    return torque_nm / NM_PER_LB_FT


def bmep_from_torque(torque_lb_ft: ArrayOrFloat, displacement_l: float) -> ArrayOrFloat:
    """BMEP  [psi]  from brake torque (4-stroke)."""
    if displacement_l <= 0.0:
        return 0.0 * torque_lb_ft
    return BMEP_PSI_CONSTANT * torque_lb_ft / displacement_l


def airflow_cfm(
    displacement_l: float, rpm: ArrayOrFloat, ve_fraction: ArrayOrFloat
) -> ArrayOrFloat:
    """Engine airflow  [ft³/min]  at the given volumetric efficiency."""
    if displacement_l <= 0.0:
        return 0.0 * rpm
    cid = liters_to_cubic_inches(displacement_l)
    return cid * rpm / CFM_DIVISOR * ve_fraction


def horsepower_from_torque(torque_lb_ft: ArrayOrFloat, rpm: ArrayOrFloat) -> ArrayOrFloat:
    """P[hp] = T[lb·ft] · N / 5252."""
    return torque_lb_ft * rpm / HP_TORQUE_CONSTANT


def estimate_ve(torque_lb_ft: ArrayOrFloat, displacement_l: float) -> ArrayOrFloat:
    """Rough volumetric efficiency backed out of brake torque.

    Compares torque per cubic inch with 1.1 lb·ft/in³ at 100 % VE and
    clamps the result to [0.6, 1.3].
    """
    cid = liters_to_cubic_inches(displacement_l)
    if cid <= 0.0:
        return _VE_ESTIMATE_DEFAULT + 0.0 * torque_lb_ft
    ve = torque_lb_ft / (_TORQUE_PER_CID_AT_FULL_VE * cid)
    return np.clip(ve, _VE_ESTIMATE_MIN, _VE_ESTIMATE_MAX)


def pressure_ratio(boost_psi: float) -> float:
    """Manifold absolute / atmospheric pressure  PR = 1 + boost/14.7."""
    return 1.0 + boost_psi / ATMOSPHERIC_PSI
