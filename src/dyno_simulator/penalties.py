"""
Penalties Module
Cross-cutting multiplicative corrections applied to every shape model.

Author: Mohith Sai Gorla
Date:   16-10-2026

Factors
-------
piston speed   f_ps  = max(0.6, 1 − 0.5 · (Up − Up_lim) / Up_lim)    (Up > Up_lim)
size           f_sz  = max(floor, 1 − (p/100) · (Vd − Vd_ref))        (Vd > Vd_ref)
VE scaling     f_ve  = (VE_peak / 100) / VE_ref
knock          f_kn  = clamp((K / (CR·PR))^0.9, 0.6, 1)                 (CR·PR > K)
compression    f_cr  from compression.resolve_compression_boost

All factors are independent and compose by multiplication, so the order in
which they are applied does not matter.  Only the piston-speed factor
depends on RPM.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from .geometry import mean_piston_speed_mps

PISTON_SPEED_PENALTY_SLOPE: float = 0.5
PISTON_SPEED_PENALTY_FLOOR: float = 0.6
KNOCK_PENALTY_EXPONENT: float = 0.9
KNOCK_PENALTY_FLOOR: float = 0.6


def piston_speed_factor(
    piston_speed_mps: npt.ArrayLike, limit_mps: float
) -> npt.NDArray[np.float64]:
    """Piston-speed penalty, degrading linearly with fractional overspeed.

    Returns an array shaped like *piston_speed_mps*; 1 at or below the limit.
    A non-positive limit disables the penalty.
    """
    speed = np.asarray(piston_speed_mps, dtype=float)
    if limit_mps <= 0.0:
        return np.ones_like(speed)
    excess = np.maximum(speed - limit_mps, 0.0) / limit_mps
    return np.maximum(PISTON_SPEED_PENALTY_FLOOR, 1.0 - PISTON_SPEED_PENALTY_SLOPE * excess)


def size_factor(
    displacement_l: float,
    penalty_percent_per_liter: float,
    threshold_l: float,
    floor: float,
) -> float:
    """Displacement-size efficiency penalty (1 at or below the threshold)."""
    if displacement_l <= threshold_l or penalty_percent_per_liter <= 0.0:
        return 1.0
    penalty = (penalty_percent_per_liter / 100.0) * (displacement_l - threshold_l)
    return max(floor, 1.0 - penalty)


def ve_scale(peak_ve_percent: float, ve_reference: float) -> float:
    """User peak VE relative to the archetype's reference VE."""
    if ve_reference <= 0.0:
        return 1.0
    return (peak_ve_percent / 100.0) / ve_reference


def knock_factor(
    compression_ratio: float, pressure_ratio: float, knock_ceiling: float
) -> float:
    """Softened knock penalty on CR × PR above the fuel's ceiling.

    Exactly 1 at the ceiling; sub-linear above it and floored at 0.6, so a
    mild overshoot costs little and a severe one saturates.
    """
    crpr = compression_ratio * pressure_ratio
    if crpr <= knock_ceiling:
        return 1.0
    factor = (knock_ceiling / crpr) ** KNOCK_PENALTY_EXPONENT
    return max(KNOCK_PENALTY_FLOOR, min(factor, 1.0))


@dataclass(frozen=True)
class GlobalPenalties:
    """RPM-independent factors resolved once per simulation."""

    compression: float = 1.0
    ve: float = 1.0
    size: float = 1.0
    knock: float = 1.0

    @property
    def flat_factor(self) -> float:
        """Product of all RPM-independent factors."""
        return self.compression * self.ve * self.size * self.knock


def apply_penalties(
    rpm: npt.NDArray,
    raw_torque: npt.NDArray[np.float64],
    penalties: GlobalPenalties,
    stroke_mm: float,
    piston_speed_limit_mps: float,
) -> npt.NDArray[np.float64]:
    """Scale a raw shape-model curve by every global penalty.

    Parameters
    ----------
    rpm                    : RPM grid
    raw_torque             : lb·ft, aligned with *rpm*
    penalties              : flat factors
    stroke_mm              : used for mean piston speed
    piston_speed_limit_mps : m/s

    Returns
    -------
    ndarray  penalised torque  [lb·ft]
    """
    speed = mean_piston_speed_mps(stroke_mm, np.asarray(rpm, dtype=float))
    return (
        np.asarray(raw_torque, dtype=float)
        * penalties.flat_factor
        * piston_speed_factor(speed, piston_speed_limit_mps)
    )
