"""
Shape Models Module
Raw torque-vs-RPM curves, one model per engine archetype.

Author: Mohith Sai Gorla
Date:   16-10-2026

Every model follows the same recipe:

1.  Peak torque magnitude from displacement
        gasoline / methanol : T_pk = k · CID · f_tech [· PR]      [lb·ft]
        diesel              : T_pk = T(BMEP_base · PR, Vd)        [lb·ft]
2.  Peak-torque RPM as a fraction of redline.
3.  Piecewise rise / (plateau) / fall shape normalised to 1 at the peak

        rise   : s = s_lo + (1 − s_lo) · (N / N_pk)^a              N ≤ N_pk
        plateau: s = 1 − σ · (N − N_pk) / (N_pe − N_pk)            N_pk < N ≤ N_pe
        fall   : s = s_pe − (s_pe − s_hi) · y^b,
                 y = (N − N_pe) / (N_red − N_pe)                   N > N_pe

    Boosted models multiply an NA base curve by a static, RPM-indexed
    boost multiplier (spool ramp, plateau, top-end taper).  Boost is a
    function of steady-state RPM only; there is no time-domain lag.

The size, VE, compression and knock scalings are not applied here; the
penalty layer applies them exactly once using each archetype's constants.

All numbers live in ``ARCHETYPE_CONSTANTS``; the functions are shared.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict

import numpy as np
import numpy.typing as npt

from .engine_config import FuelType, InductionType, ValvetrainType
from .geometry import liters_to_cubic_inches, pressure_ratio, torque_from_bmep

HEAVY_DUTY_DIESEL_MIN_LITERS: float = 8.0

# Valvetrain "tech factor"
_LAYOUT_TECH_FACTOR: Dict[ValvetrainType, float] = {
    ValvetrainType.PUSHROD: 0.94,
    ValvetrainType.SOHC: 1.00,
    ValvetrainType.DOHC: 1.03,
}
_VALVE_TECH_FACTOR: Dict[int, float] = {2: 0.98, 3: 1.00}
_MULTI_VALVE_TECH_FACTOR: float = 1.02  # 4 valves and up


# ── Archetypes ────────────────────────────────────────────────────────────────


class Archetype(Enum):
    """Closed set of engine archetypes, each with its own shape model."""

    NA_PUSHROD = "na_pushrod"
    NA_OHC = "na_ohc"
    TURBO_PUSHROD = "turbo_pushrod"
    TURBO_OHC = "turbo_ohc"
    SUPERCHARGED = "supercharged"
    DIESEL_LIGHT_DUTY = "diesel_light_duty"
    DIESEL_HEAVY_DUTY = "diesel_heavy_duty"
    METHANOL = "methanol"


@dataclass(frozen=True)
class ArchetypeConstants:
    """Per-archetype tuning numbers.

    Attributes
    ----------
    peak_rpm_fraction    : peak-torque RPM / redline
    low_floor            : torque fraction at 0 rpm on the rise branch
    rise_exponent        : power-law exponent of the rise branch
    high_floor           : torque fraction at redline
    fall_exponent        : power-law exponent of the fall branch
    torque_per_cid       : lb·ft / in³ at peak (spark-ignition models)
    base_bmep_bar        : bar at peak before boost (diesel models)
    dohc_peak_shift      : added to peak_rpm_fraction for DOHC heads
    valve_peak_shift     : added to peak_rpm_fraction per valve above 2
    valve_rise_shift     : added to rise_exponent per valve above 2
    valve_floor_shift    : added to high_floor per valve above 2
    plateau_end_fraction : end of the torque or boost plateau / redline
    plateau_sag          : torque lost across a diesel plateau
    spool_start_rpm      : boost starts building
    full_boost_rpm       : full boost reached
    top_taper            : multiplier loss at redline after the plateau
    taper_floor          : lower bound on the top-end taper multiplier
    fuel_bonus           : flat torque multiplier for the fuel
    high_rpm_bonus       : torque retention bonus approaching redline
    size_threshold_l     : displacement above which the size penalty applies
    size_floor           : lower bound on the size penalty
    ve_reference         : VE fraction at which the user VE scale is 1
    """

    peak_rpm_fraction: float
    low_floor: float
    rise_exponent: float
    high_floor: float
    fall_exponent: float
    torque_per_cid: float = 0.0
    base_bmep_bar: float = 0.0
    dohc_peak_shift: float = 0.0
    valve_peak_shift: float = 0.0
    valve_rise_shift: float = 0.0
    valve_floor_shift: float = 0.0
    plateau_end_fraction: float = 0.0
    plateau_sag: float = 0.0
    spool_start_rpm: float = 0.0
    full_boost_rpm: float = 0.0
    top_taper: float = 0.0
    taper_floor: float = 0.0
    fuel_bonus: float = 1.0
    high_rpm_bonus: float = 0.0
    size_threshold_l: float = 2.0
    size_floor: float = 0.65
    ve_reference: float = 0.95


ARCHETYPE_CONSTANTS: Dict[Archetype, ArchetypeConstants] = {
    Archetype.NA_PUSHROD: ArchetypeConstants(
        peak_rpm_fraction=0.58,
        low_floor=0.45,
        rise_exponent=0.75,
        high_floor=0.45,
        fall_exponent=1.2,
        torque_per_cid=1.18,
    ),
    Archetype.NA_OHC: ArchetypeConstants(
        peak_rpm_fraction=0.65,
        low_floor=0.40,
        rise_exponent=1.0,
        high_floor=0.56,
        fall_exponent=1.2,
        torque_per_cid=1.18,
        dohc_peak_shift=0.05,
        valve_peak_shift=0.01,
        valve_rise_shift=0.02,
        valve_floor_shift=0.03,
    ),
    Archetype.TURBO_PUSHROD: ArchetypeConstants(
        peak_rpm_fraction=0.58,
        low_floor=0.45,
        rise_exponent=0.75,
        high_floor=0.45,
        fall_exponent=1.2,
        torque_per_cid=1.18,
        plateau_end_fraction=0.85,
        spool_start_rpm=2300.0,
        full_boost_rpm=3200.0,
        top_taper=0.45,
        size_threshold_l=3.0,
        size_floor=0.75,
    ),
    Archetype.TURBO_OHC: ArchetypeConstants(
        peak_rpm_fraction=0.65,
        low_floor=0.40,
        rise_exponent=1.0,
        high_floor=0.56,
        fall_exponent=1.2,
        torque_per_cid=1.18,
        dohc_peak_shift=0.05,
        valve_peak_shift=0.01,
        valve_rise_shift=0.02,
        valve_floor_shift=0.03,
        plateau_end_fraction=0.70,
        spool_start_rpm=1500.0,
        full_boost_rpm=2000.0,
        top_taper=0.18,
        size_threshold_l=3.0,
        size_floor=0.75,
    ),
    Archetype.SUPERCHARGED: ArchetypeConstants(
        peak_rpm_fraction=0.65,
        low_floor=0.40,
        rise_exponent=1.0,
        high_floor=0.56,
        fall_exponent=1.2,
        torque_per_cid=1.18,
        dohc_peak_shift=0.05,
        valve_peak_shift=0.01,
        valve_rise_shift=0.02,
        valve_floor_shift=0.03,
        plateau_end_fraction=0.90,
        spool_start_rpm=0.0,
        full_boost_rpm=1500.0,
        top_taper=0.20,
        taper_floor=0.80,
        size_threshold_l=3.0,
        size_floor=0.75,
    ),
    Archetype.DIESEL_LIGHT_DUTY: ArchetypeConstants(
        peak_rpm_fraction=0.40,
        low_floor=0.55,
        rise_exponent=0.7,
        high_floor=0.60,
        fall_exponent=1.2,
        base_bmep_bar=9.5,
        plateau_end_fraction=0.75,
        plateau_sag=0.05,
        size_threshold_l=6.0,
        size_floor=0.85,
    ),
    Archetype.DIESEL_HEAVY_DUTY: ArchetypeConstants(
        peak_rpm_fraction=0.38,
        low_floor=0.60,
        rise_exponent=0.7,
        high_floor=0.60,
        fall_exponent=1.2,
        base_bmep_bar=11.0,
        plateau_end_fraction=0.85,
        plateau_sag=0.05,
        size_threshold_l=6.0,
        size_floor=0.85,
    ),
    Archetype.METHANOL: ArchetypeConstants(
        peak_rpm_fraction=0.65,
        low_floor=0.40,
        rise_exponent=1.0,
        high_floor=0.56,
        fall_exponent=1.2,
        torque_per_cid=1.18,
        dohc_peak_shift=0.05,
        valve_peak_shift=0.01,
        valve_rise_shift=0.02,
        valve_floor_shift=0.03,
        plateau_end_fraction=0.80,
        fuel_bonus=1.15,
        high_rpm_bonus=0.05,
    ),
}


@dataclass(frozen=True)
class ShapeInputs:
    """Geometry and tuning a shape model needs."""

    displacement_l: float
    redline_rpm: float
    valvetrain_type: ValvetrainType
    valves_per_cylinder: int
    effective_boost_psi: float = 0.0

    @property
    def pressure_ratio(self) -> float:
        return pressure_ratio(self.effective_boost_psi)


# ── Archetype resolution ──────────────────────────────────────────────────────


def resolve_archetype(
    fuel_type: FuelType,
    induction_type: InductionType,
    valvetrain_type: ValvetrainType,
    displacement_l: float,
) -> Archetype:
    """Map a (fuel, induction, valvetrain, size) combination to its archetype.

    Diesels are always modelled as (turbo-)diesels and split into light and
    heavy duty at 8 L.  Methanol always uses the DOHC race model.

    Raises
    ------
    ValueError
        For a fuel or induction type without a model.
    """
    pushrod = valvetrain_type is ValvetrainType.PUSHROD

    if fuel_type is FuelType.DIESEL:
        if displacement_l >= HEAVY_DUTY_DIESEL_MIN_LITERS:
            return Archetype.DIESEL_HEAVY_DUTY
        return Archetype.DIESEL_LIGHT_DUTY
    if fuel_type is FuelType.METHANOL:
        return Archetype.METHANOL
    if fuel_type is FuelType.GASOLINE:
        if induction_type is InductionType.NATURALLY_ASPIRATED:
            return Archetype.NA_PUSHROD if pushrod else Archetype.NA_OHC
        if induction_type is InductionType.TURBOCHARGED:
            return Archetype.TURBO_PUSHROD if pushrod else Archetype.TURBO_OHC
        if induction_type is InductionType.SUPERCHARGED:
            return Archetype.SUPERCHARGED
    raise ValueError(
        f"No archetype for fuel={fuel_type!r}, induction={induction_type!r}"
    )


# ── Shared shape pieces ───────────────────────────────────────────────────────


def tech_factor(valvetrain_type: ValvetrainType, valves_per_cylinder: int) -> float:
    """Specific-output multiplier for valvetrain layout and valve count."""
    valve = _VALVE_TECH_FACTOR.get(valves_per_cylinder, _MULTI_VALVE_TECH_FACTOR)
    return _LAYOUT_TECH_FACTOR[valvetrain_type] * valve


def peak_torque_rpm(constants: ArchetypeConstants, inputs: ShapeInputs) -> float:
    """RPM of peak torque for this archetype and valvetrain."""
    fraction = constants.peak_rpm_fraction
    if inputs.valvetrain_type is ValvetrainType.DOHC:
        fraction += constants.dohc_peak_shift
    fraction += constants.valve_peak_shift * (inputs.valves_per_cylinder - 2)
    return fraction * inputs.redline_rpm


def rise_fall_curve(
    rpm: npt.ArrayLike,
    peak_rpm: float,
    redline_rpm: float,
    low_floor: float,
    rise_exponent: float,
    high_floor: float,
    fall_exponent: float,
    plateau_end_rpm: float = 0.0,
    plateau_sag: float = 0.0,
) -> npt.NDArray[np.float64]:
    """Normalised rise / plateau / fall shape, equal to 1 at *peak_rpm*.

    With ``plateau_end_rpm <= peak_rpm`` there is no plateau and the fall
    branch starts at the peak.
    """
    n = np.asarray(rpm, dtype=float)
    peak = max(peak_rpm, 1.0)
    fall_start = max(plateau_end_rpm, peak)

    x = np.clip(n / peak, 0.0, 1.0)
    rise = low_floor + (1.0 - low_floor) * x**rise_exponent

    if fall_start > peak:
        plateau = 1.0 - plateau_sag * (n - peak) / (fall_start - peak)
        top = 1.0 - plateau_sag
    else:
        plateau = np.ones_like(n)
        top = 1.0

    span = redline_rpm - fall_start
    if span > 0.0:
        y = np.clip((n - fall_start) / span, 0.0, 1.0)
    else:
        y = np.ones_like(n)
    fall = top - (top - high_floor) * y**fall_exponent

    return np.select([n <= peak, n <= fall_start], [rise, plateau], default=fall)


def boost_multiplier(
    rpm: npt.ArrayLike,
    boost_pressure_ratio: float,
    spool_start_rpm: float,
    full_boost_rpm: float,
    plateau_end_rpm: float,
    redline_rpm: float,
    top_taper: float,
) -> npt.NDArray[np.float64]:
    """Static RPM-indexed boost multiplier on an NA torque curve.

    1 below spool start, linear ramp to the full pressure ratio, plateau,
    then a linear taper of up to *top_taper* by redline.
    """
    n = np.asarray(rpm, dtype=float)
    full = max(full_boost_rpm, spool_start_rpm + 1.0)
    plateau_end = max(plateau_end_rpm, full)

    ramp = np.clip((n - spool_start_rpm) / (full - spool_start_rpm), 0.0, 1.0)
    spooling = 1.0 + ramp * (boost_pressure_ratio - 1.0)

    span = redline_rpm - plateau_end
    if span > 0.0:
        y = np.clip((n - plateau_end) / span, 0.0, 1.0)
    else:
        y = np.zeros_like(n)
    tapered = boost_pressure_ratio * (1.0 - top_taper * y)

    return np.select(
        [n < spool_start_rpm, n < full, n <= plateau_end],
        [np.ones_like(n), spooling, np.full_like(n, boost_pressure_ratio)],
        default=tapered,
    )


# ── Shape models ──────────────────────────────────────────────────────────────


def na_shape(
    rpm: npt.ArrayLike, inputs: ShapeInputs, constants: ArchetypeConstants
) -> npt.NDArray[np.float64]:
    """Naturally aspirated spark-ignition curve  [lb·ft]."""
    extra_valves = inputs.valves_per_cylinder - 2
    peak_torque = (
        constants.torque_per_cid
        * liters_to_cubic_inches(inputs.displacement_l)
        * tech_factor(inputs.valvetrain_type, inputs.valves_per_cylinder)
    )
    shape = rise_fall_curve(
        rpm,
        peak_rpm=peak_torque_rpm(constants, inputs),
        redline_rpm=inputs.redline_rpm,
        low_floor=constants.low_floor,
        rise_exponent=constants.rise_exponent + constants.valve_rise_shift * extra_valves,
        high_floor=min(
            constants.high_floor + constants.valve_floor_shift * extra_valves, 0.75
        ),
        fall_exponent=constants.fall_exponent,
    )
    return peak_torque * shape


def turbo_shape(
    rpm: npt.ArrayLike, inputs: ShapeInputs, constants: ArchetypeConstants
) -> npt.NDArray[np.float64]:
    """Turbocharged gasoline: NA base × spool / plateau / taper multiplier."""
    n = np.asarray(rpm, dtype=float)
    multiplier = boost_multiplier(
        n,
        inputs.pressure_ratio,
        constants.spool_start_rpm,
        constants.full_boost_rpm,
        constants.plateau_end_fraction * inputs.redline_rpm,
        inputs.redline_rpm,
        constants.top_taper,
    )
    return na_shape(n, inputs, constants) * multiplier


def supercharged_shape(
    rpm: npt.ArrayLike, inputs: ShapeInputs, constants: ArchetypeConstants
) -> npt.NDArray[np.float64]:
    """Positive-displacement supercharger.

    Boost builds almost immediately (full by ~1500 rpm) and the top end
    loses up to 20 % to parasitic drive and heat losses.
    """
    n = np.asarray(rpm, dtype=float)
    if inputs.valvetrain_type is ValvetrainType.PUSHROD:
        base = ARCHETYPE_CONSTANTS[Archetype.NA_PUSHROD]
    else:
        base = ARCHETYPE_CONSTANTS[Archetype.NA_OHC]

    ramp = np.clip(n / constants.full_boost_rpm, 0.0, 1.0)
    multiplier = 1.0 + (inputs.pressure_ratio - 1.0) * ramp

    taper_start = constants.plateau_end_fraction * inputs.redline_rpm
    taper_span = inputs.redline_rpm - taper_start
    if taper_span > 0.0:
        extra = np.maximum(n - taper_start, 0.0) / taper_span
        multiplier = multiplier * np.maximum(
            constants.taper_floor, 1.0 - constants.top_taper * extra
        )
    return na_shape(n, inputs, base) * multiplier


def diesel_shape(
    rpm: npt.ArrayLike, inputs: ShapeInputs, constants: ArchetypeConstants
) -> npt.NDArray[np.float64]:
    """Compression-ignition curve with a wide, flat low-to-mid plateau."""
    peak_torque = torque_from_bmep(
        constants.base_bmep_bar * inputs.pressure_ratio, inputs.displacement_l
    )
    shape = rise_fall_curve(
        rpm,
        peak_rpm=constants.peak_rpm_fraction * inputs.redline_rpm,
        redline_rpm=inputs.redline_rpm,
        low_floor=constants.low_floor,
        rise_exponent=constants.rise_exponent,
        high_floor=constants.high_floor,
        fall_exponent=constants.fall_exponent,
        plateau_end_rpm=constants.plateau_end_fraction * inputs.redline_rpm,
        plateau_sag=constants.plateau_sag,
    )
    return peak_torque * shape


def methanol_shape(
    rpm: npt.ArrayLike, inputs: ShapeInputs, constants: ArchetypeConstants
) -> npt.NDArray[np.float64]:
    """Methanol race engine: DOHC 4-valve NA base with a fuel-energy bonus.

    Charge cooling adds a flat bonus and a small retention bonus above
    the plateau end (80 % of redline by default).
    """
    n = np.asarray(rpm, dtype=float)
    race_head = replace(
        inputs, valvetrain_type=ValvetrainType.DOHC, valves_per_cylinder=4
    )
    torque = na_shape(n, race_head, constants)
    torque = torque * constants.fuel_bonus * inputs.pressure_ratio

    bonus_start = constants.plateau_end_fraction * inputs.redline_rpm
    bonus_span = inputs.redline_rpm - bonus_start
    if bonus_span > 0.0:
        extra = np.clip((n - bonus_start) / bonus_span, 0.0, 1.0)
        torque = torque * (1.0 + constants.high_rpm_bonus * extra)
    return torque


ShapeModel = Callable[[npt.ArrayLike, ShapeInputs, ArchetypeConstants], npt.NDArray[np.float64]]

SHAPE_MODELS: Dict[Archetype, ShapeModel] = {
    Archetype.NA_PUSHROD: na_shape,
    Archetype.NA_OHC: na_shape,
    Archetype.TURBO_PUSHROD: turbo_shape,
    Archetype.TURBO_OHC: turbo_shape,
    Archetype.SUPERCHARGED: supercharged_shape,
    Archetype.DIESEL_LIGHT_DUTY: diesel_shape,
    Archetype.DIESEL_HEAVY_DUTY: diesel_shape,
    Archetype.METHANOL: methanol_shape,
}


def run_shape_model(
    archetype: Archetype, rpm: npt.ArrayLike, inputs: ShapeInputs
) -> npt.NDArray[np.float64]:
    """Dispatch to the archetype's shape model.

    Raises
    ------
    KeyError
        If the archetype has no registered model or constants.
    """
    try:
        model = SHAPE_MODELS[archetype]
        constants = ARCHETYPE_CONSTANTS[archetype]
    except KeyError as exc:
        raise KeyError(f"No shape model registered for {archetype!r}") from exc
    return model(rpm, inputs, constants)
