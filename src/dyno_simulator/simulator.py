"""
Dyno Simulator
Coordinates geometry, fuel tables, compression/boost, shape models and
global penalties into a full-throttle dyno sweep.

Author: Mohith Sai Gorla
Date:   16-10-2026
"""

from typing import Any, Dict, List, Tuple
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
from scipy.integrate import trapezoid

from .engine_config import RPM_START, EngineConfiguration
from .compression import resolve_compression_boost
from .fuel_properties import fuel_flow, get_fuel_properties
from .geometry import (
    airflow_cfm,
    bmep_from_torque,
    estimate_ve,
    horsepower_from_torque,
    mean_piston_speed_mps,
    pressure_ratio,
)
from .penalties import (
    GlobalPenalties,
    apply_penalties,
    knock_factor,
    size_factor,
    ve_scale,
)
from .shape_models import (
    ARCHETYPE_CONSTANTS,
    Archetype,
    ShapeInputs,
    resolve_archetype,
    run_shape_model,
)


# Share of peak horsepower that defines the usable powerband
_POWERBAND_FRACTION: float = 0.9


@dataclass(frozen=True)
class RpmPoint:
    """One dyno pull sample."""

    rpm: int
    torque_lb_ft: float
    horsepower: float
    ve_fraction: float
    mean_piston_speed_mps: float
    bmep_psi: float
    airflow_cfm: float
    fuel_lb_per_hr: float
    fuel_gal_per_hr: float


@dataclass(frozen=True)
class DynoSummary:
    """Scalar summary of a dyno sweep."""

    peak_hp: float
    peak_hp_rpm: int
    peak_torque_lb_ft: float
    peak_torque_rpm: int
    hp_per_liter: float
    fuel_lb_per_hr_at_peak_hp: float
    fuel_gal_per_hr_at_peak_hp: float
    bmep_psi_at_peak_hp: float
    cfm_at_peak_hp: float
    peak_bmep_psi: float  # at peak torque
    average_torque_lb_ft: float  # area under the curve / RPM span
    average_hp: float
    powerband_rpm: int  # span with hp ≥ 90 % of peak


@dataclass
class SimulationResult:
    """Ordered dyno sweep (ascending RPM, fixed step) plus resolved inputs."""

    points: List[RpmPoint]
    displacement_liters: float
    fuel_density_lb_per_gal: float
    archetype: Archetype
    effective_boost_psi: float
    compression_factor: float
    knock_factor: float
    summary: DynoSummary
    warnings: List[str] = field(default_factory=list)

    # ── Array views for plotting and export ───────────────────────────────

    def _column(self, name: str) -> npt.NDArray[np.float64]:
        return np.array([getattr(p, name) for p in self.points], dtype=float)

    @property
    def rpm(self) -> npt.NDArray[np.float64]:
        return self._column("rpm")

    @property
    def torque(self) -> npt.NDArray[np.float64]:
        return self._column("torque_lb_ft")

    @property
    def horsepower(self) -> npt.NDArray[np.float64]:
        return self._column("horsepower")

    def column(self, name: str) -> npt.NDArray[np.float64]:
        """Any RpmPoint field as an array, e.g. ``result.column("bmep_psi")``."""
        if name not in RpmPoint.__dataclass_fields__:
            raise KeyError(f"Unknown dyno column: {name}")
        return self._column(name)


def build_rpm_grid(
    redline_rpm: int, rpm_step: int, start_rpm: int = RPM_START
) -> npt.NDArray[np.int64]:
    """RPM points from *start_rpm* to *redline_rpm* (inclusive) in fixed steps.

    Length is ``floor((redline − start) / step) + 1``; empty when the
    redline is below the start or the step is not positive.
    """
    if rpm_step <= 0 or redline_rpm < start_rpm:
        return np.array([], dtype=np.int64)
    num_points = (redline_rpm - start_rpm) // rpm_step + 1
    return start_rpm + rpm_step * np.arange(num_points, dtype=np.int64)


class DynoSimulator:
    """Runs a simulated full-throttle dyno pull for one configuration.

    Everything that does not depend on RPM (fuel properties, compression
    factor, knock-limited boost, archetype, flat penalties) is resolved
    once in ``__init__``; ``simulate`` then evaluates the sweep.
    Instances hold no state that changes between calls.
    """

    def __init__(self, config: EngineConfiguration) -> None:
        """
        Parameters
        ----------
        config : EngineConfiguration
            Validated engine configuration object.

        Raises
        ------
        ValueError
            If the geometry yields no displacement.
        """
        self.config = config

        # ── Geometry ──────────────────────────────────────────────────────
        self.displacement_l = config.displacement_liters
        if not np.isfinite(self.displacement_l) or self.displacement_l <= 0.0:
            raise ValueError(
                "Cannot simulate: bore, stroke and cylinder count give no "
                "finite, positive displacement"
            )
        self.stroke_mm = config.geometry.stroke_mm
        self.compression_ratio = config.geometry.compression_ratio

        # ── Fuel & induction ──────────────────────────────────────────────
        induction = config.induction
        self.fuel = get_fuel_properties(induction.fuel_type)

        resolved = resolve_compression_boost(
            induction.fuel_type,
            induction.induction_type,
            self.compression_ratio,
            induction.boost_psi,
        )
        self.compression_factor = resolved.compression_factor
        self.effective_boost_psi = resolved.effective_boost_psi

        # ── Archetype ─────────────────────────────────────────────────────
        self.archetype = resolve_archetype(
            induction.fuel_type,
            induction.induction_type,
            config.valvetrain.valvetrain_type,
            self.displacement_l,
        )
        constants = ARCHETYPE_CONSTANTS[self.archetype]

        # ── Flat penalties ────────────────────────────────────────────────
        tuning = config.tuning
        self.penalties = GlobalPenalties(
            compression=self.compression_factor,
            ve=ve_scale(tuning.peak_ve_percent, constants.ve_reference),
            size=size_factor(
                self.displacement_l,
                tuning.size_penalty_percent_per_liter,
                constants.size_threshold_l,
                constants.size_floor,
            ),
            knock=knock_factor(
                self.compression_ratio,
                pressure_ratio(self.effective_boost_psi),
                self.fuel.knock_ceiling,
            ),
        )

        self.shape_inputs = ShapeInputs(
            displacement_l=self.displacement_l,
            redline_rpm=float(config.sweep.redline_rpm),
            valvetrain_type=config.valvetrain.valvetrain_type,
            valves_per_cylinder=config.valvetrain.valves_per_cylinder,
            effective_boost_psi=self.effective_boost_psi,
        )

    # ── Simulation ────────────────────────────────────────────────────────

    def torque_curve(self) -> Tuple[npt.NDArray[np.int64], npt.NDArray[np.float64]]:
        """Penalised torque curve  (rpm grid, torque [lb·ft])."""
        rpm = build_rpm_grid(self.config.sweep.redline_rpm, self.config.sweep.rpm_step)
        raw = run_shape_model(self.archetype, rpm, self.shape_inputs)
        torque = apply_penalties(
            rpm,
            raw,
            self.penalties,
            self.stroke_mm,
            self.config.tuning.piston_speed_limit_mps,
        )
        return rpm, torque

    def simulate(self) -> SimulationResult:
        """Run the sweep.

        Pipeline
        --------
        rpm grid → shape model → global penalties → per-point metrics → summary

        Returns
        -------
        SimulationResult
        """
        rpm, torque = self.torque_curve()
        rpm_f = rpm.astype(float)
        disp = self.displacement_l

        horsepower = horsepower_from_torque(torque, rpm_f)
        ve = estimate_ve(torque, disp)
        piston_speed = mean_piston_speed_mps(self.stroke_mm, rpm_f)
        bmep = bmep_from_torque(torque, disp)
        cfm = airflow_cfm(disp, rpm_f, ve)
        induction = self.config.induction
        fuel_lb, fuel_gal = fuel_flow(
            horsepower, induction.fuel_type, induction.induction_type
        )

        points = [
            RpmPoint(
                rpm=int(rpm[i]),
                torque_lb_ft=float(torque[i]),
                horsepower=float(horsepower[i]),
                ve_fraction=float(ve[i]),
                mean_piston_speed_mps=float(piston_speed[i]),
                bmep_psi=float(bmep[i]),
                airflow_cfm=float(cfm[i]),
                fuel_lb_per_hr=float(fuel_lb[i]),
                fuel_gal_per_hr=float(fuel_gal[i]),
            )
            for i in range(len(rpm))
        ]

        return SimulationResult(
            points=points,
            displacement_liters=disp,
            fuel_density_lb_per_gal=self.fuel.density_lb_per_gal,
            archetype=self.archetype,
            effective_boost_psi=self.effective_boost_psi,
            compression_factor=self.compression_factor,
            knock_factor=self.penalties.knock,
            summary=self.summarize(points),
            warnings=list(self.config.notices),
        )

    # ── Summary ───────────────────────────────────────────────────────────

    def summarize(self, points: List[RpmPoint]) -> DynoSummary:
        """Peak values and powerband figures of a dyno sweep.

        Ties resolve to the lowest RPM.
        """
        if not points:
            raise ValueError("Cannot summarise an empty dyno sweep")

        rpm = np.array([p.rpm for p in points], dtype=float)
        torque = np.array([p.torque_lb_ft for p in points], dtype=float)
        hp = np.array([p.horsepower for p in points], dtype=float)

        i_hp = int(np.argmax(hp))
        i_tq = int(np.argmax(torque))
        at_peak_hp = points[i_hp]
        disp = self.displacement_l

        span = rpm[-1] - rpm[0]
        if span > 0.0:
            average_torque = float(trapezoid(torque, rpm) / span)
            average_hp = float(trapezoid(hp, rpm) / span)
        else:
            average_torque = float(torque[0])
            average_hp = float(hp[0])

        band = rpm[hp >= _POWERBAND_FRACTION * hp[i_hp]]
        powerband = int(band[-1] - band[0]) if len(band) else 0

        return DynoSummary(
            peak_hp=float(hp[i_hp]),
            peak_hp_rpm=at_peak_hp.rpm,
            peak_torque_lb_ft=float(torque[i_tq]),
            peak_torque_rpm=points[i_tq].rpm,
            hp_per_liter=float(hp[i_hp]) / disp if disp > 0.0 else 0.0,
            fuel_lb_per_hr_at_peak_hp=at_peak_hp.fuel_lb_per_hr,
            fuel_gal_per_hr_at_peak_hp=at_peak_hp.fuel_gal_per_hr,
            bmep_psi_at_peak_hp=at_peak_hp.bmep_psi,
            cfm_at_peak_hp=at_peak_hp.airflow_cfm,
            peak_bmep_psi=points[i_tq].bmep_psi,
            average_torque_lb_ft=average_torque,
            average_hp=average_hp,
            powerband_rpm=powerband,
        )

    def calculate_performance_metrics(self, result: SimulationResult) -> Dict[str, Any]:
        """Flat dictionary of headline figures, for reports and JSON export."""
        s = result.summary
        return {
            "archetype": result.archetype.value,
            "displacement_liters": result.displacement_liters,
            "effective_boost_psi": result.effective_boost_psi,
            "compression_factor": result.compression_factor,
            "knock_factor": result.knock_factor,
            "peak_hp": s.peak_hp,
            "peak_hp_rpm": s.peak_hp_rpm,
            "peak_torque_lb_ft": s.peak_torque_lb_ft,
            "peak_torque_rpm": s.peak_torque_rpm,
            "hp_per_liter": s.hp_per_liter,
            "fuel_lb_per_hr_at_peak_hp": s.fuel_lb_per_hr_at_peak_hp,
            "fuel_gal_per_hr_at_peak_hp": s.fuel_gal_per_hr_at_peak_hp,
            "bmep_psi_at_peak_hp": s.bmep_psi_at_peak_hp,
            "cfm_at_peak_hp": s.cfm_at_peak_hp,
            "peak_bmep_psi": s.peak_bmep_psi,
            "average_torque_lb_ft": s.average_torque_lb_ft,
            "average_hp": s.average_hp,
            "powerband_rpm": s.powerband_rpm,
        }


def simulate(config: EngineConfiguration) -> SimulationResult:
    """Run one dyno sweep for *config*."""
    return DynoSimulator(config).simulate()
