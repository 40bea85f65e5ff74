"""
Engine Configuration Module
Defines engine specifications and dyno sweep parameters.

Author: Mohith Sai Gorla
Date:   16-10-2026
"""

import json
import math
import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, List
from enum import Enum

from .geometry import displacement_liters

# ── Enumerations ──────────────────────────────────────────────────────────────


class FuelType(Enum):
    """Supported fuels."""

    GASOLINE = "gasoline"
    DIESEL = "diesel"
    METHANOL = "methanol"


class InductionType(Enum):
    """Air induction systems."""

    NATURALLY_ASPIRATED = "na"
    TURBOCHARGED = "turbo"
    SUPERCHARGED = "supercharger"


class ValvetrainType(Enum):
    """Valvetrain layouts."""

    PUSHROD = "pushrod"
    SOHC = "sohc"
    DOHC = "dohc"


# ── Sweep limits ──────────────────────────────────────────────────────────────

RPM_START: int = 1000  # rpm, first dyno point
REDLINE_MIN_RPM: int = 2000
REDLINE_MAX_RPM: int = 15_000

_NOTICE_CR_BAND: float = 4.0


# ── Geometry ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeometryParameters:
    """Engine geometry.

    Attributes
    ----------
    num_cylinders     : int            (≥ 1)
    bore_mm           : mm
    stroke_mm         : mm
    compression_ratio : dimensionless  (> 1)
    """

    num_cylinders: int
    bore_mm: float
    stroke_mm: float
    compression_ratio: float = 10.5

    def __post_init__(self) -> None:
        if self.num_cylinders < 1:
            raise ValueError(f"num_cylinders must be ≥ 1, got {self.num_cylinders}")
        if not math.isfinite(self.bore_mm) or self.bore_mm <= 0.0:
            raise ValueError(f"bore_mm must be a finite value > 0 mm, got {self.bore_mm}")
        if not math.isfinite(self.stroke_mm) or self.stroke_mm <= 0.0:
            raise ValueError(f"stroke_mm must be a finite value > 0 mm, got {self.stroke_mm}")
        if not math.isfinite(self.compression_ratio) or self.compression_ratio <= 1.0:
            raise ValueError(
                f"compression_ratio must be > 1, got {self.compression_ratio}"
            )

    # ── Derived properties ────────────────────────────────────────────────

    @property
    def displacement_liters(self) -> float:
        """Total swept volume  [L], always recomputed from bore/stroke/cylinders."""
        return displacement_liters(self.num_cylinders, self.bore_mm, self.stroke_mm)

    @property
    def bore_stroke_ratio(self) -> float:
        """Bore / stroke  [dimensionless].  > 1 is oversquare."""
        return self.bore_mm / self.stroke_mm


# ── Induction & fuel ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InductionParameters:
    """Fuel and air-induction specification."""

    fuel_type: FuelType = FuelType.GASOLINE
    induction_type: InductionType = InductionType.NATURALLY_ASPIRATED
    boost_psi: float = 0.0  # gauge psi

    def __post_init__(self) -> None:
        if not math.isfinite(self.boost_psi) or self.boost_psi < 0.0:
            raise ValueError(f"boost_psi must be ≥ 0 psi, got {self.boost_psi}")

    @property
    def is_boosted(self) -> bool:
        return self.induction_type is not InductionType.NATURALLY_ASPIRATED


# ── Valvetrain ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ValvetrainParameters:
    """Valvetrain layout and valve count."""

    valvetrain_type: ValvetrainType = ValvetrainType.DOHC
    valves_per_cylinder: int = 4

    def __post_init__(self) -> None:
        if not (2 <= self.valves_per_cylinder <= 5):
            raise ValueError(
                f"valves_per_cylinder must be in [2, 5], got {self.valves_per_cylinder}"
            )


# ── Tuning knobs ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TuningParameters:
    """User tuning knobs applied by the global penalty layer."""

    peak_ve_percent: float = 95.0  # % (reference ≈ 95)
    size_penalty_percent_per_liter: float = 0.0  # % per litre above threshold
    piston_speed_limit_mps: float = 25.0  # m/s

    def __post_init__(self) -> None:
        if not math.isfinite(self.peak_ve_percent) or self.peak_ve_percent <= 0.0:
            raise ValueError(
                f"peak_ve_percent must be > 0 %, got {self.peak_ve_percent}"
            )
        if (
            not math.isfinite(self.size_penalty_percent_per_liter)
            or self.size_penalty_percent_per_liter < 0.0
        ):
            raise ValueError(
                "size_penalty_percent_per_liter must be ≥ 0, "
                f"got {self.size_penalty_percent_per_liter}"
            )
        if (
            not math.isfinite(self.piston_speed_limit_mps)
            or self.piston_speed_limit_mps <= 0.0
        ):
            raise ValueError(
                f"piston_speed_limit_mps must be > 0 m/s, got {self.piston_speed_limit_mps}"
            )


# ── Dyno sweep ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SweepParameters:
    """RPM sweep: from RPM_START to redline in fixed steps."""

    redline_rpm: int = 7000
    rpm_step: int = 250

    def __post_init__(self) -> None:
        if self.redline_rpm <= 0:
            raise ValueError(f"redline_rpm must be > 0, got {self.redline_rpm}")
        if self.rpm_step <= 0:
            raise ValueError(f"rpm_step must be > 0, got {self.rpm_step}")

    @property
    def num_points(self) -> int:
        """Number of dyno points  floor((redline − start)/step) + 1."""
        if self.redline_rpm < RPM_START:
            return 0
        return (self.redline_rpm - RPM_START) // self.rpm_step + 1


# ── Top-level configuration ───────────────────────────────────────────────────


@dataclass(frozen=True)
class EngineConfiguration:
    """Complete dyno configuration.

    All sub-configurations are validated individually upon construction.
    Cross-parameter consistency is checked in __post_init__; recoverable
    corrections (redline ceiling, boost on an NA engine) are applied here
    and reported through ``warnings`` and ``notices``.
    """

    geometry: GeometryParameters
    induction: InductionParameters = field(default_factory=InductionParameters)
    valvetrain: ValvetrainParameters = field(default_factory=ValvetrainParameters)
    tuning: TuningParameters = field(default_factory=TuningParameters)
    sweep: SweepParameters = field(default_factory=SweepParameters)
    notices: List[str] = field(default_factory=list, compare=False, repr=False)

    def __post_init__(self) -> None:
        self._validate_cross_parameters()

    def _validate_cross_parameters(self) -> None:
        """Enforce cross-dataclass consistency constraints."""
        # Deferred: fuel_properties imports the enums defined here.
        from .fuel_properties import get_fuel_properties

        errors: List[str] = []
        notices: List[str] = []

        redline = self.sweep.redline_rpm
        step = self.sweep.rpm_step

        if redline < REDLINE_MIN_RPM:
            errors.append(
                f"redline_rpm {redline} below practical minimum {REDLINE_MIN_RPM}"
            )
        # Checked against the redline the sweep will actually use
        swept_redline = min(redline, REDLINE_MAX_RPM)
        if step >= swept_redline:
            errors.append(f"rpm_step {step} must be < redline_rpm {swept_redline}")

        if errors:
            raise ValueError("EngineConfiguration errors: " + "; ".join(errors))

        # Recoverable corrections.  The dataclass is frozen, so corrected
        # sections are swapped in with object.__setattr__.
        if redline > REDLINE_MAX_RPM:
            notices.append(
                f"redline_rpm {redline} above practical ceiling; "
                f"clamped to {REDLINE_MAX_RPM}"
            )
            object.__setattr__(
                self, "sweep", SweepParameters(REDLINE_MAX_RPM, self.sweep.rpm_step)
            )

        induction = self.induction
        if not induction.is_boosted and induction.boost_psi != 0.0:
            notices.append(
                f"boost_psi {induction.boost_psi} ignored for a naturally "
                "aspirated engine; forced to 0"
            )
            object.__setattr__(
                self,
                "induction",
                InductionParameters(induction.fuel_type, induction.induction_type, 0.0),
            )

        # Informational
        cr = self.geometry.compression_ratio
        ideal = get_fuel_properties(induction.fuel_type).ideal_compression_ratio
        if abs(cr - ideal) > _NOTICE_CR_BAND:
            notices.append(
                f"Compression ratio {cr:.1f} far from typical "
                f"{induction.fuel_type.value} value {ideal:.1f}"
            )

        valves = self.valvetrain.valves_per_cylinder
        if not (2 <= valves <= 4):
            notices.append(f"{valves} valves per cylinder outside typical range [2, 4]")

        for msg in notices:
            warnings.warn(msg, stacklevel=4)
        self.notices.extend(notices)

    # ── Derived properties ────────────────────────────────────────────────

    @property
    def displacement_liters(self) -> float:
        return self.geometry.displacement_liters

    # ── Serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> Dict:
        """Serialise configuration to a plain dictionary."""
        return {
            "geometry": {
                "num_cylinders": self.geometry.num_cylinders,
                "bore_mm": self.geometry.bore_mm,
                "stroke_mm": self.geometry.stroke_mm,
                "compression_ratio": self.geometry.compression_ratio,
            },
            "induction": {
                "fuel_type": self.induction.fuel_type.value,
                "induction_type": self.induction.induction_type.value,
                "boost_psi": self.induction.boost_psi,
            },
            "valvetrain": {
                "valvetrain_type": self.valvetrain.valvetrain_type.value,
                "valves_per_cylinder": self.valvetrain.valves_per_cylinder,
            },
            "tuning": {
                "peak_ve_percent": self.tuning.peak_ve_percent,
                "size_penalty_percent_per_liter": self.tuning.size_penalty_percent_per_liter,
                "piston_speed_limit_mps": self.tuning.piston_speed_limit_mps,
            },
            "sweep": {
                "redline_rpm": self.sweep.redline_rpm,
                "rpm_step": self.sweep.rpm_step,
            },
        }

    def to_json(self, filepath: str) -> None:
        """Persist configuration to a JSON file."""
        with open(filepath, "w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=2)

    @classmethod
    def from_dict(cls, data: Dict) -> "EngineConfiguration":
        """Build a configuration from a plain dictionary.

        Only ``geometry`` is required; missing sections take their defaults.

        Raises
        ------
        KeyError
            If the geometry section is missing.
        ValueError
            If a field has an invalid value (including unknown enum values).
        """
        try:
            geo_data = dict(data["geometry"])
        except KeyError as exc:
            raise KeyError(f"Missing section in configuration: {exc}") from exc

        ind_data = dict(data.get("induction", {}))
        vt_data = dict(data.get("valvetrain", {}))
        tun_data = dict(data.get("tuning", {}))
        sw_data = dict(data.get("sweep", {}))

        # JSON numbers may arrive as floats; cast integer fields explicitly.
        geo_data["num_cylinders"] = int(geo_data["num_cylinders"])
        if "valves_per_cylinder" in vt_data:
            vt_data["valves_per_cylinder"] = int(vt_data["valves_per_cylinder"])
        for key in ("redline_rpm", "rpm_step"):
            if key in sw_data:
                sw_data[key] = int(sw_data[key])

        if "fuel_type" in ind_data:
            ind_data["fuel_type"] = FuelType(ind_data["fuel_type"])
        if "induction_type" in ind_data:
            ind_data["induction_type"] = InductionType(ind_data["induction_type"])
        if "valvetrain_type" in vt_data:
            vt_data["valvetrain_type"] = ValvetrainType(vt_data["valvetrain_type"])

        return cls(
            geometry=GeometryParameters(**geo_data),
            induction=InductionParameters(**ind_data),
            valvetrain=ValvetrainParameters(**vt_data),
            tuning=TuningParameters(**tun_data),
            sweep=SweepParameters(**sw_data),
        )

    @classmethod
    def from_json(cls, filepath: str) -> "EngineConfiguration":
        """Load configuration from a JSON file.

        Raises
        ------
        FileNotFoundError
            If filepath does not exist.
        KeyError
            If the geometry section is missing from the JSON.
        ValueError
            If a field has an invalid value.
        """
        with open(filepath, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        return cls.from_dict(data)


# ── Factory functions ─────────────────────────────────────────────────────────


def create_default_na_inline_4() -> EngineConfiguration:
    """Naturally-aspirated 2.4 L DOHC inline-4.

        Bore × Stroke : 87 mm × 99 mm
        CR            : 11.0 : 1
        Redline       : 7500 rpm
    """
    return EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=4, bore_mm=87.0, stroke_mm=99.0, compression_ratio=11.0
        ),
        induction=InductionParameters(),
        valvetrain=ValvetrainParameters(ValvetrainType.DOHC, 4),
        sweep=SweepParameters(redline_rpm=7500, rpm_step=250),
    )


def create_default_turbo_inline_4() -> EngineConfiguration:
    """Turbocharged 2.0 L DOHC inline-4 at 18 psi, 9.5 : 1."""
    return EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=4, bore_mm=86.0, stroke_mm=86.0, compression_ratio=9.5
        ),
        induction=InductionParameters(
            FuelType.GASOLINE, InductionType.TURBOCHARGED, 18.0
        ),
        valvetrain=ValvetrainParameters(ValvetrainType.DOHC, 4),
        sweep=SweepParameters(redline_rpm=7000, rpm_step=250),
    )


def create_default_pushrod_v8() -> EngineConfiguration:
    """Naturally-aspirated 5.7 L pushrod V8, 2 valves/cylinder."""
    return EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=8, bore_mm=99.0, stroke_mm=92.0, compression_ratio=10.5
        ),
        valvetrain=ValvetrainParameters(ValvetrainType.PUSHROD, 2),
        tuning=TuningParameters(size_penalty_percent_per_liter=2.0),
        sweep=SweepParameters(redline_rpm=6500, rpm_step=250),
    )


def create_default_supercharged_v8() -> EngineConfiguration:
    """Roots-supercharged 6.2 L pushrod V8 at 10 psi."""
    return EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=8, bore_mm=103.25, stroke_mm=92.0, compression_ratio=9.1
        ),
        induction=InductionParameters(
            FuelType.GASOLINE, InductionType.SUPERCHARGED, 10.0
        ),
        valvetrain=ValvetrainParameters(ValvetrainType.PUSHROD, 2),
        sweep=SweepParameters(redline_rpm=6600, rpm_step=200),
    )


def create_default_light_duty_diesel() -> EngineConfiguration:
    """Turbo-diesel 6.7 L inline-6 pickup engine at 30 psi."""
    return EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=6, bore_mm=107.0, stroke_mm=124.0, compression_ratio=17.3
        ),
        induction=InductionParameters(
            FuelType.DIESEL, InductionType.TURBOCHARGED, 30.0
        ),
        valvetrain=ValvetrainParameters(ValvetrainType.PUSHROD, 4),
        sweep=SweepParameters(redline_rpm=3600, rpm_step=100),
    )


def create_default_methanol_v8() -> EngineConfiguration:
    """Methanol-fuelled 5.0 L DOHC race V8, 14 : 1."""
    return EngineConfiguration(
        geometry=GeometryParameters(
            num_cylinders=8, bore_mm=94.0, stroke_mm=90.0, compression_ratio=14.0
        ),
        induction=InductionParameters(FuelType.METHANOL),
        valvetrain=ValvetrainParameters(ValvetrainType.DOHC, 4),
        tuning=TuningParameters(peak_ve_percent=105.0, piston_speed_limit_mps=27.0),
        sweep=SweepParameters(redline_rpm=9000, rpm_step=250),
    )


PRESETS: Dict[str, Callable[[], EngineConfiguration]] = {
    "na-i4": create_default_na_inline_4,
    "turbo-i4": create_default_turbo_inline_4,
    "pushrod-v8": create_default_pushrod_v8,
    "supercharged-v8": create_default_supercharged_v8,
    "diesel-i6": create_default_light_duty_diesel,
    "methanol-v8": create_default_methanol_v8,
}
