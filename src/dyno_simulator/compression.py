"""
Compression Module
Interaction between compression ratio, fuel, and boost.

Author: Mohith Sai Gorla
Date:   16-10-2026

Resolves, once per simulation, two RPM-independent quantities:

compression_factor
    Multiplier on the whole torque curve describing how far the chosen
    compression ratio sits from the fuel's sweet spot.  Always clamped to
    [0.85, 1.15].

effective_boost_psi
    Boost the engine can actually run.  Boosted gasoline loses 3 psi of
    safe boost per compression-ratio point above 10.5 : 1 (a proxy for
    knock-limited ignition timing).  Diesel and methanol pass the request
    through.  Naturally aspirated engines always resolve to 0.
"""

from dataclasses import dataclass

from .engine_config import FuelType, InductionType
from .fuel_properties import FUEL_PROPERTIES

# ── Tuning constants ─────────────────────────────────────────────────────────
COMPRESSION_FACTOR_MIN: float = 0.85
COMPRESSION_FACTOR_MAX: float = 1.15

# Gasoline, naturally aspirated: quadratic about the fuel's ideal CR
_GAS_NA_LINEAR: float = 0.02
_GAS_NA_QUADRATIC: float = 0.005

# Gasoline, boosted: linear about a lower sweet spot
_GAS_BOOSTED_IDEAL_CR: float = 9.5
_GAS_BOOSTED_HIGH_SLOPE: float = 0.03
_GAS_BOOSTED_LOW_SLOPE: float = 0.01
_GAS_KNOCK_ONSET_CR: float = 10.5
_GAS_BOOST_LOSS_PER_CR: float = 3.0  # psi per CR point above onset

# Diesel: symmetric linear penalty, extra hit outside the working band
_DIESEL_SLOPE: float = 0.01
_DIESEL_BAND = (15.0, 19.0)
_DIESEL_OUT_OF_BAND: float = 0.95

# Methanol: rewards compression
_METHANOL_SLOPE: float = 0.015


@dataclass(frozen=True)
class CompressionBoost:
    """Resolved compression scaling and knock-limited boost."""

    compression_factor: float
    effective_boost_psi: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def resolve_compression_boost(
    fuel_type: FuelType,
    induction_type: InductionType,
    compression_ratio: float,
    requested_boost_psi: float,
) -> CompressionBoost:
    """Resolve compression factor and effective boost for one configuration.

    Parameters
    ----------
    fuel_type, induction_type : enums
    compression_ratio         : dimensionless (> 1)
    requested_boost_psi       : gauge psi (≥ 0)

    Returns
    -------
    CompressionBoost
    """
    props = FUEL_PROPERTIES.get(fuel_type)
    if props is None:
        raise ValueError(f"Unsupported fuel type: {fuel_type!r}")
    ideal = props.ideal_compression_ratio
    boosted = induction_type is not InductionType.NATURALLY_ASPIRATED
    effective_boost = max(0.0, requested_boost_psi) if boosted else 0.0

    if fuel_type is FuelType.GASOLINE:
        if not boosted:
            delta = compression_ratio - ideal
            factor = 1.0 + _GAS_NA_LINEAR * delta - _GAS_NA_QUADRATIC * delta**2
        else:
            delta = compression_ratio - _GAS_BOOSTED_IDEAL_CR
            factor = (
                1.0
                - _GAS_BOOSTED_HIGH_SLOPE * max(delta, 0.0)
                + _GAS_BOOSTED_LOW_SLOPE * min(delta, 0.0)
            )
            if compression_ratio > _GAS_KNOCK_ONSET_CR and effective_boost > 0.0:
                reduction = (
                    compression_ratio - _GAS_KNOCK_ONSET_CR
                ) * _GAS_BOOST_LOSS_PER_CR
                effective_boost = max(0.0, effective_boost - reduction)

    elif fuel_type is FuelType.DIESEL:
        factor = 1.0 - _DIESEL_SLOPE * abs(compression_ratio - ideal)
        low, high = _DIESEL_BAND
        if compression_ratio < low or compression_ratio > high:
            factor *= _DIESEL_OUT_OF_BAND

    elif fuel_type is FuelType.METHANOL:
        factor = 1.0 + _METHANOL_SLOPE * (compression_ratio - ideal)

    else:
        raise ValueError(f"Unsupported fuel type: {fuel_type!r}")

    return CompressionBoost(
        compression_factor=_clamp(
            factor, COMPRESSION_FACTOR_MIN, COMPRESSION_FACTOR_MAX
        ),
        effective_boost_psi=effective_boost,
    )
