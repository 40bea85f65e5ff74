"""
Fuel Properties Module
Lookup of fuel density, brake-specific fuel consumption and knock limits.

Author: Mohith Sai Gorla
Date:   16-10-2026

The numbers below are tuning constants for a hobbyist dyno estimate, not
measured fuel data.  The knock ceiling is compared against
CR × PR (compression ratio × boost pressure ratio).
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np
import numpy.typing as npt

from .engine_config import FuelType, InductionType


@dataclass(frozen=True)
class FuelProperties:
    """Per-fuel constants.

    Attributes
    ----------
    density_lb_per_gal       : lb/gal
    bsfc_na                  : lb/(hp·hr), naturally aspirated
    bsfc_boosted             : lb/(hp·hr), turbo or supercharged
    knock_ceiling            : dimensionless, limit on CR × PR
    ideal_compression_ratio  : dimensionless
    """

    density_lb_per_gal: float
    bsfc_na: float
    bsfc_boosted: float
    knock_ceiling: float
    ideal_compression_ratio: float

    def bsfc(self, induction_type: InductionType) -> float:
        """BSFC for the given induction  [lb/(hp·hr)]."""
        if induction_type is InductionType.NATURALLY_ASPIRATED:
            return self.bsfc_na
        return self.bsfc_boosted


FUEL_PROPERTIES: Dict[FuelType, FuelProperties] = {
    FuelType.GASOLINE: FuelProperties(
        density_lb_per_gal=6.2,
        bsfc_na=0.45,
        bsfc_boosted=0.60,
        knock_ceiling=18.0,
        ideal_compression_ratio=10.8,
    ),
    FuelType.DIESEL: FuelProperties(
        density_lb_per_gal=7.1,
        bsfc_na=0.40,
        bsfc_boosted=0.38,
        knock_ceiling=32.0,
        ideal_compression_ratio=17.0,
    ),
    FuelType.METHANOL: FuelProperties(
        density_lb_per_gal=6.6,
        bsfc_na=0.70,
        bsfc_boosted=0.75,
        knock_ceiling=28.0,
        ideal_compression_ratio=13.5,
    ),
}


def get_fuel_properties(fuel_type: FuelType) -> FuelProperties:
    """Return the property record for *fuel_type*.

    Raises
    ------
    KeyError
        If the fuel has no entry in the table.
    """
    try:
        return FUEL_PROPERTIES[fuel_type]
    except KeyError as exc:
        raise KeyError(f"No fuel properties for {fuel_type!r}") from exc


def bsfc(fuel_type: FuelType, induction_type: InductionType) -> float:
    """Brake-specific fuel consumption  [lb/(hp·hr)]."""
    return get_fuel_properties(fuel_type).bsfc(induction_type)


def fuel_flow(
    horsepower: npt.ArrayLike, fuel_type: FuelType, induction_type: InductionType
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Fuel burn at *horsepower*: ``(lb_per_hr, gal_per_hr)``, shaped like the input.

    Non-positive horsepower burns nothing; a zero density yields 0 gal/hr.
    """
    props = get_fuel_properties(fuel_type)
    hp = np.asarray(horsepower, dtype=float)
    lb_per_hr = np.where(hp > 0.0, hp * props.bsfc(induction_type), 0.0)
    density = props.density_lb_per_gal
    if density > 0.0:
        gal_per_hr = lb_per_hr / density
    else:
        gal_per_hr = np.zeros_like(lb_per_hr)
    return lb_per_hr, gal_per_hr
