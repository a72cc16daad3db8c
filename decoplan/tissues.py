"""
Bühlmann ZH-L16C tissue loading.

All tissue math is vectorized across 16 compartments using numpy. Nitrogen and
helium partial pressures are tracked separately per compartment.
"""

import numpy as np

from .buhlmann_constants import (
    NUM_COMPARTMENTS,
    SURFACE_N2_FRACTION,
    ZH_L16_N2_HALFTIMES,
    ZH_L16_N2_A,
    ZH_L16_N2_B,
    ZH_L16_HE_HALFTIMES,
    ZH_L16_HE_A,
    ZH_L16_HE_B,
    alveolar_pressure,
    ceiling_pressure_gf,
    decay_constants,
    haldane_vec,
    schreiner_vec,
)
from .gases import Gas
from .physics import DepthConverter, P_SURFACE

# Number of decimals of the tissue pressure change still considered as loading
CHANGE_PRECISION = 8

N2_A = np.array(ZH_L16_N2_A)
N2_B = np.array(ZH_L16_N2_B)
HE_A = np.array(ZH_L16_HE_A)
HE_B = np.array(ZH_L16_HE_B)
N2_K = decay_constants(ZH_L16_N2_HALFTIMES)
HE_K = decay_constants(ZH_L16_HE_HALFTIMES)


class Tissues:
    """Inert gas partial pressures of all 16 compartments (bar)."""

    def __init__(self, surface_pressure: float = P_SURFACE):
        self.n2 = np.full(
            NUM_COMPARTMENTS, alveolar_pressure(surface_pressure, SURFACE_N2_FRACTION)
        )
        self.he = np.zeros(NUM_COMPARTMENTS)

    def copy(self) -> "Tissues":
        other = Tissues.__new__(Tissues)
        other.n2 = self.n2.copy()
        other.he = self.he.copy()
        return other

    def load(self, segment, gas: Gas, converter: DepthConverter) -> float:
        """Loads the tissues by breathing the gas over the whole segment.

        Args:
            segment: time/depth interval, duration in seconds
            gas: breathed gas
            converter: depth to pressure converter

        Returns:
            Maximum absolute change of compartment pressure (bar), rounded.
            Zero means the tissues no longer on/off-gas.
        """
        if segment.duration <= 0:
            return 0.0

        start_pressure = converter.to_bar(segment.start_depth)
        end_pressure = converter.to_bar(segment.end_depth)
        pressure_rate = (end_pressure - start_pressure) / segment.duration

        new_n2 = schreiner_vec(
            self.n2,
            alveolar_pressure(start_pressure, gas.fN2),
            pressure_rate * gas.fN2,
            segment.duration,
            N2_K,
        )
        new_he = schreiner_vec(
            self.he,
            alveolar_pressure(start_pressure, gas.fHe),
            pressure_rate * gas.fHe,
            segment.duration,
            HE_K,
        )

        change = max(
            float(np.max(np.abs(new_n2 - self.n2))),
            float(np.max(np.abs(new_he - self.he))),
        )
        self.n2 = new_n2
        self.he = new_he
        return round(change, CHANGE_PRECISION)

    def rest(self, duration: float, surface_pressure: float) -> None:
        """Off-gassing at the surface breathing air for the duration in seconds."""
        palv = alveolar_pressure(surface_pressure, SURFACE_N2_FRACTION)
        self.n2 = haldane_vec(self.n2, palv, duration, N2_K)
        self.he = haldane_vec(self.he, 0.0, duration, HE_K)

    def ceiling(self, gf: float, converter: DepthConverter) -> float:
        """Shallowest depth (m) tolerated by the most loaded compartment.

        The a/b coefficients of mixed inert gases are weighted by their
        partial pressures.
        """
        p_total = self.n2 + self.he
        a = (N2_A * self.n2 + HE_A * self.he) / p_total
        b = (N2_B * self.n2 + HE_B * self.he) / p_total
        tolerated = ceiling_pressure_gf(p_total, a, b, gf)
        depth = converter.from_bar(float(np.max(tolerated)))
        return depth if depth > 0 else 0.0
