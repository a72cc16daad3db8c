"""
Bühlmann ZH-L16C constants and gradient factor calculations.

Single source of truth for compartment parameters and GF-adjusted ceiling math.
All functions are pure (no side effects) so tissue state stays owned by the
caller.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

NUM_COMPARTMENTS = 16

# Alveolar water vapour pressure at 37°C (bar)
WATER_VAPOR_PRESSURE = 0.0627

# Tissues start saturated with air at the surface
SURFACE_N2_FRACTION = 0.79

# ZH-L16C N2 compartment parameters, half-times in minutes
ZH_L16_N2_HALFTIMES: Tuple[float, ...] = (
    4.0, 8.0, 12.5, 18.5, 27.0, 38.3, 54.3, 77.0,
    109.0, 146.0, 187.0, 239.0, 305.0, 390.0, 498.0, 635.0,
)

# M-value coefficients: M(P) = a + P/b
ZH_L16_N2_A: Tuple[float, ...] = (
    1.2599, 1.0000, 0.8618, 0.7562, 0.6200, 0.5043, 0.4410, 0.4000,
    0.3750, 0.3500, 0.3295, 0.3065, 0.2835, 0.2610, 0.2480, 0.2327,
)

ZH_L16_N2_B: Tuple[float, ...] = (
    0.5050, 0.6514, 0.7222, 0.7825, 0.8126, 0.8434, 0.8693, 0.8910,
    0.9092, 0.9222, 0.9319, 0.9403, 0.9477, 0.9544, 0.9602, 0.9653,
)

ZH_L16_HE_HALFTIMES: Tuple[float, ...] = (
    1.51, 3.02, 4.72, 6.99, 10.21, 14.48, 20.53, 29.11,
    41.20, 55.19, 70.69, 90.34, 115.29, 147.42, 188.24, 240.03,
)

ZH_L16_HE_A: Tuple[float, ...] = (
    1.7424, 1.3830, 1.1919, 1.0458, 0.9220, 0.8205, 0.7305, 0.6502,
    0.5950, 0.5545, 0.5333, 0.5189, 0.5181, 0.5176, 0.5172, 0.5119,
)

ZH_L16_HE_B: Tuple[float, ...] = (
    0.4245, 0.5747, 0.6527, 0.7223, 0.7582, 0.7957, 0.8279, 0.8553,
    0.8757, 0.8903, 0.8997, 0.9073, 0.9122, 0.9171, 0.9217, 0.9267,
)


@dataclass(frozen=True)
class GradientFactors:
    """Gradient factor pair for Bühlmann decompression adjustments.

    gf_low:  applied at the deepest ceiling (first stop), controls first stop depth
    gf_high: applied at the surface, controls final ascent and NDL
    Values are fractions (0.0–1.0), where 1.0 = use full M-value (standard Bühlmann).
    """
    gf_low: float
    gf_high: float

    def __post_init__(self):
        if not (0.0 < self.gf_low <= 1.0):
            raise ValueError(f"gf_low must be in (0, 1.0], got {self.gf_low}")
        if not (0.0 < self.gf_high <= 1.0):
            raise ValueError(f"gf_high must be in (0, 1.0], got {self.gf_high}")
        if self.gf_low > self.gf_high:
            raise ValueError(
                f"gf_low ({self.gf_low}) must be <= gf_high ({self.gf_high})"
            )

    @property
    def is_standard(self) -> bool:
        """True if GF 100/100 (no adjustment)."""
        return self.gf_low == 1.0 and self.gf_high == 1.0

    def gradient_for_depth(self, depth: float, first_ceiling_depth: float) -> float:
        """Interpolated gradient factor at the given depth.

        gf(depth) = gf_high - (gf_high - gf_low) * depth / first_ceiling_depth

        Yields gf_low at the reference depth and gf_high at the surface.
        Depths below the reference keep gf_low.
        """
        if first_ceiling_depth <= 0:
            return self.gf_high
        if depth >= first_ceiling_depth:
            return self.gf_low

        difference = self.gf_high - self.gf_low
        return self.gf_high - difference * depth / first_ceiling_depth


GF_DEFAULT = GradientFactors(gf_low=0.4, gf_high=0.85)


def alveolar_pressure(ambient_pressure: float, fraction: float) -> float:
    """Inspired inert gas pressure in the lungs (bar), RQ = 1."""
    return (ambient_pressure - WATER_VAPOR_PRESSURE) * fraction


def haldane_vec(
    pt0: np.ndarray, palv: float, t: float, k: np.ndarray
) -> np.ndarray:
    """Haldane equation for constant ambient pressure.

    P(t) = Palv + (P0 - Palv) * exp(-k t)
    """
    return palv + (pt0 - palv) * np.exp(-k * t)


def schreiner_vec(
    pt0: np.ndarray, palv0: float, rate: float, t: float, k: np.ndarray
) -> np.ndarray:
    """Schreiner equation for linearly changing ambient pressure.

    P(t) = Palv0 + R(t - 1/k) - (Palv0 - P0 - R/k) * exp(-k t)

    Args:
        pt0: tissue pressures at the start of the interval
        palv0: alveolar inert gas pressure at the start of the interval
        rate: change of alveolar inert gas pressure per time unit
        t: interval duration (same time unit as rate and k)
        k: decay constants ln(2) / halftime
    """
    return palv0 + rate * (t - 1.0 / k) - (palv0 - pt0 - rate / k) * np.exp(-k * t)


def decay_constants(halftimes: Tuple[float, ...]) -> np.ndarray:
    """Decay constants per second for half-times given in minutes."""
    return math.log(2) / (np.array(halftimes) * 60.0)


def ceiling_pressure_gf(
    p_total: np.ndarray, a: np.ndarray, b: np.ndarray, gf: float
) -> np.ndarray:
    """GF-adjusted tolerated ambient pressure (bar) per compartment.

    Solves for ambient pressure P where tissue_pressure = M_gf(P):
        P_ceil = (p_total - gf * a) / (gf / b + 1 - gf)
    """
    return (p_total - gf * a) / (gf / b + 1.0 - gf)
