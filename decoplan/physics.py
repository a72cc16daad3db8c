"""
Depth and pressure conversions for the dive simulation.

Pressures are absolute (bar), depths in meters of water. Water density and
surface altitude define the pressure gradient and the surface pressure.
"""

from dataclasses import dataclass

# Standard atmosphere at sea level (bar)
P_SURFACE = 1.01325
GRAVITY = 9.80665

SALT_WATER_DENSITY = 1030.0  # kg/m3
FRESH_WATER_DENSITY = 1000.0  # kg/m3

ONE_MINUTE = 60  # seconds
ONE_DAY = 24 * 60 * ONE_MINUTE


def altitude_pressure(altitude_m: float = 0.0) -> float:
    """
    Calculate atmospheric pressure at altitude (bar).
    Uses Standard Barometric Formula: P = P0 * (1 - L*h/T0)^(gM/RL)
    """
    if altitude_m < 0:
        return P_SURFACE  # Clamp to sea level if negative
    return P_SURFACE * (1 - 2.25577e-5 * altitude_m) ** 5.25588


def to_minutes(seconds: float) -> float:
    return seconds / ONE_MINUTE


def to_seconds(minutes: float) -> float:
    return minutes * ONE_MINUTE


@dataclass(frozen=True)
class DepthConverter:
    """Converts depth in meters to absolute pressure in bar and back."""

    density: float
    surface_pressure: float = P_SURFACE

    @classmethod
    def for_salt_water(cls, altitude_m: float = 0.0) -> "DepthConverter":
        return cls(SALT_WATER_DENSITY, altitude_pressure(altitude_m))

    @classmethod
    def for_fresh_water(cls, altitude_m: float = 0.0) -> "DepthConverter":
        return cls(FRESH_WATER_DENSITY, altitude_pressure(altitude_m))

    @classmethod
    def from_options(cls, options) -> "DepthConverter":
        """Select the converter for the salinity and altitude of the options."""
        if options.salt_water:
            return cls.for_salt_water(options.altitude)
        return cls.for_fresh_water(options.altitude)

    @property
    def gradient(self) -> float:
        """Hydrostatic pressure per meter of water (bar/m)."""
        return self.density * GRAVITY / 100000.0

    def to_bar(self, depth: float) -> float:
        return self.surface_pressure + depth * self.gradient

    def from_bar(self, bars: float) -> float:
        return (bars - self.surface_pressure) / self.gradient
