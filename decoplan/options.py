"""
Planning options consumed by a single simulation pass.
"""

from dataclasses import dataclass
from enum import Enum

from .buhlmann_constants import GradientFactors, GF_DEFAULT


class SafetyStop(Enum):
    NEVER = "never"
    AUTO = "auto"
    ALWAYS = "always"


# Dives deeper than this get a safety stop in AUTO mode (meters)
SAFETY_STOP_AUTO_DEPTH = 10.0
SAFETY_STOP_DURATION = 3  # minutes


@dataclass(frozen=True)
class Options:
    """Immutable definition of the planned dive behaviour.

    Speeds in meters/minute, depths in meters, partial pressures in bar.
    """
    gf_low: float = GF_DEFAULT.gf_low
    gf_high: float = GF_DEFAULT.gf_high
    max_ppo2: float = 1.4
    max_deco_ppo2: float = 1.6
    max_end: float = 30.0
    salt_water: bool = True
    altitude: float = 0.0
    descent_speed: float = 20.0
    ascent_speed_50perc: float = 9.0
    ascent_speed_50perc_to_6m: float = 6.0
    ascent_speed_6m: float = 3.0
    last_stop_depth: float = 3.0
    safety_stop: SafetyStop = SafetyStop.AUTO
    problem_solving_duration: float = 1.0  # minutes

    def __post_init__(self):
        # validates the gradient factor pair
        GradientFactors(self.gf_low, self.gf_high)
        if self.max_deco_ppo2 <= 0 or self.max_ppo2 <= 0:
            raise ValueError("Maximum ppO2 must be positive")
        if self.descent_speed <= 0:
            raise ValueError(f"descent_speed must be positive, got {self.descent_speed}")
        for speed in (self.ascent_speed_50perc, self.ascent_speed_50perc_to_6m, self.ascent_speed_6m):
            if speed <= 0:
                raise ValueError(f"Ascent speeds must be positive, got {speed}")

    @property
    def gradient_factors(self) -> GradientFactors:
        return GradientFactors(self.gf_low, self.gf_high)

    def safety_stop_required(self, max_depth: float) -> bool:
        if self.safety_stop is SafetyStop.ALWAYS:
            return True
        if self.safety_stop is SafetyStop.AUTO:
            return max_depth > SAFETY_STOP_AUTO_DEPTH
        return False


class AscentSpeeds:
    """Depth dependent ascent speed limits relative to the average dive depth."""

    def __init__(self, options: Options):
        self.options = options
        self.average_depth = 0.0

    def mark_average_depth(self, segments) -> None:
        self.average_depth = segments.average_depth

    def ascent(self, current_depth: float) -> float:
        """Allowed ascent speed in meters/minute when starting at the depth."""
        if current_depth > self.average_depth * 0.5 and current_depth > 6:
            return self.options.ascent_speed_50perc
        if current_depth > 6:
            return self.options.ascent_speed_50perc_to_6m
        return self.options.ascent_speed_6m
