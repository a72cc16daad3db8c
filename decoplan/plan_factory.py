"""
Construction of user defined dive plans and of the emergency ascent.
"""

import logging
from typing import List, Optional, Tuple

from .algorithm import BuhlmannAlgorithm, RestingParameters
from .gases import Gas
from .options import Options
from .physics import to_seconds
from .segments import Segment, Segments
from .tanks import Tank, to_gases

logger = logging.getLogger(__name__)


class PlanFactory:
    """Creates segments planned by the user, all of them bound to a tank."""

    @staticmethod
    def square(depth: float, duration: float, tank: int, gas: Gas, options: Options) -> Segments:
        """
        Descent at the configured speed followed by time at the depth.

        Args:
            depth: bottom depth in meters
            duration: total time in minutes including the descent
            tank: index of the tank the gas is breathed from
            gas: bottom gas
            options: provides the descent speed
        """
        segments = Segments()
        descent = to_seconds(depth / options.descent_speed)
        bottom = max(0.0, to_seconds(duration) - descent)
        segments.add(0, depth, gas, descent, tank)
        segments.add_flat(gas, bottom, tank)
        return segments

    @staticmethod
    def multilevel(
        levels: List[Tuple[float, float]], tank: int, gas: Gas, options: Options
    ) -> Segments:
        """
        Generate a multi-level plan.

        Args:
            levels: List of (depth, duration) tuples, duration in minutes at the level
            tank: index of the tank the gas is breathed from
            gas: breathed gas
            options: descent and ascent speeds used between the levels
        """
        segments = Segments()
        current_depth = 0.0

        for target_depth, duration in levels:
            if target_depth > current_depth:
                travel = to_seconds((target_depth - current_depth) / options.descent_speed)
                segments.add(current_depth, target_depth, gas, travel, tank)
            elif target_depth < current_depth:
                travel = to_seconds((current_depth - target_depth) / options.ascent_speed_6m)
                segments.add(current_depth, target_depth, gas, travel, tank)

            segments.add(target_depth, target_depth, gas, to_seconds(duration), tank)
            current_depth = target_depth

        return segments

    @staticmethod
    def emergency_ascent(
        profile: List[Segment],
        options: Options,
        tanks: List[Tank],
        resting: Optional[RestingParameters] = None,
    ) -> List[Segment]:
        """
        Ascent from the end of the deepest part of the dive used to calculate reserve.

        Starts with the time needed to solve the problem at the deepest point,
        breathing from the same tank as the last segment of the deepest part.

        Raises:
            ValueError: when no ascent can be calculated
        """
        deepest_part = Segments.from_collection(profile).deepest_part()
        gases = to_gases(tanks)
        calculated = BuhlmannAlgorithm().decompression(deepest_part, gases, options, resting)
        if calculated.errors:
            raise ValueError(f"Unable to calculate emergency ascent: {calculated.errors}")

        ascent = calculated.segments[len(deepest_part):]
        if not ascent:
            raise ValueError("Emergency ascent needs to contain at least one segment.")

        deepest = deepest_part[-1]
        problem_solving = Segment(
            deepest.end_depth,
            deepest.end_depth,
            deepest.gas,
            to_seconds(options.problem_solving_duration),
            deepest.tank,
        )
        logger.debug(f"Emergency ascent from {deepest.end_depth} m with {len(ascent)} segments")
        return [problem_solving] + ascent
