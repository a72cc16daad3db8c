"""
Gas consumption and reserve (rock bottom) of the tanks used during a dive.

The reserve is the gas needed for an emergency ascent from the deepest point
of the dive at stressed breathing rate, kept at least at the minimal reserve
of each tank. The real profile is consumed only after the reserve is known, so
the consumption can preserve it where possible.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .algorithm import BuhlmannAlgorithm, CalculatedProfile, RestingParameters
from .gases import GasCode
from .interval_search import BinaryIntervalSearch, SearchContext
from .options import Options
from .physics import DepthConverter, ONE_DAY, ONE_MINUTE, to_minutes
from .plan_factory import PlanFactory
from .segments import Segment, Segments
from .tanks import Tank, have_reserve, reset_consumption, to_gases

logger = logging.getLogger(__name__)

# Minimum bars to keep in the first tank, even for shallow dives
DEFAULT_PRIMARY_RESERVE = 30
# Minimum bars to keep in a stage tank, even for shallow dives
DEFAULT_STAGE_RESERVE = 20


@dataclass
class Diver:
    """Breathing rates in liters per minute at surface pressure."""
    rmv: float = 20.0
    stress_rmv: float = 30.0

    def __post_init__(self):
        if self.rmv <= 0 or self.stress_rmv <= 0:
            raise ValueError("RMV needs to be positive number in liters/minute")

    @property
    def team_stress_rmv(self) -> float:
        """Two divers breathing from one tank during an out of gas ascent."""
        return self.stress_rmv * 2


@dataclass
class ConsumptionOptions:
    diver: Diver = field(default_factory=Diver)
    primary_tank_reserve: float = DEFAULT_PRIMARY_RESERVE  # bars
    stage_tank_reserve: float = DEFAULT_STAGE_RESERVE  # bars


class GasVolumes:
    """Liters still to be consumed per gas composition."""

    def __init__(self):
        self._remaining: Dict[GasCode, float] = {}

    def get(self, code: GasCode) -> float:
        return self._remaining.get(code, 0.0)

    def add(self, code: GasCode, liters: float) -> None:
        self._remaining[code] = self.get(code) + max(0.0, liters)

    def subtract(self, code: GasCode, liters: float) -> None:
        remaining = self.get(code) - max(0.0, liters)
        self._remaining[code] = max(0.0, remaining)


class RmvContext:
    """Breathing rates in liters per second for one consumption pass."""

    def __init__(self, options: ConsumptionOptions, tanks: List[Tank], bottom_tank: int):
        self.options = options
        self.tanks = tanks
        self.bottom_tank = bottom_tank
        self.rmv_per_second = options.diver.rmv / ONE_MINUTE
        self.stress_rmv_per_second = options.diver.stress_rmv / ONE_MINUTE
        self.team_stress_rmv_per_second = options.diver.team_stress_rmv / ONE_MINUTE

    def stress_rmv(self, segment: Segment) -> float:
        # bottom gas is shared with the buddy, deco gas is breathed alone
        bottom_gas = self.tanks[self.bottom_tank].gas
        if segment.tank == self.bottom_tank or segment.gas.composition_equals(bottom_gas):
            return self.team_stress_rmv_per_second
        return self.stress_rmv_per_second

    def ensure_minimal_reserve(self, index: int, tank: Tank, reserve_volume: float) -> float:
        if index == self.bottom_tank:
            minimal_reserve = self.options.primary_tank_reserve
        else:
            minimal_reserve = self.options.stage_tank_reserve
        return max(reserve_volume, tank.size * minimal_reserve)


class Consumption:
    """
    Calculates tank consumption and reserve for a calculated profile.

    Tanks are referenced by segments using their index in the tank list, the
    first tank holds the bottom gas.
    """

    def __init__(self, converter: DepthConverter):
        self.converter = converter

    def consume_from_tanks(
        self,
        segments: List[Segment],
        options: Options,
        tanks: List[Tank],
        consumption_options: ConsumptionOptions,
        resting: Optional[RestingParameters] = None,
    ) -> None:
        """
        Updates consumed and reserve volumes of the tanks.

        Args:
            segments: complete profile, user defined followed by the calculated ascent
            options: used to calculate the emergency ascent
            tanks: all tanks referenced by the segments
            consumption_options: breathing rates and minimal reserves
            resting: previous dive, None for the first dive

        Raises:
            ValueError: for a profile with less than two segments, or a segment
                referencing a tank missing in the tanks
        """
        segments = list(segments)
        if len(segments) < 2:
            raise ValueError("Profile needs to contain at least 2 segments.")

        emergency_ascent = PlanFactory.emergency_ascent(segments, options, tanks, resting)
        self.consume_from_tanks2(segments, emergency_ascent, tanks, consumption_options)

    def consume_from_tanks2(
        self,
        segments: List[Segment],
        emergency_ascent: List[Segment],
        tanks: List[Tank],
        consumption_options: ConsumptionOptions,
    ) -> None:
        """Same as consume_from_tanks using already calculated emergency ascent."""
        segments = list(segments)
        if len(segments) < 2:
            raise ValueError("Profile needs to contain at least 2 segments.")

        if not emergency_ascent:
            raise ValueError("Emergency ascent needs to contain at least 1 segment.")

        self._check_tank_indices(segments, tanks)
        self._check_tank_indices(emergency_ascent, tanks)

        reset_consumption(tanks)
        first = emergency_ascent[0]
        bottom_tank = first.tank if first.tank is not None else 0
        rmv = RmvContext(consumption_options, tanks, bottom_tank)

        # reserve first, to be able to preserve it where possible
        self._update_reserve(emergency_ascent, tanks, rmv)

        def tank_minimum(tank: Tank) -> float:
            return tank.reserve_volume

        def no_minimum(_: Tank) -> float:
            return 0.0

        def by_rmv(_: Segment) -> float:
            return rmv.rmv_per_second

        # segments with tank assigned are consumed directly from their tank
        remaining = self._to_be_consumed(segments, GasVolumes(), by_rmv, lambda s: s.tank is not None)
        remaining = self._consume_by_segment_tank(
            segments, tanks, remaining, tank_minimum,
            lambda s, _: self._consumed_by_segment(s, rmv.rmv_per_second),
        )
        # what doesn't fit above the reserve drains the tank
        remaining = self._consume_by_segment_tank(
            segments, tanks, remaining, no_minimum, lambda _, left: left
        )

        remaining = self._to_be_consumed(segments, remaining, by_rmv, lambda s: s.tank is None)
        remaining = self._consume_by_gases(tanks, remaining, tank_minimum)
        self._consume_by_gases(tanks, remaining, no_minimum)

        for index, tank in enumerate(tanks):
            logger.debug(
                f"Tank {index} {tank.gas.name}: consumed {tank.consumed:.1f} b, "
                f"reserve {tank.reserve:.1f} b"
            )

    def calculate_max_bottom_time(
        self,
        segments: Segments,
        tanks: List[Tank],
        consumption_options: ConsumptionOptions,
        options: Options,
        resting: Optional[RestingParameters] = None,
    ) -> int:
        """
        Maximum dive duration in minutes prolonging the last user defined segment.

        Returns 0, if even the planned duration can't be dived with the reserve.
        """
        test_segments = segments.copy()
        last_user_segment = segments.last()
        added = test_segments.add_flat(last_user_segment.gas, 0, last_user_segment.tank)

        def do_work(new_value: float) -> None:
            added.duration = new_value
            self._consume_from_profile(test_segments, tanks, consumption_options, options, resting)

        context = SearchContext(
            initial_value=0,
            # typical dive duration
            step=ONE_MINUTE * 40,
            max_value=ONE_DAY,
            do_work=do_work,
            meets_condition=lambda: have_reserve(tanks),
        )
        added_duration = BinaryIntervalSearch().search(context)

        # the plan itself is too long for the available gas
        if added_duration == 0:
            return 0

        total = to_minutes(segments.duration + added_duration)
        return math.floor(total)

    def _consume_from_profile(
        self,
        test_segments: Segments,
        tanks: List[Tank],
        consumption_options: ConsumptionOptions,
        options: Options,
        resting: Optional[RestingParameters],
    ) -> None:
        profile = self._calculate_decompression(test_segments, tanks, options, resting)
        self.consume_from_tanks(profile.segments, options, tanks, consumption_options, resting)

    @staticmethod
    def _calculate_decompression(
        segments: Segments, tanks: List[Tank], options: Options, resting: Optional[RestingParameters]
    ) -> CalculatedProfile:
        gases = to_gases(tanks)
        return BuhlmannAlgorithm().decompression(segments.copy(), gases, options, resting)

    @staticmethod
    def _check_tank_indices(segments: List[Segment], tanks: List[Tank]) -> None:
        for segment in segments:
            if segment.tank is not None and not 0 <= segment.tank < len(tanks):
                raise ValueError(
                    f"Segment references tank {segment.tank}, but only {len(tanks)} tanks are available."
                )

    def _update_reserve(self, emergency_ascent: List[Segment], tanks: List[Tank], rmv: RmvContext) -> None:
        by_tank: Dict[int, float] = {}
        pooled = GasVolumes()
        for segment in emergency_ascent:
            liters = self._consumed_by_segment(segment, rmv.stress_rmv(segment))
            if segment.tank is not None:
                by_tank[segment.tank] = by_tank.get(segment.tank, 0.0) + liters
            else:
                pooled.add(segment.gas.content_code, liters)

        for index, tank in enumerate(tanks):
            code = tank.gas.content_code
            own = by_tank.get(index, 0.0)
            required = rmv.ensure_minimal_reserve(index, tank, own + pooled.get(code))
            added = tank.add_reserve(required)
            pooled.subtract(code, added - own)

    def _consume_by_gases(
        self, tanks: List[Tank], remaining: GasVolumes, minimum: Callable[[Tank], float]
    ) -> GasVolumes:
        # stage tanks are registered last and consumed first, since they can be dropped
        for tank in reversed(tanks):
            code = tank.gas.content_code
            really_consumed = self._consume_from_tank(tank, remaining.get(code), minimum)
            remaining.subtract(code, really_consumed)
        return remaining

    def _consume_by_segment_tank(
        self,
        segments: List[Segment],
        tanks: List[Tank],
        remaining: GasVolumes,
        minimum: Callable[[Tank], float],
        get_consumed: Callable[[Segment, float], float],
    ) -> GasVolumes:
        for segment in segments:
            if segment.tank is None:
                continue

            code = segment.gas.content_code
            liters = get_consumed(segment, remaining.get(code))
            really_consumed = self._consume_from_tank(tanks[segment.tank], liters, minimum)
            remaining.subtract(code, really_consumed)
        return remaining

    @staticmethod
    def _consume_from_tank(tank: Tank, liters: float, minimum: Callable[[Tank], float]) -> float:
        available = max(0.0, tank.end_volume - minimum(tank))
        return tank.consume(min(liters, available))

    def _to_be_consumed(
        self,
        segments: List[Segment],
        remaining: GasVolumes,
        rmv_per_second: Callable[[Segment], float],
        include: Callable[[Segment], bool],
    ) -> GasVolumes:
        for segment in segments:
            if include(segment):
                liters = self._consumed_by_segment(segment, rmv_per_second(segment))
                remaining.add(segment.gas.content_code, liters)
        return remaining

    def _consumed_by_segment(self, segment: Segment, rmv_per_second: float) -> float:
        """Liters breathed at the segment average depth."""
        average_pressure = self.converter.to_bar(segment.average_depth)
        duration = round(segment.duration, 2)
        return duration * average_pressure * rmv_per_second
