"""
Safety relevant events detected in a calculated dive profile.

The detection is a pure pass over the segments: neither tissues nor tanks are
touched. Oxygen limits are compared as ambient pressures (bar) to avoid
rounding of depths.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .algorithm import Ceiling
from .gases import Gas
from .options import AscentSpeeds, Options
from .physics import DepthConverter, ONE_MINUTE
from .segments import Segment, Segments

# Speeds are compared in meters/minute rounded to this number of decimals
SPEED_PRECISION = 6


class EventType(Enum):
    GAS_SWITCH = "gas_switch"
    LOW_PPO2 = "low_ppo2"
    HIGH_PPO2 = "high_ppo2"
    HIGH_ASCENT_SPEED = "high_ascent_speed"
    HIGH_DESCENT_SPEED = "high_descent_speed"
    BROKEN_CEILING = "broken_ceiling"
    MAX_END_EXCEEDED = "max_end_exceeded"
    SWITCH_TO_HIGHER_N2 = "switch_to_higher_n2"


@dataclass
class Event:
    """Event at time (seconds since dive start) and depth (meters)."""
    type: EventType
    time_stamp: float
    depth: float
    gas: Optional[Gas] = None


@dataclass
class PressureSegment:
    """Segment start and end as ambient pressures in bar."""
    start: float
    end: float

    @property
    def min(self) -> float:
        return min(self.start, self.end)

    @property
    def max(self) -> float:
        return max(self.start, self.end)

    @property
    def is_descent(self) -> bool:
        return self.start < self.end

    @property
    def is_ascent(self) -> bool:
        return self.start > self.end


class EventsContext:
    def __init__(self, user_segments: int, profile: List[Segment], options: Options):
        self.user_segments = user_segments
        self.profile = profile
        self.options = options
        self.converter = DepthConverter.from_options(options)
        self.speeds = AscentSpeeds(options)
        self.speeds.mark_average_depth(Segments(profile))
        self.events: List[Event] = []
        self.elapsed = 0.0
        self.index = 0

    @property
    def current(self) -> Segment:
        return self.profile[self.index]

    @property
    def previous(self) -> Optional[Segment]:
        if self.index > 0:
            return self.profile[self.index - 1]
        return None

    @property
    def is_user_segment(self) -> bool:
        return self.index < self.user_segments

    @property
    def max_ppo2(self) -> float:
        if self.is_user_segment:
            return self.options.max_ppo2
        return self.options.max_deco_ppo2

    @property
    def switching_gas(self) -> bool:
        previous = self.previous
        return previous is not None and not self.current.gas.composition_equals(previous.gas)

    def add(self, event_type: EventType, depth: float, gas: Optional[Gas] = None) -> None:
        self.events.append(Event(event_type, self.elapsed, depth, gas))


class BrokenCeilingContext:
    """Walks the ceilings once, only until the first broken one."""

    def __init__(self, ceilings: List[Ceiling]):
        self.ceilings = ceilings
        self.ceiling_index = 0
        self.segment_start = 0.0
        self.segment_end = 0.0
        self.event: Optional[Event] = None

    def assign_segment(self, segment: Segment) -> None:
        self.segment_start = self.segment_end
        self.segment_end += segment.duration

    def find_broken(self, segment: Segment) -> Optional[Event]:
        while self.ceiling_index < len(self.ceilings):
            ceiling = self.ceilings[self.ceiling_index]
            if ceiling.time > self.segment_end:
                break

            self.ceiling_index += 1
            diver_depth = segment.depth_at(ceiling.time - self.segment_start)
            if ceiling.depth > diver_depth:
                self.event = Event(EventType.BROKEN_CEILING, ceiling.time, ceiling.depth)
                return self.event
        return None


class ProfileEvents:
    @staticmethod
    def from_profile(
        user_segments: int,
        profile: List[Segment],
        ceilings: List[Ceiling],
        options: Options,
    ) -> List[Event]:
        """
        Generates events for the calculated profile.

        Args:
            user_segments: number of segments from the beginning added by the user
            profile: user defined segments followed by the calculated ascent
            ceilings: ceilings calculated together with the profile
            options: options used to calculate the profile
        """
        profile = list(profile)
        context = EventsContext(user_segments, profile, options)
        ceiling_context = BrokenCeilingContext(ceilings)

        for index in range(len(profile)):
            context.index = index
            pressures = ProfileEvents._to_pressure_segment(context.current, context.converter)
            ProfileEvents._add_high_ppo2(context, pressures)
            ProfileEvents._add_low_ppo2(context, pressures)
            ProfileEvents._add_gas_switch(context)
            ProfileEvents._add_max_end(context, pressures)
            ProfileEvents._add_switch_to_higher_n2(context)
            ProfileEvents._add_high_descent_speed(context)
            ProfileEvents._add_high_ascent_speed(context)
            context.elapsed += context.current.duration

            # the algorithm never breaks the ceiling, only the user can
            if ceiling_context.event is None and context.is_user_segment:
                ceiling_context.assign_segment(context.current)
                broken = ceiling_context.find_broken(context.current)
                if broken is not None:
                    context.events.append(broken)

        return context.events

    @staticmethod
    def _to_pressure_segment(segment: Segment, converter: DepthConverter) -> PressureSegment:
        return PressureSegment(converter.to_bar(segment.start_depth), converter.to_bar(segment.end_depth))

    @staticmethod
    def _speed(segment: Segment) -> float:
        """Meters/minute, positive while descending."""
        return round(segment.speed * ONE_MINUTE, SPEED_PRECISION)

    @staticmethod
    def _add_high_ascent_speed(context: EventsContext) -> None:
        current = context.current
        # ascent speed is a negative number
        if -ProfileEvents._speed(current) > context.speeds.ascent(current.start_depth):
            context.add(EventType.HIGH_ASCENT_SPEED, current.start_depth)

    @staticmethod
    def _add_high_descent_speed(context: EventsContext) -> None:
        current = context.current
        if ProfileEvents._speed(current) > context.options.descent_speed:
            context.add(EventType.HIGH_DESCENT_SPEED, current.start_depth)

    @staticmethod
    def _add_gas_switch(context: EventsContext) -> None:
        if context.switching_gas:
            current = context.current
            context.add(EventType.GAS_SWITCH, current.start_depth, current.gas)

    @staticmethod
    def _add_high_ppo2(context: EventsContext, pressures: PressureSegment) -> None:
        # calculated gas switches never exceed the deco ppO2, see Gases.best_deco_gas
        if pressures.is_descent or (context.is_user_segment and context.switching_gas):
            mod_pressure = context.current.gas.mod_pressure(context.max_ppo2)
            if pressures.max > mod_pressure:
                context.add(EventType.HIGH_PPO2, context.converter.from_bar(mod_pressure))

    @staticmethod
    def _add_low_ppo2(context: EventsContext, pressures: PressureSegment) -> None:
        current = context.current
        gas_ceiling = current.gas.ceiling(context.converter.surface_pressure)
        switch_into_hypoxia = pressures.min < gas_ceiling and context.switching_gas
        crossing_on_ascent = pressures.is_ascent and pressures.start > gas_ceiling > pressures.end
        # only at the beginning of the dive
        start_in_hypoxia = current.start_depth == 0 and pressures.start < gas_ceiling and pressures.is_descent

        if switch_into_hypoxia or crossing_on_ascent or start_in_hypoxia:
            context.add(EventType.LOW_PPO2, context.converter.from_bar(gas_ceiling))

    @staticmethod
    def _add_max_end(context: EventsContext, pressures: PressureSegment) -> None:
        if pressures.is_descent or context.switching_gas:
            current = context.current
            end = round(current.gas.end(current.max_depth, context.converter))
            if end > context.options.max_end:
                context.add(EventType.MAX_END_EXCEEDED, current.max_depth, current.gas)

    @staticmethod
    def _add_switch_to_higher_n2(context: EventsContext) -> None:
        if not context.switching_gas:
            return

        current = context.current.gas
        previous = context.previous.gas
        delta_n2 = current.fN2 - previous.fN2
        delta_he = current.fHe - previous.fHe
        # isobaric counter diffusion, rule of fifths
        if delta_n2 > 0 and delta_n2 > -delta_he / 5:
            context.add(EventType.SWITCH_TO_HIGHER_N2, context.current.start_depth, current)
