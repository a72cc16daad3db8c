"""
Bühlmann decompression algorithm.

Replays the user defined segments through the tissue model and synthesizes
the ascent with deco stops and gas switches. Time runs in seconds, the tissues
are loaded in slices of one minute at most.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from .gases import Gas, Gases, STOP_DISTANCE
from .options import AscentSpeeds, Options, SAFETY_STOP_DURATION
from .physics import DepthConverter, ONE_MINUTE, to_minutes, to_seconds
from .segments import Segment, Segments
from .tissues import Tissues

logger = logging.getLogger(__name__)


@dataclass
class Ceiling:
    """Shallowest safe depth (m) at the moment (seconds since dive start)."""
    time: float
    depth: float


@dataclass
class CalculatedProfile:
    """
    Calculated segments with their ceilings, or the validation errors.

    Tissues are the state at the end of the dive, used for repetitive dives.
    """
    segments: List[Segment] = field(default_factory=list)
    ceilings: List[Ceiling] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    tissues: Optional[Tissues] = None

    @classmethod
    def from_errors(cls, errors: List[str]) -> "CalculatedProfile":
        return cls(errors=list(errors))

    @classmethod
    def from_profile(
        cls, segments: List[Segment], ceilings: List[Ceiling], tissues: Optional[Tissues] = None
    ) -> "CalculatedProfile":
        return cls(segments=list(segments), ceilings=list(ceilings), tissues=tissues)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class RestingParameters:
    """Tissues at the end of the previous dive and the surface interval in seconds."""
    tissues: Tissues
    surface_interval: float


class AlgorithmContext:
    """Mutable state of one simulation pass."""

    def __init__(
        self,
        tissues: Tissues,
        gases: Gases,
        segments: Segments,
        options: Options,
        converter: DepthConverter,
        first_ceiling_depth: float,
    ):
        self.tissues = tissues
        self.gases = gases
        self.segments = segments
        self.options = options
        self.converter = converter
        self.first_ceiling_depth = first_ceiling_depth
        self.gradients = options.gradient_factors
        self.ceilings: List[Ceiling] = []
        self.runtime = 0.0

    @property
    def current_depth(self) -> float:
        if self.segments.any():
            return self.segments.last().end_depth
        return 0.0

    def add_ceiling(self, depth: float) -> None:
        self.ceilings.append(Ceiling(self.runtime, depth))

    def ceiling(self) -> float:
        return self.ceiling_for_depth(self.current_depth)

    def ceiling_for_depth(self, depth: float) -> float:
        gf = self.gradients.gradient_for_depth(depth, self.first_ceiling_depth)
        return self.tissues.ceiling(gf, self.converter)


class BuhlmannAlgorithm:
    """ZH-L16C decompression with gradient factors."""

    def decompression(
        self,
        segments,
        gases: Gases,
        options: Options,
        resting: Optional[RestingParameters] = None,
    ) -> CalculatedProfile:
        """
        Calculates the complete dive profile for the user defined segments.

        Args:
            segments: user defined segments, not modified
            gases: all gases available during the dive
            options: planning options
            resting: tissues and surface interval of a previous dive

        Returns:
            CalculatedProfile with copies of the user segments followed by
            the ascent, or the validation errors.
        """
        converter = DepthConverter.from_options(options)
        user_segments = list(segments)
        errors = self.validate(user_segments, gases, options, converter)
        if errors:
            logger.debug(f"Plan rejected: {errors}")
            return CalculatedProfile.from_errors(errors)

        profile = Segments.from_collection(user_segments)
        last = profile.last()
        tissues = self._initial_tissues(resting, converter)
        context = AlgorithmContext(tissues, gases, profile, options, converter, last.end_depth)
        self._dive(context)
        self._ascent(context, last.gas)

        merged = profile.merge_flat(len(user_segments))
        logger.debug(
            f"Calculated {len(merged) - len(user_segments)} ascent segments, "
            f"runtime {to_minutes(context.runtime):.1f} min"
        )
        return CalculatedProfile.from_profile(merged, context.ceilings, context.tissues)

    def validate(
        self,
        segments: List[Segment],
        gases: Gases,
        options: Options,
        converter: DepthConverter,
    ) -> List[str]:
        """Collects all reasons why the plan can't be calculated."""
        if not segments:
            return ["There needs to be at least one segment."]

        messages = []
        previous_end = None
        for index, segment in enumerate(segments, start=1):
            if segment.start_depth < 0 or segment.end_depth < 0:
                messages.append(f"Segment {index}: depth can't be negative.")
            if segment.duration < 0:
                messages.append(f"Segment {index}: duration can't be negative.")
            if previous_end is not None and segment.start_depth != previous_end:
                messages.append(
                    f"Segment {index}: starts at {segment.start_depth} m, "
                    f"but the previous one ends at {previous_end} m."
                )
            previous_end = segment.end_depth

            gas = segment.gas
            if not gases.is_registered(gas):
                messages.append(f"Segment {index}: gas {gas.name} is not available in any tank.")

            if converter.to_bar(segment.max_depth) > gas.mod_pressure(options.max_ppo2):
                messages.append(
                    f"Segment {index}: {gas.name} exceeds maximum ppO2 {options.max_ppo2} "
                    f"at {segment.max_depth} m."
                )

            end = round(gas.end(segment.max_depth, converter))
            if end > options.max_end:
                messages.append(
                    f"Segment {index}: {gas.name} exceeds maximum narcotic depth "
                    f"{options.max_end} m at {segment.max_depth} m."
                )

        return messages

    def no_deco_limit(self, depth: float, gas: Gas, options: Options) -> float:
        """
        Minutes at the depth until a deco obligation appears, including the descent.

        Returns math.inf if the tissues saturate before a ceiling appears.
        """
        converter = DepthConverter.from_options(options)
        gases = Gases()
        gases.add_bottom_gas(gas)

        segments = Segments()
        descent = segments.add(0, depth, gas, to_seconds(depth / options.descent_speed))
        tissues = Tissues(converter.surface_pressure)
        context = AlgorithmContext(tissues, gases, segments, options, converter, depth)
        self._swim(context, descent)

        hover = Segment(depth, depth, gas, ONE_MINUTE)
        change = 1.0
        while context.ceiling() <= 0 and change > 0:
            change = context.tissues.load(hover, gas, converter)
            context.runtime += ONE_MINUTE

        if change == 0:
            return math.inf
        # we went one minute past the ceiling of 0 m
        return to_minutes(context.runtime) - 1

    def _initial_tissues(self, resting: Optional[RestingParameters], converter: DepthConverter) -> Tissues:
        if resting is None:
            return Tissues(converter.surface_pressure)

        tissues = resting.tissues.copy()
        tissues.rest(resting.surface_interval, converter.surface_pressure)
        return tissues

    def _dive(self, context: AlgorithmContext) -> None:
        # the initial ceiling doesn't have to be 0 m because of previous dives
        context.add_ceiling(context.ceiling())
        user_segments = context.segments.items
        for segment in user_segments:
            self._swim(context, segment)

    def _ascent(self, context: AlgorithmContext, bottom_gas: Gas) -> None:
        options = context.options
        gases = context.gases
        converter = context.converter

        speeds = AscentSpeeds(options)
        speeds.mark_average_depth(context.segments)
        max_depth = context.segments.max_depth
        safety_stop = options.safety_stop_required(max_depth) and max_depth > options.last_stop_depth

        first_deco_stop = self._first_deco_stop(context, safety_stop)
        next_deco_stop = first_deco_stop
        current_gas = bottom_gas
        next_gas_switch = gases.next_gas_switch(current_gas, context.current_depth, 0, options, converter)
        next_stop = self._next_stop(first_deco_stop, next_gas_switch, next_deco_stop)
        logger.debug(f"First deco stop {first_deco_stop} m, first gas switch {next_gas_switch} m")

        while next_stop >= 0:
            depth_difference = context.current_depth - next_stop
            if depth_difference > 0:
                speed = speeds.ascent(context.current_depth)
                duration = to_seconds(depth_difference / speed)
                ascent = context.segments.add(context.current_depth, next_stop, current_gas, duration)
                self._swim(context, ascent)

            if context.current_depth <= 0:
                break

            best_gas = gases.best_deco_gas(context.current_depth, options, converter)
            if best_gas is not None and best_gas.fO2 > current_gas.fO2:
                logger.debug(f"Switching to {best_gas.name} at {context.current_depth} m")
                current_gas = best_gas

            next_deco_stop = self._next_deco_stop(next_stop, options)
            stop_duration = 0
            while next_deco_stop < context.ceiling():
                stop = context.segments.add_flat(current_gas, ONE_MINUTE)
                self._swim(context, stop)
                stop_duration += ONE_MINUTE

            if safety_stop and context.current_depth == options.last_stop_depth:
                missing = to_seconds(SAFETY_STOP_DURATION) - stop_duration
                if missing > 0:
                    stop = context.segments.add_flat(current_gas, missing)
                    self._swim(context, stop)

            # multiple gas switches may happen before the first deco stop
            next_gas_switch = gases.next_gas_switch(current_gas, context.current_depth, 0, options, converter)
            next_stop = self._next_stop(first_deco_stop, next_gas_switch, next_deco_stop)

    @staticmethod
    def _next_stop(first_deco_stop: float, next_gas_switch: float, next_deco_stop: float) -> float:
        # switch depth equal to the first stop is handled as the gas switch
        if first_deco_stop > next_gas_switch:
            return next_deco_stop
        return next_gas_switch

    @staticmethod
    def _next_deco_stop(last_stop: float, options: Options) -> float:
        next_stop = last_stop - STOP_DISTANCE
        if next_stop < options.last_stop_depth:
            return 0
        return next_stop

    def _first_deco_stop(self, context: AlgorithmContext, safety_stop: bool) -> float:
        ceiling = context.ceiling()
        first_stop = math.ceil(ceiling / STOP_DISTANCE) * STOP_DISTANCE
        last_stop_depth = context.options.last_stop_depth

        if 0 < first_stop < last_stop_depth:
            return last_stop_depth
        if safety_stop:
            return max(first_stop, last_stop_depth)
        return first_stop

    def _swim(self, context: AlgorithmContext, segment: Segment) -> None:
        """Loads the tissues in slices of one minute, the last slice may be shorter."""
        full_slices = int(segment.duration // ONE_MINUTE)
        # ignores floating point noise of calculated durations
        remainder = round(segment.duration - full_slices * ONE_MINUTE, 9)
        intervals = [ONE_MINUTE] * full_slices
        if remainder > 0:
            intervals.append(remainder)

        start_depth = segment.start_depth
        for interval in intervals:
            end_depth = start_depth + interval * segment.speed
            part = Segment(start_depth, end_depth, segment.gas, interval)
            self._swim_part(context, part)
            start_depth = end_depth

    def _swim_part(self, context: AlgorithmContext, part: Segment) -> None:
        context.tissues.load(part, part.gas, context.converter)
        context.runtime += part.duration
        context.add_ceiling(context.ceiling_for_depth(part.end_depth))
