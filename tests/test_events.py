"""
Tests for profile events.
"""

import pytest

from decoplan.algorithm import BuhlmannAlgorithm, Ceiling
from decoplan.events import EventType, ProfileEvents
from decoplan.gases import Gas, Gases, StandardGases
from decoplan.options import Options
from decoplan.physics import DepthConverter
from decoplan.plan_factory import PlanFactory
from decoplan.segments import Segment


@pytest.fixture
def salt():
    return DepthConverter.for_salt_water()


def of_type(events, event_type):
    return [event for event in events if event.type is event_type]


def detect(profile, user_segments=None, ceilings=None, options=None):
    if user_segments is None:
        user_segments = len(profile)
    return ProfileEvents.from_profile(user_segments, profile, ceilings or [], options or Options())


class TestCalculatedProfileEvents:
    """Events of profiles created by the algorithm."""

    def test_gas_switch_without_warnings(self):
        """Automatic switch to EAN50 is reported without oxygen warnings."""
        options = Options()
        gases = Gases()
        gases.add_bottom_gas(StandardGases.air)
        gases.add_deco_gas(StandardGases.ean50)
        plan = PlanFactory.square(30, 25, 0, StandardGases.air, options)
        profile = BuhlmannAlgorithm().decompression(plan, gases, options)

        events = ProfileEvents.from_profile(len(plan), profile.segments, profile.ceilings, options)

        switches = of_type(events, EventType.GAS_SWITCH)
        assert len(switches) == 1
        assert switches[0].gas == StandardGases.ean50
        assert switches[0].depth == 21
        assert not of_type(events, EventType.LOW_PPO2)
        assert not of_type(events, EventType.HIGH_PPO2)
        assert not of_type(events, EventType.BROKEN_CEILING)

    def test_detection_is_pure(self):
        """Segments are left untouched."""
        profile = [Segment(0, 30, StandardGases.air, 60, 0), Segment(30, 0, StandardGases.air, 600)]
        before = [(s.start_depth, s.end_depth, s.duration) for s in profile]
        detect(profile, 1)
        assert [(s.start_depth, s.end_depth, s.duration) for s in profile] == before


class TestOxygenEvents:
    """Low and high ppO2."""

    def test_low_ppo2_on_ascent(self, salt):
        """Hypoxic trimix crosses its minimal depth during the ascent."""
        trimix = Gas(0.12, 0.5)
        profile = [
            Segment(0, 10, StandardGases.air, 60, 0),
            Segment(10, 30, trimix, 120, 1),
            Segment(30, 30, trimix, 600, 1),
            Segment(30, 0, trimix, 600, 1),
        ]

        low = of_type(detect(profile), EventType.LOW_PPO2)

        assert len(low) == 1
        assert low[0].time_stamp == 780
        assert low[0].depth == pytest.approx(salt.from_bar(1.5))

    def test_low_ppo2_at_start(self, salt):
        """Descent on hypoxic gas from the surface."""
        trimix = StandardGases.trimix_10_70
        profile = [Segment(0, 30, trimix, 120, 0), Segment(30, 30, trimix, 300, 0)]

        low = of_type(detect(profile), EventType.LOW_PPO2)

        assert len(low) == 1
        assert low[0].time_stamp == 0
        assert low[0].depth == pytest.approx(salt.from_bar(1.8))

    def test_high_ppo2_on_descent(self, salt):
        """EAN50 below its MOD."""
        profile = [Segment(0, 30, StandardGases.ean50, 120, 0)]

        high = of_type(detect(profile), EventType.HIGH_PPO2)

        assert len(high) == 1
        assert high[0].depth == pytest.approx(salt.from_bar(2.8))

    def test_ppo2_within_limit(self):
        """Air at 30 m is fine."""
        profile = [Segment(0, 30, StandardGases.air, 120, 0)]
        assert not of_type(detect(profile), EventType.HIGH_PPO2)


class TestSpeedEvents:
    """Descent and ascent speed limits."""

    def test_high_descent_speed(self):
        """30 m/min is faster than the default 20 m/min."""
        events = detect([Segment(0, 30, StandardGases.air, 60, 0)])
        fast = of_type(events, EventType.HIGH_DESCENT_SPEED)
        assert len(fast) == 1
        assert fast[0].depth == 0

    def test_descent_at_limit(self):
        """Exactly the allowed speed is not reported."""
        events = detect([Segment(0, 20, StandardGases.air, 60, 0)])
        assert not of_type(events, EventType.HIGH_DESCENT_SPEED)

    def test_high_ascent_speed(self):
        """20 m/min ascent is faster than any allowed ascent speed."""
        profile = [Segment(0, 20, StandardGases.air, 60, 0), Segment(20, 0, StandardGases.air, 60, 0)]
        fast = of_type(detect(profile), EventType.HIGH_ASCENT_SPEED)
        assert len(fast) == 1
        assert fast[0].depth == 20
        assert fast[0].time_stamp == 60


class TestBrokenCeiling:
    """Diver shallower than the ceiling in user defined segments."""

    def test_reported_once(self):
        """Only the first broken ceiling is reported."""
        profile = [
            Segment(0, 10, StandardGases.air, 60, 0),
            Segment(10, 10, StandardGases.air, 60, 0),
            Segment(10, 0, StandardGases.air, 120, 0),
        ]
        ceilings = [Ceiling(0, 0), Ceiling(60, 0), Ceiling(120, 5), Ceiling(180, 6), Ceiling(200, 6)]

        broken = of_type(detect(profile, ceilings=ceilings), EventType.BROKEN_CEILING)

        assert len(broken) == 1
        assert broken[0].time_stamp == 180
        assert broken[0].depth == 6

    def test_calculated_segments_ignored(self):
        """Only user defined segments are checked."""
        profile = [Segment(0, 10, StandardGases.air, 60, 0), Segment(10, 0, StandardGases.air, 120)]
        ceilings = [Ceiling(0, 0), Ceiling(60, 0), Ceiling(120, 5)]
        assert not of_type(detect(profile, 1, ceilings), EventType.BROKEN_CEILING)

    def test_multilevel_dive_keeps_ceiling(self):
        """Ascending from a deeper level to a shallower one is no broken ceiling."""
        options = Options(max_end=50)
        gases = Gases()
        gases.add_bottom_gas(StandardGases.air)
        plan = PlanFactory.multilevel([(40, 10), (10, 20)], 0, StandardGases.air, options)
        profile = BuhlmannAlgorithm().decompression(plan, gases, options)

        events = ProfileEvents.from_profile(len(plan), profile.segments, profile.ceilings, options)

        assert not of_type(events, EventType.BROKEN_CEILING)


class TestGasEvents:
    """Narcotic depth and switches."""

    def test_max_end_exceeded(self):
        """Air at 40 m is narcotic as 40 m."""
        events = detect([Segment(0, 40, StandardGases.air, 120, 0)])
        narcotic = of_type(events, EventType.MAX_END_EXCEEDED)
        assert len(narcotic) == 1
        assert narcotic[0].depth == 40
        assert narcotic[0].gas == StandardGases.air

    def test_switch_to_higher_nitrogen(self):
        """Trimix to air increases nitrogen more than a fifth of the helium drop."""
        profile = [
            Segment(0, 21, StandardGases.trimix_18_45, 63, 0),
            Segment(21, 21, StandardGases.air, 60, 1),
        ]
        events = detect(profile)

        higher = of_type(events, EventType.SWITCH_TO_HIGHER_N2)
        assert len(higher) == 1
        assert higher[0].depth == 21
        assert len(of_type(events, EventType.GAS_SWITCH)) == 1

    def test_switch_to_lower_nitrogen(self):
        """Air to EAN50 is not an isobaric counter diffusion risk."""
        profile = [
            Segment(0, 21, StandardGases.air, 63, 0),
            Segment(21, 21, StandardGases.ean50, 60, 1),
        ]
        assert not of_type(detect(profile), EventType.SWITCH_TO_HIGHER_N2)
