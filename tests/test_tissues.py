"""
Tests for the 16 compartment tissue model.
"""

import numpy as np
import pytest

from decoplan.buhlmann_constants import (
    NUM_COMPARTMENTS,
    WATER_VAPOR_PRESSURE,
    ZH_L16_N2_HALFTIMES,
    alveolar_pressure,
    decay_constants,
)
from decoplan.gases import StandardGases
from decoplan.physics import DepthConverter, P_SURFACE, ONE_DAY
from decoplan.segments import Segment
from decoplan.tissues import Tissues


@pytest.fixture
def salt():
    return DepthConverter.for_salt_water()


def saturate(tissues, depth, minutes, converter, gas=StandardGases.air):
    segment = Segment(depth, depth, gas, 60)
    for _ in range(minutes):
        tissues.load(segment, gas, converter)


class TestTissuesInitialState:
    """Tissues start saturated with air at the surface."""

    def test_initial_nitrogen(self):
        """All compartments at alveolar N2 pressure of air."""
        tissues = Tissues()
        expected = (P_SURFACE - WATER_VAPOR_PRESSURE) * 0.79
        np.testing.assert_allclose(tissues.n2, np.full(NUM_COMPARTMENTS, expected))
        np.testing.assert_array_equal(tissues.he, np.zeros(NUM_COMPARTMENTS))

    def test_initial_ceiling_is_surface(self, salt):
        """Saturated tissues at surface have no ceiling."""
        assert Tissues().ceiling(0.4, salt) == 0

    def test_copy_is_independent(self, salt):
        """Loading the copy keeps the source."""
        tissues = Tissues()
        copy = tissues.copy()
        saturate(copy, 30, 5, salt)
        assert np.all(copy.n2 > tissues.n2)


class TestTissuesLoading:
    """Schreiner loading over segments."""

    def test_flat_segment_matches_haldane(self, salt):
        """Constant depth is the Haldane equation."""
        tissues = Tissues()
        start = tissues.n2.copy()
        gas = StandardGases.air
        tissues.load(Segment(30, 30, gas, 60), gas, salt)

        palv = alveolar_pressure(salt.to_bar(30), gas.fN2)
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        expected = palv + (start - palv) * np.exp(-k * 60)
        np.testing.assert_allclose(tissues.n2, expected, rtol=1e-12)

    def test_returns_rounded_change(self, salt):
        """Largest compartment change, rounded to 8 decimals."""
        tissues = Tissues()
        start = tissues.n2.copy()
        gas = StandardGases.air
        change = tissues.load(Segment(0, 30, gas, 90), gas, salt)
        assert change == round(float(np.max(np.abs(tissues.n2 - start))), 8)
        assert change > 0

    def test_zero_duration_changes_nothing(self, salt):
        """Gas switch without time doesn't load the tissues."""
        tissues = Tissues()
        start = tissues.n2.copy()
        assert tissues.load(Segment(10, 10, StandardGases.air, 0), StandardGases.air, salt) == 0
        np.testing.assert_array_equal(tissues.n2, start)

    def test_converged_at_surface(self, salt):
        """Breathing air at the surface doesn't change saturated tissues."""
        tissues = Tissues()
        change = tissues.load(Segment(0, 0, StandardGases.air, 60), StandardGases.air, salt)
        assert change == 0.0

    def test_helium_loading(self, salt):
        """Trimix loads helium, fast compartments first."""
        tissues = Tissues()
        gas = StandardGases.trimix_18_45
        tissues.load(Segment(40, 40, gas, 300), gas, salt)
        assert np.all(tissues.he > 0)
        assert tissues.he[0] > tissues.he[-1]

    def test_ceiling_after_long_exposure(self, salt):
        """30 m for 30 minutes on air creates a ceiling."""
        tissues = Tissues()
        saturate(tissues, 30, 30, salt)
        assert tissues.ceiling(0.4, salt) > 0

    def test_lower_gf_deeper_ceiling(self, salt):
        """Conservative gradient factor raises the ceiling depth."""
        tissues = Tissues()
        saturate(tissues, 30, 30, salt)
        assert tissues.ceiling(0.3, salt) > tissues.ceiling(0.85, salt)


class TestTissuesResting:
    """Surface interval off-gassing."""

    def test_long_rest_returns_to_surface_saturation(self, salt):
        """After days at the surface the tissues are saturated with air again."""
        tissues = Tissues()
        saturate(tissues, 40, 20, salt, StandardGases.trimix_18_45)
        tissues.rest(10 * ONE_DAY, salt.surface_pressure)
        np.testing.assert_allclose(tissues.n2, Tissues().n2, atol=1e-5)
        np.testing.assert_allclose(tissues.he, np.zeros(NUM_COMPARTMENTS), atol=1e-5)

    def test_short_rest_keeps_loading(self, salt):
        """Slow compartments keep the inert gas after a short interval."""
        tissues = Tissues()
        saturate(tissues, 30, 30, salt)
        tissues.rest(30 * 60, salt.surface_pressure)
        assert tissues.n2[-1] > Tissues().n2[-1]
