"""
Tests for the gradient factor and ZH-L16C helper math.

Tests validate real mathematical behavior against hand-computed values using
ZH-L16C constants and GF formulas.
"""

import dataclasses
import math

import numpy as np
import pytest

from decoplan.buhlmann_constants import (
    GradientFactors,
    GF_DEFAULT,
    WATER_VAPOR_PRESSURE,
    NUM_COMPARTMENTS,
    ZH_L16_N2_A,
    ZH_L16_N2_B,
    ZH_L16_N2_HALFTIMES,
    ZH_L16_HE_HALFTIMES,
    alveolar_pressure,
    ceiling_pressure_gf,
    decay_constants,
    haldane_vec,
    schreiner_vec,
)


class TestGradientFactorsValidation:
    """Test GradientFactors dataclass validation and properties."""

    def test_valid_construction(self):
        """Valid GF pairs should construct without error."""
        gf = GradientFactors(gf_low=0.7, gf_high=0.85)
        assert gf.gf_low == 0.7
        assert gf.gf_high == 0.85
        assert not gf.is_standard

    def test_standard_gf(self):
        """GF 100/100 should be recognized as standard."""
        gf = GradientFactors(gf_low=1.0, gf_high=1.0)
        assert gf.is_standard

    def test_default_is_40_85(self):
        """Default gradient factors are the common medium conservatism."""
        assert GF_DEFAULT.gf_low == 0.4
        assert GF_DEFAULT.gf_high == 0.85
        assert not GF_DEFAULT.is_standard

    def test_edge_case_equal_gf(self):
        """GF_low = GF_high should be valid."""
        gf = GradientFactors(gf_low=0.85, gf_high=0.85)
        assert gf.gf_low == gf.gf_high

    def test_reject_zero_gf_low(self):
        """GF_low = 0 should raise ValueError."""
        with pytest.raises(ValueError, match="gf_low must be in"):
            GradientFactors(gf_low=0.0, gf_high=0.85)

    def test_reject_gf_high_over_1(self):
        """GF_high > 1.0 should raise ValueError."""
        with pytest.raises(ValueError, match="gf_high must be in"):
            GradientFactors(gf_low=0.7, gf_high=1.1)

    def test_reject_gf_low_exceeds_gf_high(self):
        """GF_low > GF_high should raise ValueError."""
        with pytest.raises(ValueError, match="must be <="):
            GradientFactors(gf_low=0.9, gf_high=0.8)

    def test_frozen(self):
        """GradientFactors is immutable."""
        gf = GradientFactors(gf_low=0.3, gf_high=0.7)
        with pytest.raises(dataclasses.FrozenInstanceError):
            gf.gf_low = 0.5


class TestGradientForDepth:
    """Linear interpolation from gf_low at the reference depth to gf_high at surface."""

    def test_surface_uses_gf_high(self):
        """At 0 m the high gradient factor applies."""
        gf = GradientFactors(gf_low=0.3, gf_high=0.7)
        assert gf.gradient_for_depth(0, 30) == 0.7

    def test_reference_depth_uses_gf_low(self):
        """At the reference depth the low gradient factor applies."""
        gf = GradientFactors(gf_low=0.3, gf_high=0.7)
        assert gf.gradient_for_depth(30, 30) == pytest.approx(0.3)

    def test_exact_formula(self):
        """gf(d) = gf_high - (gf_high - gf_low) * d / first_ceiling_depth."""
        gf = GradientFactors(gf_low=0.4, gf_high=0.85)
        result = gf.gradient_for_depth(12, 40)
        expected = 0.85 - (0.85 - 0.4) * 12 / 40
        assert abs(result - expected) < 1e-12

    def test_below_reference_depth_keeps_gf_low(self):
        """Deeper parts of a multilevel dive never go below gf_low."""
        gf = GradientFactors(gf_low=0.4, gf_high=0.85)
        assert gf.gradient_for_depth(40, 10) == 0.4
        assert gf.gradient_for_depth(10.5, 10) == 0.4

    def test_zero_reference_depth_uses_gf_high(self):
        """Surface only plans have no reference depth."""
        gf = GradientFactors(gf_low=0.4, gf_high=0.85)
        assert gf.gradient_for_depth(0, 0) == 0.85


class TestTissueEquations:
    """Haldane and Schreiner equations vectorized over compartments."""

    def test_alveolar_pressure(self):
        """Inspired inert gas pressure removes the water vapour."""
        result = alveolar_pressure(1.01325, 0.79)
        expected = (1.01325 - WATER_VAPOR_PRESSURE) * 0.79
        assert abs(result - expected) < 1e-12

    def test_decay_constants_per_second(self):
        """k = ln(2) / (halftime in seconds)."""
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        assert k.shape == (NUM_COMPARTMENTS,)
        assert k[0] == pytest.approx(math.log(2) / (4.0 * 60))
        assert k[-1] == pytest.approx(math.log(2) / (635.0 * 60))

    def test_first_halftimes(self):
        """ZH-L16C uses 4 minutes for the fastest nitrogen compartment."""
        assert ZH_L16_N2_HALFTIMES[0] == 4.0
        assert ZH_L16_HE_HALFTIMES[0] == 1.51

    def test_haldane_one_halftime(self):
        """After one half-time the tissue covers half of the gradient."""
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        pt0 = np.full(NUM_COMPARTMENTS, 0.75)
        result = haldane_vec(pt0, 2.75, 4.0 * 60, k)
        assert result[0] == pytest.approx(1.75)

    def test_schreiner_zero_rate_equals_haldane(self):
        """Constant ambient pressure reduces Schreiner to Haldane."""
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        pt0 = np.full(NUM_COMPARTMENTS, 0.75)
        np.testing.assert_allclose(
            schreiner_vec(pt0, 2.5, 0.0, 120, k),
            haldane_vec(pt0, 2.5, 120, k),
            rtol=1e-12,
        )

    def test_schreiner_zero_time_keeps_pressure(self):
        """No time passed means no tissue change."""
        k = decay_constants(ZH_L16_N2_HALFTIMES)
        pt0 = np.linspace(0.7, 1.5, NUM_COMPARTMENTS)
        np.testing.assert_allclose(schreiner_vec(pt0, 2.5, 0.01, 0, k), pt0, atol=1e-12)


class TestCeilingPressure:
    """GF-adjusted tolerated ambient pressure."""

    def test_gf_one_is_plain_buhlmann(self):
        """With gf 1.0 the tolerated pressure is (p - a) * b."""
        a = np.array(ZH_L16_N2_A)
        b = np.array(ZH_L16_N2_B)
        p = np.full(NUM_COMPARTMENTS, 3.0)
        np.testing.assert_allclose(ceiling_pressure_gf(p, a, b, 1.0), (p - a) * b, rtol=1e-12)

    def test_exact_formula(self):
        """P_ceil = (p - gf * a) / (gf / b + 1 - gf)."""
        a = np.array(ZH_L16_N2_A)
        b = np.array(ZH_L16_N2_B)
        p = np.full(NUM_COMPARTMENTS, 2.2)
        gf = 0.4
        result = ceiling_pressure_gf(p, a, b, gf)
        expected = (2.2 - gf * ZH_L16_N2_A[0]) / (gf / ZH_L16_N2_B[0] + 1 - gf)
        assert abs(result[0] - expected) < 1e-10

    def test_lower_gf_is_more_conservative(self):
        """Lower gradient factor tolerates less, so the ceiling pressure rises."""
        a = np.array(ZH_L16_N2_A)
        b = np.array(ZH_L16_N2_B)
        p = np.full(NUM_COMPARTMENTS, 2.5)
        assert np.all(ceiling_pressure_gf(p, a, b, 0.3) > ceiling_pressure_gf(p, a, b, 0.9))
