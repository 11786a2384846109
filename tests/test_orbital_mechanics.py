# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for orbital mechanics edge cases.

Covers angle normalization, the equinoctial longitude conversions and
the secular J2 rates with boundary and edge-case inputs.
"""
import math

import pytest

from orbis.domain.errors import ConvergenceError
from orbis.domain.orbital_mechanics import (
    KeplerSolverConfig,
    OrbitalConstants,
    eccentric_to_mean_longitude,
    eccentric_to_true_longitude,
    j2_arg_perigee_rate,
    j2_raan_rate,
    keplerian_mean_motion,
    mean_to_eccentric_longitude,
    normalize_angle,
    true_to_eccentric_longitude,
)

A_550 = OrbitalConstants.R_EARTH_EQUATORIAL + 550e3


class TestNormalizeAngle:

    @pytest.mark.parametrize("angle", [-7.0, -math.pi, 0.0, 3.0, 4.0 * math.pi + 0.1, 100.0])
    def test_default_range(self, angle):
        wrapped = normalize_angle(angle)
        assert 0.0 <= wrapped < 2.0 * math.pi
        assert math.remainder(wrapped - angle, 2.0 * math.pi) == pytest.approx(0.0, abs=1e-12)

    def test_centered_on_zero(self):
        assert normalize_angle(1.5 * math.pi, 0.0) == pytest.approx(-0.5 * math.pi)
        assert normalize_angle(-math.pi, 0.0) == pytest.approx(-math.pi)


class TestEquinoctialLongitudes:

    @pytest.mark.parametrize("lv", [-2.0, 0.0, 0.5, 3.0, 7.5])
    def test_true_eccentric_round_trip(self, lv):
        ex, ey = 0.3, -0.2
        le = true_to_eccentric_longitude(lv, ex, ey)
        assert eccentric_to_true_longitude(le, ex, ey) == pytest.approx(lv, abs=1e-12)

    @pytest.mark.parametrize("lm", [-3.0, 0.0, 1.0, 6.0, 12.0])
    def test_generalized_kepler_inverse(self, lm):
        ex, ey = 0.1, 0.05
        le = mean_to_eccentric_longitude(lm, ex, ey)
        assert eccentric_to_mean_longitude(le, ex, ey) == pytest.approx(lm, abs=1e-12)

    def test_circular_orbit_longitudes_coincide(self):
        assert true_to_eccentric_longitude(1.2, 0.0, 0.0) == pytest.approx(1.2)
        assert mean_to_eccentric_longitude(1.2, 0.0, 0.0) == pytest.approx(1.2)

    def test_budget_exhausted(self):
        with pytest.raises(ConvergenceError):
            mean_to_eccentric_longitude(1.0, 0.5, 0.3, KeplerSolverConfig(tolerance=0.0, max_iterations=2))


class TestSecularRates:
    """Edge-case tests for the J2 secular rates."""

    def test_mean_motion_period(self):
        """A 550 km orbit has a period of about 95.6 minutes."""
        period = 2.0 * math.pi / keplerian_mean_motion(A_550)
        assert period / 60.0 == pytest.approx(95.6, abs=0.2)

    def test_j2_raan_rate_equatorial(self):
        """Equatorial orbit (i=0) should have finite RAAN rate."""
        n = keplerian_mean_motion(A_550)
        rate = j2_raan_rate(n, A_550, 0.0, 0.0)
        assert math.isfinite(rate)
        # cos(0) = 1: maximum westward regression
        assert rate < 0.0

    def test_j2_raan_rate_polar(self):
        """Polar orbit (i=90 deg) should have RAAN rate approximately zero."""
        n = keplerian_mean_motion(A_550)
        assert abs(j2_raan_rate(n, A_550, 0.0, math.radians(90.0))) < 1e-10

    def test_sun_synchronous_rate(self):
        """At 97.6 deg and 550 km the node follows the mean Sun (~0.9856 deg/day)."""
        n = keplerian_mean_motion(A_550)
        rate = j2_raan_rate(n, A_550, 0.0, math.radians(97.6))
        assert math.degrees(rate) * 86400.0 == pytest.approx(0.9856, abs=0.02)

    def test_perigee_frozen_at_critical_inclination(self):
        n = keplerian_mean_motion(A_550)
        critical = math.asin(math.sqrt(0.8))
        assert abs(j2_arg_perigee_rate(n, A_550, 0.01, critical)) < 1e-15
