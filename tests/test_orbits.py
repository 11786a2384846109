# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for orbit parameterizations and OrbitalState conversions."""
import math

import numpy as np
import pytest

from orbis.domain.errors import ConfigurationError, ConvergenceError
from orbis.domain.frames import FrameTree
from orbis.domain.orbital_mechanics import (
    KeplerSolverConfig,
    eccentric_to_mean,
    mean_to_eccentric,
    mean_to_eccentric_longitude,
    normalize_angle,
)
from orbis.domain.orbits import (
    CartesianParameters,
    CircularParameters,
    EquinoctialParameters,
    KeplerianParameters,
    OrbitalState,
    OrbitType,
    PositionAngle,
)
from orbis.domain.time_systems import J2000_EPOCH
from orbis.domain.transforms import PVCoordinates

MU = 3.9860047e14
POSITION = [3220103.0, 69623.0, 6449822.0]
VELOCITY = [6414.7, -2006.0, -3180.0]


@pytest.fixture
def tree():
    t = FrameTree("GCRF")
    t.add_earth_rotating_frame("ITRF")
    return t


@pytest.fixture
def cartesian_orbit(tree):
    return OrbitalState.from_pv(PVCoordinates(POSITION, VELOCITY), tree.root, J2000_EPOCH, MU)


@pytest.fixture
def keplerian_orbit(tree):
    params = KeplerianParameters(7209668.0, 0.5e-4, 1.7, 2.1, 2.9, 6.2, PositionAngle.TRUE)
    return OrbitalState(J2000_EPOCH, tree.root, MU, params)


def _assert_same_pv(first, second, pos_tol=1e-10, vel_tol=1e-10):
    p1, p2 = first.position, second.position
    v1, v2 = first.velocity, second.velocity
    assert np.linalg.norm(p1 - p2) / np.linalg.norm(p1) < pos_tol
    assert np.linalg.norm(v1 - v2) / np.linalg.norm(v1) < vel_tol


# ── Anomaly helpers ───────────────────────────────────────────────

class TestAnomalies:

    @pytest.mark.parametrize("e", [0.0, 0.1, 0.5, 0.95])
    @pytest.mark.parametrize("m", [-3.0, 0.2, 2.9, 13.0])
    def test_kepler_equation_inverse(self, e, m):
        ecc = mean_to_eccentric(m, e)
        assert eccentric_to_mean(ecc, e) == pytest.approx(m, abs=1e-12)

    def test_kepler_keeps_revolution(self):
        m = 4.0 * math.pi + 0.3
        assert mean_to_eccentric(m, 0.2) > 4.0 * math.pi

    def test_kepler_budget_exhausted(self):
        with pytest.raises(ConvergenceError) as excinfo:
            mean_to_eccentric(1.0, 0.7, KeplerSolverConfig(tolerance=1e-30, max_iterations=1))
        assert excinfo.value.iterations == 1

    def test_generalized_kepler_budget_exhausted(self):
        with pytest.raises(ConvergenceError):
            mean_to_eccentric_longitude(
                1.0, 0.3, 0.2, KeplerSolverConfig(tolerance=1e-30, max_iterations=1),
            )

    def test_normalize_angle(self):
        assert normalize_angle(7.0, 0.0) == pytest.approx(7.0 - 2.0 * math.pi)
        assert 0.0 <= normalize_angle(-0.1) < 2.0 * math.pi


# ── Parameter validation ──────────────────────────────────────────

class TestValidation:

    @pytest.mark.parametrize("e", [1.0, 1.5, -0.1])
    def test_eccentricity_out_of_range(self, e):
        with pytest.raises(ConfigurationError):
            KeplerianParameters(7.0e6, e, 0.1, 0.0, 0.0, 0.0)

    def test_non_positive_semi_major_axis(self):
        with pytest.raises(ConfigurationError):
            EquinoctialParameters(-7.0e6, 0.0, 0.0, 0.0, 0.0, 0.0)

    def test_circular_eccentricity_vector_too_long(self):
        with pytest.raises(ConfigurationError):
            CircularParameters(7.0e6, 0.8, 0.8, 0.5, 0.0, 0.0)

    def test_hyperbolic_state_rejected(self, tree):
        orbit = OrbitalState.from_pv(
            PVCoordinates([7.0e6, 0.0, 0.0], [0.0, 12000.0, 0.0]), tree.root, J2000_EPOCH, MU,
        )
        with pytest.raises(ConfigurationError):
            orbit.to_keplerian()

    def test_zero_position_rejected(self):
        with pytest.raises(ConfigurationError):
            CartesianParameters([0.0, 0.0, 0.0], [1.0, 0.0, 0.0])

    def test_non_positive_mu(self, tree):
        with pytest.raises(ConfigurationError):
            OrbitalState.from_pv(PVCoordinates(POSITION, VELOCITY), tree.root, J2000_EPOCH, 0.0)


# ── Conversions ───────────────────────────────────────────────────

class TestConversions:

    @pytest.mark.parametrize("orbit_type", [OrbitType.KEPLERIAN, OrbitType.EQUINOCTIAL, OrbitType.CIRCULAR])
    @pytest.mark.parametrize("angle_type", list(PositionAngle))
    def test_cartesian_round_trip(self, cartesian_orbit, orbit_type, angle_type):
        converted = cartesian_orbit.to_type(orbit_type, angle_type)
        assert converted.orbit_type is orbit_type
        assert converted.parameters.angle_type is angle_type
        _assert_same_pv(cartesian_orbit, converted.to_cartesian())

    @pytest.mark.parametrize("orbit_type", list(OrbitType))
    def test_keplerian_round_trip(self, keplerian_orbit, orbit_type):
        back = keplerian_orbit.to_type(orbit_type).to_keplerian().parameters
        original = keplerian_orbit.keplerian
        assert back.a == pytest.approx(original.a, rel=1e-10)
        assert back.e == pytest.approx(original.e, abs=1e-10)
        assert back.i == pytest.approx(original.i, abs=1e-10)
        # ω alone is poorly conditioned at e = 5e-5; ω + ν is not
        assert normalize_angle(back.pa + back.true_anomaly, 0.0) == pytest.approx(
            normalize_angle(original.pa + original.true_anomaly, 0.0), abs=1e-10,
        )

    def test_vis_viva(self, cartesian_orbit):
        r = float(np.linalg.norm(POSITION))
        v2 = float(np.dot(VELOCITY, VELOCITY))
        assert cartesian_orbit.a == pytest.approx(1.0 / (2.0 / r - v2 / MU), rel=1e-12)
        assert cartesian_orbit.to_keplerian().a == pytest.approx(cartesian_orbit.a, rel=1e-12)

    def test_equinoctial_definition(self, keplerian_orbit):
        eq = keplerian_orbit.equinoctial
        kep = keplerian_orbit.keplerian
        assert eq.ex == pytest.approx(kep.e * math.cos(kep.pa + kep.raan), abs=1e-15)
        assert eq.hy == pytest.approx(math.tan(kep.i / 2.0) * math.sin(kep.raan), rel=1e-12)

    def test_circular_definition(self, keplerian_orbit):
        circ = keplerian_orbit.to_circular().parameters
        kep = keplerian_orbit.keplerian
        assert circ.ex == pytest.approx(kep.e * math.cos(kep.pa), abs=1e-15)
        assert circ.ey == pytest.approx(kep.e * math.sin(kep.pa), abs=1e-15)
        assert circ.alpha == pytest.approx(kep.pa + kep.anomaly, abs=1e-12)

    @pytest.mark.parametrize("source", list(PositionAngle))
    @pytest.mark.parametrize("target", list(PositionAngle))
    def test_anomaly_conversion_consistent(self, source, target):
        kep = KeplerianParameters(2.4e7, 0.72, 0.12, 3.1, 0.7, 4.5, source)
        converted = KeplerianParameters(kep.a, kep.e, kep.i, kep.pa, kep.raan, kep.get_anomaly(target), target)
        assert converted.mean_anomaly == pytest.approx(kep.mean_anomaly, abs=1e-11)

    def test_longitude_conventions_differ_by_anomaly_relations(self, keplerian_orbit):
        eq = keplerian_orbit.to_equinoctial(PositionAngle.ECCENTRIC).parameters
        assert eq.lm == pytest.approx(eq.le - eq.ex * math.sin(eq.le) + eq.ey * math.cos(eq.le))

    def test_equatorial_orbit_is_not_singular(self, tree):
        orbit = OrbitalState.from_pv(
            PVCoordinates([7.0e6, 0.0, 0.0], [0.0, 7600.0, 0.0]), tree.root, J2000_EPOCH, MU,
        )
        eq = orbit.equinoctial
        assert eq.hx == 0.0 and eq.hy == 0.0
        _assert_same_pv(orbit, orbit.to_equinoctial().to_cartesian())

    def test_array_round_trip(self, keplerian_orbit):
        eq = keplerian_orbit.equinoctial
        back = EquinoctialParameters.from_array(eq.to_array(PositionAngle.MEAN), PositionAngle.MEAN)
        assert back.lv == pytest.approx(eq.lv, abs=1e-12)


# ── Shifting and frames ───────────────────────────────────────────

class TestOrbitalState:

    @pytest.mark.parametrize("orbit_type", list(OrbitType))
    def test_shift_one_period_returns(self, cartesian_orbit, orbit_type):
        orbit = cartesian_orbit.to_type(orbit_type)
        shifted = orbit.shifted_by(orbit.keplerian_period)
        assert shifted.orbit_type is orbit_type
        assert shifted.date.duration_from(orbit.date) == pytest.approx(orbit.keplerian_period)
        _assert_same_pv(orbit, shifted, 1e-9, 1e-9)

    def test_shift_preserves_energy(self, cartesian_orbit):
        shifted = cartesian_orbit.shifted_by(1234.5)
        assert shifted.a == pytest.approx(cartesian_orbit.a, rel=1e-12)
        assert shifted.e == pytest.approx(cartesian_orbit.e, abs=1e-12)

    def test_shift_backward(self, cartesian_orbit):
        _assert_same_pv(cartesian_orbit, cartesian_orbit.shifted_by(-500.0).shifted_by(500.0))

    def test_in_frame_round_trip(self, tree, cartesian_orbit):
        itrf = tree.get_frame("ITRF")
        there = cartesian_orbit.in_frame(itrf)
        assert there.frame is itrf
        _assert_same_pv(cartesian_orbit, there.in_frame(tree.root), 1e-12, 1e-12)

    def test_in_frame_keeps_parameterization(self, tree, keplerian_orbit):
        itrf = tree.get_frame("ITRF")
        assert keplerian_orbit.in_frame(itrf).orbit_type is OrbitType.KEPLERIAN

    def test_period(self, keplerian_orbit):
        a = keplerian_orbit.a
        assert keplerian_orbit.keplerian_period == pytest.approx(2.0 * math.pi * math.sqrt(a**3 / MU))
