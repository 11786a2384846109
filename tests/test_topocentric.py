# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the topocentric frame and the central body shape."""
import math

import numpy as np
import pytest

from orbis.domain.body_shape import GeodeticPoint, OneAxisEllipsoid
from orbis.domain.errors import ConfigurationError
from orbis.domain.frames import FrameTree, get_transform_to
from orbis.domain.time_systems import J2000_EPOCH
from orbis.domain.topocentric import TopocentricFrame
from orbis.domain.transforms import PVCoordinates

DATE = J2000_EPOCH.shifted_by(5000.0)


@pytest.fixture
def tree():
    t = FrameTree("GCRF")
    t.add_earth_rotating_frame("ITRF")
    return t


@pytest.fixture
def earth(tree):
    return OneAxisEllipsoid(tree.get_frame("ITRF"))


@pytest.fixture
def equator_station(tree, earth):
    return TopocentricFrame(tree, earth, GeodeticPoint(0.0, 0.0, 0.0), "EQUATOR")


@pytest.fixture
def toulouse(tree, earth):
    return TopocentricFrame(tree, earth, GeodeticPoint.from_degrees(43.6, 1.44, 150.0), "TOULOUSE")


def _above(station, direction, distance=1.0e5):
    origin = station.body_shape.geodetic_to_cartesian(station.point)
    return origin + distance * direction


# ── Body shape ────────────────────────────────────────────────────

class TestOneAxisEllipsoid:

    @pytest.mark.parametrize("lat_deg, lon_deg, alt_m", [
        (0.0, 0.0, 0.0),
        (45.0, -120.0, 400.0),
        (-62.5, 170.0, 8.0e5),
    ])
    def test_geodetic_round_trip(self, tree, earth, lat_deg, lon_deg, alt_m):
        point = GeodeticPoint.from_degrees(lat_deg, lon_deg, alt_m)
        itrf = tree.get_frame("ITRF")
        back = earth.transform_to_geodetic(earth.geodetic_to_cartesian(point), itrf, DATE)
        assert back.latitude == pytest.approx(point.latitude, abs=1e-9)
        assert back.longitude == pytest.approx(point.longitude, abs=1e-9)
        assert back.altitude == pytest.approx(point.altitude, abs=1e-3)

    def test_pole_altitude(self, tree, earth):
        itrf = tree.get_frame("ITRF")
        point = earth.transform_to_geodetic([0.0, 0.0, 6_356_752.3 + 1000.0], itrf, DATE)
        assert point.latitude == pytest.approx(math.pi / 2.0)
        assert point.altitude == pytest.approx(1000.0, abs=1.0)

    def test_invalid_flattening(self, tree):
        with pytest.raises(ConfigurationError):
            OneAxisEllipsoid(tree.get_frame("ITRF"), flattening=1.0)


# ── Local directions ──────────────────────────────────────────────

class TestDirections:

    def test_equator_directions(self, equator_station):
        assert np.allclose(equator_station.zenith, [1.0, 0.0, 0.0])
        assert np.allclose(equator_station.north, [0.0, 0.0, 1.0])
        assert np.allclose(equator_station.east, [0.0, 1.0, 0.0])

    def test_opposites(self, toulouse):
        assert np.allclose(toulouse.nadir, -toulouse.zenith)
        assert np.allclose(toulouse.south, -toulouse.north)
        assert np.allclose(toulouse.west, -toulouse.east)

    def test_orthonormal_basis(self, toulouse):
        basis = np.array([toulouse.east, toulouse.north, toulouse.zenith])
        assert np.allclose(basis @ basis.T, np.eye(3))
        assert np.allclose(np.cross(toulouse.east, toulouse.north), toulouse.zenith)

    def test_registered_in_tree(self, tree, toulouse):
        assert tree.get_frame("TOULOUSE") is toulouse.frame
        assert toulouse.frame.parent is tree.get_frame("ITRF")
        assert toulouse.name == "TOULOUSE"


# ── Observation geometry ──────────────────────────────────────────

class TestObservation:

    def test_due_north_azimuth_zero(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        az = toulouse.get_azimuth(_above(toulouse, toulouse.north), itrf, DATE)
        assert min(az, 2.0 * math.pi - az) < 1e-9

    def test_due_east_azimuth(self, tree, equator_station):
        itrf = tree.get_frame("ITRF")
        az = equator_station.get_azimuth(_above(equator_station, equator_station.east), itrf, DATE)
        assert az == pytest.approx(math.pi / 2.0, abs=1e-12)

    def test_due_west_azimuth(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        az = toulouse.get_azimuth(_above(toulouse, toulouse.west), itrf, DATE)
        assert az == pytest.approx(1.5 * math.pi, abs=1e-9)

    def test_zenith_elevation(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        el = toulouse.get_elevation(_above(toulouse, toulouse.zenith), itrf, DATE)
        assert el == pytest.approx(math.pi / 2.0, abs=1e-9)

    def test_horizon_elevation_zero(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        el = toulouse.get_elevation(_above(toulouse, toulouse.south), itrf, DATE)
        assert el == pytest.approx(0.0, abs=1e-9)

    def test_range(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        assert toulouse.get_range(_above(toulouse, toulouse.east, 2.5e5), itrf, DATE) == pytest.approx(2.5e5)

    def test_inertial_and_body_frames_agree(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        target = _above(toulouse, 0.6 * toulouse.zenith + 0.8 * toulouse.east, 1.2e6)
        inertial = get_transform_to(itrf, tree.root, DATE).transform_position(target)
        via_body = toulouse.observe(target, itrf, DATE)
        via_inertial = toulouse.observe(inertial, tree.root, DATE)
        assert via_inertial.azimuth == pytest.approx(via_body.azimuth, abs=1e-9)
        assert via_inertial.elevation == pytest.approx(via_body.elevation, abs=1e-9)
        assert via_inertial.slant_range == pytest.approx(via_body.slant_range, rel=1e-12)

    def test_observe_matches_accessors(self, tree, toulouse):
        target = np.array([7.0e6, 1.0e6, 2.0e6])
        obs = toulouse.observe(target, tree.root, DATE)
        assert obs.azimuth == pytest.approx(toulouse.get_azimuth(target, tree.root, DATE))
        assert obs.elevation == pytest.approx(toulouse.get_elevation(target, tree.root, DATE))
        assert obs.elevation_deg == pytest.approx(math.degrees(obs.elevation))

    def test_azimuth_just_west_of_north_wraps_to_zero(self, toulouse):
        local = np.array([-1e-300, 1000.0, 0.0])
        obs = toulouse.observe(local, toulouse.frame, DATE)
        assert 0.0 <= obs.azimuth < 2.0 * math.pi
        assert obs.azimuth == 0.0
        assert obs.azimuth == toulouse.get_azimuth(local, toulouse.frame, DATE)

    def test_range_rate_along_zenith(self, tree, toulouse):
        itrf = tree.get_frame("ITRF")
        pv = PVCoordinates(_above(toulouse, toulouse.zenith), 100.0 * toulouse.zenith)
        assert toulouse.get_range_rate(pv, itrf, DATE) == pytest.approx(100.0, rel=1e-9)

    def test_range_rate_zero_for_body_fixed_point(self, tree, toulouse):
        """A point at rest in ITRF has no range rate, even seen from GCRF."""
        itrf = tree.get_frame("ITRF")
        fixed = PVCoordinates(_above(toulouse, toulouse.north, 3.0e5), np.zeros(3))
        inertial = get_transform_to(itrf, tree.root, DATE).transform_pv(fixed)
        assert toulouse.get_range_rate(inertial, tree.root, DATE) == pytest.approx(0.0, abs=1e-6)
