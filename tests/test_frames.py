# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the frame tree and transforms between its frames."""
import math

import numpy as np
import pytest

from orbis.domain.errors import ConfigurationError, FrameGraphError
from orbis.domain.frames import Frame, FrameTree, fixed_provider, get_transform_to, gmst_rad
from orbis.domain.orbital_mechanics import OrbitalConstants
from orbis.domain.time_systems import AbsoluteDate, J2000_EPOCH
from orbis.domain.transforms import PVCoordinates, Transform, rotation_x, rotation_z

DATES = [
    J2000_EPOCH,
    J2000_EPOCH.shifted_by(3600.0 * 7.3),
    AbsoluteDate.from_julian_day(2460676.5),
]


@pytest.fixture
def tree():
    t = FrameTree("GCRF")
    itrf = t.add_earth_rotating_frame("ITRF")
    t.add_fixed_frame(
        "TILTED", t.root,
        Transform.from_rotation(rotation_x(0.409)),
        pseudo_inertial=True,
    )
    t.add_fixed_frame(
        "STATION", itrf,
        Transform.compose(
            Transform.from_translation([-6.0e6, -1.0e6, -2.0e5]),
            Transform.from_rotation(rotation_z(0.3) @ rotation_x(1.0)),
        ),
    )
    return t


@pytest.fixture
def pv():
    return PVCoordinates([7.0e6, 1.0e6, -5.0e5], [100.0, 7500.0, 1000.0])


# ── Tree construction ─────────────────────────────────────────────

class TestFrameTree:

    def test_root_is_pseudo_inertial(self, tree):
        assert tree.root.is_root
        assert tree.root.is_pseudo_inertial

    def test_rotating_frame_not_pseudo_inertial(self, tree):
        assert not tree.get_frame("ITRF").is_pseudo_inertial

    def test_contains_and_len(self, tree):
        assert len(tree) == 4
        assert tree.get_frame("STATION") in tree
        assert Frame("GCRF") not in tree

    def test_children(self, tree):
        names = {f.name for f in tree.children(tree.root)}
        assert names == {"ITRF", "TILTED"}

    def test_depth(self, tree):
        assert tree.get_frame("STATION").depth == 2

    def test_duplicate_name_raises(self, tree):
        with pytest.raises(FrameGraphError):
            tree.add_fixed_frame("ITRF", tree.root, Transform.identity())

    def test_unknown_frame_raises(self, tree):
        with pytest.raises(FrameGraphError):
            tree.get_frame("EME2000")

    def test_parent_from_other_tree_raises(self, tree):
        other = FrameTree("GCRF")
        with pytest.raises(FrameGraphError):
            tree.add_fixed_frame("X", other.root, Transform.identity())

    def test_frame_graph_error_is_configuration_error(self):
        assert issubclass(FrameGraphError, ConfigurationError)


# ── Transform composition ─────────────────────────────────────────

class TestGetTransform:

    @pytest.mark.parametrize("date", DATES)
    @pytest.mark.parametrize("name", ["ITRF", "TILTED", "STATION"])
    def test_round_trip_is_identity(self, tree, name, date):
        frame = tree.get_frame(name)
        there = tree.get_transform(tree.root, frame, date)
        back = tree.get_transform(frame, tree.root, date)
        assert Transform.compose(there, back).is_close(Transform.identity(), atol=1e-6)

    @pytest.mark.parametrize("date", DATES)
    def test_round_trip_pv(self, tree, pv, date):
        station = tree.get_frame("STATION")
        out = get_transform_to(tree.root, station, date).transform_pv(pv)
        back = get_transform_to(station, tree.root, date).transform_pv(out)
        assert np.allclose(back.position, pv.position, rtol=0.0, atol=1e-6)
        assert np.allclose(back.velocity, pv.velocity, rtol=0.0, atol=1e-9)

    def test_same_frame_is_identity(self, tree):
        itrf = tree.get_frame("ITRF")
        assert tree.get_transform(itrf, itrf, J2000_EPOCH).is_close(Transform.identity())

    def test_siblings_through_common_ancestor(self, tree, pv):
        """TILTED → ITRF equals TILTED → GCRF → ITRF."""
        tilted = tree.get_frame("TILTED")
        itrf = tree.get_frame("ITRF")
        date = DATES[1]
        direct = tree.get_transform(tilted, itrf, date)
        via_root = Transform.compose(
            tree.get_transform(tilted, tree.root, date),
            tree.get_transform(tree.root, itrf, date),
        )
        assert direct.is_close(via_root, atol=1e-6)

    def test_point_fixed_in_itrf_moves_in_gcrf(self, tree):
        itrf = tree.get_frame("ITRF")
        r = OrbitalConstants.R_EARTH_EQUATORIAL
        out = tree.get_transform(itrf, tree.root, DATES[1]).transform_pv(
            PVCoordinates([r, 0.0, 0.0], [0.0, 0.0, 0.0])
        )
        speed = float(np.linalg.norm(out.velocity))
        assert speed == pytest.approx(OrbitalConstants.EARTH_ROTATION_RATE * r, rel=1e-9)

    def test_different_trees_raise(self, tree):
        other = FrameTree("GCRF")
        with pytest.raises(FrameGraphError):
            get_transform_to(tree.root, other.root, J2000_EPOCH)

    def test_foreign_frame_rejected_by_tree(self, tree):
        other = FrameTree("GCRF")
        with pytest.raises(FrameGraphError):
            tree.get_transform(tree.root, other.root, J2000_EPOCH)


# ── Malformed graphs ──────────────────────────────────────────────

class TestMalformedGraph:

    def test_cycle_detected(self):
        identity = fixed_provider(Transform.identity())
        f1 = Frame("F1", None, identity)
        f2 = Frame("F2", f1, identity)
        object.__setattr__(f1, "parent", f2)
        with pytest.raises(FrameGraphError):
            f2.ancestors()

    def test_detached_frame(self):
        lonely = Frame("LONELY", None, fixed_provider(Transform.identity()))
        root = Frame("ROOT", pseudo_inertial=True)
        with pytest.raises(FrameGraphError):
            get_transform_to(lonely, root, J2000_EPOCH)


# ── Earth rotation ────────────────────────────────────────────────

class TestEarthRotation:

    def test_gmst_at_j2000(self):
        assert math.degrees(gmst_rad(J2000_EPOCH)) == pytest.approx(280.19245, abs=1e-3)

    def test_gmst_advances_one_sidereal_day(self):
        sidereal_day = 2.0 * math.pi / OrbitalConstants.EARTH_ROTATION_RATE
        later = DATES[1].shifted_by(sidereal_day)
        assert gmst_rad(later) == pytest.approx(gmst_rad(DATES[1]), abs=1e-5)

    def test_gmst_in_range(self):
        for date in DATES:
            assert 0.0 <= gmst_rad(date) < 2.0 * math.pi
