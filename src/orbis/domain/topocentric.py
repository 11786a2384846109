# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Topocentric frame anchored at a surface point.

The frame is registered in the frame tree under the body frame of the
body shape, with a constant transform: translation to the surface point
followed by a rotation mapping East, North and Zenith onto X, Y and Z.
Observation geometry (elevation, azimuth, range, range rate) goes through
the frame graph for the external point, then applies flat trigonometry.
"""
import math
from dataclasses import dataclass

import numpy as np

from orbis.domain.body_shape import GeodeticPoint, OneAxisEllipsoid
from orbis.domain.frames import Frame, FrameTree, get_transform_to
from orbis.domain.time_systems import AbsoluteDate
from orbis.domain.transforms import PVCoordinates, Transform


@dataclass(frozen=True)
class Observation:
    """Topocentric observation: azimuth, elevation (rad), slant range (m)."""
    azimuth: float
    elevation: float
    slant_range: float

    @property
    def azimuth_deg(self) -> float:
        return math.degrees(self.azimuth)

    @property
    def elevation_deg(self) -> float:
        return math.degrees(self.elevation)


def _azimuth(local) -> float:
    """Azimuth from north, clockwise, wrapped into [0, 2π)."""
    azimuth = math.atan2(local[0], local[1])
    if azimuth < 0.0:
        azimuth += 2.0 * math.pi
    # -tiny + 2π rounds up to 2π
    return azimuth if azimuth < 2.0 * math.pi else 0.0


class TopocentricFrame:
    """East-North-Zenith frame at a point on a body shape.

    Args:
        tree: Frame tree the body frame belongs to.
        body_shape: Shape providing the parent body frame.
        point: Geodetic location of the origin.
        name: Name of the frame in the tree.
    """

    def __init__(
        self,
        tree: FrameTree,
        body_shape: OneAxisEllipsoid,
        point: GeodeticPoint,
        name: str,
    ) -> None:
        self.body_shape = body_shape
        self.point = point
        origin = body_shape.geodetic_to_cartesian(point)
        rotation = np.array([self.east, self.north, self.zenith])
        self.frame: Frame = tree.add_fixed_frame(
            name,
            body_shape.body_frame,
            Transform.compose(
                Transform.from_translation(-origin),
                Transform.from_rotation(rotation),
            ),
        )

    @property
    def name(self) -> str:
        return self.frame.name

    # -- Local directions, expressed in the parent body frame -------------- #

    @property
    def zenith(self) -> np.ndarray:
        lat, lon = self.point.latitude, self.point.longitude
        return np.array([
            math.cos(lat) * math.cos(lon),
            math.cos(lat) * math.sin(lon),
            math.sin(lat),
        ])

    @property
    def nadir(self) -> np.ndarray:
        return -self.zenith

    @property
    def north(self) -> np.ndarray:
        lat, lon = self.point.latitude, self.point.longitude
        return np.array([
            -math.sin(lat) * math.cos(lon),
            -math.sin(lat) * math.sin(lon),
            math.cos(lat),
        ])

    @property
    def south(self) -> np.ndarray:
        return -self.north

    @property
    def east(self) -> np.ndarray:
        lon = self.point.longitude
        return np.array([-math.sin(lon), math.cos(lon), 0.0])

    @property
    def west(self) -> np.ndarray:
        return -self.east

    # -- Observation geometry ---------------------------------------------- #

    def _local_position(self, position, frame: Frame, date: AbsoluteDate) -> np.ndarray:
        return get_transform_to(frame, self.frame, date).transform_position(position)

    def get_elevation(self, position, frame: Frame, date: AbsoluteDate) -> float:
        """Elevation (rad) of a point above the local horizontal plane."""
        local = self._local_position(position, frame, date)
        return math.asin(local[2] / float(np.linalg.norm(local)))

    def get_azimuth(self, position, frame: Frame, date: AbsoluteDate) -> float:
        """Azimuth (rad) clockwise from north, normalized to [0, 2π)."""
        return _azimuth(self._local_position(position, frame, date))

    def get_range(self, position, frame: Frame, date: AbsoluteDate) -> float:
        """Distance (m) from the frame origin."""
        return float(np.linalg.norm(self._local_position(position, frame, date)))

    def get_range_rate(self, pv: PVCoordinates, frame: Frame, date: AbsoluteDate) -> float:
        """Range rate (m/s), positive when the point recedes."""
        local = get_transform_to(frame, self.frame, date).transform_pv(pv)
        return float(np.dot(local.position, local.velocity) / np.linalg.norm(local.position))

    def observe(self, position, frame: Frame, date: AbsoluteDate) -> Observation:
        """Azimuth, elevation and range in a single frame traversal."""
        local = self._local_position(position, frame, date)
        slant_range = float(np.linalg.norm(local))
        return Observation(
            azimuth=_azimuth(local),
            elevation=math.asin(local[2] / slant_range),
            slant_range=slant_range,
        )
