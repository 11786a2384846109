# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Central body shape: oblate ellipsoid with geodetic conversions.

Geodetic latitude uses the iterative Bowring method.
"""
import math
from dataclasses import dataclass

import numpy as np

from orbis.domain.errors import ConfigurationError
from orbis.domain.frames import Frame, get_transform_to
from orbis.domain.orbital_mechanics import OrbitalConstants
from orbis.domain.time_systems import AbsoluteDate


@dataclass(frozen=True)
class GeodeticPoint:
    """Point given by geodetic latitude, longitude (rad) and altitude (m)."""
    latitude: float
    longitude: float
    altitude: float = 0.0

    @staticmethod
    def from_degrees(lat_deg: float, lon_deg: float, alt_m: float = 0.0) -> "GeodeticPoint":
        return GeodeticPoint(math.radians(lat_deg), math.radians(lon_deg), alt_m)


class OneAxisEllipsoid:
    """Ellipsoid of revolution fixed in a body frame.

    Args:
        equatorial_radius: Semi-major axis (m).
        flattening: (a - b) / a.
        body_frame: Body-fixed frame the ellipsoid is attached to.
    """

    def __init__(
        self,
        body_frame: Frame,
        equatorial_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
        flattening: float = OrbitalConstants.FLATTENING,
    ) -> None:
        if equatorial_radius <= 0.0:
            raise ConfigurationError(f"equatorial radius must be positive, got {equatorial_radius}")
        if not 0.0 <= flattening < 1.0:
            raise ConfigurationError(f"flattening must lie in [0, 1), got {flattening}")
        self.body_frame = body_frame
        self.equatorial_radius = equatorial_radius
        self.flattening = flattening
        self._polar_radius = equatorial_radius * (1.0 - flattening)
        self._e2 = flattening * (2.0 - flattening)

    def transform_to_geodetic(
        self,
        position,
        frame: Frame,
        date: AbsoluteDate,
    ) -> GeodeticPoint:
        """
        Convert a position given in any frame to geodetic coordinates.

        Returns:
            GeodeticPoint with latitude in [-π/2, π/2], longitude in (-π, π].
        """
        x, y, z = get_transform_to(frame, self.body_frame, date).transform_position(position)
        a = self.equatorial_radius
        e2 = self._e2
        p = math.sqrt(x**2 + y**2)

        lon_rad = math.atan2(y, x)

        # Iterative Bowring method for latitude
        # Initial estimate using spherical approximation
        lat_rad = math.atan2(z, p * (1.0 - e2))
        for _ in range(10):
            sin_lat = math.sin(lat_rad)
            n = a / math.sqrt(1.0 - e2 * sin_lat**2)
            lat_rad = math.atan2(z + e2 * n * sin_lat, p)

        sin_lat = math.sin(lat_rad)
        cos_lat = math.cos(lat_rad)
        n = a / math.sqrt(1.0 - e2 * sin_lat**2)
        if abs(cos_lat) > 1e-10:
            alt = p / cos_lat - n
        else:
            alt = abs(z) - self._polar_radius

        return GeodeticPoint(lat_rad, lon_rad, alt)

    def geodetic_to_cartesian(self, point: GeodeticPoint) -> np.ndarray:
        """Body-frame Cartesian position of a geodetic point."""
        sin_lat = math.sin(point.latitude)
        cos_lat = math.cos(point.latitude)
        n = self.equatorial_radius / math.sqrt(1.0 - self._e2 * sin_lat**2)
        return np.array([
            (n + point.altitude) * cos_lat * math.cos(point.longitude),
            (n + point.altitude) * cos_lat * math.sin(point.longitude),
            (n * (1.0 - self._e2) + point.altitude) * sin_lat,
        ])
