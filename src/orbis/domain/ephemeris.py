# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Analytical Sun and Moon ephemerides.

Low-precision series (Meeus "Astronomical Algorithms" Ch. 25 and a
simplified Ch. 47), geocentric, in the inertial frame the body was
built on. Velocity is the central difference of the analytical model.
Positions in any other frame of the same tree go through the frame
graph.
"""
import math

import numpy as np

from orbis.domain.frames import Frame, get_transform_to
from orbis.domain.orbital_mechanics import OrbitalConstants
from orbis.domain.time_systems import AbsoluteDate
from orbis.domain.transforms import PVCoordinates

# Mean obliquity of the ecliptic at J2000 (degrees)
_OBLIQUITY_DEG = 23.4393

_DIFFERENCE_STEP_S = 60.0


def sun_position(t_centuries: float) -> np.ndarray:
    """Geocentric equatorial Sun position (m) at TT Julian centuries from J2000.

    Accuracy ~1 arcminute, sufficient for eclipse/illumination analysis.
    """
    T = t_centuries

    # Mean anomaly and ecliptic longitude (degrees)
    M_rad = math.radians((357.5291 + 35999.0503 * T) % 360.0)
    L_rad = math.radians((280.4665 + 36000.7698 * T + 1.9146 * math.sin(M_rad)
                          + 0.0200 * math.sin(2.0 * M_rad)) % 360.0)

    eps_rad = math.radians(_OBLIQUITY_DEG - 0.01300 * T)

    r_au = 1.00014 - 0.01671 * math.cos(M_rad) - 0.00014 * math.cos(2.0 * M_rad)
    distance_m = r_au * OrbitalConstants.AU

    return distance_m * np.array([
        math.cos(L_rad),
        math.cos(eps_rad) * math.sin(L_rad),
        math.sin(eps_rad) * math.sin(L_rad),
    ])


def moon_position(t_centuries: float) -> np.ndarray:
    """Geocentric equatorial Moon position (m) at TT Julian centuries from J2000.

    Accuracy ~0.5° in position, sufficient for perturbation modeling.
    """
    T = t_centuries

    # Fundamental arguments (degrees)
    L_prime = (218.3165 + 481267.8813 * T) % 360.0    # mean longitude
    D_r = math.radians((297.8502 + 445267.1115 * T) % 360.0)    # mean elongation
    M_r = math.radians((357.5291 + 35999.0503 * T) % 360.0)     # Sun mean anomaly
    Mp_r = math.radians((134.9634 + 477198.8676 * T) % 360.0)   # Moon mean anomaly
    F_r = math.radians((93.2721 + 483202.0175 * T) % 360.0)     # argument of latitude

    lam = L_prime + (
        6.289 * math.sin(Mp_r)
        - 1.274 * math.sin(2 * D_r - Mp_r)
        + 0.658 * math.sin(2 * D_r)
        - 0.214 * math.sin(2 * Mp_r)
        - 0.186 * math.sin(M_r)
        + 0.114 * math.sin(2 * F_r)
    )
    beta = (
        5.128 * math.sin(F_r)
        + 0.281 * math.sin(Mp_r + F_r)
        - 0.278 * math.sin(Mp_r - F_r)
        - 0.173 * math.sin(2 * D_r - F_r)
    )
    r_km = (
        385001.0
        - 20905.0 * math.cos(Mp_r)
        - 3699.0 * math.cos(2 * D_r - Mp_r)
        - 2956.0 * math.cos(2 * D_r)
        + 570.0 * math.cos(2 * Mp_r)
    )

    lam_r = math.radians(lam)
    beta_r = math.radians(beta)
    eps_r = math.radians(_OBLIQUITY_DEG)
    ecliptic = r_km * 1000.0 * np.array([
        math.cos(beta_r) * math.cos(lam_r),
        math.cos(beta_r) * math.sin(lam_r),
        math.sin(beta_r),
    ])
    # Ecliptic → equatorial
    return np.array([
        ecliptic[0],
        math.cos(eps_r) * ecliptic[1] - math.sin(eps_r) * ecliptic[2],
        math.sin(eps_r) * ecliptic[1] + math.cos(eps_r) * ecliptic[2],
    ])


class AnalyticalBody:
    """Celestial body with an analytical geocentric position series.

    Args:
        name: Body name.
        mu: Gravitational parameter (m³/s²).
        radius: Equatorial radius (m).
        inertial_frame: Frame the series is expressed in.
        series: T (Julian centuries TT) -> position (m).
    """

    def __init__(self, name, mu, radius, inertial_frame: Frame, series) -> None:
        self.name = name
        self.mu = mu
        self.radius = radius
        self.inertial_frame = inertial_frame
        self._series = series

    def _inertial_position(self, date: AbsoluteDate) -> np.ndarray:
        return self._series(date.to_julian_centuries())

    def get_pv(self, date: AbsoluteDate, frame: Frame) -> PVCoordinates:
        """Position (m) and velocity (m/s) of the body at date in frame."""
        h = _DIFFERENCE_STEP_S
        position = self._inertial_position(date)
        velocity = (
            self._inertial_position(date.shifted_by(h))
            - self._inertial_position(date.shifted_by(-h))
        ) / (2.0 * h)
        pv = PVCoordinates(position, velocity)
        if frame is self.inertial_frame:
            return pv
        return get_transform_to(self.inertial_frame, frame, date).transform_pv(pv)

    def get_position(self, date: AbsoluteDate, frame: Frame) -> np.ndarray:
        """Position (m) of the body at date in frame."""
        position = self._inertial_position(date)
        if frame is self.inertial_frame:
            return position
        return get_transform_to(self.inertial_frame, frame, date).transform_position(position)


class SunEphemeris(AnalyticalBody):
    """Sun, from the Meeus Ch. 25 series."""

    def __init__(self, inertial_frame: Frame) -> None:
        super().__init__(
            "Sun", OrbitalConstants.MU_SUN, OrbitalConstants.R_SUN,
            inertial_frame, sun_position,
        )


class MoonEphemeris(AnalyticalBody):
    """Moon, from the simplified Meeus Ch. 47 series."""

    def __init__(self, inertial_frame: Frame) -> None:
        super().__init__(
            "Moon", OrbitalConstants.MU_MOON, 1_737_400.0,
            inertial_frame, moon_position,
        )
