# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Eclipse geometry and shadow switching functions.

Apparent-disk model: the Sun and the occulting body are seen from the
spacecraft as disks of half-angles α_sun = asin(R_sun/d_sun) and
α_body = asin(R_body/d_body), separated by angle θ.

* umbra when θ <= α_body - α_sun
* penumbra when θ < α_body + α_sun
* eclipse ratio (lit fraction of the solar disk) from the circle overlap
  area, continuous in [0, 1]

The occulting body sits at the origin of the frame positions are given in.
"""
import math
from enum import Enum

import numpy as np

from orbis.domain.orbital_mechanics import OrbitalConstants


class EclipseType(Enum):
    """Eclipse classification."""
    NONE = "none"
    PENUMBRA = "penumbra"
    UMBRA = "umbra"


def _apparent_geometry(
    position,
    sun_position,
    occulting_radius: float,
    sun_radius: float,
) -> tuple[float, float, float]:
    """Return (separation θ, α_sun, α_body) seen from position."""
    sat = np.asarray(position, dtype=float)
    to_sun = np.asarray(sun_position, dtype=float) - sat
    to_body = -sat
    d_sun = float(np.linalg.norm(to_sun))
    d_body = float(np.linalg.norm(to_body))
    cos_sep = float(np.dot(to_sun, to_body)) / (d_sun * d_body)
    separation = math.acos(max(-1.0, min(1.0, cos_sep)))
    alpha_sun = math.asin(min(1.0, sun_radius / d_sun))
    alpha_body = math.asin(min(1.0, occulting_radius / d_body))
    return separation, alpha_sun, alpha_body


def eclipse_ratio(
    position,
    sun_position,
    occulting_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
    sun_radius: float = OrbitalConstants.R_SUN,
) -> float:
    """Fraction of the solar disk visible from position, in [0, 1]."""
    sep, r_sun, r_body = _apparent_geometry(position, sun_position, occulting_radius, sun_radius)
    if sep >= r_sun + r_body:
        return 1.0
    if sep <= r_body - r_sun:
        return 0.0
    if sep <= r_sun - r_body:
        # annular: the body disk lies inside the solar disk
        return 1.0 - (r_body * r_body) / (r_sun * r_sun)

    # Partial overlap of two circles
    cos_sun = (sep * sep + r_sun * r_sun - r_body * r_body) / (2.0 * sep * r_sun)
    cos_body = (sep * sep + r_body * r_body - r_sun * r_sun) / (2.0 * sep * r_body)
    kite = (
        (-sep + r_sun + r_body) * (sep + r_sun - r_body)
        * (sep - r_sun + r_body) * (sep + r_sun + r_body)
    )
    overlap = (
        r_sun * r_sun * math.acos(max(-1.0, min(1.0, cos_sun)))
        + r_body * r_body * math.acos(max(-1.0, min(1.0, cos_body)))
        - 0.5 * math.sqrt(max(0.0, kite))
    )
    return max(0.0, min(1.0, 1.0 - overlap / (math.pi * r_sun * r_sun)))


def eclipse_type(
    position,
    sun_position,
    occulting_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
    sun_radius: float = OrbitalConstants.R_SUN,
) -> EclipseType:
    """Classify position as lit, in penumbra or in umbra."""
    sep, r_sun, r_body = _apparent_geometry(position, sun_position, occulting_radius, sun_radius)
    if sep <= r_body - r_sun:
        return EclipseType.UMBRA
    if sep < r_body + r_sun:
        return EclipseType.PENUMBRA
    return EclipseType.NONE


class _ShadowSwitch:
    """Base for shadow switching functions evaluated on a SpacecraftState."""

    def __init__(
        self,
        sun,
        occulting_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
    ) -> None:
        self.sun = sun
        self.occulting_radius = occulting_radius

    def _geometry(self, state) -> tuple[float, float, float]:
        sun_position = self.sun.get_position(state.date, state.frame)
        return _apparent_geometry(
            state.position, sun_position, self.occulting_radius, self.sun.radius,
        )


class UmbraSwitch(_ShadowSwitch):
    """g = θ - α_body + α_sun: negative inside the umbra."""

    def g(self, state) -> float:
        sep, r_sun, r_body = self._geometry(state)
        return sep - r_body + r_sun


class PenumbraSwitch(_ShadowSwitch):
    """g = θ - α_body - α_sun: negative inside penumbra or umbra."""

    def g(self, state) -> float:
        sep, r_sun, r_body = self._geometry(state)
        return sep - r_body - r_sun
