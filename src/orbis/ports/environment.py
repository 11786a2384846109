# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for force-model inputs: activity data, central-body shape
and celestial-body ephemerides.

Queries are synchronous and pure functions of date. Windowed providers
raise DateOutOfRangeError outside [min_date, max_date].
"""
from typing import Protocol, runtime_checkable

import numpy as np

from orbis.domain.body_shape import GeodeticPoint
from orbis.domain.frames import Frame
from orbis.domain.time_systems import AbsoluteDate
from orbis.domain.transforms import PVCoordinates


@runtime_checkable
class IndexProvider(Protocol):
    """Port for a single scalar index with a validity window."""

    @property
    def min_date(self) -> AbsoluteDate: ...

    @property
    def max_date(self) -> AbsoluteDate: ...

    def value_at(self, date: AbsoluteDate) -> float:
        """Index value at date (inclusive window)."""
        ...


@runtime_checkable
class SolarActivityProvider(Protocol):
    """Port for solar flux and geomagnetic activity data."""

    min_date: AbsoluteDate
    max_date: AbsoluteDate

    def f107(self, date: AbsoluteDate) -> float:
        """Daily 10.7 cm solar flux (sfu)."""
        ...

    def f107_average(self, date: AbsoluteDate) -> float:
        """81-day centered average of F10.7 (sfu)."""
        ...

    def ap(self, date: AbsoluteDate) -> float:
        """Daily geomagnetic Ap index."""
        ...


@runtime_checkable
class BodyShape(Protocol):
    """Port for central-body geodetic conversions."""

    body_frame: Frame

    def transform_to_geodetic(
        self, position, frame: Frame, date: AbsoluteDate,
    ) -> GeodeticPoint:
        """Geodetic coordinates of a position given in any frame."""
        ...

    def geodetic_to_cartesian(self, point: GeodeticPoint) -> np.ndarray:
        """Body-frame Cartesian position of a geodetic point."""
        ...


@runtime_checkable
class CelestialBodyEphemeris(Protocol):
    """Port for the position and velocity of a celestial body."""

    def get_pv(self, date: AbsoluteDate, frame: Frame) -> PVCoordinates:
        ...

    def get_position(self, date: AbsoluteDate, frame: Frame) -> np.ndarray:
        ...
