# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Spacecraft state: orbit plus the auxiliary attitude and mass needed by
force models.
"""
from dataclasses import dataclass, field

import numpy as np

from orbis.domain.errors import ConfigurationError
from orbis.domain.frames import Frame
from orbis.domain.orbits import OrbitalState
from orbis.domain.time_systems import AbsoluteDate
from orbis.domain.transforms import PVCoordinates


@dataclass(frozen=True, eq=False)
class Attitude:
    """Orientation of the spacecraft body axes.

    Attributes:
        rotation: 3x3 matrix from orbit-frame axes to body axes.
        spin: Body angular rate (rad/s), in body axes.
    """
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    spin: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @staticmethod
    def identity() -> "Attitude":
        return Attitude()


_DEFAULT_MASS_KG = 1000.0


@dataclass(frozen=True, eq=False)
class SpacecraftState:
    """Orbit, attitude and mass (kg) at one date."""
    orbit: OrbitalState
    attitude: Attitude = field(default_factory=Attitude.identity)
    mass: float = _DEFAULT_MASS_KG

    def __post_init__(self) -> None:
        if not self.mass > 0.0:
            raise ConfigurationError(f"mass must be positive, got {self.mass}")

    @property
    def date(self) -> AbsoluteDate:
        return self.orbit.date

    @property
    def frame(self) -> Frame:
        return self.orbit.frame

    @property
    def mu(self) -> float:
        return self.orbit.mu

    @property
    def pv(self) -> PVCoordinates:
        return self.orbit.pv

    @property
    def position(self) -> np.ndarray:
        return self.orbit.position

    @property
    def velocity(self) -> np.ndarray:
        return self.orbit.velocity

    def with_orbit(self, orbit: OrbitalState) -> "SpacecraftState":
        return SpacecraftState(orbit, self.attitude, self.mass)

    def with_mass(self, mass: float) -> "SpacecraftState":
        return SpacecraftState(self.orbit, self.attitude, mass)

    def shifted_by(self, dt: float) -> "SpacecraftState":
        """Keplerian shift of the orbit; attitude and mass unchanged."""
        return SpacecraftState(self.orbit.shifted_by(dt), self.attitude, self.mass)
