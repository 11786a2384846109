# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Rigid transforms between reference frames at one instant.

A Transform maps coordinates expressed in a source frame to a target
frame:

    p' = R·(p + t)
    v' = R·(v + ṫ) - ω × p'

where t is the translation, ṫ its rate, R the rotation matrix and ω the
rotation rate of the target frame with respect to the source frame,
expressed in target axes. Composition and inversion carry the rate
terms through the kinematic identities of a moving, rotating frame.
"""
import math
from dataclasses import dataclass

import numpy as np


def rotation_x(angle: float) -> np.ndarray:
    """Frame rotation matrix about the X axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, s],
        [0.0, -s, c],
    ])


def rotation_z(angle: float) -> np.ndarray:
    """Frame rotation matrix about the Z axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, s, 0.0],
        [-s, c, 0.0],
        [0.0, 0.0, 1.0],
    ])


def _vector(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class PVCoordinates:
    """Position (m) and velocity (m/s) pair."""
    position: np.ndarray
    velocity: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _vector(self.position))
        object.__setattr__(self, "velocity", _vector(self.velocity))

    @property
    def momentum(self) -> np.ndarray:
        """Specific angular momentum r × v."""
        return np.cross(self.position, self.velocity)


@dataclass(frozen=True, eq=False)
class Transform:
    """Immutable snapshot of a frame-to-frame relationship.

    Attributes:
        translation: t (m), expressed in source axes.
        velocity: ṫ (m/s), expressed in source axes.
        rotation: 3x3 orthonormal matrix R, source axes to target axes.
        rotation_rate: ω (rad/s), expressed in target axes.
    """
    translation: np.ndarray
    velocity: np.ndarray
    rotation: np.ndarray
    rotation_rate: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "translation", _vector(self.translation))
        object.__setattr__(self, "velocity", _vector(self.velocity))
        object.__setattr__(self, "rotation", _vector(self.rotation))
        object.__setattr__(self, "rotation_rate", _vector(self.rotation_rate))

    @staticmethod
    def identity() -> "Transform":
        return Transform(np.zeros(3), np.zeros(3), np.eye(3), np.zeros(3))

    @staticmethod
    def from_translation(translation, velocity=(0.0, 0.0, 0.0)) -> "Transform":
        """Pure translation: p' = p + t."""
        return Transform(translation, velocity, np.eye(3), np.zeros(3))

    @staticmethod
    def from_rotation(rotation, rotation_rate=(0.0, 0.0, 0.0)) -> "Transform":
        """Pure rotation: p' = R·p."""
        return Transform(np.zeros(3), np.zeros(3), rotation, rotation_rate)

    @staticmethod
    def compose(first: "Transform", second: "Transform") -> "Transform":
        """Transform equivalent to applying first, then second."""
        r1_t = first.rotation.T
        return Transform(
            translation=first.translation + r1_t @ second.translation,
            velocity=first.velocity + r1_t @ (
                second.velocity + np.cross(first.rotation_rate, second.translation)
            ),
            rotation=second.rotation @ first.rotation,
            rotation_rate=second.rotation_rate + second.rotation @ first.rotation_rate,
        )

    def then(self, other: "Transform") -> "Transform":
        """Shorthand for Transform.compose(self, other)."""
        return Transform.compose(self, other)

    def inverse(self) -> "Transform":
        """Inverse transform, with rate terms re-derived kinematically.

        The inverse translation rate depends on the forward rotation rate
        as well as the forward translation rate:
            ṫ⁻¹ = -R·ṫ + ω × (R·t)
        """
        rotated_t = self.rotation @ self.translation
        return Transform(
            translation=-rotated_t,
            velocity=-(self.rotation @ self.velocity) + np.cross(self.rotation_rate, rotated_t),
            rotation=self.rotation.T,
            rotation_rate=-(self.rotation.T @ self.rotation_rate),
        )

    def transform_position(self, position) -> np.ndarray:
        return self.rotation @ (np.asarray(position, dtype=float) + self.translation)

    def transform_vector(self, vector) -> np.ndarray:
        """Rotate a free vector (no translation applied)."""
        return self.rotation @ np.asarray(vector, dtype=float)

    def transform_pv(self, pv: PVCoordinates) -> PVCoordinates:
        position = self.transform_position(pv.position)
        velocity = (
            self.rotation @ (pv.velocity + self.velocity)
            - np.cross(self.rotation_rate, position)
        )
        return PVCoordinates(position, velocity)

    def is_close(self, other: "Transform", atol: float = 1e-9) -> bool:
        """True when every component matches other within atol."""
        return bool(
            np.allclose(self.translation, other.translation, atol=atol, rtol=0.0)
            and np.allclose(self.velocity, other.velocity, atol=atol, rtol=0.0)
            and np.allclose(self.rotation, other.rotation, atol=atol, rtol=0.0)
            and np.allclose(self.rotation_rate, other.rotation_rate, atol=atol, rtol=0.0)
        )
