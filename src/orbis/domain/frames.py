# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Reference frame graph.

Frames form a tree. Each non-root frame holds a non-owning reference to
its parent plus a provider, a function of date returning the Transform
from the parent to the frame. The FrameTree owns the root inertial frame
and the registry of frames (the forward edges); it is created explicitly
by the caller and passed to whatever needs frames, so there is no
process-wide reference frame.

Transforms between arbitrary frames are computed on demand by walking
both parent chains to their lowest common ancestor. Provider results are
never cached here.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

import numpy as np

from orbis.domain.errors import FrameGraphError
from orbis.domain.orbital_mechanics import OrbitalConstants
from orbis.domain.time_systems import (
    AbsoluteDate,
    J2000_EPOCH,
    utc_to_tai_seconds,
)
from orbis.domain.transforms import Transform, rotation_z

_log = logging.getLogger(__name__)

TransformProvider = Callable[[AbsoluteDate], Transform]

_UTC_TABLE_START = AbsoluteDate.from_datetime(datetime(1972, 1, 1))

# Depth bound guarding traversal of hand-built, cyclic parent chains.
_MAX_DEPTH = 256


@dataclass(frozen=True, eq=False)
class Frame:
    """Node of the frame graph.

    Attributes:
        name: Unique name within its tree.
        parent: Parent frame, None only for a root.
        provider: date -> Transform from parent to this frame (None for root).
        pseudo_inertial: Whether Newton's laws hold without fictitious
            forces (required for numerical integration frames).
    """
    name: str
    parent: Optional["Frame"] = field(default=None, repr=False)
    provider: Optional[TransformProvider] = field(default=None, repr=False)
    pseudo_inertial: bool = False

    @property
    def is_root(self) -> bool:
        return self.parent is None and self.provider is None

    @property
    def is_pseudo_inertial(self) -> bool:
        return self.pseudo_inertial

    def ancestors(self) -> tuple["Frame", ...]:
        """Frames from self (included) up to the root (included).

        Raises:
            FrameGraphError: on a cycle or a frame detached from any root.
        """
        chain: list[Frame] = []
        seen: set[int] = set()
        frame: Optional[Frame] = self
        while frame is not None:
            if id(frame) in seen or len(chain) >= _MAX_DEPTH:
                raise FrameGraphError(f"cycle in parent chain of frame {self.name!r}")
            seen.add(id(frame))
            chain.append(frame)
            if frame.parent is None and frame.provider is not None:
                raise FrameGraphError(f"frame {frame.name!r} is detached from the root")
            frame = frame.parent
        return tuple(chain)

    @property
    def depth(self) -> int:
        return len(self.ancestors()) - 1

    def transform_from_parent(self, date: AbsoluteDate) -> Transform:
        if self.provider is None:
            return Transform.identity()
        return self.provider(date)

    def get_transform_to(self, target: "Frame", date: AbsoluteDate) -> Transform:
        """Transform from this frame to target at date."""
        return get_transform_to(self, target, date)

    def __str__(self) -> str:
        return self.name


def _chain_transform(chain: tuple[Frame, ...], date: AbsoluteDate) -> Transform:
    """Transform from chain[0] up to the parent of chain[-1]."""
    result = Transform.identity()
    for frame in chain:
        result = Transform.compose(result, frame.transform_from_parent(date).inverse())
    return result


def get_transform_to(source: Frame, target: Frame, date: AbsoluteDate) -> Transform:
    """Compose the Transform from source to target at date.

    Walks both parent chains to the lowest common ancestor, composes the
    chain from source up to the ancestor with the inverse of the chain
    from target up to the ancestor.

    Raises:
        FrameGraphError: if the frames do not share a root, or either
            chain is malformed.
    """
    if source is target:
        return Transform.identity()

    source_chain = source.ancestors()
    target_chain = target.ancestors()
    if source_chain[-1] is not target_chain[-1]:
        raise FrameGraphError(
            f"frames {source.name!r} and {target.name!r} belong to different trees"
        )

    target_ids = {id(f): i for i, f in enumerate(target_chain)}
    for i, frame in enumerate(source_chain):
        if id(frame) in target_ids:
            source_up = source_chain[:i]
            target_up = target_chain[:target_ids[id(frame)]]
            break

    return Transform.compose(
        _chain_transform(source_up, date),
        _chain_transform(target_up, date).inverse(),
    )


# --- Built-in providers ---

def gmst_rad(date: AbsoluteDate) -> float:
    """
    Greenwich Mean Sidereal Time for a given date.

    Uses the IAU formula based on Julian centuries from J2000.0:
        GMST(°) = 280.46061837 + 360.98564736629 * (JD - 2451545.0)
                  + 0.000387933 * T² - T³/38710000
    with UT1 approximated by UTC. Dates before 1972 use the 1972
    TAI-UTC offset.

    Returns:
        GMST in radians, normalized to [0, 2π).
    """
    if date < _UTC_TABLE_START:
        delta_at = 10.0
    else:
        delta_at = utc_to_tai_seconds(date.to_datetime())
    ut_days = (date.duration_from(J2000_EPOCH) - 32.184 - delta_at) / 86400.0
    t_centuries = ut_days / 36525.0

    gmst_deg = (
        280.46061837
        + 360.98564736629 * ut_days
        + 0.000387933 * t_centuries**2
        - t_centuries**3 / 38710000.0
    )
    return math.radians(gmst_deg % 360.0)


def earth_rotation_provider(
    rotation_rate: float = OrbitalConstants.EARTH_ROTATION_RATE,
) -> TransformProvider:
    """Provider for a body-fixed frame spinning about the parent Z axis."""
    spin = np.array([0.0, 0.0, rotation_rate])

    def provider(date: AbsoluteDate) -> Transform:
        return Transform.from_rotation(rotation_z(gmst_rad(date)), spin)

    return provider


def fixed_provider(transform: Transform) -> TransformProvider:
    """Provider returning the same Transform at every date."""
    return lambda date: transform


# --- Tree ---

class FrameTree:
    """Owner of a root inertial frame and the frames built on it.

    Each propagation context builds (or shares read-only) one tree; frames
    of different trees cannot be related.
    """

    def __init__(self, root_name: str = "GCRF") -> None:
        self._root = Frame(root_name, pseudo_inertial=True)
        self._frames: dict[str, Frame] = {root_name: self._root}
        self._children: dict[str, list[Frame]] = {root_name: []}

    @property
    def root(self) -> Frame:
        return self._root

    def add_frame(
        self,
        name: str,
        parent: Frame,
        provider: TransformProvider,
        pseudo_inertial: bool = False,
    ) -> Frame:
        """Register a new frame under parent.

        Raises:
            FrameGraphError: duplicate name or parent from another tree.
        """
        if name in self._frames:
            raise FrameGraphError(f"frame {name!r} already defined")
        if parent not in self:
            raise FrameGraphError(f"parent frame {parent.name!r} is not in this tree")
        frame = Frame(name, parent, provider, pseudo_inertial)
        self._frames[name] = frame
        self._children[name] = []
        self._children[parent.name].append(frame)
        _log.debug("Added frame %s under %s", name, parent.name)
        return frame

    def add_fixed_frame(
        self,
        name: str,
        parent: Frame,
        transform: Transform,
        pseudo_inertial: bool = False,
    ) -> Frame:
        """Register a frame with a constant offset from its parent."""
        return self.add_frame(name, parent, fixed_provider(transform), pseudo_inertial)

    def add_earth_rotating_frame(
        self,
        name: str = "ITRF",
        parent: Optional[Frame] = None,
        rotation_rate: float = OrbitalConstants.EARTH_ROTATION_RATE,
    ) -> Frame:
        """Register a body-fixed frame rotating with GMST."""
        return self.add_frame(
            name,
            self._root if parent is None else parent,
            earth_rotation_provider(rotation_rate),
        )

    def get_frame(self, name: str) -> Frame:
        try:
            return self._frames[name]
        except KeyError:
            raise FrameGraphError(f"unknown frame {name!r}") from None

    def children(self, frame: Frame) -> tuple[Frame, ...]:
        if frame not in self:
            raise FrameGraphError(f"frame {frame.name!r} is not in this tree")
        return tuple(self._children[frame.name])

    def get_transform(self, source: Frame, target: Frame, date: AbsoluteDate) -> Transform:
        """Transform between two frames of this tree."""
        for frame in (source, target):
            if frame not in self:
                raise FrameGraphError(f"frame {frame.name!r} is not in this tree")
        return get_transform_to(source, target, date)

    def __contains__(self, frame: object) -> bool:
        return isinstance(frame, Frame) and self._frames.get(frame.name) is frame

    def __iter__(self):
        return iter(self._frames.values())

    def __len__(self) -> int:
        return len(self._frames)
