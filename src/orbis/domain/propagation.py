# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Propagator state machine.

IDLE -> PROPAGATING -> (IDLE | FAILED). A failed propagation re-raises
its error and leaves the initial state untouched, so the propagator can
be called again with valid input.
"""
import logging
import math
from abc import ABC, abstractmethod
from enum import Enum

from orbis.domain.errors import ConfigurationError
from orbis.domain.spacecraft_state import SpacecraftState
from orbis.domain.time_systems import AbsoluteDate

_log = logging.getLogger(__name__)


class PropagatorStatus(Enum):
    IDLE = "idle"
    PROPAGATING = "propagating"
    FAILED = "failed"


class Propagator(ABC):
    """Common lifecycle of analytical, numerical and semi-analytical propagators."""

    def __init__(self, initial_state: SpacecraftState) -> None:
        self._initial_state = initial_state
        self._status = PropagatorStatus.IDLE

    @property
    def initial_state(self) -> SpacecraftState:
        return self._initial_state

    @property
    def status(self) -> PropagatorStatus:
        return self._status

    def reset_initial_state(self, state: SpacecraftState) -> None:
        """Replace the reference state used by subsequent propagations."""
        self._initial_state = state
        self._status = PropagatorStatus.IDLE

    def propagate(self, target: AbsoluteDate) -> SpacecraftState:
        """State at the target date.

        Raises:
            PropagationError: a precondition (date, frame, orbital regime)
                does not hold.
            ConvergenceError: an iterative solve ran out of iterations.
        """
        return self._guarded(self._propagate, target)

    def _guarded(self, operation, target: AbsoluteDate) -> SpacecraftState:
        """Run operation(target) through the IDLE -> PROPAGATING -> IDLE|FAILED cycle."""
        self._status = PropagatorStatus.PROPAGATING
        _log.debug(
            "%s: propagating from %s to %s",
            type(self).__name__, self._initial_state.date, target,
        )
        try:
            state = operation(target)
        except Exception:
            self._status = PropagatorStatus.FAILED
            raise
        self._status = PropagatorStatus.IDLE
        return state

    def sample(
        self,
        start: AbsoluteDate,
        end: AbsoluteDate,
        step: float,
    ) -> list[SpacecraftState]:
        """States from start to end (inclusive) every step seconds."""
        if step <= 0.0:
            raise ConfigurationError(f"sampling step must be positive, got {step}")
        span = end.duration_from(start)
        count = int(math.floor(span / step + 1e-9)) + 1 if span >= 0.0 else 0
        return [self.propagate(start.shifted_by(k * step)) for k in range(count)]

    @abstractmethod
    def _propagate(self, target: AbsoluteDate) -> SpacecraftState:
        ...
