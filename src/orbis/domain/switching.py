# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Switching functions and root location.

A switching function is a scalar g(state) whose sign change marks a
discontinuity in a force model. Force models stay stateless: the
propagator records the sign of each registered function at the start of
a regime, detects sign changes between integration points, locates the
crossing by bisection and hands the frozen signs back to the model. A
None sign asks the model to evaluate that function from the state.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from orbis.domain.errors import ConfigurationError, ConvergenceError
from orbis.domain.time_systems import AbsoluteDate

_log = logging.getLogger(__name__)


@runtime_checkable
class SwitchingFunction(Protocol):
    """Structural typing port for discontinuity indicators."""

    def g(self, state) -> float:
        """Signed distance to the discontinuity for a SpacecraftState."""
        ...


@dataclass(frozen=True)
class SwitchingConfig:
    """Root location settings.

    Attributes:
        threshold_s: Width of the final bracket (seconds).
        max_iterations: Bisection iterations before ConvergenceError.
    """
    threshold_s: float = 1e-6
    max_iterations: int = 100


@dataclass(frozen=True)
class SwitchingEvent:
    """Located sign change of a switching function."""
    date: AbsoluteDate
    function: SwitchingFunction
    increasing: bool


class DateSwitch:
    """g = date - trigger date (seconds): changes sign at the trigger."""

    date_only = True

    def __init__(self, trigger: AbsoluteDate) -> None:
        self.trigger = trigger

    def g(self, state) -> float:
        return state.date.duration_from(self.trigger)

    def __repr__(self) -> str:
        return f"DateSwitch({self.trigger})"


def is_date_only(function: SwitchingFunction) -> bool:
    """True when g depends on the date alone, so its sign holds over a whole
    revolution at fixed date. Functions without a date_only flag count as
    geometric.
    """
    return bool(getattr(function, "date_only", False))


def initial_sign(value: float) -> bool:
    """Regime sign of a switching function value (zero counts as positive)."""
    return value >= 0.0


def locate_root(
    f: Callable[[float], float],
    t_a: float,
    t_b: float,
    config: SwitchingConfig = SwitchingConfig(),
) -> float:
    """Find root of f(t) between t_a and t_b via bisection.

    t_a and t_b may be given in either order (backward integration).
    Signs follow initial_sign(), so a zero value belongs to the positive
    side; initial_sign(f(t_a)) and initial_sign(f(t_b)) must differ.

    Returns:
        The end of the final bracket on the t_b side: within
        config.threshold_s of the root, where f already has the sign of
        f(t_b). Restarting from it never re-detects the same crossing.

    Raises:
        ConfigurationError: if the bracket holds no sign change.
        ConvergenceError: if the bracket does not shrink below the
            threshold within config.max_iterations.
    """
    sign_a = initial_sign(f(t_a))
    if initial_sign(f(t_b)) == sign_a:
        raise ConfigurationError(f"no sign change of switching function in [{t_a}, {t_b}]")
    for iteration in range(config.max_iterations):
        if abs(t_b - t_a) <= config.threshold_s:
            _log.debug("Root located at t=%.9f after %d iterations", t_b, iteration)
            return t_b
        t_mid = (t_a + t_b) / 2.0
        if initial_sign(f(t_mid)) == sign_a:
            t_a = t_mid
        else:
            t_b = t_mid
    if abs(t_b - t_a) <= config.threshold_s:
        return t_b
    raise ConvergenceError(
        f"switching function root not bracketed within {config.threshold_s} s",
        config.max_iterations,
    )
