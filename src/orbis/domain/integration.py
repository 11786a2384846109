# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""ODE integrators with discontinuity handling.

* DormandPrinceIntegrator: embedded Runge-Kutta 5(4) pair with local
  error estimation, step-size controller, FSAL optimization and cubic
  Hermite dense output.
* ClassicalRungeKuttaIntegrator: fixed-step 4th-order Runge-Kutta.

Event detectors are checked on every accepted step. When a detector's
sign changes, the crossing is located by bisection on the dense output,
the step is redone exactly up to the crossing, the detector is notified
and integration restarts there with a fresh derivative (no FSAL reuse
across a discontinuity).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Protocol, Sequence, runtime_checkable

import numpy as np

from orbis.domain.errors import ConfigurationError, ConvergenceError
from orbis.domain.switching import SwitchingConfig, initial_sign, locate_root

_log = logging.getLogger(__name__)

DerivativeFunction = Callable[[float, np.ndarray], np.ndarray]


# --- Dormand-Prince Butcher tableau (7 stages, FSAL) ---

DORMAND_PRINCE_C: tuple[float, ...] = (
    0.0,
    1.0 / 5.0,
    3.0 / 10.0,
    4.0 / 5.0,
    8.0 / 9.0,
    1.0,
    1.0,
)

DORMAND_PRINCE_A: tuple[tuple[float, ...], ...] = (
    (),
    (1.0 / 5.0,),
    (3.0 / 40.0, 9.0 / 40.0),
    (44.0 / 45.0, -56.0 / 15.0, 32.0 / 9.0),
    (19372.0 / 6561.0, -25360.0 / 2187.0, 64448.0 / 6561.0, -212.0 / 729.0),
    (9017.0 / 3168.0, -355.0 / 33.0, 46732.0 / 5247.0, 49.0 / 176.0, -5103.0 / 18656.0),
    (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0),
)

# 5th-order solution weights (same as last row of A for FSAL)
DORMAND_PRINCE_B5: tuple[float, ...] = (
    35.0 / 384.0,
    0.0,
    500.0 / 1113.0,
    125.0 / 192.0,
    -2187.0 / 6784.0,
    11.0 / 84.0,
    0.0,
)

# Embedded 4th-order weights (for error estimation)
DORMAND_PRINCE_B4: tuple[float, ...] = (
    5179.0 / 57600.0,
    0.0,
    7571.0 / 16695.0,
    393.0 / 640.0,
    -92097.0 / 339200.0,
    187.0 / 2100.0,
    1.0 / 40.0,
)

# Error weights: e_i = b5_i - b4_i (precomputed)
_DORMAND_PRINCE_E = np.array([
    b5 - b4 for b5, b4 in zip(DORMAND_PRINCE_B5, DORMAND_PRINCE_B4)
])


# --- Types ---

@dataclass(frozen=True)
class AdaptiveStepConfig:
    """Configuration for adaptive step-size integration."""
    rtol: float = 1e-10
    atol: float = 1e-12
    h_init: float = 60.0
    h_min: float = 0.1
    h_max: float = 600.0
    safety_factor: float = 0.9
    max_steps: int = 1_000_000


@runtime_checkable
class EventDetector(Protocol):
    """Scalar event function of integration time and state."""

    def g(self, t: float, y: np.ndarray) -> float: ...

    def event_occurred(self, t: float, y: np.ndarray, increasing: bool) -> None: ...


@dataclass(frozen=True)
class DetectedEvent:
    """Event located during integration."""
    t: float
    detector: EventDetector
    increasing: bool


@dataclass(frozen=True, eq=False)
class IntegrationResult:
    """Final time and state plus run statistics."""
    t: float
    y: np.ndarray
    evaluations: int
    accepted_steps: int
    rejected_steps: int
    events: tuple[DetectedEvent, ...] = field(default_factory=tuple)


@runtime_checkable
class Integrator(Protocol):
    """Structural typing port for ODE integrators."""

    def integrate(
        self,
        deriv_fn: DerivativeFunction,
        t0: float,
        y0: np.ndarray,
        t_end: float,
        detectors: Sequence[EventDetector] = (),
    ) -> IntegrationResult: ...


# --- Dormand-Prince core computational kernel ---

def _dp_full_step(
    t: float,
    y: np.ndarray,
    h: float,
    deriv_fn: DerivativeFunction,
    k1: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute all 7 DP stages and the 5th-order solution.

    Returns:
        (k_stages, y_new, k7) where k_stages has shape (7, n) and k7 is
        the FSAL derivative at y_new.
    """
    stages = [k1]
    for i in range(1, 6):
        increment = sum(a * k for a, k in zip(DORMAND_PRINCE_A[i], stages))
        stages.append(np.asarray(deriv_fn(t + DORMAND_PRINCE_C[i] * h, y + h * increment)))

    y_new = y + h * sum(b * k for b, k in zip(DORMAND_PRINCE_B5, stages) if b != 0.0)

    # Stage 7 (FSAL: evaluate derivative at the 5th-order solution)
    k7 = np.asarray(deriv_fn(t + h, y_new))
    stages.append(k7)
    return np.array(stages), y_new, k7


def _error_norm(
    y: np.ndarray,
    y_new: np.ndarray,
    k_stages: np.ndarray,
    h: float,
    atol: float,
    rtol: float,
) -> float:
    """Compute weighted RMS error norm for step-size control.

    err = sqrt(1/n * sum_j ((e_j / sc_j)^2))
    where e_j = h * sum_i(e_i * k_i_j) and sc_j = atol + rtol * max(|y_j|, |y_new_j|).
    """
    e_vec = h * (_DORMAND_PRINCE_E @ k_stages)
    sc_vec = atol + rtol * np.maximum(np.abs(y), np.abs(y_new))
    return float(np.sqrt(np.mean((e_vec / sc_vec) ** 2)))


def _new_step_size(
    h_try: float, err: float, safety: float, h_min: float, h_max: float,
) -> float:
    """Compute new step size from error estimate."""
    if err < 1e-30:
        return h_max
    h_new = h_try * min(5.0, max(0.2, safety * err ** (-0.2)))
    return max(h_min, min(h_new, h_max))


def _hermite_interpolate(
    t0: float,
    y0: np.ndarray,
    f0: np.ndarray,
    t1: float,
    y1: np.ndarray,
    f1: np.ndarray,
    t_eval: float,
) -> np.ndarray:
    """Cubic Hermite interpolation between two integration points."""
    h = t1 - t0
    if abs(h) < 1e-30:
        return y0
    theta = (t_eval - t0) / h
    theta2 = theta * theta
    theta3 = theta2 * theta

    h00 = 2.0 * theta3 - 3.0 * theta2 + 1.0
    h10 = theta3 - 2.0 * theta2 + theta
    h01 = -2.0 * theta3 + 3.0 * theta2
    h11 = theta3 - theta2
    return h00 * y0 + h10 * h * f0 + h01 * y1 + h11 * h * f1


# --- Shared driver ---

class _EventDrivenIntegrator(ABC):
    """Step loop with event location; subclasses supply _attempt()."""

    switching_config: SwitchingConfig
    min_step: float = 0.0
    max_steps: int = 1_000_000

    @abstractmethod
    def _first_step(self, span: float) -> float: ...

    @abstractmethod
    def _attempt(self, t, y, f, h, deriv_fn):
        """Return (y_new, f_new, error_norm, evaluations)."""

    def _next_step(self, h_try: float, err: float) -> float:
        return h_try

    def _locate(self, detectors, signs, t, y, f, t_new, y_new, f_new):
        """Earliest detector crossing inside the step, or None."""
        earliest = None
        for index, detector in enumerate(detectors):
            if initial_sign(detector.g(t_new, y_new)) == signs[index]:
                continue

            def g_dense(s: float, detector=detector) -> float:
                return detector.g(s, _hermite_interpolate(t, y, f, t_new, y_new, f_new, s))

            # the dense output agrees with the step end points
            root = locate_root(g_dense, t, t_new, self.switching_config)
            if earliest is None or abs(root - t) < abs(earliest[0] - t):
                earliest = (root, index)
        return earliest

    def integrate(
        self,
        deriv_fn: DerivativeFunction,
        t0: float,
        y0: np.ndarray,
        t_end: float,
        detectors: Sequence[EventDetector] = (),
    ) -> IntegrationResult:
        """Integrate dy/dt = deriv_fn(t, y) from t0 to t_end (either direction).

        Raises:
            ConvergenceError: step size fell below its minimum or the
                step budget was exhausted.
        """
        t = float(t0)
        y = np.array(y0, dtype=float)
        direction = 1.0 if t_end >= t0 else -1.0
        f = np.asarray(deriv_fn(t, y))
        evaluations = 1
        accepted = 0
        rejected = 0
        events: list[DetectedEvent] = []
        signs = [initial_sign(d.g(t, y)) for d in detectors]
        h = self._first_step(abs(t_end - t0))

        while direction * (t_end - t) > 1e-12:
            if accepted + rejected >= self.max_steps:
                raise ConvergenceError("integration step budget exhausted", accepted + rejected)
            h_try = min(h, abs(t_end - t))
            y_new, f_new, err, used = self._attempt(t, y, f, direction * h_try, deriv_fn)
            evaluations += used

            if not err <= 1.0:
                rejected += 1
                if h_try <= self.min_step:
                    raise ConvergenceError(
                        f"step size underflow at t={t:.6f} s (h={h_try:.3e} s)", accepted + rejected,
                    )
                h = min(self._next_step(h_try, err), h_try)
                continue

            accepted += 1
            t_new = t + direction * h_try
            hit = self._locate(detectors, signs, t, y, f, t_new, y_new, f_new) if detectors else None
            if hit is None:
                t, y, f = t_new, y_new, f_new
                h = self._next_step(h_try, err)
                continue

            # Truncate the step at the crossing and restart in the new regime
            t_event, index = hit
            y_event, _, _, used = self._attempt(t, y, f, t_event - t, deriv_fn)
            evaluations += used
            increasing = not signs[index]
            signs[index] = increasing
            t, y = t_event, y_event
            detector = detectors[index]
            _log.debug("Event %s at t=%.6f s (increasing=%s)", type(detector).__name__, t, increasing)
            detector.event_occurred(t, y, increasing)
            events.append(DetectedEvent(t, detector, increasing))
            f = np.asarray(deriv_fn(t, y))
            evaluations += 1

        return IntegrationResult(
            t=t,
            y=y,
            evaluations=evaluations,
            accepted_steps=accepted,
            rejected_steps=rejected,
            events=tuple(events),
        )


class DormandPrinceIntegrator(_EventDrivenIntegrator):
    """Adaptive Dormand-Prince RK5(4) integrator."""

    def __init__(
        self,
        config: AdaptiveStepConfig | None = None,
        switching_config: SwitchingConfig | None = None,
    ) -> None:
        self.config = config if config is not None else AdaptiveStepConfig()
        self.switching_config = switching_config if switching_config is not None else SwitchingConfig()
        self.max_steps = self.config.max_steps
        self.min_step = self.config.h_min

    def _first_step(self, span: float) -> float:
        return max(self.config.h_min, min(self.config.h_init, self.config.h_max))

    def _attempt(self, t, y, f, h, deriv_fn):
        k_stages, y_new, k7 = _dp_full_step(t, y, h, deriv_fn, f)
        err = _error_norm(y, y_new, k_stages, h, self.config.atol, self.config.rtol)
        return y_new, k7, err, 6

    def _next_step(self, h_try: float, err: float) -> float:
        c = self.config
        return _new_step_size(h_try, err, c.safety_factor, c.h_min, c.h_max)


class ClassicalRungeKuttaIntegrator(_EventDrivenIntegrator):
    """Fixed-step 4th-order Runge-Kutta integrator."""

    def __init__(self, step: float = 60.0, switching_config: SwitchingConfig | None = None) -> None:
        if step <= 0.0:
            raise ConfigurationError(f"step must be positive, got {step}")
        self.step = step
        self.switching_config = switching_config if switching_config is not None else SwitchingConfig()

    def _first_step(self, span: float) -> float:
        return self.step

    def _attempt(self, t, y, f, h, deriv_fn):
        k1 = f
        k2 = np.asarray(deriv_fn(t + 0.5 * h, y + 0.5 * h * k1))
        k3 = np.asarray(deriv_fn(t + 0.5 * h, y + 0.5 * h * k2))
        k4 = np.asarray(deriv_fn(t + h, y + h * k3))
        y_new = y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
        f_new = np.asarray(deriv_fn(t + h, y_new))
        return y_new, f_new, 0.0, 4
