# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Semi-analytical (mean elements) propagation.

Two time scales:

* the integrator only ever sees the mean equinoctial elements
  [a, ex, ey, hx, hy, λM] and the mass, driven by each force model's
  mean_element_rate() plus the Keplerian mean motion. The rates are
  smooth, so large steps are acceptable;
* the osculating state is rebuilt once per propagate() call by adding
  each model's short_periodic_variations() at the final mean state.

Date-driven switching functions (maneuver start and end) are watched on
the mean trajectory: their signs stay frozen between located crossings,
so steps never straddle a force discontinuity. Geometric functions such
as shadow boundaries change sign twice per revolution; the averaging
evaluates them at each node instead.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from orbis.domain.errors import ConfigurationError, ConvergenceError, Precondition, PropagationError
from orbis.domain.forces import ForceModel, MassFlow
from orbis.domain.integration import AdaptiveStepConfig, DormandPrinceIntegrator, Integrator
from orbis.domain.orbital_mechanics import normalize_angle
from orbis.domain.orbits import EquinoctialParameters, OrbitalState, PositionAngle
from orbis.domain.propagation import Propagator
from orbis.domain.spacecraft_state import SpacecraftState
from orbis.domain.switching import SwitchingEvent, SwitchingFunction, initial_sign, is_date_only
from orbis.domain.time_systems import AbsoluteDate

_log = logging.getLogger(__name__)

# Mean-element rates are smooth: the default integrator takes long steps.
_MEAN_STEP_CONFIG = AdaptiveStepConfig(h_init=3600.0, h_min=1.0, h_max=86400.0)


@dataclass(frozen=True)
class SemiAnalyticalConfig:
    """Osculating to mean conversion settings.

    Attributes:
        mean_state_tolerance: Convergence threshold of the fixed-point
            iteration (relative on a, absolute on the other elements).
        max_iterations: Iterations before ConvergenceError.
    """
    mean_state_tolerance: float = 1e-12
    max_iterations: int = 50


class _MeanSwitchDetector:
    """Truncates mean-element steps at switching-function sign changes."""

    def __init__(self, propagator: "SemiAnalyticalPropagator", model_index: int, function_index: int,
                 function: SwitchingFunction) -> None:
        self.propagator = propagator
        self.model_index = model_index
        self.function_index = function_index
        self.function = function

    def g(self, t: float, y: np.ndarray) -> float:
        return self.function.g(self.propagator._state(t, y))

    def event_occurred(self, t: float, y: np.ndarray, increasing: bool) -> None:
        self.propagator._switch(self, t, increasing)


class SemiAnalyticalPropagator(Propagator):
    """Mean-element propagator with on-demand short-periodic reconstruction.

    Args:
        initial_state: Osculating initial state, orbit in a pseudo-inertial frame.
        force_models: Perturbations, evaluated in the given order.
        integrator: Integrator for the mean elements.
        config: Mean state conversion settings.

    Raises:
        ConvergenceError: the initial mean state did not converge.
    """

    def __init__(
        self,
        initial_state: SpacecraftState,
        force_models: Sequence[ForceModel] = (),
        integrator: Optional[Integrator] = None,
        config: Optional[SemiAnalyticalConfig] = None,
    ) -> None:
        for model in force_models:
            if not isinstance(model, ForceModel):
                raise ConfigurationError(f"{type(model).__name__} is not a force model")
        super().__init__(initial_state)
        self.force_models = tuple(force_models)
        self.integrator = integrator if integrator is not None else DormandPrinceIntegrator(_MEAN_STEP_CONFIG)
        self.config = config if config is not None else SemiAnalyticalConfig()
        self._mean_state = self.osculating_to_mean(initial_state)
        self._signs: list[list[Optional[bool]]] = []
        self._events: list[SwitchingEvent] = []
        self._last_events: tuple[SwitchingEvent, ...] = ()

    @property
    def mean_state(self) -> SpacecraftState:
        """Mean counterpart of the initial state."""
        return self._mean_state

    @property
    def last_events(self) -> tuple[SwitchingEvent, ...]:
        """Date-driven switching events crossed by the latest successful integration."""
        return self._last_events

    def reset_initial_state(self, state: SpacecraftState) -> None:
        mean_state = self.osculating_to_mean(state)
        super().reset_initial_state(state)
        self._mean_state = mean_state

    # -- Mean / osculating -------------------------------------------------- #

    def short_periodic_variations(self, mean_state: SpacecraftState) -> np.ndarray:
        """Summed short-periodic corrections of [a, ex, ey, hx, hy, λM]."""
        total = np.zeros(6)
        for model in self.force_models:
            total = total + model.short_periodic_variations(mean_state)
        return total

    def mean_to_osculating(self, mean_state: SpacecraftState) -> SpacecraftState:
        elements = mean_state.orbit.equinoctial.to_array(PositionAngle.MEAN)
        elements = elements + self.short_periodic_variations(mean_state)
        return self._with_elements(mean_state, elements)

    def osculating_to_mean(self, state: SpacecraftState) -> SpacecraftState:
        """Mean state whose short-periodic reconstruction is the given state.

        Fixed-point iteration mean = osculating - η(mean).
        """
        osculating = state.orbit.equinoctial.to_array(PositionAngle.MEAN)
        mean = osculating.copy()
        tolerance = self.config.mean_state_tolerance
        for iteration in range(1, self.config.max_iterations + 1):
            mean_state = self._with_elements(state, mean)
            updated = osculating - self.short_periodic_variations(mean_state)
            delta = updated - mean
            delta[5] = normalize_angle(delta[5], 0.0)
            mean = mean + delta
            error = max(abs(delta[0]) / abs(mean[0]), float(np.max(np.abs(delta[1:]))))
            if error <= tolerance:
                _log.debug("Mean state converged after %d iterations", iteration)
                return self._with_elements(state, mean)
        raise ConvergenceError("osculating to mean conversion did not converge", self.config.max_iterations)

    @staticmethod
    def _with_elements(state: SpacecraftState, elements: np.ndarray) -> SpacecraftState:
        orbit = state.orbit
        parameters = EquinoctialParameters.from_array(elements, PositionAngle.MEAN)
        return state.with_orbit(OrbitalState(orbit.date, orbit.frame, orbit.mu, parameters))

    # -- Mean equations ----------------------------------------------------- #

    def _state(self, t: float, y: np.ndarray) -> SpacecraftState:
        mean = self._mean_state
        orbit = OrbitalState(
            mean.date.shifted_by(t),
            mean.frame,
            mean.mu,
            EquinoctialParameters.from_array(y[0:6], PositionAngle.MEAN),
        )
        return SpacecraftState(orbit, mean.attitude, float(y[6]))

    def _derivatives(self, t: float, y: np.ndarray) -> np.ndarray:
        state = self._state(t, y)
        rates = np.zeros(6)
        mass_rate = 0.0
        for model, signs in zip(self.force_models, self._signs):
            regime = tuple(signs)
            rates = rates + model.mean_element_rate(state, regime)
            if isinstance(model, MassFlow):
                mass_rate += model.mass_rate(state, regime)
        rates[5] += state.orbit.keplerian_mean_motion
        return np.append(rates, mass_rate)

    def _switch(self, detector: _MeanSwitchDetector, t: float, increasing: bool) -> None:
        self._signs[detector.model_index][detector.function_index] = increasing
        event = SwitchingEvent(self._mean_state.date.shifted_by(t), detector.function, increasing)
        self._events.append(event)
        _log.debug("Mean trajectory crossed %r at %s (increasing=%s)", detector.function, event.date, increasing)

    def _integrate_mean(self, target: AbsoluteDate) -> SpacecraftState:
        mean = self._mean_state
        if not mean.frame.is_pseudo_inertial:
            raise PropagationError(
                f"integration frame {mean.frame.name!r} is not pseudo-inertial",
                Precondition.FRAME,
            )
        self._signs = []
        self._events = []
        detectors = []
        for model_index, model in enumerate(self.force_models):
            signs: list[Optional[bool]] = []
            for function_index, function in enumerate(model.switching_functions()):
                if is_date_only(function):
                    signs.append(initial_sign(function.g(mean)))
                    detectors.append(_MeanSwitchDetector(self, model_index, function_index, function))
                else:
                    signs.append(None)
            self._signs.append(signs)
        y0 = np.append(mean.orbit.equinoctial.to_array(PositionAngle.MEAN), mean.mass)
        result = self.integrator.integrate(
            self._derivatives, 0.0, y0, target.duration_from(mean.date), detectors,
        )
        _log.debug(
            "Mean elements integrated to %s in %d steps (%d evaluations)",
            target, result.accepted_steps, result.evaluations,
        )
        self._last_events = tuple(self._events)
        final = self._state(result.t, result.y)
        return final.with_orbit(
            OrbitalState(target, final.frame, final.mu, final.orbit.parameters),
        )

    def propagate_mean(self, target: AbsoluteDate) -> SpacecraftState:
        """Mean state at the target date (no short-periodic terms)."""
        return self._guarded(self._integrate_mean, target)

    def _propagate(self, target: AbsoluteDate) -> SpacecraftState:
        osculating = self.mean_to_osculating(self._integrate_mean(target))
        orbit = osculating.orbit
        parameters = self.initial_state.orbit.parameters.converted_like(orbit.equinoctial, orbit.mu)
        return osculating.with_orbit(orbit.with_parameters(parameters))
