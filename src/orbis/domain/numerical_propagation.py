# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Numerical orbit propagation.

Integrates the Cartesian state (or the equinoctial elements with mean
longitude) plus the spacecraft mass. The derivative is the central-body
Keplerian term plus the sum of every registered force model, evaluated in
the (pseudo-inertial) frame of the initial orbit. Force-model switching
functions are registered with the integrator as event detectors: each
model sees its switching signs frozen over a regime, and the step is
truncated at every located sign change.
"""
import logging
from typing import Optional

import numpy as np

from orbis.domain.averaging import perturbation_rates
from orbis.domain.errors import ConfigurationError, Precondition, PropagationError
from orbis.domain.forces import ForceModel, MassFlow
from orbis.domain.integration import DormandPrinceIntegrator, Integrator
from orbis.domain.orbits import (
    CartesianParameters,
    EquinoctialParameters,
    OrbitalState,
    OrbitType,
    PositionAngle,
)
from orbis.domain.propagation import Propagator
from orbis.domain.spacecraft_state import SpacecraftState
from orbis.domain.switching import SwitchingConfig, SwitchingEvent, SwitchingFunction, initial_sign
from orbis.domain.time_systems import AbsoluteDate

_log = logging.getLogger(__name__)


class _SwitchDetector:
    """Adapts a force-model switching function to the integrator events."""

    def __init__(self, propagator: "NumericalPropagator", model_index: int, function_index: int,
                 function: SwitchingFunction) -> None:
        self.propagator = propagator
        self.model_index = model_index
        self.function_index = function_index
        self.function = function

    def g(self, t: float, y: np.ndarray) -> float:
        return self.function.g(self.propagator._state(t, y))

    def event_occurred(self, t: float, y: np.ndarray, increasing: bool) -> None:
        self.propagator._switch(self, t, increasing)


class NumericalPropagator(Propagator):
    """Propagator integrating the equations of motion.

    Args:
        initial_state: Starting state; its orbit frame is the integration frame.
        integrator: ODE integrator (adaptive Dormand-Prince by default).
        orbit_type: CARTESIAN or EQUINOCTIAL integration variables.
        mu: Central attraction coefficient (defaults to the orbit's).
        switching_config: Settings for the default integrator's root location.
    """

    def __init__(
        self,
        initial_state: SpacecraftState,
        integrator: Optional[Integrator] = None,
        orbit_type: OrbitType = OrbitType.CARTESIAN,
        mu: Optional[float] = None,
        switching_config: Optional[SwitchingConfig] = None,
    ) -> None:
        super().__init__(initial_state)
        if orbit_type not in (OrbitType.CARTESIAN, OrbitType.EQUINOCTIAL):
            raise ConfigurationError(f"cannot integrate {orbit_type.name} parameters")
        if integrator is None:
            integrator = DormandPrinceIntegrator(switching_config=switching_config)
        self.integrator = integrator
        self.orbit_type = orbit_type
        self.mu = initial_state.mu if mu is None else mu
        self._force_models: list[ForceModel] = []
        self._signs: list[list[bool]] = []
        self._events: list[SwitchingEvent] = []
        self._last_events: tuple[SwitchingEvent, ...] = ()

    # -- Force models ------------------------------------------------------- #

    def add_force_model(self, model: ForceModel) -> None:
        """Append a perturbation; evaluation follows insertion order."""
        if not isinstance(model, ForceModel):
            raise ConfigurationError(f"{type(model).__name__} is not a force model")
        self._force_models.append(model)

    def remove_force_models(self) -> None:
        """Keep only the central-body Keplerian term."""
        self._force_models.clear()

    @property
    def force_models(self) -> tuple[ForceModel, ...]:
        return tuple(self._force_models)

    @property
    def last_events(self) -> tuple[SwitchingEvent, ...]:
        """Switching events located by the latest successful propagation."""
        return self._last_events

    # -- State mapping ------------------------------------------------------ #

    def _to_array(self, state: SpacecraftState) -> np.ndarray:
        orbit = state.orbit
        if self.orbit_type is OrbitType.CARTESIAN:
            head = np.concatenate([orbit.position, orbit.velocity])
        else:
            head = orbit.equinoctial.to_array(PositionAngle.MEAN)
        return np.append(head, state.mass)

    def _state(self, t: float, y: np.ndarray) -> SpacecraftState:
        initial = self.initial_state
        date = initial.date.shifted_by(t)
        if self.orbit_type is OrbitType.CARTESIAN:
            parameters = CartesianParameters(y[0:3], y[3:6])
        else:
            parameters = EquinoctialParameters.from_array(y[0:6], PositionAngle.MEAN)
        orbit = OrbitalState(date, initial.frame, self.mu, parameters)
        return SpacecraftState(orbit, initial.attitude, float(y[6]))

    # -- Equations of motion ------------------------------------------------ #

    def _derivatives(self, t: float, y: np.ndarray) -> np.ndarray:
        state = self._state(t, y)
        acceleration = np.zeros(3)
        mass_rate = 0.0
        for model, signs in zip(self._force_models, self._signs):
            regime = tuple(signs)
            acceleration = acceleration + model.acceleration(state, regime)
            if isinstance(model, MassFlow):
                mass_rate += model.mass_rate(state, regime)

        if self.orbit_type is OrbitType.CARTESIAN:
            position = y[0:3]
            r = float(np.linalg.norm(position))
            central = -self.mu / (r ** 3) * position
            return np.concatenate([y[3:6], central + acceleration, [mass_rate]])

        rates = perturbation_rates(state, acceleration)
        rates[5] += state.orbit.keplerian_mean_motion
        return np.append(rates, mass_rate)

    def _switch(self, detector: _SwitchDetector, t: float, increasing: bool) -> None:
        self._signs[detector.model_index][detector.function_index] = increasing
        event = SwitchingEvent(self.initial_state.date.shifted_by(t), detector.function, increasing)
        self._events.append(event)
        _log.debug("Switching event %r at %s (increasing=%s)", detector.function, event.date, increasing)

    # -- Propagation -------------------------------------------------------- #

    def _propagate(self, target: AbsoluteDate) -> SpacecraftState:
        initial = self.initial_state
        if not initial.frame.is_pseudo_inertial:
            raise PropagationError(
                f"integration frame {initial.frame.name!r} is not pseudo-inertial",
                Precondition.FRAME,
            )

        self._signs = []
        self._events = []
        detectors = []
        for model_index, model in enumerate(self._force_models):
            functions = model.switching_functions()
            self._signs.append([initial_sign(f.g(initial)) for f in functions])
            detectors.extend(
                _SwitchDetector(self, model_index, function_index, function)
                for function_index, function in enumerate(functions)
            )

        result = self.integrator.integrate(
            self._derivatives,
            0.0,
            self._to_array(initial),
            target.duration_from(initial.date),
            detectors,
        )
        _log.debug(
            "Integrated to %s: %d evaluations, %d steps accepted, %d rejected",
            target, result.evaluations, result.accepted_steps, result.rejected_steps,
        )
        self._last_events = tuple(self._events)

        final = self._state(result.t, result.y)
        orbit = OrbitalState(target, initial.frame, self.mu, final.orbit.parameters)
        keep_cartesian = (
            self.orbit_type is OrbitType.CARTESIAN
            and isinstance(initial.orbit.parameters, CartesianParameters)
        )
        if not keep_cartesian:
            orbit = orbit.with_parameters(
                initial.orbit.parameters.converted_like(orbit.equinoctial, self.mu),
            )
        return SpacecraftState(orbit, initial.attitude, final.mass)
