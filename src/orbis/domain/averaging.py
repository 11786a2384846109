# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Numerical averaging of perturbations over the mean longitude.

Mean/short-periodic decomposition in equinoctial elements
[a, ex, ey, hx, hy, λM] for any model able to produce a Cartesian
acceleration:

1. The element rates induced by the perturbing acceleration follow from
   a central difference of the Cartesian → equinoctial conversion along
   the acceleration direction in velocity space (Gauss equations,
   evaluated numerically).
2. The mean rate is the average of those rates over N equally spaced
   mean longitudes on the mean ellipse (trapezoidal rule, spectrally
   accurate for periodic integrands). The date is held fixed over the
   revolution.
3. The short-periodic variation is the zero-mean integral of the
   oscillating part, obtained from the discrete Fourier transform:
   η_k = F_k / (i·k·n). The longitude also picks up the mean-motion
   oscillation -3n/(2a)·η_a of the semi-major axis.
"""
import math

import numpy as np

from orbis.domain.orbital_mechanics import normalize_angle
from orbis.domain.orbits import (
    EquinoctialParameters,
    OrbitalState,
    PositionAngle,
)
from orbis.domain.transforms import PVCoordinates

DEFAULT_AVERAGING_NODES = 32

# Relative velocity step of the central difference
_RELATIVE_VELOCITY_STEP = 1e-6


def _elements(position, velocity, mu: float) -> np.ndarray:
    return EquinoctialParameters.from_cartesian(
        PVCoordinates(position, velocity), mu, PositionAngle.MEAN,
    ).to_array(PositionAngle.MEAN)


def perturbation_rates(state, acceleration: np.ndarray) -> np.ndarray:
    """Equinoctial element rates d[a, ex, ey, hx, hy, λM]/dt due to acceleration.

    The Keplerian mean motion is not included in the λM rate.
    """
    magnitude = float(np.linalg.norm(acceleration))
    if magnitude == 0.0:
        return np.zeros(6)
    position = state.position
    velocity = state.velocity
    step = _RELATIVE_VELOCITY_STEP * float(np.linalg.norm(velocity))
    direction = acceleration / magnitude
    plus = _elements(position, velocity + step * direction, state.mu)
    minus = _elements(position, velocity - step * direction, state.mu)
    delta = plus - minus
    delta[5] = normalize_angle(delta[5], 0.0)
    return delta * (magnitude / (2.0 * step))


def _node_states(mean_state, nodes: int) -> list:
    """States on the mean ellipse at N equally spaced mean longitudes."""
    orbit = mean_state.orbit
    eq = orbit.equinoctial
    lm0 = eq.lm
    states = []
    for j in range(nodes):
        node_eq = eq.with_longitude(lm0 + 2.0 * math.pi * j / nodes, PositionAngle.MEAN)
        node_orbit = OrbitalState(orbit.date, orbit.frame, orbit.mu, node_eq)
        states.append(mean_state.with_orbit(node_orbit))
    return states


class AveragedContribution:
    """Mixin deriving the semi-analytical outputs from acceleration().

    Subclasses implement acceleration(state, signs=()). Frozen signs hold
    at every node, so pass them only for date-driven switching functions;
    None entries (shadow and other geometric regimes) are evaluated at
    each node.
    """

    averaging_nodes: int = DEFAULT_AVERAGING_NODES

    def _node_rates(self, mean_state, signs=()) -> np.ndarray:
        states = _node_states(mean_state, self.averaging_nodes)
        return np.array([
            perturbation_rates(state, self.acceleration(state, signs))
            for state in states
        ])

    def mean_element_rate(self, mean_state, signs=()) -> np.ndarray:
        """Averaged rates of [a, ex, ey, hx, hy, λM] at the mean state."""
        return self._node_rates(mean_state, signs).mean(axis=0)

    def short_periodic_variations(self, mean_state) -> np.ndarray:
        """Osculating minus mean elements at the mean state's longitude."""
        rates = self._node_rates(mean_state)
        nodes = rates.shape[0]
        n = mean_state.orbit.keplerian_mean_motion
        a = mean_state.orbit.a

        coefficients = np.fft.fft(rates, axis=0) / nodes
        k = np.fft.fftfreq(nodes, d=1.0 / nodes)
        coefficients[0, :] = 0.0
        if nodes % 2 == 0:
            coefficients[nodes // 2, :] = 0.0
        divisor = np.where(k == 0.0, 1.0, 1j * k * n)[:, None]
        eta = coefficients / divisor
        eta[:, 5] -= 1.5 * n / a * eta[:, 0] / divisor[:, 0]
        eta[0, :] = 0.0
        if nodes % 2 == 0:
            eta[nodes // 2, :] = 0.0
        # node 0 is the mean state's own longitude
        return np.real(eta.sum(axis=0))
