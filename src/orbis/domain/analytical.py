# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Closed-form propagators.

* KeplerianPropagator: two-body motion, mean anomaly advancing linearly.
* EcksteinHechlerPropagator: the Eckstein-Hechler zonal theory for
  near-circular orbits, in circular parameters (a, ex, ey, i, Ω, αM):

  - secular drift of Ω and αM from C20 (with its square), C40 and C60;
  - eccentricity vector rotating about the frozen eccentricity set by
    the odd zonals C30 and C50;
  - short-periodic terms up to the sixth harmonic of αM in a, and up to
    the fourth in ex, ey, i, Ω and αM.

  Mean parameters are found once from the osculating initial orbit by
  fixed-point iteration. The theory drops terms of order C20·e, so it
  rejects e > 0.1 and warns above 0.005.
"""
import logging
import math
from typing import Optional

from orbis.domain.errors import (
    ConfigurationError,
    ConvergenceError,
    Precondition,
    PropagationError,
)
from orbis.domain.orbital_mechanics import OrbitalConstants, normalize_angle
from orbis.domain.orbits import CircularParameters, OrbitalState, PositionAngle
from orbis.domain.propagation import Propagator
from orbis.domain.spacecraft_state import SpacecraftState
from orbis.domain.time_systems import AbsoluteDate

_log = logging.getLogger(__name__)

_MAX_MEAN_ITERATIONS = 100
_MEAN_EPSILON = 1e-13
_MAX_ECCENTRICITY = 0.1
_WARN_ECCENTRICITY = 5e-3
_CRITICAL_SIN2_INCLINATION = 0.8


class KeplerianPropagator(Propagator):
    """Pure two-body propagation of the initial orbit."""

    def __init__(self, initial_state: SpacecraftState, mu: Optional[float] = None) -> None:
        super().__init__(initial_state)
        self.mu = initial_state.mu if mu is None else mu

    def _propagate(self, target: AbsoluteDate) -> SpacecraftState:
        orbit = self.initial_state.orbit
        if self.mu != orbit.mu:
            orbit = OrbitalState(orbit.date, orbit.frame, self.mu, orbit.parameters)
        return self.initial_state.with_orbit(orbit.shifted_by(target.duration_from(orbit.date)))


# --- Eckstein-Hechler model ---

class _EcksteinHechlerModel:
    """Mean circular parameters at a reference date and the theory coefficients.

    Raises:
        PropagationError: e > 0.1, almost equatorial or almost critically
            inclined mean orbit (ORBITAL_REGIME).
    """

    def __init__(
        self,
        date: AbsoluteDate,
        mean: CircularParameters,
        reference_radius: float,
        mu: float,
        coefficients: dict[int, float],
    ) -> None:
        self.date = date
        self.mean = mean
        self.alpha_m = mean.get_alpha(PositionAngle.MEAN)

        q = reference_radius / mean.a
        ql = q * q
        g2 = coefficients[2] * ql
        ql *= q
        g3 = coefficients[3] * ql
        ql *= q
        g4 = coefficients[4] * ql
        ql *= q
        g5 = coefficients[5] * ql
        ql *= q
        g6 = coefficients[6] * ql

        cos_i = math.cos(mean.i)
        sin_i = math.sin(mean.i)
        s2 = sin_i * sin_i
        s4 = s2 * s2
        s6 = s2 * s4

        if s2 < 1e-10:
            raise PropagationError("almost equatorial orbit", Precondition.ORBITAL_REGIME)
        if abs(s2 - _CRITICAL_SIN2_INCLINATION) < 1e-3:
            raise PropagationError(
                f"almost critically inclined orbit (i={math.degrees(mean.i):.4f} deg)",
                Precondition.ORBITAL_REGIME,
            )
        if mean.e > _MAX_ECCENTRICITY:
            raise PropagationError(
                f"eccentricity {mean.e:.4f} too large for the zonal model (max {_MAX_ECCENTRICITY})",
                Precondition.ORBITAL_REGIME,
            )

        self.n = math.sqrt(mu / mean.a) / mean.a

        # eccentricity vector rotation and frozen point
        self.rdpom = -0.75 * g2 * (4.0 - 5.0 * s2)
        self.rdpomp = (
            7.5 * g4 * (1.0 - 31.0 / 8.0 * s2 + 49.0 / 16.0 * s4)
            - 13.125 * g6 * (1.0 - 8.0 * s2 + 129.0 / 8.0 * s4 - 297.0 / 32.0 * s6)
        )
        q = 3.0 / (32.0 * self.rdpom)
        self.eps1 = (
            q * g4 * s2 * (30.0 - 35.0 * s2)
            - 175.0 * q * g6 * s2 * (1.0 - 3.0 * s2 + 2.0625 * s4)
        )
        q = 3.0 * sin_i / (8.0 * self.rdpom)
        self.eps2 = q * g3 * (4.0 - 5.0 * s2) - q * g5 * (10.0 - 35.0 * s2 + 26.25 * s4)

        # secular node and latitude argument rates (units of n)
        self.omm_rate = cos_i * (
            1.5 * g2
            - 2.25 * g2 * g2 * (1.5 - 2.5 * s2)
            - 0.9375 * g4 * (4.0 - 7.0 * s2)
            + 3.28125 * g6 * (2.0 - 9.0 * s2 + 8.25 * s4)
        )
        rdl = 1.0 - 1.5 * g2 * (3.0 - 4.0 * s2)
        self.alpha_rate = (
            rdl
            + 2.25 * g2 * g2 * (9.0 - 263.0 / 12.0 * s2 + 341.0 / 24.0 * s4)
            + 15.0 / 16.0 * g4 * (8.0 - 31.0 * s2 + 24.5 * s4)
            + 105.0 / 32.0 * g6 * (-10.0 / 3.0 + 25.0 * s2 - 48.75 * s4 + 27.5 * s6)
        )

        qq = -1.5 * g2 / rdl
        q_a = 0.75 * g2 * g2 * s2
        q_b = 0.25 * g4 * s2
        q_c = 105.0 / 16.0 * g6 * s2
        q_d = -0.75 * g3 * sin_i
        q_e = 3.75 * g5 * sin_i
        self.kh = 0.375 / self.rdpom
        self.kl = self.kh / sin_i

        # semi-major axis
        self.ax1 = qq * (2.0 - 3.5 * s2)
        self.ay1 = qq * (2.0 - 2.5 * s2)
        self.as1 = q_d * (4.0 - 5.0 * s2) + q_e * (2.625 * s4 - 3.5 * s2 + 1.0)
        self.ac2 = (
            qq * s2
            + q_a * 7.0 * (2.0 - 3.0 * s2)
            + q_b * (15.0 - 17.5 * s2)
            + q_c * (3.0 * s2 - 1.0 - 33.0 / 16.0 * s4)
        )
        self.axy3 = qq * 3.5 * s2
        self.as3 = q_d * 5.0 / 3.0 * s2 + q_e * 7.0 / 6.0 * s2 * (1.0 - 1.125 * s2)
        self.ac4 = q_a * s2 + q_b * 4.375 * s2 + q_c * 0.75 * (1.1 * s4 - s2)
        self.as5 = q_e * 21.0 / 80.0 * s4
        self.ac6 = q_c * -11.0 / 80.0 * s4

        # eccentricity vector
        self.ex1 = qq * (1.0 - 1.25 * s2)
        self.exx2 = qq * 0.5 * (3.0 - 5.0 * s2)
        self.exy2 = qq * (2.0 - 1.5 * s2)
        self.ex3 = qq * 7.0 / 12.0 * s2
        self.ex4 = qq * 17.0 / 8.0 * s2

        self.ey1 = qq * (1.0 - 1.75 * s2)
        self.eyx2 = qq * (1.0 - 3.0 * s2)
        self.eyy2 = qq * (2.0 * s2 - 1.5)
        self.ey3 = qq * 7.0 / 12.0 * s2
        self.ey4 = qq * 17.0 / 8.0 * s2

        # ascending node
        q = -qq * cos_i
        self.rx1 = 3.5 * q
        self.ry1 = -2.5 * q
        self.r2 = -0.5 * q
        self.r3 = 7.0 / 6.0 * q
        self.rl = (
            g3 * cos_i * (4.0 - 15.0 * s2)
            - 2.5 * g5 * cos_i * (4.0 - 42.0 * s2 + 52.5 * s4)
        )

        # inclination
        q = 0.5 * qq * sin_i * cos_i
        self.iy1 = q
        self.ix1 = -q
        self.i2 = q
        self.i3 = q * 7.0 / 3.0
        self.ih = (
            -g3 * cos_i * (4.0 - 5.0 * s2)
            + 2.5 * g5 * cos_i * (4.0 - 14.0 * s2 + 10.5 * s4)
        )

        # latitude argument
        self.lx1 = qq * (7.0 - 77.0 / 8.0 * s2)
        self.ly1 = qq * (55.0 / 8.0 * s2 - 7.5)
        self.l2 = qq * (1.25 * s2 - 0.5)
        self.l3 = qq * (77.0 / 24.0 * s2 - 7.0 / 6.0)
        self.ll = (
            g3 * (53.0 * s2 - 4.0 - 57.5 * s4)
            + 2.5 * g5 * (4.0 - 96.0 * s2 + 269.5 * s4 - 183.75 * s6)
        )

    @property
    def raan_rate(self) -> float:
        """Secular rate of the mean ascending node (rad/s)."""
        return self.omm_rate * self.n

    def osculating(self, dt: float) -> CircularParameters:
        """Osculating circular parameters dt seconds after the reference date."""
        mean = self.mean
        xnot = self.n * dt

        # eccentricity vector rotating about the frozen eccentricity
        x = xnot * (self.rdpom + self.rdpomp)
        cx, sx = math.cos(x), math.sin(x)
        exm = cx * mean.ex + sx * (self.eps2 - (1.0 - self.eps1) * mean.ey)
        eym = sx * (1.0 + self.eps1) * mean.ex + cx * (mean.ey - self.eps2) + self.eps2

        omm = normalize_angle(mean.raan + self.omm_rate * xnot, math.pi)
        xlm = normalize_angle(self.alpha_m + self.alpha_rate * xnot, math.pi)

        cl1, sl1 = math.cos(xlm), math.sin(xlm)
        cl2, sl2 = math.cos(2.0 * xlm), math.sin(2.0 * xlm)
        cl3, sl3 = math.cos(3.0 * xlm), math.sin(3.0 * xlm)
        cl4, sl4 = math.cos(4.0 * xlm), math.sin(4.0 * xlm)
        sl5 = math.sin(5.0 * xlm)
        cl6 = math.cos(6.0 * xlm)

        qh = (eym - self.eps2) * self.kh
        ql = exm * self.kl

        rda = (
            self.ax1 * exm * cl1 + self.ay1 * eym * sl1 + self.as1 * sl1
            + self.ac2 * cl2 + self.axy3 * (exm * cl3 + eym * sl3) + self.as3 * sl3
            + self.ac4 * cl4 + self.as5 * sl5 + self.ac6 * cl6
        )
        rdex = (
            self.ex1 * cl1 + self.exx2 * exm * cl2 + self.exy2 * eym * sl2
            + self.ex3 * cl3 + self.ex4 * (exm * cl4 + eym * sl4)
        )
        rdey = (
            self.ey1 * sl1 + self.eyx2 * exm * sl2 + self.eyy2 * eym * cl2
            + self.ey3 * sl3 + self.ey4 * (exm * sl4 - eym * cl4)
        )
        rdom = (
            self.rx1 * exm * sl1 + self.ry1 * eym * cl1 + self.r2 * sl2
            + self.r3 * (eym * cl3 - exm * sl3) + self.rl * ql
        )
        rdxi = (
            self.iy1 * eym * sl1 + self.ix1 * exm * cl1 + self.i2 * cl2
            + self.i3 * (exm * cl3 + eym * sl3) + self.ih * qh
        )
        rdxl = (
            self.lx1 * exm * sl1 + self.ly1 * eym * cl1 + self.l2 * sl2
            + self.l3 * (exm * sl3 - eym * cl3) + self.ll * ql
        )

        return CircularParameters(
            a=mean.a * (1.0 + rda),
            ex=exm + rdex,
            ey=eym + rdey,
            i=mean.i + rdxi,
            raan=omm + rdom,
            alpha=xlm + rdxl,
            alpha_type=PositionAngle.MEAN,
        )


class EcksteinHechlerPropagator(Propagator):
    """Analytical zonal propagator for near-circular, non-equatorial orbits.

    Args:
        initial_state: Osculating state; orbit frame must be pseudo-inertial
            with Z along the central body's pole.
        reference_radius: Equatorial radius the zonal coefficients refer to (m).
        mu: Central attraction coefficient (m³/s²).
        c20..c60: Unnormalized zonal coefficients (C_n0 = -J_n).

    Raises:
        PropagationError: underground orbit, e > 0.1, almost equatorial or
            almost critically inclined orbit (ORBITAL_REGIME), or a
            non-inertial frame (FRAME).
        ConvergenceError: the mean parameters did not converge.
        ConfigurationError: c20 is zero; the model divides by the J2 drift.
    """

    def __init__(
        self,
        initial_state: SpacecraftState,
        reference_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
        mu: float = OrbitalConstants.MU_EARTH,
        c20: float = OrbitalConstants.C20,
        c30: float = OrbitalConstants.C30,
        c40: float = OrbitalConstants.C40,
        c50: float = OrbitalConstants.C50,
        c60: float = OrbitalConstants.C60,
    ) -> None:
        if c20 == 0.0:
            raise ConfigurationError("c20 must be non-zero")
        super().__init__(initial_state)
        self.reference_radius = reference_radius
        self.mu = mu
        self.coefficients = {2: c20, 3: c30, 4: c40, 5: c50, 6: c60}
        self._model = self._compute_mean(initial_state)

    def reset_initial_state(self, state: SpacecraftState) -> None:
        model = self._compute_mean(state)
        super().reset_initial_state(state)
        self._model = model

    @property
    def mean_parameters(self) -> CircularParameters:
        """Mean circular parameters (mean argument of latitude) at the initial date."""
        return self._model.mean

    @property
    def mean_raan_rate(self) -> float:
        """Secular drift of the ascending node (rad/s)."""
        return self._model.raan_rate

    def _propagate(self, target: AbsoluteDate) -> SpacecraftState:
        orbit = self.initial_state.orbit
        circular = self._model.osculating(target.duration_from(self._model.date))
        eq = circular.to_equinoctial(self.mu)
        propagated = OrbitalState(
            target, orbit.frame, self.mu, orbit.parameters.converted_like(eq, self.mu),
        )
        return self.initial_state.with_orbit(propagated)

    def _new_model(self, date: AbsoluteDate, mean: CircularParameters) -> _EcksteinHechlerModel:
        return _EcksteinHechlerModel(date, mean, self.reference_radius, self.mu, self.coefficients)

    def _compute_mean(self, state: SpacecraftState) -> _EcksteinHechlerModel:
        """Fixed-point search of the mean parameters reproducing the osculating orbit."""
        orbit = state.orbit
        if not orbit.frame.is_pseudo_inertial:
            raise PropagationError(
                f"orbit frame {orbit.frame.name!r} is not pseudo-inertial", Precondition.FRAME,
            )
        osc = CircularParameters.from_equinoctial(orbit.equinoctial, self.mu, PositionAngle.MEAN)
        if osc.a < self.reference_radius:
            raise PropagationError(
                f"trajectory inside the central body (a={osc.a:.1f} m)", Precondition.ORBITAL_REGIME,
            )

        threshold_a = _MEAN_EPSILON * (1.0 + abs(osc.a))
        threshold_e = _MEAN_EPSILON * (1.0 + osc.e)
        threshold_angle = _MEAN_EPSILON * math.pi

        # rough initialization: the osculating parameters themselves
        model = self._new_model(orbit.date, osc)
        for iteration in range(1, _MAX_MEAN_ITERATIONS + 1):
            rebuilt = model.osculating(0.0)
            mean = model.mean
            delta_a = osc.a - rebuilt.a
            delta_ex = osc.ex - rebuilt.ex
            delta_ey = osc.ey - rebuilt.ey
            delta_i = osc.i - rebuilt.i
            delta_raan = normalize_angle(osc.raan - rebuilt.raan, 0.0)
            delta_alpha = normalize_angle(osc.alpha - rebuilt.alpha, 0.0)
            model = self._new_model(orbit.date, CircularParameters(
                mean.a + delta_a,
                mean.ex + delta_ex,
                mean.ey + delta_ey,
                mean.i + delta_i,
                mean.raan + delta_raan,
                model.alpha_m + delta_alpha,
                PositionAngle.MEAN,
            ))
            if (
                abs(delta_a) < threshold_a
                and abs(delta_ex) < threshold_e
                and abs(delta_ey) < threshold_e
                and abs(delta_i) < threshold_angle
                and abs(delta_raan) < threshold_angle
                and abs(delta_alpha) < threshold_angle
            ):
                _log.debug("Mean parameters converged after %d iterations", iteration)
                if model.mean.e > _WARN_ECCENTRICITY:
                    _log.warning(
                        "Eccentricity %.4f above %.3f: zonal model accuracy degraded",
                        model.mean.e, _WARN_ECCENTRICITY,
                    )
                return model
        raise ConvergenceError("mean parameters did not converge", _MAX_MEAN_ITERATIONS)
