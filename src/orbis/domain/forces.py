# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Perturbing force models.

Every model implements the ForceModel port in two output modes:

* Cartesian acceleration, for numerical propagators:
  acceleration(state, signs) in the frame of the state's orbit.
* Mean-element rate plus short-periodic variation, for semi-analytical
  propagators (numerical averaging, see orbis.domain.averaging).

Models with discontinuities expose switching functions. During
numerical propagation the propagator passes `signs`, one boolean per
switching function (True when g >= 0), frozen over the current regime;
an empty tuple means the regime is evaluated geometrically from the
state itself, and so does a None entry. The semi-analytical propagator
passes the same kind of tuple to mean_element_rate(), freezing only the
date-driven functions. Models are immutable and may be shared across
propagators.

The central body Keplerian term is not a force model: propagators add
it themselves.
"""
from enum import Enum
from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from orbis.domain.averaging import AveragedContribution
from orbis.domain.eclipse import PenumbraSwitch, UmbraSwitch, eclipse_ratio
from orbis.domain.errors import ConfigurationError
from orbis.domain.frames import Frame, get_transform_to
from orbis.domain.orbital_mechanics import OrbitalConstants
from orbis.domain.switching import DateSwitch, SwitchingFunction
from orbis.domain.time_systems import AbsoluteDate

# Standard gravity for specific impulse (m/s²)
G0 = 9.80665

# Solar radiation pressure at 1 AU (N/m²)
_P_SR = 4.56e-6


# --- Types ---

@runtime_checkable
class ForceModel(Protocol):
    """Structural typing port for pluggable force models."""

    def acceleration(self, state, signs: tuple[Optional[bool], ...] = ()) -> np.ndarray: ...

    def switching_functions(self) -> tuple[SwitchingFunction, ...]: ...

    def mean_element_rate(self, mean_state, signs: tuple[Optional[bool], ...] = ()) -> np.ndarray: ...

    def short_periodic_variations(self, mean_state) -> np.ndarray: ...


@runtime_checkable
class MassFlow(Protocol):
    """Models that also drive the mass auxiliary equation."""

    def mass_rate(self, state, signs: tuple[Optional[bool], ...] = ()) -> float: ...


def _regime(
    functions: Sequence[SwitchingFunction],
    state,
    signs: tuple[Optional[bool], ...],
) -> tuple[bool, ...]:
    if not signs:
        return tuple(f.g(state) >= 0.0 for f in functions)
    return tuple(
        f.g(state) >= 0.0 if sign is None else sign
        for f, sign in zip(functions, signs)
    )


# --- Force models ---

class ZonalHarmonics(AveragedContribution):
    """Zonal geopotential terms C20..Cn0 of the central body.

    Acceleration is the gradient of
        U = (mu/r) Σ C_n0 (R/r)^n P_n(z/r)
    computed in the body frame and rotated to the orbit frame.

    Args:
        body_frame: Frame in which the zonal axis is Z.
        coefficients: Unnormalized (C20, C30, ...).
        reference_radius: Equatorial radius (m).
        mu: Gravitational parameter (m³/s²).
    """

    def __init__(
        self,
        body_frame: Frame,
        coefficients: Sequence[float] = (OrbitalConstants.C20,),
        reference_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
        mu: float = OrbitalConstants.MU_EARTH,
    ) -> None:
        if not coefficients:
            raise ConfigurationError("at least one zonal coefficient is required")
        self.body_frame = body_frame
        self.coefficients = tuple(float(c) for c in coefficients)
        self.reference_radius = reference_radius
        self.mu = mu

    @property
    def max_degree(self) -> int:
        return len(self.coefficients) + 1

    def body_acceleration(self, position) -> np.ndarray:
        """Perturbing acceleration for a body-frame position."""
        pos = np.asarray(position, dtype=float)
        r = float(np.linalg.norm(pos))
        u = pos[2] / r
        r_hat = pos / r

        # Legendre polynomials and derivatives by recursion
        n_max = self.max_degree
        p = [1.0, u]
        dp = [0.0, 1.0]
        for n in range(2, n_max + 1):
            p.append(((2 * n - 1) * u * p[n - 1] - (n - 1) * p[n - 2]) / n)
            dp.append(dp[n - 2] + (2 * n - 1) * p[n - 1])

        radial = 0.0
        polar = 0.0
        ratio = self.reference_radius / r
        ratio_n = ratio
        for n, c_n0 in enumerate(self.coefficients, start=2):
            ratio_n *= ratio
            radial -= (n + 1) * c_n0 * ratio_n * p[n]
            polar += c_n0 * ratio_n * dp[n]

        scale = self.mu / (r * r)
        return scale * (radial * r_hat + polar * (np.array([0.0, 0.0, 1.0]) - u * r_hat))

    def acceleration(self, state, signs: tuple[bool, ...] = ()) -> np.ndarray:
        to_body = get_transform_to(state.frame, self.body_frame, state.date)
        body_accel = self.body_acceleration(to_body.transform_position(state.position))
        return to_body.rotation.T @ body_accel

    def switching_functions(self) -> tuple:
        return ()


class ThirdBodyAttraction(AveragedContribution):
    """Point-mass attraction of a third body, relative to the central body.

    a = mu_b · [ (s - r)/|s - r|³ - s/|s|³ ]
    """

    def __init__(self, body, mu: float | None = None) -> None:
        self.body = body
        self.mu = body.mu if mu is None else mu

    def acceleration(self, state, signs: tuple[bool, ...] = ()) -> np.ndarray:
        s = self.body.get_position(state.date, state.frame)
        d = s - state.position
        d_norm = float(np.linalg.norm(d))
        s_norm = float(np.linalg.norm(s))
        return self.mu * (d / d_norm**3 - s / s_norm**3)

    def switching_functions(self) -> tuple:
        return ()


class AtmosphericDrag(AveragedContribution):
    """Cannonball drag relative to the co-rotating atmosphere.

    a = -1/2 · rho · Cd · A/m · |v_rel| · v_rel

    Args:
        atmosphere: Density/velocity model (may raise DateOutOfRangeError
            outside its data window).
        cd: Drag coefficient (dimensionless, typically 2.0-2.5).
        area_m2: Cross-sectional area (m²).
    """

    def __init__(self, atmosphere, cd: float = 2.2, area_m2: float = 1.0) -> None:
        if cd <= 0.0 or area_m2 <= 0.0:
            raise ConfigurationError("drag coefficient and area must be positive")
        self.atmosphere = atmosphere
        self.cd = cd
        self.area_m2 = area_m2

    def acceleration(self, state, signs: tuple[bool, ...] = ()) -> np.ndarray:
        position = state.position
        rho = self.atmosphere.density(state.date, position, state.frame)
        v_rel = state.velocity - self.atmosphere.velocity(state.date, position, state.frame)
        v_mag = float(np.linalg.norm(v_rel))
        return -0.5 * rho * self.cd * self.area_m2 / state.mass * v_mag * v_rel

    def switching_functions(self) -> tuple:
        return ()


class ShadowModel(Enum):
    """Illumination handling of solar radiation pressure."""
    NONE = "none"                    # always lit
    SWITCHED = "switched"            # umbra/penumbra switching functions
    PENUMBRA_RATIO = "penumbra_ratio"  # smooth eclipse ratio, no switching


class SolarRadiationPressure(AveragedContribution):
    """Cannonball solar radiation pressure with shadowing.

    a = ν · P_sr · (AU/d)² · Cr · A/m · û   (û points away from the Sun)

    With ShadowModel.SWITCHED the regime is frozen between located
    shadow crossings: ν = 0 in umbra, 1 outside penumbra and the eclipse
    ratio in between. With ShadowModel.PENUMBRA_RATIO ν is the eclipse
    ratio evaluated at every call.

    Args:
        sun: Sun ephemeris.
        occulting_radius: Radius of the shadowing central body (m).
        cr: Reflectivity coefficient.
        area_m2: Cross-sectional area (m²).
        shadow_model: Illumination handling.
    """

    def __init__(
        self,
        sun,
        occulting_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
        cr: float = 1.5,
        area_m2: float = 1.0,
        shadow_model: ShadowModel = ShadowModel.SWITCHED,
    ) -> None:
        if cr <= 0.0 or area_m2 <= 0.0:
            raise ConfigurationError("reflectivity coefficient and area must be positive")
        self.sun = sun
        self.occulting_radius = occulting_radius
        self.cr = cr
        self.area_m2 = area_m2
        self.shadow_model = shadow_model
        if shadow_model is ShadowModel.SWITCHED:
            self._switches: tuple = (
                UmbraSwitch(sun, occulting_radius),
                PenumbraSwitch(sun, occulting_radius),
            )
        else:
            self._switches = ()

    def switching_functions(self) -> tuple:
        return self._switches

    def lighting_ratio(self, state, signs: tuple[bool, ...] = ()) -> float:
        """Illuminated fraction ν in [0, 1] under the current regime."""
        if self.shadow_model is ShadowModel.NONE:
            return 1.0
        sun_position = self.sun.get_position(state.date, state.frame)
        if self.shadow_model is ShadowModel.SWITCHED:
            outside_umbra, outside_penumbra = _regime(self._switches, state, signs)
            if not outside_umbra:
                return 0.0
            if outside_penumbra:
                return 1.0
        return eclipse_ratio(state.position, sun_position, self.occulting_radius, self.sun.radius)

    def acceleration(self, state, signs: tuple[bool, ...] = ()) -> np.ndarray:
        nu = self.lighting_ratio(state, signs)
        if nu == 0.0:
            return np.zeros(3)
        from_sun = state.position - self.sun.get_position(state.date, state.frame)
        d = float(np.linalg.norm(from_sun))
        pressure = _P_SR * (OrbitalConstants.AU / d) ** 2
        return nu * pressure * self.cr * self.area_m2 / state.mass * from_sun / d


class ConstantThrustManeuver(AveragedContribution):
    """Constant thrust over [start, start + duration] with mass depletion.

    Args:
        start: Ignition date.
        duration: Burn duration (s), positive.
        thrust: Thrust magnitude (N).
        isp: Specific impulse (s).
        direction: Thrust direction in spacecraft body axes.
    """

    def __init__(
        self,
        start: AbsoluteDate,
        duration: float,
        thrust: float,
        isp: float,
        direction=(1.0, 0.0, 0.0),
    ) -> None:
        if duration <= 0.0 or thrust <= 0.0 or isp <= 0.0:
            raise ConfigurationError("duration, thrust and isp must be positive")
        direction = np.asarray(direction, dtype=float)
        norm = float(np.linalg.norm(direction))
        if norm == 0.0:
            raise ConfigurationError("thrust direction must be non-zero")
        self.start = start
        self.end = start.shifted_by(duration)
        self.thrust = thrust
        self.isp = isp
        self.direction = direction / norm
        self._switches = (DateSwitch(self.start), DateSwitch(self.end))

    def switching_functions(self) -> tuple:
        return self._switches

    def is_firing(self, state, signs: tuple[bool, ...] = ()) -> bool:
        started, ended = _regime(self._switches, state, signs)
        return started and not ended

    def acceleration(self, state, signs: tuple[bool, ...] = ()) -> np.ndarray:
        if not self.is_firing(state, signs):
            return np.zeros(3)
        inertial_direction = state.attitude.rotation.T @ self.direction
        return self.thrust / state.mass * inertial_direction

    def mass_rate(self, state, signs: tuple[bool, ...] = ()) -> float:
        if not self.is_firing(state, signs):
            return 0.0
        return -self.thrust / (G0 * self.isp)
