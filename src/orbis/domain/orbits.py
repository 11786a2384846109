# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbit parameterizations and the OrbitalState value object.

Four interchangeable element sets describe the same two-body state:

* CartesianParameters: position and velocity.
* KeplerianParameters: (a, e, i, ω, Ω, anomaly) with a true, eccentric
  or mean anomaly.
* EquinoctialParameters: (a, ex, ey, hx, hy, l) with
  ex = e·cos(ω+Ω), ey = e·sin(ω+Ω), hx = tan(i/2)·cos(Ω),
  hy = tan(i/2)·sin(Ω) and a true, eccentric or mean longitude argument.
  Non-singular at zero eccentricity and zero inclination.
* CircularParameters: (a, ex, ey, i, Ω, α) with ex = e·cos(ω),
  ey = e·sin(ω) and α = ω + anomaly. Non-singular at zero eccentricity.

Conversions between non-Cartesian sets go through equinoctial elements
and preserve the angle convention (anomaly, longitude and latitude
arguments differ by constant angles). Exactly circular or equatorial
orbits make some Keplerian angles ill-defined: the formulas return
whatever value atan2 produces there.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import ClassVar, Optional

import numpy as np

from orbis.domain.errors import ConfigurationError
from orbis.domain.frames import Frame, get_transform_to
from orbis.domain.orbital_mechanics import (
    eccentric_to_mean,
    eccentric_to_mean_longitude,
    eccentric_to_true,
    eccentric_to_true_longitude,
    mean_to_eccentric,
    mean_to_eccentric_longitude,
    true_to_eccentric,
    true_to_eccentric_longitude,
)
from orbis.domain.time_systems import AbsoluteDate
from orbis.domain.transforms import PVCoordinates


class PositionAngle(Enum):
    """Convention of the fast angle (anomaly, longitude or latitude argument)."""
    TRUE = "true"
    ECCENTRIC = "eccentric"
    MEAN = "mean"


class OrbitType(Enum):
    CARTESIAN = "cartesian"
    KEPLERIAN = "keplerian"
    EQUINOCTIAL = "equinoctial"
    CIRCULAR = "circular"


def _convert_longitude(
    value: float,
    ex: float,
    ey: float,
    source: PositionAngle,
    target: PositionAngle,
) -> float:
    """Convert a longitude-like angle between conventions.

    Works for equinoctial longitude arguments (with equinoctial ex, ey)
    and circular latitude arguments (with circular ex, ey).
    """
    if source is target:
        return value
    if source is PositionAngle.TRUE:
        eccentric = true_to_eccentric_longitude(value, ex, ey)
    elif source is PositionAngle.MEAN:
        eccentric = mean_to_eccentric_longitude(value, ex, ey)
    else:
        eccentric = value
    if target is PositionAngle.TRUE:
        return eccentric_to_true_longitude(eccentric, ex, ey)
    if target is PositionAngle.MEAN:
        return eccentric_to_mean_longitude(eccentric, ex, ey)
    return eccentric


def _convert_anomaly(
    value: float,
    e: float,
    source: PositionAngle,
    target: PositionAngle,
) -> float:
    """Convert a Keplerian anomaly between conventions."""
    if source is target:
        return value
    if source is PositionAngle.TRUE:
        eccentric = true_to_eccentric(value, e)
    elif source is PositionAngle.MEAN:
        eccentric = mean_to_eccentric(value, e)
    else:
        eccentric = value
    if target is PositionAngle.TRUE:
        return eccentric_to_true(eccentric, e)
    if target is PositionAngle.MEAN:
        return eccentric_to_mean(eccentric, e)
    return eccentric


def _check_elliptic(a: float, e2: float) -> None:
    if not a > 0.0:
        raise ConfigurationError(f"semi-major axis must be positive, got {a}")
    if not 0.0 <= e2 < 1.0:
        raise ConfigurationError(
            f"eccentricity must lie in [0, 1), got {math.sqrt(abs(e2))}"
        )


# --------------------------------------------------------------------------- #
# Parameterizations
# --------------------------------------------------------------------------- #

class OrbitalParameters(ABC):
    """Scalar set describing an orbit, independent of date and frame."""

    orbit_type: ClassVar[OrbitType]

    @abstractmethod
    def to_equinoctial(self, mu: float) -> "EquinoctialParameters":
        """Equivalent equinoctial elements."""

    @classmethod
    @abstractmethod
    def from_equinoctial(
        cls,
        eq: "EquinoctialParameters",
        mu: float,
        angle_type: PositionAngle = PositionAngle.TRUE,
    ) -> "OrbitalParameters":
        """Build this parameterization from equinoctial elements."""

    @property
    def angle_type(self) -> Optional[PositionAngle]:
        return None

    def to_cartesian(self, mu: float) -> PVCoordinates:
        return self.to_equinoctial(mu).to_cartesian(mu)

    @classmethod
    def from_cartesian(
        cls,
        pv: PVCoordinates,
        mu: float,
        angle_type: PositionAngle = PositionAngle.TRUE,
    ) -> "OrbitalParameters":
        return cls.from_equinoctial(EquinoctialParameters.from_cartesian(pv, mu), mu, angle_type)

    def converted_like(self, eq: "EquinoctialParameters", mu: float) -> "OrbitalParameters":
        """Parameters of the same type and convention as self, from eq."""
        return type(self).from_equinoctial(eq, mu, self.angle_type or PositionAngle.TRUE)


@dataclass(frozen=True, eq=False)
class CartesianParameters(OrbitalParameters):
    """Position (m) and velocity (m/s)."""
    position: np.ndarray
    velocity: np.ndarray

    orbit_type: ClassVar[OrbitType] = OrbitType.CARTESIAN

    def __post_init__(self) -> None:
        pv = PVCoordinates(self.position, self.velocity)
        if not float(np.linalg.norm(pv.position)) > 0.0:
            raise ConfigurationError("position must be non-zero")
        object.__setattr__(self, "position", pv.position)
        object.__setattr__(self, "velocity", pv.velocity)

    @property
    def pv(self) -> PVCoordinates:
        return PVCoordinates(self.position, self.velocity)

    def to_cartesian(self, mu: float) -> PVCoordinates:
        return self.pv

    def to_equinoctial(self, mu: float) -> "EquinoctialParameters":
        return EquinoctialParameters.from_cartesian(self.pv, mu)

    @classmethod
    def from_cartesian(cls, pv, mu, angle_type=PositionAngle.TRUE) -> "CartesianParameters":
        return cls(pv.position, pv.velocity)

    @classmethod
    def from_equinoctial(cls, eq, mu, angle_type=PositionAngle.TRUE) -> "CartesianParameters":
        return cls.from_cartesian(eq.to_cartesian(mu), mu)


@dataclass(frozen=True)
class KeplerianParameters(OrbitalParameters):
    """Classical Keplerian elements (m, rad).

    Attributes:
        a: Semi-major axis.
        e: Eccentricity, 0 <= e < 1.
        i: Inclination.
        pa: Argument of periapsis ω.
        raan: Right ascension of the ascending node Ω.
        anomaly: Anomaly in the convention given by anomaly_type.
    """
    a: float
    e: float
    i: float
    pa: float
    raan: float
    anomaly: float
    anomaly_type: PositionAngle = PositionAngle.TRUE

    orbit_type: ClassVar[OrbitType] = OrbitType.KEPLERIAN

    def __post_init__(self) -> None:
        _check_elliptic(self.a, self.e * abs(self.e))

    @property
    def angle_type(self) -> PositionAngle:
        return self.anomaly_type

    def get_anomaly(self, anomaly_type: PositionAngle) -> float:
        return _convert_anomaly(self.anomaly, self.e, self.anomaly_type, anomaly_type)

    @property
    def true_anomaly(self) -> float:
        return self.get_anomaly(PositionAngle.TRUE)

    @property
    def eccentric_anomaly(self) -> float:
        return self.get_anomaly(PositionAngle.ECCENTRIC)

    @property
    def mean_anomaly(self) -> float:
        return self.get_anomaly(PositionAngle.MEAN)

    def to_cartesian(self, mu: float) -> PVCoordinates:
        a, e = self.a, self.e
        nu = self.true_anomaly
        cos_nu = math.cos(nu)
        sin_nu = math.sin(nu)

        r = a * (1 - e**2) / (1 + e * cos_nu)
        p_factor = math.sqrt(mu / (a * (1 - e**2)))
        pos_pqw = np.array([r * cos_nu, r * sin_nu, 0.0])
        vel_pqw = np.array([-p_factor * sin_nu, p_factor * (e + cos_nu), 0.0])

        cO, sO = math.cos(self.raan), math.sin(self.raan)
        co, so = math.cos(self.pa), math.sin(self.pa)
        ci, si = math.cos(self.i), math.sin(self.i)
        rotation = np.array([
            [cO * co - sO * so * ci, -cO * so - sO * co * ci, sO * si],
            [sO * co + cO * so * ci, -sO * so + cO * co * ci, -cO * si],
            [so * si, co * si, ci],
        ])
        return PVCoordinates(rotation @ pos_pqw, rotation @ vel_pqw)

    @classmethod
    def from_cartesian(cls, pv, mu, angle_type=PositionAngle.TRUE) -> "KeplerianParameters":
        p, v = pv.position, pv.velocity
        momentum = np.cross(p, v)
        m2 = float(np.dot(momentum, momentum))
        r = float(np.linalg.norm(p))
        r_v2_on_mu = r * float(np.dot(v, v)) / mu
        a = r / (2.0 - r_v2_on_mu)
        if not a > 0.0:
            raise ConfigurationError("Keplerian elements require an elliptic orbit")

        i = math.atan2(math.hypot(momentum[0], momentum[1]), momentum[2])
        node = np.array([-momentum[1], momentum[0], 0.0])
        raan = math.atan2(node[1], node[0])

        e_se = float(np.dot(p, v)) / math.sqrt(mu * a)
        e_ce = r_v2_on_mu - 1.0
        e = math.sqrt(e_se * e_se + e_ce * e_ce)
        _check_elliptic(a, e * e)
        nu = eccentric_to_true(math.atan2(e_se, e_ce), e)

        px = float(np.dot(p, node))
        py = float(np.dot(p, np.cross(momentum, node))) / math.sqrt(m2)
        pa = math.atan2(py, px) - nu
        return cls(a, e, i, pa, raan, _convert_anomaly(nu, e, PositionAngle.TRUE, angle_type), angle_type)

    def to_equinoctial(self, mu: float) -> "EquinoctialParameters":
        periapsis_longitude = self.pa + self.raan
        tan_half_i = math.tan(self.i / 2.0)
        return EquinoctialParameters(
            a=self.a,
            ex=self.e * math.cos(periapsis_longitude),
            ey=self.e * math.sin(periapsis_longitude),
            hx=tan_half_i * math.cos(self.raan),
            hy=tan_half_i * math.sin(self.raan),
            l=self.anomaly + periapsis_longitude,
            longitude_type=self.anomaly_type,
        )

    @classmethod
    def from_equinoctial(cls, eq, mu, angle_type=PositionAngle.TRUE) -> "KeplerianParameters":
        raan = math.atan2(eq.hy, eq.hx)
        periapsis_longitude = math.atan2(eq.ey, eq.ex)
        e = math.hypot(eq.ex, eq.ey)
        anomaly = eq.get_l(angle_type) - periapsis_longitude
        return cls(
            a=eq.a,
            e=e,
            i=2.0 * math.atan(math.hypot(eq.hx, eq.hy)),
            pa=periapsis_longitude - raan,
            raan=raan,
            anomaly=anomaly,
            anomaly_type=angle_type,
        )


@dataclass(frozen=True)
class EquinoctialParameters(OrbitalParameters):
    """Equinoctial elements (m, rad).

    Attributes:
        a: Semi-major axis.
        ex, ey: Eccentricity vector components.
        hx, hy: Inclination vector components.
        l: Longitude argument in the convention given by longitude_type.
    """
    a: float
    ex: float
    ey: float
    hx: float
    hy: float
    l: float
    longitude_type: PositionAngle = PositionAngle.TRUE

    orbit_type: ClassVar[OrbitType] = OrbitType.EQUINOCTIAL

    def __post_init__(self) -> None:
        _check_elliptic(self.a, self.ex * self.ex + self.ey * self.ey)

    @property
    def angle_type(self) -> PositionAngle:
        return self.longitude_type

    def get_l(self, longitude_type: PositionAngle) -> float:
        return _convert_longitude(self.l, self.ex, self.ey, self.longitude_type, longitude_type)

    @property
    def lv(self) -> float:
        return self.get_l(PositionAngle.TRUE)

    @property
    def le(self) -> float:
        return self.get_l(PositionAngle.ECCENTRIC)

    @property
    def lm(self) -> float:
        return self.get_l(PositionAngle.MEAN)

    @property
    def e(self) -> float:
        return math.hypot(self.ex, self.ey)

    @property
    def i(self) -> float:
        return 2.0 * math.atan(math.hypot(self.hx, self.hy))

    def with_longitude(self, l: float, longitude_type: PositionAngle) -> "EquinoctialParameters":
        return EquinoctialParameters(self.a, self.ex, self.ey, self.hx, self.hy, l, longitude_type)

    def to_array(self, longitude_type: PositionAngle = PositionAngle.MEAN) -> np.ndarray:
        """Elements as [a, ex, ey, hx, hy, l] in the requested convention."""
        return np.array([self.a, self.ex, self.ey, self.hx, self.hy, self.get_l(longitude_type)])

    @staticmethod
    def from_array(
        values,
        longitude_type: PositionAngle = PositionAngle.MEAN,
    ) -> "EquinoctialParameters":
        a, ex, ey, hx, hy, l = (float(x) for x in values)
        return EquinoctialParameters(a, ex, ey, hx, hy, l, longitude_type)

    def to_equinoctial(self, mu: float) -> "EquinoctialParameters":
        return self

    @classmethod
    def from_equinoctial(cls, eq, mu, angle_type=PositionAngle.TRUE) -> "EquinoctialParameters":
        return eq.with_longitude(eq.get_l(angle_type), angle_type)

    def to_cartesian(self, mu: float) -> PVCoordinates:
        hx2 = self.hx * self.hx
        hy2 = self.hy * self.hy
        fact_h = 1.0 / (1.0 + hx2 + hy2)
        # equinoctial frame axes
        f = np.array([1.0 + hx2 - hy2, 2.0 * self.hx * self.hy, -2.0 * self.hy]) * fact_h
        g = np.array([2.0 * self.hx * self.hy, 1.0 - hx2 + hy2, 2.0 * self.hx]) * fact_h

        ex, ey, a = self.ex, self.ey, self.a
        le = self.le
        c_le = math.cos(le)
        s_le = math.sin(le)
        ex_c_ey_s = ex * c_le + ey * s_le
        beta = 1.0 / (1.0 + math.sqrt(1.0 - ex * ex - ey * ey))

        x = a * ((1.0 - beta * ey * ey) * c_le + beta * ex * ey * s_le - ex)
        y = a * ((1.0 - beta * ex * ex) * s_le + beta * ex * ey * c_le - ey)
        factor = math.sqrt(mu / a) / (1.0 - ex_c_ey_s)
        x_dot = factor * (-s_le + beta * ey * ex_c_ey_s)
        y_dot = factor * (c_le - beta * ex * ex_c_ey_s)
        return PVCoordinates(x * f + y * g, x_dot * f + y_dot * g)

    @classmethod
    def from_cartesian(cls, pv, mu, angle_type=PositionAngle.TRUE) -> "EquinoctialParameters":
        p, v = pv.position, pv.velocity
        r = float(np.linalg.norm(p))
        r_v2_on_mu = r * float(np.dot(v, v)) / mu
        a = r / (2.0 - r_v2_on_mu)
        if not a > 0.0:
            raise ConfigurationError("equinoctial elements require an elliptic orbit")

        w = np.cross(p, v)
        w = w / float(np.linalg.norm(w))
        d = 1.0 / (1.0 + w[2])
        hx = -d * w[1]
        hy = d * w[0]

        c_lv = (p[0] - d * p[2] * w[0]) / r
        s_lv = (p[1] - d * p[2] * w[1]) / r
        lv = math.atan2(s_lv, c_lv)

        e_se = float(np.dot(p, v)) / math.sqrt(mu * a)
        e_ce = r_v2_on_mu - 1.0
        e2 = e_ce * e_ce + e_se * e_se
        _check_elliptic(a, e2)
        f = e_ce - e2
        g = math.sqrt(1.0 - e2) * e_se
        ex = a * (f * c_lv + g * s_lv) / r
        ey = a * (f * s_lv - g * c_lv) / r

        eq = cls(a, ex, ey, float(hx), float(hy), lv, PositionAngle.TRUE)
        return eq.with_longitude(eq.get_l(angle_type), angle_type)


@dataclass(frozen=True)
class CircularParameters(OrbitalParameters):
    """Circular elements (m, rad), non-singular at zero eccentricity.

    Attributes:
        a: Semi-major axis.
        ex, ey: e·cos(ω), e·sin(ω).
        i: Inclination.
        raan: Right ascension of the ascending node.
        alpha: Latitude argument ω + anomaly, in the convention alpha_type.
    """
    a: float
    ex: float
    ey: float
    i: float
    raan: float
    alpha: float
    alpha_type: PositionAngle = PositionAngle.TRUE

    orbit_type: ClassVar[OrbitType] = OrbitType.CIRCULAR

    def __post_init__(self) -> None:
        _check_elliptic(self.a, self.ex * self.ex + self.ey * self.ey)

    @property
    def angle_type(self) -> PositionAngle:
        return self.alpha_type

    def get_alpha(self, alpha_type: PositionAngle) -> float:
        return _convert_longitude(self.alpha, self.ex, self.ey, self.alpha_type, alpha_type)

    @property
    def alpha_v(self) -> float:
        return self.get_alpha(PositionAngle.TRUE)

    @property
    def alpha_e(self) -> float:
        return self.get_alpha(PositionAngle.ECCENTRIC)

    @property
    def alpha_m(self) -> float:
        return self.get_alpha(PositionAngle.MEAN)

    @property
    def e(self) -> float:
        return math.hypot(self.ex, self.ey)

    def to_equinoctial(self, mu: float) -> EquinoctialParameters:
        c_raan, s_raan = math.cos(self.raan), math.sin(self.raan)
        tan_half_i = math.tan(self.i / 2.0)
        return EquinoctialParameters(
            a=self.a,
            ex=self.ex * c_raan - self.ey * s_raan,
            ey=self.ey * c_raan + self.ex * s_raan,
            hx=tan_half_i * c_raan,
            hy=tan_half_i * s_raan,
            l=self.alpha + self.raan,
            longitude_type=self.alpha_type,
        )

    @classmethod
    def from_equinoctial(cls, eq, mu, angle_type=PositionAngle.TRUE) -> "CircularParameters":
        raan = math.atan2(eq.hy, eq.hx)
        c_raan, s_raan = math.cos(raan), math.sin(raan)
        return cls(
            a=eq.a,
            ex=eq.ex * c_raan + eq.ey * s_raan,
            ey=eq.ey * c_raan - eq.ex * s_raan,
            i=eq.i,
            raan=raan,
            alpha=eq.get_l(angle_type) - raan,
            alpha_type=angle_type,
        )


_PARAMETER_TYPES: dict[OrbitType, type] = {
    OrbitType.CARTESIAN: CartesianParameters,
    OrbitType.KEPLERIAN: KeplerianParameters,
    OrbitType.EQUINOCTIAL: EquinoctialParameters,
    OrbitType.CIRCULAR: CircularParameters,
}


# --------------------------------------------------------------------------- #
# Orbital state
# --------------------------------------------------------------------------- #

@dataclass(frozen=True, eq=False)
class OrbitalState:
    """Orbit at one instant: (date, frame, μ, parameters).

    Semantically immutable; every derived state is a new instance.
    """
    date: AbsoluteDate
    frame: Frame
    mu: float
    parameters: OrbitalParameters

    def __post_init__(self) -> None:
        if not self.mu > 0.0:
            raise ConfigurationError(f"gravitational parameter must be positive, got {self.mu}")

    @staticmethod
    def from_pv(
        pv: PVCoordinates,
        frame: Frame,
        date: AbsoluteDate,
        mu: float,
    ) -> "OrbitalState":
        return OrbitalState(date, frame, mu, CartesianParameters(pv.position, pv.velocity))

    @property
    def orbit_type(self) -> OrbitType:
        return self.parameters.orbit_type

    @cached_property
    def pv(self) -> PVCoordinates:
        return self.parameters.to_cartesian(self.mu)

    @cached_property
    def equinoctial(self) -> EquinoctialParameters:
        return self.parameters.to_equinoctial(self.mu)

    @cached_property
    def keplerian(self) -> KeplerianParameters:
        if isinstance(self.parameters, KeplerianParameters):
            return self.parameters
        return KeplerianParameters.from_equinoctial(self.equinoctial, self.mu)

    @property
    def position(self) -> np.ndarray:
        return self.pv.position

    @property
    def velocity(self) -> np.ndarray:
        return self.pv.velocity

    # -- Element accessors -------------------------------------------------- #

    @property
    def a(self) -> float:
        return self.equinoctial.a

    @property
    def e(self) -> float:
        return self.equinoctial.e

    @property
    def i(self) -> float:
        return self.equinoctial.i

    @property
    def ex(self) -> float:
        return self.equinoctial.ex

    @property
    def ey(self) -> float:
        return self.equinoctial.ey

    @property
    def hx(self) -> float:
        return self.equinoctial.hx

    @property
    def hy(self) -> float:
        return self.equinoctial.hy

    @property
    def lv(self) -> float:
        return self.equinoctial.lv

    @property
    def le(self) -> float:
        return self.equinoctial.le

    @property
    def lm(self) -> float:
        return self.equinoctial.lm

    @property
    def raan(self) -> float:
        return self.keplerian.raan

    @property
    def perigee_argument(self) -> float:
        return self.keplerian.pa

    @property
    def true_anomaly(self) -> float:
        return self.keplerian.true_anomaly

    @property
    def eccentric_anomaly(self) -> float:
        return self.keplerian.eccentric_anomaly

    @property
    def mean_anomaly(self) -> float:
        return self.keplerian.mean_anomaly

    @property
    def keplerian_mean_motion(self) -> float:
        a = self.a
        return math.sqrt(self.mu / (a * a * a))

    @property
    def keplerian_period(self) -> float:
        return 2.0 * math.pi / self.keplerian_mean_motion

    # -- Conversions -------------------------------------------------------- #

    def with_parameters(self, parameters: OrbitalParameters) -> "OrbitalState":
        return OrbitalState(self.date, self.frame, self.mu, parameters)

    def to_type(
        self,
        orbit_type: OrbitType,
        angle_type: PositionAngle = PositionAngle.TRUE,
    ) -> "OrbitalState":
        """Same state in another parameterization."""
        if orbit_type is OrbitType.CARTESIAN:
            return self.with_parameters(CartesianParameters(self.position, self.velocity))
        target = _PARAMETER_TYPES[orbit_type]
        return self.with_parameters(target.from_equinoctial(self.equinoctial, self.mu, angle_type))

    def to_cartesian(self) -> "OrbitalState":
        return self.to_type(OrbitType.CARTESIAN)

    def to_keplerian(self, anomaly_type: PositionAngle = PositionAngle.TRUE) -> "OrbitalState":
        return self.to_type(OrbitType.KEPLERIAN, anomaly_type)

    def to_equinoctial(self, longitude_type: PositionAngle = PositionAngle.TRUE) -> "OrbitalState":
        return self.to_type(OrbitType.EQUINOCTIAL, longitude_type)

    def to_circular(self, alpha_type: PositionAngle = PositionAngle.TRUE) -> "OrbitalState":
        return self.to_type(OrbitType.CIRCULAR, alpha_type)

    def shifted_by(self, dt: float) -> "OrbitalState":
        """State after dt seconds of pure Keplerian motion, same parameterization."""
        eq = self.equinoctial
        shifted = eq.with_longitude(eq.lm + self.keplerian_mean_motion * dt, PositionAngle.MEAN)
        return OrbitalState(
            self.date.shifted_by(dt),
            self.frame,
            self.mu,
            self.parameters.converted_like(shifted, self.mu),
        )

    def in_frame(self, frame: Frame) -> "OrbitalState":
        """Same physical state expressed in another frame of the same tree."""
        if frame is self.frame:
            return self
        pv = get_transform_to(self.frame, frame, self.date).transform_pv(self.pv)
        if isinstance(self.parameters, CartesianParameters):
            parameters: OrbitalParameters = CartesianParameters(pv.position, pv.velocity)
        else:
            parameters = self.parameters.converted_like(
                EquinoctialParameters.from_cartesian(pv, self.mu), self.mu,
            )
        return OrbitalState(self.date, frame, self.mu, parameters)
