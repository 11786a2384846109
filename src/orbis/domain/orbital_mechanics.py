# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital mechanics functions.

Physical constants, anomaly and longitude conversions, and J2 secular
rates. Pure mathematical conversions: stdlib math plus numpy.
"""
import math
from dataclasses import dataclass

import numpy as np

from orbis.domain.errors import ConvergenceError


@dataclass(frozen=True)
class _OrbitalConstants:
    """Standard orbital constants (IAU/WGS84/EGM96 values)."""
    MU_EARTH: float = 3.986004418e14   # m³/s², gravitational parameter
    MU_SUN: float = 1.32712440018e20   # m³/s²
    MU_MOON: float = 4.9048695e12      # m³/s²
    EARTH_ROTATION_RATE: float = 7.292115146706979e-5  # rad/s, sidereal rotation rate
    # WGS84 ellipsoid
    R_EARTH_EQUATORIAL: float = 6_378_137.0       # m, semi-major axis
    FLATTENING: float = 1.0 / 298.257223563       # WGS84 flattening
    # Unnormalized zonal coefficients (EGM96), C_n0 = -J_n
    C20: float = -1.08262668355e-3
    C30: float = 2.53265648533e-6
    C40: float = 1.61962159137e-6
    C50: float = 2.27296082869e-7
    C60: float = -5.40681239107e-7
    R_SUN: float = 6.96e8                         # m, photosphere radius
    AU: float = 1.495978707e11                    # m


OrbitalConstants: _OrbitalConstants = _OrbitalConstants()


@dataclass(frozen=True)
class KeplerSolverConfig:
    """Convergence settings for Kepler's equation.

    Attributes:
        tolerance: Absolute tolerance on the anomaly correction (rad).
        max_iterations: Newton iterations before ConvergenceError.
    """
    tolerance: float = 1e-14
    max_iterations: int = 50


_DEFAULT_KEPLER = KeplerSolverConfig()


def normalize_angle(angle: float, center: float = math.pi) -> float:
    """Wrap angle into [center - π, center + π)."""
    return angle - 2.0 * math.pi * math.floor((angle + math.pi - center) / (2.0 * math.pi))


# --- Keplerian anomalies ---

def true_to_eccentric(nu: float, e: float) -> float:
    """True anomaly to eccentric anomaly (half-angle identity).

    The result stays in the same revolution as the input.
    """
    beta = e / (1.0 + math.sqrt((1.0 - e) * (1.0 + e)))
    return nu - 2.0 * math.atan(beta * math.sin(nu) / (1.0 + beta * math.cos(nu)))


def eccentric_to_true(ecc: float, e: float) -> float:
    """Eccentric anomaly to true anomaly."""
    beta = e / (1.0 + math.sqrt((1.0 - e) * (1.0 + e)))
    return ecc + 2.0 * math.atan(beta * math.sin(ecc) / (1.0 - beta * math.cos(ecc)))


def eccentric_to_mean(ecc: float, e: float) -> float:
    """Kepler's equation M = E - e·sin(E)."""
    return ecc - e * math.sin(ecc)


def mean_to_eccentric(
    mean_anomaly: float,
    e: float,
    config: KeplerSolverConfig = _DEFAULT_KEPLER,
) -> float:
    """Solve Kepler's equation for the eccentric anomaly by Newton iteration.

    Args:
        mean_anomaly: Mean anomaly (rad), any revolution.
        e: Eccentricity, 0 <= e < 1.
        config: Tolerance and iteration budget.

    Returns:
        Eccentric anomaly in the same revolution as mean_anomaly.

    Raises:
        ConvergenceError: if the correction does not drop below the
            tolerance within config.max_iterations.
    """
    reduced = normalize_angle(mean_anomaly, 0.0)
    shift = mean_anomaly - reduced
    ecc = reduced + e * math.sin(reduced) if e < 0.8 else math.copysign(math.pi, reduced)
    for _ in range(config.max_iterations):
        delta = (ecc - e * math.sin(ecc) - reduced) / (1.0 - e * math.cos(ecc))
        ecc -= delta
        if abs(delta) <= config.tolerance:
            return ecc + shift
    raise ConvergenceError(
        f"Kepler equation did not converge for M={mean_anomaly}, e={e}",
        config.max_iterations,
    )


# --- Equinoctial longitudes ---

def true_to_eccentric_longitude(lv: float, ex: float, ey: float) -> float:
    """True longitude argument to eccentric longitude argument."""
    epsilon = math.sqrt(1.0 - ex * ex - ey * ey)
    cos_lv = math.cos(lv)
    sin_lv = math.sin(lv)
    num = ey * cos_lv - ex * sin_lv
    den = epsilon + 1.0 + ex * cos_lv + ey * sin_lv
    return lv + 2.0 * math.atan(num / den)


def eccentric_to_true_longitude(le: float, ex: float, ey: float) -> float:
    """Eccentric longitude argument to true longitude argument."""
    epsilon = math.sqrt(1.0 - ex * ex - ey * ey)
    cos_le = math.cos(le)
    sin_le = math.sin(le)
    num = ex * sin_le - ey * cos_le
    den = epsilon + 1.0 - ex * cos_le - ey * sin_le
    return le + 2.0 * math.atan(num / den)


def eccentric_to_mean_longitude(le: float, ex: float, ey: float) -> float:
    """Generalized Kepler equation LM = LE - ex·sin(LE) + ey·cos(LE)."""
    return le - ex * math.sin(le) + ey * math.cos(le)


def mean_to_eccentric_longitude(
    lm: float,
    ex: float,
    ey: float,
    config: KeplerSolverConfig = _DEFAULT_KEPLER,
) -> float:
    """Solve the generalized Kepler equation for the eccentric longitude.

    Raises:
        ConvergenceError: if Newton iteration does not converge.
    """
    le = lm
    for _ in range(config.max_iterations):
        cos_le = math.cos(le)
        sin_le = math.sin(le)
        f = le - ex * sin_le + ey * cos_le - lm
        delta = f / (1.0 - ex * cos_le - ey * sin_le)
        le -= delta
        if abs(delta) <= config.tolerance:
            return le
    raise ConvergenceError(
        f"generalized Kepler equation did not converge for LM={lm}",
        config.max_iterations,
    )


# --- Secular J2 rates ---

def keplerian_mean_motion(a: float, mu: float = OrbitalConstants.MU_EARTH) -> float:
    """Mean motion n = sqrt(mu / a³) in rad/s."""
    return math.sqrt(mu / (a * a * a))


def j2_raan_rate(
    n: float,
    a: float,
    e: float,
    i_rad: float,
    j2: float = -OrbitalConstants.C20,
    reference_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
) -> float:
    """
    J2 secular rate of RAAN (longitude of ascending node).

    dΩ/dt = -3/2 · n · J2 · (R_E/a)² · cos(i) / (1-e²)²

    Args:
        n: Mean motion (rad/s).
        a: Semi-major axis (m).
        e: Eccentricity.
        i_rad: Inclination (radians).
        j2: Second zonal coefficient.
        reference_radius: Equatorial radius of the central body (m).

    Returns:
        RAAN rate in rad/s. Negative for prograde, positive for retrograde.
    """
    p_ratio = (reference_radius / a) ** 2
    return float(-1.5 * n * j2 * p_ratio * np.cos(i_rad) / (1 - e**2) ** 2)


def j2_arg_perigee_rate(
    n: float,
    a: float,
    e: float,
    i_rad: float,
    j2: float = -OrbitalConstants.C20,
    reference_radius: float = OrbitalConstants.R_EARTH_EQUATORIAL,
) -> float:
    """
    J2 secular rate of argument of perigee.

    dω/dt = 3/2 · n · J2 · (R_E/a)² · (2 - 5/2·sin²i) / (1-e²)²
    """
    p_ratio = (reference_radius / a) ** 2
    sin_i = float(np.sin(i_rad))
    return float(1.5 * n * j2 * p_ratio * (2.0 - 2.5 * sin_i**2) / (1 - e**2) ** 2)
