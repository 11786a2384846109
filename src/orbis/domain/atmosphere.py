# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Atmospheric density models.

ExponentialAtmosphere: piecewise exponential density with altitude-
dependent scale height (Vallado Table 8-4 / CIRA reference values).

SolarActivityAtmosphere: the same profile with scale heights stretched
by the Jacchia 1971 exospheric temperature, driven by solar flux,
geomagnetic activity and the diurnal bulge under the Sun. Valid only
inside the activity provider's date window.

Both models co-rotate with the central body.
"""
import logging
import math
from enum import Enum

import numpy as np

from orbis.domain.body_shape import OneAxisEllipsoid
from orbis.domain.errors import PropagationError, Precondition
from orbis.domain.frames import Frame, get_transform_to
from orbis.domain.time_systems import AbsoluteDate
from orbis.domain.transforms import PVCoordinates

_log = logging.getLogger(__name__)


class AtmosphereModel(Enum):
    """Exponential atmosphere density table selection."""
    VALLADO_4TH = "vallado_4th"      # Vallado 4th ed. Table 8-4 (moderate solar activity)
    HIGH_ACTIVITY = "high_activity"   # Higher-density table (~solar maximum)


# (base altitude km, base density kg/m³, scale height km)
_ATMOSPHERE_TABLE_HIGH: tuple[tuple[float, float, float], ...] = (
    (100, 5.297e-07, 5.877),
    (150, 2.070e-09, 22.523),
    (200, 2.541e-10, 53.298),
    (250, 6.967e-11, 68.019),
    (300, 2.508e-11, 76.680),
    (350, 1.172e-11, 84.852),
    (400, 6.097e-12, 89.412),
    (450, 3.510e-12, 97.498),
    (500, 2.150e-12, 112.458),
    (600, 8.620e-13, 133.060),
    (700, 3.614e-13, 150.580),
    (800, 1.454e-13, 164.441),
    (900, 5.811e-14, 175.579),
    (1000, 2.302e-14, 188.667),
)

# Vallado 4th ed. Table 8-4 (moderate solar activity)
_ATMOSPHERE_TABLE_VALLADO: tuple[tuple[float, float, float], ...] = (
    (100, 5.297e-07, 5.877),
    (110, 9.661e-08, 7.263),
    (120, 2.438e-08, 9.473),
    (130, 8.484e-09, 12.636),
    (140, 3.845e-09, 16.149),
    (150, 2.070e-09, 22.523),
    (180, 5.464e-10, 29.740),
    (200, 2.789e-10, 37.105),
    (250, 7.248e-11, 45.546),
    (300, 2.418e-11, 53.628),
    (350, 9.518e-12, 53.298),
    (400, 3.725e-12, 58.515),
    (450, 1.585e-12, 60.828),
    (500, 6.967e-13, 63.822),
    (600, 1.454e-13, 71.835),
    (700, 3.614e-14, 88.667),
    (800, 1.170e-14, 124.64),
    (900, 5.245e-15, 181.05),
    (1000, 3.019e-15, 268.00),
)

_MODEL_TABLES = {
    AtmosphereModel.VALLADO_4TH: _ATMOSPHERE_TABLE_VALLADO,
    AtmosphereModel.HIGH_ACTIVITY: _ATMOSPHERE_TABLE_HIGH,
}

# Exospheric temperature the moderate-activity table corresponds to (K)
_REFERENCE_TEMPERATURE_K = 1000.0

# Altitude above which temperature stretches scale heights (km)
_THERMOSPHERE_BASE_KM = 150.0


def _bracket(table: tuple[tuple[float, float, float], ...], altitude_km: float) -> int:
    lo, hi = 0, len(table) - 1
    if altitude_km >= table[hi][0]:
        return hi
    while lo < hi - 1:
        mid = (lo + hi) // 2
        if table[mid][0] <= altitude_km:
            lo = mid
        else:
            hi = mid
    return lo


def atmospheric_density(
    altitude_km: float,
    model: AtmosphereModel = AtmosphereModel.VALLADO_4TH,
) -> float:
    """Atmospheric density at given altitude using piecewise exponential model.

    Binary-searches the lookup table for the altitude bracket, then
    interpolates: rho = rho_base * exp(-(h - h_base) / H). Above the last
    table entry the last band is extrapolated.

    Raises:
        PropagationError: below the table floor (orbital regime).
    """
    table = _MODEL_TABLES[model]
    if altitude_km < table[0][0]:
        raise PropagationError(
            f"altitude {altitude_km:.1f} km below atmosphere model floor {table[0][0]} km",
            Precondition.ORBITAL_REGIME,
        )
    h_base, rho_base, scale_height = table[_bracket(table, altitude_km)]
    return float(rho_base * np.exp(-(altitude_km - h_base) / scale_height))


def _inverse_scale_height_integral(
    table: tuple[tuple[float, float, float], ...],
    from_km: float,
    to_km: float,
) -> float:
    """∫ dh / H(h) from from_km to to_km (to_km >= from_km)."""
    total = 0.0
    for index, (h_base, _, scale_height) in enumerate(table):
        top = table[index + 1][0] if index + 1 < len(table) else math.inf
        low = max(h_base, from_km)
        high = min(top, to_km)
        if high > low:
            total += (high - low) / scale_height
    return total


class ExponentialAtmosphere:
    """Piecewise exponential atmosphere fixed to the body frame.

    Args:
        body_shape: Central body shape (altitude and co-rotation frame).
        model: Density table.
    """

    def __init__(
        self,
        body_shape: OneAxisEllipsoid,
        model: AtmosphereModel = AtmosphereModel.VALLADO_4TH,
    ) -> None:
        self.body_shape = body_shape
        self.model = model

    def _altitude_km(self, date: AbsoluteDate, position, frame: Frame) -> float:
        return self.body_shape.transform_to_geodetic(position, frame, date).altitude / 1000.0

    def density(self, date: AbsoluteDate, position, frame: Frame) -> float:
        """Density (kg/m³) at position given in frame."""
        return atmospheric_density(self._altitude_km(date, position, frame), self.model)

    def velocity(self, date: AbsoluteDate, position, frame: Frame) -> np.ndarray:
        """Velocity of the co-rotating atmosphere at position, in frame."""
        body_frame = self.body_shape.body_frame
        to_body = get_transform_to(frame, body_frame, date)
        at_rest = PVCoordinates(to_body.transform_position(position), np.zeros(3))
        return get_transform_to(body_frame, frame, date).transform_pv(at_rest).velocity


def exospheric_temperature(
    f107: float,
    f107_average: float,
    ap: float,
    latitude: float,
    sun_declination: float,
    hour_angle: float,
) -> float:
    """Jacchia 1971 exospheric temperature (K).

    Args:
        f107: Daily 10.7 cm flux (SFU), previous day.
        f107_average: 81-day centered average flux (SFU).
        ap: Geomagnetic planetary index.
        latitude: Geodetic latitude of the point (rad).
        sun_declination: Declination of the Sun (rad).
        hour_angle: Local hour angle of the Sun (rad).
    """
    # Night-time minimum global exospheric temperature
    t_c = 379.0 + 3.24 * f107_average + 1.3 * (f107 - f107_average)

    theta = abs(latitude + sun_declination) / 2.0
    eta = abs(latitude - sun_declination) / 2.0
    tau = hour_angle - math.radians(37.0) + math.radians(6.0) * math.sin(hour_angle + math.radians(43.0))
    sin_theta = math.sin(theta) ** 2.2
    cos_eta = math.cos(eta) ** 2.2
    t_local = t_c * (1.0 + 0.3 * (sin_theta + (cos_eta - sin_theta) * abs(math.cos(tau / 2.0)) ** 3))

    # Geomagnetic heating
    delta_t = ap + 100.0 * (1.0 - math.exp(-0.08 * ap))
    return t_local + delta_t


class SolarActivityAtmosphere(ExponentialAtmosphere):
    """Exponential profile stretched by the Jacchia 1971 temperature.

    Density is the reference table value times
    exp((1 - T_ref/T∞) · ∫ dh/H) above the thermosphere base, so it
    matches the table when T∞ equals the reference temperature.

    Args:
        body_shape: Central body shape.
        sun: Sun ephemeris (position in the body frame).
        activity: Solar activity provider; dates outside its window
            raise DateOutOfRangeError.
    """

    def __init__(self, body_shape: OneAxisEllipsoid, sun, activity) -> None:
        super().__init__(body_shape, AtmosphereModel.VALLADO_4TH)
        self.sun = sun
        self.activity = activity
        _log.debug(
            "Solar activity atmosphere valid from %s to %s", activity.min_date, activity.max_date,
        )

    @property
    def min_date(self) -> AbsoluteDate:
        return self.activity.min_date

    @property
    def max_date(self) -> AbsoluteDate:
        return self.activity.max_date

    def temperature(self, date: AbsoluteDate, position, frame: Frame) -> float:
        """Exospheric temperature (K) above position."""
        point = self.body_shape.transform_to_geodetic(position, frame, date)
        sun = self.sun.get_position(date, self.body_shape.body_frame)
        sun_declination = math.asin(sun[2] / float(np.linalg.norm(sun)))
        hour_angle = point.longitude - math.atan2(sun[1], sun[0])
        return exospheric_temperature(
            self.activity.f107(date), self.activity.f107_average(date), self.activity.ap(date),
            point.latitude, sun_declination, hour_angle,
        )

    def density(self, date: AbsoluteDate, position, frame: Frame) -> float:
        temperature = self.temperature(date, position, frame)
        altitude_km = self._altitude_km(date, position, frame)
        rho = atmospheric_density(altitude_km, self.model)
        if altitude_km <= _THERMOSPHERE_BASE_KM:
            return rho
        stretch = 1.0 - _REFERENCE_TEMPERATURE_K / temperature
        integral = _inverse_scale_height_integral(
            _MODEL_TABLES[self.model], _THERMOSPHERE_BASE_KM, altitude_km,
        )
        return rho * math.exp(stretch * integral)
