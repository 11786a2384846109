# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Absolute dates on the continuous TT timeline.

AbsoluteDate stores whole seconds plus a fractional offset in [0, 1)
since J2000.0 TT, so subtraction between nearby dates is exact to the
resolution of the fractional part even decades away from J2000.

Named epochs (J2000, Julian, Modified Julian, CNES 1950, GPS, Java) are
all dates on the same timeline: two dates built from different epochs
for the same physical instant compare equal.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from orbis.domain.errors import ConfigurationError

# --------------------------------------------------------------------------- #
# Constants
# --------------------------------------------------------------------------- #

_TT_TAI_OFFSET: float = 32.184
"""TT = TAI + 32.184 s (exact, IAU 1991)."""

# The same offset split into whole and fractional seconds, so that whole
# UTC instants map onto dates without rounding.
_TT_TAI_WHOLE = 32
_TT_TAI_FRACTION = 0.184

_SECONDS_PER_DAY: float = 86400.0

_SECONDS_PER_JULIAN_CENTURY: float = 36525.0 * _SECONDS_PER_DAY

_J2000_JD: float = 2451545.0
"""Julian Date of J2000.0 epoch."""

# J2000.0 as a TT calendar reading, used for calendar arithmetic only.
_J2000_TT_CALENDAR = datetime(2000, 1, 1, 12, 0, 0)

# --------------------------------------------------------------------------- #
# Leap second table (date of effect, TAI-UTC in seconds)
# --------------------------------------------------------------------------- #

_LEAP_SECONDS: tuple[tuple[datetime, float], ...] = (
    (datetime(1972, 1, 1), 10.0),
    (datetime(1972, 7, 1), 11.0),
    (datetime(1973, 1, 1), 12.0),
    (datetime(1974, 1, 1), 13.0),
    (datetime(1975, 1, 1), 14.0),
    (datetime(1976, 1, 1), 15.0),
    (datetime(1977, 1, 1), 16.0),
    (datetime(1978, 1, 1), 17.0),
    (datetime(1979, 1, 1), 18.0),
    (datetime(1980, 1, 1), 19.0),
    (datetime(1981, 7, 1), 20.0),
    (datetime(1982, 7, 1), 21.0),
    (datetime(1983, 7, 1), 22.0),
    (datetime(1985, 7, 1), 23.0),
    (datetime(1988, 1, 1), 24.0),
    (datetime(1990, 1, 1), 25.0),
    (datetime(1991, 1, 1), 26.0),
    (datetime(1992, 7, 1), 27.0),
    (datetime(1993, 7, 1), 28.0),
    (datetime(1994, 7, 1), 29.0),
    (datetime(1996, 1, 1), 30.0),
    (datetime(1997, 7, 1), 31.0),
    (datetime(1999, 1, 1), 32.0),
    (datetime(2006, 1, 1), 33.0),
    (datetime(2009, 1, 1), 34.0),
    (datetime(2012, 7, 1), 35.0),
    (datetime(2015, 7, 1), 36.0),
    (datetime(2017, 1, 1), 37.0),
)

_LEAP_DATES = tuple(entry[0] for entry in _LEAP_SECONDS)


def utc_to_tai_seconds(dt: datetime) -> float:
    """Return TAI-UTC offset (delta_AT) for a given UTC datetime.

    Naive datetimes are treated as UTC.

    Raises:
        ConfigurationError: for dates before 1972-01-01.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    index = bisect_right(_LEAP_DATES, dt)
    if index == 0:
        raise ConfigurationError(
            f"UTC date {dt.isoformat()} is before 1972-01-01; "
            "leap second table undefined"
        )
    return _LEAP_SECONDS[index - 1][1]


# --------------------------------------------------------------------------- #
# AbsoluteDate value object
# --------------------------------------------------------------------------- #

@dataclass(frozen=True, order=True)
class AbsoluteDate:
    """Instant on the TT timeline, as seconds since J2000.0 TT.

    Attributes:
        seconds: Whole seconds since J2000.0 TT.
        offset: Fractional seconds, 0 <= offset < 1.
    """

    seconds: int
    offset: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.offset < 1.0:
            raise ConfigurationError(
                f"fractional offset must lie in [0, 1), got {self.offset}"
            )

    # -- Construction ------------------------------------------------------- #

    @staticmethod
    def from_offset(epoch: "AbsoluteDate", elapsed_s: float) -> "AbsoluteDate":
        """Date located elapsed_s seconds after epoch (negative before)."""
        whole = math.floor(elapsed_s)
        fraction = (elapsed_s - whole) + epoch.offset
        carry = math.floor(fraction)
        fraction -= carry
        if fraction >= 1.0:
            # rounding of a value just below an integer
            fraction = 0.0
            carry += 1
        return AbsoluteDate(epoch.seconds + int(whole) + int(carry), fraction)

    @staticmethod
    def from_julian_day(jd: float) -> "AbsoluteDate":
        """Date from a TT Julian Day number."""
        days = jd - _J2000_JD
        whole_days = math.floor(days)
        return AbsoluteDate.from_offset(
            AbsoluteDate(int(whole_days) * 86400),
            (days - whole_days) * _SECONDS_PER_DAY,
        )

    @staticmethod
    def from_datetime(dt: datetime) -> "AbsoluteDate":
        """Date from a UTC datetime (naive datetimes are treated as UTC).

        Conversion chain: UTC → TAI (leap seconds) → TT. Whole seconds are
        carried as integers, so a whole UTC second lands exactly on the
        matching reference epoch.
        """
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        delta_at = utc_to_tai_seconds(dt)
        elapsed = dt - _J2000_TT_CALENDAR
        whole = elapsed.days * 86400 + elapsed.seconds + int(delta_at) + _TT_TAI_WHOLE
        fraction = elapsed.microseconds / 1e6 + _TT_TAI_FRACTION
        return AbsoluteDate.from_offset(AbsoluteDate(whole), fraction)

    # -- Conversions -------------------------------------------------------- #

    def duration_from(self, other: "AbsoluteDate") -> float:
        """Elapsed seconds from other to self."""
        return float(self.seconds - other.seconds) + (self.offset - other.offset)

    def shifted_by(self, dt: float) -> "AbsoluteDate":
        """Date shifted by dt seconds."""
        return AbsoluteDate.from_offset(self, dt)

    def to_julian_day(self) -> float:
        """Return TT Julian Day number."""
        return _J2000_JD + (self.seconds + self.offset) / _SECONDS_PER_DAY

    def to_julian_centuries(self) -> float:
        """Return Julian centuries of TT from J2000.0."""
        return (self.seconds + self.offset) / _SECONDS_PER_JULIAN_CENTURY

    def to_datetime(self) -> datetime:
        """Return the UTC datetime (timezone-aware) of this date."""
        tt_calendar = _J2000_TT_CALENDAR + timedelta(
            seconds=self.seconds, microseconds=round(self.offset * 1e6),
        )
        guess = tt_calendar - timedelta(seconds=_TT_TAI_OFFSET + _LEAP_SECONDS[-1][1])
        delta_at = utc_to_tai_seconds(guess)
        utc = tt_calendar - timedelta(seconds=_TT_TAI_OFFSET + delta_at)
        if utc_to_tai_seconds(utc) != delta_at:
            utc = tt_calendar - timedelta(seconds=_TT_TAI_OFFSET + utc_to_tai_seconds(utc))
        return utc.replace(tzinfo=timezone.utc)

    # -- Operators ---------------------------------------------------------- #

    def __add__(self, dt: float) -> "AbsoluteDate":
        return self.shifted_by(dt)

    def __sub__(self, other):
        if isinstance(other, AbsoluteDate):
            return self.duration_from(other)
        return self.shifted_by(-other)

    def __str__(self) -> str:
        return f"J2000{self.seconds + self.offset:+.6f}s TT"


# --------------------------------------------------------------------------- #
# Reference epochs
# --------------------------------------------------------------------------- #

J2000_EPOCH = AbsoluteDate(0)
"""2000-01-01T12:00:00 TT."""

JULIAN_EPOCH = AbsoluteDate(-211_813_488_000)
"""Julian Day 0: -4712-01-01T12:00:00 TT."""

MODIFIED_JULIAN_EPOCH = AbsoluteDate(-4_453_444_800)
"""1858-11-17T00:00:00 TT."""

CNES_1950_EPOCH = AbsoluteDate(-1_577_880_000)
"""1950-01-01T00:00:00 TT."""

JAVA_EPOCH = AbsoluteDate(-946_728_000)
"""1970-01-01T00:00:00 TT."""

GPS_EPOCH = AbsoluteDate(-630_763_149, 0.184)
"""1980-01-06T00:00:00 UTC (TT = UTC + 19 s + 32.184 s)."""
