# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Solar and geomagnetic activity providers for atmosphere models.

Providers report an inclusive validity window [min_date, max_date];
queries outside it raise DateOutOfRangeError instead of extrapolating.
"""
from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable

from orbis.domain.errors import ConfigurationError, DateOutOfRangeError
from orbis.domain.time_systems import AbsoluteDate


@dataclass(frozen=True)
class SolarActivity:
    """Solar and geomagnetic activity indices for atmosphere model.

    f107: 10.7 cm solar radio flux (SFU) for the day.
    f107_average: 81-day centered average of F10.7.
    ap: Planetary geomagnetic index (0-400).
    """
    f107: float
    f107_average: float
    ap: float


@dataclass(frozen=True)
class ActivityRecord:
    """Tabulated activity indices at one date."""
    date: AbsoluteDate
    activity: SolarActivity


class _WindowedProvider(ABC):
    """Shared window check and per-index accessors."""

    min_date: AbsoluteDate
    max_date: AbsoluteDate

    def _check(self, date: AbsoluteDate) -> None:
        if date < self.min_date or date > self.max_date:
            raise DateOutOfRangeError(date, self.min_date, self.max_date)

    @abstractmethod
    def activity(self, date: AbsoluteDate) -> SolarActivity:
        """Indices at date; DateOutOfRangeError outside the window."""

    def f107(self, date: AbsoluteDate) -> float:
        return self.activity(date).f107

    def f107_average(self, date: AbsoluteDate) -> float:
        return self.activity(date).f107_average

    def ap(self, date: AbsoluteDate) -> float:
        return self.activity(date).ap


class TabulatedSolarActivity(_WindowedProvider):
    """Activity history with linear interpolation between records.

    The validity window spans the first to the last record, both included.
    """

    def __init__(self, records: Iterable[ActivityRecord]) -> None:
        self._records = sorted(records, key=lambda r: r.date)
        if len(self._records) < 2:
            raise ConfigurationError("tabulated solar activity needs at least two records")
        self._dates = [r.date for r in self._records]
        self.min_date = self._dates[0]
        self.max_date = self._dates[-1]

    def activity(self, date: AbsoluteDate) -> SolarActivity:
        self._check(date)
        hi = min(bisect_right(self._dates, date), len(self._records) - 1)
        lo = hi - 1
        r0, r1 = self._records[lo], self._records[hi]
        span = r1.date.duration_from(r0.date)
        frac = date.duration_from(r0.date) / span if span > 0.0 else 0.0
        a0, a1 = r0.activity, r1.activity
        return SolarActivity(
            f107=a0.f107 + frac * (a1.f107 - a0.f107),
            f107_average=a0.f107_average + frac * (a1.f107_average - a0.f107_average),
            ap=a0.ap + frac * (a1.ap - a0.ap),
        )


class ConstantSolarActivity(_WindowedProvider):
    """Fixed activity indices over an explicit validity window."""

    def __init__(
        self,
        activity: SolarActivity,
        min_date: AbsoluteDate,
        max_date: AbsoluteDate,
    ) -> None:
        if max_date < min_date:
            raise ConfigurationError("validity window ends before it starts")
        self._activity = activity
        self.min_date = min_date
        self.max_date = max_date

    def activity(self, date: AbsoluteDate) -> SolarActivity:
        self._check(date)
        return self._activity


class ActivityIndex:
    """Single index of a provider seen as a value_at(date) function.

    Args:
        provider: Solar activity provider.
        name: One of "f107", "f107_average", "ap".
    """

    _NAMES = ("f107", "f107_average", "ap")

    def __init__(self, provider: _WindowedProvider, name: str) -> None:
        if name not in self._NAMES:
            raise ConfigurationError(f"unknown activity index {name!r}")
        self._provider = provider
        self.name = name

    @property
    def min_date(self) -> AbsoluteDate:
        return self._provider.min_date

    @property
    def max_date(self) -> AbsoluteDate:
        return self._provider.max_date

    def value_at(self, date: AbsoluteDate) -> float:
        return getattr(self._provider.activity(date), self.name)
