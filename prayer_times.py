"""Daily prayer schedules derived from sunrise and sunset, plus the rolling previous/next timeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import pytz

from hijri_calendar import HijriDay, hijri_day
from solar_events import NoSolution, SolarEventCalculator, SolarEvents

LOGGER = logging.getLogger(__name__)

DayLike = Union[date, datetime]


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    timezone: str
    name: str = ""

    def __post_init__(self) -> None:
        # Unknown identifiers collapse to UTC once, here; ``timezone`` is always loadable afterwards.
        object.__setattr__(self, "timezone", resolve_timezone(self.timezone).zone)

    @property
    def tzinfo(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)


class PrayerKind(Enum):
    """The six daily prayer times in their fixed order."""

    IMSAK = "imsak"
    GUNES = "gunes"
    OGLE = "ogle"
    IKINDI = "ikindi"
    AKSAM = "aksam"
    YATSI = "yatsi"

    @property
    def order_index(self) -> int:
        return _KIND_ORDER.index(self)

    @property
    def title(self) -> str:
        return self.value.capitalize()

    @property
    def canonical_name(self) -> str:
        return _CANONICAL_NAMES[self]


_KIND_ORDER: Tuple[PrayerKind, ...] = tuple(PrayerKind)

_CANONICAL_NAMES: Dict[PrayerKind, str] = {
    PrayerKind.IMSAK: "Fajr",
    PrayerKind.GUNES: "Sunrise",
    PrayerKind.OGLE: "Dhuhr",
    PrayerKind.IKINDI: "Asr",
    PrayerKind.AKSAM: "Maghrib",
    PrayerKind.YATSI: "Isha",
}


@dataclass(frozen=True)
class PrayerInstant:
    kind: PrayerKind
    time: datetime

    @property
    def id(self) -> str:
        return f"{self.kind.value}-{int(self.time.timestamp())}"


@dataclass
class DailySchedule:
    location: GeoLocation
    day: date
    prayers: List[PrayerInstant]
    used_fallback: bool = False

    @property
    def hijri(self) -> Optional[HijriDay]:
        return hijri_day(self.day)

    def next_prayer(self, now: datetime) -> Optional[PrayerInstant]:
        """Return the first prayer strictly after *now*, if any remains today."""
        for info in self.prayers:
            if info.time > now:
                return info
        return None

    def get(self, kind: PrayerKind) -> PrayerInstant:
        for info in self.prayers:
            if info.kind is kind:
                return info
        raise KeyError(kind)


@dataclass(frozen=True)
class Timeline:
    previous: PrayerInstant
    next: PrayerInstant


@dataclass(frozen=True)
class ScheduleSettings:
    """Empirical offsets used to derive prayer times from sunrise and sunset.

    The values carry no astronomical derivation; they are kept as-is so that
    schedules stay stable across releases.
    """

    imsak_offset: timedelta = timedelta(minutes=90)
    yatsi_offset: timedelta = timedelta(minutes=90)
    ikindi_minimum: timedelta = timedelta(hours=2.5)
    ikindi_fraction: float = 0.55
    ikindi_sunset_margin: timedelta = timedelta(minutes=75)
    fallback_times: Dict[PrayerKind, time] = field(
        default_factory=lambda: {
            PrayerKind.IMSAK: time(5, 30),
            PrayerKind.GUNES: time(7, 0),
            PrayerKind.OGLE: time(12, 55),
            PrayerKind.IKINDI: time(16, 20),
            PrayerKind.AKSAM: time(19, 5),
            PrayerKind.YATSI: time(20, 30),
        }
    )


class PrayerScheduleEngine:
    """Builds per-day prayer schedules and answers previous/next queries.

    Every call is a pure function of its arguments. ``now`` is always supplied
    by the caller; nothing here reads the system clock.
    """

    def __init__(
        self,
        calculator: Optional[SolarEventCalculator] = None,
        settings: Optional[ScheduleSettings] = None,
    ) -> None:
        self.calculator = calculator or SolarEventCalculator()
        self.settings = settings or ScheduleSettings()

    def entries_for_day(self, location: GeoLocation, day: DayLike) -> List[PrayerInstant]:
        return list(self.schedule_for_day(location, day).prayers)

    def schedule_for_day(self, location: GeoLocation, day: DayLike) -> DailySchedule:
        local_day = local_date(day, location.tzinfo)
        result = self.calculator.calculate(location, local_day)
        if isinstance(result, NoSolution):
            LOGGER.warning(
                "Using fixed fallback schedule for %s (lat=%s lon=%s) on %s",
                location.name or location.timezone,
                location.latitude,
                location.longitude,
                local_day,
            )
            prayers = self._fallback_entries(location, local_day)
            return DailySchedule(location=location, day=local_day, prayers=prayers, used_fallback=True)

        prayers = self._solar_entries(result, location.tzinfo)
        LOGGER.debug("Derived %d prayer times for %s on %s", len(prayers), location.name or location.timezone, local_day)
        return DailySchedule(location=location, day=local_day, prayers=prayers)

    def timeline(self, location: GeoLocation, now: datetime) -> Timeline:
        """Return the prayers surrounding *now*, scanning yesterday, today and tomorrow."""
        if now.tzinfo is None:
            raise ValueError("now must be timezone-aware")
        today = local_date(now, location.tzinfo)
        window: List[PrayerInstant] = []
        for offset in (-1, 0, 1):
            window.extend(self.entries_for_day(location, today + timedelta(days=offset)))
        window.sort(key=lambda item: item.time)

        next_index = next((index for index, item in enumerate(window) if item.time > now), None)
        if next_index is None:
            LOGGER.warning("No upcoming prayer in window for %s at %s", location.name or location.timezone, now)
            today_entries = self.entries_for_day(location, today)
            return Timeline(previous=today_entries[-2], next=today_entries[-1])

        return Timeline(previous=window[max(0, next_index - 1)], next=window[next_index])

    def schedules_for_days(self, location: GeoLocation, reference: DayLike, count: int) -> List[DailySchedule]:
        return [self.schedule_for_day(location, day) for day in next_n_days(reference, count, location.tzinfo)]

    def _solar_entries(self, solar: SolarEvents, tzinfo: pytz.BaseTzInfo) -> List[PrayerInstant]:
        settings = self.settings
        sunrise = solar.sunrise
        sunset = solar.sunset
        midday = _shift(sunrise, (sunset - sunrise) / 2, tzinfo)
        afternoon = _shift(midday, max(settings.ikindi_minimum, (sunset - midday) * settings.ikindi_fraction), tzinfo)

        entries = [
            PrayerInstant(PrayerKind.IMSAK, _shift(sunrise, -settings.imsak_offset, tzinfo)),
            PrayerInstant(PrayerKind.GUNES, sunrise),
            PrayerInstant(PrayerKind.OGLE, midday),
            PrayerInstant(PrayerKind.IKINDI, min(afternoon, _shift(sunset, -settings.ikindi_sunset_margin, tzinfo))),
            PrayerInstant(PrayerKind.AKSAM, sunset),
            PrayerInstant(PrayerKind.YATSI, _shift(sunset, settings.yatsi_offset, tzinfo)),
        ]
        return sorted(entries, key=lambda item: item.time)

    def _fallback_entries(self, location: GeoLocation, day: date) -> List[PrayerInstant]:
        tzinfo = location.tzinfo
        entries = [
            PrayerInstant(kind, tzinfo.localize(datetime.combine(day, self.settings.fallback_times[kind])))
            for kind in PrayerKind
        ]
        return sorted(entries, key=lambda item: item.time)


def local_date(day: DayLike, tzinfo: pytz.BaseTzInfo) -> date:
    """Return the calendar date of *day* as experienced in *tzinfo*."""
    if isinstance(day, datetime):
        if day.tzinfo is None:
            return day.date()
        return day.astimezone(tzinfo).date()
    return day


def next_n_days(reference: DayLike, count: int, tzinfo: pytz.BaseTzInfo) -> List[date]:
    start = local_date(reference, tzinfo)
    return [start + timedelta(days=offset) for offset in range(count)]


def resolve_timezone(name: Optional[str]) -> pytz.BaseTzInfo:
    if not name:
        LOGGER.warning("Timezone missing; defaulting to UTC")
        return pytz.UTC
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        LOGGER.warning("Unknown timezone '%s'; falling back to UTC", name)
        return pytz.UTC


def _shift(moment: datetime, delta: timedelta, tzinfo: pytz.BaseTzInfo) -> datetime:
    return tzinfo.normalize(moment + delta)
