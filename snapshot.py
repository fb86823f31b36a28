"""Display-ready views of the prayer timeline for city lists and home screen widgets."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytz

from hijri_calendar import HijriDay, hijri_day
from location_catalog import WorldCity
from prayer_times import PrayerInstant, PrayerKind, PrayerScheduleEngine, Timeline, local_date, resolve_timezone

LOGGER = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "tr"

PRAYER_TITLES: Dict[str, Dict[PrayerKind, str]] = {
    "tr": {
        PrayerKind.IMSAK: "İmsak",
        PrayerKind.GUNES: "Güneş",
        PrayerKind.OGLE: "Öğle",
        PrayerKind.IKINDI: "İkindi",
        PrayerKind.AKSAM: "Akşam",
        PrayerKind.YATSI: "Yatsı",
    },
    "en": {
        PrayerKind.IMSAK: "Fajr",
        PrayerKind.GUNES: "Sunrise",
        PrayerKind.OGLE: "Dhuhr",
        PrayerKind.IKINDI: "Asr",
        PrayerKind.AKSAM: "Maghrib",
        PrayerKind.YATSI: "Isha",
    },
    "ar": {
        PrayerKind.IMSAK: "الفجر",
        PrayerKind.GUNES: "الشروق",
        PrayerKind.OGLE: "الظهر",
        PrayerKind.IKINDI: "العصر",
        PrayerKind.AKSAM: "المغرب",
        PrayerKind.YATSI: "العشاء",
    },
    "de": {
        PrayerKind.IMSAK: "Fadschr",
        PrayerKind.GUNES: "Sonnenaufgang",
        PrayerKind.OGLE: "Dhuhr",
        PrayerKind.IKINDI: "Asr",
        PrayerKind.AKSAM: "Maghrib",
        PrayerKind.YATSI: "Ischa",
    },
}

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


@dataclass(frozen=True)
class PrayerSnapshot:
    city: WorldCity
    local_time: str
    next_prayer_name: str
    next_prayer_time: str
    remaining: str
    timezone_label: str
    hijri_date: str = ""
    special_day: Optional[str] = None

    @property
    def id(self) -> str:
        return self.city.id


@dataclass
class WidgetPayload:
    """Everything a widget needs to render until its next refresh."""

    city_name: str
    prayer_name: str
    next_prayer_time: datetime
    previous_prayer_time: datetime
    day_entries: List[Dict[str, Any]]
    refresh_dates: List[datetime]
    generated_at: datetime
    used_fallback: bool = False
    hijri_date: str = ""
    special_day: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cityName": self.city_name,
            "prayerName": self.prayer_name,
            "nextPrayerDate": self.next_prayer_time.isoformat(),
            "previousPrayerDate": self.previous_prayer_time.isoformat(),
            "dayEntries": [
                {"prayerName": entry["prayerName"], "prayerDate": entry["prayerDate"].isoformat()}
                for entry in self.day_entries
            ],
            "refreshDates": [moment.isoformat() for moment in self.refresh_dates],
            "generatedAt": self.generated_at.isoformat(),
            "usedFallback": self.used_fallback,
            "hijriDate": self.hijri_date,
            "specialDay": self.special_day,
            **self.extras,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


def prayer_title(kind: PrayerKind, language: str) -> str:
    titles = PRAYER_TITLES.get(_base_language(language)) or PRAYER_TITLES[DEFAULT_LANGUAGE]
    return titles[kind]


def countdown_string(start: datetime, end: datetime) -> str:
    total_seconds = max(0, int((end - start).total_seconds()))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_clock(moment: datetime, timezone: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Format *moment* as a 24-hour ``HH:MM`` clock reading in *timezone*."""
    text = moment.astimezone(resolve_timezone(timezone)).strftime("%H:%M")
    if _base_language(language) == "ar":
        return text.translate(ARABIC_DIGITS)
    return text


def hijri_label(hijri: Optional[HijriDay], language: str = DEFAULT_LANGUAGE) -> str:
    if hijri is None:
        return ""
    base = _base_language(language)
    text = hijri.format(base)
    if base == "ar":
        return text.translate(ARABIC_DIGITS)
    return text


def zone_label(timezone: str, at: datetime) -> str:
    tzinfo = resolve_timezone(timezone)
    abbreviation = at.astimezone(tzinfo).tzname()
    if abbreviation:
        return f"{abbreviation} · {timezone}"
    return timezone


def build_snapshot(
    engine: PrayerScheduleEngine,
    city: WorldCity,
    now: datetime,
    language: str = DEFAULT_LANGUAGE,
) -> PrayerSnapshot:
    location = city.location
    timeline = engine.timeline(location, now)
    hijri = hijri_day(local_date(now, location.tzinfo))
    return PrayerSnapshot(
        city=city,
        local_time=format_clock(now, city.timezone, language),
        next_prayer_name=prayer_title(timeline.next.kind, language),
        next_prayer_time=format_clock(timeline.next.time, city.timezone, language),
        remaining=countdown_string(now, timeline.next.time),
        timezone_label=zone_label(city.timezone, now),
        hijri_date=hijri_label(hijri, language),
        special_day=hijri.special_day_key if hijri else None,
    )


def recommended_refresh_dates(
    entries: List[PrayerInstant],
    now: datetime,
    timeline: Timeline,
) -> List[datetime]:
    """Moments at which a widget should redraw: upcoming prayers plus half-hourly ticks."""
    upcoming = [entry.time for entry in entries if entry.time > now]
    candidates = [timeline.next.time, *upcoming[:3], now + timedelta(minutes=30), now + timedelta(minutes=60)]

    unique: Dict[float, datetime] = {}
    for moment in candidates:
        unique.setdefault(moment.timestamp(), moment)
    return [unique[key] for key in sorted(unique)]


def build_widget_payload(
    engine: PrayerScheduleEngine,
    city: WorldCity,
    now: datetime,
    language: str = DEFAULT_LANGUAGE,
    extras: Optional[Dict[str, Any]] = None,
) -> WidgetPayload:
    location = city.location
    timeline = engine.timeline(location, now)
    schedule = engine.schedule_for_day(location, now)
    refresh_dates = recommended_refresh_dates(schedule.prayers, now, timeline)
    hijri = schedule.hijri
    LOGGER.debug(
        "Widget payload for %s: next=%s at %s, %d refresh dates",
        city.id,
        timeline.next.kind.value,
        timeline.next.time,
        len(refresh_dates),
    )
    return WidgetPayload(
        city_name=city.name,
        prayer_name=prayer_title(timeline.next.kind, language),
        next_prayer_time=timeline.next.time,
        previous_prayer_time=timeline.previous.time,
        day_entries=[
            {"prayerName": prayer_title(entry.kind, language), "prayerDate": entry.time}
            for entry in schedule.prayers
        ],
        refresh_dates=refresh_dates,
        generated_at=now.astimezone(pytz.utc),
        used_fallback=schedule.used_fallback,
        hijri_date=hijri_label(hijri, language),
        special_day=hijri.special_day_key if hijri else None,
        extras=dict(extras or {}),
    )


def _base_language(language: Optional[str]) -> str:
    return (language or DEFAULT_LANGUAGE).split("-")[0].split("_")[0].lower()
