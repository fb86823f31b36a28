import json
from datetime import date, datetime, timedelta

import pytz

from location_catalog import LocationCatalog
from prayer_times import PrayerKind, PrayerScheduleEngine
from snapshot import (
    build_snapshot,
    build_widget_payload,
    countdown_string,
    format_clock,
    hijri_label,
    prayer_title,
    recommended_refresh_dates,
    zone_label,
)

ISTANBUL_TZ = pytz.timezone("Europe/Istanbul")


def test_countdown_string_formats_and_clamps():
    start = datetime(2024, 6, 21, 10, 0, tzinfo=pytz.utc)
    assert countdown_string(start, start + timedelta(hours=3, minutes=5, seconds=9)) == "03:05:09"
    assert countdown_string(start, start + timedelta(hours=27)) == "27:00:00"
    assert countdown_string(start, start - timedelta(minutes=1)) == "00:00:00"


def test_format_clock_uses_target_timezone_and_digits():
    moment = datetime(2024, 6, 21, 2, 32, tzinfo=pytz.utc)
    assert format_clock(moment, "Europe/Istanbul") == "05:32"
    assert format_clock(moment, "America/New_York", "en") == "22:32"
    assert format_clock(moment, "Europe/Istanbul", "ar") == "٠٥:٣٢"


def test_zone_label_contains_abbreviation_and_identifier():
    moment = datetime(2024, 1, 15, 12, 0, tzinfo=pytz.utc)
    assert zone_label("America/New_York", moment) == "EST · America/New_York"
    assert zone_label("America/New_York", moment + timedelta(days=180)) == "EDT · America/New_York"


def test_prayer_title_localizes_and_falls_back_to_turkish():
    assert prayer_title(PrayerKind.AKSAM, "tr") == "Akşam"
    assert prayer_title(PrayerKind.AKSAM, "en-US") == "Maghrib"
    assert prayer_title(PrayerKind.AKSAM, "fr") == "Akşam"


def test_build_snapshot_for_istanbul():
    engine = PrayerScheduleEngine()
    city = LocationCatalog().city("istanbul")
    now = ISTANBUL_TZ.localize(datetime(2024, 6, 21, 20, 0))

    snapshot = build_snapshot(engine, city, now, "en")
    timeline = engine.timeline(city.location, now)

    assert snapshot.id == "istanbul"
    assert snapshot.local_time == "20:00"
    assert snapshot.next_prayer_name == "Maghrib"
    assert snapshot.next_prayer_time == format_clock(timeline.next.time, city.timezone)
    assert snapshot.remaining == countdown_string(now, timeline.next.time)
    assert snapshot.remaining.startswith("00:3")
    assert snapshot.timezone_label.endswith("Europe/Istanbul")
    assert snapshot.hijri_date.startswith("15 ")
    assert snapshot.special_day is None


def test_recommended_refresh_dates_are_unique_and_sorted():
    engine = PrayerScheduleEngine()
    location = LocationCatalog().city("istanbul").location
    now = ISTANBUL_TZ.localize(datetime(2024, 6, 21, 12, 0))
    entries = engine.entries_for_day(location, now)
    timeline = engine.timeline(location, now)

    dates = recommended_refresh_dates(entries, now, timeline)

    assert dates == sorted(dates)
    assert len({moment.timestamp() for moment in dates}) == len(dates)
    assert dates[0] == now + timedelta(minutes=30)
    assert timeline.next.time in dates
    assert now + timedelta(minutes=60) in dates
    # the next prayer also appears among the upcoming entries; it must only be listed once
    assert len(dates) == 5


def test_widget_payload_serializes_day_entries():
    engine = PrayerScheduleEngine()
    city = LocationCatalog().city("istanbul")
    now = ISTANBUL_TZ.localize(datetime(2024, 6, 21, 12, 0))

    payload = build_widget_payload(engine, city, now, "tr", extras={"accentOption": "Lacivert"})
    data = json.loads(payload.to_json())

    assert data["cityName"] == "İstanbul"
    assert data["prayerName"] == "Öğle"
    assert [entry["prayerName"] for entry in data["dayEntries"]] == ["İmsak", "Güneş", "Öğle", "İkindi", "Akşam", "Yatsı"]
    assert data["usedFallback"] is False
    assert data["hijriDate"] == "15 Zilhicce 1445"
    assert data["specialDay"] is None
    assert data["accentOption"] == "Lacivert"
    assert datetime.fromisoformat(data["nextPrayerDate"]) == payload.next_prayer_time
    assert payload.previous_prayer_time.astimezone(ISTANBUL_TZ).date() == date(2024, 6, 21)


def test_snapshot_marks_special_days():
    engine = PrayerScheduleEngine()
    city = LocationCatalog().city("makkah")
    now = city.location.tzinfo.localize(datetime(2024, 3, 11, 9, 0))

    snapshot = build_snapshot(engine, city, now, "ar")

    assert snapshot.special_day == "ramadan_start"
    assert snapshot.hijri_date.startswith("١ ")
    assert snapshot.hijri_date.endswith("١٤٤٥")


def test_hijri_label_is_empty_without_date():
    assert hijri_label(None, "en") == ""
