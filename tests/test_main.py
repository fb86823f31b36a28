import json
from datetime import datetime

import pytest
import pytz

from location_catalog import LocationCatalog
from main import PrayerApp

ISTANBUL_TZ = pytz.timezone("Europe/Istanbul")


def test_app_defaults_to_istanbul_without_config(tmp_path):
    app = PrayerApp(tmp_path / "config.json")

    assert app.location.name == "İstanbul"
    assert app.language == "tr"


def test_app_requires_default_city_in_catalog(tmp_path, monkeypatch):
    monkeypatch.setattr(LocationCatalog, "city", lambda self, city_id: None)

    with pytest.raises(RuntimeError):
        PrayerApp(tmp_path / "config.json")


def test_render_lists_schedule_and_marks_next_prayer(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"language": "en", "location": {"city": "Istanbul"}}), encoding="utf-8")
    app = PrayerApp(path)

    text = app.render(ISTANBUL_TZ.localize(datetime(2024, 6, 21, 12, 0)))
    lines = text.splitlines()

    assert lines[0].startswith("İstanbul - 2024-06-21 · 15 ")
    assert lines[0].endswith(" 1445")
    assert any(line.startswith("> Dhuhr") for line in lines)
    assert sum(1 for line in lines if line.startswith(">")) == 1
    assert lines[-2].startswith("Dhuhr in 01:0")
    assert lines[-1].startswith("12:00 (")


def test_render_shows_turkish_hijri_month(tmp_path):
    app = PrayerApp(tmp_path / "config.json")

    text = app.render(ISTANBUL_TZ.localize(datetime(2024, 3, 11, 12, 0)))

    assert text.splitlines()[0] == "İstanbul - 2024-03-11 · 1 Ramazan 1445"


def test_render_flags_approximate_schedule(tmp_path):
    path = tmp_path / "config.json"
    payload = {"location": {"city": "Longyearbyen", "latitude": 85.0, "longitude": 15.0, "timezone": "Arctic/Longyearbyen"}}
    path.write_text(json.dumps(payload), encoding="utf-8")
    app = PrayerApp(path)

    text = app.render(pytz.utc.localize(datetime(2024, 6, 21, 9, 0)))

    assert "(approximate schedule)" in text.splitlines()[1]


def test_unknown_timezone_keeps_scheduler_usable(tmp_path):
    path = tmp_path / "config.json"
    payload = {"location": {"latitude": 41, "longitude": 29, "timezone": "Mars/Olympus"}}
    path.write_text(json.dumps(payload), encoding="utf-8")
    app = PrayerApp(path)

    try:
        scheduler = app._ensure_scheduler(app.location.timezone)
        assert scheduler.timezone == "UTC"
        assert app._ensure_scheduler(app.location.timezone) is scheduler
    finally:
        app.shutdown()
