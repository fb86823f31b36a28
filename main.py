"""Entry point: print today's prayer times and optionally keep reminders running."""
from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pytz

from config import (
    language_from_config,
    load_config,
    location_from_config,
    reminder_settings_from_config,
    settings_from_config,
)
from location_catalog import LocationCatalog, WorldCity
from prayer_times import GeoLocation, PrayerScheduleEngine
from reminders import ReminderRequest, build_reminder_requests
from scheduler import PrayerScheduler, next_refresh_time
from snapshot import build_snapshot, countdown_string, format_clock, hijri_label, prayer_title

APP_ROOT = Path(__file__).parent
CONFIG_PATH = APP_ROOT / "config.json"
LOCATIONS_PATH = APP_ROOT / "assets" / "cities.json"
DEFAULT_CITY_ID = "istanbul"

logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
LOGGER = logging.getLogger(__name__)


class PrayerApp:
    """Coordinates the engine, the location catalog and the reminder scheduler."""

    def __init__(self, config_path: Path = CONFIG_PATH) -> None:
        self._config = load_config(config_path, default={})
        self.catalog = LocationCatalog(LOCATIONS_PATH)
        self.language = language_from_config(self._config)
        self.engine = PrayerScheduleEngine(settings=settings_from_config(self._config))
        self.reminder_settings = reminder_settings_from_config(self._config)
        self.location = self._resolve_location()
        self.scheduler: Optional[PrayerScheduler] = None
        LOGGER.debug("Initial state -> language=%s location=%s", self.language, self.location)

    def _resolve_location(self) -> GeoLocation:
        location = location_from_config(self._config, self.catalog)
        if location is not None:
            return location
        city = self.catalog.city(DEFAULT_CITY_ID)
        if city is None:
            raise RuntimeError(f"Default city '{DEFAULT_CITY_ID}' is missing from the location catalog")
        LOGGER.info("No usable location configured; using %s", city.name)
        return city.location

    def render(self, now: datetime) -> str:
        schedule = self.engine.schedule_for_day(self.location, now)
        timeline = self.engine.timeline(self.location, now)
        zone = self.location.timezone
        header = f"{self.location.name or zone} - {schedule.day.isoformat()}"
        hijri = hijri_label(schedule.hijri, self.language)
        lines = [f"{header} · {hijri}" if hijri else header]
        if schedule.used_fallback:
            lines.append("(approximate schedule)")
        for entry in schedule.prayers:
            marker = ">" if entry == timeline.next else " "
            lines.append(f"{marker} {prayer_title(entry.kind, self.language):<14} {format_clock(entry.time, zone, self.language)}")
        lines.append(
            f"{prayer_title(timeline.next.kind, self.language)} in {countdown_string(now, timeline.next.time)}"
        )
        city = self._catalog_city()
        if city is not None:
            snapshot = build_snapshot(self.engine, city, now, self.language)
            lines.append(f"{snapshot.local_time} ({snapshot.timezone_label})")
        return "\n".join(lines)

    def refresh(self) -> None:
        now = datetime.now(pytz.utc)
        requests = build_reminder_requests(self.engine, self.location, self.reminder_settings, now)
        scheduler = self._ensure_scheduler(self.location.timezone)
        scheduler.schedule_reminders(requests, self._on_reminder, now=now)
        scheduler.schedule_refresh(next_refresh_time(now, self.location.timezone), self.refresh)
        LOGGER.info("Scheduled %d reminders for %s", len(scheduler.job_ids()), self.location.name)

    def shutdown(self) -> None:
        if self.scheduler:
            self.scheduler.shutdown()

    def _on_reminder(self, request: ReminderRequest) -> None:
        LOGGER.info(
            "Reminder %s for %s at %s",
            request.category,
            prayer_title(request.kind, self.language),
            format_clock(request.fire_time, self.location.timezone, self.language),
        )

    def _ensure_scheduler(self, timezone: str) -> PrayerScheduler:
        if self.scheduler and self.scheduler.timezone == timezone:
            return self.scheduler
        if self.scheduler:
            self.scheduler.shutdown()
        self.scheduler = PrayerScheduler(timezone)
        self.scheduler.start()
        return self.scheduler

    def _catalog_city(self) -> Optional[WorldCity]:
        return self.catalog.find_by_name(self.location.name) if self.location.name else None


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    app = PrayerApp()
    print(app.render(datetime.now(pytz.utc)))
    if "--watch" not in argv:
        return 0

    app.refresh()
    stop = threading.Event()
    try:
        stop.wait()
    except KeyboardInterrupt:
        LOGGER.info("Interrupted; shutting down")
    finally:
        app.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
