"""Build the reminder requests handed to the notification layer."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List

from prayer_times import GeoLocation, PrayerKind, PrayerScheduleEngine

LOGGER = logging.getLogger(__name__)

REMINDER_CATEGORY = "prayer-reminder"
ENTRY_CATEGORY = "prayer-entry"
DEFAULT_HORIZON_DAYS = 7


class LeadTime(Enum):
    NONE = 0
    FIVE_MINUTES = 5
    TEN_MINUTES = 10
    FIFTEEN_MINUTES = 15
    THIRTY_MINUTES = 30
    FORTY_FIVE_MINUTES = 45
    ONE_HOUR = 60

    @property
    def delta(self) -> timedelta:
        return timedelta(minutes=self.value)


@dataclass(frozen=True)
class ReminderSetting:
    kind: PrayerKind
    enabled: bool = True
    lead_time: LeadTime = LeadTime.TEN_MINUTES


@dataclass(frozen=True)
class ReminderRequest:
    id: str
    kind: PrayerKind
    fire_time: datetime
    category: str


def default_reminder_settings() -> List[ReminderSetting]:
    return [ReminderSetting(kind=kind, enabled=kind is not PrayerKind.GUNES) for kind in PrayerKind]


def build_reminder_requests(
    engine: PrayerScheduleEngine,
    location: GeoLocation,
    settings: Iterable[ReminderSetting],
    now: datetime,
    days: int = DEFAULT_HORIZON_DAYS,
) -> List[ReminderRequest]:
    """Return future reminder requests for the next *days* local days, ordered by fire time."""
    enabled = [setting for setting in settings if setting.enabled]
    requests: List[ReminderRequest] = []
    for schedule in engine.schedules_for_days(location, now, days):
        for setting in enabled:
            entry = schedule.get(setting.kind)
            if setting.lead_time is not LeadTime.NONE:
                pre_time = entry.time - setting.lead_time.delta
                if pre_time > now:
                    requests.append(_request(REMINDER_CATEGORY, setting.kind, pre_time))
            if entry.time > now:
                requests.append(_request(ENTRY_CATEGORY, setting.kind, entry.time))

    requests.sort(key=lambda request: (request.fire_time, request.kind.order_index))
    LOGGER.debug("Built %d reminder requests over %d days for %s", len(requests), days, location.name or location.timezone)
    return requests


def _request(category: str, kind: PrayerKind, fire_time: datetime) -> ReminderRequest:
    return ReminderRequest(
        id=f"{category}-{kind.value}-{int(fire_time.timestamp())}",
        kind=kind,
        fire_time=fire_time,
        category=category,
    )
