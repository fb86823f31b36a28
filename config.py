"""Load application settings and the selected location from the JSON config file."""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import time, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytz
from tzlocal import get_localzone_name

from location_catalog import LocationCatalog
from prayer_times import GeoLocation, PrayerKind, ScheduleSettings
from reminders import LeadTime, ReminderSetting, default_reminder_settings

LOGGER = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("tr", "en", "ar", "de")

_MINUTE_SETTINGS = {
    "imsak_offset_minutes": "imsak_offset",
    "yatsi_offset_minutes": "yatsi_offset",
    "ikindi_minimum_minutes": "ikindi_minimum",
    "ikindi_sunset_margin_minutes": "ikindi_sunset_margin",
}


def load_config(path: Path, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    if not path.exists():
        LOGGER.debug("Config file %s not found; using defaults", path)
        return dict(default or {})
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        LOGGER.warning("Ignoring config file %s: top-level value is not an object", path)
        return dict(default or {})
    LOGGER.debug("Loaded config keys: %s", list(payload.keys()))
    return payload


def save_config(path: Path, payload: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def language_from_config(config: Dict[str, Any]) -> str:
    language = str(config.get("language", "tr")).lower()
    if language not in SUPPORTED_LANGUAGES:
        LOGGER.warning("Unsupported language '%s'; using Turkish", language)
        return "tr"
    return language


def settings_from_config(config: Dict[str, Any]) -> ScheduleSettings:
    """Build schedule settings, overriding only the values present and valid in ``config["schedule"]``."""
    settings = ScheduleSettings()
    section = config.get("schedule") if isinstance(config, dict) else None
    if not isinstance(section, dict):
        return settings

    overrides: Dict[str, Any] = {}
    for key, attribute in _MINUTE_SETTINGS.items():
        if key not in section:
            continue
        minutes = _safe_float(section.get(key))
        if minutes is None or minutes < 0:
            LOGGER.warning("Ignoring invalid schedule value %s=%r", key, section.get(key))
            continue
        overrides[attribute] = timedelta(minutes=minutes)

    if "ikindi_fraction" in section:
        fraction = _safe_float(section.get("ikindi_fraction"))
        if fraction is None or not 0 <= fraction <= 1:
            LOGGER.warning("Ignoring invalid schedule value ikindi_fraction=%r", section.get("ikindi_fraction"))
        else:
            overrides["ikindi_fraction"] = fraction

    fallback_cfg = section.get("fallback_times")
    if isinstance(fallback_cfg, dict):
        fallback_times = dict(settings.fallback_times)
        for name, value in fallback_cfg.items():
            try:
                kind = PrayerKind(str(name).lower())
                hour, minute = (int(part) for part in str(value).split(":"))
                fallback_times[kind] = time(hour, minute)
            except (TypeError, ValueError):
                LOGGER.warning("Ignoring invalid fallback time %s=%r", name, value)
        overrides["fallback_times"] = fallback_times

    return replace(settings, **overrides)


def reminder_settings_from_config(config: Dict[str, Any]) -> List[ReminderSetting]:
    defaults = {setting.kind: setting for setting in default_reminder_settings()}
    section = config.get("reminders") if isinstance(config, dict) else None
    if not isinstance(section, dict):
        return list(defaults.values())

    for name, entry in section.items():
        if not isinstance(entry, dict):
            continue
        try:
            kind = PrayerKind(str(name).lower())
            current = defaults[kind]
            defaults[kind] = ReminderSetting(
                kind=kind,
                enabled=bool(entry.get("enabled", current.enabled)),
                lead_time=LeadTime(int(entry.get("lead_minutes", current.lead_time.value))),
            )
        except (KeyError, TypeError, ValueError):
            LOGGER.warning("Ignoring invalid reminder config for %s: %s", name, entry)
    return [defaults[kind] for kind in PrayerKind]


def location_from_config(config: Dict[str, Any], catalog: LocationCatalog) -> Optional[GeoLocation]:
    """Resolve the configured location from a catalog city name or explicit coordinates."""
    location_cfg = config.get("location") if isinstance(config, dict) else None
    if not isinstance(location_cfg, dict):
        return None

    latitude = _safe_float(location_cfg.get("latitude"))
    longitude = _safe_float(location_cfg.get("longitude"))
    city_name = location_cfg.get("city")

    if latitude is None or longitude is None:
        city = catalog.find_by_name(str(city_name)) if city_name else None
        if city is None:
            LOGGER.warning("Configured city %r is not in the catalog", city_name)
            return None
        return city.location

    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        LOGGER.warning("Ignoring out-of-range coordinates lat=%s lon=%s", latitude, longitude)
        return None

    timezone = location_cfg.get("timezone") or system_timezone()
    return GeoLocation(
        latitude=latitude,
        longitude=longitude,
        timezone=str(timezone),
        name=str(city_name or ""),
    )


def system_timezone() -> str:
    try:
        tz_name = get_localzone_name()
        pytz.timezone(tz_name)
        LOGGER.debug("Resolved system timezone: %s", tz_name)
        return tz_name
    except Exception:
        LOGGER.warning("Falling back to UTC for system timezone resolution")
        return "UTC"


def _safe_float(value: Optional[object]) -> Optional[float]:
    try:
        if value in (None, ""):
            return None
        return float(value)
    except (TypeError, ValueError):
        return None
