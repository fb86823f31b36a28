"""Catalog of world cities with coordinates and timezones for prayer time lookups."""
from __future__ import annotations

import json
import logging
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from prayer_times import GeoLocation

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorldCity:
    id: str
    name: str
    country_code: str
    timezone: str
    latitude: float
    longitude: float

    @property
    def location(self) -> GeoLocation:
        return GeoLocation(
            latitude=self.latitude,
            longitude=self.longitude,
            timezone=self.timezone,
            name=self.name,
        )


BUNDLED_CITIES: List[WorldCity] = [
    WorldCity("istanbul", "İstanbul", "TR", "Europe/Istanbul", 41.0082, 28.9784),
    WorldCity("ankara", "Ankara", "TR", "Europe/Istanbul", 39.9334, 32.8597),
    WorldCity("izmir", "İzmir", "TR", "Europe/Istanbul", 38.4237, 27.1428),
    WorldCity("kocaeli", "Kocaeli", "TR", "Europe/Istanbul", 40.7654, 29.9408),
    WorldCity("makkah", "Makkah", "SA", "Asia/Riyadh", 21.3891, 39.8579),
    WorldCity("medina", "Medina", "SA", "Asia/Riyadh", 24.5247, 39.5692),
    WorldCity("dubai", "Dubai", "AE", "Asia/Dubai", 25.2048, 55.2708),
    WorldCity("doha", "Doha", "QA", "Asia/Qatar", 25.2854, 51.5310),
    WorldCity("london", "London", "GB", "Europe/London", 51.5072, -0.1276),
    WorldCity("paris", "Paris", "FR", "Europe/Paris", 48.8566, 2.3522),
    WorldCity("berlin", "Berlin", "DE", "Europe/Berlin", 52.5200, 13.4050),
    WorldCity("vienna", "Vienna", "AT", "Europe/Vienna", 48.2082, 16.3738),
    WorldCity("new-york", "New York", "US", "America/New_York", 40.7128, -74.0060),
    WorldCity("chicago", "Chicago", "US", "America/Chicago", 41.8781, -87.6298),
    WorldCity("los-angeles", "Los Angeles", "US", "America/Los_Angeles", 34.0522, -118.2437),
    WorldCity("toronto", "Toronto", "CA", "America/Toronto", 43.6532, -79.3832),
    WorldCity("cairo", "Cairo", "EG", "Africa/Cairo", 30.0444, 31.2357),
    WorldCity("johannesburg", "Johannesburg", "ZA", "Africa/Johannesburg", -26.2041, 28.0473),
    WorldCity("karachi", "Karachi", "PK", "Asia/Karachi", 24.8607, 67.0011),
    WorldCity("lahore", "Lahore", "PK", "Asia/Karachi", 31.5204, 74.3587),
    WorldCity("jakarta", "Jakarta", "ID", "Asia/Jakarta", -6.2088, 106.8456),
    WorldCity("kuala-lumpur", "Kuala Lumpur", "MY", "Asia/Kuala_Lumpur", 3.1390, 101.6869),
    WorldCity("singapore", "Singapore", "SG", "Asia/Singapore", 1.3521, 103.8198),
    WorldCity("tokyo", "Tokyo", "JP", "Asia/Tokyo", 35.6762, 139.6503),
    WorldCity("sydney", "Sydney", "AU", "Australia/Sydney", -33.8688, 151.2093),
]

DEFAULT_CITY_IDS = ["istanbul", "makkah", "london", "new-york"]

# Turkish letters that do not decompose into a base letter plus a combining mark.
_TURKISH_FOLDS = str.maketrans({"ı": "i", "İ": "i", "I": "i"})


def normalize_name(value: str) -> str:
    """Fold case and diacritics and drop spaces so that "İzmir" matches "izmir"."""
    folded = value.translate(_TURKISH_FOLDS)
    decomposed = unicodedata.normalize("NFKD", folded)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold().replace(" ", "")


class LocationCatalog:
    """Looks up cities by id or normalized name, with an optional JSON override file."""

    def __init__(self, fallback_path: Optional[Path] = None) -> None:
        self._fallback_path = fallback_path
        self._cities: Dict[str, WorldCity] = {city.id: city for city in BUNDLED_CITIES}
        for city in self._load_fallback_catalog():
            self._cities[city.id] = city

    def all(self) -> List[WorldCity]:
        return list(self._cities.values())

    def city(self, city_id: str) -> Optional[WorldCity]:
        return self._cities.get(city_id)

    def default_cities(self) -> List[WorldCity]:
        return [self._cities[city_id] for city_id in DEFAULT_CITY_IDS if city_id in self._cities]

    def find_by_name(self, name: Optional[str]) -> Optional[WorldCity]:
        """Return the city whose normalized name equals the normalized *name*."""
        if not name:
            return None
        wanted = normalize_name(name)
        for city in self._cities.values():
            if normalize_name(city.name) == wanted or city.id == wanted:
                return city
        LOGGER.debug("City %s not found in catalog", name)
        return None

    def search(self, query: str, excluding: Iterable[str] = ()) -> List[WorldCity]:
        excluded = set(excluding)
        pool = [city for city in self._cities.values() if city.id not in excluded]
        trimmed = query.strip()
        if not trimmed:
            return pool

        needle = normalize_name(trimmed)
        return [
            city
            for city in pool
            if needle in normalize_name(city.name)
            or needle in normalize_name(city.country_code)
            or needle in normalize_name(city.timezone)
        ]

    def _load_fallback_catalog(self) -> List[WorldCity]:
        if self._fallback_path is None:
            return []
        if not self._fallback_path.exists():
            LOGGER.debug("No location catalog override found at %s", self._fallback_path)
            return []
        try:
            with self._fallback_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError):
            LOGGER.exception("Failed to load location catalog override")
            return []

        entries = payload.get("cities", []) if isinstance(payload, dict) else []
        cities: List[WorldCity] = []
        for entry in entries:
            city = self._parse_city(entry)
            if city is not None:
                cities.append(city)
        LOGGER.debug("Loaded %d cities from %s", len(cities), self._fallback_path)
        return cities

    @staticmethod
    def _parse_city(entry: Any) -> Optional[WorldCity]:
        if not isinstance(entry, dict):
            return None
        try:
            name = str(entry["name"]).strip()
            if not name:
                return None
            return WorldCity(
                id=str(entry.get("id") or normalize_name(name)),
                name=name,
                country_code=str(entry.get("country_code", "")),
                timezone=str(entry["timezone"]),
                latitude=float(entry["latitude"]),
                longitude=float(entry["longitude"]),
            )
        except (KeyError, TypeError, ValueError):
            LOGGER.warning("Skipping invalid city record: %s", entry)
            return None
