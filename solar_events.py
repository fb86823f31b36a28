"""Sunrise and sunset estimation using the almanac sunrise equation."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Optional, Union

import pytz

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for annotations only
    from prayer_times import GeoLocation

LOGGER = logging.getLogger(__name__)

ZENITH = 90.833


@dataclass(frozen=True)
class SolarEvents:
    """Sunrise and sunset for one location and local day."""

    sunrise: datetime
    sunset: datetime


@dataclass(frozen=True)
class NoSolution:
    """The sun never crosses the horizon for this latitude and day."""

    day: date
    latitude: float
    longitude: float


SolarResult = Union[SolarEvents, NoSolution]


def day_of_year(day: date) -> int:
    return day.timetuple().tm_yday


def sun_time_utc(day_number: int, latitude: float, longitude: float, is_sunrise: bool) -> Optional[float]:
    """Return the UTC hour of sunrise or sunset, or ``None`` when the sun stays up or down.

    ``day_number`` is the 1-based ordinal of the local calendar day. The
    returned hour is fractional and normalised into ``[0, 24)``.
    """
    lng_hour = longitude / 15
    approx_time = _approximate_time(day_number, lng_hour, is_sunrise)

    mean_anomaly = 0.9856 * approx_time - 3.289

    true_longitude = mean_anomaly + 1.916 * _sin(mean_anomaly)
    true_longitude += 0.020 * _sin(2 * mean_anomaly)
    true_longitude += 282.634
    true_longitude = _normalize(true_longitude, 360)

    right_ascension = math.degrees(math.atan(0.91764 * _tan(true_longitude)))
    right_ascension = _normalize(right_ascension, 360)
    # right ascension must sit in the same quadrant as the true longitude
    l_quadrant = math.floor(true_longitude / 90) * 90
    ra_quadrant = math.floor(right_ascension / 90) * 90
    right_ascension += l_quadrant - ra_quadrant
    right_ascension /= 15

    sin_declination = 0.39782 * _sin(true_longitude)
    cos_declination = math.cos(math.asin(sin_declination))

    cos_hour_angle = (_cos(ZENITH) - sin_declination * _sin(latitude)) / (cos_declination * _cos(latitude))
    if cos_hour_angle > 1 or cos_hour_angle < -1:
        return None

    if is_sunrise:
        hour_angle = 360 - math.degrees(math.acos(cos_hour_angle))
    else:
        hour_angle = math.degrees(math.acos(cos_hour_angle))
    hour_angle /= 15

    local_mean_time = hour_angle + right_ascension - 0.06571 * approx_time - 6.622
    return _normalize(local_mean_time - lng_hour, 24)


class SolarEventCalculator:
    """Computes sunrise and sunset instants for a location's local calendar day."""

    def calculate(self, location: "GeoLocation", day: date) -> SolarResult:
        number = day_of_year(day)
        sunrise_utc = sun_time_utc(number, location.latitude, location.longitude, is_sunrise=True)
        sunset_utc = sun_time_utc(number, location.latitude, location.longitude, is_sunrise=False)
        if sunrise_utc is None or sunset_utc is None:
            LOGGER.debug(
                "No sunrise/sunset solution for lat=%s lon=%s on %s (sunrise=%s sunset=%s)",
                location.latitude,
                location.longitude,
                day,
                sunrise_utc,
                sunset_utc,
            )
            return NoSolution(day=day, latitude=location.latitude, longitude=location.longitude)

        tzinfo = location.tzinfo
        sunrise = self._to_instant(day, sunrise_utc, location.longitude, True, tzinfo)
        sunset = self._to_instant(day, sunset_utc, location.longitude, False, tzinfo)
        LOGGER.debug("Solar events for %s on %s: sunrise=%s sunset=%s", location.timezone, day, sunrise, sunset)
        return SolarEvents(sunrise=sunrise, sunset=sunset)

    @staticmethod
    def _to_instant(
        day: date,
        utc_hour: float,
        longitude: float,
        is_sunrise: bool,
        tzinfo: pytz.BaseTzInfo,
    ) -> datetime:
        """Place ``utc_hour`` on the UTC day closest to the event and express it in ``tzinfo``.

        The equation only yields an hour of the day. The event belongs near
        local solar 06:00 (sunrise) or 18:00 (sunset) of ``day``; that anchor
        decides whether the hour rolls back to the previous UTC day or
        forward to the next one.
        """
        midnight_utc = pytz.utc.localize(datetime.combine(day, time()))
        seconds = int(round(utc_hour * 3600))
        instant = midnight_utc + timedelta(seconds=seconds)

        anchor_hours = _approximate_time(0, longitude / 15, is_sunrise) * 24
        anchor = midnight_utc + timedelta(hours=anchor_hours)
        while instant - anchor > timedelta(hours=12):
            instant -= timedelta(days=1)
        while anchor - instant > timedelta(hours=12):
            instant += timedelta(days=1)
        return instant.astimezone(tzinfo)


def _approximate_time(day_number: float, lng_hour: float, is_sunrise: bool) -> float:
    return day_number + ((6.0 if is_sunrise else 18.0) - lng_hour) / 24


def _normalize(value: float, modulo: float) -> float:
    normalized = math.fmod(value, modulo)
    if normalized < 0:
        normalized += modulo
    return normalized


def _sin(degrees: float) -> float:
    return math.sin(math.radians(degrees))


def _cos(degrees: float) -> float:
    return math.cos(math.radians(degrees))


def _tan(degrees: float) -> float:
    return math.tan(math.radians(degrees))
