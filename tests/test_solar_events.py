from datetime import date, timedelta

import pytz

from prayer_times import GeoLocation
from solar_events import NoSolution, SolarEventCalculator, SolarEvents, day_of_year, sun_time_utc

ISTANBUL = GeoLocation(41.0082, 28.9784, "Europe/Istanbul", "İstanbul")
NEW_YORK = GeoLocation(40.7128, -74.0060, "America/New_York", "New York")
SYDNEY = GeoLocation(-33.8688, 151.2093, "Australia/Sydney", "Sydney")
TOKYO = GeoLocation(35.6762, 139.6503, "Asia/Tokyo", "Tokyo")
LOS_ANGELES = GeoLocation(34.0522, -118.2437, "America/Los_Angeles", "Los Angeles")
REYKJAVIK = GeoLocation(64.1466, -21.9426, "Atlantic/Reykjavik", "Reykjavik")


def clock_minutes(moment) -> float:
    return moment.hour * 60 + moment.minute + moment.second / 60


def assert_close(moment, hour: int, minute: int, tolerance: float = 2) -> None:
    assert abs(clock_minutes(moment) - (hour * 60 + minute)) <= tolerance, moment


def test_day_of_year_is_one_based_and_leap_aware():
    assert day_of_year(date(2024, 1, 1)) == 1
    assert day_of_year(date(2024, 6, 21)) == 173
    assert day_of_year(date(2023, 12, 31)) == 365


def test_sun_time_utc_for_istanbul_summer_solstice():
    sunrise = sun_time_utc(173, ISTANBUL.latitude, ISTANBUL.longitude, is_sunrise=True)
    sunset = sun_time_utc(173, ISTANBUL.latitude, ISTANBUL.longitude, is_sunrise=False)

    assert sunrise is not None and sunset is not None
    assert abs(sunrise - 2.535) < 0.02
    assert abs(sunset - 17.664) < 0.02
    assert 0 <= sunrise < 24 and 0 <= sunset < 24


def test_sun_time_utc_has_no_solution_near_the_pole():
    assert sun_time_utc(173, 85.0, 0.0, is_sunrise=True) is None
    assert sun_time_utc(173, 85.0, 0.0, is_sunrise=False) is None
    assert sun_time_utc(173, 80.0, 0.0, is_sunrise=True) is None
    assert sun_time_utc(356, 85.0, 0.0, is_sunrise=True) is None


def test_calculate_istanbul_returns_local_instants():
    result = SolarEventCalculator().calculate(ISTANBUL, date(2024, 6, 21))

    assert isinstance(result, SolarEvents)
    assert result.sunrise.date() == date(2024, 6, 21)
    assert result.sunrise.utcoffset() == timedelta(hours=3)
    assert_close(result.sunrise, 5, 32)
    assert_close(result.sunset, 20, 39)


def test_calculate_signals_no_solution_for_polar_day():
    location = GeoLocation(85.0, 15.0, "Arctic/Longyearbyen")
    result = SolarEventCalculator().calculate(location, date(2024, 6, 21))

    assert isinstance(result, NoSolution)
    assert result.day == date(2024, 6, 21)
    assert result.latitude == 85.0


def test_offsets_follow_daylight_saving_transition():
    calculator = SolarEventCalculator()
    before = calculator.calculate(NEW_YORK, date(2024, 3, 9))
    after = calculator.calculate(NEW_YORK, date(2024, 3, 11))

    assert isinstance(before, SolarEvents) and isinstance(after, SolarEvents)
    assert before.sunrise.utcoffset() == timedelta(hours=-5)
    assert after.sunrise.utcoffset() == timedelta(hours=-4)
    assert_close(before.sunrise, 6, 16)
    assert_close(after.sunrise, 7, 13)


def test_events_stay_on_the_requested_local_day_east_of_utc():
    calculator = SolarEventCalculator()
    for location in (SYDNEY, TOKYO):
        result = calculator.calculate(location, date(2024, 6, 21))
        assert isinstance(result, SolarEvents)
        assert result.sunrise.date() == date(2024, 6, 21)
        assert result.sunset.date() == date(2024, 6, 21)
        assert result.sunrise < result.sunset

    sydney = calculator.calculate(SYDNEY, date(2024, 6, 21))
    assert_close(sydney.sunrise, 7, 0)
    assert_close(sydney.sunset, 16, 54)


def test_events_stay_on_the_requested_local_day_west_of_utc():
    result = SolarEventCalculator().calculate(LOS_ANGELES, date(2024, 6, 21))

    assert isinstance(result, SolarEvents)
    assert result.sunset.date() == date(2024, 6, 21)
    assert result.sunrise < result.sunset
    assert result.sunset.astimezone(pytz.utc).date() == date(2024, 6, 22)


def test_sunset_after_local_midnight_rolls_to_next_day():
    result = SolarEventCalculator().calculate(REYKJAVIK, date(2024, 6, 21))

    assert isinstance(result, SolarEvents)
    assert result.sunrise < result.sunset
    assert result.sunset - result.sunrise > timedelta(hours=20)
