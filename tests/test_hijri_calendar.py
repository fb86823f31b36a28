from datetime import date

from hijri_calendar import HijriDay, hijri_day


def test_first_of_ramadan_1445():
    hijri = hijri_day(date(2024, 3, 11))

    assert hijri == HijriDay(year=1445, month=9, day=1)
    assert hijri.special_day_key == "ramadan_start"
    assert hijri.format("tr") == "1 Ramazan 1445"
    assert hijri.format("en") == "1 Ramadan 1445"


def test_ordinary_day_has_no_special_key():
    hijri = hijri_day(date(2024, 6, 21))

    assert (hijri.year, hijri.month, hijri.day) == (1445, 12, 15)
    assert hijri.special_day_key is None
    assert hijri.month_name("de") == "Dhu l-hiddscha"


def test_special_day_keys():
    assert HijriDay(1446, 1, 10).special_day_key == "ashura"
    assert HijriDay(1445, 10, 1).special_day_key == "eid_fitr"
    assert HijriDay(1445, 12, 10).special_day_key == "eid_adha"


def test_unsupported_language_uses_turkish_month_names():
    assert HijriDay(1445, 9, 1).month_name("fr") == "Ramazan"


def test_dates_outside_umm_al_qura_table_return_none():
    assert hijri_day(date(1800, 1, 1)) is None
