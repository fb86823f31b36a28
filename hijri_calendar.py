"""Umm al-Qura Hijri dates and the special days marked on the prayer calendar."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple

from hijridate import Gregorian, Hijri

LOGGER = logging.getLogger(__name__)

SPECIAL_DAYS: Dict[Tuple[int, int], str] = {
    (1, 1): "new_year",
    (1, 10): "ashura",
    (3, 12): "mawlid",
    (7, 27): "miraj",
    (8, 15): "baraat",
    (9, 1): "ramadan_start",
    (9, 27): "qadr",
    (10, 1): "eid_fitr",
    (12, 10): "eid_adha",
}

LIBRARY_LANGUAGES = ("en", "ar")

MONTH_NAMES: Dict[str, Tuple[str, ...]] = {
    "tr": (
        "Muharrem",
        "Safer",
        "Rebiülevvel",
        "Rebiülahir",
        "Cemaziyelevvel",
        "Cemaziyelahir",
        "Recep",
        "Şaban",
        "Ramazan",
        "Şevval",
        "Zilkade",
        "Zilhicce",
    ),
    "de": (
        "Muharram",
        "Safar",
        "Rabi al-awwal",
        "Rabi ath-thani",
        "Dschumada l-ula",
        "Dschumada th-thaniya",
        "Radschab",
        "Schaban",
        "Ramadan",
        "Schawwal",
        "Dhu l-qa'da",
        "Dhu l-hiddscha",
    ),
}


@dataclass(frozen=True)
class HijriDay:
    year: int
    month: int
    day: int

    @property
    def special_day_key(self) -> Optional[str]:
        return SPECIAL_DAYS.get((self.month, self.day))

    def month_name(self, language: str = "tr") -> str:
        if language in LIBRARY_LANGUAGES:
            return Hijri(self.year, self.month, self.day).month_name(language)
        names = MONTH_NAMES.get(language) or MONTH_NAMES["tr"]
        return names[self.month - 1]

    def format(self, language: str = "tr") -> str:
        """Return a long-form date such as ``1 Ramazan 1445``."""
        return f"{self.day} {self.month_name(language)} {self.year}"


def hijri_day(day: date) -> Optional[HijriDay]:
    """Convert a Gregorian calendar day, or return ``None`` outside the Umm al-Qura table."""
    try:
        converted = Gregorian(day.year, day.month, day.day).to_hijri()
    except OverflowError:
        LOGGER.warning("No Umm al-Qura date available for %s", day)
        return None
    return HijriDay(year=converted.year, month=converted.month, day=converted.day)
