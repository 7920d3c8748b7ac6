# Role: Deterministic conversion of "availability months" (free text from the interview) into concrete
# departure/return dates for flight search. Dates are computed in the America/Sao_Paulo timezone.

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import date as dt_date
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

TIMEZONE = ZoneInfo("America/Sao_Paulo")

DEFAULT_TRIP_DURATION_DAYS = 7
DEPARTURE_DAY = 15
MIN_DAYS_AHEAD = 14
NO_MONTH_DAYS_AHEAD = 30

# Accent-free keys; Portuguese and English full names plus common abbreviations.
MONTH_MAP = {
    "janeiro": 1, "fevereiro": 2, "marco": 3, "abril": 4, "maio": 5, "junho": 6,
    "julho": 7, "agosto": 8, "setembro": 9, "outubro": 10, "novembro": 11, "dezembro": 12,
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "fev": 2, "feb": 2, "mar": 3, "abr": 4, "apr": 4, "mai": 5, "jun": 6, "jul": 7,
    "ago": 8, "aug": 8, "set": 9, "sep": 9, "sept": 9, "out": 10, "oct": 10, "nov": 11,
    "dez": 12, "dec": 12,
}


@dataclass(frozen=True)
class DateRange:
    departure_date: dt_date
    return_date: dt_date

    @property
    def departure_iso(self) -> str:
        return self.departure_date.isoformat()

    @property
    def return_iso(self) -> str:
        return self.return_date.isoformat()


def today_in_sao_paulo() -> dt_date:
    return datetime.now(TIMEZONE).date()


def normalize_month(month: str) -> str:
    # Key line: NFD + drop combining marks turns "Março" into "marco".
    decomposed = unicodedata.normalize("NFD", month or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip().rstrip(".")


def month_name_to_number(month: str) -> Optional[int]:
    return MONTH_MAP.get(normalize_month(month))


def _month_numbers(months: Optional[Iterable[str]]) -> List[int]:
    numbers = {month_name_to_number(m) for m in months or [] if isinstance(m, str)}
    return sorted(n for n in numbers if n is not None)


def calculate_departure_date(month: int, today: Optional[dt_date] = None) -> dt_date:
    # 1) Day 15 of the month in the current year
    # 2) Less than 14 days ahead (or past) -> same month next year
    today = today or today_in_sao_paulo()
    target = dt_date(today.year, month, DEPARTURE_DAY)
    if target < today + timedelta(days=MIN_DAYS_AHEAD):
        return dt_date(today.year + 1, month, DEPARTURE_DAY)
    return target


def _default_range(trip_duration_days: int, today: dt_date) -> DateRange:
    departure = today + timedelta(days=NO_MONTH_DAYS_AHEAD)
    return DateRange(departure, departure + timedelta(days=trip_duration_days))


def convert_availability_to_date_range(
    availability_months: Optional[Iterable[str]],
    trip_duration_days: int = DEFAULT_TRIP_DURATION_DAYS,
    today: Optional[dt_date] = None,
) -> DateRange:
    # Role: earliest recognised month (by month number) wins; nothing usable -> today + 30 days.
    today = today or today_in_sao_paulo()
    numbers = _month_numbers(availability_months)
    if not numbers:
        return _default_range(trip_duration_days, today)

    departure = calculate_departure_date(numbers[0], today)
    return DateRange(departure, departure + timedelta(days=trip_duration_days))


def convert_availability_to_multiple_date_ranges(
    availability_months: Optional[Iterable[str]],
    trip_duration_days: int = DEFAULT_TRIP_DURATION_DAYS,
    today: Optional[dt_date] = None,
) -> List[DateRange]:
    today = today or today_in_sao_paulo()
    numbers = _month_numbers(availability_months)
    if not numbers:
        return [_default_range(trip_duration_days, today)]

    ranges = []
    for month in numbers:
        departure = calculate_departure_date(month, today)
        ranges.append(DateRange(departure, departure + timedelta(days=trip_duration_days)))
    return ranges
