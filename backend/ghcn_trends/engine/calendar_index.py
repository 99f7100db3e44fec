"""
Calendar arithmetic for daily observation records.

Dates are 8-character YYYYMMDD strings as they appear in GHCN daily files.
Days within a year are addressed by a 0-based day-of-year index, so a year
holds 365 slots (366 in leap years).
"""

import re
from itertools import accumulate

from ghcn_trends.config import MONTH_DAYS
from ghcn_trends.engine.exceptions import FormatError

DATE_PATTERN = re.compile(r"[0-9]{8}")

LEAP_MONTH_DAYS = MONTH_DAYS[:1] + (29,) + MONTH_DAYS[2:]

# Day-of-year index of the first day of each month
CUMULATIVE_MONTH_DAYS = (0,) + tuple(accumulate(MONTH_DAYS))[:-1]
CUMULATIVE_LEAP_MONTH_DAYS = (0,) + tuple(accumulate(LEAP_MONTH_DAYS))[:-1]


def is_leap_year(year: int) -> bool:
    """Gregorian leap-year rule: divisible by 400, or by 4 and not by 100."""
    if year % 400 == 0:
        return True
    if year % 100 == 0:
        return False
    return year % 4 == 0


def year_length(year: int) -> int:
    """Number of days in `year`."""
    return 366 if is_leap_year(year) else 365


def days_in_year_range(year1: int, year2: int) -> int:
    """Total number of days from the start of year1 to the end of year2, inclusive."""
    return sum(year_length(y) for y in range(year1, year2 + 1))


def parse_date(date: str) -> tuple[int, int, int]:
    """
    Split a YYYYMMDD string into (year, month, day).

    Raises:
        FormatError: if the string is not 8 digits or does not name a real
            calendar day.
    """
    if not isinstance(date, str) or not DATE_PATTERN.fullmatch(date):
        raise FormatError(f"Malformed date '{date}': expected 8-digit YYYYMMDD.")

    year = int(date[0:4])
    month = int(date[4:6])
    day = int(date[6:8])

    if not 1 <= month <= 12:
        raise FormatError(f"Malformed date '{date}': month {month} out of range.")

    month_days = LEAP_MONTH_DAYS if is_leap_year(year) else MONTH_DAYS
    if not 1 <= day <= month_days[month - 1]:
        raise FormatError(f"Malformed date '{date}': day {day} out of range.")

    return year, month, day


def day_of_year_index(date: str) -> int:
    """
    Return the 0-based index of `date` within its year.

    The result is in 0-364 for non-leap years and 0-365 for leap years.
    """
    year, month, day = parse_date(date)
    cumulative = CUMULATIVE_LEAP_MONTH_DAYS if is_leap_year(year) else CUMULATIVE_MONTH_DAYS
    return cumulative[month - 1] + (day - 1)


def date_from_day_of_year(year: int, index: int) -> str:
    """Inverse of day_of_year_index: the YYYYMMDD string for slot `index` of `year`."""
    if not 0 <= index < year_length(year):
        raise ValueError(f"Day index {index} out of range for year {year}.")

    cumulative = CUMULATIVE_LEAP_MONTH_DAYS if is_leap_year(year) else CUMULATIVE_MONTH_DAYS
    month = 12
    while cumulative[month - 1] > index:
        month -= 1
    day = index - cumulative[month - 1] + 1
    return f"{year:04d}{month:02d}{day:02d}"
