"""
Calendar utilities and holiday logic for workplace planning.
Pure functions for date handling; no I/O and no ambient clock.
"""

import math
import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple


class Location(str, Enum):
    """Where somebody is on a given day."""

    HOME = "home"
    DELFT = "delft"
    EINDHOVEN = "eindhoven"
    GENT = "gent"
    UTRECHT = "utrecht"
    ZWOLLE = "zwolle"
    OTHER = "other"
    OFF = "off"
    SCHEDULED_OFF = "scheduled_off"
    HOLIDAY = "holiday"  # derived, never stored


# Statuses that are a real place of work
WORKPLACES = frozenset({
    Location.HOME, Location.DELFT, Location.EINDHOVEN, Location.GENT,
    Location.UTRECHT, Location.ZWOLLE, Location.OTHER,
})

ABSENT = frozenset({Location.OFF, Location.SCHEDULED_OFF})

STORABLE = frozenset(loc for loc in Location if loc is not Location.HOLIDAY)

DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_YEAR = 1583  # first full Gregorian year
MAX_YEAR = 9999


def to_location(value) -> Location:
    """Parse a location tag, failing loudly on anything unknown."""
    if isinstance(value, Location):
        return value
    try:
        return Location(value)
    except ValueError:
        raise ValueError(f"Invalid location: {value!r}") from None


def date_key(day: date) -> str:
    """Canonical yyyy-MM-dd key for a date; a datetime drops its time part."""
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()


def parse_date_key(text: str) -> date:
    """
    Parse a canonical date key.

    Args:
        text: String in yyyy-MM-dd form (exactly 10 characters)

    Returns:
        The corresponding date

    Raises:
        ValueError: if the string is not in canonical form or not a real date
    """
    if not isinstance(text, str) or not DATE_KEY_RE.match(text):
        raise ValueError(f"Invalid date format: {text!r}")
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid date: {text!r} ({e})") from None


def check_year(year) -> int:
    """Validate a year and return it as an int (2024.0 becomes 2024)."""
    if isinstance(year, bool) or not isinstance(year, (int, float)):
        raise ValueError(f"Year must be an integer, got {year!r}")
    if isinstance(year, float):
        if math.isnan(year) or not year.is_integer():
            raise ValueError(f"Year must be an integer, got {year!r}")
        year = int(year)
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError(f"Year out of range ({MIN_YEAR}-{MAX_YEAR}): {year}")
    return year


def easter_sunday(year: int) -> date:
    """Easter Sunday for a Gregorian year (anonymous Gregorian algorithm)."""
    year = check_year(year)
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def holidays_for_year(year: int) -> Dict[str, str]:
    """
    Generate the public holidays for a year.

    Args:
        year: Year (e.g., 2024)

    Returns:
        Dictionary mapping yyyy-MM-dd to a holiday identifier
    """
    year = check_year(year)
    easter = easter_sunday(year)

    # King's Day moves to Saturday when it falls on a Sunday; a Saturday stays put
    kings_day = date(year, 4, 27)
    if kings_day.weekday() == 6:
        kings_day = date(year, 4, 26)

    return {
        date_key(date(year, 1, 1)): "new_years_day",
        date_key(easter + timedelta(days=1)): "easter_monday",
        date_key(kings_day): "kings_day",
        date_key(easter + timedelta(days=39)): "ascension_day",
        date_key(easter + timedelta(days=50)): "whit_monday",
        date_key(date(year, 12, 25)): "christmas_day",
        date_key(date(year, 12, 26)): "second_christmas_day",
    }


def holidays_for_years(years: Iterable[int]) -> Dict[str, str]:
    """Union of the holiday sets for several years."""
    merged = {}
    for year in years:
        merged.update(holidays_for_year(year))
    return merged


def is_holiday(day: date, holiday_set: Optional[Dict[str, str]] = None) -> bool:
    """Check if date is a public holiday."""
    if holiday_set is None:
        holiday_set = holidays_for_year(day.year)
    return date_key(day) in holiday_set


def is_weekend(day: date) -> bool:
    """Check if date is a weekend (Saturday or Sunday)."""
    return day.weekday() >= 5


def start_of_week(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def workdays_of_week(day: date) -> List[date]:
    """Monday to Friday of the week containing day."""
    monday = start_of_week(day)
    return [monday + timedelta(days=i) for i in range(5)]


def add_weeks(day: date, weeks: int) -> date:
    return day + timedelta(weeks=weeks)


def next_workday(day: date) -> date:
    """Step one day forward, skipping the weekend (Friday -> Monday)."""
    new_day = day + timedelta(days=1)
    if new_day.weekday() == 5:
        new_day += timedelta(days=2)
    elif new_day.weekday() == 6:
        new_day += timedelta(days=1)
    return new_day


def previous_workday(day: date) -> date:
    """Step one day back, skipping the weekend (Monday -> Friday)."""
    new_day = day - timedelta(days=1)
    if new_day.weekday() == 6:
        new_day -= timedelta(days=2)
    elif new_day.weekday() == 5:
        new_day -= timedelta(days=1)
    return new_day


def week_number(day: date) -> int:
    """ISO week number (weeks start on Monday)."""
    return day.isocalendar()[1]


RELATIVE_DAY_KEYS = {
    -2: "day_before_yesterday",
    -1: "yesterday",
    0: "today",
    1: "tomorrow",
    2: "day_after_tomorrow",
}


def relative_day_label(
    day: date,
    today: date,
    lang: str = "en",
    formatter: Optional[Callable[[date, str], str]] = None,
) -> str:
    """
    Label a date relative to today.

    Args:
        day: Date to label
        today: Reference date
        lang: Language tag for the fallback formatting
        formatter: Callable (date, lang) -> str used outside the -2..+2 window

    Returns:
        One of the RELATIVE_DAY_KEYS values, or the formatted long date
    """
    key = RELATIVE_DAY_KEYS.get((day - today).days)
    if key is not None:
        return key
    if formatter is None:
        from i18n import format_long_date
        formatter = format_long_date
    return formatter(day, lang)


def display_name(user) -> str:
    """Short name from the e-mail address: jan.de.vries@x.nl -> Jan."""
    email = getattr(user, "email", "") or ""
    name_part = email.split("@")[0].split(".")[0]
    if not name_part:
        return getattr(user, "name", "") or ""
    return name_part[:1].upper() + name_part[1:]


def dashboard_bounds(today: date) -> Tuple[date, date]:
    """First and last day the day overview may show (this week .. Friday next week)."""
    first = start_of_week(today)
    last = start_of_week(add_weeks(today, 1)) + timedelta(days=4)
    return first, last


def can_step_back(current: date, today: date) -> bool:
    first, _ = dashboard_bounds(today)
    return previous_workday(current) >= first


def can_step_forward(current: date, today: date) -> bool:
    _, last = dashboard_bounds(today)
    return next_workday(current) <= last


def planning_horizon_reached(current: date, today: date, weeks_ahead: int = 13) -> bool:
    """True when the week of current is the last week that may be planned."""
    return start_of_week(current) >= add_weeks(start_of_week(today), weeks_ahead)
