"""
Derived views over a schedule snapshot: who is away, upcoming days off and
yearly statistics. Pure reductions; absent users or dates count as no data.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

from calc import (
    ABSENT,
    WORKPLACES,
    Location,
    check_year,
    date_key,
    holidays_for_year,
    holidays_for_years,
    parse_date_key,
    start_of_week,
    workdays_of_week,
)
from schedule import ScheduleSnapshot, User

# Derived holiday prefill counts as a day away for a full vacation week
AWAY_FOR_WEEK = ABSENT | {Location.HOLIDAY}


def vacationing_this_week(snapshot: ScheduleSnapshot, users: Sequence[User], week_day: date) -> List[User]:
    """
    Users that are away on every workday of the week containing week_day.

    Args:
        snapshot: Schedule snapshot
        users: Team members to check, order is preserved
        week_day: Any date in the week

    Returns:
        List of users with all five workdays off
    """
    workdays = workdays_of_week(week_day)
    if len(workdays) != 5:
        return []
    return [
        user for user in users
        if all(snapshot.get(user.id, day) in AWAY_FOR_WEEK for day in workdays)
    ]


def upcoming_off_days(
    snapshot: ScheduleSnapshot,
    users: Sequence[User],
    today: date,
    horizon_days: int = 90,
) -> List[Tuple[User, date]]:
    """
    First vacation day per user in [today, today + horizon_days).

    Public holidays do not count, including those in the next year when the
    window crosses New Year.

    Returns:
        (user, date) pairs sorted by date; ties keep the order of users
    """
    last = today + timedelta(days=max(horizon_days - 1, 0))
    holiday_set = holidays_for_years(range(today.year, last.year + 1))

    upcoming = []
    for user in users:
        days = snapshot.for_user(user.id)
        if not days:
            continue
        for offset in range(horizon_days):
            key = date_key(today + timedelta(days=offset))
            if days.get(key) is Location.OFF and key not in holiday_set:
                upcoming.append((user, today + timedelta(days=offset)))
                break

    # sorted() is stable, so equal dates stay in user order
    return sorted(upcoming, key=lambda item: item[1])


def _entries_in_year(snapshot: ScheduleSnapshot, year: int):
    prefix = f"{year:04d}-"
    for days in snapshot.data.values():
        for key, location in days.items():
            if key.startswith(prefix):
                yield key, location


def location_popularity(snapshot: ScheduleSnapshot, year: int) -> Dict[Location, int]:
    """Number of entries per workplace in year; days off are left out."""
    year = check_year(year)
    counts: Dict[Location, int] = {}
    for _, location in _entries_in_year(snapshot, year):
        if location in WORKPLACES:
            counts[location] = counts.get(location, 0) + 1
    return counts


def _vacation_days(snapshot: ScheduleSnapshot, year: int):
    holiday_set = holidays_for_year(year)
    for key, location in _entries_in_year(snapshot, year):
        if location is Location.OFF and key not in holiday_set:
            yield key


def monthly_vacation_distribution(snapshot: ScheduleSnapshot, year: int) -> List[int]:
    """Vacation days per month (index 0 = January), public holidays excluded."""
    year = check_year(year)
    counts = [0] * 12
    for key in _vacation_days(snapshot, year):
        counts[int(key[5:7]) - 1] += 1
    return counts


def top_vacation_days(snapshot: ScheduleSnapshot, year: int, n: int = 10) -> List[Tuple[str, int]]:
    """Dates with the most people off, most first; earlier date wins a tie."""
    year = check_year(year)
    per_day: Dict[str, int] = {}
    for key in _vacation_days(snapshot, year):
        per_day[key] = per_day.get(key, 0) + 1
    ranked = sorted(per_day.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:max(n, 0)]


def remote_work_by_weekday(snapshot: ScheduleSnapshot, year: int) -> List[int]:
    """Home entries per weekday, Monday first (five counts)."""
    year = check_year(year)
    counts = [0] * 5
    for key, location in _entries_in_year(snapshot, year):
        if location is not Location.HOME:
            continue
        weekday = parse_date_key(key).weekday()
        if weekday < 5:
            counts[weekday] += 1
    return counts


@dataclass(frozen=True)
class Insights:
    """Read-only statistics bundle; shared between callers through the cache."""

    year: int
    location_popularity: Mapping[Location, int]
    monthly_vacation: Tuple[int, ...]
    top_vacation_days: Tuple[Tuple[str, int], ...]
    remote_by_weekday: Tuple[int, ...]


# Snapshots hash by identity, so a new snapshot reference is always a miss
@lru_cache(maxsize=32)
def compute_insights(snapshot: ScheduleSnapshot, year: int) -> Insights:
    year = check_year(year)
    return Insights(
        year=year,
        location_popularity=MappingProxyType(location_popularity(snapshot, year)),
        monthly_vacation=tuple(monthly_vacation_distribution(snapshot, year)),
        top_vacation_days=tuple(top_vacation_days(snapshot, year)),
        remote_by_weekday=tuple(remote_work_by_weekday(snapshot, year)),
    )


@lru_cache(maxsize=64)
def _vacationing_for_week(snapshot: ScheduleSnapshot, users: Tuple[User, ...], monday: date) -> Tuple[User, ...]:
    return tuple(vacationing_this_week(snapshot, users, monday))


def vacationing_cached(snapshot: ScheduleSnapshot, users: Sequence[User], week_day: date) -> List[User]:
    """vacationing_this_week memoized on (snapshot, users, week)."""
    return list(_vacationing_for_week(snapshot, tuple(users), start_of_week(week_day)))
