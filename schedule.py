"""
Schedule snapshot and planning edits.

A ScheduleSnapshot is an immutable point-in-time copy of
{user_id: {yyyy-MM-dd: Location}}. Edits never touch an existing snapshot;
they return a new one with a higher version.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from calc import (
    Location,
    date_key,
    display_name,
    holidays_for_years,
    is_weekend,
    parse_date_key,
    to_location,
    week_number,
    workdays_of_week,
)

logger = logging.getLogger(__name__)

PREFILL_YEARS = range(2024, 2031)

_EMPTY: Mapping[str, Location] = MappingProxyType({})


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str


def _freeze(data: Mapping[str, Mapping[str, Location]]):
    return MappingProxyType({uid: MappingProxyType(dict(days)) for uid, days in data.items()})


def _key(day) -> str:
    # accepts a date or an already formatted key; both end up validated
    if isinstance(day, date):
        return date_key(day)
    return date_key(parse_date_key(day))


@dataclass(frozen=True, eq=False)
class ScheduleSnapshot:
    """Read-only schedule map. Compared and hashed by identity."""

    data: Mapping[str, Mapping[str, Location]] = field(default_factory=lambda: _freeze({}))
    version: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]], version: int = 0) -> "ScheduleSnapshot":
        parsed = {}
        for user_id, days in data.items():
            parsed[user_id] = {_key(k): to_location(v) for k, v in (days or {}).items()}
        return cls(_freeze(parsed), version)

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]], users: Iterable[User] = ()) -> "ScheduleSnapshot":
        """
        Build a snapshot from store rows.

        Args:
            rows: Records with user_id, date and location
            users: Team members that should be present even without entries

        Returns:
            New snapshot (version 0)
        """
        parsed: Dict[str, Dict[str, Location]] = {u.id: {} for u in users}
        for row in rows:
            # PostgREST may hand back "YYYY-MM-DD" or a longer timestamp string
            raw = row["date"]
            key = _key(raw[:10] if isinstance(raw, str) else raw)
            parsed.setdefault(row["user_id"], {})[key] = to_location(row["location"])
        return cls(_freeze(parsed))

    def for_user(self, user_id: str) -> Mapping[str, Location]:
        return self.data.get(user_id, _EMPTY)

    def get(self, user_id: str, day) -> Optional[Location]:
        """Location for (user, day) or None when unset."""
        key = date_key(day) if isinstance(day, date) else day
        return self.for_user(user_id).get(key)

    def with_entry(self, user_id: str, day, location) -> "ScheduleSnapshot":
        """Merge one entry into a copy of this snapshot."""
        key = _key(day)
        location = to_location(location)
        data = dict(self.data)
        days = dict(self.for_user(user_id))
        days[key] = location
        data[user_id] = MappingProxyType(days)
        logger.debug("Snapshot v%d -> v%d: %s %s=%s", self.version, self.version + 1, user_id, key, location.value)
        return ScheduleSnapshot(MappingProxyType(data), self.version + 1)

    def with_entries(self, user_id: str, entries: Iterable[Tuple[str, Location]]) -> "ScheduleSnapshot":
        snapshot = self
        for key, location in entries:
            snapshot = snapshot.with_entry(user_id, key, location)
        return snapshot

    def user_ids(self) -> List[str]:
        return list(self.data)

    def as_dict(self) -> Dict[str, Dict[str, Location]]:
        return {uid: dict(days) for uid, days in self.data.items()}

    def __repr__(self) -> str:
        entries = sum(len(days) for days in self.data.values())
        return f"ScheduleSnapshot(version={self.version}, users={len(self.data)}, entries={entries})"


def prefill_holidays(
    snapshot: ScheduleSnapshot,
    users: Iterable[User],
    years: Iterable[int] = PREFILL_YEARS,
) -> ScheduleSnapshot:
    """
    Mark weekday public holidays for every user that has nothing planned.
    Client-side only: the result is never written back to the store.
    """
    holiday_keys = [
        key for key in sorted(holidays_for_years(years))
        if not is_weekend(parse_date_key(key))
    ]
    data = snapshot.as_dict()
    for user in users:
        days = data.setdefault(user.id, {})
        for key in holiday_keys:
            days.setdefault(key, Location.HOLIDAY)
    return ScheduleSnapshot(_freeze(data), snapshot.version + 1)


def copy_week_entries(snapshot: ScheduleSnapshot, user_id: str, week_day: date) -> List[Tuple[str, Location]]:
    """Last week's entries of a user moved onto the week containing week_day."""
    entries = []
    this_week = workdays_of_week(week_day)
    last_week = workdays_of_week(week_day - timedelta(weeks=1))
    for last_day, current_day in zip(last_week, this_week):
        location = snapshot.get(user_id, last_day)
        if location is None or location is Location.HOLIDAY:
            continue
        entries.append((date_key(current_day), location))
    return entries


def vacation_week_entries(week_day: date) -> List[Tuple[str, Location]]:
    return [(date_key(day), Location.OFF) for day in workdays_of_week(week_day)]


def team_week_text(
    snapshot: ScheduleSnapshot,
    users: Sequence[User],
    week_day: date,
    lang: str = "en",
    translate: Optional[Callable[..., str]] = None,
    day_label: Optional[Callable[[date, str], str]] = None,
) -> str:
    """
    Tab separated team overview for one week, ready for the clipboard.

    Args:
        snapshot: Schedule snapshot
        users: Team members, one row each in the given order
        week_day: Any date in the week to export
        lang: Language tag
        translate: Callable (key, lang, section=None) for the UI texts
        day_label: Callable (date, lang) for the column headers

    Returns:
        Multi-line string, '-' for days without an entry
    """
    if translate is None or day_label is None:
        import i18n
        translate = translate or i18n.translate
        day_label = day_label or i18n.format_short_day

    workdays = workdays_of_week(week_day)
    lines = [
        f"{translate('team_overview', lang)} - {translate('week', lang)} {week_number(week_day)}",
        "",
        "\t" + "\t".join(day_label(day, lang) for day in workdays),
    ]
    for user in users:
        cells = []
        for day in workdays:
            location = snapshot.get(user.id, day)
            cells.append(translate(location.value, lang, section="locations") if location else "-")
        lines.append(display_name(user) + "\t" + "\t".join(cells))
    return "\n".join(lines) + "\n"
