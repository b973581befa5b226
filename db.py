"""
Database helpers for Supabase integration.
Team profiles, schedule rows and the sign-in session.
"""

import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from supabase import create_client, Client
import streamlit as st

from calc import STORABLE, date_key, parse_date_key, to_location
from schedule import PREFILL_YEARS, ScheduleSnapshot, User, prefill_holidays

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000  # PostgREST default max rows per request


class ScheduleStoreError(RuntimeError):
    """A read or write against the store failed.

    For failed writes, ``snapshot`` holds the optimistic snapshot the caller
    was already showing; it is not rolled back.
    """

    def __init__(self, message: str, snapshot: Optional[ScheduleSnapshot] = None):
        super().__init__(message)
        self.snapshot = snapshot


def get_secret(name: str, default=None):
    # prefer Streamlit secrets, fallback to env vars
    try:
        return st.secrets[name]
    except Exception:
        return os.getenv(name, default)


def prefill_years() -> range:
    first = int(get_secret("PREFILL_FIRST_YEAR", PREFILL_YEARS.start))
    last = int(get_secret("PREFILL_LAST_YEAR", PREFILL_YEARS.stop - 1))
    return range(first, last + 1)


def get_supabase_client() -> Client:
    """Initialize and return Supabase client using Streamlit secrets."""
    url = get_secret("SUPABASE_URL")
    key = get_secret("SUPABASE_SERVICE_KEY")
    if not url or not key:
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_SERVICE_KEY.")
    return create_client(url, key)


def get_auth_client() -> Client:
    url = get_secret("SUPABASE_URL")
    anon = get_secret("SUPABASE_ANON_KEY")
    if not url or not anon:
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_ANON_KEY.")
    return create_client(url, anon)


# --- Session ---

def get_user_profile(auth_user) -> User:
    """
    Load the profile for a signed-in user, creating a minimal one if missing.

    Args:
        auth_user: Supabase auth user (id, email, user_metadata)

    Returns:
        User with id, name and email
    """
    supabase = get_supabase_client()
    email = getattr(auth_user, "email", None) or ""
    try:
        result = supabase.table("profiles").select("*").eq("id", auth_user.id).execute()
        if result.data:
            row = result.data[0]
            return User(
                id=auth_user.id,
                name=row.get("name") or email,
                email=row.get("email") or email,
            )

        meta = getattr(auth_user, "user_metadata", None) or {}
        name = (meta.get("full_name") or meta.get("name")) if isinstance(meta, dict) else None
        profile = User(id=auth_user.id, name=name or email, email=email)
        # keeps the team listing complete
        supabase.table("profiles").upsert(
            {"id": profile.id, "name": profile.name, "email": profile.email}
        ).execute()
        logger.info("Created profile for %s", profile.id)
        return profile
    except Exception as e:
        raise ScheduleStoreError(f"Error loading profile: {e}") from e


def login(email: str, password: str) -> User:
    sb = get_auth_client()
    res = sb.auth.sign_in_with_password({"email": email, "password": password})
    logger.info("Signed in %s", res.user.id)
    return get_user_profile(res.user)


def logout() -> None:
    get_auth_client().auth.sign_out()


# --- Team and schedule ---

def fetch_team_members() -> List[User]:
    """All profiles, in the order the store returns them."""
    supabase = get_supabase_client()
    try:
        result = supabase.table("profiles").select("id,name,email").execute()
    except Exception as e:
        raise ScheduleStoreError(f"Error fetching team members: {e}") from e
    return [
        User(id=row["id"], name=row.get("name") or row.get("email") or "", email=row.get("email") or "")
        for row in result.data or []
    ]


def _fetch_user_rows(supabase: Client, user_id: str) -> List[Dict[str, Any]]:
    rows = []
    start = 0
    while True:
        result = (
            supabase
            .table("schedules")
            .select("user_id,date,location")
            .eq("user_id", user_id)
            .range(start, start + PAGE_SIZE - 1)
            .execute()
        )
        page = result.data or []
        rows.extend(page)
        if len(page) < PAGE_SIZE:
            return rows
        start += PAGE_SIZE


def fetch_schedule(users: Sequence[User], years: Optional[range] = None) -> ScheduleSnapshot:
    """
    Load the schedule of every team member and prefill public holidays.

    Args:
        users: Team members (one query per member)
        years: Years to prefill with holidays (defaults to the configured range)

    Returns:
        Snapshot with holiday entries on otherwise empty weekday holidays
    """
    supabase = get_supabase_client()
    rows = []
    try:
        for user in users:
            rows.extend(_fetch_user_rows(supabase, user.id))
    except Exception as e:
        raise ScheduleStoreError(f"Error fetching schedule: {e}") from e

    snapshot = ScheduleSnapshot.from_rows(rows, users)
    logger.info("Loaded %d schedule rows for %d users", len(rows), len(users))
    return prefill_holidays(snapshot, users, years if years is not None else prefill_years())


def _check_write(user_id: str, location, current_user_id: Optional[str]):
    location = to_location(location)
    if location not in STORABLE:
        raise ValueError(f"Invalid location: {location.value!r} cannot be stored")
    if not current_user_id or current_user_id != user_id:
        raise PermissionError("Unauthorized write: users may only update their own schedule")
    return location


def update_entry(user_id: str, day, location, current_user_id: Optional[str]) -> None:
    """
    Write a single (user, date, location) entry.

    Args:
        user_id: Owner of the schedule
        day: Date or yyyy-MM-dd string
        location: Location tag (derived holiday tags are rejected)
        current_user_id: Signed-in user; only the owner may write

    Raises:
        ValueError: malformed date or location
        PermissionError: writing somebody else's schedule
        ScheduleStoreError: the store rejected the write
    """
    key = date_key(day) if isinstance(day, date) else date_key(parse_date_key(day))
    location = _check_write(user_id, location, current_user_id)

    supabase = get_supabase_client()
    try:
        supabase.table("schedules").upsert(
            {"user_id": user_id, "date": key, "location": location.value},
            on_conflict="user_id,date",
        ).execute()
    except Exception as e:
        raise ScheduleStoreError(f"Error updating schedule: {e}") from e


def apply_update(
    snapshot: ScheduleSnapshot,
    user_id: str,
    day,
    location,
    current_user_id: Optional[str],
) -> ScheduleSnapshot:
    """
    Optimistically merge an entry into a new snapshot, then persist it.

    Returns:
        The new snapshot. On a failed write a ScheduleStoreError carrying that
        same snapshot is raised instead; it is not rolled back.
    """
    location = _check_write(user_id, location, current_user_id)
    updated = snapshot.with_entry(user_id, day, location)
    try:
        update_entry(user_id, day, location, current_user_id)
    except ScheduleStoreError as e:
        logger.error("Failed to update schedule for %s on %s: %s", user_id, day, e)
        raise ScheduleStoreError(str(e), snapshot=updated) from e
    return updated


def apply_updates(
    snapshot: ScheduleSnapshot,
    user_id: str,
    entries,
    current_user_id: Optional[str],
) -> ScheduleSnapshot:
    """apply_update for several (date, location) entries; stops at the first failure."""
    for key, location in entries:
        snapshot = apply_update(snapshot, user_id, key, location, current_user_id)
    return snapshot
