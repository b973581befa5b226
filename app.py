"""
Streamlit web app for team workplace planning.
Login, day overview, weekly planning, team grid and insights.
"""

import logging
from datetime import date
from typing import List

import streamlit as st

# Import our modules
import calc
import db
import i18n
import insights
from calc import Location
from schedule import ScheduleSnapshot, User, copy_week_entries, team_week_text, vacation_week_entries

logging.basicConfig(
    level=str(db.get_secret("LOG_LEVEL", "INFO")).upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")

PAGES = ["dashboard", "set_workplace", "team_overview", "insights"]
SELECTABLE = [loc for loc in Location if loc in calc.STORABLE]


def t(key: str, section: str = None):
    return i18n.translate(key, st.session_state.get("lang", "nl"), section)


def location_label(location) -> str:
    if not location:
        return "-"
    return t(Location(location).value, "locations")


def load_team():
    """Fetch members and schedule into the session."""
    try:
        members = db.fetch_team_members()
        st.session_state["team"] = members
        st.session_state["snapshot"] = db.fetch_schedule(members)
    except db.ScheduleStoreError as e:
        logger.error("Loading team failed: %s", e)
        st.error(f"{t('load_failed')}: {e}")
        st.session_state["team"] = []
        st.session_state["snapshot"] = ScheduleSnapshot()


def save_entries(entries) -> bool:
    """Optimistic update of the signed-in user's schedule. False when it failed."""
    user: User = st.session_state["user"]
    try:
        st.session_state["snapshot"] = db.apply_updates(
            st.session_state["snapshot"], user.id, entries, user.id
        )
        return True
    except db.ScheduleStoreError as e:
        # optimistic state stays visible
        if e.snapshot is not None:
            st.session_state["snapshot"] = e.snapshot
        st.error(f"{t('save_failed')}: {e}")
        return False
    except (ValueError, PermissionError) as e:
        st.error(f"{t('save_failed')}: {e}")
        return False


def sorted_team() -> List[User]:
    return sorted(st.session_state.get("team", []), key=lambda u: calc.display_name(u).casefold())


def render_login():
    st.title(t("app_title"))
    with st.form("login"):
        email = st.text_input(t("email"), value="", autocomplete="username")
        password = st.text_input(t("password"), type="password", autocomplete="current-password")
        submitted = st.form_submit_button(t("sign_in"))
    if submitted:
        try:
            st.session_state["user"] = db.login(email, password)
        except Exception as e:
            logger.warning("Login failed for %s: %s", email, e)
            st.error(f"{t('login_failed')}: {e}")
            return
        load_team()
        st.rerun()


def render_sidebar():
    with st.sidebar:
        st.markdown(f"### {calc.display_name(st.session_state['user'])}")
        st.radio(
            t("language"),
            options=list(i18n.LANGUAGES),
            key="lang",
            horizontal=True,
        )
        st.radio(
            "page",
            options=PAGES,
            format_func=t,
            key="page",
            label_visibility="collapsed",
        )
        if st.button(t("sign_out")):
            try:
                db.logout()
            except Exception as e:
                logger.warning("Sign out failed: %s", e)
            st.session_state.clear()
            st.rerun()


def render_dashboard(today: date):
    snapshot: ScheduleSnapshot = st.session_state["snapshot"]
    team = sorted_team()
    lang = st.session_state["lang"]
    current = st.session_state.setdefault("day", today)

    label = calc.relative_day_label(current, today, lang)
    if label in calc.RELATIVE_DAY_KEYS.values():
        label = t(label)

    col1, col2, col3 = st.columns([1, 3, 1])
    with col1:
        if st.button("◀", key="day_prev", disabled=not calc.can_step_back(current, today)):
            st.session_state["day"] = calc.previous_workday(current)
            st.rerun()
    with col2:
        st.markdown(f"#### {t('todays_overview')} {label}")
        st.caption(i18n.format_long_date(current, lang))
    with col3:
        if st.button("▶", key="day_next", disabled=not calc.can_step_forward(current, today)):
            st.session_state["day"] = calc.next_workday(current)
            st.rerun()

    rows = []
    for user in team:
        location = snapshot.get(user.id, current)
        away = location in insights.AWAY_FOR_WEEK
        rows.append({
            t("name"): calc.display_name(user) + (" ☀" if away else ""),
            t("location"): location_label(location),
        })
    st.dataframe(rows, hide_index=True, use_container_width=True)

    away = insights.vacationing_cached(snapshot, team, current)
    if away:
        st.markdown(f"**{t('on_vacation')}:** " + ", ".join(calc.display_name(u) for u in away))

    upcoming = insights.upcoming_off_days(snapshot, team, today)
    if upcoming:
        st.markdown(f"**{t('upcoming_off_days')}**")
        for user, day in upcoming:
            st.markdown(f"- {calc.display_name(user)}: {i18n.format_long_date(day, lang)}")


def render_set_workplace(today: date):
    user: User = st.session_state["user"]
    snapshot: ScheduleSnapshot = st.session_state["snapshot"]
    lang = st.session_state["lang"]
    current = st.session_state.setdefault("plan_day", today)

    col1, col2, col3 = st.columns([1, 3, 1])
    with col1:
        if st.button(t("previous"), key="plan_prev",
                     disabled=calc.start_of_week(current) <= calc.start_of_week(today)):
            st.session_state["plan_day"] = calc.add_weeks(current, -1)
            st.rerun()
    with col2:
        st.markdown(f"#### {t('week')} {calc.week_number(current)}")
    with col3:
        if st.button(t("next"), key="plan_next", disabled=calc.planning_horizon_reached(current, today)):
            st.session_state["plan_day"] = calc.add_weeks(current, 1)
            st.rerun()

    c1, c2 = st.columns(2)
    with c1:
        if st.button(t("copy_last_week"), use_container_width=True):
            if save_entries(copy_week_entries(snapshot, user.id, current)):
                st.rerun()
    with c2:
        if st.button(t("vacation_button"), use_container_width=True):
            if save_entries(vacation_week_entries(current)):
                st.rerun()

    options = [None] + SELECTABLE
    for day in calc.workdays_of_week(current):
        selected = snapshot.get(user.id, day)
        index = options.index(selected) if selected in options else 0
        cols = st.columns([2, 3])
        with cols[0]:
            st.markdown(f"**{i18n.weekday_name(day, lang).capitalize()}**")
            st.caption(i18n.format_long_date(day, lang))
        with cols[1]:
            if selected is Location.HOLIDAY:
                st.caption(location_label(selected))
            new_location = st.selectbox(
                t("select_location"),
                options=options,
                index=index,
                format_func=lambda loc: t("select_location") if loc is None else location_label(loc),
                key=f"loc_{calc.date_key(day)}_{snapshot.version}",
                label_visibility="collapsed",
            )
        if new_location is not None and new_location != selected:
            if save_entries([(calc.date_key(day), new_location)]):
                st.rerun()


def render_team_overview(today: date):
    snapshot: ScheduleSnapshot = st.session_state["snapshot"]
    lang = st.session_state["lang"]
    team = st.session_state.get("team", [])
    current = st.session_state.setdefault("team_day", today)

    col1, col2, col3 = st.columns([1, 3, 1])
    with col1:
        if st.button(t("previous"), key="team_prev"):
            st.session_state["team_day"] = calc.add_weeks(current, -1)
            st.rerun()
    with col2:
        st.markdown(f"#### {t('team_overview')} - {t('week')} {calc.week_number(current)}")
    with col3:
        if st.button(t("next"), key="team_next"):
            st.session_state["team_day"] = calc.add_weeks(current, 1)
            st.rerun()

    workdays = calc.workdays_of_week(current)
    day_names = t("day_names")
    rows = []
    for user in team:
        row = {t("name"): calc.display_name(user)}
        for name, day in zip(day_names, workdays):
            row[f"{name} {day:%d/%m}"] = location_label(snapshot.get(user.id, day))
        rows.append(row)
    st.dataframe(rows, hide_index=True, use_container_width=True)

    with st.expander(t("export")):
        st.code(team_week_text(snapshot, team, current, lang), language=None)


def render_insights(today: date):
    snapshot: ScheduleSnapshot = st.session_state["snapshot"]
    lang = st.session_state["lang"]
    year = st.selectbox(t("year"), options=list(range(today.year - 2, today.year + 2)), index=2)
    stats = insights.compute_insights(snapshot, year)

    st.subheader(t("location_popularity"))
    popularity = sorted(stats.location_popularity.items(), key=lambda item: -item[1])
    st.dataframe(
        [{t("location"): location_label(loc), t("count"): n} for loc, n in popularity],
        hide_index=True,
    )

    st.subheader(t("monthly_vacation"))
    st.dataframe(
        [{t("month"): name, t("count"): n}
         for name, n in zip(i18n.month_names(lang), stats.monthly_vacation)],
        hide_index=True,
    )

    st.subheader(t("top_vacation_days"))
    st.dataframe(
        [{t("date"): i18n.format_long_date(calc.parse_date_key(key), lang), t("count"): n}
         for key, n in stats.top_vacation_days],
        hide_index=True,
    )

    st.subheader(t("remote_by_weekday"))
    st.dataframe(
        [{t("weekday"): name, t("count"): n}
         for name, n in zip(t("day_names"), stats.remote_by_weekday)],
        hide_index=True,
    )


def main():
    """Main application function."""
    st.set_page_config(page_title="Team Workplace Planner", page_icon="🏢", layout="wide")
    st.session_state.setdefault("lang", str(db.get_secret("DEFAULT_LANGUAGE", "nl")))
    st.session_state.setdefault("page", PAGES[0])

    # Gate the app UI behind login
    if "user" not in st.session_state:
        render_login()
        st.stop()

    if "snapshot" not in st.session_state:
        load_team()

    render_sidebar()
    st.title(t("app_title"))

    today = date.today()
    page = st.session_state["page"]
    if page == "set_workplace":
        render_set_workplace(today)
    elif page == "team_overview":
        render_team_overview(today)
    elif page == "insights":
        render_insights(today)
    else:
        render_dashboard(today)


if __name__ == "__main__":
    main()
