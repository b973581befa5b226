"""
Localization helpers: date rendering through Babel and the UI text table.
"""

from datetime import date
from typing import List, Optional

from babel.dates import format_date, get_month_names

LANGUAGES = ("en", "nl")


def _check_lang(lang: str) -> str:
    if lang not in LANGUAGES:
        raise ValueError(f"Unsupported language: {lang!r}")
    return lang


def format_long_date(day: date, lang: str = "en") -> str:
    """Long weekday date, e.g. 'Wednesday, January 3, 2024' / 'woensdag 3 januari 2024'."""
    return format_date(day, format="full", locale=_check_lang(lang))


def format_short_day(day: date, lang: str = "en") -> str:
    """Abbreviated weekday plus day/month, e.g. 'Mon 05/02'."""
    return format_date(day, "EEE dd/MM", locale=_check_lang(lang))


def weekday_name(day: date, lang: str = "en") -> str:
    return format_date(day, "EEEE", locale=_check_lang(lang))


def month_names(lang: str = "en") -> List[str]:
    """Twelve month names, January first."""
    names = get_month_names("wide", locale=_check_lang(lang))
    return [names[m] for m in range(1, 13)]


TRANSLATIONS = {
    "en": {
        "app_title": "Team Workplace Planner",
        "sign_in": "Sign in",
        "sign_out": "Sign out",
        "email": "Email",
        "password": "Password",
        "dashboard": "Dashboard",
        "set_workplace": "Set workplace",
        "team_overview": "Team overview",
        "insights": "Insights",
        "todays_overview": "Overview for",
        "today": "Today",
        "yesterday": "Yesterday",
        "tomorrow": "Tomorrow",
        "day_before_yesterday": "Day before yesterday",
        "day_after_tomorrow": "Day after tomorrow",
        "on_vacation": "On vacation this week",
        "upcoming_off_days": "Upcoming days off",
        "week": "Week",
        "previous": "Previous",
        "next": "Next",
        "copy_last_week": "Copy last week",
        "vacation_button": "Mark week as vacation",
        "select_location": "Select location",
        "export": "Export week",
        "year": "Year",
        "location_popularity": "Location popularity",
        "monthly_vacation": "Vacation days per month",
        "top_vacation_days": "Busiest vacation days",
        "remote_by_weekday": "Working from home per weekday",
        "count": "Count",
        "date": "Date",
        "month": "Month",
        "weekday": "Weekday",
        "location": "Location",
        "name": "Name",
        "language": "Language",
        "login_failed": "Login failed",
        "save_failed": "Could not save your change",
        "load_failed": "Could not load the team schedule",
        "locations": {
            "home": "Home",
            "delft": "Delft",
            "eindhoven": "Eindhoven",
            "gent": "Ghent",
            "utrecht": "Utrecht",
            "zwolle": "Zwolle",
            "other": "Other",
            "off": "Off",
            "scheduled_off": "Scheduled off",
            "holiday": "Public holiday",
        },
        "day_names": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    },
    "nl": {
        "app_title": "Team Werkplekplanner",
        "sign_in": "Inloggen",
        "sign_out": "Uitloggen",
        "email": "E-mail",
        "password": "Wachtwoord",
        "dashboard": "Dashboard",
        "set_workplace": "Werkplek instellen",
        "team_overview": "Teamoverzicht",
        "insights": "Inzichten",
        "todays_overview": "Overzicht voor",
        "today": "Vandaag",
        "yesterday": "Gisteren",
        "tomorrow": "Morgen",
        "day_before_yesterday": "Eergisteren",
        "day_after_tomorrow": "Overmorgen",
        "on_vacation": "Deze week op vakantie",
        "upcoming_off_days": "Komende vrije dagen",
        "week": "Week",
        "previous": "Vorige",
        "next": "Volgende",
        "copy_last_week": "Kopieer vorige week",
        "vacation_button": "Markeer week als vakantie",
        "select_location": "Kies locatie",
        "export": "Week exporteren",
        "year": "Jaar",
        "location_popularity": "Populariteit van locaties",
        "monthly_vacation": "Vakantiedagen per maand",
        "top_vacation_days": "Drukste vakantiedagen",
        "remote_by_weekday": "Thuiswerken per weekdag",
        "count": "Aantal",
        "date": "Datum",
        "month": "Maand",
        "weekday": "Weekdag",
        "location": "Locatie",
        "name": "Naam",
        "language": "Taal",
        "login_failed": "Inloggen mislukt",
        "save_failed": "Je wijziging kon niet worden opgeslagen",
        "load_failed": "Het teamrooster kon niet worden geladen",
        "locations": {
            "home": "Thuis",
            "delft": "Delft",
            "eindhoven": "Eindhoven",
            "gent": "Gent",
            "utrecht": "Utrecht",
            "zwolle": "Zwolle",
            "other": "Anders",
            "off": "Vrij",
            "scheduled_off": "Ingeroosterd vrij",
            "holiday": "Feestdag",
        },
        "day_names": ["Maandag", "Dinsdag", "Woensdag", "Donderdag", "Vrijdag"],
    },
}


def translate(key: str, lang: str = "en", section: Optional[str] = None):
    """Look up UI text; unknown keys come back unchanged."""
    table = TRANSLATIONS[_check_lang(lang)]
    if section:
        table = table.get(section, {})
    return table.get(key, key)
