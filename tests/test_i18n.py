from datetime import date

import pytest

import i18n


def test_long_date_english():
    assert i18n.format_long_date(date(2024, 1, 3), "en") == "Wednesday, January 3, 2024"


def test_long_date_dutch():
    assert i18n.format_long_date(date(2024, 1, 3), "nl") == "woensdag 3 januari 2024"


def test_short_day_english():
    assert i18n.format_short_day(date(2024, 1, 8), "en") == "Mon 08/01"


def test_weekday_and_months():
    assert i18n.weekday_name(date(2024, 1, 8), "nl") == "maandag"
    names = i18n.month_names("en")
    assert len(names) == 12
    assert names[0] == "January" and names[11] == "December"


def test_unsupported_language():
    with pytest.raises(ValueError, match="Unsupported language"):
        i18n.format_long_date(date(2024, 1, 3), "fr")


def test_translate_fallbacks():
    assert i18n.translate("today", "nl") == "Vandaag"
    assert i18n.translate("off", "en", section="locations") == "Off"
    assert i18n.translate("no_such_key", "en") == "no_such_key"
    assert i18n.translate("no_such_key", "en", section="missing") == "no_such_key"


def test_every_location_translated():
    from calc import Location

    for lang in i18n.LANGUAGES:
        table = i18n.TRANSLATIONS[lang]["locations"]
        assert set(table) == {location.value for location in Location}
