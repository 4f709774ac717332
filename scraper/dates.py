"""
Parsing of site-specific article dates.

Article pages print dates like ``"23 ЛИСТОПАДА 2025, 19:58"``: day, Ukrainian
month name in the genitive case, year, then a comma and ``HH:MM``.
"""

from datetime import datetime, tzinfo
from typing import Union
from zoneinfo import ZoneInfo

UKRAINIAN_MONTHS = {
    "СІЧНЯ": 1,
    "ЛЮТОГО": 2,
    "БЕРЕЗНЯ": 3,
    "КВІТНЯ": 4,
    "ТРАВНЯ": 5,
    "ЧЕРВНЯ": 6,
    "ЛИПНЯ": 7,
    "СЕРПНЯ": 8,
    "ВЕРЕСНЯ": 9,
    "ЖОВТНЯ": 10,
    "ЛИСТОПАДА": 11,
    "ГРУДНЯ": 12,
}


class DateParseError(ValueError):
    """Raised when date text does not follow ``D MONTHNAME YYYY, HH:MM``."""


def _to_int(value: str, what: str, source: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise DateParseError(f"Invalid {what} '{value}' in date: {source}") from exc


def parse_article_date(date_string: str, tz: Union[str, tzinfo] = "Europe/Kyiv") -> int:
    """Convert a Ukrainian date string into epoch milliseconds.

    Args:
        date_string: text such as ``"24 ЛИСТОПАДА 2025, 20:16"``
        tz: time zone the site prints its dates in

    Raises:
        DateParseError: on any structural or value error
    """
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz

    parts = date_string.strip().split(",")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise DateParseError(f"Invalid date format: {date_string}")

    date_part = parts[0].strip()
    time_part = parts[1].strip()

    date_elements = date_part.split(" ")
    if len(date_elements) != 3 or not all(date_elements):
        raise DateParseError(f"Invalid date part format: {date_part}")

    day = _to_int(date_elements[0], "day", date_string)
    month_name = date_elements[1].upper()
    year = _to_int(date_elements[2], "year", date_string)

    month = UKRAINIAN_MONTHS.get(month_name)
    if month is None:
        raise DateParseError(f"Unknown Ukrainian month: {month_name}")

    time_elements = time_part.split(":")
    if len(time_elements) != 2 or not all(time_elements):
        raise DateParseError(f"Invalid time format: {time_part}")

    hours = _to_int(time_elements[0], "hour", date_string)
    minutes = _to_int(time_elements[1], "minute", date_string)

    try:
        moment = datetime(year, month, day, hours, minutes, tzinfo=zone)
    except ValueError as exc:
        raise DateParseError(f"Out of range date: {date_string}") from exc
    return int(moment.timestamp() * 1000)


def is_recent_enough(created_ms: int, now_ms: int, window_ms: int) -> bool:
    """True when the article is younger than the staleness window."""
    return now_ms - created_ms < window_ms
