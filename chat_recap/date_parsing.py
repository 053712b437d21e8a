"""
Date Parsing Module

Resolves the literal date and time substrings of free-text exports into
absolute timestamps.

Resolution order:
    1. named month dates ("April 2nd 2025" + "1:20pm")
    2. numeric DD/MM/YY dates paired with a dotted "a.m."/"p.m." marker
    3. CJK dates ("2024年3月12日")
    4. a lenient month-first parse of "{date}, {time}" via pandas
    5. component parsing: a component above 12 is the day, ties use `dayfirst`

`DateTimeNormalizer.resolve` raises DateParseError; `normalize` folds any
failure into the request clock so callers always get a value.
"""

import logging
import re
import warnings
from datetime import datetime
from typing import Optional, Tuple

import pandas as pd

from .models import DateParseError

LOGGER = logging.getLogger(__name__)

MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'sept': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}

_FULL_MONTHS = (
    'january', 'february', 'march', 'april', 'may', 'june', 'july',
    'august', 'september', 'october', 'november', 'december',
)

_NAMED_MONTH_DATE = re.compile(
    r'^([a-zA-Z]+)\.?,?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$'
)
_DOTTED_NUMERIC_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$')
_DOTTED_MERIDIEM = re.compile(r'[aApP]\.\s?[mM]\.')
_CJK_DATE = re.compile(r'^(\d{4})年(\d{1,2})月(\d{1,2})日$')
_GENERIC_DATE = re.compile(r'^(?:\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{1,2}-\d{1,2}|\d{4}/\d{1,2}/\d{1,2})$')
_NUMERIC_DATE = re.compile(r'(\d{1,4})[/\-.](\d{1,2})[/\-.](\d{1,4})')
_TIME = re.compile(
    r'^(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?\s*([aApP])?\.?\s?(?:[mM]\.?)?$'
)


def normalize_year(year: int, reference_year: int) -> int:
    """
    Expand a two-digit year around the reference year.

    The year is placed in the reference century, then moved back a century
    when that lands more than 50 years ahead.
    """
    if year >= 100:
        return year
    century = reference_year // 100 * 100
    year += century
    if year > reference_year + 50:
        year -= 100
    return year


def normalize_hour(hour: int, meridiem: Optional[str]) -> int:
    """Convert a 12-hour clock reading to 24-hour; 12am is 0, 12pm is 12."""
    if meridiem == 'pm' and hour < 12:
        return hour + 12
    if meridiem == 'am' and hour == 12:
        return 0
    return hour


def parse_time_part(time_part: str) -> Tuple[int, int, int]:
    """
    Parse "21:24", "21:24:47", "1:20pm", "11:38:24 p.m." and similar.

    Returns:
        Tuple of (hour, minute, second) on a 24-hour clock

    Raises:
        DateParseError: If the string is not a recognisable clock reading
    """
    match = _TIME.match(time_part.strip())
    if not match:
        raise DateParseError(f"Unrecognised time: {time_part!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    second = int(match.group(3)) if match.group(3) else 0
    meridiem = None
    if match.group(4):
        meridiem = 'pm' if match.group(4).lower() == 'p' else 'am'
        if hour > 12:
            raise DateParseError(f"Hour {hour} is not valid with {meridiem}")

    return normalize_hour(hour, meridiem), minute, second


class DateTimeNormalizer:
    """
    Resolves (date_part, time_part) pairs against one request clock.

    Args:
        now: Fallback returned for anything that cannot be resolved; also the
            reference year for two-digit years. Defaults to the current time.
        dayfirst: Order used when both leading date components are <= 12
        generic_parse: Whether to attempt the lenient month-first parse
    """

    def __init__(
        self,
        now: Optional[datetime] = None,
        dayfirst: bool = True,
        generic_parse: bool = True
    ):
        self.now = now or datetime.now()
        self.dayfirst = dayfirst
        self.generic_parse = generic_parse

    def resolve(self, date_part: str, time_part: str) -> datetime:
        """
        Interpret a date/time pair.

        Raises:
            DateParseError: If no strategy produces a valid calendar date
        """
        date_part = (date_part or '').strip().rstrip(',')
        time_part = (time_part or '').strip()
        if not date_part or not time_part:
            raise DateParseError("Missing date or time part")

        for strategy in (self._named_month, self._dotted_meridiem, self._cjk, self._generic):
            value = strategy(date_part, time_part)
            if value is not None:
                return value

        return self._components(date_part, time_part)

    def normalize(self, date_part: str, time_part: str) -> Tuple[datetime, bool]:
        """
        Total version of resolve.

        Returns:
            Tuple of (datetime, resolved); resolved is False when the request
            clock was substituted
        """
        try:
            return self.resolve(date_part, time_part), True
        except DateParseError as exc:
            LOGGER.debug("Falling back to request clock for %r, %r: %s", date_part, time_part, exc)
            return self.now, False

    def _build(self, year: int, month: int, day: int, time_part: str) -> datetime:
        hour, minute, second = parse_time_part(time_part)
        try:
            return datetime(year, month, day, hour, minute, second)
        except ValueError as exc:
            raise DateParseError(str(exc)) from exc

    def _named_month(self, date_part: str, time_part: str) -> Optional[datetime]:
        cleaned = re.sub(r'\s+at$', '', date_part, flags=re.IGNORECASE)
        match = _NAMED_MONTH_DATE.match(cleaned)
        if not match:
            return None
        name = match.group(1).lower()
        month = MONTHS.get(name[:4]) or MONTHS.get(name[:3])
        if month is None or not any(full.startswith(name) for full in _FULL_MONTHS):
            return None
        return self._build(int(match.group(3)), month, int(match.group(2)), time_part)

    def _dotted_meridiem(self, date_part: str, time_part: str) -> Optional[datetime]:
        match = _DOTTED_NUMERIC_DATE.match(date_part)
        if not match or not _DOTTED_MERIDIEM.search(time_part):
            return None
        day, month = int(match.group(1)), int(match.group(2))
        year = normalize_year(int(match.group(3)), self.now.year)
        return self._build(year, month, day, time_part)

    def _cjk(self, date_part: str, time_part: str) -> Optional[datetime]:
        match = _CJK_DATE.match(date_part)
        if not match:
            return None
        year, month, day = (int(g) for g in match.groups())
        return self._build(year, month, day, time_part)

    def _generic(self, date_part: str, time_part: str) -> Optional[datetime]:
        if not self.generic_parse or not _GENERIC_DATE.match(date_part):
            return None
        if _DOTTED_MERIDIEM.search(time_part):
            return None
        try:
            parse_time_part(time_part)
        except DateParseError:
            return None
        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            parsed = pd.to_datetime(f"{date_part}, {time_part}", errors='coerce', dayfirst=False)
        if parsed is None or pd.isna(parsed):
            return None
        value = parsed.to_pydatetime()
        if value.tzinfo is not None:
            value = value.replace(tzinfo=None)
        return value

    def _components(self, date_part: str, time_part: str) -> datetime:
        match = _NUMERIC_DATE.search(date_part)
        if not match:
            raise DateParseError(f"Unrecognised date: {date_part!r}")

        first_raw, second_raw, third_raw = match.groups()
        first, second, third = int(first_raw), int(second_raw), int(third_raw)

        if len(first_raw) == 4:
            year, month, day = first, second, third
        else:
            if first > 12:
                day, month = first, second
            elif second > 12:
                month, day = first, second
            elif self.dayfirst:
                day, month = first, second
            else:
                month, day = first, second
            year = normalize_year(third, self.now.year)

        return self._build(year, month, day, time_part)


def normalize_datetime(
    date_part: str,
    time_part: str,
    now: Optional[datetime] = None,
    dayfirst: bool = True
) -> datetime:
    """Convenience wrapper returning only the datetime of DateTimeNormalizer.normalize."""
    value, _ = DateTimeNormalizer(now=now, dayfirst=dayfirst).normalize(date_part, time_part)
    return value
