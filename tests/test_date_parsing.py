from datetime import datetime

import pytest

from chat_recap.date_parsing import (
    DateTimeNormalizer,
    normalize_datetime,
    normalize_hour,
    normalize_year,
    parse_time_part,
)
from chat_recap.models import DateParseError

NOW = datetime(2025, 6, 1, 12, 0, 0)


def test_dotted_meridiem_is_day_first() -> None:
    value = normalize_datetime('13/03/25', '11:38:24 p.m.', now=NOW)
    assert value == datetime(2025, 3, 13, 23, 38, 24)


def test_named_month_with_ordinal_suffix() -> None:
    value = normalize_datetime('April 2nd 2025', '1:20pm', now=NOW)
    assert value == datetime(2025, 4, 2, 13, 20, 0)


def test_ambiguous_slash_date_reads_month_first() -> None:
    value = normalize_datetime('12/3/24', '21:24:47', now=NOW)
    assert value == datetime(2024, 12, 3, 21, 24, 47)


def test_ambiguous_date_without_generic_parse_uses_dayfirst() -> None:
    normalizer = DateTimeNormalizer(now=NOW, dayfirst=True, generic_parse=False)
    assert normalizer.resolve('12/3/24', '21:24:47') == datetime(2024, 3, 12, 21, 24, 47)

    normalizer = DateTimeNormalizer(now=NOW, dayfirst=False, generic_parse=False)
    assert normalizer.resolve('12/3/24', '21:24:47') == datetime(2024, 12, 3, 21, 24, 47)


def test_component_above_twelve_is_the_day() -> None:
    normalizer = DateTimeNormalizer(now=NOW, generic_parse=False)
    assert normalizer.resolve('25.12.2023', '08:05') == datetime(2023, 12, 25, 8, 5)
    assert normalizer.resolve('3.25.2023', '08:05') == datetime(2023, 3, 25, 8, 5)


def test_four_digit_leading_year() -> None:
    normalizer = DateTimeNormalizer(now=NOW)
    assert normalizer.resolve('2024-03-12', '21:24') == datetime(2024, 3, 12, 21, 24)
    assert normalizer.resolve('2024.03.12', '21:24') == datetime(2024, 3, 12, 21, 24)


def test_cjk_date() -> None:
    normalizer = DateTimeNormalizer(now=NOW)
    assert normalizer.resolve('2024年3月12日', '21:24') == datetime(2024, 3, 12, 21, 24)


def test_named_month_abbreviation_and_trailing_at() -> None:
    normalizer = DateTimeNormalizer(now=NOW)
    assert normalizer.resolve('Sept 5, 2024 at', '9:00 AM') == datetime(2024, 9, 5, 9, 0)


def test_named_month_with_comma_after_month() -> None:
    normalizer = DateTimeNormalizer(now=NOW)
    value, resolved = normalizer.normalize('april, 2nd 2025 at', '1:20pm')
    assert value == datetime(2025, 4, 2, 13, 20)
    assert resolved is True


def test_unparseable_date_falls_back_to_request_clock() -> None:
    normalizer = DateTimeNormalizer(now=NOW)
    value, resolved = normalizer.normalize('yesterday', 'noon')
    assert value == NOW
    assert resolved is False


def test_invalid_calendar_date_raises_from_resolve() -> None:
    normalizer = DateTimeNormalizer(now=NOW, generic_parse=False)
    with pytest.raises(DateParseError):
        normalizer.resolve('31/02/2024', '10:00')


def test_missing_parts_raise() -> None:
    with pytest.raises(DateParseError):
        DateTimeNormalizer(now=NOW).resolve('', '10:00')


def test_normalize_year_pivots_around_reference() -> None:
    assert normalize_year(24, 2025) == 2024
    assert normalize_year(76, 2025) == 1976
    assert normalize_year(75, 2025) == 2075
    assert normalize_year(1999, 2025) == 1999


def test_normalize_hour_edges() -> None:
    assert normalize_hour(12, 'am') == 0
    assert normalize_hour(12, 'pm') == 12
    assert normalize_hour(1, 'pm') == 13
    assert normalize_hour(9, None) == 9


def test_parse_time_part_variants() -> None:
    assert parse_time_part('21:24') == (21, 24, 0)
    assert parse_time_part('1:20pm') == (13, 20, 0)
    assert parse_time_part('11:38:24 p.m.') == (23, 38, 24)
    assert parse_time_part('12:05 AM') == (0, 5, 0)


def test_parse_time_part_rejects_meridiem_with_24_hour_clock() -> None:
    with pytest.raises(DateParseError):
        parse_time_part('13:00 pm')
