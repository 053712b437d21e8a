from chat_recap.data_extraction import (
    PROGRESS_EVERY,
    elect_primary_pattern,
    extract_entries,
    merge_multiline_messages,
)
from chat_recap.models import RawEntry
from chat_recap.patterns import MESSAGE_PATTERNS, ParsePattern


def test_pattern_catalogue_is_ordered_and_unique() -> None:
    kinds = [spec.kind for spec in MESSAGE_PATTERNS]
    assert len(kinds) == len(set(kinds)) == len(ParsePattern)
    assert kinds[-2:] == [ParsePattern.SENDER_COLON, ParsePattern.SENDER_DASH]


def test_elect_primary_pattern_uses_majority() -> None:
    lines = [
        '12/03/2024, 21:24 - Alice: hi',
        '12/03/2024, 21:25 - Bob: hello',
        '[12/3/24, 21:26:00] Alice: odd one out',
    ]
    assert elect_primary_pattern(lines).kind is ParsePattern.ANDROID_COLON


def test_elect_primary_pattern_prefers_earlier_pattern_on_tie() -> None:
    lines = ['[12/3/24, 21:24:47] Alice: hi']
    assert elect_primary_pattern(lines).kind is ParsePattern.BRACKET_SECONDS_COLON


def test_merge_keeps_multiline_messages_together() -> None:
    lines = [
        '[12/3/24, 21:24:47] Alice: first line',
        'second line: with a colon',
        '[12/3/24, 21:25:00] Bob: reply',
    ]
    merged = merge_multiline_messages(lines)
    assert merged == [
        '[12/3/24, 21:24:47] Alice: first line\nsecond line: with a colon',
        '[12/3/24, 21:25:00] Bob: reply',
    ]


def test_merge_treats_sender_lines_as_openers_in_undated_exports() -> None:
    lines = ['Alice: hi', 'Bob: hey', 'Alice: how are you']
    assert merge_multiline_messages(lines) == lines


def test_merge_keeps_leading_colon_line() -> None:
    lines = ['Note: exported chat', '[12/3/24, 21:24:47] Alice: hi']
    assert merge_multiline_messages(lines) == lines


def test_extract_bracketed_entries() -> None:
    report = extract_entries(['[12/3/24, 21:24:47] Alice: hi there'])
    assert report.entries == [RawEntry('12/3/24', '21:24:47', 'Alice', 'hi there')]
    assert report.primary_pattern is ParsePattern.BRACKET_SECONDS_COLON


def test_extract_dotted_meridiem() -> None:
    report = extract_entries(['[13/03/25, 11:38:24 p.m.] Alice: late'])
    assert report.entries == [RawEntry('13/03/25', '11:38:24 p.m.', 'Alice', 'late')]


def test_extract_named_month_variants() -> None:
    report = extract_entries([
        '[April 2nd 2025 1:20pm] Mom: dinner?',
        '[april 2nd 2025 1:25pm]Mom-on my way',
        '[April 2nd 2025 1:30pm]Kylie-\U0001f440: ok',
        '[april, 2nd 2025 at 1:35pm]Mom-see you',
    ])
    assert report.entries == [
        RawEntry('April 2nd 2025', '1:20pm', 'Mom', 'dinner?'),
        RawEntry('april 2nd 2025', '1:25pm', 'Mom', 'on my way'),
        RawEntry('April 2nd 2025', '1:30pm', 'Kylie-\U0001f440', 'ok'),
        RawEntry('april, 2nd 2025 at', '1:35pm', 'Mom', 'see you'),
    ]


def test_extract_android_export() -> None:
    report = extract_entries([
        '12/03/2024, 21:24 - Alice: hi',
        '12/03/2024, 21:25 - Bob: hey - what is up',
    ])
    assert report.entries == [
        RawEntry('12/03/2024', '21:24', 'Alice', 'hi'),
        RawEntry('12/03/2024', '21:25', 'Bob', 'hey - what is up'),
    ]


def test_extract_cjk_export() -> None:
    report = extract_entries(['[2024年3月12日 21:24] 小明：你好'])
    assert report.entries == [RawEntry('2024年3月12日', '21:24', '小明', '你好')]


def test_extract_multiline_message_body() -> None:
    report = extract_entries(['[12/3/24, 21:24:47] Alice: line one\nline two'])
    assert report.entries[0].message == 'line one\nline two'


def test_extract_falls_back_to_colon_split_and_counts_unmatched() -> None:
    report = extract_entries(['Alice: hello', 'just some words'])
    assert report.entries == [RawEntry('', '', 'Alice', 'hello')]
    assert report.unmatched == 1


def test_extract_reports_progress() -> None:
    calls = []
    lines = [f'[12/3/24, 21:24:47] Alice: message {i}' for i in range(PROGRESS_EVERY * 2 + 1)]
    extract_entries(lines, progress=lambda stage, frac: calls.append((stage, frac)))
    assert [stage for stage, _ in calls] == ['extract', 'extract']
    assert all(0 < frac < 1 for _, frac in calls)


def test_extract_empty_input() -> None:
    report = extract_entries([])
    assert report.entries == []
    assert report.primary_pattern is None
