from datetime import datetime, timedelta

from chat_recap.models import NormalizedMessage, WarningCode
from chat_recap.postprocessing import (
    levenshtein_distance,
    remove_duplicates,
    sort_messages,
    string_similarity,
    validate_messages,
)

BASE = datetime(2024, 3, 12, 21, 0, 0)


def _msg(sender: str, text: str, seconds: int = 0, **kwargs) -> NormalizedMessage:
    date = BASE + timedelta(seconds=seconds)
    return NormalizedMessage(date.isoformat(), sender, text, date, **kwargs)


def test_sort_is_stable_and_puts_undated_last() -> None:
    undated = NormalizedMessage('?', 'Alice', 'lost', None)
    a = _msg('Alice', 'first', 10)
    b = _msg('Bob', 'same time', 10)
    c = _msg('Bob', 'earliest', 0)
    assert sort_messages([undated, a, b, c]) == [c, a, b, undated]


def test_levenshtein_distance() -> None:
    assert levenshtein_distance('kitten', 'sitting') == 3
    assert levenshtein_distance('', 'abc') == 3
    assert levenshtein_distance('same', 'same') == 0


def test_string_similarity() -> None:
    assert string_similarity('', '') == 1.0
    assert string_similarity('abcd', 'abcx') == 0.75
    assert string_similarity('hello', '') == 0.0


def test_remove_duplicates_drops_near_copies_within_window() -> None:
    original = _msg('Alice', 'see you tomorrow', 0)
    copy = _msg('Alice', 'see you tomorrow!', 30)
    assert remove_duplicates([original, copy]) == [original]


def test_remove_duplicates_keeps_other_sender_and_far_copies() -> None:
    original = _msg('Alice', 'ok', 0)
    other_sender = _msg('Bob', 'ok', 5)
    later = _msg('Alice', 'ok', 61)
    assert remove_duplicates([original, other_sender, later]) == [original, other_sender, later]


def test_remove_duplicates_keeps_undated_messages() -> None:
    first = NormalizedMessage('?', 'Alice', 'ok', None)
    second = NormalizedMessage('?', 'Alice', 'ok', None)
    assert remove_duplicates([first, second]) == [first, second]


def test_remove_duplicates_keeps_fallback_dated_messages() -> None:
    first = _msg('Alice', 'ok', 0, date_resolved=False)
    reply = _msg('Bob', 'are you coming', 0, date_resolved=False)
    second = _msg('Alice', 'ok', 0, date_resolved=False)
    assert remove_duplicates([first, reply, second]) == [first, reply, second]


def test_fallback_message_does_not_shield_a_real_duplicate() -> None:
    original = _msg('Alice', 'thanks', 0)
    fallback = _msg('Alice', 'thanks', 10, date_resolved=False)
    copy = _msg('Alice', 'thanks', 20)
    assert remove_duplicates([original, fallback, copy]) == [original, fallback]


def test_surviving_pairs_satisfy_dedup_rule() -> None:
    messages = sort_messages([
        _msg('Alice', 'hello there', 0),
        _msg('Alice', 'hello there', 20),
        _msg('Alice', 'hello therE', 40),
        _msg('Bob', 'hello there', 45),
        _msg('Alice', 'something else entirely', 50),
        _msg('Alice', 'hello there', 200),
    ])
    kept = remove_duplicates(messages)
    for i, a in enumerate(kept):
        for b in kept[i + 1:]:
            assert (
                a.sender != b.sender
                or abs((a.date - b.date).total_seconds()) > 60
                or string_similarity(a.message, b.message) < 0.8
            )
    assert len(kept) == 4


def test_validate_reports_single_participant_and_short_timespan() -> None:
    warnings = validate_messages([_msg('Alice', 'a', 0), _msg('Alice', 'b', 60)])
    assert warnings == [WarningCode.SINGLE_PARTICIPANT, WarningCode.SHORT_TIMESPAN]


def test_validate_counts_declared_participants() -> None:
    messages = [_msg('Alice', 'a', 0), _msg('Alice', 'b', 2 * 86400)]
    assert validate_messages(messages, participants={'Alice', 'Bob'}) == []


def test_validate_flags_undated_and_empty() -> None:
    messages = [_msg('Alice', 'a', 0), NormalizedMessage('?', 'Bob', 'b', None)]
    assert WarningCode.UNDATED_MESSAGES in validate_messages(messages)
    assert validate_messages([]) == [WarningCode.NO_MESSAGES]


def test_validate_ignores_placeholder() -> None:
    placeholder = _msg('System', 'no_messages', synthetic=True, date_resolved=False)
    assert validate_messages([placeholder]) == [WarningCode.NO_MESSAGES]
