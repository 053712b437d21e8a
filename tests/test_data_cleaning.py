from chat_recap.data_cleaning import (
    clean_text,
    filter_noise,
    is_media_noise,
    is_system_noise,
    normalize_line_breaks,
    preprocess_text,
    remove_control_characters,
    split_to_lines,
)
from chat_recap.models import RawEntry


def test_normalize_line_breaks() -> None:
    assert normalize_line_breaks('a\r\nb\rc\n') == 'a\nb\nc\n'


def test_remove_control_characters_keeps_newlines_and_tabs() -> None:
    text = 'he\u200bllo\u202a\n\tworld\u0007'
    assert remove_control_characters(text) == 'hello\n\tworld'


def test_clean_text_strips_bom_and_collapses_spaces_per_line() -> None:
    raw = '\ufeff[1/2/24, 10:00]   Alice:\u00a0 hi\r\n  second\t\tline  '
    assert clean_text(raw) == '[1/2/24, 10:00] Alice: hi\nsecond line'


def test_clean_text_empty() -> None:
    assert clean_text('') == ''


def test_split_to_lines_drops_blank_lines() -> None:
    assert split_to_lines('a\n\n  \nb') == ['a', 'b']


def test_split_to_lines_resplits_flattened_export() -> None:
    text = '[1/2/24, 10:00] Alice: hi [1/2/24, 10:01] Bob: hey'
    assert split_to_lines(text) == ['[1/2/24, 10:00] Alice: hi', '[1/2/24, 10:01] Bob: hey']


def test_noise_detection() -> None:
    assert is_media_noise('<Media omitted>')
    assert is_media_noise('image omitted')
    assert not is_media_noise('I omitted the image on purpose')
    assert is_system_noise('Messages and calls are end-to-end encrypted. Tap to learn more.')
    assert is_system_noise('Bob left')
    assert not is_system_noise('We left early, it was fun')


def test_filter_noise_counts_what_it_drops() -> None:
    entries = [
        RawEntry('1/2/24', '10:00', 'Alice', 'hello'),
        RawEntry('1/2/24', '10:01', 'Bob', '<Media omitted>'),
        RawEntry('1/2/24', '10:02', 'Bob', 'This message was deleted'),
        RawEntry('1/2/24', '10:03', 'Bob', 'see you'),
    ]
    kept, system_count, media_count = filter_noise(entries)
    assert [e.message for e in kept] == ['hello', 'see you']
    assert system_count == 1
    assert media_count == 1


def test_preprocess_text_accepts_bytes_and_none() -> None:
    assert preprocess_text(None) == ''
    assert preprocess_text(b'\xef\xbb\xbfhi  there\r\nbye') == 'hi there\nbye'
    assert preprocess_text(b'ok \xff') == 'ok \ufffd'
