import json
from datetime import datetime, timedelta

import numpy as np
import pytest

from chat_recap.analysis_models import DAY_NAMES
from chat_recap.analysis_overview import compute_overview, span_days
from chat_recap.chat_analyzer import ChatRecapAnalyzer, analyze_chat_data
from chat_recap.config import EngineConfig
from chat_recap.models import InsufficientParticipantsError, NormalizedMessage
from chat_recap.nlp_analysis import compute_sentiment_score
from chat_recap.response_analysis import compute_response_time
from chat_recap.text_analysis import compute_text_analysis, extract_emojis, extract_words
from chat_recap.time_analysis import compute_time_analysis, response_pattern, time_distribution

# A Tuesday
BASE = datetime(2024, 3, 12, 9, 0, 0)


def _msg(sender: str, text: str, minutes: float = 0, **kwargs) -> NormalizedMessage:
    date = BASE + timedelta(minutes=minutes)
    return NormalizedMessage(date.isoformat(), sender, text, date, **kwargs)


def _conversation():
    return [
        _msg('Alice', 'good morning love \U0001f60a', 0),
        _msg('Bob', 'morning! coffee?', 2),
        _msg('Alice', 'yes please \U0001f60a\U0001f60a', 5),
        _msg('Bob', 'great, coffee at nine', 9),
        _msg('Alice', 'see you tonight', 60 * 24 + 600),
    ]


# Overview

def test_overview_counts_and_senders() -> None:
    overview = compute_overview(_conversation())
    assert overview.total_messages == 5
    assert overview.total_words == 16
    assert overview.sender1.name == 'Alice'
    assert overview.sender1.messages == 3
    assert overview.sender2.name == 'Bob'
    assert overview.sender2.words == 6
    assert overview.most_active_day == 'tuesday'
    # Span of 1 day 10 hours rounds up to 2 days
    assert overview.avg_messages_per_day == 2.5


def test_overview_uses_first_two_senders_only() -> None:
    messages = [
        _msg('Alice', 'one', 0),
        _msg('Bob', 'two', 1),
        _msg('Carol', 'three words here', 2),
        _msg('Alice', 'four', 3),
    ]
    overview = compute_overview(messages)
    assert overview.total_messages == 4
    assert overview.total_words == 6
    assert {overview.sender1.name, overview.sender2.name} == {'Alice', 'Bob'}
    assert overview.sender1.messages + overview.sender2.messages == 3


def test_overview_requires_two_senders() -> None:
    with pytest.raises(InsufficientParticipantsError):
        compute_overview([_msg('Alice', 'hello', 0), _msg('Alice', 'anyone?', 1)])


def test_overview_empty_is_zeroed() -> None:
    overview = compute_overview([])
    assert overview.total_messages == 0
    assert overview.sender1.name == 'User 1'
    assert overview.response_time.label == '0 minutes'


def test_span_days_rounds_up() -> None:
    assert span_days(BASE, BASE + timedelta(hours=1)) == 1
    assert span_days(BASE, BASE) == 0
    assert span_days(None, BASE) == 0


# Response time

def test_response_time_in_minutes() -> None:
    response = compute_response_time(_conversation())
    # Replies after 2, 3 and 4 minutes; the next-day message is past the cutoff
    assert response.samples == 3
    assert response.average_minutes == pytest.approx(3.0)
    assert response.label == '3 minutes'


def test_response_time_in_seconds() -> None:
    messages = [_msg('Alice', 'hi', 0), _msg('Bob', 'hi', 0.5)]
    assert compute_response_time(messages).label == '30 seconds'


def test_response_time_ignores_same_sender_and_fallback_dates() -> None:
    messages = [
        _msg('Alice', 'hi', 0),
        _msg('Alice', 'hello?', 1),
        _msg('Bob', 'sorry', 30, date_resolved=False),
    ]
    response = compute_response_time(messages)
    assert response.samples == 0
    assert response.label == '0 minutes'


def test_response_time_cutoff_is_configurable() -> None:
    messages = [_msg('Alice', 'hi', 0), _msg('Bob', 'hey', 90)]
    assert compute_response_time(messages).samples == 0
    assert compute_response_time(messages, cutoff_seconds=2 * 3600).samples == 1


# Text

def test_extract_words_and_emojis() -> None:
    assert extract_words("It's a GREAT day, isn't it?") == ['great', 'day', 'isn']
    assert extract_words('the coffee and the cake', remove_stopwords=True) == ['coffee', 'cake']
    assert extract_emojis('\U0001f602 lol \U0001f602 \u2764\ufe0f') == ['\u2764\ufe0f', '\U0001f602', '\U0001f602']


def test_text_analysis_overall_and_per_sender() -> None:
    text = compute_text_analysis(_conversation())
    assert text.common_words[0].word == 'morning'
    assert text.common_words[0].count == 2
    assert text.top_emojis[0].emoji == '\U0001f60a'
    assert text.top_emojis[0].count == 3
    assert text.sender1.name == 'Alice'
    assert [e.count for e in text.sender1.top_emojis] == [3]
    assert text.sender2.top_emojis == ()


def test_text_analysis_respects_list_sizes() -> None:
    config = EngineConfig(top_words=2, top_sender_words=1)
    text = compute_text_analysis(_conversation(), config)
    assert len(text.common_words) == 2
    assert len(text.sender1.common_words) == 1


def test_text_analysis_empty() -> None:
    text = compute_text_analysis([])
    assert text.common_words == ()
    assert text.word_count == 0
    assert text.sender2.name == 'User 2'


# Sentiment

def test_sentiment_score_range() -> None:
    assert compute_sentiment_score([]) == 0.7
    assert compute_sentiment_score([_msg('Alice', '...', 0)]) == 0.7
    assert compute_sentiment_score([_msg('Alice', 'love love', 0)]) == pytest.approx(0.9)
    assert compute_sentiment_score([_msg('Alice', 'nice one here today', 0)]) == pytest.approx(0.9)
    score = compute_sentiment_score(_conversation())
    assert 0.7 < score <= 0.9


# Time

def test_time_analysis_histograms() -> None:
    analysis = compute_time_analysis(_conversation())
    assert analysis.most_active_hour == 9
    assert analysis.most_active_day == 'tuesday'
    assert analysis.most_active_date == '2024-03-12'
    assert analysis.most_messages_count == 4
    assert [d.date for d in analysis.daily_activity] == ['2024-03-12', '2024-03-13']
    assert len(analysis.hourly_activity) == 24
    assert sum(h.count for h in analysis.hourly_activity) == 5
    assert [w.day for w in analysis.weekday_hour_heatmap] == list(DAY_NAMES)
    tuesday = analysis.weekday_hour_heatmap[2]
    assert tuesday.hours[9].count == 4
    assert analysis.response_pattern == 'morning_active'
    assert analysis.conversation_count == 2
    assert analysis.conversation_length == 9.0


def test_time_analysis_skips_fallback_dates() -> None:
    messages = [_msg('Alice', 'hi', 0), _msg('Bob', 'hey', 0, date_resolved=False)]
    analysis = compute_time_analysis(messages)
    assert sum(h.count for h in analysis.hourly_activity) == 1


def test_time_analysis_empty() -> None:
    analysis = compute_time_analysis([])
    assert [b.percentage for b in analysis.time_distribution] == [25, 25, 25, 25]
    assert analysis.daily_activity == ()
    assert len(analysis.weekday_hour_heatmap) == 7
    assert all(len(w.hours) == 24 for w in analysis.weekday_hour_heatmap)
    assert analysis.most_active_date is None


def test_time_distribution_buckets() -> None:
    hourly = np.zeros(24, dtype=int)
    hourly[6] = 1
    hourly[13] = 1
    hourly[18] = 1
    hourly[23] = 1
    assert [(b.time, b.percentage) for b in time_distribution(hourly)] == [
        ('morning', 25), ('afternoon', 25), ('evening', 25), ('night', 25),
    ]


def test_response_pattern_thresholds() -> None:
    hourly = np.zeros(24, dtype=int)
    assert response_pattern(hourly) == 'consistent'
    hourly[19] = 4
    hourly[8] = 2
    assert response_pattern(hourly) == 'evening_active'
    hourly[8] = 3
    assert response_pattern(hourly) == 'consistent'


# Aggregate

def test_analyze_chat_data_folds_sections() -> None:
    data = analyze_chat_data(_conversation())
    assert data.start_date == BASE
    assert data.duration == 2
    assert data.overview.response_time.label == '3 minutes'
    assert data.text_analysis.sentiment_score > 0.7
    assert data.timespan_summary == 'March 12, 2024 to March 13, 2024 (2 days)'


def test_analyze_chat_data_empty_and_placeholder_only() -> None:
    placeholder = _msg('System', 'no_messages', synthetic=True, date_resolved=False)
    for messages in ([], [placeholder]):
        data = analyze_chat_data(messages)
        assert data.duration == 0
        assert data.timespan_summary == 'No messages to analyze'
        assert data.overview.total_messages == 0


def test_analysis_to_dict_is_json_serializable() -> None:
    payload = json.loads(json.dumps(analyze_chat_data(_conversation()).to_dict()))
    assert payload['start_date'] == '2024-03-12T09:00:00'
    assert payload['overview']['response_time']['label'] == '3 minutes'
    assert payload['time_analysis']['hourly_activity'][9] == {'hour': 9, 'count': 4}


def test_chat_recap_analyzer_end_to_end() -> None:
    export = '\n'.join([
        '[12/3/24, 21:24:47] Alice: hi Bob',
        '[12/3/24, 21:25:10] Bob: hey, nice to hear from you',
        '[12/4/24, 08:00:00] Alice: good morning',
    ])
    analyzer = ChatRecapAnalyzer(export)
    with pytest.raises(ValueError):
        analyzer.get_dataframe()

    analyzer.process(now=datetime(2025, 1, 1))
    analysis = analyzer.analyze()
    assert analysis.overview.total_messages == 3
    assert analyzer.get_dataframe()['sender'].tolist() == ['Alice', 'Bob', 'Alice']

    payload = json.loads(analyzer.to_json())
    assert payload['platform'] == 'whatsapp'
    assert 'auto_detected_whatsapp' in payload['warnings']
