"""
Analysis Result Models

Plain data aggregates returned by the analysis functions. Nothing here holds
behaviour beyond conversion to JSON-ready dictionaries.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

DAY_NAMES = (
    'sunday',
    'monday',
    'tuesday',
    'wednesday',
    'thursday',
    'friday',
    'saturday',
)


@dataclass(frozen=True)
class ResponseTime:
    """
    Mean reply latency between alternating senders.

    `value` and `unit` are the display form: whole seconds under one minute,
    whole minutes otherwise.
    """

    average_minutes: float = 0.0
    samples: int = 0
    value: int = 0
    unit: str = 'minutes'

    @property
    def label(self) -> str:
        return f"{self.value} {self.unit}"


@dataclass(frozen=True)
class SenderOverview:
    name: str
    messages: int = 0
    words: int = 0
    words_per_message: float = 0.0


@dataclass(frozen=True)
class Overview:
    total_messages: int = 0
    total_words: int = 0
    words_per_message: float = 0.0
    sender1: SenderOverview = field(default_factory=lambda: SenderOverview('User 1'))
    sender2: SenderOverview = field(default_factory=lambda: SenderOverview('User 2'))
    avg_messages_per_day: float = 0.0
    most_active_day: str = 'monday'
    response_time: ResponseTime = field(default_factory=ResponseTime)


@dataclass(frozen=True)
class WordCount:
    word: str
    count: int


@dataclass(frozen=True)
class EmojiCount:
    emoji: str
    count: int


@dataclass(frozen=True)
class SenderText:
    name: str
    common_words: Tuple[WordCount, ...] = ()
    top_emojis: Tuple[EmojiCount, ...] = ()


@dataclass(frozen=True)
class TextAnalysis:
    common_words: Tuple[WordCount, ...] = ()
    top_emojis: Tuple[EmojiCount, ...] = ()
    word_count: int = 0
    sentiment_score: float = 0.7
    sender1: SenderText = field(default_factory=lambda: SenderText('User 1'))
    sender2: SenderText = field(default_factory=lambda: SenderText('User 2'))


@dataclass(frozen=True)
class HourCount:
    hour: int
    count: int


@dataclass(frozen=True)
class DailyCount:
    date: str
    count: int


@dataclass(frozen=True)
class TimeBucket:
    time: str
    percentage: int


@dataclass(frozen=True)
class WeekdayHours:
    day: str
    hours: Tuple[HourCount, ...]


@dataclass(frozen=True)
class TimeAnalysis:
    most_active_hour: int = 0
    most_active_day: str = 'monday'
    most_active_date: Optional[str] = None
    most_messages_count: int = 0
    response_pattern: str = 'consistent'
    # Average session length in minutes
    conversation_length: float = 0.0
    conversation_count: int = 0
    time_distribution: Tuple[TimeBucket, ...] = ()
    hourly_activity: Tuple[HourCount, ...] = ()
    daily_activity: Tuple[DailyCount, ...] = ()
    weekday_hour_heatmap: Tuple[WeekdayHours, ...] = ()


@dataclass(frozen=True)
class AnalysisData:
    """Everything derived from one message stream."""

    start_date: Optional[datetime]
    end_date: Optional[datetime]
    duration: int
    timespan_summary: str
    overview: Overview
    text_analysis: TextAnalysis
    time_analysis: TimeAnalysis

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form; dates are ISO-8601 strings."""
        data = asdict(self)
        for key in ('start_date', 'end_date'):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        data['overview']['response_time']['label'] = self.overview.response_time.label
        return data
