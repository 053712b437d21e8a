"""
Time Analysis Module

When the chat happens: hourly and daily activity, time-of-day split,
a weekday by hour heatmap and a coarse description of the rhythm.
"""

import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .analysis_models import (
    DAY_NAMES,
    DailyCount,
    HourCount,
    TimeAnalysis,
    TimeBucket,
    WeekdayHours,
)
from .config import DEFAULT_CONFIG, EngineConfig
from .data_wrangling import build_dataframe, resolved_rows
from .models import NormalizedMessage

LOGGER = logging.getLogger(__name__)

# (label, first hour, last hour exclusive); anything else is night
TIME_BUCKETS = (
    ('morning', 5, 12),
    ('afternoon', 12, 17),
    ('evening', 17, 22),
)

MORNING_HOURS = range(6, 12)
EVENING_HOURS = range(18, 22)
PATTERN_RATIO = 1.5


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _empty_heatmap() -> Tuple[WeekdayHours, ...]:
    return tuple(
        WeekdayHours(day, tuple(HourCount(hour, 0) for hour in range(24)))
        for day in DAY_NAMES
    )


def _even_distribution() -> Tuple[TimeBucket, ...]:
    return tuple(TimeBucket(label, 25) for label in ('morning', 'afternoon', 'evening', 'night'))


def empty_time_analysis() -> TimeAnalysis:
    return TimeAnalysis(
        time_distribution=_even_distribution(),
        hourly_activity=tuple(HourCount(hour, 0) for hour in range(24)),
        weekday_hour_heatmap=_empty_heatmap(),
    )


def time_distribution(hourly: np.ndarray) -> Tuple[TimeBucket, ...]:
    """
    Share of messages per part of day, as whole percentages.

    Args:
        hourly: 24 message counts indexed by hour

    Returns:
        Morning, afternoon, evening and night buckets; 25 each when there are no messages
    """
    total = int(hourly.sum())
    if total == 0:
        return _even_distribution()

    counts = [int(hourly[start:end].sum()) for _, start, end in TIME_BUCKETS]
    counts.append(total - sum(counts))
    labels = [label for label, _, _ in TIME_BUCKETS] + ['night']
    return tuple(
        TimeBucket(label, _round_half_up(count / total * 100))
        for label, count in zip(labels, counts)
    )


def response_pattern(hourly: np.ndarray) -> str:
    """
    Classify the chat as evening_active, morning_active or consistent.

    One side must carry more than one and a half times the traffic of the
    other to count as dominant.
    """
    morning = int(sum(hourly[h] for h in MORNING_HOURS))
    evening = int(sum(hourly[h] for h in EVENING_HOURS))

    if evening > morning * PATTERN_RATIO:
        return 'evening_active'
    if morning > evening * PATTERN_RATIO:
        return 'morning_active'
    return 'consistent'


def conversation_sessions(dates: pd.Series, gap_seconds: int) -> pd.DataFrame:
    """
    Split a sorted date series into sessions.

    A new session starts whenever the silence since the previous message
    reaches `gap_seconds`.

    Returns:
        DataFrame with start, end and count per session
    """
    if dates.empty:
        return pd.DataFrame(columns=['start', 'end', 'count'])

    dates = dates.reset_index(drop=True)
    gaps = dates.diff().dt.total_seconds()
    session_id = (gaps >= gap_seconds).cumsum()
    return dates.groupby(session_id).agg(start='min', end='max', count='count')


def average_conversation_minutes(sessions: pd.DataFrame) -> float:
    """Mean length of sessions holding more than one message; 0.0 when there are none."""
    multi = sessions[sessions['count'] > 1]
    if multi.empty:
        return 0.0
    lengths = (multi['end'] - multi['start']).dt.total_seconds() / 60.0
    return round(float(lengths.mean()), 1)


def compute_time_analysis(
    messages: Sequence[NormalizedMessage],
    config: Optional[EngineConfig] = None
) -> TimeAnalysis:
    """
    Activity over hours, weekdays and calendar dates.

    Only messages with a resolved date are counted.

    Args:
        messages: Normalized messages sorted by date
        config: Supplies the session gap for conversation length

    Returns:
        TimeAnalysis; zeroed with an even time split when nothing is dated
    """
    config = config or DEFAULT_CONFIG
    if not messages:
        return empty_time_analysis()

    df = resolved_rows(build_dataframe(messages))
    if df.empty:
        LOGGER.debug("Time analysis: no resolved dates among %d messages", len(messages))
        return empty_time_analysis()

    heatmap = np.zeros((7, 24), dtype=int)
    np.add.at(heatmap, (df['weekday'].to_numpy(dtype=int), df['hour'].to_numpy(dtype=int)), 1)
    hourly = heatmap.sum(axis=0)
    weekday_counts = heatmap.sum(axis=1)

    daily = df.groupby('date', sort=True).size()
    # idxmax returns the earliest date among ties
    busiest_date = daily.idxmax()

    sessions = conversation_sessions(df['date_and_time'], config.session_gap_seconds)

    return TimeAnalysis(
        most_active_hour=int(np.argmax(hourly)),
        most_active_day=DAY_NAMES[int(np.argmax(weekday_counts))],
        most_active_date=busiest_date.isoformat(),
        most_messages_count=int(daily.max()),
        response_pattern=response_pattern(hourly),
        conversation_length=average_conversation_minutes(sessions),
        conversation_count=len(sessions),
        time_distribution=time_distribution(hourly),
        hourly_activity=tuple(HourCount(hour, int(count)) for hour, count in enumerate(hourly)),
        daily_activity=tuple(DailyCount(day.isoformat(), int(count)) for day, count in daily.items()),
        weekday_hour_heatmap=tuple(
            WeekdayHours(day, tuple(HourCount(hour, int(count)) for hour, count in enumerate(heatmap[idx])))
            for idx, day in enumerate(DAY_NAMES)
        ),
    )
