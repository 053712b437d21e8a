"""
Overview Module

Headline numbers for a two-party chat: message and word totals, the two
principal senders, daily pace, busiest weekday and reply latency.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .analysis_models import DAY_NAMES, Overview, SenderOverview
from .config import DEFAULT_CONFIG, EngineConfig
from .data_wrangling import build_dataframe, resolved_rows
from .models import InsufficientParticipantsError, NormalizedMessage
from .response_analysis import compute_response_time

LOGGER = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


def date_range(messages: Sequence[NormalizedMessage]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """First and last resolved dates, or (None, None) when nothing is dated."""
    dates = [m.date for m in messages if m.has_resolved_date]
    if not dates:
        return None, None
    return min(dates), max(dates)


def span_days(start: Optional[datetime], end: Optional[datetime]) -> int:
    """Whole days between two dates, rounded up; 0 when either is missing."""
    if start is None or end is None:
        return 0
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def principal_senders(df: pd.DataFrame) -> List[str]:
    """Distinct senders in order of first appearance."""
    return list(df['sender'].unique())


def _sender_overview(df: pd.DataFrame, name: str) -> SenderOverview:
    rows = df[df['sender'] == name]
    messages = len(rows)
    words = int(rows['word_length'].sum())
    return SenderOverview(
        name=name,
        messages=messages,
        words=words,
        words_per_message=round(words / messages, 1) if messages else 0.0,
    )


def compute_overview(
    messages: Sequence[NormalizedMessage],
    config: Optional[EngineConfig] = None
) -> Overview:
    """
    Compute the headline statistics of a chat.

    Args:
        messages: Normalized messages sorted by date
        config: Supplies the reply cutoff

    Returns:
        Overview; zeroed when there are no messages

    Raises:
        InsufficientParticipantsError: If fewer than two distinct senders wrote anything
    """
    config = config or DEFAULT_CONFIG
    if not messages:
        return Overview()

    df = build_dataframe(messages)
    senders = principal_senders(df)
    if len(senders) < 2:
        raise InsufficientParticipantsError(
            f"Need at least two different senders for analysis, found {len(senders)}"
        )

    total_messages = len(df)
    total_words = int(df['word_length'].sum())

    start, end = date_range(messages)
    days = max(span_days(start, end), 1)

    dated = resolved_rows(df)
    weekday_counts = dated['weekday'].value_counts().reindex(range(7), fill_value=0)
    most_active_day = DAY_NAMES[int(weekday_counts.to_numpy().argmax())]

    LOGGER.debug(
        "Overview: %d messages, %d words, %d senders over %d days",
        total_messages, total_words, len(senders), days
    )
    return Overview(
        total_messages=total_messages,
        total_words=total_words,
        words_per_message=round(total_words / total_messages, 1),
        sender1=_sender_overview(df, senders[0]),
        sender2=_sender_overview(df, senders[1]),
        avg_messages_per_day=round(total_messages / days, 1),
        most_active_day=most_active_day,
        response_time=compute_response_time(messages, config.response_cutoff_seconds),
    )
