"""
Response Analysis Module

Average reply latency between alternating senders.
"""

import math
from typing import Optional, Sequence

import pandas as pd

from .analysis_models import ResponseTime
from .data_wrangling import messages_to_dataframe, resolved_rows
from .models import NormalizedMessage

DEFAULT_CUTOFF_SECONDS = 3600


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def reply_gaps(df: pd.DataFrame, cutoff_seconds: int = DEFAULT_CUTOFF_SECONDS) -> pd.Series:
    """
    Minutes between each message and the previous one when the sender changed.

    Args:
        df: DataFrame with 'date_and_time' and 'sender' columns, in stream order
        cutoff_seconds: Gaps at or above this are treated as a new conversation

    Returns:
        Series of reply gaps in minutes
    """
    if df.empty:
        return pd.Series(dtype=float)

    gaps = df['date_and_time'].diff().dt.total_seconds()
    is_response = df['sender'] != df['sender'].shift(1)
    # First row has no predecessor; diff() leaves it NaN
    mask = is_response & gaps.notna() & (gaps >= 0) & (gaps < cutoff_seconds)
    return gaps[mask] / 60.0


def format_response_time(average_minutes: float, samples: int) -> ResponseTime:
    """Seconds below one minute, whole minutes otherwise."""
    if average_minutes < 1:
        return ResponseTime(average_minutes, samples, _round_half_up(average_minutes * 60), 'seconds')
    return ResponseTime(average_minutes, samples, _round_half_up(average_minutes), 'minutes')


def compute_response_time(
    messages: Sequence[NormalizedMessage],
    cutoff_seconds: Optional[int] = None
) -> ResponseTime:
    """
    Mean time it takes the other party to answer.

    Only consecutive messages from different senders with a gap under the
    cutoff count as replies. Messages whose date fell back to the request
    clock are ignored.

    Args:
        messages: Normalized messages sorted by date
        cutoff_seconds: Reply window; one hour when omitted

    Returns:
        ResponseTime; "0 minutes" when no reply qualifies
    """
    if not messages:
        return ResponseTime()

    cutoff = DEFAULT_CUTOFF_SECONDS if cutoff_seconds is None else cutoff_seconds
    gaps = reply_gaps(resolved_rows(messages_to_dataframe(messages)), cutoff)
    if gaps.empty:
        return ResponseTime()
    return format_response_time(float(gaps.mean()), int(gaps.size))
