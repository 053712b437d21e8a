"""
Data Wrangling Module

Turns a normalized message stream into a pandas DataFrame and adds the
temporal and message-level columns the analysis modules read.
"""

from typing import Sequence

import pandas as pd

from .analysis_models import DAY_NAMES
from .models import NormalizedMessage

COLUMNS = ['timestamp', 'sender', 'message', 'date_and_time', 'date_resolved', 'synthetic']


def messages_to_dataframe(messages: Sequence[NormalizedMessage]) -> pd.DataFrame:
    """
    Build the base DataFrame, one row per message in stream order.

    Args:
        messages: Normalized messages

    Returns:
        DataFrame with timestamp, sender, message, date_and_time,
        date_resolved and synthetic columns
    """
    df = pd.DataFrame({
        'timestamp': pd.Series([m.timestamp for m in messages], dtype=object),
        'sender': pd.Series([m.sender for m in messages], dtype=object),
        'message': pd.Series([m.message or '' for m in messages], dtype=object),
        # Out-of-range years become NaT rather than failing the whole frame
        'date_and_time': pd.to_datetime(
            pd.Series([m.date for m in messages], dtype=object), errors='coerce'
        ),
        'date_resolved': pd.Series([m.has_resolved_date for m in messages], dtype=bool),
        'synthetic': pd.Series([m.synthetic for m in messages], dtype=bool),
    }, columns=COLUMNS)
    return df


def add_temporal_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add temporal features: hour, weekday, day_name, date.

    `weekday` counts from Sunday (0) to Saturday (6).

    Args:
        df: DataFrame with 'date_and_time' column

    Returns:
        DataFrame with temporal features added
    """
    if df.empty or 'date_and_time' not in df.columns:
        return df

    df = df.copy()

    dates = df['date_and_time']
    df['hour'] = dates.dt.hour.astype('Int64')
    df['weekday'] = ((dates.dt.dayofweek + 1) % 7).astype('Int64')
    df['day_name'] = df['weekday'].map(lambda x: DAY_NAMES[x] if pd.notna(x) else None)
    df['date'] = dates.dt.date

    return df


def add_message_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add message-level features: character_length, word_length.

    Args:
        df: DataFrame with 'message' column

    Returns:
        DataFrame with message features added
    """
    if df.empty or 'message' not in df.columns:
        return df

    df = df.copy()

    df['character_length'] = df['message'].str.len()
    # Whitespace split; empty messages count zero words
    df['word_length'] = df['message'].apply(lambda x: len(str(x).split()))

    return df


def enrich_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """Run every feature step and reset the index."""
    if df.empty:
        return df

    df = add_temporal_features(df)
    df = add_message_features(df)
    return df.reset_index(drop=True)


def build_dataframe(messages: Sequence[NormalizedMessage]) -> pd.DataFrame:
    """Base frame plus all features."""
    return enrich_dataframe(messages_to_dataframe(messages))


def resolved_rows(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rows whose date was actually resolved from the input.

    Messages stamped with the request clock would otherwise pile up on a
    single hour and day.
    """
    if df.empty:
        return df
    return df[df['date_resolved'] & df['date_and_time'].notna()]
