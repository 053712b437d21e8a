"""
Message Postprocessing

Chronological ordering, near-duplicate removal and sanity checks applied to
every normalized message stream before it leaves the pipeline.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .models import NormalizedMessage, WarningCode

LOGGER = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def sort_messages(messages: Sequence[NormalizedMessage]) -> List[NormalizedMessage]:
    """Stable ascending sort by date; messages without a date go last."""
    dated = [m for m in messages if m.date is not None]
    undated = [m for m in messages if m.date is None]
    return sorted(dated, key=lambda m: m.date) + undated


def levenshtein_distance(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (char_a != char_b),
            ))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity in [0, 1].

    Args:
        a: First string
        b: Second string

    Returns:
        1 - distance / length of the longer string; 1.0 for two empty strings
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def remove_duplicates(
    messages: Sequence[NormalizedMessage],
    window_seconds: float = 60,
    threshold: float = 0.8
) -> List[NormalizedMessage]:
    """
    Drop later near-identical copies of a message.

    A message is a duplicate when an already kept message has the same
    sender, lies within `window_seconds`, and has text similarity of at least
    `threshold`. Messages without a resolved date are never treated as
    duplicates.

    Args:
        messages: Messages sorted by date
        window_seconds: Maximum distance between copies
        threshold: Minimum similarity for two texts to count as the same

    Returns:
        Messages with duplicates removed, order preserved
    """
    kept: List[NormalizedMessage] = []
    # Indices into `kept` of messages that can still absorb a duplicate
    recent: List[int] = []
    removed = 0

    for message in messages:
        # Fallback dates all carry the same request clock
        if not message.has_resolved_date:
            kept.append(message)
            continue

        recent = [
            i for i in recent
            if abs((message.date - kept[i].date).total_seconds()) <= window_seconds
        ]

        duplicate = False
        for i in reversed(recent):
            other = kept[i]
            if other.sender != message.sender:
                continue
            shorter, longer = sorted((len(other.message), len(message.message)))
            # Similarity can never reach the threshold when lengths differ this much
            if longer and shorter / longer < threshold:
                continue
            if string_similarity(other.message, message.message) >= threshold:
                duplicate = True
                break

        if duplicate:
            removed += 1
            continue

        kept.append(message)
        recent.append(len(kept) - 1)

    if removed:
        LOGGER.info("Removed %d duplicate messages", removed)
    return kept


def validate_messages(
    messages: Sequence[NormalizedMessage],
    participants: Optional[Iterable[str]] = None
) -> List[WarningCode]:
    """
    Aggregate warnings for a processed message stream.

    Args:
        messages: Final message stream
        participants: Participants declared by the export, counted together with senders

    Returns:
        Warning codes in a fixed order: no_messages, single_participant,
        undated_messages, short_timespan
    """
    real = [m for m in messages if not m.synthetic]
    if not real:
        return [WarningCode.NO_MESSAGES]

    warnings = []
    known = {m.sender for m in real}
    if participants:
        known.update(p for p in participants if p)
    if len(known) < 2:
        warnings.append(WarningCode.SINGLE_PARTICIPANT)

    if any(m.date is None for m in real):
        warnings.append(WarningCode.UNDATED_MESSAGES)

    dates = [m.date for m in real if m.has_resolved_date]
    if len(dates) >= 2 and (max(dates) - min(dates)).total_seconds() < SECONDS_PER_DAY:
        warnings.append(WarningCode.SHORT_TIMESPAN)

    return warnings
