"""
NLP Analysis Module

Keyword-ratio sentiment score. This is a stand-in heuristic, not a
sentiment model: the score only moves between 0.7 and 0.9 with the share
of warm words in the chat.
"""

import re
from typing import Iterable, List, Sequence

from .models import NormalizedMessage

POSITIVE_WORDS = frozenset({
    'love',
    'miss',
    'happy',
    'good',
    'thanks',
    'great',
    'sweet',
    'nice',
    'beautiful',
})

BASELINE_SCORE = 0.7
MAX_BONUS = 0.2

_PUNCTUATION = re.compile(r'[^\w\s]')


def tokenize(message: str) -> List[str]:
    """Lower-case, turn punctuation into spaces and split on whitespace."""
    return _PUNCTUATION.sub(' ', str(message).lower()).split()


def positive_ratio(messages: Iterable[str]) -> float:
    total = 0
    positive = 0
    for message in messages:
        words = tokenize(message)
        total += len(words)
        positive += sum(1 for w in words if w in POSITIVE_WORDS)
    return positive / total if total else 0.0


def compute_sentiment_score(messages: Sequence[NormalizedMessage]) -> float:
    """
    Score a chat between 0.7 and 0.9.

    Args:
        messages: Normalized messages

    Returns:
        0.7 plus the positive-word ratio, capped at 0.2; 0.7 when there are no words
    """
    if not messages:
        return BASELINE_SCORE

    ratio = positive_ratio(m.message for m in messages)
    return BASELINE_SCORE + min(MAX_BONUS, ratio)
