"""
Text Analysis Module

Word and emoji frequencies for the whole chat and for the two principal
senders.
"""

import logging
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from .analysis_models import EmojiCount, SenderText, TextAnalysis, WordCount
from .config import DEFAULT_CONFIG, EngineConfig
from .data_wrangling import messages_to_dataframe
from .models import NormalizedMessage
from .nlp_analysis import tokenize

LOGGER = logging.getLogger(__name__)

EMOJI_ALLOWLIST = (
    '\u2764\ufe0f', '😊', '😘', '😍', '🥰', '👍', '😂', '🙏', '💕', '😁',
    '🤔', '💪', '🙌', '👌', '🎉', '🔥', '💯', '👏', '😅', '😎',
    '😢', '😭', '🤗', '😴', '🤣', '😇', '😬', '😜', '😱', '😳',
)

# Filler words that dominate chat vocabularies without saying much
CHAT_EXCLUSION_WORDS = frozenset({
    'the', 'and', 'to', 'a', 'of', 'is', 'in', 'it', 'that', 'for', 'you', 'was',
    'on', 'are', 'with', 'as', 'i', 'his', 'they', 'at', 'be', 'this', 'have',
    'from', 'or', 'had', 'by', 'but', 'not', 'what', 'all', 'were', 'we', 'when',
    'your', 'can', 'said', 'there', 'use', 'an', 'each', 'which', 'she', 'do',
    'how', 'their', 'if', 'will', 'up', 'other', 'about', 'out', 'many', 'then',
    'them', 'these', 'so', 'some', 'her', 'would', 'make', 'like', 'him', 'into',
    'time', 'has', 'look', 'two', 'more', 'write', 'go', 'see', 'number', 'no',
    'way', 'could', 'people', 'my', 'than', 'first', 'water', 'been', 'call',
    'who', 'its', 'now', 'find', 'long', 'down', 'day', 'did', 'get', 'come',
    'made', 'may', 'part', 'over', 'new', 'sound', 'take', 'only', 'little',
    'work', 'know', 'place', 'year', 'live', 'me', 'back', 'give', 'most', 'very',
    'after', 'thing', 'our', 'just', 'name', 'good', 'sentence', 'man', 'think',
    'say', 'great', 'where', 'help', 'through', 'much', 'before', 'line', 'right',
    'too', 'mean', 'old', 'any', 'same', 'tell', 'boy', 'follow', 'came', 'want',
    'show', 'also', 'around', 'form', 'three', 'small', 'set', 'put', 'end',
    'does', 'another', 'well', 'large', 'must', 'big', 'even', 'such', 'because',
    'turn', 'here', 'why', 'ask', 'went', 'men', 'read', 'need', 'land',
    'different', 'home', 'us', 'move', 'try', 'kind', 'hand', 'picture', 'again',
    'change', 'off', 'play', 'spell', 'air', 'away', 'animal', 'house', 'point',
    'page', 'letter', 'mother', 'answer', 'found', 'study', 'still', 'learn',
    'should', 'america', 'world',
})

STOP_WORDS = frozenset(ENGLISH_STOP_WORDS) | CHAT_EXCLUSION_WORDS

MIN_WORD_LENGTH = 3


def extract_words(message: str, remove_stopwords: bool = False) -> List[str]:
    """
    Tokens of at least three characters.

    Args:
        message: Message text
        remove_stopwords: Drop scikit-learn's English stop words and the chat filler list

    Returns:
        List of lower-cased words in message order
    """
    words = [w for w in tokenize(message) if len(w) >= MIN_WORD_LENGTH]
    if remove_stopwords:
        words = [w for w in words if w not in STOP_WORDS]
    return words


def extract_emojis(message: str) -> List[str]:
    """Allowlisted emojis, repeated once per occurrence."""
    found = []
    for emoji in EMOJI_ALLOWLIST:
        found.extend([emoji] * str(message).count(emoji))
    return found


def top_words(words: Iterable[str], n: int) -> Tuple[WordCount, ...]:
    return tuple(WordCount(word, count) for word, count in Counter(words).most_common(n))


def top_emojis(emojis: Iterable[str], n: int) -> Tuple[EmojiCount, ...]:
    return tuple(EmojiCount(emoji, count) for emoji, count in Counter(emojis).most_common(n))


def _sender_text(
    df: pd.DataFrame,
    name: Optional[str],
    placeholder: str,
    config: EngineConfig
) -> SenderText:
    if name is None:
        return SenderText(placeholder)

    rows = df[df['sender'] == name]
    words = [w for ws in rows['words'] for w in ws]
    emojis = [e for es in rows['emojis'] for e in es]
    return SenderText(
        name=name,
        common_words=top_words(words, config.top_sender_words),
        top_emojis=top_emojis(emojis, config.top_emojis),
    )


def compute_text_analysis(
    messages: Sequence[NormalizedMessage],
    config: Optional[EngineConfig] = None
) -> TextAnalysis:
    """
    Most used words and emojis overall and for the first two senders.

    Args:
        messages: Normalized messages
        config: Controls list lengths and stopword removal

    Returns:
        TextAnalysis; sentiment_score keeps its default until the aggregate fills it
    """
    config = config or DEFAULT_CONFIG
    if not messages:
        return TextAnalysis()

    df = messages_to_dataframe(messages)
    df['words'] = df['message'].apply(
        lambda x: extract_words(x, remove_stopwords=config.exclude_stopwords)
    )
    df['emojis'] = df['message'].apply(extract_emojis)

    all_words = [w for ws in df['words'] for w in ws]
    all_emojis = [e for es in df['emojis'] for e in es]

    senders = list(df['sender'].unique())
    sender1 = senders[0] if senders else None
    sender2 = senders[1] if len(senders) > 1 else None

    LOGGER.debug("Text analysis: %d words, %d emojis", len(all_words), len(all_emojis))
    return TextAnalysis(
        common_words=top_words(all_words, config.top_words),
        top_emojis=top_emojis(all_emojis, config.top_emojis),
        word_count=len(all_words),
        sender1=_sender_text(df, sender1, 'User 1', config),
        sender2=_sender_text(df, sender2, 'User 2', config),
    )
