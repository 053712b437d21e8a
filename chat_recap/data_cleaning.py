"""
Data Cleaning Module

Text preprocessing for raw chat exports and removal of media/system noise
from extracted entries.
"""

import logging
import re
from typing import List, Tuple, Union

from .models import RawEntry
from .patterns import BRACKETED_TIMESTAMP, MEDIA_NOISE_PATTERNS, SYSTEM_NOISE_PATTERNS

LOGGER = logging.getLogger(__name__)

BOM = '\ufeff'

# Control, zero-width and bidi marks; \t and \n are handled separately
_CONTROL_CHARS = re.compile(
    '[\u0000-\u0008\u000b-\u001f\u007f-\u009f\u200b-\u200f\u2028-\u202f\u2060-\u206f]'
)
_HORIZONTAL_WHITESPACE = re.compile('[ \t\u00a0\u3000]+')


def normalize_line_breaks(text: str) -> str:
    """Convert \\r\\n and lone \\r line endings to \\n."""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def remove_control_characters(text: str) -> str:
    """
    Strip control, zero-width and directional formatting characters.

    Newlines survive so that message boundaries are kept; tabs survive and
    are folded into spaces by clean_text.
    """
    return _CONTROL_CHARS.sub('', text)


def clean_text(text: str) -> str:
    """
    Prepare a raw export for line splitting.

    Args:
        text: Raw export text

    Returns:
        Cleaned text with one space between words and \\n line endings
    """
    if not text:
        return ''

    if text.startswith(BOM):
        text = text[len(BOM):]

    text = normalize_line_breaks(text)
    text = remove_control_characters(text)

    # Collapse whitespace within each physical line only
    lines = [_HORIZONTAL_WHITESPACE.sub(' ', line).strip() for line in text.split('\n')]
    return '\n'.join(lines)


def preprocess_text(raw: Union[str, bytes, None]) -> str:
    """Decode (bytes) and clean anything handed in as an export; never raises."""
    if raw is None:
        return ''
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode('utf-8', errors='replace')
    return clean_text(str(raw))


def split_to_lines(text: str) -> List[str]:
    """
    Split cleaned text into non-empty lines.

    Exports that were flattened onto a single line are re-split in front of
    every bracketed "[date, time" prefix.

    Args:
        text: Output of clean_text

    Returns:
        List of stripped, non-empty lines
    """
    lines = [line.strip() for line in text.split('\n') if line.strip()]

    if len(lines) <= 1 and text:
        pieces = [piece.strip() for piece in BRACKETED_TIMESTAMP.split(text) if piece.strip()]
        if len(pieces) > 1:
            LOGGER.debug("Re-split single-line export into %d lines", len(pieces))
            return pieces

    return lines


def is_media_noise(message: str) -> bool:
    message = message.strip()
    return any(pattern.match(message) for pattern in MEDIA_NOISE_PATTERNS)


def is_system_noise(message: str) -> bool:
    message = message.strip()
    return any(pattern.match(message) for pattern in SYSTEM_NOISE_PATTERNS)


def filter_noise(entries: List[RawEntry]) -> Tuple[List[RawEntry], int, int]:
    """
    Drop media placeholders and system notices from extracted entries.

    Args:
        entries: Extracted entries

    Returns:
        Tuple of (kept entries, system count, media count)
    """
    kept = []
    system_count = 0
    media_count = 0

    for entry in entries:
        if is_media_noise(entry.message):
            media_count += 1
            continue
        if is_system_noise(entry.message):
            system_count += 1
            continue
        kept.append(entry)

    if entries and not kept:
        LOGGER.warning("Noise filter removed all %d entries", len(entries))

    LOGGER.debug(
        "Noise filter kept %d of %d entries (system=%d, media=%d)",
        len(kept), len(entries), system_count, media_count
    )
    return kept, system_count, media_count
