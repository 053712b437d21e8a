"""
Data Extraction Module

Turns cleaned free-text export lines into RawEntry records.

Two passes are involved: physical lines are first merged into one logical
line per message (continuation lines are appended with a newline), then each
logical line is run through the ordered pattern cascade. The pattern that
matches most of the first few lines is tried first on every line.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .models import RawEntry
from .patterns import (
    MESSAGE_PATTERNS,
    QUICK_CHECK_PATTERNS,
    ExtractionRule,
    ParsePattern,
    PatternSpec,
    Tier,
)

LOGGER = logging.getLogger(__name__)

PROGRESS_EVERY = 1000

ProgressCallback = Callable[[str, float], None]


@dataclass
class ExtractionReport:
    """Entries extracted from a batch of lines, with match bookkeeping."""

    entries: List[RawEntry] = field(default_factory=list)
    matched: int = 0
    unmatched: int = 0
    primary_pattern: Optional[ParsePattern] = None


def elect_primary_pattern(lines: Sequence[str], sample_size: int = 10) -> PatternSpec:
    """
    Pick the pattern that matches the most of the first `sample_size` lines.

    Ties go to the earlier (more specific) pattern. With no matches at all the
    first pattern of the cascade is returned.
    """
    sample = [line for line in lines[:sample_size] if line]
    best = MESSAGE_PATTERNS[0]
    best_count = 0

    for spec in MESSAGE_PATTERNS:
        count = sum(1 for line in sample if spec.match(line))
        if count > best_count:
            best, best_count = spec, count

    return best


def _build_start_detector(allowed_tier: Tier) -> Callable[[str], bool]:
    candidates = [spec for spec in MESSAGE_PATTERNS if spec.tier <= allowed_tier]

    def is_message_start(line: str) -> bool:
        if any(pattern.match(line) for pattern in QUICK_CHECK_PATTERNS):
            return True
        return any(spec.match(line) for spec in candidates)

    return is_message_start


def merge_multiline_messages(lines: Sequence[str], sample_size: int = 10) -> List[str]:
    """
    Recombine soft-wrapped lines into one logical line per message.

    A line that opens a message (quick checks first, then the pattern cascade)
    starts a new logical line; anything else is appended to the current one.
    Undated "Sender: text" shapes only count as openers when the sampled lines
    are themselves undated, otherwise any continuation holding a colon would
    split a message.

    Args:
        lines: Physical lines, already cleaned
        sample_size: Lines inspected to decide how loose a message opener may be

    Returns:
        Logical lines in input order
    """
    lines = [line for line in lines if line and line.strip()]
    if not lines:
        return []

    allowed_tier = elect_primary_pattern(lines, sample_size).tier
    is_message_start = _build_start_detector(allowed_tier)

    merged: List[str] = []
    current: Optional[str] = None

    for line in lines:
        if is_message_start(line):
            if current is not None:
                merged.append(current)
            current = line
        elif current is not None:
            current += '\n' + line
        elif ':' in line:
            # Nothing has started yet; keep it rather than lose it
            current = line

    if current is not None:
        merged.append(current)

    LOGGER.debug("Merged %d physical lines into %d messages", len(lines), len(merged))
    return merged


def _split_blob(blob: str) -> Tuple[str, str]:
    """Split a free-form "date, time" or "date time" prefix."""
    blob = blob.strip()
    if ',' in blob:
        date_part, _, time_part = blob.partition(',')
    else:
        parts = blob.split()
        date_part = parts[0] if parts else ''
        time_part = ' '.join(parts[1:])
    return date_part.strip(), time_part.strip()


def _split_named_month(blob: str) -> Tuple[str, str]:
    """Split "April 2nd 2025 1:20pm" into ("April 2nd 2025", "1:20pm")."""
    parts = blob.split()
    # A trailing "pm"/"p.m." separated by a space belongs to the time
    if len(parts) >= 2 and parts[-1].lower().replace('.', '') in ('am', 'pm'):
        parts = parts[:-2] + [parts[-2] + parts[-1]]
    if len(parts) >= 4:
        return ' '.join(parts[:-1]), parts[-1]
    return blob.strip(), ''


def entry_from_match(spec: PatternSpec, match) -> RawEntry:
    """Map the capture groups of a successful match onto a RawEntry."""
    groups = match.groups()

    if spec.rule is ExtractionRule.SPLIT:
        date_part, time_part, sender, message = groups
    elif spec.rule is ExtractionRule.NAMED_MONTH:
        blob, sender, message = groups
        date_part, time_part = _split_named_month(blob)
    elif spec.rule is ExtractionRule.DATETIME_BLOB:
        blob, sender, message = groups
        date_part, time_part = _split_blob(blob)
    else:
        sender, message = groups
        date_part, time_part = '', ''

    return RawEntry(
        date_part=date_part.strip(),
        time_part=time_part.strip(),
        sender=sender.strip(),
        message=message.strip(),
    )


def _fallback_colon_split(line: str) -> Optional[RawEntry]:
    sender, sep, message = line.partition(':')
    if not sep:
        return None
    sender, message = sender.strip(), message.strip()
    if not sender or not message:
        return None
    return RawEntry(date_part='', time_part='', sender=sender, message=message)


def extract_entries(
    lines: Sequence[str],
    sample_size: int = 10,
    progress: Optional[ProgressCallback] = None
) -> ExtractionReport:
    """
    Convert logical lines into RawEntry records.

    Args:
        lines: Logical lines from merge_multiline_messages
        sample_size: Lines sampled to elect the primary pattern
        progress: Optional callback receiving ("extract", fraction)

    Returns:
        ExtractionReport; entries keep input order, unmatched lines are only counted
    """
    report = ExtractionReport()
    lines = [line for line in lines if line and line.strip()]
    if not lines:
        LOGGER.warning("No lines to extract entries from")
        return report

    primary = elect_primary_pattern(lines, sample_size)
    report.primary_pattern = primary.kind
    others = [spec for spec in MESSAGE_PATTERNS if spec is not primary]
    LOGGER.debug("Primary pattern for %d lines: %s", len(lines), primary.kind.value)

    total = len(lines)
    for index, line in enumerate(lines):
        entry = None

        match = primary.match(line)
        if match:
            entry = entry_from_match(primary, match)
        else:
            for spec in others:
                match = spec.match(line)
                if match:
                    entry = entry_from_match(spec, match)
                    break

        if entry is None:
            entry = _fallback_colon_split(line)
            if entry is None:
                report.unmatched += 1

        if entry is not None:
            report.entries.append(entry)
            report.matched += 1

        if index and index % PROGRESS_EVERY == 0:
            LOGGER.debug(
                "Extraction progress %d%%, matched %d, unmatched %d",
                round(index / total * 100), report.matched, report.unmatched
            )
            if progress is not None:
                progress('extract', index / total)

    LOGGER.info(
        "Extracted %d entries from %d lines (%d unmatched)",
        report.matched, total, report.unmatched
    )
    return report
