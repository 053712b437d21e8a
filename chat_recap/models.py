"""
Domain Models

Immutable records exchanged between ingestion stages, plus the warning codes
and exceptions the engine exposes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class ChatRecapError(Exception):
    """Base class for errors raised by the engine."""


class InsufficientParticipantsError(ChatRecapError, ValueError):
    """Raised when a two-party statistic is requested for fewer than two senders."""


class DateParseError(ChatRecapError, ValueError):
    """Raised by the date resolver when a date/time pair cannot be interpreted."""


class Platform(str, Enum):
    WHATSAPP = 'whatsapp'
    INSTAGRAM = 'instagram'
    DISCORD = 'discord'
    TELEGRAM = 'telegram'
    SNAPCHAT = 'snapchat'
    AUTO = 'auto'


class WarningCode(str, Enum):
    """Stable identifiers for conditions worth surfacing to the caller."""

    NO_MESSAGES = 'no_messages'
    SINGLE_PARTICIPANT = 'single_participant'
    METADATA_FILE_NOT_DATA_FILE = 'metadata_file_not_data_file'
    INVALID_FORMAT = 'invalid_format'
    INVALID_JSON_FORMAT = 'invalid_json_format'
    EMPTY_OR_INVALID_DATA = 'empty_or_invalid_data'
    EMPTY_MESSAGES = 'empty_messages'
    INVALID_CHANNEL_FORMAT = 'invalid_channel_format'
    INVALID_CONVERSATIONS_FORMAT = 'invalid_conversations_format'
    UNSUPPORTED_INPUT_TYPE = 'unsupported_input_type'
    UNSUPPORTED_PLATFORM = 'unsupported_platform'
    UNDATED_MESSAGES = 'undated_messages'
    SHORT_TIMESPAN = 'short_timespan'
    PROCESSING_FAILED = 'processing_failed'
    PLATFORM_NOT_DETECTED = 'platform_not_detected'
    AUTO_DETECTED_WHATSAPP = 'auto_detected_whatsapp'
    AUTO_DETECTED_INSTAGRAM = 'auto_detected_instagram'
    AUTO_DETECTED_DISCORD = 'auto_detected_discord'
    AUTO_DETECTED_TELEGRAM = 'auto_detected_telegram'
    AUTO_DETECTED_SNAPCHAT = 'auto_detected_snapchat'

    @classmethod
    def auto_detected(cls, platform: Platform) -> 'WarningCode':
        return cls(f"auto_detected_{platform.value}")


@dataclass(frozen=True)
class RawEntry:
    """Literal substrings of one logical line, before any date interpretation."""

    date_part: str
    time_part: str
    sender: str
    message: str

    @property
    def is_dated(self) -> bool:
        return bool(self.date_part and self.time_part)


@dataclass(frozen=True)
class NormalizedMessage:
    """
    A message ready for analysis.

    Attributes:
        timestamp: The original literal the date was read from
        sender: Sender display name
        message: Message text, or a bracketed placeholder for non-text content
        date: Naive datetime; None only when no value could be produced
        date_resolved: False when the date is a fallback to the request clock
        synthetic: True for the placeholder emitted when nothing could be parsed
    """

    timestamp: str
    sender: str
    message: str
    date: Optional[datetime]
    date_resolved: bool = True
    synthetic: bool = False

    @property
    def has_resolved_date(self) -> bool:
        return self.date is not None and self.date_resolved


@dataclass(frozen=True)
class Stats:
    total_messages: int = 0
    valid_date_messages: int = 0
    filtered_system_messages: int = 0
    filtered_media_messages: int = 0

    def __post_init__(self):
        if self.valid_date_messages > self.total_messages:
            raise ValueError(
                "valid_date_messages cannot exceed total_messages "
                f"({self.valid_date_messages} > {self.total_messages})"
            )


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of one ingestion request.

    `messages` is never empty: malformed input yields a single synthetic
    "System" message alongside the warning that explains it.
    """

    messages: Tuple[NormalizedMessage, ...]
    warnings: Tuple[WarningCode, ...]
    stats: Stats
    diagnostics: Tuple[str, ...] = ()
    platform: Optional[Platform] = None

    @property
    def has_real_messages(self) -> bool:
        return any(not m.synthetic for m in self.messages)

    def to_dict(self) -> dict:
        return {
            'messages': [
                {
                    'timestamp': m.timestamp,
                    'sender': m.sender,
                    'message': m.message,
                    'date': m.date.isoformat() if m.date else None,
                }
                for m in self.messages
            ],
            'warnings': [w.value for w in self.warnings],
            'stats': {
                'total_messages': self.stats.total_messages,
                'valid_date_messages': self.stats.valid_date_messages,
                'filtered_system_messages': self.stats.filtered_system_messages,
                'filtered_media_messages': self.stats.filtered_media_messages,
            },
            'diagnostics': list(self.diagnostics),
            'platform': self.platform.value if self.platform else None,
        }


@dataclass
class AdapterCounters:
    """Mutable tallies an adapter accumulates while mapping one input."""

    system: int = 0
    media: int = 0
    participants: set = field(default_factory=set)
