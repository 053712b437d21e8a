"""
Telegram Adapter

Maps Telegram Desktop's result.json ({name, type, id, messages}) onto
normalized messages. Service messages (joins, pins, calls) are kept with a
bracketed description and counted as system messages.
"""

import logging
from typing import Any, Dict, List, Tuple

from ..models import AdapterCounters, NormalizedMessage, Platform, WarningCode
from .base import AdapterError, PlatformAdapter, is_metadata_record, load_json, parse_timestamp

LOGGER = logging.getLogger(__name__)


def flatten_text(text: Any) -> str:
    """Join Telegram's rich-text segments (plain strings or {"type", "text"} dicts)."""
    if isinstance(text, str):
        return text
    if isinstance(text, list):
        pieces = []
        for segment in text:
            if isinstance(segment, str):
                pieces.append(segment)
            elif isinstance(segment, dict):
                pieces.append(str(segment.get('text', '')))
        return ''.join(pieces)
    return ''


def message_text(msg: Dict[str, Any]) -> Tuple[str, bool]:
    """
    Returns:
        Tuple of (text, is_media)
    """
    content = flatten_text(msg.get('text'))
    if content:
        return content, False

    media_type = msg.get('media_type')
    if media_type:
        return f"[{media_type}: {msg.get('file') or msg.get('file_name') or 'file'}]", True
    if msg.get('photo'):
        return f"[photo: {msg['photo']}]", True
    if msg.get('type') == 'service':
        return f"[Service: {msg.get('action') or 'event'}]", False
    return '', False


class TelegramAdapter(PlatformAdapter):
    platform = Platform.TELEGRAM

    def parse(self, data: Any) -> Tuple[List[NormalizedMessage], AdapterCounters]:
        data = load_json(data)

        if isinstance(data, dict) and not data:
            raise AdapterError(WarningCode.EMPTY_OR_INVALID_DATA)
        if is_metadata_record(data):
            raise AdapterError(WarningCode.METADATA_FILE_NOT_DATA_FILE)
        if not isinstance(data, dict) or not isinstance(data.get('messages'), list):
            raise AdapterError(WarningCode.INVALID_FORMAT, 'Missing messages array')
        if not data['messages']:
            raise AdapterError(WarningCode.EMPTY_MESSAGES)

        counters = AdapterCounters()
        messages = []
        for msg in data['messages']:
            if not isinstance(msg, dict):
                continue

            sender = msg.get('from') or msg.get('actor') or 'Unknown'
            if msg.get('from'):
                counters.participants.add(msg['from'])

            text, is_media = message_text(msg)
            if is_media:
                counters.media += 1
            if msg.get('type') == 'service':
                counters.system += 1

            date = parse_timestamp(msg.get('date')) or parse_timestamp(msg.get('date_unixtime'))
            timestamp = date.isoformat() if date else str(msg.get('date', ''))
            messages.append(self.message(timestamp, sender, text, date))

        LOGGER.debug(
            "Mapped %d Telegram messages from chat %r (%s)",
            len(messages), data.get('name'), data.get('type')
        )
        return messages, counters
