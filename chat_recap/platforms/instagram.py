"""
Instagram Adapter

Maps the `message_1.json` export ({participants, messages}) onto normalized
messages. Media-only messages become bracketed placeholders.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..models import AdapterCounters, NormalizedMessage, Platform, WarningCode
from .base import AdapterError, PlatformAdapter, fix_mojibake, is_metadata_record, load_json, parse_timestamp

LOGGER = logging.getLogger(__name__)

# (field, placeholder label) for media attachments, checked in order
MEDIA_FIELDS = (
    ('photos', 'Photo'),
    ('videos', 'Video'),
    ('audio_files', 'Audio'),
    ('gifs', 'GIF'),
    ('files', 'File'),
)


def placeholder_text(msg: Dict[str, Any]) -> Tuple[str, bool]:
    """
    Text for a message without content.

    Returns:
        Tuple of (placeholder, is_media)
    """
    for field, label in MEDIA_FIELDS:
        items = msg.get(field)
        if items:
            return f"[{label} x{len(items)}]", True
    if msg.get('sticker'):
        return '[Sticker]', True
    if msg.get('share'):
        return '[Share]', True
    return '[Empty Message]', False


class InstagramAdapter(PlatformAdapter):
    platform = Platform.INSTAGRAM

    def parse(self, data: Any) -> Tuple[List[NormalizedMessage], AdapterCounters]:
        data = load_json(data)

        if isinstance(data, dict) and not data:
            raise AdapterError(WarningCode.EMPTY_OR_INVALID_DATA)
        if is_metadata_record(data):
            raise AdapterError(WarningCode.METADATA_FILE_NOT_DATA_FILE)
        if not isinstance(data, dict) or 'messages' not in data:
            raise AdapterError(WarningCode.INVALID_FORMAT, 'Missing messages array')
        if not isinstance(data['messages'], list):
            raise AdapterError(WarningCode.INVALID_FORMAT, 'messages is not an array')
        if not data['messages']:
            raise AdapterError(WarningCode.EMPTY_MESSAGES)

        counters = AdapterCounters()
        for participant in data.get('participants') or []:
            if isinstance(participant, dict) and participant.get('name'):
                counters.participants.add(fix_mojibake(participant['name']))

        messages = []
        skipped = 0
        for msg in data['messages']:
            message = self._map_message(msg, counters)
            if message is None:
                skipped += 1
            else:
                messages.append(message)

        if skipped:
            LOGGER.warning("Skipped %d Instagram messages without sender or timestamp", skipped)
        return messages, counters

    def _map_message(self, msg: Any, counters: AdapterCounters) -> Optional[NormalizedMessage]:
        if not isinstance(msg, dict):
            return None
        sender = msg.get('sender_name')
        date = parse_timestamp(msg.get('timestamp_ms'))
        if not sender or date is None:
            return None

        text = msg.get('content') or ''
        if text:
            text = fix_mojibake(text)
        else:
            text, is_media = placeholder_text(msg)
            if is_media:
                counters.media += 1

        return NormalizedMessage(
            timestamp=date.isoformat(),
            sender=fix_mojibake(sender),
            message=text,
            date=date,
        )
