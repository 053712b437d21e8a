"""
Snapchat Adapter

Three shapes are accepted:
    - a flat array of {From, To, Message, Created, Media_Type, Media}
    - {"conversations": [{participants, messages: [{from, timestamp, content, media, type}]}]}
    - My Data's chat_history.json: {"<friend>": [{From, Media Type, Created, Content}]}
"""

import logging
from typing import Any, Dict, List, Tuple

from ..models import AdapterCounters, NormalizedMessage, Platform, WarningCode
from .base import AdapterError, PlatformAdapter, is_metadata_record, load_json, parse_timestamp

LOGGER = logging.getLogger(__name__)


def _first(msg: Dict[str, Any], *keys: str):
    for key in keys:
        value = msg.get(key)
        if value not in (None, ''):
            return value
    return None


class SnapchatAdapter(PlatformAdapter):
    platform = Platform.SNAPCHAT

    def parse(self, data: Any) -> Tuple[List[NormalizedMessage], AdapterCounters]:
        data = load_json(data)
        counters = AdapterCounters()

        if isinstance(data, list):
            if not data:
                raise AdapterError(WarningCode.EMPTY_MESSAGES)
            return self._map_flat(data, counters), counters

        if not isinstance(data, dict) or not data:
            raise AdapterError(WarningCode.EMPTY_OR_INVALID_DATA)
        if is_metadata_record(data, data_keys=('messages', 'conversations')):
            raise AdapterError(WarningCode.METADATA_FILE_NOT_DATA_FILE)

        if 'conversations' in data:
            return self._map_conversations(data['conversations'], counters), counters

        if all(isinstance(value, list) for value in data.values()):
            messages = []
            for thread in data.values():
                messages.extend(self._map_flat(thread, counters))
            return messages, counters

        raise AdapterError(WarningCode.INVALID_FORMAT, 'Unrecognised Snapchat export layout')

    def _map_flat(self, rows: List[Any], counters: AdapterCounters) -> List[NormalizedMessage]:
        messages = []
        for msg in rows:
            if not isinstance(msg, dict) or 'From' not in msg:
                continue
            sender = msg.get('From') or 'Unknown'
            counters.participants.add(sender)

            text = _first(msg, 'Message', 'Content') or ''
            media_type = _first(msg, 'Media_Type', 'Media Type')
            media = msg.get('Media')
            if not text and media_type and str(media_type).upper() != 'TEXT':
                text = f"[{media_type}: {media}]" if media else f"[{media_type}]"
                counters.media += 1

            created = msg.get('Created')
            date = parse_timestamp(created)
            timestamp = date.isoformat() if date else str(created or '')
            messages.append(self.message(timestamp, sender, str(text), date))
        return messages

    def _map_conversations(self, conversations: Any, counters: AdapterCounters) -> List[NormalizedMessage]:
        if not isinstance(conversations, list) or not conversations:
            raise AdapterError(WarningCode.INVALID_CONVERSATIONS_FORMAT)

        messages = []
        for conversation in conversations:
            if not isinstance(conversation, dict):
                continue
            for participant in conversation.get('participants') or []:
                if participant:
                    counters.participants.add(str(participant))

            for msg in conversation.get('messages') or []:
                if not isinstance(msg, dict):
                    continue
                sender = msg.get('from') or 'Unknown'
                text = msg.get('content') or ''
                if not text and msg.get('media'):
                    text = f"[Media: {msg['media']}]"
                    counters.media += 1
                if msg.get('type') and msg['type'] != 'text':
                    text = f"{text} [Type: {msg['type']}]".strip()

                date = parse_timestamp(msg.get('timestamp'))
                timestamp = date.isoformat() if date else str(msg.get('timestamp', ''))
                messages.append(self.message(timestamp, sender, text, date))

        LOGGER.debug("Mapped %d Snapchat messages from %d conversations", len(messages), len(conversations))
        return messages
