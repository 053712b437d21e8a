"""
Discord Adapter

Accepts either a bare array of messages or a channel export of the form
{"channel": {...}, "messages": [...]} (DiscordChatExporter style).
"""

import logging
from typing import Any, Dict, List, Tuple

from ..models import AdapterCounters, NormalizedMessage, Platform, WarningCode
from .base import AdapterError, PlatformAdapter, is_metadata_record, load_json, parse_timestamp

LOGGER = logging.getLogger(__name__)


def author_name(msg: Dict[str, Any]) -> str:
    author = msg.get('author')
    if isinstance(author, dict):
        return author.get('name') or author.get('nickname') or author.get('username') or 'Unknown'
    if isinstance(author, str) and author:
        return author
    return 'Unknown'


def _emoji_label(emoji: Any) -> str:
    if isinstance(emoji, dict):
        return emoji.get('name') or emoji.get('id') or '?'
    return str(emoji)


def message_text(msg: Dict[str, Any]) -> Tuple[str, bool]:
    """
    Build the display text: content, then embed and reaction placeholders.

    Returns:
        Tuple of (text, is_media); attachment-only messages count as media
    """
    parts = []
    is_media = False

    content = msg.get('content') or ''
    attachments = msg.get('attachments') or []
    if content:
        parts.append(content)
    elif attachments:
        parts.append(f"[Attachment x{len(attachments)}]")
        is_media = True

    embeds = msg.get('embeds') or []
    if embeds:
        parts.append(f"[Embed x{len(embeds)}]")

    reactions = msg.get('reactions') or []
    if reactions:
        labels = ' '.join(
            f"{_emoji_label(r.get('emoji'))}({r.get('count', 0)})"
            for r in reactions if isinstance(r, dict)
        )
        parts.append(f"[Reactions: {labels}]")

    return ' '.join(parts), is_media


class DiscordAdapter(PlatformAdapter):
    platform = Platform.DISCORD

    def parse(self, data: Any) -> Tuple[List[NormalizedMessage], AdapterCounters]:
        data = load_json(data)

        if isinstance(data, dict):
            if not data:
                raise AdapterError(WarningCode.EMPTY_OR_INVALID_DATA)
            if is_metadata_record(data):
                raise AdapterError(WarningCode.METADATA_FILE_NOT_DATA_FILE)
            if 'channel' not in data or not isinstance(data.get('messages'), list):
                raise AdapterError(WarningCode.INVALID_CHANNEL_FORMAT)
            raw_messages = data['messages']
        elif isinstance(data, list):
            raw_messages = data
        else:
            raise AdapterError(WarningCode.INVALID_FORMAT, 'Expected an array of messages')

        if not raw_messages:
            raise AdapterError(WarningCode.EMPTY_MESSAGES)

        counters = AdapterCounters()
        messages = []
        for msg in raw_messages:
            if not isinstance(msg, dict) or 'timestamp' not in msg:
                continue
            sender = author_name(msg)
            counters.participants.add(sender)
            text, is_media = message_text(msg)
            if is_media:
                counters.media += 1
            date = parse_timestamp(msg.get('timestamp'))
            timestamp = date.isoformat() if date else str(msg.get('timestamp'))
            messages.append(self.message(timestamp, sender, text, date))

        LOGGER.debug("Mapped %d of %d Discord messages", len(messages), len(raw_messages))
        return messages, counters
