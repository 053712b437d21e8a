"""
Platform Adapters

One adapter per supported export source. ADAPTERS lists them in the order
automatic detection tries them.
"""

from .base import AdapterError, PlatformAdapter, placeholder_result
from .discord import DiscordAdapter
from .instagram import InstagramAdapter
from .snapchat import SnapchatAdapter
from .telegram import TelegramAdapter
from .whatsapp import WhatsAppAdapter

ADAPTERS = {
    adapter.platform: adapter
    for adapter in (
        WhatsAppAdapter,
        InstagramAdapter,
        DiscordAdapter,
        TelegramAdapter,
        SnapchatAdapter,
    )
}

__all__ = [
    "ADAPTERS",
    "AdapterError",
    "PlatformAdapter",
    "placeholder_result",
    "WhatsAppAdapter",
    "InstagramAdapter",
    "DiscordAdapter",
    "TelegramAdapter",
    "SnapchatAdapter",
]
