import logging
from typing import Dict, List, Optional, Tuple

from irchat_core.config_defs import CHANNEL_PREFIXES

logger = logging.getLogger("irchat.channels")


class Channel:
    """A single named conversation space and its message buffer."""

    def __init__(self, name: str):
        self.name: str = name
        self.messages: List[str] = []
        self.joined: bool = False
        self.active: bool = False

    def add_message(self, text: str):
        self.messages.append(text)

    def __repr__(self):
        return f"<Channel name='{self.name}' joined={self.joined} active={self.active} messages={len(self.messages)}>"


class ChannelRegistry:
    """
    Owns every channel the session knows about.

    Lookup goes through a name-keyed dict, while `channel_order` keeps the
    insertion order used for listing, numbering and navigation. A channel
    becomes visible to navigation only once it is marked joined.
    """

    def __init__(self):
        self.channels: Dict[str, Channel] = {}
        self.channel_order: List[str] = []
        self.active_list: List[str] = []

    @staticmethod
    def normalize_name(name: str) -> str:
        name = name.strip()
        if name and not name.startswith(CHANNEL_PREFIXES):
            name = f"#{name}"
        return name

    def register(self, name: str) -> Channel:
        existing = self.channels.get(name)
        if existing:
            return existing
        channel = Channel(name)
        self.channels[name] = channel
        self.channel_order.append(name)
        logger.debug(f"Registered channel '{name}' (known channels: {len(self.channel_order)})")
        return channel

    def remove(self, name: str) -> bool:
        if name not in self.channels:
            return False
        self.set_active(name, False)
        del self.channels[name]
        self.channel_order.remove(name)
        logger.debug(f"Removed channel '{name}'")
        return True

    def get(self, name: str) -> Optional[Channel]:
        return self.channels.get(name)

    def find(self, name: str) -> Optional[Channel]:
        """Case-insensitive lookup, for names typed by the user."""
        if not name:
            return None
        exact = self.channels.get(name)
        if exact:
            return exact
        lowered = name.lower()
        for channel_name in self.channel_order:
            if channel_name.lower() == lowered:
                return self.channels[channel_name]
        return None

    def set_joined(self, name: str, joined: bool):
        channel = self.channels.get(name)
        if not channel:
            logger.warning(f"set_joined: unknown channel '{name}' (joined={joined}). Ignoring.")
            return
        channel.joined = joined
        logger.info(f"Channel '{name}' joined={joined}")

    def set_active(self, name: str, active: bool):
        channel = self.channels.get(name)
        if not channel:
            return
        channel.active = active
        if active:
            if name not in self.active_list:
                self.active_list.append(name)
        elif name in self.active_list:
            self.active_list.remove(name)

    def append_message(self, name: str, text: str) -> bool:
        channel = self.channels.get(name)
        if not channel:
            logger.debug(f"Dropping message for unknown channel '{name}': {text[:60]}")
            return False
        channel.add_message(text)
        return True

    def clear_messages(self, name: str):
        channel = self.channels.get(name)
        if channel:
            channel.messages.clear()

    def messages_copy(self, name: str) -> List[str]:
        channel = self.channels.get(name)
        return list(channel.messages) if channel else []

    def is_joined(self, name: str) -> bool:
        channel = self.channels.get(name)
        return bool(channel and channel.joined)

    def joined_channels(self) -> List[str]:
        return [name for name in self.channel_order if self.channels[name].joined]

    def list_with_status(self) -> List[Tuple[str, bool]]:
        return [(name, self.channels[name].active) for name in self.joined_channels()]

    def __len__(self):
        return len(self.channels)

    def __contains__(self, name: str):
        return name in self.channels
