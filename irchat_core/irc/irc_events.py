# irchat_core/irc/irc_events.py
from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class Connected:
    server: str = ""


@dataclass
class Disconnected:
    reason: Optional[str] = None


@dataclass
class ConnectFailed:
    error: str


@dataclass
class ChatReceived:
    user: str
    channel: str
    text: str
    is_action: bool = False


@dataclass
class NickChanged:
    old_nick: str
    new_nick: str


@dataclass
class Joined:
    user: str
    channel: str


@dataclass
class Parted:
    user: str
    channel: str
    reason: Optional[str] = None


@dataclass
class Quit:
    user: str
    reason: Optional[str] = None


@dataclass
class NoticeReceived:
    sender: str
    text: str


@dataclass
class ServerError:
    text: str


InboundEvent = Union[
    Connected, Disconnected, ConnectFailed, ChatReceived, NickChanged,
    Joined, Parted, Quit, NoticeReceived, ServerError,
]
