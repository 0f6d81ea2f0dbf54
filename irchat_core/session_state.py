from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple


class ConnectionState(Enum):
    """Possible connection states."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()


class AppState(Enum):
    """Top-level phases of the client."""

    SETUP = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    DISCONNECTED = auto()
    QUIT = auto()


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Read-only view of the session handed to the UI once per render tick.

    Attributes:
        app_state (AppState): Current top-level phase.
        connection_state (ConnectionState): Transport state as seen by the session.
        server (str): "host:port" of the configured server.
        nick (str): Nickname currently in use.
        current_channel (str): Displayed channel, "" when none is selected.
        channels (List[Tuple[str, bool]]): Joined channels in order, with active flag.
        transcript (List[str]): Lines of the visible transcript.
        connected_since (Optional[float]): Epoch seconds of the last connect.
    """

    app_state: AppState
    connection_state: ConnectionState
    server: str
    nick: str
    current_channel: str
    channels: List[Tuple[str, bool]] = field(default_factory=list)
    transcript: List[str] = field(default_factory=list)
    connected_since: Optional[float] = None
