# irchat_core/client/setup_flow.py
import logging
import re
from enum import Enum, auto
from typing import List, Optional, Tuple

from irchat_core.config_defs import ConfigSnapshot

logger = logging.getLogger("irchat.setup")

SERVER_RE = re.compile(r"^(?P<host>[A-Za-z0-9][A-Za-z0-9.\-]*):(?P<plus>\+)?(?P<port>\d{1,5})$")
NICK_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]{2,15}$")
CHANNEL_RE = re.compile(r"^#[A-Za-z0-9_\-]{1,49}$")

SSL_PORT = 6697

ERR_SERVER = "Invalid server format. Use: hostname:port (e.g., irc.libera.chat:6697)"
ERR_NICK = "Invalid nickname. Use 3-16 characters, letters, numbers, - and _ only"
ERR_CHANNEL = "Invalid channel name: {}. Use letters, numbers, - and _ only"
ERR_NO_CHANNEL = "Please enter at least one valid channel"
ERR_CONFIRM = "Please type 'y' to connect, 'n' to go back, or 'r' to restart"


class SetupPhase(Enum):
    SERVER = auto()
    NICK = auto()
    CHANNELS = auto()
    CONFIRM = auto()
    DONE = auto()


PHASE_ORDER = [SetupPhase.SERVER, SetupPhase.NICK, SetupPhase.CHANNELS, SetupPhase.CONFIRM]

PHASE_HELP = {
    SetupPhase.SERVER: [
        "Enter the IRC server as hostname:port.",
        "Port 6697 (or +port) uses SSL/TLS, anything else is plain text.",
        "Press Enter to keep the default.",
    ],
    SetupPhase.NICK: [
        "Choose a nickname of 3-16 characters.",
        "Start with a letter or _, then letters, numbers, - and _.",
        "If it is taken, _ is appended automatically.",
    ],
    SetupPhase.CHANNELS: [
        "Enter one or more channels separated by commas.",
        "The # prefix is added when missing, e.g. python,linux",
    ],
    SetupPhase.CONFIRM: [
        "y or Enter: connect and save these settings",
        "n: go back and edit, r: restart setup",
    ],
}


def parse_server(text: str) -> Optional[Tuple[str, int, bool]]:
    """Return (host, port, use_ssl) for a "host:port" string, or None if malformed."""
    match = SERVER_RE.match(text.strip())
    if not match:
        return None
    port = int(match.group("port"))
    if not 1 <= port <= 65535:
        return None
    use_ssl = bool(match.group("plus")) or port == SSL_PORT
    return match.group("host"), port, use_ssl


def is_valid_nick(nick: str) -> bool:
    return bool(NICK_RE.match(nick))


def parse_channels(text: str) -> Tuple[List[str], Optional[str]]:
    """Split a comma-separated channel list; returns (channels, error)."""
    channels: List[str] = []
    for raw in text.split(","):
        name = raw.strip()
        if not name:
            continue
        if not name.startswith("#"):
            name = f"#{name}"
        if not CHANNEL_RE.match(name):
            return [], ERR_CHANNEL.format(name)
        if name not in channels:
            channels.append(name)
    if not channels:
        return [], ERR_NO_CHANNEL
    return channels, None


class SetupFlow:
    """Guided first-run configuration: server, nick, channels, confirm."""

    def __init__(self, defaults: ConfigSnapshot):
        self.defaults = defaults
        self.phase = SetupPhase.SERVER
        self.error: Optional[str] = None
        self.help_visible = False
        self.server = defaults.server
        self.port = defaults.port
        self.use_ssl = defaults.use_ssl
        self.nick = defaults.nick
        self.channels: List[str] = list(defaults.channels)

    @property
    def is_done(self) -> bool:
        return self.phase == SetupPhase.DONE

    @property
    def step_number(self) -> int:
        return PHASE_ORDER.index(self.phase) + 1 if self.phase in PHASE_ORDER else len(PHASE_ORDER)

    def prompt(self) -> str:
        if self.phase == SetupPhase.SERVER:
            return f"IRC server [{self.defaults.address}]:"
        if self.phase == SetupPhase.NICK:
            return f"Nickname [{self.defaults.nick}]:"
        if self.phase == SetupPhase.CHANNELS:
            return f"Channels [{', '.join(self.defaults.channels)}]:"
        if self.phase == SetupPhase.CONFIRM:
            return "Connect with these settings? (y/n/r):"
        return ""

    def summary_lines(self) -> List[str]:
        return [
            f"Server:   {self.server}:{self.port}",
            f"SSL:      {'yes' if self.use_ssl else 'no'}",
            f"Nick:     {self.nick}",
            f"Channels: {', '.join(self.channels)}",
        ]

    def help_lines(self) -> List[str]:
        return PHASE_HELP.get(self.phase, [])

    def toggle_help(self):
        self.help_visible = not self.help_visible

    def go_back(self):
        if self.phase in PHASE_ORDER and PHASE_ORDER.index(self.phase) > 0:
            self.phase = PHASE_ORDER[PHASE_ORDER.index(self.phase) - 1]
            self.error = None

    def restart(self):
        self.phase = SetupPhase.SERVER
        self.error = None

    def submit(self, text: str) -> Optional[ConfigSnapshot]:
        """
        Feed one line of input to the current phase.

        Returns the finished ConfigSnapshot once the user confirms, otherwise
        None (with `error` set when the input was rejected).
        """
        value = text.strip()
        self.error = None
        if self.phase == SetupPhase.SERVER:
            self._submit_server(value)
        elif self.phase == SetupPhase.NICK:
            self._submit_nick(value)
        elif self.phase == SetupPhase.CHANNELS:
            self._submit_channels(value)
        elif self.phase == SetupPhase.CONFIRM:
            return self._submit_confirm(value)
        return None

    def _submit_server(self, value: str):
        if not value:
            self.server, self.port, self.use_ssl = self.defaults.server, self.defaults.port, self.defaults.use_ssl
        else:
            parsed = parse_server(value)
            if parsed is None:
                self.error = ERR_SERVER
                return
            self.server, self.port, self.use_ssl = parsed
        logger.debug(f"Setup server: {self.server}:{self.port} (SSL: {self.use_ssl})")
        self.phase = SetupPhase.NICK

    def _submit_nick(self, value: str):
        if not value:
            self.nick = self.defaults.nick
        elif not is_valid_nick(value):
            self.error = ERR_NICK
            return
        else:
            self.nick = value
        self.phase = SetupPhase.CHANNELS

    def _submit_channels(self, value: str):
        if not value:
            self.channels = list(self.defaults.channels)
        else:
            channels, error = parse_channels(value)
            if error:
                self.error = error
                return
            self.channels = channels
        self.phase = SetupPhase.CONFIRM

    def _submit_confirm(self, value: str) -> Optional[ConfigSnapshot]:
        answer = value.lower()
        if answer in ("", "y", "yes"):
            self.phase = SetupPhase.DONE
            logger.info(f"Setup complete: {self.server}:{self.port} as {self.nick}, channels {self.channels}")
            return self.result()
        if answer in ("n", "no"):
            self.go_back()
            return None
        if answer in ("r", "restart"):
            self.restart()
            return None
        self.error = ERR_CONFIRM
        return None

    def result(self) -> ConfigSnapshot:
        return ConfigSnapshot(
            server=self.server,
            port=self.port,
            nick=self.nick,
            channels=list(self.channels),
            use_ssl=self.use_ssl,
            password=self.defaults.password,
            quit_message=self.defaults.quit_message,
            username=self.defaults.username,
            realname=self.defaults.realname,
        )
