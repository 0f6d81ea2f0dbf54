import os
from dataclasses import dataclass, field
from typing import List, Optional

# --- Default Fallback Constants ---
# Used when a value is missing from the INI file or cannot be parsed.

# Connection
DEFAULT_SERVER = "irc.libera.chat"
DEFAULT_PORT = 6697
DEFAULT_NICK = "irchat-user"
DEFAULT_USERNAME = "irchat"
DEFAULT_REALNAME = "irchat client"
DEFAULT_CHANNELS = ["#irchat-test"]
DEFAULT_SSL = True
DEFAULT_PASSWORD: Optional[str] = None
DEFAULT_QUIT_MESSAGE = "Goodbye from irchat!"
DEFAULT_PART_REASON = "Leaving"
DEFAULT_CONNECTION_TIMEOUT = 30

# UI
DEFAULT_SHOW_SIDEBAR = True
DEFAULT_SIDEBAR_WIDTH = 30
DEFAULT_SHOW_TIMESTAMPS = True
MIN_SIDEBAR_WIDTH = 10

# Logging
DEFAULT_LOG_ENABLED = False
DEFAULT_LOG_DEBUG = False
DEFAULT_LOG_MAX_SIZE_KB = 512
DEFAULT_LOG_BACKUP_COUNT = 3
DEFAULT_LOG_PATH = os.path.join("~", ".config", "irchat", "logs")
DEFAULT_LOG_FILE = "irc.log"
DEFAULT_DEBUG_LOG_FILE = "debug.log"

# Files
DEFAULT_CONFIG_DIR = os.path.join("~", ".config", "irchat")
DEFAULT_CONFIG_FILE_NAME = "irchat.ini"

# Protocol
CHANNEL_PREFIXES = ("#", "&", "!", "+")
COMMAND_MARKER = "/"


@dataclass
class IrcConfig:
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    nick: str = DEFAULT_NICK
    username: str = DEFAULT_USERNAME
    realname: str = DEFAULT_REALNAME
    channels: List[str] = field(default_factory=lambda: list(DEFAULT_CHANNELS))
    use_ssl: bool = DEFAULT_SSL
    password: Optional[str] = DEFAULT_PASSWORD
    quit_message: str = DEFAULT_QUIT_MESSAGE

    @property
    def address(self) -> str:
        return f"{self.server}:{self.port}"


@dataclass
class UiConfig:
    show_sidebar: bool = DEFAULT_SHOW_SIDEBAR
    sidebar_width: int = DEFAULT_SIDEBAR_WIDTH
    show_timestamps: bool = DEFAULT_SHOW_TIMESTAMPS


@dataclass
class LogConfig:
    enabled: bool = DEFAULT_LOG_ENABLED
    debug: bool = DEFAULT_LOG_DEBUG
    max_size_kb: int = DEFAULT_LOG_MAX_SIZE_KB
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT
    log_path: str = DEFAULT_LOG_PATH

    @property
    def max_bytes(self) -> int:
        return self.max_size_kb * 1024

    @property
    def resolved_log_path(self) -> str:
        return os.path.expanduser(self.log_path)


@dataclass(frozen=True)
class ConfigSnapshot:
    """
    Immutable view of the connection settings used to seed one session.

    Taken from `AppConfig.snapshot()` (or built by the setup flow) and left
    untouched for the lifetime of one connection attempt.
    """

    server: str
    port: int
    nick: str
    channels: List[str]
    use_ssl: bool
    password: Optional[str] = None
    quit_message: Optional[str] = None
    username: str = DEFAULT_USERNAME
    realname: str = DEFAULT_REALNAME

    @property
    def address(self) -> str:
        return f"{self.server}:{self.port}"
