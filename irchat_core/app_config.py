# irchat_core/app_config.py
import configparser
import os
import logging
from typing import Type, Any, List, Dict, Optional
from irchat_core.config_defs import *

logger = logging.getLogger("irchat.config")


class ConfigError(ValueError):
    pass


class AppConfig:
    def __init__(self, config_file_path: Optional[str] = None):
        self.CONFIG_DIR = os.path.expanduser(DEFAULT_CONFIG_DIR)
        self.CONFIG_FILE_PATH = config_file_path or os.path.join(self.CONFIG_DIR, DEFAULT_CONFIG_FILE_NAME)
        self._config_parser = configparser.ConfigParser()
        self.irc: IrcConfig = IrcConfig()
        self.ui: UiConfig = UiConfig()
        self.logging: LogConfig = LogConfig()
        self.file_exists = False
        self._load_config_file()
        self._load_all_settings()

    def _load_config_file(self):
        self.file_exists = os.path.exists(self.CONFIG_FILE_PATH)
        if self.file_exists:
            try:
                self._config_parser.read(self.CONFIG_FILE_PATH, encoding="utf-8")
            except configparser.Error as e:
                logger.warning(f"Could not parse {self.CONFIG_FILE_PATH}: {e}. Using defaults.")
                self._config_parser = configparser.ConfigParser()

    def _get_config_value(self, section: str, key: str, fallback: Any, value_type: Type = str) -> Any:
        if self._config_parser.has_section(section) and self._config_parser.has_option(section, key):
            try:
                if value_type == bool:
                    return self._config_parser.getboolean(section, key)
                elif value_type == int:
                    return self._config_parser.getint(section, key)
                elif value_type == list:
                    val = self._config_parser.get(section, key)
                    return [item.strip() for item in val.split(",") if item.strip()] if val and val.strip() else []
                return self._config_parser.get(section, key)
            except (ValueError, configparser.Error) as e:
                logger.warning(f"Bad value for [{section}] {key}: {e}. Falling back to {fallback!r}.")
                return fallback
        return fallback

    def _load_all_settings(self):
        self.irc.server = self._get_config_value("IRC", "server", DEFAULT_SERVER, str)
        self.irc.port = self._get_config_value("IRC", "port", DEFAULT_PORT, int)
        self.irc.nick = self._get_config_value("IRC", "nick", DEFAULT_NICK, str)
        self.irc.username = self._get_config_value("IRC", "username", DEFAULT_USERNAME, str)
        self.irc.realname = self._get_config_value("IRC", "realname", DEFAULT_REALNAME, str)
        self.irc.channels = self._get_config_value("IRC", "channels", list(DEFAULT_CHANNELS), list)
        self.irc.use_ssl = self._get_config_value("IRC", "use_ssl", DEFAULT_SSL, bool)
        self.irc.password = self._get_config_value("IRC", "password", DEFAULT_PASSWORD, str) or None
        self.irc.quit_message = self._get_config_value("IRC", "quit_message", DEFAULT_QUIT_MESSAGE, str)
        self.ui.show_sidebar = self._get_config_value("UI", "show_sidebar", DEFAULT_SHOW_SIDEBAR, bool)
        self.ui.sidebar_width = self._get_config_value("UI", "sidebar_width", DEFAULT_SIDEBAR_WIDTH, int)
        self.ui.show_timestamps = self._get_config_value("UI", "show_timestamps", DEFAULT_SHOW_TIMESTAMPS, bool)
        self.logging.enabled = self._get_config_value("Logging", "enabled", DEFAULT_LOG_ENABLED, bool)
        self.logging.debug = self._get_config_value("Logging", "debug", DEFAULT_LOG_DEBUG, bool)
        self.logging.max_size_kb = self._get_config_value("Logging", "max_size_kb", DEFAULT_LOG_MAX_SIZE_KB, int)
        self.logging.backup_count = self._get_config_value("Logging", "backup_count", DEFAULT_LOG_BACKUP_COUNT, int)
        self.logging.log_path = self._get_config_value("Logging", "log_path", DEFAULT_LOG_PATH, str)

    def _sync_parser_from_settings(self):
        values: Dict[str, Dict[str, Any]] = {
            "IRC": {
                "server": self.irc.server,
                "port": self.irc.port,
                "nick": self.irc.nick,
                "username": self.irc.username,
                "realname": self.irc.realname,
                "channels": ",".join(self.irc.channels),
                "use_ssl": self.irc.use_ssl,
                "password": self.irc.password or "",
                "quit_message": self.irc.quit_message,
            },
            "UI": {
                "show_sidebar": self.ui.show_sidebar,
                "sidebar_width": self.ui.sidebar_width,
                "show_timestamps": self.ui.show_timestamps,
            },
            "Logging": {
                "enabled": self.logging.enabled,
                "debug": self.logging.debug,
                "max_size_kb": self.logging.max_size_kb,
                "backup_count": self.logging.backup_count,
                "log_path": self.logging.log_path,
            },
        }
        for section, options in values.items():
            if not self._config_parser.has_section(section):
                self._config_parser.add_section(section)
            for key, value in options.items():
                self._config_parser.set(section, key, str(value).lower() if isinstance(value, bool) else str(value))

    def set_config_value(self, section: str, key: str, value: Any) -> bool:
        if not self._config_parser.has_section(section):
            self._config_parser.add_section(section)
        self._config_parser.set(section, key, str(value))
        self._load_all_settings()
        logger.info(f"Configuration updated: [{section}] {key} = {value}")
        return self.save_current_config()

    def save_current_config(self) -> bool:
        self._sync_parser_from_settings()
        try:
            config_dir = os.path.dirname(self.CONFIG_FILE_PATH)
            if config_dir:
                os.makedirs(config_dir, exist_ok=True)
            with open(self.CONFIG_FILE_PATH, "w", encoding="utf-8") as configfile:
                self._config_parser.write(configfile)
            self.file_exists = True
            logger.info(f"Configuration saved to {self.CONFIG_FILE_PATH}")
            return True
        except OSError as e:
            logger.error(f"Failed to save configuration to {self.CONFIG_FILE_PATH}: {e}")
            return False

    def rehash(self) -> bool:
        """Re-read the INI file, replacing every in-memory value."""
        logger.info(f"Reloading configuration from {self.CONFIG_FILE_PATH}")
        self._config_parser = configparser.ConfigParser()
        self.irc = IrcConfig()
        self.ui = UiConfig()
        self.logging = LogConfig()
        self._load_config_file()
        self._load_all_settings()
        return self.file_exists

    def validate(self) -> List[str]:
        problems: List[str] = []
        if not self.irc.server.strip():
            problems.append("Server cannot be empty")
        if not 1 <= self.irc.port <= 65535:
            problems.append(f"Port {self.irc.port} is out of range (1-65535)")
        if not self.irc.nick.strip():
            problems.append("Nickname cannot be empty")
        if self.logging.max_size_kb <= 0:
            problems.append("Log size must be positive")
        if self.ui.sidebar_width < MIN_SIDEBAR_WIDTH:
            problems.append(f"Sidebar width must be at least {MIN_SIDEBAR_WIDTH}")
        return problems

    def ensure_valid(self):
        problems = self.validate()
        if problems:
            raise ConfigError("; ".join(problems))

    def apply_snapshot(self, snapshot: ConfigSnapshot):
        """Copy the values chosen during setup back into the stored settings."""
        self.irc.server = snapshot.server
        self.irc.port = snapshot.port
        self.irc.nick = snapshot.nick
        self.irc.channels = list(snapshot.channels)
        self.irc.use_ssl = snapshot.use_ssl
        if snapshot.password is not None:
            self.irc.password = snapshot.password
        if snapshot.quit_message:
            self.irc.quit_message = snapshot.quit_message

    def snapshot(self) -> ConfigSnapshot:
        return ConfigSnapshot(
            server=self.irc.server,
            port=self.irc.port,
            nick=self.irc.nick,
            channels=list(self.irc.channels),
            use_ssl=self.irc.use_ssl,
            password=self.irc.password,
            quit_message=self.irc.quit_message,
            username=self.irc.username,
            realname=self.irc.realname,
        )

    def set_logging_enabled(self, enabled: bool) -> bool:
        self.logging.enabled = enabled
        return self.save_current_config()

    def set_debug_logging(self, enabled: bool) -> bool:
        self.logging.debug = enabled
        return self.save_current_config()

    @property
    def log_level_int(self) -> int:
        return logging.DEBUG if self.logging.debug else logging.INFO

    def describe(self) -> List[str]:
        channels = ", ".join(self.irc.channels) if self.irc.channels else "(none)"
        if self.logging.enabled:
            logging_state = f"enabled (debug {'on' if self.logging.debug else 'off'}, {self.logging.resolved_log_path})"
        else:
            logging_state = "disabled"
        return [
            f"Config file: {self.CONFIG_FILE_PATH}",
            f"Server: {self.irc.address}",
            f"Nick: {self.irc.nick}",
            f"Channels: {channels}",
            f"SSL: {'yes' if self.irc.use_ssl else 'no'}",
            f"Logging: {logging_state}",
        ]
