# irchat_core/logging/chat_logger.py
import logging
import logging.handlers
import os
from typing import Optional

from irchat_core.config_defs import LogConfig, DEFAULT_LOG_FILE, DEFAULT_DEBUG_LOG_FILE

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CHAT_LOG_FORMAT = "%(asctime)s %(message)s"

CHAT_LOGGER_NAME = "irchat.chatlog"
APP_LOGGER_NAME = "irchat"


def build_rotating_handler(path: str, log_config: LogConfig, level: int, fmt: str = LOG_FORMAT) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=log_config.max_bytes,
        backupCount=log_config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    handler.setLevel(level)
    return handler


class ChatLogger:
    """
    File sink for session events.

    Chat lines and lifecycle events go to ``irc.log`` through a dedicated
    logger that does not propagate. When debug logging is on, every
    ``irchat.*`` logger also writes to ``debug.log``. Both files rotate by size.
    """

    def __init__(self, log_config: LogConfig):
        self.log_config = log_config
        self.chat_logger = logging.getLogger(CHAT_LOGGER_NAME)
        self.chat_logger.propagate = False
        self.chat_logger.setLevel(logging.INFO)
        self._chat_handler: Optional[logging.Handler] = None
        self._debug_handler: Optional[logging.Handler] = None
        self.reconfigure(log_config)

    @property
    def log_dir(self) -> str:
        return self.log_config.resolved_log_path

    @property
    def enabled(self) -> bool:
        return self._chat_handler is not None

    def _ensure_log_dir_exists(self) -> bool:
        try:
            os.makedirs(self.log_dir, exist_ok=True)
            return True
        except OSError as e:
            logging.getLogger(APP_LOGGER_NAME).error(f"Error creating log directory {self.log_dir}: {e}")
            return False

    def _remove_handlers(self):
        if self._chat_handler:
            self.chat_logger.removeHandler(self._chat_handler)
            self._chat_handler.close()
            self._chat_handler = None
        if self._debug_handler:
            logging.getLogger(APP_LOGGER_NAME).removeHandler(self._debug_handler)
            self._debug_handler.close()
            self._debug_handler = None

    def reconfigure(self, log_config: LogConfig):
        """Apply new logging flags, replacing any file handlers already installed."""
        self.log_config = log_config
        self._remove_handlers()
        if not log_config.enabled:
            return
        if not self._ensure_log_dir_exists():
            return

        app_logger = logging.getLogger(APP_LOGGER_NAME)
        try:
            self._chat_handler = build_rotating_handler(
                os.path.join(self.log_dir, DEFAULT_LOG_FILE), log_config, logging.INFO, CHAT_LOG_FORMAT
            )
            self.chat_logger.addHandler(self._chat_handler)
            if log_config.debug:
                self._debug_handler = build_rotating_handler(
                    os.path.join(self.log_dir, DEFAULT_DEBUG_LOG_FILE), log_config, logging.DEBUG
                )
                app_logger.addHandler(self._debug_handler)
                app_logger.setLevel(logging.DEBUG)
        except OSError as e:
            app_logger.error(f"Failed to open log files in {self.log_dir}: {e}")
            self._remove_handlers()
            return
        app_logger.info(f"Session logging to {self.log_dir} (debug: {log_config.debug})")

    def log(self, text: str):
        if self._chat_handler:
            self.chat_logger.info(text)

    def log_chat(self, channel: str, user: str, text: str):
        if self._chat_handler:
            self.chat_logger.info(f"[{channel}] <{user}> {text}")

    def close(self):
        self._remove_handlers()
