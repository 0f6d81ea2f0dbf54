import logging

import pytest

from irchat_core.config_defs import LogConfig
from irchat_core.logging.chat_logger import APP_LOGGER_NAME, ChatLogger


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def chat_logger_factory():
    created = []

    def factory(config):
        chat_logger = ChatLogger(config)
        created.append(chat_logger)
        return chat_logger

    yield factory
    for chat_logger in created:
        chat_logger.close()


def test_disabled_logger_writes_nothing(log_dir, chat_logger_factory):
    chat_logger = chat_logger_factory(LogConfig(enabled=False, log_path=str(log_dir)))

    chat_logger.log("hello")

    assert chat_logger.enabled is False
    assert not log_dir.exists()


def test_enabled_logger_writes_chat_lines(log_dir, chat_logger_factory):
    chat_logger = chat_logger_factory(LogConfig(enabled=True, log_path=str(log_dir)))

    chat_logger.log("Connected to irc.example.org")
    chat_logger.log_chat("#general", "bob", "hi there")
    chat_logger.close()

    content = (log_dir / "irc.log").read_text(encoding="utf-8")
    assert "Connected to irc.example.org" in content
    assert "[#general] <bob> hi there" in content
    assert not (log_dir / "debug.log").exists()


def test_debug_flag_adds_debug_log(log_dir, chat_logger_factory):
    chat_logger = chat_logger_factory(LogConfig(enabled=True, debug=True, log_path=str(log_dir)))

    logging.getLogger(f"{APP_LOGGER_NAME}.test").debug("debug detail")
    chat_logger.close()

    assert "debug detail" in (log_dir / "debug.log").read_text(encoding="utf-8")


def test_reconfigure_off_removes_handlers(log_dir, chat_logger_factory):
    chat_logger = chat_logger_factory(LogConfig(enabled=True, debug=True, log_path=str(log_dir)))
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    handlers_before = len(app_logger.handlers)

    chat_logger.reconfigure(LogConfig(enabled=False, log_path=str(log_dir)))
    chat_logger.log("after disable")

    assert chat_logger.enabled is False
    assert len(app_logger.handlers) == handlers_before - 1
    assert "after disable" not in (log_dir / "irc.log").read_text(encoding="utf-8")
