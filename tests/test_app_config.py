import pytest

from irchat_core.app_config import AppConfig, ConfigError
from irchat_core.config_defs import DEFAULT_PORT, DEFAULT_SERVER, ConfigSnapshot


SAMPLE_INI = """\
[IRC]
server = irc.example.org
port = 6667
nick = bob
channels = #python, #irchat ,
use_ssl = false
password =

[UI]
show_sidebar = no
sidebar_width = 24

[Logging]
enabled = true
debug = false
"""


def write_ini(tmp_path, text):
    path = tmp_path / "irchat.ini"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_missing_file_uses_defaults(tmp_path):
    config = AppConfig(str(tmp_path / "absent.ini"))

    assert config.file_exists is False
    assert config.irc.server == DEFAULT_SERVER
    assert config.irc.port == DEFAULT_PORT
    assert config.validate() == []


def test_values_are_read_from_ini(tmp_path):
    config = AppConfig(write_ini(tmp_path, SAMPLE_INI))

    assert config.file_exists is True
    assert config.irc.server == "irc.example.org"
    assert config.irc.port == 6667
    assert config.irc.nick == "bob"
    assert config.irc.channels == ["#python", "#irchat"]
    assert config.irc.use_ssl is False
    assert config.irc.password is None
    assert config.ui.show_sidebar is False
    assert config.ui.sidebar_width == 24
    assert config.logging.enabled is True


def test_unparseable_int_falls_back_to_default(tmp_path):
    config = AppConfig(write_ini(tmp_path, "[IRC]\nport = lots\n"))

    assert config.irc.port == DEFAULT_PORT


def test_save_then_rehash_round_trips(tmp_path):
    path = str(tmp_path / "nested" / "irchat.ini")
    config = AppConfig(path)
    config.irc.nick = "carol"
    config.irc.channels = ["#a", "#b"]
    config.ui.show_timestamps = False

    assert config.save_current_config() is True

    config.irc.nick = "changed-in-memory"
    assert config.rehash() is True
    assert config.irc.nick == "carol"
    assert config.irc.channels == ["#a", "#b"]
    assert config.ui.show_timestamps is False


def test_set_config_value_persists(tmp_path):
    path = write_ini(tmp_path, SAMPLE_INI)
    config = AppConfig(path)

    assert config.set_config_value("IRC", "nick", "dave") is True

    assert AppConfig(path).irc.nick == "dave"


def test_validate_reports_bad_port_and_empty_nick(tmp_path):
    config = AppConfig(str(tmp_path / "absent.ini"))
    config.irc.port = 70000
    config.irc.nick = "  "

    problems = config.validate()

    assert any("Port 70000" in p for p in problems)
    assert "Nickname cannot be empty" in problems
    with pytest.raises(ConfigError):
        config.ensure_valid()


def test_apply_snapshot_and_snapshot(tmp_path):
    config = AppConfig(str(tmp_path / "absent.ini"))
    snapshot = ConfigSnapshot(server="chat.example.net", port=7000, nick="erin", channels=["#x"], use_ssl=False)

    config.apply_snapshot(snapshot)
    taken = config.snapshot()

    assert taken.server == "chat.example.net"
    assert taken.port == 7000
    assert taken.nick == "erin"
    assert taken.channels == ["#x"]
    assert taken.use_ssl is False
    assert taken.quit_message == config.irc.quit_message


def test_snapshot_channels_are_a_copy(tmp_path):
    config = AppConfig(str(tmp_path / "absent.ini"))
    taken = config.snapshot()

    taken.channels.append("#extra")

    assert "#extra" not in config.irc.channels


def test_describe_mentions_server_and_logging(tmp_path):
    config = AppConfig(write_ini(tmp_path, SAMPLE_INI))
    config.logging.log_path = str(tmp_path / "logs")

    lines = config.describe()

    assert "Server: irc.example.org:6667" in lines
    assert "Channels: #python, #irchat" in lines
    assert "SSL: no" in lines
    assert any(line.startswith("Logging: enabled") for line in lines)
