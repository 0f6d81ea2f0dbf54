import argparse
import io

import pytest

from conftest import FakeTransport
from irchat_core.app_config import AppConfig
from irchat_core.client.command_palette import STATIC_ITEMS
from irchat_core.client.irc_client_logic import (
    InputLine,
    IRCClient_Logic,
    apply_arg_overrides,
)
from irchat_core.client.key_bindings import KEY_CTRL_P, KEY_TAB, alt_digit
from irchat_core.irc import irc_events as ev
from irchat import parse_arguments


ENTER = 10


def make_args(**overrides):
    values = dict(
        read_input=False,
        output=io.StringIO(),
        server="irc.example.org",
        port=6697,
        nick="alice",
        channel=["#general"],
        password=None,
        ssl=True,
        skip_setup=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def make_client(tmp_path, **overrides):
    config = AppConfig(str(tmp_path / "irchat.ini"))
    client = IRCClient_Logic(None, make_args(**overrides), config)
    client.session.transport = FakeTransport()
    return client


def connect_and_join(client, *channels):
    client.session.begin_connect()
    client.session.handle_event(ev.Connected("irc.example.org"))
    for channel in channels:
        client.session.handle_event(ev.Joined("alice", channel))


def type_text(client, text):
    for char in text:
        client.handle_key(ord(char), char)


@pytest.mark.asyncio
async def test_headless_client_skips_setup(tmp_path):
    client = make_client(tmp_path)

    assert client.in_setup is False
    assert client.config.irc.nick == "alice"


@pytest.mark.asyncio
async def test_drain_queue_processes_items_in_order(tmp_path):
    client = make_client(tmp_path)
    connect_and_join(client, "#general")

    client.event_queue.put_nowait(ev.ChatReceived("bob", "#general", "first"))
    client.event_queue.put_nowait(InputLine("second"))
    client.event_queue.put_nowait(ev.ChatReceived("bob", "#general", "third"))
    client.drain_queue()

    transcript = client.session.transcript
    first = next(i for i, line in enumerate(transcript) if "first" in line)
    second = next(i for i, line in enumerate(transcript) if "second" in line)
    third = next(i for i, line in enumerate(transcript) if "third" in line)
    assert first < second < third
    assert client.event_queue.empty()


@pytest.mark.asyncio
async def test_quit_line_requests_shutdown(tmp_path):
    client = make_client(tmp_path)
    connect_and_join(client, "#general")

    client.process_item(InputLine("/quit see you"))

    assert client.session.is_quit
    assert client.should_quit.is_set()
    assert client.session.transport.named("quit") == [("quit", "see you")]


@pytest.mark.asyncio
async def test_typing_and_enter_sends_chat(tmp_path):
    client = make_client(tmp_path)
    connect_and_join(client, "#general")

    type_text(client, "héllo")
    assert client.input_buffer == "héllo"
    client.handle_key(ENTER)

    assert client.input_buffer == ""
    assert client.session.transport.named("send_chat") == [("send_chat", "#general", "héllo")]


@pytest.mark.asyncio
async def test_tab_and_alt_digit_navigate(tmp_path):
    client = make_client(tmp_path)
    connect_and_join(client, "#a", "#b", "#c")
    assert client.session.current_channel == "#a"

    client.handle_key(KEY_TAB)
    assert client.session.current_channel == "#b"

    client.handle_key(alt_digit(3))
    assert client.session.current_channel == "#c"

    client.handle_key(alt_digit(9))
    assert client.session.current_channel == "#c"


@pytest.mark.asyncio
async def test_palette_runs_toggle_sidebar(tmp_path):
    client = make_client(tmp_path)
    connect_and_join(client, "#general")
    before = client.show_sidebar

    client.handle_key(KEY_CTRL_P)
    assert client.palette.visible
    type_text(client, "toggle sidebar")
    assert client.input_buffer == ""
    client.handle_key(ENTER)

    assert client.palette.visible is False
    assert client.show_sidebar is not before


@pytest.mark.asyncio
async def test_palette_join_prefills_input(tmp_path):
    client = make_client(tmp_path)
    join_item = next(item for item in STATIC_ITEMS if item.command == "/join")

    client.run_palette_item(join_item)

    assert client.input_buffer == "/join "
    assert client.session.transport.named("join") == []


@pytest.mark.asyncio
async def test_finish_setup_saves_and_connects(tmp_path):
    client = make_client(tmp_path)
    client.in_setup = True
    snapshot = client.config.snapshot()

    client.finish_setup(snapshot)

    assert client.in_setup is False
    assert (tmp_path / "irchat.ini").exists()
    assert client.session.transport.named("connect") == [("connect", "irc.example.org", 6697, "alice", True)]


@pytest.mark.asyncio
async def test_run_main_loop_stops_on_queued_quit(tmp_path):
    client = make_client(tmp_path)
    client.event_queue.put_nowait(InputLine("/quit"))

    await client.run_main_loop()

    assert client.should_quit.is_set()
    output = client.args.output.getvalue()
    assert "Connecting to irc.example.org:6697" in output


def test_apply_arg_overrides(tmp_path):
    config = AppConfig(str(tmp_path / "irchat.ini"))
    args = parse_arguments(["--server", "chat.example.net", "--port", "7000", "--channel", "#x", "--channel", "#y", "--no-ssl"])

    apply_arg_overrides(config, args)

    assert config.irc.server == "chat.example.net"
    assert config.irc.port == 7000
    assert config.irc.channels == ["#x", "#y"]
    assert config.irc.use_ssl is False


def test_parse_arguments_defaults():
    args = parse_arguments([])

    assert args.headless is False
    assert args.skip_setup is False
    assert args.ssl is None
    assert args.channel is None
