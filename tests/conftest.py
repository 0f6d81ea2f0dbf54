from typing import List, Optional

import pytest

from irchat_core.config_defs import ConfigSnapshot
from irchat_core.irc import irc_events as ev
from irchat_core.session_controller import SessionController


class FakeTransport:
    """Records outbound calls; `ready` controls whether sends succeed."""

    def __init__(self, ready: bool = True):
        self.ready = ready
        self.calls: List[tuple] = []

    def is_ready(self) -> bool:
        return self.ready

    def _record(self, *call) -> bool:
        self.calls.append(call)
        return True

    def connect(self, server, port, nick, use_ssl, password=None, quit_message=None):
        return self._record("connect", server, port, nick, use_ssl)

    def join(self, channel):
        return self._record("join", channel)

    def part(self, channel, reason=None):
        return self._record("part", channel, reason)

    def send_chat(self, channel, text):
        return self._record("send_chat", channel, text)

    def send_direct(self, target, text):
        return self._record("send_direct", target, text)

    def send_action(self, target, text):
        return self._record("send_action", target, text)

    def change_nick(self, new_nick):
        return self._record("change_nick", new_nick)

    def list_channels(self, pattern=None):
        return self._record("list_channels", pattern)

    def raw(self, command_line):
        return self._record("raw", command_line)

    def quit(self, reason=None):
        return self._record("quit", reason)

    def named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


def make_snapshot(nick: str = "alice", channels: Optional[List[str]] = None) -> ConfigSnapshot:
    return ConfigSnapshot(
        server="irc.example.org",
        port=6697,
        nick=nick,
        channels=list(channels) if channels is not None else ["#general"],
        use_ssl=True,
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def session(transport):
    """A session for nick 'alice' that has connected but joined nothing yet."""
    s = SessionController(make_snapshot(channels=[]), transport=transport, clock=lambda: 1000.0)
    s.begin_connect()
    s.handle_event(ev.Connected("irc.example.org"))
    return s


def join_all(session: SessionController, *channels: str):
    for channel in channels:
        session.handle_event(ev.Joined(session.nick, channel))
