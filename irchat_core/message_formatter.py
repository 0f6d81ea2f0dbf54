"""
Turns structured chat events into timestamped display lines.

Every function returns ``"HH:MM <body>"``. Colors are left to the UI, which
recognises the body markers (``→``, ``←``, ``⇐``, ``⚠``, ``•``) when painting.
"""
import time
from typing import Optional

TIMESTAMP_FORMAT = "%H:%M"

JOIN_MARKER = "→"
PART_MARKER = "←"
QUIT_MARKER = "⇐"
ERROR_MARKER = "⚠"
INFO_MARKER = "•"


def timestamp(now: Optional[float] = None) -> str:
    return time.strftime(TIMESTAMP_FORMAT, time.localtime(now if now is not None else time.time()))


def _stamp(body: str, now: Optional[float] = None) -> str:
    return f"{timestamp(now)} {body}"


def format_chat(user: str, text: str, is_own: bool = False, now: Optional[float] = None) -> str:
    # Own lines carry the same text; the UI highlights them by nick.
    return _stamp(f"<{user}> {text}", now)


def format_action(user: str, text: str, now: Optional[float] = None) -> str:
    return _stamp(f"* {user} {text}", now)


def format_system(text: str, now: Optional[float] = None) -> str:
    return _stamp(text, now)


def format_join(user: str, channel: str, now: Optional[float] = None) -> str:
    return _stamp(f"{JOIN_MARKER} {user} joined {channel}", now)


def format_part(user: str, channel: str, reason: Optional[str] = None, now: Optional[float] = None) -> str:
    body = f"{PART_MARKER} {user} left {channel}"
    if reason:
        body += f" ({reason})"
    return _stamp(body, now)


def format_quit(user: str, reason: Optional[str] = None, now: Optional[float] = None) -> str:
    body = f"{QUIT_MARKER} {user} quit"
    if reason:
        body += f" ({reason})"
    return _stamp(body, now)


def format_notice(sender: str, text: str, now: Optional[float] = None) -> str:
    return _stamp(f"[{sender}] {text}", now)


def format_error(text: str, now: Optional[float] = None) -> str:
    return _stamp(f"{ERROR_MARKER} {text}", now)


def format_nick_change(old_nick: str, new_nick: str, now: Optional[float] = None) -> str:
    return _stamp(f"{old_nick} is now known as {new_nick}", now)


def format_channel_switch(channel: str, position: int, total: int, forward: bool = True, now: Optional[float] = None) -> str:
    marker = JOIN_MARKER if forward else PART_MARKER
    return _stamp(f"{marker} Switched to {channel} ({position}/{total})", now)


def format_now_viewing(channel: str, now: Optional[float] = None) -> str:
    return _stamp(f"{INFO_MARKER} Now viewing {channel}", now)
