# irchat_core/commands/command_interpreter.py
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from irchat_core.config_defs import COMMAND_MARKER, CHANNEL_PREFIXES

logger = logging.getLogger("irchat.commands")


@dataclass
class JoinCommand:
    channel: str


@dataclass
class PartCommand:
    channel: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class NickCommand:
    new_nick: str


@dataclass
class MsgCommand:
    target: str
    text: str


@dataclass
class MeCommand:
    text: str


@dataclass
class SwitchCommand:
    channel: Optional[str] = None


@dataclass
class ListCommand:
    pattern: Optional[str] = None


@dataclass
class QuitCommand:
    reason: Optional[str] = None


@dataclass
class HelpCommand:
    pass


@dataclass
class ClearCommand:
    pass


@dataclass
class StatusCommand:
    pass


@dataclass
class ReconnectCommand:
    pass


@dataclass
class ConfigCommand:
    action: str = "show"


@dataclass
class LoggingCommand:
    args: List[str] = field(default_factory=list)


@dataclass
class RawCommand:
    line: str


@dataclass
class ChatLine:
    text: str


@dataclass
class UsageError:
    message: str


ParsedCommand = Union[
    JoinCommand, PartCommand, NickCommand, MsgCommand, MeCommand, SwitchCommand,
    ListCommand, QuitCommand, HelpCommand, ClearCommand, StatusCommand,
    ReconnectCommand, ConfigCommand, LoggingCommand, RawCommand, ChatLine, UsageError,
]


def _normalize_channel(name: str) -> str:
    if not name.startswith(CHANNEL_PREFIXES):
        return f"#{name}"
    return name


def _parse_join(args: str) -> ParsedCommand:
    parts = args.split()
    if not parts:
        return UsageError("Usage: /join <channel>")
    return JoinCommand(_normalize_channel(parts[0]))


def _parse_part(args: str) -> ParsedCommand:
    if not args:
        return PartCommand()
    parts = args.split(None, 1)
    return PartCommand(_normalize_channel(parts[0]), parts[1] if len(parts) > 1 else None)


def _parse_nick(args: str) -> ParsedCommand:
    parts = args.split()
    if not parts:
        return UsageError("Usage: /nick <newnick>")
    return NickCommand(parts[0])


def _parse_msg(args: str) -> ParsedCommand:
    parts = args.split(None, 1)
    if len(parts) < 2 or not parts[1].strip():
        return UsageError("Usage: /msg <target> <message>")
    return MsgCommand(parts[0], parts[1])


def _parse_me(args: str) -> ParsedCommand:
    if not args:
        return UsageError("Usage: /me <action>")
    return MeCommand(args)


def _parse_switch(args: str) -> ParsedCommand:
    parts = args.split()
    return SwitchCommand(parts[0] if parts else None)


def _parse_list(args: str) -> ParsedCommand:
    return ListCommand(args or None)


def _parse_quit(args: str) -> ParsedCommand:
    return QuitCommand(args or None)


def _parse_config(args: str) -> ParsedCommand:
    parts = args.split()
    return ConfigCommand(parts[0].lower() if parts else "show")


def _parse_logging(args: str) -> ParsedCommand:
    return LoggingCommand([a.lower() for a in args.split()])


COMMAND_DEFINITIONS = [
    {
        "name": "join",
        "parser": _parse_join,
        "help": {"usage": "/join <channel>", "description": "Join a channel ('#' is added when missing).", "aliases": ["j"]},
    },
    {
        "name": "part",
        "parser": _parse_part,
        "help": {"usage": "/part [channel] [reason]", "description": "Leave a channel (current one by default).", "aliases": ["leave"]},
    },
    {
        "name": "nick",
        "parser": _parse_nick,
        "help": {"usage": "/nick <newnick>", "description": "Change your nickname.", "aliases": []},
    },
    {
        "name": "msg",
        "parser": _parse_msg,
        "help": {"usage": "/msg <target> <message>", "description": "Send a private message.", "aliases": ["query"]},
    },
    {
        "name": "me",
        "parser": _parse_me,
        "help": {"usage": "/me <action>", "description": "Send an action to the current channel.", "aliases": []},
    },
    {
        "name": "switch",
        "parser": _parse_switch,
        "help": {"usage": "/switch [channel]", "description": "Switch to a channel, or list joined channels.", "aliases": ["sw"]},
    },
    {
        "name": "list",
        "parser": _parse_list,
        "help": {"usage": "/list [pattern]", "description": "Ask the server for its channel list.", "aliases": ["ls"]},
    },
    {
        "name": "clear",
        "parser": lambda args: ClearCommand(),
        "help": {"usage": "/clear", "description": "Clear messages of the current channel.", "aliases": []},
    },
    {
        "name": "status",
        "parser": lambda args: StatusCommand(),
        "help": {"usage": "/status", "description": "Show connection status.", "aliases": []},
    },
    {
        "name": "reconnect",
        "parser": lambda args: ReconnectCommand(),
        "help": {"usage": "/reconnect", "description": "Reconnect after a disconnect.", "aliases": []},
    },
    {
        "name": "config",
        "parser": _parse_config,
        "help": {"usage": "/config [show|save|reload]", "description": "Show, save or reload the configuration.", "aliases": []},
    },
    {
        "name": "logging",
        "parser": _parse_logging,
        "help": {"usage": "/logging [on|off|debug on|off|status]", "description": "Control file logging.", "aliases": ["log"]},
    },
    {
        "name": "help",
        "parser": lambda args: HelpCommand(),
        "help": {"usage": "/help", "description": "Show this help.", "aliases": ["h"]},
    },
    {
        "name": "quit",
        "parser": _parse_quit,
        "help": {"usage": "/quit [reason]", "description": "Disconnect and exit.", "aliases": []},
    },
]

KEY_BINDING_HELP = [
    ("Tab / Ctrl+N", "Next channel"),
    ("Shift+Tab", "Previous channel"),
    ("Alt+1..9", "Jump to channel by number"),
    ("Ctrl+B", "Toggle sidebar"),
    ("Ctrl+P", "Command palette"),
    ("Ctrl+U", "Clear input"),
    ("Ctrl+C", "Quit"),
]


def _build_command_map() -> Dict[str, Callable[[str], ParsedCommand]]:
    command_map: Dict[str, Callable[[str], ParsedCommand]] = {}
    for cmd_def in COMMAND_DEFINITIONS:
        command_map[cmd_def["name"]] = cmd_def["parser"]
        for alias in cmd_def["help"]["aliases"]:
            command_map[alias] = cmd_def["parser"]
    return command_map


_COMMAND_MAP = _build_command_map()


def parse(line: str) -> Optional[ParsedCommand]:
    """
    Parse one line of user input.

    Returns None for blank input. Lines without the command marker become a
    ChatLine; unknown commands become a RawCommand carrying the text after
    the marker verbatim.
    """
    stripped = line.strip()
    if not stripped:
        return None
    if not stripped.startswith(COMMAND_MARKER):
        return ChatLine(stripped)

    body = stripped[len(COMMAND_MARKER):].strip()
    if not body:
        return None
    parts = body.split(None, 1)
    command = parts[0].lower()
    args = parts[1].strip() if len(parts) > 1 else ""

    parser = _COMMAND_MAP.get(command)
    if parser is None:
        logger.debug(f"Unknown command '{command}', passing through as raw: {body}")
        return RawCommand(body)
    return parser(args)


def help_lines() -> List[str]:
    lines = ["Available commands:"]
    for cmd_def in COMMAND_DEFINITIONS:
        help_info = cmd_def["help"]
        aliases = help_info["aliases"]
        alias_str = f" (aliases: {', '.join('/' + a for a in aliases)})" if aliases else ""
        lines.append(f"  {help_info['usage']} - {help_info['description']}{alias_str}")
    lines.append("Key bindings:")
    for keys, description in KEY_BINDING_HELP:
        lines.append(f"  {keys} - {description}")
    lines.append("Any other /COMMAND is sent to the server as-is.")
    return lines
