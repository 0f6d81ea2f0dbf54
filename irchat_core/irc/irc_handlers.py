# irchat_core/irc/irc_handlers.py
import logging
from typing import Callable, Dict, Optional

from irchat_core.config_defs import CHANNEL_PREFIXES
from irchat_core.irc import irc_events as ev
from irchat_core.irc.irc_message import IRCMessage

logger = logging.getLogger("irchat.irc")

CTCP_DELIMITER = "\x01"

RPL_WELCOME = "001"
ERR_NICKNAMEINUSE = "433"

# Numeric replies worth showing to the user, mostly answers to
# passthrough commands such as WHOIS, LIST and TOPIC.
DISPLAYED_NUMERICS = {
    "301", "311", "312", "313", "317", "318", "319",
    "321", "322", "323", "331", "332", "372",
}


def _is_channel(target: str) -> bool:
    return bool(target) and target.startswith(CHANNEL_PREFIXES)


def _source(msg: IRCMessage) -> str:
    return msg.source_nick or msg.prefix or "server"


def _handle_privmsg(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    target = msg.param(0)
    text = msg.trailing if msg.trailing is not None else msg.param(1)
    channel = target if _is_channel(target) else ""
    if text.startswith(CTCP_DELIMITER):
        ctcp = text.strip(CTCP_DELIMITER)
        if ctcp.upper().startswith("ACTION "):
            return ev.ChatReceived(_source(msg), channel, ctcp[len("ACTION "):], is_action=True)
        logger.debug(f"Ignoring CTCP '{ctcp}' from {_source(msg)}")
        return None
    return ev.ChatReceived(_source(msg), channel, text)


def _handle_notice(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    text = msg.trailing if msg.trailing is not None else msg.param(1)
    if text.startswith(CTCP_DELIMITER):
        return None
    return ev.NoticeReceived(_source(msg), text)


def _handle_join(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    channel = msg.param(0)
    if not channel:
        return None
    return ev.Joined(_source(msg), channel)


def _handle_part(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    channel = msg.param(0)
    if not channel:
        return None
    reason = msg.param(1) or None
    return ev.Parted(_source(msg), channel, reason)


def _handle_quit(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    return ev.Quit(_source(msg), msg.param(0) or None)


def _handle_nick(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    new_nick = msg.param(0)
    if not new_nick:
        return None
    return ev.NickChanged(_source(msg), new_nick)


def _handle_error(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    return ev.ServerError(msg.param(0) or "Server closed the link")


def _handle_welcome(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    return ev.Connected(msg.prefix or "")


def _handle_numeric(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    # First param of a numeric reply is always our own nick.
    details = " ".join(msg.all_params[1:])
    if msg.command == ERR_NICKNAMEINUSE:
        return ev.ServerError(f"Nickname {msg.param(1)} is already in use")
    if msg.command[0] in ("4", "5"):
        return ev.ServerError(details or f"Server error {msg.command}")
    if msg.command in DISPLAYED_NUMERICS and details:
        return ev.NoticeReceived(msg.prefix or "server", details)
    return None


MESSAGE_HANDLERS: Dict[str, Callable[[IRCMessage], Optional[ev.InboundEvent]]] = {
    "PRIVMSG": _handle_privmsg,
    "NOTICE": _handle_notice,
    "JOIN": _handle_join,
    "PART": _handle_part,
    "QUIT": _handle_quit,
    "NICK": _handle_nick,
    "ERROR": _handle_error,
    RPL_WELCOME: _handle_welcome,
}


def message_to_event(msg: IRCMessage) -> Optional[ev.InboundEvent]:
    """Translate one parsed protocol line into an inbound session event, if any."""
    handler = MESSAGE_HANDLERS.get(msg.command)
    if handler is not None:
        return handler(msg)
    if msg.command.isdigit():
        return _handle_numeric(msg)
    logger.debug(f"No event for {msg.command}: {msg!r}")
    return None
