# irchat_core/session_controller.py
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from irchat_core import channel_navigator
from irchat_core import message_formatter as fmt
from irchat_core.channel_registry import ChannelRegistry
from irchat_core.commands import command_interpreter as ci
from irchat_core.config_defs import ConfigSnapshot, DEFAULT_PART_REASON
from irchat_core.irc import irc_events as ev
from irchat_core.session_state import AppState, ConnectionState, SessionSnapshot

if TYPE_CHECKING:
    from irchat_core.app_config import AppConfig
    from irchat_core.logging.chat_logger import ChatLogger
    from irchat_core.network_handler import NetworkHandler

logger = logging.getLogger("irchat.session")

NOT_CONNECTED_MESSAGE = "Not connected to server"
NO_CHANNEL_MESSAGE = "No channel selected. Use /join <channel>"


class SessionController:
    """
    Central state machine of a chat session.

    Owns the ChannelRegistry, the current channel, the nickname and the
    visible transcript. Inbound protocol events arrive through
    `handle_event`, typed input through `submit_input`. Outbound protocol
    commands go straight to the transport, whose methods return False when
    it cannot send; those commands are dropped with a visible error.

    Nothing in here raises into the caller: every operation either mutates
    state, appends a line to the transcript, or does nothing.
    """

    def __init__(
        self,
        snapshot: ConfigSnapshot,
        transport: Optional["NetworkHandler"] = None,
        log_sink: Optional["ChatLogger"] = None,
        config: Optional["AppConfig"] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.snapshot = snapshot
        self.transport = transport
        self.log_sink = log_sink
        self.config = config
        self.clock = clock

        self.app_state = AppState.SETUP
        self.connection_state = ConnectionState.DISCONNECTED
        self.nick: str = snapshot.nick
        self.current_channel: str = ""
        self.transcript: List[str] = []
        self.registry = ChannelRegistry()
        self.autojoin: List[str] = []
        self.connected_since: Optional[float] = None
        self.quit_reason: Optional[str] = None
        self._seed_from_snapshot(snapshot)

        self._event_handlers: Dict[type, Callable[[Any], None]] = {
            ev.Connected: self._on_connected,
            ev.Disconnected: self._on_disconnected,
            ev.ConnectFailed: self._on_connect_failed,
            ev.ChatReceived: self._on_chat,
            ev.NickChanged: self._on_nick_changed,
            ev.Joined: self._on_joined,
            ev.Parted: self._on_parted,
            ev.Quit: self._on_quit,
            ev.NoticeReceived: self._on_notice,
            ev.ServerError: self._on_server_error,
        }
        self._command_handlers: Dict[type, Callable[[Any], None]] = {
            ci.ChatLine: self._cmd_chat,
            ci.JoinCommand: self._cmd_join,
            ci.PartCommand: self._cmd_part,
            ci.NickCommand: self._cmd_nick,
            ci.MsgCommand: self._cmd_msg,
            ci.MeCommand: self._cmd_me,
            ci.SwitchCommand: self._cmd_switch,
            ci.ListCommand: self._cmd_list,
            ci.QuitCommand: self._cmd_quit,
            ci.HelpCommand: self._cmd_help,
            ci.ClearCommand: self._cmd_clear,
            ci.StatusCommand: self._cmd_status,
            ci.ReconnectCommand: self._cmd_reconnect,
            ci.ConfigCommand: self._cmd_config,
            ci.LoggingCommand: self._cmd_logging,
            ci.RawCommand: self._cmd_raw,
            ci.UsageError: self._cmd_usage_error,
        }

    def _seed_from_snapshot(self, snapshot: ConfigSnapshot):
        self.snapshot = snapshot
        self.nick = snapshot.nick
        self.autojoin = [self.registry.normalize_name(ch) for ch in snapshot.channels if ch.strip()]
        for channel in self.autojoin:
            self.registry.register(channel)

    # --- Output helpers ---

    def _log(self, text: str):
        logger.info(text)
        if self.log_sink:
            self.log_sink.log(text)

    def add_to_transcript(self, line: str):
        self.transcript.append(line)

    def add_system(self, text: str):
        self.add_to_transcript(fmt.format_system(text))

    def add_error(self, text: str):
        self.add_to_transcript(fmt.format_error(text))

    def _add_to_channel(self, channel: str, line: str):
        self.registry.append_message(channel, line)
        if channel and channel == self.current_channel:
            self.transcript.append(line)

    def _send(self, method_name: str, *args) -> bool:
        """Call an outbound transport method; report and drop when not ready."""
        if self.transport is None or not self.transport.is_ready():
            logger.warning(f"Dropping outbound {method_name}{args}: transport not ready")
            self.add_error(NOT_CONNECTED_MESSAGE)
            return False
        sent = getattr(self.transport, method_name)(*args)
        if not sent:
            logger.warning(f"Transport refused outbound {method_name}{args}")
            self.add_error(NOT_CONNECTED_MESSAGE)
        return bool(sent)

    # --- Lifecycle ---

    def begin_connect(self, snapshot: Optional[ConfigSnapshot] = None) -> bool:
        """Setup (or disconnected) -> Connecting."""
        if self.app_state == AppState.QUIT:
            return False
        if self.connection_state != ConnectionState.DISCONNECTED:
            self.add_error("Already connected or connecting")
            return False
        if snapshot is not None:
            self._seed_from_snapshot(snapshot)
        if self.transport is None:
            self.add_error("No transport available")
            return False
        target = self.snapshot
        self.app_state = AppState.CONNECTING
        self.connection_state = ConnectionState.CONNECTING
        self.add_system(f"Connecting to {target.address} as {self.nick}...")
        self._log(f"Connecting to {target.address} (SSL: {target.use_ssl}) as {self.nick}")
        self.transport.connect(
            target.server, target.port, self.nick, target.use_ssl,
            target.password, target.quit_message,
        )
        return True

    def quit(self, reason: Optional[str] = None):
        """Any state -> Quit. Sends QUIT first when connected."""
        if self.app_state == AppState.QUIT:
            return
        reason = reason or self.snapshot.quit_message or DEFAULT_PART_REASON
        if self.connection_state == ConnectionState.CONNECTED and self.transport is not None:
            self.transport.quit(reason)
        self.quit_reason = reason
        self.app_state = AppState.QUIT
        self._log(f"Session quit ({reason})")

    @property
    def is_quit(self) -> bool:
        return self.app_state == AppState.QUIT

    # --- Inbound events ---

    def handle_event(self, event: "ev.InboundEvent"):
        if self.app_state == AppState.QUIT:
            logger.debug(f"Ignoring {type(event).__name__} after quit")
            return
        handler = self._event_handlers.get(type(event))
        if handler is None:
            logger.warning(f"No handler for inbound event {event!r}")
            return
        handler(event)

    def _on_connected(self, event: ev.Connected):
        self.app_state = AppState.CONNECTED
        self.connection_state = ConnectionState.CONNECTED
        self.connected_since = self.clock()
        self.add_system("Connected to IRC server")
        self._log(f"Connected to {event.server or self.snapshot.address}")
        for channel in self.autojoin:
            self.registry.register(channel)
            if self._send("join", channel):
                self._log(f"Auto-joining {channel}")

    def _on_disconnected(self, event: ev.Disconnected):
        was_connected = self.connection_state == ConnectionState.CONNECTED
        self.connection_state = ConnectionState.DISCONNECTED
        self.app_state = AppState.DISCONNECTED
        self.connected_since = None
        rejoin = list(self.autojoin)
        for channel in self.registry.joined_channels():
            self.registry.set_joined(channel, False)
            if channel not in rejoin:
                rejoin.append(channel)
        self.autojoin = rejoin
        if self.current_channel:
            self.registry.set_active(self.current_channel, False)
            self.current_channel = ""
        text = "Disconnected from IRC server"
        if event.reason:
            text += f" ({event.reason})"
        self.add_error(text)
        self.add_system("Use /reconnect to connect again or /quit to exit")
        self._log(f"{text} (was connected: {was_connected})")

    def _on_connect_failed(self, event: ev.ConnectFailed):
        self.connection_state = ConnectionState.DISCONNECTED
        self.app_state = AppState.DISCONNECTED
        self.add_error(f"Connection failed: {event.error}")
        self.add_system("Use /reconnect to try again or /quit to exit")
        self._log(f"Connection failed: {event.error}")

    def _is_self(self, nick: str) -> bool:
        return nick.lower() == self.nick.lower()

    def _on_chat(self, event: ev.ChatReceived):
        if event.is_action:
            line = fmt.format_action(event.user, event.text)
        else:
            line = fmt.format_chat(event.user, event.text, is_own=self._is_self(event.user))
        if not event.channel or self._is_self(event.channel):
            # Private messages have no channel home.
            self.add_to_transcript(line)
        else:
            self._add_to_channel(event.channel, line)
        if self.log_sink:
            self.log_sink.log_chat(event.channel or self.nick, event.user, event.text)

    def _on_nick_changed(self, event: ev.NickChanged):
        if self._is_self(event.old_nick):
            self.nick = event.new_nick
            self._log(f"Our nick changed from {event.old_nick} to {event.new_nick}")
        self.add_to_transcript(fmt.format_nick_change(event.old_nick, event.new_nick))

    def _on_joined(self, event: ev.Joined):
        is_self = self._is_self(event.user)
        if is_self:
            self.registry.register(event.channel)
        self._add_to_channel(event.channel, fmt.format_join(event.user, event.channel))
        if not is_self:
            return
        self.registry.set_joined(event.channel, True)
        self._log(f"Joined {event.channel}")
        joined = self.registry.joined_channels()
        if not self.current_channel or len(joined) == 1:
            self.switch_to(event.channel)

    def _on_parted(self, event: ev.Parted):
        line = fmt.format_part(event.user, event.channel, event.reason)
        if event.channel in self.registry:
            self._add_to_channel(event.channel, line)
        else:
            self.add_to_transcript(line)
        if self._is_self(event.user):
            self._leave_channel(event.channel)

    def _on_quit(self, event: ev.Quit):
        self.add_to_transcript(fmt.format_quit(event.user, event.reason))

    def _on_notice(self, event: ev.NoticeReceived):
        self.add_to_transcript(fmt.format_notice(event.sender, event.text))

    def _on_server_error(self, event: ev.ServerError):
        self.add_error(event.text)
        self._log(f"Server error: {event.text}")

    # --- Channel state ---

    def switch_to(self, name: str, announce: bool = True) -> bool:
        channel = self.registry.get(name)
        if channel is None or not channel.joined:
            logger.debug(f"switch_to('{name}') ignored: unknown or not joined")
            return False
        previous = self.current_channel
        if previous and previous != name:
            self.registry.set_active(previous, False)
        self.current_channel = name
        self.registry.set_active(name, True)
        self.transcript = self.registry.messages_copy(name)
        if announce and previous and previous != name:
            self.add_to_transcript(fmt.format_now_viewing(name))
        logger.debug(f"Switched from '{previous}' to '{name}'")
        return True

    def _leave_channel(self, channel: str):
        joined_before = self.registry.joined_channels()
        self.registry.set_joined(channel, False)
        if channel != self.current_channel:
            return
        remaining = self.registry.joined_channels()
        if remaining:
            target = channel_navigator.next_channel(channel, joined_before)
            if target not in remaining:
                target = remaining[0]
            self.switch_to(target)
        else:
            self.registry.set_active(channel, False)
            self.current_channel = ""
            self.add_system(f"Left {channel}. No channels joined")

    def _navigate(self, forward: bool):
        joined = self.registry.joined_channels()
        if not joined:
            self.add_system("No channels joined")
            return
        if len(joined) == 1:
            self.add_system("Only one channel available")
            return
        if forward:
            target = channel_navigator.next_channel(self.current_channel, joined)
        else:
            target = channel_navigator.previous_channel(self.current_channel, joined)
        if self.switch_to(target, announce=False):
            position = channel_navigator.position_of(target, joined)
            self.add_to_transcript(fmt.format_channel_switch(target, position, len(joined), forward))

    def next_channel(self):
        self._navigate(True)

    def previous_channel(self):
        self._navigate(False)

    def switch_to_index(self, index: int) -> bool:
        """Jump to the joined channel at a zero-based position."""
        joined = self.registry.joined_channels()
        target = channel_navigator.by_index(joined, index)
        if target is None:
            return False
        return self.switch_to(target)

    def clear_current(self):
        if self.current_channel:
            self.registry.clear_messages(self.current_channel)
        self.transcript = []

    # --- User input ---

    def submit_input(self, line: str):
        parsed = ci.parse(line)
        if parsed is None:
            return
        self.dispatch(parsed)

    def dispatch(self, command: "ci.ParsedCommand"):
        if self.app_state == AppState.QUIT:
            return
        handler = self._command_handlers.get(type(command))
        if handler is None:
            logger.error(f"No handler for parsed command {command!r}")
            return
        handler(command)

    def _cmd_chat(self, command: ci.ChatLine):
        if not self.current_channel:
            self.add_error(NO_CHANNEL_MESSAGE)
            return
        channel = self.current_channel
        if self._send("send_chat", channel, command.text):
            self._add_to_channel(channel, fmt.format_chat(self.nick, command.text, is_own=True))
            if self.log_sink:
                self.log_sink.log_chat(channel, self.nick, command.text)

    def _cmd_join(self, command: ci.JoinCommand):
        channel = self.registry.normalize_name(command.channel)
        self.registry.register(channel)
        if self._send("join", channel):
            self.add_system(f"Joining {channel}...")

    def _cmd_part(self, command: ci.PartCommand):
        if command.channel:
            found = self.registry.find(command.channel)
            channel = found.name if found else command.channel
        else:
            channel = self.current_channel
        if not channel:
            self.add_error("Usage: /part [channel] [reason]")
            return
        if not self.registry.is_joined(channel):
            self.add_error(f"Channel {channel} not found or not joined")
            return
        if self._send("part", channel, command.reason):
            self._log(f"Parting {channel}")
            self._leave_channel(channel)

    def _cmd_nick(self, command: ci.NickCommand):
        if self._send("change_nick", command.new_nick):
            self.add_system(f"Requesting nick change to {command.new_nick}")

    def _cmd_msg(self, command: ci.MsgCommand):
        if self._send("send_direct", command.target, command.text):
            line = fmt.format_chat(self.nick, f"(to {command.target}) {command.text}", is_own=True)
            if command.target == self.current_channel:
                self._add_to_channel(command.target, line)
            else:
                self.registry.append_message(command.target, line)
                self.add_to_transcript(line)

    def _cmd_me(self, command: ci.MeCommand):
        if not self.current_channel:
            self.add_error(NO_CHANNEL_MESSAGE)
            return
        channel = self.current_channel
        if self._send("send_action", channel, command.text):
            self._add_to_channel(channel, fmt.format_action(self.nick, command.text))

    def _cmd_switch(self, command: ci.SwitchCommand):
        if not command.channel:
            self.add_system(self.describe_channels())
            return
        if command.channel.isdigit():
            if self.switch_to_index(int(command.channel) - 1):
                return
        found = self.registry.find(command.channel) or self.registry.find(self.registry.normalize_name(command.channel))
        if found is None or not found.joined:
            self.add_error(f"Channel {command.channel} not found or not joined")
            return
        self.switch_to(found.name)

    def describe_channels(self) -> str:
        joined = self.registry.joined_channels()
        if not joined:
            return "No channels joined"
        entries = []
        for i, name in enumerate(joined, start=1):
            marker = "*" if name == self.current_channel else ""
            entries.append(f"{i}:{name}{marker}")
        return f"Available channels: {', '.join(entries)}"

    def _cmd_list(self, command: ci.ListCommand):
        if self._send("list_channels", command.pattern):
            if command.pattern:
                self.add_system(f"Listing channels matching {command.pattern}")
            else:
                self.add_system("Listing all channels")

    def _cmd_quit(self, command: ci.QuitCommand):
        self.quit(command.reason)

    def _cmd_help(self, command: ci.HelpCommand):
        for line in ci.help_lines():
            self.add_system(line)

    def _cmd_clear(self, command: ci.ClearCommand):
        self.clear_current()

    def _cmd_status(self, command: ci.StatusCommand):
        for line in self.status_lines():
            self.add_system(line)

    def status_lines(self) -> List[str]:
        lines = [
            f"State: {self.connection_state.name.lower()}",
            f"Server: {self.snapshot.address} (SSL: {'yes' if self.snapshot.use_ssl else 'no'})",
            f"Nick: {self.nick}",
            f"Channel: {self.current_channel or '(none)'}",
        ]
        if self.connected_since is not None:
            uptime = int(self.clock() - self.connected_since)
            lines.append(f"Uptime: {uptime // 3600:02d}:{uptime % 3600 // 60:02d}:{uptime % 60:02d}")
        return lines

    def _cmd_reconnect(self, command: ci.ReconnectCommand):
        self.begin_connect()

    def _cmd_config(self, command: ci.ConfigCommand):
        if self.config is None:
            self.add_error("Configuration is not available")
            return
        if command.action in ("show", "status"):
            for line in self.config.describe():
                self.add_system(line)
        elif command.action == "save":
            if self.config.save_current_config():
                self.add_system(f"Configuration saved to {self.config.CONFIG_FILE_PATH}")
            else:
                self.add_error("Failed to save configuration")
        elif command.action == "reload":
            if self.config.rehash():
                self._apply_logging_config()
                self.add_system("Configuration reloaded")
            else:
                self.add_error(f"Configuration file not found: {self.config.CONFIG_FILE_PATH}")
        else:
            self.add_error("Usage: /config [show|save|reload]")

    def _cmd_logging(self, command: ci.LoggingCommand):
        if self.config is None:
            self.add_error("Configuration is not available")
            return
        args = command.args
        if not args or args[0] in ("status", "show"):
            for line in self.logging_status_lines():
                self.add_system(line)
        elif args[0] in ("on", "enable", "true"):
            self.config.set_logging_enabled(True)
            self._apply_logging_config()
            self.add_system("Logging enabled")
        elif args[0] in ("off", "disable", "false"):
            self.config.set_logging_enabled(False)
            self._apply_logging_config()
            self.add_system("Logging disabled")
        elif args[0] == "debug" and len(args) > 1 and args[1] in ("on", "off"):
            enabled = args[1] == "on"
            self.config.set_debug_logging(enabled)
            self._apply_logging_config()
            self.add_system(f"Debug logging {'enabled' if enabled else 'disabled'}")
        else:
            self.add_error("Usage: /logging [on|off|debug on|off|status]")

    def logging_status_lines(self) -> List[str]:
        log_config = self.config.logging
        return [
            f"Logging: {'enabled' if log_config.enabled else 'disabled'}",
            f"Debug logging: {'enabled' if log_config.debug else 'disabled'}",
            f"Log path: {log_config.resolved_log_path}",
            f"Max size: {log_config.max_size_kb} KB",
        ]

    def _apply_logging_config(self):
        if self.log_sink and self.config:
            self.log_sink.reconfigure(self.config.logging)

    def _cmd_raw(self, command: ci.RawCommand):
        if self._send("raw", command.line):
            self.add_system(f"Sent raw command: {command.line}")

    def _cmd_usage_error(self, command: ci.UsageError):
        self.add_error(command.message)

    # --- Rendering ---

    def snapshot_view(self) -> SessionSnapshot:
        return SessionSnapshot(
            app_state=self.app_state,
            connection_state=self.connection_state,
            server=self.snapshot.address,
            nick=self.nick,
            current_channel=self.current_channel,
            channels=self.registry.list_with_status(),
            transcript=list(self.transcript),
            connected_since=self.connected_since,
        )
