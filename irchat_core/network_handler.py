# irchat_core/network_handler.py
import asyncio
import socket
import ssl
import logging
from typing import Optional

from irchat_core.config_defs import DEFAULT_USERNAME, DEFAULT_REALNAME, DEFAULT_CONNECTION_TIMEOUT
from irchat_core.irc import irc_events as ev
from irchat_core.irc.irc_handlers import message_to_event, ERR_NICKNAMEINUSE, RPL_WELCOME
from irchat_core.irc.irc_message import IRCMessage

logger = logging.getLogger("irchat.network")

READ_CHUNK_SIZE = 4096


class NetworkHandler:
    """
    asyncio transport for one server connection.

    Inbound events are pushed onto the queue handed in at construction with
    `put_nowait`, so the network task never waits on the session loop.
    Outbound methods are plain functions: they write to the stream without
    awaiting and return False when the connection is not registered yet.
    """

    def __init__(
        self,
        event_queue: asyncio.Queue,
        username: str = DEFAULT_USERNAME,
        realname: str = DEFAULT_REALNAME,
        connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT,
    ):
        self.event_queue = event_queue
        self.username = username
        self.realname = realname
        self.connection_timeout = connection_timeout
        self.server: Optional[str] = None
        self.port: Optional[int] = None
        self.use_ssl = False
        self.nick: str = ""
        self.password: Optional[str] = None
        self.quit_message: Optional[str] = None
        self.connected = False
        self.registered = False
        self._quitting = False
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._network_task: Optional[asyncio.Task] = None
        self.buffer: bytes = b""

    # --- Lifecycle ---

    def is_ready(self) -> bool:
        return self.registered and self._writer is not None and not self._writer.is_closing()

    def connect(
        self,
        server: str,
        port: int,
        nick: str,
        use_ssl: bool,
        password: Optional[str] = None,
        quit_message: Optional[str] = None,
    ) -> bool:
        if self._network_task is not None and not self._network_task.done():
            logger.warning("connect called while a network task is still running")
            return False
        self.server, self.port, self.nick, self.use_ssl = server, port, nick, use_ssl
        self.password = password
        self.quit_message = quit_message
        self._quitting = False
        self.buffer = b""
        self._network_task = asyncio.get_running_loop().create_task(self.network_loop())
        logger.info(f"Network task started for {server}:{port} (SSL: {use_ssl})")
        return True

    async def stop(self):
        """Close the connection and wait for the network task to finish."""
        task = self._network_task
        if task is None or task.done():
            return
        self._close_writer()
        try:
            await asyncio.wait_for(task, timeout=2.0)
        except asyncio.TimeoutError:
            logger.warning("Network task did not finish in time, cancelling")
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info("Network task cancelled")
        self._network_task = None

    def _emit(self, event: "ev.InboundEvent"):
        logger.debug(f"Event -> session: {event!r}")
        self.event_queue.put_nowait(event)

    def _close_writer(self):
        if self._writer and not self._writer.is_closing():
            try:
                self._writer.close()
            except (OSError, RuntimeError) as e:
                logger.debug(f"Error closing writer: {e}")

    def _reset_connection_state(self):
        self.connected = False
        self.registered = False
        self._close_writer()
        self._reader = None
        self._writer = None
        self.buffer = b""

    def _create_ssl_context(self) -> ssl.SSLContext:
        ssl_context = ssl.create_default_context()
        try:
            ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
        except AttributeError:
            logger.warning("ssl.TLSVersion.TLSv1_2 not available. Default TLS settings.")
        return ssl_context

    async def _connect_socket(self) -> bool:
        ssl_context = self._create_ssl_context() if self.use_ssl else None
        logger.info(f"Opening connection to {self.server}:{self.port} (SSL: {self.use_ssl})")
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.server, self.port, ssl=ssl_context),
                timeout=self.connection_timeout,
            )
        except (asyncio.TimeoutError, ConnectionRefusedError, socket.gaierror, ssl.SSLError, OSError) as e:
            error_msg = f"{self.server}:{self.port}: {e or type(e).__name__}"
            logger.error(f"Connection error to {error_msg}", exc_info=True)
            self._reader, self._writer = None, None
            self._emit(ev.ConnectFailed(error_msg))
            return False
        self.connected = True
        logger.info(f"Socket connected to {self.server}:{self.port}, registering as {self.nick}")
        if self.password:
            self._write(f"PASS {self.password}")
        self._write(f"NICK {self.nick}")
        self._write(f"USER {self.username} 0 * :{self.realname}")
        return True

    async def network_loop(self) -> None:
        try:
            if not await self._connect_socket():
                return
            while self._reader is not None:
                data_chunk = await self._reader.read(READ_CHUNK_SIZE)
                if not data_chunk:
                    logger.info("Connection closed by server (empty read).")
                    break
                self._process_received_data(data_chunk)
        except asyncio.CancelledError:
            logger.info("Network loop task cancelled.")
            raise
        except (ConnectionError, ssl.SSLError, OSError) as e:
            logger.error(f"Network error in loop: {e}", exc_info=True)
        finally:
            was_connected = self.connected
            self._reset_connection_state()
            if was_connected:
                self._emit(ev.Disconnected("Connection closed" if not self._quitting else "Quit"))
            logger.info("Network loop cleanup complete.")

    def _process_received_data(self, data: bytes) -> None:
        self.buffer += data
        while b"\r\n" in self.buffer:
            line, self.buffer = self.buffer.split(b"\r\n", 1)
            decoded_line = line.decode("utf-8", errors="replace")
            if decoded_line:
                self.handle_line(decoded_line)

    def handle_line(self, line: str) -> None:
        logger.debug(f"S << {line}")
        msg = IRCMessage.parse(line)
        if msg is None:
            logger.warning(f"Unparseable line from server: {line!r}")
            return
        if msg.command == "PING":
            self._write(f"PONG :{msg.param(0)}")
            return
        if msg.command == RPL_WELCOME:
            self.registered = True
            if msg.params:
                self.nick = msg.params[0]
        elif msg.command == ERR_NICKNAMEINUSE and not self.registered:
            self.nick = f"{self.nick}_"
            logger.info(f"Nick in use, retrying as {self.nick}")
            self._write(f"NICK {self.nick}")
        elif msg.command == "NICK" and msg.source_nick and msg.source_nick.lower() == self.nick.lower():
            self.nick = msg.param(0)
        event = message_to_event(msg)
        if event is not None:
            self._emit(event)

    # --- Outbound ---

    def _write(self, data: str) -> bool:
        if not self._writer or self._writer.is_closing():
            logger.error(f"StreamWriter None or closing. Cannot send: {data.strip()}")
            return False
        if not data.endswith("\r\n"):
            data += "\r\n"
        try:
            self._writer.write(data.encode("utf-8", errors="replace"))
        except (OSError, RuntimeError) as e:
            logger.error(f"Network error sending data: {e}")
            return False
        log_data = data.strip()
        if log_data.upper().startswith("PASS "):
            log_data = "PASS ******"
        logger.debug(f"C >> {log_data}")
        return True

    def send_raw(self, data: str) -> bool:
        if not self.is_ready():
            logger.warning(f"send_raw: Not registered. Dropping: {data.strip()}")
            return False
        return self._write(data)

    def join(self, channel: str) -> bool:
        return self.send_raw(f"JOIN {channel}")

    def part(self, channel: str, reason: Optional[str] = None) -> bool:
        if reason:
            return self.send_raw(f"PART {channel} :{reason}")
        return self.send_raw(f"PART {channel}")

    def send_chat(self, channel: str, text: str) -> bool:
        return self.send_raw(f"PRIVMSG {channel} :{text}")

    def send_direct(self, target: str, text: str) -> bool:
        return self.send_raw(f"PRIVMSG {target} :{text}")

    def send_action(self, target: str, text: str) -> bool:
        return self.send_raw(f"PRIVMSG {target} :\x01ACTION {text}\x01")

    def change_nick(self, new_nick: str) -> bool:
        return self.send_raw(f"NICK {new_nick}")

    def list_channels(self, pattern: Optional[str] = None) -> bool:
        return self.send_raw(f"LIST {pattern}" if pattern else "LIST")

    def raw(self, command_line: str) -> bool:
        return self.send_raw(command_line)

    def quit(self, reason: Optional[str] = None) -> bool:
        self._quitting = True
        reason = reason or self.quit_message or ""
        return self._write(f"QUIT :{reason}")
