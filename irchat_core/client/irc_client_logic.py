# irchat_core/client/irc_client_logic.py
import asyncio
import concurrent.futures
import curses
import logging
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from irchat_core.app_config import AppConfig
from irchat_core.client import command_palette as cp
from irchat_core.client.command_palette import CommandPalette, PaletteItem
from irchat_core.client.dummy_ui import DummyUI
from irchat_core.client.key_bindings import Action, Mode, printable_char, resolve
from irchat_core.client.setup_flow import SetupFlow
from irchat_core.client.ui_manager import UIManager
from irchat_core.config_defs import ConfigSnapshot
from irchat_core.irc import irc_events as ev
from irchat_core.logging.chat_logger import ChatLogger
from irchat_core.network_handler import NetworkHandler
from irchat_core.session_controller import SessionController

logger = logging.getLogger("irchat.logic")

QUEUE_POLL_TIMEOUT = 0.05


@dataclass
class KeyPress:
    code: int
    char: Optional[str] = None


@dataclass
class InputLine:
    text: str


QueueItem = Union[ev.InboundEvent, KeyPress, InputLine]


def apply_arg_overrides(config: AppConfig, args: Any):
    """Command line values win over the INI file for this run only."""
    if getattr(args, "server", None):
        config.irc.server = args.server
    if getattr(args, "port", None):
        config.irc.port = args.port
    if getattr(args, "nick", None):
        config.irc.nick = args.nick
    if getattr(args, "channel", None):
        config.irc.channels = list(args.channel)
    if getattr(args, "password", None):
        config.irc.password = args.password
    if getattr(args, "ssl", None) is not None:
        config.irc.use_ssl = args.ssl


class IRCClient_Logic:
    """
    Owns the event queue and feeds it to the session one item at a time.

    Network events, key presses and (headless) input lines share a single
    asyncio.Queue, so the session sees them in arrival order and never runs
    two handlers concurrently.
    """

    def __init__(self, stdscr: Optional[Any], args: Any, config: AppConfig):
        self.stdscr = stdscr
        self.is_headless = stdscr is None
        self.args = args
        self.config = config
        apply_arg_overrides(config, args)

        self.should_quit = asyncio.Event()
        self.ui_needs_update = asyncio.Event()
        self.event_queue: asyncio.Queue = asyncio.Queue()
        self._final_quit_message: Optional[str] = None
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None
        self._input_reader_task: Optional[asyncio.Task] = None

        self.chat_logger = ChatLogger(config.logging)
        self.network_handler = NetworkHandler(self.event_queue, config.irc.username, config.irc.realname)
        self.session = SessionController(
            config.snapshot(), transport=self.network_handler, log_sink=self.chat_logger, config=config
        )
        self.setup_flow = SetupFlow(config.snapshot())
        self.in_setup = not self.is_headless and not getattr(args, "skip_setup", False)
        self.palette = CommandPalette()
        self.input_buffer = ""
        self.show_sidebar = config.ui.show_sidebar

        self._palette_actions: Dict[str, Callable[[], None]] = {
            cp.ACTION_NEXT_CHANNEL: self.session.next_channel,
            cp.ACTION_PREV_CHANNEL: self.session.previous_channel,
            cp.ACTION_LIST_CHANNELS: lambda: self.session.add_system(self.session.describe_channels()),
            cp.ACTION_TOGGLE_SIDEBAR: self.toggle_sidebar,
            cp.ACTION_CLEAR_SCREEN: self.session.clear_current,
            cp.ACTION_CONNECTION_STATUS: self._show_status,
            cp.ACTION_RECONNECT: self.session.begin_connect,
        }

        if self.is_headless:
            self.ui: Any = DummyUI(self, output=getattr(args, "output", sys.stdout))
        else:
            self.ui = UIManager(stdscr, self)
        logger.info(f"Client initialised (headless={self.is_headless}, setup={self.in_setup})")

    # --- Main loop ---

    async def run_main_loop(self):
        logger.info(f"Starting main client loop (headless={self.is_headless}).")
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            if not self.in_setup:
                self.session.begin_connect()
            if not getattr(self.args, "read_input", True):
                logger.debug("Input reading disabled.")
            elif self.is_headless:
                self._start_stdin_reader()
            else:
                self._input_reader_task = asyncio.create_task(self._input_reader())
            self.ui_needs_update.set()
            while not self.should_quit.is_set():
                try:
                    await self._update_ui()
                    try:
                        item = await asyncio.wait_for(self.event_queue.get(), timeout=QUEUE_POLL_TIMEOUT)
                    except asyncio.TimeoutError:
                        continue
                    self.process_item(item)
                    self.drain_queue()
                except curses.error as e:
                    logger.error(f"curses error in main loop: {e}")
                    self.ui_needs_update.set()
        except asyncio.CancelledError:
            logger.info("run_main_loop task cancelled. Proceeding to cleanup.")
            self.should_quit.set()
        finally:
            await self.shutdown()

    def drain_queue(self):
        """Process everything already queued, in order, without waiting."""
        while not self.event_queue.empty() and not self.should_quit.is_set():
            self.process_item(self.event_queue.get_nowait())

    def process_item(self, item: QueueItem):
        if isinstance(item, KeyPress):
            self.handle_key(item.code, item.char)
        elif isinstance(item, InputLine):
            self.handle_line(item.text)
        else:
            self.session.handle_event(item)
        self.ui_needs_update.set()
        if self.session.is_quit:
            self.request_shutdown(self.session.quit_reason)

    async def _update_ui(self):
        if self.ui and self.ui_needs_update.is_set():
            self.ui.refresh_all_windows()
            self.ui_needs_update.clear()

    def _start_stdin_reader(self):
        loop = asyncio.get_running_loop()

        def read_lines():
            try:
                for line in sys.stdin:
                    loop.call_soon_threadsafe(self.event_queue.put_nowait, InputLine(line.rstrip("\r\n")))
                logger.info("stdin closed, quitting")
                loop.call_soon_threadsafe(self.event_queue.put_nowait, InputLine("/quit"))
            except RuntimeError:
                # Loop already closed.
                return

        # Daemon thread: a blocked readline must not hold up interpreter exit.
        threading.Thread(target=read_lines, name="irchat-stdin", daemon=True).start()

    async def _input_reader(self):
        loop = asyncio.get_running_loop()
        try:
            while not self.should_quit.is_set():
                key = await loop.run_in_executor(self._executor, self.ui.get_input_char)
                if isinstance(key, str):
                    self.event_queue.put_nowait(KeyPress(ord(key), key))
                elif key != curses.ERR:
                    self.event_queue.put_nowait(KeyPress(key))
        except asyncio.CancelledError:
            logger.debug("Input reader cancelled.")

    def request_shutdown(self, final_quit_message: Optional[str] = "Client shutting down"):
        logger.info(f"request_shutdown called with message: '{final_quit_message}'")
        if final_quit_message:
            self._final_quit_message = final_quit_message
        self.should_quit.set()

    async def shutdown(self):
        logger.info("Shutting down client.")
        if not self.session.is_quit:
            self.session.quit(self._final_quit_message)
        if self._input_reader_task and not self._input_reader_task.done():
            self._input_reader_task.cancel()
        await self.network_handler.stop()
        self.chat_logger.close()
        self.ui.shutdown()
        if self._executor:
            self._executor.shutdown(wait=False)
        logger.info("Client shutdown complete.")

    # --- Input ---

    @property
    def mode(self) -> Mode:
        if self.in_setup:
            return Mode.SETUP
        if self.palette.visible:
            return Mode.PALETTE
        return Mode.CHAT

    def handle_line(self, text: str):
        if self.in_setup:
            result = self.setup_flow.submit(text)
            if result is not None:
                self.finish_setup(result)
        else:
            self.session.submit_input(text)

    def handle_key(self, code: int, char: Optional[str] = None):
        mode = self.mode
        text = char if char is not None else printable_char(code)
        if text is not None and text.isprintable():
            if mode == Mode.PALETTE:
                self.palette.type_char(text)
            else:
                self.input_buffer += text
            return
        action, arg = resolve(code, mode)
        if action is None:
            return
        if action == Action.RESIZE:
            self.ui.setup_layout()
        elif action == Action.QUIT:
            self.session.quit(self.config.irc.quit_message)
        elif mode == Mode.SETUP:
            self._handle_setup_action(action)
        elif mode == Mode.PALETTE:
            self._handle_palette_action(action)
        else:
            self._handle_chat_action(action, arg)

    def _handle_setup_action(self, action: Action):
        if action == Action.SUBMIT:
            text, self.input_buffer = self.input_buffer, ""
            self.handle_line(text)
        elif action == Action.BACKSPACE:
            self.input_buffer = self.input_buffer[:-1]
        elif action == Action.SETUP_BACK:
            self.input_buffer = ""
            self.setup_flow.go_back()
        elif action == Action.SETUP_HELP:
            self.setup_flow.toggle_help()

    def _handle_palette_action(self, action: Action):
        if action == Action.SUBMIT:
            self.run_palette_item(self.palette.execute())
        elif action == Action.BACKSPACE:
            self.palette.backspace()
        elif action == Action.PALETTE_CLOSE:
            self.palette.close()
        elif action == Action.PALETTE_UP:
            self.palette.move(-1)
        elif action == Action.PALETTE_DOWN:
            self.palette.move(1)
        elif action == Action.PALETTE_CLEAR:
            self.palette.clear_query()

    def _handle_chat_action(self, action: Action, arg: Optional[int]):
        if action == Action.SUBMIT:
            text, self.input_buffer = self.input_buffer, ""
            self.ui.scroll_messages("end")
            self.handle_line(text)
        elif action == Action.BACKSPACE:
            self.input_buffer = self.input_buffer[:-1]
        elif action == Action.NEXT_CHANNEL:
            self.session.next_channel()
        elif action == Action.PREV_CHANNEL:
            self.session.previous_channel()
        elif action == Action.JUMP_TO_CHANNEL and arg is not None:
            self.session.switch_to_index(arg)
        elif action == Action.TOGGLE_SIDEBAR:
            self.toggle_sidebar()
        elif action == Action.OPEN_PALETTE:
            self.palette.open(self.session.snapshot_view())
        elif action == Action.CLEAR_INPUT:
            self.input_buffer = ""
        elif action == Action.SCROLL_UP:
            self.ui.scroll_messages("up")
        elif action == Action.SCROLL_DOWN:
            self.ui.scroll_messages("down")

    def run_palette_item(self, item: Optional[PaletteItem]):
        if item is None:
            return
        logger.debug(f"Palette item chosen: {item.name} ({item.command})")
        if item.needs_argument:
            self.input_buffer = f"{item.command} "
        elif item.command.startswith("/"):
            self.session.submit_input(item.command)
        else:
            action = self._palette_actions.get(item.command)
            if action is None:
                logger.warning(f"Palette item without handler: {item.command}")
                return
            action()

    def toggle_sidebar(self):
        self.show_sidebar = not self.show_sidebar

    def _show_status(self):
        for line in self.session.status_lines():
            self.session.add_system(line)

    def finish_setup(self, snapshot: ConfigSnapshot):
        self.in_setup = False
        self.input_buffer = ""
        self.config.apply_snapshot(snapshot)
        if not self.config.save_current_config():
            self.session.add_error(f"Could not save configuration to {self.config.CONFIG_FILE_PATH}")
        self.session.begin_connect(snapshot)
