# irchat_core/client/ui_manager.py
import curses
import logging
import textwrap
from typing import TYPE_CHECKING, Any, Dict, List, Union

import pyfiglet

from irchat_core import message_formatter as fmt
from irchat_core.client.curses_utils import SafeCursesUtils
from irchat_core.client.key_bindings import ALT_DIGIT_BASE, KEY_ESCAPE
from irchat_core.session_state import ConnectionState, SessionSnapshot

if TYPE_CHECKING:
    from irchat_core.client.irc_client_logic import IRCClient_Logic

logger = logging.getLogger("irchat.ui")

BANNER_FONT = "small"
INPUT_PROMPT = "> "
PALETTE_WIDTH = 60

COLOR_PAIRS = {
    "system": (curses.COLOR_CYAN, -1),
    "join_part": (curses.COLOR_GREEN, -1),
    "my_message": (curses.COLOR_YELLOW, -1),
    "other_message": (curses.COLOR_WHITE, -1),
    "error": (curses.COLOR_RED, -1),
    "status_bar": (curses.COLOR_BLACK, curses.COLOR_CYAN),
    "sidebar_active": (curses.COLOR_BLACK, curses.COLOR_WHITE),
    "sidebar_item": (curses.COLOR_WHITE, -1),
    "header": (curses.COLOR_WHITE, curses.COLOR_BLUE),
    "banner": (curses.COLOR_MAGENTA, -1),
}


def render_banner(text: str) -> List[str]:
    try:
        art = pyfiglet.figlet_format(text, font=BANNER_FONT)
    except pyfiglet.FontNotFound:
        logger.warning(f"Figlet font '{BANNER_FONT}' not found, using plain banner")
        return [text]
    return [line for line in art.split("\n") if line.strip()]


class UIManager:
    """Draws the whole screen from the client's state on every refresh."""

    def __init__(self, stdscr: Any, client_logic_ref: "IRCClient_Logic"):
        self.stdscr = stdscr
        self.client = client_logic_ref
        self.colors: Dict[str, int] = {}
        self.scroll_offset = 0
        self.height = 0
        self.width = 0
        self.banner_lines = render_banner("irchat")
        SafeCursesUtils._safe_setup_terminal(stdscr)
        self._init_colors()
        self.stdscr.nodelay(False)
        self.stdscr.timeout(100)
        self.setup_layout()

    def _init_colors(self):
        has_colors = False
        try:
            has_colors = curses.has_colors()
        except curses.error:
            pass
        for pair_id, (name, (fg, bg)) in enumerate(COLOR_PAIRS.items(), start=1):
            if has_colors:
                SafeCursesUtils._safe_init_pair(pair_id, fg, bg, f"init_{name}")
                self.colors[name] = curses.color_pair(pair_id)
            else:
                self.colors[name] = curses.A_REVERSE if bg != -1 else curses.A_NORMAL

    def setup_layout(self):
        self.height, self.width = self.stdscr.getmaxyx()
        logger.debug(f"Layout: {self.width}x{self.height}")

    def get_input_char(self) -> Union[int, str]:
        """
        Blocking read with a short timeout.

        Returns a str for typed characters and an int for special keys, so
        code points never collide with curses KEY_* values. ESC followed by
        a digit is folded into a single Alt+digit code.
        """
        try:
            key = self.stdscr.get_wch()
        except curses.error:
            return curses.ERR
        if key == chr(KEY_ESCAPE) or key == KEY_ESCAPE:
            self.stdscr.nodelay(True)
            try:
                follow = self.stdscr.get_wch()
            except curses.error:
                follow = None
            finally:
                self.stdscr.nodelay(False)
                self.stdscr.timeout(100)
            if isinstance(follow, str) and follow.isdigit():
                return ALT_DIGIT_BASE + int(follow)
        return key

    def scroll_messages(self, direction: str):
        page = max(1, self.height - 4)
        if direction == "up":
            self.scroll_offset += page
        elif direction == "down":
            self.scroll_offset = max(0, self.scroll_offset - page)
        else:
            self.scroll_offset = 0

    def _line_color(self, line: str, nick: str) -> int:
        body = line[6:] if len(line) > 6 else line
        if body.startswith(fmt.ERROR_MARKER):
            return self.colors["error"]
        if body.startswith((fmt.JOIN_MARKER, fmt.PART_MARKER, fmt.QUIT_MARKER)):
            return self.colors["join_part"]
        if body.startswith(f"<{nick}>") or body.startswith(f"* {nick} "):
            return self.colors["my_message"]
        if body.startswith("<") or body.startswith("* "):
            return self.colors["other_message"]
        return self.colors["system"]

    def refresh_all_windows(self):
        self.setup_layout()
        SafeCursesUtils._safe_erase(self.stdscr, "refresh_all")
        if self.height < 5 or self.width < 20:
            SafeCursesUtils._safe_addstr(self.stdscr, 0, 0, "Terminal too small", 0, "too_small")
        elif self.client.in_setup:
            self._draw_setup()
        else:
            self._draw_chat(self.client.session.snapshot_view())
            if self.client.palette.visible:
                self._draw_palette()
        self._draw_input()
        SafeCursesUtils._safe_noutrefresh(self.stdscr, "refresh_all")
        SafeCursesUtils._safe_doupdate("refresh_all")

    # --- Setup view ---

    def _draw_setup(self):
        flow = self.client.setup_flow
        y = 1
        for line in self.banner_lines:
            SafeCursesUtils._safe_addstr(self.stdscr, y, 2, line, self.colors["banner"] | curses.A_BOLD, "setup_banner")
            y += 1
        y += 1
        SafeCursesUtils._safe_addstr(self.stdscr, y, 2, f"Setup step {flow.step_number}/4", curses.A_BOLD, "setup_step")
        y += 2
        if flow.phase.name == "CONFIRM":
            for line in flow.summary_lines():
                SafeCursesUtils._safe_addstr(self.stdscr, y, 4, line, self.colors["system"], "setup_summary")
                y += 1
            y += 1
        SafeCursesUtils._safe_addstr(self.stdscr, y, 2, flow.prompt(), curses.A_BOLD, "setup_prompt")
        y += 2
        if flow.error:
            SafeCursesUtils._safe_addstr(self.stdscr, y, 2, f"{fmt.ERROR_MARKER} {flow.error}", self.colors["error"], "setup_error")
            y += 2
        if flow.help_visible:
            for line in flow.help_lines():
                SafeCursesUtils._safe_addstr(self.stdscr, y, 4, line, self.colors["system"], "setup_help")
                y += 1
        SafeCursesUtils._draw_full_width_banner(
            self.stdscr, self.height - 2,
            " Enter: next  Shift+Tab: back  F1: help  Esc: quit", self.colors["status_bar"], "setup_status",
        )

    # --- Chat view ---

    def _draw_chat(self, snapshot: SessionSnapshot):
        header = f" irchat - {snapshot.server} - {snapshot.nick}"
        SafeCursesUtils._draw_full_width_banner(self.stdscr, 0, header, self.colors["header"], "header")

        pane_top, pane_height = 1, self.height - 3
        pane_left = 0
        sidebar_width = self.client.config.ui.sidebar_width
        if self.client.show_sidebar and self.width > sidebar_width + 20:
            self._draw_sidebar(snapshot, pane_top, pane_height, sidebar_width)
            pane_left = sidebar_width + 1
        self._draw_messages(snapshot, pane_top, pane_height, pane_left, self.width - pane_left)
        self._draw_status_bar(snapshot)

    def _draw_sidebar(self, snapshot: SessionSnapshot, top: int, height: int, width: int):
        SafeCursesUtils._safe_addstr(self.stdscr, top, 1, "Channels", curses.A_BOLD | curses.A_UNDERLINE, "sidebar_title")
        if not snapshot.channels:
            SafeCursesUtils._safe_addstr(self.stdscr, top + 2, 1, "(none)", self.colors["sidebar_item"], "sidebar_empty")
        for i, (name, active) in enumerate(snapshot.channels[: height - 2], start=1):
            is_current = name == snapshot.current_channel
            prefix = ">" if is_current else " "
            text = f"{prefix}{i} {name}"[: width - 1].ljust(width - 1)
            attr = self.colors["sidebar_active"] if is_current else self.colors["sidebar_item"]
            SafeCursesUtils._safe_addstr(self.stdscr, top + 1 + i, 0, text, attr, "sidebar_item")
        SafeCursesUtils._safe_vline(self.stdscr, top, width, curses.ACS_VLINE, height, 0, "sidebar_border")

    def _wrap_transcript(self, transcript: List[str], width: int) -> List[str]:
        wrapped: List[str] = []
        for line in transcript:
            wrapped.extend(textwrap.wrap(line, width, subsequent_indent="      ") or [""])
        return wrapped

    def _draw_messages(self, snapshot: SessionSnapshot, top: int, height: int, left: int, width: int):
        if width <= 1 or height <= 0:
            return
        lines = self._wrap_transcript(snapshot.transcript, width - 1)
        max_offset = max(0, len(lines) - height)
        self.scroll_offset = min(self.scroll_offset, max_offset)
        end = len(lines) - self.scroll_offset
        visible = lines[max(0, end - height):end]
        for row, line in enumerate(visible):
            SafeCursesUtils._safe_addstr(self.stdscr, top + row, left, line, self._line_color(line, snapshot.nick), "message_line")

    def _draw_status_bar(self, snapshot: SessionSnapshot):
        state = {
            ConnectionState.CONNECTED: "Connected",
            ConnectionState.CONNECTING: "Connecting...",
            ConnectionState.DISCONNECTED: "Disconnected",
        }[snapshot.connection_state]
        channel = snapshot.current_channel or "(no channel)"
        status = f" {state} | {snapshot.nick} | {channel} | {len(snapshot.channels)} channels | Ctrl+P: commands"
        if self.scroll_offset:
            status += f" | scrolled +{self.scroll_offset}"
        SafeCursesUtils._draw_full_width_banner(self.stdscr, self.height - 2, status, self.colors["status_bar"], "status_bar")

    def _draw_palette(self):
        palette = self.client.palette
        width = min(PALETTE_WIDTH, self.width - 4)
        rows = min(len(palette.results), max(1, self.height - 8))
        left = (self.width - width) // 2
        top = 2
        SafeCursesUtils._draw_full_width_banner(self.stdscr, top, "", 0, "palette_clear")
        SafeCursesUtils._safe_addstr(
            self.stdscr, top, left, f" Command palette: {palette.query}".ljust(width), self.colors["header"], "palette_query"
        )
        if not palette.results:
            SafeCursesUtils._safe_addstr(self.stdscr, top + 1, left, " No matching commands".ljust(width), self.colors["sidebar_item"], "palette_empty")
        for row, item in enumerate(palette.results[:rows]):
            shortcut = f" [{item.shortcut}]" if item.shortcut else ""
            text = f" {item.name}{shortcut} - {item.description}"[:width].ljust(width)
            attr = self.colors["sidebar_active"] if row == palette.selected else self.colors["sidebar_item"]
            SafeCursesUtils._safe_addstr(self.stdscr, top + 1 + row, left, text, attr, "palette_item")

    def _draw_input(self):
        y = self.height - 1
        visible_width = max(1, self.width - len(INPUT_PROMPT) - 1)
        text = self.client.input_buffer[-visible_width:]
        SafeCursesUtils._safe_addstr(self.stdscr, y, 0, INPUT_PROMPT + text, self.colors["other_message"], "input")
        SafeCursesUtils._safe_move(self.stdscr, y, len(INPUT_PROMPT) + len(text), "input_cursor")

    def shutdown(self):
        SafeCursesUtils._safe_curs_set(1, "shutdown")
