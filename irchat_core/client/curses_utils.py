import curses
import logging
from typing import Any, Callable

logger = logging.getLogger("irchat.curses_utils")


def _window_usable(window: Any, context_info: str) -> bool:
    if not window:
        logger.debug(f"({context_info}): non-existent window.")
        return False
    try:
        max_y, max_x = window.getmaxyx()
    except curses.error as e:
        logger.warning(f"({context_info}): curses.error getting size of {window!r}: {e}")
        return False
    return max_y > 0 and max_x > 0


class SafeCursesUtils:
    """curses calls that log failures instead of raising them."""

    @staticmethod
    def _call(fn: Callable[[], Any], context_info: str, what: str):
        try:
            fn()
        except curses.error as e:
            logger.warning(f"{what} ({context_info}): curses.error: {e}")

    @staticmethod
    def _safe_erase(window: Any, context_info: str = ""):
        if _window_usable(window, context_info):
            SafeCursesUtils._call(window.erase, context_info, "_safe_erase")

    @staticmethod
    def _safe_noutrefresh(window: Any, context_info: str = ""):
        if window:
            SafeCursesUtils._call(window.noutrefresh, context_info, "_safe_noutrefresh")

    @staticmethod
    def _safe_doupdate(context_info: str = ""):
        SafeCursesUtils._call(curses.doupdate, context_info, "_safe_doupdate")

    @staticmethod
    def _safe_curs_set(visibility: int, context_info: str = ""):
        SafeCursesUtils._call(lambda: curses.curs_set(visibility), context_info, "_safe_curs_set")

    @staticmethod
    def _safe_keypad(window: Any, enable: bool, context_info: str = ""):
        if window:
            SafeCursesUtils._call(lambda: window.keypad(enable), context_info, "_safe_keypad")

    @staticmethod
    def _safe_init_pair(pair_id: int, fg: int, bg: int, context_info: str = ""):
        SafeCursesUtils._call(lambda: curses.init_pair(pair_id, fg, bg), context_info, "_safe_init_pair")

    @staticmethod
    def _safe_setup_terminal(stdscr: Any):
        """cbreak, no echo, keypad, colors with terminal default background."""
        SafeCursesUtils._call(curses.noecho, "setup", "_safe_noecho")
        SafeCursesUtils._call(curses.cbreak, "setup", "_safe_cbreak")
        SafeCursesUtils._safe_keypad(stdscr, True, "setup")
        SafeCursesUtils._call(curses.start_color, "setup", "_safe_start_color")
        SafeCursesUtils._call(curses.use_default_colors, "setup", "_safe_use_default_colors")
        SafeCursesUtils._safe_curs_set(1, "setup")

    @staticmethod
    def _safe_addstr(window: Any, y: int, x: int, text: str, attr: int = 0, context_info: str = ""):
        """Draw text clipped to the window; out-of-bounds coordinates are skipped."""
        if not _window_usable(window, context_info):
            return
        max_y, max_x = window.getmaxyx()
        if not (0 <= y < max_y and 0 <= x < max_x):
            return
        # The bottom-right cell cannot be written without scrolling.
        available_width = max_x - x - (1 if y == max_y - 1 else 0)
        if available_width <= 0 or not text:
            return
        text_to_render = text[:available_width].encode("utf-8", errors="replace").decode("utf-8")
        SafeCursesUtils._call(lambda: window.addstr(y, x, text_to_render, attr), context_info, "_safe_addstr")

    @staticmethod
    def _safe_vline(window: Any, y: int, x: int, char: Any, n: int, attr: int = 0, context_info: str = ""):
        if not _window_usable(window, context_info):
            return
        max_y, max_x = window.getmaxyx()
        if not (0 <= y < max_y and 0 <= x < max_x):
            return
        n = min(n, max_y - y)
        if n > 0:
            SafeCursesUtils._call(lambda: window.vline(y, x, char, n, attr), context_info, "_safe_vline")

    @staticmethod
    def _safe_move(window: Any, y: int, x: int, context_info: str = ""):
        if not _window_usable(window, context_info):
            return
        max_y, max_x = window.getmaxyx()
        safe_y = max(0, min(y, max_y - 1))
        safe_x = max(0, min(x, max_x - 1))
        SafeCursesUtils._call(lambda: window.move(safe_y, safe_x), context_info, "_safe_move")

    @staticmethod
    def _draw_full_width_banner(window: Any, y: int, text: str, attr: int, context_info: str = ""):
        """Text on a line padded to the full window width."""
        if not _window_usable(window, context_info):
            return
        _max_y, max_x = window.getmaxyx()
        SafeCursesUtils._safe_addstr(window, y, 0, text.ljust(max_x), attr, context_info)
