# irchat_core/client/key_bindings.py
import curses
from enum import Enum, auto
from typing import Dict, Optional, Tuple

KEY_TAB = 9
KEY_ENTER_CODES = (curses.KEY_ENTER, 10, 13)
KEY_BACKSPACE_CODES = (curses.KEY_BACKSPACE, 127, 8)
KEY_ESCAPE = 27
KEY_CTRL_B = 2
KEY_CTRL_C = 3
KEY_CTRL_K = 11
KEY_CTRL_N = 14
KEY_CTRL_P = 16
KEY_CTRL_U = 21

# Alt+<digit> arrives as ESC followed by the digit; the reader folds the
# pair into a single code above the curses key range.
ALT_DIGIT_BASE = 0x10000


def alt_digit(digit: int) -> int:
    return ALT_DIGIT_BASE + digit


class Mode(Enum):
    SETUP = auto()
    PALETTE = auto()
    CHAT = auto()


class Action(Enum):
    SUBMIT = auto()
    BACKSPACE = auto()
    QUIT = auto()
    RESIZE = auto()
    SETUP_BACK = auto()
    SETUP_HELP = auto()
    NEXT_CHANNEL = auto()
    PREV_CHANNEL = auto()
    JUMP_TO_CHANNEL = auto()
    TOGGLE_SIDEBAR = auto()
    OPEN_PALETTE = auto()
    CLEAR_INPUT = auto()
    SCROLL_UP = auto()
    SCROLL_DOWN = auto()
    PALETTE_CLOSE = auto()
    PALETTE_UP = auto()
    PALETTE_DOWN = auto()
    PALETTE_CLEAR = auto()


def _expand(bindings: Dict[Tuple[int, ...], Action]) -> Dict[int, Action]:
    expanded: Dict[int, Action] = {}
    for codes, action in bindings.items():
        for code in codes:
            expanded[code] = action
    return expanded


_COMMON = {
    KEY_ENTER_CODES: Action.SUBMIT,
    KEY_BACKSPACE_CODES: Action.BACKSPACE,
    (curses.KEY_RESIZE,): Action.RESIZE,
}

KEYMAPS: Dict[Mode, Dict[int, Action]] = {
    Mode.SETUP: _expand({
        **_COMMON,
        (curses.KEY_BTAB,): Action.SETUP_BACK,
        (curses.KEY_F1,): Action.SETUP_HELP,
        (KEY_ESCAPE, KEY_CTRL_C): Action.QUIT,
    }),
    Mode.PALETTE: _expand({
        **_COMMON,
        (KEY_ESCAPE, KEY_CTRL_P): Action.PALETTE_CLOSE,
        (curses.KEY_UP, KEY_CTRL_K): Action.PALETTE_UP,
        (curses.KEY_DOWN, KEY_CTRL_N): Action.PALETTE_DOWN,
        (KEY_CTRL_U,): Action.PALETTE_CLEAR,
        (KEY_CTRL_C,): Action.QUIT,
    }),
    Mode.CHAT: _expand({
        **_COMMON,
        (KEY_TAB, KEY_CTRL_N): Action.NEXT_CHANNEL,
        (curses.KEY_BTAB,): Action.PREV_CHANNEL,
        (KEY_CTRL_B,): Action.TOGGLE_SIDEBAR,
        (KEY_CTRL_P,): Action.OPEN_PALETTE,
        (KEY_CTRL_U,): Action.CLEAR_INPUT,
        (curses.KEY_PPAGE,): Action.SCROLL_UP,
        (curses.KEY_NPAGE,): Action.SCROLL_DOWN,
        (KEY_CTRL_C,): Action.QUIT,
    }),
}


def resolve(key_code: int, mode: Mode) -> Tuple[Optional[Action], Optional[int]]:
    """
    Map a key code to an action for the given mode.

    Returns (action, argument). Alt+1..9 in chat mode yields JUMP_TO_CHANNEL
    with a zero-based index. (None, None) means the key is text input or unbound.
    """
    if mode == Mode.CHAT and ALT_DIGIT_BASE + 1 <= key_code <= ALT_DIGIT_BASE + 9:
        return Action.JUMP_TO_CHANNEL, key_code - ALT_DIGIT_BASE - 1
    return KEYMAPS[mode].get(key_code), None


def printable_char(key_code: int) -> Optional[str]:
    if 32 <= key_code < ALT_DIGIT_BASE and key_code not in (127,) and key_code < curses.KEY_MIN:
        try:
            char = chr(key_code)
        except ValueError:
            return None
        return char if char.isprintable() else None
    return None
