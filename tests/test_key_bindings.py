import curses

from irchat_core.client.key_bindings import (
    Action, KEY_CTRL_N, KEY_CTRL_P, KEY_ESCAPE, KEY_TAB, Mode, alt_digit, printable_char, resolve,
)


def test_chat_bindings():
    assert resolve(KEY_TAB, Mode.CHAT) == (Action.NEXT_CHANNEL, None)
    assert resolve(KEY_CTRL_N, Mode.CHAT) == (Action.NEXT_CHANNEL, None)
    assert resolve(curses.KEY_BTAB, Mode.CHAT) == (Action.PREV_CHANNEL, None)
    assert resolve(KEY_CTRL_P, Mode.CHAT) == (Action.OPEN_PALETTE, None)
    assert resolve(10, Mode.CHAT) == (Action.SUBMIT, None)


def test_alt_digits_jump_in_chat_only():
    assert resolve(alt_digit(1), Mode.CHAT) == (Action.JUMP_TO_CHANNEL, 0)
    assert resolve(alt_digit(9), Mode.CHAT) == (Action.JUMP_TO_CHANNEL, 8)
    assert resolve(alt_digit(0), Mode.CHAT) == (None, None)
    assert resolve(alt_digit(1), Mode.PALETTE) == (None, None)


def test_palette_bindings():
    assert resolve(KEY_CTRL_N, Mode.PALETTE) == (Action.PALETTE_DOWN, None)
    assert resolve(curses.KEY_UP, Mode.PALETTE) == (Action.PALETTE_UP, None)
    assert resolve(KEY_ESCAPE, Mode.PALETTE) == (Action.PALETTE_CLOSE, None)


def test_setup_bindings():
    assert resolve(curses.KEY_BTAB, Mode.SETUP) == (Action.SETUP_BACK, None)
    assert resolve(curses.KEY_F1, Mode.SETUP) == (Action.SETUP_HELP, None)
    assert resolve(KEY_ESCAPE, Mode.SETUP) == (Action.QUIT, None)


def test_printable_char():
    assert printable_char(ord("a")) == "a"
    assert printable_char(ord("é")) == "é"
    assert printable_char(KEY_TAB) is None
    assert printable_char(127) is None
    assert printable_char(curses.KEY_UP) is None
    assert printable_char(alt_digit(3)) is None
