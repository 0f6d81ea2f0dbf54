# irchat_core/client/dummy_ui.py
import curses
import logging
from typing import TYPE_CHECKING, Optional, TextIO

if TYPE_CHECKING:
    from irchat_core.client.irc_client_logic import IRCClient_Logic

logger = logging.getLogger("irchat.headless")


class DummyUI:
    """Headless stand-in for UIManager: prints new transcript lines to a stream."""

    def __init__(self, client_logic_ref: Optional["IRCClient_Logic"] = None, output: Optional[TextIO] = None):
        self.client = client_logic_ref
        self.output = output
        self.colors = {"default": 0, "system": 0, "error": 0}
        self.scroll_offset = 0
        self._last_channel = ""
        self._printed = 0

    def refresh_all_windows(self):
        if self.client is None:
            return
        snapshot = self.client.session.snapshot_view()
        if snapshot.current_channel != self._last_channel or len(snapshot.transcript) < self._printed:
            # The transcript was replaced by a channel switch or /clear.
            self._last_channel = snapshot.current_channel
            self._printed = 0
        for line in snapshot.transcript[self._printed:]:
            logger.debug(f"[{snapshot.current_channel or '-'}] {line}")
            if self.output is not None:
                print(line, file=self.output, flush=True)
        self._printed = len(snapshot.transcript)

    def scroll_messages(self, direction: str):
        pass

    def get_input_char(self) -> int:
        return curses.ERR

    def setup_layout(self):
        pass

    def shutdown(self):
        pass
