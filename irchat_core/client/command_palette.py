# irchat_core/client/command_palette.py
import logging
from dataclasses import dataclass
from typing import List, Optional

from rapidfuzz import fuzz, process, utils

from irchat_core.session_state import ConnectionState, SessionSnapshot

logger = logging.getLogger("irchat.palette")

MIN_SCORE = 45
MAX_RESULTS = 12


@dataclass(frozen=True)
class PaletteItem:
    name: str
    description: str
    command: str
    category: str
    shortcut: str = ""
    priority: int = 0

    @property
    def needs_argument(self) -> bool:
        return self.command in ARGUMENT_COMMANDS

    @property
    def search_text(self) -> str:
        return f"{self.name} {self.description} {self.command}"


# Slash commands that are pre-filled into the input line instead of executed.
ARGUMENT_COMMANDS = {"/join", "/msg", "/nick", "/switch"}

# Actions handled by the client loop rather than the command interpreter.
ACTION_NEXT_CHANNEL = "next_channel"
ACTION_PREV_CHANNEL = "prev_channel"
ACTION_LIST_CHANNELS = "list_channels"
ACTION_TOGGLE_SIDEBAR = "toggle_sidebar"
ACTION_CLEAR_SCREEN = "clear_screen"
ACTION_CONNECTION_STATUS = "connection_status"
ACTION_RECONNECT = "reconnect"

STATIC_ITEMS = [
    PaletteItem("Join Channel", "Join a new IRC channel", "/join", "Channels", "", 90),
    PaletteItem("Part Channel", "Leave the current channel", "/part", "Channels", "", 80),
    PaletteItem("Switch Channel", "Switch to another joined channel", "/switch", "Channels", "", 95),
    PaletteItem("Next Channel", "Go to the next channel", ACTION_NEXT_CHANNEL, "Navigation", "Tab", 85),
    PaletteItem("Previous Channel", "Go to the previous channel", ACTION_PREV_CHANNEL, "Navigation", "Shift+Tab", 85),
    PaletteItem("List Channels", "Show joined channels", ACTION_LIST_CHANNELS, "Channels", "", 65),
    PaletteItem("Send Private Message", "Send a message to a user", "/msg", "Messaging", "", 75),
    PaletteItem("Change Nickname", "Change your nickname", "/nick", "User", "", 70),
    PaletteItem("Toggle Sidebar", "Show or hide the channel sidebar", ACTION_TOGGLE_SIDEBAR, "View", "Ctrl+B", 60),
    PaletteItem("Clear Screen", "Clear messages of the current channel", ACTION_CLEAR_SCREEN, "View", "", 55),
    PaletteItem("Show Help", "List commands and key bindings", "/help", "Help", "", 50),
    PaletteItem("Connection Status", "Show connection details", ACTION_CONNECTION_STATUS, "Connection", "", 45),
    PaletteItem("Show Configuration", "Display the current configuration", "/config show", "Config", "", 40),
    PaletteItem("Save Config", "Save the configuration file", "/config save", "Config", "", 35),
    PaletteItem("Show Logging Status", "Display logging settings", "/logging status", "Logging", "", 30),
    PaletteItem("Reload Config", "Reload the configuration file", "/config reload", "Config", "", 25),
    PaletteItem("Enable Logging", "Turn file logging on", "/logging on", "Logging", "", 20),
    PaletteItem("Disable Logging", "Turn file logging off", "/logging off", "Logging", "", 15),
    PaletteItem("Quit", "Disconnect and exit", "/quit", "Application", "Ctrl+C", 10),
]


def dynamic_items(snapshot: SessionSnapshot) -> List[PaletteItem]:
    items: List[PaletteItem] = []
    if snapshot.connection_state == ConnectionState.CONNECTED:
        for channel, _active in snapshot.channels:
            if channel != snapshot.current_channel:
                items.append(PaletteItem(f"Switch to {channel}", f"View {channel}", f"/switch {channel}", "Channels", "", 88))
        if snapshot.current_channel:
            items.append(PaletteItem(
                f"Part {snapshot.current_channel}", f"Leave {snapshot.current_channel}",
                f"/part {snapshot.current_channel}", "Channels", "", 85,
            ))
    elif snapshot.connection_state == ConnectionState.DISCONNECTED:
        items.append(PaletteItem("Reconnect", "Connect to the server again", ACTION_RECONNECT, "Connection", "", 95))
    return items


def filter_items(items: List[PaletteItem], query: str) -> List[PaletteItem]:
    """Rank items against the query; an empty query lists everything by priority."""
    ordered = sorted(items, key=lambda item: -item.priority)
    query = query.strip()
    if not query:
        return ordered
    choices = [item.search_text for item in ordered]
    results = process.extract(query, choices, scorer=fuzz.WRatio, processor=utils.default_process, limit=MAX_RESULTS, score_cutoff=MIN_SCORE)
    ranked = sorted(results, key=lambda r: (-r[1], -ordered[r[2]].priority))
    return [ordered[index] for _choice, _score, index in ranked]


class CommandPalette:
    """Fuzzy-searchable list of commands, shown as an overlay."""

    def __init__(self):
        self.visible = False
        self.query = ""
        self.selected = 0
        self.items: List[PaletteItem] = []
        self.results: List[PaletteItem] = []

    def open(self, snapshot: SessionSnapshot):
        self.visible = True
        self.query = ""
        self.selected = 0
        self.items = dynamic_items(snapshot) + list(STATIC_ITEMS)
        self._refilter()
        logger.debug(f"Palette opened with {len(self.items)} items")

    def close(self):
        self.visible = False
        self.query = ""
        self.selected = 0

    def _refilter(self):
        self.results = filter_items(self.items, self.query)
        self.selected = 0

    def type_char(self, char: str):
        self.query += char
        self._refilter()

    def backspace(self):
        if self.query:
            self.query = self.query[:-1]
            self._refilter()

    def clear_query(self):
        self.query = ""
        self._refilter()

    def move(self, delta: int):
        if not self.results:
            self.selected = 0
            return
        self.selected = (self.selected + delta) % len(self.results)

    def selected_item(self) -> Optional[PaletteItem]:
        if 0 <= self.selected < len(self.results):
            return self.results[self.selected]
        return None

    def execute(self) -> Optional[PaletteItem]:
        """Close the palette and return the chosen item."""
        item = self.selected_item()
        self.close()
        return item
