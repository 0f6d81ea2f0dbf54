from irchat_core.client import command_palette as cp
from irchat_core.client.command_palette import CommandPalette
from irchat_core.session_state import AppState, ConnectionState, SessionSnapshot


def snapshot(state=ConnectionState.CONNECTED, channels=None, current="#a"):
    return SessionSnapshot(
        app_state=AppState.CONNECTED,
        connection_state=state,
        server="irc.example.org:6697",
        nick="alice",
        current_channel=current,
        channels=channels if channels is not None else [("#a", True), ("#b", False)],
    )


def test_empty_query_lists_by_priority():
    results = cp.filter_items(cp.STATIC_ITEMS, "")
    assert len(results) == len(cp.STATIC_ITEMS)
    priorities = [item.priority for item in results]
    assert priorities == sorted(priorities, reverse=True)


def test_fuzzy_query_ranks_best_match_first():
    assert cp.filter_items(cp.STATIC_ITEMS, "join")[0].name == "Join Channel"
    assert cp.filter_items(cp.STATIC_ITEMS, "toggle sidebar")[0].name == "Toggle Sidebar"


def test_dynamic_items_when_connected():
    names = [item.name for item in cp.dynamic_items(snapshot())]
    assert names == ["Switch to #b", "Part #a"]


def test_dynamic_items_when_disconnected():
    items = cp.dynamic_items(snapshot(state=ConnectionState.DISCONNECTED))
    assert [item.command for item in items] == [cp.ACTION_RECONNECT]


def test_argument_commands():
    by_command = {item.command: item for item in cp.STATIC_ITEMS}
    assert by_command["/join"].needs_argument
    assert not by_command["/help"].needs_argument


def test_palette_navigation_and_execute():
    palette = CommandPalette()
    palette.open(snapshot())
    assert palette.visible
    assert palette.selected_item() is palette.results[0]

    palette.move(-1)
    assert palette.selected == len(palette.results) - 1
    palette.move(1)
    assert palette.selected == 0

    for char in "quit":
        palette.type_char(char)
    assert palette.query == "quit"
    palette.backspace()
    assert palette.query == "qui"
    palette.clear_query()
    assert palette.query == ""

    chosen = palette.execute()
    assert chosen is not None
    assert not palette.visible
    assert palette.query == ""


def test_execute_with_no_results():
    palette = CommandPalette()
    assert palette.execute() is None
