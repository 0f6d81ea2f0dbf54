import logging

from irchat_core.channel_registry import ChannelRegistry


def test_register_is_idempotent():
    registry = ChannelRegistry()
    first = registry.register("#py")
    registry.set_joined("#py", True)
    registry.set_active("#py", True)
    second = registry.register("#py")
    assert first is second
    assert len(registry) == 1
    assert registry.channel_order == ["#py"]
    assert second.joined and second.active


def test_new_channel_defaults():
    registry = ChannelRegistry()
    channel = registry.register("#new")
    assert channel.joined is False
    assert channel.active is False
    assert channel.messages == []


def test_set_joined_unknown_logs_warning(caplog):
    registry = ChannelRegistry()
    with caplog.at_level(logging.WARNING, logger="irchat.channels"):
        registry.set_joined("#ghost", True)
    assert "#ghost" not in registry
    assert any("#ghost" in record.getMessage() for record in caplog.records)


def test_active_list_tracks_flags():
    registry = ChannelRegistry()
    registry.register("#a")
    registry.register("#b")
    registry.set_active("#a", True)
    registry.set_active("#a", True)
    registry.set_active("#b", True)
    assert registry.active_list == ["#a", "#b"]
    registry.set_active("#a", False)
    assert registry.active_list == ["#b"]
    registry.set_active("#unknown", True)
    assert registry.active_list == ["#b"]


def test_append_message_to_unknown_is_dropped():
    registry = ChannelRegistry()
    assert registry.append_message("#nowhere", "hello") is False
    assert "#nowhere" not in registry


def test_joined_channels_keep_insertion_order():
    registry = ChannelRegistry()
    for name in ["#c", "#a", "#b"]:
        registry.register(name)
    registry.set_joined("#b", True)
    registry.set_joined("#c", True)
    assert registry.joined_channels() == ["#c", "#b"]
    registry.set_active("#b", True)
    assert registry.list_with_status() == [("#c", False), ("#b", True)]


def test_find_is_case_insensitive():
    registry = ChannelRegistry()
    registry.register("#Python")
    assert registry.find("#python").name == "#Python"
    assert registry.find("#PYTHON").name == "#Python"
    assert registry.find("#ruby") is None
    assert registry.find("") is None


def test_messages_copy_is_detached():
    registry = ChannelRegistry()
    registry.register("#a")
    registry.append_message("#a", "one")
    copy = registry.messages_copy("#a")
    copy.append("two")
    assert registry.get("#a").messages == ["one"]
    registry.clear_messages("#a")
    assert registry.get("#a").messages == []


def test_remove_drops_channel_everywhere():
    registry = ChannelRegistry()
    registry.register("#a")
    registry.set_active("#a", True)
    assert registry.remove("#a") is True
    assert registry.channel_order == []
    assert registry.active_list == []
    assert registry.remove("#a") is False


def test_normalize_name():
    assert ChannelRegistry.normalize_name("python") == "#python"
    assert ChannelRegistry.normalize_name(" #linux ") == "#linux"
    assert ChannelRegistry.normalize_name("&local") == "&local"
