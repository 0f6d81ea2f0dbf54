import pytest

from irchat_core.commands import command_interpreter as ci


@pytest.mark.parametrize("line", ["", "   ", "/", "  /  "])
def test_blank_input_is_none(line):
    assert ci.parse(line) is None


def test_plain_text_is_chat_line():
    assert ci.parse("  hello world  ") == ci.ChatLine("hello world")


def test_join_normalizes_channel():
    assert ci.parse("/join python") == ci.JoinCommand("#python")
    assert ci.parse("/J #linux") == ci.JoinCommand("#linux")
    assert ci.parse("/join &local") == ci.JoinCommand("&local")


def test_part_forms():
    assert ci.parse("/part") == ci.PartCommand()
    assert ci.parse("/part #py") == ci.PartCommand("#py", None)
    assert ci.parse("/leave #py gone fishing") == ci.PartCommand("#py", "gone fishing")
    assert ci.parse("/part python") == ci.PartCommand("#python", None)
    assert ci.parse("/part python see you") == ci.PartCommand("#python", "see you")


def test_msg_splits_target_once():
    assert ci.parse("/msg bob hi there bob") == ci.MsgCommand("bob", "hi there bob")
    assert ci.parse("/query bob yo") == ci.MsgCommand("bob", "yo")


@pytest.mark.parametrize(
    "line, message",
    [
        ("/join", "Usage: /join <channel>"),
        ("/nick", "Usage: /nick <newnick>"),
        ("/msg", "Usage: /msg <target> <message>"),
        ("/msg bob", "Usage: /msg <target> <message>"),
        ("/me", "Usage: /me <action>"),
    ],
)
def test_usage_errors(line, message):
    assert ci.parse(line) == ci.UsageError(message)


def test_command_word_is_case_folded():
    assert ci.parse("/NICK Alice") == ci.NickCommand("Alice")
    assert ci.parse("/Help") == ci.HelpCommand()


def test_switch_list_quit():
    assert ci.parse("/switch") == ci.SwitchCommand(None)
    assert ci.parse("/sw 2") == ci.SwitchCommand("2")
    assert ci.parse("/list") == ci.ListCommand(None)
    assert ci.parse("/ls #py*") == ci.ListCommand("#py*")
    assert ci.parse("/quit") == ci.QuitCommand(None)
    assert ci.parse("/quit gone for lunch") == ci.QuitCommand("gone for lunch")


def test_local_commands():
    assert ci.parse("/clear") == ci.ClearCommand()
    assert ci.parse("/status") == ci.StatusCommand()
    assert ci.parse("/reconnect") == ci.ReconnectCommand()
    assert ci.parse("/me dances") == ci.MeCommand("dances")


def test_config_and_logging_arguments():
    assert ci.parse("/config") == ci.ConfigCommand("show")
    assert ci.parse("/config SAVE") == ci.ConfigCommand("save")
    assert ci.parse("/logging") == ci.LoggingCommand([])
    assert ci.parse("/log Debug ON") == ci.LoggingCommand(["debug", "on"])


def test_unknown_command_is_raw_passthrough():
    assert ci.parse("/WHOIS alice") == ci.RawCommand("WHOIS alice")
    assert ci.parse("/mode #py +o bob") == ci.RawCommand("mode #py +o bob")


def test_help_lines_cover_commands_and_keys():
    lines = ci.help_lines()
    assert lines[0] == "Available commands:"
    text = "\n".join(lines)
    for definition in ci.COMMAND_DEFINITIONS:
        assert definition["help"]["usage"] in text
    assert "Alt+1..9" in text
    assert "(aliases: /j)" in text
