from irchat_core.irc import irc_events as ev
from irchat_core.irc.irc_handlers import message_to_event
from irchat_core.irc.irc_message import IRCMessage


def event_for(line):
    return message_to_event(IRCMessage.parse(line))


def test_channel_privmsg():
    assert event_for(":bob!b@h PRIVMSG #py :hi all") == ev.ChatReceived("bob", "#py", "hi all")


def test_private_privmsg_has_no_channel():
    assert event_for(":bob!b@h PRIVMSG alice :psst") == ev.ChatReceived("bob", "", "psst")


def test_ctcp_action():
    assert event_for(":bob!b@h PRIVMSG #py :\x01ACTION waves\x01") == ev.ChatReceived("bob", "#py", "waves", is_action=True)


def test_other_ctcp_is_ignored():
    assert event_for(":bob!b@h PRIVMSG alice :\x01VERSION\x01") is None


def test_notice():
    assert event_for(":NickServ!s@services NOTICE alice :Please identify") == ev.NoticeReceived("NickServ", "Please identify")


def test_join_part_quit():
    assert event_for(":alice!a@h JOIN #py") == ev.Joined("alice", "#py")
    assert event_for(":alice!a@h JOIN :#py") == ev.Joined("alice", "#py")
    assert event_for(":bob!b@h PART #py :bye") == ev.Parted("bob", "#py", "bye")
    assert event_for(":bob!b@h PART #py") == ev.Parted("bob", "#py", None)
    assert event_for(":bob!b@h QUIT :Ping timeout") == ev.Quit("bob", "Ping timeout")


def test_nick_change():
    assert event_for(":bob!b@h NICK :robert") == ev.NickChanged("bob", "robert")


def test_welcome_is_connected():
    assert event_for(":irc.example.org 001 alice :Welcome") == ev.Connected("irc.example.org")


def test_error_line():
    assert event_for("ERROR :Closing Link") == ev.ServerError("Closing Link")


def test_nick_in_use():
    assert event_for(":srv 433 * alice :Nickname is already in use") == ev.ServerError("Nickname alice is already in use")


def test_error_numeric():
    assert event_for(":srv 482 alice #py :You're not channel operator") == ev.ServerError("#py You're not channel operator")


def test_displayed_numeric_becomes_notice():
    assert event_for(":srv 332 alice #py :Welcome to Python") == ev.NoticeReceived("srv", "#py Welcome to Python")


def test_unhandled_lines():
    assert event_for(":srv 005 alice CHANTYPES=# :are supported") is None
    assert event_for(":bob!b@h MODE #py +o alice") is None
