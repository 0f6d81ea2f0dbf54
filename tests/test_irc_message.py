from irchat_core.irc.irc_message import IRCMessage


def test_parse_privmsg_with_prefix():
    msg = IRCMessage.parse(":bob!b@host PRIVMSG #py :hello there\r\n")
    assert msg.prefix == "bob!b@host"
    assert msg.source_nick == "bob"
    assert msg.command == "PRIVMSG"
    assert msg.params == ["#py"]
    assert msg.trailing == "hello there"
    assert msg.all_params == ["#py", "hello there"]


def test_parse_without_prefix_or_trailing():
    msg = IRCMessage.parse("PART #py")
    assert msg.prefix is None
    assert msg.command == "PART"
    assert msg.params == ["#py"]
    assert msg.trailing is None
    assert msg.param(1) == ""


def test_parse_ping():
    msg = IRCMessage.parse("PING :irc.example.org")
    assert msg.command == "PING"
    assert msg.param(0) == "irc.example.org"


def test_numeric_params():
    msg = IRCMessage.parse(":srv 433 * alice :Nickname is already in use")
    assert msg.command == "433"
    assert msg.source_nick == "srv"
    assert msg.all_params == ["*", "alice", "Nickname is already in use"]


def test_command_is_uppercased():
    assert IRCMessage.parse("privmsg #a :x").command == "PRIVMSG"


def test_tags_are_parsed_and_unescaped():
    msg = IRCMessage.parse("@time=2024-01-01T00:00:00Z;msg=a\\sb;flag :bob!b@h PRIVMSG #a :hi")
    assert msg.get_tag("time") == "2024-01-01T00:00:00Z"
    assert msg.get_tag("msg") == "a b"
    assert msg.get_tag("flag") == ""
    assert msg.get_tag("missing", "x") == "x"
    assert msg.command == "PRIVMSG"


def test_tags_without_command_is_rejected():
    assert IRCMessage.parse("@only-tags") is None
