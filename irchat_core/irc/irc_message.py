import re
from typing import Optional, Dict, Any, List

IRC_MSG_RE = re.compile(
    r'^(?::(?P<prefix>[^ ]+) +)?(?P<command>[^ ]+)(?: +(?P<params>[^:]*?))?(?: *:(?P<trailing>.*))?$'
)


def unescape_tag_value(value: str) -> str:
    """Unescape an IRCv3 tag value."""
    value = value.replace("\\:", ";")
    value = value.replace("\\s", " ")
    value = value.replace("\\\\", "\\")
    value = value.replace("\\r", "\r")
    value = value.replace("\\n", "\n")
    return value


class IRCMessage:
    def __init__(
        self,
        prefix: Optional[str],
        command: str,
        params_str: Optional[str],
        trailing: Optional[str],
        tags: Optional[Dict[str, str]] = None,
    ):
        self.prefix = prefix
        self.command = command.upper()
        self.params_str = params_str.strip() if params_str else None
        self.trailing = trailing
        self.params: List[str] = (
            [p for p in self.params_str.split(" ") if p] if self.params_str else []
        )
        self.source_nick = prefix.split("!")[0] if prefix and "!" in prefix else prefix
        self.tags = tags or {}

    @classmethod
    def parse(cls, line: str) -> Optional["IRCMessage"]:
        line = line.rstrip("\r\n")
        tags: Dict[str, str] = {}
        if line.startswith("@"):
            tag_end = line.find(" ")
            if tag_end == -1:
                return None
            tag_str = line[1:tag_end]
            line = line[tag_end + 1 :].lstrip(" ")

            for tag in tag_str.split(";"):
                if "=" in tag:
                    key, value = tag.split("=", 1)
                    tags[key] = unescape_tag_value(value)
                elif tag:
                    tags[tag] = ""

        match = IRC_MSG_RE.match(line)
        if not match:
            return None
        return cls(
            match.group("prefix"),
            match.group("command"),
            match.group("params"),
            match.group("trailing"),
            tags=tags,
        )

    @property
    def all_params(self) -> List[str]:
        """Middle params followed by the trailing param, if any."""
        if self.trailing is None:
            return list(self.params)
        return self.params + [self.trailing]

    def param(self, index: int, default: str = "") -> str:
        params = self.all_params
        return params[index] if 0 <= index < len(params) else default

    def get_tag(self, key: str, default: Any = None) -> Any:
        return self.tags.get(key, default)

    def __repr__(self):
        return f"<IRCMessage prefix={self.prefix!r} command={self.command!r} params={self.params!r} trailing={self.trailing!r}>"
