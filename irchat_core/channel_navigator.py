from typing import List, Optional


def next_channel(current: str, joined: List[str]) -> str:
    """Channel after `current`, wrapping to the start of the list."""
    if len(joined) <= 1:
        return current
    if current not in joined:
        return joined[0]
    return joined[(joined.index(current) + 1) % len(joined)]


def previous_channel(current: str, joined: List[str]) -> str:
    """Channel before `current`, wrapping to the end of the list."""
    if len(joined) <= 1:
        return current
    if current not in joined:
        return joined[0]
    return joined[(joined.index(current) - 1) % len(joined)]


def by_index(joined: List[str], index: int) -> Optional[str]:
    if 0 <= index < len(joined):
        return joined[index]
    return None


def position_of(current: str, joined: List[str]) -> int:
    """1-based position for display, 0 when `current` is not joined."""
    try:
        return joined.index(current) + 1
    except ValueError:
        return 0
