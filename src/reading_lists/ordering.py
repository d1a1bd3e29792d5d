"""Display ordering for the reading list picker."""

from __future__ import annotations

from reading_lists.models import (
    SORT_ARTICLE_COUNT,
    SORT_MODES,
    SORT_NAME_ASC,
    SORT_NAME_DESC,
    SORT_RECENT,
    ReadingList,
)


def _name_key(rl: ReadingList) -> tuple[str, str, int]:
    return (rl.name.casefold(), rl.name, rl.id)


def sort_reading_lists(
    lists: list[ReadingList],
    mode: str = SORT_NAME_ASC,
    *,
    show_default: bool = True,
) -> list[ReadingList]:
    """Return a new list ordered for display.

    Args:
        lists: All of the user's lists, in storage order. Not mutated.
        mode: One of SORT_MODES. Unknown modes fall back to name ascending.
        show_default: When False the default list is left out entirely.
            When True it is pinned to the top whatever the mode.
    """
    if mode not in SORT_MODES:
        mode = SORT_NAME_ASC
    default = [rl for rl in lists if rl.is_default]
    rest = [rl for rl in lists if not rl.is_default]

    if mode == SORT_NAME_ASC:
        ordered = sorted(rest, key=_name_key)
    elif mode == SORT_NAME_DESC:
        ordered = sorted(rest, key=_name_key, reverse=True)
    elif mode == SORT_RECENT:
        # Newest first; ISO timestamps compare lexicographically
        ordered = sorted(rest, key=_name_key)
        ordered.sort(key=lambda rl: rl.modified, reverse=True)
    elif mode == SORT_ARTICLE_COUNT:
        ordered = sorted(rest, key=lambda rl: (-rl.member_count, *_name_key(rl)))

    if show_default:
        return default + ordered
    return ordered


__all__ = [
    "sort_reading_lists",
]
