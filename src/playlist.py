#!/usr/bin/env python3
"""
Playlist for Red Video Reel

An ordered, append-only list of MediaRefs with a navigation position and the
paging cursor for the next upstream page. The playlist has no network
concerns: it only reports when it has run out of lookahead.
"""

import logging
from enum import Enum
from typing import Iterable, Optional, Tuple

from media_extractor import MediaRef

logger = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = 1
    BACKWARD = -1


class Playlist:
    def __init__(self) -> None:
        self._items = []
        self._position = 0
        self._paging_cursor = ""

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> Tuple[MediaRef, ...]:
        return tuple(self._items)

    @property
    def position(self) -> int:
        return self._position

    @property
    def paging_cursor(self) -> str:
        return self._paging_cursor

    def current(self) -> Optional[MediaRef]:
        """Item at the current position, or None if it has not been loaded yet."""
        if self._position < len(self._items):
            return self._items[self._position]
        return None

    def advance(self, direction: Direction) -> None:
        """
        Move the position. Forward is unbounded since the feed is treated as
        infinite; backward stops at 0.
        """
        if direction == Direction.FORWARD:
            self._position += 1
        else:
            self._position = max(self._position - 1, 0)

    def needs_more(self) -> bool:
        """True when there is no item buffered past the current one."""
        return self._position + 1 >= len(self._items)

    def append(self, new_items: Iterable[MediaRef], new_cursor: str) -> None:
        new_items = list(new_items)
        self._items.extend(new_items)
        self._paging_cursor = new_cursor
        logger.debug(f"Appended {len(new_items)} items (total {len(self._items)}), cursor={new_cursor!r}")

    def reset(self) -> None:
        self._items = []
        self._position = 0
        self._paging_cursor = ""
