"""Per-character font decisions, valid for the life of one registry."""

from __future__ import annotations

from collections.abc import Iterator

#: Cached for characters no font could cover; rendered with the primary font.
MISSING = -1


class CharFontCache:
    """Mapping from a single character to a registry index (or :data:`MISSING`).

    Entries are never overwritten: the registry only grows by append, so an
    index stays valid until the whole registry is reset, at which point the
    cache is cleared.
    """

    def __init__(self) -> None:
        self._entries: dict[str, int] = {}

    def get(self, char: str) -> int | None:
        return self._entries.get(char)

    def insert(self, char: str, index: int) -> None:
        if char in self._entries:
            raise ValueError(f"{char!r} already resolved to {self._entries[char]}")
        self._entries[char] = index

    def clear(self) -> None:
        self._entries.clear()

    def missing(self) -> list[str]:
        """Characters that fell back to the primary font without coverage."""
        return [c for c, idx in self._entries.items() if idx == MISSING]

    def __contains__(self, char: object) -> bool:
        return char in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
