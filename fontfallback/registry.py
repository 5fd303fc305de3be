"""
fontfallback – registry.py
==========================

:class:`FontRegistry` is the append-only arena of :class:`FontHandle` objects
for one rendering context. Index 0 is the primary font; fallback fonts are
appended as they are discovered and keep their index until the next reset.

The registry owns the :class:`CharFontCache` whose entries point into it, so
that a reset replaces both together or neither.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from fontfallback.cache import CharFontCache
from fontfallback.font_handle import FontHandle
from fontfallback.fontconfig import DEFAULT_DPI, FontLoader

PRIMARY_INDEX = 0


class FontRegistry:
    def __init__(self, loader: FontLoader, dpi: float = DEFAULT_DPI) -> None:
        self.loader = loader
        self.dpi = dpi
        self.cache = CharFontCache()
        self._fonts: list[FontHandle] = []

    def reset(self, names: Sequence[str]) -> None:
        """Replace the whole font set with ``names`` (first one is primary).

        Every name is opened before anything is replaced. If one fails, the
        handles opened so far are released, the error propagates, and the
        current fonts and cache are left untouched.

        Raises:
            ValueError: ``names`` is empty.
            UnableToOpenFont: a name could not be loaded.
            UnableToParseFontPattern: a name is not a valid pattern.
        """
        if not names:
            raise ValueError("at least one font name is required")

        opened: list[FontHandle] = []
        try:
            for idx, name in enumerate(names):
                opened.append(FontHandle.from_name(idx, name, self.loader, self.dpi))
        except BaseException:
            for handle in opened:
                handle.close()
            raise

        self._release()
        self._fonts = opened
        self.cache.clear()

    def append(self, handle: FontHandle) -> int:
        """Add a fallback font and return its (stable) index."""
        if handle.index != len(self._fonts):
            raise ValueError(
                f"handle index {handle.index} does not match next slot {len(self._fonts)}"
            )
        self._fonts.append(handle)
        return handle.index

    def get(self, index: int) -> FontHandle:
        if not 0 <= index < len(self._fonts):
            raise IndexError(
                f"font index {index} out of range for {len(self._fonts)} fonts"
            )
        return self._fonts[index]

    @property
    def next_index(self) -> int:
        return len(self._fonts)

    @property
    def primary(self) -> FontHandle:
        return self.get(PRIMARY_INDEX)

    def fallbacks(self) -> list[FontHandle]:
        """Fallback fonts in discovery order."""
        return self._fonts[PRIMARY_INDEX + 1 :]

    def _release(self) -> None:
        for handle in self._fonts:
            handle.close()
        self._fonts = []

    def close(self) -> None:
        """Release every font and forget all cached decisions."""
        self._release()
        self.cache.clear()

    def __len__(self) -> int:
        return len(self._fonts)

    def __iter__(self) -> Iterator[FontHandle]:
        return iter(self._fonts)
