"""
fontfallback – resolver.py
==========================

Character → font resolution.

Lookup order for a character ``c``:

1. the registry's :class:`CharFontCache`;
2. the primary font;
3. already discovered fallback fonts, in discovery order;
4. the fallback source, queried with the primary font's style pattern. A new
   font is appended to the registry and every later character it covers is
   found at step 3 without asking the fallback source again.

When step 4 fails the character is cached as :data:`MISSING`, resolves to the
primary font (which draws its missing-glyph box), and the error is handed to
the ``report`` callable once.
"""

from __future__ import annotations

from collections.abc import Callable

from fontfallback.cache import MISSING
from fontfallback.errors import FontError, NoFallbackFontForChar, report_error
from fontfallback.font_handle import FontHandle
from fontfallback.fontconfig import FallbackSource
from fontfallback.registry import PRIMARY_INDEX, FontRegistry


class FontResolver:
    def __init__(
        self,
        registry: FontRegistry,
        fallback_source: FallbackSource,
        report: Callable[[Exception], None] = report_error,
    ) -> None:
        self.registry = registry
        self.fallback_source = fallback_source
        self.report = report

    def resolve(self, c: str) -> int:
        """Return the index of the registry font that renders ``c``."""
        cache = self.registry.cache
        cached = cache.get(c)
        if cached is not None:
            return PRIMARY_INDEX if cached == MISSING else cached

        if len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")

        index = self._scan(c)
        if index is None:
            index = self._discover(c)

        cache.insert(c, index)
        return PRIMARY_INDEX if index == MISSING else index

    def _scan(self, c: str) -> int | None:
        for handle in self.registry:
            if handle.supports(c):
                return handle.index
        return None

    def _discover(self, c: str) -> int:
        primary = self.registry.primary
        # only a primary installed through append() rather than reset() lacks one
        if primary.pattern is None:
            self.report(NoFallbackFontForChar(c))
            return MISSING

        try:
            desc = self.fallback_source.match_char(primary.pattern, c)
            handle = FontHandle.from_descriptor(
                self.registry.next_index, desc, primary.pixel_size
            )
        except FontError as e:
            self.report(e)
            return MISSING

        if not handle.supports(c):
            # fontconfig hands back its closest face even without coverage
            handle.close()
            self.report(NoFallbackFontForChar(c))
            return MISSING

        return self.registry.append(handle)
