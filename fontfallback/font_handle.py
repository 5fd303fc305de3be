"""
fontfallback – font_handle.py
=============================

:class:`FontHandle` owns one open font face (a ``fontTools`` ``TTFont``) for
its whole lifetime and answers the two questions the engine needs:

- does the face have a glyph for this character? (cmap lookup)
- how wide is this substring, and how tall is a line? (``hmtx`` advances and
  ``hhea`` ascent/descent, scaled to the handle's pixel size)

Handles are immutable. The native resource is released exactly once, through
:meth:`FontHandle.close` or by leaving a ``with`` block.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fontTools.ttLib import TTFont  # type: ignore[import]

from fontfallback.errors import UnableToOpenFont, UnableToOpenFontPattern
from fontfallback.fontconfig import (
    DEFAULT_DPI,
    FontDescriptor,
    FontLoader,
    StylePattern,
    parse_font_name,
)

NOTDEF = ".notdef"


def _open_ttfont(desc: FontDescriptor) -> Any:
    return TTFont(
        desc.file,
        fontNumber=desc.face_index,
        lazy=True,
        recalcBBoxes=False,
        recalcTimestamp=False,
    )


class FontHandle:
    """One loaded font face at a fixed pixel size.

    Attributes:
        index: Position of the handle inside its registry.
        ascent: Pixels above the baseline.
        descent: Pixels below the baseline.
        height: ``ascent + descent``.
        pattern: Style pattern the font was opened from; ``None`` for fallback
            fonts discovered at resolution time.
        descriptor: File and face the font was loaded from.
    """

    def __init__(
        self,
        index: int,
        tt: Any,
        descriptor: FontDescriptor,
        pixel_size: float,
        pattern: StylePattern | None = None,
    ) -> None:
        self._index = index
        self._tt = tt
        self._descriptor = descriptor
        self._pattern = pattern
        self._pixel_size = float(pixel_size)
        self._closed = False

        self._cmap: dict[int, str] = tt.getBestCmap() or {}
        self._hmtx = tt["hmtx"]
        units_per_em = tt["head"].unitsPerEm
        self._scale = self._pixel_size / units_per_em

        hhea = tt["hhea"]
        self._ascent = round(hhea.ascent * self._scale)
        self._descent = round(-hhea.descent * self._scale)

        # glyph name -> rounded advance in pixels
        self._advances: dict[str, int] = {}

    # -----------------------
    # Construction
    # -----------------------
    @classmethod
    def from_name(
        cls,
        index: int,
        name: str,
        loader: FontLoader,
        dpi: float = DEFAULT_DPI,
    ) -> FontHandle:
        """Open the font configured as ``name``.

        Raises:
            UnableToOpenFont: the loader found nothing, or the file could not
                be read as a font.
            UnableToParseFontPattern: ``name`` is not a valid font pattern.
        """
        desc = loader.open_by_name(name)
        pattern = parse_font_name(name)
        try:
            tt = _open_ttfont(desc)
        except Exception as e:
            raise UnableToOpenFont(name) from e
        try:
            return cls(index, tt, desc, pattern.pixel_size(dpi), pattern=pattern)
        except Exception as e:
            tt.close()
            raise UnableToOpenFont(name) from e

    @classmethod
    def from_descriptor(
        cls, index: int, desc: FontDescriptor, pixel_size: float
    ) -> FontHandle:
        """Open a face returned by a fallback source.

        Raises:
            UnableToOpenFontPattern: the face could not be loaded.
        """
        try:
            tt = _open_ttfont(desc)
        except Exception as e:
            raise UnableToOpenFontPattern(str(desc.file)) from e
        try:
            return cls(index, tt, desc, pixel_size)
        except Exception as e:
            tt.close()
            raise UnableToOpenFontPattern(str(desc.file)) from e

    # -----------------------
    # Attributes
    # -----------------------
    @property
    def index(self) -> int:
        return self._index

    @property
    def ascent(self) -> int:
        return self._ascent

    @property
    def descent(self) -> int:
        return self._descent

    @property
    def height(self) -> int:
        return self._ascent + self._descent

    @property
    def pixel_size(self) -> float:
        return self._pixel_size

    @property
    def pattern(self) -> StylePattern | None:
        return self._pattern

    @property
    def descriptor(self) -> FontDescriptor:
        return self._descriptor

    @property
    def file(self) -> Path:
        return self._descriptor.file

    @property
    def family(self) -> str | None:
        if self._descriptor.family:
            return self._descriptor.family
        if self._pattern is not None:
            return self._pattern.families[0]
        return None

    @property
    def closed(self) -> bool:
        return self._closed

    # -----------------------
    # Queries
    # -----------------------
    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError(f"font #{self._index} used after close()")

    def supports(self, char: str) -> bool:
        """Return ``True`` if the face has a glyph for ``char``."""
        self._check_open()
        return ord(char) in self._cmap

    def _advance(self, glyph: str) -> int:
        adv = self._advances.get(glyph)
        if adv is None:
            units = self._hmtx[glyph][0] if glyph in self._hmtx.metrics else 0
            adv = round(units * self._scale)
            self._advances[glyph] = adv
        return adv

    def extent(self, text: str) -> tuple[int, int]:
        """Return ``(width, height)`` in pixels for ``text`` in this font.

        The width is the sum of the per-glyph advances; characters without a
        glyph use the ``.notdef`` advance. The height is the font's line
        height and does not depend on ``text``.

        Raises:
            UnicodeEncodeError: ``text`` holds a lone surrogate.
        """
        self._check_open()
        text.encode("utf-8")
        width = 0
        for ch in text:
            width += self._advance(self._cmap.get(ord(ch), NOTDEF))
        return width, self.height

    # -----------------------
    # Lifetime
    # -----------------------
    def close(self) -> None:
        """Release the underlying font; later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self._tt.close()

    def __enter__(self) -> FontHandle:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = " closed" if self._closed else ""
        return (
            f"<FontHandle #{self._index} {self.family or self.file.name!s} "
            f"{self._pixel_size:g}px{state}>"
        )
