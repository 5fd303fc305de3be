"""
fontfallback – engine.py
========================

:class:`TextEngine` bundles one registry, its cache, the resolver, the
segmenter and the extent calculator for a single rendering context.

Typical use::

    with TextEngine(["DejaVu Sans Mono:size=12"]) as engine:
        for run in engine.segment("text is great! ◈ ζ ᛄ ℚ"):
            width, height = engine.extent(run)

Engines are not thread-safe and must not share fonts: each one opens and
releases its own.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from fontfallback.errors import report_error
from fontfallback.extents import (
    DrawingSurface,
    PlacedRun,
    Rect,
    RunExtentCalculator,
    layout_line,
)
from fontfallback.font_handle import FontHandle
from fontfallback.fontconfig import (
    DEFAULT_DPI,
    FallbackSource,
    FontconfigService,
    FontLoader,
)
from fontfallback.registry import FontRegistry
from fontfallback.resolver import FontResolver
from fontfallback.segmenter import Run, TextSegmenter


class TextEngine:
    """Font-fallback text engine for one rendering context.

    Args:
        fonts: Font names, primary first.
        loader: Service used to open the configured names. Defaults to a
            :class:`FontconfigService`.
        fallback_source: Service asked for fonts covering unknown characters.
            Defaults to a :class:`FontconfigService`.
        report: Receives non-fatal resolution errors.
        dpi: Resolution used to turn point sizes into pixels.

    Raises:
        UnableToOpenFont: a configured name could not be opened.
        UnableToParseFontPattern: a configured name is not a valid pattern.
    """

    def __init__(
        self,
        fonts: Sequence[str],
        loader: FontLoader | None = None,
        fallback_source: FallbackSource | None = None,
        report: Callable[[Exception], None] = report_error,
        dpi: float = DEFAULT_DPI,
    ) -> None:
        service = FontconfigService()
        self.loader: FontLoader = loader if loader is not None else service
        if fallback_source is None:
            fallback_source = service

        self.registry = FontRegistry(self.loader, dpi=dpi)
        self.registry.reset(fonts)
        self.resolver = FontResolver(self.registry, fallback_source, report=report)
        self.segmenter = TextSegmenter(self.resolver)
        self.calculator = RunExtentCalculator(self.registry)

    # -----------------------
    # Font set
    # -----------------------
    def set_fonts(self, names: Sequence[str]) -> None:
        """Replace the font set; on failure the current one stays active."""
        self.registry.reset(names)

    def set_font(self, name: str) -> None:
        self.set_fonts([name])

    def font(self, index: int) -> FontHandle:
        return self.registry.get(index)

    @property
    def font_count(self) -> int:
        return len(self.registry)

    # -----------------------
    # Resolution and measurement
    # -----------------------
    def resolve(self, char: str) -> int:
        return self.resolver.resolve(char)

    def segment(self, text: str) -> list[Run]:
        return self.segmenter.segment(text)

    def font_matches(self, text: str) -> list[tuple[str, int]]:
        """Return ``(chunk, font index)`` pairs showing which font draws what."""
        return [(run.text, run.font_index) for run in self.segment(text)]

    def extent(self, run: Run) -> tuple[int, int]:
        return self.calculator.extent(run)

    def text_width(self, text: str) -> int:
        return self.calculator.total_width(self.segment(text))

    def layout(self, text: str, rect: Rect, lpad: int = 0) -> list[PlacedRun]:
        return layout_line(self.segment(text), self.calculator, rect, lpad)

    def draw_text(
        self, surface: DrawingSurface, text: str, rect: Rect, lpad: int = 0
    ) -> int:
        """Clear ``rect`` and draw ``text`` on ``surface``.

        Returns:
            The x coordinate just past the last drawn run.
        """
        surface.fill_rect(rect.x, rect.y, rect.w, rect.h)
        x_end = rect.x + lpad
        for placed in self.layout(text, rect, lpad):
            surface.draw_run(placed.text, placed.font_index, placed.x, placed.y)
            x_end = placed.x + placed.width
        return x_end

    # -----------------------
    # Lifetime
    # -----------------------
    def close(self) -> None:
        self.registry.close()

    def __enter__(self) -> TextEngine:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
