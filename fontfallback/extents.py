"""
fontfallback – extents.py
=========================

Pixel extents for runs and single-line placement.

Runs are laid out left to right with no gaps. Each run is centered
vertically on its own font's metrics so that taller or shorter fallback
glyphs share the line with the primary font::

    y = top + (line_height - run_height) // 2 + font_ascent

The drawing itself happens on an external :class:`DrawingSurface`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from fontfallback.registry import FontRegistry
from fontfallback.segmenter import Run


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True)
class PlacedRun:
    """A run with its pen position (``y`` is the baseline) and size."""

    text: str
    font_index: int
    x: int
    y: int
    width: int
    height: int


class DrawingSurface(Protocol):
    def fill_rect(self, x: int, y: int, w: int, h: int) -> None: ...

    def draw_run(self, text: str, font_index: int, x: int, y: int) -> None: ...


class RunExtentCalculator:
    def __init__(self, registry: FontRegistry) -> None:
        self.registry = registry

    def extent(self, run: Run) -> tuple[int, int]:
        return self.registry.get(run.font_index).extent(run.text)

    def total_width(self, runs: Iterable[Run]) -> int:
        return sum(self.extent(run)[0] for run in runs)


def layout_line(
    runs: Iterable[Run],
    calculator: RunExtentCalculator,
    rect: Rect,
    lpad: int = 0,
) -> list[PlacedRun]:
    """Place ``runs`` on one line inside ``rect``, starting ``lpad`` in."""
    placed: list[PlacedRun] = []
    x = rect.x + lpad
    for run in runs:
        width, height = calculator.extent(run)
        ascent = calculator.registry.get(run.font_index).ascent
        y = rect.y + (rect.h - height) // 2 + ascent
        placed.append(PlacedRun(run.text, run.font_index, x, y, width, height))
        x += width
    return placed
