"""Splitting text into maximal same-font runs."""

from __future__ import annotations

from dataclasses import dataclass

from fontfallback.resolver import FontResolver


@dataclass(frozen=True)
class Run:
    """A contiguous slice ``source[start:end]`` drawn with one font.

    Attributes:
        text: The slice itself.
        start: Index of the first character in the source string.
        end: Index just past the last character.
        font_index: Registry index of the font rendering every character.
    """

    text: str
    start: int
    end: int
    font_index: int


class TextSegmenter:
    def __init__(self, resolver: FontResolver) -> None:
        self.resolver = resolver

    def segment(self, text: str) -> list[Run]:
        """Partition ``text`` into runs, left to right.

        Adjacent runs never share a font index and joining the runs' text
        gives back ``text``. An empty string yields no runs.
        """
        runs: list[Run] = []
        if not text:
            return runs

        resolve = self.resolver.resolve
        start = 0
        current = resolve(text[0])
        for i in range(1, len(text)):
            index = resolve(text[i])
            if index != current:
                runs.append(Run(text[start:i], start, i, current))
                start = i
                current = index

        runs.append(Run(text[start:], start, len(text), current))
        return runs
