"""
fontfallback – errors.py
========================

Error kinds raised by the font-fallback engine, plus the diagnostic channel
used for failures that are recovered locally.

Configuration-time errors (opening or parsing the configured fonts) propagate
to the caller. Resolution-time errors (no fallback for a single character)
never abort segmentation: the resolver degrades to the primary font and hands
the error to a ``report`` callable, :func:`report_error` by default.
"""

from __future__ import annotations

import sys


class FontError(Exception):
    """Base class for every font-related failure in this package."""


class UnableToOpenFont(FontError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unable to open '{name}' as a font")
        self.name = name


class UnableToOpenFontPattern(FontError):
    def __init__(self, detail: str | None = None) -> None:
        message = "Unable to open font from matched pattern"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.detail = detail


class UnableToParseFontPattern(FontError):
    def __init__(self, name: str, reason: str | None = None) -> None:
        message = f"Unable to parse '{name}' as a font pattern"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.name = name
        self.reason = reason


class NoFallbackFontForChar(FontError):
    def __init__(self, char: str) -> None:
        super().__init__(f"Unable to find a fallback font for '{char}'")
        self.char = char


def report_error(err: Exception) -> None:
    """Default diagnostic channel: print a warning line to stderr."""
    print(f"⚠️  Warning: {err}", file=sys.stderr)
