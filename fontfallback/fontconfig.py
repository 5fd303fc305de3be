"""
fontfallback – fontconfig.py
============================

Font-name patterns and the FontConfig-backed font services.

Two external services are consumed by the engine:

- a *font loader*, used only when the font set is (re)configured, which turns
  a font name such as ``"DejaVu Sans Mono:size=12"`` into a concrete font file;
- a *fallback source*, used during resolution, which is asked for a font that
  covers one specific character while staying close to the primary font's
  style.

Both are described here as small protocols and implemented by
:class:`FontconfigService`, which shells out to ``fc-match``.

Name syntax
-----------
Names follow the FontConfig convention::

    family[,family...][-size][:property=value][:constant]...

Backslash escapes the next character (``\\-``, ``\\:``, ``\\,``). Bare
constants such as ``bold`` or ``italic`` expand to their property.
"""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from fontfallback.errors import (
    NoFallbackFontForChar,
    UnableToOpenFont,
    UnableToParseFontPattern,
)

# -----------------------
# Configuration
# -----------------------
IS_WINDOWS = sys.platform.startswith("win")
FC_MATCH = "fc-match.exe" if IS_WINDOWS else "fc-match"

#: FontConfig's own default when a pattern carries no size.
DEFAULT_POINT_SIZE = 12.0
DEFAULT_DPI = 96.0

#: One field per line: file path, face index inside a collection, family list.
FC_MATCH_FORMAT = "%{file}\n%{index}\n%{family}\n"

#: Subset of FontConfig's named constants accepted as bare ``:word`` entries.
NAME_CONSTANTS: dict[str, tuple[str, str]] = {
    "thin": ("weight", "thin"),
    "extralight": ("weight", "extralight"),
    "ultralight": ("weight", "ultralight"),
    "light": ("weight", "light"),
    "book": ("weight", "book"),
    "regular": ("weight", "regular"),
    "normal": ("weight", "normal"),
    "medium": ("weight", "medium"),
    "demibold": ("weight", "demibold"),
    "semibold": ("weight", "semibold"),
    "bold": ("weight", "bold"),
    "extrabold": ("weight", "extrabold"),
    "ultrabold": ("weight", "ultrabold"),
    "black": ("weight", "black"),
    "heavy": ("weight", "heavy"),
    "roman": ("slant", "roman"),
    "italic": ("slant", "italic"),
    "oblique": ("slant", "oblique"),
    "proportional": ("spacing", "proportional"),
    "dual": ("spacing", "dual"),
    "mono": ("spacing", "mono"),
    "charcell": ("spacing", "charcell"),
    "condensed": ("width", "condensed"),
    "expanded": ("width", "expanded"),
}

NUMERIC_PROPERTIES = {"size", "pixelsize", "dpi"}

FAMILY_SPECIALS = "\\-:,"
VALUE_SPECIALS = "\\=:,"


def run_command(argv: list[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        argv,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )


# -----------------------
# Patterns
# -----------------------
@dataclass(frozen=True)
class StylePattern:
    """A parsed FontConfig name: families, optional point size, properties.

    ``properties`` keeps insertion order so that :meth:`unparse` is stable.
    """

    families: tuple[str, ...]
    size: float | None = None
    properties: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def get(self, key: str) -> str | None:
        """Return the last value recorded for ``key``, or ``None``."""
        found = None
        for k, v in self.properties:
            if k == key:
                found = v
        return found

    def point_size(self) -> float:
        explicit = self.get("size")
        if explicit is not None:
            return float(explicit)
        if self.size is not None:
            return self.size
        return DEFAULT_POINT_SIZE

    def pixel_size(self, dpi: float = DEFAULT_DPI) -> float:
        """Pixel size requested by this pattern.

        ``pixelsize`` wins when present; otherwise the point size is scaled by
        ``dpi`` (the pattern's own ``dpi`` property overrides the argument).
        """
        pixelsize = self.get("pixelsize")
        if pixelsize is not None:
            return float(pixelsize)
        own_dpi = self.get("dpi")
        if own_dpi is not None:
            dpi = float(own_dpi)
        return self.point_size() * dpi / 72.0

    def with_properties(self, *extra: tuple[str, str]) -> StylePattern:
        return StylePattern(
            families=self.families,
            size=self.size,
            properties=self.properties + tuple(extra),
        )

    def unparse(self) -> str:
        """Render the pattern back into FontConfig name syntax."""
        out = ",".join(_escape(f, FAMILY_SPECIALS) for f in self.families)
        if self.size is not None:
            out += f"-{_format_number(self.size)}"
        for key, value in self.properties:
            out += f":{key}={_escape(value, VALUE_SPECIALS)}"
        return out


def _escape(text: str, specials: str) -> str:
    return "".join(f"\\{ch}" if ch in specials else ch for ch in text)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _split_unescaped(text: str, sep: str, name: str) -> list[str]:
    """Split ``text`` on unescaped ``sep``, keeping escapes in the pieces."""
    parts: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            if i + 1 >= len(text):
                raise UnableToParseFontPattern(name, "trailing backslash")
            current.append(text[i : i + 2])
            i += 2
            continue
        if ch == sep:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text):
            out.append(text[i + 1])
            i += 2
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def _parse_number(raw: str, name: str, what: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise UnableToParseFontPattern(name, f"invalid {what} '{raw}'") from None
    if value <= 0:
        raise UnableToParseFontPattern(name, f"invalid {what} '{raw}'")
    return value


def parse_font_name(name: str) -> StylePattern:
    """Parse a FontConfig font name into a :class:`StylePattern`.

    Args:
        name: Font name, e.g. ``"ProFont For Powerline:size=12"`` or
            ``"DejaVu Sans,Noto Sans-10:bold"``.

    Returns:
        The parsed pattern.

    Raises:
        UnableToParseFontPattern: if the name is empty, has no family, carries
            a non-numeric size, an empty property name, or an unknown bare
            constant.
    """
    if not name or not name.strip():
        raise UnableToParseFontPattern(name, "empty name")

    head, *props = _split_unescaped(name, ":", name)

    size: float | None = None
    dash_parts = _split_unescaped(head, "-", name)
    if len(dash_parts) > 1:
        head = "-".join(dash_parts[:-1])
        size = _parse_number(dash_parts[-1].strip(), name, "size")

    families = tuple(
        _unescape(f).strip() for f in _split_unescaped(head, ",", name) if f.strip()
    )
    if not families:
        raise UnableToParseFontPattern(name, "missing family")

    properties: list[tuple[str, str]] = []
    for raw in props:
        if not raw.strip():
            continue
        key_value = _split_unescaped(raw, "=", name)
        if len(key_value) == 1:
            constant = NAME_CONSTANTS.get(_unescape(raw).strip().lower())
            if constant is None:
                raise UnableToParseFontPattern(name, f"unknown constant '{raw}'")
            properties.append(constant)
            continue
        key = _unescape(key_value[0]).strip()
        value = _unescape("=".join(key_value[1:])).strip()
        if not key:
            raise UnableToParseFontPattern(name, "empty property name")
        if key in NUMERIC_PROPERTIES:
            _parse_number(value, name, key)
        properties.append((key, value))

    return StylePattern(families=families, size=size, properties=tuple(properties))


# -----------------------
# Service interfaces
# -----------------------
@dataclass(frozen=True)
class FontDescriptor:
    """A concrete font face: file on disk plus face index in a collection."""

    file: Path
    face_index: int = 0
    family: str | None = None


class FontLoader(Protocol):
    def open_by_name(self, name: str) -> FontDescriptor:
        """Locate the font face best matching ``name``.

        Raises:
            UnableToOpenFont: if nothing matches.
        """
        ...


class FallbackSource(Protocol):
    def match_char(self, pattern: StylePattern, char: str) -> FontDescriptor:
        """Locate a face covering ``char`` in a style close to ``pattern``.

        Raises:
            NoFallbackFontForChar: if nothing matches.
        """
        ...


# -----------------------
# FontConfig implementation
# -----------------------
def parse_fc_match_output(stdout: str) -> FontDescriptor | None:
    """Parse the output of ``fc-match --format=FC_MATCH_FORMAT``.

    Returns ``None`` when no file was reported.
    """
    lines = stdout.splitlines()
    if not lines or not lines[0].strip():
        return None

    path = Path(lines[0].strip())
    face_index = 0
    if len(lines) > 1 and lines[1].strip().isdigit():
        face_index = int(lines[1].strip())

    family = None
    if len(lines) > 2 and lines[2].strip():
        family = _unescape(_split_unescaped(lines[2].strip(), ",", lines[2])[0])

    return FontDescriptor(file=path, face_index=face_index, family=family)


class FontconfigService:
    """Font loader and fallback source backed by the ``fc-match`` command."""

    def __init__(self, executable: str = FC_MATCH) -> None:
        self.executable = executable

    def _match(self, query: str) -> FontDescriptor | None:
        try:
            proc = run_command([self.executable, f"--format={FC_MATCH_FORMAT}", query])
        except OSError:
            # fc-match missing or not executable
            return None
        if proc.returncode != 0:
            return None
        desc = parse_fc_match_output(proc.stdout or "")
        if desc is None or not desc.file.exists():
            return None
        return desc

    def open_by_name(self, name: str) -> FontDescriptor:
        desc = self._match(name)
        if desc is None:
            raise UnableToOpenFont(name)
        return desc

    def match_char(self, pattern: StylePattern, char: str) -> FontDescriptor:
        query = pattern.with_properties(
            ("charset", f"{ord(char):x}"),
            ("scalable", "True"),
        ).unparse()
        desc = self._match(query)
        if desc is None:
            raise NoFallbackFontForChar(char)
        return desc
