from pathlib import Path
from types import SimpleNamespace

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from fontfallback.errors import NoFallbackFontForChar, UnableToOpenFont
from fontfallback.fontconfig import FontDescriptor

ASCII = [chr(cp) for cp in range(0x20, 0x7F)]


def _box_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((450, 0))
    pen.lineTo((450, 700))
    pen.lineTo((50, 700))
    pen.closePath()
    return pen.glyph()


def build_font(
    path: Path,
    chars,
    *,
    family: str = "Test Sans",
    upem: int = 1000,
    ascent: int = 800,
    descent: int = -200,
    advance: int = 500,
    notdef_advance: int = 600,
) -> Path:
    """Write a tiny TrueType font covering ``chars`` and return its path."""
    cmap = {ord(c): f"uni{ord(c):04X}" for c in chars}
    glyph_order = [".notdef"] + sorted(set(cmap.values()))

    fb = FontBuilder(upem, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf({name: _box_glyph() for name in glyph_order})

    metrics = {name: (advance, 50) for name in glyph_order}
    metrics[".notdef"] = (notdef_advance, 50)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=ascent, descent=descent)
    fb.setupOS2(
        sTypoAscender=ascent,
        sTypoDescender=descent,
        usWinAscent=ascent,
        usWinDescent=-descent,
    )
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    fb.setupPost()
    fb.setupMaxp()
    fb.save(str(path))
    return path


def make_font_set(tmp_path: Path) -> dict[str, FontDescriptor]:
    """Primary (ASCII), Symbols (◈ ζ) and Runic (ᛄ) faces on disk.

    At ``pixelsize=10``: Primary glyphs are 5px wide with ascent 8 and
    descent 2; Symbols glyphs are 10px wide with ascent 9 and descent 3;
    Runic glyphs are 7px wide with ascent 8 and descent 2.
    """
    primary = build_font(tmp_path / "primary.ttf", ASCII, family="Primary")
    alt = build_font(
        tmp_path / "alt.ttf", ASCII, family="Alt", advance=600, ascent=700, descent=-300
    )
    symbols = build_font(
        tmp_path / "symbols.ttf",
        "◈ζ",
        family="Symbols",
        advance=1000,
        ascent=900,
        descent=-300,
    )
    runic = build_font(tmp_path / "runic.ttf", "ᛄ", family="Runic", advance=700)
    return {
        "Primary": FontDescriptor(primary, 0, "Primary"),
        "Alt": FontDescriptor(alt, 0, "Alt"),
        "Symbols": FontDescriptor(symbols, 0, "Symbols"),
        "Runic": FontDescriptor(runic, 0, "Runic"),
    }


class FakeLoader:
    """Font loader resolving a name by its first family."""

    def __init__(self, fonts: dict[str, FontDescriptor]):
        self.fonts = fonts
        self.calls: list[str] = []

    def open_by_name(self, name: str) -> FontDescriptor:
        self.calls.append(name)
        family = name.split(":")[0].split("-")[0]
        if family not in self.fonts:
            raise UnableToOpenFont(name)
        return self.fonts[family]


class FakeFallbackSource:
    """Fallback source answering from a fixed ``char -> descriptor`` table."""

    def __init__(self, table: dict[str, FontDescriptor] | None = None):
        self.table = table or {}
        self.calls: list[tuple[object, str]] = []

    def match_char(self, pattern, char: str) -> FontDescriptor:
        self.calls.append((pattern, char))
        if char not in self.table:
            raise NoFallbackFontForChar(char)
        return self.table[char]


class ErrorRecorder:
    def __init__(self):
        self.errors: list[Exception] = []

    def __call__(self, err: Exception) -> None:
        self.errors.append(err)


class RecordingSurface:
    def __init__(self):
        self.fills: list[tuple[int, int, int, int]] = []
        self.draws: list[tuple[str, int, int, int]] = []

    def fill_rect(self, x, y, w, h):
        self.fills.append((x, y, w, h))

    def draw_run(self, text, font_index, x, y):
        self.draws.append((text, font_index, x, y))


def make_fc_match_output(
    *, file: Path | None = None, index: int = 0, family: str = "", returncode: int = 0
):
    """Mock of ``run_command`` output for ``fc-match --format=...``."""
    stdout = "" if file is None else f"{file}\n{index}\n{family}\n"
    return SimpleNamespace(stdout=stdout, returncode=returncode)
