#!/usr/bin/env python3
"""
fontfallback – cli.py
=====================

Show which font renders which part of a string.

For every run of the segmented text one line is printed::

    '    text is great! ' -> 0 (ProFont For Powerline) 126x16
    '◈' -> 1 (DejaVu Sans) 10x16

With ``--json`` the same information is written as a JSON document.

Configuration
-------------
- ``-f/--font`` (repeatable): font names, primary first. Defaults to the
  ``FONTFALLBACK_FONTS`` environment variable (names separated by ``;``) or
  :data:`DEFAULT_FONT`.
- ``--dpi``: defaults to ``FONTFALLBACK_DPI`` or :data:`DEFAULT_DPI`.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any

from fontfallback.engine import TextEngine
from fontfallback.errors import FontError
from fontfallback.fontconfig import DEFAULT_DPI

DEFAULT_FONT = "monospace:size=12"


def default_fonts() -> list[str]:
    raw = os.environ.get("FONTFALLBACK_FONTS", "")
    names = [n.strip() for n in raw.split(";") if n.strip()]
    return names or [DEFAULT_FONT]


def default_dpi() -> float:
    raw = os.environ.get("FONTFALLBACK_DPI")
    if raw:
        try:
            return float(raw)
        except ValueError:
            print(
                f"⚠️  Warning: ignoring invalid FONTFALLBACK_DPI '{raw}'",
                file=sys.stderr,
            )
    return DEFAULT_DPI


def build_report(engine: TextEngine, text: str) -> dict[str, Any]:
    """Collect runs, extents and the fonts they use as a JSON-friendly dict."""
    runs: list[dict[str, Any]] = []
    total = 0
    for run in engine.segment(text):
        width, height = engine.extent(run)
        total += width
        runs.append(
            {
                "text": run.text,
                "start": run.start,
                "end": run.end,
                "font_index": run.font_index,
                "width": width,
                "height": height,
            }
        )

    fonts = [
        {
            "index": handle.index,
            "family": handle.family,
            "file": str(handle.file),
            "face_index": handle.descriptor.face_index,
            "pixel_size": handle.pixel_size,
            "ascent": handle.ascent,
            "descent": handle.descent,
        }
        for handle in engine.registry
    ]

    return {"text": text, "fonts": fonts, "runs": runs, "width": total}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: segment TEXT and print the font used for each run."""
    parser = argparse.ArgumentParser(
        description="Show which font renders each part of a string.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("text", help="UTF-8 text to segment")
    parser.add_argument(
        "-f",
        "--font",
        action="append",
        dest="fonts",
        default=None,
        help="Font name (FontConfig syntax); repeat for more, primary first",
    )
    parser.add_argument(
        "--dpi",
        type=float,
        default=default_dpi(),
        help="Resolution used to convert point sizes into pixels",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write runs and fonts as JSON",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print progress and a summary of missing glyphs",
    )

    args = parser.parse_args(argv)
    fonts = args.fonts or default_fonts()

    try:
        args.text.encode("utf-8")
    except UnicodeEncodeError:
        print("Error: TEXT is not valid UTF-8", file=sys.stderr)
        return 1

    # progress goes to stderr so stdout stays parseable with --json
    if args.verbose:
        print(f"Loading fonts: {', '.join(fonts)}", file=sys.stderr)

    try:
        engine = TextEngine(fonts, dpi=args.dpi)
    except FontError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with engine:
        report = build_report(engine, args.text)

        if args.json:
            print(json.dumps(report, indent=2, ensure_ascii=False))
        else:
            families = {f["index"]: f["family"] or f["file"] for f in report["fonts"]}
            for run in report["runs"]:
                idx = run["font_index"]
                print(
                    f"'{run['text']}' -> {idx} ({families[idx]}) "
                    f"{run['width']}x{run['height']}"
                )

        if args.verbose:
            print(
                f"Total width: {report['width']}px, {engine.font_count} font(s)",
                file=sys.stderr,
            )
            missing = engine.registry.cache.missing()
            if missing:
                print(f"No font found for: {' '.join(missing)}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
