import pytest
from helpers import ErrorRecorder, FakeFallbackSource, FakeLoader, make_font_set

from fontfallback.registry import FontRegistry
from fontfallback.resolver import FontResolver
from fontfallback.segmenter import Run, TextSegmenter


def make_segmenter(tmp_path, fallback_chars="◈ζᛄ"):
    fonts = make_font_set(tmp_path)
    registry = FontRegistry(FakeLoader(fonts))
    registry.reset(["Primary:pixelsize=10"])
    table = {"◈": fonts["Symbols"], "ζ": fonts["Symbols"], "ᛄ": fonts["Runic"]}
    source = FakeFallbackSource({c: table[c] for c in fallback_chars})
    resolver = FontResolver(registry, source, report=ErrorRecorder())
    return TextSegmenter(resolver)


def test_single_run_when_primary_covers_everything(tmp_path):
    segmenter = make_segmenter(tmp_path)

    assert segmenter.segment("hello") == [Run("hello", 0, 5, 0)]


def test_fallback_splits_into_three_runs(tmp_path):
    segmenter = make_segmenter(tmp_path)

    runs = segmenter.segment("he◈llo")

    assert [(r.text, r.font_index) for r in runs] == [
        ("he", 0),
        ("◈", 1),
        ("llo", 0),
    ]
    assert [(r.start, r.end) for r in runs] == [(0, 2), (2, 3), (3, 6)]


def test_empty_string_has_no_runs(tmp_path):
    segmenter = make_segmenter(tmp_path)

    assert segmenter.segment("") == []


def test_adjacent_fallback_characters_share_a_run(tmp_path):
    segmenter = make_segmenter(tmp_path)

    runs = segmenter.segment("◈ζ!")

    assert [(r.text, r.font_index) for r in runs] == [("◈ζ", 1), ("!", 0)]


def test_unresolvable_character_joins_primary_run(tmp_path):
    segmenter = make_segmenter(tmp_path, fallback_chars="")

    runs = segmenter.segment("a◈b")

    assert runs == [Run("a◈b", 0, 3, 0)]
    assert len(segmenter.resolver.report.errors) == 1


def test_segment_does_not_change_earlier_decisions(tmp_path):
    segmenter = make_segmenter(tmp_path)

    before = segmenter.segment("xᛄy")
    segmenter.segment("◈◈ ζ")
    after = segmenter.segment("xᛄy")

    assert before == after


@pytest.mark.parametrize(
    "text",
    [
        "a",
        "◈",
        "    text is great! ◈ ζ ᛄ ℚ",
        "ᛄᛄ◈◈ab◈",
        "é́ mixed ζ ᛄ",
        "😀 emoji outside every font",
    ],
)
def test_partition_and_no_merge_gap(tmp_path, text):
    segmenter = make_segmenter(tmp_path)

    runs = segmenter.segment(text)

    assert "".join(r.text for r in runs) == text
    assert runs[0].start == 0
    assert runs[-1].end == len(text)
    for left, right in zip(runs, runs[1:]):
        assert left.end == right.start
        assert left.font_index != right.font_index
    for run in runs:
        assert text[run.start : run.end] == run.text
