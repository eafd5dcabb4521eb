"""Tests for docmerge.headings."""
from __future__ import annotations

from docmerge.headings import (
    fenced_spans,
    heading_rank,
    in_spans,
    iter_headings,
    iter_lines,
)


def test_iter_lines_offsets() -> None:
    lines = list(iter_lines("ab\ncd\n"))
    assert [(l.text, l.start, l.end) for l in lines] == [("ab", 0, 2), ("cd", 3, 5)]


def test_heading_rank() -> None:
    assert heading_rank("## Setup") == 2
    assert heading_rank("###### Deep") == 6
    assert heading_rank("#######  Too deep") is None
    assert heading_rank("#hashtag") is None
    assert heading_rank("  ## indented") is None


def test_headings_inside_fences_are_skipped() -> None:
    text = "# Top\n```bash\n# comment\n```\n## Real\n~~~\n## Fake\n~~~\n"
    assert [h.line for h in iter_headings(text)] == ["# Top", "## Real"]


def test_longer_fence_needs_matching_close() -> None:
    text = "````md\n```\n## Still code\n```\n````\n## Out\n"
    assert [h.line for h in iter_headings(text)] == ["## Out"]


def test_unterminated_fence_runs_to_end() -> None:
    text = "intro\n```\n## hidden\n"
    spans = fenced_spans(text)
    assert spans == [(6, len(text))]
    assert in_spans(text.index("## hidden"), spans)
    assert not in_spans(0, spans)
