"""Markdown line primitives: fenced code spans and ATX headings.

Pure text operations shared by the locator, normalizer and merge
strategies. Offsets are character positions in the text passed in.
"""
from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass

_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_HEADING_RE = re.compile(r"^(#{1,6})(?:[ \t]+|$)")


@dataclass(frozen=True, slots=True)
class Line:
    """One line of text with its global offsets (newline excluded)."""

    text: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Heading:
    """An ATX heading line found outside fenced code."""

    rank: int       # 1 for "#", 2 for "##", ...
    line: str       # Full heading line, e.g. "## Multi-Mac Sync"
    start: int
    end: int


def iter_lines(text: str) -> Iterator[Line]:
    """Yield every line with its offsets. A trailing newline adds no line."""
    pos = 0
    n = len(text)
    while pos < n:
        nl = text.find("\n", pos)
        if nl < 0:
            yield Line(text[pos:], pos, n)
            return
        yield Line(text[pos:nl], pos, nl)
        pos = nl + 1


def fence_marker(line: str) -> str | None:
    """Return the fence run (e.g. "```") if the line opens/closes a fence."""
    m = _FENCE_RE.match(line)
    return m.group(1) if m else None


def iter_unfenced_lines(text: str) -> Iterator[tuple[Line, bool]]:
    """Yield ``(line, in_fence)`` pairs.

    Fence delimiter lines themselves are reported as fenced. A fence closes
    only on a run of the same character at least as long as the opener.
    """
    opener: str | None = None
    for line in iter_lines(text):
        marker = fence_marker(line.text)
        if opener is None:
            if marker is not None:
                opener = marker
                yield line, True
                continue
            yield line, False
        else:
            if (
                marker is not None
                and marker[0] == opener[0]
                and len(marker) >= len(opener)
                and not line.text.strip()[len(marker):].strip()
            ):
                opener = None
            yield line, True


def fenced_spans(text: str) -> list[tuple[int, int]]:
    """Return sorted ``(start, end)`` offsets of fenced code regions."""
    spans: list[tuple[int, int]] = []
    current: int | None = None
    last_end = 0
    for line, in_fence in iter_unfenced_lines(text):
        if in_fence and current is None:
            current = line.start
        elif not in_fence and current is not None:
            spans.append((current, last_end))
            current = None
        last_end = line.end
    if current is not None:
        spans.append((current, len(text)))
    return spans


def in_spans(pos: int, spans: list[tuple[int, int]]) -> bool:
    """True when ``pos`` falls inside one of the sorted, disjoint spans."""
    idx = bisect_right([s for s, _ in spans], pos) - 1
    return idx >= 0 and spans[idx][0] <= pos <= spans[idx][1]


def heading_rank(line: str) -> int | None:
    """Rank of an ATX heading line, or None if the line is not a heading."""
    m = _HEADING_RE.match(line)
    return len(m.group(1)) if m else None


def iter_headings(text: str) -> Iterator[Heading]:
    """Yield ATX headings that are not inside fenced code blocks."""
    for line, in_fence in iter_unfenced_lines(text):
        if in_fence:
            continue
        rank = heading_rank(line.text)
        if rank is not None:
            yield Heading(rank, line.text.rstrip(), line.start, line.end)
