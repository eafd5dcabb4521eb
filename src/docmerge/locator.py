"""Section locator: slice a source document between two heading boundaries.

Boundaries are regex patterns that must match a whole heading line. A
match that only covers part of a line (a heading title quoted inside
prose, say) does not count, and neither does a match inside a fenced code
block.
"""
from __future__ import annotations

import re
from typing import TypeAlias

from docmerge.errors import ConfigError
from docmerge.headings import fenced_spans, in_spans
from docmerge.merge_types import ExtractedSection, SectionDef

Boundary: TypeAlias = str | re.Pattern[str]


def heading_pattern(title: str, level: int = 2) -> re.Pattern[str]:
    """Build an exact, line-anchored boundary for a heading title.

    ``heading_pattern("Quick Start")`` matches the line ``## Quick Start``
    (trailing blanks tolerated) and nothing else.
    """
    if not 1 <= level <= 6:
        raise ValueError(f"Heading level must be 1-6, got {level}")
    return heading_line_pattern("#" * level + " " + title.strip())


def heading_line_pattern(line: str) -> re.Pattern[str]:
    """Exact boundary for a literal heading line such as ``"## Troubleshooting"``."""
    return re.compile("^" + re.escape(line.strip()) + r"[ \t]*$", re.MULTILINE)


def compile_boundary(pattern: Boundary) -> re.Pattern[str]:
    """Compile a boundary with ``re.MULTILINE`` so ``^``/``$`` are per line."""
    if isinstance(pattern, re.Pattern):
        if pattern.flags & re.MULTILINE:
            return pattern
        return re.compile(pattern.pattern, pattern.flags | re.MULTILINE)
    try:
        return re.compile(pattern, re.MULTILINE)
    except re.error as exc:
        raise ConfigError(f"Invalid boundary pattern {pattern!r}: {exc}") from exc


def _is_line_start(text: str, pos: int) -> bool:
    return pos == 0 or text[pos - 1] == "\n"


def _is_line_end(text: str, pos: int) -> bool:
    return pos == len(text) or text[pos] == "\n"


def find_boundary(
    text: str,
    pattern: re.Pattern[str],
    pos: int = 0,
    *,
    fences: list[tuple[int, int]] | None = None,
) -> re.Match[str] | None:
    """Return the first whole-line match of ``pattern`` at or after ``pos``."""
    spans = fenced_spans(text) if fences is None else fences
    for m in pattern.finditer(text, pos):
        if m.end() == m.start():
            continue
        if not (_is_line_start(text, m.start()) and _is_line_end(text, m.end())):
            continue
        if in_spans(m.start(), spans):
            continue
        return m
    return None


def locate(source: str, start: Boundary, end: Boundary | None = None) -> str:
    """Return the trimmed slice from the start heading to the end heading.

    The start heading line is included; the end heading is excluded. The
    end boundary is only searched after the start heading, so an earlier
    occurrence never truncates the section. Returns "" when the start
    boundary does not match (never raises for a missing section).
    """
    fences = fenced_spans(source)
    start_m = find_boundary(source, compile_boundary(start), fences=fences)
    if start_m is None:
        return ""

    stop = len(source)
    if end is not None:
        end_m = find_boundary(
            source, compile_boundary(end), start_m.end(), fences=fences,
        )
        if end_m is not None:
            stop = end_m.start()
    return source[start_m.start():stop].strip()


def extract_section(source: str, section: SectionDef) -> ExtractedSection:
    """Locate one SectionDef against the source text."""
    return ExtractedSection(
        name=section.name,
        raw_content=locate(source, section.start, section.end),
        target=section.target,
        strategy=section.strategy,
        meta=section.meta,
    )
