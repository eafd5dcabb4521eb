"""Merge strategies: combine a normalized section with an existing page.

All strategies are pure functions of ``(existing, section, meta)`` and
return a :class:`MergeResult`. ``existing`` is the full current page text,
or None when the destination does not exist yet. Applying a strategy to
its own output with the same section returns the same bytes.

Replace              — new body, existing header/preamble kept
CreateIfAbsent       — Replace for a missing page, otherwise untouched
MergeIntoSubsection  — only the region owned by the marker heading changes
"""
from __future__ import annotations

from docmerge.frontmatter import (
    DEFAULT_PREAMBLE,
    PageParts,
    compose_document,
    render_header,
    split_document,
)
from docmerge.headings import Heading, heading_rank, iter_headings
from docmerge.merge_types import (
    CreateIfAbsent,
    MergeIntoSubsection,
    MergeResult,
    PageMeta,
    Replace,
    Strategy,
)


def _join_blocks(*blocks: str) -> str:
    """Trim each block and join the non-empty ones with one blank line."""
    return "\n\n".join(b.strip() for b in blocks if b.strip())


def _header_and_preamble(parts: PageParts | None, meta: PageMeta) -> tuple[str, str]:
    """Existing header/preamble verbatim; generated ones where missing."""
    header = parts.header if parts is not None and parts.header is not None else render_header(meta)
    preamble = parts.preamble if parts is not None and parts.preamble else DEFAULT_PREAMBLE
    return header, preamble


# ---------------------------------------------------------------------------
# Replace / CreateIfAbsent
# ---------------------------------------------------------------------------


def apply_replace(existing: str | None, section: str, meta: PageMeta) -> MergeResult:
    """Discard the existing body and write ``section`` in its place."""
    parts = split_document(existing) if existing is not None else None
    header, preamble = _header_and_preamble(parts, meta)
    return MergeResult(compose_document(header, preamble, section), "written")


def apply_create_if_absent(
    existing: str | None, section: str, meta: PageMeta,
) -> MergeResult:
    """Create the page when missing; never modify a page that exists."""
    if existing is not None:
        return MergeResult(None, "skipped-exists", "destination already exists")
    return apply_replace(None, section, meta)


# ---------------------------------------------------------------------------
# MergeIntoSubsection
# ---------------------------------------------------------------------------


def _find_marker(headings: list[Heading], marker: str, start: int = 0) -> int | None:
    for i in range(start, len(headings)):
        if headings[i].line == marker:
            return i
    return None


def _next_peer(headings: list[Heading], idx: int, rank: int) -> Heading | None:
    """First heading after ``headings[idx]`` with the same or higher rank."""
    for h in headings[idx + 1:]:
        if h.rank <= rank:
            return h
    return None


def _drop_marker_regions(text: str, marker: str, rank: int) -> str:
    """Remove every region owned by ``marker`` from ``text``.

    Cleans up copies left behind by earlier duplicate appends so the
    merged page carries the marker exactly once.
    """
    while True:
        headings = list(iter_headings(text))
        idx = _find_marker(headings, marker)
        if idx is None:
            return text
        nxt = _next_peer(headings, idx, rank)
        after = text[nxt.start:] if nxt is not None else ""
        text = _join_blocks(text[:headings[idx].start], after)


def _parent_end(text: str, rank: int) -> int:
    """Offset of the first heading ranked above ``rank``, else ``len(text)``."""
    for h in iter_headings(text):
        if h.rank < rank:
            return h.start
    return len(text)


def check_section_shape(section: str, marker: str, rank: int) -> str | None:
    """Return why ``section`` cannot own the marker region, or None if it can.

    The section must start with the marker line and must not contain another
    heading of the same or higher rank; otherwise the next run would find a
    different region than the one written and content would pile up.
    """
    headings = list(iter_headings(section))
    if not headings or headings[0].start != 0 or headings[0].line != marker:
        first = section.split("\n", 1)[0].rstrip()
        return f"section starts with {first!r}, expected marker {marker!r}"
    for h in headings[1:]:
        if h.rank <= rank:
            return (
                f"section contains heading {h.line!r} of rank {h.rank}; "
                f"marker region ends at the next rank-{rank} heading"
            )
    return None


def merge_region(body: str, section: str, marker: str) -> tuple[str, bool]:
    """Replace the marker region of ``body`` with ``section``.

    Returns ``(new_body, found)``. When the marker is missing the section is
    appended at the end and ``found`` is False.
    """
    rank = heading_rank(marker) or 2
    headings = list(iter_headings(body))
    idx = _find_marker(headings, marker)
    if idx is None:
        return _join_blocks(body, section), False

    before = body[:headings[idx].start]
    nxt = _next_peer(headings, idx, rank)
    tail = body[nxt.start:] if nxt is not None else ""
    # Stale copies are dropped only up to the next higher-ranked heading;
    # a later "# Part 2" keeps its own marker section.
    cut = _parent_end(tail, rank)
    tail = _join_blocks(_drop_marker_regions(tail[:cut], marker, rank), tail[cut:])
    return _join_blocks(before, section, tail), True


def apply_merge_into_subsection(
    existing: str | None,
    section: str,
    meta: PageMeta,
    marker: str,
) -> MergeResult:
    """Replace the region of ``existing`` owned by ``marker``.

    A missing destination or a missing marker falls back to appending and
    is reported as ``degraded-appended``.
    """
    marker = marker.rstrip()
    section = section.strip()
    rank = heading_rank(marker) or 2
    problem = check_section_shape(section, marker, rank)
    if problem is not None:
        return MergeResult(None, "skipped-marker-mismatch", problem)

    if existing is None:
        header, preamble = _header_and_preamble(None, meta)
        return MergeResult(
            compose_document(header, preamble, section),
            "degraded-appended",
            "destination missing; created new page",
        )

    parts = split_document(existing)
    body, found = merge_region(parts.body, section, marker)
    # Header stays as found (absent stays absent); a headed page gets the
    # Aside import if it has no preamble yet.
    preamble = parts.preamble or (DEFAULT_PREAMBLE if parts.header is not None else "")
    content = compose_document(parts.header, preamble, body)
    if not found:
        return MergeResult(
            content,
            "degraded-appended",
            f"marker {marker!r} not found; section appended at end",
        )
    return MergeResult(content, "written")


def apply_strategy(
    strategy: Strategy,
    existing: str | None,
    section: str,
    meta: PageMeta,
) -> MergeResult:
    """Dispatch to the strategy variant."""
    match strategy:
        case Replace():
            return apply_replace(existing, section, meta)
        case CreateIfAbsent():
            return apply_create_if_absent(existing, section, meta)
        case MergeIntoSubsection(marker=marker):
            return apply_merge_into_subsection(existing, section, meta, marker)
    raise TypeError(f"Unknown strategy: {strategy!r}")
