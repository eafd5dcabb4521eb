"""Core types shared by the locator, strategies and pipeline driver.

Type hierarchy:
  PageMeta             — Title/description for a generated frontmatter header
  Replace              — Strategy: rewrite the whole body
  CreateIfAbsent       — Strategy: write only when the page does not exist
  MergeIntoSubsection  — Strategy: replace the region owned by a marker heading
  Strategy             — Tagged union of the three strategy variants
  SectionDef           — Static rule: where a section starts/ends, where it goes
  ExtractedSection     — Runtime result of locating one SectionDef
  MergeResult          — Output of a strategy (content to write + status)
  SectionOutcome       — Per-section line of the run report
  RunReport            — Ordered outcomes of one pipeline run

A marker exists only on MergeIntoSubsection, so "marker present iff the
strategy needs one" holds by construction.
"""
from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

SectionStatus: TypeAlias = Literal[
    "written",
    "unchanged",
    "skipped-empty",
    "skipped-exists",
    "skipped-marker-mismatch",
    "degraded-appended",
    "rejected-degraded",
]

SECTION_STATUSES: tuple[SectionStatus, ...] = (
    "written",
    "unchanged",
    "skipped-empty",
    "skipped-exists",
    "skipped-marker-mismatch",
    "degraded-appended",
    "rejected-degraded",
)

DEGRADED_STATUSES: frozenset[str] = frozenset({"degraded-appended", "rejected-degraded"})

_HEADING_LINE_RE = re.compile(r"^#{1,6} \S[^\n]*$")


# ---------------------------------------------------------------------------
# Strategy variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PageMeta:
    """Frontmatter fields used when a destination page has to be generated."""

    title: str
    description: str


@dataclass(frozen=True, slots=True)
class Replace:
    """Discard the existing body; keep the existing header and preamble."""

    @property
    def kind(self) -> str:
        return "replace"


@dataclass(frozen=True, slots=True)
class CreateIfAbsent:
    """Create the page once; never touch it again after that."""

    @property
    def kind(self) -> str:
        return "create"


@dataclass(frozen=True, slots=True)
class MergeIntoSubsection:
    """Replace only the region of the page that starts at ``marker``.

    The region runs from the marker heading line up to (not including) the
    next heading of the same or higher rank.
    """

    marker: str  # "## Integration with Dotfiles"

    def __post_init__(self) -> None:
        if not _HEADING_LINE_RE.match(self.marker):
            raise ValueError(
                f"Subsection marker must be a single heading line, got {self.marker!r}"
            )

    @property
    def kind(self) -> str:
        return "merge-section"

    @property
    def rank(self) -> int:
        """Heading level of the marker (number of leading ``#``)."""
        return len(self.marker) - len(self.marker.lstrip("#"))


Strategy: TypeAlias = Replace | CreateIfAbsent | MergeIntoSubsection

STRATEGY_KINDS: tuple[str, ...] = ("replace", "create", "merge-section")


def strategy_marker(strategy: Strategy) -> str | None:
    """Return the subsection marker for merge strategies, else None."""
    match strategy:
        case MergeIntoSubsection(marker=marker):
            return marker
        case _:
            return None


# ---------------------------------------------------------------------------
# Section definitions and extraction results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SectionDef:
    """Author-supplied rule describing one extracted unit of the source."""

    name: str
    start: re.Pattern[str]
    target: str                         # "guides/power-users.mdx"
    strategy: Strategy
    meta: PageMeta
    end: re.Pattern[str] | None = None  # None = to end of source

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("SectionDef.name must be non-empty")
        if not self.target.strip():
            raise ValueError(f"SectionDef.target must be non-empty ({self.name})")


@dataclass(frozen=True, slots=True)
class ExtractedSection:
    """A SectionDef located against a concrete source text."""

    name: str
    raw_content: str
    target: str
    strategy: Strategy
    meta: PageMeta

    @property
    def found(self) -> bool:
        return bool(self.raw_content)

    @property
    def marker(self) -> str | None:
        return strategy_marker(self.strategy)


# ---------------------------------------------------------------------------
# Merge results and run report
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Output of a merge strategy.

    ``content`` is the full new document, or None when nothing should be
    written (CreateIfAbsent on an existing page, rejected merges).
    """

    content: str | None
    status: SectionStatus
    detail: str = ""


@dataclass(frozen=True, slots=True)
class SectionOutcome:
    """Result of processing one SectionDef during a run."""

    name: str
    target: str
    status: SectionStatus
    chars: int = 0
    detail: str = ""

    @property
    def degraded(self) -> bool:
        return self.status in DEGRADED_STATUSES


@dataclass(slots=True)
class RunReport:
    """Ordered per-section outcomes of a pipeline run.

    The report does not decide overall success; callers inspect
    ``degraded`` / ``ok()`` and pick their own exit policy.
    """

    outcomes: list[SectionOutcome] = field(default_factory=list)
    dry_run: bool = False
    strict: bool = False

    def add(self, outcome: SectionOutcome) -> None:
        self.outcomes.append(outcome)

    def counts(self) -> dict[str, int]:
        """Number of sections per status (every known status present)."""
        c = Counter(o.status for o in self.outcomes)
        return {status: c.get(status, 0) for status in SECTION_STATUSES}

    @property
    def degraded(self) -> list[SectionOutcome]:
        return [o for o in self.outcomes if o.degraded]

    @property
    def written_targets(self) -> list[str]:
        return [
            o.target for o in self.outcomes
            if o.status in ("written", "degraded-appended")
        ]

    def ok(self) -> bool:
        """False when strict mode refused a degraded merge."""
        return not any(o.status == "rejected-degraded" for o in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "strict": self.strict,
            "ok": self.ok(),
            "counts": self.counts(),
            "sections": [
                {
                    "name": o.name,
                    "target": o.target,
                    "status": o.status,
                    "chars": o.chars,
                    "detail": o.detail,
                }
                for o in self.outcomes
            ],
        }
