"""Tests for docmerge.locator: heading-bounded section slicing."""
from __future__ import annotations

import re

import pytest

from docmerge.errors import ConfigError
from docmerge.locator import (
    compile_boundary,
    extract_section,
    heading_line_pattern,
    heading_pattern,
    locate,
)
from docmerge.merge_types import PageMeta, Replace, SectionDef

SOURCE = "# Guide\n\nintro\n\n## A\nfoo\n\n## B\nbar\n\n## C\nbaz\n"


class TestLocate:
    def test_returns_section_between_boundaries(self) -> None:
        assert locate(SOURCE, r"^## A$", r"^## B$") == "## A\nfoo"

    def test_spec_example(self) -> None:
        assert locate("## A\nfoo\n## B\nbar\n", r"^## A$", r"^## B$") == "## A\nfoo"

    def test_no_end_runs_to_end_of_text(self) -> None:
        assert locate(SOURCE, r"^## C$") == "## C\nbaz"

    def test_end_not_found_runs_to_end_of_text(self) -> None:
        assert locate(SOURCE, r"^## B$", r"^## Z$") == "## B\nbar\n\n## C\nbaz"

    def test_missing_start_returns_empty(self) -> None:
        assert locate(SOURCE, r"^## Missing$", r"^## B$") == ""

    def test_end_before_start_is_ignored(self) -> None:
        text = "## B\nearly\n## A\nfoo\n## B\nbar\n"
        assert locate(text, r"^## A$", r"^## B$") == "## A\nfoo"

    def test_first_start_occurrence_wins(self) -> None:
        text = "## A\nfirst\n## B\nx\n## A\nsecond\n"
        assert locate(text, r"^## A$", r"^## B$") == "## A\nfirst"

    def test_partial_line_match_is_ignored(self) -> None:
        text = "See ## A in prose\n## A\nfoo\n## B\n"
        assert locate(text, "## A", "## B") == "## A\nfoo"

    def test_prefix_heading_does_not_match(self) -> None:
        text = "## Apple\nx\n## A\ny\n"
        assert locate(text, "## A") == "## A\ny"

    def test_heading_inside_code_fence_is_ignored(self) -> None:
        text = "```\n## A\n```\n## A\nreal\n## B\n"
        assert locate(text, r"^## A$", r"^## B$") == "## A\nreal"

    def test_end_inside_code_fence_does_not_truncate(self) -> None:
        text = "## A\n```md\n## B\n```\nmore\n## B\nbar\n"
        assert locate(text, r"^## A$", r"^## B$") == "## A\n```md\n## B\n```\nmore"

    def test_result_is_trimmed(self) -> None:
        text = "\n\n## A\n\n  foo  \n\n\n## B\n"
        assert locate(text, r"^## A$", r"^## B$") == "## A\n\n  foo"


class TestBoundaries:
    def test_heading_pattern_escapes_title(self) -> None:
        pat = heading_pattern("Free vs Pro (Beta)")
        assert pat.search("x\n## Free vs Pro (Beta)\ny")
        assert not pat.search("## Free vs Pro Beta")

    def test_heading_pattern_respects_level(self) -> None:
        pat = heading_pattern("Symlinks", level=3)
        assert pat.search("### Symlinks")
        assert not pat.search("## Symlinks")

    def test_heading_pattern_rejects_bad_level(self) -> None:
        with pytest.raises(ValueError):
            heading_pattern("X", level=7)

    def test_heading_line_tolerates_trailing_blanks(self) -> None:
        text = "## Quick Start: Your First Migration  \nbody\n"
        pat = heading_line_pattern("## Quick Start: Your First Migration")
        assert locate(text, pat) == "## Quick Start: Your First Migration  \nbody"

    def test_compile_adds_multiline(self) -> None:
        pat = compile_boundary(re.compile(r"^## B$"))
        assert pat.flags & re.MULTILINE
        assert locate(SOURCE, pat) == "## B\nbar\n\n## C\nbaz"

    def test_compile_invalid_regex(self) -> None:
        with pytest.raises(ConfigError):
            compile_boundary("^## (unclosed")


class TestExtractSection:
    def _def(self, start: str) -> SectionDef:
        return SectionDef(
            name="A",
            start=heading_line_pattern(start),
            end=heading_line_pattern("## B"),
            target="x.mdx",
            strategy=Replace(),
            meta=PageMeta("A", "a"),
        )

    def test_found(self) -> None:
        extracted = extract_section(SOURCE, self._def("## A"))
        assert extracted.found
        assert extracted.raw_content == "## A\nfoo"
        assert extracted.target == "x.mdx"
        assert extracted.marker is None

    def test_not_found_is_empty(self) -> None:
        extracted = extract_section(SOURCE, self._def("## Misspelled"))
        assert not extracted.found
        assert extracted.raw_content == ""
