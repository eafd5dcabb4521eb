"""Tests for docmerge.run_manifest utilities."""
from __future__ import annotations

from pathlib import Path

import pytest

from docmerge.merge_types import RunReport, SectionOutcome
from docmerge.run_manifest import (
    build_manifest,
    compare_manifests,
    generate_run_id,
    load_manifest,
    write_manifest,
)


def _report(*statuses: str) -> RunReport:
    report = RunReport()
    for i, status in enumerate(statuses):
        report.add(SectionOutcome(f"S{i}", f"page{i}.mdx", status))  # type: ignore[arg-type]
    return report


def test_generate_run_id_prefix() -> None:
    run_id = generate_run_id("test_run")
    assert run_id.startswith("test_run_")
    assert run_id != generate_run_id("test_run")


def test_write_and_load_manifest(tmp_path: Path) -> None:
    run_id = generate_run_id("test_run")
    manifest = build_manifest(
        run_id=run_id,
        source_path=tmp_path / "guide.md",
        source_text="## A\nfoo\n",
        content_root=tmp_path / "docs",
        report=_report("written", "skipped-empty"),
        timings_sec={"total": 1.25},
        git_commit="deadbeef",
    )
    path = write_manifest(tmp_path / "out" / "manifest.json", manifest)
    assert path.exists()
    assert path.read_bytes().endswith(b"\n")

    loaded = load_manifest(path)
    assert loaded["run_id"] == run_id
    assert loaded["git_commit"] == "deadbeef"
    assert loaded["status_counts"]["written"] == 1
    assert loaded["sections"]["S1"] == {"target": "page1.mdx", "status": "skipped-empty"}
    assert len(loaded["source_sha256"]) == 64


def test_load_manifest_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("[1, 2]\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_manifest(path)


def test_compare_manifests_deltas(tmp_path: Path) -> None:
    common = {
        "source_path": tmp_path / "guide.md",
        "content_root": tmp_path,
        "timings_sec": {"total": 1.0},
    }
    older = build_manifest(
        run_id="old", source_text="v1", report=_report("written", "degraded-appended"), **common,
    )
    newer = build_manifest(
        run_id="new", source_text="v2", report=_report("unchanged", "written"), **common,
    )

    delta = compare_manifests(newer, older)
    assert delta["current_run_id"] == "new"
    assert delta["previous_run_id"] == "old"
    assert delta["source_changed"] is True
    assert delta["status_count_delta"]["unchanged"] == 1
    assert delta["status_count_delta"]["degraded-appended"] == -1
    assert delta["section_status_changes"] == {
        "S0": {"previous": "written", "current": "unchanged"},
        "S1": {"previous": "degraded-appended", "current": "written"},
    }


def test_compare_identical_runs() -> None:
    manifest = build_manifest(
        run_id="a",
        source_path=Path("guide.md"),
        source_text="same",
        content_root=Path("docs"),
        report=_report("unchanged"),
        timings_sec={},
    )
    delta = compare_manifests(manifest, manifest)
    assert delta["source_changed"] is False
    assert delta["section_status_changes"] == {}
    assert all(v == 0 for v in delta["status_count_delta"].values())
