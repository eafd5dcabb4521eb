"""Run-manifest utilities for docs sync reproducibility and comparison."""
from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from docmerge.io_utils import load_json, save_json, sha256_text
from docmerge.merge_types import RunReport

MANIFEST_VERSION = "1.0"


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format."""
    return datetime.now(UTC).isoformat()


def generate_run_id(prefix: str = "docs_sync") -> str:
    """Generate a compact run id suitable for artifact naming."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{prefix}_{ts}_{uuid4().hex[:8]}"


def git_commit_hash(*, search_from: Path | None = None) -> str | None:
    """Best-effort current git commit hash for reproducibility metadata."""
    cwd = (search_from or Path.cwd())
    if cwd.is_file():
        cwd = cwd.parent
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if proc.returncode != 0:
        return None
    out = proc.stdout.strip()
    return out if out else None


def build_manifest(
    *,
    run_id: str,
    source_path: Path,
    source_text: str,
    content_root: Path,
    report: RunReport,
    timings_sec: dict[str, float],
    git_commit: str | None = None,
    notes: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build canonical manifest payload for one sync run."""
    return {
        "manifest_version": MANIFEST_VERSION,
        "created_at": utc_now_iso(),
        "run_id": run_id,
        "source_path": str(source_path),
        "source_sha256": sha256_text(source_text),
        "content_root": str(content_root),
        "git_commit": git_commit,
        "dry_run": report.dry_run,
        "strict": report.strict,
        "status_counts": report.counts(),
        "sections": {
            o.name: {"target": o.target, "status": o.status}
            for o in report.outcomes
        },
        "timings_sec": timings_sec,
        "notes": notes or {},
    }


def write_manifest(path: Path, manifest: dict[str, Any]) -> Path:
    """Write a manifest as pretty JSON and return its path."""
    save_json(manifest, path, pretty=True)
    return path


def load_manifest(path: Path) -> dict[str, Any]:
    """Load a manifest from JSON."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid manifest payload in {path}")
    return data


def compare_manifests(
    current: dict[str, Any],
    previous: dict[str, Any],
) -> dict[str, Any]:
    """Compare two manifest payloads and produce deterministic deltas."""
    curr_counts = current.get("status_counts", {})
    prev_counts = previous.get("status_counts", {})
    curr_counts = curr_counts if isinstance(curr_counts, dict) else {}
    prev_counts = prev_counts if isinstance(prev_counts, dict) else {}

    keys = sorted(set(curr_counts.keys()) | set(prev_counts.keys()))
    count_delta: dict[str, int] = {}
    for key in keys:
        curr_val = int(curr_counts.get(key, 0) or 0)
        prev_val = int(prev_counts.get(key, 0) or 0)
        count_delta[key] = curr_val - prev_val

    curr_sections = current.get("sections", {})
    prev_sections = previous.get("sections", {})
    curr_sections = curr_sections if isinstance(curr_sections, dict) else {}
    prev_sections = prev_sections if isinstance(prev_sections, dict) else {}

    status_changes: dict[str, dict[str, str | None]] = {}
    for name in sorted(set(curr_sections) | set(prev_sections)):
        before = (prev_sections.get(name) or {}).get("status")
        after = (curr_sections.get(name) or {}).get("status")
        if before != after:
            status_changes[name] = {"previous": before, "current": after}

    return {
        "current_run_id": current.get("run_id"),
        "previous_run_id": previous.get("run_id"),
        "source_changed": current.get("source_sha256") != previous.get("source_sha256"),
        "status_count_delta": count_delta,
        "section_status_changes": status_changes,
    }
