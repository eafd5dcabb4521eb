#!/usr/bin/env python3
"""Split the migration guide into Starlight pages.

Extracts sections from MIGRATION_SETUP_CONFIG_AND_TROUBLESHOOTING.md and
creates/updates the pages they belong to:

- getting-started/quick-start.mdx   (Quick Start, replace)
- guides/migration-curation.mdx     (Manual Curation Workflow, create once)
- getting-started/first-config.mdx  (Recommended Template, replace)
- guides/migration-pitfalls.mdx     (Common Pitfalls, create once)
- guides/power-users.mdx            (Dotfiles Integration, merge into section)
- reference/troubleshooting.mdx     (Troubleshooting, create once)

Usage:
    python3 scripts/sync_migration_docs.py \
      --source macprefs-source/docs/MIGRATION_SETUP_CONFIG_AND_TROUBLESHOOTING.md

    # Custom section table, refuse degraded merges, preview only:
    python3 scripts/sync_migration_docs.py --source guide.md \
      --sections config/sections.json --strict --dry-run

Structured JSON report goes to stdout; human messages go to stderr.
Exit codes: 0 ok, 1 strict mode rejected a degraded merge, 2 input,
config or storage error.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any

import orjson

from docmerge.config import load_section_defs
from docmerge.errors import ConfigError, StorageFault
from docmerge.merge_types import SectionDef
from docmerge.pipeline import run
from docmerge.run_manifest import (
    build_manifest,
    generate_run_id,
    git_commit_hash,
    write_manifest,
)
from docmerge.sections import DEFAULT_CONTENT_ROOT, DEFAULT_SECTIONS
from docmerge.storage import FileStore

log = logging.getLogger("sync_migration_docs")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Distribute migration guide sections across docs pages."
    )
    parser.add_argument(
        "--source", required=True, type=Path, help="Path to the migration guide (Markdown)"
    )
    parser.add_argument(
        "--content-root",
        type=Path,
        default=Path(DEFAULT_CONTENT_ROOT),
        help=f"Docs content directory (default: {DEFAULT_CONTENT_ROOT})",
    )
    parser.add_argument(
        "--sections",
        type=Path,
        default=None,
        help="JSON section definitions file (default: built-in migration table)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Refuse degraded merges instead of appending at end of page",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Report outcomes without writing pages"
    )
    parser.add_argument(
        "--manifest-out", type=Path, default=None, help="Write a run manifest JSON here"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    t0 = time.perf_counter()
    try:
        source_text = args.source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.error("Cannot read source %s: %s", args.source, exc)
        return 2
    log.info("Reading migration guide from: %s", args.source)

    try:
        sections: list[SectionDef] = (
            load_section_defs(args.sections) if args.sections else list(DEFAULT_SECTIONS)
        )
        report = run(
            source_text,
            sections,
            FileStore(args.content_root),
            strict=args.strict,
            dry_run=args.dry_run,
        )
    except ConfigError as exc:
        log.error("Invalid section definitions: %s", exc)
        return 2
    except StorageFault as exc:
        log.error("Storage failure, run aborted: %s", exc)
        return 2
    elapsed = time.perf_counter() - t0

    payload = report.to_dict()
    if args.manifest_out is not None:
        manifest = build_manifest(
            run_id=generate_run_id(),
            source_path=args.source,
            source_text=source_text,
            content_root=args.content_root,
            report=report,
            timings_sec={"total": round(elapsed, 4)},
            git_commit=git_commit_hash(search_from=args.source.resolve()),
        )
        write_manifest(args.manifest_out, manifest)
        payload["manifest"] = str(args.manifest_out)
        log.info("Run manifest: %s", args.manifest_out)

    dump_json(payload)
    counts = report.counts()
    log.info(
        "Done in %.2fs: %d written, %d unchanged, %d skipped, %d degraded",
        elapsed,
        counts["written"],
        counts["unchanged"],
        counts["skipped-empty"] + counts["skipped-exists"] + counts["skipped-marker-mismatch"],
        len(report.degraded),
    )
    return 0 if report.ok() else 1


if __name__ == "__main__":
    sys.exit(main())
