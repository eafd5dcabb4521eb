"""Pipeline driver: locate, normalize, merge and write each section in order.

Definitions run strictly in the order given. A later definition that
targets the same page reads what the earlier one wrote. Section-level
problems become outcomes on the :class:`RunReport`; a
:class:`~docmerge.errors.StorageFault` aborts the run and propagates
(writes already made for earlier sections stay in place).
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from docmerge.config import validate_section_defs
from docmerge.frontmatter import resolve_destination
from docmerge.locator import extract_section
from docmerge.merge_types import RunReport, SectionDef, SectionOutcome
from docmerge.normalizer import normalize
from docmerge.storage import DocumentStore, OverlayStore, normalize_target
from docmerge.strategies import apply_strategy

log = logging.getLogger(__name__)


def normalize_newlines(text: str) -> str:
    """Convert CRLF/CR line endings to LF so boundaries match per line."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def process_section(
    source: str,
    section: SectionDef,
    store: DocumentStore,
    *,
    strict: bool = False,
) -> SectionOutcome:
    """Run one definition against the store and return its outcome.

    The destination is read once and written at most once.
    """
    extracted = extract_section(source, section)
    target = normalize_target(extracted.target)
    if not extracted.found:
        log.warning("Could not extract section %r: start boundary not found", section.name)
        return SectionOutcome(
            section.name, target, "skipped-empty", 0, "start boundary not found in source",
        )

    content = normalize(extracted.raw_content)
    log.debug("Extracted %r (%d chars)", section.name, len(content))

    existing = store.read(target)
    dest = resolve_destination(existing)
    if dest is not None and dest.header is None:
        log.debug("%s has no frontmatter header", target)
    result = apply_strategy(extracted.strategy, existing, content, extracted.meta)

    if result.status == "degraded-appended":
        if strict:
            log.error(
                "Refusing degraded merge of %r into %s: %s",
                section.name, target, result.detail,
            )
            return SectionOutcome(
                section.name, target, "rejected-degraded", len(content), result.detail,
            )
        log.warning(
            "DEGRADED merge of %r into %s: %s", section.name, target, result.detail,
        )

    if result.content is None:
        if result.status == "skipped-marker-mismatch":
            log.error("Skipping %r: %s", section.name, result.detail)
        else:
            log.info("Kept existing %s (%s)", target, result.status)
        return SectionOutcome(section.name, target, result.status, len(content), result.detail)

    if result.status == "written" and result.content == existing:
        log.info("Unchanged %s", target)
        return SectionOutcome(section.name, target, "unchanged", len(content))

    store.write(target, result.content)
    if result.status == "written":
        verb = "Created" if dest is None else (
            "Merged section into" if extracted.marker is not None else "Replaced"
        )
        log.info("%s %s", verb, target)
    return SectionOutcome(section.name, target, result.status, len(content), result.detail)


def run(
    source: str,
    sections: Iterable[SectionDef],
    store: DocumentStore,
    *,
    strict: bool = False,
    dry_run: bool = False,
) -> RunReport:
    """Process every definition in order and return the per-section report.

    Args:
        source: Full text of the authoring document.
        sections: Ordered definitions; validated before anything is written.
        store: Destination storage.
        strict: Refuse degraded merges (status ``rejected-degraded``)
            instead of appending.
        dry_run: Compute outcomes without writing to ``store``.

    Raises:
        ConfigError: Duplicate names or duplicate (target, marker) pairs.
        StorageFault: A destination could not be read or written.
    """
    defs = validate_section_defs(sections)
    text = normalize_newlines(source)
    target_store: DocumentStore = OverlayStore(store) if dry_run else store
    report = RunReport(dry_run=dry_run, strict=strict)

    log.info(
        "Source: %d characters, %d lines; %d section definitions",
        len(text), text.count("\n") + 1, len(defs),
    )
    for section in defs:
        report.add(process_section(text, section, target_store, strict=strict))

    if report.degraded:
        log.warning(
            "%d section(s) degraded: %s",
            len(report.degraded),
            ", ".join(o.name for o in report.degraded),
        )
    return report
