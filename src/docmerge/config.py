"""Section definition files: load, validate, serialize.

A definitions file is a JSON object with an ordered ``sections`` list::

    {
      "sections": [
        {
          "name": "Dotfiles Integration",
          "start_heading": "## Integration with Dotfiles",
          "end_heading": "## Troubleshooting Migration Issues",
          "target": "guides/power-users.mdx",
          "strategy": "merge-section",
          "marker": "## Integration with Dotfiles",
          "frontmatter": {"title": "Power User Guide", "description": "..."}
        }
      ]
    }

Boundaries are given either as a literal heading line (``start_heading`` /
``end_heading``) or as a regex (``start_pattern`` / ``end_pattern``).
``marker`` is required for ``merge-section`` and rejected otherwise.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson

from docmerge.errors import ConfigError
from docmerge.io_utils import load_json
from docmerge.locator import compile_boundary, heading_line_pattern
from docmerge.merge_types import (
    STRATEGY_KINDS,
    CreateIfAbsent,
    MergeIntoSubsection,
    PageMeta,
    Replace,
    SectionDef,
    Strategy,
    strategy_marker,
)
from docmerge.storage import normalize_target

_KNOWN_KEYS = frozenset({
    "name",
    "start_heading",
    "start_pattern",
    "end_heading",
    "end_pattern",
    "target",
    "strategy",
    "marker",
    "frontmatter",
})


def _require_str(record: dict[str, Any], key: str, where: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}: '{key}' must be a non-empty string")
    return value


def _boundary(
    record: dict[str, Any], prefix: str, where: str, *, required: bool,
) -> re.Pattern[str] | None:
    heading = record.get(f"{prefix}_heading")
    pattern = record.get(f"{prefix}_pattern")
    if heading is not None and pattern is not None:
        raise ConfigError(f"{where}: give either '{prefix}_heading' or '{prefix}_pattern', not both")
    if heading is not None:
        if not isinstance(heading, str) or not heading.strip():
            raise ConfigError(f"{where}: '{prefix}_heading' must be a non-empty string")
        return heading_line_pattern(heading)
    if pattern is not None:
        if not isinstance(pattern, str) or not pattern:
            raise ConfigError(f"{where}: '{prefix}_pattern' must be a non-empty string")
        return compile_boundary(pattern)
    if required:
        raise ConfigError(f"{where}: '{prefix}_heading' or '{prefix}_pattern' is required")
    return None


def _strategy(record: dict[str, Any], where: str) -> Strategy:
    kind = record.get("strategy")
    marker = record.get("marker")
    if kind not in STRATEGY_KINDS:
        raise ConfigError(
            f"{where}: unknown strategy {kind!r}; expected one of {', '.join(STRATEGY_KINDS)}"
        )
    if kind == "merge-section":
        if not isinstance(marker, str) or not marker.strip():
            raise ConfigError(f"{where}: strategy 'merge-section' requires 'marker'")
        try:
            return MergeIntoSubsection(marker.strip())
        except ValueError as exc:
            raise ConfigError(f"{where}: {exc}") from exc
    if marker is not None:
        raise ConfigError(f"{where}: 'marker' is only valid with strategy 'merge-section'")
    return Replace() if kind == "replace" else CreateIfAbsent()


def section_def_from_dict(record: dict[str, Any], *, index: int = 0) -> SectionDef:
    """Build a SectionDef from a JSON record, raising ConfigError on problems."""
    if not isinstance(record, dict):
        raise ConfigError(f"sections[{index}]: expected an object")
    name = record.get("name")
    where = f"sections[{index}]" + (f" ({name})" if isinstance(name, str) else "")
    unknown = sorted(set(record) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{where}: unknown keys {unknown}")

    fm = record.get("frontmatter")
    if not isinstance(fm, dict):
        raise ConfigError(f"{where}: 'frontmatter' must be an object with title/description")
    meta = PageMeta(
        title=_require_str(fm, "title", where),
        description=_require_str(fm, "description", where),
    )
    start = _boundary(record, "start", where, required=True)
    if start is None:
        raise ConfigError(f"{where}: missing start boundary")
    return SectionDef(
        name=_require_str(record, "name", where).strip(),
        start=start,
        end=_boundary(record, "end", where, required=False),
        target=normalize_target(_require_str(record, "target", where)),
        strategy=_strategy(record, where),
        meta=meta,
    )


def section_def_to_dict(section: SectionDef) -> dict[str, Any]:
    """Serialize a SectionDef to the JSON record format (regex boundaries)."""
    out: dict[str, Any] = {
        "name": section.name,
        "start_pattern": section.start.pattern,
        "target": section.target,
        "strategy": section.strategy.kind,
        "frontmatter": {
            "title": section.meta.title,
            "description": section.meta.description,
        },
    }
    if section.end is not None:
        out["end_pattern"] = section.end.pattern
    marker = strategy_marker(section.strategy)
    if marker is not None:
        out["marker"] = marker
    return out


def validate_section_defs(sections: Iterable[SectionDef]) -> list[SectionDef]:
    """Check cross-definition rules and return the definitions as a list.

    - names are unique within a run
    - every target is a relative path inside the content root
    - a (target, marker) pair is used at most once per run
    """
    out = list(sections)
    seen_names: set[str] = set()
    seen_markers: dict[tuple[str, str], str] = {}
    for section in out:
        if section.name in seen_names:
            raise ConfigError(f"Duplicate section name: {section.name!r}")
        seen_names.add(section.name)
        target = normalize_target(section.target)
        marker = strategy_marker(section.strategy)
        if marker is None:
            continue
        key = (target, marker)
        if key in seen_markers:
            raise ConfigError(
                f"Sections {seen_markers[key]!r} and {section.name!r} both merge into "
                f"{marker!r} of {key[0]}"
            )
        seen_markers[key] = section.name
    return out


def load_section_defs(path: Path) -> list[SectionDef]:
    """Load and validate an ordered definitions file."""
    try:
        payload = load_json(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"Section definitions file not found: {path}") from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("sections"), list):
        raise ConfigError(f"{path}: expected an object with a 'sections' list")
    sections = [
        section_def_from_dict(record, index=i)
        for i, record in enumerate(payload["sections"])
    ]
    return validate_section_defs(sections)
