"""Source-markup to MDX rewrites applied to an extracted section.

Labelled blockquotes become Starlight ``<Aside>`` callouts::

    > **Warning:** Back up first.      <Aside type="caution">
    > Then run the export.       ->    Back up first.
                                       Then run the export.
                                       </Aside>

Rules are tried in order, most specific label first, so a ``Warning:``
quote is never handled by the generic fallback. Headings, prose, plain
blockquotes and fenced code pass through unchanged. The output contains no
labelled blockquotes, so normalizing twice is a no-op.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from docmerge.headings import heading_rank, iter_unfenced_lines


@dataclass(frozen=True, slots=True)
class CalloutRule:
    """One labelled-blockquote rewrite."""

    pattern: re.Pattern[str]
    aside_type: str
    keep_label: bool = False  # generic fallback keeps "**Label:**" in the body


def _labelled(label: str) -> re.Pattern[str]:
    return re.compile(
        r"^>[ \t]*\*\*" + label + r":\*\*[ \t]*(?P<body>.*)$", re.IGNORECASE,
    )


CALLOUT_RULES: tuple[CalloutRule, ...] = (
    CalloutRule(_labelled("Note"), "note"),
    CalloutRule(_labelled("Tip"), "tip"),
    CalloutRule(_labelled("Warning"), "caution"),
    CalloutRule(_labelled("Caution"), "caution"),
    CalloutRule(_labelled("Danger"), "danger"),
    # Any other bold label ("Important:", "Pro tip:") -> note
    CalloutRule(
        re.compile(
            r"^>[ \t]*\*\*(?P<label>[A-Za-z][^*:\n]{0,40}):\*\*[ \t]*(?P<body>.*)$",
        ),
        "note",
        keep_label=True,
    ),
)

_QUOTE_RE = re.compile(r"^>[ \t]?(?P<rest>.*)$")


def match_callout(line: str) -> tuple[str, str] | None:
    """Return ``(aside_type, first_body_line)`` for a labelled quote line."""
    for rule in CALLOUT_RULES:
        m = rule.pattern.match(line)
        if m is None:
            continue
        body = m.group("body").strip()
        if rule.keep_label:
            label = m.group("label").strip()
            body = f"**{label}:** {body}".rstrip()
        return rule.aside_type, body
    return None


def render_aside(aside_type: str, body: str) -> str:
    """Render a Starlight Aside component."""
    return f'<Aside type="{aside_type}">\n{body}\n</Aside>'


def normalize(raw: str) -> str:
    """Rewrite labelled blockquotes into Aside callouts.

    Continuation lines of the same blockquote (``> more``) are folded into
    the callout body. A continuation line that is itself labelled starts a
    new callout.

    Folding stops at a nested quote (``>> ...``) or a quoted heading
    (``> ## Example``); those lines are left quoted so they neither turn
    into callouts on a later pass nor become real headings.
    """
    out: list[str] = []
    lines = list(iter_unfenced_lines(raw))
    i = 0
    while i < len(lines):
        line, in_fence = lines[i]
        hit = None if in_fence else match_callout(line.text)
        if hit is None:
            out.append(line.text)
            i += 1
            continue

        aside_type, first = hit
        body: list[str] = [first] if first else []
        begin = i
        i += 1
        while i < len(lines):
            nxt, nxt_fenced = lines[i]
            if nxt_fenced or match_callout(nxt.text) is not None:
                break
            q = _QUOTE_RE.match(nxt.text)
            if q is None:
                break
            rest = q.group("rest").rstrip()
            if rest.lstrip().startswith(">") or heading_rank(rest.lstrip()) is not None:
                break
            body.append(rest)
            i += 1
        while body and not body[-1]:
            body.pop()
        if not body:
            # Label with no text at all: nothing to put in the callout
            out.extend(ln.text for ln, _ in lines[begin:i])
            continue
        out.append(render_aside(aside_type, "\n".join(body)))

    result = "\n".join(out)
    if raw.endswith("\n"):
        result += "\n"
    return result
