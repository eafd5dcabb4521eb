"""Built-in section table for the macprefs migration guide.

Source: ``MIGRATION_SETUP_CONFIG_AND_TROUBLESHOOTING.md``. Targets are
relative to the Starlight content root (``src/content/docs``). Order
matters: definitions run top to bottom.
"""
from __future__ import annotations

from docmerge.locator import heading_line_pattern
from docmerge.merge_types import (
    CreateIfAbsent,
    MergeIntoSubsection,
    PageMeta,
    Replace,
    SectionDef,
)

DEFAULT_CONTENT_ROOT = "src/content/docs"

DEFAULT_SECTIONS: tuple[SectionDef, ...] = (
    SectionDef(
        name="Quick Start",
        start=heading_line_pattern("## Quick Start: Your First Migration"),
        end=heading_line_pattern("## Manual Curation Workflow"),
        target="getting-started/quick-start.mdx",
        strategy=Replace(),
        meta=PageMeta(
            title="Quick Start",
            description="Get started with macprefs in minutes - safely migrate your macOS preferences",
        ),
    ),
    SectionDef(
        name="Manual Curation Workflow",
        start=heading_line_pattern("## Manual Curation Workflow"),
        end=heading_line_pattern("## Recommended Configuration Template"),
        target="guides/migration-curation.mdx",
        strategy=CreateIfAbsent(),
        meta=PageMeta(
            title="Manual Curation Workflow",
            description="Step-by-step guide to curating your macOS preferences for safe migration",
        ),
    ),
    SectionDef(
        name="Recommended Template",
        start=heading_line_pattern("## Recommended Configuration Template"),
        end=heading_line_pattern("## Common Pitfalls and How to Avoid Them"),
        target="getting-started/first-config.mdx",
        strategy=Replace(),
        meta=PageMeta(
            title="Your First Configuration",
            description="Create your first macprefs configuration file with this battle-tested template",
        ),
    ),
    SectionDef(
        name="Common Pitfalls",
        start=heading_line_pattern("## Common Pitfalls and How to Avoid Them"),
        end=heading_line_pattern("## Free vs Pro Workflow Comparison"),
        target="guides/migration-pitfalls.mdx",
        strategy=CreateIfAbsent(),
        meta=PageMeta(
            title="Common Migration Pitfalls",
            description="Avoid these common mistakes when migrating macOS preferences with macprefs",
        ),
    ),
    SectionDef(
        name="Dotfiles Integration",
        start=heading_line_pattern("## Integration with Dotfiles"),
        end=heading_line_pattern("## Troubleshooting Migration Issues"),
        target="guides/power-users.mdx",
        # The region must start with the section's own heading, or the next
        # run cannot find what this run wrote.
        strategy=MergeIntoSubsection("## Integration with Dotfiles"),
        meta=PageMeta(
            title="Power User Guide",
            description="Advanced workflows for power users including dotfiles integration and multi-Mac sync",
        ),
    ),
    SectionDef(
        name="Troubleshooting",
        start=heading_line_pattern("## Troubleshooting Migration Issues"),
        end=heading_line_pattern("## Related Documentation"),
        target="reference/troubleshooting.mdx",
        strategy=CreateIfAbsent(),
        meta=PageMeta(
            title="Troubleshooting",
            description="Solutions to common issues when using macprefs for preference migration",
        ),
    ),
)
