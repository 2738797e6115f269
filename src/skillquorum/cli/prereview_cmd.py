"""``skillquorum prereview <skill-file>`` -- Automated pre-review screening.

Runs the full pre-review screener over a raw skill document: injection
patterns, required structure, content quality and, when declared,
pricing and dependency metadata.

Exit Codes:
    0 -- No blocking check failed.
    1 -- At least one BLOCKER check failed.
    2 -- The file could not be read.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from skillquorum.core.prereview import PreReviewScreener, SkillMetadata


def _parse_deps(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated dependency list, dropping blanks."""
    if not raw:
        return ()
    return tuple(d.strip() for d in raw.split(",") if d.strip())


@click.command("prereview")
@click.argument("skill_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--deps", default=None, help="Comma-separated declared dependencies.")
@click.option("--price", type=float, default=None, help="Declared price in USDC.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def prereview_command(
    skill_file: str,
    deps: str | None,
    price: float | None,
    output_format: str,
) -> None:
    """Screen a skill document before it reaches human evaluators.

    Exit code 0 if the skill may proceed to review, 1 if a blocking check
    failed, 2 if SKILL_FILE cannot be read.
    """
    try:
        content = Path(skill_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        if output_format == "json":
            click.echo(json.dumps({"error": f"Cannot read {skill_file}: {exc}"}))
        else:
            click.echo(f"Error: Cannot read {skill_file}: {exc}")
        sys.exit(2)

    metadata = None
    declared = _parse_deps(deps)
    if declared or price is not None:
        metadata = SkillMetadata(price_usdc=price, declared_dependencies=declared)

    result = asyncio.run(PreReviewScreener().review(content, metadata))

    if output_format == "json":
        click.echo(json.dumps(result.as_dict(), indent=2))
    else:
        from skillquorum.cli.output import print_prereview
        print_prereview(result)

    sys.exit(0 if result.passed else 1)
