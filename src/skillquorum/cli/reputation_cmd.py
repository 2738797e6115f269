"""``skillquorum reputation`` -- Evaluator reputation helpers.

Subcommands:
    tier VALUE -- Evaluator tier for a reputation value and what it unlocks.
"""

from __future__ import annotations

import json

import click

from skillquorum.core.reputation import ReputationEngine


@click.group("reputation")
def reputation_group() -> None:
    """Inspect evaluator reputation tiers."""


@reputation_group.command("tier")
@click.argument("value", type=click.IntRange(min=0))
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def tier_command(value: int, output_format: str) -> None:
    """Show the evaluator tier earned by reputation VALUE."""
    engine = ReputationEngine()
    req = engine.tier_requirements(engine.determine_tier(value))

    if output_format == "json":
        click.echo(json.dumps({
            "reputation": value,
            "tier": req.tier.name,
            "min_reputation": req.min_reputation,
            "max_evaluations_per_day": req.max_evaluations_per_day,
            "consensus_tiers": [t.value for t in req.consensus_tiers],
        }, indent=2))
    else:
        from skillquorum.cli.output import print_tier_requirements
        print_tier_requirements(value, req)
