"""``skillquorum tiers`` -- Show the consensus tier policy table.

Exit Codes:
    0 -- Always (informational command, cannot fail).
"""

from __future__ import annotations

import json

import click

from skillquorum.core.consensus import CONSENSUS_CONFIGS


@click.command("tiers")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def tiers_command(output_format: str) -> None:
    """List the consensus tiers and their thresholds."""
    configs = list(CONSENSUS_CONFIGS.values())
    if output_format == "json":
        click.echo(json.dumps([cfg.as_dict() for cfg in configs], indent=2))
    else:
        from skillquorum.cli.output import print_tiers
        print_tiers(configs)
