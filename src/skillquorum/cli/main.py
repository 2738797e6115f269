"""SkillQuorum CLI -- Multi-evaluator consensus for agent skill reviews.

Entry point for the ``skillquorum`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    prereview  -- Screen a raw skill document before human review.
    consensus  -- Compute a verdict from a file of evaluation reports.
    tiers      -- Show the consensus tier policy table.
    reputation -- Evaluator reputation helpers.

Usage::

    skillquorum prereview ./skills/deploy.md --deps requests --price 0.05
    skillquorum consensus reports.yaml --skill-id deploy --tier basic
    skillquorum consensus reports.json --skill-id deploy --quick
    skillquorum tiers --format json
    skillquorum reputation tier 750
"""

from __future__ import annotations

import logging

import click

from skillquorum import __version__
from skillquorum.cli.consensus_cmd import consensus_command
from skillquorum.cli.prereview_cmd import prereview_command
from skillquorum.cli.reputation_cmd import reputation_group
from skillquorum.cli.tiers_cmd import tiers_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """SkillQuorum: Multi-evaluator consensus for agent skill reviews.

    Screen skill submissions, aggregate independent evaluation reports
    into a verdict, and inspect the reputation tiers evaluators move
    through.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Register all subcommands
cli.add_command(prereview_command)
cli.add_command(consensus_command)
cli.add_command(tiers_command)
cli.add_command(reputation_group)
