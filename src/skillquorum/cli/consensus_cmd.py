"""``skillquorum consensus <reports-file>`` -- Compute a consensus verdict.

Loads a JSON or YAML file of evaluation reports, validates every report,
and runs the consensus engine for the selected tier. ``--quick`` uses the
mean-score-only path instead.

Exit Codes:
    0 -- APPROVED.
    1 -- REJECTED.
    2 -- Invalid input (unreadable file, malformed report, unknown tier).
    3 -- INCONCLUSIVE or PENDING.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from skillquorum.cli.loader import load_reports
from skillquorum.core.consensus import ConsensusEngine, ConsensusTier, ConsensusVerdict
from skillquorum.exceptions import SkillQuorumError

_EXIT_CODES: dict[ConsensusVerdict, int] = {
    ConsensusVerdict.APPROVED: 0,
    ConsensusVerdict.REJECTED: 1,
}
_EXIT_UNDECIDED: int = 3


def _fail(message: str, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")
    sys.exit(2)


@click.command("consensus")
@click.argument("reports_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--skill-id", required=True, help="Identifier of the skill under evaluation.")
@click.option(
    "--tier",
    type=click.Choice([t.value for t in ConsensusTier], case_sensitive=False),
    default=ConsensusTier.RIGOROUS.value,
    help="Consensus tier (default: rigorous).",
)
@click.option("--quick", is_flag=True, help="Mean-score-only verdict; skips overlap and methodology checks.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def consensus_command(
    reports_file: str,
    skill_id: str,
    tier: str,
    quick: bool,
    output_format: str,
) -> None:
    """Aggregate evaluation reports into a verdict for one skill.

    REPORTS_FILE holds a list of reports (JSON or YAML). Exit code 0 for
    APPROVED, 1 for REJECTED, 3 for INCONCLUSIVE or PENDING, 2 for invalid
    input.
    """
    try:
        engine = ConsensusEngine(tier)
        reports = load_reports(Path(reports_file))
    except SkillQuorumError as exc:
        _fail(str(exc), output_format)

    if quick:
        quick_result = engine.quick_consensus(reports)
        if output_format == "json":
            click.echo(json.dumps({"skill_id": skill_id, **quick_result.as_dict()}, indent=2))
        else:
            from skillquorum.cli.output import print_quick_consensus
            print_quick_consensus(skill_id, quick_result)
        sys.exit(_EXIT_CODES.get(quick_result.verdict, _EXIT_UNDECIDED))

    try:
        result = engine.calculate_consensus(skill_id, reports)
    except SkillQuorumError as exc:
        _fail(str(exc), output_format)

    if output_format == "json":
        click.echo(json.dumps(result.as_dict(), indent=2))
    else:
        from skillquorum.cli.output import print_consensus
        print_consensus(result)

    sys.exit(_EXIT_CODES.get(result.verdict, _EXIT_UNDECIDED))
