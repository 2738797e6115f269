"""Rich output formatting helpers for the SkillQuorum CLI.

Provides consistent, verdict-colored terminal output for pre-review
results, consensus results, the tier table and evaluator tiers.

Color Mapping:
    APPROVED = bold green, REJECTED = bold red, INCONCLUSIVE = yellow,
    PENDING = dim, CONTESTED = magenta
"""

from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from skillquorum.core.consensus import (
    ConsensusConfig,
    ConsensusResult,
    ConsensusVerdict,
    QuickConsensus,
)
from skillquorum.core.prereview import CheckSeverity, PreReviewResult
from skillquorum.core.reputation import TierRequirements

_VERDICT_STYLES: dict[ConsensusVerdict, str] = {
    ConsensusVerdict.APPROVED: "bold green",
    ConsensusVerdict.REJECTED: "bold red",
    ConsensusVerdict.INCONCLUSIVE: "yellow",
    ConsensusVerdict.PENDING: "dim",
    ConsensusVerdict.CONTESTED: "magenta",
}

_CHECK_STYLES: dict[CheckSeverity, str] = {
    CheckSeverity.BLOCKER: "bold red",
    CheckSeverity.WARNING: "yellow",
    CheckSeverity.INFO: "cyan",
}

console = Console()


def verdict_style(verdict: ConsensusVerdict) -> str:
    """Return the Rich style string for a given verdict."""
    return _VERDICT_STYLES.get(verdict, "white")


def check_style(severity: CheckSeverity) -> str:
    """Return the Rich style string for a failed check's severity."""
    return _CHECK_STYLES.get(severity, "white")


def print_prereview(result: PreReviewResult) -> None:
    """Print a pre-review outcome: status panel, then failed checks.

    Args:
        result: Pre-review result for one submission.
    """
    status = Text("PASSED", style="bold green") if result.passed else Text("BLOCKED", style="bold red")
    header = Text.assemble(("Status: ", "bold"), status, ("  Score: ", "bold"), (f"{result.score}/100", ""))
    console.print(Panel(header, title="Pre-Review"))

    failed = [c for c in result.checks if not c.passed]
    if not failed:
        console.print("[green]All checks passed.[/green]")
        return

    table = Table(title="Failed Checks", show_header=True)
    table.add_column("Severity", justify="center")
    table.add_column("Check", style="bold")
    table.add_column("Message")
    for check in failed:
        table.add_row(
            Text(check.severity.name, style=check_style(check.severity)),
            check.name,
            Text(check.message),
        )
    console.print(table)


def print_consensus(result: ConsensusResult) -> None:
    """Print a consensus verdict with metrics and reasoning.

    Args:
        result: Consensus result for one skill.
    """
    verdict = Text(result.verdict.name, style=verdict_style(result.verdict))
    header = Text.assemble(
        ("Skill: ", "bold"), (result.skill_id, ""),
        ("  Verdict: ", "bold"), verdict,
        ("  Confidence: ", "bold"), (f"{result.confidence}%", ""),
    )
    console.print(Panel(header, title="Consensus Result"))

    m = result.metrics
    metrics = Table(title="Metrics", show_header=True)
    metrics.add_column("Metric", style="bold")
    metrics.add_column("Value", justify="right")
    metrics.add_row("Evaluators", str(m.evaluator_count))
    metrics.add_row("Mean score", f"{m.mean_score:.0f}")
    metrics.add_row("Score variance", f"{m.score_variance:.3f}")
    metrics.add_row("Critical overlap", f"{m.critical_overlap:.0%}")
    metrics.add_row("Methodology diversity", f"{m.methodology_diversity:.0%}")
    console.print(metrics)

    if result.aggregated_findings:
        outliers = {f.id for f in result.outlier_findings}
        findings = Table(title="Critical & High Findings", show_header=True)
        findings.add_column("Severity", justify="right")
        findings.add_column("Category")
        findings.add_column("Title")
        findings.add_column("Agreement", justify="center")
        for f in result.aggregated_findings:
            agreement = Text("outlier", style="yellow") if f.id in outliers else Text("consensus", style="green")
            findings.add_row(str(f.severity), f.category.value, Text(f.title), agreement)
        console.print(findings)

    console.print(Panel(Text(result.reasoning), title="Reasoning"))


def print_quick_consensus(skill_id: str, result: QuickConsensus) -> None:
    """Print the outcome of the mean-score-only consensus path."""
    verdict = Text(result.verdict.name, style=verdict_style(result.verdict))
    header = Text.assemble(("Skill: ", "bold"), (skill_id, ""), ("  Verdict: ", "bold"), verdict)
    console.print(Panel(header, title="Quick Consensus"))
    console.print(Text(f"  {result.reason}"))


def print_tiers(configs: Iterable[ConsensusConfig]) -> None:
    """Print the consensus tier policy table."""
    table = Table(title="Consensus Tiers", show_header=True, header_style="bold")
    table.add_column("Tier", style="bold")
    table.add_column("Max variance", justify="right")
    table.add_column("Min overlap", justify="right")
    table.add_column("Approve >=", justify="right")
    table.add_column("Reject <=", justify="right")
    table.add_column("Evaluators", justify="center")
    table.add_column("Methodologies", justify="right")
    table.add_column("Timeout", justify="right")
    for cfg in configs:
        table.add_row(
            cfg.tier.value,
            f"{cfg.score_variance_max:.2f}",
            f"{cfg.critical_overlap_min:.2f}",
            str(cfg.approval_threshold),
            str(cfg.rejection_threshold),
            f"{cfg.min_evaluators}-{cfg.max_evaluators}",
            str(cfg.min_methodologies),
            f"{cfg.evaluation_timeout.total_seconds() / 3600:.0f}h",
        )
    console.print(table)


def print_tier_requirements(reputation: int, req: TierRequirements) -> None:
    """Print the evaluator tier for a reputation value and what it unlocks."""
    header = Text.assemble(
        ("Reputation: ", "bold"), (str(reputation), ""),
        ("  Tier: ", "bold"), (req.tier.name, "bold cyan"),
    )
    console.print(Panel(header, title="Evaluator Tier"))
    console.print(f"  Minimum reputation:      {req.min_reputation}")
    console.print(f"  Max evaluations per day: {req.max_evaluations_per_day}")
    console.print(
        "  Consensus tiers:         "
        + ", ".join(t.value for t in req.consensus_tiers)
    )

