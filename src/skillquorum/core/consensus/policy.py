"""Verdict policy: diversity, verdict, confidence and reasoning.

Pure functions that fold variance and overlap results into a decision under
one ``ConsensusConfig``. The engine calls them in sequence; they are public
so that each step can be tested on its own.

Confidence model (0-100):

    35 * max(0, 1 - variance / 0.30)     score agreement
  + 35 * overlap                         finding agreement
  + 20 * methodology_diversity           diversity ratio, capped at 1
  + 10 * coverage                        panel size between min and max

``coverage = (n - min_evaluators) / (max_evaluators - min_evaluators)``
clamped to [0, 1]. Every term is non-decreasing in agreement, so lowering
variance never lowers confidence.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from skillquorum.core.consensus.config import ConsensusConfig
from skillquorum.core.consensus.models import ConsensusVerdict
from skillquorum.core.consensus.overlap import OverlapResult, interpret_overlap
from skillquorum.core.consensus.variance import VarianceResult, interpret_variance
from skillquorum.core.report import Recommendation, Report

VARIANCE_CONFIDENCE_CEILING: float = 0.30

WEIGHT_VARIANCE: float = 35.0
WEIGHT_OVERLAP: float = 35.0
WEIGHT_DIVERSITY: float = 20.0
WEIGHT_COVERAGE: float = 10.0


def distinct_methodologies(reports: Sequence[Report]) -> int:
    return len({r.methodology.type for r in reports})


def methodology_diversity(reports: Sequence[Report], config: ConsensusConfig) -> float:
    """Distinct methodologies observed over the tier minimum, capped at 1.0."""
    if config.min_methodologies <= 0:
        return 1.0
    return min(1.0, distinct_methodologies(reports) / config.min_methodologies)


def determine_verdict(
    variance: VarianceResult,
    overlap: OverlapResult,
    diversity: float,
    config: ConsensusConfig,
) -> ConsensusVerdict:
    """Decide the verdict from the agreement metrics.

    APPROVED needs every check: score and finding agreement, full
    methodology diversity, and a mean at or above the approval threshold.
    REJECTED needs only score agreement on a low mean: evaluators agreeing
    that a skill is bad is enough, whatever they each found.
    """
    mean = variance.mean
    if (
        variance.within_threshold
        and overlap.within_threshold
        and diversity >= 1.0
        and mean >= config.approval_threshold
    ):
        return ConsensusVerdict.APPROVED
    if variance.within_threshold and mean <= config.rejection_threshold:
        return ConsensusVerdict.REJECTED
    return ConsensusVerdict.INCONCLUSIVE


def panel_coverage(evaluator_count: int, config: ConsensusConfig) -> float:
    """Where the panel size sits between the tier's min and max, in [0, 1]."""
    span = config.max_evaluators - config.min_evaluators
    if span <= 0:
        return 1.0 if evaluator_count >= config.min_evaluators else 0.0
    ratio = (evaluator_count - config.min_evaluators) / span
    return max(0.0, min(1.0, ratio))


def calculate_confidence(
    variance: VarianceResult,
    overlap: OverlapResult,
    diversity: float,
    evaluator_count: int,
    config: ConsensusConfig,
) -> int:
    agreement = max(0.0, 1.0 - variance.variance / VARIANCE_CONFIDENCE_CEILING)
    raw = (
        WEIGHT_VARIANCE * agreement
        + WEIGHT_OVERLAP * overlap.global_overlap
        + WEIGHT_DIVERSITY * min(1.0, diversity)
        + WEIGHT_COVERAGE * panel_coverage(evaluator_count, config)
    )
    return max(0, min(100, round(raw)))


def recommendation_tally(reports: Sequence[Report]) -> tuple[dict[Recommendation, int], Recommendation | None]:
    """Count recommendations and name the strict majority, if any."""
    counts = Counter(r.recommendation for r in reports)
    tally = {rec: counts.get(rec, 0) for rec in Recommendation}
    majority = None
    for rec, n in tally.items():
        if n * 2 > len(reports):
            majority = rec
    return tally, majority


def build_reasoning(
    variance: VarianceResult,
    overlap: OverlapResult,
    distinct: int,
    reports: Sequence[Report],
    verdict: ConsensusVerdict,
    config: ConsensusConfig,
) -> str:
    """Assemble the human-readable explanation of a verdict."""
    lines = [
        f"Score analysis: {interpret_variance(variance.variance)}",
        f"- Mean score: {variance.mean:.0f}/1000",
        f"- Score range: {variance.min} - {variance.max}",
        f"- Variance: {variance.variance * 100:.1f}% "
        f"(threshold: {config.score_variance_max * 100:.0f}%)",
        "",
        f"Finding analysis: {interpret_overlap(overlap.global_overlap)}",
        f"- Critical findings: {len(overlap.unique_findings)} unique issues",
        f"- Consensus findings: {len(overlap.consensus_findings)} (found by majority)",
        f"- Overlap score: {overlap.global_overlap * 100:.1f}% "
        f"(threshold: {config.critical_overlap_min * 100:.0f}%)",
        "",
        f"Methodology diversity: {distinct} distinct approaches used",
    ]
    if distinct < config.min_methodologies:
        lines.append(f"- Below required minimum of {config.min_methodologies}")
    else:
        lines.append(f"- Meets required minimum of {config.min_methodologies}")

    tally, majority = recommendation_tally(reports)
    counts = ", ".join(f"{n} {rec.value}" for rec, n in tally.items())
    majority_text = majority.value if majority else "none"
    lines += [
        "",
        f"Recommendations: {counts} (majority: {majority_text})",
        "",
        f"Verdict: {verdict.value.upper()}",
        _VERDICT_SUMMARY[verdict],
    ]
    return "\n".join(lines)


_VERDICT_SUMMARY: dict[ConsensusVerdict, str] = {
    ConsensusVerdict.APPROVED: "Skill meets quality standards with strong evaluator consensus.",
    ConsensusVerdict.REJECTED: "Skill does not meet quality standards; evaluators agree.",
    ConsensusVerdict.INCONCLUSIVE: (
        "Evaluators did not reach consensus. Solicit more reviews or open a dispute."
    ),
    ConsensusVerdict.PENDING: "Awaiting additional evaluations.",
    ConsensusVerdict.CONTESTED: "Verdict is under dispute.",
}
