"""Score variance: how closely evaluators agree on a skill's quality.

Variance here is the range-based coefficient ``(max - min) / mean`` rather
than standard deviation, so that it reads directly as "scores differ by X%
of their average". It is computed for the ``overall`` score, which drives
the verdict, and for each of the four sub-scores as supporting detail.

Agreement bands:

    <= 0.05  excellent
    <= 0.10  strong
    <= 0.15  good
    <= 0.20  moderate disagreement
    <= 0.30  significant disagreement
    >  0.30  no consensus
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from skillquorum.core.report import SCORE_FIELDS, Report
from skillquorum.exceptions import InsufficientReportsError

DEFAULT_VARIANCE_THRESHOLD: float = 0.15


@dataclass(frozen=True)
class ScoreStats:
    """Agreement statistics for one score dimension."""

    mean: float
    range: int
    variance: float


@dataclass(frozen=True)
class VarianceResult:
    """Variance statistics over a set of reports.

    Attributes:
        variance: Normalized variance of the ``overall`` score.
        within_threshold: True iff ``variance`` <= the requested threshold.
        mean: Mean ``overall`` score.
        std_dev: Population standard deviation of ``overall``.
        min: Lowest ``overall`` score.
        max: Highest ``overall`` score.
        range: ``max - min``.
        details: Per-dimension statistics keyed by score name, including
            ``overall``.
    """

    variance: float
    within_threshold: bool
    mean: float
    std_dev: float
    min: int
    max: int
    range: int
    details: dict[str, ScoreStats] = field(default_factory=dict)

    def as_dict(self) -> dict[str, object]:
        return {
            "variance": self.variance,
            "within_threshold": self.within_threshold,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "range": self.range,
            "details": {
                name: {"mean": s.mean, "range": s.range, "variance": s.variance}
                for name, s in self.details.items()
            },
        }


def calculate_variance(
    reports: Sequence[Report],
    max_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
) -> VarianceResult:
    """Calculate score agreement statistics for a set of reports.

    A single report yields variance 0 and is always within threshold.

    Args:
        reports: One or more reports.
        max_threshold: Largest acceptable normalized overall variance.

    Returns:
        A ``VarianceResult``.

    Raises:
        InsufficientReportsError: If ``reports`` is empty.
    """
    if not reports:
        raise InsufficientReportsError("Cannot calculate variance with no reports")

    details = {
        name: _score_stats([getattr(r.scores, name) for r in reports])
        for name in SCORE_FIELDS
    }
    overall_scores = [r.scores.overall for r in reports]
    overall = details["overall"]

    return VarianceResult(
        variance=overall.variance,
        within_threshold=overall.variance <= max_threshold,
        mean=overall.mean,
        std_dev=_std_dev(overall_scores, overall.mean),
        min=min(overall_scores),
        max=max(overall_scores),
        range=overall.range,
        details=details,
    )


def _score_stats(values: list[int]) -> ScoreStats:
    mean = sum(values) / len(values)
    spread = max(values) - min(values)
    variance = spread / mean if mean > 0 else 0.0
    return ScoreStats(mean=mean, range=spread, variance=variance)


def _std_dev(values: list[int], mean: float) -> float:
    if len(values) < 2:
        return 0.0
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def has_strong_consensus(variance: float) -> bool:
    """True when scores differ by at most 10% of their mean."""
    return variance <= 0.10


def has_weak_consensus(variance: float) -> bool:
    """True when variance is past the default threshold but not hopeless."""
    return 0.15 < variance <= 0.25


def has_no_consensus(variance: float) -> bool:
    return variance > 0.25


def interpret_variance(variance: float) -> str:
    """Return a human-readable interpretation of a variance value."""
    if variance <= 0.05:
        return "Excellent agreement: evaluators are highly aligned"
    if variance <= 0.10:
        return "Strong agreement: minor differences in scoring"
    if variance <= 0.15:
        return "Good agreement: acceptable variance within threshold"
    if variance <= 0.20:
        return "Moderate disagreement: consider additional review"
    if variance <= 0.30:
        return "Significant disagreement: evaluators have different views"
    return "No consensus: evaluators fundamentally disagree"
