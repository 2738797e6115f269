"""Critical-finding overlap: do evaluators agree on what is serious?

Only critical and high findings take part; medium, low and informational
findings never need corroboration. Findings are matched across evaluators by
a fuzzy comparison key (category plus normalized title), so two evaluators
describing the same issue with different punctuation or casing still
match.

For every evaluator pair the Jaccard similarity of their key sets is
computed; the global overlap is the arithmetic mean over all pairs. Findings
are then grouped by key: a group raised by at least ``ceil(n / 2)``
evaluators is a *consensus* finding, anything else is an *outlier*. Each
group is represented by its most detailed member (longest description).
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from itertools import combinations
from typing import Sequence

from skillquorum.core.report import Finding, FindingCategory, Report
from skillquorum.exceptions import InsufficientReportsError

logger = logging.getLogger(__name__)

DEFAULT_OVERLAP_THRESHOLD: float = 0.66
KEY_TITLE_LENGTH: int = 50

_NON_KEY_CHARS = re.compile(r"[^a-z0-9\s]")


@dataclass(frozen=True)
class PairwiseOverlap:
    """Jaccard similarity between two evaluators' serious findings."""

    evaluator_a: str
    evaluator_b: str
    overlap: float
    shared: tuple[str, ...] = ()
    unique_to_a: tuple[str, ...] = ()
    unique_to_b: tuple[str, ...] = ()


@dataclass(frozen=True)
class OverlapResult:
    """Agreement on serious findings across a set of reports.

    Attributes:
        global_overlap: Mean pairwise Jaccard similarity in [0, 1].
        within_threshold: True iff ``global_overlap`` >= the threshold.
        pairwise: One entry per evaluator pair.
        unique_findings: Deduplicated findings, one representative per key.
        findings_by_category: Count of ``unique_findings`` per category;
            every category is present.
        total_serious_findings: Serious findings before deduplication.
        consensus_findings: Representatives raised by a majority.
        outlier_findings: Representatives raised by a minority.
    """

    global_overlap: float
    within_threshold: bool
    pairwise: tuple[PairwiseOverlap, ...] = ()
    unique_findings: tuple[Finding, ...] = ()
    findings_by_category: dict[FindingCategory, int] = field(default_factory=dict)
    total_serious_findings: int = 0
    consensus_findings: tuple[Finding, ...] = ()
    outlier_findings: tuple[Finding, ...] = ()

    def as_dict(self) -> dict[str, object]:
        return {
            "global_overlap": self.global_overlap,
            "within_threshold": self.within_threshold,
            "pairwise": [
                {
                    "evaluator_a": p.evaluator_a,
                    "evaluator_b": p.evaluator_b,
                    "overlap": p.overlap,
                    "shared": list(p.shared),
                    "unique_to_a": list(p.unique_to_a),
                    "unique_to_b": list(p.unique_to_b),
                }
                for p in self.pairwise
            ],
            "unique_findings": [f.as_dict() for f in self.unique_findings],
            "findings_by_category": {
                c.value: n for c, n in self.findings_by_category.items()
            },
            "total_serious_findings": self.total_serious_findings,
            "consensus_findings": [f.id for f in self.consensus_findings],
            "outlier_findings": [f.id for f in self.outlier_findings],
        }


def finding_key(finding: Finding) -> str:
    """Return the fuzzy comparison key for a finding.

    ``"<category>:<title>"`` where the title is lowercased, stripped of
    anything but ASCII letters, digits and whitespace, trimmed, and cut to
    50 characters.
    """
    title = _NON_KEY_CHARS.sub("", finding.title.lower()).strip()[:KEY_TITLE_LENGTH]
    return f"{finding.category.value}:{title}"


def calculate_overlap(
    reports: Sequence[Report],
    min_threshold: float = DEFAULT_OVERLAP_THRESHOLD,
) -> OverlapResult:
    """Calculate overlap of critical and high findings across reports.

    A single report overlaps perfectly with itself: ``global_overlap`` is
    1.0 and all of its serious findings are consensus findings.

    Args:
        reports: One or more reports.
        min_threshold: Smallest acceptable global overlap.

    Returns:
        An ``OverlapResult``.

    Raises:
        InsufficientReportsError: If ``reports`` is empty.
    """
    if not reports:
        raise InsufficientReportsError("Cannot calculate overlap with no reports")

    by_evaluator = _serious_findings_by_evaluator(reports)
    evaluator_keys = {
        evaluator: {finding_key(f) for f in findings}
        for evaluator, findings in by_evaluator.items()
    }

    pairwise = tuple(
        _pairwise(a, b, evaluator_keys[a], evaluator_keys[b])
        for a, b in combinations(evaluator_keys, 2)
    )
    if pairwise:
        global_overlap = sum(p.overlap for p in pairwise) / len(pairwise)
    else:
        global_overlap = 1.0

    unique, consensus, outliers = _deduplicate_and_classify(by_evaluator)
    total = sum(len(findings) for findings in by_evaluator.values())

    return OverlapResult(
        global_overlap=global_overlap,
        within_threshold=global_overlap >= min_threshold,
        pairwise=pairwise,
        unique_findings=unique,
        findings_by_category=count_by_category(unique),
        total_serious_findings=total,
        consensus_findings=consensus,
        outlier_findings=outliers,
    )


def _serious_findings_by_evaluator(
    reports: Sequence[Report],
) -> dict[str, list[Finding]]:
    """Collect critical+high findings per evaluator, in report order."""
    grouped: dict[str, list[Finding]] = {}
    for report in reports:
        if report.evaluator_id in grouped:
            logger.warning(
                "Evaluator %s submitted more than one report; merging findings",
                report.evaluator_id,
            )
        grouped.setdefault(report.evaluator_id, []).extend(report.findings.serious())
    return grouped


def _pairwise(
    evaluator_a: str,
    evaluator_b: str,
    keys_a: set[str],
    keys_b: set[str],
) -> PairwiseOverlap:
    shared = keys_a & keys_b
    union = keys_a | keys_b
    # Two evaluators that both found nothing serious agree completely.
    overlap = len(shared) / len(union) if union else 1.0
    return PairwiseOverlap(
        evaluator_a=evaluator_a,
        evaluator_b=evaluator_b,
        overlap=overlap,
        shared=tuple(sorted(shared)),
        unique_to_a=tuple(sorted(keys_a - keys_b)),
        unique_to_b=tuple(sorted(keys_b - keys_a)),
    )


def _deduplicate_and_classify(
    by_evaluator: dict[str, list[Finding]],
) -> tuple[tuple[Finding, ...], tuple[Finding, ...], tuple[Finding, ...]]:
    """Group findings by key and split representatives into consensus/outlier."""
    groups: dict[str, list[Finding]] = {}
    reporters: dict[str, set[str]] = {}
    for evaluator, findings in by_evaluator.items():
        for finding in findings:
            key = finding_key(finding)
            groups.setdefault(key, []).append(finding)
            reporters.setdefault(key, set()).add(evaluator)

    majority = math.ceil(len(by_evaluator) / 2)
    unique: list[Finding] = []
    consensus: list[Finding] = []
    outliers: list[Finding] = []

    for key, group in groups.items():
        representative = group[0]
        for candidate in group[1:]:
            if len(candidate.description) > len(representative.description):
                representative = candidate
        unique.append(representative)
        if len(reporters[key]) >= majority:
            consensus.append(representative)
        else:
            outliers.append(representative)

    return tuple(unique), tuple(consensus), tuple(outliers)


def count_by_category(findings: Sequence[Finding]) -> dict[FindingCategory, int]:
    """Count findings per category, zero-filled for every category."""
    counts = {category: 0 for category in FindingCategory}
    for finding in findings:
        counts[finding.category] += 1
    return counts


def interpret_overlap(overlap: float) -> str:
    """Return a human-readable interpretation of an overlap value."""
    if overlap >= 0.90:
        return "Excellent overlap: evaluators found the same critical issues"
    if overlap >= 0.75:
        return "Strong overlap: most critical issues were identified by all"
    if overlap >= 0.66:
        return "Good overlap: sufficient agreement on critical issues"
    if overlap >= 0.50:
        return "Moderate overlap: some disagreement on what is critical"
    if overlap >= 0.33:
        return "Weak overlap: evaluators found different issues"
    return "No overlap: evaluators fundamentally disagree on findings"
