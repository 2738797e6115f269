"""Shared builders for evaluation reports and findings.

Every score dimension of a built report is set to ``overall`` unless
overridden, so that tests only spell out what they care about.
"""

from __future__ import annotations

from datetime import datetime, timezone
from itertools import count
from typing import Any, Sequence

from skillquorum.core.report import (
    EvaluatorTier,
    Finding,
    FindingBuckets,
    FindingCategory,
    Methodology,
    MethodologyType,
    Recommendation,
    Report,
    Scores,
)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

_ids = count(1)


def make_finding(
    title: str = "Unsanitized shell argument",
    category: FindingCategory = FindingCategory.INJECTION,
    severity: int = 9,
    description: str = "User input reaches a shell command unescaped.",
    finding_id: str | None = None,
) -> Finding:
    return Finding(
        id=finding_id or f"f-{next(_ids)}",
        title=title,
        description=description,
        severity=severity,
        category=category,
    )


def make_report(
    evaluator_id: str,
    overall: int,
    *,
    methodology: MethodologyType = MethodologyType.STATIC_ANALYSIS,
    critical: Sequence[Finding] = (),
    high: Sequence[Finding] = (),
    medium: Sequence[Finding] = (),
    recommendation: Recommendation = Recommendation.APPROVE,
    skill_id: str = "skill-1",
    report_id: str | None = None,
    tier: EvaluatorTier = EvaluatorTier.T2,
    security: int | None = None,
) -> Report:
    return Report(
        id=report_id or f"r-{evaluator_id}-{next(_ids)}",
        evaluator_id=evaluator_id,
        evaluator_tier=tier,
        skill_id=skill_id,
        timestamp=FIXED_NOW,
        methodology=Methodology(type=methodology, time_spent_minutes=45),
        findings=FindingBuckets(
            critical=tuple(critical), high=tuple(high), medium=tuple(medium),
        ),
        scores=Scores(
            security=overall if security is None else security,
            performance=overall,
            reliability=overall,
            documentation=overall,
            overall=overall,
        ),
        recommendation=recommendation,
    )


def report_payload(
    evaluator_id: str,
    overall: int,
    methodology: str = "static-analysis",
    recommendation: str = "approve",
    critical: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Build a transport-shaped report payload, as found in report files."""
    return {
        "id": f"r-{evaluator_id}",
        "evaluator_id": evaluator_id,
        "evaluator_tier": "T2",
        "skill_id": "skill-1",
        "timestamp": "2025-06-01T12:00:00Z",
        "methodology": {"type": methodology, "tools_used": ["semgrep"], "time_spent_minutes": 30},
        "findings": {"critical": list(critical)},
        "scores": {
            "security": overall,
            "performance": overall,
            "reliability": overall,
            "documentation": overall,
            "overall": overall,
        },
        "recommendation": recommendation,
    }


SHARED_CRITICAL = {
    "id": "f-shared",
    "title": "Prompt injection via tool output",
    "description": "Tool output is concatenated into the system prompt.",
    "severity": 9,
    "category": "injection",
}


def approving_panel() -> list[Report]:
    """Three agreeing reports that pass the basic tier."""
    shared = make_finding("Prompt injection via tool output")
    return [
        make_report("alice", 860, methodology=MethodologyType.STATIC_ANALYSIS, critical=[shared]),
        make_report("bob", 840, methodology=MethodologyType.DYNAMIC_TESTING, critical=[shared]),
        make_report("carol", 850, methodology=MethodologyType.MANUAL_REVIEW, critical=[shared]),
    ]


def rejecting_panel() -> list[Report]:
    """Three reports agreeing on a low score."""
    shared = make_finding("Credentials written to logs", FindingCategory.DATA_LEAK)
    return [
        make_report("alice", 350, critical=[shared], recommendation=Recommendation.REJECT),
        make_report("bob", 380, methodology=MethodologyType.FUZZING, critical=[shared],
                    recommendation=Recommendation.REJECT),
        make_report("carol", 360, methodology=MethodologyType.MANUAL_REVIEW, critical=[shared],
                    recommendation=Recommendation.REJECT),
    ]


def split_panel() -> list[Report]:
    """Three reports with widely differing scores."""
    return [
        make_report("alice", 850),
        make_report("bob", 480, methodology=MethodologyType.FUZZING, recommendation=Recommendation.REJECT),
        make_report("carol", 700, methodology=MethodologyType.MANUAL_REVIEW,
                    recommendation=Recommendation.CONDITIONAL),
    ]
