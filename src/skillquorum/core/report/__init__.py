"""Evaluation report model: validated, immutable value types.

Submodules:
    models -- FindingCategory, MethodologyType, EvaluatorTier, Recommendation,
              Finding, Scores, Methodology, FindingBuckets, Report

All public names are re-exported here::

    from skillquorum.core.report import Report, Finding, Scores
"""

from skillquorum.core.report.models import (
    BUCKET_NAMES,
    SCORE_FIELDS,
    SCORE_MAX,
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

__all__ = [
    "BUCKET_NAMES",
    "EvaluatorTier",
    "Finding",
    "FindingBuckets",
    "FindingCategory",
    "Methodology",
    "MethodologyType",
    "Recommendation",
    "Report",
    "SCORE_FIELDS",
    "SCORE_MAX",
    "Scores",
]
