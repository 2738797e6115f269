"""Automated pre-review screening of skill submissions.

Submodules:
    models    -- CheckSeverity, PreReviewCheck, PreReviewResult,
                 QuickCheckResult, SkillMetadata
    patterns  -- Injection pattern catalog and structure heuristics
    screener  -- PreReviewScreener and the four check-family functions

All public names are re-exported here::

    from skillquorum.core.prereview import PreReviewScreener
"""

from skillquorum.core.prereview.models import (
    CheckSeverity,
    PreReviewCheck,
    PreReviewResult,
    QuickCheckResult,
    SkillMetadata,
)
from skillquorum.core.prereview.screener import (
    PreReviewScreener,
    check_injection_patterns,
    check_quality,
    check_resource_declarations,
    check_structure,
)

__all__ = [
    "CheckSeverity",
    "PreReviewCheck",
    "PreReviewResult",
    "PreReviewScreener",
    "QuickCheckResult",
    "SkillMetadata",
    "check_injection_patterns",
    "check_quality",
    "check_resource_declarations",
    "check_structure",
]
