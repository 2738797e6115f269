"""Data models for the pre-review screener.

Kept separate from the pattern catalog and screener so that CLI formatters
can import them without pulling in the regex tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class CheckSeverity(IntEnum):
    """How much a failed check matters. INFO < WARNING < BLOCKER.

    A failed BLOCKER check fails the whole pre-review. WARNING checks are
    advisory; INFO checks only affect the score.
    """

    INFO = 0
    WARNING = 1
    BLOCKER = 2


@dataclass(frozen=True)
class PreReviewCheck:
    """Outcome of one automated check."""

    name: str
    passed: bool
    message: str
    severity: CheckSeverity

    def as_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "severity": self.severity.name,
        }


@dataclass(frozen=True)
class PreReviewResult:
    """Aggregated pre-review outcome.

    Attributes:
        passed: False iff any failed check has BLOCKER severity.
        score: Percentage of checks passed, 0-100.
        checks: Every check that ran, in order.
        blockers: Messages of failed BLOCKER checks.
        warnings: Messages of failed WARNING checks.
    """

    passed: bool
    score: int
    checks: tuple[PreReviewCheck, ...] = ()
    blockers: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, object]:
        return {
            "passed": self.passed,
            "score": self.score,
            "checks": [c.as_dict() for c in self.checks],
            "blockers": list(self.blockers),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class QuickCheckResult:
    """Fast-path result: blocked or not, with the first reason found."""

    blocked: bool
    reason: str | None = None


@dataclass(frozen=True)
class SkillMetadata:
    """Submission metadata declared alongside the skill content.

    Attributes:
        content_hash: Content address of the submission, if any.
        price_usdc: Declared per-call price.
        declared_dependencies: External resources the skill says it uses.
    """

    content_hash: str | None = None
    price_usdc: float | None = None
    declared_dependencies: tuple[str, ...] = field(default_factory=tuple)
