"""Automated pre-review screening of raw skill submissions.

Runs before any human evaluator sees a submission, to keep obviously
malicious or unfinished skills out of the review queue.

Two entry points:

- ``quick_check`` -- synchronous fast path. Stops at the first BLOCKER
  injection pattern (or too-short content) and reports why.
- ``review`` -- full screening. Four check families, each a public function
  returning a list of ``PreReviewCheck``:

  1. ``check_injection_patterns`` -- known-malicious phrasings.
  2. ``check_structure`` -- required sections of a skill document.
  3. ``check_quality`` -- examples, formatting, repetition.
  4. ``check_resource_declarations`` -- declared metadata against content.

The screener is stateless; ``review`` is a coroutine so that it composes
with the caller's event loop, but it never suspends on I/O.
"""

from __future__ import annotations

from skillquorum.core.prereview.models import (
    CheckSeverity,
    PreReviewCheck,
    PreReviewResult,
    QuickCheckResult,
    SkillMetadata,
)
from skillquorum.core.prereview.patterns import (
    BLOCKER_PATTERNS,
    CODE_BLOCK_PATTERN,
    DESCRIPTION_PATTERN,
    EXAMPLE_PATTERN,
    FORMATTING_PATTERN,
    INJECTION_PATTERNS,
    INPUT_PATTERN,
    LIMITATION_PATTERN,
    NAME_PATTERNS,
    OUTPUT_PATTERN,
)

QUICK_MIN_LENGTH: int = 50
STRUCTURE_MIN_LENGTH: int = 200
REPETITION_MIN_RATIO: float = 0.5
REPETITION_MIN_LINE_LENGTH: int = 10
PRICE_MIN_USDC: float = 0.001
PRICE_MAX_USDC: float = 100.0


def _check(name: str, passed: bool, ok: str, failed: str, severity: CheckSeverity) -> PreReviewCheck:
    """Build a check whose severity only applies when it fails."""
    return PreReviewCheck(
        name=name,
        passed=passed,
        message=ok if passed else failed,
        severity=CheckSeverity.INFO if passed else severity,
    )


# ---------------------------------------------------------------------------
# Check families
# ---------------------------------------------------------------------------


def check_injection_patterns(content: str) -> list[PreReviewCheck]:
    """One check per catalogued pattern, plus an ``injection_summary`` check.

    The summary is a BLOCKER when any BLOCKER pattern matched and a WARNING
    when only advisory patterns matched.
    """
    checks: list[PreReviewCheck] = []
    worst = CheckSeverity.INFO
    for entry in INJECTION_PATTERNS:
        matched = entry.pattern.search(content) is not None
        if matched:
            worst = max(worst, entry.severity)
        checks.append(_check(
            f"injection_{entry.name}",
            not matched,
            f"No {entry.name} pattern detected",
            f"Detected potential injection pattern: {entry.name}",
            entry.severity,
        ))

    failed = sum(1 for c in checks if not c.passed)
    checks.append(_check(
        "injection_summary",
        failed == 0,
        "No injection patterns detected",
        f"Found {failed} potential injection pattern{'s' if failed != 1 else ''}",
        worst,
    ))
    return checks


def check_structure(content: str) -> list[PreReviewCheck]:
    """Check that the skill document has the sections reviewers rely on."""
    has_name = any(p.search(content) for p in NAME_PATTERNS)
    has_description = DESCRIPTION_PATTERN.search(content) is not None
    has_input = INPUT_PATTERN.search(content) is not None
    has_output = OUTPUT_PATTERN.search(content) is not None
    has_examples = EXAMPLE_PATTERN.search(content) is not None
    has_limitations = LIMITATION_PATTERN.search(content) is not None
    length = len(content)

    return [
        _check("structure_name", has_name,
               "Skill has a name/title", "Missing skill name or title",
               CheckSeverity.BLOCKER),
        _check("structure_description", has_description,
               "Skill has a description", "Missing skill description",
               CheckSeverity.BLOCKER),
        _check("structure_input", has_input,
               "Input specification found", "Missing input specification",
               CheckSeverity.WARNING),
        _check("structure_output", has_output,
               "Output specification found", "Missing output specification",
               CheckSeverity.WARNING),
        _check("structure_examples", has_examples,
               "Examples provided", "Consider adding usage examples",
               CheckSeverity.INFO),
        _check("structure_limitations", has_limitations,
               "Limitations documented", "Consider documenting limitations",
               CheckSeverity.INFO),
        _check("structure_length", length >= STRUCTURE_MIN_LENGTH,
               f"Content length: {length} chars",
               f"Content too short ({length} < {STRUCTURE_MIN_LENGTH})",
               CheckSeverity.WARNING),
    ]


def check_quality(content: str) -> list[PreReviewCheck]:
    """Heuristic content-quality signals.

    Repetition is measured over lines longer than 10 characters: the share
    of distinct lines among them must exceed one half. Copy-pasted filler is
    a common way to pad a skill past length checks.
    """
    has_code = CODE_BLOCK_PATTERN.search(content) is not None
    has_formatting = FORMATTING_PATTERN.search(content) is not None

    meaningful = [
        line.strip() for line in content.splitlines()
        if len(line.strip()) > REPETITION_MIN_LINE_LENGTH
    ]
    ratio = len(set(meaningful)) / len(meaningful) if meaningful else 1.0

    return [
        _check("quality_code_blocks", has_code,
               "Contains code examples", "No code examples found",
               CheckSeverity.INFO),
        _check("quality_formatting", has_formatting,
               "Uses markdown formatting", "Consider using markdown for clarity",
               CheckSeverity.INFO),
        _check("quality_repetition", ratio > REPETITION_MIN_RATIO,
               "Content has normal variation", "High content repetition detected",
               CheckSeverity.WARNING),
    ]


def check_resource_declarations(content: str, metadata: SkillMetadata) -> list[PreReviewCheck]:
    """Compare declared metadata against what the content references."""
    checks: list[PreReviewCheck] = []

    if metadata.price_usdc is not None:
        price = metadata.price_usdc
        reasonable = PRICE_MIN_USDC <= price <= PRICE_MAX_USDC
        checks.append(_check(
            "resource_price", reasonable,
            f"Price {price} USDC is within reasonable range",
            f"Price {price} USDC seems unusual",
            CheckSeverity.WARNING,
        ))

    if metadata.declared_dependencies:
        lowered = content.lower()
        missing = [d for d in metadata.declared_dependencies if d.lower() not in lowered]
        checks.append(_check(
            "resource_dependencies", not missing,
            "All declared dependencies are mentioned in content",
            f"Some dependencies not mentioned: {', '.join(missing)}",
            CheckSeverity.WARNING,
        ))

    return checks


# ---------------------------------------------------------------------------
# Screener
# ---------------------------------------------------------------------------


class PreReviewScreener:
    """Stateless automated gate applied before human review.

    Usage::

        screener = PreReviewScreener()
        fast = screener.quick_check(content)
        if fast.blocked:
            reject(fast.reason)
        result = await screener.review(content, SkillMetadata(price_usdc=0.05))
    """

    def quick_check(self, content: str) -> QuickCheckResult:
        """Return immediately on the first BLOCKER pattern or short content."""
        for entry in BLOCKER_PATTERNS:
            if entry.pattern.search(content):
                return QuickCheckResult(
                    blocked=True,
                    reason=f"Blocked by injection pattern: {entry.name}",
                )
        if len(content) < QUICK_MIN_LENGTH:
            return QuickCheckResult(
                blocked=True,
                reason=f"Content too short (minimum {QUICK_MIN_LENGTH} characters)",
            )
        return QuickCheckResult(blocked=False)

    async def review(self, content: str, metadata: SkillMetadata | None = None) -> PreReviewResult:
        """Run every check family and aggregate the outcome.

        Args:
            content: Raw skill document.
            metadata: Declared submission metadata. Resource checks run
                only when provided.

        Returns:
            A ``PreReviewResult``.
        """
        checks: list[PreReviewCheck] = []
        checks.extend(check_injection_patterns(content))
        checks.extend(check_structure(content))
        checks.extend(check_quality(content))
        if metadata is not None:
            checks.extend(check_resource_declarations(content, metadata))

        failed = [c for c in checks if not c.passed]
        blockers = tuple(c.message for c in failed if c.severity is CheckSeverity.BLOCKER)
        warnings = tuple(c.message for c in failed if c.severity is CheckSeverity.WARNING)
        passed_count = len(checks) - len(failed)

        return PreReviewResult(
            passed=not blockers,
            score=round(100 * passed_count / len(checks)),
            checks=tuple(checks),
            blockers=blockers,
            warnings=warnings,
        )
