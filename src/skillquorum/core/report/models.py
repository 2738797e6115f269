"""Evaluation report data models: Finding, Scores, Methodology, Report.

A ``Report`` is one evaluator's complete submission about one skill. Reports
are immutable (frozen) once authored; superseding a report means creating a
new one with a new id. Loosely-typed payloads arriving from the transport
layer are converted through ``Report.from_dict``, which rejects malformed
input with ``ReportValidationError`` before any calculator sees it.

Closed sets use string-valued enums whose values are the wire spellings
(``"data-leak"``, ``"static-analysis"``). Ordered sets (``EvaluatorTier``)
use ``IntEnum`` so that comparison follows rank.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Mapping

from skillquorum.exceptions import ReportValidationError

SCORE_MIN: int = 0
SCORE_MAX: int = 1000
SEVERITY_MIN: int = 1
SEVERITY_MAX: int = 10

SCORE_FIELDS: tuple[str, ...] = (
    "security",
    "performance",
    "reliability",
    "documentation",
    "overall",
)

BUCKET_NAMES: tuple[str, ...] = (
    "critical",
    "high",
    "medium",
    "low",
    "informational",
)


# ---------------------------------------------------------------------------
# Closed sets
# ---------------------------------------------------------------------------


class FindingCategory(str, Enum):
    """Category of a security finding."""

    INJECTION = "injection"
    JAILBREAK = "jailbreak"
    DATA_LEAK = "data-leak"
    RESOURCE_ABUSE = "resource-abuse"
    PRIVACY = "privacy"
    AUTHENTICATION = "authentication"
    LOGIC_ERROR = "logic-error"
    OTHER = "other"


class MethodologyType(str, Enum):
    """How an evaluator examined the skill.

    Diversity of methodologies across a panel is a consensus requirement:
    the same blind spot repeated by every evaluator is not agreement.
    """

    STATIC_ANALYSIS = "static-analysis"
    DYNAMIC_TESTING = "dynamic-testing"
    FUZZING = "fuzzing"
    MANUAL_REVIEW = "manual-review"
    FORMAL_VERIFICATION = "formal-verification"
    PENETRATION_TESTING = "penetration-testing"


class EvaluatorTier(IntEnum):
    """Evaluator standing. Higher value means higher standing (T1 > T2 > T3)."""

    T3 = 1
    T2 = 2
    T1 = 3


class Recommendation(str, Enum):
    """An individual evaluator's recommendation."""

    APPROVE = "approve"
    REJECT = "reject"
    CONDITIONAL = "conditional"


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding:
    """A single issue raised by an evaluator.

    Attributes:
        id: Identifier, unique within the authoring report.
        title: Short summary. Used (normalized) for cross-evaluator matching.
        description: Detailed explanation.
        severity: Integer in [1, 10]; 10 is most severe.
        category: One of ``FindingCategory``.
        reproduction: Steps to reproduce.
        recommendation: How to fix.
        evidence_ref: Optional content reference to supporting evidence.
        cwe_id: Optional Common Weakness Enumeration identifier.
    """

    id: str
    title: str
    description: str
    severity: int
    category: FindingCategory
    reproduction: str = ""
    recommendation: str = ""
    evidence_ref: str | None = None
    cwe_id: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ReportValidationError("Finding id must not be empty")
        if not self.title:
            raise ReportValidationError(f"Finding '{self.id}' has an empty title")
        if not isinstance(self.category, FindingCategory):
            raise ReportValidationError(
                f"Finding '{self.id}' category must be a FindingCategory, "
                f"got {self.category!r}"
            )
        if (
            isinstance(self.severity, bool)
            or not isinstance(self.severity, int)
            or not SEVERITY_MIN <= self.severity <= SEVERITY_MAX
        ):
            raise ReportValidationError(
                f"Finding '{self.id}' severity must be an integer in "
                f"[{SEVERITY_MIN}, {SEVERITY_MAX}], got {self.severity!r}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Finding:
        """Build a Finding from a transport payload."""
        return cls(
            id=_require_str(data, "id", "finding"),
            title=_require_str(data, "title", "finding"),
            description=_optional_str(data, "description", "finding"),
            severity=_require_int(data, "severity", "finding"),
            category=_parse_enum(FindingCategory, data.get("category"), "category"),
            reproduction=_optional_str(data, "reproduction", "finding"),
            recommendation=_optional_str(data, "recommendation", "finding"),
            evidence_ref=_optional_str(data, "evidence_ref", "finding", None),
            cwe_id=_optional_str(data, "cwe_id", "finding", None),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity,
            "category": self.category.value,
            "reproduction": self.reproduction,
            "recommendation": self.recommendation,
            "evidence_ref": self.evidence_ref,
            "cwe_id": self.cwe_id,
        }


@dataclass(frozen=True)
class Scores:
    """Five evaluator scores on the 0-1000 scale.

    ``overall`` is supplied by the evaluator and is not derived from the
    other four.
    """

    security: int
    performance: int
    reliability: int
    documentation: int
    overall: int

    def __post_init__(self) -> None:
        for name in SCORE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ReportValidationError(
                    f"Score '{name}' must be an integer, got {type(value).__name__}"
                )
            if not SCORE_MIN <= value <= SCORE_MAX:
                raise ReportValidationError(
                    f"Score '{name}' must be in [{SCORE_MIN}, {SCORE_MAX}], got {value}"
                )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Scores:
        return cls(**{name: _require_int(data, name, "scores") for name in SCORE_FIELDS})

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in SCORE_FIELDS}


@dataclass(frozen=True)
class Methodology:
    """Evaluation methodology details."""

    type: MethodologyType
    tools_used: tuple[str, ...] = ()
    time_spent_minutes: int = 0
    environment_hash: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, MethodologyType):
            raise ReportValidationError(
                f"Methodology type must be a MethodologyType, got {self.type!r}"
            )
        if isinstance(self.time_spent_minutes, bool) or not isinstance(self.time_spent_minutes, int):
            raise ReportValidationError(
                f"time_spent_minutes must be an integer, got {self.time_spent_minutes!r}"
            )
        if self.time_spent_minutes < 0:
            raise ReportValidationError(
                f"time_spent_minutes must be non-negative, got {self.time_spent_minutes}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Methodology:
        return cls(
            type=_parse_enum(MethodologyType, data.get("type"), "methodology type"),
            tools_used=_str_list(data, "tools_used", "methodology"),
            time_spent_minutes=_require_int(
                {"time_spent_minutes": 0, **data}, "time_spent_minutes", "methodology"
            ),
            environment_hash=_optional_str(data, "environment_hash", "methodology", None),
            notes=_optional_str(data, "notes", "methodology", None),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "tools_used": list(self.tools_used),
            "time_spent_minutes": self.time_spent_minutes,
            "environment_hash": self.environment_hash,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class FindingBuckets:
    """Findings partitioned into five severity buckets."""

    critical: tuple[Finding, ...] = ()
    high: tuple[Finding, ...] = ()
    medium: tuple[Finding, ...] = ()
    low: tuple[Finding, ...] = ()
    informational: tuple[Finding, ...] = ()

    def serious(self) -> tuple[Finding, ...]:
        """Return critical and high findings, the ones that must be corroborated."""
        return self.critical + self.high

    def all(self) -> tuple[Finding, ...]:
        return tuple(f for name in BUCKET_NAMES for f in getattr(self, name))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FindingBuckets:
        unknown = set(data) - set(BUCKET_NAMES)
        if unknown:
            raise ReportValidationError(
                f"Unknown finding buckets: {sorted(unknown)}"
            )
        return cls(**{
            name: tuple(Finding.from_dict(f) for f in _finding_entries(data, name))
            for name in BUCKET_NAMES
        })

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            name: [f.as_dict() for f in getattr(self, name)]
            for name in BUCKET_NAMES
        }


@dataclass(frozen=True)
class Report:
    """One evaluator's full submission for one skill.

    Attributes:
        id: Report identifier.
        evaluator_id: Evaluator identity (public key or account id).
        evaluator_tier: Evaluator standing, an external weighting input.
        skill_id: The skill under evaluation.
        timestamp: Submission time, timezone-aware.
        methodology: How the evaluation was performed.
        findings: Findings partitioned by severity bucket.
        scores: The five 0-1000 scores.
        recommendation: approve / reject / conditional.
        conditions: Required fixes attached to a conditional recommendation.
        evidence_hash: Content hash of the full evidence bundle.
        signature_hash: Signature over the report hash.
    """

    id: str
    evaluator_id: str
    evaluator_tier: EvaluatorTier
    skill_id: str
    timestamp: datetime
    methodology: Methodology
    findings: FindingBuckets
    scores: Scores
    recommendation: Recommendation
    evidence_hash: str = ""
    signature_hash: str = ""
    conditions: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id:
            raise ReportValidationError("Report id must not be empty")
        if not self.evaluator_id:
            raise ReportValidationError(f"Report '{self.id}' has no evaluator_id")
        if not isinstance(self.evaluator_tier, EvaluatorTier):
            raise ReportValidationError(
                f"Report '{self.id}' evaluator_tier must be an EvaluatorTier"
            )
        if not isinstance(self.recommendation, Recommendation):
            raise ReportValidationError(
                f"Report '{self.id}' recommendation must be a Recommendation"
            )
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Report:
        """Validate a transport payload and build a Report.

        Timestamps may be ISO-8601 strings or Unix seconds.

        Raises:
            ReportValidationError: If any field is missing or invalid.
        """
        if not isinstance(data, Mapping):
            raise ReportValidationError(
                f"Report payload must be a mapping, got {type(data).__name__}"
            )
        for section in ("methodology", "scores"):
            if not isinstance(data.get(section), Mapping):
                raise ReportValidationError(f"Report is missing '{section}'")
        findings = data.get("findings") or {}
        if not isinstance(findings, Mapping):
            raise ReportValidationError("Report 'findings' must be a mapping of buckets")
        return cls(
            id=_require_str(data, "id", "report"),
            evaluator_id=_require_str(data, "evaluator_id", "report"),
            evaluator_tier=_parse_tier(data.get("evaluator_tier")),
            skill_id=_optional_str(data, "skill_id", "report"),
            timestamp=_parse_timestamp(data.get("timestamp")),
            methodology=Methodology.from_dict(data["methodology"]),
            findings=FindingBuckets.from_dict(findings),
            scores=Scores.from_dict(data["scores"]),
            recommendation=_parse_enum(
                Recommendation, data.get("recommendation"), "recommendation"
            ),
            evidence_hash=_optional_str(data, "evidence_hash", "report"),
            signature_hash=_optional_str(data, "signature_hash", "report"),
            conditions=_str_list(data, "conditions", "report"),
        )

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict accepted by ``from_dict``."""
        return {
            "id": self.id,
            "evaluator_id": self.evaluator_id,
            "evaluator_tier": self.evaluator_tier.name,
            "skill_id": self.skill_id,
            "timestamp": self.timestamp.isoformat(),
            "methodology": self.methodology.as_dict(),
            "findings": self.findings.as_dict(),
            "scores": self.scores.as_dict(),
            "recommendation": self.recommendation.value,
            "evidence_hash": self.evidence_hash,
            "signature_hash": self.signature_hash,
            "conditions": list(self.conditions),
        }


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def _require_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ReportValidationError(f"{where} field '{key}' must be a non-empty string")
    return value


def _require_int(data: Mapping[str, Any], key: str, where: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ReportValidationError(
            f"{where} field '{key}' must be an integer, got {value!r}"
        )
    return value


def _optional_str(
    data: Mapping[str, Any], key: str, where: str, default: str | None = "",
) -> str | None:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ReportValidationError(f"{where} field '{key}' must be a string, got {value!r}")
    return value


def _str_list(data: Mapping[str, Any], key: str, where: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ReportValidationError(
            f"{where} field '{key}' must be a list of strings, got {value!r}"
        )
    return tuple(value)


def _finding_entries(data: Mapping[str, Any], bucket: str) -> list[Mapping[str, Any]]:
    value = data.get(bucket)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ReportValidationError(
            f"Finding bucket '{bucket}' must be a list, got {type(value).__name__}"
        )
    for index, entry in enumerate(value):
        if not isinstance(entry, Mapping):
            raise ReportValidationError(
                f"Finding #{index} in '{bucket}' must be a mapping, got {type(entry).__name__}"
            )
    return list(value)


def _parse_enum(enum_cls: type[Enum], value: Any, what: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower().replace("_", "-")
        for member in enum_cls:
            if member.value == normalized:
                return member
    valid = ", ".join(m.value for m in enum_cls)
    raise ReportValidationError(f"Invalid {what} {value!r}; expected one of: {valid}")


def _parse_tier(value: Any) -> EvaluatorTier:
    if isinstance(value, EvaluatorTier):
        return value
    if isinstance(value, str):
        key = value.strip().upper().replace("TIER", "T")
        try:
            return EvaluatorTier[key]
        except KeyError:
            pass
    raise ReportValidationError(
        f"Invalid evaluator_tier {value!r}; expected one of: T1, T2, T3"
    )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ReportValidationError(f"Invalid timestamp {value!r}") from exc
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ReportValidationError(f"Invalid timestamp {value!r}") from exc
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ReportValidationError(f"Report timestamp is required, got {value!r}")
