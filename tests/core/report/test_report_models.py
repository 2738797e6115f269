"""Tests for evaluation report models and payload validation.

Validates:
- Value-type invariants (severity, score ranges, empty identifiers).
- ``from_dict`` parsing of enums, tiers and timestamps.
- Rejection of malformed payloads with ReportValidationError.
- ``as_dict`` output accepted back by ``from_dict``.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

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
from skillquorum.exceptions import ReportValidationError, SkillQuorumError
from tests.helpers import SHARED_CRITICAL, make_finding, make_report, report_payload


class TestFinding:

    @pytest.mark.parametrize("severity", [0, 11, -1])
    def test_severity_out_of_range(self, severity: int) -> None:
        with pytest.raises(ReportValidationError):
            make_finding(severity=severity)

    def test_bool_severity_rejected(self) -> None:
        with pytest.raises(ReportValidationError):
            make_finding(severity=True)  # type: ignore[arg-type]

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ReportValidationError):
            make_finding(title="")

    def test_from_dict_accepts_underscored_category(self) -> None:
        finding = Finding.from_dict({
            "id": "f1", "title": "Leak", "severity": 7, "category": "DATA_LEAK",
        })
        assert finding.category is FindingCategory.DATA_LEAK
        assert finding.description == ""

    def test_from_dict_unknown_category(self) -> None:
        with pytest.raises(ReportValidationError, match="Invalid category"):
            Finding.from_dict({"id": "f1", "title": "x", "severity": 5, "category": "spam"})

    def test_null_description_becomes_empty(self) -> None:
        finding = Finding.from_dict({
            "id": "f1", "title": "Leak", "severity": 7, "category": "data-leak",
            "description": None,
        })
        assert finding.description == ""

    def test_non_string_description_rejected(self) -> None:
        with pytest.raises(ReportValidationError, match="description"):
            Finding.from_dict({
                "id": "f1", "title": "Leak", "severity": 7, "category": "data-leak",
                "description": 42,
            })


class TestScores:

    def test_scores_in_range(self) -> None:
        scores = Scores(security=0, performance=1000, reliability=500, documentation=1, overall=999)
        assert scores.as_dict()["performance"] == 1000

    @pytest.mark.parametrize("value", [-1, 1001])
    def test_out_of_range_rejected(self, value: int) -> None:
        with pytest.raises(ReportValidationError):
            Scores(security=value, performance=0, reliability=0, documentation=0, overall=0)

    def test_float_rejected(self) -> None:
        with pytest.raises(ReportValidationError):
            Scores.from_dict({
                "security": 1.5, "performance": 0, "reliability": 0,
                "documentation": 0, "overall": 0,
            })

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ReportValidationError, match="overall"):
            Scores.from_dict({"security": 1, "performance": 0, "reliability": 0, "documentation": 0})


class TestMethodology:

    def test_negative_time_rejected(self) -> None:
        with pytest.raises(ReportValidationError):
            Methodology(type=MethodologyType.FUZZING, time_spent_minutes=-5)

    def test_none_time_rejected(self) -> None:
        with pytest.raises(ReportValidationError, match="time_spent_minutes"):
            Methodology(type=MethodologyType.FUZZING, time_spent_minutes=None)  # type: ignore[arg-type]

    @pytest.mark.parametrize("tools", [5, "semgrep", [1, 2]])
    def test_tools_used_must_be_string_list(self, tools: object) -> None:
        with pytest.raises(ReportValidationError, match="tools_used"):
            Methodology.from_dict({"type": "fuzzing", "tools_used": tools})

    def test_time_defaults_to_zero(self) -> None:
        m = Methodology.from_dict({"type": "fuzzing"})
        assert m.type is MethodologyType.FUZZING
        assert m.time_spent_minutes == 0
        assert m.tools_used == ()


class TestFindingBuckets:

    def test_serious_is_critical_then_high(self) -> None:
        c, h, m = make_finding("C"), make_finding("H"), make_finding("M")
        buckets = FindingBuckets(critical=(c,), high=(h,), medium=(m,))
        assert buckets.serious() == (c, h)
        assert buckets.all() == (c, h, m)

    def test_unknown_bucket_rejected(self) -> None:
        with pytest.raises(ReportValidationError, match="Unknown finding buckets"):
            FindingBuckets.from_dict({"severe": []})

    def test_bucket_must_be_a_list(self) -> None:
        with pytest.raises(ReportValidationError, match="must be a list"):
            FindingBuckets.from_dict({"critical": 3})

    def test_finding_entry_must_be_a_mapping(self) -> None:
        with pytest.raises(ReportValidationError, match="Finding #0 in .critical. must be a mapping"):
            FindingBuckets.from_dict({"critical": ["prompt injection"]})


class TestReport:

    def test_from_dict_parses_payload(self) -> None:
        report = Report.from_dict(report_payload("alice", 820, critical=[SHARED_CRITICAL]))
        assert report.evaluator_id == "alice"
        assert report.evaluator_tier is EvaluatorTier.T2
        assert report.methodology.type is MethodologyType.STATIC_ANALYSIS
        assert report.recommendation is Recommendation.APPROVE
        assert report.scores.overall == 820
        assert report.timestamp == datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert [f.title for f in report.findings.critical] == ["Prompt injection via tool output"]

    @pytest.mark.parametrize("tier", ["T1", "t1", "TIER1", "tier1"])
    def test_tier_spellings(self, tier: str) -> None:
        payload = report_payload("alice", 800)
        payload["evaluator_tier"] = tier
        assert Report.from_dict(payload).evaluator_tier is EvaluatorTier.T1

    def test_tier_ordering(self) -> None:
        assert EvaluatorTier.T1 > EvaluatorTier.T2 > EvaluatorTier.T3

    def test_unix_timestamp(self) -> None:
        payload = report_payload("alice", 800)
        payload["timestamp"] = 0
        assert Report.from_dict(payload).timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_naive_timestamp_becomes_utc(self) -> None:
        report = make_report("alice", 800)
        naive = Report(**{**report.__dict__, "timestamp": datetime(2025, 1, 1)})
        assert naive.timestamp.tzinfo is timezone.utc

    def test_bad_timestamp_rejected(self) -> None:
        payload = report_payload("alice", 800)
        payload["timestamp"] = "yesterday"
        with pytest.raises(ReportValidationError, match="Invalid timestamp"):
            Report.from_dict(payload)

    @pytest.mark.parametrize("stamp", [1e20, -1e20, float("nan")])
    def test_out_of_range_unix_timestamp_rejected(self, stamp: float) -> None:
        payload = report_payload("alice", 800)
        payload["timestamp"] = stamp
        with pytest.raises(ReportValidationError, match="Invalid timestamp"):
            Report.from_dict(payload)

    def test_conditions_must_be_strings(self) -> None:
        payload = report_payload("alice", 800, recommendation="conditional")
        payload["conditions"] = 7
        with pytest.raises(ReportValidationError, match="conditions"):
            Report.from_dict(payload)

    @pytest.mark.parametrize("missing", ["id", "evaluator_id", "scores", "methodology"])
    def test_missing_required_field(self, missing: str) -> None:
        payload = report_payload("alice", 800)
        del payload[missing]
        with pytest.raises(ReportValidationError):
            Report.from_dict(payload)

    def test_invalid_recommendation(self) -> None:
        payload = report_payload("alice", 800, recommendation="maybe")
        with pytest.raises(ReportValidationError, match="recommendation"):
            Report.from_dict(payload)

    def test_non_mapping_payload(self) -> None:
        with pytest.raises(ReportValidationError):
            Report.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Report.from_dict({})
        with pytest.raises(SkillQuorumError):
            Report.from_dict({})

    def test_as_dict_round_trips(self) -> None:
        original = Report.from_dict(report_payload("alice", 820, critical=[SHARED_CRITICAL]))
        assert Report.from_dict(original.as_dict()) == original

    def test_report_is_immutable(self) -> None:
        report = make_report("alice", 800)
        with pytest.raises(AttributeError):
            report.evaluator_id = "mallory"  # type: ignore[misc]
