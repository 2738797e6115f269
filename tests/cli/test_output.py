"""Tests for CLI output formatting helpers.

Verifies:
    - Verdict and check style mapping.
    - Output functions produce output without errors.
"""

from __future__ import annotations

import pytest

from skillquorum.cli.output import (
    check_style,
    print_consensus,
    print_prereview,
    print_quick_consensus,
    print_tier_requirements,
    print_tiers,
    verdict_style,
)
from skillquorum.core.consensus import (
    CONSENSUS_CONFIGS,
    ConsensusTier,
    ConsensusVerdict,
    QuickConsensus,
    calculate_consensus,
)
from skillquorum.core.prereview import CheckSeverity, PreReviewCheck, PreReviewResult
from skillquorum.core.report import EvaluatorTier
from skillquorum.core.reputation import ReputationEngine
from tests.helpers import FIXED_NOW, approving_panel, make_finding, make_report


class TestStyles:

    def test_approved_is_bold_green(self) -> None:
        assert verdict_style(ConsensusVerdict.APPROVED) == "bold green"

    def test_rejected_is_bold_red(self) -> None:
        assert verdict_style(ConsensusVerdict.REJECTED) == "bold red"

    def test_blocker_is_bold_red(self) -> None:
        assert check_style(CheckSeverity.BLOCKER) == "bold red"

    def test_warning_is_yellow(self) -> None:
        assert check_style(CheckSeverity.WARNING) == "yellow"


class TestPrinters:

    def test_print_consensus_with_outliers(self, capsys: pytest.CaptureFixture[str]) -> None:
        reports = approving_panel()
        reports[0] = make_report("alice", 860, critical=[make_finding("Hardcoded API token in config")])
        result = calculate_consensus(
            "skill-1", reports, CONSENSUS_CONFIGS[ConsensusTier.BASIC], now=FIXED_NOW,
        )
        print_consensus(result)
        out = capsys.readouterr().out
        assert "Consensus Result" in out
        assert "outlier" in out

    def test_print_prereview_lists_failed_checks(self, capsys: pytest.CaptureFixture[str]) -> None:
        result = PreReviewResult(
            passed=False,
            score=50,
            checks=(
                PreReviewCheck("structure_name", False, "Missing skill name or title", CheckSeverity.BLOCKER),
                PreReviewCheck("structure_input", True, "Input specification found", CheckSeverity.INFO),
            ),
            blockers=("Missing skill name or title",),
        )
        print_prereview(result)
        out = capsys.readouterr().out
        assert "BLOCKED" in out
        assert "structure_name" in out
        assert "structure_input" not in out

    def test_print_quick_consensus(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_quick_consensus("skill-1", QuickConsensus(ConsensusVerdict.APPROVED, 810.0, "Mean score 810 > 700 threshold"))
        assert "Mean score 810" in capsys.readouterr().out

    def test_print_tiers(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_tiers(CONSENSUS_CONFIGS.values())
        assert "Consensus Tiers" in capsys.readouterr().out

    def test_print_tier_requirements(self, capsys: pytest.CaptureFixture[str]) -> None:
        req = ReputationEngine().tier_requirements(EvaluatorTier.T3)
        print_tier_requirements(120, req)
        out = capsys.readouterr().out
        assert "T3" in out
        assert "Max evaluations per day: 3" in out
