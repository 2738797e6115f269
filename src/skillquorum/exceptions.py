"""SkillQuorum exception hierarchy.

All public exceptions inherit from SkillQuorumError, giving callers a single
base class to catch when they want to handle any SkillQuorum-specific failure
without swallowing unrelated errors.

Expected outcomes of a consensus round (PENDING, INCONCLUSIVE, CONTESTED)
are verdicts, not exceptions. The classes below cover caller errors only.
"""


class SkillQuorumError(Exception):
    """Base exception for all SkillQuorum errors."""


class ReportValidationError(SkillQuorumError, ValueError):
    """Raised when an evaluation report payload is malformed.

    Covers missing fields, out-of-range scores or severities, and values
    outside the closed sets (categories, methodologies, tiers,
    recommendations). Raised once at the boundary, before any calculator
    sees the report.
    """


class InsufficientReportsError(SkillQuorumError, ValueError):
    """Raised when a calculator receives an empty report set.

    Variance and overlap are undefined over zero reports. Callers must not
    invoke the calculators without input; this is a programming error,
    not a runtime condition to recover from.
    """


class ConfigurationError(SkillQuorumError, KeyError):
    """Raised when an undefined consensus tier is requested."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class ConsensusError(SkillQuorumError):
    """Raised for invalid consensus state transitions.

    For example, contesting a result that is still PENDING.
    """


class ReputationError(SkillQuorumError):
    """Raised when reputation inputs are inconsistent.

    Covers negative execution counts and success counts exceeding totals.
    """
