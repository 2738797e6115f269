"""Inactivity decay of evaluator reputation.

Reputation decays toward the floor, never below it, once an evaluator has
been inactive past a grace period. The decay rate does not switch on
abruptly: it ramps linearly from zero at the end of the grace period to the
full half-life rate at the end of the soft-decay window.

Decay Model:
    Let ``d`` be days since the last evaluation, ``g`` the grace period,
    ``s`` the end of the soft window and ``w = s - g``. The effective number
    of full-rate days is the integral of the ramp::

        e(d) = 0                          for d <= g
        e(d) = (d - g)^2 / (2 * w)        for g < d < s
        e(d) = w / 2 + (d - s)            for d >= s

    and the decayed reputation is::

        R(d) = floor + (R0 - floor) * 0.5 ** (e(d) / half_life)

``e`` is continuous and non-decreasing, so reputation never jumps and a
longer absence never decays less than a shorter one.

A sweep that has already been applied records its time in
``last_decayed_at``; the next sweep decays the current reputation by
``e(now) - e(last_decayed_at)`` only, so repeated sweeps follow the same
curve as a single one.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Mapping

from skillquorum.core.reputation.models import (
    AuditorReputation,
    ReputationChange,
    ReputationConfig,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY: float = 86400.0


def effective_decay_days(inactive_days: float, config: ReputationConfig) -> float:
    """Full-rate decay days accumulated after ``inactive_days`` of inactivity."""
    grace = config.grace_period_days
    ramp = config.soft_decay_days - grace
    if inactive_days <= grace:
        return 0.0
    if ramp <= 0:
        return inactive_days - grace
    if inactive_days < config.soft_decay_days:
        return (inactive_days - grace) ** 2 / (2.0 * ramp)
    return ramp / 2.0 + (inactive_days - config.soft_decay_days)


def _utc(moment: datetime) -> datetime:
    return moment.replace(tzinfo=timezone.utc) if moment.tzinfo is None else moment


def _inactive_days(last: datetime, moment: datetime) -> float:
    return max(0.0, (moment - last).total_seconds() / SECONDS_PER_DAY)


def calculate_decay(
    auditor: AuditorReputation,
    config: ReputationConfig,
    now: datetime | None = None,
) -> int:
    """Return the auditor's reputation after inactivity decay.

    If the last evaluation lies in the future relative to ``now``, no decay
    is applied. When a previous sweep has been applied (``last_decayed_at``),
    only the decay accrued since that sweep is applied.

    Args:
        auditor: The reputation record to decay.
        config: Decay timing and floor.
        now: The reference time. Defaults to UTC now.

    Returns:
        The decayed reputation, rounded down, never below the floor.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now = _utc(now)
    last = _utc(auditor.last_evaluation_at)

    effective = effective_decay_days(_inactive_days(last, now), config)
    if auditor.last_decayed_at is not None:
        anchor = _utc(auditor.last_decayed_at)
        effective -= effective_decay_days(_inactive_days(last, anchor), config)
    if effective <= 0.0 or auditor.reputation <= config.min_reputation:
        return auditor.reputation

    factor = 0.5 ** (effective / config.half_life_days)
    floor = config.min_reputation
    decayed = floor + (auditor.reputation - floor) * factor
    return max(floor, math.floor(decayed))


def calculate_decay_changes(
    reputations: Mapping[str, AuditorReputation],
    config: ReputationConfig,
    now: datetime | None = None,
) -> list[ReputationChange]:
    """Run a decay sweep over a reputation snapshot.

    Returns one change per auditor whose reputation actually drops; active
    auditors and those already at the floor are omitted.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    changes: list[ReputationChange] = []
    for auditor_id, auditor in reputations.items():
        decayed = calculate_decay(auditor, config, now)
        if decayed >= auditor.reputation:
            continue
        changes.append(ReputationChange(
            auditor_id=auditor_id,
            previous_reputation=auditor.reputation,
            new_reputation=decayed,
            change=decayed - auditor.reputation,
            reason="Inactivity decay",
            timestamp=now,
            decayed=True,
        ))

    logger.debug("Decay sweep: %d of %d auditors decayed", len(changes), len(reputations))
    return changes
