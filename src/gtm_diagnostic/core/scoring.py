"""Questionnaire scoring engine.

Evaluates every rule of a RuleConfig against an answer set, clamps each
pillar, then derives the total, alignment band, primary constraint and the
flags surfaced to the client. Pure: no I/O and no mutation of inputs.
"""

from __future__ import annotations

import logging

from .answers import AnswerLookup
from .models import PILLAR_ORDER, UNKNOWN_BAND, RuleConfig, ScoredResult

logger = logging.getLogger(__name__)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def resolve_band(total: int, config: RuleConfig) -> str:
    """Label of the first band containing total, or the Unknown sentinel."""
    for band in config.alignment_bands:
        if band.contains(total):
            return band.label
    return UNKNOWN_BAND


def primary_constraint(pillars: dict[str, int]) -> str:
    """Lowest-scoring pillar. Ties go to the earliest pillar in fixed order."""
    return min(PILLAR_ORDER, key=lambda p: pillars[p])


def score(answers: object, config: RuleConfig) -> ScoredResult:
    """Score an answer set.

    Args:
        answers: Mapping of question text to answer text. Missing keys,
            non-string values and non-mapping input simply fail to match.
        config: Validated rule configuration.

    Returns:
        ScoredResult with clamped pillar scores and flags in evaluation order
        (pillar order, then rule order within the pillar).
    """
    lookup = AnswerLookup(answers)

    pillars = {p: config.pillar_base_score for p in PILLAR_ORDER}
    flags: list[str] = []

    for pillar in PILLAR_ORDER:
        for rule in config.rules_for(pillar):
            if not lookup.matches(rule.question, rule.answer):
                continue
            pillars[pillar] += rule.delta
            if rule.flag:
                flags.append(rule.flag)
            logger.debug("Rule fired: %s %r=%r delta=%+d", pillar, rule.question, rule.answer, rule.delta)

    for p in PILLAR_ORDER:
        pillars[p] = clamp(pillars[p], config.pillar_min, config.pillar_max)

    total = sum(pillars.values())
    band = resolve_band(total, config)
    constraint = primary_constraint(pillars)

    logger.debug("Scored answers: total=%d band=%s primary=%s flags=%d", total, band, constraint, len(flags))

    return ScoredResult(
        total=total,
        band=band,
        pillars=pillars,
        primary_constraint=constraint,
        flags=flags,
    )
