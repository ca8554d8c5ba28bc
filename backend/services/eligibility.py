"""
Eligibility filter — drop negligible submissions before allocation.

A submission is eligible iff BOTH hold (inclusive):
  score                 >= MIN_ELIGIBLE_POINTS        (50 points)
  score / total_score   >= MIN_ELIGIBLE_CONTRIBUTION  (0.1%)

total_score == 0 → nothing is eligible (no division).
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

MIN_ELIGIBLE_POINTS = Decimal("50")
MIN_ELIGIBLE_CONTRIBUTION = Decimal("0.001")  # 0.1%

T = TypeVar("T")


def ineligibility_reason(score: Decimal, total_score: Decimal) -> Optional[str]:
    """Why a submission is ineligible, or None if it is eligible."""
    if total_score <= 0:
        return "campaign has no points"
    if score < MIN_ELIGIBLE_POINTS:
        return f"below {MIN_ELIGIBLE_POINTS} points"
    if score / total_score < MIN_ELIGIBLE_CONTRIBUTION:
        return f"below {MIN_ELIGIBLE_CONTRIBUTION * 100:.1f}% contribution"
    return None


def is_eligible(score: Decimal, total_score: Decimal) -> bool:
    return ineligibility_reason(score, total_score) is None


def filter_eligible_submissions(
    scored: Sequence[tuple[T, Decimal]],
    total_score: Decimal,
) -> list[tuple[T, Decimal]]:
    """
    Keep the (item, score) pairs that pass both thresholds, in input order.

    Scores are not modified.
    """
    if total_score <= 0:
        logger.info("Eligibility filter: total score is 0 — no eligible submissions")
        return []

    eligible = [(item, score) for item, score in scored if is_eligible(score, total_score)]

    logger.info(
        f"Eligibility filter: {len(eligible)}/{len(scored)} eligible "
        f"(>= {MIN_ELIGIBLE_POINTS} pts AND >= "
        f"{MIN_ELIGIBLE_CONTRIBUTION * 100:.1f}% of {total_score} pts)"
    )
    return eligible
