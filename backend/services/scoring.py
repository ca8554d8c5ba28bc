"""
Score conversion — raw engagement counts → one comparable score ("points").

Formula:
  score = views × 0.01 + likes × 0.5 + shares × 1.0

Shares count 100× more than views and 2× more than likes. The conversion is
linear and order-independent, so it can be recomputed at any time.

All arithmetic is Decimal so that downstream share/earnings math stays exact.
"""

import logging
from decimal import Decimal
from typing import NamedTuple, Sequence

from models.schemas import PointsBreakdown, SubmissionInput

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Point multipliers
# ---------------------------------------------------------------------------
VIEW_POINT_MULTIPLIER = Decimal("0.01")
LIKE_POINT_MULTIPLIER = Decimal("0.5")
SHARE_POINT_MULTIPLIER = Decimal("1.0")


class ScoreWeights(NamedTuple):
    views: Decimal
    likes: Decimal
    shares: Decimal


DEFAULT_WEIGHTS = ScoreWeights(
    views=VIEW_POINT_MULTIPLIER,
    likes=LIKE_POINT_MULTIPLIER,
    shares=SHARE_POINT_MULTIPLIER,
)


def calculate_points(
    views: int,
    likes: int,
    shares: int,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> PointsBreakdown:
    """
    Convert one submission's engagement counts into weighted points.

    Args:
        views, likes, shares: Raw counts from the caller's metrics snapshot
        weights:              Per-metric multipliers

    Returns:
        PointsBreakdown with the per-metric points and their total.

    Raises:
        ValueError: If any count is negative. Counts come from the caller,
                    so a negative value is an upstream validation bug.
    """
    for name, value in (("views", views), ("likes", likes), ("shares", shares)):
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")

    view_points = views * weights.views
    like_points = likes * weights.likes
    share_points = shares * weights.shares

    return PointsBreakdown(
        view_points=view_points,
        like_points=like_points,
        share_points=share_points,
        total_points=view_points + like_points + share_points,
    )


def calculate_score(
    views: int,
    likes: int,
    shares: int,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> Decimal:
    """Total points only."""
    return calculate_points(views, likes, shares, weights).total_points


def score_submissions(
    submissions: Sequence[SubmissionInput],
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[tuple[SubmissionInput, PointsBreakdown]]:
    """Score every submission, preserving input order."""
    scored = []
    for sub in submissions:
        points = calculate_points(sub.views, sub.likes, sub.shares, weights)
        scored.append((sub, points))
        logger.debug(
            f"  [{sub.submission_id}] views={sub.views:,} likes={sub.likes:,} "
            f"shares={sub.shares:,} → {points.total_points} pts"
        )
    return scored


def campaign_totals(
    scored: Sequence[tuple[SubmissionInput, PointsBreakdown]],
) -> tuple[int, Decimal, int]:
    """
    Aggregate campaign-level totals used by the performance gate.

    Returns:
        (submission_count, total_points, total_views)
    """
    total_points = sum((p.total_points for _, p in scored), Decimal("0"))
    total_views = sum(sub.views for sub, _ in scored)
    return len(scored), total_points, total_views
