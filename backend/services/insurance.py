"""
Performance gate ("insurance check").

Decides whether a campaign earned the right to distribute its creator pool.
Three dimensions are checked independently against the thresholds for the
campaign's tier (or budget bracket):

  submission_count >= min_submissions
  total_points     >= min_points
  total_views      >= min_views

Every failing dimension is reported, not just the first. An unrecognized
tier/bracket is reported as a single failure. Never raises — callers branch
on `passed`.
"""

import logging
from decimal import Decimal

from models.schemas import InsuranceCheckResult
from services.tiers import resolve_thresholds

logger = logging.getLogger(__name__)

UNKNOWN_TIER_REASON = "Unrecognized tier or budget bracket"


def check_insurance_thresholds(
    tier_or_budget,
    submission_count: int,
    total_points: Decimal,
    total_views: int,
) -> InsuranceCheckResult:
    """
    Run the insurance check.

    Args:
        tier_or_budget:   Declared tier ("C"/"B"/"A"/"S") or gross budget amount
        submission_count: Number of submissions in the campaign
        total_points:     Sum of all submission scores
        total_views:      Sum of all submission views

    Returns:
        InsuranceCheckResult(passed, failed_checks), e.g.
        failed_checks=["Submissions: 2/5", "Views: 8,000/200,000"]
    """
    thresholds = resolve_thresholds(tier_or_budget)
    if thresholds is None:
        reason = f"{UNKNOWN_TIER_REASON}: {tier_or_budget}"
        logger.warning(f"Insurance check failed: {reason}")
        return InsuranceCheckResult(passed=False, failed_checks=[reason])

    failed_checks: list[str] = []

    if submission_count < thresholds.min_submissions:
        failed_checks.append(
            f"Submissions: {submission_count}/{thresholds.min_submissions}"
        )
    if Decimal(str(total_points)) < thresholds.min_points:
        failed_checks.append(
            f"Points: {Decimal(str(total_points)):.0f}/{thresholds.min_points}"
        )
    if total_views < thresholds.min_views:
        failed_checks.append(
            f"Views: {total_views:,}/{thresholds.min_views:,}"
        )

    passed = not failed_checks
    logger.info(
        f"Insurance check ({tier_or_budget}): "
        f"submissions={submission_count}, points={total_points}, "
        f"views={total_views:,} → {'PASSED' if passed else 'FAILED'}"
        + (f" ({', '.join(failed_checks)})" if failed_checks else "")
    )

    return InsuranceCheckResult(passed=passed, failed_checks=failed_checks)
