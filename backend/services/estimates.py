"""
Live earnings estimates between reconciliation runs.

The approximate figure uses the raw proportional share with a single clip at
the Robin Hood cap (no iterative redistribution) — good enough for a
provisional number. The confirmed figure from the last finalized run is
returned alongside, untouched, so the caller can show "your earnings may
still change" without overwriting the settled number.
"""

import logging
from decimal import Decimal

from models.schemas import ApproximateEarnings, BudgetSplit, CampaignInput, SubmissionInput
from services.allocation import MAX_SHARE_PERCENT
from services.budget import round_currency, split_budget
from services.scoring import campaign_totals, score_submissions

logger = logging.getLogger(__name__)

SHARE_PRECISION = Decimal("0.0001")


def calculate_approximate_earnings(
    submission: SubmissionInput,
    score: Decimal,
    total_score: Decimal,
    split: BudgetSplit,
) -> ApproximateEarnings:
    """
    Estimate one submission's earnings from current metrics.

    Args:
        submission:  The submission (its confirmed figures are echoed back)
        score:       Its current score
        total_score: The campaign's current total score
        split:       Budget split for the campaign

    Returns:
        ApproximateEarnings with approximate + confirmed figures and a flag
        telling whether they differ.
    """
    if total_score <= 0 or score <= 0:
        share = Decimal("0")
    else:
        share = min(score / total_score, MAX_SHARE_PERCENT)

    approximate_earnings = round_currency(split.net_pool * share)

    differs = (
        approximate_earnings != round_currency(submission.confirmed_earnings)
        or share.quantize(SHARE_PRECISION)
        != submission.confirmed_share_percent.quantize(SHARE_PRECISION)
    )

    return ApproximateEarnings(
        submission_id=submission.submission_id,
        approximate_earnings=approximate_earnings,
        approximate_share_percent=share,
        confirmed_earnings=submission.confirmed_earnings,
        confirmed_share_percent=submission.confirmed_share_percent,
        confirmed_at=submission.confirmed_at,
        differs_from_confirmed=differs,
    )


def estimate_campaign(campaign: CampaignInput) -> list[ApproximateEarnings]:
    """Estimates for every submission of a campaign, in input order."""
    split = split_budget(campaign.gross_budget, campaign.commission_percent)
    scored = score_submissions(campaign.submissions)
    _, total_points, _ = campaign_totals(scored)

    estimates = [
        calculate_approximate_earnings(sub, points.total_points, total_points, split)
        for sub, points in scored
    ]

    changed = sum(1 for e in estimates if e.differs_from_confirmed)
    logger.info(
        f"Estimates for campaign {campaign.campaign_id}: "
        f"{len(estimates)} submissions, {changed} differ from confirmed"
    )
    return estimates
