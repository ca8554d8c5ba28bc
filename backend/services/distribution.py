"""
Final distribution for one campaign.

Pipeline:
  1. split_budget(gross, commission)          → commission + net pool
  2. score_submissions + campaign_totals      → points per submission, totals
  3. check_insurance_thresholds               → gate (tier or budget bracket)
       FAILED → INSURANCE_REFUND (95% of gross back to sponsor, 5% retained)
  4. filter_eligible_submissions              → drop negligible entries
       none left → INSURANCE_REFUND_NO_ELIGIBLE (same refund split)
  5. compute_robin_hood_shares                → capped proportional shares
  6. Round earnings to cents, residual cent   → SubmissionResult per submission
     to the largest uncapped allocation

Pure: no I/O, no clock, no shared state. Persisting the result, crediting
wallets and moving refund money belong to the caller, which must also make
finalization idempotent per campaign.
"""

import logging
from decimal import Decimal

from models.schemas import (
    CampaignInput,
    DistributionOutcome,
    DistributionResult,
    ShareAllocation,
    SubmissionResult,
)
from services.allocation import compute_robin_hood_shares, find_duplicate_ids
from services.budget import insurance_refund, round_currency, split_budget
from services.eligibility import filter_eligible_submissions, ineligibility_reason
from services.insurance import check_insurance_thresholds
from services.scoring import campaign_totals, score_submissions

logger = logging.getLogger(__name__)

NO_ELIGIBLE_REASON = "No eligible submissions after threshold filter"


def run_distribution(campaign: CampaignInput) -> DistributionResult:
    """
    Run the full gate → eligibility → Robin Hood pipeline for a campaign.

    Returns:
        DistributionResult with campaign-level figures and one
        SubmissionResult per input submission (ineligible ones at zero).

    Raises:
        ValueError: If a submission_id appears more than once.
    """
    duplicates = find_duplicate_ids(s.submission_id for s in campaign.submissions)
    if duplicates:
        raise ValueError(f"Duplicate submission IDs: {', '.join(duplicates)}")

    logger.info(
        f"Distribution for campaign {campaign.campaign_id}: "
        f"gross={campaign.gross_budget}, commission={campaign.commission_percent}%, "
        f"tier={campaign.tier or 'budget bracket'}, "
        f"{len(campaign.submissions)} submissions"
    )

    # ------------------------------------------------------------------
    # Step 1: Budget split
    # ------------------------------------------------------------------
    split = split_budget(campaign.gross_budget, campaign.commission_percent)

    # ------------------------------------------------------------------
    # Step 2: Scores and totals
    # ------------------------------------------------------------------
    scored = score_submissions(campaign.submissions)
    submission_count, total_points, total_views = campaign_totals(scored)

    # ------------------------------------------------------------------
    # Step 3: Performance gate
    # ------------------------------------------------------------------
    gate_key = campaign.tier if campaign.tier is not None else campaign.gross_budget
    gate = check_insurance_thresholds(gate_key, submission_count, total_points, total_views)

    results: dict[str, SubmissionResult] = {}
    for sub, points in scored:
        reason = ineligibility_reason(points.total_points, total_points)
        results[sub.submission_id] = SubmissionResult(
            submission_id=sub.submission_id,
            creator_id=sub.creator_id,
            views=sub.views,
            likes=sub.likes,
            shares=sub.shares,
            score=points.total_points,
            eligible=reason is None,
            ineligible_reason=reason,
        )

    base = dict(
        campaign_id=campaign.campaign_id,
        gross_budget=split.gross_budget,
        commission_amount=split.commission_amount,
        net_pool=split.net_pool,
        gate_passed=gate.passed,
        total_submissions=submission_count,
        total_points=total_points,
        total_views=total_views,
    )

    if not gate.passed:
        return _insurance_result(
            base, DistributionOutcome.INSURANCE_REFUND, gate.failed_checks, results
        )

    # ------------------------------------------------------------------
    # Step 4: Eligibility
    # ------------------------------------------------------------------
    eligible = filter_eligible_submissions(
        [(sub.submission_id, points.total_points) for sub, points in scored],
        total_points,
    )
    if not eligible:
        return _insurance_result(
            base, DistributionOutcome.INSURANCE_REFUND_NO_ELIGIBLE,
            [NO_ELIGIBLE_REASON], results,
        )

    # ------------------------------------------------------------------
    # Step 5: Robin Hood over the eligible set
    # ------------------------------------------------------------------
    shares = compute_robin_hood_shares(eligible, split.net_pool)

    # ------------------------------------------------------------------
    # Step 6: Fill in results (rounding happens here, once)
    # ------------------------------------------------------------------
    earnings = _settle_rounding(shares, split.net_pool)
    for alloc in shares:
        res = results[alloc.submission_id]
        res.share_percent = alloc.share_percent
        res.earnings_amount = earnings[alloc.submission_id]

    result = DistributionResult(
        **base,
        outcome=DistributionOutcome.DISTRIBUTED,
        eligible_submissions=len(eligible),
        submissions=list(results.values()),
    )

    total_paid = sum((r.earnings_amount for r in result.submissions), Decimal("0"))
    logger.info(
        f"Campaign {campaign.campaign_id} DISTRIBUTED: "
        f"{len(eligible)}/{submission_count} eligible, "
        f"paid={total_paid} of net pool {split.net_pool}, "
        f"commission={split.commission_amount}"
    )
    return result


def _settle_rounding(
    shares: list[ShareAllocation],
    net_pool: Decimal,
) -> dict[str, Decimal]:
    """
    Round each allocation to cents so the payouts add up to the net pool
    (itself rounded to cents).

    The rounding residual (at most half a cent per allocation, either sign)
    goes to the largest uncapped allocation, so capped participants stay at
    exactly cap × net_pool. Ties go to the earlier allocation.
    """
    earnings = {a.submission_id: round_currency(a.earnings_amount) for a in shares}
    residual = round_currency(net_pool) - sum(earnings.values(), Decimal("0"))
    if residual == 0:
        return earnings

    candidates = [a for a in shares if not a.capped and a.earnings_amount > 0] or shares
    target = max(candidates, key=lambda a: a.earnings_amount)
    earnings[target.submission_id] += residual
    logger.debug(f"  Rounding residual {residual} assigned to {target.submission_id}")
    return earnings


def _insurance_result(
    base: dict,
    outcome: DistributionOutcome,
    failed_checks: list[str],
    results: dict[str, SubmissionResult],
) -> DistributionResult:
    """Insurance path: nothing distributed, sponsor refunded at 95%."""
    refund, retained = insurance_refund(base["gross_budget"])
    logger.info(
        f"Campaign {base['campaign_id']} {outcome.value}: "
        f"refund={refund}, platform retains {retained} "
        f"({', '.join(failed_checks)})"
    )
    return DistributionResult(
        **base,
        outcome=outcome,
        failed_checks=failed_checks,
        refund_amount=refund,
        platform_retained=retained,
        submissions=list(results.values()),
    )
