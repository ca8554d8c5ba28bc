"""
Pydantic models for the Campaign Payout Engine.

Models:
  - SubmissionInput: One creator submission with raw engagement counts and the
                     last confirmed (persisted) payout figures
  - CampaignInput: A campaign aggregate — budget, commission, tier, submissions
  - PointsBreakdown: Weighted score for one submission, split by metric
  - BudgetSplit: Gross budget → platform commission + net creator pool
  - InsuranceThresholds / InsuranceCheckResult: Performance gate config + verdict
  - ShareAllocation: Robin Hood output for one participant (unrounded)
  - SubmissionResult / DistributionResult: Final per-submission and
                     campaign-level output of a distribution run
  - ApproximateEarnings: Live estimate next to the confirmed figure
  - API request/response models

All money, score and share values are Decimal. Share percents are fractions
in [0, 1], not 0–100.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Inputs (assembled fresh by the caller on every invocation)
# ---------------------------------------------------------------------------
class SubmissionInput(BaseModel):
    submission_id: str
    creator_id: str
    views: int = Field(default=0, ge=0)
    likes: int = Field(default=0, ge=0)
    shares: int = Field(default=0, ge=0)
    # Last finalized reconciliation (persisted by the caller, echoed untouched)
    confirmed_earnings: Decimal = Field(default=Decimal("0"), ge=0)
    confirmed_share_percent: Decimal = Field(default=Decimal("0"), ge=0, le=1)
    confirmed_at: Optional[datetime] = None


class CampaignInput(BaseModel):
    campaign_id: str
    title: str = ""
    gross_budget: Decimal = Field(ge=0)
    commission_percent: Decimal = Field(ge=0, le=100)
    tier: Optional[str] = None  # "C" | "B" | "A" | "S"; None → gross budget bracket
    submissions: list[SubmissionInput] = []


# ---------------------------------------------------------------------------
# Intermediate results
# ---------------------------------------------------------------------------
class PointsBreakdown(BaseModel):
    view_points: Decimal = Decimal("0")
    like_points: Decimal = Decimal("0")
    share_points: Decimal = Decimal("0")
    total_points: Decimal = Decimal("0")


class BudgetSplit(BaseModel):
    gross_budget: Decimal
    commission_percent: Decimal
    commission_amount: Decimal = Decimal("0")
    net_pool: Decimal = Decimal("0")
    multiplier: Decimal = Decimal("0")
    valid: bool = True


class InsuranceThresholds(BaseModel):
    min_submissions: int
    min_points: int
    min_views: int


class InsuranceCheckResult(BaseModel):
    passed: bool
    failed_checks: list[str] = []


# ---------------------------------------------------------------------------
# ShareAllocation — Robin Hood output for one participant
#
# earnings_amount is NOT rounded here; rounding happens once, when the
# distribution result is assembled.
# ---------------------------------------------------------------------------
class ShareAllocation(BaseModel):
    submission_id: str
    score: Decimal
    share_percent: Decimal
    earnings_amount: Decimal
    capped: bool = False


# ---------------------------------------------------------------------------
# Final output
# ---------------------------------------------------------------------------
class DistributionOutcome(str, Enum):
    DISTRIBUTED = "DISTRIBUTED"
    INSURANCE_REFUND = "INSURANCE_REFUND"
    INSURANCE_REFUND_NO_ELIGIBLE = "INSURANCE_REFUND_NO_ELIGIBLE"


class SubmissionResult(BaseModel):
    submission_id: str
    creator_id: str
    views: int = 0
    likes: int = 0
    shares: int = 0
    score: Decimal = Decimal("0")
    eligible: bool = False
    ineligible_reason: Optional[str] = None
    share_percent: Decimal = Decimal("0")
    earnings_amount: Decimal = Decimal("0")  # rounded to cents


class DistributionResult(BaseModel):
    campaign_id: str
    outcome: DistributionOutcome
    gross_budget: Decimal
    commission_amount: Decimal
    net_pool: Decimal
    gate_passed: bool
    failed_checks: list[str] = []
    total_submissions: int = 0
    eligible_submissions: int = 0
    total_points: Decimal = Decimal("0")
    total_views: int = 0
    # Only set when the insurance path is taken
    refund_amount: Optional[Decimal] = None
    platform_retained: Optional[Decimal] = None
    submissions: list[SubmissionResult] = []


class ApproximateEarnings(BaseModel):
    submission_id: str
    approximate_earnings: Decimal
    approximate_share_percent: Decimal
    confirmed_earnings: Decimal
    confirmed_share_percent: Decimal
    confirmed_at: Optional[datetime] = None
    differs_from_confirmed: bool


# ---------------------------------------------------------------------------
# API request / response models
# ---------------------------------------------------------------------------
class SnapshotDistributeRequest(BaseModel):
    campaign_id: str
    title: str = ""
    gross_budget: Decimal = Field(ge=0)
    commission_percent: Decimal = Field(ge=0, le=100)
    tier: Optional[str] = None
    snapshot_csv: str


class DistributeResponse(BaseModel):
    status: str
    filename: str
    result: DistributionResult


class EstimateResponse(BaseModel):
    status: str
    campaign_id: str
    estimates: list[ApproximateEarnings]


class TierInfo(BaseModel):
    tier: str
    min_budget: Decimal
    max_budget: Decimal
    commission_percent: int
    duration_days: int
    thresholds: InsuranceThresholds
