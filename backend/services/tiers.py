"""
Campaign tiers and insurance threshold configuration.

Tier table (gross budget brackets):
  C   20,000 –    39,999.99   20% commission   7 days
  B   40,000 –    69,999.99   15% commission  14 days
  A   70,000 –    99,999.99   12% commission  21 days
  S  100,000 – 1,000,000      10% commission  30 days

Insurance thresholds (ALL THREE must be met for a normal distribution):
  C    3 submissions      500 points      50,000 views
  B    5 submissions    2,000 points     200,000 views
  A    8 submissions    5,000 points     500,000 views
  S   15 submissions   15,000 points   1,500,000 views

Thresholds are a lookup table so they can be tuned without touching the
gate or the allocator.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import NamedTuple, Optional, Union

from models.schemas import InsuranceThresholds, TierInfo

logger = logging.getLogger(__name__)

MIN_BUDGET = Decimal("20000")
MAX_BUDGET = Decimal("1000000")


class CampaignTier(str, Enum):
    C = "C"
    B = "B"
    A = "A"
    S = "S"


class TierConfig(NamedTuple):
    min_budget: Decimal
    max_budget: Decimal
    commission_percent: int
    duration_days: int
    thresholds: InsuranceThresholds


TIER_CONFIG: dict[CampaignTier, TierConfig] = {
    CampaignTier.C: TierConfig(
        Decimal("20000"), Decimal("39999.99"), 20, 7,
        InsuranceThresholds(min_submissions=3, min_points=500, min_views=50_000),
    ),
    CampaignTier.B: TierConfig(
        Decimal("40000"), Decimal("69999.99"), 15, 14,
        InsuranceThresholds(min_submissions=5, min_points=2_000, min_views=200_000),
    ),
    CampaignTier.A: TierConfig(
        Decimal("70000"), Decimal("99999.99"), 12, 21,
        InsuranceThresholds(min_submissions=8, min_points=5_000, min_views=500_000),
    ),
    CampaignTier.S: TierConfig(
        Decimal("100000"), MAX_BUDGET, 10, 30,
        InsuranceThresholds(min_submissions=15, min_points=15_000, min_views=1_500_000),
    ),
}

# Highest bracket first
_BRACKET_ORDER = [CampaignTier.S, CampaignTier.A, CampaignTier.B, CampaignTier.C]


def get_tier_from_budget(budget) -> Optional[CampaignTier]:
    """Bracket lookup. None below MIN_BUDGET. Budgets above MAX_BUDGET stay S."""
    amount = Decimal(str(budget))
    if amount < MIN_BUDGET:
        return None
    for tier in _BRACKET_ORDER:
        if amount >= TIER_CONFIG[tier].min_budget:
            return tier
    return None


def parse_tier(value) -> Optional[CampaignTier]:
    if isinstance(value, CampaignTier):
        return value
    try:
        return CampaignTier(str(value).strip().upper())
    except ValueError:
        return None


def get_commission_for_tier(tier: CampaignTier) -> int:
    return TIER_CONFIG[tier].commission_percent


def get_duration_for_tier(tier: CampaignTier) -> int:
    return TIER_CONFIG[tier].duration_days


def resolve_thresholds(
    tier_or_budget: Union[str, CampaignTier, Decimal, int, float, None],
) -> Optional[InsuranceThresholds]:
    """
    Select gate thresholds by declared tier (string/enum) or by budget bracket
    (number). Returns None when neither resolves — the gate treats that as a
    failure, never as a pass.
    """
    if tier_or_budget is None or isinstance(tier_or_budget, bool):
        return None

    if isinstance(tier_or_budget, (str, CampaignTier)):
        tier = parse_tier(tier_or_budget)
    else:
        tier = get_tier_from_budget(tier_or_budget)

    if tier is None:
        logger.debug(f"No tier/bracket for {tier_or_budget!r}")
        return None
    return TIER_CONFIG[tier].thresholds


def list_tiers() -> list[TierInfo]:
    """Tier table in ascending order, for display."""
    return [
        TierInfo(
            tier=tier.value,
            min_budget=cfg.min_budget,
            max_budget=cfg.max_budget,
            commission_percent=get_commission_for_tier(tier),
            duration_days=get_duration_for_tier(tier),
            thresholds=cfg.thresholds,
        )
        for tier, cfg in TIER_CONFIG.items()
    ]
