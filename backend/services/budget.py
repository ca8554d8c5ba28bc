"""
Budget splitting and refund amounts.

  net_pool          = gross_budget × (100 − commission_percent) / 100
  multiplier        = (100 − commission_percent) / 100
  commission_amount = gross_budget − net_pool

commission_amount + net_pool == gross_budget holds exactly because both are
Decimal and commission_amount is derived by subtraction.

Refund percents (money movement itself is the caller's job):
  insurance refund      → 95% of gross budget, platform retains 5%
  sponsor cancellation  → 100%
  admin rejection       → 100%
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from models.schemas import BudgetSplit

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

INSURANCE_REFUND_PERCENT = Decimal("0.95")
CANCELLATION_REFUND_PERCENT = Decimal("1.00")
REJECTION_REFUND_PERCENT = Decimal("1.00")


def split_budget(gross_budget, commission_percent) -> BudgetSplit:
    """
    Divide a campaign's gross budget into platform commission and net pool.

    Never raises: a negative budget or a commission outside [0, 100] yields a
    zero split with valid=False. Callers are expected to validate first.
    """
    gross = Decimal(str(gross_budget))
    commission = Decimal(str(commission_percent))

    if gross < 0 or commission < 0 or commission > HUNDRED:
        logger.warning(
            f"Invalid budget split input: gross_budget={gross}, "
            f"commission_percent={commission}"
        )
        return BudgetSplit(
            gross_budget=gross,
            commission_percent=commission,
            valid=False,
        )

    multiplier = (HUNDRED - commission) / HUNDRED
    net_pool = gross * (HUNDRED - commission) / HUNDRED

    return BudgetSplit(
        gross_budget=gross,
        commission_percent=commission,
        commission_amount=gross - net_pool,
        net_pool=net_pool,
        multiplier=multiplier,
    )


def insurance_refund(gross_budget) -> tuple[Decimal, Decimal]:
    """Returns (refund_to_sponsor, platform_retained) for a failed gate."""
    gross = Decimal(str(gross_budget))
    refund = round_currency(gross * INSURANCE_REFUND_PERCENT)
    return refund, gross - refund


def cancellation_refund(gross_budget) -> Decimal:
    return round_currency(Decimal(str(gross_budget)) * CANCELLATION_REFUND_PERCENT)


def rejection_refund(gross_budget) -> Decimal:
    return round_currency(Decimal(str(gross_budget)) * REJECTION_REFUND_PERCENT)


def round_currency(amount: Decimal) -> Decimal:
    """Quantize to cents. Only applied when results leave the engine."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
