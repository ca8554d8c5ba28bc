"""
Tests for services/budget.py.

  1. BUDGET SPLIT: exact net pool / commission, sum invariant
  2. INVALID INPUT: valid=False, never raises
  3. REFUNDS: insurance 95/5, cancellation and rejection 100%
  4. ROUNDING
"""

import sys
import os
import pytest
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from services.budget import (
    split_budget,
    insurance_refund,
    cancellation_refund,
    rejection_refund,
    round_currency,
)


# ===========================================================================
# 1. BUDGET SPLIT
# ===========================================================================

class TestSplitBudget:

    def test_50k_at_15_percent(self):
        split = split_budget(50_000, 15)
        assert split.valid is True
        assert split.net_pool == Decimal("42500")
        assert split.commission_amount == Decimal("7500")
        assert split.multiplier == Decimal("0.85")

    @pytest.mark.parametrize("gross,commission", [
        (20_000, 20),
        (40_000, 15),
        (70_000, 12),
        (100_000, 10),
        ("33333.33", "12.5"),
        ("99999.99", "17"),
        (1_000_000, 0),
        (25_000, 100),
    ])
    def test_commission_plus_net_equals_gross(self, gross, commission):
        split = split_budget(gross, commission)
        assert split.commission_amount + split.net_pool == Decimal(str(gross))

    def test_zero_commission(self):
        split = split_budget(30_000, 0)
        assert split.net_pool == Decimal("30000")
        assert split.commission_amount == Decimal("0")

    def test_full_commission(self):
        split = split_budget(30_000, 100)
        assert split.net_pool == Decimal("0")
        assert split.commission_amount == Decimal("30000")

    def test_accepts_floats_without_binary_noise(self):
        split = split_budget(0.1, 10)
        assert split.gross_budget == Decimal("0.1")


# ===========================================================================
# 2. INVALID INPUT
# ===========================================================================

class TestSplitBudgetInvalid:

    @pytest.mark.parametrize("gross,commission", [
        (-1, 10),
        (10_000, -0.5),
        (10_000, 100.01),
        (10_000, 150),
    ])
    def test_invalid_flagged(self, gross, commission):
        split = split_budget(gross, commission)
        assert split.valid is False
        assert split.net_pool == Decimal("0")
        assert split.commission_amount == Decimal("0")


# ===========================================================================
# 3. REFUNDS
# ===========================================================================

class TestRefunds:

    def test_insurance_refund_40k(self):
        refund, retained = insurance_refund(40_000)
        assert refund == Decimal("38000.00")
        assert retained == Decimal("2000.00")

    def test_insurance_refund_sums_to_gross(self):
        refund, retained = insurance_refund("33333.33")
        assert refund + retained == Decimal("33333.33")

    def test_cancellation_full(self):
        assert cancellation_refund(25_000) == Decimal("25000.00")

    def test_rejection_full(self):
        assert rejection_refund("12345.67") == Decimal("12345.67")


# ===========================================================================
# 4. ROUNDING
# ===========================================================================

class TestRoundCurrency:

    @pytest.mark.parametrize("amount,expected", [
        ("1.005", "1.01"),
        ("1.004", "1.00"),
        ("9334.5142", "9334.51"),
        ("0", "0.00"),
    ])
    def test_half_up(self, amount, expected):
        assert round_currency(Decimal(amount)) == Decimal(expected)
