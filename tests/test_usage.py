"""
Tests for the Zeabur usage engine.
"""

from datetime import date

import pytest

from cloudmon.connect.base import UsageSummary
from cloudmon.usage import display_cost, summarize_usage, usage_window


class TestUsageWindow:
    """Tests for the billing window."""

    def test_mid_month(self):
        assert usage_window(date(2026, 10, 19)) == ("2026-10-01", "2026-10-20")

    def test_end_of_year_rolls_over(self):
        assert usage_window(date(2026, 12, 31)) == ("2026-12-01", "2027-01-01")

    def test_first_of_month(self):
        assert usage_window(date(2026, 3, 1)) == ("2026-03-01", "2026-03-02")


class TestDisplayCost:
    """Tests for per-project display rounding."""

    def test_rounds_up_to_cent(self):
        assert display_cost(12.344) == 12.35
        assert display_cost(7.001) == 7.01

    def test_exact_cents_not_bumped(self):
        assert display_cost(1.1) == 1.1
        assert display_cost(0.29) == 0.29

    def test_zero_and_negative(self):
        assert display_cost(0) == 0
        assert display_cost(-0.5) == 0


class TestSummarizeUsage:
    """Tests for summarize_usage."""

    def test_rounds_display_but_not_total(self):
        rows = [
            {"id": "p1", "usageOfEntity": [10.0, 2.344]},
            {"id": "p2", "usageOfEntity": [0, 0, 0]},
            {"id": "p3", "usageOfEntity": [7.001]},
        ]
        summary = summarize_usage(rows)

        assert summary.project_costs == {"p1": 12.35, "p2": 0, "p3": 7.01}
        assert summary.total_usage == pytest.approx(19.345)
        assert summary.free_quota_limit == 5.0
        assert summary.free_quota_remaining == pytest.approx(-14.345)

    def test_negative_remaining_credit(self):
        summary = summarize_usage([{"id": "p1", "usageOfEntity": [6.0]}])
        assert summary.free_quota_remaining == pytest.approx(-1.0)
        assert summary.credit_cents == -100

    def test_malformed_rows_ignored(self):
        rows = [
            "garbage",
            {"id": "p1", "usageOfEntity": None},
            {"id": "p2", "usageOfEntity": [1.0, None, "x", 0.5]},
        ]
        summary = summarize_usage(rows)
        assert summary.project_costs == {"p1": 0, "p2": 1.5}
        assert summary.total_usage == pytest.approx(1.5)

    def test_no_rows(self):
        summary = summarize_usage(None)
        assert summary.total_usage == 0
        assert summary.free_quota_remaining == 5.0

    def test_zero_summary(self):
        zero = UsageSummary.zero(5.0)
        assert zero.to_dict() == {
            "projectCosts": {},
            "totalUsage": 0.0,
            "freeQuotaRemaining": 5.0,
            "freeQuotaLimit": 5.0,
        }
        assert zero.credit_cents == 500
