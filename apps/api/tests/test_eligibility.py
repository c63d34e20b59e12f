"""
Tests for donation eligibility rules.

next_eligible_date = last donation + 3 calendar months. A day missing from the
target month rolls over into the next month (Jan 31 -> May 1).
"""
from datetime import date, datetime

import pytest

from apps.donors.eligibility import (
    DONATION_INTERVAL_MONTHS,
    LedgerSummary,
    add_months,
    coerce_date,
    is_eligible_now,
    next_eligible_date,
    summarize_ledger,
)


class TestNextEligibleDate:

    def test_interval_is_three_months(self):
        assert DONATION_INTERVAL_MONTHS == 3

    @pytest.mark.parametrize('last, expected', [
        (date(2024, 3, 15), date(2024, 6, 15)),
        (date(2024, 6, 1), date(2024, 9, 1)),
        (date(2024, 11, 10), date(2025, 2, 10)),
        (date(2024, 12, 31), date(2025, 3, 31)),
    ])
    def test_adds_three_calendar_months(self, last, expected):
        assert next_eligible_date(last) == expected

    @pytest.mark.parametrize('last, expected', [
        (date(2024, 1, 31), date(2024, 5, 1)),
        (date(2023, 11, 30), date(2024, 3, 1)),
        (date(2022, 11, 30), date(2023, 3, 2)),
        (date(2024, 3, 31), date(2024, 7, 1)),
        (date(2024, 5, 31), date(2024, 8, 31)),
    ])
    def test_month_end_rolls_over(self, last, expected):
        assert next_eligible_date(last) == expected

    def test_none_means_no_restriction(self):
        assert next_eligible_date(None) is None
        assert next_eligible_date('') is None

    def test_accepts_iso_string(self):
        assert next_eligible_date('2024-02-15') == date(2024, 5, 15)

    def test_accepts_datetime(self):
        assert next_eligible_date(datetime(2024, 2, 15, 10, 30)) == date(2024, 5, 15)

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            next_eligible_date('not-a-date')


class TestAddMonths:

    def test_negative_offset(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 3, 2)

    def test_crosses_year(self):
        assert add_months(date(2024, 10, 5), 15) == date(2026, 1, 5)

    def test_coerce_passthrough(self):
        assert coerce_date(date(2024, 1, 1)) == date(2024, 1, 1)
        assert coerce_date(None) is None


class TestIsEligibleNow:

    def test_never_donated_is_eligible(self):
        assert is_eligible_now(None, today=date(2024, 1, 1)) is True

    def test_window_not_elapsed(self):
        assert is_eligible_now(date(2024, 9, 1), today=date(2024, 8, 31)) is False

    def test_eligible_on_the_day(self):
        assert is_eligible_now(date(2024, 9, 1), today=date(2024, 9, 1)) is True

    def test_eligible_after(self):
        assert is_eligible_now('2024-09-01', today=date(2025, 1, 1)) is True


class TestSummarizeLedger:

    def test_empty_ledger(self):
        assert summarize_ledger([]) == LedgerSummary(None, None)

    def test_uses_latest_date_regardless_of_order(self):
        summary = summarize_ledger([date(2024, 6, 1), date(2024, 1, 10), date(2024, 3, 1)])
        assert summary.date_of_last_donation == date(2024, 6, 1)
        assert summary.next_donation_date == date(2024, 9, 1)

    def test_ignores_empty_values(self):
        summary = summarize_ledger([None, '2024-01-31', ''])
        assert summary == LedgerSummary(date(2024, 1, 31), date(2024, 5, 1))
