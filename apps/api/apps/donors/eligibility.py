"""
Donation eligibility rules.

A donor may give blood again DONATION_INTERVAL_MONTHS calendar months after
their most recent donation. A day that does not exist in the target month
rolls over into the following month:

    2024-01-31 -> 2024-05-01
    2023-11-30 -> 2024-03-01
    2024-12-31 -> 2025-03-31
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from django.utils import timezone

DONATION_INTERVAL_MONTHS = 3

DateLike = Union[date, str, None]


@dataclass(frozen=True)
class LedgerSummary:
    """Donor summary fields derived from the donation ledger."""
    date_of_last_donation: Optional[date]
    next_donation_date: Optional[date]


def coerce_date(value: DateLike) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def add_months(value: date, months: int) -> date:
    """
    Shift ``value`` by ``months`` calendar months.

    Days past the end of the target month carry into the next month
    (Jan 31 + 1 month -> Mar 2 or Mar 3).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1) + timedelta(days=value.day - 1)


def next_eligible_date(last_donation_date: DateLike) -> Optional[date]:
    """
    First date a donor may donate again.

    None when the donor has never donated (no restriction).
    """
    last = coerce_date(last_donation_date)
    if last is None:
        return None
    return add_months(last, DONATION_INTERVAL_MONTHS)


def is_eligible_now(next_donation_date: DateLike, today: Optional[date] = None) -> bool:
    """True if the eligibility window is absent or has elapsed by ``today``."""
    next_date = coerce_date(next_donation_date)
    if next_date is None:
        return True
    today = today or timezone.localdate()
    return next_date <= today


def summarize_ledger(donation_dates: Iterable[DateLike]) -> LedgerSummary:
    """Reduce a donor's ledger dates to the cached summary pair."""
    dates = [d for d in (coerce_date(v) for v in donation_dates) if d is not None]
    if not dates:
        return LedgerSummary(date_of_last_donation=None, next_donation_date=None)

    latest = max(dates)
    return LedgerSummary(
        date_of_last_donation=latest,
        next_donation_date=next_eligible_date(latest),
    )
