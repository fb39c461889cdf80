"""
Recurring Occurrence Projection

Recurring items store only a start date. Their dated occurrences are
derived here, for whatever window is being looked at.

CADENCE: monthly. The n-th occurrence is start_date + n months, always
measured from start_date. An item starting on Jan 31 therefore occurs on
Feb 28 (or 29), Mar 31, Apr 30, ... and never drifts to the 28th.

Everything in this module is pure: no storage, no clock.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from dateutil.relativedelta import relativedelta

from budgeting.models.recurring import (
    AnyRecurringItem,
    Occurrence,
    RecurringKind,
    TimePeriod,
)


def period_window(
    period: TimePeriod,
    reference: date,
    week_start: int = 0,
) -> tuple[date, date]:
    """
    Inclusive (start, end) window of the given period containing reference.

    Args:
        period: week, month or year
        reference: any date inside the wanted window
        week_start: first weekday of a week (0 = Monday, 6 = Sunday)
    """
    period = TimePeriod(period)

    if period == TimePeriod.WEEK:
        if not 0 <= week_start <= 6:
            raise ValueError(f"week_start must be between 0 and 6, got {week_start}")
        offset = (reference.weekday() - week_start) % 7
        start = reference - timedelta(days=offset)
        return start, start + timedelta(days=6)

    if period == TimePeriod.MONTH:
        last_day = calendar.monthrange(reference.year, reference.month)[1]
        return reference.replace(day=1), reference.replace(day=last_day)

    return date(reference.year, 1, 1), date(reference.year, 12, 31)


def _months_between(earlier: date, later: date) -> int:
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def project_occurrences(
    item: AnyRecurringItem,
    date_from: date,
    date_to: date,
) -> list[Occurrence]:
    """
    Occurrences of item falling within [date_from, date_to], ascending.

    Raises:
        ValueError: if date_from is after date_to
    """
    if date_from > date_to:
        raise ValueError(
            f"Invalid range: {date_from.isoformat()} is after {date_to.isoformat()}"
        )

    if item.start_date > date_to:
        return []

    # Skip straight to the month before the window; earlier ones can't match
    n = max(0, _months_between(item.start_date, date_from) - 1)

    occurrences = []
    while True:
        occurs_on = item.start_date + relativedelta(months=n)
        if occurs_on > date_to:
            break
        if occurs_on >= date_from:
            occurrences.append(
                Occurrence(
                    item_id=item.id,
                    kind=RecurringKind(item.kind),
                    description=item.description,
                    category=item.category.value,
                    amount=item.amount,
                    date=occurs_on,
                )
            )
        n += 1

    return occurrences


def occurrences_in_period(
    items: Iterable[AnyRecurringItem],
    period: TimePeriod,
    reference: date,
    week_start: int = 0,
) -> list[Occurrence]:
    """All occurrences of items within the period around reference."""
    date_from, date_to = period_window(period, reference, week_start)

    occurrences = []
    for item in items:
        occurrences.extend(project_occurrences(item, date_from, date_to))

    occurrences.sort(key=lambda o: (o.date, o.description))
    return occurrences


def total_amount(occurrences: Iterable[Occurrence]) -> Decimal:
    """Sum of occurrence amounts."""
    return sum((o.amount for o in occurrences), Decimal("0"))


def monthly_total(items: Iterable[AnyRecurringItem]) -> Decimal:
    """What all items cost per month, independent of any window."""
    return sum((item.amount for item in items), Decimal("0"))
