"""Tests for recurring occurrence projection."""

import pytest
from datetime import date
from decimal import Decimal

from budgeting.models.recurring import (
    Payment,
    PaymentCategory,
    RecurringKind,
    Subscription,
    SubscriptionCategory,
    TimePeriod,
)
from budgeting.recurring.projection import (
    monthly_total,
    occurrences_in_period,
    period_window,
    project_occurrences,
    total_amount,
)


def make_subscription(start: date, amount: str = "10.00", description: str = "Music") -> Subscription:
    return Subscription(
        description=description,
        amount=Decimal(amount),
        start_date=start,
        category=SubscriptionCategory.MUSIC,
    )


class TestPeriodWindow:

    def test_month_window(self):
        assert period_window(TimePeriod.MONTH, date(2026, 2, 14)) == (
            date(2026, 2, 1),
            date(2026, 2, 28),
        )

    def test_month_window_leap_year(self):
        assert period_window(TimePeriod.MONTH, date(2028, 2, 3))[1] == date(2028, 2, 29)

    def test_year_window(self):
        assert period_window(TimePeriod.YEAR, date(2026, 7, 4)) == (
            date(2026, 1, 1),
            date(2026, 12, 31),
        )

    def test_week_window_starts_monday(self):
        # 2026-10-21 is a Wednesday
        assert period_window(TimePeriod.WEEK, date(2026, 10, 21)) == (
            date(2026, 10, 19),
            date(2026, 10, 25),
        )

    def test_week_window_starts_sunday(self):
        assert period_window(TimePeriod.WEEK, date(2026, 10, 21), week_start=6) == (
            date(2026, 10, 18),
            date(2026, 10, 24),
        )

    def test_week_window_on_start_day(self):
        start, end = period_window(TimePeriod.WEEK, date(2026, 10, 19))
        assert start == date(2026, 10, 19)
        assert end == date(2026, 10, 25)

    def test_period_accepts_string_value(self):
        assert period_window("month", date(2026, 4, 9)) == (date(2026, 4, 1), date(2026, 4, 30))

    def test_invalid_week_start(self):
        with pytest.raises(ValueError):
            period_window(TimePeriod.WEEK, date(2026, 1, 1), week_start=7)


class TestProjectOccurrences:

    def test_single_occurrence_in_month(self):
        item = make_subscription(date(2026, 1, 15))
        occurrences = project_occurrences(item, date(2026, 3, 1), date(2026, 3, 31))
        assert [o.date for o in occurrences] == [date(2026, 3, 15)]
        assert occurrences[0].kind == RecurringKind.SUBSCRIPTION
        assert occurrences[0].category == "music"
        assert occurrences[0].item_id == item.id

    def test_start_date_itself_is_an_occurrence(self):
        item = make_subscription(date(2026, 3, 10))
        occurrences = project_occurrences(item, date(2026, 3, 1), date(2026, 3, 31))
        assert [o.date for o in occurrences] == [date(2026, 3, 10)]

    def test_nothing_before_start_date(self):
        item = make_subscription(date(2026, 3, 20))
        assert project_occurrences(item, date(2026, 3, 1), date(2026, 3, 19)) == []

    def test_start_after_window(self):
        item = make_subscription(date(2027, 1, 1))
        assert project_occurrences(item, date(2026, 1, 1), date(2026, 12, 31)) == []

    def test_year_window_from_mid_year_start(self):
        item = make_subscription(date(2026, 5, 5))
        occurrences = project_occurrences(item, date(2026, 1, 1), date(2026, 12, 31))
        assert [o.date.month for o in occurrences] == [5, 6, 7, 8, 9, 10, 11, 12]
        assert all(o.date.day == 5 for o in occurrences)

    def test_full_year_of_occurrences(self):
        item = make_subscription(date(2020, 6, 12))
        occurrences = project_occurrences(item, date(2026, 1, 1), date(2026, 12, 31))
        assert len(occurrences) == 12

    def test_month_end_start_clamps_without_drift(self):
        item = make_subscription(date(2026, 1, 31))
        occurrences = project_occurrences(item, date(2026, 1, 1), date(2026, 5, 31))
        assert [o.date for o in occurrences] == [
            date(2026, 1, 31),
            date(2026, 2, 28),
            date(2026, 3, 31),
            date(2026, 4, 30),
            date(2026, 5, 31),
        ]

    def test_leap_day_start(self):
        item = make_subscription(date(2028, 2, 29))
        occurrences = project_occurrences(item, date(2029, 2, 1), date(2029, 3, 31))
        assert [o.date for o in occurrences] == [date(2029, 2, 28), date(2029, 3, 29)]

    def test_week_without_occurrence(self):
        item = make_subscription(date(2026, 1, 15))
        assert project_occurrences(item, date(2026, 10, 19), date(2026, 10, 25)) == []

    def test_single_day_window(self):
        item = make_subscription(date(2026, 1, 15))
        occurrences = project_occurrences(item, date(2026, 8, 15), date(2026, 8, 15))
        assert [o.date for o in occurrences] == [date(2026, 8, 15)]

    def test_inverted_range_rejected(self):
        item = make_subscription(date(2026, 1, 15))
        with pytest.raises(ValueError):
            project_occurrences(item, date(2026, 2, 1), date(2026, 1, 1))


class TestAggregation:

    def test_occurrences_in_period_sorted_and_summed(self):
        items = [
            make_subscription(date(2026, 1, 20), "15.00", "Video"),
            make_subscription(date(2026, 1, 3), "5.50", "News"),
            Payment(
                description="Rent",
                amount=Decimal("900.00"),
                start_date=date(2025, 12, 1),
                category=PaymentCategory.RENT,
            ),
        ]
        occurrences = occurrences_in_period(items, TimePeriod.MONTH, date(2026, 4, 10))

        assert [o.description for o in occurrences] == ["Rent", "News", "Video"]
        assert total_amount(occurrences) == Decimal("920.50")

    def test_total_equals_sum_of_occurrence_amounts(self):
        item = make_subscription(date(2026, 3, 1), "7.25")
        occurrences = occurrences_in_period([item], TimePeriod.YEAR, date(2026, 6, 1))
        assert len(occurrences) == 10
        assert total_amount(occurrences) == Decimal("72.50")

    def test_total_of_nothing_is_zero(self):
        assert total_amount([]) == Decimal("0")

    def test_monthly_total(self):
        items = [
            make_subscription(date(2026, 1, 1), "9.99"),
            make_subscription(date(2030, 1, 1), "0.01"),
        ]
        assert monthly_total(items) == Decimal("10.00")
