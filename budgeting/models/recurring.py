"""
Recurring Item Models

Subscriptions and payments repeat monthly from their start date. Only the
item itself is stored; dated occurrences are projected on demand
(see budgeting.recurring.projection).
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from budgeting.models.budget import utc_now


class RecurringKind(str, Enum):
    SUBSCRIPTION = "subscription"
    PAYMENT = "payment"


class SubscriptionCategory(str, Enum):
    """Categories for subscriptions."""
    VIDEO_STREAMING = "video_streaming"
    MUSIC = "music"
    SOFTWARE = "software"
    CLOUD_STORAGE = "cloud_storage"
    GAMING = "gaming"
    NEWS = "news"
    FITNESS = "fitness"
    EDUCATION = "education"
    OTHER = "other"


class PaymentCategory(str, Enum):
    """Categories for recurring payments."""
    RENT = "rent"
    UTILITIES = "utilities"
    LOAN = "loan"
    INSURANCE = "insurance"
    PHONE = "phone"
    INTERNET = "internet"
    TRANSPORT = "transport"
    EDUCATION = "education"
    OTHER = "other"


class TimePeriod(str, Enum):
    """Windows occurrences can be projected into."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class RecurringItem(BaseModel):
    """
    Common fields of subscriptions and payments.

    Cadence is always monthly, anchored on start_date.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique item ID"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What is being paid for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount charged each month"
    )
    start_date: date = Field(
        ...,
        description="First occurrence; later ones fall on the same day of month"
    )
    created_at: datetime = Field(default_factory=utc_now)


class Subscription(RecurringItem):
    kind: Literal["subscription"] = "subscription"
    category: SubscriptionCategory = SubscriptionCategory.OTHER


class Payment(RecurringItem):
    kind: Literal["payment"] = "payment"
    category: PaymentCategory = PaymentCategory.OTHER


AnyRecurringItem = Union[Subscription, Payment]


class Occurrence(BaseModel):
    """One projected occurrence of a recurring item."""

    item_id: UUID
    kind: RecurringKind
    description: str
    category: str
    amount: Decimal
    date: date


def recurring_item_from_dict(data: dict) -> AnyRecurringItem:
    """Rebuild a Subscription or Payment from its dumped form."""
    data = dict(data)
    kind = RecurringKind(data.pop("kind", RecurringKind.SUBSCRIPTION))
    if kind == RecurringKind.PAYMENT:
        return Payment(**data)
    return Subscription(**data)
