"""User settings governing period boundaries."""

from __future__ import annotations

import enum
from datetime import time

from sqlmodel import Field, SQLModel


class ResetType(str, enum.Enum):
    """Which day-of-month setting starts a new budget period."""

    PAY_DAY = "pay_day"
    MONTHLY_DATE = "monthly_date"

    @property
    def display_name(self) -> str:
        return {ResetType.PAY_DAY: "Pay Day", ResetType.MONTHLY_DATE: "Monthly Date"}[self]


class Currency(str, enum.Enum):
    """Display currency; amounts are never converted."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CHF = "CHF"
    CAD = "CAD"
    AUD = "AUD"

    @property
    def symbol(self) -> str:
        return _CURRENCY_SYMBOLS[self]


_CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.EUR: "€",
    Currency.GBP: "£",
    Currency.JPY: "¥",
    Currency.CHF: "CHF",
    Currency.CAD: "C$",
    Currency.AUD: "A$",
}


class Settings(SQLModel):
    """Global settings; changing them re-buckets every record on the next query."""

    reset_type: ResetType = Field(default=ResetType.PAY_DAY)
    pay_day: int = Field(default=1, ge=1, le=31)
    monthly_reset_date: int = Field(default=1, ge=1, le=31)
    notifications_enabled: bool = Field(default=False)
    daily_notification_time: time = Field(default=time(9, 0))
    currency: Currency = Field(default=Currency.USD)

    @property
    def reset_day(self) -> int:
        """Day of month the active reset policy starts a period on."""

        if self.reset_type == ResetType.MONTHLY_DATE:
            return self.monthly_reset_date
        return self.pay_day
