"""Saving goal definitions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class SavingGoal(SQLModel):
    """A dated saving target, or the single generic "save this much per period" goal.

    ``current_amount`` is the committed progress. ``monthly_contributions`` holds
    provisional amounts keyed by ``YYYY-MM`` that are still open to recomputation
    until the month closes and they are solidified into ``current_amount``.
    """

    id: Optional[UUID] = Field(default=None)
    name: str
    target_amount: float
    current_amount: float = Field(default=0.0)
    target_date: datetime
    is_generic: bool = Field(default=False)
    monthly_contributions: dict[str, float] = Field(default_factory=dict)

    @property
    def progress(self) -> float:
        """Committed progress in [0, 1]; 0 when the target is not positive."""

        if self.target_amount <= 0:
            return 0.0
        return max(0.0, min(self.current_amount / self.target_amount, 1.0))

    @property
    def remaining_amount(self) -> float:
        return max(self.target_amount - self.current_amount, 0.0)

    @property
    def pending_contribution(self) -> float:
        """Provisional amounts not yet committed to ``current_amount``."""

        return sum(self.monthly_contributions.values())

    def days_remaining(self, now: datetime) -> int:
        return max((self.target_date.date() - now.date()).days, 0)

    def daily_saving_needed(self, now: datetime) -> float:
        days = self.days_remaining(now)
        if days <= 0:
            return self.remaining_amount
        return self.remaining_amount / days

    def accepts_contributions(self, now: datetime) -> bool:
        """Dated goal still open: target date not passed and not yet reached."""

        return not self.is_generic and self.target_date >= now and self.progress < 1.0
