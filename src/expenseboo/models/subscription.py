"""Recurring monthly subscriptions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class Subscription(SQLModel):
    """A recurring monthly charge materialized once per budget period."""

    id: Optional[UUID] = Field(default=None)
    name: str
    amount: float
    category_id: Optional[UUID] = Field(default=None)
    is_active: bool = Field(default=True)
    start_date: datetime

    def is_due(self, now: datetime) -> bool:
        return self.is_active and self.start_date <= now
