"""Income records."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class Income(SQLModel):
    """An inflow; ``is_monthly`` is a display label only."""

    id: Optional[UUID] = Field(default=None)
    amount: float
    occurred_at: datetime
    is_monthly: bool = Field(default=True)
