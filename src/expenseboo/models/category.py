"""Expense category definitions."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class Category(SQLModel):
    """Category soft-referenced by expenses, investments and subscriptions."""

    id: Optional[UUID] = Field(default=None)
    name: str = Field(max_length=64)
    color: str = Field(default="#007AFF", max_length=7)
