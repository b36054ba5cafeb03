"""Expense and investment records."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

SUBSCRIPTION_COMMENT_PREFIX = "Subscription: "


class Expense(SQLModel):
    """A single outflow counted against the budget period it falls in."""

    id: Optional[UUID] = Field(default=None)
    amount: float
    comment: str = Field(default="")
    occurred_at: datetime
    category_id: Optional[UUID] = Field(default=None)
    # Set when the expense was generated from a recurring subscription.
    source_subscription_id: Optional[UUID] = Field(default=None)

    @property
    def is_subscription_charge(self) -> bool:
        """True for materialized subscription charges, including legacy ones."""

        return self.source_subscription_id is not None or self.comment.startswith(
            SUBSCRIPTION_COMMENT_PREFIX.rstrip()
        )


class Investment(SQLModel):
    """Money moved into investments; tracked apart from expenses."""

    id: Optional[UUID] = Field(default=None)
    amount: float
    comment: str = Field(default="")
    occurred_at: datetime
    category_id: Optional[UUID] = Field(default=None)


def subscription_comment(name: str) -> str:
    """Human-readable label stored on materialized subscription charges."""

    return f"{SUBSCRIPTION_COMMENT_PREFIX}{name}"
