"""Manual profit/loss overrides for a calendar month."""

from __future__ import annotations

import enum
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class ManualPLMode(str, enum.Enum):
    """How a manual entry expresses the month's result."""

    DIRECT = "direct"
    DERIVED = "derived"


class ManualPL(SQLModel):
    """User-entered replacement for one month's computed figures.

    At most one entry exists per (month, year). Either ``profit_loss`` is set
    (direct mode) or ``income``/``expenses`` are (derived mode). If both are
    present the direct figure wins.
    """

    id: Optional[UUID] = Field(default=None)
    month: int = Field(ge=1, le=12)
    year: int
    profit_loss: Optional[float] = Field(default=None)
    income: Optional[float] = Field(default=None)
    expenses: Optional[float] = Field(default=None)
    investments: float = Field(default=0.0)
    note: str = Field(default="")

    @classmethod
    def direct(
        cls, *, month: int, year: int, profit_loss: float, investments: float = 0.0, note: str = ""
    ) -> "ManualPL":
        return cls(month=month, year=year, profit_loss=profit_loss, investments=investments, note=note)

    @classmethod
    def derived(
        cls,
        *,
        month: int,
        year: int,
        income: float,
        expenses: float,
        investments: float = 0.0,
        note: str = "",
    ) -> "ManualPL":
        return cls(
            month=month, year=year, income=income, expenses=expenses, investments=investments, note=note
        )

    @property
    def mode(self) -> ManualPLMode:
        return ManualPLMode.DIRECT if self.profit_loss is not None else ManualPLMode.DERIVED

    @property
    def period(self) -> tuple[int, int]:
        return self.year, self.month

    @property
    def effective_income(self) -> float:
        return self.income if self.income is not None else 0.0

    @property
    def effective_expenses(self) -> float:
        return self.expenses if self.expenses is not None else 0.0

    @property
    def effective_profit_loss(self) -> float:
        if self.profit_loss is not None:
            return self.profit_loss
        return self.effective_income - self.effective_expenses
