"""Current-period balance and monthly/yearly statistics."""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Protocol, TypeVar

from ..logging_config import get_logger
from ..models import Expense, Income, Investment, ManualPL
from .periods import current_period_window, in_window, month_bounds, period_display_label, period_start
from .store import TransactionStore

logger = get_logger(__name__)


class _Dated(Protocol):
    amount: float
    occurred_at: datetime


DatedT = TypeVar("DatedT", bound=_Dated)


@dataclass(slots=True)
class MonthlyStats:
    """Totals for one calendar month, after manual overrides."""

    month: int
    year: int
    income: float
    expenses: float
    investments: float
    profit_loss: float
    is_manual: bool = False

    @property
    def month_name(self) -> str:
        return calendar.month_abbr[self.month]

    @property
    def has_data(self) -> bool:
        return self.income > 0 or self.expenses > 0 or self.profit_loss != 0


@dataclass(slots=True)
class YearlyStats:
    """Roll-up of the twelve ``MonthlyStats`` of a year."""

    year: int
    total_income: float
    total_expenses: float
    total_investments: float
    total_profit_loss: float
    total_profit_loss_without_investments: float
    average_monthly_pl: float
    average_monthly_pl_without_investments: float
    best_month: str
    worst_month: str
    best_month_pl: float
    worst_month_pl: float


def _total(records: Iterable[_Dated]) -> float:
    return sum((r.amount for r in records), 0.0)


def _within(records: Iterable[DatedT], start: datetime, end: datetime) -> list[DatedT]:
    return [r for r in records if in_window(r.occurred_at, start, end)]


def _within_month(records: Iterable[DatedT], year: int, month: int) -> list[DatedT]:
    start, end = month_bounds(year, month)
    return [r for r in records if start <= r.occurred_at < end]


def current_period_expenses(store: TransactionStore, now: datetime) -> list[Expense]:
    """Expenses dated in ``[period_start(now), now]``."""

    start, end = current_period_window(now, store.settings)
    return _within(store.expenses, start, end)


def current_period_expense_total(store: TransactionStore, now: datetime) -> float:
    return _total(current_period_expenses(store, now))


def current_period_incomes(store: TransactionStore, now: datetime) -> list[Income]:
    start, end = current_period_window(now, store.settings)
    return _within(store.incomes, start, end)


def current_period_income(store: TransactionStore, now: datetime) -> float:
    return _total(current_period_incomes(store, now))


def current_period_investments(store: TransactionStore, now: datetime) -> list[Investment]:
    start, end = current_period_window(now, store.settings)
    return _within(store.investments, start, end)


def current_period_investment_total(store: TransactionStore, now: datetime) -> float:
    return _total(current_period_investments(store, now))


def current_balance(store: TransactionStore, now: datetime) -> float:
    """Current period income minus current period expenses."""

    return current_period_income(store, now) - current_period_expense_total(store, now)


def _override_stats(entry: ManualPL) -> MonthlyStats:
    return MonthlyStats(
        month=entry.month,
        year=entry.year,
        income=entry.effective_income,
        expenses=entry.effective_expenses,
        investments=entry.investments,
        profit_loss=entry.effective_profit_loss,
        is_manual=True,
    )


def stats_for_month(store: TransactionStore, month: int, year: int) -> MonthlyStats:
    """Calendar-month totals; a manual entry for the month replaces them entirely."""

    override: Optional[ManualPL] = store.manual_pls.for_month(month, year)
    if override is not None:
        return _override_stats(override)

    income = _total(_within_month(store.incomes, year, month))
    expenses = _total(_within_month(store.expenses, year, month))
    investments = _total(_within_month(store.investments, year, month))
    return MonthlyStats(
        month=month,
        year=year,
        income=income,
        expenses=expenses,
        investments=investments,
        profit_loss=income - expenses,
    )


def monthly_stats(store: TransactionStore, year: int) -> list[MonthlyStats]:
    return [stats_for_month(store, month, year) for month in range(1, 13)]


def yearly_stats(store: TransactionStore, year: int) -> YearlyStats:
    """Aggregate a year.

    Averages divide by the number of months with any activity. Best/worst
    months resolve ties to the earliest month.
    """

    months = monthly_stats(store, year)

    total_income = sum(m.income for m in months)
    total_expenses = sum(m.expenses for m in months)
    total_investments = sum(m.investments for m in months)
    total_profit_loss = sum(m.profit_loss for m in months)
    without_investments = total_profit_loss - total_investments

    active = [m for m in months if m.has_data]
    average = total_profit_loss / len(active) if active else 0.0
    average_without = without_investments / len(active) if active else 0.0

    # max/min return the first of equal elements
    best = max(months, key=lambda m: m.profit_loss)
    worst = min(months, key=lambda m: m.profit_loss)

    logger.debug("Computed yearly stats", extra={"year": year, "active_months": len(active)})
    return YearlyStats(
        year=year,
        total_income=total_income,
        total_expenses=total_expenses,
        total_investments=total_investments,
        total_profit_loss=total_profit_loss,
        total_profit_loss_without_investments=without_investments,
        average_monthly_pl=average,
        average_monthly_pl_without_investments=average_without,
        best_month=best.month_name,
        worst_month=worst.month_name,
        best_month_pl=best.profit_loss,
        worst_month_pl=worst.profit_loss,
    )


def available_years(store: TransactionStore, now: datetime) -> list[int]:
    """Years with any expense, income or investment, newest first."""

    years = {
        record.occurred_at.year
        for records in (store.expenses, store.incomes, store.investments)
        for record in records
    }
    if not years:
        return [now.year]
    return sorted(years, reverse=True)


def expenses_grouped_by_period(
    store: TransactionStore,
) -> list[tuple[str, list[Expense]]]:
    """Expenses bucketed by budget period, newest period first.

    Keys are ``Month YYYY`` display labels.
    """

    grouped: dict[datetime, list[Expense]] = defaultdict(list)
    for expense in store.expenses:
        grouped[period_start(expense.occurred_at, store.settings)].append(expense)

    return [
        (period_display_label(start, store.settings), grouped[start])
        for start in sorted(grouped, reverse=True)
    ]
