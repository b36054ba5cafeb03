"""Facade tying the store to materialization, statistics and goal allocation.

Host applications call ``BudgetEngine.open`` once, ``foreground`` whenever the
app becomes active, and the mutation methods for user edits. Balance-affecting
mutations re-run surplus allocation before returning.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from ..domain.repositories import StateRepository
from ..logging_config import get_logger
from ..models import (
    Category,
    Expense,
    Income,
    Investment,
    ManualPL,
    SavingGoal,
    Settings,
    Subscription,
)
from . import goals, statistics, subscriptions, transfer
from .store import StoreState, TransactionStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class BudgetEngine:
    """Single-user budget engine; all calls run synchronously on the caller's thread."""

    def __init__(self, store: TransactionStore, *, clock: Clock = datetime.now):
        self.store = store
        self.clock = clock

    @classmethod
    def open(cls, repository: StateRepository, *, clock: Clock = datetime.now) -> "BudgetEngine":
        """Load state, repair subscription charge dates and run the foreground pass."""

        engine = cls(TransactionStore.open(repository), clock=clock)
        subscriptions.correct_subscription_charge_dates(engine.store)
        engine.foreground()
        return engine

    def _now(self, now: Optional[datetime] = None) -> datetime:
        return now if now is not None else self.clock()

    # Lifecycle -----------------------------------------------------------

    def foreground(self, now: Optional[datetime] = None) -> list[Expense]:
        """Close stale allocation epochs, materialize subscriptions, reallocate.

        Returns:
            Subscription charges created by this pass.
        """

        moment = self._now(now)
        goals.roll_over_period(self.store, moment)
        created = subscriptions.materialize_subscriptions(self.store, moment)
        self.reallocate(moment)
        return created

    def reallocate(self, now: Optional[datetime] = None) -> Optional[goals.AllocationResult]:
        return goals.allocate_surplus_to_goals(self.store, self._now(now))

    def update_settings(self, settings: Settings) -> None:
        """Apply new settings; periods are re-derived on the next query."""

        self.store.update_settings(settings)
        moment = self._now()
        subscriptions.materialize_subscriptions(self.store, moment)
        self.reallocate(moment)

    # Expenses and income -------------------------------------------------

    def add_expense(self, expense: Expense) -> Expense:
        self.store.expenses.add(expense)
        self.reallocate()
        return expense

    def update_expense(self, expense: Expense) -> None:
        self.store.expenses.update(expense)
        self.reallocate()

    def delete_expense(self, expense_id: UUID) -> None:
        self.store.expenses.delete(expense_id)
        self.reallocate()

    def add_income(self, income: Income) -> Income:
        self.store.incomes.add(income)
        self.reallocate()
        return income

    def update_income(self, income: Income) -> None:
        self.store.incomes.update(income)
        self.reallocate()

    def delete_income(self, income_id: UUID) -> None:
        self.store.incomes.delete(income_id)
        self.reallocate()

    def convert_expense_to_investment(self, expense_id: UUID) -> Optional[Investment]:
        """Move an expense into investments, keeping amount, comment, date and category."""

        expense = self.store.expenses.get_by_id(expense_id)
        if expense is None:
            return None
        investment = Investment(
            amount=expense.amount,
            comment=expense.comment,
            occurred_at=expense.occurred_at,
            category_id=expense.category_id,
        )
        self.store.investments.add(investment, persist=False)
        self.store.expenses.delete(expense_id)
        self.reallocate()
        return investment

    # Investments, subscriptions, categories, manual P/L ------------------

    def add_investment(self, investment: Investment) -> Investment:
        return self.store.investments.add(investment)

    def update_investment(self, investment: Investment) -> None:
        self.store.investments.update(investment)

    def delete_investment(self, investment_id: UUID) -> None:
        self.store.investments.delete(investment_id)

    def add_subscription(self, subscription: Subscription) -> Subscription:
        return self.store.subscriptions.add(subscription)

    def update_subscription(self, subscription: Subscription) -> None:
        self.store.subscriptions.update(subscription)

    def delete_subscription(self, subscription_id: UUID) -> None:
        self.store.subscriptions.delete(subscription_id)

    def materialize_subscriptions(self, now: Optional[datetime] = None) -> list[Expense]:
        moment = self._now(now)
        created = subscriptions.materialize_subscriptions(self.store, moment)
        self.reallocate(moment)
        return created

    def add_category(self, category: Category) -> Category:
        return self.store.categories.add(category)

    def update_category(self, category: Category) -> None:
        self.store.categories.update(category)

    def delete_category(self, category_id: UUID) -> None:
        """Remove a category; records pointing at it become uncategorized on lookup."""

        self.store.categories.delete(category_id)

    def add_manual_pl(self, entry: ManualPL) -> ManualPL:
        """Insert or replace the manual entry for the entry's month and year."""

        return self.store.manual_pls.add(entry)

    def delete_manual_pl(self, entry_id: UUID) -> None:
        self.store.manual_pls.delete(entry_id)

    # Saving goals --------------------------------------------------------

    def add_saving_goal(self, goal: SavingGoal) -> SavingGoal:
        self.store.saving_goals.add(goal)
        self.reallocate()
        return goal

    def update_saving_goal(self, goal: SavingGoal, *, reallocate: bool = True) -> None:
        self.store.saving_goals.update(goal)
        if reallocate:
            self.reallocate()

    def delete_saving_goal(self, goal_id: UUID) -> None:
        self.store.saving_goals.delete(goal_id)
        self.reallocate()

    # Queries -------------------------------------------------------------

    def current_balance(self, now: Optional[datetime] = None) -> float:
        return statistics.current_balance(self.store, self._now(now))

    def current_period_income(self, now: Optional[datetime] = None) -> float:
        return statistics.current_period_income(self.store, self._now(now))

    def current_period_expenses(self, now: Optional[datetime] = None) -> list[Expense]:
        return statistics.current_period_expenses(self.store, self._now(now))

    def current_period_investments(self, now: Optional[datetime] = None) -> list[Investment]:
        return statistics.current_period_investments(self.store, self._now(now))

    def monthly_stats(self, year: int) -> list[statistics.MonthlyStats]:
        return statistics.monthly_stats(self.store, year)

    def yearly_stats(self, year: int) -> statistics.YearlyStats:
        return statistics.yearly_stats(self.store, year)

    def available_years(self, now: Optional[datetime] = None) -> list[int]:
        return statistics.available_years(self.store, self._now(now))

    def active_goals(self, now: Optional[datetime] = None) -> list[SavingGoal]:
        return goals.active_goals(self.store, self._now(now))

    def completed_goals(self) -> list[SavingGoal]:
        return goals.completed_goals(self.store)

    # Bulk transfer -------------------------------------------------------

    def export_all(self) -> str:
        return transfer.export_all(self.store)

    def import_all(self, blob: str | bytes) -> StoreState:
        """Replace everything with an exported document.

        Raises:
            DataImportError: on malformed input; nothing is changed.
        """

        state = transfer.import_all(self.store, blob)
        self.foreground()
        return state
