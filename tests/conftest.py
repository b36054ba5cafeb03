"""Pytest configuration and shared fixtures for ExpenseBoo tests.

Stores are backed by an in-memory state repository so tests never touch a
real database unless they opt into the SQLModel fixtures below.
"""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

import pytest
from expenseboo.infra.database import create_session_factory, init_database
from expenseboo.infra.repositories import InMemoryStateRepository
from expenseboo.models import (
    Expense,
    Income,
    Investment,
    ResetType,
    SavingGoal,
    Settings,
    Subscription,
)
from expenseboo.services.engine import BudgetEngine
from expenseboo.services.store import TransactionStore
from sqlmodel import create_engine

# =============================================================================
# Clock
# =============================================================================


class FrozenClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 3, 10, 12, 0)


@pytest.fixture
def clock(now) -> FrozenClock:
    return FrozenClock(now)


# =============================================================================
# Persistence Fixtures
# =============================================================================


class FailingStateRepository(InMemoryStateRepository):
    """Repository whose writes always fail."""

    def save(self, payloads: Mapping[str, str]) -> None:
        raise OSError("disk full")


@pytest.fixture
def repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def store(repository) -> TransactionStore:
    """Empty store (no default categories) with default settings."""

    return TransactionStore(repository)


@pytest.fixture
def engine(repository, clock) -> BudgetEngine:
    return BudgetEngine.open(repository, clock=clock)


@pytest.fixture(scope="function")
def sqlite_session_factory(tmp_path):
    """Session factory bound to a throwaway SQLite file."""

    db_engine = create_engine(f"sqlite:///{tmp_path / 'state.db'}", echo=False)
    init_database(db_engine)
    yield create_session_factory(db_engine)
    db_engine.dispose()


# =============================================================================
# Test Data Factories
# =============================================================================


def pay_day_settings(pay_day: int) -> Settings:
    return Settings(reset_type=ResetType.PAY_DAY, pay_day=pay_day)


def monthly_date_settings(reset_date: int) -> Settings:
    return Settings(reset_type=ResetType.MONTHLY_DATE, monthly_reset_date=reset_date)


@pytest.fixture
def add_expense(store):
    def _add(amount: float, occurred_at: datetime, comment: str = "Test expense", **kwargs) -> Expense:
        return store.expenses.add(
            Expense(amount=amount, occurred_at=occurred_at, comment=comment, **kwargs)
        )

    return _add


@pytest.fixture
def add_income(store):
    def _add(amount: float, occurred_at: datetime, is_monthly: bool = True) -> Income:
        return store.incomes.add(Income(amount=amount, occurred_at=occurred_at, is_monthly=is_monthly))

    return _add


@pytest.fixture
def add_investment(store):
    def _add(amount: float, occurred_at: datetime, comment: str = "Index fund") -> Investment:
        return store.investments.add(
            Investment(amount=amount, occurred_at=occurred_at, comment=comment)
        )

    return _add


@pytest.fixture
def add_subscription(store):
    def _add(
        name: str,
        amount: float,
        start_date: datetime = datetime(2023, 1, 1),
        is_active: bool = True,
        **kwargs,
    ) -> Subscription:
        return store.subscriptions.add(
            Subscription(
                name=name, amount=amount, start_date=start_date, is_active=is_active, **kwargs
            )
        )

    return _add


@pytest.fixture
def add_goal(store):
    def _add(
        name: str = "Holiday",
        target_amount: float = 1000.0,
        target_date: datetime = datetime(2024, 12, 31),
        current_amount: float = 0.0,
        is_generic: bool = False,
        monthly_contributions: dict[str, float] | None = None,
    ) -> SavingGoal:
        return store.saving_goals.add(
            SavingGoal(
                name=name,
                target_amount=target_amount,
                target_date=target_date,
                current_amount=current_amount,
                is_generic=is_generic,
                monthly_contributions=dict(monthly_contributions or {}),
            )
        )

    return _add


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance (default one cent)."""
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
