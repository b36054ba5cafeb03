"""End-to-end tests for the BudgetEngine facade."""

from __future__ import annotations

import json
from datetime import datetime

import pytest
from expenseboo.constants.categories import DEFAULT_CATEGORIES
from expenseboo.infra.repositories import InMemoryStateRepository
from expenseboo.models import Expense, Income, ManualPL, SavingGoal, Subscription
from expenseboo.services.engine import BudgetEngine
from expenseboo.services.transfer import DataImportError

from tests.conftest import FrozenClock, pay_day_settings


def _saving_setup(engine: BudgetEngine) -> SavingGoal:
    engine.add_saving_goal(
        SavingGoal(name="Monthly", target_amount=200.0, target_date=datetime(2099, 1, 1), is_generic=True)
    )
    return engine.add_saving_goal(
        SavingGoal(name="Laptop", target_amount=1500.0, target_date=datetime(2024, 10, 1))
    )


def test_open_seeds_categories_and_records_period(engine, repository):
    assert len(engine.store.categories) == len(DEFAULT_CATEGORIES)
    assert engine.store.last_period_key == "2024-03"
    assert "categories" in repository.payloads


def test_open_corrects_dates_then_materializes(clock):
    seeded = BudgetEngine.open(InMemoryStateRepository(), clock=clock)
    netflix = seeded.add_subscription(
        Subscription(name="Netflix", amount=15.0, start_date=datetime(2023, 1, 1))
    )
    seeded.store.expenses.add(
        Expense(
            amount=15.0,
            occurred_at=datetime(2024, 2, 9),
            comment="Subscription: Netflix",
            source_subscription_id=netflix.id,
        )
    )

    reopened = BudgetEngine.open(seeded.store.repository, clock=clock)

    dates = sorted(e.occurred_at for e in reopened.store.expenses)
    assert dates == [datetime(2024, 2, 1), datetime(2024, 3, 1)]


def test_balance_mutations_reallocate(engine):
    laptop = _saving_setup(engine)

    engine.add_income(Income(amount=1000.0, occurred_at=datetime(2024, 3, 1)))
    assert laptop.monthly_contributions["2024-03"] == 800.0

    expense = engine.add_expense(Expense(amount=300.0, occurred_at=datetime(2024, 3, 5)))
    assert laptop.monthly_contributions["2024-03"] == 500.0

    expense.amount = 100.0
    engine.update_expense(expense)
    assert laptop.monthly_contributions["2024-03"] == 700.0

    engine.delete_expense(expense.id)
    assert laptop.monthly_contributions["2024-03"] == 800.0
    assert laptop.current_amount == 0.0


def test_update_saving_goal_can_skip_reallocation(engine):
    laptop = _saving_setup(engine)
    engine.add_income(Income(amount=1000.0, occurred_at=datetime(2024, 3, 1)))

    laptop.monthly_contributions["2024-03"] = 1.0
    engine.update_saving_goal(laptop, reallocate=False)
    assert laptop.monthly_contributions["2024-03"] == 1.0

    engine.update_saving_goal(laptop)
    assert laptop.monthly_contributions["2024-03"] == 800.0


def test_foreground_in_new_month_solidifies_and_materializes(repository):
    clock = FrozenClock(datetime(2024, 3, 10, 12, 0))
    engine = BudgetEngine.open(repository, clock=clock)
    laptop = _saving_setup(engine)
    engine.add_subscription(Subscription(name="Gym", amount=30.0, start_date=datetime(2024, 1, 1)))
    engine.foreground()
    engine.add_income(Income(amount=1030.0, occurred_at=datetime(2024, 3, 1)))
    assert laptop.monthly_contributions == {"2024-03": 800.0}

    clock.now = datetime(2024, 4, 2, 8, 0)
    created = engine.foreground()

    assert laptop.current_amount == 800.0
    assert "2024-03" not in laptop.monthly_contributions
    assert engine.store.last_period_key == "2024-04"
    assert [e.occurred_at for e in created] == [datetime(2024, 4, 1)]
    # April: no income yet, 30 of gym against a 200 target
    assert laptop.monthly_contributions == {"2024-04": 0.0}


def test_settings_change_rebuckets_current_period(engine):
    engine.add_income(Income(amount=500.0, occurred_at=datetime(2024, 2, 20)))
    assert engine.current_balance() == 0.0

    engine.update_settings(pay_day_settings(15))

    assert engine.current_balance() == 500.0
    assert engine.store.settings.pay_day == 15


def test_convert_expense_to_investment(engine):
    expense = engine.add_expense(
        Expense(amount=250.0, occurred_at=datetime(2024, 3, 4), comment="ETF")
    )

    investment = engine.convert_expense_to_investment(expense.id)

    assert investment is not None
    assert (investment.amount, investment.comment, investment.occurred_at) == (
        250.0,
        "ETF",
        datetime(2024, 3, 4),
    )
    assert engine.store.expenses.get_by_id(expense.id) is None
    assert engine.store.investments.get_by_id(investment.id) is investment
    assert engine.convert_expense_to_investment(expense.id) is None


def test_manual_pl_upsert_through_engine(engine):
    engine.add_manual_pl(ManualPL.direct(month=3, year=2024, profit_loss=100.0))
    engine.add_manual_pl(ManualPL.direct(month=3, year=2024, profit_loss=500.0))

    assert len(engine.store.manual_pls) == 1
    assert engine.monthly_stats(2024)[2].profit_loss == 500.0


def test_import_failure_leaves_state_untouched(engine, repository):
    engine.add_expense(Expense(amount=42.0, occurred_at=datetime(2024, 3, 3)))
    before = engine.export_all()
    saved_expenses = repository.payloads["expenses"]

    bad_documents = [
        "not json at all",
        json.dumps([1, 2, 3]),
        json.dumps({"expenses": [{"amount": "lots"}]}),
        json.dumps({"version": 99}),
    ]
    for document in bad_documents:
        with pytest.raises(DataImportError):
            engine.import_all(document)

    assert [e.amount for e in engine.store.expenses] == [42.0]
    assert repository.payloads["expenses"] == saved_expenses
    assert json.loads(engine.export_all())["expenses"] == json.loads(before)["expenses"]


def test_import_replaces_everything(engine, clock):
    source = BudgetEngine.open(InMemoryStateRepository(), clock=clock)
    source.add_income(Income(amount=900.0, occurred_at=datetime(2024, 3, 2)))
    source.update_settings(pay_day_settings(25))
    engine.add_expense(Expense(amount=42.0, occurred_at=datetime(2024, 3, 3)))

    engine.import_all(source.export_all())

    assert len(engine.store.expenses) == 0
    assert [i.amount for i in engine.store.incomes] == [900.0]
    assert engine.store.settings.pay_day == 25


def test_imported_records_without_ids_get_their_own(engine):
    document = {
        "version": 1,
        "expenses": [
            {"amount": 10.0, "occurred_at": "2024-03-02T00:00:00", "comment": "Bread"},
            {"amount": 20.0, "occurred_at": "2024-03-03T00:00:00", "comment": "Milk"},
        ],
    }
    engine.import_all(json.dumps(document))

    first, second = engine.store.expenses.all()
    assert first.id is not None and second.id is not None
    assert first.id != second.id

    engine.delete_expense(first.id)

    assert [e.comment for e in engine.store.expenses] == ["Milk"]
