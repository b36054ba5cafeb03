"""Turn active subscriptions into dated expense records, once per period."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..logging_config import get_logger
from ..models import Expense, Subscription, subscription_comment
from .periods import period_start
from .store import TransactionStore

logger = get_logger(__name__)


def _is_charge_for(expense: Expense, subscription: Subscription) -> bool:
    if expense.source_subscription_id is not None:
        return expense.source_subscription_id == subscription.id
    # Legacy records carry only the comment label.
    return expense.comment == subscription_comment(subscription.name)


def has_charge_since(
    expenses: Iterable[Expense], subscription: Subscription, start: datetime
) -> bool:
    """True if ``subscription`` already has a charge dated on or after ``start``."""

    return any(e.occurred_at >= start and _is_charge_for(e, subscription) for e in expenses)


def materialize_subscriptions(
    store: TransactionStore, now: datetime, *, persist: bool = True
) -> list[Expense]:
    """Create the current period's charge for every due subscription lacking one.

    Idempotent within a period. Charges are dated at the period start and
    tagged with the subscription id. The store is persisted once at the end.

    Returns:
        The newly created expenses.
    """

    start = period_start(now, store.settings)
    existing = store.expenses.all()
    created: list[Expense] = []

    for subscription in store.subscriptions:
        if not subscription.is_due(now):
            continue
        if has_charge_since(existing, subscription, start):
            continue
        expense = Expense(
            amount=subscription.amount,
            comment=subscription_comment(subscription.name),
            occurred_at=start,
            category_id=subscription.category_id,
            source_subscription_id=subscription.id,
        )
        store.expenses.add(expense, persist=False)
        created.append(expense)

    if created:
        logger.info(
            "Materialized subscription charges",
            extra={"count": len(created), "period_start": start},
        )
    if persist:
        store.persist()
    return created


def correct_subscription_charge_dates(store: TransactionStore) -> int:
    """Move subscription charges that drifted off their period start back onto it.

    Returns:
        Number of expenses re-dated.
    """

    corrected = 0
    for expense in store.expenses:
        if not expense.is_subscription_charge:
            continue
        start = period_start(expense.occurred_at, store.settings)
        if expense.occurred_at != start:
            expense.occurred_at = start
            corrected += 1

    if corrected:
        logger.info("Corrected subscription charge dates", extra={"count": corrected})
        store.persist()
    return corrected
