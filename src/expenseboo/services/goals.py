"""Surplus allocation across saving goals.

Every calendar month is an allocation epoch keyed ``YYYY-MM``. While the month
is open, each dated goal's ``monthly_contributions[key]`` is recomputed from
the current balance on every balance-affecting change. Once the month has
passed, the provisional amounts are solidified: added to ``current_amount``
and dropped from the map.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from ..logging_config import get_logger
from ..models import SavingGoal
from .periods import calendar_month_key
from .statistics import current_balance
from .store import TransactionStore

logger = get_logger(__name__)


class EpochState(str, enum.Enum):
    """Lifecycle of one month's provisional contributions."""

    OPEN = "open"
    CLOSED = "closed"  # month over, contributions not yet committed
    SOLIDIFIED = "solidified"


@dataclass(slots=True)
class AllocationResult:
    """Outcome of one allocation pass."""

    period_key: str
    balance: float
    monthly_target: float
    # Positive: surplus share per goal. Negative: reduction per goal.
    per_goal_delta: float
    contributions: dict[UUID, float] = field(default_factory=dict)

    @property
    def is_surplus(self) -> bool:
        return self.per_goal_delta > 0


def _dated_goals(goals: Iterable[SavingGoal]) -> list[SavingGoal]:
    return [g for g in goals if not g.is_generic]


def active_goals(store: TransactionStore, now: datetime) -> list[SavingGoal]:
    """Dated goals that still accept contributions, soonest target first."""

    goals = [g for g in store.saving_goals if g.accepts_contributions(now)]
    return sorted(goals, key=lambda g: g.target_date)


def completed_goals(store: TransactionStore) -> list[SavingGoal]:
    """Dated goals that reached their target, latest target first."""

    goals = [g for g in _dated_goals(store.saving_goals) if g.progress >= 1.0]
    return sorted(goals, key=lambda g: g.target_date, reverse=True)


def epoch_state(store: TransactionStore, period_key: str, now: datetime) -> EpochState:
    """State of the allocation epoch ``period_key`` as seen at ``now``."""

    if period_key >= calendar_month_key(now):
        return EpochState.OPEN
    pending = any(period_key in g.monthly_contributions for g in _dated_goals(store.saving_goals))
    return EpochState.CLOSED if pending else EpochState.SOLIDIFIED


def solidify_period(store: TransactionStore, period_key: str, *, persist: bool = True) -> float:
    """Commit ``period_key``'s provisional contributions on every dated goal.

    Applying it again for the same key is a no-op.

    Returns:
        Total amount moved into ``current_amount``.
    """

    total = 0.0
    for goal in _dated_goals(store.saving_goals):
        amount = goal.monthly_contributions.pop(period_key, None)
        if amount is None:
            continue
        goal.current_amount += amount
        total += amount
        store.saving_goals.update(goal, persist=False)

    if total:
        logger.info("Solidified contributions", extra={"period_key": period_key, "total": total})
    if persist:
        store.persist()
    return total


def roll_over_period(store: TransactionStore, now: datetime) -> list[str]:
    """Close every stale epoch when the calendar month changes.

    Compares the stored period key to the current one. When they differ, all
    provisional keys older than the current month (the stored key included)
    are solidified and the stored key is advanced.

    Returns:
        The keys that were solidified, oldest first.
    """

    current_key = calendar_month_key(now)
    if store.last_period_key == current_key:
        return []

    stale = {
        key
        for goal in _dated_goals(store.saving_goals)
        for key in goal.monthly_contributions
        if key < current_key
    }
    if store.last_period_key and store.last_period_key < current_key:
        stale.add(store.last_period_key)

    solidified = sorted(stale)
    for key in solidified:
        solidify_period(store, key, persist=False)

    logger.info(
        "Advanced allocation period",
        extra={"from_key": store.last_period_key, "to_key": current_key, "solidified": solidified},
    )
    store.set_last_period_key(current_key)
    return solidified


def allocate_surplus_to_goals(
    store: TransactionStore, now: datetime, *, persist: bool = True
) -> Optional[AllocationResult]:
    """Recompute this month's provisional contributions from the current balance.

    The generic goal's target is the amount to keep aside each period. Any
    balance above it is split equally across active dated goals and
    overwrites their provisional entry. A shortfall is split equally and
    subtracted from each provisional entry, floored at zero.

    Returns:
        ``None`` when there is no generic goal or no active dated goal.
    """

    generic = store.generic_goal()
    if generic is None:
        return None
    goals = active_goals(store, now)
    if not goals:
        return None

    period_key = calendar_month_key(now)
    balance = current_balance(store, now)
    monthly_target = generic.target_amount
    result = AllocationResult(
        period_key=period_key, balance=balance, monthly_target=monthly_target, per_goal_delta=0.0
    )

    if balance > monthly_target:
        allocation = (balance - monthly_target) / len(goals)
        result.per_goal_delta = allocation
        for goal in goals:
            goal.monthly_contributions[period_key] = allocation
    else:
        reduction = (monthly_target - balance) / len(goals)
        result.per_goal_delta = -reduction
        for goal in goals:
            existing = goal.monthly_contributions.get(period_key, 0.0)
            goal.monthly_contributions[period_key] = max(0.0, existing - reduction)

    for goal in goals:
        result.contributions[goal.id] = goal.monthly_contributions[period_key]
        store.saving_goals.update(goal, persist=False)

    logger.debug(
        "Allocated surplus",
        extra={"period_key": period_key, "balance": balance, "goals": len(goals)},
    )
    if persist:
        store.persist()
    return result
