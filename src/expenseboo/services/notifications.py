"""Read-only data for the daily reminder; scheduling is left to the host app."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional
from uuid import UUID

from .goals import active_goals
from .statistics import current_balance
from .store import TransactionStore

DIGEST_TITLE = "ExpenseBoo Daily Update"


@dataclass(slots=True)
class GoalProgress:
    goal_id: Optional[UUID]
    name: str
    progress: float
    remaining_amount: float
    pending_contribution: float


@dataclass(slots=True)
class DailyDigest:
    """Everything a reminder needs, computed from the store at one instant."""

    title: str
    body: str
    balance: float
    enabled: bool
    notify_at: time
    goals: list[GoalProgress] = field(default_factory=list)


def balance_message(balance: float, symbol: str) -> str:
    if balance >= 0:
        return f"Great job! You have {symbol}{balance:.2f} left this month."
    return (
        f"You're {symbol}{abs(balance):.2f} over budget this month. "
        "Consider reviewing your expenses."
    )


def build_daily_digest(store: TransactionStore, now: datetime) -> DailyDigest:
    settings = store.settings
    balance = current_balance(store, now)
    goals = [
        GoalProgress(
            goal_id=goal.id,
            name=goal.name,
            progress=goal.progress,
            remaining_amount=goal.remaining_amount,
            pending_contribution=goal.pending_contribution,
        )
        for goal in active_goals(store, now)
    ]
    return DailyDigest(
        title=DIGEST_TITLE,
        body=balance_message(balance, settings.currency.symbol),
        balance=balance,
        enabled=settings.notifications_enabled,
        notify_at=settings.daily_notification_time,
        goals=goals,
    )
