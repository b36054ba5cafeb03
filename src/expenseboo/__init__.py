"""ExpenseBoo budget-period accounting engine."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .context import AppContext, create_app_context
from .services.engine import BudgetEngine
from .services.store import TransactionStore

__all__ = [
    "AppContext",
    "BaseConfig",
    "BudgetEngine",
    "DevConfig",
    "TestConfig",
    "TransactionStore",
    "create_app_context",
]
