"""Service module exports."""

from . import (
    engine,
    goals,
    notifications,
    periods,
    statistics,
    store,
    subscriptions,
    transfer,
)

__all__ = [
    "engine",
    "goals",
    "notifications",
    "periods",
    "statistics",
    "store",
    "subscriptions",
    "transfer",
]
