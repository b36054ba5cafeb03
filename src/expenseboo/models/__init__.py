"""Record types and the persistence table."""

from .category import Category
from .expense import SUBSCRIPTION_COMMENT_PREFIX, Expense, Investment, subscription_comment
from .income import Income
from .manual_pl import ManualPL, ManualPLMode
from .saving_goal import SavingGoal
from .settings import Currency, ResetType, Settings
from .state import StoredCollection
from .subscription import Subscription

__all__ = [
    "Category",
    "Currency",
    "Expense",
    "Income",
    "Investment",
    "ManualPL",
    "ManualPLMode",
    "ResetType",
    "SavingGoal",
    "Settings",
    "StoredCollection",
    "Subscription",
    "SUBSCRIPTION_COMMENT_PREFIX",
    "subscription_comment",
]
