"""In-memory transaction store with id-indexed CRUD and best-effort persistence."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, Mapping, Optional, TypeVar
from uuid import UUID, uuid4

from pydantic import TypeAdapter
from sqlmodel import SQLModel

from ..constants.categories import DEFAULT_CATEGORIES, UNCATEGORIZED_NAME
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

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=SQLModel)

SETTINGS_KEY = "settings"
LAST_PERIOD_KEY = "last_period_key"

RECORD_TYPES: dict[str, type[SQLModel]] = {
    "expenses": Expense,
    "incomes": Income,
    "investments": Investment,
    "subscriptions": Subscription,
    "saving_goals": SavingGoal,
    "manual_pls": ManualPL,
    "categories": Category,
}

_LIST_ADAPTERS: dict[str, TypeAdapter] = {
    key: TypeAdapter(list[record_type]) for key, record_type in RECORD_TYPES.items()
}


@dataclass
class StoreState:
    """Decoded snapshot of every collection plus settings."""

    expenses: list[Expense] = field(default_factory=list)
    incomes: list[Income] = field(default_factory=list)
    investments: list[Investment] = field(default_factory=list)
    subscriptions: list[Subscription] = field(default_factory=list)
    saving_goals: list[SavingGoal] = field(default_factory=list)
    manual_pls: list[ManualPL] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    last_period_key: Optional[str] = None


def encode_state(state: StoreState) -> dict[str, Any]:
    """Return JSON-ready python values keyed by collection name."""

    encoded: dict[str, Any] = {
        key: adapter.dump_python(getattr(state, key), mode="json")
        for key, adapter in _LIST_ADAPTERS.items()
    }
    encoded[SETTINGS_KEY] = state.settings.model_dump(mode="json")
    encoded[LAST_PERIOD_KEY] = state.last_period_key
    return encoded


def decode_value(key: str, raw: Any) -> Any:
    """Validate one JSON-decoded collection value.

    Raises:
        ValueError: (including pydantic ``ValidationError``) on malformed input.
    """

    if key in _LIST_ADAPTERS:
        return _LIST_ADAPTERS[key].validate_python(raw)
    if key == SETTINGS_KEY:
        return Settings.model_validate(raw)
    if key == LAST_PERIOD_KEY:
        if raw is not None and not isinstance(raw, str):
            raise ValueError(f"{LAST_PERIOD_KEY} must be a string or null")
        return raw
    raise ValueError(f"Unknown collection key: {key}")


def decode_payloads_leniently(payloads: Mapping[str, Optional[str]]) -> StoreState:
    """Decode persisted payloads, isolating failures per collection.

    A corrupt collection falls back to empty (or default settings) without
    affecting the others.
    """

    state = StoreState()
    for key in (*_LIST_ADAPTERS, SETTINGS_KEY, LAST_PERIOD_KEY):
        payload = payloads.get(key)
        if payload is None:
            continue
        try:
            setattr(state, key, decode_value(key, json.loads(payload)))
        except ValueError:
            logger.warning(
                "Discarding unreadable collection", extra={"collection": key}, exc_info=True
            )
    return state


class RecordCollection(Generic[RecordT]):
    """Ordered records of one type with id lookup.

    Mutations call ``on_change`` (the store's persist hook) unless
    ``persist=False`` is passed for batched writes.
    """

    def __init__(self, name: str, on_change: Callable[[], None]):
        self.name = name
        self._records: list[RecordT] = []
        self._on_change = on_change

    def __iter__(self) -> Iterator[RecordT]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> list[RecordT]:
        return list(self._records)

    def get_by_id(self, record_id: UUID | None) -> Optional[RecordT]:
        if record_id is None:
            return None
        return next((r for r in self._records if r.id == record_id), None)

    def add(self, record: RecordT, *, persist: bool = True) -> RecordT:
        """Append ``record``, assigning a fresh id when it has none."""

        if record.id is None:
            record.id = uuid4()
        self._records.append(record)
        logger.debug("Record added", extra={"collection": self.name, "record_id": record.id})
        if persist:
            self._on_change()
        return record

    def update(self, record: RecordT, *, persist: bool = True) -> bool:
        """Replace the record with the same id; unknown ids are ignored."""

        for index, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[index] = record
                if persist:
                    self._on_change()
                return True
        logger.debug(
            "Update ignored for unknown id", extra={"collection": self.name, "record_id": record.id}
        )
        return False

    def delete(self, record_id: UUID, *, persist: bool = True) -> bool:
        """Remove the matching record. Persists whether or not one matched."""

        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        if persist:
            self._on_change()
        return len(self._records) != before

    def replace_all(self, records: list[RecordT]) -> None:
        """Swap in ``records`` wholesale; id-less records get a fresh id."""

        for record in records:
            if record.id is None:
                record.id = uuid4()
        self._records = list(records)


class ManualPLCollection(RecordCollection[ManualPL]):
    """Manual overrides; at most one entry per (month, year), the latest wins."""

    def add(self, record: ManualPL, *, persist: bool = True) -> ManualPL:
        self._records = [r for r in self._records if r.period != record.period]
        return super().add(record, persist=persist)

    def update(self, record: ManualPL, *, persist: bool = True) -> bool:
        """Replace by id; another entry already holding the new period is dropped."""

        if self.get_by_id(record.id) is not None:
            self._records = [
                r for r in self._records if r.id == record.id or r.period != record.period
            ]
        return super().update(record, persist=persist)

    def replace_all(self, records: list[ManualPL]) -> None:
        latest = {r.period: r for r in records}
        super().replace_all([r for r in records if latest[r.period] is r])

    def for_month(self, month: int, year: int) -> Optional[ManualPL]:
        return next((r for r in self._records if r.period == (year, month)), None)


class TransactionStore:
    """Authoritative in-memory collections for a single user ledger."""

    def __init__(self, repository: StateRepository):
        self.repository = repository
        self.expenses: RecordCollection[Expense] = RecordCollection("expenses", self.persist)
        self.incomes: RecordCollection[Income] = RecordCollection("incomes", self.persist)
        self.investments: RecordCollection[Investment] = RecordCollection("investments", self.persist)
        self.subscriptions: RecordCollection[Subscription] = RecordCollection(
            "subscriptions", self.persist
        )
        self.saving_goals: RecordCollection[SavingGoal] = RecordCollection(
            "saving_goals", self.persist
        )
        self.manual_pls = ManualPLCollection("manual_pls", self.persist)
        self.categories: RecordCollection[Category] = RecordCollection("categories", self.persist)
        self.settings = Settings()
        self.last_period_key: Optional[str] = None

    @classmethod
    def open(cls, repository: StateRepository, *, seed_categories: bool = True) -> "TransactionStore":
        """Create a store and load whatever the repository holds."""

        store = cls(repository)
        store.reload(seed_categories=seed_categories)
        return store

    def reload(self, *, seed_categories: bool = True) -> None:
        """Load persisted state; never raises on a cold or corrupt start."""

        try:
            payloads = self.repository.load()
        except Exception:
            logger.exception("State repository failed to load; starting empty")
            payloads = {}
        self.apply_state(decode_payloads_leniently(payloads))
        logger.info(
            "Store loaded",
            extra={"expenses": len(self.expenses), "incomes": len(self.incomes)},
        )
        if seed_categories:
            self.seed_default_categories()

    def seed_default_categories(self) -> bool:
        """Seed the starter categories when none exist."""

        if len(self.categories):
            return False
        for name, color in DEFAULT_CATEGORIES:
            self.categories.add(Category(name=name, color=color), persist=False)
        logger.info("Seeded default categories", extra={"count": len(DEFAULT_CATEGORIES)})
        self.persist()
        return True

    def snapshot(self) -> StoreState:
        return StoreState(
            expenses=self.expenses.all(),
            incomes=self.incomes.all(),
            investments=self.investments.all(),
            subscriptions=self.subscriptions.all(),
            saving_goals=self.saving_goals.all(),
            manual_pls=self.manual_pls.all(),
            categories=self.categories.all(),
            settings=self.settings,
            last_period_key=self.last_period_key,
        )

    def apply_state(self, state: StoreState) -> None:
        """Swap in a fully decoded state in one step."""

        self.expenses.replace_all(state.expenses)
        self.incomes.replace_all(state.incomes)
        self.investments.replace_all(state.investments)
        self.subscriptions.replace_all(state.subscriptions)
        self.saving_goals.replace_all(state.saving_goals)
        self.manual_pls.replace_all(state.manual_pls)
        self.categories.replace_all(state.categories)
        self.settings = state.settings
        self.last_period_key = state.last_period_key

    def persist(self) -> None:
        """Write every collection; failures are logged and swallowed."""

        try:
            payloads = {
                key: json.dumps(value) for key, value in encode_state(self.snapshot()).items()
            }
            self.repository.save(payloads)
        except Exception:
            # Memory stays ahead of storage until the next successful save.
            logger.exception("Failed to persist store state")

    def update_settings(self, settings: Settings) -> None:
        self.settings = settings
        self.persist()

    def set_last_period_key(self, key: str, *, persist: bool = True) -> None:
        self.last_period_key = key
        if persist:
            self.persist()

    def category_for(self, record: Any) -> Optional[Category]:
        """Resolve a record's category; dangling ids resolve to ``None``."""

        return self.categories.get_by_id(getattr(record, "category_id", None))

    def category_name_for(self, record: Any) -> str:
        category = self.category_for(record)
        return category.name if category else UNCATEGORIZED_NAME

    def generic_goal(self) -> Optional[SavingGoal]:
        """First generic goal, if any."""

        return next((g for g in self.saving_goals if g.is_generic), None)
