"""SQLModel implementation of the state repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, ContextManager, Mapping, Optional

from sqlmodel import Session, select

from ...models.state import StoredCollection


class SQLModelStateRepository:
    """Stores each collection payload as one ``stored_collection`` row."""

    def __init__(self, session_factory: Callable[[], ContextManager[Session]]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def load(self) -> dict[str, Optional[str]]:
        with self.session_factory() as session:
            rows = session.exec(select(StoredCollection)).all()
            return {row.key: row.payload for row in rows}

    def save(self, payloads: Mapping[str, str]) -> None:
        now = datetime.now(timezone.utc)
        with self.session_factory() as session:
            for key, payload in payloads.items():
                row = session.get(StoredCollection, key)
                if row:
                    row.payload = payload
                    row.updated_at = now
                else:
                    row = StoredCollection(key=key, payload=payload, updated_at=now)
                session.add(row)
            session.commit()


__all__ = ["SQLModelStateRepository"]
