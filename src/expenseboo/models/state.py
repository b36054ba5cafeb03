"""Key/value table holding serialized record collections."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredCollection(SQLModel, table=True):
    """One JSON payload per collection key (expenses, incomes, settings, ...)."""

    __tablename__: ClassVar[str] = "stored_collection"

    key: str = Field(primary_key=True, max_length=64)
    payload: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
