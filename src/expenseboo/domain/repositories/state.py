"""State repository protocol."""

from __future__ import annotations

from typing import Mapping, Optional, Protocol


class StateRepository(Protocol):
    """Durable home for the store's serialized collections.

    Payloads are JSON strings keyed by collection name. ``load`` returns
    ``None`` for keys that were never saved.
    """

    def load(self) -> dict[str, Optional[str]]:
        """Return the raw payload for every known collection key."""
        ...

    def save(self, payloads: Mapping[str, str]) -> None:
        """Persist the given payloads, replacing previous values."""
        ...
