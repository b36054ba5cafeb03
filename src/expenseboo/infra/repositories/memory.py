"""In-memory state repository for tests and throwaway sessions."""

from __future__ import annotations

from typing import Mapping, Optional


class InMemoryStateRepository:
    """Dict-backed repository; ``save_count`` tracks persist calls."""

    def __init__(self, payloads: Mapping[str, str] | None = None):
        self.payloads: dict[str, str] = dict(payloads or {})
        self.save_count = 0

    def load(self) -> dict[str, Optional[str]]:
        return dict(self.payloads)

    def save(self, payloads: Mapping[str, str]) -> None:
        self.payloads.update(payloads)
        self.save_count += 1


__all__ = ["InMemoryStateRepository"]
