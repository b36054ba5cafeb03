"""Concrete repository implementations."""

from .memory import InMemoryStateRepository
from .state import SQLModelStateRepository

__all__ = ["InMemoryStateRepository", "SQLModelStateRepository"]
