"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelStateRepository
from .logging_config import setup_logging
from .services.engine import BudgetEngine, Clock


@dataclass
class AppContext:
    """Configuration, persistence wiring and the loaded engine."""

    config: BaseConfig
    session_factory: Callable[[], Session]
    state_repo: SQLModelStateRepository
    engine: BudgetEngine


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Optional[Clock] = None,
    configure_logging: bool = True,
) -> AppContext:
    """Create the database, load the ledger and return a ready context."""

    if config is None:
        config = BaseConfig()
    if configure_logging:
        setup_logging(config)

    _, session_factory = bootstrap_database(config)
    state_repo = SQLModelStateRepository(session_factory)
    engine = (
        BudgetEngine.open(state_repo, clock=clock)
        if clock is not None
        else BudgetEngine.open(state_repo)
    )
    return AppContext(
        config=config,
        session_factory=session_factory,
        state_repo=state_repo,
        engine=engine,
    )
