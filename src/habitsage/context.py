"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository


@dataclass
class AppContext:
    """Configuration, storage and the acting owner, wired together."""

    config: BaseConfig
    session_factory: Callable[[], Session]
    habit_repo: SQLModelHabitRepository
    owner_id: int

    @property
    def window_days(self) -> int:
        return self.config.RATE_WINDOW_DAYS


def create_app_context(
    config: Optional[BaseConfig] = None, *, owner_id: Optional[int] = None
) -> AppContext:
    """Create the engine, ensure the schema and build the repository."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        session_factory=session_factory,
        habit_repo=SQLModelHabitRepository(session_factory),
        owner_id=owner_id if owner_id is not None else config.OWNER_ID,
    )
