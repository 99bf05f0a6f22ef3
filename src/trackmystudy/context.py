"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelKeyValueStore
from .logging_config import setup_logging
from .services.store import Clock, UserDataStore
from .services.tracker import StudyTracker


@dataclass
class AppContext:
    """Centralized application context handed to presentation code."""

    # Configuration
    config: BaseConfig

    # Session factory
    session_factory: Callable[[], Session]

    # Persistence and services
    kv_store: SQLModelKeyValueStore
    store: UserDataStore
    tracker: StudyTracker


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Optional[Clock] = None,
) -> AppContext:
    """Configure logging, create the context and hydrate the tracker from storage."""

    if config is None:
        config = BaseConfig()

    logger = setup_logging(config)

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    kv_store = SQLModelKeyValueStore(session_factory)
    store = UserDataStore(kv_store, config=config, clock=clock)
    tracker = StudyTracker(store, config=config, clock=clock)
    tracker.load()
    logger.info("TrackMyStudy context ready", extra={"database_url": config.DATABASE_URL})

    return AppContext(
        config=config,
        session_factory=session_factory,
        kv_store=kv_store,
        store=store,
        tracker=tracker,
    )
