from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from cuescore.session.settings import CuescoreSettings
from cuescore.session.store import GameSessionStore
from shared.logging import setup_logging
from shared.storage import LocalStatsStorage

if TYPE_CHECKING:
    from shared.storage import StatsStorage

logger = structlog.get_logger()


def create_session_store(
    settings: CuescoreSettings | None = None,
    storage: StatsStorage | None = None,
) -> GameSessionStore:
    """Build a session store wired to file storage under settings.data_dir."""
    settings = settings or CuescoreSettings()
    if storage is None:
        storage = LocalStatsStorage(settings.data_dir)
    store = GameSessionStore(storage, history_limit=settings.history_limit)
    logger.info("session store ready", data_dir=settings.data_dir, games_in_history=len(store.game_history))
    return store


def get_session_store() -> GameSessionStore:  # pragma: no cover
    """Configure logging from the environment and return a file-backed store."""
    settings = CuescoreSettings()
    setup_logging(log_dir=settings.log_dir, level=settings.log_level, log_format=settings.log_format)
    return create_session_store(settings)
