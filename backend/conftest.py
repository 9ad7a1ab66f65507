"""Root conftest: test environment, structlog routed to caplog, and per-test isolation of shared state."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from cuescore.logic.factory import clear_engines

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# Route structlog through stdlib logging so caplog records carry the event dict as msg.
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Game ids bound by one test must not show up in another's log records."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture(autouse=True)
def _fresh_engines():
    """Engines are cached per game type; start every test from an empty cache."""
    clear_engines()
    yield
    clear_engines()
