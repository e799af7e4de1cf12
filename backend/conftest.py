"""Root conftest: load test environment variables and route structlog through stdlib for caplog."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import _serialize_values

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _serialize_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Keep connection and room ids from leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
