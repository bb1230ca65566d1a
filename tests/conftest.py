import pytest
import structlog

from tests.mocks.consumers import Client


@pytest.fixture
def client():
    return Client()


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after tests that configure it."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
