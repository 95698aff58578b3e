"""Shared pytest configuration for tts_batch tests."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to sys.path so `from tts_batch.xxx import ...` works.
_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from tts_batch.endpoint_client import EndpointClient  # noqa: E402
from tts_batch.logging_setup import AppendFileHandler, ConsoleHandler  # noqa: E402
from tts_batch.models import Endpoint  # noqa: E402

BASE_URL = "https://ep-test123.api.runpod.ai"
API_KEY = "rp_test_key"


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def endpoint() -> Endpoint:
    return Endpoint(base_url=BASE_URL, api_key=API_KEY, endpoint_id="ep-test123")


@pytest_asyncio.fixture
async def client(endpoint: Endpoint) -> EndpointClient:
    """Create an EndpointClient, yield it, then close."""
    c = EndpointClient(endpoint)
    await c.start()
    yield c
    await c.close()


class SleepRecorder:
    """Stands in for asyncio.sleep; records each requested delay."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Drop handlers installed by setup_logging() so tests stay isolated."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, (ConsoleHandler, AppendFileHandler)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
