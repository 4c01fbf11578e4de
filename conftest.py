"""Pytest config: add project root to path, shared Guru client fixtures."""

import sys
from pathlib import Path

import httpx
import pytest

# Add project root to Python path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from guru_mcp.api_client import GuruClient  # noqa: E402

TEST_BASE_URL = "https://api.getguru.com/api/v1"
TEST_EMAIL = "tester@example.com"
TEST_TOKEN = "guru-token"


@pytest.fixture
def make_guru_client():
    """Build a GuruClient whose HTTP calls are answered by `handler(request) -> httpx.Response`."""

    def _make(handler) -> GuruClient:
        return GuruClient(
            base_url=TEST_BASE_URL,
            email=TEST_EMAIL,
            token=TEST_TOKEN,
            transport=httpx.MockTransport(handler),
        )

    return _make
