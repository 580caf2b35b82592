"""
Pytest configuration and shared fixtures for PocketBase MCP Server tests

APPROACH: Handlers run against an in-memory FakePocketBase
- Each test gets a fresh fake (no shared state, no network)
- Tools are called through the same ToolDispatcher the server uses
- Adapter-level tests use httpx.MockTransport instead (see test_client.py)
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import PocketBaseConfig
from dispatcher import ToolDispatcher
from tests.fake_pocketbase import FakePocketBase
from tests.handler_test_utils import HandlerTestHelper


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    """
    # Mark that we're in test mode
    import os
    os.environ['APP_ENV'] = 'test'


@pytest.fixture
def pb():
    """Fresh in-memory PocketBase for each test"""
    return FakePocketBase()


@pytest.fixture
def admin_pb():
    """In-memory PocketBase whose config carries admin credentials"""
    config = PocketBaseConfig(
        url="http://pocketbase.test",
        admin_email="admin@example.com",
        admin_password="admin-secret",
    )
    fake = FakePocketBase(config)
    fake.add_user("admin@example.com", "admin-secret", collection="_superusers")
    return fake


@pytest.fixture
def dispatcher(pb):
    return ToolDispatcher(pb)


@pytest.fixture
def helper(pb):
    """Calls tools through the dispatcher like the server does"""
    return HandlerTestHelper(pb)
