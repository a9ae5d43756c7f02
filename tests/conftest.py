import pytest
from unittest.mock import AsyncMock, MagicMock

from catalog.clients import DeviceStore
from catalog.models import Business, DateIdea
from catalog.repository import Repository


@pytest.fixture
def store(tmp_path):
    """Real sqlite-backed device store in a temporary directory."""
    return DeviceStore(str(tmp_path / "device.sqlite3"))

@pytest.fixture
def remote():
    """Remote store mock; list_documents and get_document are call-count spies."""
    client = MagicMock()
    client.list_documents = AsyncMock(return_value=[])
    client.get_document = AsyncMock(return_value=None)
    client.close = AsyncMock()
    return client

@pytest.fixture
def reachability():
    client = MagicMock()
    client.is_connected = AsyncMock(return_value=True)
    return client

@pytest.fixture
def date_idea_repo(remote, store):
    return Repository("date_ideas", "date_ideas", "date_ideas_cache", DateIdea, remote, store)

@pytest.fixture
def business_repo(remote, store):
    return Repository(
        "businesses", "businesses", "businesses_cache", Business, remote, store,
        relation_field="related_idea_ids",
    )
