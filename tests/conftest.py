import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to the path to allow imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from campaign_monitor.cache import FileCache


class RecordingTransport:
    """Transport double recording every call.

    Responses are looked up by qualified operation name; an exception
    instance is raised, anything else is returned.  Unknown operations get a
    payload carrying a running call number so repeated calls differ.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = responses or {}
        self.calls: List[tuple] = []

    def perform(self, operation, resource_id, api_key, scheme, payload=None):
        self.calls.append((operation, resource_id, api_key, scheme, payload))
        response = self.responses.get(operation)
        if isinstance(response, Exception):
            raise response
        if response is not None:
            return response
        return {"operation": operation, "resource_id": resource_id, "call": len(self.calls)}

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def file_cache(cache_dir):
    return FileCache(cache_dir, ttl=300, lock_timeout=2)


@pytest.fixture
def make_transport():
    """Factory for transports with canned responses."""
    return RecordingTransport
