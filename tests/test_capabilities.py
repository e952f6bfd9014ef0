"""Tests for the bundled capability clients."""
import pytest

from campaign_monitor.capabilities import CapabilityClient, NullTransport, operation, scheme_for
from campaign_monitor.loader import CapabilityLoader
from core.config import DEFAULT_CAPABILITY_PATH
from core.errors import TransportError, UnknownOperationError

BUNDLED = {
    "general": "General",
    "clients": "Clients",
    "lists": "Lists",
    "campaigns": "Campaigns",
    "subscribers": "Subscribers",
    "segments": "Segments",
    "templates": "Templates",
}


@pytest.fixture
def loader():
    return CapabilityLoader(DEFAULT_CAPABILITY_PATH)


@pytest.mark.parametrize("capability,implementation", sorted(BUNDLED.items()))
def test_bundled_capabilities_load(loader, transport, capability, implementation):
    client = loader.load(capability, implementation, "api-key", "res-1", "https", transport=transport)

    assert isinstance(client, CapabilityClient)
    assert client.capability == capability
    assert client.operations


def test_campaign_operation_table(loader, transport):
    campaigns = loader.load("campaigns", "Campaigns", "api-key", "c1", "http", transport=transport)

    assert {"get_summary", "get_recipients", "create", "send"} <= campaigns.operations
    assert "perform" not in campaigns.operations
    assert "call" not in campaigns.operations


def test_operations_route_through_transport(loader, transport):
    campaigns = loader.load("campaigns", "Campaigns", "api-key", "c1", "https", transport=transport)

    campaigns.call("send", "ops@example.com")

    assert transport.calls == [(
        "campaigns.send",
        "c1",
        "api-key",
        "https",
        {"ConfirmationEmail": "ops@example.com", "SendDate": "immediately"},
    )]


def test_call_rejects_undeclared_operation(loader, transport):
    lists = loader.load("lists", "Lists", "api-key", "l1", "http", transport=transport)

    with pytest.raises(UnknownOperationError):
        lists.call("get_summary")
    with pytest.raises(UnknownOperationError):
        lists.call("perform", "details")
    assert transport.calls == []


def test_operation_tables_are_inherited():
    class Base(CapabilityClient):
        capability = "base"

        @operation
        def get(self):
            return self.perform("details")

    class Child(Base):
        capability = "child"

        @operation
        def delete(self):
            return self.perform("delete")

        def helper(self):
            return None

    assert Base.operations == frozenset({"get"})
    assert Child.operations == frozenset({"get", "delete"})


def test_null_transport_raises():
    with pytest.raises(TransportError) as excinfo:
        NullTransport().perform("campaigns.summary", "c1", "api-key", "http")

    assert excinfo.value.details["operation"] == "campaigns.summary"


def test_scheme_for():
    assert scheme_for(True) == "https"
    assert scheme_for(False) == "http"
