"""Tests for the CampaignMonitor caching dispatcher."""
import logging
import os
import time

import pytest

from campaign_monitor import UNKNOWN_OPERATION, CampaignMonitor, FileCache
from campaign_monitor.dispatcher import BUILTIN_OPERATIONS
from core.config import DEFAULT_CAPABILITY_PATH
from core.errors import CacheReadError, CapabilityNotFoundError, TransportError


@pytest.fixture
def monitor(file_cache, transport):
    return CampaignMonitor("api-key", cache=file_cache, transport=transport)


def _expire(path):
    old = time.time() - 10_000
    os.utime(path, (old, old))


class TestConstruction:
    def test_starts_with_general_selected(self, monitor):
        assert monitor.active_capability == "general"
        assert type(monitor.get_objects()).__name__ == "General"

    def test_defaults(self, monitor):
        assert monitor.get_api_key() == "api-key"
        assert monitor.get_base_path() == DEFAULT_CAPABILITY_PATH
        assert monitor.get_exclusions() == ["create", "send"]

    def test_secure_flag_selects_https(self, file_cache, transport):
        monitor = CampaignMonitor("api-key", secure=True, cache=file_cache, transport=transport)

        assert monitor.get_objects().scheme == "https"
        assert monitor.campaign("c1").scheme == "http"

    def test_invalid_key_scope(self):
        with pytest.raises(ValueError):
            CampaignMonitor("api-key", key_scope="args")

    def test_instances_do_not_share_credentials_or_base_path(self, tmp_path):
        first = CampaignMonitor("key-1")
        second = CampaignMonitor("key-2")
        first.set_base_path(tmp_path)

        assert second.get_api_key() == "key-2"
        assert second.get_base_path() == DEFAULT_CAPABILITY_PATH


class TestSelection:
    def test_campaign_selection_forwards_id_key_and_transport(self, monitor, transport):
        client = monitor.campaign("c1")

        assert monitor.get_objects() is client
        assert client.resource_id == "c1"
        assert client.api_key == "api-key"
        assert client.transport is transport

    def test_each_selection_replaces_the_active_client(self, monitor):
        lists = monitor.lists("l1")
        clients = monitor.client("cl1")

        assert monitor.get_objects() is clients
        assert monitor.get_objects() is not lists
        assert monitor.active_capability == "clients"

    def test_client_requires_an_id(self, monitor):
        with pytest.raises(ValueError):
            monitor.client(None)

    def test_load_arbitrary(self, monitor):
        subscribers = monitor.load_arbitrary("subscribers", "Subscribers", "list-9", True)

        assert monitor.active_capability == "subscribers"
        assert subscribers.resource_id == "list-9"
        assert subscribers.scheme == "https"

    def test_failed_selection_keeps_previous_client(self, monitor):
        campaigns = monitor.campaign("c1")

        with pytest.raises(CapabilityNotFoundError):
            monitor.load_arbitrary("nonexistent", "Nothing")

        assert monitor.get_objects() is campaigns
        assert monitor.active_capability == "campaigns"

    def test_api_key_change_applies_to_later_selections(self, monitor):
        before = monitor.campaign("c1")
        monitor.set_api_key("new-key")
        after = monitor.campaign("c1")

        assert before.api_key == "api-key"
        assert after.api_key == "new-key"


class TestInvokeCaching:
    def test_non_excluded_call_is_cached(self, monitor, transport, file_cache):
        monitor.campaign("c1")

        first = monitor.invoke("get_summary")
        second = monitor.invoke("get_summary")

        assert first == second
        assert transport.operations() == ["campaigns.summary"]
        assert file_cache.path_for("get_summary").exists()

    def test_cached_value_is_returned_even_when_arguments_differ(self, monitor, transport):
        monitor.campaign("c1")

        first = monitor.invoke("get_opens", "2020-01-01")
        second = monitor.invoke("get_opens", "2024-06-30")

        assert second == first
        assert len(transport.calls) == 1
        assert transport.calls[0][4] == {"date": "2020-01-01"}

    def test_cache_key_ignores_selected_client(self, monitor, transport):
        monitor.campaign("c1")
        first = monitor.invoke("get_summary")
        monitor.campaign("c2")
        second = monitor.invoke("get_summary")

        assert second == first
        assert second["resource_id"] == "c1"
        assert len(transport.calls) == 1

    def test_cached_value_served_even_if_new_client_lacks_operation(self, monitor):
        monitor.campaign("c1")
        cached = monitor.invoke("get_summary")
        monitor.lists("l1")

        assert monitor.invoke("get_summary") == cached

    @pytest.mark.parametrize("method", ["create", "send"])
    def test_excluded_calls_always_reach_the_client(self, monitor, transport, file_cache, method):
        monitor.campaign("c1")
        args = ("client-1", {"Name": "June"}) if method == "create" else ("ops@example.com",)

        first = monitor.invoke(method, *args)
        second = monitor.invoke(method, *args)

        assert first != second
        assert len(transport.calls) == 2
        assert not file_cache.path_for(method).exists()

    def test_excluded_call_ignores_existing_cache_file(self, monitor, transport, file_cache):
        file_cache.put("send", {"stale": True})
        monitor.campaign("c1")

        result = monitor.invoke("send", "ops@example.com")

        assert result["operation"] == "campaigns.send"
        assert file_cache.get("send") == {"stale": True}

    def test_added_exclusion_skips_read_and_write(self, monitor, transport, file_cache):
        monitor.campaign("c1")
        monitor.add_cache_exclusion("get_summary")

        monitor.invoke("get_summary")
        monitor.invoke("get_summary")

        assert "get_summary" in monitor.get_exclusions()
        assert len(transport.calls) == 2
        assert not file_cache.path_for("get_summary").exists()

    def test_add_cache_exclusion_through_invoke(self, monitor, file_cache):
        monitor.invoke("add_cache_exclusion", "get_bounces")
        monitor.invoke("add_cache_exclusion", "get_bounces")
        monitor.campaign("c1")
        monitor.invoke("get_bounces")

        assert monitor.get_exclusions().count("get_bounces") == 1
        assert not file_cache.path_for("get_bounces").exists()

    def test_expired_entry_is_refreshed(self, monitor, transport, file_cache):
        monitor.campaign("c1")
        first = monitor.invoke("get_summary")
        _expire(file_cache.path_for("get_summary"))

        second = monitor.invoke("get_summary")

        assert len(transport.calls) == 2
        assert second != first
        assert file_cache.get("get_summary") == second

    def test_zero_ttl_always_calls_through(self, monitor, transport, file_cache):
        monitor.set_cache_length(0)
        monitor.campaign("c1")

        monitor.invoke("get_summary")
        monitor.invoke("get_summary")

        assert len(transport.calls) == 2
        assert file_cache.path_for("get_summary").exists()

    def test_cache_disabled_without_location(self, transport):
        monitor = CampaignMonitor("api-key", transport=transport)
        monitor.campaign("c1")

        monitor.invoke("get_summary")
        monitor.invoke("get_summary")

        assert monitor.get_cache_location() is None
        assert len(transport.calls) == 2

    def test_set_cache_options(self, transport, cache_dir):
        monitor = CampaignMonitor("api-key", transport=transport)
        monitor.set_cache_options(str(cache_dir), 120)
        monitor.campaign("c1")

        monitor.invoke("get_summary")
        monitor.invoke("get_summary")

        assert monitor.get_cache_location() == cache_dir
        assert monitor.get_cache_length() == 120
        assert len(transport.calls) == 1

    def test_call_key_scope_separates_arguments_and_clients(self, file_cache, transport):
        monitor = CampaignMonitor("api-key", cache=file_cache, transport=transport, key_scope="call")
        monitor.campaign("c1")

        monitor.invoke("get_opens", "2020-01-01")
        monitor.invoke("get_opens", "2020-01-01")
        monitor.invoke("get_opens", "2024-06-30")
        monitor.campaign("c2")
        monitor.invoke("get_opens", "2020-01-01")

        assert len(transport.calls) == 3
        assert not file_cache.path_for("get_opens").exists()

    def test_corrupt_cache_entry_is_a_hard_error(self, monitor, transport, file_cache):
        file_cache.path_for("get_summary").write_text("{oops", encoding="utf-8")
        monitor.campaign("c1")

        with pytest.raises(CacheReadError):
            monitor.invoke("get_summary")
        assert transport.calls == []

    def test_cache_write_failure_still_returns_result(self, transport, tmp_path, caplog):
        monitor = CampaignMonitor(
            "api-key",
            cache=FileCache(tmp_path / "missing", ttl=60),
            transport=transport,
        )
        monitor.campaign("c1")

        with caplog.at_level(logging.WARNING, logger="campaign_monitor"):
            result = monitor.invoke("get_summary")

        assert result["operation"] == "campaigns.summary"
        assert "Could not cache result of 'get_summary'" in caplog.text

    @pytest.mark.parametrize("response", [("a", "b"), {1: "opened", 2: "clicked"}])
    def test_results_changed_by_json_are_never_cached(self, make_transport, file_cache, caplog, response):
        transport = make_transport({"campaigns.summary": response})
        monitor = CampaignMonitor("api-key", cache=file_cache, transport=transport)
        monitor.campaign("c1")

        with caplog.at_level(logging.WARNING, logger="campaign_monitor"):
            first = monitor.invoke("get_summary")
            second = monitor.invoke("get_summary")

        assert first == response
        assert second == response
        assert len(transport.calls) == 2
        assert not file_cache.path_for("get_summary").exists()
        assert "Could not cache result of 'get_summary'" in caplog.text


class TestInvokeDispatch:
    def test_unknown_operation_returns_sentinel(self, monitor, transport, file_cache):
        monitor.campaign("c1")

        result = monitor.invoke("get_everything")

        assert result is UNKNOWN_OPERATION
        assert not result
        assert transport.calls == []
        assert not file_cache.path_for("get_everything").exists()

    def test_supports(self, monitor):
        monitor.campaign("c1")

        assert monitor.supports("get_summary")
        assert monitor.supports("set_cache_options")
        assert not monitor.supports("get_custom_fields")

    def test_transport_error_propagates_and_is_not_cached(self, file_cache, make_transport):
        failure = TransportError("503 from upstream")
        monitor = CampaignMonitor(
            "api-key",
            cache=file_cache,
            transport=make_transport({"campaigns.summary": failure}),
        )
        monitor.campaign("c1")

        with pytest.raises(TransportError) as excinfo:
            monitor.invoke("get_summary")

        assert excinfo.value is failure
        assert not file_cache.path_for("get_summary").exists()

    def test_default_transport_fails_loudly(self, file_cache):
        monitor = CampaignMonitor("api-key", cache=file_cache)

        with pytest.raises(TransportError):
            monitor.invoke("get_clients")

    def test_builtins_run_through_invoke_without_caching(self, monitor, file_cache, tmp_path):
        assert monitor.invoke("get_api_key") == "api-key"
        monitor.invoke("set_api_key", "other")
        assert monitor.invoke("get_api_key") == "other"

        client = monitor.invoke("campaign", "c7")
        assert monitor.get_objects() is client
        monitor.invoke("set_base_path", tmp_path)
        assert monitor.invoke("get_base_path") == tmp_path

        for name in BUILTIN_OPERATIONS:
            assert not file_cache.path_for(name).exists()

    def test_general_operations(self, make_transport, file_cache):
        transport = make_transport({"general.clients": [{"ClientID": "cl1", "Name": "Acme"}]})
        monitor = CampaignMonitor("api-key", cache=file_cache, transport=transport)

        assert monitor.invoke("get_clients") == [{"ClientID": "cl1", "Name": "Acme"}]
        assert transport.calls == [("general.clients", None, "api-key", "http", None)]
