"""Subscriber list operations."""
from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("lists")
class Lists(CapabilityClient):
    capability = "lists"

    @operation
    def get(self):
        return self.perform("details")

    @operation
    def get_stats(self):
        return self.perform("stats")

    @operation
    def get_custom_fields(self):
        return self.perform("customfields")

    @operation
    def get_segments(self):
        return self.perform("segments")

    @operation
    def get_active_subscribers(self, added_since="", page=1, page_size=1000):
        return self.perform("active", {"date": added_since, "page": page, "pagesize": page_size})

    @operation
    def get_unsubscribed_subscribers(self, added_since="", page=1, page_size=1000):
        return self.perform("unsubscribed", {"date": added_since, "page": page, "pagesize": page_size})

    @operation
    def get_bounced_subscribers(self, added_since="", page=1, page_size=1000):
        return self.perform("bounced", {"date": added_since, "page": page, "pagesize": page_size})

    @operation
    def get_webhooks(self):
        return self.perform("webhooks")

    @operation
    def create(self, client_id, list_details):
        return self.perform("create", {"client_id": client_id, **list_details})

    @operation
    def update(self, list_details):
        return self.perform("update", list_details)

    @operation
    def create_custom_field(self, field):
        return self.perform("create_customfield", field)

    @operation
    def delete(self):
        return self.perform("delete")
