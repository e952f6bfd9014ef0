"""Operations on a single client account."""
from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("clients")
class Clients(CapabilityClient):
    """Client details, campaigns, lists and suppression."""

    capability = "clients"

    @operation
    def get(self):
        return self.perform("details")

    @operation
    def get_campaigns(self):
        return self.perform("campaigns")

    @operation
    def get_drafts(self):
        return self.perform("drafts")

    @operation
    def get_scheduled(self):
        return self.perform("scheduled")

    @operation
    def get_lists(self):
        return self.perform("lists")

    @operation
    def get_segments(self):
        return self.perform("segments")

    @operation
    def get_templates(self):
        return self.perform("templates")

    @operation
    def get_suppressionlist(self, page=1, page_size=1000):
        return self.perform("suppressionlist", {"page": page, "pagesize": page_size})

    @operation
    def suppress(self, emails):
        return self.perform("suppress", {"EmailAddresses": list(emails)})

    @operation
    def create(self, client):
        return self.perform("create", client)

    @operation
    def set_basics(self, basics):
        return self.perform("setbasics", basics)

    @operation
    def delete(self):
        return self.perform("delete")
