from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("templates")
class Templates(CapabilityClient):
    capability = "templates"

    @operation
    def get(self):
        return self.perform("details")

    @operation
    def create(self, client_id, template):
        return self.perform("create", {"client_id": client_id, **template})

    @operation
    def update(self, template):
        return self.perform("update", template)

    @operation
    def delete(self):
        return self.perform("delete")
