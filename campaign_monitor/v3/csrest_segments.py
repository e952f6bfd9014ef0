from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("segments")
class Segments(CapabilityClient):
    capability = "segments"

    @operation
    def get(self):
        return self.perform("details")

    @operation
    def get_subscribers(self, added_since="", page=1, page_size=1000):
        return self.perform("active", {"date": added_since, "page": page, "pagesize": page_size})

    @operation
    def create(self, list_id, segment):
        return self.perform("create", {"list_id": list_id, **segment})

    @operation
    def update(self, segment):
        return self.perform("update", segment)

    @operation
    def delete(self):
        return self.perform("delete")
