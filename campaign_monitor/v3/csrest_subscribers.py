"""Subscriber operations; the resource id is the list id."""
from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("subscribers")
class Subscribers(CapabilityClient):
    capability = "subscribers"

    @operation
    def get(self, email):
        return self.perform("details", {"email": email})

    @operation
    def get_history(self, email):
        return self.perform("history", {"email": email})

    @operation
    def add(self, subscriber):
        return self.perform("add", subscriber)

    @operation
    def update(self, email, subscriber):
        return self.perform("update", {"email": email, **subscriber})

    @operation
    def import_subscribers(self, subscribers, resubscribe=False):
        return self.perform("import", {"Subscribers": list(subscribers), "Resubscribe": resubscribe})

    @operation
    def unsubscribe(self, email):
        return self.perform("unsubscribe", {"EmailAddress": email})

    @operation
    def delete(self, email):
        return self.perform("delete", {"email": email})
