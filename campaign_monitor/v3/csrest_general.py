"""Account-wide operations that need no resource id."""
from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("general")
class General(CapabilityClient):
    """Account level calls (clients, countries, timezones, billing)."""

    capability = "general"

    @operation
    def get_clients(self):
        return self.perform("clients")

    @operation
    def get_countries(self):
        return self.perform("countries")

    @operation
    def get_timezones(self):
        return self.perform("timezones")

    @operation
    def get_systemdate(self):
        return self.perform("systemdate")

    @operation
    def get_billing_details(self):
        return self.perform("billingdetails")

    @operation
    def get_primary_contact(self):
        return self.perform("primarycontact")

    @operation
    def set_primary_contact(self, email):
        return self.perform("set_primarycontact", {"email": email})
