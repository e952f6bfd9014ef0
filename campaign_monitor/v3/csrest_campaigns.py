"""Campaign operations: reporting, creation and sending."""
from campaign_monitor.capabilities import CapabilityClient, operation
from campaign_monitor.registry import register_capability


@register_capability("campaigns")
class Campaigns(CapabilityClient):
    """Campaign reporting plus the create/send lifecycle."""

    capability = "campaigns"

    @operation
    def get_summary(self):
        return self.perform("summary")

    @operation
    def get_lists_and_segments(self):
        return self.perform("listsandsegments")

    @operation
    def get_recipients(self, page=1, page_size=1000):
        return self.perform("recipients", {"page": page, "pagesize": page_size})

    @operation
    def get_opens(self, since=""):
        return self.perform("opens", {"date": since})

    @operation
    def get_clicks(self, since=""):
        return self.perform("clicks", {"date": since})

    @operation
    def get_unsubscribes(self, since=""):
        return self.perform("unsubscribes", {"date": since})

    @operation
    def get_bounces(self, since=""):
        return self.perform("bounces", {"date": since})

    @operation
    def create(self, client_id, campaign):
        return self.perform("create", {"client_id": client_id, **campaign})

    @operation
    def send(self, confirmation_email, send_date="immediately"):
        return self.perform("send", {"ConfirmationEmail": confirmation_email, "SendDate": send_date})

    @operation
    def send_preview(self, recipients, personalize="fallback"):
        return self.perform("sendpreview", {"PreviewRecipients": list(recipients), "Personalize": personalize})

    @operation
    def unschedule(self):
        return self.perform("unschedule")

    @operation
    def delete(self):
        return self.perform("delete")
