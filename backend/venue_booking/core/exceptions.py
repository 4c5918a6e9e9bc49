"""
Domain exceptions raised by the service layer and translated by the web layer.
"""


class BookingRejected(Exception):
    """A booking submission failed validation.

    `flag` is the value carried back to the venue page in the `conflict`
    query parameter, which the page renders as a human-readable message.
    """

    def __init__(self, flag: str, event_date: str = ""):
        super().__init__(flag)
        self.flag = flag
        self.event_date = event_date


class AdminAuthRequired(Exception):
    """An admin operation was called without a verified admin identity."""
