"""
Error taxonomy for the mood-check notification pipeline.
"""


class NotificationError(Exception):
    """Base class for notification pipeline errors."""


class ConfigurationError(NotificationError):
    """A required credential or secret is missing. Fatal for the invocation."""


class TriggerAuthError(NotificationError):
    """The trigger invocation could not be authenticated."""


class InvalidEventPayload(NotificationError):
    """A change-notification payload does not have the expected shape."""


class DataStoreError(NotificationError):
    """A data-store read or write failed. Retryable; never means "no data"."""


class IdentityLookupError(NotificationError):
    """The identity provider could not resolve a user."""


class EmailDispatchError(NotificationError):
    """Delivery to a single recipient failed."""

    def __init__(self, message: str, recipient: str = None):
        super().__init__(message)
        self.recipient = recipient
