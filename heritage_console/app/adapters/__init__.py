"""
Adapters package for the Heritage Console.

Contains the request client that fronts the backend REST API and the
collaborators it consults on every call:

- Endpoint policy: which paths are public (no credential, cacheable)
- Credential store: the bearer token attached to private calls
- Notification sink: where user-facing failure messages go

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .endpoint_policy import EndpointPolicy, EndpointRule
from .credentials import TokenStore
from .notifications import Notification, NotificationSink, LoggingNotificationSink
from .request_client import RequestClient

__all__ = [
    "EndpointPolicy",
    "EndpointRule",
    "TokenStore",
    "Notification",
    "NotificationSink",
    "LoggingNotificationSink",
    "RequestClient",
]
