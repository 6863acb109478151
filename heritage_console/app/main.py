"""
Process-wide wiring for the Heritage Console data-access layer.
"""

from typing import Optional

from shared.config import ConsoleSettings, get_config
from shared.logging import configure_logging, get_logger
from .adapters import RequestClient


_client: Optional[RequestClient] = None


def create_client(settings: Optional[ConsoleSettings] = None, **kwargs) -> RequestClient:
    """Build a request client and configure logging from its settings."""
    settings = settings or get_config()
    configure_logging("console", settings.log_level)

    client = RequestClient(settings, **kwargs)
    get_logger("console.main").info(
        "Request client created",
        env=settings.env,
        api_base_url=settings.api_base_url,
        public_endpoints=len(client.policy.rules)
    )
    return client


def get_request_client() -> RequestClient:
    """The process's single request client, created on first use."""
    global _client
    if _client is None:
        _client = create_client()
    return _client


def set_request_client(client: Optional[RequestClient]) -> None:
    """Install (or with None, drop) the process's request client."""
    global _client
    _client = client
