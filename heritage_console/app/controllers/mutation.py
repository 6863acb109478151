"""
Mutation and upload controllers for console screens.
"""

import math
from typing import Any, Callable, Optional

from shared.errors import ApiRequestError, NormalizedError
from shared.logging import get_logger
from ..adapters import RequestClient
from ..adapters.request_client import UploadSource
from ..main import get_request_client
from .state import RequestState


METHODS = ("post", "put", "patch", "delete")


class MutationController:
    """Wraps one write (POST, PUT, PATCH or DELETE) for a screen.

    ``execute`` records ``loading``/``error`` like a query does, but also
    re-raises the ``ApiRequestError`` so the call site can react.
    """

    def __init__(self,
                 method: str,
                 url: Optional[str],
                 *,
                 client: Optional[RequestClient] = None,
                 on_success: Optional[Callable[[Any], None]] = None,
                 on_error: Optional[Callable[[ApiRequestError], None]] = None):
        method = method.lower()
        if method not in METHODS:
            raise ValueError(f"Unsupported mutation method: {method}")

        self.method = method
        self.url = url
        self.client = client or get_request_client()
        self.on_success = on_success
        self.on_error = on_error
        self.state = RequestState()
        self.logger = get_logger("console.mutation")

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[NormalizedError]:
        return self.state.error

    async def _dispatch(self, payload: Any) -> Any:
        if self.method == "delete":
            return await self.client.delete(self.url)
        return await getattr(self.client, self.method)(self.url, payload)

    async def execute(self, payload: Any = None) -> Any:
        """Send the write; returns the response data or raises ApiRequestError."""
        if not self.url:
            return None

        self.state.loading = True
        self.state.error = None
        try:
            result = await self._dispatch(payload)
        except ApiRequestError as e:
            self.logger.warning("Mutation failed", method=self.method, url=self.url, status=e.status)
            self.state.error = e.normalized_error
            if self.on_error is not None:
                self.on_error(e)
            raise
        finally:
            self.state.loading = False

        if self.on_success is not None:
            self.on_success(result)
        return result


class UploadController(MutationController):
    """Wraps a file upload, exposing ``progress`` as a 0-100 percentage."""

    def __init__(self, url: Optional[str], **kwargs):
        super().__init__("post", url, **kwargs)
        self.progress = 0

    def _on_progress(self, loaded: int, total: Optional[int]) -> None:
        if total:
            self.progress = math.floor(loaded * 100 / total + 0.5)

    async def _dispatch(self, payload: UploadSource) -> Any:
        return await self.client.upload(self.url, payload, self._on_progress)

    async def execute(self, payload: Optional[UploadSource] = None) -> Any:
        """Upload ``payload`` (bytes, a path or a binary file object)."""
        if payload is None:
            return None

        self.progress = 0
        try:
            return await super().execute(payload)
        finally:
            self.progress = 0
