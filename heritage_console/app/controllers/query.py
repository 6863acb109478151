"""
Query controller for console screens.
"""

import asyncio
from typing import Any, Callable, Dict, Mapping, Optional

from shared.errors import ApiRequestError, NormalizedError
from shared.logging import get_logger
from ..adapters import RequestClient
from ..main import get_request_client
from .state import RequestState


_UNSET = object()


class QueryController:
    """Holds the state of one GET for a screen.

    ``activate`` runs the query when the controller is enabled, ``update``
    re-runs it when its URL or parameters change, and ``refetch`` /
    ``refetch_with_params`` run it on demand. These return the scheduled
    ``asyncio.Task`` (or None when nothing runs) so callers may await it
    but never have to.

    Failures land in ``error`` and leave the last ``data`` in place; they
    are never re-raised.
    """

    def __init__(self,
                 url: Optional[str],
                 params: Optional[Mapping[str, Any]] = None,
                 *,
                 client: Optional[RequestClient] = None,
                 enabled: bool = True,
                 on_success: Optional[Callable[[Any], None]] = None,
                 on_error: Optional[Callable[[ApiRequestError], None]] = None):
        self.client = client or get_request_client()
        self.url = url
        self.params: Dict[str, Any] = dict(params or {})
        self.enabled = enabled
        self.on_success = on_success
        self.on_error = on_error
        self.state = RequestState()
        self.logger = get_logger("console.query")
        self._disposed = False

    @property
    def data(self) -> Any:
        return self.state.data

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[NormalizedError]:
        return self.state.error

    def activate(self) -> Optional["asyncio.Task[Any]"]:
        """Run the query if the controller is enabled."""
        if not self.enabled:
            return None
        return self.refetch()

    def update(self,
               url: Any = _UNSET,
               params: Optional[Mapping[str, Any]] = None,
               enabled: Optional[bool] = None) -> Optional["asyncio.Task[Any]"]:
        """Change the query's inputs; re-runs it when URL or params changed."""
        changed = False
        if url is not _UNSET and url != self.url:
            self.url = url
            changed = True
        if params is not None and dict(params) != self.params:
            self.params = dict(params)
            changed = True
        if enabled is not None and enabled != self.enabled:
            self.enabled = enabled
            changed = changed or enabled

        if changed and self.enabled:
            return self.refetch()
        return None

    def refetch(self) -> "asyncio.Task[Any]":
        """Repeat the query with the current parameters."""
        return asyncio.ensure_future(self._fetch(self.params))

    def refetch_with_params(self, params: Mapping[str, Any]) -> "asyncio.Task[Any]":
        """Run the query once with ``params`` merged over the current ones."""
        return asyncio.ensure_future(self._fetch({**self.params, **params}))

    def dispose(self) -> None:
        """Stop reflecting results in state; pending calls still complete."""
        self._disposed = True

    async def _fetch(self, params: Dict[str, Any]) -> Any:
        if not self.url:
            return None

        url = self.url
        self._update(loading=True, error=None)
        try:
            result = await self.client.get(url, params)
        except ApiRequestError as e:
            self.logger.warning("Failed to fetch data", url=url, status=e.status)
            self._update(loading=False, error=e.normalized_error)
            if self.on_error is not None:
                self.on_error(e)
            return None
        except asyncio.CancelledError:
            self._update(loading=False)
            raise

        self._update(loading=False, data=result)
        if self.on_success is not None:
            self.on_success(result)
        return result

    def _update(self, **changes: Any) -> None:
        if self._disposed:
            return
        for name, value in changes.items():
            setattr(self.state, name, value)
