"""
Request client for the console's backend REST API.
"""

import asyncio
import io
import os
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional, Tuple, Union

import httpx

from shared.config import ConsoleSettings, get_config
from shared.errors import ApiRequestError, ErrorKind, NormalizedError, error_class_for, error_text
from shared.logging import get_logger, set_request_id
from shared.metrics import ClientMetrics
from shared.retry import retry
from ..caching import InFlightTable, ResponseCache, make_cache_key
from ..normalization import normalize_error, normalize_page
from .credentials import TokenStore
from .endpoint_policy import EndpointPolicy, EndpointRule
from .notifications import LoggingNotificationSink, Notification, NotificationSink


ProgressCallback = Callable[[int, Optional[int]], None]
UploadSource = Union[bytes, str, os.PathLike, BinaryIO]

DEFAULT_DOWNLOAD_NAME = "download"


class _ProgressReader:
    """Binary reader reporting how many bytes httpx has consumed.

    httpx rewinds file fields before sending them, so the whole stream is
    sent whatever its position, and a re-attempted upload reports progress
    from zero again. ``total`` is None for streams that cannot seek.
    """

    def __init__(self, stream: BinaryIO, on_progress: Optional[ProgressCallback]):
        self._stream = stream
        self._on_progress = on_progress
        self.loaded = 0
        try:
            self.total: Optional[int] = stream.seek(0, os.SEEK_END)
            stream.seek(0)
        except (AttributeError, OSError):
            self.total = None

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self.loaded += len(chunk)
            if self._on_progress is not None:
                self._on_progress(self.loaded, self.total)
        return chunk

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self.loaded = self._stream.seek(offset, whence)
        return self.loaded

    def tell(self) -> int:
        return self._stream.tell()


class RequestClient:
    """Single entry point for every backend call made by the console.

    Owns the response cache and the in-flight GET table; one instance is
    meant to serve the whole process (see ``app.main.get_request_client``).
    Every failure reaches callers as an ``ApiRequestError`` carrying a
    ``NormalizedError``.
    """

    def __init__(self,
                 settings: Optional[ConsoleSettings] = None,
                 *,
                 token_store: Optional[TokenStore] = None,
                 notifier: Optional[NotificationSink] = None,
                 policy: Optional[EndpointPolicy] = None,
                 metrics: Optional[ClientMetrics] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 on_unauthorized: Optional[Callable[[NormalizedError], None]] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.settings = settings or get_config()
        self.logger = get_logger("console.request_client")
        self.token_store = token_store or TokenStore(self.settings.token_file)
        self.notifier = notifier or LoggingNotificationSink()
        self.policy = policy or EndpointPolicy.from_prefixes(self.settings.public_endpoints)
        self.metrics = metrics or ClientMetrics()
        self.on_unauthorized = on_unauthorized
        self._transport = transport

        cache_options: Dict[str, Any] = {}
        if clock is not None:
            cache_options["clock"] = clock
        self.cache = ResponseCache(
            ttl=self.settings.cache_ttl,
            max_entries=self.settings.cache_max_entries,
            **cache_options
        )
        self.in_flight = InFlightTable()

    # Reads

    async def get(self,
                  url: str,
                  params: Optional[Mapping[str, Any]] = None,
                  *,
                  headers: Optional[Dict[str, str]] = None,
                  timeout: Optional[float] = None,
                  notify: bool = True) -> Any:
        """GET with deduplication and, for public paths, a short-lived cache."""
        params = dict(params or {})
        key = make_cache_key("GET", url, params)

        # Lookup and registration stay free of awaits so identical calls
        # issued in the same tick always find the leader.
        pending = self.in_flight.get(key)
        if pending is not None:
            self.metrics.increment_counter("deduplicated_requests_total")
            self.logger.debug("Joining in-flight request", url=url)
            return await asyncio.shield(pending)

        rule = self.policy.resolve(url)
        if rule.cacheable:
            entry = self.cache.get(key)
            if entry is not None:
                self.metrics.record_cache_event("hit")
                return entry.value
            self.metrics.record_cache_event("miss")

        task = self.in_flight.start(
            key,
            self._fetch(key, url, params, rule, headers=headers, timeout=timeout, notify=notify)
        )
        return await asyncio.shield(task)

    async def _fetch(self, key, url: str, params: Dict[str, Any], rule: EndpointRule, **options) -> Any:
        response = await self._send("GET", url, rule=rule, params=params, **options)
        result = self._process_response(response)

        if rule.cacheable:
            self.cache.set(key, result)
            self.metrics.record_cache_event("store")

        return result

    # Writes

    async def post(self, url: str, data: Any = None, **options) -> Any:
        response = await self._send("POST", url, json=_body(data), **options)
        return self._process_response(response)

    async def put(self, url: str, data: Any = None, **options) -> Any:
        response = await self._send("PUT", url, json=_body(data), **options)
        return self._process_response(response)

    async def patch(self, url: str, data: Any = None, **options) -> Any:
        response = await self._send("PATCH", url, json=_body(data), **options)
        return self._process_response(response)

    async def delete(self, url: str, **options) -> Any:
        response = await self._send("DELETE", url, **options)
        return self._process_response(response)

    # Transfers

    async def upload(self,
                     url: str,
                     file: UploadSource,
                     on_progress: Optional[ProgressCallback] = None,
                     *,
                     filename: Optional[str] = None,
                     content_type: str = "application/octet-stream",
                     headers: Optional[Dict[str, str]] = None,
                     timeout: Optional[float] = None,
                     notify: bool = True) -> Any:
        """POST ``file`` as the multipart field ``file``.

        ``on_progress`` receives ``(bytes_sent, total_bytes)`` as the body
        is streamed.
        """
        if isinstance(file, (bytes, bytearray)):
            stream, owned = io.BytesIO(bytes(file)), False
            name = filename or "file"
        elif isinstance(file, (str, os.PathLike)):
            path = Path(file)
            try:
                stream, owned = path.open("rb"), True
            except OSError as e:
                raise self._handle_failure(e, "POST", url, notify) from e
            name = filename or path.name
        else:
            stream, owned = file, False
            name = filename or os.path.basename(getattr(file, "name", "") or "file")

        try:
            reader = _ProgressReader(stream, on_progress)
            response = await self._send(
                "POST",
                url,
                files={"file": (name, reader, content_type)},
                headers=headers,
                timeout=timeout or self.settings.transfer_timeout,
                notify=notify
            )
        finally:
            if owned:
                stream.close()

        return self._process_response(response)

    async def download(self,
                       url: str,
                       filename: Optional[str] = None,
                       *,
                       headers: Optional[Dict[str, str]] = None,
                       timeout: Optional[float] = None,
                       notify: bool = True) -> Path:
        """Fetch a binary body and save it under the download directory."""
        response = await self._send(
            "GET",
            url,
            headers=headers,
            timeout=timeout or self.settings.transfer_timeout,
            notify=notify
        )

        target = Path(self.settings.download_dir) / _download_name(filename)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(target.write_bytes, response.content)
        except OSError as e:
            raise self._handle_failure(e, "GET", url, notify) from e

        self.logger.info("Download saved", url=url, path=str(target), size=len(response.content))
        return target

    def clear_cache(self) -> None:
        self.cache.clear()

    # Internals

    def _headers(self, rule: EndpointRule, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = dict(extra or {})
        if rule.attach_credentials:
            token = self.token_store.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(self,
                    method: str,
                    url: str,
                    *,
                    rule: Optional[EndpointRule] = None,
                    params: Optional[Dict[str, Any]] = None,
                    json: Any = None,
                    files: Optional[Dict[str, Tuple[str, Any, str]]] = None,
                    headers: Optional[Dict[str, str]] = None,
                    timeout: Optional[float] = None,
                    notify: bool = True) -> httpx.Response:
        """Issue one logical call through the retry policy."""
        set_request_id()
        rule = rule or self.policy.resolve(url)
        request_headers = self._headers(rule, headers)
        request_timeout = timeout or self.settings.request_timeout

        async def _request() -> httpx.Response:
            async with httpx.AsyncClient(
                base_url=self.settings.api_base_url,
                timeout=request_timeout,
                transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    files=files,
                    headers=request_headers
                )
            response.raise_for_status()
            return response

        try:
            with self.metrics.time_request(method):
                return await retry(
                    _request,
                    attempts_remaining=self.settings.retry_attempts,
                    delay=self.settings.retry_delay,
                    on_retry=self._on_retry
                )
        except Exception as e:
            raise self._handle_failure(e, method, url, notify) from e

    def _on_retry(self, error: Exception, delay: float) -> None:
        self.metrics.increment_counter("retries_total")

    def _process_response(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError:
            return response.text

        if isinstance(data, dict) and ("content" in data or "items" in data):
            data = normalize_page(data)
        return data

    def _handle_failure(self, error: Exception, method: str, url: str, notify: bool) -> ApiRequestError:
        """Normalize, log and report a failed call; returns the error to raise."""
        normalized = normalize_error(error, path=httpx.URL(url).path)

        log = self.logger.warning
        if normalized.kind != ErrorKind.HTTP_STATUS or normalized.status >= 500:
            log = self.logger.error
        log(
            "HTTP client error",
            url=url,
            method=method,
            status=normalized.status,
            kind=normalized.kind.value,
            message=normalized.server_message
        )

        if normalized.kind == ErrorKind.HTTP_STATUS and normalized.status == 401:
            self._handle_unauthorized(normalized)
        elif notify:
            self._notify(normalized)

        return error_class_for(normalized)(normalized, method=method)

    def _handle_unauthorized(self, normalized: NormalizedError) -> None:
        self.token_store.clear()
        if self.on_unauthorized is None:
            return
        try:
            self.on_unauthorized(normalized)
        except Exception as e:
            self.logger.error("Unauthorized handler failed", error=error_text(e))

    def _notify(self, normalized: NormalizedError) -> None:
        notification = Notification(
            message=normalized.message,
            severity="error",
            duration=self.settings.notification_duration
        )
        try:
            self.notifier.notify(notification)
        except Exception as e:
            self.logger.error("Notification delivery failed", error=error_text(e))


def _body(data: Any) -> Any:
    return {} if data is None else data


def _download_name(filename: Optional[str]) -> str:
    # Only the final component is kept so files stay inside download_dir
    name = Path(filename).name if filename else ""
    return name if name not in ("", ".", "..") else DEFAULT_DOWNLOAD_NAME
