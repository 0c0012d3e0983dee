"""
Memoized, clonable HTTP request engine.

An ``Http`` instance owns a mutable ``RequestSpec`` and shares a
``ResponseMemo`` with every instance cloned from it. Whichever instance of a
lineage sends first triggers the single transport call; all others replay
the settled outcome.
"""

import copy
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx

from shared.config import BaseConfig, get_default_config
from shared.errors import ConfigurationError, StatusError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .broadcast import ErrorBroadcast
from .memo import ResponseMemo
from .transport import HttpxTransport, RequestSpec, Transport

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE")

logger = get_logger("client_cache.http")


class ResponseError:
    """Failed response handed to error observers.

    The body has already been read, so ``text()`` and ``json()`` can be
    awaited any number of times by any observer.
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        self.status = response.status_code
        self.headers = response.headers

    async def text(self) -> str:
        return self.response.text

    async def json(self) -> Any:
        return self.response.json()


class HttpErrorMessage(StatusError):
    """Raised by ``send()`` when the backend answers with a failure status."""

    def __init__(self, method: str, url: str, error: ResponseError):
        self.method = method
        self.url = url
        self.error = error
        super().__init__(
            error.status,
            f"{method} {url} failed with status {error.status}",
            details={"method": method, "url": url, "status": error.status}
        )


@dataclass
class HttpResponseWithHeaders:
    """Decoded body together with case-insensitive response headers."""
    body: Any
    headers: httpx.Headers


def _decode(response: httpx.Response, method: str, metrics: Optional[MetricsCollector]) -> Any:
    try:
        return response.json()
    except ValueError:
        logger.debug("Response is not JSON, returning raw text", method=method)
        if metrics:
            metrics.increment_counter("decode_fallbacks_total", method=method)
        return response.text


def create_method(
    method: str,
    transport: Optional[Transport] = None,
    *,
    include_headers: bool = False,
    metrics: Optional[MetricsCollector] = None,
) -> Callable[..., Awaitable[Any]]:
    """Build an unmemoized request function for one HTTP verb.

    The returned coroutine function performs exactly one transport call per
    invocation, decodes JSON (falling back to raw text) and raises
    ``HttpErrorMessage`` for failure statuses.
    """
    verb = method.upper()
    if verb not in ALLOWED_METHODS:
        raise ConfigurationError(
            f"Unsupported HTTP method: {method}",
            details={"allowed": list(ALLOWED_METHODS)}
        )

    async def request(
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        credentials: Optional[str] = None,
    ) -> Any:
        spec = RequestSpec(
            method=verb,
            url=url,
            headers=dict(headers or {}),
            body=body,
            credentials=credentials
        )

        if metrics:
            metrics.increment_counter("transport_requests_total", method=verb)

        if transport is None:
            async with HttpxTransport() as owned:
                response = await owned(spec)
        else:
            response = await transport(spec)

        if response.is_error:
            logger.warning(
                "Request failed",
                method=verb,
                url=url,
                status_code=response.status_code
            )
            if metrics:
                metrics.increment_counter(
                    "http_status_errors_total",
                    method=verb,
                    status_code=str(response.status_code)
                )
            raise HttpErrorMessage(verb, url, ResponseError(response))

        body_value = _decode(response, verb, metrics)
        if include_headers:
            return HttpResponseWithHeaders(body=body_value, headers=response.headers)
        return body_value

    return request


def _join_url(base: str, path: Optional[str]) -> str:
    if not path:
        return base
    if path.startswith(("http://", "https://")) or not base:
        return path
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


class Http:
    """Request engine with single-flight memoization across clones."""

    include_headers = False

    def __init__(
        self,
        url: str = "",
        error_broadcast: Optional[ErrorBroadcast] = None,
        *,
        transport: Optional[Transport] = None,
        settings: Optional[BaseConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.settings = settings or get_default_config()
        self.url = url
        self.error_broadcast = error_broadcast
        self.transport = transport
        self.metrics = metrics
        self.logger = logger

        self._spec = RequestSpec(
            method="GET",
            url=url,
            credentials=self.settings.credentials_mode
        )
        self._memo = ResponseMemo()

    @property
    def spec(self) -> RequestSpec:
        """Snapshot of the request as it would be sent now."""
        return self._spec.copy()

    def _prepare(self, method: str, path_or_body: Any, body: Any) -> "Http":
        path = None
        if body is not None or isinstance(path_or_body, str):
            path = path_or_body
        else:
            body = path_or_body

        self._spec.method = method
        self._spec.url = _join_url(self.url, path)
        self._spec.body = body
        return self

    def get(self, path_or_body: Any = None, body: Any = None) -> "Http":
        return self._prepare("GET", path_or_body, body)

    def post(self, path_or_body: Any = None, body: Any = None) -> "Http":
        return self._prepare("POST", path_or_body, body)

    def put(self, path_or_body: Any = None, body: Any = None) -> "Http":
        return self._prepare("PUT", path_or_body, body)

    def delete(self, path_or_body: Any = None, body: Any = None) -> "Http":
        return self._prepare("DELETE", path_or_body, body)

    def set_headers(self, headers: Mapping[str, str]) -> "Http":
        """Merge a deep copy of ``headers`` into the request headers."""
        self._spec.headers.update(copy.deepcopy(dict(headers)))
        return self

    def set_token(self, token: str) -> "Http":
        """Authenticate with a token instead of ambient cookie credentials."""
        self._spec.headers["Authorization"] = f"{self.settings.token_scheme} {token}"
        self._spec.credentials = None
        return self

    def clone(self) -> "Http":
        """Copy the request config; share the memo, broadcast and transport."""
        cloned = copy.copy(self)
        cloned._spec = self._spec.copy()
        return cloned

    async def _dispatch(self) -> Any:
        spec = self._spec.copy()
        request = create_method(
            spec.method,
            self.transport,
            include_headers=self.include_headers,
            metrics=self.metrics
        )
        try:
            return await request(
                spec.url,
                headers=spec.headers,
                body=spec.body,
                credentials=spec.credentials
            )
        except HttpErrorMessage as message:
            if self.error_broadcast is not None:
                self.error_broadcast.emit(message)
            raise

    async def send(self) -> Any:
        """Resolve the lineage's response, triggering the call if nobody has."""
        if self._memo.settled or self._memo.in_flight:
            self.logger.debug(
                "Response memo hit",
                method=self._spec.method,
                url=self._spec.url,
                settled=self._memo.settled
            )
            if self.metrics:
                self.metrics.increment_counter("memo_hits_total", method=self._spec.method)
        return await self._memo.observe(self._dispatch)


class HttpWithResponseHeaders(Http):
    """``Http`` variant resolving to ``HttpResponseWithHeaders``."""

    include_headers = True


def get_http_with_response_headers(
    url: str = "",
    error_broadcast: Optional[ErrorBroadcast] = None,
    **kwargs: Any,
) -> HttpWithResponseHeaders:
    return HttpWithResponseHeaders(url, error_broadcast, **kwargs)
