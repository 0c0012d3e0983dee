"""
Transport boundary for the request engine.

A transport is any awaitable callable taking a ``RequestSpec`` and returning
an ``httpx.Response``. Network-level failures surface as ``httpx.RequestError``
and are passed through untouched by the engine.
"""

import copy
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from shared.config import BaseConfig, get_default_config
from shared.logging import get_logger

CREDENTIALS_INCLUDE = "include"


@dataclass
class RequestSpec:
    """Everything needed to issue one HTTP call."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    credentials: Optional[str] = CREDENTIALS_INCLUDE

    def copy(self) -> "RequestSpec":
        # Body is opaque and shared; headers are owned per instance.
        return replace(self, headers=copy.deepcopy(self.headers))


Transport = Callable[[RequestSpec], Awaitable[httpx.Response]]


class HttpxTransport:
    """Default transport backed by ``httpx.AsyncClient``.

    Ambient credentials are modelled as a cookie jar owned by the transport:
    requests whose spec carries ``credentials="include"`` send the jar and
    store any cookies the backend sets; requests without it send none.
    """

    def __init__(
        self,
        settings: Optional[BaseConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        cookies: Optional[Dict[str, str]] = None,
    ):
        self.settings = settings or get_default_config()
        self.logger = get_logger("client_cache.transport")
        self.cookies = httpx.Cookies(cookies)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.http_timeout_seconds),
                headers={"User-Agent": self.settings.user_agent},
            )
        return self._client

    def _build_request(self, client: httpx.AsyncClient, spec: RequestSpec) -> httpx.Request:
        headers = dict(spec.headers)
        if spec.credentials == CREDENTIALS_INCLUDE and self.cookies:
            headers.setdefault(
                "Cookie",
                "; ".join(f"{name}={value}" for name, value in self.cookies.items())
            )

        kwargs: Dict[str, Any] = {}
        if spec.body is not None:
            if isinstance(spec.body, (str, bytes)):
                kwargs["content"] = spec.body
            else:
                kwargs["json"] = spec.body

        return client.build_request(spec.method, spec.url, headers=headers, **kwargs)

    async def __call__(self, spec: RequestSpec) -> httpx.Response:
        client = self._get_client()
        request = self._build_request(client, spec)

        self.logger.debug(
            "Dispatching request",
            method=spec.method,
            url=spec.url,
            credentials=spec.credentials
        )
        response = await client.send(request)

        if spec.credentials == CREDENTIALS_INCLUDE:
            self.cookies.extract_cookies(response)
        # The client jar would otherwise leak cookies into credential-less requests.
        client.cookies.clear()

        return response

    async def aclose(self):
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
