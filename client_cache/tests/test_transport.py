"""
Unit tests for the httpx-backed transport.
"""

import json
from typing import List

import httpx
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from client_cache.app.net import Http, HttpxTransport, RequestSpec
from shared.config import BaseConfig

URL = "https://api.example.com/feedbacks"


class TestHttpxTransport:
    """Test cases for HttpxTransport."""

    @pytest.fixture
    def seen(self) -> List[httpx.Request]:
        return []

    @pytest.fixture
    def client(self, seen):
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True}, headers={"set-cookie": "refresh=fresh; Path=/"})

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    @pytest.fixture
    def transport(self, client):
        return HttpxTransport(BaseConfig(), client=client, cookies={"sid": "abc"})

    @pytest.mark.asyncio
    async def test_json_body_is_encoded(self, transport, seen):
        spec = RequestSpec(method="POST", url=URL, headers={"X-Request-Id": "1"}, body={"content": "hi"})

        response = await transport(spec)

        assert response.status_code == 200
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["x-request-id"] == "1"
        assert json.loads(request.content) == {"content": "hi"}

    @pytest.mark.asyncio
    async def test_string_body_is_sent_verbatim(self, transport, seen):
        await transport(RequestSpec(method="PUT", url=URL, body="raw"))

        assert seen[0].content == b"raw"

    @pytest.mark.asyncio
    async def test_include_credentials_sends_cookie_jar(self, transport, seen):
        await transport(RequestSpec(method="GET", url=URL, credentials="include"))

        assert seen[0].headers["cookie"] == "sid=abc"
        assert transport.cookies.get("refresh") == "fresh"

    @pytest.mark.asyncio
    async def test_without_credentials_no_cookies_are_sent(self, transport, seen):
        await transport(RequestSpec(method="GET", url=URL, credentials="include"))
        await transport(RequestSpec(method="GET", url=URL, credentials=None))

        assert "cookie" not in seen[1].headers
        assert transport.cookies.get("refresh") == "fresh"

    @pytest.mark.asyncio
    async def test_token_request_through_http(self, transport, seen):
        http = Http(URL, transport=transport, settings=BaseConfig(credentials_mode="include"))

        result = await http.set_token("t0ken").get().send()

        assert result == {"ok": True}
        assert seen[0].headers["authorization"] == "OAuth2 t0ken"
        assert "cookie" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, transport, client):
        await transport.aclose()

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        transport = HttpxTransport(BaseConfig(http_timeout_seconds=3.0))
        client = transport._get_client()

        assert client.timeout.read == 3.0
        async with transport:
            pass

        assert client.is_closed is True
