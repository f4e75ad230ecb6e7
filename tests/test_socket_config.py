from __future__ import annotations

import asyncio
from typing import Callable, Optional

import httpx
import pytest

from adapters.socket_config import (
    lookup_socket_address,
    parse_domain,
    parse_socket_config,
    select_server,
    socket_config_url,
)
from core.errors import StartupError
from core.models import SocketServer


def _lookup(handler: Callable[[httpx.Request], httpx.Response]) -> str:
    async def scenario() -> str:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await lookup_socket_address("cytu.be", "lounge", client=client)

    return asyncio.run(scenario())


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("cytu.be", "cytu.be"),
        ("https://cytu.be", "cytu.be"),
        ("https://cytu.be/r/lounge", "cytu.be"),
        ("@t!", None),
        ("", None),
    ],
)
def test_parse_domain(value: str, expected: Optional[str]) -> None:
    if expected is None:
        with pytest.raises(ValueError, match="Not a valid domain or URL"):
            parse_domain(value)
    else:
        assert parse_domain(value) == expected


def test_socket_config_url() -> None:
    assert socket_config_url("cytu.be", "lounge") == "https://cytu.be/socketconfig/lounge.json"


def test_select_server_takes_head() -> None:
    servers = [SocketServer("https://a:443", True), SocketServer("http://b:80", False)]
    assert select_server(servers).url == "https://a:443"


def test_select_server_empty_is_startup_error() -> None:
    with pytest.raises(StartupError, match="Failed to find socket address"):
        select_server([])


def test_parse_socket_config_rejects_entries_without_url() -> None:
    with pytest.raises(StartupError):
        parse_socket_config({"servers": [{"secure": True}]})
    with pytest.raises(StartupError):
        parse_socket_config({"servers": "https://a:443"})
    with pytest.raises(StartupError):
        parse_socket_config(["https://a:443"])


def test_lookup_returns_first_server() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(
            200,
            json={
                "servers": [
                    {"url": "https://cytu.be:10443", "secure": True},
                    {"url": "http://cytu.be:1337", "secure": False},
                ]
            },
        )

    assert _lookup(handler) == "https://cytu.be:10443"
    assert seen == ["https://cytu.be/socketconfig/lounge.json"]


def test_lookup_without_servers_fails() -> None:
    with pytest.raises(StartupError, match="Failed to find"):
        _lookup(lambda request: httpx.Response(200, json={"servers": []}))


def test_lookup_http_error_fails() -> None:
    with pytest.raises(StartupError, match="404"):
        _lookup(lambda request: httpx.Response(404, text="no such channel"))


def test_lookup_malformed_document_fails() -> None:
    with pytest.raises(StartupError, match="parse"):
        _lookup(lambda request: httpx.Response(200, text="<html>not json</html>"))


def test_lookup_transport_error_fails() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StartupError, match="Failed to fetch"):
        _lookup(handler)
