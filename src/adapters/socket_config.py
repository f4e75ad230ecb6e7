"""CyTube socket config lookup adapter.

Converts a domain and channel name into the Socket.IO server address by
fetching the channel's socket config document.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence
from urllib.parse import urlsplit

import httpx

from core.errors import StartupError
from core.models import SocketServer

LOGGER = logging.getLogger(__name__)

LOOKUP_TIMEOUT = 10.0
_HOST_CHARS = set("abcdefghijklmnopqrstuvwxyz0123456789-.")


def _is_host(value: str) -> bool:
    if not value or len(value) > 253:
        return False
    lowered = value.lower()
    if not set(lowered) <= _HOST_CHARS:
        return False
    return all(label and not label.startswith("-") for label in lowered.rstrip(".").split("."))


def parse_domain(value: str) -> str:
    """Parse a host from a plain domain name or a URL."""

    candidate = value.strip()
    if _is_host(candidate):
        return candidate.lower()
    parts = urlsplit(candidate)
    if parts.scheme and parts.hostname and _is_host(parts.hostname):
        return parts.hostname
    raise ValueError("Not a valid domain or URL")


def socket_config_url(domain: str, channel: str) -> str:
    return f"https://{domain}/socketconfig/{channel}.json"


def parse_socket_config(document: Any) -> List[SocketServer]:
    """Validate the socket config document and return its server entries."""

    if not isinstance(document, dict):
        raise StartupError("Failed to parse CyTube socket config: expected an object")
    servers = document.get("servers")
    if not isinstance(servers, list):
        raise StartupError("Failed to parse CyTube socket config: 'servers' must be a list")

    parsed: List[SocketServer] = []
    for entry in servers:
        if not isinstance(entry, dict) or not isinstance(entry.get("url"), str):
            raise StartupError("Failed to parse CyTube socket config: server entry without url")
        parsed.append(SocketServer(url=entry["url"], secure=bool(entry.get("secure", False))))
    return parsed


def select_server(servers: Sequence[SocketServer]) -> SocketServer:
    """Take the head of the server list; an empty list is a startup failure."""

    if not servers:
        raise StartupError("Failed to find socket address in CyTube socket config")
    return servers[0]


async def lookup_socket_address(
    domain: str,
    channel: str,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Fetch the CyTube socket config and return the first server URL."""

    LOGGER.info("Looking up socket address...")
    url = socket_config_url(domain, channel)
    LOGGER.debug("Fetching socket config from %s", url)

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=LOOKUP_TIMEOUT)
    try:
        response = await http.get(url)
        response.raise_for_status()
        document = response.json()
    except httpx.HTTPStatusError as exc:
        raise StartupError(
            f"Failed to fetch CyTube socket config: "
            f"{exc.response.status_code} {exc.response.reason_phrase}"
        ) from exc
    except httpx.HTTPError as exc:
        raise StartupError(f"Failed to fetch CyTube socket config: {exc}") from exc
    except ValueError as exc:
        raise StartupError(f"Failed to parse CyTube socket config: {exc}") from exc
    finally:
        if owns_client:
            await http.aclose()

    server = select_server(parse_socket_config(document))
    LOGGER.info("Found %s", server.url)
    return server.url
