"""Socket.IO-to-core event adapter.

This keeps Socket.IO specifics out of the core pipeline: every callback the
app cares about is a fixed hook that turns its payload into a core Event.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from core.channel import EventChannel
from core.errors import ShutdownError, StartupError
from core.events import Chat, Disconnect, Login
from core.ports import Transport

LOGGER = logging.getLogger(__name__)

CHAT_EVENT = "chatMsg"
LOGIN_EVENT = "login"
JOIN_EVENT = "joinChannel"


class TransportHooks:
    """Socket.IO handlers that forward payloads into the event channel.

    Each hook owns its own sender handle so the channel only reports end of
    stream after every hook has been closed.
    """

    def __init__(self, channel: EventChannel) -> None:
        self._chat_tx = channel.sender()
        self._login_tx = channel.sender()
        self._disconnect_tx = channel.sender()
        self.connected = asyncio.Event()
        self.released = False

    def register(self, client: socketio.AsyncClient) -> None:
        client.on("connect", self.on_connect)
        client.on("connect_error", self.on_connect_error)
        client.on("disconnect", self.on_disconnect)
        client.on("error", self.on_error)
        client.on(CHAT_EVENT, self.on_chat_msg)
        client.on(LOGIN_EVENT, self.on_login)

    async def on_connect(self) -> None:
        LOGGER.info("Connected to server")
        self.connected.set()

    async def on_connect_error(self, data: Any = None) -> None:
        LOGGER.error("Connection error: %r", data)

    async def on_disconnect(self, *reason: Any) -> None:
        LOGGER.warning("Disconnect: %r", reason)
        self.connected.clear()
        if self.released:
            return
        await self._disconnect_tx.send(Disconnect())

    async def on_error(self, *payload: Any) -> None:
        LOGGER.error("Received error: %r", payload)

    async def on_chat_msg(self, *payloads: Any) -> None:
        if self.released:
            LOGGER.debug("Dropping %s after shutdown", CHAT_EVENT)
            return
        await self._chat_tx.send(Chat(tuple(payloads)))

    async def on_login(self, *payloads: Any) -> None:
        if self.released:
            LOGGER.debug("Dropping %s after shutdown", LOGIN_EVENT)
            return
        await self._login_tx.send(Login(tuple(payloads)))

    async def close(self) -> None:
        """Release every sender handle owned by the hooks."""

        self.released = True
        await self._chat_tx.close()
        await self._login_tx.close()
        await self._disconnect_tx.close()


async def connect(
    client: socketio.AsyncClient,
    hooks: TransportHooks,
    address: str,
    timeout: float,
) -> None:
    """Open the connection and wait for the connect hook to fire."""

    try:
        await client.connect(address)
    except SocketConnectionError as exc:
        raise StartupError(f"Connection failed: {exc}") from exc
    try:
        await asyncio.wait_for(hooks.connected.wait(), timeout)
    except asyncio.TimeoutError as exc:
        raise StartupError(f"Timed out connecting after {timeout}s") from exc


async def join_channel(transport: Transport, channel: str) -> bool:
    """Ask the server to join ``channel``; return False when the emit fails."""

    try:
        await transport.emit(JOIN_EVENT, {"name": channel})
    except SocketIOError as exc:
        LOGGER.error("Could not join channel %s: %s", channel, exc)
        return False
    LOGGER.info("Joined channel %s", channel)
    return True


async def disconnect(transport: Transport) -> None:
    """Tear down the connection; failures surface as ShutdownError."""

    LOGGER.info("Disconnecting client")
    try:
        await transport.disconnect()
    except (SocketIOError, OSError) as exc:
        raise ShutdownError(f"Failed to disconnect from server: {exc}") from exc
