"""Bounded event channel between transport callbacks and the consumer.

Many producers, exactly one consumer. Producers suspend while the buffer is
full; the consumer suspends while it is empty. Once every sender handle is
closed and the buffer is drained, `receive()` reports end of stream.

Blocked producers are admitted strictly in arrival order: a new send queues
behind any sender that is already waiting, even if a slot looks free.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Deque, Optional, Tuple

from core.errors import SendError
from core.events import Event

LOGGER = logging.getLogger(__name__)

MESSAGE_BUFFER_SIZE = 64


class EventChannel:
    """FIFO channel of fixed capacity carrying Event values."""

    def __init__(self, capacity: int = MESSAGE_BUFFER_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"Channel capacity must be at least 1, got {capacity}")
        LOGGER.debug("Creating event channel with buffer size %s", capacity)
        self._capacity = capacity
        self._buffer: Deque[Event] = deque()
        self._blocked: Deque[Tuple[asyncio.Future, Event]] = deque()
        self._receivers: Deque[asyncio.Future] = deque()
        self._senders = 0
        self._receiver_closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def closed(self) -> bool:
        return self._receiver_closed

    def sender(self) -> "EventSender":
        """Hand out a new producer handle."""

        if self._receiver_closed:
            raise SendError("Event channel is closed")
        self._senders += 1
        return EventSender(self)

    def _wake_receivers(self) -> None:
        while self._receivers:
            waiter = self._receivers.popleft()
            if not waiter.done():
                waiter.set_result(None)

    def _admit_blocked(self) -> None:
        while self._blocked and len(self._buffer) < self._capacity:
            waiter, event = self._blocked.popleft()
            if waiter.done():
                # Cancelled while waiting.
                continue
            self._buffer.append(event)
            waiter.set_result(None)
        if self._buffer:
            self._wake_receivers()

    async def _send(self, event: Event) -> None:
        if self._receiver_closed:
            raise SendError(f"Event channel is closed, dropping {type(event).__name__}")
        if not self._blocked and len(self._buffer) < self._capacity:
            self._buffer.append(event)
            self._wake_receivers()
            return

        waiter = asyncio.get_running_loop().create_future()
        entry = (waiter, event)
        self._blocked.append(entry)
        try:
            await waiter
        except asyncio.CancelledError:
            if entry in self._blocked:
                self._blocked.remove(entry)
            raise

    def _release_sender(self) -> None:
        self._senders -= 1
        if self._senders == 0:
            self._wake_receivers()

    async def receive(self) -> Optional[Event]:
        """Return the next event, or None once all senders are gone and drained."""

        while not self._buffer:
            if self._senders == 0:
                return None
            waiter = asyncio.get_running_loop().create_future()
            self._receivers.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                if waiter in self._receivers:
                    self._receivers.remove(waiter)
                raise
        event = self._buffer.popleft()
        # The freed slot goes to the longest waiting sender.
        self._admit_blocked()
        return event

    async def close(self) -> None:
        """Close the receiving side; pending and future sends fail."""

        self._receiver_closed = True
        while self._blocked:
            waiter, event = self._blocked.popleft()
            if not waiter.done():
                waiter.set_exception(
                    SendError(f"Event channel is closed, dropping {type(event).__name__}")
                )
        self._wake_receivers()


class EventSender:
    """Producer handle; the channel ends once every handle is closed."""

    def __init__(self, channel: EventChannel) -> None:
        self._channel = channel
        self._closed = False

    async def send(self, event: Event) -> None:
        if self._closed:
            raise SendError("Sender handle is closed")
        await self._channel._send(event)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._channel._release_sender()

    async def __aenter__(self) -> "EventSender":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
