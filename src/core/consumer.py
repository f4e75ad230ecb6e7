"""Ingestion consumer: drains the event channel into the transcript.

This module is transport-agnostic. It only relies on the event channel and
the TranscriptSink port, enabling tests to drive it with in-memory fakes.
"""

from __future__ import annotations

import logging
from typing import Any

from core.channel import EventChannel
from core.decoder import decode_chat, decode_login
from core.errors import DecodeError, WriteError
from core.events import Chat, Disconnect, Event, Login, Terminate
from core.ports import TranscriptSink

LOGGER = logging.getLogger(__name__)


class IngestionConsumer:
    """Orchestrates decoding, filtering, ordering and writing of chat events.

    The consumer is the only owner of the sink and of ``last_timestamp``, so
    neither needs locking.
    """

    def __init__(self, channel: EventChannel, sink: TranscriptSink) -> None:
        self._channel = channel
        self._sink = sink
        self.last_timestamp = 0
        self.stopped = False

    async def run(self) -> None:
        """Process events until Terminate or end of stream."""

        try:
            while True:
                event = await self._channel.receive()
                if event is None:
                    LOGGER.info("Event stream ended")
                    break
                if not await self.handle(event):
                    break
        finally:
            self.stopped = True
            # Late producers must fail fast instead of filling a dead buffer.
            await self._channel.close()

    async def handle(self, event: Event) -> bool:
        """Process one event; return False when the loop must stop."""

        if isinstance(event, Chat):
            for payload in event.payloads:
                self._handle_chat(payload)
            return True
        if isinstance(event, Login):
            for payload in event.payloads:
                self._handle_login(payload)
            return True
        if isinstance(event, Disconnect):
            # The transport reconnects on its own; keep consuming.
            LOGGER.warning("Client disconnected from server")
            return True
        if isinstance(event, Terminate):
            LOGGER.info("Terminating cupcake")
            return False
        raise TypeError(f"Unsupported event: {event!r}")

    def _handle_chat(self, payload: Any) -> None:
        try:
            record = decode_chat(payload)
        except DecodeError as exc:
            LOGGER.error("Could not parse chat message: %s", exc)
            return

        if record.suppressed:
            LOGGER.debug("Skipping server whisper %s", record.short_format())
            return

        # Server timestamps increase strictly; anything older or equal is a
        # history replay after a reconnect.
        if record.time <= self.last_timestamp:
            return
        self.last_timestamp = record.time

        try:
            self._sink.write_record(record)
        except WriteError as exc:
            LOGGER.warning("Failed to write '%s' to transcript: %s", record.to_line(), exc)
            return
        LOGGER.debug("%s", record.short_format())

    def _handle_login(self, payload: Any) -> None:
        try:
            result = decode_login(payload)
        except DecodeError as exc:
            LOGGER.error("Could not parse login result: %s", exc)
            return

        if result.success:
            LOGGER.info("Logged in as %s", result.name)
        else:
            LOGGER.warning("Login failed: %s", result.error)
