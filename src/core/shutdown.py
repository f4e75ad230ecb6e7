"""Graceful shutdown of the ingestion pipeline."""

from __future__ import annotations

import asyncio
import logging

from core.channel import EventSender
from core.errors import SendError
from core.events import Terminate

LOGGER = logging.getLogger(__name__)


async def shutdown(sender: EventSender, consumer_task: asyncio.Task) -> None:
    """Send one Terminate and wait until the consumer has stopped.

    Callers release the transcript and the transport only after this returns,
    so no write can happen on a closed sink.
    """

    try:
        await sender.send(Terminate())
    except SendError as exc:
        LOGGER.error("Could not send termination signal: %s", exc)
    await consumer_task
