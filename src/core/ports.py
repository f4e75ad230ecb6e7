"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the transcript sink and the realtime
transport so that the core can be exercised with in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Protocol

from core.models import ChatRecord


class TranscriptSink(Protocol):
    """Append-only transcript owned by the consumer."""

    def write_record(self, record: ChatRecord) -> None:
        """Append one line; raise WriteError on failure."""
        ...

    def close(self) -> None:
        ...


class Transport(Protocol):
    """Realtime connection operations required by the app lifecycle."""

    async def emit(self, event: str, data: Any = None) -> None:
        ...

    async def disconnect(self) -> None:
        ...
