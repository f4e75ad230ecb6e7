"""Flat-file transcript adapter.

Implements the core TranscriptSink port with one UTF-8 text file per run.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional, TextIO

from core.errors import WriteError
from core.models import ChatRecord

LOGGER = logging.getLogger(__name__)


def transcript_filename(channel: str, now: Optional[datetime] = None) -> str:
    """Return ``chat-<channel>-<UTC timestamp>Z.txt``."""

    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"chat-{channel}-{moment.strftime('%Y%m%dT%H%M%S')}Z.txt"


class TranscriptFile:
    """Append-only transcript that satisfies the TranscriptSink contract."""

    def __init__(self, handle: TextIO, path: Optional[str] = None) -> None:
        self._handle = handle
        self.path = path

    @classmethod
    def create(cls, output_dir: str, channel: str, now: Optional[datetime] = None) -> "TranscriptFile":
        """Create the transcript file for this run."""

        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, transcript_filename(channel, now))
        handle = open(path, "w", encoding="utf-8", newline="\n")
        LOGGER.info("Writing transcript to %s", path)
        return cls(handle, path)

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write_record(self, record: ChatRecord) -> None:
        try:
            self._handle.write(record.to_line() + "\n")
            # Each line must survive a crash between messages.
            self._handle.flush()
        except (OSError, ValueError) as exc:
            raise WriteError(str(exc)) from exc

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()
