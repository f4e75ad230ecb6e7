"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to Socket.IO payload shapes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Written in the team column when a message carries no team tag.
NO_TEAM = "NULL"

# meta.addClass value the server uses for operator/system whispers.
SERVER_WHISPER_CLASS = "server-whisper"


@dataclass(frozen=True)
class ExtractedMessage:
    """Plain text and team tag pulled out of a message body."""

    text: str
    team: Optional[str]


@dataclass(frozen=True)
class ChatRecord:
    """Decoded chat message, ready to be written or discarded."""

    time: int
    username: str
    text: str
    team: Optional[str]
    suppressed: bool

    def to_line(self) -> str:
        """Return the transcript line (without the trailing newline)."""

        team = self.team if self.team is not None else NO_TEAM
        return f"{self.time}\t{team}\t{self.username}\t{self.text}"

    def short_format(self) -> str:
        """Short format of the message for logging purposes."""

        return f"<{self.username}> {self.text}"


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login attempt reported by the server."""

    success: bool
    name: Optional[str]
    error: Optional[str]


@dataclass(frozen=True)
class SocketServer:
    """One entry of the channel's socket config document."""

    url: str
    secure: bool
