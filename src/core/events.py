"""Events carried from transport callbacks to the ingestion consumer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Chat:
    """One `chatMsg` delivery; each payload is an undecoded chat record."""

    payloads: Tuple[Any, ...]


@dataclass(frozen=True)
class Login:
    """One `login` delivery; each payload is an undecoded login result."""

    payloads: Tuple[Any, ...]


@dataclass(frozen=True)
class Disconnect:
    """The transport lost its connection to the server."""


@dataclass(frozen=True)
class Terminate:
    """Shutdown sentinel: the consumer stops after reading it."""


Event = Union[Chat, Login, Disconnect, Terminate]
