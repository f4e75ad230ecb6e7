"""Error taxonomy shared by the core pipeline and its adapters.

Per-message errors (decode, write) are recovered where they happen; only
startup failures abort the process.
"""

from __future__ import annotations


class CupcakeError(Exception):
    """Base class for every error raised by cupcake."""


class DecodeError(CupcakeError):
    """A raw payload did not match the expected schema."""


class MarkupError(DecodeError):
    """The message body markup could not be parsed structurally."""


class WriteError(CupcakeError):
    """The transcript sink rejected a line."""


class SendError(CupcakeError):
    """An event could not be enqueued because the pipeline is closing."""


class StartupError(CupcakeError):
    """The socket address could not be resolved or the connection failed."""


class ShutdownError(CupcakeError):
    """The final transport disconnect failed."""
