"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the app expects so CLI args and settings can be merged safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LoggerConfig:
    """Everything needed to log one channel."""

    domain: str
    channel: str
    output_dir: str
    connect_timeout: float
    queue_capacity: int
