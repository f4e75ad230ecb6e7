"""Socket.IO client factory for cupcake.

We explicitly manage the client's lifecycle (connect/disconnect) from the
app so it is obvious when the connection starts and when it ends.
"""

from __future__ import annotations

import logging
import os

import socketio
from dotenv import load_dotenv


def build_client() -> socketio.AsyncClient:
    """Create an asyncio Socket.IO client from environment variables.

    SOCKETIO_DEBUG=1 routes python-socketio/engineio internals into our
    logging setup, which helps when a server rejects the handshake.
    """

    load_dotenv()

    debug = os.getenv("SOCKETIO_DEBUG", "").strip() in {"1", "true", "yes"}
    logger = logging.getLogger("socketio.client") if debug else False
    engineio_logger = logging.getLogger("engineio.client") if debug else False

    logging.getLogger(__name__).info("Initializing Socket.IO client")

    # Reconnection stays with python-socketio; the consumer only logs
    # disconnects and drops replayed history by timestamp.
    return socketio.AsyncClient(
        reconnection=True,
        logger=logger,
        engineio_logger=engineio_logger,
    )
