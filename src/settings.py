"""Static configuration for cupcake.

Optional user-editable settings (output directory, timeouts, logging) live in
a single JSON file for quick edits without touching Python. Every key has a
default, so the logger runs without any config file at all.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# The config file can be relocated with CUPCAKE_CONFIG (e.g. from .env).
CONFIG_PATH = os.getenv("CUPCAKE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def load_json_config(path: str) -> dict:
    """Load a config file with a flat, user-friendly schema."""

    if not os.path.exists(path):
        return {}

    with open(path, "r", encoding="utf-8") as handle:
        config = json.load(handle)
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return config


_CONFIG = load_json_config(CONFIG_PATH)

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Transcripts are written here, one file per run.
OUTPUT_DIR = str(_CONFIG.get("output_dir", "."))

# Seconds to wait for the Socket.IO connect callback before giving up.
CONNECT_TIMEOUT = float(_CONFIG.get("connect_timeout", 10))

# Slots in the event channel between transport callbacks and the consumer.
QUEUE_CAPACITY = int(_CONFIG.get("queue_capacity", 64))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
