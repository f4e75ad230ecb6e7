"""Raw payload decoding (core domain).

Socket.IO hands us untyped JSON values. Every field access goes through a
small schema check so a malformed record always surfaces as DecodeError
instead of an AttributeError/KeyError deep inside the consumer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from core.errors import DecodeError
from core.markup import extract_markup
from core.models import SERVER_WHISPER_CLASS, ChatRecord, LoginResult

MAX_TIMESTAMP = 2**64


def _as_mapping(raw: Any, what: str) -> Mapping:
    if not isinstance(raw, Mapping):
        raise DecodeError(f"{what} must be an object, got {type(raw).__name__}")
    return raw


def _require(raw: Mapping, key: str, expected: type, what: str) -> Any:
    if key not in raw:
        raise DecodeError(f"{what} is missing field '{key}'")
    value = raw[key]
    # bool is an int subclass; JSON true/false is never a valid number here.
    if expected is int and isinstance(value, bool):
        raise DecodeError(f"{what} field '{key}' must be int, got bool")
    if not isinstance(value, expected):
        raise DecodeError(
            f"{what} field '{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _optional_str(raw: Mapping, key: str, what: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"{what} field '{key}' must be str, got {type(value).__name__}")
    return value


def decode_chat(raw: Any) -> ChatRecord:
    """Decode one `chatMsg` payload into a ChatRecord."""

    payload = _as_mapping(raw, "chat message")
    time = _require(payload, "time", int, "chat message")
    if not 0 <= time < MAX_TIMESTAMP:
        raise DecodeError(f"chat message field 'time' out of range: {time}")
    username = _require(payload, "username", str, "chat message")
    body = _require(payload, "msg", str, "chat message")
    meta = _require(payload, "meta", Mapping, "chat message")
    add_class = _optional_str(meta, "addClass", "chat meta")

    extracted = extract_markup(body)
    return ChatRecord(
        time=time,
        username=username,
        text=extracted.text,
        team=extracted.team,
        suppressed=add_class == SERVER_WHISPER_CLASS,
    )


def decode_login(raw: Any) -> LoginResult:
    """Decode one `login` payload into a LoginResult."""

    payload = _as_mapping(raw, "login result")
    return LoginResult(
        success=_require(payload, "success", bool, "login result"),
        name=_optional_str(payload, "name", "login result"),
        error=_optional_str(payload, "error", "login result"),
    )
