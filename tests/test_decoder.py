from __future__ import annotations

import pytest

from core.decoder import decode_chat, decode_login
from core.errors import DecodeError
from core.models import ChatRecord, LoginResult


def test_decode_chat_with_team() -> None:
    record = decode_chat(
        {
            "username": "PotF",
            "msg": '&gt;XD <span style="display:none" class="teamColorSpan">-teamwg-</span>',
            "meta": {"addClass": "greentext"},
            "time": 1760634672025,
        }
    )
    assert record == ChatRecord(
        time=1760634672025,
        username="PotF",
        text="&gt;XD",
        team="wg",
        suppressed=False,
    )


def test_decode_chat_without_team() -> None:
    record = decode_chat(
        {"username": "Yuu", "msg": "It's hip to be square.", "meta": {}, "time": 1760631669671}
    )
    assert record.team is None
    assert record.text == "It's hip to be square."
    assert not record.suppressed


def test_decode_chat_server_whisper_is_suppressed() -> None:
    msg = (
        "Voteskip passed: 1/2 skipped; eligible voters: 2 = "
        "total (2) - AFK (0) - no permission (0); ratio = 0.5"
    )
    record = decode_chat(
        {
            "username": "[voteskip]",
            "msg": msg,
            "meta": {"addClass": "server-whisper", "addClassToNameAndTimestamp": True},
            "time": 1761058613150,
        }
    )
    assert record.suppressed
    assert record.text == msg


def test_decode_chat_null_add_class() -> None:
    record = decode_chat({"username": "a", "msg": "b", "meta": {"addClass": None}, "time": 1})
    assert not record.suppressed


@pytest.mark.parametrize(
    "raw",
    [
        ["not", "an", "object"],
        {"username": "a", "msg": "b", "meta": {}},
        {"username": "a", "msg": "b", "meta": {}, "time": "1"},
        {"username": "a", "msg": "b", "meta": {}, "time": True},
        {"username": "a", "msg": "b", "meta": {}, "time": -1},
        {"username": "a", "msg": "b", "meta": {}, "time": 2**64},
        {"username": 5, "msg": "b", "meta": {}, "time": 1},
        {"username": "a", "meta": {}, "time": 1},
        {"username": "a", "msg": "b", "time": 1},
        {"username": "a", "msg": "b", "meta": [], "time": 1},
        {"username": "a", "msg": "b", "meta": {"addClass": 3}, "time": 1},
        {"username": "a", "msg": "<b>broken", "meta": {}, "time": 1},
    ],
)
def test_decode_chat_rejects_malformed_records(raw) -> None:
    with pytest.raises(DecodeError):
        decode_chat(raw)


def test_decode_login_error() -> None:
    result = decode_login({"error": "That username is registered.", "success": False})
    assert result == LoginResult(success=False, name=None, error="That username is registered.")


def test_decode_login_success_ignores_extra_keys() -> None:
    result = decode_login({"guest": True, "name": "cupcake1", "success": True})
    assert result == LoginResult(success=True, name="cupcake1", error=None)


def test_decode_login_requires_success_flag() -> None:
    with pytest.raises(DecodeError):
        decode_login({"name": "cupcake1"})
    with pytest.raises(DecodeError):
        decode_login({"success": "yes"})


def test_chat_record_line_format() -> None:
    record = ChatRecord(time=1760634889806, username="Dog", text="5 &gt; 3", team="vg", suppressed=False)
    assert record.to_line() == "1760634889806\tvg\tDog\t5 &gt; 3"


def test_chat_record_line_uses_placeholder_without_team() -> None:
    record = ChatRecord(time=1, username="Dog", text="hi", team=None, suppressed=False)
    assert record.to_line() == "1\tNULL\tDog\thi"


def test_chat_record_short_format() -> None:
    record = ChatRecord(time=1, username="Dog", text=":carlos:", team="m", suppressed=False)
    assert record.short_format() == "<Dog> :carlos:"
