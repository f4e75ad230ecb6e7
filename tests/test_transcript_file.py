from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest

from adapters.transcript_file import TranscriptFile, transcript_filename
from core.errors import WriteError
from core.models import ChatRecord


def _record(time: int, text: str, team=None) -> ChatRecord:
    return ChatRecord(time=time, username="Dog", text=text, team=team, suppressed=False)


def test_transcript_filename_uses_utc() -> None:
    now = datetime(2025, 10, 16, 12, 0, 5, tzinfo=timezone.utc)
    assert transcript_filename("lounge", now) == "chat-lounge-20251016T120005Z.txt"

    local = datetime(2025, 10, 16, 14, 0, 5, tzinfo=timezone(timedelta(hours=2)))
    assert transcript_filename("lounge", local) == "chat-lounge-20251016T120005Z.txt"


def test_create_writes_utf8_lines(tmp_path) -> None:
    now = datetime(2025, 10, 16, 12, 0, 5, tzinfo=timezone.utc)
    transcript = TranscriptFile.create(str(tmp_path / "logs"), "lounge", now)

    transcript.write_record(_record(1, "héllo ✓", team="vg"))
    transcript.write_record(_record(2, "second"))
    transcript.close()

    path = tmp_path / "logs" / "chat-lounge-20251016T120005Z.txt"
    assert transcript.path == str(path)
    assert path.read_text(encoding="utf-8") == "1\tvg\tDog\théllo ✓\n2\tNULL\tDog\tsecond\n"


def test_lines_are_flushed_immediately() -> None:
    handle = io.StringIO()
    transcript = TranscriptFile(handle)
    transcript.write_record(_record(1, "a"))
    assert handle.getvalue() == "1\tNULL\tDog\ta\n"


def test_write_after_close_is_write_error() -> None:
    transcript = TranscriptFile(io.StringIO())
    transcript.close()
    transcript.close()
    assert transcript.closed
    with pytest.raises(WriteError):
        transcript.write_record(_record(1, "late"))
