from __future__ import annotations

import pytest

from markmap_generator.client.stream import consume_stream
from markmap_generator.common.errors import GenerationFailed


def test_last_snapshot_wins() -> None:
    seen: list[str] = []
    state = consume_stream(['{"markdown":"A"}', '{"done":true,"markdown":"AB"}'], on_update=seen.append)
    assert state.markdown == "AB"
    assert state.done is True
    assert state.mind_map_visible is True
    assert seen == ["A", "AB"]


def test_blank_and_garbled_lines_skipped() -> None:
    state = consume_stream(["", "   ", "{not json", '{"done":true,"markdown":"# Root"}'])
    assert state.markdown == "# Root"


def test_error_line_fails_the_read() -> None:
    with pytest.raises(GenerationFailed, match="quota exceeded"):
        consume_stream(['{"error":"quota exceeded"}'])


def test_empty_stream_leaves_map_hidden() -> None:
    state = consume_stream([])
    assert state.markdown == ""
    assert state.mind_map_visible is False
