"""Reader for the proxy's line-delimited JSON response."""
from __future__ import annotations
import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from markmap_generator.common.errors import GenerationFailed

LOGGER = logging.getLogger("markmap.client.stream")


@dataclass
class StreamState:
    """Working document built from the stream.

    Each markdown-bearing message is a full snapshot that replaces the
    previous one.
    """
    markdown: str = ""
    mind_map_visible: bool = False
    done: bool = False

    def apply(self, message: dict) -> bool:
        """Apply one decoded message; return True if the document changed."""
        if message.get("error"):
            raise GenerationFailed(str(message["error"]))
        markdown = message.get("markdown")
        if message.get("done"):
            self.done = True
        if not markdown:
            return False
        self.markdown = markdown
        self.mind_map_visible = True
        return True


def consume_stream(
    lines: Iterable[str],
    on_update: Callable[[str], None] | None = None,
) -> StreamState:
    """
    Fold response lines into a StreamState.

    Blank lines are skipped and a line that is not valid JSON is logged and
    ignored. A message carrying "error" aborts with GenerationFailed.

    Args:
        lines: Decoded response lines, newline already stripped.
        on_update: Called with the new document after every snapshot.
    """
    state = StreamState()
    for line in lines:
        if not line.strip():
            continue
        try:
            message = json.loads(line)
        except ValueError as e:
            LOGGER.error("Error parsing stream chunk: %s (%r)", e, line)
            continue
        if not isinstance(message, dict):
            LOGGER.error("Ignoring non-object stream message: %r", line)
            continue
        if state.apply(message) and on_update is not None:
            on_update(state.markdown)
    return state
