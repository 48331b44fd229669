"""HTTP client for the markmap proxy."""
from __future__ import annotations
import logging
import os
from collections.abc import Callable
from pathlib import Path

import httpx

from markmap_generator.client.extract import extract_file
from markmap_generator.client.stream import consume_stream
from markmap_generator.common.errors import GenerationFailed, SettingsError, TextTooLongError
from markmap_generator.common.schema import MAX_CHAR_LIMIT, ApiSettings

LOGGER = logging.getLogger("markmap.client.api")

GENERATE_PATH = "/api/generate-mindmap"
DEFAULT_SERVER_URL = os.getenv("MARKMAP_SERVER_URL", "http://localhost:8000")

class MindMapClient:
    """Sends text to the proxy and returns the final markmap document."""

    def __init__(self, settings: ApiSettings, server_url: str = DEFAULT_SERVER_URL) -> None:
        self.settings = settings
        self.server_url = server_url.rstrip("/")

    def _check(self, text: str) -> None:
        if not self.settings.api_key:
            raise SettingsError("Please configure your Gemini API key in settings first")
        if len(text) > MAX_CHAR_LIMIT:
            raise TextTooLongError(
                len(text),
                message=(
                    f"File content exceeds API limit ({MAX_CHAR_LIMIT} characters), "
                    "please upload a smaller file"
                ),
            )

    def generate(self, text: str, on_update: Callable[[str], None] | None = None) -> str:
        """
        Generate markmap markdown for the given text.

        Args:
            text: Source text.
            on_update: Receives each markdown snapshot as it arrives.

        Raises:
            SettingsError: no API key configured.
            TextTooLongError: text over the character limit.
            GenerationFailed: the proxy or upstream reported an error.
        """
        self._check(text)
        payload = {
            "text": text,
            "apiKey": self.settings.api_key,
            "apiEndpoint": self.settings.api_endpoint,
            "modelId": self.settings.model_id,
        }
        url = f"{self.server_url}{GENERATE_PATH}"
        with httpx.Client(timeout=None) as client:
            with client.stream("POST", url, json=payload) as r:
                if r.status_code != 200:
                    r.read()
                    try:
                        data = r.json()
                    except ValueError:
                        data = None
                    message = data.get("error") if isinstance(data, dict) else None
                    LOGGER.error("Proxy returned %s: %s", r.status_code, message)
                    raise GenerationFailed(message)
                state = consume_stream(r.iter_lines(), on_update=on_update)
        if not state.mind_map_visible:
            LOGGER.warning("Stream ended without any markdown")
        return state.markdown

    def generate_from_file(self, path: str | Path, on_update: Callable[[str], None] | None = None) -> str:
        """Extract text from a .txt/.md/.docx file and generate from it."""
        return self.generate(extract_file(path), on_update=on_update)
