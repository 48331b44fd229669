"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
import json
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

MAX_CHAR_LIMIT = 131072
MAX_FILE_BYTES = 10 * 1024 * 1024
SUPPORTED_EXTENSIONS = ("txt", "md", "docx")

DEFAULT_API_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
)
DEFAULT_MODEL_ID = "gemini-2.0-flash"
DEFAULT_ERROR_MESSAGE = "Failed to generate mind map"


class GenerationRequest(BaseModel):
    """Body of POST /api/generate-mindmap.

    Every field is optional at parse time; presence is checked by the
    request validator so a missing field maps to a 400, not a 422.
    """
    text: str | None = None
    apiKey: str | None = None
    apiEndpoint: str | None = None
    modelId: str | None = None


@dataclass
class GenerationResult:
    """Outcome of one upstream call: exactly one of markdown/error is set."""
    markdown: str | None = None
    error: str | None = None

    def to_line(self) -> bytes:
        """Encode as the single line written to the pseudo-stream."""
        if self.error is not None:
            return _dumps({"error": self.error}).encode("utf-8")
        return (_dumps({"done": True, "markdown": self.markdown or ""}) + "\n").encode("utf-8")


@dataclass
class ApiSettings:
    """Gemini credentials persisted between client runs."""
    api_key: str = ""
    api_endpoint: str = DEFAULT_API_ENDPOINT
    model_id: str = DEFAULT_MODEL_ID


@dataclass
class TextInfo:
    """Diagnostics about extracted text."""
    length: int
    byte_length: int
    first_chars: str

    @classmethod
    def from_text(cls, text: str) -> TextInfo:
        return cls(
            length=len(text),
            byte_length=len(text.encode("utf-8")),
            first_chars=re.sub(r"[\r\n]+", " ", text[:100]),
        )


def _dumps(obj: dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
