"""Single-shot Gemini generateContent call and reply cleanup."""
from __future__ import annotations
import logging
import os
from typing import Any

import httpx

from markmap_generator.common.schema import DEFAULT_ERROR_MESSAGE, GenerationResult

LOGGER = logging.getLogger("markmap.serve.gemini")

_FENCE = "```"
_MARKDOWN_FENCE = "```markdown"

def _upstream_timeout() -> float | None:
    raw = os.getenv("UPSTREAM_TIMEOUT_SECONDS", "").strip()
    return float(raw) if raw else None

def build_payload(prompt: str) -> dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}

def extract_candidate_text(data: Any) -> str:
    """Return candidates[0].content.parts[0].text, or "" if any step is missing."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return ""
    text = parts[0].get("text")
    return text if isinstance(text, str) else ""

def extract_error_message(response: httpx.Response) -> str:
    """Pull error.message out of an upstream error body, with a fallback."""
    try:
        data = response.json()
    except ValueError:
        LOGGER.warning("Upstream error body is not JSON (status=%s)", response.status_code)
        return DEFAULT_ERROR_MESSAGE
    error = data.get("error") if isinstance(data, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    return message or DEFAULT_ERROR_MESSAGE

def strip_code_fences(text: str) -> str:
    """
    Unwrap one level of ``` fencing from model output.

    A leading ```markdown (or bare ```) opener and a trailing ``` closer are
    removed; fences inside the document are left alone.
    """
    cleaned = text.strip()
    if cleaned.startswith(_MARKDOWN_FENCE):
        cleaned = cleaned[len(_MARKDOWN_FENCE):]
    elif cleaned.startswith(_FENCE):
        cleaned = cleaned[len(_FENCE):]
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()

async def forward_prompt(prompt: str, api_key: str, api_endpoint: str) -> GenerationResult:
    """
    POST the prompt to the configured endpoint and return the cleaned markdown.

    Never raises for upstream problems: HTTP errors, transport failures and
    undecodable bodies all come back as GenerationResult(error=...).
    """
    url = f"{api_endpoint}?key={api_key}"
    headers = {"Content-Type": "application/json"}
    try:
        async with httpx.AsyncClient(timeout=_upstream_timeout()) as client:
            r = await client.post(url, headers=headers, json=build_payload(prompt))
            if not r.is_success:
                message = extract_error_message(r)
                LOGGER.error("Upstream returned %s: %s", r.status_code, message)
                return GenerationResult(error=message)
            data = r.json()
    except Exception as e:
        LOGGER.error("Upstream request failed: %s", e)
        return GenerationResult(error=str(e) or "Error fetching response")

    markdown = strip_code_fences(extract_candidate_text(data))
    LOGGER.info("Generated markmap: length=%d", len(markdown))
    return GenerationResult(markdown=markdown)
