"""Ingress checks for the generate-mindmap proxy route."""
from __future__ import annotations
import logging
import re
from typing import Any

from markmap_generator.common.errors import MissingParametersError, TextTooLongError
from markmap_generator.common.schema import MAX_CHAR_LIMIT, GenerationRequest

LOGGER = logging.getLogger("markmap.serve.validation")

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_BINARY_SNIFF_LEN = 1000

def looks_binary(text: str) -> bool:
    """True when control characters show up near the start of the text."""
    return bool(_CONTROL_CHARS.search(text[:_BINARY_SNIFF_LEN]))

def validate_request(payload: dict[str, Any] | GenerationRequest) -> GenerationRequest:
    """
    Check required fields and the input length.

    Args:
        payload: Decoded JSON body or an already parsed request.

    Returns:
        The parsed request.

    Raises:
        MissingParametersError: text, apiKey or apiEndpoint absent or empty.
        TextTooLongError: text longer than MAX_CHAR_LIMIT characters.
    """
    req = payload if isinstance(payload, GenerationRequest) else GenerationRequest.model_validate(payload)
    if not req.text or not req.apiKey or not req.apiEndpoint:
        raise MissingParametersError()

    text = req.text
    LOGGER.info("Received text: length=%d, byteLength=%d", len(text), len(text.encode("utf-8")))
    if looks_binary(text):
        LOGGER.warning(
            "Text appears to contain binary data. This may be a binary file incorrectly read as text."
        )

    if len(text) > MAX_CHAR_LIMIT:
        LOGGER.info("Text exceeds limit: %d > %d", len(text), MAX_CHAR_LIMIT)
        raise TextTooLongError(len(text))
    return req
