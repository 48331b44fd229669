"""FastAPI proxy in front of the Gemini generateContent API.

Endpoints:
- GET /health
- POST /api/generate-mindmap  { "text": "...", "apiKey": "...", "apiEndpoint": "...", "modelId": "..." }

The generate route answers with a text/event-stream body that carries a
single JSON line once the upstream call resolves.
"""
from __future__ import annotations
import logging
import os
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from markmap_generator.common import schema
from markmap_generator.common.errors import MarkmapError
from markmap_generator.common.logging_setup import setup_logging
from markmap_generator.common.templates import build_prompt, load_template
from markmap_generator.serve import gemini
from markmap_generator.serve.validation import validate_request

LOGGER = logging.getLogger("markmap.serve.app")
setup_logging()

DEFAULT_MODEL_ID = os.getenv("DEFAULT_MODEL_ID", schema.DEFAULT_MODEL_ID)

STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

app = FastAPI(title="Markmap Generator")

@app.on_event("startup")
def _validate_template_on_startup() -> None:
    """Warn if the packaged prompt template lost its input placeholder."""
    try:
        template = load_template()
        if "{{input}}" not in template:
            LOGGER.warning("Prompt template has no {{input}} placeholder")
    except OSError as e:
        LOGGER.warning("Failed to read prompt template: %s", e)

@app.exception_handler(MarkmapError)
async def markmap_error_handler(_request: Request, exc: MarkmapError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "model": DEFAULT_MODEL_ID}

async def _single_line_stream(prompt: str, api_key: str, api_endpoint: str) -> AsyncIterator[bytes]:
    result = await gemini.forward_prompt(prompt, api_key, api_endpoint)
    yield result.to_line()

@app.post("/api/generate-mindmap")
async def generate_mindmap(request: Request) -> Response:
    try:
        body = validate_request(await request.json())
        model = body.modelId or DEFAULT_MODEL_ID
        LOGGER.info("Generating mind map with model=%s endpoint=%s", model, body.apiEndpoint)
        prompt = build_prompt(body.text)
    except MarkmapError:
        raise
    except Exception as e:
        LOGGER.exception("Error generating mind map: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e) or "Internal server error"})

    return StreamingResponse(
        _single_line_stream(prompt, body.apiKey, body.apiEndpoint),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
