"""Command line client: turn a document or pasted text into markmap markdown."""
from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import httpx

from markmap_generator.client.api import DEFAULT_SERVER_URL, MindMapClient
from markmap_generator.client.extract import extract_file
from markmap_generator.client.settings import load_settings, save_settings
from markmap_generator.common.errors import MarkmapError
from markmap_generator.common.logging_setup import setup_logging
from markmap_generator.common.schema import TextInfo

LOGGER = logging.getLogger("markmap.client.cli")

def _cmd_generate(args: argparse.Namespace) -> int:
    if bool(args.file) == bool(args.text):
        LOGGER.error("Pass either a file or --text")
        return 2
    client = MindMapClient(load_settings(args.settings), server_url=args.server)
    if args.file:
        text = extract_file(args.file)
        info = TextInfo.from_text(text)
        print(f"File processed: {info.length} characters ({info.byte_length} bytes)", file=sys.stderr)
        markdown = client.generate(text)
    else:
        markdown = client.generate(args.text)

    if args.output:
        Path(args.output).write_text(markdown, encoding="utf-8")
        LOGGER.info("Wrote %d characters to %s", len(markdown), args.output)
    else:
        print(markdown)
    return 0

def _cmd_configure(args: argparse.Namespace) -> int:
    current = load_settings(args.settings)
    updated = replace(
        current,
        api_key=args.api_key if args.api_key is not None else current.api_key,
        api_endpoint=args.endpoint or current.api_endpoint,
        model_id=args.model or current.model_id,
    )
    path = save_settings(updated, args.settings)
    print(f"Settings saved to {path}")
    return 0

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate markmap mind maps with Gemini")
    ap.add_argument("--settings", default=None, help="Settings file path")
    sub = ap.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate markmap markdown")
    gen.add_argument("file", nargs="?", help=".txt, .md or .docx file")
    gen.add_argument("--text", help="Pasted text instead of a file")
    gen.add_argument("--output", "-o", help="Write markdown here instead of stdout")
    gen.add_argument("--server", default=DEFAULT_SERVER_URL, help="Proxy base URL")
    gen.set_defaults(func=_cmd_generate)

    cfg = sub.add_parser("configure", help="Save Gemini API settings")
    cfg.add_argument("--api-key", help="Gemini API key")
    cfg.add_argument("--endpoint", help="generateContent endpoint URL")
    cfg.add_argument("--model", help="Model id")
    cfg.set_defaults(func=_cmd_configure)
    return ap

def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except MarkmapError as e:
        LOGGER.error("%s", e.message)
        return 1
    except httpx.HTTPError as e:
        LOGGER.error("Could not reach the markmap server: %s", e)
        return 1
    except OSError as e:
        LOGGER.error("%s", e)
        return 1

if __name__ == "__main__":
    sys.exit(main())
