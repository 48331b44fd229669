"""Launch the markmap proxy under uvicorn."""
from __future__ import annotations
import argparse
import os

import uvicorn

from markmap_generator.common.logging_setup import setup_logging

def main() -> None:
    setup_logging()
    ap = argparse.ArgumentParser(description="Serve the markmap generation proxy")
    ap.add_argument("--host", default=os.getenv("MARKMAP_HOST", "127.0.0.1"))
    ap.add_argument("--port", type=int, default=int(os.getenv("MARKMAP_PORT", "8000")))
    ap.add_argument("--reload", action="store_true", help="Reload on source changes")
    args = ap.parse_args()

    uvicorn.run(
        "markmap_generator.serve.fastapi_app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )

if __name__ == "__main__":
    main()
