"""
Run the blog API with uvicorn: ``python -m blog_backend`` or ``blog-backend``.
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import uvicorn

from blog_backend.config import get_settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Serve the blog API")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level.lower(),
        help="uvicorn log level (defaults to LOG_LEVEL)",
    )
    args = parser.parse_args(argv)

    uvicorn.run(
        "blog_backend.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        proxy_headers=True,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
