#!/usr/bin/env python3
"""Run the API with uvicorn, listening on $PORT (default 8000)."""

import os
import sys

import uvicorn

SRC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")


def main() -> int:
    raw_port = os.environ.get("PORT", "8000")
    try:
        port = int(raw_port)
    except ValueError:
        print(f"Ignoring invalid PORT '{raw_port}', falling back to 8000", file=sys.stderr)
        port = 8000

    # Allow running from a checkout without `pip install -e .`
    if os.path.isdir(SRC_DIR) and SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)

    from fieldops.config import settings

    uvicorn.run(
        "fieldops.main:app",
        host="0.0.0.0",
        port=port,
        log_level=settings.log_level.lower(),
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
