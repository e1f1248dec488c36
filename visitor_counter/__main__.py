from __future__ import annotations

import argparse

import uvicorn

from visitor_counter.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Visit counter and active-visitor API")
    parser.add_argument("--host", default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    args = parser.parse_args()

    uvicorn.run(
        "visitor_counter.main:app",
        host=args.host,
        port=args.port,
        reload=bool(args.reload),
        log_config=None,
    )


if __name__ == "__main__":
    main()
