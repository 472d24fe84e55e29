from __future__ import annotations

import argparse

import structlog
import uvicorn

from usersvc.config import get_settings


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the users API server.")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    args = parser.parse_args()

    from usersvc.main import app

    structlog.get_logger("server").info("server_starting", host=args.host, port=args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
