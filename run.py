# run.py
import argparse
import logging

import uvicorn

from storefront.settings import settings

logger = logging.getLogger("run")


def main():
    parser = argparse.ArgumentParser(description="Run the storefront search & OTP API")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--reload", action="store_true", help="restart on code changes (development)")
    args = parser.parse_args()

    logger.info(f"Starting {settings.api_title} on {args.host}:{args.port} ({settings.environment})")
    uvicorn.run(
        "storefront.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
