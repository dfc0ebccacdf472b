from __future__ import annotations

import argparse
import os
import sys

import uvicorn

from key_beacon.logging_conf import setup_logging


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for serving the beacon."""
    parser = argparse.ArgumentParser(
        prog="key-beacon", description="Serve the public key page and partner API relay"
    )
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(args.log_level)
    # log_config=None keeps uvicorn from replacing the JSON handler
    uvicorn.run(
        "key_beacon.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
