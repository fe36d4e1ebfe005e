#!/usr/bin/env python3
"""
nrv site backend

Serves the personal site and its API, with an operator console on stdin.

Usage:
    python main.py                      # serve (HTTPS when cert/key exist) + console
    python main.py --port 8443 --no-console
    python main.py generate-invite      # print one invitation code and exit
    python main.py read-inquiries       # print stored inquiries and exit
"""

import argparse
import logging
import sys
import threading
from pathlib import Path

import uvicorn

from nrv.cli import generate_invite_cli, read_inquiries_cli, run_console
from nrv.config import load_config

logger = logging.getLogger(__name__)


def serve(args: argparse.Namespace) -> int:
    """Run the HTTP server, with the console in a background thread."""
    from api import deps
    from api.main import app

    config = load_config()
    host = args.host or config.server.host
    port = args.port or config.server.port

    services = deps.get_services()

    if not args.no_console:
        console = threading.Thread(
            target=run_console,
            args=(services.auth, services.content),
            name="console",
            daemon=True
        )
        console.start()

    ssl_options = {}
    certfile = Path(config.server.ssl_certfile)
    keyfile = Path(config.server.ssl_keyfile)
    if certfile.is_file() and keyfile.is_file():
        ssl_options = {"ssl_certfile": str(certfile), "ssl_keyfile": str(keyfile)}
        logger.info(f"Starting server on https://{host}:{port}")
    else:
        logger.warning(f"TLS certificate/key not found ({certfile}, {keyfile}); serving plain HTTP")
        logger.info(f"Starting server on http://{host}:{port}")

    uvicorn.run(app, host=host, port=port, **ssl_options)
    return 0


def one_shot(command: str) -> int:
    """Run a single console command against the configured database."""
    from api import deps

    services = deps.get_services()
    try:
        if command == "generate-invite":
            ok = generate_invite_cli(services.auth)
        else:
            ok = read_inquiries_cli(services.content)
    finally:
        deps.close_services()
    return 0 if ok else 1


def main():
    parser = argparse.ArgumentParser(description="nrv personal site backend")
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=["serve", "generate-invite", "read-inquiries"],
        help="What to run (default: serve)"
    )
    parser.add_argument("--host", help="Address to bind (default: NRV_HOST or 0.0.0.0)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: NRV_PORT or 443)")
    parser.add_argument("--no-console", action="store_true", help="Don't read operator commands from stdin")
    args = parser.parse_args()

    if args.command == "serve":
        sys.exit(serve(args))
    sys.exit(one_shot(args.command))


if __name__ == "__main__":
    main()
