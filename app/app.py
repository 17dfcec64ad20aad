#!/usr/bin/env python3
"""
Main entry point for the wagmi service application.
This file is used to start the Flask application in containerized environments.

Run from the repository root with `python -m app.app`, or `wagmi-server`
once the package is installed.
"""

import logging
import os
import signal
import threading

from werkzeug.serving import make_server

from app.api.wagmi_service import app

logger = logging.getLogger("app")


def install_shutdown_handlers(server):
    """Shut the server down gracefully on SIGTERM and SIGINT."""

    def handle_signal(signum, frame):
        logger.info(f"{signal.Signals(signum).name} received, shutting down gracefully")
        # shutdown() blocks until serve_forever() returns, so it cannot run
        # on the thread that is serving
        threading.Thread(target=server.shutdown, daemon=True).start()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)


def serve(host, port):
    """Run the threaded server until a shutdown signal arrives."""
    server = make_server(host, port, app, threaded=True)
    install_shutdown_handlers(server)

    logger.info(f"WAGMI-9000 Echo Unit online at port {port}")
    try:
        server.serve_forever()
    finally:
        server.server_close()
        logger.info("Process terminated")


def main():
    # Get host and port from environment variables or use defaults
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 3000))

    serve(host, port)


if __name__ == "__main__":
    main()
