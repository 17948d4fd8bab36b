"""
Autofound entry point.

Parses the command line, configures logging, checks the data directory and starts either the REST
API alone or the API in a background thread with the terminal shell in the foreground.
"""

import argparse
import logging
import os
import sys
import threading
from pathlib import Path

from autofound.config import settings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    # Provider requests carry API keys in URLs and headers
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _ensure_data_dir(path: str) -> Path:
    """Create the workspace/run-log directory; exit if it cannot be written."""
    data_dir = Path(path)
    data_dir.mkdir(parents=True, exist_ok=True)
    if not data_dir.is_dir() or not os.access(data_dir, os.W_OK):
        logger.error("Data directory is not writable: %s", data_dir)
        sys.exit(1)
    return data_dir


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Autofound agent runtime")
    parser.add_argument(
        "--mode",
        choices=["api", "cli"],
        type=str.lower,
        default="api",
        help="Serve the REST API, or the API plus an interactive agent shell (default: api)",
    )
    parser.add_argument("--agent", default="assistant", help="Agent to chat with in CLI mode")
    parser.add_argument("--model", default=None, help="Model for the CLI agent (default: DEFAULT_MODEL)")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="API port (default: %(default)s)")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """Entry point of the ``autofound`` console script."""
    args = _build_parser().parse_args(sys.argv[1:] if argv is None else argv)

    # Command-line values win over the environment
    settings.LOG_LEVEL = args.log_level
    settings.API_PORT = args.port

    _init_logging(settings.LOG_LEVEL)
    _ensure_data_dir(settings.DATA_DIR)
    logger.info("Starting Autofound [%s mode] with default model %s", args.mode, settings.DEFAULT_MODEL)

    # Imported late so DATA_DIR is validated before the app binds its stores
    from autofound.api.app import run_api  # pylint: disable=import-outside-toplevel

    if args.mode == "api":
        run_api(host="0.0.0.0", port=settings.API_PORT, reload=settings.DEBUG)
        return

    api_thread = threading.Thread(
        target=run_api,
        kwargs={
            "host": "127.0.0.1",
            "port": settings.API_PORT,
            "reload": False,  # Reload doesn't work well with threading
            "log_level": "warning",
        },
        daemon=True,
    )
    api_thread.start()

    from autofound.client.cli import run_cli  # pylint: disable=import-outside-toplevel

    run_cli(args.agent, model=args.model)


if __name__ == "__main__":
    main()
