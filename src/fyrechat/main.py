#!/usr/bin/env python3
"""Main entry point for FyreChat.

Settings overrides are passed as query-style arguments, e.g.
``fyrechat ch=valkyrae max=8 ttl=22 debug=1`` or ``fyrechat "ch=valkyrae&max=8"``.
"""

import logging
import sys

from .core.settings import load_settings


def setup_logging(debug: bool = False) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def query_from_args(args: list[str]) -> str:
    """Join command-line arguments into one query string."""
    return "&".join(arg.lstrip("?") for arg in args if arg)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = sys.argv[1:] if argv is None else argv
    settings = load_settings(query_from_args(args))
    setup_logging(settings.debug)

    try:
        from .gui.app import run

        return run(settings)
    except ImportError as e:
        logging.error(f"Failed to import GUI: {e}")
        logging.error("Make sure PySide6 is installed:")
        logging.error("  pip install PySide6")
        return 1


if __name__ == "__main__":
    sys.exit(main())
