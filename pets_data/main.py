"""
Pets data layer - command-line entry point.

Runs one catalog command against a local database file:
- Settings are read from PETS_* environment variables
- --db and --log-level flags override them
- The process-wide provider is opened for the command and closed after

Usage:
    python -m pets_data.main --db shelter.db list
    pets insert-dummy

Exit status:
    0  success
    1  data-layer or configuration error
    2  usage error (reported by argparse)

Invariants:
    - The provider is always shut down, even when the command fails
    - Logging is configured before the provider opens the store
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence, TextIO

import json_log_formatter

from .config import Settings
from .tools import catalog_cli

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings.

    Args:
        settings: Data layer settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def run(argv: Optional[Sequence[str]] = None, out: TextIO = sys.stdout) -> int:
    """Parse argv, run the command and return the exit status."""
    args = catalog_cli.build_parser().parse_args(argv)

    try:
        settings = catalog_cli.load_settings(args)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)
    settings.log_config()
    logger.debug("Running command", extra={"command": args.command})
    return catalog_cli.execute(settings, args, out)


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
