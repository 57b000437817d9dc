"""
Main entry point for the archupd command-line tool.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import argparse
import sys
from typing import List, Optional

from ..config import Config
from ..constants import APP_NAME, APP_VERSION, EXIT_INTERRUPTED, HELP_TEXT
from ..updater import Updater
from ..utils.logger import configure_logging, get_logger
from .output import OutputFormatter

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """
    Create command line argument parser.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=HELP_TEXT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        '-h', '-?', '--help',
        action='help',
        help='show help'
    )
    parser.add_argument(
        '--config',
        type=str,
        help='Path to custom configuration file'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI application."""
    parser = create_parser()
    args = parser.parse_args(argv)

    config = Config(args.config).app_config
    if args.no_color:
        config.color = False
    if args.debug:
        config.debug_mode = True

    configure_logging(debug=config.debug_mode, log_file=config.log_file, color=config.color)
    logger.debug(f"Configuration: {config.to_dict()}")

    output = OutputFormatter(use_color=config.color)
    try:
        return Updater(config, output=output).run()
    except KeyboardInterrupt:
        output.error("\nOperation cancelled by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
