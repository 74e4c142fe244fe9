"""Command-line interface for template-file-sync.

This module provides the CLI commands and options for the file synchronization tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .context import DEFAULT_CONFIG_FILE, RunContext
from .exceptions import TemplateSyncError
from .github import GitHubClient
from .sync import FileSync


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable debug logging if True
    """
    level = logging.DEBUG if verbose else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level, format=format_str, handlers=[logging.StreamHandler()]
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Open pull requests that sync files from this repository to other repositories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sync using the default config in the source repository
  python main.py

  # Use a custom config path
  python main.py -c .github/templates.yml

  # Dry run to see which pull requests would be opened
  python main.py --dry-run
        """.strip(),
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=f"Path of the sync config in the source repository (default: {DEFAULT_CONFIG_FILE})",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch files and build changes without creating pull requests",
    )

    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Abort the whole run on the first failing sync group",
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)",
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )

    return parser


def main(argv: Optional[list[str]] = None, token: Optional[str] = None) -> None:
    """Main entry point for the CLI application."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        context = RunContext.from_env(
            config_file=args.config,
            dry_run=args.dry_run,
            fail_fast=args.fail_fast,
        )

        with GitHubClient(timeout=args.timeout, token=token) as client:
            result = FileSync(client, context).run()

        if result.is_success:
            logger.info(f"✓ {result}")
        else:
            logger.error(f"✗ {result}")
            for label, error in result.failures:
                logger.error(f"  {label}: {error}")

        sys.exit(0 if result.is_success else 1)

    except KeyboardInterrupt:
        logger.info("Sync interrupted by user")
        sys.exit(130)
    except TemplateSyncError as e:
        logger.error(f"Sync failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        sys.exit(1)


if __name__ == "__main__":
    main()
