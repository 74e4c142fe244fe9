"""Main entry point for the template-file-sync GitHub Action.

This module maps GitHub Actions inputs onto command-line arguments and runs
the command-line interface.
"""

import os

from template_sync.cli import main


def build_argv_from_env(environ=None) -> list[str]:
    """Translate ``INPUT_*`` action inputs into CLI arguments."""
    env = os.environ if environ is None else environ
    argv = []

    if env.get("INPUT_CONFIG_FILE"):
        argv.extend(["--config", env["INPUT_CONFIG_FILE"]])

    if env.get("INPUT_DRY_RUN", "false").lower() == "true":
        argv.append("--dry-run")

    if env.get("INPUT_FAIL_FAST", "false").lower() == "true":
        argv.append("--fail-fast")

    if env.get("RUNNER_DEBUG") == "1":
        argv.append("--verbose")

    return argv


def main_with_env_parsing() -> None:
    """Main entry point that handles GitHub Actions environment variables."""
    argv = build_argv_from_env()
    main(argv, token=os.getenv("INPUT_GITHUB_TOKEN") or None)


if __name__ == "__main__":
    main_with_env_parsing()
