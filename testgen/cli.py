"""CLI entrypoint for testgen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, default_config_path, load_config
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testgen",
        description="Generate unit tests for under-covered methods using an AI backend.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=None,
        help="Path to the configuration file (defaults to testgen.json in the project root).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for testgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    except OSError as exc:
        parser.exit(2, f"testgen: cannot open log file {args.log_file}: {exc}\n")
    logger = get_logger("cli")

    config_path = Path(args.config) if args.config else default_config_path()
    try:
        config = load_config(config_path)
        summary = Orchestrator(config).run()
    except ConfigError as exc:
        parser.exit(2, f"testgen: configuration error: {exc}\n")
    except KeyboardInterrupt:
        parser.exit(130, "testgen: interrupted\n")
    except Exception as exc:
        logger.exception("Error running test generator: %s", exc)
        parser.exit(1, f"testgen failed: {exc}\nRun with --verbose for more details.\n")

    print(
        f"Generated {len(summary.generated)} test(s) for {summary.gaps_found} gap(s) "
        f"in {summary.classes_with_gaps} class(es); {len(summary.skipped)} skipped."
    )


if __name__ == "__main__":
    main(sys.argv[1:])
