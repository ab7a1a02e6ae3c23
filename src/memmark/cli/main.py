"""
Command-line interface for the memmark memory sampler.

This module provides the main CLI entry point: it parses the command line,
loads the configuration and applies the command-line overrides, configures
logging, and hands a single attach or launch session to MonitorRunner.

Everything after a bare ``--`` is the command to launch and is never parsed
as an option.
"""

import argparse
import dataclasses
import logging
import sys
import tomllib
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .. import __version__
from ..config import (
    get_config,
    set_config_path,
    validate_interval,
    validate_log_level,
    validate_optional_duration,
)
from ..models.config import MonitorConfig
from ..validation import (
    TargetNotFoundError,
    ValidationError,
    handle_cli_error,
    validate_pid,
)
from .orchestrator import MonitorRunner

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EXIT_TARGET_NOT_FOUND = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr so a CSV stream on stdout stays clean."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)


def split_command_args(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split argv at the first ``--`` into option arguments and the command."""
    argv = list(argv)
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1:]
    return argv, []


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memmark",
        description="Sample the memory of a process tree to CSV.",
        usage="%(prog)s --pid PID [options]\n       %(prog)s [options] -- COMMAND [ARG ...]",
    )
    parser.add_argument(
        "--pid",
        type=str,
        help="Attach to an existing process and sample its tree (exclusive with a command).",
    )
    parser.add_argument(
        "--interval",
        type=str,
        help="Sampling interval, e.g. 200ms, 1s, 2.5m. Defaults to the config value (1s).",
    )
    parser.add_argument(
        "--duration",
        type=str,
        help="Stop sampling after this long. Defaults to running until the target exits.",
    )
    parser.add_argument(
        "--out",
        type=str,
        help="CSV output path, or '-' for stdout. Defaults to memmark.csv.",
    )
    parser.add_argument(
        "--smaps",
        action="store_true",
        help="Also collect PSS and swap (Linux only; slower on large trees).",
    )
    parser.add_argument(
        "--chart",
        type=str,
        help="Render a memory chart to this path after the run (.html, or an image with kaleido).",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="TOML configuration file. Defaults to conf/config.toml when present.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def apply_cli_overrides(monitor_config: MonitorConfig, args: argparse.Namespace) -> MonitorConfig:
    """
    Return a copy of ``monitor_config`` with the command-line values applied.

    Raises:
        ValidationError: If an override value is invalid.
    """
    overrides = {}
    if args.interval is not None:
        overrides["interval_ms"] = validate_interval(args.interval, field_name="--interval")
    if args.duration is not None:
        overrides["duration_ms"] = validate_optional_duration(args.duration, field_name="--duration")
    if args.out is not None:
        if not args.out.strip():
            raise ValidationError("--out must not be empty", field_name="--out", value=args.out)
        overrides["out_path"] = args.out
    if args.smaps:
        overrides["enable_smaps"] = True
    if args.chart is not None:
        overrides["chart_path"] = args.chart or None
    if args.log_level is not None:
        overrides["log_level"] = validate_log_level(args.log_level, field_name="--log-level")
    return dataclasses.replace(monitor_config, **overrides)


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run memmark with the given arguments and return the exit status.

    Configuration errors exit with status 2 and a missing target with
    status 1 (via ``handle_cli_error``). Otherwise the status is the launched
    command's, or 0 for an attach-mode run that ended normally.

    Raises:
        SystemExit: On argument, configuration, or target errors.
    """
    argv = sys.argv[1:] if argv is None else argv
    option_args, command = split_command_args(argv)
    args = build_parser().parse_args(option_args)

    configure_logging()

    try:
        if args.config:
            set_config_path(Path(args.config))
        monitor_config = apply_cli_overrides(get_config().monitor, args)
        pid = validate_pid(args.pid, field_name="--pid") if args.pid is not None else None
        runner = MonitorRunner(monitor_config, pid=pid, command=command or None)
    except (OSError, UnicodeDecodeError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration",
            exit_code=EXIT_CONFIG_ERROR,
            logger=logger,
        )

    logging.getLogger().setLevel(monitor_config.log_level)

    try:
        return runner.run()
    except ValidationError as e:
        handle_cli_error(error=e, context="output setup", exit_code=EXIT_CONFIG_ERROR, logger=logger)
    except TargetNotFoundError as e:
        handle_cli_error(error=e, context="target", exit_code=EXIT_TARGET_NOT_FOUND, logger=logger)


def main_cli() -> None:
    """
    Console entry point for the memmark command.

    Raises:
        SystemExit: Always, carrying the run's exit status.
    """
    try:
        sys.exit(run_cli())
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    main_cli()
