#!/usr/bin/env python3
"""playrate - Main entry point.

Resolves free-text music queries to catalog entities and reports their
lifetime and annualized play counts.
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

# Add src directory to Python path BEFORE imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from playrate.app.app_config import Config
from playrate.app.cli import CLI
from playrate.app.orchestrator import Orchestrator
from playrate.core.exceptions import ConfigurationError
from playrate.core.logger import LogFormat, SafeQueueListener, get_loggers, set_console_level
from playrate.services.dependency_container import DependencyContainer


async def _setup_environment(
    args: argparse.Namespace,
) -> tuple[DependencyContainer, SafeQueueListener | None, logging.Logger, logging.Logger]:
    """Set up configuration, logging, and dependencies.

    Args:
        args: Parsed command line arguments

    Returns:
        Tuple of (deps, listener, logger_console, logger_error)

    """
    config_manager = Config(getattr(args, "config", None))
    config = config_manager.load()

    logger_console, logger_error, listener = get_loggers(config)
    if getattr(args, "verbose", False):
        set_console_level(logger_console, logging.DEBUG)

    deps = DependencyContainer(
        config,
        logger_console,
        logger_error,
        logging_listener=listener,
    )
    await deps.initialize()

    return deps, listener, logger_console, logger_error


def _handle_keyboard_interrupt(logger_console: logging.Logger | None) -> None:
    """Handle keyboard interrupt gracefully."""
    if logger_console:
        logger_console.info("\nInterrupted by user.")
    sys.exit(130)


def _handle_critical_error(error: Exception, logger_error: logging.Logger | None) -> None:
    """Handle critical errors."""
    if logger_error:
        logger_error.critical("A critical error occurred: %s", error, exc_info=True)
    else:
        print(f"A critical error occurred: {error}", file=sys.stderr)
    sys.exit(1)


async def _cleanup_resources(
    deps: DependencyContainer | None,
    logger_console: logging.Logger | None,
    start_time: float,
) -> None:
    """Cleanup all resources and log execution time."""
    if logger_console:
        logger_console.debug("Total execution time: %s", LogFormat.duration(time.time() - start_time))

    if deps:
        await deps.close()
        deps.shutdown()


async def main_async() -> None:
    """Execute main async entry point."""
    cli = CLI()
    args = cli.parse_args()
    if not getattr(args, "command", None):
        cli.print_help()
        sys.exit(2)
    start_time = time.time()

    try:
        deps, _listener, logger_console, logger_error = await _setup_environment(args)
    except ConfigurationError as e:
        _handle_critical_error(e, None)
        return

    try:
        orchestrator = Orchestrator(deps)
        await orchestrator.run_command(args)

    except KeyboardInterrupt:
        _handle_keyboard_interrupt(logger_console)

    except (RuntimeError, ValueError, OSError) as e:
        _handle_critical_error(e, logger_error)

    finally:
        await _cleanup_resources(deps, logger_console, start_time)


def main() -> None:
    """Execute the main entry point."""
    asyncio.run(main_async())


if __name__ == "__main__":
    main()
