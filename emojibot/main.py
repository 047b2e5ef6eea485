#!/usr/bin/env python3
"""
Main entry point for the CollabVM Emoji Bot
"""

import asyncio
import logging
import sys

from .application_context import ApplicationContext
from .config import get_configuration, print_config_summary
from .constants import MANAGER_LOOP_SLEEP_SECONDS
from .errors.handling import log_error
from .health import read_status
from .logging_config import LoggerConfigurator
from .signal_handler import SignalHandler

configurator = LoggerConfigurator()
configurator.configure()


async def _run_main_loop(context: ApplicationContext, signals: SignalHandler) -> None:
    """Wait for a shutdown signal or for every endpoint chain to end."""
    while True:
        await asyncio.sleep(MANAGER_LOOP_SLEEP_SECONDS)
        if signals.shutdown_initiated:
            logging.warning("🔻 Shutdown initiated - closing connections")
            break
        if context.supervisor.abandoned >= set(context.config.node_ids):
            logging.error("⚠️ Every endpoint gave up reconnecting")
            break


async def main() -> None:
    """Load configuration, start the bot and run until shutdown.

    Raises:
        SystemExit: If configuration is missing or invalid.
    """
    config = get_configuration()
    print_config_summary(config)
    context = ApplicationContext.create(config)
    signals = SignalHandler()
    signals.setup_signal_handlers()
    try:
        await context.start()
        logging.info("🏃 Bot running - press Ctrl+C to stop")
        await _run_main_loop(context, signals)
    except asyncio.CancelledError:
        logging.debug("Operation cancelled")
        raise
    except (RuntimeError, OSError, ValueError) as e:
        log_error("Main application error", e)
    finally:
        await asyncio.shield(context.shutdown())
        logging.info("👋 Goodbye")


def health_check() -> int:
    """Validate configuration and report the last published connection status."""
    logging.info("🏥 Health check mode")
    config = get_configuration()
    status = read_status(config.status_file)
    connections = status.get("connections", {})
    for node in config.node_ids:
        state = "connected" if connections.get(node) else "disconnected"
        logging.info(f"   • {node}: {state}")
    logging.info(f"✅ Health check passed - {len(config.vms)} vm(s) configured")
    return 0


def run() -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: If a critical error occurs during execution.
    """
    if len(sys.argv) > 1 and sys.argv[1] == "--health-check":
        sys.exit(health_check())
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
