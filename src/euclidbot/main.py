"""Command line entry point.

Usage:
    euclidbot --mode random_swap --count 5 --amount 0.001
    euclidbot            # interactive menu
"""

import argparse
import asyncio
import logging
import signal
import sys
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Optional

from euclidbot.config import get_settings
from euclidbot.errors import EuclidBotError
from euclidbot.events import LoggingEventSink
from euclidbot.factory import create_orchestrator
from euclidbot.swap.orchestrator import SwapMode
from euclidbot.swap.validator import PreflightReport

logger = logging.getLogger(__name__)

SIGNALS = (signal.SIGINT, signal.SIGTERM)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Euclid Testnet Auto Bot")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in SwapMode],
        help="Swap mode (omit for interactive menu)",
    )
    parser.add_argument("--count", type=int, default=None, help="Number of transactions")
    parser.add_argument("--amount", type=str, default=None, help="ETH amount per transaction")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def prompt(text: str, default: str) -> str:
    value = input(f"{text} [{default}]: ").strip()
    return value or default


def choose_mode() -> Optional[SwapMode]:
    """Numbered menu; returns None for Exit."""
    modes = list(SwapMode)
    for i, mode in enumerate(modes, start=1):
        print(f"  {i}. {mode.label}")
    print(f"  {len(modes) + 1}. Exit")

    choice = prompt("Select a swap option", "1")
    try:
        idx = int(choice) - 1
    except ValueError:
        return None
    if 0 <= idx < len(modes):
        return modes[idx]
    return None


def parse_count(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_amount(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        return Decimal("0")


class Application:
    """Runs one batch from CLI arguments."""

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.settings = get_settings()
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        for sig in SIGNALS:
            loop.add_signal_handler(sig, self.shutdown)

    @contextmanager
    def interactive(self):
        """Default signal handling while blocked on stdin, so Ctrl+C quits at once."""
        loop = self._loop
        if loop is not None:
            for sig in SIGNALS:
                loop.remove_signal_handler(sig)
        try:
            yield
        finally:
            if loop is not None:
                self.install_signal_handlers(loop)

    def ask(self, text: str, default: str) -> str:
        with self.interactive():
            return prompt(text, default)

    def confirm(self, report: PreflightReport) -> bool:
        return self.ask("Continue with these settings? (y/n)", "y").lower() == "y"

    async def start(self) -> int:
        log_level = logging.DEBUG if (self.args.debug or self.settings.debug) else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        if self.args.mode:
            mode = SwapMode(self.args.mode)
        else:
            with self.interactive():
                mode = choose_mode()
        if mode is None:
            logger.info("Exit")
            return 0

        count = self.args.count if self.args.count is not None else parse_count(
            self.ask("Enter number of transactions to perform", "1")
        )
        amount = parse_amount(
            self.args.amount or self.ask("Enter ETH amount per transaction", "0.001")
        )

        events = LoggingEventSink()
        events.info(f"Network: {self.settings.network_name} (Chain ID: {self.settings.chain_id})")

        try:
            orchestrator = create_orchestrator(self.settings, events=events)
            summary = await orchestrator.run(
                mode,
                count,
                amount,
                confirm=None if self.args.yes else self.confirm,
            )
        except EuclidBotError as e:
            events.error(str(e))
            return 1
        except Exception as e:
            logger.debug("Batch failed", exc_info=True)
            events.error(f"Fatal error: {e}")
            return 1

        if summary is None:
            return 1
        snap = summary.snapshot
        logger.info(
            f"Batch finished: {snap.succeeded} succeeded, {snap.failed} failed, {snap.skipped} skipped"
        )
        return 0

    def shutdown(self) -> None:
        """Signal shutdown; abandons the in-flight attempt."""
        logger.info("Shutdown requested")
        if self._task is not None:
            self._task.cancel()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    app = Application(parse_args(argv))

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    app.install_signal_handlers(loop)

    try:
        app._task = loop.create_task(app.start())
        return loop.run_until_complete(app._task)
    except asyncio.CancelledError:
        logger.info("Cancelled")
        return 130
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        return 130
    finally:
        loop.close()


if __name__ == "__main__":
    sys.exit(main())
