"""User-facing notification sinks.

A sink is any callable taking one message string. Notifications are fire
and forget; engines never look at what a sink returns.
"""

import logging
from typing import Callable

from rich.console import Console

logger = logging.getLogger(__name__)

Notify = Callable[[str], None]


def log_notifier(message: str) -> None:
    """Sink that only logs."""
    logger.info("notify: %s", message)


class PrintNotifier:
    """Sink that prints to a rich console, for the CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def __call__(self, message: str) -> None:
        logger.info("notify: %s", message)
        self.console.print(message, style="italic", highlight=False)


class CollectingNotifier:
    """Sink that keeps messages in order, for JSON output and tests."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        logger.info("notify: %s", message)
        self.messages.append(message)
