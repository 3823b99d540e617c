"""Shared plumbing for engines that write through a store and talk to users."""

from typing import Callable, NoReturn

from retroboard.errors import RetroboardError
from retroboard.notify import Notify, log_notifier
from retroboard.store.base import Store


class Engine:
    def __init__(self, store: Store, notify: Notify = log_notifier) -> None:
        self.store = store
        self.notify = notify

    def fail(self, error: RetroboardError) -> NoReturn:
        """Tell the user and raise."""
        self.notify(error.message)
        raise error

    def check(self, gate: Callable[[], None]) -> None:
        """Run a gate that raises RetroboardError, telling the user if it does."""
        try:
            gate()
        except RetroboardError as e:
            self.fail(e)
