"""In-memory store backed by a reactive Tree."""

import logging
from typing import Any, Callable

from retroboard.errors import StoreError
from retroboard.paths import KeyPath, format_path
from retroboard.store.tree import Callback, Tree

logger = logging.getLogger(__name__)

FailPredicate = Callable[[str, KeyPath], bool]


class MemoryStore:
    """Store whose state lives in a Tree.

    `fail_on(op, path)` lets callers make chosen writes or erases fail with
    StoreError, which is how the engines' failure paths are exercised.
    `operations` records every applied (op, path) pair in order.
    """

    def __init__(self, data: dict | None = None, fail_on: FailPredicate | None = None) -> None:
        self.tree = Tree(data)
        self.fail_on = fail_on
        self.operations: list[tuple[str, KeyPath]] = []

    def _check(self, op: str, path: KeyPath) -> None:
        if self.fail_on is not None and self.fail_on(op, path):
            raise StoreError(f"{op} rejected at {format_path(path)}", path)

    async def write(self, path: KeyPath, value: Any) -> None:
        if value is None:
            await self.erase(path)
            return
        self._check("write", path)
        logger.debug("write %s", format_path(path))
        try:
            self.tree.set(path, value)
        except TypeError as e:
            raise StoreError(str(e), path) from e
        self.operations.append(("write", path))

    async def erase(self, path: KeyPath) -> None:
        self._check("erase", path)
        logger.debug("erase %s", format_path(path))
        self.tree.erase(path)
        self.operations.append(("erase", path))

    async def read(self, path: KeyPath) -> Any:
        return self.tree.get(path)

    def watch(self, path: KeyPath, callback: Callback) -> Callable[[], None]:
        """Subscribe to changes at or around path. Returns an unwatch callable."""
        return self.tree.watch(path, callback)
