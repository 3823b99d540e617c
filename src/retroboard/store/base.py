"""The key-path store contract the engines write through."""

from typing import Any, Protocol

from retroboard.paths import KeyPath


class Store(Protocol):
    """Overwrite/delete/read at structured key paths.

    Every method may raise StoreError. Writes and erases are idempotent;
    writing None is the same as erasing.
    """

    async def write(self, path: KeyPath, value: Any) -> None: ...

    async def erase(self, path: KeyPath) -> None: ...

    async def read(self, path: KeyPath) -> Any: ...
