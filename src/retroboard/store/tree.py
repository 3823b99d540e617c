"""Reactive nested mapping addressed by key paths, with change notification."""

from __future__ import annotations

import copy
from typing import Any, Callable

from retroboard.paths import KeyPath

Callback = Callable[[KeyPath, Any, Any], None]

_SCALARS = (str, int, float, bool)


def _clean(value: Any) -> Any:
    """Normalise a value for storage.

    Mappings are copied with string keys, None members dropped and empty
    sub-mappings pruned. Tuples become lists. Anything that is not a plain
    scalar, list or mapping is refused.
    """
    if isinstance(value, dict):
        cleaned = {}
        for k, v in value.items():
            v = _clean(v)
            if v is None or v == {}:
                continue
            cleaned[str(k)] = v
        return cleaned
    if isinstance(value, (list, tuple)):
        return [_clean(v) for v in value if v is not None]
    if value is None or isinstance(value, _SCALARS):
        return value
    raise TypeError(f"cannot store {type(value).__name__}")


def _lookup(data: Any, path: KeyPath) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
        if data is None:
            return None
    return data


class Tree:
    """Nested dict of plain values, read and written by key path.

    Writing None (or an empty mapping) deletes. Deleting the last child of
    a mapping deletes the mapping too, so absence and emptiness are the
    same thing. Changes fire watchers on the changed path, bubble up to
    every ancestor, and reach watchers of descendant paths.
    """

    def __init__(self, data: dict | None = None) -> None:
        self._root: dict = _clean(data or {})
        self._watchers: dict[KeyPath, list[Callback]] = {}
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def get(self, path: KeyPath = ()) -> Any:
        """Return a detached copy of the value at path, or None."""
        return copy.deepcopy(_lookup(self._root, path))

    def __contains__(self, path: KeyPath) -> bool:
        return _lookup(self._root, path) is not None

    def set(self, path: KeyPath, value: Any) -> None:
        if not path:
            self.replace(value or {})
            return
        value = _clean(value)
        if value is None or value == {}:
            self.erase(path)
            return
        old = self.get(path)
        if old == value:
            return
        node = self._root
        for key in path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[path[-1]] = value
        self._changed(path, old, value)

    def erase(self, path: KeyPath) -> None:
        old = self.get(path)
        if old is None:
            return
        if not path:
            self._root = {}
            self._changed(path, old, None)
            return
        parents = [self._root]
        for key in path[:-1]:
            parents.append(parents[-1][key])
        del parents[-1][path[-1]]
        # prune mappings left empty
        for depth in range(len(path) - 1, 0, -1):
            if parents[depth]:
                break
            del parents[depth - 1][path[depth - 1]]
        self._changed(path, old, None)

    def replace(self, data: dict) -> None:
        """Swap in a whole new document, firing watchers for everything that differs."""
        old_root = self._root
        self._root = _clean(data)
        if old_root != self._root:
            self._changed((), old_root, copy.deepcopy(self._root))

    def to_dict(self) -> dict:
        return copy.deepcopy(self._root)

    def watch(self, path: KeyPath, callback: Callback) -> Callable[[], None]:
        """Watch a path for changes. Returns an unwatch callable."""
        path = tuple(path)
        self._watchers.setdefault(path, []).append(callback)
        return lambda: self._watchers.get(path, []) and self._watchers[path].remove(callback)

    def _changed(self, path: KeyPath, old: Any, new: Any) -> None:
        self._version += 1
        for watched, callbacks in list(self._watchers.items()):
            if not callbacks:
                continue
            if watched == path[: len(watched)]:
                # change at or below the watched path
                for cb in list(callbacks):
                    cb(path, old, new)
            elif path == watched[: len(path)]:
                rest = watched[len(path) :]
                sub_old, sub_new = _lookup(old, rest), _lookup(new, rest)
                if sub_old != sub_new:
                    for cb in list(callbacks):
                        cb(watched, copy.deepcopy(sub_old), copy.deepcopy(sub_new))

    def __repr__(self) -> str:
        keys = ", ".join(self._root.keys())
        return f"<Tree v{self._version} [{keys}]>"
