"""Key-path stores."""

from retroboard.store.base import Store
from retroboard.store.git import GitStore
from retroboard.store.memory import MemoryStore
from retroboard.store.tree import Tree

__all__ = ["GitStore", "MemoryStore", "Store", "Tree"]
