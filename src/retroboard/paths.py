"""Typed key-path builders for the board store.

Nothing outside this module joins path strings. A key path is a tuple of
segments; `format_path` renders one for logs and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass

KeyPath = tuple[str, ...]

ROOT = "boards"


def _segment(value: str) -> str:
    value = str(value)
    if not value or "/" in value:
        raise ValueError(f"invalid path segment: {value!r}")
    return value


def join(*parts: str) -> KeyPath:
    """Build a key path from segments, validating each one."""
    return tuple(_segment(p) for p in parts)


def format_path(path: KeyPath) -> str:
    """Render ("boards", "b1", "title") as "boards/b1/title"."""
    return "/".join(path)


def parse_path(text: str) -> KeyPath:
    """Split "boards/b1/title" into ("boards", "b1", "title")."""
    return join(*text.strip("/").split("/"))


@dataclass(frozen=True)
class BoardRef:
    board_id: str

    @property
    def path(self) -> KeyPath:
        return join(ROOT, self.board_id)

    @property
    def title(self) -> KeyPath:
        return self.path + ("title",)

    @property
    def settings(self) -> KeyPath:
        return self.path + ("settings",)

    def setting(self, key: str) -> KeyPath:
        return self.settings + join(key)

    @property
    def columns(self) -> KeyPath:
        return self.path + ("columns",)

    def column(self, column_id: str) -> ColumnRef:
        return ColumnRef(self.board_id, column_id)

    def presence(self, user_id: str) -> KeyPath:
        return self.path + join("presence", user_id)


@dataclass(frozen=True)
class ColumnRef:
    board_id: str
    column_id: str

    @property
    def path(self) -> KeyPath:
        return BoardRef(self.board_id).columns + join(self.column_id)

    @property
    def title(self) -> KeyPath:
        return self.path + ("title",)

    def card(self, card_id: str) -> CardRef:
        return CardRef(self.board_id, self.column_id, card_id)

    def group(self, group_id: str) -> GroupRef:
        return GroupRef(self.board_id, self.column_id, group_id)


@dataclass(frozen=True)
class ItemRef:
    """Anything in a column that can be voted on, reacted to and commented on."""

    board_id: str
    column_id: str
    item_id: str

    collection = ""

    @property
    def column(self) -> ColumnRef:
        return ColumnRef(self.board_id, self.column_id)

    @property
    def path(self) -> KeyPath:
        return self.column.path + join(self.collection, self.item_id)

    @property
    def votes(self) -> KeyPath:
        return self.path + ("votes",)

    @property
    def voters(self) -> KeyPath:
        return self.path + ("voters",)

    def voter(self, user_id: str) -> KeyPath:
        return self.voters + join(user_id)

    def reaction(self, emoji: str) -> KeyPath:
        return self.path + join("reactions", emoji)

    def reaction_count(self, emoji: str) -> KeyPath:
        return self.reaction(emoji) + ("count",)

    def reaction_user(self, emoji: str, user_id: str) -> KeyPath:
        return self.reaction(emoji) + join("users", user_id)

    def comment(self, comment_id: str) -> KeyPath:
        return self.path + join("comments", comment_id)

    def comment_content(self, comment_id: str) -> KeyPath:
        return self.comment(comment_id) + ("content",)


@dataclass(frozen=True)
class CardRef(ItemRef):
    collection = "cards"

    @property
    def card_id(self) -> str:
        return self.item_id

    @property
    def group_id(self) -> KeyPath:
        return self.path + ("groupId",)


@dataclass(frozen=True)
class GroupRef(ItemRef):
    collection = "groups"

    @property
    def group_id(self) -> str:
        return self.item_id

    @property
    def name(self) -> KeyPath:
        return self.path + ("name",)
