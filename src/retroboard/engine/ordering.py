"""Display ordering of cards and groups within a column."""

from dataclasses import dataclass
from typing import Literal

from retroboard.model.board import Board, Column
from retroboard.model.card import Card, Group
from retroboard.settings import BoardSettings
from retroboard.workflow import obscure, should_obfuscate_cards

ItemKind = Literal["group", "card"]


@dataclass(frozen=True)
class BoardItem:
    kind: ItemKind
    item: Card | Group
    column_id: str

    @property
    def item_id(self) -> str:
        return self.item.item_id

    @property
    def votes(self) -> int:
        return self.item.votes


def _items(column: Column) -> list[BoardItem]:
    """Groups, then cards that are not shown inside a group."""
    groups = [BoardItem("group", g, column.column_id) for g in column.groups.values()]
    cards = [
        BoardItem("card", c, column.column_id)
        for c in column.cards.values()
        if c.group_id is None or c.group_id not in column.groups
    ]
    return groups + cards


def sort_items(column: Column, sort_by_votes: bool = False) -> list[BoardItem]:
    """Merge groups and ungrouped cards into one display order.

    By creation time oldest first, with a group ahead of a card created at
    the same moment (a group inherits its target card's timestamp). By
    votes highest first; ties keep creation order.
    """
    items = sorted(_items(column), key=lambda i: (i.item.created, 0 if i.kind == "group" else 1))
    if sort_by_votes:
        items.sort(key=lambda i: -i.votes)
    return items


def group_members(column: Column, group: Group, sort_by_votes: bool = False) -> list[Card]:
    members = column.group_members(group.group_id)
    if sort_by_votes:
        members.sort(key=lambda c: -c.votes)
    return members


def results(board: Board, limit: int | None = None) -> list[BoardItem]:
    """Top-voted items across all columns, for the results phase."""
    items = [i for col in board.columns.values() for i in sort_items(col)]
    items.sort(key=lambda i: -i.votes)
    return items[:limit] if limit is not None else items


def card_text(card: Card, viewer: str | None, settings: BoardSettings) -> str:
    """Card content as `viewer` may see it; others' cards stay hidden until revealed."""
    if card.created_by != viewer and should_obfuscate_cards(settings.workflow_phase, settings.retrospective_mode):
        return obscure(card.content)
    return card.content
