"""Group formation: merging two cards into a named group.

Dropping one card on another starts a grouping interaction. Once the user
names the group it is created in the target card's column; a dragged card
from another column is relocated there first. The group takes the target
card's creation time so that it sorts where the target card used to.
Dropping onto a card that is already grouped adds the dragged card to
that group instead.

    IDLE -> begin() -> AWAITING_NAME -> commit() -> COMMITTING -> IDLE
                       AWAITING_NAME -> cancel() -> IDLE
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum

from retroboard.engine.base import Engine
from retroboard.errors import NotFoundError, PhaseError, StoreError, ValidationError
from retroboard.ids import generate_id
from retroboard.model.board import Board
from retroboard.model.card import Card, Group, validate_group_name
from retroboard.notify import Notify, log_notifier
from retroboard.paths import BoardRef, ColumnRef, format_path
from retroboard.settings import BoardSettings
from retroboard.store.base import Store

logger = logging.getLogger(__name__)


class GroupingState(str, Enum):
    IDLE = "IDLE"
    AWAITING_NAME = "AWAITING_NAME"
    COMMITTING = "COMMITTING"


@dataclass(frozen=True)
class PendingGroup:
    """A card dropped on a card, waiting for a group name.

    `existing_group` is set when the target is already grouped; committing
    then adds the dragged card to it.
    """

    dragged_card: Card
    target_card: Card
    dragged_column_id: str
    target_column_id: str
    existing_group: Group | None = None

    @property
    def cross_column(self) -> bool:
        return self.dragged_column_id != self.target_column_id

    @property
    def target_created(self) -> int:
        return self.target_card.created


async def relocate_card(
    store: Store,
    board_ref: BoardRef,
    card: Card,
    source_column_id: str,
    target_column_id: str,
) -> Card:
    """Move a card to another column, clearing its group membership.

    Copies then removes. If the copy fails nothing has changed; if the
    removal fails the copy is taken back out before the error propagates.
    """
    moved = dataclasses.replace(card, group_id=None)
    source = board_ref.column(source_column_id).card(card.card_id)
    if source_column_id == target_column_id:
        await store.erase(source.group_id)
        return moved

    target = board_ref.column(target_column_id).card(card.card_id)
    await store.write(target.path, moved.to_dict())
    try:
        await store.erase(source.path)
    except StoreError:
        logger.warning("could not remove %s, undoing copy to %s", format_path(source.path), target_column_id)
        await store.erase(target.path)
        raise
    logger.debug("moved card %s from %s to %s", card.card_id, source_column_id, target_column_id)
    return moved


async def create_group(
    store: Store,
    column_ref: ColumnRef,
    name: str,
    members: list[Card],
    created: int,
) -> Group:
    """Write a group record and point its members at it.

    On failure every member's previous membership is restored and the
    group record removed, so no partial group is left behind.
    """
    group = Group(item_id=generate_id(), name=name, created=created)
    group_ref = column_ref.group(group.group_id)
    await store.write(group_ref.path, group.to_dict())

    linked: list[Card] = []
    try:
        for card in members:
            await store.write(column_ref.card(card.card_id).group_id, group.group_id)
            linked.append(card)
    except StoreError:
        logger.warning("group %s creation failed, rolling back", group.group_id)
        for card in linked:
            await store.write(column_ref.card(card.card_id).group_id, card.group_id)
        await store.erase(group_ref.path)
        raise
    logger.info("created group %s %r in %s", group.group_id, name, column_ref.column_id)
    return group


class GroupingEngine(Engine):
    """Drives one grouping interaction at a time for one board."""

    def __init__(self, store: Store, board_id: str, notify: Notify = log_notifier) -> None:
        super().__init__(store, notify)
        self.board_ref = BoardRef(board_id)
        self.state = GroupingState.IDLE
        self.pending: PendingGroup | None = None

    def _reset(self) -> None:
        self.state = GroupingState.IDLE
        self.pending = None

    def begin(self, dragged_card_id: str, target_card_id: str, board: Board) -> PendingGroup | None:
        """Start grouping dragged onto target. Dropping a card on itself does nothing.

        A target that already belongs to a group makes the drop a join: the
        dragged card goes into that group and no name is needed.
        """
        if dragged_card_id == target_card_id:
            return None
        if self.state == GroupingState.COMMITTING:
            self.fail(PhaseError("A group is already being created"))
        self.check(lambda: board.settings.require("grouping"))

        dragged_col = board.find_card_column(dragged_card_id)
        if dragged_col is None:
            self.fail(NotFoundError("Card not found"))
        target_col = board.find_card_column(target_card_id)
        if target_col is None:
            self.fail(NotFoundError("Target card not found"))

        dragged = dragged_col.cards[dragged_card_id]
        target = target_col.cards[target_card_id]
        existing = target_col.groups.get(target.group_id) if target.group_id else None
        if existing is not None and dragged.group_id == existing.group_id:
            return None

        self.pending = PendingGroup(
            dragged_card=dragged,
            target_card=target,
            dragged_column_id=dragged_col.column_id,
            target_column_id=target_col.column_id,
            existing_group=existing,
        )
        self.state = GroupingState.AWAITING_NAME
        return self.pending

    def cancel(self) -> None:
        self._reset()

    async def commit(self, name: str | None, settings: BoardSettings) -> Group:
        """Create the pending group under `name`, or join the target's group.

        A blank name leaves the interaction waiting for a better one. The
        name is ignored when joining. Anything raised after that ends it.
        """
        if self.state != GroupingState.AWAITING_NAME or self.pending is None:
            raise RuntimeError("no grouping in progress")
        try:
            settings.require("grouping")
        except PhaseError as e:
            self._reset()
            self.fail(e)

        pending = self.pending
        if pending.existing_group is None:
            name = self._validated(name)

        self.state = GroupingState.COMMITTING
        try:
            if pending.existing_group is not None:
                group = await self._join(pending)
            else:
                group = await self._create(name, pending)
        except StoreError as e:
            self.notify(f"Could not create group: {e.message}")
            raise
        finally:
            self._reset()

        if pending.existing_group is not None:
            self.notify("Card added to group")
        else:
            self.notify(f'Group "{name}" created')
        return group

    def _validated(self, name: str) -> str:
        try:
            return validate_group_name(name)
        except ValidationError as e:
            self.fail(e)

    async def _create(self, name: str, pending: PendingGroup) -> Group:
        dragged = pending.dragged_card
        if pending.cross_column:
            dragged = await relocate_card(
                self.store,
                self.board_ref,
                dragged,
                pending.dragged_column_id,
                pending.target_column_id,
            )
        column_ref = self.board_ref.column(pending.target_column_id)
        try:
            return await create_group(
                self.store, column_ref, name, [dragged, pending.target_card], pending.target_created
            )
        except StoreError:
            if pending.cross_column:
                await self._move_back(pending)
            raise

    async def _join(self, pending: PendingGroup) -> Group:
        dragged = pending.dragged_card
        if pending.cross_column:
            dragged = await relocate_card(
                self.store,
                self.board_ref,
                dragged,
                pending.dragged_column_id,
                pending.target_column_id,
            )
        group = pending.existing_group
        card_ref = self.board_ref.column(pending.target_column_id).card(dragged.card_id)
        try:
            await self.store.write(card_ref.group_id, group.group_id)
        except StoreError:
            if pending.cross_column:
                await self._move_back(pending)
            raise
        logger.info("card %s joined group %s", dragged.card_id, group.group_id)
        return group

    async def _move_back(self, pending: PendingGroup) -> None:
        """Compensate a relocation whose grouping could not be written."""
        card = pending.dragged_card
        source = self.board_ref.column(pending.dragged_column_id).card(card.card_id)
        target = self.board_ref.column(pending.target_column_id).card(card.card_id)
        try:
            await self.store.write(source.path, card.to_dict())
            await self.store.erase(target.path)
        except StoreError:
            logger.exception("could not move card %s back to %s", card.card_id, pending.dragged_column_id)

    # --- Membership changes outside the drop-on-card interaction ---

    async def add_to_group(self, card_id: str, group_id: str, board: Board) -> Card:
        """Put a card into an existing group, relocating it if needed."""
        self.check(lambda: board.settings.require("grouping"))
        try:
            group_col, _ = board.find_group(group_id)
            card_col, card = board.find_card(card_id)
        except NotFoundError as e:
            self.fail(e)
        if card.group_id == group_id:
            return card
        if card_col.column_id != group_col.column_id:
            card = await relocate_card(self.store, self.board_ref, card, card_col.column_id, group_col.column_id)
        await self.store.write(self.board_ref.column(group_col.column_id).card(card_id).group_id, group_id)
        self.notify("Card added to group")
        return dataclasses.replace(card, group_id=group_id)

    async def move_card(self, card_id: str, target_column_id: str, board: Board) -> Card:
        """Drop a card on a column: move it there, or take it out of its group."""
        self.check(lambda: board.settings.require("dragging"))
        try:
            board.column(target_column_id)
            col, card = board.find_card(card_id)
        except NotFoundError as e:
            self.fail(e)
        if col.column_id == target_column_id:
            if card.group_id is None:
                return card
            moved = await relocate_card(self.store, self.board_ref, card, col.column_id, col.column_id)
            self.notify("Card removed from group")
            return moved
        moved = await relocate_card(self.store, self.board_ref, card, col.column_id, target_column_id)
        self.notify("Card moved successfully")
        return moved

    async def ungroup(self, group_id: str, board: Board) -> list[str]:
        """Dissolve a group: members become ungrouped cards. Returns member ids."""
        self.check(lambda: board.settings.require("grouping"))
        try:
            col, _ = board.find_group(group_id)
        except NotFoundError as e:
            self.fail(e)
        column_ref = self.board_ref.column(col.column_id)
        members = [c.card_id for c in col.group_members(group_id)]
        for card_id in members:
            await self.store.erase(column_ref.card(card_id).group_id)
        await self.store.erase(column_ref.group(group_id).path)
        self.notify("Cards ungrouped")
        return members

    async def rename_group(self, group_id: str, name: str, board: Board) -> str:
        self.check(lambda: board.settings.require("editing"))
        try:
            col, _ = board.find_group(group_id)
        except NotFoundError as e:
            self.fail(e)
        name = self._validated(name)
        await self.store.write(self.board_ref.column(col.column_id).group(group_id).name, name)
        self.notify("Group name updated")
        return name
