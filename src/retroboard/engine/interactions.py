"""Emoji reactions and comments on cards and groups."""

import logging

from retroboard.engine.base import Engine
from retroboard.errors import NotFoundError, ValidationError
from retroboard.ids import now_millis, time_id
from retroboard.model.card import Comment, Votable
from retroboard.paths import ItemRef
from retroboard.settings import BoardSettings

logger = logging.getLogger(__name__)


def _comment_text(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comments cannot be empty")
    return text


class InteractionEngine(Engine):
    async def toggle_reaction(
        self,
        ref: ItemRef,
        item: Votable,
        emoji: str,
        user_id: str,
        settings: BoardSettings,
    ) -> bool:
        """Add or take back the user's reaction. Returns True if it is now present."""
        self.check(lambda: settings.require("interactions"))
        emoji = (emoji or "").strip()
        if not emoji:
            self.fail(ValidationError("Pick an emoji to react with"))

        count = item.reaction_count(emoji)
        if item.has_reacted(emoji, user_id):
            await self.store.erase(ref.reaction_user(emoji, user_id))
            await self.store.write(ref.reaction_count(emoji), max(0, count - 1))
            self.notify("Your reaction removed")
            return False

        await self.store.write(ref.reaction_user(emoji, user_id), True)
        await self.store.write(ref.reaction_count(emoji), count + 1)
        self.notify("Reaction added")
        return True

    async def add_comment(
        self,
        ref: ItemRef,
        content: str,
        user_id: str,
        settings: BoardSettings,
        now_ms: int | None = None,
    ) -> Comment:
        self.check(lambda: settings.require("interactions"))
        try:
            text = _comment_text(content)
        except ValidationError as e:
            self.fail(e)
        now_ms = now_millis() if now_ms is None else now_ms
        comment = Comment(time_id(now_ms), text, created_by=user_id, created_at=now_ms)
        await self.store.write(ref.comment(comment.comment_id), comment.to_dict())
        self.notify("Comment added")
        return comment

    async def edit_comment(
        self,
        ref: ItemRef,
        item: Votable,
        comment_id: str,
        content: str,
        settings: BoardSettings,
    ) -> str:
        self.check(lambda: settings.require("interactions"))
        if comment_id not in item.comments:
            self.fail(NotFoundError(f"Comment '{comment_id}' not found"))
        try:
            text = _comment_text(content)
        except ValidationError as e:
            self.fail(e)
        await self.store.write(ref.comment_content(comment_id), text)
        self.notify("Comment updated")
        return text

    async def delete_comment(self, ref: ItemRef, comment_id: str, settings: BoardSettings) -> None:
        self.check(lambda: settings.require("interactions"))
        await self.store.erase(ref.comment(comment_id))
        self.notify("Comment deleted")
