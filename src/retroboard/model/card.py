"""Cards, groups and the interactions hanging off them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from retroboard.errors import ValidationError


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class Comment:
    comment_id: str
    content: str
    created_by: str | None = None
    created_at: int = 0

    @classmethod
    def from_dict(cls, comment_id: str, data: dict) -> Comment:
        return cls(
            comment_id=comment_id,
            content=data.get("content", ""),
            created_by=data.get("createdBy", data.get("user")),
            created_at=_int(data.get("createdAt")),
        )

    def to_dict(self) -> dict:
        return {"content": self.content, "createdBy": self.created_by, "createdAt": self.created_at}


@dataclass
class Reaction:
    emoji: str
    count: int = 0
    users: set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, emoji: str, data: dict) -> Reaction:
        users = {uid for uid, on in (data.get("users") or {}).items() if on}
        return cls(emoji=emoji, count=_int(data.get("count")), users=users)

    def to_dict(self) -> dict:
        return {"count": self.count, "users": {uid: True for uid in sorted(self.users)}}


@dataclass
class Votable:
    """Shared state of anything that carries a vote tally."""

    item_id: str
    votes: int = 0
    voters: dict[str, int] = field(default_factory=dict)
    created: int = 0
    comments: dict[str, Comment] = field(default_factory=dict)
    reactions: dict[str, Reaction] = field(default_factory=dict)

    def user_vote(self, user_id: str) -> int:
        """The user's signed contribution; absence is zero."""
        return self.voters.get(user_id, 0)

    def has_reacted(self, emoji: str, user_id: str) -> bool:
        reaction = self.reactions.get(emoji)
        return reaction is not None and user_id in reaction.users

    def reaction_count(self, emoji: str) -> int:
        reaction = self.reactions.get(emoji)
        return reaction.count if reaction else 0

    def _common_from(self, data: dict) -> None:
        self.votes = _int(data.get("votes"))
        self.voters = {uid: _int(v) for uid, v in (data.get("voters") or {}).items() if _int(v) != 0}
        self.created = _int(data.get("created"))
        self.comments = {cid: Comment.from_dict(cid, c) for cid, c in (data.get("comments") or {}).items()}
        self.reactions = {e: Reaction.from_dict(e, r) for e, r in (data.get("reactions") or {}).items()}

    def _common_to(self) -> dict:
        return {
            "votes": self.votes,
            "voters": dict(self.voters),
            "created": self.created,
            "comments": {cid: c.to_dict() for cid, c in self.comments.items()},
            "reactions": {e: r.to_dict() for e, r in self.reactions.items() if r.count > 0},
        }


@dataclass
class Card(Votable):
    content: str = ""
    group_id: str | None = None
    created_by: str | None = None

    @property
    def card_id(self) -> str:
        return self.item_id

    @classmethod
    def from_dict(cls, card_id: str, data: dict) -> Card:
        card = cls(
            item_id=card_id,
            content=data.get("content", ""),
            group_id=data.get("groupId") or None,
            created_by=data.get("createdBy"),
        )
        card._common_from(data)
        return card

    def to_dict(self) -> dict:
        out = self._common_to()
        out.update(content=self.content, groupId=self.group_id, createdBy=self.created_by)
        return out


@dataclass
class Group(Votable):
    name: str = ""

    @property
    def group_id(self) -> str:
        return self.item_id

    @classmethod
    def from_dict(cls, group_id: str, data: dict) -> Group:
        group = cls(item_id=group_id, name=data.get("name", ""))
        group._common_from(data)
        return group

    def to_dict(self) -> dict:
        out = self._common_to()
        out["name"] = self.name
        return out


def validate_card_content(content: str | None) -> str:
    """Return trimmed card content, refusing empty cards."""
    text = (content or "").strip()
    if not text:
        raise ValidationError("Empty cards are not allowed")
    return text


def validate_group_name(name: str | None) -> str:
    """Return the trimmed group name, refusing blank names."""
    text = (name or "").strip()
    if not text:
        raise ValidationError("Please enter a group name")
    return text
