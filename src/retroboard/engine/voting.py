"""Vote reconciliation: decide what a vote does, then commit it.

Voting is a two-step contract. `resolve` is a pure decision made against
the snapshot the caller last read; `VoteApplier` commits that decision to
the store. In single-vote mode flipping direction takes two actions: the
first cancels the existing vote, the second applies the new one.
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum

from retroboard.engine.base import Engine
from retroboard.errors import StoreError
from retroboard.model.board import Board
from retroboard.model.card import Votable
from retroboard.paths import BoardRef, ItemRef, format_path
from retroboard.settings import BoardSettings
from retroboard.store.base import Store

logger = logging.getLogger(__name__)

UPVOTE = 1
DOWNVOTE = -1


class Outcome(str, Enum):
    APPLIED = "APPLIED"
    REMOVED = "REMOVED"
    REJECTED_NEGATIVE = "REJECTED_NEGATIVE"
    REJECTED_DUPLICATE = "REJECTED_DUPLICATE"


@dataclass(frozen=True)
class Resolution:
    applied_delta: int
    is_removal: bool
    outcome: Outcome
    requested_delta: int

    @property
    def rejected(self) -> bool:
        return self.outcome in (Outcome.REJECTED_NEGATIVE, Outcome.REJECTED_DUPLICATE)

    def describe(self, noun: str = "card") -> str:
        """User-facing message for this outcome."""
        if self.outcome == Outcome.REJECTED_NEGATIVE:
            return "Can't have negative votes"
        if self.outcome == Outcome.REJECTED_DUPLICATE:
            return "You've already voted"
        if self.outcome == Outcome.REMOVED:
            return "Vote removed"
        return f"Upvoted {noun}" if self.requested_delta > 0 else f"Downvoted {noun}"

    @property
    def message(self) -> str:
        return self.describe()


def resolve(
    user_current_vote: int,
    requested_delta: int,
    multiple_votes_allowed: bool,
    current_total_votes: int,
) -> Resolution:
    """Decide the delta to apply for one user's vote request.

    Checked in order: the negative-total guard, then (single-vote mode
    only) the duplicate guard and the cancel-on-flip rule, then the
    default of applying the request as-is.
    """
    if requested_delta not in (UPVOTE, DOWNVOTE):
        raise ValueError(f"requested delta must be +1 or -1, got {requested_delta}")

    if requested_delta < 0 and current_total_votes <= 0:
        return Resolution(0, False, Outcome.REJECTED_NEGATIVE, requested_delta)

    if not multiple_votes_allowed:
        if user_current_vote == requested_delta:
            return Resolution(0, False, Outcome.REJECTED_DUPLICATE, requested_delta)
        if user_current_vote != 0:
            # cancel only; the new direction needs a second request
            return Resolution(-user_current_vote, True, Outcome.REMOVED, requested_delta)

    return Resolution(requested_delta, False, Outcome.APPLIED, requested_delta)


def compute_new_user_vote(user_current_vote: int, applied_delta: int, multiple_votes_allowed: bool) -> int:
    """The user's vote record after applying applied_delta."""
    if multiple_votes_allowed:
        return user_current_vote + applied_delta
    if user_current_vote != 0 and applied_delta == -user_current_vote:
        return 0
    return applied_delta


def apply_vote(item: Votable, user_id: str, resolution: Resolution, multiple_votes_allowed: bool) -> Votable:
    """Return a copy of item with the resolution applied to tally and ledger."""
    if resolution.rejected:
        return item
    current = item.user_vote(user_id)
    voters = dict(item.voters)
    new_vote = compute_new_user_vote(current, resolution.applied_delta, multiple_votes_allowed)
    if new_vote == 0:
        voters.pop(user_id, None)
    else:
        voters[user_id] = new_vote
    tally = max(item.votes + resolution.applied_delta, 0)
    return dataclasses.replace(item, votes=tally, voters=voters)


class VoteApplier(Engine):
    """Commits resolved votes on cards and groups to the store."""

    async def vote(
        self,
        ref: ItemRef,
        item: Votable,
        user_id: str,
        requested_delta: int,
        settings: BoardSettings,
    ) -> Resolution:
        """Resolve against `item` (the caller's latest read) and commit.

        Rejections are ordinary outcomes: the user is told why and nothing
        is written. Store failures propagate as StoreError.
        """
        self.check(lambda: settings.require_vote(requested_delta))
        noun = ref.collection.rstrip("s")
        resolution = resolve(
            item.user_vote(user_id),
            requested_delta,
            settings.multiple_votes_allowed,
            item.votes,
        )
        if resolution.rejected:
            logger.info("vote on %s by %s: %s", format_path(ref.path), user_id, resolution.outcome.value)
            self.notify(resolution.describe(noun))
            return resolution

        updated = apply_vote(item, user_id, resolution, settings.multiple_votes_allowed)
        await self.store.write(ref.votes, updated.votes)
        new_vote = updated.user_vote(user_id)
        try:
            if new_vote == 0:
                await self.store.erase(ref.voter(user_id))
            else:
                await self.store.write(ref.voter(user_id), new_vote)
        except StoreError:
            logger.warning("voter write on %s failed, restoring total %d", format_path(ref.path), item.votes)
            await self.store.write(ref.votes, item.votes)
            raise

        logger.debug(
            "vote on %s by %s: %s %+d -> total %d",
            format_path(ref.path),
            user_id,
            resolution.outcome.value,
            resolution.applied_delta,
            updated.votes,
        )
        self.notify(resolution.describe(noun))
        return resolution

    async def upvote(self, ref: ItemRef, item: Votable, user_id: str, settings: BoardSettings) -> Resolution:
        return await self.vote(ref, item, user_id, UPVOTE, settings)

    async def downvote(self, ref: ItemRef, item: Votable, user_id: str, settings: BoardSettings) -> Resolution:
        return await self.vote(ref, item, user_id, DOWNVOTE, settings)


async def reset_all_votes(store: Store, board: Board) -> int:
    """Zero every tally and clear every voter ledger. Returns items touched."""
    board_ref = BoardRef(board.board_id)
    touched = 0
    for col in board.columns.values():
        col_ref = board_ref.column(col.column_id)
        refs = [(col_ref.card(cid), c) for cid, c in col.cards.items()]
        refs += [(col_ref.group(gid), g) for gid, g in col.groups.items()]
        for ref, item in refs:
            if item.votes == 0 and not item.voters:
                continue
            await store.write(ref.votes, 0)
            await store.erase(ref.voters)
            touched += 1
    logger.info("reset votes on %d items of board %s", touched, board.board_id)
    return touched
