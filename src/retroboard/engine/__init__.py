"""Board engines: votes, grouping, presence, ordering and interactions."""

from retroboard.engine.grouping import (
    GroupingEngine,
    GroupingState,
    PendingGroup,
    create_group,
    relocate_card,
)
from retroboard.engine.interactions import InteractionEngine
from retroboard.engine.ordering import BoardItem, results, sort_items
from retroboard.engine.presence import PresenceEntry, PresenceLedger
from retroboard.engine.voting import (
    Outcome,
    Resolution,
    VoteApplier,
    apply_vote,
    compute_new_user_vote,
    reset_all_votes,
    resolve,
)

__all__ = [
    "BoardItem",
    "GroupingEngine",
    "GroupingState",
    "InteractionEngine",
    "Outcome",
    "PendingGroup",
    "PresenceEntry",
    "PresenceLedger",
    "Resolution",
    "VoteApplier",
    "apply_vote",
    "compute_new_user_vote",
    "create_group",
    "relocate_card",
    "reset_all_votes",
    "resolve",
    "results",
    "sort_items",
]
