"""Who is currently composing a card, per column.

Advisory and ephemeral: entries live in memory only, the most recent
start() per user wins, and stale entries fade out after `ttl` seconds.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass

from retroboard.settings import BoardSettings

logger = logging.getLogger(__name__)

MAX_ENTRIES = 256
DISPLAY_LIMIT = 3


@dataclass(frozen=True)
class PresenceEntry:
    user_id: str
    column_id: str
    last_updated: float


class PresenceLedger:
    def __init__(self, max_entries: int = MAX_ENTRIES, ttl: float | None = None, clock=time.time) -> None:
        self.max_entries = max_entries
        self.ttl = ttl
        self.clock = clock
        self._entries: OrderedDict[str, PresenceEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def start(
        self,
        user_id: str,
        column_id: str,
        now: float | None = None,
        settings: BoardSettings | None = None,
    ) -> PresenceEntry:
        """Record that user_id opened the add-card form in column_id."""
        if settings is not None:
            settings.require("creation")
        entry = PresenceEntry(user_id, column_id, self.clock() if now is None else now)
        # re-inserting moves the user to the end of the order
        self._entries.pop(user_id, None)
        self._entries[user_id] = entry
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("presence full, evicted %s", evicted)
        return entry

    def stop(self, user_id: str) -> None:
        self._entries.pop(user_id, None)

    def prune(self, now: float | None = None) -> int:
        """Drop entries older than ttl. Returns how many went."""
        if self.ttl is None:
            return 0
        now = self.clock() if now is None else now
        stale = [uid for uid, e in self._entries.items() if now - e.last_updated > self.ttl]
        for uid in stale:
            del self._entries[uid]
        return len(stale)

    def users_adding_cards_in(
        self,
        column_id: str,
        exclude_user_id: str | None = None,
        now: float | None = None,
    ) -> list[PresenceEntry]:
        """Entries for column_id, oldest first, without the caller's own."""
        self.prune(now)
        return [
            e for e in self._entries.values() if e.column_id == column_id and e.user_id != exclude_user_id
        ]


def summarize(entries: list[PresenceEntry], limit: int = DISPLAY_LIMIT) -> tuple[list[PresenceEntry], int]:
    """Split entries into the ones to show and a count of the rest."""
    return entries[:limit], max(len(entries) - limit, 0)


def indicator_text(entries: list[PresenceEntry]) -> str | None:
    """Indicator text for other users composing cards, or None when nobody is."""
    if not entries:
        return None
    if len(entries) == 1:
        return "Someone is adding a card"
    return f"{len(entries)} people are adding cards"
