"""Shared fixtures for CLI tests."""

import asyncio
from argparse import Namespace

import pytest

from retroboard.model.board import Board
from retroboard.store.git import GitStore

BOARD = {
    "title": "Sprint 12",
    "owner": "alice",
    "created": 1,
    "columns": {
        "a_good": {
            "title": "Went well",
            "cards": {
                "c1": {"content": "Fast reviews", "created": 100, "createdBy": "alice"},
                "c2": {"content": "Pairing", "created": 200, "createdBy": "bob"},
            },
        },
        "b_bad": {
            "title": "To improve",
            "cards": {
                "c3": {"content": "Flaky CI", "created": 150, "createdBy": "bob"},
            },
        },
    },
}


def _args(repo, **kwargs):
    """Namespace with the common flags filled in, acting as alice."""
    base = {"repo": str(repo), "json": False, "user": "alice", "board": None, "verbose": False}
    base.update(kwargs)
    return Namespace(**base)


def _load(repo, board_id="default"):
    """Read the saved board back from the branch."""
    store = GitStore(repo)
    store.load()
    return Board.from_dict(board_id, store.tree.get(("boards", board_id)))


def _seed(repo, settings=None):
    data = dict(BOARD)
    if settings:
        data["settings"] = settings
    store = GitStore(repo)
    asyncio.run(store.write(("boards", "default"), data))
    store.save("Seed test board")
    return repo


@pytest.fixture
def initialized_repo(empty_repo):
    """A repo with a plain board (2 columns, 3 cards)."""
    return _seed(empty_repo)


@pytest.fixture
def grouping_repo(empty_repo):
    """A repo with the same board in the grouping phase of a retrospective."""
    return _seed(empty_repo, {"retrospectiveMode": True, "workflowPhase": "GROUPING"})
