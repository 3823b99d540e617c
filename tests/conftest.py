"""Shared test helpers: board snapshots, stores and git repositories."""

import pytest
from git import Repo

from retroboard.model.board import Board, Column
from retroboard.model.card import Card, Group
from retroboard.settings import BoardSettings
from retroboard.store.memory import MemoryStore
from retroboard.workflow import WorkflowPhase


def _make_card(card_id, content=None, votes=0, voters=None, created=0, group_id=None, created_by=None):
    """Helper to build a Card."""
    return Card(
        item_id=card_id,
        content=content if content is not None else f"Card {card_id}",
        votes=votes,
        voters=dict(voters or {}),
        created=created,
        group_id=group_id,
        created_by=created_by,
    )


def _make_group(group_id, name="Group", votes=0, voters=None, created=0):
    """Helper to build a Group."""
    return Group(item_id=group_id, name=name, votes=votes, voters=dict(voters or {}), created=created)


def _make_column(column_id, title=None, cards=None, groups=None):
    """Helper to build a Column from lists of cards and groups."""
    return Column(
        column_id=column_id,
        title=title or column_id,
        cards={c.card_id: c for c in cards or []},
        groups={g.group_id: g for g in groups or []},
    )


def _make_board(columns=None, board_id="b1", title="Retro", **settings):
    """Helper to build a Board; keyword arguments become BoardSettings."""
    return Board(
        board_id=board_id,
        title=title,
        columns={c.column_id: c for c in columns or []},
        settings=BoardSettings(**settings),
    )


def _grouping_board(**settings):
    """Board in the grouping phase with two cards in a_todo and one in b_done."""
    settings.setdefault("retrospective_mode", True)
    settings.setdefault("workflow_phase", WorkflowPhase.GROUPING)
    return _make_board(
        [
            _make_column(
                "a_todo",
                "To Do",
                [_make_card("c1", "Slow builds", created=100), _make_card("c2", "Flaky tests", created=200)],
            ),
            _make_column("b_done", "Done", [_make_card("c3", "CI is slow", created=50)]),
        ],
        **settings,
    )


def _store_for(board, fail_on=None):
    """A MemoryStore holding `board` at its usual path."""
    return MemoryStore({"boards": {board.board_id: board.to_dict()}}, fail_on=fail_on)


def _reload(store, board_id="b1"):
    """Read the board back out of a store."""
    return Board.from_dict(board_id, store.tree.get(("boards", board_id)))


@pytest.fixture
def empty_repo(tmp_path):
    """Create an empty git repo with a committer identity."""
    repo = Repo.init(tmp_path)
    writer = repo.config_writer()
    writer.set_value("user", "name", "Test User")
    writer.set_value("user", "email", "test@example.com")
    writer.release()
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    return tmp_path
