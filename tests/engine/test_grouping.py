"""Tests for group formation and group membership changes."""

import pytest

from retroboard.engine.grouping import GroupingEngine, GroupingState, create_group, relocate_card
from retroboard.engine.ordering import sort_items
from retroboard.errors import NotFoundError, PhaseError, StoreError, ValidationError
from retroboard.notify import CollectingNotifier
from retroboard.paths import BoardRef
from retroboard.workflow import WorkflowPhase

from ..conftest import _grouping_board, _make_board, _make_card, _make_column, _make_group, _reload, _store_for


def _engine(board, fail_on=None):
    store = _store_for(board, fail_on=fail_on)
    notes = CollectingNotifier()
    return GroupingEngine(store, board.board_id, notes), store, notes


# --- begin / cancel ---


def test_begin_same_column():
    board = _grouping_board()
    engine, _, _ = _engine(board)
    pending = engine.begin("c1", "c2", board)
    assert engine.state == GroupingState.AWAITING_NAME
    assert not pending.cross_column
    assert pending.target_created == 200


def test_begin_cross_column():
    board = _grouping_board()
    engine, _, _ = _engine(board)
    pending = engine.begin("c3", "c1", board)
    assert pending.cross_column
    assert pending.dragged_column_id == "b_done"
    assert pending.target_column_id == "a_todo"


def test_self_group_is_silent_noop():
    board = _grouping_board()
    engine, store, notes = _engine(board)
    assert engine.begin("c1", "c1", board) is None
    assert engine.state == GroupingState.IDLE
    assert notes.messages == []
    assert store.operations == []


def test_begin_dragged_not_found():
    board = _grouping_board()
    engine, _, notes = _engine(board)
    with pytest.raises(NotFoundError):
        engine.begin("nope", "c1", board)
    assert engine.state == GroupingState.IDLE
    assert notes.messages == ["Card not found"]


def test_begin_target_not_found():
    board = _grouping_board()
    engine, _, notes = _engine(board)
    with pytest.raises(NotFoundError):
        engine.begin("c1", "nope", board)
    assert notes.messages == ["Target card not found"]


def test_begin_refused_outside_grouping_phase():
    board = _grouping_board(workflow_phase=WorkflowPhase.CREATION)
    engine, _, notes = _engine(board)
    with pytest.raises(PhaseError):
        engine.begin("c1", "c2", board)
    assert notes.messages == ["Grouping is only allowed during the grouping phase"]


def test_begin_refused_outside_retrospective_mode():
    board = _grouping_board(retrospective_mode=False)
    engine, _, _ = _engine(board)
    with pytest.raises(PhaseError, match="retrospective mode"):
        engine.begin("c1", "c2", board)


def test_cancel_returns_to_idle():
    board = _grouping_board()
    engine, store, _ = _engine(board)
    engine.begin("c1", "c2", board)
    engine.cancel()
    assert engine.state == GroupingState.IDLE
    assert engine.pending is None
    assert store.operations == []


# --- commit ---


@pytest.mark.asyncio
async def test_commit_same_column_inherits_target_created():
    board = _grouping_board()
    engine, store, notes = _engine(board)
    engine.begin("c1", "c2", board)

    group = await engine.commit("  Build pain  ", board.settings)

    assert group.name == "Build pain"
    assert group.created == 200
    after = _reload(store)
    col = after.columns["a_todo"]
    assert col.groups[group.group_id].created == 200
    assert col.groups[group.group_id].name == "Build pain"
    assert {c.card_id for c in col.group_members(group.group_id)} == {"c1", "c2"}
    assert engine.state == GroupingState.IDLE
    assert notes.messages == ['Group "Build pain" created']


@pytest.mark.asyncio
async def test_commit_cross_column_relocates_dragged_card():
    board = _grouping_board()
    engine, store, _ = _engine(board)
    engine.begin("c3", "c1", board)

    group = await engine.commit("Slowness", board.settings)

    after = _reload(store)
    assert after.find_card_column("c3").column_id == "a_todo"
    assert "c3" not in after.columns.get("b_done", _make_column("b_done")).cards
    assert group.group_id in after.columns["a_todo"].groups
    assert all(group.group_id not in col.groups for cid, col in after.columns.items() if cid != "a_todo")
    assert after.columns["a_todo"].cards["c3"].group_id == group.group_id
    assert group.created == 100


@pytest.mark.asyncio
async def test_relocation_clears_previous_group():
    board = _make_board(
        [
            _make_column("a_todo", cards=[_make_card("c1", created=10)]),
            _make_column(
                "b_done",
                cards=[_make_card("c3", group_id="old"), _make_card("c4", group_id="old")],
                groups=[_make_group("old")],
            ),
        ],
        retrospective_mode=True,
        workflow_phase=WorkflowPhase.GROUPING,
    )
    engine, store, _ = _engine(board)
    engine.begin("c3", "c1", board)
    group = await engine.commit("New", board.settings)

    after = _reload(store)
    assert after.columns["a_todo"].cards["c3"].group_id == group.group_id
    assert after.columns["b_done"].cards["c4"].group_id == "old"


@pytest.mark.asyncio
async def test_commit_empty_name_is_validation_error():
    board = _grouping_board()
    engine, store, notes = _engine(board)
    engine.begin("c1", "c2", board)

    for name in ["", "   ", "\t\n"]:
        with pytest.raises(ValidationError):
            await engine.commit(name, board.settings)

    assert engine.state == GroupingState.AWAITING_NAME
    assert store.operations == []
    assert _reload(store).columns["a_todo"].groups == {}
    assert notes.messages[-1] == "Please enter a group name"


@pytest.mark.asyncio
async def test_commit_retry_after_validation_error():
    board = _grouping_board()
    engine, store, _ = _engine(board)
    engine.begin("c1", "c2", board)
    with pytest.raises(ValidationError):
        await engine.commit("", board.settings)
    group = await engine.commit("Second try", board.settings)
    assert group.name == "Second try"


@pytest.mark.asyncio
async def test_commit_rechecks_phase():
    board = _grouping_board()
    engine, store, _ = _engine(board)
    engine.begin("c1", "c2", board)

    moved_on = board.settings.updated("workflowPhase", "INTERACTIONS")
    with pytest.raises(PhaseError):
        await engine.commit("Too late", moved_on)
    assert engine.state == GroupingState.IDLE
    assert store.operations == []


@pytest.mark.asyncio
async def test_commit_without_begin():
    board = _grouping_board()
    engine, _, _ = _engine(board)
    with pytest.raises(RuntimeError):
        await engine.commit("Name", board.settings)


@pytest.mark.asyncio
async def test_same_column_failure_leaves_no_group():
    board = _grouping_board()
    engine, store, notes = _engine(board, fail_on=lambda op, path: op == "write" and path[-2:] == ("c2", "groupId"))
    engine.begin("c1", "c2", board)

    with pytest.raises(StoreError):
        await engine.commit("Broken", board.settings)

    after = _reload(store)
    assert after.columns["a_todo"].groups == {}
    assert all(c.group_id is None for c in after.columns["a_todo"].cards.values())
    assert engine.state == GroupingState.IDLE
    assert notes.messages[-1].startswith("Could not create group:")


@pytest.mark.asyncio
async def test_relocation_failure_changes_nothing():
    board = _grouping_board()
    engine, store, _ = _engine(board, fail_on=lambda op, path: op == "write" and "a_todo" in path and "c3" in path)
    before = store.tree.to_dict()
    engine.begin("c3", "c1", board)

    with pytest.raises(StoreError):
        await engine.commit("Slowness", board.settings)

    assert store.tree.to_dict() == before
    assert engine.state == GroupingState.IDLE


@pytest.mark.asyncio
async def test_cross_column_group_failure_moves_card_back():
    board = _grouping_board()

    def fail_on(op, path):
        return op == "write" and "groups" in path

    engine, store, _ = _engine(board, fail_on=fail_on)
    engine.begin("c3", "c1", board)

    with pytest.raises(StoreError):
        await engine.commit("Slowness", board.settings)

    after = _reload(store)
    assert after.find_card_column("c3").column_id == "b_done"
    assert after.columns["b_done"].cards["c3"].content == "CI is slow"
    assert "c3" not in after.columns["a_todo"].cards
    assert after.columns["a_todo"].groups == {}


# --- relocate_card / create_group ---


@pytest.mark.asyncio
async def test_relocate_card_erase_failure_undoes_copy():
    board = _grouping_board()
    store = _store_for(board, fail_on=lambda op, path: op == "erase" and "b_done" in path)
    before = store.tree.to_dict()
    card = board.columns["b_done"].cards["c3"]

    with pytest.raises(StoreError):
        await relocate_card(store, BoardRef("b1"), card, "b_done", "a_todo")

    assert store.tree.to_dict() == before


@pytest.mark.asyncio
async def test_create_group_writes_members():
    board = _grouping_board()
    store = _store_for(board)
    col = board.columns["a_todo"]
    group = await create_group(store, BoardRef("b1").column("a_todo"), "G", list(col.cards.values()), 42)
    after = _reload(store).columns["a_todo"]
    assert after.groups[group.group_id].created == 42
    assert [c.card_id for c in after.group_members(group.group_id)] == ["c1", "c2"]


# --- add_to_group / move_card / ungroup / rename ---


def _grouped_board(**settings):
    settings.setdefault("retrospective_mode", True)
    settings.setdefault("workflow_phase", WorkflowPhase.GROUPING)
    return _make_board(
        [
            _make_column(
                "a_todo",
                cards=[_make_card("c1", group_id="g1"), _make_card("c2", group_id="g1"), _make_card("c5")],
                groups=[_make_group("g1", name="Build")],
            ),
            _make_column("b_done", cards=[_make_card("c3")]),
        ],
        **settings,
    )


@pytest.mark.asyncio
async def test_add_to_group_across_columns():
    board = _grouped_board()
    engine, store, notes = _engine(board)
    card = await engine.add_to_group("c3", "g1", board)
    assert card.group_id == "g1"
    after = _reload(store)
    assert after.columns["a_todo"].cards["c3"].group_id == "g1"
    assert notes.messages == ["Card added to group"]


@pytest.mark.asyncio
async def test_add_to_group_unknown_group():
    board = _grouped_board()
    engine, _, _ = _engine(board)
    with pytest.raises(NotFoundError):
        await engine.add_to_group("c3", "nope", board)


@pytest.mark.asyncio
async def test_move_card_to_other_column():
    board = _grouped_board()
    engine, store, notes = _engine(board)
    moved = await engine.move_card("c1", "b_done", board)
    assert moved.group_id is None
    after = _reload(store)
    assert "c1" in after.columns["b_done"].cards
    assert after.columns["b_done"].cards["c1"].group_id is None
    assert notes.messages == ["Card moved successfully"]


@pytest.mark.asyncio
async def test_move_card_to_own_column_leaves_group():
    board = _grouped_board()
    engine, store, notes = _engine(board)
    await engine.move_card("c1", "a_todo", board)
    assert _reload(store).columns["a_todo"].cards["c1"].group_id is None
    assert notes.messages == ["Card removed from group"]


@pytest.mark.asyncio
async def test_move_card_refused_outside_grouping():
    board = _grouped_board(workflow_phase=WorkflowPhase.INTERACTIONS)
    engine, store, _ = _engine(board)
    with pytest.raises(PhaseError):
        await engine.move_card("c1", "b_done", board)
    assert store.operations == []


@pytest.mark.asyncio
async def test_ungroup():
    board = _grouped_board()
    engine, store, notes = _engine(board)
    members = await engine.ungroup("g1", board)
    assert sorted(members) == ["c1", "c2"]
    after = _reload(store).columns["a_todo"]
    assert after.groups == {}
    assert all(c.group_id is None for c in after.cards.values())
    assert notes.messages == ["Cards ungrouped"]


@pytest.mark.asyncio
async def test_rename_group():
    board = _grouped_board()
    engine, store, notes = _engine(board)
    assert await engine.rename_group("g1", " Builds ", board) == "Builds"
    assert _reload(store).columns["a_todo"].groups["g1"].name == "Builds"
    assert notes.messages == ["Group name updated"]


@pytest.mark.asyncio
async def test_rename_group_blank():
    board = _grouped_board()
    engine, store, _ = _engine(board)
    with pytest.raises(ValidationError):
        await engine.rename_group("g1", "  ", board)
    assert store.operations == []


# --- dropping onto a grouped card ---


@pytest.mark.asyncio
async def test_drop_on_grouped_card_joins_its_group():
    board = _grouped_board()
    engine, store, notes = _engine(board)
    pending = engine.begin("c5", "c2", board)
    assert pending.existing_group.group_id == "g1"

    group = await engine.commit(None, board.settings)

    assert group.group_id == "g1"
    after = _reload(store).columns["a_todo"]
    assert list(after.groups) == ["g1"]
    assert [c.card_id for c in after.group_members("g1")] == ["c1", "c2", "c5"]
    assert [(i.kind, i.item_id) for i in sort_items(after)] == [("group", "g1")]
    assert notes.messages == ["Card added to group"]
    assert engine.state == GroupingState.IDLE


@pytest.mark.asyncio
async def test_drop_on_grouped_card_across_columns():
    board = _grouped_board()
    engine, store, _ = _engine(board)
    engine.begin("c3", "c1", board)
    await engine.commit("Ignored", board.settings)

    after = _reload(store)
    assert "c3" not in after.columns["b_done"].cards
    assert after.columns["a_todo"].cards["c3"].group_id == "g1"
    assert list(after.columns["a_todo"].groups) == ["g1"]
    assert after.columns["a_todo"].groups["g1"].name == "Build"


def test_drop_within_same_group_is_noop():
    board = _grouped_board()
    engine, store, _ = _engine(board)
    assert engine.begin("c1", "c2", board) is None
    assert engine.state == GroupingState.IDLE
    assert store.operations == []


@pytest.mark.asyncio
async def test_join_failure_moves_card_back():
    board = _grouped_board()
    engine, store, _ = _engine(board, fail_on=lambda op, path: op == "write" and path[-2:] == ("c3", "groupId"))
    engine.begin("c3", "c1", board)

    with pytest.raises(StoreError):
        await engine.commit(None, board.settings)

    after = _reload(store)
    assert "c3" in after.columns["b_done"].cards
    assert "c3" not in after.columns["a_todo"].cards
    assert engine.state == GroupingState.IDLE


@pytest.mark.asyncio
async def test_unexpected_error_returns_to_idle(monkeypatch):
    board = _grouping_board()
    engine, store, _ = _engine(board)

    async def broken(path, value):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store, "write", broken)
    engine.begin("c1", "c2", board)
    with pytest.raises(RuntimeError, match="disk full"):
        await engine.commit("Name", board.settings)

    assert engine.state == GroupingState.IDLE
    assert engine.begin("c1", "c2", board) is not None
