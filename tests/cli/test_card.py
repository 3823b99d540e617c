"""Tests for 'retroboard card' commands."""

import json

import pytest

from retroboard.cli.card import card_comment, card_move, card_react, card_vote

from .conftest import _args, _load


def test_card_upvote(initialized_repo, capsys):
    assert card_vote(_args(initialized_repo, id="c1", delta=1)) == 0

    out = capsys.readouterr().out
    assert "Upvoted card" in out
    assert "c1: 1 votes" in out
    card = _load(initialized_repo).columns["a_good"].cards["c1"]
    assert card.votes == 1
    assert card.voters == {"alice": 1}


def test_card_upvote_json(initialized_repo, capsys):
    assert card_vote(_args(initialized_repo, json=True, id="c1", delta=1)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["outcome"] == "APPLIED"
    assert data["votes"] == 1
    assert data["your_vote"] == 1
    assert data["messages"] == ["Upvoted card"]
    assert data["commit"]


def test_card_duplicate_vote_is_not_saved(initialized_repo, capsys):
    card_vote(_args(initialized_repo, id="c1", delta=1))
    capsys.readouterr()

    assert card_vote(_args(initialized_repo, json=True, id="c1", delta=1)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["outcome"] == "REJECTED_DUPLICATE"
    assert data["commit"] is None
    assert data["messages"] == ["You've already voted"]
    assert _load(initialized_repo).columns["a_good"].cards["c1"].votes == 1


def test_card_downvote_at_zero_rejected(initialized_repo, capsys):
    assert card_vote(_args(initialized_repo, json=True, id="c3", delta=-1)) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["outcome"] == "REJECTED_NEGATIVE"
    assert data["votes"] == 0


def test_card_flip_takes_two_commands(initialized_repo, capsys):
    card_vote(_args(initialized_repo, id="c1", delta=1, user="bob"))
    card_vote(_args(initialized_repo, id="c1", delta=1))

    card_vote(_args(initialized_repo, id="c1", delta=-1))
    card = _load(initialized_repo).columns["a_good"].cards["c1"]
    assert card.votes == 1
    assert card.user_vote("alice") == 0

    card_vote(_args(initialized_repo, id="c1", delta=-1))
    card = _load(initialized_repo).columns["a_good"].cards["c1"]
    assert card.votes == 0
    assert card.user_vote("alice") == -1


def test_card_vote_not_found(initialized_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        card_vote(_args(initialized_repo, id="nope", delta=1))
    assert "Card 'nope' not found" in capsys.readouterr().err


def test_card_vote_refused_in_grouping_phase(grouping_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        card_vote(_args(grouping_repo, id="c1", delta=1))
    assert "interactions phase" in capsys.readouterr().err


def test_card_react_toggles(initialized_repo, capsys):
    assert card_react(_args(initialized_repo, json=True, id="c2", emoji="🎉")) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["reacted"] is True
    assert data["count"] == 1

    assert card_react(_args(initialized_repo, json=True, id="c2", emoji="🎉")) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["reacted"] is False
    assert data["count"] == 0


def test_card_comment(initialized_repo, capsys):
    assert card_comment(_args(initialized_repo, id="c3", text=" Retry budget? ")) == 0
    assert "Comment added" in capsys.readouterr().out
    [comment] = _load(initialized_repo).columns["b_bad"].cards["c3"].comments.values()
    assert comment.content == "Retry budget?"
    assert comment.created_by == "alice"


def test_card_comment_empty(initialized_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        card_comment(_args(initialized_repo, id="c3", text="  "))
    assert "Comments cannot be empty" in capsys.readouterr().err


def test_card_move(initialized_repo, capsys):
    assert card_move(_args(initialized_repo, id="c1", column="b_bad")) == 0
    board = _load(initialized_repo)
    assert "c1" not in board.columns["a_good"].cards
    assert board.columns["b_bad"].cards["c1"].content == "Fast reviews"


def test_card_move_unknown_column(initialized_repo, capsys):
    with pytest.raises(SystemExit, match="1"):
        card_move(_args(initialized_repo, id="c1", column="z_nope"))
    assert "Column 'z_nope' not found" in capsys.readouterr().err
