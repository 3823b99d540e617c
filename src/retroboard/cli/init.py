"""Handler for 'retroboard init'."""

import asyncio
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from retroboard.cli._common import configure_logging, error, identity, output_json
from retroboard.errors import StoreError
from retroboard.ids import now_millis
from retroboard.model.board import DEFAULT_COLUMNS, Board, new_board
from retroboard.paths import BoardRef
from retroboard.store.git import GitStore


def _ensure_repo(repo_path: Path) -> None:
    try:
        Repo(repo_path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        repo_path.mkdir(parents=True, exist_ok=True)
        Repo.init(repo_path)


def init_board(args) -> int:
    """Create a board on the retroboard branch of the repository."""
    configure_logging(getattr(args, "verbose", False))
    repo_path = Path(args.repo).resolve()
    _ensure_repo(repo_path)
    user, board_id = identity(args, repo_path)

    store = GitStore(repo_path)
    try:
        store.load()
    except StoreError as e:
        error(e.message, args.json)

    ref = BoardRef(board_id)
    existing = store.tree.get(ref.path)
    if existing:
        board = Board.from_dict(board_id, existing)
        columns = [c.title for c in board.columns.values()]
        if args.json:
            output_json({"board": board_id, "columns": columns, "created": False})
        else:
            print(f"Board '{board_id}' already initialized at {repo_path}")
        return 0

    titles = getattr(args, "column", None) or DEFAULT_COLUMNS
    board = new_board(
        board_id,
        title=getattr(args, "title", None) or "Untitled Board",
        column_titles=titles,
        owner=user,
        created=now_millis(),
    )
    try:
        asyncio.run(store.write(ref.path, board.to_dict()))
        commit = store.save(f"Initialize board {board_id}")
    except StoreError as e:
        error(e.message, args.json)

    columns = [c.title for c in board.columns.values()]
    if args.json:
        output_json({"board": board_id, "columns": columns, "created": True, "commit": commit})
    else:
        print(f"Initialized board '{board_id}' at {repo_path}")
        print(f"Columns: {', '.join(columns)}")
    return 0
