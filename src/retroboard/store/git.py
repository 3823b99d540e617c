"""Persist the store document to a git branch without touching the working tree."""

import asyncio
import logging
import subprocess
from pathlib import Path

import yaml
from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from retroboard.errors import StoreError
from retroboard.store.memory import MemoryStore

logger = logging.getLogger(__name__)

BRANCH_NAME = "retroboard"
DOCUMENT = "board.yaml"


# --- Git plumbing ---


def _git(repo_path: Path, args: list[str], stdin: str | None = None) -> str:
    """Run a git command and return stdout."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=repo_path,
            input=stdin.encode("utf-8") if stdin is not None else None,
            capture_output=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        detail = e.stderr.decode("utf-8", "replace").strip()
        raise StoreError(f"git {args[0]} failed: {detail}") from e
    return result.stdout.decode("utf-8").strip()


def _get_branch_tip(repo_path: Path, branch: str) -> str | None:
    """Get the current commit hash of a branch, or None if it doesn't exist."""
    result = subprocess.run(
        ["git", "rev-parse", "--verify", f"refs/heads/{branch}"],
        cwd=repo_path,
        capture_output=True,
    )
    if result.returncode != 0:
        return None
    return result.stdout.decode("utf-8").strip()


def _open_repo(repo_path: Path) -> Repo:
    try:
        return Repo(repo_path)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise StoreError(f"not a git repository: {repo_path}") from e


def dump_document(data: dict) -> str:
    """Serialize the store document as YAML."""
    return yaml.safe_dump(data, allow_unicode=True, default_flow_style=False, sort_keys=True)


def load_document(text: str) -> dict:
    """Parse a YAML store document; an empty file is an empty document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StoreError(f"invalid board document: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StoreError("invalid board document: top level must be a mapping")
    return data


class GitStore(MemoryStore):
    """MemoryStore whose document is loaded from and saved to a git branch.

    Writes only change the in-memory tree; `save` commits the whole
    document as one blob on `branch`, skipping the commit when nothing
    changed since the parent.
    """

    def __init__(self, repo_path: str | Path, branch: str = BRANCH_NAME) -> None:
        super().__init__()
        self.repo_path = Path(repo_path)
        self.branch = branch
        self.commit: str | None = None

    @classmethod
    async def open(cls, repo_path: str | Path, branch: str = BRANCH_NAME) -> "GitStore":
        store = cls(repo_path, branch)
        await asyncio.to_thread(store.load)
        return store

    def exists(self) -> bool:
        """True if the board branch exists."""
        _open_repo(self.repo_path)
        return _get_branch_tip(self.repo_path, self.branch) is not None

    def load(self) -> None:
        """Replace the in-memory document with the branch tip's."""
        repo = _open_repo(self.repo_path)
        tip = _get_branch_tip(self.repo_path, self.branch)
        if tip is None:
            self.tree.replace({})
            self.commit = None
            return
        try:
            blob = repo.commit(tip).tree[DOCUMENT]
        except KeyError:
            data = {}
        else:
            data = load_document(blob.data_stream.read().decode("utf-8"))
        self.tree.replace(data)
        self.commit = tip
        logger.debug("loaded %s at %s", self.branch, tip[:7])

    def save(self, message: str = "Update board") -> str:
        """Commit the current document and return the new commit hash."""
        blob = _git(self.repo_path, ["hash-object", "-w", "--stdin"], dump_document(self.tree.to_dict()))
        tree = _git(self.repo_path, ["mktree"], f"100644 blob {blob}\t{DOCUMENT}\n")

        parent = self.commit or _get_branch_tip(self.repo_path, self.branch)
        if parent:
            parent_tree = _git(self.repo_path, ["rev-parse", f"{parent}^{{tree}}"])
            if parent_tree == tree:
                self.commit = parent
                return parent

        parent_args = ["-p", parent] if parent else []
        new_commit = _git(self.repo_path, ["commit-tree", tree, *parent_args, "-m", message])
        _git(self.repo_path, ["update-ref", f"refs/heads/{self.branch}", new_commit])
        self.commit = new_commit
        logger.info("saved %s: %s", new_commit[:7], message)
        return new_commit

    async def asave(self, message: str = "Update board") -> str:
        return await asyncio.to_thread(self.save, message)
