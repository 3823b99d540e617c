"""Board settings and local retroboard configuration."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from retroboard.errors import PhaseError
from retroboard.workflow import WorkflowPhase, disabled_reason

CONFIG_SECTION = "retroboard"

CONFIG_DEFAULTS = {
    "user": None,
    "board": "default",
}

# python field name -> stored key
_STORED_KEYS = {
    "voting_enabled": "votingEnabled",
    "downvoting_enabled": "downvotingEnabled",
    "multiple_votes_allowed": "multipleVotesAllowed",
    "votes_per_user": "votesPerUser",
    "retrospective_mode": "retrospectiveMode",
    "workflow_phase": "workflowPhase",
    "sort_by_votes": "sortByVotes",
}


def _coerce(default: Any, raw: Any) -> Any:
    """Type-coerce a stored value to the type of its default."""
    if isinstance(default, WorkflowPhase):
        return WorkflowPhase.parse(raw)
    if isinstance(default, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in ("true", "yes", "1", "on")
        return bool(raw)
    if isinstance(default, int):
        return int(raw)
    return raw


@dataclass
class BoardSettings:
    voting_enabled: bool = True
    downvoting_enabled: bool = True
    multiple_votes_allowed: bool = False
    votes_per_user: int = 3
    retrospective_mode: bool = False
    workflow_phase: WorkflowPhase = field(default=WorkflowPhase.CREATION)
    sort_by_votes: bool = False

    @classmethod
    def from_dict(cls, data: dict | None) -> "BoardSettings":
        """Build settings from a stored mapping. Unknown keys are ignored."""
        settings = cls()
        for f in fields(cls):
            stored = _STORED_KEYS[f.name]
            if data and stored in data:
                setattr(settings, f.name, _coerce(getattr(settings, f.name), data[stored]))
        return settings

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[_STORED_KEYS[f.name]] = value.value if isinstance(value, WorkflowPhase) else value
        return out

    def updated(self, key: str, raw: Any) -> "BoardSettings":
        """Copy with one setting changed. key may be python or stored style."""
        by_stored = {v: k for k, v in _STORED_KEYS.items()}
        name = by_stored.get(key, key.replace("-", "_"))
        if name not in _STORED_KEYS:
            raise KeyError(key)
        data = self.to_dict()
        data[_STORED_KEYS[name]] = raw
        return BoardSettings.from_dict(data)

    def require(self, action: str) -> None:
        """Raise PhaseError if the workflow phase refuses `action`."""
        reason = disabled_reason(action, self.workflow_phase, self.retrospective_mode)
        if reason is not None:
            raise PhaseError(reason)

    def require_vote(self, delta: int) -> None:
        """Raise PhaseError if voting in direction `delta` is switched off."""
        if not self.voting_enabled:
            raise PhaseError("Voting is disabled on this board")
        if delta < 0 and not self.downvoting_enabled:
            raise PhaseError("Downvoting is disabled on this board")
        self.require("interactions")


# --- Local configuration (git config [retroboard] section) ---


def _get_repo(repo_path: str | Path) -> Repo:
    return Repo(repo_path)


def read_config(repo_path: str | Path) -> dict[str, Any]:
    """Read the [retroboard] section of git config, merged with defaults.

    `user` falls back to git's user.email, then "anonymous".
    """
    config = dict(CONFIG_DEFAULTS)
    try:
        reader = _get_repo(repo_path).config_reader()
    except (InvalidGitRepositoryError, NoSuchPathError):
        reader = None
    if reader is not None:
        if reader.has_section(CONFIG_SECTION):
            for key, raw in reader.items(CONFIG_SECTION):
                config[key.replace("-", "_")] = raw
        if not config["user"]:
            config["user"] = reader.get_value("user", "email", None)
    if not config["user"]:
        config["user"] = "anonymous"
    return config


def write_config_key(repo_path: str | Path, key: str, value: Any) -> None:
    """Write one key of the [retroboard] section to the repository's git config."""
    writer = _get_repo(repo_path).config_writer("repository")
    try:
        writer.set_value(CONFIG_SECTION, key.replace("_", "-"), str(value))
    finally:
        writer.release()
