"""Workflow phase gate for retrospective boards.

Outside retrospective mode every phase behaves like a plain board: cards
can be created, edited, dragged, voted on and reacted to at any time, and
grouping is off. In retrospective mode the phase decides.
"""

from enum import Enum


class WorkflowPhase(str, Enum):
    CREATION = "CREATION"
    GROUPING = "GROUPING"
    INTERACTIONS = "INTERACTIONS"
    INTERACTION_REVEAL = "INTERACTION_REVEAL"
    RESULTS = "RESULTS"

    @classmethod
    def parse(cls, value: "str | WorkflowPhase") -> "WorkflowPhase":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper().replace("-", "_"))
        except ValueError:
            names = ", ".join(p.value for p in cls)
            raise ValueError(f"unknown workflow phase {value!r} (expected one of {names})") from None


PHASE_ORDER = list(WorkflowPhase)

_DESCRIPTIONS = {
    WorkflowPhase.CREATION: "Create and add cards to the board",
    WorkflowPhase.GROUPING: "Group related cards together",
    WorkflowPhase.INTERACTIONS: "Add comments, votes, and reactions",
    WorkflowPhase.INTERACTION_REVEAL: "Review all interactions and feedback",
    WorkflowPhase.RESULTS: "View top-voted items",
}


def is_grouping_allowed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return False
    return phase == WorkflowPhase.GROUPING


def is_card_creation_allowed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return True
    return phase == WorkflowPhase.CREATION


def are_interactions_allowed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    """Voting, comments and reactions."""
    if not retrospective_mode:
        return True
    return phase == WorkflowPhase.INTERACTIONS


def are_interactions_visible(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return True
    return phase in (WorkflowPhase.INTERACTIONS, WorkflowPhase.INTERACTION_REVEAL, WorkflowPhase.RESULTS)


def are_others_interactions_visible(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return True
    return phase in (WorkflowPhase.INTERACTION_REVEAL, WorkflowPhase.RESULTS)


def should_obfuscate_cards(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return False
    return phase in (WorkflowPhase.CREATION, WorkflowPhase.GROUPING)


def are_cards_revealed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    return not should_obfuscate_cards(phase, retrospective_mode)


def are_interactions_revealed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    """Interactions are frozen once revealed."""
    if not retrospective_mode:
        return False
    return phase in (WorkflowPhase.INTERACTION_REVEAL, WorkflowPhase.RESULTS)


def is_card_editing_allowed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return True
    return phase in (WorkflowPhase.CREATION, WorkflowPhase.GROUPING)


def is_card_dragging_allowed(phase: WorkflowPhase, retrospective_mode: bool = False) -> bool:
    if not retrospective_mode:
        return True
    return phase == WorkflowPhase.GROUPING


_GATES = {
    "grouping": (is_grouping_allowed, "Grouping is only allowed during the grouping phase"),
    "creation": (is_card_creation_allowed, "Cards can only be added during the creation phase"),
    "editing": (is_card_editing_allowed, "Card editing is only allowed during creation and grouping phases"),
    "dragging": (is_card_dragging_allowed, "Card dragging is only allowed during the grouping phase"),
    "interactions": (are_interactions_allowed, "Interactions are only allowed during the interactions phase"),
}


def disabled_reason(action: str, phase: WorkflowPhase, retrospective_mode: bool = False) -> str | None:
    """Return why `action` is refused right now, or None if it is allowed."""
    gate = _GATES.get(action)
    if gate is None:
        return None
    allowed, reason = gate
    if allowed(phase, retrospective_mode):
        return None
    if action == "grouping" and not retrospective_mode:
        return "Grouping is only available in retrospective mode"
    if action == "interactions" and are_interactions_revealed(phase, retrospective_mode):
        return "Interactions are now frozen - no more changes allowed"
    return reason


def phase_description(phase: WorkflowPhase) -> str:
    return _DESCRIPTIONS.get(phase, "Unknown phase")


def next_phase(phase: WorkflowPhase) -> WorkflowPhase:
    """The phase after `phase`; RESULTS is final."""
    idx = PHASE_ORDER.index(phase)
    return PHASE_ORDER[min(idx + 1, len(PHASE_ORDER) - 1)]


def obscure(text: str) -> str:
    """Blank out everything but whitespace, keeping the text's shape."""
    return "".join(ch if ch.isspace() else "█" for ch in text)
