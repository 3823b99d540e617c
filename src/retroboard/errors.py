"""Error taxonomy for retroboard operations."""


class RetroboardError(Exception):
    """Base for every classified failure. `message` is safe to show users."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RetroboardError):
    """User input failed validation; nothing was written."""


class NotFoundError(RetroboardError):
    """A referenced card, group or column could not be located."""


class PhaseError(RetroboardError):
    """The action is not permitted by the workflow phase or board settings."""


class StoreError(RetroboardError):
    """The backing store rejected a write or erase."""

    def __init__(self, message: str, path: tuple[str, ...] | None = None) -> None:
        super().__init__(message)
        self.path = path
