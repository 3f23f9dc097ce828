"""Exception types raised by the assistant pipeline."""

import threading
from typing import Optional


class AgentError(Exception):
    """Base class for all tfassist errors."""

    pass


class ConfigurationError(AgentError):
    """A required collaborator or setting is missing."""

    pass


class TransientDependencyError(AgentError):
    """Retrieval or conversation-store failure (recovered by the caller)."""

    pass


class StreamError(AgentError):
    """Failure while opening or receiving the model stream."""

    pass


class QueryCancelledError(AgentError):
    """The caller cancelled the query."""

    def __init__(self, stage: str):
        super().__init__(f"query cancelled during {stage}")
        self.stage = stage


class ConfinementError(AgentError):
    """A generated file path resolves outside the workspace root."""

    def __init__(self, path: str):
        super().__init__(f"file path {path!r} is outside the workspace directory")
        self.path = path


class MaterializationError(AgentError):
    """Writing a generated file to disk failed."""

    pass


def check_cancelled(cancel: Optional[threading.Event], stage: str) -> None:
    """Raise QueryCancelledError if the cancellation event is set."""
    if cancel is not None and cancel.is_set():
        raise QueryCancelledError(stage)
