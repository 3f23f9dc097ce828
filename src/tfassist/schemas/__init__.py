"""Schemas for the assistant pipeline."""

from tfassist.schemas.messages import (
    ConversationTurn,
    Message,
    RetrievedDocument,
    StreamFragment,
    TurnRole,
)
from tfassist.schemas.output import AgentOutput, GeneratedFile

__all__ = [
    "Message",
    "TurnRole",
    "ConversationTurn",
    "RetrievedDocument",
    "StreamFragment",
    "GeneratedFile",
    "AgentOutput",
]
