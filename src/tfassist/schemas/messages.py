"""Schemas for chat messages, conversation turns and retrieved documents."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TurnRole(str, Enum):
    """Author of a persisted conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message sent to the model. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role="assistant", content=content)


class ConversationTurn(BaseModel):
    """A persisted turn, as read back from the conversation store."""

    workspace_key: str = ""
    role: str  # user, assistant (kept as text so unknown roles can be skipped)
    content: str
    created_at: datetime = Field(default_factory=datetime.now)


class RetrievedDocument(BaseModel):
    """A reference document returned by the retriever for one query."""

    id: str = ""
    content: str
    source: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)
    score: float = 0.0


class StreamFragment(BaseModel):
    """One incremental piece of a streamed model reply."""

    role: Optional[str] = None
    content: str = ""
